from datetime import date, time

import pytest

from clinic.services.slot_config import SlotConfig
from clinic.services.slots import build_slot_grid, format_time_label, parse_time_label

from .utils import DAY


@pytest.mark.parametrize('label,expected', [
    ('9:00 AM', time(9, 0)),
    ('12:00 AM', time(0, 0)),
    ('12:30 PM', time(12, 30)),
    ('1:15 pm', time(13, 15)),
    ('11:45 Pm', time(23, 45)),
    (' 10:30AM ', time(10, 30)),
    ('14:00', time(14, 0)),
    ('9 AM', time(9, 0)),
])
def test_parse_time_label(label, expected):
    assert parse_time_label(label) == expected


@pytest.mark.parametrize('label', ['', 'abc', '25:00', '13:00 PM', '0:30 AM', '9:75 AM', '__SWAP__123-4'])
def test_parse_time_label_rejects_garbage(label):
    with pytest.raises(ValueError):
        parse_time_label(label)


def test_format_time_label():
    assert format_time_label(time(0, 5)) == '12:05 AM'
    assert format_time_label(time(9, 0)) == '9:00 AM'
    assert format_time_label(time(12, 0)) == '12:00 PM'
    assert format_time_label(time(15, 30)) == '3:30 PM'


def test_grid_from_opening_hours():
    grid = build_slot_grid(DAY, SlotConfig())
    assert grid[0] == '9:00 AM'
    assert grid[-1] == '4:30 PM'
    assert len(grid) == 16
    assert '12:00 PM' in grid


def test_grid_respects_slot_minutes():
    grid = build_slot_grid(DAY, SlotConfig(opening_time='9:00 AM', closing_time='11:00 AM', slot_minutes=45))
    assert grid == ['9:00 AM', '9:45 AM']


def test_explicit_slots_sorted_deduplicated_and_active_only():
    config = SlotConfig(time_slots=(
        ('10:00 AM', True),
        ('9:00 AM', True),
        ('9:00 am', True),
        ('11:00 AM', False),
        ('not a time', True),
    ))
    assert build_slot_grid(DAY, config) == ['9:00 AM', '10:00 AM']


def test_blackout_removes_overlapping_slots():
    grid = build_slot_grid(DAY, SlotConfig(blackouts=(('12:00 PM', '1:00 PM'),)))
    assert '11:30 AM' in grid
    assert '12:00 PM' not in grid
    assert '12:30 PM' not in grid
    assert '1:00 PM' in grid


def test_closed_weekday_has_no_slots():
    assert DAY.weekday() == 0
    assert build_slot_grid(DAY, SlotConfig(closed_weekdays=frozenset({0}))) == []
    assert build_slot_grid(date(2030, 1, 15), SlotConfig(closed_weekdays=frozenset({0}))) != []


def test_grid_does_not_depend_on_bookings():
    config = SlotConfig()
    assert build_slot_grid(DAY, config) == build_slot_grid(DAY, config)
