from datetime import timedelta

import pytest

from clinic.models import Appointment
from clinic.services.availability import is_within_advance_booking_window, resolve_slots
from clinic.services.slot_config import SlotConfig
from clinic.services.slots import build_slot_grid

from .utils import DAY, NOW, at

TWO_SLOTS = SlotConfig(time_slots=(('9:00 AM', True), ('9:30 AM', True), ('10:00 AM', True)))


def _appt(pk, time_label, duration=30, status='Confirmed'):
    return Appointment(pk=pk, patient_name=f'patient {pk}', date=DAY, time=time_label,
                       duration=duration, status=status)


def test_empty_day_is_all_available():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[], now=NOW)
    assert result['available'] == ['9:00 AM', '9:30 AM', '10:00 AM']
    assert result['booked'] == []
    assert result['unavailable'] == []


def test_fully_booked_day():
    config = SlotConfig()
    grid = build_slot_grid(DAY, config)
    appointments = [_appt(i, label) for i, label in enumerate(grid, start=1)]
    result = resolve_slots(DAY, config=config, appointments=appointments, now=NOW)
    assert result['available'] == []
    assert result['booked'] == grid


def test_overlapping_booking_marks_following_slot():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[_appt(1, '9:00 AM', duration=60)], now=NOW)
    assert result['booked'] == ['9:00 AM', '9:30 AM']
    assert result['available'] == ['10:00 AM']


def test_cancelled_booking_frees_slot():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[_appt(1, '9:00 AM', status='Cancelled')], now=NOW)
    assert '9:00 AM' in result['available']


def test_elapsed_slots_are_unavailable():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[], now=at(9, 45))
    assert result['unavailable'] == ['9:00 AM']
    assert result['available'] == ['9:30 AM', '10:00 AM']


def test_slot_ending_now_is_unavailable():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[], now=at(9, 30))
    assert '9:00 AM' in result['unavailable']


def test_booked_wins_over_unavailable():
    result = resolve_slots(DAY, config=TWO_SLOTS, appointments=[_appt(1, '9:00 AM')], now=at(12))
    assert result['booked'] == ['9:00 AM']
    assert result['unavailable'] == ['9:30 AM', '10:00 AM']


def test_outside_window_is_unavailable():
    later = DAY + timedelta(days=31)
    result = resolve_slots(later, config=TWO_SLOTS, appointments=[], now=NOW)
    assert result['inBookingWindow'] is False
    assert result['available'] == []
    assert len(result['unavailable']) == 3


def test_each_slot_has_exactly_one_status():
    result = resolve_slots(DAY, config=SlotConfig(), appointments=[_appt(1, '11:00 AM')], now=at(10))
    labels = result['available'] + result['booked'] + result['unavailable']
    assert sorted(labels) == sorted(s['time'] for s in result['slots'])
    assert len(labels) == len(set(labels))


@pytest.mark.parametrize('offset,expected', [(-1, False), (0, True), (30, True), (31, False)])
def test_advance_booking_window(offset, expected):
    day = DAY + timedelta(days=offset)
    assert is_within_advance_booking_window(day, config=SlotConfig(), now=NOW) is expected


@pytest.mark.django_db
def test_resolve_reads_store_and_settings(make_appointment):
    make_appointment('10:00 AM', duration=60)
    make_appointment('2:00 PM', status='Cancelled')
    result = resolve_slots(DAY, now=NOW)
    assert result['booked'] == ['10:00 AM', '10:30 AM']
    assert '2:00 PM' in result['available']
