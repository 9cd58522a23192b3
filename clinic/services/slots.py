"""
Slot grid generation.

The grid is the ordered list of bookable time-of-day labels for one day.
It is derived from configuration only; bookings never change it.
"""
from __future__ import annotations

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import List

from .slot_config import SlotConfig

logger = logging.getLogger(__name__)

_LABEL_RE = re.compile(r'^\s*(\d{1,2})(?::(\d{2}))?\s*([AaPp][Mm])?\s*$')


def parse_time_label(label: str) -> time:
    """Parse a slot label such as ``"9:30 AM"`` into a ``datetime.time``.

    12 AM is midnight and 12 PM is noon; every other PM hour adds 12.
    Labels without a suffix are read as a 24-hour clock (legacy rows).
    Raises ``ValueError`` for anything else.
    """
    match = _LABEL_RE.match(label or '')
    if not match:
        raise ValueError(f"invalid time label: {label!r}")
    hours = int(match.group(1))
    minutes = int(match.group(2) or 0)
    period = (match.group(3) or '').upper()
    if period:
        if not 1 <= hours <= 12:
            raise ValueError(f"invalid 12-hour time label: {label!r}")
        if period == 'PM' and hours != 12:
            hours += 12
        elif period == 'AM' and hours == 12:
            hours = 0
    if hours > 23 or minutes > 59:
        raise ValueError(f"time label out of range: {label!r}")
    return time(hours, minutes)


def format_time_label(value: time) -> str:
    """Render the canonical label form, e.g. ``9:00 AM`` or ``12:30 PM``."""
    hour = value.hour % 12 or 12
    suffix = 'AM' if value.hour < 12 else 'PM'
    return f"{hour}:{value.minute:02d} {suffix}"


def normalize_time_label(label: str) -> str:
    return format_time_label(parse_time_label(label))


def _configured_starts(day: date, config: SlotConfig) -> List[time]:
    if config.time_slots:
        starts = set()
        for label, active in config.time_slots:
            if not active:
                continue
            try:
                starts.add(parse_time_label(label))
            except ValueError:
                logger.warning("Ignoring malformed slot label %r in appointment settings", label)
        return sorted(starts)

    if config.slot_minutes <= 0:
        return []
    try:
        opening = datetime.combine(day, parse_time_label(config.opening_time))
        closing = datetime.combine(day, parse_time_label(config.closing_time))
    except ValueError:
        logger.warning("Malformed opening hours %r-%r, no slots generated",
                       config.opening_time, config.closing_time)
        return []
    step = timedelta(minutes=config.slot_minutes)
    starts = []
    cursor = opening
    while cursor + step <= closing:
        starts.append(cursor.time())
        cursor += step
    return starts


def _blackout_ranges(day: date, config: SlotConfig) -> List[tuple]:
    ranges = []
    for start_label, end_label in config.blackouts:
        try:
            start = datetime.combine(day, parse_time_label(start_label))
            end = datetime.combine(day, parse_time_label(end_label))
        except ValueError:
            logger.warning("Ignoring malformed blackout %r-%r", start_label, end_label)
            continue
        if start < end:
            ranges.append((start, end))
    return ranges


def build_slot_grid(day: date, config: SlotConfig) -> List[str]:
    """Return the day's slot labels, earliest first, without duplicates.

    A weekday listed in ``closed_weekdays`` has no slots, and slots whose
    ``[start, start + slot_minutes)`` interval touches a blackout range
    are dropped. An empty list means nothing may be booked that day.
    """
    if day.weekday() in config.closed_weekdays:
        return []

    step = timedelta(minutes=max(config.slot_minutes, 1))
    blackouts = _blackout_ranges(day, config)
    grid: List[str] = []
    for start_time in _configured_starts(day, config):
        start = datetime.combine(day, start_time)
        end = start + step
        if any(start < b_end and b_start < end for b_start, b_end in blackouts):
            continue
        grid.append(format_time_label(start_time))
    return grid
