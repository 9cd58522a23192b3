"""
Availability resolver.

Each grid slot for a day is classified as ``available``, ``booked`` or
``unavailable``. A slot is booked when an active appointment starts on
its label or when any active appointment's interval overlaps the slot's
``[label, label + slot_minutes)`` window; booked wins over unavailable.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from django.utils import timezone

from clinic.models import Appointment, AppointmentStatus
from .conflicts import active_appointments_on, occupied_interval
from .slot_config import SlotConfig, load_slot_config
from .slots import build_slot_grid, parse_time_label

logger = logging.getLogger(__name__)

AVAILABLE = 'available'
BOOKED = 'booked'
UNAVAILABLE = 'unavailable'


def is_within_advance_booking_window(day: date, *, config: Optional[SlotConfig] = None,
                                     now: Optional[datetime] = None) -> bool:
    """True when ``today <= day <= today + advance_booking_days``."""
    config = config or load_slot_config()
    today = timezone.localdate(now or timezone.now())
    return today <= day <= today + timedelta(days=config.advance_booking_days)


def resolve_slots(day: date, *, config: Optional[SlotConfig] = None,
                  appointments: Optional[Iterable[Appointment]] = None,
                  now: Optional[datetime] = None) -> Dict[str, Any]:
    config = config or load_slot_config()
    now = now or timezone.now()
    if appointments is None:
        appointments = active_appointments_on(day)
    active = [a for a in appointments if a.date == day and a.status != AppointmentStatus.CANCELLED]

    booked_labels = {a.time for a in active}
    intervals = []
    for appointment in active:
        try:
            intervals.append(occupied_interval(appointment.date, appointment.time, appointment.duration))
        except ValueError:
            logger.debug("Appointment %s has unparseable time %r", appointment.pk, appointment.time)

    in_window = is_within_advance_booking_window(day, config=config, now=now)
    step = timedelta(minutes=config.slot_minutes)
    slots: List[Dict[str, str]] = []
    for label in build_slot_grid(day, config):
        start = timezone.make_aware(datetime.combine(day, parse_time_label(label)))
        end = start + step
        if label in booked_labels or any(start < b_end and b_start < end for b_start, b_end in intervals):
            state = BOOKED
        elif not in_window or end <= now:
            state = UNAVAILABLE
        else:
            state = AVAILABLE
        slots.append({'time': label, 'status': state})

    return {
        'date': day.isoformat(),
        'inBookingWindow': in_window,
        'slots': slots,
        'available': [s['time'] for s in slots if s['status'] == AVAILABLE],
        'booked': [s['time'] for s in slots if s['status'] == BOOKED],
        'unavailable': [s['time'] for s in slots if s['status'] == UNAVAILABLE],
    }
