"""
Conflict detection for candidate bookings.

Every non-cancelled appointment occupies ``[start, start + duration)`` on
its date. A candidate conflicts when its own interval overlaps any of
them; rows whose time cannot be parsed are ignored.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Tuple

from django.db.models import QuerySet
from django.utils import timezone

from clinic.models import Appointment, AppointmentStatus
from .slots import parse_time_label

DEFAULT_DURATION = 30


def appointment_duration(value) -> int:
    """Minutes an appointment occupies; missing or invalid values count as 30."""
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        return DEFAULT_DURATION
    return minutes if minutes > 0 else DEFAULT_DURATION


def occupied_interval(day: date, time_label: str, duration=None) -> Tuple[datetime, datetime]:
    """Aware ``(start, end)`` for a booking. Raises ``ValueError`` on a bad label."""
    start = timezone.make_aware(datetime.combine(day, parse_time_label(time_label)))
    return start, start + timedelta(minutes=appointment_duration(duration))


def active_appointments_on(day: date) -> QuerySet:
    return Appointment.objects.filter(date=day).exclude(status=AppointmentStatus.CANCELLED)


def find_conflict(day: date, time_label: str, duration, appointments: Iterable[Appointment],
                  *, exclude_id: Optional[int] = None) -> Optional[Appointment]:
    """Return the first appointment whose interval overlaps the candidate, or None."""
    start, end = occupied_interval(day, time_label, duration)
    for other in appointments:
        if exclude_id is not None and other.pk == exclude_id:
            continue
        if other.date != day or other.status == AppointmentStatus.CANCELLED:
            continue
        try:
            other_start, other_end = occupied_interval(other.date, other.time, other.duration)
        except ValueError:
            continue
        if start < other_end and other_start < end:
            return other
    return None


def has_conflict(day: date, time_label: str, duration, appointments: Iterable[Appointment],
                 *, exclude_id: Optional[int] = None) -> bool:
    return find_conflict(day, time_label, duration, appointments, exclude_id=exclude_id) is not None
