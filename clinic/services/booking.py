"""
Booking transaction manager.

All writes to the appointment store go through this module. Each
operation validates its input, checks the slot against the grid and
the existing bookings, then writes inside ``transaction.atomic()``. The
``uniq_active_appointment_slot`` constraint is the final arbiter when two
requests race for the same slot: the loser's ``IntegrityError`` is turned
into :class:`SlotAlreadyBooked`.

A swap exchanges the slots of two appointments in three updates. The
first appointment is parked on a placeholder time so the constraint
never sees two rows on one slot, and the whole swap commits or rolls
back as a unit.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

import bleach
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from clinic.models import Appointment, AppointmentStatus
from .audit import log_action
from .broadcast import notify_schedule_changed
from .conflicts import (
    DEFAULT_DURATION, active_appointments_on, appointment_duration, find_conflict, occupied_interval,
)
from .errors import (
    InvalidDate, InvalidTime, InvalidTransition, MissingFields, NotFound, NotReschedulable,
    NotSwappable, PastSlot, SlotAlreadyBooked, SlotNotOffered, OutsideBookingWindow, StoreFailure,
)
from .availability import is_within_advance_booking_window
from .lifecycle import INITIAL, can_reschedule, can_transition
from .patients import resolve_patient
from .slot_config import SlotConfig, load_slot_config
from .slots import build_slot_grid, normalize_time_label, parse_time_label

logger = logging.getLogger(__name__)

PLACEHOLDER_PREFIX = '__SWAP__'

# hour ranges used by the schedule board filters, end exclusive
TIME_RANGES = {
    'morning': (8, 12),
    'afternoon': (12, 17),
    'evening': (17, 20),
}


# ----- helpers -----

def _parse_date(value) -> dt.date:
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    # an ISO datetime is accepted for its date part only
    text = str(value).strip().split('T', 1)[0]
    try:
        return dt.date.fromisoformat(text)
    except ValueError:
        raise InvalidDate(f'Invalid date "{value}". Use YYYY-MM-DD.')


def _requested_duration(value, config: SlotConfig) -> int:
    """Minutes for a new booking; absent means 30, or the shortest allowed length."""
    if value in (None, ''):
        if not config.durations or DEFAULT_DURATION in config.durations:
            return DEFAULT_DURATION
        return min(config.durations)
    try:
        minutes = int(value)
    except (TypeError, ValueError):
        raise ValidationError({'duration': [f'Invalid duration "{value}".']})
    if minutes <= 0:
        raise ValidationError({'duration': ['Duration must be a positive number of minutes.']})
    if config.durations and minutes not in config.durations:
        allowed = ', '.join(str(d) for d in config.durations)
        raise ValidationError({'duration': [f'Duration must be one of {allowed} minutes.']})
    return minutes


def _normalize_time(value) -> str:
    try:
        return normalize_time_label(str(value))
    except ValueError:
        raise InvalidTime(f'Invalid time "{value}". Use a format like "10:30 AM".')


def _clean_notes(notes: Optional[str]) -> str:
    return bleach.clean(notes or '', tags=[], strip=True).strip()


def _get_or_404(appointment_id) -> Appointment:
    try:
        pk = int(appointment_id)
    except (TypeError, ValueError):
        raise NotFound()
    appointment = Appointment.objects.filter(pk=pk).first()
    if appointment is None:
        raise NotFound()
    return appointment


def _taken_message(holder: Appointment, label: str, day: dt.date) -> str:
    return (f'Time slot {label} on {day.isoformat()} is already booked by {holder.patient_name}. '
            'Please select a different time.')


def _ensure_bookable(day: dt.date, label: str, config: SlotConfig, now: dt.datetime) -> None:
    if not is_within_advance_booking_window(day, config=config, now=now):
        raise OutsideBookingWindow(
            f'Appointments can only be booked up to {config.advance_booking_days} days in advance.'
        )
    if label not in build_slot_grid(day, config):
        raise SlotNotOffered(f'{label} is not an available time slot on {day.isoformat()}.')


def _ensure_free(day: dt.date, label: str, duration: int, *, exclude_id: Optional[int] = None) -> None:
    holder = find_conflict(day, label, duration, active_appointments_on(day), exclude_id=exclude_id)
    if holder is not None:
        raise SlotAlreadyBooked(_taken_message(holder, label, day))


def _lost_race(day: dt.date, label: str, exclude_id: Optional[int] = None) -> SlotAlreadyBooked:
    holder = (Appointment.objects.filter(date=day, time=label)
              .exclude(status=AppointmentStatus.CANCELLED)
              .exclude(pk=exclude_id)
              .first())
    if holder is None:
        return SlotAlreadyBooked()
    return SlotAlreadyBooked(_taken_message(holder, label, day))


def _save(appointment: Appointment, **kwargs) -> None:
    try:
        with transaction.atomic():
            appointment.save(**kwargs)
    except IntegrityError as exc:
        logger.info("Slot %s %s taken by a concurrent booking", appointment.date, appointment.time)
        raise _lost_race(appointment.date, appointment.time, exclude_id=appointment.pk) from exc
    except DatabaseError as exc:
        logger.exception("Failed to save appointment %s", appointment.pk)
        raise StoreFailure() from exc


def format_appointment(a: Appointment) -> Dict[str, Any]:
    return {
        'id': a.id,
        'patientId': a.patient_id,
        'patientName': a.patient_name,
        'patientPhone': a.patient_phone,
        'patientVisibleId': a.patient_visible_id,
        'date': a.date.isoformat() if a.date else None,
        'time': a.time,
        'duration': a.duration,
        'type': a.type,
        'status': a.status,
        'notes': a.notes,
        'createdAt': a.created_at.isoformat() if a.created_at else None,
        'updatedAt': a.updated_at.isoformat() if a.updated_at else None,
    }


# ----- reads -----

def get_appointment(appointment_id) -> Appointment:
    return _get_or_404(appointment_id)


def _in_time_range(label: str, time_range: str) -> bool:
    start_hour, end_hour = TIME_RANGES[time_range]
    try:
        t = parse_time_label(label)
    except ValueError:
        return False
    return start_hour <= t.hour < end_hour


def list_appointments(*, date=None, statuses: Optional[Iterable[str]] = None,
                      types: Optional[Iterable[str]] = None,
                      time_range: Optional[str] = None) -> List[Appointment]:
    """Appointments ordered by date then clock time, optionally filtered."""
    qs = Appointment.objects.all()
    if date:
        qs = qs.filter(date=_parse_date(date))
    statuses = [s for s in statuses or [] if s]
    if statuses:
        qs = qs.filter(status__in=statuses)
    types = [t for t in types or [] if t]
    if types:
        qs = qs.filter(type__in=types)

    rows = list(qs.order_by('date', 'id'))
    if time_range and time_range != 'all':
        if time_range not in TIME_RANGES:
            raise ValidationError({'timeRange': [f'Unknown time range "{time_range}".']})
        rows = [a for a in rows if _in_time_range(a.time, time_range)]

    def _sort_key(a: Appointment):
        try:
            minutes = parse_time_label(a.time)
            return a.date, 0, minutes.hour * 60 + minutes.minute, a.id
        except ValueError:
            return a.date, 1, 0, a.id

    rows.sort(key=_sort_key)
    return rows


# ----- writes -----

def create_appointment(*, date, time, patient_id=None, patient_phone=None, duration=None,
                       type: str = 'Consultation', notes: str = '',
                       status: str = AppointmentStatus.PENDING,
                       user=None, config: Optional[SlotConfig] = None,
                       now: Optional[dt.datetime] = None) -> Appointment:
    """Book a new appointment.

    Checks run in this order: required fields, time format, patient
    lookup, duration and type against the settings, past slot, booking
    window and grid, then overlap with existing bookings. Returns the
    stored appointment.
    """
    if not date or not time:
        raise MissingFields('Date and time are required.')
    day = _parse_date(date)
    label = _normalize_time(time)
    patient = resolve_patient(patient_id, patient_phone)

    config = config or load_slot_config()
    now = now or timezone.now()
    minutes = _requested_duration(duration, config)
    if config.appointment_types and type not in config.appointment_types:
        raise ValidationError({'type': [f'Unknown appointment type "{type}".']})
    if str(status) not in INITIAL:
        raise InvalidTransition(f'New appointments cannot start as "{status}".')

    _, end = occupied_interval(day, label, minutes)
    if end <= now:
        raise PastSlot()
    _ensure_bookable(day, label, config, now)
    _ensure_free(day, label, minutes)

    appointment = Appointment(
        patient=patient,
        patient_name=patient.name,
        patient_phone=patient.phone or (patient_phone or ''),
        patient_visible_id=patient.visible_id,
        date=day,
        time=label,
        duration=minutes,
        type=type,
        status=str(status),
        notes=_clean_notes(notes),
    )
    _save(appointment, force_insert=True)

    logger.info("Booked appointment %s for patient %s at %s %s", appointment.pk, patient.pk, day, label)
    log_action(user=user, action='appointment_create', object_id=appointment.pk,
               detail={'date': day.isoformat(), 'time': label, 'patientId': patient.pk})
    notify_schedule_changed('created', [appointment.pk], [day])
    return appointment


def reschedule_appointment(appointment_id, *, new_date, new_time, user=None,
                           config: Optional[SlotConfig] = None,
                           now: Optional[dt.datetime] = None) -> Appointment:
    appointment = _get_or_404(appointment_id)
    if not can_reschedule(appointment.status):
        raise NotReschedulable(
            f'Cannot reschedule appointment with status "{appointment.status}". '
            'Only active appointments can be rescheduled.'
        )
    if not new_date or not new_time:
        raise MissingFields('New date and time are required.')
    day = _parse_date(new_date)
    label = _normalize_time(new_time)
    minutes = appointment_duration(appointment.duration)

    config = config or load_slot_config()
    now = now or timezone.now()
    _, end = occupied_interval(day, label, minutes)
    if end <= now:
        raise PastSlot('Cannot reschedule to a time in the past.')
    _ensure_bookable(day, label, config, now)
    _ensure_free(day, label, minutes, exclude_id=appointment.pk)

    old_date, old_time = appointment.date, appointment.time
    appointment.date = day
    appointment.time = label
    _save(appointment, update_fields=['date', 'time', 'updated_at'])

    logger.info("Rescheduled appointment %s from %s %s to %s %s",
                appointment.pk, old_date, old_time, day, label)
    log_action(user=user, action='appointment_reschedule', object_id=appointment.pk,
               detail={'from': {'date': old_date.isoformat(), 'time': old_time},
                       'to': {'date': day.isoformat(), 'time': label}})
    notify_schedule_changed('rescheduled', [appointment.pk], [old_date, day])
    return appointment


def _move(pk: int, day: dt.date, label: str, now: dt.datetime) -> None:
    updated = Appointment.objects.filter(pk=pk).update(date=day, time=label, updated_at=now)
    if updated != 1:
        raise DatabaseError(f"appointment {pk} disappeared during swap")


def _check_swap_conflicts(first: Appointment, second: Appointment) -> None:
    """Both appointments must fit their new slots without overlapping anyone else."""
    moved = (
        Appointment(pk=first.pk, patient_name=first.patient_name, date=second.date,
                    time=second.time, duration=first.duration, status=first.status),
        Appointment(pk=second.pk, patient_name=second.patient_name, date=first.date,
                    time=first.time, duration=second.duration, status=second.status),
    )
    ids = {first.pk, second.pk}
    for index, candidate in enumerate(moved):
        others = [a for a in active_appointments_on(candidate.date) if a.pk not in ids]
        # the partner's new position counts once it has been placed
        others.extend(moved[:index])
        try:
            holder = find_conflict(candidate.date, candidate.time, candidate.duration, others)
        except ValueError:
            # legacy free-form time, nothing to compare against
            continue
        if holder is not None:
            raise SlotAlreadyBooked(
                f'Swapping would overlap the appointment of {holder.patient_name} '
                f'at {holder.time} on {candidate.date.isoformat()}.'
            )


def swap_appointments(first_id, second_id, *, user=None,
                      now: Optional[dt.datetime] = None) -> Tuple[Appointment, Appointment]:
    if not first_id or not second_id:
        raise MissingFields('Both appointment IDs are required.')
    if str(first_id) == str(second_id):
        raise MissingFields('Two different appointment IDs are required.')
    try:
        first = Appointment.objects.filter(pk=int(first_id)).first()
        second = Appointment.objects.filter(pk=int(second_id)).first()
    except (TypeError, ValueError):
        first = second = None
    if first is None or second is None:
        raise NotFound('One or both appointments not found.')
    for appointment in (first, second):
        if not can_reschedule(appointment.status):
            raise NotSwappable(
                f'Cannot swap appointment #{appointment.pk} with status "{appointment.status}".'
            )
    _check_swap_conflicts(first, second)

    now = now or timezone.now()
    first_slot = (first.date, first.time)
    second_slot = (second.date, second.time)
    placeholder = f"{PLACEHOLDER_PREFIX}{int(now.timestamp() * 1000)}-{first.pk}"
    try:
        with transaction.atomic():
            _move(first.pk, first.date, placeholder, now)
            _move(second.pk, *first_slot, now)
            _move(first.pk, *second_slot, now)
    except IntegrityError as exc:
        logger.info("Swap of %s and %s lost a race for one of the slots", first.pk, second.pk)
        raise SlotAlreadyBooked('One of the slots was booked meanwhile. No changes were applied.') from exc
    except DatabaseError as exc:
        logger.exception("Swap of appointments %s and %s rolled back", first.pk, second.pk)
        raise StoreFailure('Failed to swap appointments. No changes were applied.') from exc

    first.refresh_from_db()
    second.refresh_from_db()
    logger.info("Swapped appointments %s and %s", first.pk, second.pk)
    log_action(user=user, action='appointment_swap', object_id=first.pk,
               detail={'with': second.pk,
                       'slots': [[first_slot[0].isoformat(), first_slot[1]],
                                 [second_slot[0].isoformat(), second_slot[1]]]})
    notify_schedule_changed('swapped', [first.pk, second.pk], [first_slot[0], second_slot[0]])
    return first, second


def change_status(appointment_id, new_status: str, *, user=None, reason: str = '') -> Appointment:
    appointment = _get_or_404(appointment_id)
    new_status = str(new_status or '')
    if new_status not in AppointmentStatus.values:
        raise InvalidTransition(f'Unknown status "{new_status}".')
    current = appointment.status
    if current == new_status:
        return appointment
    if not can_transition(current, new_status):
        raise InvalidTransition(f'Cannot change status from "{current}" to "{new_status}".')

    appointment.status = new_status
    _save(appointment, update_fields=['status', 'updated_at'])

    logger.info("Appointment %s status %s -> %s", appointment.pk, current, new_status)
    log_action(user=user, action='appointment_status', object_id=appointment.pk,
               detail={'from': current, 'to': new_status, 'reason': _clean_notes(reason)})
    notify_schedule_changed('status', [appointment.pk], [appointment.date])
    return appointment


def cancel_appointment(appointment_id, *, user=None) -> Appointment:
    return change_status(appointment_id, AppointmentStatus.CANCELLED, user=user)


def update_details(appointment_id, *, type: Optional[str] = None, notes: Optional[str] = None,
                   user=None, config: Optional[SlotConfig] = None) -> Appointment:
    """Edit the appointment type and notes; the slot is left untouched."""
    appointment = _get_or_404(appointment_id)
    fields = []
    if type is not None:
        config = config or load_slot_config()
        if config.appointment_types and type not in config.appointment_types:
            raise ValidationError({'type': [f'Unknown appointment type "{type}".']})
        appointment.type = type
        fields.append('type')
    if notes is not None:
        appointment.notes = _clean_notes(notes)
        fields.append('notes')
    if not fields:
        return appointment

    _save(appointment, update_fields=fields + ['updated_at'])
    log_action(user=user, action='appointment_update', object_id=appointment.pk,
               detail={'fields': fields})
    notify_schedule_changed('updated', [appointment.pk], [appointment.date])
    return appointment


def delete_appointment(appointment_id, *, user=None) -> None:
    appointment = _get_or_404(appointment_id)
    pk, day = appointment.pk, appointment.date
    try:
        with transaction.atomic():
            appointment.delete()
    except DatabaseError as exc:
        logger.exception("Failed to delete appointment %s", pk)
        raise StoreFailure('Failed to delete appointment.') from exc

    logger.info("Deleted appointment %s", pk)
    log_action(user=user, action='appointment_delete', object_id=pk,
               detail={'date': day.isoformat()})
    notify_schedule_changed('deleted', [pk], [day])
