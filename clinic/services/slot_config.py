"""
Slot configuration provider.

The administrative settings row is read fresh for every request and
handed to the scheduling services as an immutable :class:`SlotConfig`.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from clinic.models import AppointmentSettings, default_appointment_types, default_durations
from clinic.services.audit import log_action


@dataclass(frozen=True)
class SlotConfig:
    # (label, active) pairs; empty means generate from opening hours
    time_slots: Tuple[Tuple[str, bool], ...] = ()
    opening_time: str = '9:00 AM'
    closing_time: str = '5:00 PM'
    slot_minutes: int = 30
    advance_booking_days: int = 30
    appointment_types: Tuple[str, ...] = field(default_factory=lambda: tuple(default_appointment_types()))
    durations: Tuple[int, ...] = field(default_factory=lambda: tuple(default_durations()))
    blackouts: Tuple[Tuple[str, str], ...] = ()
    closed_weekdays: frozenset = frozenset()

    def as_dict(self) -> Dict[str, Any]:
        return {
            'timeSlots': [{'time': label, 'active': active} for label, active in self.time_slots],
            'openingTime': self.opening_time,
            'closingTime': self.closing_time,
            'slotMinutes': self.slot_minutes,
            'advanceBookingDays': self.advance_booking_days,
            'appointmentTypes': list(self.appointment_types),
            'durations': list(self.durations),
            'blackouts': [{'start': start, 'end': end} for start, end in self.blackouts],
            'closedWeekdays': sorted(self.closed_weekdays),
        }


def _time_slots(raw) -> Tuple[Tuple[str, bool], ...]:
    slots = []
    for entry in raw or []:
        if isinstance(entry, dict):
            label = str(entry.get('time') or '').strip()
            active = bool(entry.get('active', True))
        else:
            label, active = str(entry).strip(), True
        if label:
            slots.append((label, active))
    return tuple(slots)


def _blackouts(raw) -> Tuple[Tuple[str, str], ...]:
    return tuple(
        (str(b.get('start') or ''), str(b.get('end') or ''))
        for b in raw or [] if isinstance(b, dict)
    )


def config_from_settings(obj: AppointmentSettings) -> SlotConfig:
    return SlotConfig(
        time_slots=_time_slots(obj.time_slots),
        opening_time=obj.opening_time,
        closing_time=obj.closing_time,
        slot_minutes=obj.slot_minutes,
        advance_booking_days=obj.advance_booking_days,
        appointment_types=tuple(obj.appointment_types or ()),
        durations=tuple(int(d) for d in obj.durations or ()),
        blackouts=_blackouts(obj.blackouts),
        closed_weekdays=frozenset(int(d) for d in obj.closed_weekdays or ()),
    )


def load_slot_config() -> SlotConfig:
    return config_from_settings(AppointmentSettings.load())


# Serializer field name -> model field name
_FIELD_MAP = {
    'timeSlots': 'time_slots',
    'openingTime': 'opening_time',
    'closingTime': 'closing_time',
    'slotMinutes': 'slot_minutes',
    'advanceBookingDays': 'advance_booking_days',
    'appointmentTypes': 'appointment_types',
    'durations': 'durations',
    'blackouts': 'blackouts',
    'closedWeekdays': 'closed_weekdays',
}


def update_slot_config(data: Dict[str, Any], *, user: Optional[Any] = None) -> SlotConfig:
    """Apply validated settings fields and return the new configuration."""
    obj = AppointmentSettings.load()
    update_fields = []
    for key, attr in _FIELD_MAP.items():
        if key in data:
            setattr(obj, attr, data[key])
            update_fields.append(attr)
    if update_fields:
        obj.save(update_fields=update_fields + ['updated_at'])
        log_action(user=user, action='settings_update', object_type='appointment_settings',
                   object_id=obj.pk, detail={'fields': sorted(update_fields)})
    return config_from_settings(obj)
