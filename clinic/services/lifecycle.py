"""
Appointment status lifecycle.

Only the transitions listed in ``TRANSITIONS`` are allowed; Completed and
Cancelled are terminal. Appointments in ``SCHEDULE_LOCKED`` statuses can
no longer be moved, rescheduled or swapped.
"""
from __future__ import annotations

from typing import Dict, FrozenSet

from clinic.models import AppointmentStatus as S


def _values(*members) -> FrozenSet[str]:
    return frozenset(m.value for m in members)


TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.PENDING.value: _values(S.CONFIRMED, S.CANCELLED, S.URGENT, S.TRANSFERRED),
    S.CONFIRMED.value: _values(S.IN_PROGRESS, S.CANCELLED, S.URGENT, S.TRANSFERRED),
    S.URGENT.value: _values(S.CONFIRMED, S.IN_PROGRESS, S.CANCELLED),
    S.TRANSFERRED.value: _values(S.CONFIRMED, S.CANCELLED),
    S.IN_PROGRESS.value: _values(S.COMPLETED),
    S.COMPLETED.value: frozenset(),
    S.CANCELLED.value: frozenset(),
}

SCHEDULE_LOCKED = _values(S.IN_PROGRESS, S.COMPLETED, S.CANCELLED)

# statuses a booking may be created with
INITIAL = _values(S.PENDING, S.CONFIRMED, S.URGENT)


def can_transition(current: str, new: str) -> bool:
    return str(new) in TRANSITIONS.get(str(current), frozenset())


def can_reschedule(status: str) -> bool:
    return str(status) in TRANSITIONS and str(status) not in SCHEDULE_LOCKED


def is_terminal(status: str) -> bool:
    return not TRANSITIONS.get(str(status))
