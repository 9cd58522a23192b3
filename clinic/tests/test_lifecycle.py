import pytest

from clinic.models import AppointmentStatus as S
from clinic.services.lifecycle import can_reschedule, can_transition, is_terminal


@pytest.mark.parametrize('current,new', [
    (S.PENDING, S.CONFIRMED),
    (S.PENDING, S.CANCELLED),
    (S.CONFIRMED, S.IN_PROGRESS),
    (S.URGENT, S.IN_PROGRESS),
    (S.TRANSFERRED, S.CONFIRMED),
    (S.IN_PROGRESS, S.COMPLETED),
])
def test_allowed_transitions(current, new):
    assert can_transition(current, new)
    assert can_transition(current.value, new.value)


@pytest.mark.parametrize('current,new', [
    (S.PENDING, S.COMPLETED),
    (S.PENDING, S.IN_PROGRESS),
    (S.IN_PROGRESS, S.CANCELLED),
    (S.COMPLETED, S.PENDING),
    (S.CANCELLED, S.CONFIRMED),
])
def test_rejected_transitions(current, new):
    assert not can_transition(current, new)


def test_terminal_and_locked_statuses():
    assert is_terminal(S.COMPLETED)
    assert is_terminal(S.CANCELLED)
    assert not is_terminal(S.PENDING)
    for status in (S.PENDING, S.CONFIRMED, S.URGENT, S.TRANSFERRED):
        assert can_reschedule(status)
    for status in (S.IN_PROGRESS, S.COMPLETED, S.CANCELLED):
        assert not can_reschedule(status)
