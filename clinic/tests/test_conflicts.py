from datetime import timedelta

from clinic.models import Appointment
from clinic.services.conflicts import appointment_duration, find_conflict, has_conflict, occupied_interval

from .utils import DAY, at


def _appt(pk, time_label, duration=30, status='Pending', day=DAY):
    return Appointment(pk=pk, patient_name=f'patient {pk}', date=day, time=time_label,
                       duration=duration, status=status)


def test_occupied_interval():
    start, end = occupied_interval(DAY, '10:00 AM', 45)
    assert start == at(10)
    assert end - start == timedelta(minutes=45)


def test_duration_fallback():
    assert appointment_duration(None) == 30
    assert appointment_duration(0) == 30
    assert appointment_duration('oops') == 30
    assert appointment_duration('45') == 45


def test_overlap_is_duration_aware_and_symmetric():
    existing = [_appt(1, '10:00 AM')]
    assert has_conflict(DAY, '10:15 AM', 30, existing)
    assert not has_conflict(DAY, '10:30 AM', 30, existing)

    assert has_conflict(DAY, '10:00 AM', 30, [_appt(2, '10:15 AM')])
    assert not has_conflict(DAY, '10:00 AM', 30, [_appt(3, '10:30 AM')])


def test_long_booking_blocks_following_slot():
    existing = [_appt(1, '9:30 AM', duration=60)]
    assert find_conflict(DAY, '10:00 AM', 30, existing).pk == 1
    assert not has_conflict(DAY, '10:30 AM', 30, existing)


def test_missing_duration_counts_as_thirty_minutes():
    existing = [_appt(1, '10:00 AM', duration=None)]
    assert has_conflict(DAY, '10:20 AM', 30, existing)
    assert not has_conflict(DAY, '10:30 AM', 30, existing)


def test_cancelled_other_dates_and_self_are_ignored():
    existing = [
        _appt(1, '10:00 AM', status='Cancelled'),
        _appt(2, '10:00 AM', day=DAY + timedelta(days=1)),
        _appt(3, '10:00 AM'),
    ]
    assert not has_conflict(DAY, '10:00 AM', 30, existing, exclude_id=3)
    assert find_conflict(DAY, '10:00 AM', 30, existing).pk == 3


def test_unparseable_existing_times_are_ignored():
    existing = [_appt(1, 'after lunch'), _appt(2, '__SWAP__1700000000000-9')]
    assert not has_conflict(DAY, '1:00 PM', 30, existing)


def test_legacy_24_hour_time_still_conflicts():
    assert has_conflict(DAY, '2:00 PM', 30, [_appt(1, '14:00')])
