import pytest

from clinic.models import Appointment, Patient

from .utils import DAY


@pytest.fixture
def patient(db):
    return Patient.objects.create(name='Asha Verma', phone='9000000001', visible_id='P-0001')


@pytest.fixture
def other_patient(db):
    return Patient.objects.create(name='Rahul Mehta', phone='9000000002', visible_id='P-0002')


@pytest.fixture
def make_appointment(db, patient):
    def _make(time_label, *, day=DAY, duration=30, status='Pending', name=None):
        return Appointment.objects.create(
            patient=patient,
            patient_name=name or patient.name,
            patient_phone=patient.phone,
            date=day,
            time=time_label,
            duration=duration,
            status=status,
        )
    return _make
