from typing import List, Optional

from clinic.models import Patient
from .errors import PatientNotFound


def find_by_id(patient_id) -> Optional[Patient]:
    try:
        pk = int(patient_id)
    except (TypeError, ValueError):
        return None
    return Patient.objects.filter(pk=pk).first()


def find_by_phone(phone) -> Optional[Patient]:
    phone = (phone or '').strip()
    if not phone:
        return None
    # oldest record wins when several share a number
    return Patient.objects.filter(phone=phone).order_by('id').first()


def search_by_phone(phone, limit: int = 20) -> List[Patient]:
    phone = (phone or '').strip()
    if not phone:
        return []
    return list(Patient.objects.filter(phone__startswith=phone).order_by('phone', 'id')[:limit])


def resolve_patient(patient_id=None, phone=None) -> Patient:
    """Look the patient up by id, falling back to phone when the id is absent or unknown."""
    patient = None
    if patient_id not in (None, ''):
        patient = find_by_id(patient_id)
    if patient is None:
        patient = find_by_phone(phone)
    if patient is None:
        raise PatientNotFound()
    return patient


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'name': p.name,
        'phone': p.phone,
        'email': p.email,
        'visibleId': p.visible_id,
    }
