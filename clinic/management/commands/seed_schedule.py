from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from clinic.models import AppointmentSettings, Patient
from clinic.services.availability import resolve_slots
from clinic.services.booking import create_appointment
from clinic.services.errors import BookingError

DEMO_PATIENTS = [
    ('Asha Verma', '9000000001', 'P-0001'),
    ('Rahul Mehta', '9000000002', 'P-0002'),
    ('Meera Iyer', '9000000003', 'P-0003'),
]


class Command(BaseCommand):
    help = "Create demo appointment settings, patients and a few bookings for tomorrow."

    def add_arguments(self, parser):
        parser.add_argument('--days-ahead', type=int, default=1, help="Book on today + N days")

    def handle(self, *args, **options):
        AppointmentSettings.load()
        patients = []
        for name, phone, visible_id in DEMO_PATIENTS:
            patient, _ = Patient.objects.get_or_create(
                phone=phone, defaults={'name': name, 'visible_id': visible_id}
            )
            patients.append(patient)

        day = timezone.localdate() + timedelta(days=options['days_ahead'])
        free = resolve_slots(day)['available']
        booked = 0
        for patient, label in zip(patients, free):
            try:
                create_appointment(date=day, time=label, patient_id=patient.pk)
                booked += 1
            except BookingError as e:
                self.stderr.write(f"Skipped {label} for {patient.name}: {e.detail}")

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(patients)} patients and {booked} appointments on {day}"))
