"""
Database models for the front-desk scheduling backend.

The appointment store is the centre of the schema: each row holds one
booking keyed by id, and a partial unique constraint guarantees that no
two non-cancelled appointments share the same ``(date, time)`` slot.
Patients and the appointment settings are only modelled as far as the
scheduling flow needs to read them.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models
from django.db.models import Q


def default_appointment_types() -> list:
    return ['Consultation', 'Follow-up', 'Check-up', 'Emergency']


def default_durations() -> list:
    return [15, 30, 45, 60]


class User(AbstractUser):
    """Front-desk staff account.

    ``reception`` books and moves appointments, ``doctor`` runs sessions
    and ``admin`` additionally edits the appointment settings.
    """
    ROLE_CHOICES = [
        ('reception', 'Reception'),
        ('doctor', 'Doctor'),
        ('admin', 'Administrator'),
    ]
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default='reception')

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class Patient(models.Model):
    """Patient directory entry consumed read-only by the booking flow."""
    name = models.CharField(max_length=255)
    # Booking falls back to a phone lookup when no id is supplied
    phone = models.CharField(max_length=32, db_index=True)
    email = models.EmailField(blank=True)
    visible_id = models.CharField(max_length=32, blank=True, help_text="Front-desk patient number")
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.name} ({self.phone})"


class AppointmentStatus(models.TextChoices):
    PENDING = 'Pending', 'Pending'
    CONFIRMED = 'Confirmed', 'Confirmed'
    IN_PROGRESS = 'In Progress', 'In Progress'
    COMPLETED = 'Completed', 'Completed'
    CANCELLED = 'Cancelled', 'Cancelled'
    URGENT = 'Urgent', 'Urgent'
    TRANSFERRED = 'Transferred', 'Transferred'


class Appointment(models.Model):
    """A booked slot.

    ``time`` is a 12-hour slot label such as ``"10:30 AM"``; legacy rows
    may carry free-form text. Patient name, phone and visible id are
    copied at booking time so the schedule board renders without joins.
    """
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='appointments'
    )
    patient_name = models.CharField(max_length=255)
    patient_phone = models.CharField(max_length=32, blank=True)
    patient_visible_id = models.CharField(max_length=32, blank=True)
    date = models.DateField(db_index=True)
    time = models.CharField(max_length=32)
    duration = models.PositiveIntegerField(default=30, help_text="Length in minutes")
    type = models.CharField(max_length=64, default='Consultation')
    status = models.CharField(
        max_length=20, choices=AppointmentStatus.choices, default=AppointmentStatus.PENDING, db_index=True
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['date', 'time'],
                condition=~Q(status='Cancelled'),
                name='uniq_active_appointment_slot',
            ),
        ]
        indexes = [
            models.Index(fields=['date', 'status'], name='clinic_appo_date_6c1f5e_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.patient_name} @ {self.date:%Y-%m-%d} {self.time} ({self.status})"


class AppointmentSettings(models.Model):
    """Singleton row holding the slot grid definition and booking rules.

    ``time_slots`` is a list of ``{"time": "9:00 AM", "active": true}``
    entries; when it is empty the grid is generated from the opening
    hours at ``slot_minutes`` granularity. ``blackouts`` is a list of
    ``{"start": "1:00 PM", "end": "2:00 PM"}`` ranges removed from the grid.
    """
    time_slots = models.JSONField(default=list, blank=True)
    opening_time = models.CharField(max_length=16, default='9:00 AM')
    closing_time = models.CharField(max_length=16, default='5:00 PM')
    slot_minutes = models.PositiveIntegerField(default=30)
    advance_booking_days = models.PositiveIntegerField(default=30)
    appointment_types = models.JSONField(default=default_appointment_types, blank=True)
    durations = models.JSONField(default=default_durations, blank=True)
    blackouts = models.JSONField(default=list, blank=True)
    closed_weekdays = models.JSONField(default=list, blank=True, help_text="Monday is 0")
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = 'appointment settings'

    def __str__(self) -> str:
        return f"Appointment settings ({self.slot_minutes} min slots)"

    @classmethod
    def load(cls) -> 'AppointmentSettings':
        obj, _ = cls.objects.get_or_create(pk=1)
        return obj


class AuditEvent(models.Model):
    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=64)
    object_type = models.CharField(max_length=64, blank=True, null=True)
    object_id = models.IntegerField(blank=True, null=True)
    detail = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=['action', 'created_at'], name='clinic_audi_action_4b8e2d_idx'),
            models.Index(fields=['object_type', 'object_id', 'created_at'], name='clinic_audi_object__9a3c71_idx'),
        ]

    def __str__(self):
        return f"{self.action}:{self.object_type}#{self.object_id}"
