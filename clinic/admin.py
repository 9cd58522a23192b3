"""
Django admin registrations.

Lets administrators inspect bookings, fix patient records and edit the
appointment settings row from ``/admin/``.
"""
from django.contrib import admin

from .models import Appointment, AppointmentSettings, AuditEvent, Patient, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'role', 'is_staff', 'is_superuser')
    list_filter = ('role',)
    search_fields = ('username', 'first_name', 'last_name')


@admin.register(Patient)
class PatientAdmin(admin.ModelAdmin):
    list_display = ('id', 'name', 'phone', 'visible_id', 'created_at')
    search_fields = ('name', 'phone', 'visible_id')


@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    list_display = ('id', 'date', 'time', 'duration', 'patient_name', 'type', 'status')
    list_filter = ('status', 'type', 'date')
    search_fields = ('patient_name', 'patient_phone', 'patient_visible_id')
    date_hierarchy = 'date'


@admin.register(AppointmentSettings)
class AppointmentSettingsAdmin(admin.ModelAdmin):
    list_display = ('id', 'opening_time', 'closing_time', 'slot_minutes', 'advance_booking_days')


@admin.register(AuditEvent)
class AuditEventAdmin(admin.ModelAdmin):
    list_display = ('action', 'object_type', 'object_id', 'user', 'created_at')
    list_filter = ('action', 'object_type')
    search_fields = ('object_id', 'user__username')
