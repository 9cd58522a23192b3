"""
Request serializers for the appointment endpoints.

Date and time stay plain strings here: their presence and format are
checked by the booking services so the API reports the same
``missing_fields`` / ``invalid_time`` codes as any other caller.
"""
import bleach
from rest_framework import serializers

from clinic.models import AppointmentStatus


class AppointmentCreateSerializer(serializers.Serializer):
    patientId = serializers.IntegerField(required=False, allow_null=True)
    patientPhone = serializers.CharField(required=False, allow_blank=True, max_length=32)
    date = serializers.CharField(required=False, allow_blank=True, max_length=32)
    time = serializers.CharField(required=False, allow_blank=True, max_length=32)
    duration = serializers.IntegerField(required=False, allow_null=True, min_value=1, max_value=480)
    type = serializers.CharField(required=False, max_length=64, default='Consultation')
    notes = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.ChoiceField(choices=AppointmentStatus.values, required=False,
                                     default=AppointmentStatus.PENDING)

    def validate_patientPhone(self, v):
        return bleach.clean((v or '').strip(), strip=True)


class AppointmentUpdateSerializer(serializers.Serializer):
    type = serializers.CharField(required=False, max_length=64)
    notes = serializers.CharField(required=False, allow_blank=True)


class RescheduleSerializer(serializers.Serializer):
    newDate = serializers.CharField(required=False, allow_blank=True, max_length=32)
    newTime = serializers.CharField(required=False, allow_blank=True, max_length=32)


class SwapSerializer(serializers.Serializer):
    id1 = serializers.IntegerField(required=False, allow_null=True)
    id2 = serializers.IntegerField(required=False, allow_null=True)


class StatusSerializer(serializers.Serializer):
    status = serializers.CharField(max_length=20)
    reason = serializers.CharField(required=False, allow_blank=True, default='')


class AppointmentListQuerySerializer(serializers.Serializer):
    date = serializers.DateField(required=False)
    status = serializers.CharField(required=False, allow_blank=True)
    type = serializers.CharField(required=False, allow_blank=True)
    timeRange = serializers.ChoiceField(choices=['all', 'morning', 'afternoon', 'evening'], required=False)
    page = serializers.IntegerField(required=False, min_value=1)
    pageSize = serializers.IntegerField(required=False, min_value=1, max_value=200)


class DateQuerySerializer(serializers.Serializer):
    date = serializers.DateField()
