"""
Appointment endpoints for the front-desk schedule board.

Views only validate request shape and translate between camelCase JSON
and the booking services; every scheduling decision and every booking
error comes from :mod:`clinic.services.booking`.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsStaffRole
from ..serializers.appointment import (
    AppointmentCreateSerializer,
    AppointmentListQuerySerializer,
    AppointmentUpdateSerializer,
    RescheduleSerializer,
    StatusSerializer,
    SwapSerializer,
)
from ..services import booking
from ..services.booking import format_appointment


def _split(value) -> list[str]:
    return [v.strip() for v in (value or '').split(',') if v.strip()]


def _list(request):
    q = AppointmentListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    vd = q.validated_data
    rows = booking.list_appointments(
        date=vd.get('date'),
        statuses=_split(vd.get('status')),
        types=_split(vd.get('type')),
        time_range=vd.get('timeRange'),
    )
    total = len(rows)
    page = vd.get('page') or 1
    page_size = vd.get('pageSize') or 0
    if page_size:
        start = (page - 1) * page_size
        rows = rows[start:start + page_size]
    return Response({
        'ok': True,
        'total': total,
        'page': page,
        'pageSize': page_size or total,
        'results': [format_appointment(a) for a in rows],
    })


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointments(request):
    """List appointments (GET) or book a new one (POST)."""
    if request.method == 'GET':
        return _list(request)

    s = AppointmentCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    appointment = booking.create_appointment(
        date=vd.get('date'),
        time=vd.get('time'),
        patient_id=vd.get('patientId'),
        patient_phone=vd.get('patientPhone'),
        duration=vd.get('duration'),
        type=vd['type'],
        notes=vd['notes'],
        status=vd['status'],
        user=request.user,
    )
    return Response({'ok': True, 'appointment': format_appointment(appointment)},
                    status=status.HTTP_201_CREATED)


appointments.cls.throttle_scope = 'booking_write'


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_detail(request, pk: int):
    if request.method == 'GET':
        return Response({'ok': True, 'appointment': format_appointment(booking.get_appointment(pk))})

    if request.method == 'DELETE':
        booking.delete_appointment(pk, user=request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    s = AppointmentUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = booking.update_details(
        pk, type=s.validated_data.get('type'), notes=s.validated_data.get('notes'), user=request.user
    )
    return Response({'ok': True, 'appointment': format_appointment(appointment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_reschedule(request, pk: int):
    s = RescheduleSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = booking.reschedule_appointment(
        pk,
        new_date=s.validated_data.get('newDate'),
        new_time=s.validated_data.get('newTime'),
        user=request.user,
    )
    return Response({
        'ok': True,
        'message': 'Appointment rescheduled successfully',
        'appointment': format_appointment(appointment),
    })


appointment_reschedule.cls.throttle_scope = 'booking_write'


@api_view(['PATCH', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_status(request, pk: int):
    """Move an appointment along its lifecycle (confirm, start, complete, cancel...)."""
    s = StatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    appointment = booking.change_status(
        pk, s.validated_data['status'], user=request.user, reason=s.validated_data['reason']
    )
    return Response({'ok': True, 'appointment': format_appointment(appointment)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_swap(request):
    s = SwapSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    first, second = booking.swap_appointments(
        s.validated_data.get('id1'), s.validated_data.get('id2'), user=request.user
    )
    return Response({
        'ok': True,
        'message': 'Appointments swapped successfully',
        'appointments': [format_appointment(first), format_appointment(second)],
    })


appointment_swap.cls.throttle_scope = 'booking_write'
