"""
Slot availability for the booking calendar.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsStaffRole
from ..serializers.appointment import DateQuerySerializer
from ..services.availability import is_within_advance_booking_window, resolve_slots
from ..services.slot_config import load_slot_config


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_slots(request):
    """Classify every grid slot of ``?date=YYYY-MM-DD``."""
    q = DateQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = resolve_slots(q.validated_data['date'])
    return Response({'ok': True, **data})


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def booking_window(request):
    q = DateQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    config = load_slot_config()
    day = q.validated_data['date']
    return Response({
        'ok': True,
        'date': day.isoformat(),
        'withinWindow': is_within_advance_booking_window(day, config=config),
        'advanceBookingDays': config.advance_booking_days,
    })
