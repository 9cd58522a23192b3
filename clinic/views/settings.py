"""
Appointment settings: the slot grid definition and booking rules.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsAdminRole, IsStaffRole
from ..serializers.settings import AppointmentSettingsSerializer
from ..services.slot_config import load_slot_config, update_slot_config


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsStaffRole])
def appointment_settings(request):
    if request.method == 'GET':
        return Response({'ok': True, 'settings': load_slot_config().as_dict()})

    if not IsAdminRole().has_permission(request, None):
        raise PermissionDenied('Only administrators can change appointment settings.')
    s = AppointmentSettingsSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    config = update_slot_config(s.validated_data, user=request.user)
    return Response({'ok': True, 'settings': config.as_dict()})
