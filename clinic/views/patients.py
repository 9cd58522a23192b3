from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ..permissions import IsStaffRole
from ..services.patients import format_patient, search_by_phone


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsStaffRole])
def patient_search_by_phone(request):
    """Patients whose phone starts with ``?phone=``, used by the booking form."""
    phone = (request.query_params.get('phone') or '').strip()
    if not phone:
        return Response({'ok': False, 'error': {'code': 'missing_fields', 'message': 'Phone is required.'}},
                        status=400)
    return Response({'ok': True, 'results': [format_patient(p) for p in search_by_phone(phone)]})
