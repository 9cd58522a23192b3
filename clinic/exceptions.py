"""
Project-wide DRF exception handler.

Every error response is reshaped to ``{"ok": false, "error": {"code",
"message"}}``. Booking errors carry their own code; anything DRF does not
recognise is logged with its traceback and reported as ``server_error``.
"""
import logging

from django.core.exceptions import PermissionDenied
from django.http import Http404
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


def _error_code(exc) -> str:
    if isinstance(exc, APIException):
        codes = exc.get_codes()
        return codes if isinstance(codes, str) else exc.default_code
    if isinstance(exc, Http404):
        return 'not_found'
    if isinstance(exc, PermissionDenied):
        return 'permission_denied'
    return 'api_error'


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    view = context.get('view')
    if resp is None:
        logger.error("Unhandled error in %s", view, exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': 'Internal server error.'}},
                        status=500)

    code = _error_code(exc)
    if isinstance(resp.data, dict):
        message = resp.data.get('detail', resp.data)
    else:
        message = resp.data
    if resp.status_code >= 500:
        logger.error("Request failed with %s: %s", code, message, exc_info=exc)
    else:
        logger.info("Request rejected with %s: %s", code, message)

    resp.data = {'ok': False, 'error': {'code': code, 'message': message}}
    return resp
