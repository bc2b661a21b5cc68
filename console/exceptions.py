import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from .services.backend import BackendError
from .services.resources import UnknownResource

logger = logging.getLogger(__name__)


def api_exception_handler(exc, context):
    if isinstance(exc, BackendError):
        # Relay the backend's own rejection; anything else is a bad gateway
        code = exc.status if exc.is_client_error else status.HTTP_502_BAD_GATEWAY
        return Response({'ok': False, 'error': {'code': 'backend_error', 'message': exc.message}}, status=code)
    if isinstance(exc, UnknownResource):
        return Response({'ok': False, 'error': {'code': 'not_found', 'message': str(exc)}}, status=404)
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception('unhandled API error', exc_info=exc)
        return Response({'ok': False, 'error': {'code': 'server_error', 'message': str(exc)}}, status=500)
    # normalize response
    detail = None
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or resp.data
    else:
        detail = resp.data
    code = 'validation_error' if resp.status_code == 400 else 'api_error'
    return Response({'ok': False, 'error': {'code': code, 'message': detail}}, status=resp.status_code)
