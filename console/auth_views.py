"""
Operator login and logout for the console API.

Credentials are checked by the backend's staff or doctor portal (or
against the configured bootstrap administrator); the resulting operator
is kept in the Django session, so API clients authenticate with the
session cookie and must send the CSRF token on unsafe requests.
"""
from __future__ import annotations

from django.middleware.csrf import get_token
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle

from .operators import clear_operator, store_operator
from .permissions import IsOperator
from .serializers.auth import LoginSerializer
from .services.auth import LoginFailed, login
from .services.backend import get_client


class LoginRateThrottle(SimpleRateThrottle):
    """Per client IP, signed in or not (rate from the ``login`` scope)."""
    scope = 'login'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}


def client_ip(request) -> str:
    return request.META.get('REMOTE_ADDR') or ''


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """
    Accepts fields:
      - identifier (or username): staff/doctor id, or the bootstrap admin name
      - password
      - portal: STAFF (default) or DOCTOR
    """
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        operator = login(
            get_client(), vd['identifier'], vd['password'], vd['portal'],
            ip=client_ip(request), user_agent=request.META.get('HTTP_USER_AGENT', ''),
        )
    except LoginFailed as exc:
        return Response({'ok': False, 'error': {'code': 'login_failed', 'message': exc.message}}, status=exc.status)

    store_operator(request, operator)
    return Response({'ok': True, 'data': operator.public_dict(), 'csrfToken': get_token(request)})


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    clear_operator(request)
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsOperator])
def me_view(request):
    return Response({'ok': True, 'data': request.user.public_dict()})
