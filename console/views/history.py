"""
Audit log and login history (administrators only).
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsAdminRole
from ..serializers.history import AuditLogQuerySerializer, LoginHistoryQuerySerializer
from ..services import history
from ..services.backend import get_client


@api_view(['GET'])
@permission_classes([IsAdminRole])
def audit_logs(request):
    """Query params: filter (all|user|entity|action|date-range), username,
    entityType, entityId, action, start, end, q."""
    s = AuditLogQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    rows = history.audit_logs(get_client(request.user), s.validated_data)
    return Response({'ok': True, 'data': rows, 'total': len(rows)})


@api_view(['GET'])
@permission_classes([IsAdminRole])
def login_history(request):
    """Query params: filter (all|user|failed|date-range), username, start, end, q."""
    s = LoginHistoryQuerySerializer(data=request.query_params)
    s.is_valid(raise_exception=True)
    rows = history.login_history(get_client(request.user), s.validated_data)
    return Response({'ok': True, 'data': rows, 'total': len(rows)})
