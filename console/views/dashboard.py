"""
Console landing page figures.

Counts cover only the collections the operator's role may open.  A
collection the backend cannot serve is listed under ``errors`` instead
of failing the whole response.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsOperator
from ..services.backend import get_client
from ..services.dashboard import summary


@api_view(['GET'])
@permission_classes([IsOperator])
def dashboard(request):
    data = summary(get_client(request.user), request.user.role)
    return Response({'ok': True, 'data': data})
