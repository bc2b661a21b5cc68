"""
Resource specific actions: medication stock, prescription status and
refills, notification read receipts.

The URLs pass fixed ``resource`` and ``action`` arguments so that
:class:`console.permissions.ResourceAccess` checks the role may run them.
"""
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsOperator, ResourceAccess
from ..serializers.medications import StockUpdateSerializer
from ..serializers.prescriptions import PrescriptionStatusSerializer
from ..services.backend import get_client
from ..services.entities import change_stock, mark_notification_read, refill_prescription, set_prescription_status


@api_view(['PATCH'])
@permission_classes([IsOperator, ResourceAccess])
def medication_stock(request, entity_id, resource='medications', action='stock'):
    s = StockUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    result = change_stock(get_client(request.user), entity_id, vd['quantity'], vd['action'])
    return Response({'ok': True, 'data': result})


@api_view(['PUT'])
@permission_classes([IsOperator, ResourceAccess])
def prescription_status(request, entity_id, resource='prescriptions', action='status'):
    s = PrescriptionStatusSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    result = set_prescription_status(get_client(request.user), entity_id, s.validated_data['status'])
    return Response({'ok': True, 'data': result})


@api_view(['POST'])
@permission_classes([IsOperator, ResourceAccess])
def prescription_refill(request, entity_id, resource='prescriptions', action='refill'):
    return Response({'ok': True, 'data': refill_prescription(get_client(request.user), entity_id)})


@api_view(['PUT'])
@permission_classes([IsOperator, ResourceAccess])
def notification_read(request, entity_id, resource='notifications', action='read'):
    return Response({'ok': True, 'data': mark_notification_read(get_client(request.user), entity_id)})
