from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..operators import save_operator
from ..permissions import IsOperator
from ..serializers.profile import PasswordChangeSerializer, ProfileSerializer
from ..services.backend import get_client
from ..services.profile import ProfileError, change_password, update_profile


def _error(exc: ProfileError):
    return Response({'ok': False, 'error': {'code': 'profile_error', 'message': exc.message}}, status=exc.status)


@api_view(['GET', 'PUT'])
@permission_classes([IsOperator])
def profile(request):
    operator = request.user
    if request.method == 'PUT':
        s = ProfileSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        operator = update_profile(get_client(operator), operator, dict(s.validated_data))
        save_operator(request, operator)
    return Response({'ok': True, 'data': operator.public_dict()})


@api_view(['POST'])
@permission_classes([IsOperator])
def profile_password(request):
    s = PasswordChangeSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    vd = s.validated_data
    try:
        change_password(get_client(request.user), request.user, vd['currentPassword'], vd['newPassword'])
    except ProfileError as exc:
        return _error(exc)
    return Response({'ok': True, 'message': 'Password updated successfully!'}, status=status.HTTP_200_OK)
