from django.http import JsonResponse

from ..services.backend import BackendClient, BackendError


def healthz(request):
    try:
        payload = BackendClient().get('/health')
        return JsonResponse({'ok': True, 'backend': payload if isinstance(payload, (dict, str)) else True})
    except BackendError as e:
        return JsonResponse({'ok': False, 'error': e.message}, status=503)
