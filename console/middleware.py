import logging

from django.contrib import messages

from .operators import clear_operator, get_operator

logger = logging.getLogger(__name__)


class OperatorSessionMiddleware:
    """Attach the session operator to the request and drop expired logins."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        operator = get_operator(request)
        if operator is not None and operator.expired():
            logger.info('session expired for %s', operator.username)
            clear_operator(request)
            operator = None
            request.console_session_expired = True
        request.operator = operator
        return self.get_response(request)


def flash_expired(request) -> None:
    if getattr(request, 'console_session_expired', False):
        messages.info(request, 'Your session has expired. Please sign in again.')
