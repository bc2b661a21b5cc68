"""
Session-backed authentication for the console API.

The operator is read from the Django session written at login.  This
module is kept apart from the views so that Django REST framework can
import it while loading settings without pulling in view code.
"""
from __future__ import annotations

from rest_framework import authentication

from .operators import get_operator


class OperatorSessionAuthentication(authentication.SessionAuthentication):
    """Authenticate the operator stored in the session.

    CSRF is enforced exactly as DRF's ``SessionAuthentication`` does for
    Django users, since the credential is the session cookie.
    """

    def authenticate(self, request):
        django_request = request._request
        # The middleware has already dropped expired logins
        if hasattr(django_request, 'operator'):
            operator = django_request.operator
        else:
            operator = get_operator(django_request)
        if operator is None:
            return None
        self.enforce_csrf(request)
        return (operator, None)
