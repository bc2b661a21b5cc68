"""
Role based access control for console screens.
"""
from rest_framework.permissions import BasePermission, SAFE_METHODS

from .operators import ADMIN, ROLES
from .services.resources import UnknownResource, get_resource


def _role(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return getattr(user, "role", None)


class IsOperator(BasePermission):
    """Any signed-in console operator."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) in ROLES


class IsAdminRole(BasePermission):
    """Allow access only to administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        return _role(request) == ADMIN


class ResourceAccess(BasePermission):
    """Check the operator's role against the resource named in the URL.

    Safe methods need read access, everything else needs write access.
    Routes that pass an ``action`` accept the roles granted that action.
    Unknown resources pass here and are rejected by the view with 404.
    """
    message = "Your role cannot access this screen."

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        role = _role(request)
        if role is None:
            return False
        kwargs = getattr(view, "kwargs", {})
        key = kwargs.get("resource")
        if not key:
            return True
        try:
            resource = get_resource(key)
        except UnknownResource:
            return True
        action = kwargs.get("action")
        if action:
            return resource.can_act(role, action)
        if request.method in SAFE_METHODS:
            return resource.can_read(role)
        return resource.can_write(role)
