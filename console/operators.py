"""
The signed-in console operator.

Operators are not Django users: their identity comes from the external
backend's login endpoints and lives in the Django session.  The
:class:`Operator` object mimics the parts of the user interface that
Django REST framework relies on (``is_authenticated`` and ``pk``).
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.utils import timezone

ADMIN = 'ADMIN'
STAFF = 'STAFF'
DOCTOR = 'DOCTOR'
ROLES = (ADMIN, STAFF, DOCTOR)

SESSION_KEY = 'console_operator'


@dataclass
class Operator:
    username: str
    role: str
    first_name: str = ''
    last_name: str = ''
    email: str = ''
    phone: str = ''
    # Backend identifier (staffId / doctorId / bootstrap role id)
    role_id: str = ''
    token: Optional[str] = None
    login_time: float = field(default_factory=lambda: timezone.now().timestamp())
    bootstrap: bool = False

    is_authenticated = True
    is_anonymous = False

    @property
    def pk(self) -> str:
        return self.username

    @property
    def display_name(self) -> str:
        full = f'{self.first_name} {self.last_name}'.strip()
        return full or self.username

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN

    def expired(self, now=None) -> bool:
        now = now or timezone.now()
        limit = timedelta(hours=settings.CONSOLE_SESSION_HOURS).total_seconds()
        return now.timestamp() - self.login_time > limit

    def to_dict(self) -> dict:
        return asdict(self)

    def public_dict(self) -> dict:
        return {
            'username': self.username,
            'role': self.role,
            'roleId': self.role_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'name': self.display_name,
            'email': self.email,
            'phoneNumber': self.phone,
            'loginTime': int(self.login_time * 1000),
        }


def get_operator(request) -> Optional[Operator]:
    """Return the operator stored in the session, if any."""
    session = getattr(request, 'session', None)
    if session is None:
        return None
    data = session.get(SESSION_KEY)
    if not data:
        return None
    try:
        return Operator(**data)
    except TypeError:
        # Session written by an incompatible release
        session.pop(SESSION_KEY, None)
        return None


def store_operator(request, operator: Operator) -> None:
    request.session.cycle_key()
    request.session[SESSION_KEY] = operator.to_dict()


def clear_operator(request) -> None:
    request.session.flush()


def save_operator(request, operator: Operator) -> None:
    """Rewrite the session copy after a profile change."""
    request.session[SESSION_KEY] = operator.to_dict()
    request.operator = operator
