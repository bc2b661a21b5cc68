"""
Operator login against the backend's staff and doctor portals.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.conf import settings
from django.utils.crypto import constant_time_compare

from ..operators import ADMIN, DOCTOR, STAFF, Operator
from .backend import BackendError
from .history import record_login

logger = logging.getLogger(__name__)

LOGIN_PATHS = {
    STAFF: '/auth/staff/login',
    DOCTOR: '/auth/doctor/login',
}


class LoginFailed(Exception):
    def __init__(self, message: str, *, status: int = 401):
        super().__init__(message)
        self.message = message
        self.status = status


def bootstrap_admin_matches(identifier: str, password: str) -> bool:
    username = settings.CONSOLE_ADMIN_USERNAME
    secret = settings.CONSOLE_ADMIN_PASSWORD
    if not (username and secret):
        return False
    return constant_time_compare(identifier, username) and constant_time_compare(password, secret)


def bootstrap_admin() -> Operator:
    return Operator(
        username=settings.CONSOLE_ADMIN_USERNAME, role=ADMIN,
        first_name='System', last_name='Administrator',
        role_id='ADMIN001', bootstrap=True,
    )


def accepted(data) -> bool:
    """Did the login endpoint accept the credentials?"""
    if not isinstance(data, dict):
        return False
    return data.get('authenticated') is True or data.get('isAuthenticated') is True


def operator_from_login(identifier: str, portal: str, data: dict) -> Operator:
    role_id = str(data.get('roleId') or identifier)
    if portal == DOCTOR:
        role = DOCTOR
    elif role_id.startswith('A') or data.get('userType') == ADMIN:
        role = ADMIN
    else:
        role = STAFF
    return Operator(
        username=identifier, role=role,
        first_name=data.get('firstName') or '',
        last_name=data.get('lastName') or '',
        email=data.get('email') or '',
        phone=data.get('phoneNumber') or '',
        role_id=role_id,
        token=data.get('token'),
    )


def login(client, identifier: str, password: str, portal: str = STAFF, *,
          ip: Optional[str] = None, user_agent: Optional[str] = None) -> Operator:
    """Authenticate an operator; every attempt is recorded in login history.

    Raises :class:`LoginFailed` with the message to show the operator.
    """
    if portal == STAFF and bootstrap_admin_matches(identifier, password):
        record_login(client, identifier, True, ip=ip, user_agent=user_agent)
        logger.info('bootstrap administrator signed in')
        return bootstrap_admin()

    try:
        data = client.post(LOGIN_PATHS[portal], json={'identifier': identifier, 'password': password})
    except BackendError as exc:
        if exc.is_client_error:
            message, status = exc.message, 401
        else:
            message, status = 'Failed to connect to the server', 502
        record_login(client, identifier, False, message, ip=ip, user_agent=user_agent)
        logger.info('login rejected for %s: %s', identifier, exc.message)
        raise LoginFailed(message, status=status) from exc

    if not accepted(data):
        message = (data.get('message') if isinstance(data, dict) else None) or 'Authentication failed'
        record_login(client, identifier, False, message, ip=ip, user_agent=user_agent)
        logger.info('login rejected for %s: %s', identifier, message)
        raise LoginFailed(message)

    operator = operator_from_login(identifier, portal, data)
    record_login(client, identifier, True, ip=ip, user_agent=user_agent)
    logger.info('%s %s signed in', operator.role, identifier)
    return operator
