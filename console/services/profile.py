"""
The signed-in operator's own profile.
"""
from __future__ import annotations

import logging

from ..operators import DOCTOR, STAFF, Operator
from .auth import LOGIN_PATHS, accepted, bootstrap_admin_matches
from .backend import BackendError
from .entities import to_payload
from .lookups import invalidate

logger = logging.getLogger(__name__)

PROFILE_FIELDS = {
    'firstName': 'first_name',
    'lastName': 'last_name',
    'email': 'email',
    'phoneNumber': 'phone',
}


class ProfileError(Exception):
    def __init__(self, message: str, *, status: int = 400):
        super().__init__(message)
        self.message = message
        self.status = status


def entity_path(operator: Operator) -> str:
    if operator.role == DOCTOR:
        return f'/doctors/{operator.role_id}'
    return f'/staff/{operator.role_id}'


def profile_state(operator: Operator) -> dict:
    return {key: getattr(operator, attr) for key, attr in PROFILE_FIELDS.items()}


def _put_merged(client, operator: Operator, changes: dict) -> None:
    # The backend replaces every field on update, so send the whole entity
    path = entity_path(operator)
    current = client.get(path)
    payload = dict(current) if isinstance(current, dict) else {}
    payload.update(to_payload(changes))
    client.put(path, json=payload)
    invalidate('doctors' if operator.role == DOCTOR else 'staff')


def update_profile(client, operator: Operator, changes: dict) -> Operator:
    """Apply validated profile ``changes``; returns the updated operator."""
    if not operator.bootstrap:
        _put_merged(client, operator, changes)
    for key, attr in PROFILE_FIELDS.items():
        if key in changes:
            setattr(operator, attr, changes[key] or '')
    logger.info('profile of %s updated', operator.username)
    return operator


def change_password(client, operator: Operator, current: str, new: str) -> None:
    """Change the operator's password after re-checking the current one.

    Raises :class:`ProfileError`.
    """
    if operator.bootstrap:
        if not bootstrap_admin_matches(operator.username, current):
            raise ProfileError('Current password is incorrect!')
        raise ProfileError('The bootstrap administrator password is set in the server configuration.')

    portal = DOCTOR if operator.role == DOCTOR else STAFF
    try:
        data = client.post(LOGIN_PATHS[portal], json={'identifier': operator.username, 'password': current})
    except BackendError as exc:
        if exc.is_client_error:
            raise ProfileError('Current password is incorrect!') from exc
        raise
    if not accepted(data):
        raise ProfileError('Current password is incorrect!')

    _put_merged(client, operator, {'password': new})
    logger.info('password of %s changed', operator.username)

