"""
Audit log and login history, read from the backend's API-only routes.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional
from urllib.parse import quote

from django.utils import timezone

from .backend import BackendError
from .resources import Column

logger = logging.getLogger(__name__)

AUDIT_PATH = '/api/audit-logs'
LOGIN_PATH = '/api/login-history'

AUDIT_COLUMNS = (
    Column('timestamp', 'Time', 'datetime'),
    Column('username', 'User'),
    Column('action', 'Action', 'status'),
    Column('entityType', 'Entity'),
    Column('entityId', 'Entity ID'),
    Column('details', 'Details'),
    Column('ipAddress', 'IP Address'),
)
LOGIN_COLUMNS = (
    Column('loginTime', 'Time', 'datetime'),
    Column('username', 'User'),
    Column('loginSuccess', 'Success', 'bool'),
    Column('failureReason', 'Failure Reason'),
    Column('ipAddress', 'IP Address'),
    Column('userAgent', 'User Agent'),
)


def backend_datetime(value: datetime) -> str:
    """Local naive ``YYYY-MM-DDTHH:MM:SS`` as the backend parses it."""
    if timezone.is_aware(value):
        value = timezone.make_naive(value)
    return value.strftime('%Y-%m-%dT%H:%M:%S')


def _date_range(query: dict) -> Optional[dict]:
    if query.get('start') and query.get('end'):
        return {'start': backend_datetime(query['start']), 'end': backend_datetime(query['end'])}
    return None


def audit_request(query: dict) -> tuple[str, Optional[dict]]:
    """``(path, params)`` for an audit log query; incomplete modes mean ``all``."""
    mode = query.get('filter') or 'all'
    if mode == 'user' and query.get('username'):
        return f"{AUDIT_PATH}/user/{quote(query['username'], safe='')}", None
    if mode == 'entity' and query.get('entityType') and query.get('entityId'):
        return f'{AUDIT_PATH}/entity', {'entityType': query['entityType'], 'entityId': query['entityId']}
    if mode == 'action' and query.get('action'):
        return f"{AUDIT_PATH}/action/{quote(query['action'], safe='')}", None
    if mode == 'date-range':
        params = _date_range(query)
        if params:
            return f'{AUDIT_PATH}/date-range', params
    return AUDIT_PATH, None


def login_request(query: dict) -> tuple[str, Optional[dict]]:
    mode = query.get('filter') or 'all'
    if mode == 'user' and query.get('username'):
        return f"{LOGIN_PATH}/user/{quote(query['username'], safe='')}", None
    if mode == 'failed':
        return f'{LOGIN_PATH}/failed', None
    if mode == 'date-range':
        params = _date_range(query)
        if params:
            return f'{LOGIN_PATH}/date-range', params
    return LOGIN_PATH, None


def _fetch(client, path, params) -> list:
    payload = client.get(path, params=params)
    return payload if isinstance(payload, list) else []


def _search(rows: list, term: Optional[str], fields) -> list:
    term = (term or '').strip().lower()
    if not term:
        return rows
    return [r for r in rows if any(term in str(r.get(f) or '').lower() for f in fields)]


def audit_logs(client, query: dict) -> list:
    path, params = audit_request(query)
    rows = _fetch(client, path, params)
    return _search(rows, query.get('q'), ('username', 'action', 'entityType', 'entityId', 'details'))


def login_history(client, query: dict) -> list:
    path, params = login_request(query)
    rows = _fetch(client, path, params)
    return _search(rows, query.get('q'), ('username', 'ipAddress', 'userAgent', 'failureReason'))


def record_login(client, username: str, success: bool, failure_reason: Optional[str] = None,
                 ip: Optional[str] = None, user_agent: Optional[str] = None) -> None:
    """Post a login attempt to the backend; failures are only logged."""
    try:
        client.post(LOGIN_PATH, json={
            'username': username,
            'ipAddress': ip or '',
            'userAgent': user_agent or '',
            'loginSuccess': success,
            'failureReason': failure_reason or None,
        })
    except BackendError as exc:
        logger.warning('could not record login of %s: %s', username, exc.message)
