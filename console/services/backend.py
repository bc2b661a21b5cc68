"""
HTTP client for the external HKare REST backend.

The backend exposes most resources twice, under ``/api/<resource>`` and
under ``/<resource>``, and not every deployment serves both.  Requests
are therefore tried against the prefixed route first and repeated
against the bare route whenever the first attempt fails, whatever the
status; the error of the last attempt is the one reported.
"""
from __future__ import annotations

import logging
from typing import Any, Optional

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

API_PREFIX = '/api'


class BackendError(Exception):
    """A backend call failed after every candidate URL was tried."""

    def __init__(self, message: str, *, status: Optional[int] = None,
                 payload: Any = None, url: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.payload = payload
        self.url = url

    @property
    def is_client_error(self) -> bool:
        return self.status is not None and 400 <= self.status < 500


def error_message(payload: Any, default: str) -> str:
    if isinstance(payload, dict):
        for key in ('message', 'error', 'detail'):
            value = payload.get(key)
            if value:
                return value if isinstance(value, str) else str(value)
    if isinstance(payload, str) and payload.strip():
        return payload.strip()
    return default


def _decode(response: requests.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class BackendClient:
    def __init__(self, base_url: Optional[str] = None, *, timeout: Optional[float] = None,
                 fallback: Optional[bool] = None, token: Optional[str] = None,
                 session: Optional[requests.Session] = None):
        self.base_url = (base_url or settings.HKARE_BACKEND_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.HKARE_BACKEND_TIMEOUT
        self.fallback = settings.HKARE_BACKEND_FALLBACK if fallback is None else fallback
        self.session = session or requests.Session()
        self.session.headers.setdefault('Accept', 'application/json')
        if token:
            self.session.headers['Authorization'] = f'Bearer {token}'

    def candidates(self, path: str, *, fallback: bool = True) -> list[str]:
        """Return the URLs to try for ``path``, preferred first."""
        if not path.startswith('/'):
            path = '/' + path
        if path == API_PREFIX or path.startswith(API_PREFIX + '/'):
            # API-only route; there is no bare twin to fall back to.
            return [self.base_url + path]
        urls = [self.base_url + API_PREFIX + path]
        if fallback and self.fallback:
            urls.append(self.base_url + path)
        return urls

    def request(self, method: str, path: str, *, params: Optional[dict] = None,
                json: Any = None, fallback: bool = True) -> Any:
        urls = self.candidates(path, fallback=fallback)
        for index, url in enumerate(urls):
            is_last = index == len(urls) - 1
            try:
                response = self.session.request(method, url, params=params, json=json, timeout=self.timeout)
            except requests.RequestException as exc:
                error = BackendError(f'Failed to connect to the server: {exc}', url=url)
                reason = exc
            else:
                payload = _decode(response)
                if response.ok:
                    logger.debug('%s %s -> %s', method, url, response.status_code)
                    return payload
                error = BackendError(
                    error_message(payload, response.reason or f'HTTP {response.status_code}'),
                    status=response.status_code, payload=payload, url=url,
                )
                reason = response.status_code
            if is_last:
                logger.error('%s %s failed: %s', method, path, error.message)
                raise error
            logger.warning('%s %s failed (%s); retrying at %s', method, url, reason, urls[index + 1])

    def get(self, path: str, **kwargs) -> Any:
        return self.request('GET', path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request('POST', path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request('PUT', path, **kwargs)

    def patch(self, path: str, **kwargs) -> Any:
        return self.request('PATCH', path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request('DELETE', path, **kwargs)


def get_client(operator=None) -> BackendClient:
    """Build a client for the current operator (token attached when known)."""
    token = getattr(operator, 'token', None) if operator is not None else None
    return BackendClient(token=token)
