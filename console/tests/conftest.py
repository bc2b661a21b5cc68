import json as jsonlib
from urllib.parse import urlsplit

import pytest
import requests
from django.core.cache import cache
from rest_framework.test import APIClient

from console.operators import ADMIN, DOCTOR, SESSION_KEY, STAFF, Operator
from console.services import backend as backend_module

BACKEND_URL = 'http://backend.test'


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload
        if payload is None:
            self.content = b''
        elif isinstance(payload, str):
            self.content = payload.encode()
        else:
            self.content = jsonlib.dumps(payload).encode()
        self.text = self.content.decode()
        self.reason = 'OK' if self.ok else 'Error'

    @property
    def ok(self):
        return self.status_code < 400

    def json(self):
        if isinstance(self._payload, str):
            raise ValueError('not json')
        return self._payload


class FakeBackend:
    """Stands in for ``requests.Session``; routes are keyed by method and path."""

    def __init__(self):
        self.routes = {}
        self.calls = []
        self.headers = {}

    def add(self, method, path, payload=None, status=200):
        self.routes[(method.upper(), path)] = (status, payload)

    def fail(self, method, path):
        self.routes[(method.upper(), path)] = requests.ConnectionError('connection refused')

    def request(self, method, url, params=None, json=None, timeout=None):
        path = urlsplit(url).path
        self.calls.append((method.upper(), path, params, json))
        route = self.routes.get((method.upper(), path))
        if route is None:
            return FakeResponse(404, {'message': f'No route {path}'})
        if isinstance(route, Exception):
            raise route
        status, payload = route
        return FakeResponse(status, payload)

    def paths(self, method=None):
        return [c[1] for c in self.calls if method is None or c[0] == method]

    def last(self, method, path):
        for call in reversed(self.calls):
            if call[0] == method and call[1] == path:
                return call
        return None


@pytest.fixture(autouse=True)
def _clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def backend(monkeypatch, settings):
    settings.HKARE_BACKEND_URL = BACKEND_URL
    settings.HKARE_BACKEND_FALLBACK = True
    settings.CONSOLE_ADMIN_USERNAME = 'root'
    settings.CONSOLE_ADMIN_PASSWORD = 'bootstrap-secret'
    fake = FakeBackend()
    fake.add('POST', '/api/login-history', {}, status=201)
    monkeypatch.setattr(backend_module.requests, 'Session', lambda: fake)
    return fake


def make_operator(role, **kwargs):
    defaults = {
        ADMIN: dict(username='A1001', role_id='A1001', first_name='Ada', last_name='Admin'),
        STAFF: dict(username='S2001', role_id='S2001', first_name='Sam', last_name='Staff'),
        DOCTOR: dict(username='D3001', role_id='D3001', first_name='Dana', last_name='Doctor'),
    }[role]
    defaults.update(kwargs)
    return Operator(role=role, **defaults)


def sign_in(client, operator):
    session = client.session
    session[SESSION_KEY] = operator.to_dict()
    session.save()
    return client


@pytest.fixture
def api_as(backend):
    """``api_as(role)`` returns an APIClient with an operator session."""
    def factory(role, **kwargs):
        return sign_in(APIClient(), make_operator(role, **kwargs))
    return factory


@pytest.fixture
def browser_as(backend, client):
    def factory(role, **kwargs):
        return sign_in(client, make_operator(role, **kwargs))
    return factory


PATIENTS = [
    {'patientId': 'P1', 'firstName': 'Alice', 'lastName': 'Smith', 'email': 'alice@example.com', 'gender': 'FEMALE', 'bloodGroup': 'O+'},
    {'patientId': 'P2', 'firstName': 'Bob', 'lastName': 'Jones', 'email': 'bob@example.com', 'gender': 'MALE', 'bloodGroup': 'A-'},
]
DOCTORS = [
    {'doctorId': 'D3001', 'firstName': 'Dana', 'lastName': 'Doctor', 'specialization': 'Cardiology', 'departmentId': 1},
]
DEPARTMENTS = [{'departmentId': 1, 'name': 'Cardiology'}]
APPOINTMENTS = [
    {'appointmentId': 10, 'patientId': 'P1', 'doctorId': 'D3001', 'appointmentDate': '2024-01-05',
     'startTime': '09:30:00', 'status': 'SCHEDULED', 'reason': 'Checkup', 'appointmentFee': 50.0},
    {'appointmentId': 11, 'patientId': 'P2', 'doctorId': 'D3001', 'appointmentDate': [2024, 1, 6],
     'startTime': [14, 0], 'status': 'COMPLETED', 'reason': 'Follow up'},
]


@pytest.fixture
def hospital(backend):
    """Seed the fake backend with a small hospital."""
    backend.add('GET', '/api/patients', PATIENTS)
    backend.add('GET', '/api/doctors', DOCTORS)
    backend.add('GET', '/api/departments', DEPARTMENTS)
    backend.add('GET', '/api/appointments', APPOINTMENTS)
    return backend
