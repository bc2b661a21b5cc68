from datetime import datetime

import pytest
from django.utils import timezone

from console.services import history
from console.services.backend import get_client

pytestmark = pytest.mark.django_db

START = datetime(2024, 1, 1, 8, 0)
END = datetime(2024, 1, 31, 18, 30)


def test_audit_request_modes():
    assert history.audit_request({}) == ('/api/audit-logs', None)
    assert history.audit_request({'filter': 'user', 'username': 'S 1/2'}) == ('/api/audit-logs/user/S%201%2F2', None)
    assert history.audit_request({'filter': 'entity', 'entityType': 'Patient', 'entityId': 'P1'}) == (
        '/api/audit-logs/entity', {'entityType': 'Patient', 'entityId': 'P1'})
    assert history.audit_request({'filter': 'action', 'action': 'DELETE'}) == ('/api/audit-logs/action/DELETE', None)
    assert history.audit_request({'filter': 'date-range', 'start': START, 'end': END}) == (
        '/api/audit-logs/date-range', {'start': '2024-01-01T08:00:00', 'end': '2024-01-31T18:30:00'})


@pytest.mark.parametrize('query', [
    {'filter': 'user'},
    {'filter': 'entity', 'entityType': 'Patient'},
    {'filter': 'action'},
    {'filter': 'date-range', 'start': START},
])
def test_incomplete_audit_query_lists_everything(query):
    assert history.audit_request(query) == ('/api/audit-logs', None)


def test_login_request_modes():
    assert history.login_request({'filter': 'all'}) == ('/api/login-history', None)
    assert history.login_request({'filter': 'user', 'username': 'D3001'}) == ('/api/login-history/user/D3001', None)
    assert history.login_request({'filter': 'failed'}) == ('/api/login-history/failed', None)
    assert history.login_request({'filter': 'date-range', 'end': END}) == ('/api/login-history', None)


def test_backend_datetime_is_local_and_naive(settings):
    settings.TIME_ZONE = 'UTC'
    aware = timezone.make_aware(datetime(2024, 3, 1, 12, 0, 5))
    assert history.backend_datetime(aware) == '2024-03-01T12:00:05'
    assert history.backend_datetime(datetime(2024, 3, 1, 7, 0)) == '2024-03-01T07:00:00'


def test_audit_logs_search(backend):
    backend.add('GET', '/api/audit-logs', [
        {'username': 'S2001', 'action': 'CREATE', 'entityType': 'Patient', 'entityId': 'P1'},
        {'username': 'A1001', 'action': 'DELETE', 'entityType': 'Doctor', 'entityId': 'D9'},
    ])
    rows = history.audit_logs(get_client(), {'filter': 'all', 'q': 'doctor'})
    assert [r['entityId'] for r in rows] == ['D9']


def test_login_history_ignores_non_list(backend):
    backend.add('GET', '/api/login-history/failed', {'message': 'n/a'})
    assert history.login_history(get_client(), {'filter': 'failed'}) == []


def test_record_login_posts_attempt(backend):
    history.record_login(get_client(), 'S2001', False, 'Invalid credentials', ip='10.0.0.1', user_agent='pytest')
    assert backend.last('POST', '/api/login-history')[3] == {
        'username': 'S2001', 'ipAddress': '10.0.0.1', 'userAgent': 'pytest',
        'loginSuccess': False, 'failureReason': 'Invalid credentials',
    }


def test_record_login_never_raises(backend):
    backend.fail('POST', '/api/login-history')
    history.record_login(get_client(), 'S2001', True)
    assert backend.paths('POST') == ['/api/login-history']


def test_history_api_is_admin_only(api_as):
    assert api_as('STAFF').get('/api/console/audit-logs').status_code == 403
    assert api_as('DOCTOR').get('/api/console/login-history').status_code == 403


def test_history_api_filters(api_as, backend):
    backend.add('GET', '/api/audit-logs/entity', [{'username': 'S2001', 'entityType': 'Patient', 'entityId': 'P1'}])
    backend.add('GET', '/api/login-history/date-range', [{'username': 'A1001', 'loginSuccess': True}])
    client = api_as('ADMIN')

    r = client.get('/api/console/audit-logs', {'filter': 'entity', 'entityType': 'Patient', 'entityId': 'P1'})
    assert r.status_code == 200
    assert r.json()['total'] == 1
    assert backend.last('GET', '/api/audit-logs/entity')[2] == {'entityType': 'Patient', 'entityId': 'P1'}

    r = client.get('/api/console/login-history', {'filter': 'date-range', 'start': '2024-01-01', 'end': '2024-01-31T23:59'})
    assert r.status_code == 200
    assert r.json()['data'] == [{'username': 'A1001', 'loginSuccess': True}]


def test_history_api_rejects_unknown_mode(api_as):
    r = api_as('ADMIN').get('/api/console/audit-logs', {'filter': 'everything'})
    assert r.status_code == 400
    assert r.json()['error']['code'] == 'validation_error'
