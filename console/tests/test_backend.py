import pytest
import requests

from console.services.backend import BackendClient, BackendError, error_message, get_client
from console.operators import STAFF, Operator

from .conftest import FakeBackend


def make_client(fake, **kwargs):
    return BackendClient('http://backend.test/', session=fake, **kwargs)


def test_candidates_prefer_api_then_bare():
    client = make_client(FakeBackend())
    assert client.candidates('/patients') == ['http://backend.test/api/patients', 'http://backend.test/patients']
    assert client.candidates('patients/P1') == ['http://backend.test/api/patients/P1', 'http://backend.test/patients/P1']


def test_api_only_paths_have_single_candidate():
    client = make_client(FakeBackend())
    assert client.candidates('/api/notifications') == ['http://backend.test/api/notifications']
    assert client.candidates('/api') == ['http://backend.test/api']


def test_fallback_can_be_disabled():
    client = make_client(FakeBackend(), fallback=False)
    assert client.candidates('/patients') == ['http://backend.test/api/patients']
    client = make_client(FakeBackend())
    assert client.candidates('/patients', fallback=False) == ['http://backend.test/api/patients']


def test_success_on_first_candidate_does_not_retry():
    fake = FakeBackend()
    fake.add('GET', '/api/patients', [{'patientId': 'P1'}])
    assert make_client(fake).get('/patients') == [{'patientId': 'P1'}]
    assert fake.paths() == ['/api/patients']


@pytest.mark.parametrize('status', [400, 401, 403, 404, 405, 409, 500, 503])
def test_falls_back_to_bare_path(status):
    fake = FakeBackend()
    fake.add('GET', '/api/doctors', {'message': 'nope'}, status=status)
    fake.add('GET', '/doctors', [{'doctorId': 'D1'}])
    assert make_client(fake).get('/doctors') == [{'doctorId': 'D1'}]
    assert fake.paths() == ['/api/doctors', '/doctors']


def test_falls_back_on_connection_error():
    fake = FakeBackend()
    fake.fail('POST', '/api/appointments')
    fake.add('POST', '/appointments', {'appointmentId': 7}, status=201)
    result = make_client(fake).post('/appointments', json={'patientId': 'P1'})
    assert result == {'appointmentId': 7}
    assert fake.last('POST', '/appointments')[3] == {'patientId': 'P1'}


def test_client_error_falls_back_to_bare_path():
    fake = FakeBackend()
    fake.add('GET', '/api/patients', {'message': 'Bad request'}, status=400)
    fake.add('GET', '/patients', [{'patientId': 'P1'}])
    assert make_client(fake).get('/patients') == [{'patientId': 'P1'}]
    assert fake.paths() == ['/api/patients', '/patients']


def test_client_error_of_last_attempt_is_raised():
    fake = FakeBackend()
    fake.add('POST', '/api/patients', {'message': 'Unsupported media type'}, status=415)
    fake.add('POST', '/patients', {'message': 'Email already registered'}, status=400)
    with pytest.raises(BackendError) as exc:
        make_client(fake).post('/patients', json={})
    assert exc.value.status == 400
    assert exc.value.message == 'Email already registered'
    assert exc.value.url == 'http://backend.test/patients'
    assert exc.value.is_client_error
    assert fake.paths() == ['/api/patients', '/patients']


def test_last_error_raised_when_every_candidate_fails():
    fake = FakeBackend()
    fake.add('GET', '/api/payments', {'error': 'down'}, status=503)
    fake.fail('GET', '/payments')
    with pytest.raises(BackendError) as exc:
        make_client(fake).get('/payments')
    assert exc.value.status is None
    assert exc.value.url == 'http://backend.test/payments'
    assert 'Failed to connect to the server' in exc.value.message
    assert not exc.value.is_client_error


def test_api_only_path_does_not_fall_back():
    fake = FakeBackend()
    fake.add('GET', '/api/audit-logs', {'message': 'gone'}, status=404)
    fake.add('GET', '/audit-logs', [])
    with pytest.raises(BackendError) as exc:
        make_client(fake).get('/api/audit-logs')
    assert exc.value.status == 404
    assert fake.paths() == ['/api/audit-logs']


def test_empty_and_text_bodies():
    fake = FakeBackend()
    fake.add('DELETE', '/api/patients/P1', None, status=204)
    fake.add('GET', '/api/health', 'UP')
    client = make_client(fake)
    assert client.delete('/patients/P1') is None
    assert client.get('/health') == 'UP'


def test_params_are_passed_through():
    fake = FakeBackend()
    fake.add('GET', '/api/audit-logs/entity', [])
    make_client(fake).get('/api/audit-logs/entity', params={'entityType': 'Patient', 'entityId': 'P1'})
    assert fake.calls[0][2] == {'entityType': 'Patient', 'entityId': 'P1'}


def test_error_message_extraction():
    assert error_message({'message': 'Bad date'}, 'x') == 'Bad date'
    assert error_message({'error': 'Conflict'}, 'x') == 'Conflict'
    assert error_message({'detail': ['a']}, 'x') == "['a']"
    assert error_message('  plain text  ', 'x') == 'plain text'
    assert error_message({}, 'HTTP 500') == 'HTTP 500'
    assert error_message(None, 'Bad Gateway') == 'Bad Gateway'


def test_get_client_attaches_operator_token(settings, monkeypatch):
    settings.HKARE_BACKEND_URL = 'http://backend.test'
    fake = FakeBackend()
    monkeypatch.setattr(requests, 'Session', lambda: fake)
    client = get_client(Operator(username='S1', role=STAFF, token='abc'))
    assert client.session.headers['Authorization'] == 'Bearer abc'
    assert client.base_url == 'http://backend.test'
