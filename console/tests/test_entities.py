from datetime import date, timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework import serializers

from console.services import entities
from console.services.lookups import cache_key
from console.services.resources import get_resource


def test_appointment_payload_sets_slot_and_defaults():
    payload = entities.build_payload(get_resource('appointments'), {
        'patientId': 'P1', 'doctorId': 'D3001', 'appointmentDate': '2024-01-05',
        'appointmentTime': '09:30', 'status': '', 'reason': ' <b>Checkup</b> ',
        'notes': '', 'appointmentFee': '', 'isPaid': '',
    })
    assert payload['appointmentDate'] == '2024-01-05'
    assert payload['appointmentTime'] == '09:30'
    assert payload['startTime'] == payload['endTime'] == '09:30'
    assert payload['status'] == 'SCHEDULED'
    assert payload['reason'] == 'Checkup'
    assert payload['isPaid'] is False
    assert 'appointmentFee' not in payload


def test_appointment_requires_patient_and_doctor():
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(get_resource('appointments'), {
            'patientId': '', 'doctorId': '', 'appointmentDate': '2024-01-05', 'appointmentTime': '09:30',
        })
    assert set(exc.value.detail) == {'patientId', 'doctorId'}


def test_staff_password_required_on_create_only():
    resource = get_resource('staff')
    data = {'email': 'sam@example.com', 'password': '', 'firstName': 'Sam', 'lastName': 'Staff', 'isAdmin': 'on'}
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(resource, data)
    assert 'password' in exc.value.detail

    payload = entities.build_payload(resource, data, instance={'staffId': 'S2001'})
    assert 'password' not in payload
    assert payload['isAdmin'] is True

    payload = entities.build_payload(resource, dict(data, password='s3cret-pass'))
    assert payload['password'] == 's3cret-pass'


def test_payment_payload_takes_patient_from_appointment(hospital):
    payload = entities.build_payload(get_resource('payments'), {
        'appointmentId': '10', 'amount': '12.50', 'paymentDate': '2024-01-05', 'status': 'PENDING',
    })
    assert payload['patientId'] == 'P1'
    assert payload['amount'] == 12.5
    assert payload['appointmentId'] == 10
    assert payload['paymentDate'] == '2024-01-05T00:00:00'
    assert payload['paymentMethod'] == 'CASH'


def test_payment_date_defaults_to_today_at_midnight(hospital):
    payload = entities.build_payload(get_resource('payments'), {'appointmentId': '11', 'amount': '5', 'paymentDate': ''})
    assert payload['patientId'] == 'P2'
    assert payload['paymentDate'] == f'{timezone.localdate().isoformat()}T00:00:00'


def test_payment_appointment_missing_from_cache_is_fetched(hospital):
    hospital.add('GET', '/api/appointments/12', {'appointmentId': 12, 'patientId': 'P2'})
    payload = entities.build_payload(get_resource('payments'), {'appointmentId': '12', 'amount': '5'})
    assert payload['patientId'] == 'P2'


def test_payment_requires_known_appointment(hospital):
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(get_resource('payments'), {'appointmentId': '99', 'amount': '5'})
    assert 'appointmentId' in exc.value.detail


def test_medical_record_dates_are_sent_as_midnight_timestamps():
    payload = entities.build_payload(get_resource('medical-records'), {
        'patientId': 'P1', 'doctorId': 'D3001', 'recordDate': '2024-01-05', 'nextAppointment': '',
        'diagnosis': 'Flu',
    })
    assert payload['recordDate'] == '2024-01-05T00:00:00'
    assert 'nextAppointment' not in payload
    assert payload['recordType'] == 'GENERAL_CHECKUP'


def test_prescription_lines_and_default_expiry():
    payload = entities.build_payload(get_resource('prescriptions'), {
        'patientId': 'P1', 'doctorId': 'D3001', 'prescriptionDate': '2024-01-05', 'expiryDate': '',
        'isRefillable': '', 'totalRefills': '3',
        'medications': 'Amoxicillin | 500mg | 3x daily | after meals | 21 | 7 days\n\nIbuprofen | 200mg',
    })
    assert payload['expiryDate'] == (date(2024, 1, 5) + timedelta(days=30)).isoformat()
    assert payload['totalRefills'] == 0
    assert payload['medications'][0] == {
        'medicationName': 'Amoxicillin', 'dosage': '500mg', 'frequency': '3x daily',
        'instructions': 'after meals', 'quantity': 21, 'duration': '7 days',
    }
    assert payload['medications'][1]['medicationName'] == 'Ibuprofen'
    assert payload['medications'][1]['quantity'] == 1
    # First line is mirrored at the top level
    assert payload['medicationName'] == 'Amoxicillin'
    assert payload['dosage'] == '500mg'


def test_prescription_rejects_expiry_before_date_and_empty_lines():
    resource = get_resource('prescriptions')
    base = {'patientId': 'P1', 'doctorId': 'D3001', 'prescriptionDate': '2024-01-05'}
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(resource, dict(base, expiryDate='2024-01-01', medications='Aspirin'))
    assert 'expiryDate' in exc.value.detail
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(resource, dict(base, medications='  \n'))
    assert 'medications' in exc.value.detail


def test_medication_expiry_after_manufacture():
    with pytest.raises(serializers.ValidationError) as exc:
        entities.build_payload(get_resource('medications'), {
            'name': 'Aspirin', 'manufactureDate': '2024-05-01', 'expiryDate': '2024-01-01',
        })
    assert 'expiryDate' in exc.value.detail


def test_blank_forms_carry_initial_values():
    appointment = entities.blank_form(get_resource('appointments'))
    assert appointment['status'] == 'SCHEDULED'
    assert appointment['isPaid'] is False
    assert appointment['appointmentDate'] == ''

    record = entities.blank_form(get_resource('medical-records'))
    assert record['recordDate'] == timezone.localdate().isoformat()

    prescription = entities.blank_form(get_resource('prescriptions'))
    assert prescription['medications'][0]['quantity'] == 1
    assert prescription['status'] == 'ACTIVE'

    medication = entities.blank_form(get_resource('medications'))
    assert medication['reorderLevel'] == 10


def test_form_from_entity_formats_and_hides_passwords():
    state = entities.form_from_entity(get_resource('staff'), {
        'staffId': 'S2001', 'email': 'sam@example.com', 'firstName': 'Sam', 'lastName': 'Staff',
        'hireDate': [2020, 5, 1], 'admin': True, 'password': '$2a$hash', 'phoneNumber': None,
    })
    assert state['password'] == ''
    assert state['isAdmin'] is True
    assert state['hireDate'] == '2020-05-01'
    assert state['phoneNumber'] == ''


def test_form_from_entity_reads_aliases_and_items():
    state = entities.form_from_entity(get_resource('appointments'), {
        'appointmentDate': '2024-01-05T00:00:00', 'startTime': '09:30:00', 'isPaid': None,
    })
    assert state['appointmentDate'] == '2024-01-05'
    assert state['appointmentTime'] == '09:30'
    assert state['isPaid'] is False

    state = entities.form_from_entity(get_resource('prescriptions'), {
        'medications': [{'id': 4, 'medicationName': 'Aspirin', 'quantity': 2, 'dosage': None}],
    })
    assert state['medications'] == [{'medicationName': 'Aspirin', 'quantity': 2}]


def test_to_payload_converts_nested_values():
    from decimal import Decimal
    from datetime import time
    assert entities.to_payload({'a': [Decimal('1.5'), time(7, 5)], 'b': date(2024, 1, 2)}) == {
        'a': [1.5, '07:05'], 'b': '2024-01-02',
    }


def test_list_entities_ignores_non_list_payload(backend):
    from console.services.backend import get_client
    backend.add('GET', '/api/patients', {'message': 'maintenance'})
    assert entities.list_entities(get_client(), get_resource('patients')) == []


def test_writes_invalidate_lookup_cache(backend):
    from console.services.backend import get_client
    backend.add('POST', '/api/patients', {'patientId': 'P3'}, status=201)
    cache.set(cache_key('patients'), [{'patientId': 'P1'}])
    entities.create_entity(get_client(), get_resource('patients'), {'firstName': 'Cleo'})
    assert cache.get(cache_key('patients')) is None


def test_staff_create_uses_dedicated_route(backend):
    from console.services.backend import get_client
    backend.add('POST', '/api/staff/create', {'staffId': 'S9'}, status=201)
    assert entities.create_entity(get_client(), get_resource('staff'), {'firstName': 'New'}) == {'staffId': 'S9'}


def test_resource_actions_hit_backend_routes(backend):
    from console.services.backend import get_client
    backend.add('PUT', '/api/medications/5/stock', {'medicationId': 5, 'stockQuantity': 30})
    backend.add('PUT', '/api/prescriptions/8/status/COMPLETED', {'status': 'COMPLETED'})
    backend.add('POST', '/prescriptions/8/refill', {'refillsRemaining': 1})
    backend.add('PUT', '/api/notifications/9/read', {'read': True})
    client = get_client()

    assert entities.change_stock(client, 5, 10, 'ADD')['stockQuantity'] == 30
    stock_call = backend.last('PUT', '/api/medications/5/stock')
    assert stock_call[2] == {'quantity': 10}
    assert stock_call[3] is None
    entities.change_stock(client, 5, 4, 'SUBTRACT')
    assert backend.last('PUT', '/api/medications/5/stock')[2] == {'quantity': -4}
    assert entities.set_prescription_status(client, 8, 'COMPLETED') == {'status': 'COMPLETED'}
    assert entities.refill_prescription(client, 8) == {'refillsRemaining': 1}
    assert backend.paths('POST')[-2:] == ['/api/prescriptions/8/refill', '/prescriptions/8/refill']
    assert entities.mark_notification_read(client, 9) == {'read': True}
