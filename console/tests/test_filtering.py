from datetime import date, datetime

import pytest

from console.services.filtering import (
    apply_filters, date_part, datetime_part, matches, search, search_options, time_part,
)
from console.services.resources import FilterSpec, get_resource


@pytest.mark.parametrize('value,expected', [
    ('2024-03-09', '2024-03-09'),
    ('2024-03-09T10:15:00', '2024-03-09'),
    ([2024, 3, 9], '2024-03-09'),
    ([2024, 3, 9, 10, 15], '2024-03-09'),
    (date(2024, 3, 9), '2024-03-09'),
    (datetime(2024, 3, 9, 23, 0), '2024-03-09'),
    ('', None),
    (None, None),
    ([2024, 3], None),
    ('not a date', None),
    ('2024-13-45', None),
])
def test_date_part(value, expected):
    assert date_part(value) == expected


def test_time_part():
    assert time_part('09:30:00') == '09:30'
    assert time_part('2024-03-09T14:05:00') == '14:05'
    assert time_part([9, 5]) == '09:05'
    assert time_part([2024, 3, 9, 14, 5, 0]) == '14:05'
    assert time_part('') is None
    assert time_part('later') is None


def test_datetime_part():
    assert datetime_part('2024-03-09T14:05:33') == '2024-03-09 14:05'
    assert datetime_part([2024, 3, 9, 14, 5]) == '2024-03-09 14:05'
    assert datetime_part('2024-03-09') == '2024-03-09'


def test_choice_filter_and_all():
    spec = FilterSpec('status', 'Status', 'status')
    row = {'status': 'SCHEDULED'}
    assert matches(row, spec, 'SCHEDULED')
    assert not matches(row, spec, 'COMPLETED')
    assert matches(row, spec, 'ALL')
    assert matches(row, spec, '')
    assert not matches({}, spec, 'SCHEDULED')


def test_exact_filter_compares_as_text():
    spec = FilterSpec('department', 'Department', 'departmentId', 'exact')
    assert matches({'departmentId': 3}, spec, '3')
    assert not matches({'departmentId': 4}, spec, '3')


def test_flag_filter_reads_is_prefixed_fields():
    spec = get_resource('staff').filters[0]
    assert matches({'admin': True}, spec, 'ADMIN')
    assert matches({'isAdmin': True}, spec, 'ADMIN')
    assert matches({'admin': False}, spec, 'STAFF')
    assert matches({}, spec, 'STAFF')
    assert not matches({'isAdmin': True}, spec, 'STAFF')
    # Unknown flag values do not filter
    assert matches({'admin': False}, spec, 'SOMETHING')


def test_date_filter_keeps_rows_without_a_date():
    spec = FilterSpec('date', 'Date', 'appointmentDate', 'date')
    assert matches({'appointmentDate': [2024, 1, 5]}, spec, '2024-01-05')
    assert not matches({'appointmentDate': '2024-01-06'}, spec, '2024-01-05')
    assert matches({}, spec, '2024-01-05')


def test_date_contains_filter_drops_rows_without_a_date():
    spec = FilterSpec('date', 'Date', 'paymentDate', 'date_contains')
    assert matches({'paymentDate': '2024-01-05T10:00:00'}, spec, '2024-01')
    assert matches({'paymentDate': [2024, 1, 5]}, spec, '2024-01-05')
    assert not matches({'paymentDate': '2024-02-05'}, spec, '2024-01')
    assert not matches({}, spec, '2024-01')


def test_search_over_fields_and_labels():
    row = {'patientId': 'P7', 'email': 'Carol@Example.com'}
    assert search(row, 'carol', ['patientId', 'email'])
    assert search(row, '  p7 ', ['patientId'])
    assert not search(row, 'dave', ['patientId', 'email'])
    assert search(row, 'dave', ['patientId'], labels=['Dave Brown'])
    assert search(row, '', ['patientId'])


class FakeLookups:
    def cell(self, column, row):
        return {'P1': 'Alice Smith', 'P2': 'Bob Jones'}.get(row.get(column.key), '') if column.kind == 'patient' else ''


def test_apply_filters_combines_filters_and_search_in_order():
    resource = get_resource('appointments')
    rows = [
        {'appointmentId': 1, 'patientId': 'P1', 'status': 'SCHEDULED', 'appointmentDate': '2024-01-05'},
        {'appointmentId': 2, 'patientId': 'P2', 'status': 'SCHEDULED', 'appointmentDate': '2024-01-05'},
        {'appointmentId': 3, 'patientId': 'P1', 'status': 'COMPLETED', 'appointmentDate': '2024-01-05'},
        {'appointmentId': 4, 'patientId': 'P1', 'status': 'SCHEDULED', 'appointmentDate': '2024-01-06'},
    ]
    params = {'status': 'SCHEDULED', 'date': '2024-01-05'}
    assert [r['appointmentId'] for r in apply_filters(rows, resource, params)] == [1, 2]

    params['q'] = 'alice'
    assert [r['appointmentId'] for r in apply_filters(rows, resource, params, FakeLookups())] == [1]
    # Without lookups only raw fields are searched
    assert apply_filters(rows, resource, params) == []


def test_apply_filters_ignores_all_and_missing_params():
    resource = get_resource('patients')
    rows = [{'patientId': 'P1', 'gender': 'MALE'}, {'patientId': 'P2', 'gender': 'FEMALE'}]
    assert apply_filters(rows, resource, {'gender': 'ALL'}) == rows
    assert apply_filters(rows, resource, None) == rows
    assert apply_filters(rows, resource, {'gender': 'FEMALE'}) == [rows[1]]


def test_search_options_by_id_or_name():
    rows = [
        {'patientId': 'P1', 'firstName': 'Alice', 'lastName': 'Smith'},
        {'patientId': 'P2', 'firstName': 'Bob', 'lastName': 'Jones'},
    ]
    assert search_options(rows, 'ice sm', 'patientId') == [rows[0]]
    assert search_options(rows, 'p2', 'patientId') == [rows[1]]
    assert search_options(rows, None, 'patientId') == rows
    assert search_options([{'departmentId': 1, 'name': 'Cardiology'}], 'cardio', 'departmentId')
