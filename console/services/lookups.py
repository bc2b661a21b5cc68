"""
Cached related collections used to label ids.

Screens show patient and doctor names rather than ids and offer pickers
for related entities.  The collections behind them are fetched through
the backend client and kept in the Django cache for
``CONSOLE_LOOKUP_CACHE_SECONDS``.  A lookup that cannot be fetched only
degrades the labels; it never fails the screen.
"""
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from django.conf import settings
from django.core.cache import cache

from .backend import BackendError
from .filtering import date_part, datetime_part, field_value, search_options, time_part
from .resources import get_resource

logger = logging.getLogger(__name__)

LOOKUP_KEYS = ('patients', 'doctors', 'appointments', 'departments', 'medical-records', 'medications')

UNKNOWN_PATIENT = 'Unknown Patient'
UNKNOWN_DOCTOR = 'Unknown Doctor'
NOT_AVAILABLE = 'N/A'


def cache_key(key: str) -> str:
    return f'console:lookup:{key}'


def invalidate(key: str) -> None:
    """Forget the cached collection ``key`` (after a write to it)."""
    if key in LOOKUP_KEYS:
        cache.delete(cache_key(key))


def full_name(row: Optional[dict]) -> str:
    if not row:
        return ''
    return f"{row.get('firstName') or ''} {row.get('lastName') or ''}".strip()


def format_money(value: Any) -> str:
    if value is None or value == '':
        return ''
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return str(value)
    return f'${amount:,.2f}'


def format_day(value: Any) -> str:
    """``Mon D, YYYY``"""
    iso = date_part(value)
    if not iso:
        return ''
    day = date.fromisoformat(iso)
    return f'{day:%b} {day.day}, {day.year}'


class Lookups:
    def __init__(self, client, *, timeout: Optional[int] = None):
        self.client = client
        self.timeout = settings.CONSOLE_LOOKUP_CACHE_SECONDS if timeout is None else timeout
        self._rows: dict[str, list] = {}

    def rows(self, key: str) -> list:
        if key in self._rows:
            return self._rows[key]
        rows = cache.get(cache_key(key))
        if rows is None:
            resource = get_resource(key)
            try:
                payload = self.client.get(resource.collection_path(), fallback=resource.fallback)
            except BackendError as exc:
                logger.warning('lookup %s unavailable: %s', key, exc.message)
                self._rows[key] = []
                return []
            rows = payload if isinstance(payload, list) else []
            cache.set(cache_key(key), rows, self.timeout)
        self._rows[key] = rows
        return rows

    def find(self, key: str, entity_id: Any) -> Optional[dict]:
        if entity_id is None or entity_id == '':
            return None
        id_field = get_resource(key).id_field
        wanted = str(entity_id)
        for row in self.rows(key):
            if str(row.get(id_field)) == wanted:
                return row
        return None

    def fetch(self, key: str, entity_id: Any) -> Optional[dict]:
        """Like :meth:`find`, asking the backend when the cached rows miss it."""
        row = self.find(key, entity_id)
        if row is not None or entity_id is None or entity_id == '':
            return row
        resource = get_resource(key)
        try:
            payload = self.client.get(resource.item_path(entity_id), fallback=resource.fallback)
        except BackendError as exc:
            logger.warning('lookup %s %s unavailable: %s', key, entity_id, exc.message)
            return None
        return payload if isinstance(payload, dict) else None

    def patient_name(self, patient_id: Any) -> str:
        return full_name(self.find('patients', patient_id)) or UNKNOWN_PATIENT

    def doctor_name(self, doctor_id: Any) -> str:
        name = full_name(self.find('doctors', doctor_id))
        return f'Dr. {name}' if name else UNKNOWN_DOCTOR

    def department_name(self, department_id: Any) -> str:
        row = self.find('departments', department_id)
        return (row or {}).get('name') or NOT_AVAILABLE

    def appointment_summary(self, appointment_id: Any) -> str:
        row = self.find('appointments', appointment_id)
        if not row:
            return NOT_AVAILABLE
        day = format_day(row.get('appointmentDate'))
        reason = row.get('reason')
        return f'{day} - {reason}' if reason else day or NOT_AVAILABLE

    def label(self, key: str, row: dict) -> str:
        """Option label of a lookup row."""
        if key == 'patients':
            return f"{full_name(row)} ({row.get('patientId')})"
        if key == 'doctors':
            return f'Dr. {full_name(row)}'
        if key == 'appointments':
            summary = self.appointment_summary(row.get('appointmentId'))
            return f"#{row.get('appointmentId')} {self.patient_name(row.get('patientId'))}, {summary}"
        if key == 'medical-records':
            return f"#{row.get('recordId')} {row.get('diagnosis') or row.get('recordType') or ''}".strip()
        if key == 'medications':
            return ' '.join(str(v) for v in (row.get('name'), row.get('strength')) if v)
        return str(row.get('name') or '')

    def options(self, key: str, term: Optional[str] = None) -> list[dict]:
        """``[{id, label}]`` for a form select or picker."""
        id_field = get_resource(key).id_field
        rows = search_options(self.rows(key), term, id_field)
        return [{'id': row.get(id_field), 'label': self.label(key, row)} for row in rows]

    def cell(self, column, row: dict) -> str:
        """Display text of ``column`` for ``row``."""
        value = row.get(column.key)
        kind = column.kind
        if kind == 'name':
            return full_name(row)
        if kind == 'patient':
            return self.patient_name(value)
        if kind == 'doctor':
            return self.doctor_name(value)
        if kind == 'department':
            return self.department_name(value)
        if kind == 'appointment':
            return self.appointment_summary(value)
        if kind == 'date':
            return date_part(value) or ''
        if kind == 'datetime':
            return datetime_part(value) or ''
        if kind == 'time':
            return time_part(value) or ''
        if kind == 'money':
            return format_money(value)
        if kind == 'bool':
            return 'Yes' if field_value(row, column.key) else 'No'
        return '' if value is None else str(value)

    def warm(self) -> dict[str, int]:
        """Fetch every lookup collection; returns row counts."""
        for key in LOOKUP_KEYS:
            invalidate(key)
            self._rows.pop(key, None)
        return {key: len(self.rows(key)) for key in LOOKUP_KEYS}
