"""
Summary figures for the console landing page.
"""
from __future__ import annotations

import logging
from collections import Counter
from decimal import Decimal, InvalidOperation

from django.utils import timezone

from ..serializers.medications import LOW_STOCK_LEVEL
from .backend import BackendError
from .entities import list_entities
from .filtering import date_part
from .resources import get_resource

logger = logging.getLogger(__name__)

COLLECTIONS = ('patients', 'doctors', 'appointments', 'payments', 'medications')


def _amount(value) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return Decimal('0')


def is_low_stock(row: dict) -> bool:
    level = row.get('reorderLevel')
    if level is None:
        level = LOW_STOCK_LEVEL
    return (row.get('stockQuantity') or 0) <= level


def summary(client, role: str, today=None) -> dict:
    """Counts per collection the role may read; failures go to ``errors``."""
    today = (today or timezone.localdate()).isoformat()
    rows, errors = {}, []
    for key in COLLECTIONS:
        resource = get_resource(key)
        if not resource.can_read(role):
            continue
        try:
            rows[key] = list_entities(client, resource)
        except BackendError as exc:
            logger.warning('dashboard: %s unavailable: %s', key, exc.message)
            errors.append({'resource': key, 'message': exc.message})

    data = {'counts': {key: len(value) for key, value in rows.items()}, 'errors': errors}

    if 'appointments' in rows:
        appointments = rows['appointments']
        data['appointmentsToday'] = sum(1 for a in appointments if date_part(a.get('appointmentDate')) == today)
        data['appointmentsByStatus'] = dict(Counter(a.get('status') or 'UNKNOWN' for a in appointments))

    if 'payments' in rows:
        payments = rows['payments']
        data['paymentsByStatus'] = dict(Counter(p.get('status') or 'UNKNOWN' for p in payments))
        revenue = sum((_amount(p.get('amount')) for p in payments if p.get('status') == 'COMPLETED'), Decimal('0'))
        data['revenue'] = float(revenue)

    if 'medications' in rows:
        data['lowStock'] = sum(1 for m in rows['medications'] if is_low_stock(m))

    return data
