"""
CRUD on backend collections and the state of the modal forms.
"""
from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Optional

from rest_framework import serializers

from ..serializers.common import ITEM_COLUMNS, MedicationItemsField
from .backend import get_client
from .filtering import date_part, time_part
from .lookups import Lookups, invalidate

logger = logging.getLogger(__name__)


def list_entities(client, resource, operator=None) -> list:
    """Rows of ``resource``; some roles only see rows addressed to them."""
    payload = client.get(resource.collection_path(operator), fallback=resource.fallback)
    if not isinstance(payload, list):
        logger.warning('%s: expected a list, got %s', resource.key, type(payload).__name__)
        return []
    return payload


def get_entity(client, resource, entity_id) -> Optional[dict]:
    return client.get(resource.item_path(entity_id), fallback=resource.fallback)


def create_entity(client, resource, payload: dict) -> Any:
    result = client.post(resource.create_path or resource.path, json=payload, fallback=resource.fallback)
    invalidate(resource.key)
    logger.info('%s created', resource.key)
    return result


def update_entity(client, resource, entity_id, payload: dict) -> Any:
    result = client.put(resource.item_path(entity_id), json=payload, fallback=resource.fallback)
    invalidate(resource.key)
    logger.info('%s %s updated', resource.key, entity_id)
    return result


def delete_entity(client, resource, entity_id) -> None:
    client.delete(resource.item_path(entity_id), fallback=resource.fallback)
    invalidate(resource.key)
    logger.info('%s %s deleted', resource.key, entity_id)


def to_payload(value: Any) -> Any:
    """Make validated data JSON-ready (ISO dates, float decimals)."""
    if isinstance(value, dict):
        return {k: to_payload(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_payload(v) for v in value]
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime('%H:%M')
    if isinstance(value, Decimal):
        return float(value)
    return value


def build_payload(resource, data, instance: Optional[dict] = None, lookups: Optional[Lookups] = None) -> dict:
    """Validate modal form ``data`` into a backend payload.

    ``instance`` is the entity being edited, ``None`` for a new one.
    ``lookups`` resolves related entities for serializers that copy
    fields from them (payments take the appointment's patient).
    Raises ``rest_framework.serializers.ValidationError``.
    """
    if lookups is None:
        lookups = Lookups(get_client())
    serializer = resource.serializer(instance, data=data, context={'lookups': lookups})
    serializer.is_valid(raise_exception=True)
    return to_payload(dict(serializer.validated_data))


def blank_form(resource) -> dict:
    return resource.serializer.initial_state()


def form_from_entity(resource, entity: dict) -> dict:
    """State of the edit modal for an existing entity."""
    serializer_class = resource.serializer
    state = {}
    for name, field in serializer_class().fields.items():
        if field.read_only:
            continue
        if field.write_only or name in serializer_class.edit_exclude:
            state[name] = ''
            continue
        value = entity.get(name)
        if value is None and name in serializer_class.edit_aliases:
            value = entity.get(serializer_class.edit_aliases[name])
        if isinstance(field, serializers.BooleanField):
            state[name] = bool(value)
        elif value is None:
            state[name] = ''
        elif isinstance(field, serializers.DateField):
            state[name] = date_part(value) or ''
        elif isinstance(field, serializers.TimeField):
            state[name] = time_part(value) or ''
        elif isinstance(field, MedicationItemsField):
            state[name] = [{c: item.get(c) for c in ITEM_COLUMNS if item.get(c) is not None}
                           for item in value if isinstance(item, dict)]
        else:
            state[name] = value
    return state


def change_stock(client, medication_id, quantity: int, action: str) -> Any:
    """Add or remove stock; the backend applies a signed ``quantity`` delta."""
    delta = -quantity if action == 'SUBTRACT' else quantity
    result = client.put(f'/medications/{medication_id}/stock', params={'quantity': delta})
    invalidate('medications')
    logger.info('medication %s stock %s %s', medication_id, action, quantity)
    return result


def set_prescription_status(client, prescription_id, status: str) -> Any:
    return client.put(f'/prescriptions/{prescription_id}/status/{status}')


def refill_prescription(client, prescription_id) -> Any:
    return client.post(f'/prescriptions/{prescription_id}/refill')


def mark_notification_read(client, notification_id) -> Any:
    return client.put(f'/api/notifications/{notification_id}/read')
