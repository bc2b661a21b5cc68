"""
Shared pieces for the modal form serializers.

Every screen posts the full state of its modal form.  Browsers send
empty strings for untouched inputs, so the base serializer treats an
empty value for a non-text field as "not provided".
"""
from __future__ import annotations

import bleach
from rest_framework import serializers

GENDERS = ['MALE', 'FEMALE', 'OTHER']


def clean_text(value):
    if value is None:
        return value
    return bleach.clean(str(value).strip(), tags=[], strip=True)


class CleanCharField(serializers.CharField):
    """A free-text field with markup stripped."""

    def __init__(self, **kwargs):
        kwargs.setdefault('required', False)
        kwargs.setdefault('allow_blank', True)
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        return clean_text(super().to_internal_value(data))


class FormSerializer(serializers.Serializer):
    """Base class for payload serializers.

    Subclasses may set ``edit_exclude`` to fields that are never
    prefilled from an existing entity (passwords), and ``edit_aliases``
    to read a form field from a differently named entity attribute.
    """
    edit_exclude: tuple = ()
    edit_aliases: dict = {}

    def to_internal_value(self, data):
        if hasattr(data, 'dict'):
            data = data.dict()
        cleaned = {}
        for key, value in dict(data).items():
            field = self.fields.get(key)
            if field is None:
                continue
            if value in ('', None) and not isinstance(field, serializers.CharField):
                continue
            cleaned[key] = value
        return super().to_internal_value(cleaned)

    @classmethod
    def initial_state(cls) -> dict:
        """Initial values of the blank modal form."""
        state = {}
        for name, field in cls().fields.items():
            if field.read_only:
                continue
            initial = field.initial
            if callable(initial):
                initial = initial()
            if initial is None or initial is serializers.empty:
                initial = False if isinstance(field, serializers.BooleanField) else ''
            if isinstance(field, serializers.DateField) and initial:
                initial = initial.isoformat()
            state[name] = initial
        return state


class MedicationItemSerializer(serializers.Serializer):
    medicationName = CleanCharField(required=True, allow_blank=False, max_length=200)
    dosage = CleanCharField(max_length=100)
    frequency = CleanCharField(max_length=100)
    instructions = CleanCharField(max_length=500)
    quantity = serializers.IntegerField(min_value=1, default=1)
    duration = CleanCharField(max_length=100)


ITEM_COLUMNS = ['medicationName', 'dosage', 'frequency', 'instructions', 'quantity', 'duration']


def parse_item_lines(text: str) -> list[dict]:
    """Parse ``name | dosage | frequency | instructions | quantity | duration`` lines."""
    items = []
    for line in text.splitlines():
        if not line.strip():
            continue
        parts = [p.strip() for p in line.split('|')]
        item = {}
        for column, value in zip(ITEM_COLUMNS, parts):
            if value:
                item[column] = value
        items.append(item)
    return items


def format_item_lines(items) -> str:
    lines = []
    for item in items or []:
        parts = [str(item.get(column) if item.get(column) is not None else '') for column in ITEM_COLUMNS]
        lines.append(' | '.join(parts).rstrip(' |'))
    return '\n'.join(lines)


class MedicationItemsField(serializers.ListField):
    """Prescription medication lines from JSON objects or text lines."""

    def __init__(self, **kwargs):
        kwargs.setdefault('child', MedicationItemSerializer())
        kwargs.setdefault('style', {'base_template': 'textarea.html', 'rows': 4})
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            data = parse_item_lines(data)
        return super().to_internal_value(data)
