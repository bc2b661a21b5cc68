"""
Describe serializer fields as HTML inputs for the modal forms.
"""
from __future__ import annotations

import re

from rest_framework import serializers

from .serializers.common import MedicationItemsField, format_item_lines


def humanize(name: str) -> str:
    """``firstName`` -> ``First Name``"""
    words = re.sub(r'(?<=[a-z0-9])(?=[A-Z])', ' ', name).replace('_', ' ').split()
    return ' '.join(w[:1].upper() + w[1:] for w in words)


def input_type(field) -> str:
    style = getattr(field, 'style', {}) or {}
    if style.get('lookup'):
        return 'select'
    if isinstance(field, MedicationItemsField) or style.get('base_template') == 'textarea.html':
        return 'textarea'
    if style.get('input_type') == 'password':
        return 'password'
    if isinstance(field, serializers.BooleanField):
        return 'checkbox'
    if isinstance(field, serializers.ChoiceField):
        return 'select'
    if isinstance(field, serializers.DateField):
        return 'date'
    if isinstance(field, serializers.TimeField):
        return 'time'
    if isinstance(field, (serializers.IntegerField, serializers.DecimalField)):
        return 'number'
    if isinstance(field, serializers.EmailField):
        return 'email'
    return 'text'


def _error_text(errors, name) -> str:
    found = (errors or {}).get(name)
    if not found:
        return ''
    if isinstance(found, (list, tuple)):
        return ' '.join(str(e) for e in found if not isinstance(e, dict)) or 'Check the medication lines.'
    return str(found)


def form_fields(resource, state: dict, errors=None, lookups=None) -> list[dict]:
    """Input descriptors for ``resource``'s modal, filled from ``state``."""
    fields = []
    for name, field in resource.serializer().fields.items():
        if field.read_only:
            continue
        kind = input_type(field)
        value = state.get(name, '')
        if isinstance(field, MedicationItemsField) and isinstance(value, list):
            value = format_item_lines(value)
        elif kind == 'select' and value is not None:
            value = str(value)
        elif kind == 'checkbox':
            value = value is True or str(value).lower() in ('on', 'true', '1')
        choices = []
        lookup = (field.style or {}).get('lookup')
        if lookup and lookups is not None:
            choices = [(str(o['id']), o['label']) for o in lookups.options(lookup)]
        elif isinstance(field, serializers.ChoiceField):
            choices = [(str(k), humanize(str(v).lower()) if str(v).isupper() else str(v))
                       for k, v in field.choices.items()]
        fields.append({
            'name': name,
            'label': field.label or humanize(name),
            'input': kind,
            'value': '' if value is None else value,
            'choices': choices,
            'required': field.required and not isinstance(field, serializers.BooleanField),
            'help': 'One line per medication: name | dosage | frequency | instructions | quantity | duration'
                    if isinstance(field, MedicationItemsField) else (field.help_text or ''),
            'error': _error_text(errors, name),
        })
    return fields
