"""
Client-side filtering of backend collections.

The backend returns whole collections; the filter bar and search box of
each screen are applied here, in the order the rows arrived.
"""
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, Iterable, Optional

from django.utils.dateparse import parse_date, parse_datetime, parse_time

ALL = 'ALL'


def date_part(value: Any) -> Optional[str]:
    """``YYYY-MM-DD`` of an ISO string, ``[y, m, d, ...]`` array or date."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        if len(value) < 3:
            return None
        try:
            return date(int(value[0]), int(value[1]), int(value[2])).isoformat()
        except (TypeError, ValueError):
            return None
    try:
        parsed = parse_date(str(value).strip()[:10])
    except ValueError:
        return None
    return parsed.isoformat() if parsed else None


def time_part(value: Any) -> Optional[str]:
    """``HH:MM`` of an ISO time/datetime string or ``[h, m, ...]`` array."""
    if value is None or value == '':
        return None
    if isinstance(value, (datetime, time)):
        return value.strftime('%H:%M')
    if isinstance(value, (list, tuple)):
        # A datetime array carries the time from index 3 on
        parts = list(value[3:5]) if len(value) >= 5 else list(value[:2])
        try:
            return f'{int(parts[0]):02d}:{int(parts[1]):02d}'
        except (IndexError, TypeError, ValueError):
            return None
    text = str(value).strip()
    if 'T' in text:
        text = text.split('T', 1)[1]
    try:
        parsed = parse_time(text)
    except ValueError:
        return None
    return parsed.strftime('%H:%M') if parsed else None


def datetime_part(value: Any) -> Optional[str]:
    """``YYYY-MM-DD HH:MM`` for timestamps, falling back to the date alone."""
    if isinstance(value, (list, tuple)) and len(value) >= 5:
        return f'{date_part(value)} {time_part(value)}'
    if isinstance(value, str) and len(value.strip()) > 10:
        try:
            parsed = parse_datetime(value.strip())
        except ValueError:
            parsed = None
        if parsed:
            return parsed.strftime('%Y-%m-%d %H:%M')
    return date_part(value)


def field_value(row: dict, field: str) -> Any:
    """``row[field]``, also trying the ``isField`` spelling of flags."""
    value = row.get(field)
    if value is None:
        value = row.get('is' + field[:1].upper() + field[1:])
    return value


def matches(row: dict, spec, value: Any) -> bool:
    """Does ``row`` pass filter ``spec`` set to ``value``?"""
    if value is None or value == '' or value == ALL:
        return True
    value = str(value).strip()
    if spec.kind == 'flag':
        expected = dict(spec.flags).get(value)
        if expected is None:
            return True
        return bool(field_value(row, spec.field)) is expected
    if spec.kind == 'date':
        found = date_part(row.get(spec.field))
        return found is None or found == value
    if spec.kind == 'date_contains':
        raw = row.get(spec.field)
        if raw is None or raw == '':
            return False
        if isinstance(raw, (list, tuple)):
            raw = date_part(raw) or ''
        return value in str(raw)
    # choice / exact
    found = row.get(spec.field)
    return found is not None and str(found) == value


def search(row: dict, term: Optional[str], fields: Iterable[str], labels: Iterable[str] = ()) -> bool:
    """Case-insensitive substring search over ``fields`` and extra ``labels``."""
    term = (term or '').strip().lower()
    if not term:
        return True
    for field in fields:
        value = row.get(field)
        if value is not None and term in str(value).lower():
            return True
    return any(term in str(label).lower() for label in labels if label)


def apply_filters(rows: list, resource, params, lookups=None) -> list:
    """Apply every filter of ``resource`` and the ``q`` search term."""
    params = params or {}
    active = [(spec, params.get(spec.param)) for spec in resource.filters]
    active = [(spec, value) for spec, value in active if value not in (None, '', ALL)]
    term = (params.get('q') or '').strip()

    result = []
    for row in rows:
        if not all(matches(row, spec, value) for spec, value in active):
            continue
        if term:
            labels = [lookups.cell(column, row) for column in resource.label_columns] if lookups else []
            if not search(row, term, resource.search_fields, labels):
                continue
        result.append(row)
    return result


def search_options(rows: list, term: Optional[str], id_field: str) -> list:
    """Picker filter: id or ``first last`` name contains ``term``."""
    term = (term or '').strip().lower()
    if not term:
        return list(rows)
    found = []
    for row in rows:
        name = f"{row.get('firstName') or ''} {row.get('lastName') or ''}".strip()
        haystack = [str(row.get(id_field) or ''), name, str(row.get('name') or '')]
        if any(term in value.lower() for value in haystack if value):
            found.append(row)
    return found
