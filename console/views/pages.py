"""
Server-rendered console screens.

Each resource screen is a filter bar, a table and at most one modal,
selected by query parameters: ``?modal=add``, ``?modal=edit&id=``,
``?modal=view&id=`` and ``?modal=delete&id=``.  Writes are POSTed to
dedicated handlers which redirect back with a flash message.
"""
from __future__ import annotations

import logging
from functools import wraps
from urllib.parse import urlencode

from django.contrib import messages
from django.core.exceptions import PermissionDenied
from django.http import Http404
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_http_methods, require_POST
from rest_framework import serializers

from ..auth_views import client_ip
from ..formfields import form_fields, humanize
from ..middleware import flash_expired
from ..operators import DOCTOR, STAFF, clear_operator, save_operator, store_operator
from ..serializers.auth import LoginSerializer
from ..serializers.history import AuditLogQuerySerializer, LoginHistoryQuerySerializer
from ..serializers.medications import STOCK_ACTIONS, StockUpdateSerializer
from ..serializers.prescriptions import PRESCRIPTION_STATUSES, PrescriptionStatusSerializer
from ..serializers.profile import PasswordChangeSerializer, ProfileSerializer
from ..services import history
from ..services.auth import LoginFailed, login
from ..services.backend import BackendError, get_client
from ..services.dashboard import is_low_stock, summary
from ..services.entities import (
    blank_form, build_payload, change_stock, create_entity, delete_entity, form_from_entity,
    get_entity, list_entities, mark_notification_read, refill_prescription,
    set_prescription_status, update_entity,
)
from ..services.filtering import apply_filters
from ..services.lookups import Lookups
from ..services.profile import ProfileError, change_password, profile_state, update_profile
from ..services.resources import UnknownResource, get_resource

logger = logging.getLogger(__name__)

HISTORY_SCREENS = {
    'audit-logs': ('Audit Logs', AuditLogQuerySerializer, history.audit_logs, history.AUDIT_COLUMNS),
    'login-history': ('Login History', LoginHistoryQuerySerializer, history.login_history, history.LOGIN_COLUMNS),
}


def operator_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if getattr(request, 'operator', None) is None:
            flash_expired(request)
            login_url = reverse('console:login')
            return redirect(f"{login_url}?{urlencode({'next': request.get_full_path()})}")
        return view(request, *args, **kwargs)
    return wrapper


def _screen(request, key, *, write=False):
    try:
        resource = get_resource(key)
    except UnknownResource:
        raise Http404(f'No screen named {key}')
    role = request.operator.role
    if not (resource.can_write(role) if write else resource.can_read(role)):
        raise PermissionDenied
    return resource


def _screen_url(resource, **params) -> str:
    url = reverse('console:resource', args=[resource.key])
    params = {k: v for k, v in params.items() if v not in (None, '')}
    return f'{url}?{urlencode(params)}' if params else url


def _messages_from(detail) -> list[str]:
    if isinstance(detail, dict):
        found = []
        for key, value in detail.items():
            for text in _messages_from(value):
                found.append(text if key == 'non_field_errors' else f'{humanize(key)}: {text}')
        return found
    if isinstance(detail, (list, tuple)):
        return [text for item in detail for text in _messages_from(item)]
    return [str(detail)]


# ---------------------------------------------------------------------
# Login / logout
# ---------------------------------------------------------------------
@require_http_methods(['GET', 'POST'])
def login_page(request):
    if getattr(request, 'operator', None) is not None:
        return redirect('console:dashboard')
    flash_expired(request)
    next_url = request.POST.get('next') or request.GET.get('next') or ''
    if not url_has_allowed_host_and_scheme(next_url, allowed_hosts={request.get_host()}):
        next_url = ''
    form = {'identifier': '', 'portal': STAFF}
    error = None
    if request.method == 'POST':
        form = {'identifier': request.POST.get('identifier', ''), 'portal': request.POST.get('portal', STAFF)}
        s = LoginSerializer(data=request.POST)
        if not s.is_valid():
            error = ' '.join(_messages_from(s.errors))
        else:
            vd = s.validated_data
            try:
                operator = login(
                    get_client(), vd['identifier'], vd['password'], vd['portal'],
                    ip=client_ip(request), user_agent=request.META.get('HTTP_USER_AGENT', ''),
                )
            except LoginFailed as exc:
                error = exc.message
            else:
                store_operator(request, operator)
                messages.success(request, f'Welcome, {operator.display_name}.')
                return redirect(next_url or 'console:dashboard')
    context = {'form': form, 'error': error, 'next': next_url, 'portals': [(STAFF, 'Staff / Admin'), (DOCTOR, 'Doctor')]}
    return render(request, 'console/login.html', context, status=400 if error else 200)


@require_POST
def logout_page(request):
    clear_operator(request)
    messages.info(request, 'You have been signed out.')
    return redirect('console:login')


# ---------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------
@operator_required
def dashboard_page(request):
    operator = request.operator
    data = summary(get_client(operator), operator.role)
    return render(request, 'console/dashboard.html', {'summary': data})


# ---------------------------------------------------------------------
# Resource screens
# ---------------------------------------------------------------------
def _table(resource, rows, lookups) -> list[dict]:
    table = []
    for row in rows:
        table.append({
            'id': resource.entity_id(row),
            'cells': [{'kind': c.kind, 'text': lookups.cell(c, row)} for c in resource.columns],
            'low_stock': resource.key == 'medications' and is_low_stock(row),
            'unread': resource.key == 'notifications' and not (row.get('read') or row.get('isRead')),
        })
    return table


def _filter_bar(resource, params, lookups) -> list[dict]:
    bar = []
    for spec in resource.filters:
        choices = list(spec.choices)
        if spec.lookup:
            choices = [(str(o['id']), o['label']) for o in lookups.options(spec.lookup)]
        bar.append({'param': spec.param, 'label': spec.label, 'kind': spec.kind,
                    'choices': choices, 'value': params.get(spec.param, '')})
    return bar


def _details(resource, entity, lookups) -> list[tuple]:
    labelled = {c.key: (c.label, lookups.cell(c, entity)) for c in resource.columns}
    details = list(labelled.values())
    for key, value in entity.items():
        if key in labelled or isinstance(value, (dict, list)) or key.lower().endswith('password'):
            continue
        details.append((humanize(key), '' if value is None else value))
    return details


def _render_screen(request, resource, *, modal=None, entity_id=None, state=None, errors=None, status=200):
    operator = request.operator
    client = get_client(operator)
    lookups = Lookups(client)
    role = operator.role
    can_write = resource.can_write(role)
    context = {
        'resource': resource,
        'can_create': can_write and resource.can_create,
        'can_update': can_write and resource.can_update,
        'can_delete': can_write and resource.can_delete,
        'can_write': can_write,
        'can_act': {action: resource.can_act(role, action) for key, action in ACTIONS if key == resource.key},
        'columns': resource.columns,
        'filters': _filter_bar(resource, request.GET, lookups),
        'q': request.GET.get('q', ''),
        'modal': modal,
        'entity_id': entity_id,
        'load_error': None,
    }
    try:
        rows = apply_filters(list_entities(client, resource, operator), resource, request.GET, lookups)
    except BackendError as exc:
        rows = []
        context['load_error'] = exc.message
        status = 502
    context['rows'] = _table(resource, rows, lookups)
    context['total'] = len(rows)

    if modal in ('add', 'edit'):
        if not (context['can_create'] if modal == 'add' else context['can_update']):
            raise PermissionDenied
        if state is None:
            state = blank_form(resource) if modal == 'add' else form_from_entity(resource, get_entity(client, resource, entity_id) or {})
        context['fields'] = form_fields(resource, state, errors, lookups)
        context['errors'] = _messages_from(errors.get('non_field_errors', [])) if errors else []
    elif modal in ('view', 'delete'):
        if modal == 'delete' and not context['can_delete']:
            raise PermissionDenied
        entity = get_entity(client, resource, entity_id) or {}
        context['details'] = _details(resource, entity, lookups)
        context['entity'] = entity
        context['stock_actions'] = STOCK_ACTIONS
        context['prescription_statuses'] = PRESCRIPTION_STATUSES
    return render(request, 'console/resource.html', context, status=status)


@operator_required
def resource_page(request, resource):
    res = _screen(request, resource)
    modal = request.GET.get('modal') or None
    entity_id = request.GET.get('id') or None
    if modal not in (None, 'add', 'edit', 'view', 'delete') or (modal not in (None, 'add') and not entity_id):
        return redirect(_screen_url(res))
    try:
        return _render_screen(request, res, modal=modal, entity_id=entity_id)
    except BackendError as exc:
        # The table loaded but the modal's entity did not
        messages.error(request, f'Could not load {res.singular.lower()} {entity_id}: {exc.message}')
        return redirect(_screen_url(res))


@operator_required
@require_POST
def resource_save(request, resource):
    res = _screen(request, resource, write=True)
    entity_id = request.POST.get('id') or None
    if not (res.can_update if entity_id else res.can_create):
        raise PermissionDenied
    client = get_client(request.operator)
    try:
        if entity_id:
            payload = build_payload(res, request.POST, instance={res.id_field: entity_id}, lookups=Lookups(client))
            update_entity(client, res, entity_id, payload)
        else:
            payload = build_payload(res, request.POST, lookups=Lookups(client))
            create_entity(client, res, payload)
    except serializers.ValidationError as exc:
        errors = exc.detail if isinstance(exc.detail, dict) else {'non_field_errors': exc.detail}
        return _render_screen(request, res, modal='edit' if entity_id else 'add', entity_id=entity_id,
                              state=request.POST.dict(), errors=errors, status=400)
    except BackendError as exc:
        messages.error(request, f'Failed to save {res.singular.lower()}: {exc.message}')
        return redirect(_screen_url(res))
    messages.success(request, f"{res.singular} {'updated' if entity_id else 'added'} successfully!")
    return redirect(_screen_url(res))


@operator_required
@require_POST
def resource_delete(request, resource, entity_id):
    res = _screen(request, resource, write=True)
    if not res.can_delete:
        raise PermissionDenied
    try:
        delete_entity(get_client(request.operator), res, entity_id)
    except BackendError as exc:
        messages.error(request, f'Failed to delete {res.singular.lower()}: {exc.message}')
    else:
        messages.success(request, f'{res.singular} deleted successfully!')
    return redirect(_screen_url(res))


def _stock(client, entity_id, data):
    s = StockUpdateSerializer(data=data)
    s.is_valid(raise_exception=True)
    change_stock(client, entity_id, s.validated_data['quantity'], s.validated_data['action'])
    return 'Stock updated successfully!'


def _status(client, entity_id, data):
    s = PrescriptionStatusSerializer(data=data)
    s.is_valid(raise_exception=True)
    set_prescription_status(client, entity_id, s.validated_data['status'])
    return 'Prescription status updated successfully!'


def _refill(client, entity_id, data):
    refill_prescription(client, entity_id)
    return 'Prescription refilled successfully!'


def _read(client, entity_id, data):
    mark_notification_read(client, entity_id)
    return 'Notification marked as read.'


ACTIONS = {
    ('medications', 'stock'): _stock,
    ('prescriptions', 'status'): _status,
    ('prescriptions', 'refill'): _refill,
    ('notifications', 'read'): _read,
}


@operator_required
@require_POST
def resource_action(request, resource, entity_id, action):
    handler = ACTIONS.get((resource, action))
    if handler is None:
        raise Http404('Unknown action')
    res = _screen(request, resource)
    if not res.can_act(request.operator.role, action):
        raise PermissionDenied
    try:
        messages.success(request, handler(get_client(request.operator), entity_id, request.POST))
    except serializers.ValidationError as exc:
        for text in _messages_from(exc.detail):
            messages.error(request, text)
    except BackendError as exc:
        messages.error(request, exc.message)
    return redirect(_screen_url(res, modal='view', id=entity_id))


# ---------------------------------------------------------------------
# History
# ---------------------------------------------------------------------
@operator_required
def history_page(request, kind):
    if kind not in HISTORY_SCREENS:
        raise Http404
    if not request.operator.is_admin:
        raise PermissionDenied
    title, query_serializer, fetch, columns = HISTORY_SCREENS[kind]
    s = query_serializer(data=request.GET)
    if s.is_valid():
        query = s.validated_data
    else:
        for text in _messages_from(s.errors):
            messages.error(request, text)
        query = {'filter': 'all'}
    client = get_client(request.operator)
    lookups = Lookups(client)
    load_error, rows, status = None, [], 200
    try:
        rows = fetch(client, query)
    except BackendError as exc:
        load_error, status = exc.message, 502
    table = [[{'kind': c.kind, 'text': lookups.cell(c, row)} for c in columns] for row in rows]
    context = {
        'kind': kind, 'title': title, 'columns': columns, 'rows': table, 'total': len(rows),
        'modes': query_serializer().fields['filter'].choices, 'params': request.GET, 'load_error': load_error,
    }
    return render(request, 'console/history.html', context, status=status)


# ---------------------------------------------------------------------
# Profile
# ---------------------------------------------------------------------
@operator_required
@require_http_methods(['GET', 'POST'])
def profile_page(request):
    operator = request.operator
    errors, status = [], 200
    state = profile_state(operator)
    if request.method == 'POST':
        client = get_client(operator)
        if request.POST.get('form') == 'password':
            s = PasswordChangeSerializer(data=request.POST)
            if s.is_valid():
                vd = s.validated_data
                try:
                    change_password(client, operator, vd['currentPassword'], vd['newPassword'])
                except ProfileError as exc:
                    errors = [exc.message]
                except BackendError as exc:
                    errors = [f'Failed to update password: {exc.message}']
                else:
                    messages.success(request, 'Password updated successfully!')
                    return redirect('console:profile')
            else:
                errors = _messages_from(s.errors)
        else:
            s = ProfileSerializer(data=request.POST)
            state = {k: request.POST.get(k, v) for k, v in state.items()}
            if s.is_valid():
                try:
                    update_profile(client, operator, dict(s.validated_data))
                except BackendError as exc:
                    errors = [f'Failed to update profile: {exc.message}']
                else:
                    save_operator(request, operator)
                    messages.success(request, 'Profile updated successfully!')
                    return redirect('console:profile')
            else:
                errors = _messages_from(s.errors)
        status = 400
    return render(request, 'console/profile.html', {'state': state, 'errors': errors}, status=status)
