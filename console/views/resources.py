"""
Generic JSON endpoints for every registered resource.

The role checks live in :class:`console.permissions.ResourceAccess`,
which reads the ``resource`` URL argument.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from ..permissions import IsOperator, ResourceAccess
from ..services.backend import get_client
from ..services.entities import (
    blank_form, build_payload, create_entity, delete_entity, form_from_entity,
    get_entity, list_entities, update_entity,
)
from ..services.filtering import apply_filters
from ..services.lookups import LOOKUP_KEYS, Lookups
from ..services.resources import UnknownResource, get_resource, resources_for


def describe(resource, role) -> dict:
    return {
        'key': resource.key,
        'title': resource.title,
        'singular': resource.singular,
        'idField': resource.id_field,
        'canWrite': resource.can_write(role),
        'canCreate': resource.can_write(role) and resource.can_create,
        'canUpdate': resource.can_write(role) and resource.can_update,
        'canDelete': resource.can_write(role) and resource.can_delete,
        'columns': [{'key': c.key, 'label': c.label, 'kind': c.kind} for c in resource.columns],
        'filters': [{
            'param': f.param, 'label': f.label, 'kind': f.kind, 'lookup': f.lookup,
            'choices': [{'value': v, 'label': l} for v, l in f.choices],
        } for f in resource.filters],
    }


def _not_allowed(resource, action):
    return Response({'ok': False, 'error': {'code': 'not_allowed', 'message': f'{resource.title} cannot be {action} here.'}},
                    status=status.HTTP_405_METHOD_NOT_ALLOWED)


def form_options(resource, lookups) -> dict:
    """Select options for every lookup-backed field of ``resource``'s form."""
    options = {}
    for name, field in resource.serializer().fields.items():
        lookup = (field.style or {}).get('lookup')
        if lookup:
            options[name] = lookups.options(lookup)
    return options


@api_view(['GET'])
@permission_classes([IsOperator])
def resource_index(request):
    """Screens available to the signed-in operator."""
    role = request.user.role
    return Response({'ok': True, 'data': [describe(r, role) for r in resources_for(role)]})


@api_view(['GET', 'POST'])
@permission_classes([IsOperator, ResourceAccess])
def resource_collection(request, resource):
    """List with filters (``?q=``, filter params) or create."""
    res = get_resource(resource)
    client = get_client(request.user)
    if request.method == 'POST':
        if not res.can_create:
            return _not_allowed(res, 'created')
        payload = build_payload(res, request.data, lookups=Lookups(client))
        created = create_entity(client, res, payload)
        return Response({'ok': True, 'data': created}, status=status.HTTP_201_CREATED)

    lookups = Lookups(client)
    rows = apply_filters(list_entities(client, res, request.user), res, request.query_params, lookups)
    labels = [{c.key: lookups.cell(c, row) for c in res.label_columns} for row in rows] if res.label_columns else []
    return Response({'ok': True, 'data': rows, 'labels': labels, 'total': len(rows)})


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsOperator, ResourceAccess])
def resource_detail(request, resource, entity_id):
    res = get_resource(resource)
    client = get_client(request.user)
    if request.method == 'GET':
        return Response({'ok': True, 'data': get_entity(client, res, entity_id)})
    if request.method == 'PUT':
        if not res.can_update:
            return _not_allowed(res, 'edited')
        payload = build_payload(res, request.data, instance={res.id_field: entity_id}, lookups=Lookups(client))
        return Response({'ok': True, 'data': update_entity(client, res, entity_id, payload)})
    if not res.can_delete:
        return _not_allowed(res, 'deleted')
    delete_entity(client, res, entity_id)
    return Response({'ok': True})


@api_view(['GET'])
@permission_classes([IsOperator, ResourceAccess])
def resource_form(request, resource, entity_id=None):
    """Initial state of the add (no id) or edit modal, with select options."""
    res = get_resource(resource)
    client = get_client(request.user)
    if entity_id is None:
        state = blank_form(res)
    else:
        state = form_from_entity(res, get_entity(client, res, entity_id) or {})
    return Response({'ok': True, 'data': state, 'options': form_options(res, Lookups(client))})


@api_view(['GET'])
@permission_classes([IsOperator])
def lookup_options(request, resource):
    """Picker options of a related collection, filtered by ``?q=``."""
    if resource not in LOOKUP_KEYS:
        raise UnknownResource(resource)
    lookups = Lookups(get_client(request.user))
    return Response({'ok': True, 'data': lookups.options(resource, request.query_params.get('q'))})
