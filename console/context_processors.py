from .services.resources import resources_for


def operator(request):
    op = getattr(request, 'operator', None)
    return {
        'operator': op,
        'nav_resources': resources_for(op.role) if op else [],
    }
