"""
URL configuration for the hkare operations console.

The console app provides both the JSON API and the server-rendered
screens.  OpenAPI documentation is exposed at ``/swagger/`` and
``/redoc/``, Prometheus metrics at ``/metrics``.
"""
from django.urls import include, path
from django.views.generic import RedirectView

from rest_framework import permissions
from drf_yasg.views import get_schema_view
from drf_yasg import openapi

# Shared by the swagger and redoc views below
api_info = openapi.Info(
    title="HKare Console API",
    default_version='v1',
    description="Administrative console over the HKare hospital backend.",
)

schema_view = get_schema_view(
    api_info,
    public=True,
    permission_classes=(permissions.AllowAny,),
)

urlpatterns = [
    path('', RedirectView.as_view(pattern_name='console:dashboard', permanent=False)),
    path('', include('console.routers')),
    path('', include('django_prometheus.urls')),
    # API docs
    path('swagger/', schema_view.with_ui('swagger', cache_timeout=0), name='schema-swagger-ui'),
    path('redoc/', schema_view.with_ui('redoc', cache_timeout=0), name='schema-redoc'),
]
