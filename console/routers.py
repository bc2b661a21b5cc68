"""
URL mappings for the console.

JSON endpoints live under ``api/console/``; the server-rendered screens
under ``console/``.  Trailing slashes are omitted on the API, as the
settings disable ``APPEND_SLASH``.
"""
from django.urls import include, path

from .auth_views import login_view, logout_view, me_view
from .views import actions, pages
from .views.dashboard import dashboard
from .views.health import healthz
from .views.history import audit_logs, login_history
from .views.profile import profile, profile_password
from .views.resources import (
    lookup_options, resource_collection, resource_detail, resource_form, resource_index,
)

api_patterns = [
    path('auth/login', login_view, name='login'),
    path('auth/logout', logout_view, name='logout'),
    path('auth/me', me_view, name='me'),
    path('resources', resource_index, name='resources'),
    path('dashboard', dashboard, name='dashboard'),
    path('profile', profile, name='profile'),
    path('profile/password', profile_password, name='profile-password'),
    path('audit-logs', audit_logs, name='audit-logs'),
    path('login-history', login_history, name='login-history'),
    path('options/<str:resource>', lookup_options, name='options'),
    # Fixed resource actions; ``resource`` and ``action`` feed the role check
    path('medications/<str:entity_id>/stock', actions.medication_stock, {'resource': 'medications', 'action': 'stock'}, name='medication-stock'),
    path('prescriptions/<str:entity_id>/status', actions.prescription_status, {'resource': 'prescriptions', 'action': 'status'}, name='prescription-status'),
    path('prescriptions/<str:entity_id>/refill', actions.prescription_refill, {'resource': 'prescriptions', 'action': 'refill'}, name='prescription-refill'),
    path('notifications/<str:entity_id>/read', actions.notification_read, {'resource': 'notifications', 'action': 'read'}, name='notification-read'),
    # Generic resources
    path('<str:resource>', resource_collection, name='collection'),
    path('<str:resource>/form', resource_form, name='blank-form'),
    path('<str:resource>/<str:entity_id>', resource_detail, name='detail'),
    path('<str:resource>/<str:entity_id>/form', resource_form, name='edit-form'),
]

page_patterns = [
    path('', pages.dashboard_page, name='dashboard'),
    path('login', pages.login_page, name='login'),
    path('logout', pages.logout_page, name='logout'),
    path('profile', pages.profile_page, name='profile'),
    path('history/<str:kind>', pages.history_page, name='history'),
    path('<str:resource>', pages.resource_page, name='resource'),
    path('<str:resource>/save', pages.resource_save, name='resource-save'),
    path('<str:resource>/<str:entity_id>/delete', pages.resource_delete, name='resource-delete'),
    path('<str:resource>/<str:entity_id>/<str:action>', pages.resource_action, name='resource-action'),
]

urlpatterns = [
    path('healthz', healthz, name='healthz'),
    path('api/console/', include((api_patterns, 'console-api'))),
    path('console/', include((page_patterns, 'console'))),
]
