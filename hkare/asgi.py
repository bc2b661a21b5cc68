"""
ASGI config for the hkare console project.

The console only serves plain HTTP; WebSocket routing is not wired.
"""
import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hkare.settings")

from django.core.asgi import get_asgi_application  # noqa: E402

application = get_asgi_application()
