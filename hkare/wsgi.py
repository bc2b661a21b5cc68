"""WSGI entry point for the hkare console (``hkare.wsgi:application``)."""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'hkare.settings')

application = get_wsgi_application()
