"""WSGI entry point for the Obra backend."""
import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "obra_backend.settings")

application = get_wsgi_application()
