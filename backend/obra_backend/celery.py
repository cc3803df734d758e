"""
Celery application configuration.

Handles background retries of automatic journal postings that failed
inline (see accounting.tasks).

Usage:
    # Start worker
    celery -A obra_backend worker -l INFO
"""
import os

from celery import Celery

# Set default Django settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "obra_backend.settings")

# Create Celery app
app = Celery("obra_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
