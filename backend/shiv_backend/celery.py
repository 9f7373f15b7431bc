"""
Celery application configuration.

This is the main Celery app for the Shiv Furniture backend.
It handles notification delivery and the periodic derived-document retry.

Usage:
    # Start worker
    celery -A shiv_backend worker -l INFO

    # Start beat scheduler (for periodic tasks)
    celery -A shiv_backend beat -l INFO

    # Start both (development only)
    celery -A shiv_backend worker -B -l INFO
"""
import os

from celery import Celery

# Set default Django settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "shiv_backend.settings")

app = Celery("shiv_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
