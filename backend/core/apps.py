# core/apps.py
"""Core app configuration."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Sequences, command results and money helpers."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
    verbose_name = "Core"
