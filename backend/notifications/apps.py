# notifications/apps.py
"""Notifications app configuration."""

from django.apps import AppConfig


class NotificationsConfig(AppConfig):
    """E-mail delivery to counterparties."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "notifications"
    verbose_name = "Notifications"
