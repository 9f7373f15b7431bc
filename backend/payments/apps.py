# payments/apps.py
"""Payments app configuration."""

from django.apps import AppConfig


class PaymentsConfig(AppConfig):
    """Payment ledger."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "payments"
    verbose_name = "Payments"
