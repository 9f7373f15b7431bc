# masterdata/apps.py
"""Master Data app configuration."""

from django.apps import AppConfig


class MasterdataConfig(AppConfig):
    """Contacts, products and cost centers."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "masterdata"
    verbose_name = "Master Data"
