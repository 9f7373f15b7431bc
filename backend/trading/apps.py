# trading/apps.py
"""Trading app configuration."""

from django.apps import AppConfig


class TradingConfig(AppConfig):
    """Sales/purchase orders, invoices and vendor bills."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "trading"
    verbose_name = "Orders & Documents"
