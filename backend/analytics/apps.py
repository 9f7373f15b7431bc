# analytics/apps.py
"""Analytics app configuration."""

from django.apps import AppConfig


class AnalyticsConfig(AppConfig):
    """Auto-analytical rules, budgets and cost-center reports."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "analytics"
    verbose_name = "Analytics"
