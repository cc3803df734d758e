# accounting/apps.py
"""Accounting app configuration."""

from django.apps import AppConfig


class AccountingConfig(AppConfig):
    """Chart of accounts, journal and automatic posting."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounting"
    verbose_name = "Accounting"
