# accounts/apps.py
"""Accounts app configuration."""

from django.apps import AppConfig


class AccountsConfig(AppConfig):
    """Users and organizations (tenants)."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "accounts"
    verbose_name = "Accounts & Organizations"
