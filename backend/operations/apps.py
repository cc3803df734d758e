# operations/apps.py
"""Operations app configuration."""

from django.apps import AppConfig


class OperationsConfig(AppConfig):
    """Bills, payments, treasury and payroll."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "operations"
    verbose_name = "Operations"
