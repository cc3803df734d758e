from django.apps import AppConfig


class OpsConfig(AppConfig):
    """Health checks, Prometheus metrics and structured logging."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "ops"
    verbose_name = "Observability"
