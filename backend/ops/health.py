"""
Health check endpoints.

Endpoints:
- /_health/live    - liveness probe (process is up, no dependencies checked)
- /_health/ready   - readiness probe (default database reachable)
- /_health/full    - database, broker and ledger balance report
"""
import logging
import time
from typing import Any, Dict

from django.conf import settings
from django.db import connections
from django.http import JsonResponse
from django.views import View

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.monotonic() - start) * 1000, 2)


class HealthCheck:

    @staticmethod
    def check_database(alias: str = "default") -> Dict[str, Any]:
        start = time.monotonic()
        try:
            with connections[alias].cursor() as cursor:
                cursor.execute("SELECT 1")
                cursor.fetchone()
        except Exception as e:
            return {"status": "unhealthy", "alias": alias, "error": str(e), "duration_ms": _elapsed_ms(start)}
        return {"status": "healthy", "alias": alias, "duration_ms": _elapsed_ms(start)}

    @staticmethod
    def check_redis() -> Dict[str, Any]:
        """Ping the Celery broker."""
        broker_url = getattr(settings, "CELERY_BROKER_URL", None)
        if not broker_url or not broker_url.startswith("redis"):
            return {"status": "skipped", "reason": "Redis broker not configured"}

        import redis

        start = time.monotonic()
        try:
            redis.from_url(broker_url, socket_connect_timeout=2).ping()
        except redis.RedisError as e:
            return {"status": "unhealthy", "error": str(e), "duration_ms": _elapsed_ms(start)}
        return {"status": "healthy", "duration_ms": _elapsed_ms(start)}

    @staticmethod
    def check_ledger_balance() -> Dict[str, Any]:
        """
        Every stored journal entry must balance within the configured tolerance.

        An unbalanced entry means something wrote journal lines outside the
        posting commands, so this reports "degraded" rather than "unhealthy".
        """
        from accounting.reports import unbalanced_entries

        try:
            offenders = unbalanced_entries()
        except Exception as e:
            logger.exception("health.ledger_check_failed")
            return {"status": "error", "error": str(e)}

        if not offenders:
            return {"status": "healthy", "unbalanced": 0}
        return {
            "status": "degraded",
            "unbalanced": len(offenders),
            "entries": offenders[:10],
        }

    @staticmethod
    def get_full_health() -> Dict[str, Any]:
        checks = {
            "database": HealthCheck.check_database(),
            "redis": HealthCheck.check_redis(),
            "ledger": HealthCheck.check_ledger_balance(),
        }

        statuses = {c["status"] for c in checks.values()}
        if statuses <= {"healthy", "skipped"}:
            overall = "healthy"
        elif "unhealthy" in statuses:
            overall = "unhealthy"
        else:
            overall = "degraded"

        return {
            "status": overall,
            "checks": checks,
            "version": getattr(settings, "VERSION", "unknown"),
            "environment": "development" if settings.DEBUG else "production",
        }


class LivenessView(View):

    def get(self, request):
        return JsonResponse({"status": "alive"})


class ReadinessView(View):

    def get(self, request):
        db_check = HealthCheck.check_database()
        if db_check["status"] == "healthy":
            return JsonResponse({"status": "ready", "database": db_check})
        return JsonResponse({"status": "not_ready", "database": db_check}, status=503)


class FullHealthView(View):
    """Should be protected at network level in production."""

    def get(self, request):
        health = HealthCheck.get_full_health()
        return JsonResponse(health, status=200 if health["status"] == "healthy" else 503)
