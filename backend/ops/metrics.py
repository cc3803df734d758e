"""
Prometheus metrics.

Metrics exposed at /_metrics:
- obra_journal_postings_total: automatic posting attempts by source type and outcome
- obra_journal_entries: journal entries stored per organization (collected on scrape)
- obra_request_duration_seconds: HTTP request duration histogram
- obra_active_requests: requests currently in flight
"""
import logging
import re
import time

from django.db.models import Count
from django.http import HttpResponse
from django.views import View
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest

logger = logging.getLogger(__name__)

journal_postings = Counter(
    "obra_journal_postings_total",
    "Automatic journal posting attempts",
    ["source_type", "outcome"],
)

journal_entries = Gauge(
    "obra_journal_entries",
    "Journal entries stored per organization",
    ["organization"],
)

request_duration = Histogram(
    "obra_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
)

active_requests = Gauge(
    "obra_active_requests",
    "Number of requests currently being processed",
)

_ID_SEGMENT = re.compile(r"/\d+(?=/|$)")


def record_posting(source_type: str, outcome: str) -> None:
    """outcome is one of: posted, skipped, failed."""
    journal_postings.labels(source_type=source_type, outcome=outcome).inc()


def collect_ledger_metrics() -> None:
    from accounting.models import JournalEntry

    rows = (
        JournalEntry.objects
        .values("organization__slug")
        .annotate(count=Count("id"))
    )
    for row in rows:
        journal_entries.labels(organization=row["organization__slug"]).set(row["count"])


class MetricsView(View):
    """
    Prometheus scrape endpoint.

    Should be reachable from the internal network only.
    """

    def get(self, request):
        try:
            collect_ledger_metrics()
        except Exception:
            # Scrapes still return the process metrics when the database is down.
            logger.exception("metrics.collect_failed")
        return HttpResponse(generate_latest(), content_type=CONTENT_TYPE_LATEST)


def normalize_endpoint(path: str) -> str:
    return _ID_SEGMENT.sub("/{id}", path)[:50]


def track_request_metrics(get_response):
    """
    Middleware recording request duration.

    Add to MIDDLEWARE after SecurityMiddleware:
        "ops.metrics.track_request_metrics",
    """

    def middleware(request):
        start = time.monotonic()
        active_requests.inc()
        status = 500
        try:
            response = get_response(request)
            status = response.status_code
            return response
        finally:
            active_requests.dec()
            request_duration.labels(
                method=request.method,
                endpoint=normalize_endpoint(request.path),
                status=f"{status // 100}xx",
            ).observe(time.monotonic() - start)

    return middleware
