# tests/test_ops.py
"""
Tests for logging, health checks, metrics and the chart management command.
"""

import json
import logging
import sys
from datetime import date
from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import CommandError, call_command
from django.test import Client

from accounting.commands import create_manual_entry
from accounting.models import Account, JournalLine
from accounts.models import Organization
from ops.health import HealthCheck
from ops.logging_config import JsonFormatter, get_logging_config
from ops.metrics import normalize_endpoint


class TestLogging:

    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord(
            name="accounting.posting",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="journal_entry.created",
            args=(),
            exc_info=None,
        )
        record.entry_number = "000007"
        record.total = Decimal("12.50")

        payload = json.loads(JsonFormatter().format(record))

        assert payload["message"] == "journal_entry.created"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "accounting.posting"
        assert payload["extra"] == {"entry_number": "000007", "total": "12.50"}

    def test_json_formatter_includes_exception(self):
        try:
            raise ValueError("bad amount")
        except ValueError:
            record = logging.LogRecord("ops", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        payload = json.loads(JsonFormatter().format(record))

        assert "ValueError: bad amount" in payload["exception"]

    def test_config_uses_json_outside_debug(self, monkeypatch):
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        monkeypatch.delenv("LOG_LEVEL", raising=False)

        config = get_logging_config(debug=False)

        assert "json" in config["formatters"]
        assert config["loggers"]["accounting"]["level"] == "INFO"
        assert config["loggers"]["accounting"]["propagate"] is False

    def test_config_honours_env(self, monkeypatch):
        monkeypatch.setenv("LOG_FORMAT", "console")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        config = get_logging_config(debug=False)

        assert "verbose" in config["formatters"]
        assert config["loggers"][""]["level"] == "WARNING"


@pytest.mark.django_db
class TestHealth:

    def test_ledger_check_healthy(self, organization, chart):
        assert HealthCheck.check_ledger_balance()["status"] == "healthy"

    def test_ledger_check_degraded(self, actor, chart):
        entry = create_manual_entry(
            actor,
            date=date(2024, 5, 1),
            description="x",
            legs=[
                {"account_id": chart["1.1.01"].id, "side": "DEBIT", "amount": Decimal("10")},
                {"account_id": chart["3.1"].id, "side": "CREDIT", "amount": Decimal("10")},
            ],
        ).data
        JournalLine.objects.filter(entry=entry, line_no=2).update(credit=Decimal("4"))

        check = HealthCheck.check_ledger_balance()

        assert check["status"] == "degraded"
        assert check["unbalanced"] == 1

    def test_full_health(self, monkeypatch):
        monkeypatch.setattr(HealthCheck, "check_redis", staticmethod(lambda: {"status": "skipped"}))

        health = HealthCheck.get_full_health()

        assert health["status"] == "healthy"
        assert set(health["checks"]) == {"database", "redis", "ledger"}

    def test_liveness_and_readiness(self):
        client = Client()

        assert client.get("/_health/live").json() == {"status": "alive"}
        assert client.get("/_health/ready").json()["status"] == "ready"


@pytest.mark.django_db
class TestMetrics:

    def test_scrape(self, organization, chart):
        response = Client().get("/_metrics/")

        assert response.status_code == 200
        body = response.content.decode()
        assert "obra_request_duration_seconds" in body
        assert "obra_journal_entries" in body

    def test_normalize_endpoint(self):
        assert normalize_endpoint("/api/accounting/journal-entries/42/") == "/api/accounting/journal-entries/{id}/"


@pytest.mark.django_db
class TestSetupStandardChartCommand:

    def test_single_organization(self, disabled_organization):
        out = StringIO()

        call_command("setup_standard_chart", "--organization", disabled_organization.slug, "--enable", stdout=out)

        disabled_organization.refresh_from_db()
        assert Account.objects.filter(organization=disabled_organization).count() == 50
        assert disabled_organization.enable_accounting
        assert "Provisioned 1, skipped 0" in out.getvalue()

    def test_all_skips_existing_charts(self, organization, chart, disabled_organization):
        out = StringIO()

        call_command("setup_standard_chart", "--all", stdout=out)

        disabled_organization.refresh_from_db()
        assert Account.objects.filter(organization=disabled_organization).count() == 50
        assert not disabled_organization.enable_accounting
        assert "Provisioned 1, skipped 1" in out.getvalue()

    def test_dry_run_writes_nothing(self, disabled_organization):
        out = StringIO()

        call_command("setup_standard_chart", "--all", "--dry-run", stdout=out)

        assert not Account.objects.exists()
        assert "would create 50 accounts" in out.getvalue()

    def test_requires_a_target(self):
        with pytest.raises(CommandError):
            call_command("setup_standard_chart")

    def test_unknown_organization(self):
        with pytest.raises(CommandError):
            call_command("setup_standard_chart", "--organization", "nope")

    def test_inactive_organizations_are_ignored_by_all(self):
        Organization.objects.create(name="Cerrada", slug="cerrada", is_active=False)

        call_command("setup_standard_chart", "--all", stdout=StringIO())

        assert not Account.objects.exists()
