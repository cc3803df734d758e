# tests/test_tasks.py
"""
Tests for the posting retry task and the hook that queues it.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.db import DatabaseError

from accounting.commands import CommandResult
from accounting.models import JournalEntry
from accounting.tasks import retry_source_entry
from operations.commands import record_transaction
from operations.models import Transaction


def make_transaction(organization):
    return Transaction.objects.create(
        organization=organization,
        type=Transaction.Type.INCOME,
        amount=Decimal("75"),
        date=date(2024, 5, 3),
    )


@pytest.mark.django_db
class TestRetrySourceEntry:

    def test_posts_missing_entry(self, organization, chart):
        txn = make_transaction(organization)

        result = retry_source_entry("TRANSACTION", str(txn.id))

        assert result == {"status": "posted", "entry_number": "000001"}
        assert JournalEntry.objects.filter(source_id=str(txn.id)).count() == 1

    def test_existing_entry_is_not_duplicated(self, organization, chart):
        txn = make_transaction(organization)
        retry_source_entry("TRANSACTION", str(txn.id))

        result = retry_source_entry("TRANSACTION", str(txn.id))

        assert result == {"status": "exists"}
        assert JournalEntry.objects.count() == 1

    def test_skipped_source(self, db):
        result = retry_source_entry("BILL", "999")

        assert result["status"] == "skipped"

    def test_permanent_failure_is_not_retried(self, organization):
        txn = make_transaction(organization)

        result = retry_source_entry("TRANSACTION", str(txn.id))

        assert result["status"] == "failed"
        assert "cash" in result["error"]

    def test_retryable_failure_raises_for_retry(self, organization, chart, monkeypatch):
        txn = make_transaction(organization)
        monkeypatch.setattr(
            "accounting.posting.post_source_entry",
            lambda source_type, source_id: CommandResult.fail("deadlock detected", retryable=True),
        )

        with pytest.raises(DatabaseError):
            retry_source_entry("TRANSACTION", str(txn.id))

    def test_runs_eagerly_through_delay(self, organization, chart):
        txn = make_transaction(organization)

        async_result = retry_source_entry.delay("TRANSACTION", str(txn.id))

        assert async_result.get()["status"] == "posted"


@pytest.mark.django_db
class TestRetryHook:

    def test_retryable_failure_is_queued(self, actor, chart, settings, monkeypatch):
        settings.ACCOUNTING_RETRY_ASYNC = True
        queued = []
        monkeypatch.setattr(
            "operations.commands.post_source_entry",
            lambda source_type, source_id: CommandResult.fail("timeout", retryable=True),
        )
        monkeypatch.setattr(retry_source_entry, "delay", lambda *args: queued.append(args))

        result = record_transaction(actor, type="INCOME", amount="10", date=date(2024, 5, 3))

        assert result.success
        assert result.data["journal_entry"] is None
        assert queued == [("TRANSACTION", str(result.data["transaction"].id))]

    def test_nothing_queued_when_disabled(self, actor, chart, settings, monkeypatch):
        settings.ACCOUNTING_RETRY_ASYNC = False
        queued = []
        monkeypatch.setattr(
            "operations.commands.post_source_entry",
            lambda source_type, source_id: CommandResult.fail("timeout", retryable=True),
        )
        monkeypatch.setattr(retry_source_entry, "delay", lambda *args: queued.append(args))

        record_transaction(actor, type="INCOME", amount="10", date=date(2024, 5, 3))

        assert queued == []

    def test_permanent_failure_is_not_queued(self, actor, settings, monkeypatch):
        settings.ACCOUNTING_RETRY_ASYNC = True
        queued = []
        monkeypatch.setattr(retry_source_entry, "delay", lambda *args: queued.append(args))

        # No chart: resolution failure, not retryable.
        record_transaction(actor, type="INCOME", amount="10", date=date(2024, 5, 3))

        assert queued == []
