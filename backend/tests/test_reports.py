# tests/test_reports.py
"""
Tests for the financial reports.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.utils import timezone

from accounting import reports
from accounting.aggregates import EntryDraft
from accounting.commands import write_journal_entry
from accounting.models import JournalEntry, JournalLine


def post(organization, chart, when, *legs):
    """legs: (code, "D" | "C", amount)"""
    draft = EntryDraft(
        organization=organization,
        date=when,
        description="test",
        source_type=JournalEntry.SourceType.MANUAL,
        is_automatic=False,
    )
    for code, side, amount in legs:
        (draft.debit if side == "D" else draft.credit)(chart[code], amount)
    return write_journal_entry(draft)


@pytest.fixture
def ledger(organization, chart):
    """
    Capital 10000, a 3000 sale on credit, 1200 of materials paid in cash,
    half the receivable collected. One entry in 2023 and one in 2025.
    """
    post(organization, chart, date(2023, 12, 20), ("1.1.01", "D", "500"), ("3.1", "C", "500"))
    post(organization, chart, date(2024, 1, 5), ("1.1.01", "D", "10000"), ("3.1", "C", "10000"))
    post(organization, chart, date(2024, 3, 1), ("1.1.03", "D", "3000"), ("4.1.01", "C", "3000"))
    post(organization, chart, date(2024, 3, 10), ("5.1.01", "D", "1200"), ("1.1.01", "C", "1200"))
    post(organization, chart, date(2024, 4, 2), ("1.1.01", "D", "1500"), ("1.1.03", "C", "1500"))
    post(organization, chart, date(2025, 2, 1), ("5.2.03", "D", "80"), ("1.1.01", "C", "80"))
    return chart


@pytest.mark.django_db
class TestTrialBalance:

    def test_period_movements(self, organization, ledger):
        report = reports.trial_balance(organization, date(2024, 1, 1), date(2024, 12, 31))

        rows = {row["code"]: row for row in report["accounts"]}
        assert list(rows) == ["1.1.01", "1.1.03", "3.1", "4.1.01", "5.1.01"]
        assert rows["1.1.01"]["debits"] == Decimal("11500.00")
        assert rows["1.1.01"]["credits"] == Decimal("1200.00")
        assert rows["1.1.01"]["balance"] == Decimal("10300.00")
        assert rows["4.1.01"]["balance"] == Decimal("-3000.00")
        assert report["totals"]["debits"] == report["totals"]["credits"] == Decimal("15700.00")

    def test_default_period_is_current_year(self, organization, chart):
        today = timezone.localdate()
        post(organization, chart, today, ("1.1.01", "D", "10"), ("3.1", "C", "10"))

        report = reports.trial_balance(organization)

        assert report["period"] == {"date_from": date(today.year, 1, 1), "date_to": today}
        assert report["totals"]["debits"] == Decimal("10.00")

    def test_inactive_accounts_are_left_out(self, organization, ledger):
        ledger["5.1.01"].is_active = False
        ledger["5.1.01"].save()

        report = reports.trial_balance(organization, date(2024, 1, 1), date(2024, 12, 31))

        assert "5.1.01" not in {row["code"] for row in report["accounts"]}


@pytest.mark.django_db
class TestBalanceSheet:

    def test_balances_as_of_date(self, organization, ledger):
        report = reports.balance_sheet(organization, as_of=date(2024, 12, 31))

        assets = {row["code"]: row["balance"] for row in report["assets"]}
        equity = {row["code"]: row["balance"] for row in report["equity"]}
        assert assets == {"1.1.01": Decimal("10800.00"), "1.1.03": Decimal("1500.00")}
        assert equity == {"3.1": Decimal("10500.00")}
        assert report["liabilities"] == []
        assert report["total_assets"] == Decimal("12300.00")
        assert report["total_equity"] == Decimal("10500.00")
        assert report["type"] == "balance-sheet"

    def test_zero_balances_are_hidden(self, organization, chart):
        post(organization, chart, date(2024, 1, 1), ("1.1.03", "D", "100"), ("4.1.01", "C", "100"))
        post(organization, chart, date(2024, 1, 2), ("1.1.01", "D", "100"), ("1.1.03", "C", "100"))

        report = reports.balance_sheet(organization, as_of=date(2024, 1, 31))

        assert [row["code"] for row in report["assets"]] == ["1.1.01"]


@pytest.mark.django_db
class TestIncomeStatement:

    def test_revenue_expenses_and_net_income(self, organization, ledger):
        report = reports.income_statement(organization, date(2024, 1, 1), date(2024, 12, 31))

        assert report["revenue"] == [{"code": "4.1.01", "name": "Ingresos por Construcción", "balance": Decimal("3000.00")}]
        assert [row["code"] for row in report["expenses"]] == ["5.1.01"]
        assert report["total_revenue"] == Decimal("3000.00")
        assert report["total_expenses"] == Decimal("1200.00")
        assert report["net_income"] == Decimal("1800.00")

    def test_other_year_is_excluded(self, organization, ledger):
        report = reports.income_statement(organization, date(2025, 1, 1), date(2025, 12, 31))

        assert report["revenue"] == []
        assert report["total_expenses"] == Decimal("80.00")
        assert report["net_income"] == Decimal("-80.00")


@pytest.mark.django_db
class TestStatsAndIntegrity:

    def test_stats(self, organization, chart):
        today = timezone.localdate()
        post(organization, chart, date(2020, 1, 1), ("1.1.01", "D", "1"), ("3.1", "C", "1"))
        last = post(organization, chart, today, ("1.1.01", "D", "2"), ("3.1", "C", "2"))

        stats = reports.accounting_stats(organization)

        assert stats["total_accounts"] == 50
        assert stats["monthly_entries"] == 1
        assert stats["last_entry"] == last.entry_number
        assert stats["last_entry_date"] == today
        assert stats["is_balanced"] is True

    def test_unbalanced_entry_is_reported(self, organization, second_organization, ledger):
        entry = JournalEntry.objects.filter(organization=organization).first()
        JournalLine.objects.filter(entry=entry, credit__gt=0).update(credit=Decimal("1.00"))

        offenders = reports.unbalanced_entries()

        assert [row["entry_number"] for row in offenders] == [entry.entry_number]
        assert reports.unbalanced_entries(second_organization) == []
        assert reports.accounting_stats(organization)["is_balanced"] is False
