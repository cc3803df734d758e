# accounting/reports.py
"""
Financial reports computed from journal lines.

Amounts are Decimal. Accounts whose balance is within 0.01 of zero are left
out of the balance sheet and income statement; the trial balance leaves out
accounts without movement in the period.
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from django.db.models import Count, Q, Sum
from django.db.models.functions import Coalesce
from django.utils import timezone

from accounts.models import Organization
from accounting.aggregates import MONEY_Q, balance_tolerance
from accounting.models import Account, JournalEntry, JournalLine

ZERO = Decimal("0.00")
VISIBLE = Decimal("0.01")


def default_period(date_from: Optional[date], date_to: Optional[date]) -> tuple[date, date]:
    """Missing end = today; missing start = January 1st of the end's year."""
    date_to = date_to or timezone.localdate()
    date_from = date_from or date(date_to.year, 1, 1)
    return date_from, date_to


def _movements(organization: Organization, date_from=None, date_to=None, types=None) -> Dict[int, dict]:
    """Debit/credit totals per active account, keyed by account id."""
    lines = JournalLine.objects.filter(organization=organization, account__is_active=True)
    if date_from:
        lines = lines.filter(entry__date__gte=date_from)
    if date_to:
        lines = lines.filter(entry__date__lte=date_to)
    if types:
        lines = lines.filter(account__account_type__in=types)

    rows = (
        lines.values("account_id", "account__code", "account__name", "account__account_type")
        .annotate(debits=Coalesce(Sum("debit"), ZERO), credits=Coalesce(Sum("credit"), ZERO))
        .order_by("account__code")
    )
    return {
        row["account_id"]: {
            "code": row["account__code"],
            "name": row["account__name"],
            "type": row["account__account_type"],
            "debits": row["debits"],
            "credits": row["credits"],
        }
        for row in rows
    }


def trial_balance(organization: Organization, date_from: date = None, date_to: date = None) -> dict:
    date_from, date_to = default_period(date_from, date_to)
    accounts = []
    total_debits = total_credits = ZERO

    for row in _movements(organization, date_from, date_to).values():
        if row["debits"] <= VISIBLE and row["credits"] <= VISIBLE:
            continue
        accounts.append({**row, "balance": row["debits"] - row["credits"]})
        total_debits += row["debits"]
        total_credits += row["credits"]

    return {
        "type": "trial-balance",
        "period": {"date_from": date_from, "date_to": date_to},
        "accounts": accounts,
        "totals": {"debits": total_debits, "credits": total_credits},
    }


def balance_sheet(organization: Organization, as_of: date = None) -> dict:
    as_of = as_of or timezone.localdate()
    T = Account.AccountType
    groups = {T.ASSET: "assets", T.LIABILITY: "liabilities", T.EQUITY: "equity"}
    report = {"assets": [], "liabilities": [], "equity": []}
    totals = {key: ZERO for key in report}

    movements = _movements(organization, date_to=as_of, types=list(groups))
    for row in movements.values():
        balance = row["debits"] - row["credits"]
        if abs(balance) <= VISIBLE:
            continue
        if row["type"] != T.ASSET:
            balance = -balance
        key = groups[row["type"]]
        report[key].append({"code": row["code"], "name": row["name"], "balance": balance})
        totals[key] += balance

    return {
        "type": "balance-sheet",
        "as_of": as_of,
        **report,
        "total_assets": totals["assets"],
        "total_liabilities": totals["liabilities"],
        "total_equity": totals["equity"],
    }


def income_statement(organization: Organization, date_from: date = None, date_to: date = None) -> dict:
    date_from, date_to = default_period(date_from, date_to)
    T = Account.AccountType
    revenue: List[dict] = []
    expenses: List[dict] = []
    total_revenue = total_expenses = ZERO

    movements = _movements(organization, date_from, date_to, types=[T.INCOME, T.EXPENSE])
    for row in movements.values():
        balance = row["debits"] - row["credits"]
        if abs(balance) <= VISIBLE:
            continue
        if row["type"] == T.INCOME:
            revenue.append({"code": row["code"], "name": row["name"], "balance": -balance})
            total_revenue += -balance
        else:
            expenses.append({"code": row["code"], "name": row["name"], "balance": balance})
            total_expenses += abs(balance)

    return {
        "type": "income-statement",
        "period": {"date_from": date_from, "date_to": date_to},
        "revenue": revenue,
        "expenses": expenses,
        "total_revenue": total_revenue,
        "total_expenses": total_expenses,
        "net_income": total_revenue - total_expenses,
    }


def unbalanced_entries(organization: Organization = None) -> List[dict]:
    """Entries whose lines do not balance within the configured tolerance."""
    entries = JournalEntry.objects.all()
    if organization is not None:
        entries = entries.filter(organization=organization)

    tolerance = balance_tolerance()
    rows = entries.annotate(
        debits=Coalesce(Sum("lines__debit"), ZERO),
        credits=Coalesce(Sum("lines__credit"), ZERO),
    ).values("id", "organization_id", "entry_number", "debits", "credits")

    return [
        {
            "id": row["id"],
            "organization_id": row["organization_id"],
            "entry_number": row["entry_number"],
            "debits": row["debits"].quantize(MONEY_Q),
            "credits": row["credits"].quantize(MONEY_Q),
        }
        for row in rows
        if abs(row["debits"] - row["credits"]) > tolerance
    ]


def accounting_stats(organization: Organization) -> dict:
    today = timezone.localdate()
    entries = JournalEntry.objects.filter(organization=organization)
    counts = entries.aggregate(
        this_month=Count("id", filter=Q(date__gte=today.replace(day=1))),
    )
    last_entry = entries.order_by("-created_at", "-id").values("entry_number", "date").first()

    return {
        "total_accounts": Account.objects.filter(organization=organization, is_active=True).count(),
        "monthly_entries": counts["this_month"],
        "last_entry": last_entry["entry_number"] if last_entry else None,
        "last_entry_date": last_entry["date"] if last_entry else None,
        "is_balanced": not unbalanced_entries(organization),
    }
