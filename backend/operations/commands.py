# operations/commands.py
"""
Command layer for business documents.

Each command saves the document in its own transaction and then asks the
accounting layer for the matching journal entry. Journaling is fail-open:
a posting failure is logged (and, with ACCOUNTING_RETRY_ASYNC, queued for a
Celery retry) but never undoes or blocks the document write.

Usage:
    result = create_bill(actor, type="PROVIDER", number="F-12", total="1000",
                         date=date(2024, 5, 2), provider_id=provider.id,
                         rubros=[{"rubro_id": materiales.id, "percentage": "100"}])
    if result.success:
        bill = result.data["bill"]
        entry = result.data["journal_entry"]  # None when nothing was posted
"""

import logging
from decimal import Decimal

from django.conf import settings
from django.db import transaction

from accounts.authz import ActorContext
from accounting.aggregates import to_money
from accounting.commands import CommandResult
from accounting.exceptions import AccountingError
from accounting.models import JournalEntry
from accounting.posting import AutoAccountingService, post_source_entry
from .models import (
    Bill,
    BillPayment,
    BillRubro,
    Client,
    Payment,
    Payroll,
    Project,
    Provider,
    Rubro,
    Transaction,
)

logger = logging.getLogger(__name__)

SourceType = JournalEntry.SourceType
HUNDRED = Decimal("100")


class NotFound(Exception):
    pass


def _owned(model, pk, organization, label: str):
    """Row of the actor's organization, None for a missing optional reference."""
    if pk is None:
        return None
    try:
        return model.objects.get(pk=pk, organization=organization)
    except model.DoesNotExist:
        raise NotFound(f"{label} not found.")


def _journal(source_type: str, source_id):
    """
    Post the automatic entry of a saved document; returns the entry or None.

    Never raises.
    """
    try:
        result = post_source_entry(source_type, source_id)
    except Exception:
        logger.exception(
            "journal_entry.unexpected_error",
            extra={"source_type": source_type, "source_id": str(source_id)},
        )
        return None

    if result.success:
        return result.data
    if result.retryable and settings.ACCOUNTING_RETRY_ASYNC:
        from accounting.tasks import retry_source_entry

        retry_source_entry.delay(source_type, str(source_id))
    return None


def _remove_entries(source_type: str, source_id) -> int:
    return AutoAccountingService.delete_automatic_entries(source_type, source_id)


# =============================================================================
# Bills
# =============================================================================

def create_bill(
    actor: ActorContext,
    type: str,
    number: str,
    total,
    date,
    rubros: list,
    client_id=None,
    provider_id=None,
    project_id=None,
    description: str = "",
) -> CommandResult:
    """
    Create a bill with its rubro split and journal it.

    Args:
        rubros: List of dicts with rubro_id and percentage, each in (0, 100]

    Returns:
        CommandResult with {"bill", "journal_entry"} or error
    """
    organization = actor.organization
    if type not in Bill.Type.values:
        return CommandResult.fail(f"Invalid bill type: {type}")

    try:
        total = to_money(total)
        splits = [(split["rubro_id"], to_money(split["percentage"])) for split in rubros]
    except (AccountingError, KeyError) as exc:
        return CommandResult.fail(f"Invalid bill data: {exc}")

    if total <= 0:
        return CommandResult.fail("Bill total must be greater than zero.")
    for _, percentage in splits:
        if not Decimal("0") < percentage <= HUNDRED:
            return CommandResult.fail("Rubro percentages must be greater than 0 and at most 100.")

    try:
        client = _owned(Client, client_id, organization, "Client")
        provider = _owned(Provider, provider_id, organization, "Provider")
        project = _owned(Project, project_id, organization, "Project")
        rubro_rows = [_owned(Rubro, rubro_id, organization, "Rubro") for rubro_id, _ in splits]
    except NotFound as exc:
        return CommandResult.fail(str(exc))

    with transaction.atomic():
        bill = Bill.objects.create(
            organization=organization,
            type=type,
            number=number,
            total=total,
            date=date,
            description=description,
            client=client,
            provider=provider,
            project=project,
            created_by=actor.user,
        )
        BillRubro.objects.bulk_create([
            BillRubro(bill=bill, rubro=rubro, percentage=percentage)
            for rubro, (_, percentage) in zip(rubro_rows, splits)
        ])

    logger.info("bill.created", extra={"organization_id": organization.id, "bill_id": bill.id})
    return CommandResult.ok({"bill": bill, "journal_entry": _journal(SourceType.BILL, bill.id)})


def record_bill_payment(actor: ActorContext, bill_id, amount, date, currency: str = None,
                        description: str = "", cash_box=None, bank_account=None) -> CommandResult:
    organization = actor.organization
    try:
        bill = _owned(Bill, bill_id, organization, "Bill")
        amount = to_money(amount)
    except NotFound as exc:
        return CommandResult.fail(str(exc))
    except AccountingError as exc:
        return CommandResult.fail(str(exc))
    if bill is None:
        return CommandResult.fail("Bill not found.")
    if amount <= 0:
        return CommandResult.fail("Payment amount must be greater than zero.")

    with transaction.atomic():
        payment = BillPayment.objects.create(
            organization=organization,
            bill=bill,
            amount=amount,
            currency=currency or organization.default_currency,
            date=date,
            description=description,
            cash_box=cash_box,
            bank_account=bank_account,
        )

    return CommandResult.ok({
        "bill_payment": payment,
        "journal_entry": _journal(SourceType.BILL_PAYMENT, payment.id),
    })


@transaction.atomic
def delete_bill(actor: ActorContext, bill_id) -> CommandResult:
    """Delete a bill, its payments, and the automatic entries of all of them."""
    try:
        bill = Bill.objects.select_for_update().get(pk=bill_id, organization=actor.organization)
    except Bill.DoesNotExist:
        return CommandResult.fail("Bill not found.")

    removed = _remove_entries(SourceType.BILL, bill.id)
    for payment_id in bill.payments.values_list("id", flat=True):
        removed += _remove_entries(SourceType.BILL_PAYMENT, payment_id)

    bill.delete()
    return CommandResult.ok({"deleted": True, "journal_entries_deleted": removed})


# =============================================================================
# Payments, treasury, payroll
# =============================================================================

def record_payment(actor: ActorContext, amount, date, client_id=None, provider_id=None,
                   rubro_id=None, project_id=None, currency: str = None,
                   description: str = "") -> CommandResult:
    organization = actor.organization
    if not client_id and not provider_id:
        return CommandResult.fail("A payment needs a client or a provider.")

    try:
        amount = to_money(amount)
        client = _owned(Client, client_id, organization, "Client")
        provider = _owned(Provider, provider_id, organization, "Provider")
        rubro = _owned(Rubro, rubro_id, organization, "Rubro")
        project = _owned(Project, project_id, organization, "Project")
    except (NotFound, AccountingError) as exc:
        return CommandResult.fail(str(exc))
    if amount <= 0:
        return CommandResult.fail("Payment amount must be greater than zero.")

    with transaction.atomic():
        payment = Payment.objects.create(
            organization=organization,
            amount=amount,
            currency=currency or organization.default_currency,
            description=description,
            date=date,
            client=client,
            provider=provider,
            rubro=rubro,
            project=project,
        )

    return CommandResult.ok({"payment": payment, "journal_entry": _journal(SourceType.PAYMENT, payment.id)})


def record_transaction(actor: ActorContext, type: str, amount, date, description: str = "",
                       project_id=None, currency: str = None, cash_box=None,
                       bank_account=None) -> CommandResult:
    organization = actor.organization
    if type not in Transaction.Type.values:
        return CommandResult.fail(f"Invalid transaction type: {type}")

    try:
        amount = to_money(amount)
        project = _owned(Project, project_id, organization, "Project")
    except (NotFound, AccountingError) as exc:
        return CommandResult.fail(str(exc))
    if amount <= 0:
        return CommandResult.fail("Transaction amount must be greater than zero.")

    with transaction.atomic():
        txn = Transaction.objects.create(
            organization=organization,
            type=type,
            amount=amount,
            currency=currency or organization.default_currency,
            description=description,
            date=date,
            project=project,
            cash_box=cash_box,
            bank_account=bank_account,
        )

    return CommandResult.ok({"transaction": txn, "journal_entry": _journal(SourceType.TRANSACTION, txn.id)})


def record_payroll(actor: ActorContext, employee_name: str, period: str, base_salary, date,
                   overtime_pay=0, bonuses=0, deductions=0, net_pay=None,
                   currency: str = None, cash_box=None, bank_account=None) -> CommandResult:
    """
    Record one employee's pay. net_pay defaults to gross - deductions.
    """
    organization = actor.organization
    try:
        amounts = {
            "base_salary": to_money(base_salary),
            "overtime_pay": to_money(overtime_pay),
            "bonuses": to_money(bonuses),
            "deductions": to_money(deductions),
            "net_pay": to_money(net_pay) if net_pay is not None else None,
        }
    except AccountingError as exc:
        return CommandResult.fail(str(exc))
    if any(value is not None and value < 0 for value in amounts.values()):
        return CommandResult.fail("Payroll amounts cannot be negative.")

    with transaction.atomic():
        payroll = Payroll.objects.create(
            organization=organization,
            employee_name=employee_name,
            period=period,
            date=date,
            currency=currency or organization.default_currency,
            cash_box=cash_box,
            bank_account=bank_account,
            **amounts,
        )

    return CommandResult.ok({"payroll": payroll, "journal_entry": _journal(SourceType.PAYROLL, payroll.id)})


def _delete_source(actor: ActorContext, model, source_type: str, pk, label: str) -> CommandResult:
    with transaction.atomic():
        try:
            row = model.objects.select_for_update().get(pk=pk, organization=actor.organization)
        except model.DoesNotExist:
            return CommandResult.fail(f"{label} not found.")
        removed = _remove_entries(source_type, row.id)
        row.delete()
    return CommandResult.ok({"deleted": True, "journal_entries_deleted": removed})


def delete_transaction(actor: ActorContext, transaction_id) -> CommandResult:
    return _delete_source(actor, Transaction, SourceType.TRANSACTION, transaction_id, "Transaction")


def delete_payment(actor: ActorContext, payment_id) -> CommandResult:
    return _delete_source(actor, Payment, SourceType.PAYMENT, payment_id, "Payment")


def delete_payroll(actor: ActorContext, payroll_id) -> CommandResult:
    return _delete_source(actor, Payroll, SourceType.PAYROLL, payroll_id, "Payroll")
