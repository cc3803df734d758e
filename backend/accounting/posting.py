# accounting/posting.py
"""
Automatic journal entries from business documents.

Three layers:

1. Posting rules: one function per source type turning a loaded document
   into an EntryDraft. Every account is resolved up front; a missing one
   raises AccountResolutionError and nothing is posted.
2. post_*_entry(): load the document, check the organization has accounting
   enabled, apply the rule, write the entry. Always returns a CommandResult.
3. AutoAccountingService: fail-open facade for callers that only want the
   entry or None and must never see an exception.

Rules (D = debit, C = credit):

    TRANSACTION  INCOME   D cash            C income
                 EXPENSE  D expense         C cash
    PAYROLL               D payroll expense (gross)
                          C payroll deductions (deductions, when > 0)
                          C cash (net)
    BILL_PAYMENT CLIENT   D cash            C receivables
                 PROVIDER D payables        C cash
    BILL         CLIENT   D receivables (total)  C income per rubro (split)
                 PROVIDER D expense per rubro (split)  C payables (total)
    PAYMENT      client   D cash            C rubro income, else 4.1.03
                 provider D rubro expense, else 5.1.01  C cash
"""

import logging
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Tuple

from django.conf import settings
from django.db import DatabaseError

from accounting.aggregates import EntryDraft, to_money
from accounting.commands import (
    CommandResult,
    delete_automatic_entries,
    has_journal_entries,
    write_journal_entry,
)
from accounting.exceptions import (
    AccountingError,
    AccountResolutionError,
    SourceNotFoundError,
    UnbalancedEntryError,
)
from accounting.models import JournalEntry
from accounting.resolver import (
    GENERIC_EXPENSE,
    PAYROLL_DEDUCTIONS,
    SALES_INCOME,
    get_main_accounts,
    require_account,
    require_main,
    require_rubro_account,
)
from operations.models import Bill, BillPayment, Payment, Payroll, Transaction
from ops.metrics import record_posting

logger = logging.getLogger(__name__)

SourceType = JournalEntry.SourceType
HUNDRED = Decimal("100")


def _with_party_and_project(description: str, client=None, provider=None, project=None) -> str:
    if client:
        description += f" - Cliente: {client.name}"
    if provider:
        description += f" - Proveedor: {provider.name}"
    if project:
        description += f" ({project.name})"
    return description


def split_by_percentage(total: Decimal, percentages: List[Decimal]) -> List[Decimal]:
    """
    total * pct / 100 for each percentage, in cents.

    When the percentages add up to exactly 100 the last share takes the
    rounding remainder, so the shares always add up to the total.
    """
    shares = [to_money(total * Decimal(pct) / HUNDRED) for pct in percentages]
    if shares and sum(Decimal(p) for p in percentages) == HUNDRED:
        shares[-1] = to_money(total) - sum(shares[:-1], Decimal("0"))
    return shares


# =============================================================================
# Posting rules
# =============================================================================

def transaction_entry_draft(txn: Transaction) -> EntryDraft:
    organization = txn.organization
    main = get_main_accounts(organization)
    cash = require_main(main, "cash")
    is_income = txn.type == Transaction.Type.INCOME

    description = f"{'Ingreso' if is_income else 'Egreso'} - {txn.description}"
    if txn.project:
        description += f" (Proyecto: {txn.project.name})"

    draft = EntryDraft(
        organization=organization,
        date=txn.date,
        description=description,
        source_type=SourceType.TRANSACTION,
        source_id=str(txn.pk),
        currency=txn.currency,
        project=txn.project,
    )
    if is_income:
        draft.debit(cash, txn.amount).credit(require_main(main, "income"), txn.amount)
    else:
        draft.debit(require_main(main, "expense"), txn.amount).credit(cash, txn.amount)
    return draft


def payroll_entry_draft(payroll: Payroll) -> EntryDraft:
    """
    Net pay is always credited to the cash account (1.1.01 "Caja y Bancos"),
    whichever of bank account or cash box the payroll names.
    """
    organization = payroll.organization
    main = get_main_accounts(organization)
    expense_account = main.payroll_expense or require_main(main, "expense")
    cash = require_main(main, "cash")

    gross = payroll.gross_pay
    deductions = payroll.deductions or Decimal("0")
    net = payroll.effective_net_pay

    draft = EntryDraft(
        organization=organization,
        date=payroll.date,
        description=f"Nómina - {payroll.employee_name} ({payroll.period})",
        source_type=SourceType.PAYROLL,
        source_id=str(payroll.pk),
        currency=payroll.currency,
    )
    draft.debit(expense_account, gross)

    if deductions > 0:
        liability = main.payroll_deductions or main.payroll_liability or main.payable
        if liability is None:
            raise AccountResolutionError("payroll_deductions", PAYROLL_DEDUCTIONS)
        draft.credit(liability, deductions)

    if net > 0:
        draft.credit(cash, net)
    return draft


def bill_payment_entry_draft(payment: BillPayment) -> EntryDraft:
    bill = payment.bill
    organization = payment.organization
    main = get_main_accounts(organization)
    cash = require_main(main, "cash")

    draft = EntryDraft(
        organization=organization,
        date=payment.date,
        description=_with_party_and_project(
            f"Pago Bill #{bill.number}", bill.client, bill.provider, bill.project
        ),
        source_type=SourceType.BILL_PAYMENT,
        source_id=str(payment.pk),
        currency=payment.currency,
        project=bill.project,
    )
    if bill.type == Bill.Type.CLIENT:
        draft.debit(cash, payment.amount).credit(require_main(main, "receivables"), payment.amount)
    else:
        draft.debit(require_main(main, "payables"), payment.amount).credit(cash, payment.amount)
    return draft


def bill_entry_draft(bill: Bill) -> EntryDraft:
    organization = bill.organization
    main = get_main_accounts(organization)
    is_client = bill.type == Bill.Type.CLIENT

    splits = list(bill.bill_rubros.select_related("rubro"))
    if not splits:
        raise AccountingError(f"Bill #{bill.number} has no rubro split.")

    # Resolve everything before building any leg.
    counterpart = require_main(main, "receivables" if is_client else "payables")
    rubro_accounts = [
        require_rubro_account(organization, split.rubro.name, is_income=is_client)
        for split in splits
    ]
    shares = split_by_percentage(bill.total, [split.percentage for split in splits])

    draft = EntryDraft(
        organization=organization,
        date=bill.date,
        description=_with_party_and_project(
            f"Bill #{bill.number}", bill.client, bill.provider, bill.project
        ),
        source_type=SourceType.BILL,
        source_id=str(bill.pk),
        currency=settings.ACCOUNTING_DEFAULT_CURRENCY,
        project=bill.project,
    )
    if is_client:
        draft.debit(counterpart, bill.total)
        for split, account, share in zip(splits, rubro_accounts, shares):
            draft.credit(account, share, f"{split.rubro.name} {split.percentage}%")
    else:
        for split, account, share in zip(splits, rubro_accounts, shares):
            draft.debit(account, share, f"{split.rubro.name} {split.percentage}%")
        draft.credit(counterpart, bill.total)
    return draft


def payment_entry_draft(payment: Payment) -> EntryDraft:
    organization = payment.organization
    if not payment.client and not payment.provider:
        raise AccountingError("Payment has neither client nor provider.")

    main = get_main_accounts(organization)
    cash = require_main(main, "cash")
    rubro_name = payment.rubro.name if payment.rubro else None

    draft = EntryDraft(
        organization=organization,
        date=payment.date,
        description=_with_party_and_project(
            f"Pago - {payment.description or 'Sin descripción'}",
            payment.client, payment.provider, payment.project,
        ),
        source_type=SourceType.PAYMENT,
        source_id=str(payment.pk),
        currency=payment.currency,
        project=payment.project,
    )
    if payment.client:
        income = (
            require_rubro_account(organization, rubro_name, is_income=True)
            if rubro_name
            else require_account(organization, SALES_INCOME, "sales_income")
        )
        draft.debit(cash, payment.amount).credit(income, payment.amount)
    else:
        expense = (
            require_rubro_account(organization, rubro_name, is_income=False)
            if rubro_name
            else require_account(organization, GENERIC_EXPENSE, "expense")
        )
        draft.debit(expense, payment.amount).credit(cash, payment.amount)
    return draft


POSTING_RULES: Dict[str, Tuple[Callable, Callable[..., EntryDraft]]] = {
    SourceType.TRANSACTION: (
        lambda: Transaction.objects.select_related("organization", "project"),
        transaction_entry_draft,
    ),
    SourceType.PAYROLL: (
        lambda: Payroll.objects.select_related("organization"),
        payroll_entry_draft,
    ),
    SourceType.BILL: (
        lambda: Bill.objects.select_related("organization", "client", "provider", "project"),
        bill_entry_draft,
    ),
    SourceType.BILL_PAYMENT: (
        lambda: BillPayment.objects.select_related(
            "organization", "bill", "bill__client", "bill__provider", "bill__project"
        ),
        bill_payment_entry_draft,
    ),
    SourceType.PAYMENT: (
        lambda: Payment.objects.select_related("organization", "client", "provider", "rubro", "project"),
        payment_entry_draft,
    ),
}


# =============================================================================
# Entry points
# =============================================================================

def _load_source(source_type: str, source_id):
    queryset, _ = POSTING_RULES[source_type]
    try:
        return queryset().filter(pk=source_id).first()
    except (TypeError, ValueError):
        return None


def post_source_entry(source_type: str, source_id) -> CommandResult:
    """
    Journal one business document.

    Skipped (result.skipped) when the document does not exist or its
    organization has accounting disabled. Fails, with nothing written, when
    an account cannot be resolved, the legs do not balance, or the write
    errors out (retryable).
    """
    log_extra = {"source_type": source_type, "source_id": str(source_id)}

    if source_type not in POSTING_RULES:
        return CommandResult.fail(f"Unknown source type: {source_type}")

    source = _load_source(source_type, source_id)
    if source is None:
        record_posting(source_type, "skipped")
        logger.info("journal_entry.skipped_missing_source", extra=log_extra)
        return CommandResult.skip(str(SourceNotFoundError(source_type, source_id)))

    organization = source.organization
    log_extra["organization_id"] = organization.id
    if not organization.enable_accounting:
        record_posting(source_type, "skipped")
        logger.debug("journal_entry.skipped_disabled", extra=log_extra)
        return CommandResult.skip("Accounting is not enabled for this organization.")

    _, rule = POSTING_RULES[source_type]
    try:
        entry = write_journal_entry(rule(source))
    except AccountResolutionError as exc:
        record_posting(source_type, "failed")
        logger.warning(
            "journal_entry.unresolved_account",
            extra={**log_extra, "role": exc.role, "code": exc.code},
        )
        return CommandResult.fail(str(exc))
    except UnbalancedEntryError as exc:
        record_posting(source_type, "failed")
        logger.error(
            "journal_entry.unbalanced",
            extra={**log_extra, "total_debit": str(exc.total_debit), "total_credit": str(exc.total_credit)},
        )
        return CommandResult.fail(str(exc))
    except AccountingError as exc:
        record_posting(source_type, "failed")
        logger.error("journal_entry.rejected", extra={**log_extra, "error": str(exc)})
        return CommandResult.fail(str(exc))
    except DatabaseError as exc:
        record_posting(source_type, "failed")
        logger.exception("journal_entry.write_failed", extra=log_extra)
        return CommandResult.fail(f"Could not save journal entry: {exc}", retryable=True)

    record_posting(source_type, "posted")
    return CommandResult.ok(entry)


def post_transaction_entry(transaction_id) -> CommandResult:
    return post_source_entry(SourceType.TRANSACTION, transaction_id)


def post_payroll_entry(payroll_id) -> CommandResult:
    return post_source_entry(SourceType.PAYROLL, payroll_id)


def post_bill_entry(bill_id) -> CommandResult:
    return post_source_entry(SourceType.BILL, bill_id)


def post_bill_payment_entry(bill_payment_id) -> CommandResult:
    return post_source_entry(SourceType.BILL_PAYMENT, bill_payment_id)


def post_payment_entry(payment_id) -> CommandResult:
    return post_source_entry(SourceType.PAYMENT, payment_id)


class AutoAccountingService:
    """
    Fail-open facade: each create_* returns the JournalEntry or None and
    never raises, so the business write that triggered it is never blocked.
    Use the post_* functions to find out why nothing was posted.
    """

    @staticmethod
    def _entry_or_none(source_type: str, source_id) -> Optional[JournalEntry]:
        try:
            result = post_source_entry(source_type, source_id)
        except Exception:
            record_posting(source_type, "failed")
            logger.exception(
                "journal_entry.unexpected_error",
                extra={"source_type": source_type, "source_id": str(source_id)},
            )
            return None
        return result.data if result.success else None

    @classmethod
    def create_transaction_entry(cls, transaction_id) -> Optional[JournalEntry]:
        return cls._entry_or_none(SourceType.TRANSACTION, transaction_id)

    @classmethod
    def create_payroll_entry(cls, payroll_id) -> Optional[JournalEntry]:
        return cls._entry_or_none(SourceType.PAYROLL, payroll_id)

    @classmethod
    def create_bill_entry(cls, bill_id) -> Optional[JournalEntry]:
        return cls._entry_or_none(SourceType.BILL, bill_id)

    @classmethod
    def create_bill_payment_entry(cls, bill_payment_id) -> Optional[JournalEntry]:
        return cls._entry_or_none(SourceType.BILL_PAYMENT, bill_payment_id)

    @classmethod
    def create_payment_entry(cls, payment_id) -> Optional[JournalEntry]:
        return cls._entry_or_none(SourceType.PAYMENT, payment_id)

    @staticmethod
    def has_journal_entries(source_type: str, source_id) -> bool:
        try:
            return has_journal_entries(source_type, source_id)
        except Exception:
            logger.exception(
                "journal_entry.lookup_failed",
                extra={"source_type": source_type, "source_id": str(source_id)},
            )
            return False

    @staticmethod
    def delete_automatic_entries(source_type: str, source_id) -> int:
        try:
            return delete_automatic_entries(source_type, source_id)
        except Exception:
            logger.exception(
                "journal_entry.delete_failed",
                extra={"source_type": source_type, "source_id": str(source_id)},
            )
            return 0
