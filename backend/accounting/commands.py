# accounting/commands.py
"""
Command layer for accounting operations.

Commands are the single point where ledger state changes. Views, the
posting entry points, management commands and Celery tasks call commands;
commands enforce the rules and return a CommandResult.

- write_journal_entry(): persist a validated EntryDraft (header + lines)
  under a freshly allocated entry number, all in one transaction
- has_journal_entries() / delete_automatic_entries(): per-source lifecycle
- delete_entry(): remove one whole entry, never a single leg
- create_manual_entry(): user-entered balanced entry
- create_account() / update_account() / delete_account(): chart maintenance
- setup_accounting() / set_accounting_enabled() / get_accounting_status()
"""

import logging
from decimal import Decimal

from django.db import IntegrityError, transaction

from accounts.authz import ActorContext
from accounting.aggregates import EntryDraft, Side, to_money
from accounting.chart import get_chart_stats, has_standard_chart, setup_standard_chart
from accounting.exceptions import AccountingError
from accounting.models import Account, JournalEntry, JournalLine, OrganizationSequence

logger = logging.getLogger(__name__)

ENTRY_NUMBER_SEQUENCE = "journal_entry_number"
ENTRY_NUMBER_WIDTH = 6


class CommandResult:
    """
    Wrapper for command results with success/failure info.

    Usage:
        result = post_bill_entry(bill_id)
        if result.success:
            entry = result.data
        elif result.skipped:
            ...  # nothing to do (accounting disabled, source gone)
        else:
            error_message = result.error
            if result.retryable:
                ...  # persistence failure, worth re-queueing
    """

    def __init__(self, success: bool, data=None, error: str = None, skipped: bool = False, retryable: bool = False):
        self.success = success
        self.data = data
        self.error = error
        self.skipped = skipped
        self.retryable = retryable

    def __repr__(self):
        if self.success:
            return f"<CommandResult ok data={self.data!r}>"
        state = "skipped" if self.skipped else "failed"
        return f"<CommandResult {state} error={self.error!r}>"

    @classmethod
    def ok(cls, data=None):
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, retryable: bool = False):
        return cls(success=False, error=error, retryable=retryable)

    @classmethod
    def skip(cls, reason: str):
        return cls(success=False, error=reason, skipped=True)


# =============================================================================
# Entry numbering
# =============================================================================

def format_entry_number(value: int) -> str:
    return f"{value:0{ENTRY_NUMBER_WIDTH}d}"


def _highest_entry_number(organization) -> int:
    numbers = JournalEntry.objects.filter(
        organization=organization,
        entry_number__regex=r"^[0-9]+$",
    ).values_list("entry_number", flat=True)
    return max((int(n) for n in numbers), default=0)


def _next_org_sequence(organization, name: str, start=None) -> int:
    """
    Allocate the next sequence value for an organization/name pair.

    Must run inside a transaction: the row stays locked (select_for_update)
    until the caller commits. start() gives the first value when the
    counter does not exist yet.
    """
    try:
        seq = OrganizationSequence.objects.select_for_update().get(
            organization=organization,
            name=name,
        )
    except OrganizationSequence.DoesNotExist:
        first = start() if start else 1
        try:
            with transaction.atomic():
                seq = OrganizationSequence.objects.create(
                    organization=organization,
                    name=name,
                    next_value=first,
                )
        except IntegrityError:
            # Created concurrently; wait for the other transaction's lock.
            seq = OrganizationSequence.objects.select_for_update().get(
                organization=organization,
                name=name,
            )

    value = seq.next_value
    seq.next_value = value + 1
    seq.save(update_fields=["next_value", "updated_at"])
    return value


def allocate_entry_number(organization) -> str:
    """
    Next journal entry number for the organization, e.g. "000042".

    The counter is seeded from the highest numeric entry number already on
    file, so ledgers numbered before the counter existed continue in order.
    """
    value = _next_org_sequence(
        organization,
        ENTRY_NUMBER_SEQUENCE,
        start=lambda: _highest_entry_number(organization) + 1,
    )
    return format_entry_number(value)


# =============================================================================
# Persistence
# =============================================================================

@transaction.atomic
def write_journal_entry(draft: EntryDraft) -> JournalEntry:
    """
    Validate and persist a draft as one entry with one line per leg.

    Raises:
        AccountingError / UnbalancedEntryError: draft rejected, nothing written
        DatabaseError: write failed, the whole entry is rolled back
    """
    draft.validate()

    entry = JournalEntry.objects.create(
        organization=draft.organization,
        entry_number=allocate_entry_number(draft.organization),
        date=draft.date,
        description=draft.description[:255],
        currency=draft.currency,
        exchange_rate=Decimal("1"),
        source_type=draft.source_type,
        source_id=str(draft.source_id),
        is_automatic=draft.is_automatic,
        project=draft.project,
        created_by=draft.created_by,
    )
    JournalLine.objects.bulk_create([
        JournalLine(
            entry=entry,
            organization=draft.organization,
            line_no=line_no,
            account=leg.account,
            description=(leg.description or draft.description)[:255],
            debit=leg.debit,
            credit=leg.credit,
        )
        for line_no, leg in enumerate(draft.legs, start=1)
    ])

    logger.info(
        "journal_entry.created",
        extra={
            "organization_id": draft.organization.id,
            "entry_number": entry.entry_number,
            "source_type": draft.source_type,
            "source_id": str(draft.source_id),
            "lines": len(draft.legs),
            "total": str(draft.total_debit),
        },
    )
    return entry


# =============================================================================
# Lifecycle
# =============================================================================

def _source_entries(source_type: str, source_id, organization=None):
    qs = JournalEntry.objects.filter(source_type=source_type, source_id=str(source_id))
    if organization is not None:
        qs = qs.filter(organization=organization)
    return qs


def has_journal_entries(source_type: str, source_id, organization=None) -> bool:
    """Whether any entry (automatic or manual) references this source."""
    return _source_entries(source_type, source_id, organization).exists()


@transaction.atomic
def delete_automatic_entries(source_type: str, source_id, organization=None) -> int:
    """
    Hard-delete the automatic entries of a source; lines go with them.

    No reversing entry is posted. Returns the number of entries removed.
    """
    qs = _source_entries(source_type, source_id, organization).filter(is_automatic=True)
    _, per_model = qs.delete()
    deleted = per_model.get(JournalEntry._meta.label, 0)
    if deleted:
        logger.info(
            "journal_entry.deleted_automatic",
            extra={"source_type": source_type, "source_id": str(source_id), "entries": deleted},
        )
    return deleted


@transaction.atomic
def delete_entry(actor: ActorContext, entry_id: int) -> CommandResult:
    """
    Delete a whole journal entry (header and every line).

    Args:
        actor: The actor context
        entry_id: ID of entry to delete

    Returns:
        CommandResult with deletion summary or error
    """
    try:
        entry = JournalEntry.objects.select_for_update().get(
            pk=entry_id, organization=actor.organization
        )
    except JournalEntry.DoesNotExist:
        return CommandResult.fail("Journal entry not found.")

    entry_number = entry.entry_number
    line_count = entry.lines.count()
    entry.delete()

    logger.info(
        "journal_entry.deleted",
        extra={
            "organization_id": actor.organization.id,
            "entry_number": entry_number,
            "lines": line_count,
            "user_id": getattr(actor.user, "id", None),
        },
    )
    return CommandResult.ok({"deleted": True, "entry_number": entry_number, "lines": line_count})


# =============================================================================
# Manual entries
# =============================================================================

def create_manual_entry(
    actor: ActorContext,
    date,
    description: str,
    legs: list,
    project=None,
    currency: str = None,
    source_type: str = JournalEntry.SourceType.MANUAL,
    source_id: str = "",
) -> CommandResult:
    """
    Create a user-entered journal entry.

    Args:
        actor: The actor context
        date: Entry date
        description: Memo for the entry
        legs: List of dicts with account_id, side (DEBIT/CREDIT), amount,
            and optionally description
        project: Optional operations.Project of the actor's organization
        currency: Defaults to the organization's currency

    Returns:
        CommandResult with the created JournalEntry or error
    """
    organization = actor.organization
    if not organization.enable_accounting:
        return CommandResult.fail("Accounting is not enabled for this organization.")
    if not legs:
        return CommandResult.fail("At least one debit and one credit line are required.")
    if project is not None and project.organization_id != organization.id:
        return CommandResult.fail("Project not found.")

    account_ids = {leg.get("account_id") for leg in legs}
    accounts = {
        account.id: account
        for account in Account.objects.filter(organization=organization, id__in=account_ids)
    }

    draft = EntryDraft(
        organization=organization,
        date=date,
        description=description,
        source_type=source_type,
        source_id=source_id,
        currency=currency or organization.default_currency,
        is_automatic=False,
        project=project,
        created_by=actor.user,
    )

    try:
        for index, leg in enumerate(legs, start=1):
            account = accounts.get(leg.get("account_id"))
            if account is None:
                return CommandResult.fail(f"Line {index}: account {leg.get('account_id')} not found.")
            if not account.is_active:
                return CommandResult.fail(f"Line {index}: account {account.code} is inactive.")

            side = Side(leg.get("side"))
            add = draft.debit if side is Side.DEBIT else draft.credit
            add(account, to_money(leg.get("amount")), leg.get("description", ""))

        entry = write_journal_entry(draft)
    except ValueError:
        return CommandResult.fail("Each line needs a side of DEBIT or CREDIT.")
    except AccountingError as exc:
        return CommandResult.fail(str(exc))

    return CommandResult.ok(entry)


# =============================================================================
# Chart of accounts
# =============================================================================

ACCOUNT_UPDATE_FIELDS = {"code", "name", "account_type", "sub_type", "parent_id", "description", "is_active"}


@transaction.atomic
def create_account(
    actor: ActorContext,
    code: str,
    name: str,
    account_type: str,
    sub_type: str = None,
    parent_id: int = None,
    description: str = "",
) -> CommandResult:
    """
    Add an account to the organization's chart.

    Args:
        actor: The actor context
        code: Account code (unique per organization)
        name: Account name
        account_type: One of Account.AccountType choices
        sub_type: Optional free-form sub type
        parent_id: Optional parent account of the same organization
        description: Free text

    Returns:
        CommandResult with the created Account or error
    """
    organization = actor.organization
    if not organization.enable_accounting:
        return CommandResult.fail("Accounting is not enabled for this organization.")
    if account_type not in Account.AccountType.values:
        return CommandResult.fail(f"Unknown account type: {account_type}.")

    if Account.objects.filter(organization=organization, code=code).exists():
        return CommandResult.fail(f"Account code '{code}' already exists.")

    parent = None
    if parent_id:
        parent = Account.objects.filter(pk=parent_id, organization=organization).first()
        if parent is None:
            return CommandResult.fail("Parent account not found.")

    account = Account.objects.create(
        organization=organization,
        code=code,
        name=name,
        account_type=account_type,
        sub_type=sub_type or None,
        parent=parent,
        description=description,
    )
    logger.info(
        "account.created",
        extra={"organization_id": organization.id, "code": code, "account_type": account_type},
    )
    return CommandResult.ok(account)


@transaction.atomic
def update_account(actor: ActorContext, account_id: int, **updates) -> CommandResult:
    """
    Update an account of the organization's chart.

    Deactivating an account (is_active=False) takes it out of automatic
    account resolution and manual entries; its history stays.
    """
    organization = actor.organization
    if not organization.enable_accounting:
        return CommandResult.fail("Accounting is not enabled for this organization.")

    try:
        account = Account.objects.select_for_update().get(pk=account_id, organization=organization)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.")

    unknown = set(updates) - ACCOUNT_UPDATE_FIELDS
    if unknown:
        return CommandResult.fail(f"Cannot update: {', '.join(sorted(unknown))}.")

    if "code" in updates and updates["code"] != account.code:
        if Account.objects.filter(
            organization=organization,
            code=updates["code"],
        ).exclude(pk=account.id).exists():
            return CommandResult.fail(f"Account code '{updates['code']}' already exists.")

    if "account_type" in updates and updates["account_type"] not in Account.AccountType.values:
        return CommandResult.fail(f"Unknown account type: {updates['account_type']}.")

    parent_id = updates.get("parent_id")
    if parent_id:
        if parent_id == account.id:
            return CommandResult.fail("An account cannot be its own parent.")
        if not Account.objects.filter(pk=parent_id, organization=organization).exists():
            return CommandResult.fail("Parent account not found.")

    changed = []
    for field, value in updates.items():
        if getattr(account, field) != value:
            setattr(account, field, value)
            changed.append(field)

    if not changed:
        return CommandResult.ok(account)

    account.save(update_fields=changed + ["updated_at"])
    logger.info(
        "account.updated",
        extra={"organization_id": organization.id, "code": account.code, "fields": changed},
    )
    return CommandResult.ok(account)


@transaction.atomic
def delete_account(actor: ActorContext, account_id: int) -> CommandResult:
    """
    Delete an account that has no subaccounts and no journal lines.
    Accounts with history can only be deactivated.
    """
    organization = actor.organization
    if not organization.enable_accounting:
        return CommandResult.fail("Accounting is not enabled for this organization.")

    try:
        account = Account.objects.select_for_update().get(pk=account_id, organization=organization)
    except Account.DoesNotExist:
        return CommandResult.fail("Account not found.")

    if account.children.exists():
        return CommandResult.fail("Cannot delete an account that has subaccounts.")
    if account.journal_lines.exists():
        return CommandResult.fail("Cannot delete an account that has journal movements.")

    code = account.code
    account.delete()
    logger.info("account.deleted", extra={"organization_id": organization.id, "code": code})
    return CommandResult.ok({"deleted": True, "code": code})


# =============================================================================
# Setup / activation
# =============================================================================

@transaction.atomic
def setup_accounting(actor: ActorContext) -> CommandResult:
    """
    Enable accounting and provision the standard chart.

    When the chart already exists nothing is created (and the flag is left
    as it is); data["created"] tells the two cases apart.
    """
    organization = actor.organization

    if has_standard_chart(organization):
        return CommandResult.ok({
            "created": False,
            "accounts_count": Account.objects.filter(organization=organization).count(),
        })

    organization.enable_accounting = True
    organization.save(update_fields=["enable_accounting", "updated_at"])
    accounts = setup_standard_chart(organization)

    return CommandResult.ok({"created": True, "accounts_count": len(accounts)})


@transaction.atomic
def set_accounting_enabled(actor: ActorContext, enabled: bool) -> CommandResult:
    """Toggle accounting; enabling provisions the chart when it is missing."""
    organization = actor.organization
    organization.enable_accounting = enabled
    organization.save(update_fields=["enable_accounting", "updated_at"])

    provisioned = False
    if enabled and not has_standard_chart(organization):
        setup_standard_chart(organization)
        provisioned = True

    logger.info(
        "accounting.toggled",
        extra={"organization_id": organization.id, "enabled": enabled, "provisioned": provisioned},
    )
    return CommandResult.ok({"enable_accounting": enabled, "provisioned": provisioned})


def get_accounting_status(actor: ActorContext) -> dict:
    organization = actor.organization
    return {
        "is_enabled": organization.enable_accounting,
        "stats": get_chart_stats(organization) if organization.enable_accounting else None,
    }
