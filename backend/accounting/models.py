# accounting/models.py
"""
Ledger models for Obra.

Models:
- OrganizationSequence: per-organization counters (journal entry numbers)
- Account: chart of accounts, a per-organization tree
- CategoryMapping: per-organization rubro -> account code overrides
- JournalEntry: entry header, one per logical accounting transaction
- JournalLine: one debit-or-credit leg of an entry

Entries are written by accounting.commands only (write_journal_entry,
create_manual_entry); the header and all its lines are created in one
transaction, and deleting a header removes its lines.
"""

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q, Sum

from accounts.models import Currency, Organization
from accounting.aggregates import balance_tolerance, normalize_category


class OrganizationSequence(models.Model):
    """
    Per-organization counters for sequential identifiers.

    Rows are locked with select_for_update while a value is taken, so two
    concurrent postings can never receive the same entry number.
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="sequences",
    )
    name = models.CharField(max_length=100)
    next_value = models.BigIntegerField(default=1)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "name"],
                name="uniq_org_sequence_name",
            ),
        ]

    def __str__(self):
        return f"{self.organization_id}:{self.name}={self.next_value}"


class Account(models.Model):
    """
    Chart of Accounts entry.

    Codes are hierarchical ("5.1.02" sits under "5.1"); the parent link is
    wired at provisioning time and is not re-derived from the code.
    """

    class AccountType(models.TextChoices):
        ASSET = "ASSET", "Asset"
        LIABILITY = "LIABILITY", "Liability"
        EQUITY = "EQUITY", "Equity"
        INCOME = "INCOME", "Income"
        EXPENSE = "EXPENSE", "Expense"

    class SubType(models.TextChoices):
        CURRENT = "CURRENT", "Current"
        NON_CURRENT = "NON_CURRENT", "Non-current"
        OPERATIONAL = "OPERATIONAL", "Operational"
        NON_OPERATIONAL = "NON_OPERATIONAL", "Non-operational"
        DIRECT_COST = "DIRECT_COST", "Direct cost"
        ADMINISTRATIVE = "ADMINISTRATIVE", "Administrative"
        FINANCIAL = "FINANCIAL", "Financial"

    class NormalBalance(models.TextChoices):
        DEBIT = "DEBIT", "Debit"
        CREDIT = "CREDIT", "Credit"

    NORMAL_BALANCE_MAP = {
        AccountType.ASSET: NormalBalance.DEBIT,
        AccountType.EXPENSE: NormalBalance.DEBIT,
        AccountType.LIABILITY: NormalBalance.CREDIT,
        AccountType.EQUITY: NormalBalance.CREDIT,
        AccountType.INCOME: NormalBalance.CREDIT,
    }

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="accounts",
    )
    code = models.CharField(max_length=20)
    name = models.CharField(max_length=255)
    account_type = models.CharField(max_length=20, choices=AccountType.choices)
    # Free-form; SubType lists the values the standard chart uses.
    sub_type = models.CharField(max_length=30, null=True, blank=True)
    parent = models.ForeignKey(
        "self",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="children",
    )
    is_active = models.BooleanField(default=True)
    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "code"],
                name="uniq_account_code_per_org",
            )
        ]
        ordering = ["code"]
        indexes = [
            models.Index(fields=["organization", "account_type"], name="accounting__organiz_5f2a1c_idx"),
            models.Index(fields=["organization", "is_active"], name="accounting__organiz_8b7d3e_idx"),
        ]

    def __str__(self):
        return f"{self.code} - {self.name}"

    @property
    def normal_balance(self) -> str:
        return self.NORMAL_BALANCE_MAP[self.account_type]

    def clean(self):
        if self.parent and self.parent.organization_id != self.organization_id:
            raise ValidationError("Parent account must belong to the same organization.")


class CategoryMapping(models.Model):
    """
    Organization-specific routing of a rubro to income/expense accounts.

    Consulted before the built-in rubro table. A blank code leaves that side
    to the built-in table.
    """

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="category_mappings",
    )
    category = models.CharField(max_length=100, help_text="Normalized rubro name, e.g. MANO_OBRA")
    income_account_code = models.CharField(max_length=20, blank=True, default="")
    expense_account_code = models.CharField(max_length=20, blank=True, default="")

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "category"],
                name="uniq_category_mapping_per_org",
            ),
        ]
        ordering = ["category"]

    def __str__(self):
        return f"{self.category} -> {self.income_account_code or '-'} / {self.expense_account_code or '-'}"

    def save(self, *args, **kwargs):
        self.category = normalize_category(self.category)
        super().save(*args, **kwargs)


class JournalEntry(models.Model):
    """
    Journal entry header.

    Automatic entries carry the (source_type, source_id) of the business
    document that produced them; manual entries use source_type MANUAL.
    """

    class SourceType(models.TextChoices):
        TRANSACTION = "TRANSACTION", "Treasury transaction"
        PAYROLL = "PAYROLL", "Payroll"
        BILL = "BILL", "Bill"
        BILL_PAYMENT = "BILL_PAYMENT", "Bill payment"
        PAYMENT = "PAYMENT", "Payment"
        MANUAL = "MANUAL", "Manual"

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="journal_entries",
    )
    entry_number = models.CharField(max_length=20)
    date = models.DateField()
    description = models.CharField(max_length=255, blank=True, default="")
    currency = models.CharField(max_length=5, choices=Currency.choices, default=Currency.PESOS)
    # Conversion is not supported; always 1.
    exchange_rate = models.DecimalField(max_digits=18, decimal_places=6, default=Decimal("1"))

    source_type = models.CharField(max_length=20, choices=SourceType.choices)
    source_id = models.CharField(max_length=64, blank=True, default="")
    is_automatic = models.BooleanField(default=False)

    project = models.ForeignKey(
        "operations.Project",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="journal_entries",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="created_journal_entries",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "entry_number"],
                name="uniq_entry_number_per_org",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "date"], name="accounting__organiz_3c9e41_idx"),
            models.Index(fields=["source_type", "source_id"], name="accounting__source__7a0d52_idx"),
        ]
        ordering = ["-date", "-entry_number"]
        verbose_name_plural = "journal entries"

    def __str__(self):
        return f"JE {self.entry_number} ({self.date})"

    def _totals(self) -> dict:
        return self.lines.aggregate(debit_total=Sum("debit"), credit_total=Sum("credit"))

    @property
    def total_debit(self) -> Decimal:
        return self._totals()["debit_total"] or Decimal("0.00")

    @property
    def total_credit(self) -> Decimal:
        return self._totals()["credit_total"] or Decimal("0.00")

    @property
    def is_balanced(self) -> bool:
        totals = self._totals()
        debit = totals["debit_total"] or Decimal("0.00")
        credit = totals["credit_total"] or Decimal("0.00")
        return abs(debit - credit) <= balance_tolerance()


class JournalLine(models.Model):
    """
    One leg of a journal entry: exactly one of debit/credit is non-zero.
    """

    entry = models.ForeignKey(
        JournalEntry,
        on_delete=models.CASCADE,
        related_name="lines",
    )
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="journal_lines",
    )
    line_no = models.PositiveIntegerField()
    account = models.ForeignKey(
        Account,
        on_delete=models.PROTECT,
        related_name="journal_lines",
    )
    description = models.CharField(max_length=255, blank=True, default="")
    debit = models.DecimalField(max_digits=18, decimal_places=2, default=0)
    credit = models.DecimalField(max_digits=18, decimal_places=2, default=0)

    class Meta:
        ordering = ["entry", "line_no"]
        constraints = [
            models.UniqueConstraint(
                fields=["entry", "line_no"],
                name="uniq_line_no_per_entry",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__gt=0) & Q(credit__gt=0)),
                name="chk_line_not_both_debit_credit",
            ),
            models.CheckConstraint(
                condition=~(Q(debit__exact=0) & Q(credit__exact=0)),
                name="chk_line_not_both_zero",
            ),
            models.CheckConstraint(
                condition=Q(debit__gte=0) & Q(credit__gte=0),
                name="chk_line_non_negative",
            ),
        ]
        indexes = [
            models.Index(fields=["organization", "account"], name="accounting__organiz_e14b6f_idx"),
        ]

    def __str__(self):
        return f"JE#{self.entry_id} L{self.line_no}"

    def save(self, *args, **kwargs):
        if self.entry_id and self.organization_id and self.entry.organization_id != self.organization_id:
            raise ValidationError("JournalLine organization must match entry organization.")
        if self.account_id and self.organization_id and self.account.organization_id != self.organization_id:
            raise ValidationError("JournalLine organization must match account organization.")
        super().save(*args, **kwargs)

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > 0 else self.credit

    @property
    def is_debit(self) -> bool:
        return self.debit > 0

    @property
    def debit_account(self):
        return self.account if self.is_debit else None

    @property
    def credit_account(self):
        return None if self.is_debit else self.account
