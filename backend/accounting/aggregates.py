"""
In-memory journal entry aggregate.

An EntryDraft is the unit the posting rules produce and write_journal_entry
persists: a header plus an ordered list of legs. It is validated as a whole
before anything touches the database, so a stored entry is balanced by
construction.
"""
import re
from dataclasses import dataclass, field
from datetime import date as date_type
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, List, Optional

from django.conf import settings

from accounting.exceptions import AccountingError, UnbalancedEntryError

MONEY_Q = Decimal("0.01")
ZERO = Decimal("0.00")


def balance_tolerance() -> Decimal:
    return Decimal(str(getattr(settings, "ACCOUNTING_BALANCE_TOLERANCE", "0.01")))


def to_money(value) -> Decimal:
    """Round to cents, half up."""
    if isinstance(value, float):
        value = str(value)
    try:
        return Decimal(value).quantize(MONEY_Q, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError):
        raise AccountingError(f"Invalid amount: {value!r}")


def normalize_category(name: Optional[str]) -> str:
    """'Mano Obra' -> 'MANO_OBRA'."""
    return re.sub(r"\s+", "_", (name or "").strip().upper())


class Side(str, Enum):
    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


@dataclass(frozen=True)
class Leg:
    account: Any  # accounting.models.Account
    side: Side
    amount: Decimal
    description: str = ""

    @property
    def debit(self) -> Decimal:
        return self.amount if self.side is Side.DEBIT else ZERO

    @property
    def credit(self) -> Decimal:
        return self.amount if self.side is Side.CREDIT else ZERO


@dataclass
class EntryDraft:
    organization: Any
    date: date_type
    description: str
    source_type: str
    source_id: str = ""
    currency: str = "PESOS"
    is_automatic: bool = True
    project: Any = None
    created_by: Any = None
    legs: List[Leg] = field(default_factory=list)

    def debit(self, account, amount, description: str = "") -> "EntryDraft":
        self.legs.append(Leg(account, Side.DEBIT, to_money(amount), description))
        return self

    def credit(self, account, amount, description: str = "") -> "EntryDraft":
        self.legs.append(Leg(account, Side.CREDIT, to_money(amount), description))
        return self

    @property
    def total_debit(self) -> Decimal:
        return sum((leg.debit for leg in self.legs), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((leg.credit for leg in self.legs), ZERO)

    def validate(self) -> "EntryDraft":
        """
        Raises:
            AccountingError: no legs, a leg without account, a non-positive
                amount, or an account from another organization
            UnbalancedEntryError: |debit - credit| above the configured tolerance
        """
        if not self.legs:
            raise AccountingError("Entry has no legs.")

        for index, leg in enumerate(self.legs, start=1):
            if leg.account is None:
                raise AccountingError(f"Leg {index} has no account.")
            if leg.amount <= 0:
                raise AccountingError(f"Leg {index}: amount must be positive, got {leg.amount}.")
            if leg.account.organization_id != self.organization.id:
                raise AccountingError(
                    f"Leg {index}: account {leg.account.code} belongs to another organization."
                )

        total_debit, total_credit = self.total_debit, self.total_credit
        if abs(total_debit - total_credit) > balance_tolerance():
            raise UnbalancedEntryError(total_debit, total_credit)
        return self
