# accounting/exceptions.py
"""
Domain errors raised by the ledger code.

The posting entry points convert these into CommandResult failures, so
nothing here ever reaches the bill/payment/payroll write that triggered a
posting.
"""

from decimal import Decimal


class AccountingError(Exception):
    """Base class for ledger errors."""


class AccountResolutionError(AccountingError):
    """
    A leg needs an account that the organization's chart does not provide.

    role is the semantic slot ("cash", "payables", "rubro:MATERIALES", ...)
    and code the chart code that was looked up, when one applies.
    """

    def __init__(self, role: str, code: str | None = None):
        self.role = role
        self.code = code
        detail = f"No active account for {role}"
        if code:
            detail += f" (code {code})"
        super().__init__(detail)


class UnbalancedEntryError(AccountingError):
    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = total_debit
        self.total_credit = total_credit
        super().__init__(
            f"Entry is not balanced. Debit={total_debit} Credit={total_credit}"
        )


class SourceNotFoundError(AccountingError):
    def __init__(self, source_type: str, source_id):
        self.source_type = source_type
        self.source_id = source_id
        super().__init__(f"{source_type} {source_id} not found.")
