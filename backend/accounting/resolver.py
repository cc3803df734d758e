# accounting/resolver.py
"""
Account resolution: which account does a posting leg go to.

Lookups return None on a miss; the require_* variants raise
AccountResolutionError and are what the posting rules use, so an entry is
either fully resolvable or not posted at all.
"""

from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional

from accounts.models import Organization
from accounting.aggregates import normalize_category
from accounting.exceptions import AccountResolutionError
from accounting.models import Account, CategoryMapping


class RubroAccounts(NamedTuple):
    income: str
    expense: str


DEFAULT_RUBRO = "DEFAULT"

RUBRO_ACCOUNT_MAP: Dict[str, RubroAccounts] = {
    "MATERIALES": RubroAccounts("4.1.03", "5.1.01"),
    "MATERIALES_CONSTRUCCION": RubroAccounts("4.1.03", "5.1.01"),
    "MANO_OBRA": RubroAccounts("4.1.01", "5.1.02"),
    "PERSONAL": RubroAccounts("4.1.01", "5.1.02"),
    "SUBCONTRATISTAS": RubroAccounts("4.1.01", "5.1.03"),
    "TERCEROS": RubroAccounts("4.1.01", "5.1.03"),
    "MAQUINARIA": RubroAccounts("4.1.02", "5.1.04"),
    "EQUIPOS": RubroAccounts("4.1.02", "5.1.04"),
    "ADMINISTRATIVOS": RubroAccounts("4.2.02", "5.2.03"),
    "OFICINA": RubroAccounts("4.2.02", "5.2.03"),
    DEFAULT_RUBRO: RubroAccounts("4.1.01", "5.1.01"),
}


# Fixed chart codes used by the posting rules.
CASH = "1.1.01"
RECEIVABLES = "1.1.03"
PAYABLES = "2.1.01"
PAYROLL_DEDUCTIONS = "2.1.03"
GENERIC_INCOME = "4.1.01"
SALES_INCOME = "4.1.03"
GENERIC_EXPENSE = "5.1.01"
PAYROLL_EXPENSE = "5.2.01"

MAIN_ACCOUNT_CODES = {
    "cash": CASH,
    "receivables": RECEIVABLES,
    "payables": PAYABLES,
    "income": GENERIC_INCOME,
    "expense": GENERIC_EXPENSE,
    "payroll_expense": PAYROLL_EXPENSE,
    "payroll_deductions": PAYROLL_DEDUCTIONS,
}


def normalize_rubro(name: Optional[str]) -> str:
    return normalize_category(name)


def rubro_account_code(organization: Organization, rubro_name: Optional[str], is_income: bool) -> str:
    """
    Chart code a rubro posts to.

    Order: the organization's CategoryMapping, the built-in table, DEFAULT.
    """
    key = normalize_rubro(rubro_name)

    override = CategoryMapping.objects.filter(organization=organization, category=key).first()
    if override:
        code = override.income_account_code if is_income else override.expense_account_code
        if code:
            return code

    accounts = RUBRO_ACCOUNT_MAP.get(key, RUBRO_ACCOUNT_MAP[DEFAULT_RUBRO])
    return accounts.income if is_income else accounts.expense


def get_account_by_code(organization: Organization, code: str) -> Optional[Account]:
    return Account.objects.filter(organization=organization, code=code, is_active=True).first()


def get_account_for_rubro(organization: Organization, rubro_name: Optional[str], is_income: bool) -> Optional[Account]:
    return get_account_by_code(organization, rubro_account_code(organization, rubro_name, is_income))


@dataclass(frozen=True)
class MainAccounts:
    """The accounts most posting rules need; a slot is None when not provisioned."""

    cash: Optional[Account] = None
    receivables: Optional[Account] = None
    payables: Optional[Account] = None
    income: Optional[Account] = None
    expense: Optional[Account] = None
    payroll_expense: Optional[Account] = None
    payroll_deductions: Optional[Account] = None

    @property
    def payroll_liability(self) -> Optional[Account]:
        return self.payroll_deductions

    @property
    def payable(self) -> Optional[Account]:
        return self.payables


def get_main_accounts(organization: Organization) -> MainAccounts:
    by_code = {
        account.code: account
        for account in Account.objects.filter(
            organization=organization,
            is_active=True,
            code__in=MAIN_ACCOUNT_CODES.values(),
        )
    }
    return MainAccounts(**{slot: by_code.get(code) for slot, code in MAIN_ACCOUNT_CODES.items()})


def require_account(organization: Organization, code: str, role: str) -> Account:
    account = get_account_by_code(organization, code)
    if account is None:
        raise AccountResolutionError(role, code)
    return account


def require_rubro_account(organization: Organization, rubro_name: Optional[str], is_income: bool) -> Account:
    code = rubro_account_code(organization, rubro_name, is_income)
    account = get_account_by_code(organization, code)
    if account is None:
        raise AccountResolutionError(f"rubro:{normalize_rubro(rubro_name) or DEFAULT_RUBRO}", code)
    return account


def require_main(main: MainAccounts, slot: str) -> Account:
    account = getattr(main, slot)
    if account is None:
        raise AccountResolutionError(slot, MAIN_ACCOUNT_CODES.get(slot))
    return account
