# tests/test_resolver.py
"""
Tests for account resolution: rubro table, per-organization overrides,
main accounts and the strict require_* lookups.
"""

import pytest

from accounting.exceptions import AccountResolutionError
from accounting.models import CategoryMapping
from accounting.resolver import (
    get_account_by_code,
    get_account_for_rubro,
    get_main_accounts,
    normalize_rubro,
    require_account,
    require_main,
    require_rubro_account,
    rubro_account_code,
)


class TestNormalizeRubro:

    @pytest.mark.parametrize("name,expected", [
        ("Materiales", "MATERIALES"),
        ("Mano de Obra", "MANO_DE_OBRA"),
        ("mano  obra", "MANO_OBRA"),
        ("  Oficina ", "OFICINA"),
        (None, ""),
    ])
    def test_normalize(self, name, expected):
        assert normalize_rubro(name) == expected


@pytest.mark.django_db
class TestRubroAccountCode:

    @pytest.mark.parametrize("name,income,expense", [
        ("Materiales", "4.1.03", "5.1.01"),
        ("Materiales Construccion", "4.1.03", "5.1.01"),
        ("Mano Obra", "4.1.01", "5.1.02"),
        ("Personal", "4.1.01", "5.1.02"),
        ("Subcontratistas", "4.1.01", "5.1.03"),
        ("Terceros", "4.1.01", "5.1.03"),
        ("Maquinaria", "4.1.02", "5.1.04"),
        ("Equipos", "4.1.02", "5.1.04"),
        ("Administrativos", "4.2.02", "5.2.03"),
        ("Oficina", "4.2.02", "5.2.03"),
    ])
    def test_builtin_table(self, organization, name, income, expense):
        assert rubro_account_code(organization, name, is_income=True) == income
        assert rubro_account_code(organization, name, is_income=False) == expense

    def test_unknown_rubro_uses_default(self, organization):
        assert rubro_account_code(organization, "Imprevistos", is_income=True) == "4.1.01"
        assert rubro_account_code(organization, "Imprevistos", is_income=False) == "5.1.01"

    def test_missing_name_uses_default(self, organization):
        assert rubro_account_code(organization, None, is_income=False) == "5.1.01"

    def test_organization_override_wins(self, organization, second_organization):
        CategoryMapping.objects.create(
            organization=organization,
            category="materiales",
            income_account_code="4.2.02",
            expense_account_code="5.1.04",
        )

        assert rubro_account_code(organization, "Materiales", is_income=True) == "4.2.02"
        assert rubro_account_code(organization, "Materiales", is_income=False) == "5.1.04"
        assert rubro_account_code(second_organization, "Materiales", is_income=False) == "5.1.01"

    def test_blank_override_side_falls_back(self, organization):
        CategoryMapping.objects.create(
            organization=organization,
            category="Mano de Obra",
            expense_account_code="5.2.01",
        )

        assert rubro_account_code(organization, "mano de obra", is_income=False) == "5.2.01"
        assert rubro_account_code(organization, "mano de obra", is_income=True) == "4.1.01"


@pytest.mark.django_db
class TestAccountLookup:

    def test_by_code(self, organization, chart):
        assert get_account_by_code(organization, "1.1.01") == chart["1.1.01"]

    def test_inactive_account_is_not_found(self, organization, chart):
        chart["1.1.01"].is_active = False
        chart["1.1.01"].save()

        assert get_account_by_code(organization, "1.1.01") is None

    def test_other_organization_is_not_found(self, second_organization, chart):
        assert get_account_by_code(second_organization, "1.1.01") is None

    def test_for_rubro(self, organization, chart):
        assert get_account_for_rubro(organization, "Maquinaria", is_income=False) == chart["5.1.04"]

    def test_main_accounts(self, organization, chart):
        main = get_main_accounts(organization)

        assert main.cash == chart["1.1.01"]
        assert main.receivables == chart["1.1.03"]
        assert main.payables == chart["2.1.01"]
        assert main.income == chart["4.1.01"]
        assert main.expense == chart["5.1.01"]
        assert main.payroll_expense == chart["5.2.01"]
        assert main.payroll_deductions == chart["2.1.03"]
        assert main.payroll_liability == main.payroll_deductions
        assert main.payable == main.payables

    def test_main_accounts_without_chart(self, organization):
        main = get_main_accounts(organization)

        assert main.cash is None
        with pytest.raises(AccountResolutionError) as exc_info:
            require_main(main, "cash")
        assert exc_info.value.role == "cash"
        assert exc_info.value.code == "1.1.01"


@pytest.mark.django_db
class TestRequireAccount:

    def test_missing_code_raises(self, organization, chart):
        with pytest.raises(AccountResolutionError) as exc_info:
            require_account(organization, "9.9.99", "sales_income")

        assert exc_info.value.role == "sales_income"
        assert "9.9.99" in str(exc_info.value)

    def test_missing_rubro_account_names_the_rubro(self, organization, chart):
        chart["5.1.02"].is_active = False
        chart["5.1.02"].save()

        with pytest.raises(AccountResolutionError) as exc_info:
            require_rubro_account(organization, "Mano Obra", is_income=False)

        assert exc_info.value.role == "rubro:MANO_OBRA"
        assert exc_info.value.code == "5.1.02"
