# tests/test_chart.py
"""
Tests for the standard chart of accounts.

Tests cover:
- Template shape (50 accounts, per-type counts, parents before children)
- Provisioning (parents wired, description, all-or-nothing on repeat)
- Chart stats
"""

from collections import Counter

import pytest
from django.db import IntegrityError

from accounting.chart import STANDARD_CHART, get_chart_stats, has_standard_chart, setup_standard_chart
from accounting.models import Account


class TestStandardChartTemplate:

    def test_has_fifty_accounts(self):
        assert len(STANDARD_CHART) == 50

    def test_counts_per_type(self):
        counts = Counter(spec.account_type for spec in STANDARD_CHART)
        assert counts == {
            Account.AccountType.ASSET: 12,
            Account.AccountType.LIABILITY: 11,
            Account.AccountType.EQUITY: 5,
            Account.AccountType.INCOME: 8,
            Account.AccountType.EXPENSE: 14,
        }

    def test_codes_are_unique(self):
        codes = [spec.code for spec in STANDARD_CHART]
        assert len(codes) == len(set(codes))

    def test_parents_come_first(self):
        seen = set()
        for spec in STANDARD_CHART:
            if spec.parent_code:
                assert spec.parent_code in seen, spec.code
            seen.add(spec.code)

    def test_child_shares_parent_type(self):
        types = {spec.code: spec.account_type for spec in STANDARD_CHART}
        for spec in STANDARD_CHART:
            if spec.parent_code:
                assert types[spec.parent_code] == spec.account_type


@pytest.mark.django_db
class TestSetupStandardChart:

    def test_creates_every_account(self, organization):
        created = setup_standard_chart(organization)

        assert len(created) == 50
        assert Account.objects.filter(organization=organization).count() == 50
        assert has_standard_chart(organization)

    def test_wires_parents(self, organization):
        setup_standard_chart(organization)

        cash = Account.objects.get(organization=organization, code="1.1.01")
        assert cash.name == "Caja y Bancos"
        assert cash.parent.code == "1.1"
        assert cash.parent.parent.code == "1"
        assert Account.objects.get(organization=organization, code="1").parent is None

    def test_accounts_are_active_with_standard_description(self, organization):
        setup_standard_chart(organization)

        payables = Account.objects.get(organization=organization, code="2.1.01")
        assert payables.is_active
        assert payables.description == "Cuenta estándar del plan contable - Cuentas por Pagar Comerciales"
        assert payables.normal_balance == Account.NormalBalance.CREDIT

    def test_second_run_fails_and_keeps_chart(self, organization):
        setup_standard_chart(organization)

        with pytest.raises(IntegrityError):
            setup_standard_chart(organization)

        assert Account.objects.filter(organization=organization).count() == 50

    def test_charts_are_per_organization(self, organization, second_organization):
        setup_standard_chart(organization)

        assert not has_standard_chart(second_organization)
        setup_standard_chart(second_organization)
        assert Account.objects.filter(code="1.1.01").count() == 2


@pytest.mark.django_db
class TestChartStats:

    def test_counts(self, organization, chart):
        chart["5.3.02"].is_active = False
        chart["5.3.02"].save()

        stats = get_chart_stats(organization)

        assert stats["total_accounts"] == 50
        assert stats["active_accounts"] == 49
        assert stats["accounts_by_type"][Account.AccountType.EXPENSE] == 13
        assert stats["accounts_by_type"][Account.AccountType.ASSET] == 12

    def test_empty_chart(self, organization):
        stats = get_chart_stats(organization)

        assert stats == {"total_accounts": 0, "active_accounts": 0, "accounts_by_type": {}}
