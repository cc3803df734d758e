# accounting/chart.py
"""
Standard chart of accounts for construction companies.

STANDARD_CHART lists every account parent-before-child; provisioning walks
it once and wires each parent from the accounts already created in the same
pass. setup_standard_chart() is NOT idempotent: callers check
has_standard_chart() first.
"""

import logging
from typing import Dict, NamedTuple, Optional

from django.db import transaction
from django.db.models import Count, Q

from accounts.models import Organization
from accounting.models import Account

logger = logging.getLogger(__name__)

A = Account.AccountType
S = Account.SubType


class ChartAccount(NamedTuple):
    code: str
    name: str
    account_type: str
    parent_code: Optional[str]
    sub_type: Optional[str]


STANDARD_CHART = (
    ChartAccount("1", "ACTIVO", A.ASSET, None, None),
    ChartAccount("1.1", "Activo Corriente", A.ASSET, "1", S.CURRENT),
    ChartAccount("1.1.01", "Caja y Bancos", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.1.02", "Inversiones Temporales", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.1.03", "Cuentas por Cobrar Comerciales", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.1.04", "Otras Cuentas por Cobrar", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.1.05", "Inventarios", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.1.06", "Gastos Pagados por Anticipado", A.ASSET, "1.1", S.CURRENT),
    ChartAccount("1.2", "Activo No Corriente", A.ASSET, "1", S.NON_CURRENT),
    ChartAccount("1.2.01", "Propiedades, Planta y Equipo", A.ASSET, "1.2", S.NON_CURRENT),
    ChartAccount("1.2.02", "Depreciación Acumulada", A.ASSET, "1.2", S.NON_CURRENT),
    ChartAccount("1.2.03", "Activos Intangibles", A.ASSET, "1.2", S.NON_CURRENT),

    ChartAccount("2", "PASIVO", A.LIABILITY, None, None),
    ChartAccount("2.1", "Pasivo Corriente", A.LIABILITY, "2", S.CURRENT),
    ChartAccount("2.1.01", "Cuentas por Pagar Comerciales", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.1.02", "Otras Cuentas por Pagar", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.1.03", "Sueldos y Cargas Sociales por Pagar", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.1.04", "Impuestos por Pagar", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.1.05", "Préstamos a Corto Plazo", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.1.06", "Ingresos Diferidos", A.LIABILITY, "2.1", S.CURRENT),
    ChartAccount("2.2", "Pasivo No Corriente", A.LIABILITY, "2", S.NON_CURRENT),
    ChartAccount("2.2.01", "Préstamos a Largo Plazo", A.LIABILITY, "2.2", S.NON_CURRENT),
    ChartAccount("2.2.02", "Hipotecas por Pagar", A.LIABILITY, "2.2", S.NON_CURRENT),

    ChartAccount("3", "PATRIMONIO NETO", A.EQUITY, None, None),
    ChartAccount("3.1", "Capital Social", A.EQUITY, "3", None),
    ChartAccount("3.2", "Reservas", A.EQUITY, "3", None),
    ChartAccount("3.3", "Resultados Acumulados", A.EQUITY, "3", None),
    ChartAccount("3.4", "Resultado del Ejercicio", A.EQUITY, "3", None),

    ChartAccount("4", "INGRESOS", A.INCOME, None, None),
    ChartAccount("4.1", "Ingresos Operacionales", A.INCOME, "4", S.OPERATIONAL),
    ChartAccount("4.1.01", "Ingresos por Construcción", A.INCOME, "4.1", S.OPERATIONAL),
    ChartAccount("4.1.02", "Ingresos por Servicios", A.INCOME, "4.1", S.OPERATIONAL),
    ChartAccount("4.1.03", "Ingresos por Venta de Materiales", A.INCOME, "4.1", S.OPERATIONAL),
    ChartAccount("4.2", "Ingresos No Operacionales", A.INCOME, "4", S.NON_OPERATIONAL),
    ChartAccount("4.2.01", "Ingresos Financieros", A.INCOME, "4.2", S.NON_OPERATIONAL),
    ChartAccount("4.2.02", "Otros Ingresos", A.INCOME, "4.2", S.NON_OPERATIONAL),

    ChartAccount("5", "EGRESOS", A.EXPENSE, None, None),
    ChartAccount("5.1", "Costos Directos", A.EXPENSE, "5", S.DIRECT_COST),
    ChartAccount("5.1.01", "Materiales de Construcción", A.EXPENSE, "5.1", S.DIRECT_COST),
    ChartAccount("5.1.02", "Mano de Obra Directa", A.EXPENSE, "5.1", S.DIRECT_COST),
    ChartAccount("5.1.03", "Subcontratistas", A.EXPENSE, "5.1", S.DIRECT_COST),
    ChartAccount("5.1.04", "Maquinaria y Equipos", A.EXPENSE, "5.1", S.DIRECT_COST),
    ChartAccount("5.2", "Gastos Administrativos", A.EXPENSE, "5", S.ADMINISTRATIVE),
    ChartAccount("5.2.01", "Sueldos Administrativos", A.EXPENSE, "5.2", S.ADMINISTRATIVE),
    ChartAccount("5.2.02", "Servicios Públicos", A.EXPENSE, "5.2", S.ADMINISTRATIVE),
    ChartAccount("5.2.03", "Gastos de Oficina", A.EXPENSE, "5.2", S.ADMINISTRATIVE),
    ChartAccount("5.2.04", "Depreciaciones", A.EXPENSE, "5.2", S.ADMINISTRATIVE),
    ChartAccount("5.3", "Gastos Financieros", A.EXPENSE, "5", S.FINANCIAL),
    ChartAccount("5.3.01", "Intereses por Préstamos", A.EXPENSE, "5.3", S.FINANCIAL),
    ChartAccount("5.3.02", "Comisiones Bancarias", A.EXPENSE, "5.3", S.FINANCIAL),
)


@transaction.atomic
def setup_standard_chart(organization: Organization) -> Dict[str, Account]:
    """
    Create every STANDARD_CHART account for the organization.

    Returns the created accounts keyed by code. All-or-nothing: any failure
    (for example a duplicate code when the chart already exists) rolls the
    whole chart back.
    """
    created: Dict[str, Account] = {}

    for spec in STANDARD_CHART:
        created[spec.code] = Account.objects.create(
            organization=organization,
            code=spec.code,
            name=spec.name,
            account_type=spec.account_type,
            sub_type=spec.sub_type,
            parent=created[spec.parent_code] if spec.parent_code else None,
            is_active=True,
            description=f"Cuenta estándar del plan contable - {spec.name}",
        )

    logger.info(
        "chart.provisioned",
        extra={"organization_id": organization.id, "accounts_created": len(created)},
    )
    return created


def has_standard_chart(organization: Organization) -> bool:
    return Account.objects.filter(organization=organization).exists()


def get_chart_stats(organization: Organization) -> dict:
    """
    Counts for the organization's chart.

    accounts_by_type counts active accounts only.
    """
    totals = Account.objects.filter(organization=organization).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    by_type = {
        row["account_type"]: row["count"]
        for row in (
            Account.objects.filter(organization=organization, is_active=True)
            .values("account_type")
            .annotate(count=Count("id"))
            .order_by()
        )
    }
    return {
        "total_accounts": totals["total"],
        "active_accounts": totals["active"],
        "accounts_by_type": by_type,
    }
