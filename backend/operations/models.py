# operations/models.py
"""
Business documents that feed the automatic journal.

Only the fields the posting rules read are modelled here: parties, projects,
rubros (spending/revenue categories), treasury holders, bills with their
rubro split, bill payments, generic payments, treasury transactions and
payroll runs. Every row is scoped by organization.
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q

from accounts.models import Currency, Organization


class OrganizationOwned(models.Model):
    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True


class Client(OrganizationOwned):
    name = models.CharField(max_length=200)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Provider(OrganizationOwned):
    name = models.CharField(max_length=200)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Project(OrganizationOwned):
    name = models.CharField(max_length=200)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Rubro(OrganizationOwned):
    """Revenue/spending category, e.g. "Materiales" or "Mano de Obra"."""

    name = models.CharField(max_length=100)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["organization", "name"],
                name="uniq_rubro_name_per_org",
            ),
        ]

    def __str__(self):
        return self.name


class CashBox(OrganizationOwned):
    name = models.CharField(max_length=100)

    def __str__(self):
        return self.name


class BankAccount(OrganizationOwned):
    name = models.CharField(max_length=100)
    bank_name = models.CharField(max_length=100, blank=True, default="")

    def __str__(self):
        return f"{self.bank_name} {self.name}".strip()


class TreasuryMixin(models.Model):
    """Where the money physically moved; both may be empty."""

    cash_box = models.ForeignKey(
        CashBox,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    bank_account = models.ForeignKey(
        BankAccount,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    class Meta:
        abstract = True


class Bill(OrganizationOwned):
    """
    Invoice issued to a client or received from a provider.

    The total is split across rubros by percentage (BillRubro) when the
    bill is journaled.
    """

    class Type(models.TextChoices):
        CLIENT = "CLIENT", "Client"
        PROVIDER = "PROVIDER", "Provider"

    type = models.CharField(max_length=10, choices=Type.choices)
    number = models.CharField(max_length=50)
    total = models.DecimalField(max_digits=18, decimal_places=2)
    date = models.DateField()
    description = models.CharField(max_length=255, blank=True, default="")
    client = models.ForeignKey(Client, null=True, blank=True, on_delete=models.PROTECT, related_name="bills")
    provider = models.ForeignKey(Provider, null=True, blank=True, on_delete=models.PROTECT, related_name="bills")
    project = models.ForeignKey(Project, null=True, blank=True, on_delete=models.SET_NULL, related_name="bills")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.CheckConstraint(
                condition=Q(total__gt=0),
                name="chk_bill_total_positive",
            ),
        ]

    def __str__(self):
        return f"Bill #{self.number}"


class BillRubro(models.Model):
    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="bill_rubros")
    rubro = models.ForeignKey(Rubro, on_delete=models.PROTECT, related_name="+")
    percentage = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01")), MaxValueValidator(Decimal("100"))],
    )

    class Meta:
        ordering = ["id"]

    def __str__(self):
        return f"{self.rubro} {self.percentage}%"


class BillPayment(OrganizationOwned, TreasuryMixin):
    """Full or partial settlement of a bill."""

    bill = models.ForeignKey(Bill, on_delete=models.CASCADE, related_name="payments")
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=5, choices=Currency.choices, default=Currency.PESOS)
    date = models.DateField()
    description = models.CharField(max_length=255, blank=True, default="")

    class Meta:
        ordering = ["date", "id"]

    def __str__(self):
        return f"Payment {self.amount} on {self.bill}"


class Payment(OrganizationOwned, TreasuryMixin):
    """Collection from a client or disbursement to a provider not tied to a bill."""

    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=5, choices=Currency.choices, default=Currency.PESOS)
    description = models.CharField(max_length=255, blank=True, default="")
    date = models.DateField()
    client = models.ForeignKey(Client, null=True, blank=True, on_delete=models.PROTECT, related_name="payments")
    provider = models.ForeignKey(Provider, null=True, blank=True, on_delete=models.PROTECT, related_name="payments")
    rubro = models.ForeignKey(Rubro, null=True, blank=True, on_delete=models.SET_NULL, related_name="+")
    project = models.ForeignKey(Project, null=True, blank=True, on_delete=models.SET_NULL, related_name="payments")

    class Meta:
        ordering = ["-date", "-id"]


class Transaction(OrganizationOwned, TreasuryMixin):
    """Treasury movement: money in or out of a cash box or bank account."""

    class Type(models.TextChoices):
        INCOME = "INCOME", "Income"
        EXPENSE = "EXPENSE", "Expense"

    type = models.CharField(max_length=10, choices=Type.choices)
    amount = models.DecimalField(max_digits=18, decimal_places=2)
    currency = models.CharField(max_length=5, choices=Currency.choices, default=Currency.PESOS)
    description = models.CharField(max_length=255, blank=True, default="")
    date = models.DateField()
    project = models.ForeignKey(Project, null=True, blank=True, on_delete=models.SET_NULL, related_name="transactions")

    class Meta:
        ordering = ["-date", "-id"]


class Payroll(OrganizationOwned, TreasuryMixin):
    """
    One employee's pay for one period.

    gross = base_salary + overtime_pay + bonuses. net_pay is stored only when
    it was agreed explicitly; otherwise it is gross - deductions.
    """

    employee_name = models.CharField(max_length=200)
    period = models.CharField(max_length=20, help_text="e.g. 2024-05")
    base_salary = models.DecimalField(max_digits=18, decimal_places=2)
    overtime_pay = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0"))
    bonuses = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0"))
    deductions = models.DecimalField(max_digits=18, decimal_places=2, default=Decimal("0"))
    net_pay = models.DecimalField(max_digits=18, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=5, choices=Currency.choices, default=Currency.PESOS)
    date = models.DateField()

    class Meta:
        ordering = ["-date", "-id"]

    def __str__(self):
        return f"{self.employee_name} ({self.period})"

    @property
    def gross_pay(self) -> Decimal:
        return self.base_salary + self.overtime_pay + self.bonuses

    @property
    def effective_net_pay(self) -> Decimal:
        """Zero or missing net_pay means gross minus deductions."""
        if self.net_pay:
            return self.net_pay
        return self.gross_pay - self.deductions
