import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


CURRENCY_CHOICES = [("PESOS", "Pesos"), ("USD", "US Dollar"), ("EUR", "Euro")]


def _owned():
    return [
        ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
        ("created_at", models.DateTimeField(auto_now_add=True)),
        ("organization", models.ForeignKey(
            on_delete=django.db.models.deletion.CASCADE,
            related_name="+",
            to="accounts.organization",
        )),
    ]


def _treasury():
    return [
        ("cash_box", models.ForeignKey(
            blank=True,
            null=True,
            on_delete=django.db.models.deletion.SET_NULL,
            related_name="+",
            to="operations.cashbox",
        )),
        ("bank_account", models.ForeignKey(
            blank=True,
            null=True,
            on_delete=django.db.models.deletion.SET_NULL,
            related_name="+",
            to="operations.bankaccount",
        )),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=_owned() + [("name", models.CharField(max_length=200))],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Provider",
            fields=_owned() + [("name", models.CharField(max_length=200))],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Project",
            fields=_owned() + [("name", models.CharField(max_length=200))],
            options={"ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Rubro",
            fields=_owned() + [("name", models.CharField(max_length=100))],
            options={"ordering": ["name"]},
        ),
        migrations.AddConstraint(
            model_name="rubro",
            constraint=models.UniqueConstraint(fields=("organization", "name"), name="uniq_rubro_name_per_org"),
        ),
        migrations.CreateModel(
            name="CashBox",
            fields=_owned() + [("name", models.CharField(max_length=100))],
        ),
        migrations.CreateModel(
            name="BankAccount",
            fields=_owned() + [
                ("name", models.CharField(max_length=100)),
                ("bank_name", models.CharField(blank=True, default="", max_length=100)),
            ],
        ),
        migrations.CreateModel(
            name="Bill",
            fields=_owned() + [
                ("type", models.CharField(choices=[("CLIENT", "Client"), ("PROVIDER", "Provider")], max_length=10)),
                ("number", models.CharField(max_length=50)),
                ("total", models.DecimalField(decimal_places=2, max_digits=18)),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("client", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="bills", to="operations.client",
                )),
                ("provider", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="bills", to="operations.provider",
                )),
                ("project", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="bills", to="operations.project",
                )),
                ("created_by", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
        migrations.AddConstraint(
            model_name="bill",
            constraint=models.CheckConstraint(condition=models.Q(total__gt=0), name="chk_bill_total_positive"),
        ),
        migrations.CreateModel(
            name="BillRubro",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("percentage", models.DecimalField(
                    decimal_places=2,
                    max_digits=5,
                    validators=[
                        django.core.validators.MinValueValidator(Decimal("0.01")),
                        django.core.validators.MaxValueValidator(Decimal("100")),
                    ],
                )),
                ("bill", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="bill_rubros", to="operations.bill",
                )),
                ("rubro", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="+", to="operations.rubro",
                )),
            ],
            options={"ordering": ["id"]},
        ),
        migrations.CreateModel(
            name="BillPayment",
            fields=_owned() + _treasury() + [
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("currency", models.CharField(choices=CURRENCY_CHOICES, default="PESOS", max_length=5)),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("bill", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="payments", to="operations.bill",
                )),
            ],
            options={"ordering": ["date", "id"]},
        ),
        migrations.CreateModel(
            name="Payment",
            fields=_owned() + _treasury() + [
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("currency", models.CharField(choices=CURRENCY_CHOICES, default="PESOS", max_length=5)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("date", models.DateField()),
                ("client", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="payments", to="operations.client",
                )),
                ("provider", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name="payments", to="operations.provider",
                )),
                ("rubro", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="+", to="operations.rubro",
                )),
                ("project", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="payments", to="operations.project",
                )),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
        migrations.CreateModel(
            name="Transaction",
            fields=_owned() + _treasury() + [
                ("type", models.CharField(choices=[("INCOME", "Income"), ("EXPENSE", "Expense")], max_length=10)),
                ("amount", models.DecimalField(decimal_places=2, max_digits=18)),
                ("currency", models.CharField(choices=CURRENCY_CHOICES, default="PESOS", max_length=5)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("date", models.DateField()),
                ("project", models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name="transactions", to="operations.project",
                )),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
        migrations.CreateModel(
            name="Payroll",
            fields=_owned() + _treasury() + [
                ("employee_name", models.CharField(max_length=200)),
                ("period", models.CharField(help_text="e.g. 2024-05", max_length=20)),
                ("base_salary", models.DecimalField(decimal_places=2, max_digits=18)),
                ("overtime_pay", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=18)),
                ("bonuses", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=18)),
                ("deductions", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=18)),
                ("net_pay", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("currency", models.CharField(choices=CURRENCY_CHOICES, default="PESOS", max_length=5)),
                ("date", models.DateField()),
            ],
            options={"ordering": ["-date", "-id"]},
        ),
    ]
