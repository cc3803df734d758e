import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        ("operations", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="OrganizationSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100)),
                ("next_value", models.BigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="sequences",
                    to="accounts.organization",
                )),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(fields=("organization", "name"), name="uniq_org_sequence_name"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.CharField(max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("account_type", models.CharField(
                    choices=[
                        ("ASSET", "Asset"),
                        ("LIABILITY", "Liability"),
                        ("EQUITY", "Equity"),
                        ("INCOME", "Income"),
                        ("EXPENSE", "Expense"),
                    ],
                    max_length=20,
                )),
                ("sub_type", models.CharField(blank=True, max_length=30, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("description", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="accounts",
                    to="accounts.organization",
                )),
                ("parent", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="children",
                    to="accounting.account",
                )),
            ],
            options={
                "ordering": ["code"],
                "indexes": [
                    models.Index(fields=["organization", "account_type"], name="accounting__organiz_5f2a1c_idx"),
                    models.Index(fields=["organization", "is_active"], name="accounting__organiz_8b7d3e_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("organization", "code"), name="uniq_account_code_per_org"),
                ],
            },
        ),
        migrations.CreateModel(
            name="CategoryMapping",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("category", models.CharField(help_text="Normalized rubro name, e.g. MANO_OBRA", max_length=100)),
                ("income_account_code", models.CharField(blank=True, default="", max_length=20)),
                ("expense_account_code", models.CharField(blank=True, default="", max_length=20)),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="category_mappings",
                    to="accounts.organization",
                )),
            ],
            options={
                "ordering": ["category"],
                "constraints": [
                    models.UniqueConstraint(fields=("organization", "category"), name="uniq_category_mapping_per_org"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("entry_number", models.CharField(max_length=20)),
                ("date", models.DateField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("currency", models.CharField(
                    choices=[("PESOS", "Pesos"), ("USD", "US Dollar"), ("EUR", "Euro")],
                    default="PESOS",
                    max_length=5,
                )),
                ("exchange_rate", models.DecimalField(decimal_places=6, default=Decimal("1"), max_digits=18)),
                ("source_type", models.CharField(
                    choices=[
                        ("TRANSACTION", "Treasury transaction"),
                        ("PAYROLL", "Payroll"),
                        ("BILL", "Bill"),
                        ("BILL_PAYMENT", "Bill payment"),
                        ("PAYMENT", "Payment"),
                        ("MANUAL", "Manual"),
                    ],
                    max_length=20,
                )),
                ("source_id", models.CharField(blank=True, default="", max_length=64)),
                ("is_automatic", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("created_by", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="created_journal_entries",
                    to=settings.AUTH_USER_MODEL,
                )),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="journal_entries",
                    to="accounts.organization",
                )),
                ("project", models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name="journal_entries",
                    to="operations.project",
                )),
            ],
            options={
                "verbose_name_plural": "journal entries",
                "ordering": ["-date", "-entry_number"],
                "indexes": [
                    models.Index(fields=["organization", "date"], name="accounting__organiz_3c9e41_idx"),
                    models.Index(fields=["source_type", "source_id"], name="accounting__source__7a0d52_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("organization", "entry_number"), name="uniq_entry_number_per_org"),
                ],
            },
        ),
        migrations.CreateModel(
            name="JournalLine",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("line_no", models.PositiveIntegerField()),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("debit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("credit", models.DecimalField(decimal_places=2, default=0, max_digits=18)),
                ("account", models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name="journal_lines",
                    to="accounting.account",
                )),
                ("entry", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="lines",
                    to="accounting.journalentry",
                )),
                ("organization", models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name="journal_lines",
                    to="accounts.organization",
                )),
            ],
            options={
                "ordering": ["entry", "line_no"],
                "indexes": [
                    models.Index(fields=["organization", "account"], name="accounting__organiz_e14b6f_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("entry", "line_no"), name="uniq_line_no_per_entry"),
                    models.CheckConstraint(
                        condition=~(models.Q(("debit__gt", 0)) & models.Q(("credit__gt", 0))),
                        name="chk_line_not_both_debit_credit",
                    ),
                    models.CheckConstraint(
                        condition=~(models.Q(("debit__exact", 0)) & models.Q(("credit__exact", 0))),
                        name="chk_line_not_both_zero",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit__gte", 0), ("credit__gte", 0)),
                        name="chk_line_non_negative",
                    ),
                ],
            },
        ),
    ]
