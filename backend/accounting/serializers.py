# accounting/serializers.py
"""
Serializers for accounting API.

Note: These serializers are used for:
1. Input validation
2. Output formatting

The actual business logic happens in commands.py.
"""

from decimal import Decimal

from rest_framework import serializers

from accounting.aggregates import Side
from .models import Account, JournalEntry, JournalLine


MONEY = {"max_digits": 18, "decimal_places": 2}


# =============================================================================
# Account Serializers
# =============================================================================

class AccountSerializer(serializers.ModelSerializer):
    parent_code = serializers.CharField(source="parent.code", read_only=True, default=None)
    normal_balance = serializers.CharField(read_only=True)

    class Meta:
        model = Account
        fields = [
            "id", "code", "name", "account_type", "sub_type",
            "parent", "parent_code", "normal_balance",
            "is_active", "description", "created_at", "updated_at",
        ]
        read_only_fields = fields


class AccountCreateSerializer(serializers.Serializer):
    """Serializer for creating accounts via command."""
    code = serializers.CharField(max_length=20)
    name = serializers.CharField(max_length=255)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices)
    sub_type = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True, default=None)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True, default="")


class AccountUpdateSerializer(serializers.Serializer):
    """Serializer for updating accounts via command."""
    code = serializers.CharField(max_length=20, required=False)
    name = serializers.CharField(max_length=255, required=False)
    account_type = serializers.ChoiceField(choices=Account.AccountType.choices, required=False)
    sub_type = serializers.CharField(max_length=30, required=False, allow_blank=True, allow_null=True)
    parent_id = serializers.IntegerField(required=False, allow_null=True)
    description = serializers.CharField(required=False, allow_blank=True)
    is_active = serializers.BooleanField(required=False)


# =============================================================================
# Journal Entry Serializers
# =============================================================================

class JournalLineSerializer(serializers.ModelSerializer):
    """Serializer for individual journal lines."""
    account_code = serializers.CharField(source="account.code", read_only=True)
    account_name = serializers.CharField(source="account.name", read_only=True)
    debit_account = serializers.SerializerMethodField()
    credit_account = serializers.SerializerMethodField()

    class Meta:
        model = JournalLine
        fields = [
            "id", "line_no", "account", "account_code", "account_name",
            "debit_account", "credit_account",
            "description", "debit", "credit", "is_debit", "amount",
        ]
        read_only_fields = fields

    def get_debit_account(self, obj):
        return obj.account.code if obj.is_debit else None

    def get_credit_account(self, obj):
        return None if obj.is_debit else obj.account.code


class JournalEntrySerializer(serializers.ModelSerializer):
    """
    Full journal entry serializer with nested lines.
    Used for retrieval and display.
    """
    lines = JournalLineSerializer(many=True, read_only=True)
    project_name = serializers.CharField(source="project.name", read_only=True, default=None)
    total_debit = serializers.DecimalField(read_only=True, **MONEY)
    total_credit = serializers.DecimalField(read_only=True, **MONEY)
    is_balanced = serializers.BooleanField(read_only=True)

    class Meta:
        model = JournalEntry
        fields = [
            "id", "entry_number", "date", "description", "currency", "exchange_rate",
            "source_type", "source_id", "is_automatic",
            "project", "project_name", "created_by", "created_at",
            "lines", "total_debit", "total_credit", "is_balanced",
        ]
        read_only_fields = fields


class ManualLineInputSerializer(serializers.Serializer):
    """
    One line of a manual entry.

    Either side + amount, or debit / credit (exactly one of them non-zero).
    Normalized to side + amount.
    """
    account_id = serializers.IntegerField()
    side = serializers.ChoiceField(choices=[s.value for s in Side], required=False)
    amount = serializers.DecimalField(required=False, min_value=Decimal("0.01"), **MONEY)
    debit = serializers.DecimalField(required=False, default=Decimal("0"), min_value=Decimal("0"), **MONEY)
    credit = serializers.DecimalField(required=False, default=Decimal("0"), min_value=Decimal("0"), **MONEY)
    description = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")

    def validate(self, attrs):
        debit = attrs.pop("debit")
        credit = attrs.pop("credit")

        if attrs.get("side"):
            if attrs.get("amount") is None:
                raise serializers.ValidationError("amount is required with side.")
            return attrs

        if debit > 0 and credit > 0:
            raise serializers.ValidationError("A line cannot have both debit and credit.")
        if debit == 0 and credit == 0:
            raise serializers.ValidationError("A line needs a debit or a credit amount.")

        attrs["side"] = Side.DEBIT.value if debit > 0 else Side.CREDIT.value
        attrs["amount"] = debit if debit > 0 else credit
        return attrs


class ManualEntryInputSerializer(serializers.Serializer):
    date = serializers.DateField()
    description = serializers.CharField(max_length=255)
    project_id = serializers.IntegerField(required=False, allow_null=True)
    currency = serializers.CharField(max_length=8, required=False, allow_blank=True)
    lines = ManualLineInputSerializer(many=True)

    def validate_lines(self, lines):
        if len(lines) < 2:
            raise serializers.ValidationError("At least two lines are required.")
        return lines


class JournalEntryFilterSerializer(serializers.Serializer):
    """Query parameters of the journal listing."""
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
    entry_number = serializers.CharField(required=False)
    account_id = serializers.IntegerField(required=False)
    project_id = serializers.IntegerField(required=False)
    source_type = serializers.ChoiceField(choices=JournalEntry.SourceType.choices, required=False)
    entry_type = serializers.ChoiceField(choices=["AUTOMATIC", "MANUAL"], required=False)
    amount_from = serializers.DecimalField(required=False, **MONEY)
    amount_to = serializers.DecimalField(required=False, **MONEY)
    is_automatic = serializers.BooleanField(required=False, allow_null=True, default=None)
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500, default=50)


class AccountingToggleSerializer(serializers.Serializer):
    enable_accounting = serializers.BooleanField()


class ReportQuerySerializer(serializers.Serializer):
    REPORT_TYPES = ["balance", "income-statement", "trial-balance", "stats"]

    type = serializers.ChoiceField(
        choices=REPORT_TYPES,
        error_messages={"required": "Report type required."},
    )
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)
