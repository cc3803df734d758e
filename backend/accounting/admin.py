# accounting/admin.py
"""
Django admin configuration for accounting models.

Journal entries are written by the posting layer and the manual entry
command (accounting/commands.py), which allocate entry numbers and check
the balance. The admin only shows them.
"""

from django.contrib import admin

from .models import Account, CategoryMapping, JournalEntry, JournalLine, OrganizationSequence


class ReadOnlyModelAdmin(admin.ModelAdmin):
    """Base admin class for ledger models edited only through commands."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


class ReadOnlyInline(admin.TabularInline):
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


class JournalLineInline(ReadOnlyInline):
    model = JournalLine
    extra = 0
    fields = ["line_no", "account", "description", "debit", "credit"]
    readonly_fields = fields


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "account_type", "sub_type", "organization", "is_active"]
    list_filter = ["account_type", "is_active", "organization"]
    search_fields = ["code", "name"]
    ordering = ["organization", "code"]
    readonly_fields = ["organization", "code", "account_type", "created_at", "updated_at"]


@admin.register(JournalEntry)
class JournalEntryAdmin(ReadOnlyModelAdmin):
    list_display = ["entry_number", "date", "description", "source_type", "is_automatic", "organization"]
    list_filter = ["source_type", "is_automatic", "organization"]
    search_fields = ["entry_number", "description", "source_id"]
    date_hierarchy = "date"
    inlines = [JournalLineInline]


@admin.register(CategoryMapping)
class CategoryMappingAdmin(admin.ModelAdmin):
    list_display = ["category", "income_account_code", "expense_account_code", "organization"]
    list_filter = ["organization"]
    search_fields = ["category"]


@admin.register(OrganizationSequence)
class OrganizationSequenceAdmin(ReadOnlyModelAdmin):
    list_display = ["organization", "name", "next_value", "updated_at"]
