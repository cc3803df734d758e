from django.contrib import admin

from .models import (
    BankAccount,
    Bill,
    BillPayment,
    BillRubro,
    CashBox,
    Client,
    Payment,
    Payroll,
    Project,
    Provider,
    Rubro,
    Transaction,
)


class BillRubroInline(admin.TabularInline):
    model = BillRubro
    extra = 0


@admin.register(Bill)
class BillAdmin(admin.ModelAdmin):
    list_display = ("number", "type", "total", "date", "client", "provider", "project", "organization")
    list_filter = ("type", "organization")
    search_fields = ("number", "description")
    inlines = [BillRubroInline]


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ("date", "type", "amount", "currency", "description", "organization")
    list_filter = ("type", "currency", "organization")


@admin.register(Payroll)
class PayrollAdmin(admin.ModelAdmin):
    list_display = ("employee_name", "period", "base_salary", "deductions", "net_pay", "date", "organization")
    list_filter = ("period", "organization")
    search_fields = ("employee_name",)


admin.site.register([Client, Provider, Project, Rubro, CashBox, BankAccount, BillPayment, Payment])
