# accounting/urls.py
"""
URL configuration for accounting API.

Endpoints:
- /setup/ - Accounting status, setup and toggle
- /accounts/ - Chart of Accounts listing and maintenance
- /journal-entries/ - Journal listing, manual entries, detail and delete
- /reports/ - Trial balance, balance sheet, income statement, stats
"""

from django.urls import path

from .views import (
    AccountingSetupView,
    AccountDetailView,
    AccountListCreateView,
    JournalEntryDetailView,
    JournalEntryListCreateView,
    ReportView,
)

app_name = "accounting"

urlpatterns = [
    path(
        "setup/",
        AccountingSetupView.as_view(),
        name="setup",
    ),
    path(
        "accounts/",
        AccountListCreateView.as_view(),
        name="account-list-create",
    ),
    path(
        "accounts/<int:pk>/",
        AccountDetailView.as_view(),
        name="account-detail",
    ),
    path(
        "journal-entries/",
        JournalEntryListCreateView.as_view(),
        name="journal-entry-list-create",
    ),
    path(
        "journal-entries/<int:pk>/",
        JournalEntryDetailView.as_view(),
        name="journal-entry-detail",
    ),
    path(
        "reports/",
        ReportView.as_view(),
        name="reports",
    ),
]
