# accounting/views.py
"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business logic, validation.

Every endpoint except setup/ requires accounting to be enabled for the
caller's organization (403 otherwise).
"""

import math

from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require_accounting_enabled, resolve_actor
from operations.models import Project
from . import reports
from .commands import (
    create_account,
    create_manual_entry,
    delete_account,
    delete_entry,
    get_accounting_status,
    set_accounting_enabled,
    setup_accounting,
    update_account,
)
from .models import Account, JournalEntry
from .serializers import (
    AccountCreateSerializer,
    AccountingToggleSerializer,
    AccountSerializer,
    AccountUpdateSerializer,
    JournalEntryFilterSerializer,
    JournalEntrySerializer,
    ManualEntryInputSerializer,
    ReportQuerySerializer,
)


# =============================================================================
# Setup
# =============================================================================

class AccountingSetupView(APIView):
    """
    GET /api/accounting/setup/ -> {is_enabled, stats}
    POST /api/accounting/setup/ -> enable accounting and provision the chart
    PATCH /api/accounting/setup/ -> {"enable_accounting": bool}
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        return Response(get_accounting_status(actor))

    def post(self, request):
        actor = resolve_actor(request)
        result = setup_accounting(actor)

        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        if result.data["created"]:
            return Response(
                {
                    "message": "Accounting enabled and standard chart created.",
                    "accounts_created": result.data["accounts_count"],
                },
                status=status.HTTP_201_CREATED,
            )
        return Response({
            "message": "The organization already has a chart of accounts.",
            "accounts_count": result.data["accounts_count"],
        })

    def patch(self, request):
        actor = resolve_actor(request)

        serializer = AccountingToggleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = set_accounting_enabled(actor, serializer.validated_data["enable_accounting"])
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(result.data)


# =============================================================================
# Accounts
# =============================================================================

class AccountListCreateView(APIView):
    """
    GET /api/accounting/accounts/?type=ASSET&active=true -> list the chart
    POST /api/accounting/accounts/ -> add an account
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        accounts = Account.objects.filter(organization=actor.organization).select_related("parent")

        account_type = request.query_params.get("type")
        if account_type:
            accounts = accounts.filter(account_type=account_type.upper())

        active = request.query_params.get("active")
        if active is not None:
            accounts = accounts.filter(is_active=active.lower() in ("1", "true", "yes"))

        serializer = AccountSerializer(accounts.order_by("code"), many=True)
        return Response(serializer.data)

    def post(self, request):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        input_serializer = AccountCreateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = create_account(actor, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(result.data).data, status=status.HTTP_201_CREATED)


class AccountDetailView(APIView):
    """
    GET /api/accounting/accounts/<pk>/ -> retrieve account
    PATCH|PUT /api/accounting/accounts/<pk>/ -> update account
    DELETE /api/accounting/accounts/<pk>/ -> delete account without subaccounts or movements
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, actor, pk):
        return get_object_or_404(
            Account.objects.select_related("parent"),
            organization=actor.organization,
            pk=pk,
        )

    def get(self, request, pk):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        return Response(AccountSerializer(self.get_object(actor, pk)).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        account = self.get_object(actor, pk)

        input_serializer = AccountUpdateSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)

        result = update_account(actor, account.id, **input_serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(AccountSerializer(result.data).data)

    put = patch

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        account = self.get_object(actor, pk)
        result = delete_account(actor, account.id)

        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Journal Entries
# =============================================================================

def _filter_entries(queryset, params: dict):
    if params.get("date_from"):
        queryset = queryset.filter(date__gte=params["date_from"])
    if params.get("date_to"):
        queryset = queryset.filter(date__lte=params["date_to"])
    if params.get("entry_number"):
        queryset = queryset.filter(entry_number__icontains=params["entry_number"])
    if params.get("project_id"):
        queryset = queryset.filter(project_id=params["project_id"])
    if params.get("source_type"):
        queryset = queryset.filter(source_type=params["source_type"])

    if params.get("entry_type"):
        queryset = queryset.filter(is_automatic=params["entry_type"] == "AUTOMATIC")
    elif params.get("is_automatic") is not None:
        queryset = queryset.filter(is_automatic=params["is_automatic"])

    line_filter = Q()
    if params.get("account_id"):
        line_filter &= Q(lines__account_id=params["account_id"])

    amount_from, amount_to = params.get("amount_from"), params.get("amount_to")
    if amount_from is not None or amount_to is not None:
        debit_q, credit_q = Q(lines__debit__gt=0), Q(lines__credit__gt=0)
        if amount_from is not None:
            debit_q &= Q(lines__debit__gte=amount_from)
            credit_q &= Q(lines__credit__gte=amount_from)
        if amount_to is not None:
            debit_q &= Q(lines__debit__lte=amount_to)
            credit_q &= Q(lines__credit__lte=amount_to)
        line_filter &= debit_q | credit_q

    if line_filter:
        queryset = queryset.filter(line_filter).distinct()
    return queryset


class JournalEntryListCreateView(APIView):
    """
    GET /api/accounting/journal-entries/ -> paginated, filtered journal
    POST /api/accounting/journal-entries/ -> create manual entry
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        filters = JournalEntryFilterSerializer(data=request.query_params.dict())
        filters.is_valid(raise_exception=True)
        params = filters.validated_data

        entries = _filter_entries(
            JournalEntry.objects.filter(organization=actor.organization),
            params,
        ).order_by("-date", "-entry_number")

        page, limit = params["page"], params["limit"]
        total_count = entries.count()
        offset = (page - 1) * limit
        page_entries = entries.select_related("project").prefetch_related("lines", "lines__account")[
            offset:offset + limit
        ]

        return Response({
            "entries": JournalEntrySerializer(page_entries, many=True).data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total_count": total_count,
                "total_pages": math.ceil(total_count / limit),
            },
        })

    def post(self, request):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        input_serializer = ManualEntryInputSerializer(data=request.data)
        input_serializer.is_valid(raise_exception=True)
        data = input_serializer.validated_data

        project = None
        if data.get("project_id"):
            project = get_object_or_404(Project, pk=data["project_id"], organization=actor.organization)

        result = create_manual_entry(
            actor,
            date=data["date"],
            description=data["description"],
            legs=[dict(line) for line in data["lines"]],
            project=project,
            currency=data.get("currency") or None,
        )

        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(JournalEntrySerializer(result.data).data, status=status.HTTP_201_CREATED)


class JournalEntryDetailView(APIView):
    """
    GET /api/accounting/journal-entries/<pk>/ -> retrieve
    DELETE /api/accounting/journal-entries/<pk>/ -> delete the whole entry
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        entry = get_object_or_404(
            JournalEntry.objects.select_related("project").prefetch_related("lines", "lines__account"),
            organization=actor.organization,
            pk=pk,
        )
        return Response(JournalEntrySerializer(entry).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        entry = get_object_or_404(JournalEntry, organization=actor.organization, pk=pk)
        result = delete_entry(actor, entry.id)

        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(status=status.HTTP_204_NO_CONTENT)


# =============================================================================
# Reports
# =============================================================================

class ReportView(APIView):
    """GET /api/accounting/reports/?type=trial-balance|balance|income-statement|stats"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require_accounting_enabled(actor)

        query = ReportQuerySerializer(data=request.query_params.dict())
        query.is_valid(raise_exception=True)
        params = query.validated_data
        organization = actor.organization

        report_type = params["type"]
        if report_type == "balance":
            data = reports.balance_sheet(organization, as_of=params.get("date_to"))
        elif report_type == "income-statement":
            data = reports.income_statement(organization, params.get("date_from"), params.get("date_to"))
        elif report_type == "trial-balance":
            data = reports.trial_balance(organization, params.get("date_from"), params.get("date_to"))
        else:
            data = reports.accounting_stats(organization)

        return Response(data)
