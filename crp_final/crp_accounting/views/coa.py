# crp_accounting/views/coa.py
import logging

from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiParameter, OpenApiTypes
from rest_framework import filters, permissions, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from crp_core.exceptions import AlreadySeededException
from crp_core.mixins import BaseCompanyAccessPermission, CompanyScopedViewSetMixin, user_label
from crp_core.utils import parse_bool_param, parse_date_param
from ..filters import AccountFilterSet
from ..models.coa import Account
from ..permissions import CanManageChartOfAccounts
from ..serializers.coa import (
    AccountBalanceSerializer, AccountDeletionCheckSerializer, AccountReadSerializer,
    AccountSummaryCountsSerializer, AccountSummarySerializer, AccountTreeNodeSerializer, AccountWriteSerializer,
    SeedResultSerializer,
)
from ..serializers.ledger import AccountLedgerSerializer
from ..services import balance_service, coa_seeding_service, coa_service, ledger_service
from .errors import ledger_errors_as_api_exceptions

logger = logging.getLogger(__name__)


# --- Standard Pagination ---
class StandardResultsSetPagination(PageNumberPagination):
    page_size = 25
    page_size_query_param = 'page_size'
    max_page_size = 1000


def _date_param(name: str, description: str) -> OpenApiParameter:
    return OpenApiParameter(name=name, description=description, type=OpenApiTypes.DATE,
                            location=OpenApiParameter.QUERY)


# =============================================================================
# Account ViewSet
# =============================================================================
@extend_schema_view(
    list=extend_schema(
        summary="List Accounts (Scoped to Current Company)",
        parameters=[OpenApiParameter(name='tree', type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY,
                                     description="Return the nested chart instead of a paginated list.")],
    ),
    retrieve=extend_schema(summary="Retrieve Account with children and hierarchy path"),
    create=extend_schema(summary="Create Account (Scoped to Current Company)"),
    update=extend_schema(summary="Update Account (system accounts: description, notes, active only)"),
    partial_update=extend_schema(summary="Partial Update Account"),
    destroy=extend_schema(summary="Delete Account (soft delete, blocked by children or entries)"),
    balance=extend_schema(
        summary="Account balance as of a date",
        parameters=[
            _date_param('as_of', "Inclusive upper bound (YYYY-MM-DD). Defaults to all entries."),
            _date_param('start_date', "Entries before this date are folded into the opening balance."),
            OpenApiParameter(name='fiscal_year', type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
            OpenApiParameter(name='fiscal_period', type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        ],
        responses={200: AccountBalanceSerializer},
    ),
    ledger=extend_schema(
        summary="Account ledger (statement) with running balance",
        parameters=[
            _date_param('start_date', "Period start (YYYY-MM-DD)."),
            _date_param('end_date', "Period end (YYYY-MM-DD)."),
            OpenApiParameter(name='include_void', type=OpenApiTypes.BOOL, location=OpenApiParameter.QUERY,
                             description="Include VOID entries (audit view); they are folded into the running balance and totals."),
        ],
        responses={200: AccountLedgerSerializer},
    ),
    seed=extend_schema(summary="Seed the default Chart of Accounts", request=None,
                       responses={201: SeedResultSerializer}),
    can_delete=extend_schema(summary="Check whether the account can be deleted",
                             responses={200: AccountDeletionCheckSerializer}),
)
class AccountViewSet(CompanyScopedViewSetMixin):
    queryset = Account.global_objects.all()
    permission_classes = [permissions.IsAuthenticated, BaseCompanyAccessPermission, CanManageChartOfAccounts]
    pagination_class = StandardResultsSetPagination
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = AccountFilterSet
    search_fields = ['code', 'name', 'description']
    ordering_fields = ('code', 'name', 'account_type', 'level', 'is_active', 'created_at', 'updated_at')
    ordering = ['code']

    def get_queryset(self):
        qs = super().get_queryset()
        if not getattr(self, 'swagger_fake_view', False):
            qs = qs.select_related('parent_account')
        return qs

    def get_serializer_class(self):
        if self.action in ['create', 'update', 'partial_update']:
            return AccountWriteSerializer
        return AccountReadSerializer

    def list(self, request, *args, **kwargs):
        queryset = self.filter_queryset(self.get_queryset())
        company_id = self.current_company.pk
        summary = AccountSummaryCountsSerializer(coa_service.account_summary(company_id, queryset=queryset)).data

        if parse_bool_param(request, 'tree'):
            tree = coa_service.build_account_tree(company_id, queryset=queryset)
            return Response({
                'summary': summary,
                'tree': AccountTreeNodeSerializer(tree, many=True, context=self.get_serializer_context()).data,
            })

        page = self.paginate_queryset(queryset)
        if page is not None:
            response = self.get_paginated_response(self.get_serializer(page, many=True).data)
            response.data['summary'] = summary
            return response
        return Response({'summary': summary, 'results': self.get_serializer(queryset, many=True).data})

    def retrieve(self, request, *args, **kwargs):
        instance = self.get_object()
        data = dict(self.get_serializer(instance).data)
        data['children'] = AccountSummarySerializer(instance.get_children(), many=True).data
        data['hierarchy_path'] = AccountSummarySerializer(instance.get_hierarchy_path(), many=True).data
        return Response(data)

    def perform_destroy(self, instance: Account):
        logger.info(
            f"User {user_label(self.request)} (Co: {self.current_company.name}) soft deleting "
            f"Account {instance.pk} ('{instance.code}')")
        with ledger_errors_as_api_exceptions():
            coa_service.soft_delete_account(instance, user=self.request.user)

    @action(detail=True, methods=['get'], url_path='can-delete')
    def can_delete(self, request, pk=None):
        allowed, reason = coa_service.can_delete(self.get_object())
        return Response(AccountDeletionCheckSerializer({'can_delete': allowed, 'reason': reason}).data)

    @action(detail=True, methods=['get'])
    def balance(self, request, pk=None):
        account = self.get_object()
        as_of = parse_date_param(request, 'as_of')
        start_date = parse_date_param(request, 'start_date')
        with ledger_errors_as_api_exceptions():
            result = balance_service.compute_account_balance(
                self.current_company.pk, account.pk, as_of=as_of, start_date=start_date,
                fiscal_year=request.query_params.get('fiscal_year') or None,
                fiscal_period=request.query_params.get('fiscal_period') or None,
            )
        payload = dict(result, as_of=as_of, start_date=start_date)
        return Response(AccountBalanceSerializer(payload).data)

    @action(detail=True, methods=['get'])
    def ledger(self, request, pk=None):
        account = self.get_object()
        start_date = parse_date_param(request, 'start_date')
        end_date = parse_date_param(request, 'end_date')
        include_void = parse_bool_param(request, 'include_void')
        with ledger_errors_as_api_exceptions():
            ledger_data = ledger_service.get_account_ledger_data(
                self.current_company.pk, account.pk,
                start_date=start_date, end_date=end_date, include_void=include_void,
            )

        data = dict(AccountLedgerSerializer(ledger_data).data)
        page = self.paginate_queryset(data['entries'])
        if page is not None:
            data['entries'] = page
            data['count'] = self.paginator.page.paginator.count
            data['next'] = self.paginator.get_next_link()
            data['previous'] = self.paginator.get_previous_link()
        return Response(data)

    @action(detail=False, methods=['post'])
    def seed(self, request):
        company = self.current_company
        if coa_seeding_service.is_chart_seeded(company):
            raise AlreadySeededException()
        with ledger_errors_as_api_exceptions():
            created = coa_seeding_service.seed_default_chart(company, user=request.user)
        summary = coa_seeding_service.seeding_summary(company.pk)
        logger.info(f"User {user_label(request)} seeded {created} accounts for Co '{company.name}'.")
        return Response(SeedResultSerializer(dict(summary, created=created)).data, status=status.HTTP_201_CREATED)

