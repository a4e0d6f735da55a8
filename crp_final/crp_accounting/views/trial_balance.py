# crp_accounting/views/trial_balance.py

import logging

from django.http import HttpResponse
from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes, OpenApiResponse
from rest_framework import permissions, status
from rest_framework.response import Response

from crp_core.mixins import BaseCompanyAccessPermission, CompanyScopedGenericAPIViewMixin
from crp_core.utils import parse_date_param
from ..permissions import IsCompanyMember
from ..serializers.trial_balance import TrialBalanceResponseSerializer
from ..services import reports_service
from ..utils.report_exporters import XLSX_CONTENT_TYPE, generate_trial_balance_excel
from .errors import ledger_errors_as_api_exceptions

logger = logging.getLogger(__name__)


def xlsx_response(content: bytes, filename: str) -> HttpResponse:
    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


# =============================================================================
# Trial Balance View
# =============================================================================

@extend_schema(
    summary="Generate Trial Balance Report (Company Scoped)",
    description="""Trial balance of the company's active leaf accounts.

Debit/credit columns are activity inside the period; net columns carry each account's
balance (opening balance as of `start_date` plus the activity). Accounts without activity
and without an opening balance are omitted. An out-of-balance result is returned with
`is_balanced=false`, never as an error. `export=xlsx` downloads the report as Excel.
    """,
    parameters=[
        OpenApiParameter(name='start_date', description='Period start (YYYY-MM-DD).', required=False,
                         type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='end_date', description='Period end, inclusive (YYYY-MM-DD).', required=False,
                         type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='fiscal_year', description="Fiscal year label, e.g. '2024-2025'.", required=False,
                         type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='fiscal_period', description="Fiscal period label 'YYYY-MM'.", required=False,
                         type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='export', description="'xlsx' to download an Excel workbook.", required=False,
                         type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
    ],
    responses={
        200: TrialBalanceResponseSerializer,
        400: OpenApiResponse(description="Bad Request - Invalid parameters or start date after end date."),
        403: OpenApiResponse(description="Forbidden - Insufficient permissions or company context error."),
    },
    tags=['Reports']
)
class TrialBalanceView(CompanyScopedGenericAPIViewMixin):
    """Trial Balance for the request's company context."""
    permission_classes = [permissions.IsAuthenticated, BaseCompanyAccessPermission, IsCompanyMember]
    serializer_class = TrialBalanceResponseSerializer

    def get(self, request, *args, **kwargs):
        company_id = self.current_company.pk
        start_date = parse_date_param(request, 'start_date')
        end_date = parse_date_param(request, 'end_date')
        fiscal_year = request.query_params.get('fiscal_year') or None
        fiscal_period = request.query_params.get('fiscal_period') or None

        with ledger_errors_as_api_exceptions():
            report_data = reports_service.generate_trial_balance(
                company_id, start_date=start_date, end_date=end_date,
                fiscal_year=fiscal_year, fiscal_period=fiscal_period,
            )

        if not report_data['is_balanced']:
            logger.critical(
                f"COMPANY {company_id} TB OUT OF BALANCE! Period: {start_date} - {end_date}. "
                f"Difference: {report_data['totals']['difference']}. Investigation REQUIRED!")

        if request.query_params.get('export') == 'xlsx':
            filename = f"{self.current_company.subdomain_prefix}_Trial_Balance_{end_date or 'latest'}.xlsx"
            return xlsx_response(generate_trial_balance_excel(report_data), filename)

        serializer = self.get_serializer(report_data)
        return Response(serializer.data, status=status.HTTP_200_OK)
