# crp_accounting/views/balance_sheet.py

import logging

from drf_spectacular.utils import extend_schema, OpenApiParameter, OpenApiTypes, OpenApiResponse
from rest_framework import permissions, status
from rest_framework.response import Response

from crp_core.mixins import BaseCompanyAccessPermission, CompanyScopedGenericAPIViewMixin
from crp_core.utils import parse_date_param
from ..permissions import IsCompanyMember
from ..serializers.balance_sheet import BalanceSheetResponseSerializer
from ..services import reports_service
from ..utils.report_exporters import generate_balance_sheet_excel
from .errors import ledger_errors_as_api_exceptions
from .trial_balance import xlsx_response

logger = logging.getLogger("crp_accounting.views.balance_sheet")


# =============================================================================
# Balance Sheet View
# =============================================================================

@extend_schema(
    summary="Generate Balance Sheet Report (Company Scoped)",
    description="""Statement of financial position as of a date.

Assets are split into current/fixed and liabilities into current/long-term (account category first,
then the configured code prefixes). Equity includes retained earnings computed life-to-date from
revenue and expense accounts. `revenue_expense_summary` is a separate figure limited to
`fiscal_year` when given. Checks Assets = Liabilities + Equity; an imbalance is reported as data.
    """,
    parameters=[
        OpenApiParameter(name='as_of_date', description="Report date (YYYY-MM-DD). Defaults to the company's today.",
                         required=False, type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='fiscal_year', description="Fiscal year label for the revenue/expense summary.",
                         required=False, type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
        OpenApiParameter(name='export', description="'xlsx' to download an Excel workbook.", required=False,
                         type=OpenApiTypes.STR, location=OpenApiParameter.QUERY),
    ],
    responses={
        200: BalanceSheetResponseSerializer,
        400: OpenApiResponse(description="Bad Request - Invalid/missing parameters."),
        403: OpenApiResponse(description="Forbidden - Insufficient permissions or company context error."),
    },
    tags=['Reports']
)
class BalanceSheetView(CompanyScopedGenericAPIViewMixin):
    """API endpoint to generate the Balance Sheet report for the request's company."""
    permission_classes = [permissions.IsAuthenticated, BaseCompanyAccessPermission, IsCompanyMember]
    serializer_class = BalanceSheetResponseSerializer

    def get(self, request, *args, **kwargs):
        company = self.current_company
        as_of_date = parse_date_param(request, 'as_of_date', default=company.local_today())
        fiscal_year = request.query_params.get('fiscal_year') or None

        with ledger_errors_as_api_exceptions():
            report_data = reports_service.generate_balance_sheet(company.pk, as_of_date, fiscal_year=fiscal_year)

        if not report_data['is_balanced']:
            logger.critical(
                f"COMPANY {company.pk} BALANCE SHEET OUT OF BALANCE! Date: {as_of_date}. "
                f"Difference: {report_data['difference']}. Investigation REQUIRED!")

        if request.query_params.get('export') == 'xlsx':
            filename = f"{company.subdomain_prefix}_Balance_Sheet_{as_of_date:%Y%m%d}.xlsx"
            return xlsx_response(generate_balance_sheet_excel(report_data), filename)

        serializer = self.get_serializer(report_data)
        return Response(serializer.data, status=status.HTTP_200_OK)
