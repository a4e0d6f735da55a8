# crp_accounting/serializers/balance_sheet.py

import logging
from rest_framework import serializers

logger = logging.getLogger(__name__)

# =============================================================================
# Balance Sheet Report Serializers
# =============================================================================

class BalanceSheetLineSerializer(serializers.Serializer):
    """A leaf account with its balance, signed the way its section reports it."""
    account_id = serializers.UUIDField(read_only=True)
    account_code = serializers.CharField(read_only=True)
    account_name = serializers.CharField(read_only=True)
    category = serializers.CharField(read_only=True, allow_blank=True, allow_null=True)
    balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "BalanceSheetLine"


class BalanceSheetAssetsSerializer(serializers.Serializer):
    current = BalanceSheetLineSerializer(many=True, read_only=True)
    current_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    fixed = BalanceSheetLineSerializer(many=True, read_only=True)
    fixed_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "BalanceSheetAssets"


class BalanceSheetLiabilitiesSerializer(serializers.Serializer):
    current = BalanceSheetLineSerializer(many=True, read_only=True)
    current_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    long_term = BalanceSheetLineSerializer(many=True, read_only=True)
    long_term_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "BalanceSheetLiabilities"


class BalanceSheetEquitySerializer(serializers.Serializer):
    accounts = BalanceSheetLineSerializer(many=True, read_only=True)
    retained_earnings = serializers.DecimalField(
        max_digits=20, decimal_places=2, read_only=True,
        help_text="Life-to-date revenue minus expense as of the report date."
    )
    retained_earnings_label = serializers.CharField(read_only=True)
    total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "BalanceSheetEquity"


class BalanceSheetTotalsSerializer(serializers.Serializer):
    assets = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    liabilities_and_equity = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    difference = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "BalanceSheetTotals"


class RevenueExpenseSummarySerializer(serializers.Serializer):
    """
    Revenue/expense figures shown next to the statement. Restricted to the
    requested fiscal year when one is given; not the retained earnings figure.
    """
    fiscal_year = serializers.CharField(read_only=True, allow_null=True)
    total_revenue = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    total_expense = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    net_income = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "RevenueExpenseSummary"


class BalanceSheetResponseSerializer(serializers.Serializer):
    """Complete Balance Sheet response."""
    company_id = serializers.IntegerField(read_only=True)
    company_name = serializers.CharField(read_only=True)
    as_of_date = serializers.DateField(read_only=True)
    assets = BalanceSheetAssetsSerializer(read_only=True)
    liabilities = BalanceSheetLiabilitiesSerializer(read_only=True)
    equity = BalanceSheetEquitySerializer(read_only=True)
    totals = BalanceSheetTotalsSerializer(read_only=True)
    total_assets = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    total_liabilities_and_equity = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    difference = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    is_balanced = serializers.BooleanField(read_only=True)
    revenue_expense_summary = RevenueExpenseSummarySerializer(read_only=True)
    generated_at = serializers.DateTimeField(read_only=True)

    class Meta:
        ref_name = "BalanceSheetResponse"
