# crp_accounting/serializers/trial_balance.py

import logging
from rest_framework import serializers

logger = logging.getLogger(__name__)

# =============================================================================
# Trial Balance Serializers
# =============================================================================

class TrialBalanceRowSerializer(serializers.Serializer):
    """
    A single leaf account line of the Trial Balance.
    Debit/credit totals are period activity; net columns carry the closing balance.
    """
    account_id = serializers.UUIDField(read_only=True, help_text="Primary key of the Account.")
    account_code = serializers.CharField(read_only=True, help_text="Account code, unique within the company.")
    account_name = serializers.CharField(read_only=True)
    account_type = serializers.CharField(read_only=True)
    account_nature = serializers.CharField(read_only=True)
    opening_balance = serializers.DecimalField(
        max_digits=20, decimal_places=2, read_only=True,
        help_text="Balance as of the start of the period, in the account's own polarity."
    )
    debit_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    credit_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    net_debit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    net_credit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "TrialBalanceRow"


class TrialBalancePeriodSerializer(serializers.Serializer):
    start_date = serializers.DateField(read_only=True, allow_null=True)
    end_date = serializers.DateField(read_only=True, allow_null=True)
    fiscal_year = serializers.CharField(read_only=True, allow_null=True)
    fiscal_period = serializers.CharField(read_only=True, allow_null=True)

    class Meta:
        ref_name = "TrialBalancePeriod"


class TrialBalanceTotalsSerializer(serializers.Serializer):
    debit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    credit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    difference = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "TrialBalanceTotals"


class TrialBalanceResponseSerializer(serializers.Serializer):
    """Complete Trial Balance response."""
    company_id = serializers.IntegerField(read_only=True, help_text="ID of the Company this report belongs to.")
    company_name = serializers.CharField(read_only=True)
    period = TrialBalancePeriodSerializer(read_only=True)
    rows = TrialBalanceRowSerializer(many=True, read_only=True)
    grouped_by_type = serializers.DictField(
        child=TrialBalanceRowSerializer(many=True), read_only=True,
        help_text="The same rows keyed by account type."
    )
    totals = TrialBalanceTotalsSerializer(read_only=True)
    is_balanced = serializers.BooleanField(read_only=True, help_text="True if |debit - credit| < 0.01.")
    generated_at = serializers.DateTimeField(read_only=True)

    class Meta:
        ref_name = "TrialBalanceResponse"
