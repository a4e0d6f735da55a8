# crp_accounting/serializers/ledger.py

from rest_framework import serializers


class DrCrDisplaySerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    dr_cr = serializers.CharField(read_only=True, allow_blank=True)

    class Meta:
        ref_name = "DrCrDisplay"


class LedgerAccountSerializer(serializers.Serializer):
    id = serializers.UUIDField(read_only=True)
    code = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    account_type = serializers.CharField(read_only=True)
    account_nature = serializers.CharField(read_only=True)

    class Meta:
        ref_name = "LedgerAccount"


class LedgerEntryLineSerializer(serializers.Serializer):
    """One statement row; `running_balance` is the balance after this entry."""
    entry_id = serializers.UUIDField(read_only=True)
    date = serializers.DateField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)
    voucher_id = serializers.UUIDField(read_only=True, allow_null=True)
    voucher_number = serializers.CharField(read_only=True, allow_blank=True)
    voucher_type = serializers.CharField(read_only=True, allow_blank=True)
    description = serializers.CharField(read_only=True, allow_blank=True)
    reference_number = serializers.CharField(read_only=True, allow_blank=True)
    status = serializers.CharField(read_only=True)
    debit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    credit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    running_balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    running_balance_display = DrCrDisplaySerializer(read_only=True)

    class Meta:
        ref_name = "LedgerEntryLine"


class AccountLedgerSerializer(serializers.Serializer):
    account = LedgerAccountSerializer(read_only=True)
    start_date = serializers.DateField(read_only=True, allow_null=True)
    end_date = serializers.DateField(read_only=True, allow_null=True)
    include_void = serializers.BooleanField(read_only=True)
    opening_balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    opening_balance_display = DrCrDisplaySerializer(read_only=True)
    entries = LedgerEntryLineSerializer(many=True, read_only=True)
    total_debit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    total_credit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    closing_balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    closing_balance_display = DrCrDisplaySerializer(read_only=True)

    class Meta:
        ref_name = "AccountLedger"
