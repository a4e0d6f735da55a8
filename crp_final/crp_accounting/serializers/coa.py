# crp_accounting/serializers/coa.py
import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from crp_core.exceptions import DuplicateAccountCodeException, SystemAccountProtectedException
from ..exceptions import SystemAccountEditError
from ..models.coa import Account
from ..services import coa_service

logger = logging.getLogger(__name__)


def _as_drf_validation_error(exc: DjangoValidationError) -> serializers.ValidationError:
    if hasattr(exc, 'message_dict'):
        return serializers.ValidationError(exc.message_dict)
    return serializers.ValidationError(exc.messages)


# =============================================================================
# Helper/Summary Serializers
# =============================================================================
class AccountSummarySerializer(serializers.ModelSerializer):
    """Minimal representation of Account for nesting or summaries."""
    account_type_display = serializers.CharField(source='get_account_type_display', read_only=True)

    class Meta:
        model = Account
        fields = ('id', 'code', 'name', 'is_active', 'account_type', 'account_type_display', 'level')
        read_only_fields = fields


# =============================================================================
# Account Serializers
# =============================================================================
class AccountReadSerializer(serializers.ModelSerializer):
    """Serializer for *reading* Account data."""
    parent_account = AccountSummarySerializer(read_only=True)
    account_type_display = serializers.CharField(source='get_account_type_display', read_only=True)
    account_nature_display = serializers.CharField(source='get_account_nature_display', read_only=True)
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = Account
        fields = (
            'id', 'code', 'name', 'description',
            'account_type', 'account_type_display',
            'account_nature', 'account_nature_display',
            'category', 'category_display',
            'parent_account', 'level', 'is_group',
            'opening_balance', 'opening_balance_date',
            'is_active', 'is_system_account', 'is_bank_account', 'is_tax_account', 'tax_rate',
            'allow_manual_entry', 'notes',
            'created_at', 'updated_at',
        )
        read_only_fields = fields


class AccountWriteSerializer(serializers.ModelSerializer):
    """
    Serializer for *creating/updating* accounts.
    'parent_account_id' is limited to the company in the serializer context;
    a duplicate code answers 409.
    """
    parent_account_id = serializers.PrimaryKeyRelatedField(
        queryset=Account.global_objects.none(),
        source='parent_account',
        allow_null=True,
        required=False,
        help_text=_("ID of the parent (group) account. Must belong to your company.")
    )

    class Meta:
        model = Account
        fields = (
            'id', 'code', 'name', 'description', 'account_type', 'account_nature', 'category',
            'parent_account_id', 'is_group', 'opening_balance', 'opening_balance_date',
            'is_active', 'is_bank_account', 'is_tax_account', 'tax_rate', 'allow_manual_entry', 'notes',
        )
        read_only_fields = ('id',)
        # Uniqueness is checked per company in validate_code.
        validators = []

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        company = self.context.get('company_context')
        parent_field = self.fields.get('parent_account_id')
        if parent_field is not None and company is not None:
            parent_queryset = Account.global_objects.filter(company=company)
            if self.instance is not None:
                parent_queryset = parent_queryset.exclude(pk=self.instance.pk)
            parent_field.queryset = parent_queryset

    def validate_code(self, value: str) -> str:
        value = value.strip().upper()
        company = self.context.get('company_context')
        if company is None:
            return value
        queryset = Account.global_objects.filter(company=company, code=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise DuplicateAccountCodeException(
                detail=_("Account with code '%(code)s' already exists.") % {'code': value})
        return value

    def validate_name(self, value: str) -> str:
        return value.strip()

    def create(self, validated_data):
        account = Account(**validated_data)
        try:
            account.save()
        except DjangoValidationError as e:
            raise _as_drf_validation_error(e)
        if account.parent_account_id:
            coa_service.mark_as_group(account.parent_account, user=validated_data.get('created_by'))
        return account

    def update(self, instance, validated_data):
        user = validated_data.pop('updated_by', None)
        try:
            return coa_service.update_account(instance, user=user, **validated_data)
        except SystemAccountEditError as e:
            raise SystemAccountProtectedException(detail=e.message)
        except DjangoValidationError as e:
            raise _as_drf_validation_error(e)

    def to_representation(self, instance):
        return AccountReadSerializer(instance, context=self.context).data


class AccountTreeNodeSerializer(serializers.Serializer):
    """Node of the nested chart-of-accounts view."""
    account = AccountSummarySerializer(read_only=True)
    is_group = serializers.BooleanField(source='account.is_group', read_only=True)
    children = serializers.ListField(child=serializers.DictField(), read_only=True)

    def get_fields(self):
        """Set child serializer for recursion."""
        fields = super().get_fields()
        fields['children'] = AccountTreeNodeSerializer(many=True, read_only=True)
        return fields

    class Meta:
        ref_name = "AccountTreeNode"


class AccountDeletionCheckSerializer(serializers.Serializer):
    can_delete = serializers.BooleanField(read_only=True)
    reason = serializers.CharField(read_only=True, allow_blank=True)

    class Meta:
        ref_name = "AccountDeletionCheck"


class AccountSummaryCountsSerializer(serializers.Serializer):
    total = serializers.IntegerField(read_only=True)
    by_type = serializers.DictField(child=serializers.IntegerField(), read_only=True)
    active = serializers.IntegerField(read_only=True)
    inactive = serializers.IntegerField(read_only=True)

    class Meta:
        ref_name = "AccountSummaryCounts"


class SeedResultSerializer(serializers.Serializer):
    created = serializers.IntegerField(read_only=True, help_text="Number of accounts created.")
    total = serializers.IntegerField(read_only=True)
    by_type = serializers.DictField(child=serializers.IntegerField(), read_only=True)

    class Meta:
        ref_name = "SeedResult"


class AccountBalanceSerializer(serializers.Serializer):
    """Result of the balance calculator for one account."""
    account_id = serializers.UUIDField(read_only=True)
    as_of = serializers.DateField(read_only=True, allow_null=True)
    start_date = serializers.DateField(read_only=True, allow_null=True)
    opening_balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    debit_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    credit_total = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    balance = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    net_debit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)
    net_credit = serializers.DecimalField(max_digits=20, decimal_places=2, read_only=True)

    class Meta:
        ref_name = "AccountBalance"
