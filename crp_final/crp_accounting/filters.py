# crp_accounting/filters.py

import django_filters

from crp_core.enums import AccountCategory, AccountNature, AccountType
from .models.coa import Account


class AccountFilterSet(django_filters.FilterSet):
    """
    FilterSet for the Account model.
    Supports filtering by classification, flags and code/name fragments.
    """
    account_type = django_filters.ChoiceFilter(choices=AccountType.choices)
    account_nature = django_filters.ChoiceFilter(choices=AccountNature.choices)
    category = django_filters.ChoiceFilter(choices=AccountCategory.choices)

    parent_account = django_filters.UUIDFilter(field_name='parent_account_id', label='Parent Account ID')
    is_root = django_filters.BooleanFilter(field_name='parent_account', lookup_expr='isnull', label='Top-level only')
    level = django_filters.NumberFilter()

    code_startswith = django_filters.CharFilter(field_name='code', lookup_expr='istartswith', label='Code (Starts With)')
    name_contains = django_filters.CharFilter(field_name='name', lookup_expr='icontains', label='Name (Contains)')

    class Meta:
        model = Account
        fields = [
            'account_type',
            'account_nature',
            'category',
            'is_group',
            'is_active',
            'is_system_account',
            'is_bank_account',
            'is_tax_account',
        ]
