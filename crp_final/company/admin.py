# company/admin.py
import logging

from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from crp_accounting.models import Account
from .models import Company, CompanyMembership

logger = logging.getLogger("company.admin")


class CompanyMembershipInline(admin.TabularInline):
    model = CompanyMembership
    extra = 0
    autocomplete_fields = ('user',)
    fields = ('user', 'role', 'is_active_membership', 'is_default_for_user', 'date_joined')
    readonly_fields = ('date_joined',)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = (
        'name', 'subdomain_prefix', 'default_currency_code', 'financial_year_start_month',
        'timezone_name', 'is_active', 'is_suspended_by_admin', 'account_count_display',
    )
    list_filter = ('is_active', 'is_suspended_by_admin', 'default_currency_code')
    search_fields = ('name', 'display_name', 'subdomain_prefix')
    readonly_fields = ('created_at', 'updated_at')
    inlines = [CompanyMembershipInline]
    fieldsets = (
        (None, {'fields': ('name', 'display_name', 'subdomain_prefix')}),
        (_('Accounting'), {'fields': ('default_currency_code', 'financial_year_start_month', 'timezone_name')}),
        (_('Status'), {'fields': ('is_active', 'is_suspended_by_admin')}),
        (_('Timestamps'), {'fields': ('created_at', 'updated_at'), 'classes': ('collapse',)}),
    )

    def account_count_display(self, obj: Company) -> int:
        return Account.global_objects.filter(company=obj).count()

    account_count_display.short_description = _('Accounts')

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        logger.info(f"Company '{obj.name}' (ID: {obj.pk}) {'updated' if change else 'created'} by {request.user}.")


@admin.register(CompanyMembership)
class CompanyMembershipAdmin(admin.ModelAdmin):
    list_display = ('user', 'company', 'role', 'is_active_membership', 'is_default_for_user', 'date_joined')
    list_filter = ('role', 'is_active_membership', 'company')
    search_fields = ('user__email', 'user__name', 'company__name')
    autocomplete_fields = ('user', 'company')
    list_select_related = ('user', 'company')
