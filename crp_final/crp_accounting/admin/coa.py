import logging

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from ..exceptions import AccountDeletionError
from ..models.coa import Account
from ..services import coa_service
from .admin_base import TenantAccountingModelAdmin

logger = logging.getLogger(__name__)


@admin.register(Account)
class AccountAdmin(TenantAccountingModelAdmin):
    list_display = (
        'code', 'name', 'account_type', 'account_nature', 'category', 'level',
        'is_group', 'is_active', 'is_system_account',
    )
    list_filter = ('account_type', 'account_nature', 'category', 'is_group', 'is_active', 'is_system_account')
    search_fields = ('code', 'name', 'description', 'company__name')
    list_select_related = ('company', 'parent_account')
    ordering = ('company', 'code')
    list_per_page = 50
    actions = ['admin_action_soft_delete_selected']

    fieldsets = (
        (None, {'fields': ('company', 'code', 'name', 'description', 'parent_account')}),
        (_('Classification'), {'fields': ('account_type', 'account_nature', 'category', 'level', 'is_group')}),
        (_('Opening Balance'), {'fields': ('opening_balance', 'opening_balance_date')}),
        (_('Settings'), {'fields': (
            'is_active', 'is_system_account', 'is_bank_account', 'is_tax_account', 'tax_rate',
            'allow_manual_entry', 'notes',
        )}),
        (_('Audit Information'), {
            'fields': ('created_by', 'created_at', 'updated_by', 'updated_at', 'deleted'),
            'classes': ('collapse',),
        }),
    )
    readonly_fields = ('level', 'created_by', 'created_at', 'updated_by', 'updated_at', 'deleted')

    def get_readonly_fields(self, request, obj=None):
        readonly = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            readonly.append('company')
            if obj.is_system_account:
                readonly.extend(['code', 'name', 'account_type', 'account_nature', 'category', 'parent_account'])
        return readonly

    def save_model(self, request, obj, form, change):
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)
        if obj.parent_account_id:
            coa_service.mark_as_group(obj.parent_account, user=request.user)

    def delete_model(self, request, obj):
        try:
            coa_service.soft_delete_account(obj, user=request.user)
        except AccountDeletionError as e:
            self.message_user(request, f"{obj.code}: {e.message}", messages.ERROR)

    @admin.action(description=_("Soft delete selected accounts"))
    def admin_action_soft_delete_selected(self, request, queryset):
        deleted, refused = 0, 0
        for account in queryset.filter(deleted__isnull=True):
            try:
                coa_service.soft_delete_account(account, user=request.user)
                deleted += 1
            except AccountDeletionError as e:
                refused += 1
                logger.info(f"Admin soft delete of Account {account.code} refused: {e.message}")
        if deleted:
            self.message_user(request, _("%(count)d account(s) soft deleted.") % {'count': deleted}, messages.SUCCESS)
        if refused:
            self.message_user(
                request, _("%(count)d account(s) could not be deleted.") % {'count': refused}, messages.WARNING)
