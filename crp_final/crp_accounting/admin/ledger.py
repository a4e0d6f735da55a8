from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from crp_core.enums import EntryStatus
from ..models.ledger import LedgerEntry
from .admin_base import TenantAccountingModelAdmin


@admin.register(LedgerEntry)
class LedgerEntryAdmin(TenantAccountingModelAdmin):
    """Posted entries are read-only; the only change offered is voiding."""
    list_display = (
        'entry_date', 'account', 'entry_type', 'amount', 'status',
        'voucher_number', 'voucher_type', 'fiscal_year', 'fiscal_period',
    )
    list_filter = ('status', 'entry_type', 'voucher_type', 'fiscal_year')
    search_fields = ('voucher_number', 'reference_number', 'description', 'account__code', 'account__name')
    list_select_related = ('company', 'account')
    date_hierarchy = 'entry_date'
    ordering = ('-entry_date', '-created_at')
    actions = ['admin_action_void_selected']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    @admin.action(description=_("Void selected entries"))
    def admin_action_void_selected(self, request, queryset):
        voided = 0
        for entry in queryset.filter(status=EntryStatus.ACTIVE.value):
            entry.void(reason=str(_("Voided from admin")), user=request.user)
            voided += 1
        self.message_user(request, _("%(count)d entr(ies) voided.") % {'count': voided})
