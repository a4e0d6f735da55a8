import logging
from typing import Optional

from django.contrib import admin
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from simple_history.admin import SimpleHistoryAdmin

from company.models import Company

logger = logging.getLogger("crp_accounting.admin_base")


class DeletionStatusListFilter(admin.SimpleListFilter):
    """Active (default), deleted, or all rows of a soft-deletable model."""
    title = _('status')
    parameter_name = 'deletion_status'

    def lookups(self, request, model_admin):
        return [('deleted', _('Deleted')), ('all', _('All (including deleted)'))]

    def queryset(self, request, queryset):
        if self.value() == 'deleted':
            return queryset.filter(deleted__isnull=False)
        if self.value() == 'all':
            return queryset
        return queryset.filter(deleted__isnull=True)


class TenantAccountingModelAdmin(SimpleHistoryAdmin):
    """
    Admin base for company-owned ledger models.
    Superusers see every company; staff only the company resolved for the request.
    """
    list_select_related = ('company',)

    def _request_company(self, request: HttpRequest) -> Optional[Company]:
        company = getattr(request, 'company', None)
        return company if isinstance(company, Company) else None

    def get_queryset(self, request):
        qs = self.model.global_all_objects_including_deleted.select_related(*self.list_select_related)
        if request.user.is_superuser:
            return qs
        company = self._request_company(request)
        if company is None:
            logger.warning(f"[{self.__class__.__name__}] No company context for staff user '{request.user}'.")
            return qs.none()
        return qs.filter(company=company)

    def get_list_display(self, request):
        list_display = list(super().get_list_display(request))
        if request.user.is_superuser and 'company' not in list_display:
            list_display.insert(1, 'company')
        return list_display

    def get_list_filter(self, request):
        list_filter = [DeletionStatusListFilter, *super().get_list_filter(request)]
        if request.user.is_superuser:
            list_filter.insert(1, 'company')
        return list_filter
