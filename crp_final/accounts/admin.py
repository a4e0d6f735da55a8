# accounts/admin.py
import logging

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.utils.translation import gettext_lazy as _

from accounts.models import User
from company.models import CompanyMembership

logger = logging.getLogger("accounts.admin")


class UserCompanyMembershipInline(admin.TabularInline):
    """Companies whose ledgers the user can reach, with the role held in each."""
    model = CompanyMembership
    fk_name = 'user'
    extra = 0
    autocomplete_fields = ('company',)
    fields = ('company', 'role', 'is_active_membership', 'is_default_for_user', 'date_joined')
    readonly_fields = ('date_joined',)


@admin.register(User)
class LedgerUserAdmin(BaseUserAdmin):
    list_display = ('email', 'name', 'default_company_display', 'membership_count_display', 'is_active', 'is_staff')
    list_filter = ('is_active', 'is_staff', 'is_superuser', 'company_memberships__role')
    search_fields = ('email', 'name', 'company_memberships__company__name')
    ordering = ('email',)
    readonly_fields = ('last_login', 'created_at', 'updated_at')
    filter_horizontal = ('groups', 'user_permissions')
    inlines = [UserCompanyMembershipInline]

    fieldsets = (
        (None, {'fields': ('email', 'password', 'name')}),
        (_('Access'), {'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')}),
        (_('Audit'), {'fields': ('last_login', 'created_at', 'updated_at'), 'classes': ('collapse',)}),
    )
    add_fieldsets = (
        (None, {'classes': ('wide',), 'fields': ('email', 'name', 'password1', 'password2')}),
    )

    def default_company_display(self, obj: User):
        company = CompanyMembership.default_company_for(obj)
        return company.name if company else '-'

    default_company_display.short_description = _('Default Company')

    def membership_count_display(self, obj: User) -> int:
        return obj.company_memberships.filter(is_active_membership=True).count()

    membership_count_display.short_description = _('Active Memberships')

    def save_model(self, request, obj, form, change):
        super().save_model(request, obj, form, change)
        logger.info(f"User '{obj.email}' (ID: {obj.pk}) {'updated' if change else 'created'} by {request.user}.")
