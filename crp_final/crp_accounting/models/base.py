# crp_accounting/models/base.py

import uuid
import logging

from django.contrib.auth import get_user_model
from django.db import models
from django.utils.translation import gettext_lazy as _
from django.core.exceptions import ValidationError, PermissionDenied
from django.conf import settings

from safedelete.models import SafeDeleteModel
from safedelete.managers import SafeDeleteManager, SafeDeleteAllManager, SafeDeleteDeletedManager
from safedelete import SOFT_DELETE_CASCADE
from simple_history.models import HistoricalRecords

from company.models import Company
from company.managers import CompanyManager, UnfilteredCompanyManager
from company.utils import get_current_company

logger = logging.getLogger(__name__)

# ============================================================================
# Custom Manager Combinations (Scoped by Company)
# ============================================================================
# The company manager comes first: SafeDeleteManager.get_queryset does not call
# super(), so the company filter has to wrap it.

class TenantSafeDeleteManager(CompanyManager, SafeDeleteManager):
    """Manager with soft delete and tenant (company) scoping."""
    pass

class UnfilteredTenantSafeDeleteManager(UnfilteredCompanyManager, SafeDeleteManager):
    """Soft delete manager without context scoping; callers filter by company."""
    pass

class TenantDeletedManager(CompanyManager, SafeDeleteDeletedManager):
    """Manager to access only deleted objects scoped by tenant."""
    pass

class UnfilteredTenantDeletedManager(UnfilteredCompanyManager, SafeDeleteDeletedManager):
    """Unfiltered access to deleted objects for all tenants."""
    pass

class TenantAllIncludingDeletedManager(CompanyManager, SafeDeleteAllManager):
    """Access all objects (deleted or not) scoped by tenant."""
    pass

class UnfilteredTenantAllIncludingDeletedManager(UnfilteredCompanyManager, SafeDeleteAllManager):
    """Unfiltered access to all objects, including deleted, for all tenants."""
    pass

# ============================================================================
# Abstract Base Model with Tenant Scoping and Soft Delete
# ============================================================================

class TenantScopedModel(SafeDeleteModel):
    """
    Abstract base model that includes:
    - Soft deletion support (`deleted` timestamp)
    - Tenant scoping via a 'company' foreign key
    - Audit fields (created/updated timestamps and users)
    - Historical tracking
    """
    _safedelete_policy = SOFT_DELETE_CASCADE

    id = models.UUIDField(
        primary_key=True, default=uuid.uuid4, editable=False, verbose_name=_("ID")
    )
    company = models.ForeignKey(
        Company, verbose_name=_("Company"), on_delete=models.PROTECT,
        related_name='%(app_label)s_%(class)s_related', db_index=True,
        help_text=_("The company this record belongs to.")
    )
    created_at = models.DateTimeField(_("Created At"), auto_now_add=True, editable=False)
    updated_at = models.DateTimeField(_("Updated At"), auto_now=True, editable=False)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, verbose_name=_("Created By"), on_delete=models.SET_NULL,
        null=True, blank=True, related_name='created_%(app_label)s_%(class)s_set', editable=False
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, verbose_name=_("Last Updated By"), on_delete=models.SET_NULL,
        null=True, blank=True, related_name='updated_%(app_label)s_%(class)s_set', editable=False
    )

    # Managers for various access scopes
    objects = TenantSafeDeleteManager()
    global_objects = UnfilteredTenantSafeDeleteManager()
    deleted_objects = TenantDeletedManager()
    all_objects_including_deleted = TenantAllIncludingDeletedManager()
    global_deleted_objects = UnfilteredTenantDeletedManager()
    global_all_objects_including_deleted = UnfilteredTenantAllIncludingDeletedManager()

    # Historical audit tracking
    history = HistoricalRecords(inherit=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        """
        Enforces company scoping and validation rules:
        - Company is auto-filled from context if missing
        - Only allows save for active companies
        - Performs full_clean unless update_fields is used
        """
        is_new = self._state.adding

        if is_new and not self.company_id:
            current_company_from_context = get_current_company()
            if current_company_from_context:
                self.company = current_company_from_context
            else:
                raise ValueError(
                    f"Cannot save new {self.__class__.__name__}: 'company' is required and no company context found."
                )

        if not self.company.effective_is_active:
            raise ValidationError({
                'company': _("Operations cannot be performed for an inactive or suspended company: %(company_name)s") %
                           {'company_name': self.company.name}
            })

        if not kwargs.get('update_fields'):
            if hasattr(self, '_set_derived_fields') and callable(self._set_derived_fields):
                self._set_derived_fields()
            self.full_clean(exclude=['company'] if is_new else None)

        super().save(*args, **kwargs)

    @classmethod
    def create_for_company(cls, company: Company, created_by_user, **kwargs):
        """
        Creates an instance for a company with the audit fields set.
        """
        if not isinstance(company, Company):
            raise TypeError("A valid Company instance must be provided.")
        if not company.effective_is_active:
            raise PermissionDenied(f"Cannot create {cls.__name__} records for inactive company: {company.name}")
        if created_by_user is not None and not isinstance(created_by_user, get_user_model()):
            raise TypeError("A valid User instance must be provided for 'created_by_user'.")

        for field in ['company', 'company_id', 'created_by', 'created_by_id', 'updated_by', 'updated_by_id']:
            kwargs.pop(field, None)

        instance = cls(company=company, created_by=created_by_user, updated_by=created_by_user, **kwargs)
        instance.save()
        logger.debug(
            f"Created new {cls.__name__} (ID: {instance.pk}) for Company '{company.name}' "
            f"by {getattr(created_by_user, 'name', 'System')}.")
        return instance

    def __str__(self):
        for attr in ('name', 'voucher_number'):
            value = getattr(self, attr, None)
            if value:
                return f"{value} (Co: {self.company_id})"
        return f"{self.__class__.__name__} (ID: {self.pk}, Co: {self.company_id})"
