# company/managers.py
import logging

from django.db import models

from .utils import get_current_company

logger = logging.getLogger(__name__)


class CompanyManager(models.Manager):
    """
    Filters querysets by the current company from the request context.
    Assumes models using it have a 'company' ForeignKey to the Company model.
    Must come first in the MRO when combined with safedelete managers so the
    company filter wraps their visibility-aware queryset.
    """
    _allow_unfiltered_global_access = False  # Default: strict tenant isolation
    _is_tenant_aware_manager = True

    def get_queryset(self):
        queryset = super().get_queryset()
        company = get_current_company()

        if company:
            return queryset.filter(company=company)
        if self._allow_unfiltered_global_access:
            return queryset  # System task / service access; callers filter explicitly
        logger.debug(
            f"CompanyManager: Empty queryset for {self.model.__name__} (no company context, global access disallowed).")
        return queryset.none()

    def for_company(self, company_id):
        """Explicitly scoped queryset, independent of the request context."""
        return super().get_queryset().filter(company_id=company_id)

    def create(self, **kwargs):
        """Fills 'company' from the current context when it is not passed explicitly."""
        if 'company' not in kwargs and 'company_id' not in kwargs:
            company_from_context = get_current_company()
            if company_from_context:
                kwargs['company'] = company_from_context
            elif not self._allow_unfiltered_global_access:
                logger.error(
                    f"CompanyManager: Cannot create {self.model.__name__} without Company context or explicit 'company' kwarg.")
                raise ValueError(f"Create {self.model.__name__}: No company context and 'company' not provided.")
        return super().create(**kwargs)


class UnfilteredCompanyManager(CompanyManager):
    """
    Bypasses tenant filtering. Used by the ledger services, which always pass
    an explicit company id, and by system tasks.
    """
    _allow_unfiltered_global_access = True
