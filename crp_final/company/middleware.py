# company/middleware.py

import logging
from typing import Optional

from django.conf import settings
from django.http import Http404
from django.utils.deprecation import MiddlewareMixin

from .models import Company, CompanyMembership
from .utils import set_current_company, clear_current_company

logger = logging.getLogger("company.middleware")

# --- Configuration fetched from settings ---
BASE_DOMAIN = getattr(settings, 'BASE_DOMAIN', None)
NON_TENANT_SUBDOMAINS = getattr(settings, 'NON_TENANT_SUBDOMAINS', ['www', 'api', 'admin', 'static', 'media'])
MISSING_COMPANY_BEHAVIOR = getattr(settings, 'MISSING_COMPANY_BEHAVIOR', 'raise_404')  # 'raise_404' or 'ignore'


def _user_label(request) -> str:
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return getattr(user, 'name', None) or user.get_username()
    return 'Anon'


class CompanyMiddleware(MiddlewareMixin):
    """
    Identifies the current Company (tenant) for the request.
    Priority:
    1. Subdomain of settings.BASE_DOMAIN (e.g. acme.example.com -> 'acme').
    2. The authenticated user's default / first active CompanyMembership.
    Sets `request.company` and the company context used by CompanyManager;
    the context is cleared again once the response is produced.
    Must run after AuthenticationMiddleware.
    """

    def _subdomain_prefix(self, host: str) -> Optional[str]:
        if BASE_DOMAIN and host.endswith(f".{BASE_DOMAIN}"):
            prefix = host[:-len(f".{BASE_DOMAIN}")].rstrip('.')
            if prefix and prefix not in NON_TENANT_SUBDOMAINS:
                return prefix
        return None

    def _get_company_from_subdomain(self, prefix: str) -> Optional[Company]:
        log_prefix = f"[CoMiddleware][Subdomain:{prefix}]"
        company_obj = Company.objects.filter(subdomain_prefix__iexact=prefix).first()
        if company_obj is None:
            logger.warning(f"{log_prefix} No Company found for subdomain_prefix '{prefix}'.")
            return None
        if not company_obj.effective_is_active:
            logger.warning(
                f"{log_prefix} Company '{company_obj.name}' found but is NOT effectively active. Treating as not found.")
            return None
        logger.debug(f"{log_prefix} Identified Company '{company_obj.name}' (ID: {company_obj.id}).")
        return company_obj

    def _get_company_from_user(self, request) -> Optional[Company]:
        user = getattr(request, 'user', None)
        if not (user and user.is_authenticated):
            return None
        company = CompanyMembership.default_company_for(user)
        if company:
            logger.debug(
                f"[CoMiddleware][User:{_user_label(request)}] Identified Company '{company.name}' (ID: {company.id}) from membership.")
        return company

    def process_request(self, request):
        request.company = None
        host = request.get_host().split(':')[0].lower()
        log_prefix = f"[CoMiddleware][Path:{request.path}][Host:{host}][User:{_user_label(request)}]"

        prefix = self._subdomain_prefix(host)
        if prefix:
            request.company = self._get_company_from_subdomain(prefix)
            if request.company is None:
                if MISSING_COMPANY_BEHAVIOR == 'ignore':
                    logger.info(f"{log_prefix} Missing company for subdomain '{prefix}' ignored.")
                else:
                    raise Http404(f"Company account for '{prefix}' not found or is inactive.")

        if request.company is None:
            request.company = self._get_company_from_user(request)

        set_current_company(request.company)
        if request.company is None:
            logger.debug(f"{log_prefix} No company context established for this request.")
        return None

    def process_response(self, request, response):
        clear_current_company()
        return response
