import logging

from rest_framework import permissions

from company.models import CompanyMembership

logger = logging.getLogger(__name__)

WRITE_ROLES = (
    CompanyMembership.Role.OWNER,
    CompanyMembership.Role.ADMIN,
    CompanyMembership.Role.ACCOUNTANT,
)
SEED_ROLES = (
    CompanyMembership.Role.OWNER,
    CompanyMembership.Role.ADMIN,
)


def _membership_for(request, view):
    """Active membership of the requesting user in the view's company, cached on the request."""
    if not hasattr(request, '_crp_membership'):
        company = getattr(view, 'current_company', None)
        request._crp_membership = None
        if company is not None and request.user and request.user.is_authenticated:
            request._crp_membership = CompanyMembership.objects.select_related('company', 'user').filter(
                company=company, user=request.user, is_active_membership=True
            ).first()
    return request._crp_membership


class IsCompanyMember(permissions.BasePermission):
    """Read access for any active member of the current company."""
    message = "You are not a member of this company."

    def has_permission(self, request, view):
        if request.user and request.user.is_superuser:
            return True
        membership = _membership_for(request, view)
        if membership is None or not membership.effective_can_access:
            logger.warning(
                f"[Permission Check] User: {request.user}, Company: {getattr(view, 'current_company', None)}, "
                f"Action: {getattr(view, 'action', request.method)} denied (no active membership).")
            return False
        return True


class CanManageChartOfAccounts(IsCompanyMember):
    """
    Safe methods for every member; changes to the chart of accounts for
    owners, admins and accountants. Seeding is reserved to owners and admins.
    """
    message = "Your role does not allow changing the chart of accounts."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method in permissions.SAFE_METHODS or request.user.is_superuser:
            return True
        membership = _membership_for(request, view)
        allowed = SEED_ROLES if getattr(view, 'action', None) == 'seed' else WRITE_ROLES
        has_role = membership.role in allowed
        logger.debug(
            f"[Permission Check] User: {request.user}, Role: {membership.role}, "
            f"Action: {getattr(view, 'action', request.method)}, Allowed?: {has_role}")
        return has_role
