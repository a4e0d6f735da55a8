# crp_core/mixins.py
import logging
from typing import Optional, Any

from django.core.exceptions import FieldDoesNotExist
from django.db import models
from django.http import HttpRequest
from django.utils.translation import gettext_lazy as _
from rest_framework import permissions, viewsets, generics, serializers
from rest_framework.exceptions import PermissionDenied as DRFPermissionDenied

from company.models import Company

logger = logging.getLogger("crp_core.mixins")


def user_label(request: HttpRequest) -> str:
    user = getattr(request, 'user', None)
    if user is not None and user.is_authenticated:
        return getattr(user, 'name', None) or user.get_username()
    return "AnonymousUser"


class CompanyContextMixin:
    """
    Establishes `self.current_company` on the view instance from `request.company`
    (set by `CompanyMiddleware`) and adds it to the serializer context as
    `company_context`.
    """
    current_company: Optional[Company] = None

    def initial(self, request: HttpRequest, *args: Any, **kwargs: Any) -> None:
        # The company context must exist before DRF runs the permission checks.
        company_from_request = getattr(request, 'company', None)
        view_name = self.__class__.__name__

        if isinstance(company_from_request, Company) and company_from_request.effective_is_active:
            self.current_company = company_from_request
            logger.debug(
                f"{view_name}: Company context set to '{self.current_company.name}' "
                f"(ID: {self.current_company.pk}) for user '{user_label(request)}'.")
        else:
            self.current_company = None
            log_message = (
                f"{view_name}: No active 'request.company' for user '{user_label(request)}'. "
                f"Value was: '{company_from_request}'. Ensure CompanyMiddleware is active.")
            if request.user and request.user.is_authenticated and not request.user.is_superuser:
                logger.error(log_message)
            else:
                logger.info(log_message)

        super().initial(request, *args, **kwargs)

    def get_serializer_context(self) -> dict:
        context = super().get_serializer_context()
        context['request'] = self.request
        context['company_context'] = self.current_company
        return context


class BaseCompanyAccessPermission(permissions.BasePermission):
    """
    Requires an active `current_company` on the view, and that objects
    belong to it. Applies to superusers as well: every ledger operation is
    evaluated inside exactly one company.
    """
    message_no_company_context = _("A valid company context is required to access this resource.")
    message_object_permission_denied = _(
        "You do not have permission to access this specific object within your company.")

    def has_permission(self, request: HttpRequest, view: Any) -> bool:
        current_company_on_view: Optional[Company] = getattr(view, 'current_company', None)
        if not current_company_on_view:
            logger.warning(
                f"BaseCompanyAccessPermission: Denied for user '{user_label(request)}' "
                f"to view '{view.__class__.__name__}'. Reason: No 'current_company' on view.")
            self.message = self.message_no_company_context
            return False
        return True

    def has_object_permission(self, request: HttpRequest, view: Any, obj: models.Model) -> bool:
        current_company_on_view: Optional[Company] = getattr(view, 'current_company', None)
        try:
            obj._meta.get_field('company')
        except FieldDoesNotExist:
            return True

        if current_company_on_view is None or obj.company_id != current_company_on_view.pk:
            logger.warning(
                f"BaseCompanyAccessPermission (Object): User '{user_label(request)}' denied access to "
                f"{obj._meta.verbose_name} PK {obj.pk} (Co: {obj.company_id}).")
            self.message = self.message_object_permission_denied
            return False
        return True


class CompanyScopedViewSetMixin(CompanyContextMixin, viewsets.ModelViewSet):
    """
    Base for ModelViewSets scoped to the `current_company`.
    Querysets are filtered explicitly by the view's company.
    """
    permission_classes = [permissions.IsAuthenticated, BaseCompanyAccessPermission]

    def get_queryset(self) -> models.QuerySet:
        model = self.queryset.model
        if self.current_company is None:
            return model.global_objects.none()
        return model.global_objects.filter(company=self.current_company)

    def perform_create(self, serializer: serializers.ModelSerializer) -> None:
        """Sets 'company' and the audit users for new objects."""
        user_for_audit = self.request.user if self.request.user.is_authenticated else None
        if not self.current_company:
            raise DRFPermissionDenied(_("A valid company context is required to create this object."))
        serializer.save(company=self.current_company, created_by=user_for_audit, updated_by=user_for_audit)
        logger.info(
            f"{self.__class__.__name__}: Created {serializer.Meta.model.__name__} for Company "
            f"'{self.current_company.name}' by User '{user_label(self.request)}'.")

    def perform_update(self, serializer: serializers.ModelSerializer) -> None:
        """Sets 'updated_by' for existing objects."""
        user_for_audit = self.request.user if self.request.user.is_authenticated else None
        serializer.save(updated_by=user_for_audit)
        logger.info(
            f"{self.__class__.__name__}: Updated {serializer.Meta.model.__name__} "
            f"(PK: {serializer.instance.pk}, Co: {serializer.instance.company_id}) by User '{user_label(self.request)}'.")


class CompanyScopedGenericAPIViewMixin(CompanyContextMixin, generics.GenericAPIView):
    permission_classes = [permissions.IsAuthenticated, BaseCompanyAccessPermission]
