import datetime
from typing import Optional, Tuple

import pytz
from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from crp_core.enums import CurrencyType


class Company(models.Model):
    """
    A tenant of the ledger. Every account and ledger entry belongs to exactly
    one Company; all balance and report computations are scoped by it.
    """
    subdomain_prefix = models.CharField(
        _("Subdomain Prefix"),
        max_length=100,
        unique=True,
        db_index=True,
        help_text=_("Unique identifier for the tenant's subdomain (e.g., 'acme' for acme.yourdomain.com). Lowercase letters, numbers, hyphens."),
        validators=[
            RegexValidator(
                regex=r'^[a-z0-9-]+$',
                message=_("Subdomain can only contain lowercase letters, numbers, and hyphens.")
            )
        ]
    )
    name = models.CharField(
        _("Legal Company Name"),
        max_length=255,
        help_text=_("The official legal name of the company.")
    )
    display_name = models.CharField(
        _("Display Name / Trading Name"),
        max_length=255,
        blank=True,
        help_text=_("Name used on reports if different from legal name. Defaults to legal name.")
    )
    default_currency_code = models.CharField(
        _("Default Currency Code"),
        max_length=10,
        choices=CurrencyType.choices,
        default=CurrencyType.USD.value,
        help_text=_("Company's reporting currency. Amounts are never converted.")
    )
    financial_year_start_month = models.PositiveSmallIntegerField(
        _("Financial Year Start Month"),
        default=1,
        choices=[(i, datetime.date(2000, i, 1).strftime('%B')) for i in range(1, 13)],
        help_text=_("The month your company's financial year starts.")
    )
    timezone_name = models.CharField(
        _("Timezone"),
        max_length=63,
        default='UTC',
        choices=[(tz, tz) for tz in pytz.common_timezones],
        help_text=_("Company's primary operational timezone; used to resolve 'today' for reports.")
    )
    is_active = models.BooleanField(
        _("Tenant Account Active"), default=True,
        help_text=_("Designates whether this tenant account is active and can access the service.")
    )
    is_suspended_by_admin = models.BooleanField(default=False, verbose_name=_("Suspended by Admin"))
    created_at = models.DateTimeField(_("Registered At"), auto_now_add=True)
    updated_at = models.DateTimeField(_("Last Updated"), auto_now=True)

    class Meta:
        verbose_name = _("Company")
        verbose_name_plural = _("Companies")
        ordering = ['name']

    def __str__(self):
        return f"{self.display_name or self.name} ({self.subdomain_prefix})"

    def save(self, *args, **kwargs):
        if not self.display_name:
            self.display_name = self.name
        super().save(*args, **kwargs)

    @property
    def effective_is_active(self) -> bool:
        return self.is_active and not self.is_suspended_by_admin

    def _tz(self):
        try:
            return pytz.timezone(self.timezone_name)
        except pytz.exceptions.UnknownTimeZoneError:
            return pytz.utc

    def local_today(self) -> datetime.date:
        """Today's date in the company's timezone."""
        return timezone.localtime(timezone.now(), self._tz()).date()

    def get_current_financial_year_dates(self, for_date=None) -> Tuple[datetime.date, datetime.date]:
        if for_date is None:
            for_date = self.local_today()
        elif isinstance(for_date, datetime.datetime):
            for_date = timezone.localtime(for_date, self._tz()).date()
        elif not isinstance(for_date, datetime.date):
            raise ValueError("for_date must be a datetime.date or datetime.datetime object")

        start_month = self.financial_year_start_month
        fy_start_date = datetime.date(for_date.year, start_month, 1)
        if for_date < fy_start_date:
            fy_start_date = datetime.date(for_date.year - 1, start_month, 1)
        fy_end_date = fy_start_date + relativedelta(years=1, days=-1)
        return fy_start_date, fy_end_date

    def fiscal_labels_for(self, for_date: datetime.date) -> Tuple[str, str]:
        """
        Returns (fiscal_year, fiscal_period) labels for a posting date.
        Calendar-year companies get 'YYYY'; others get 'YYYY-YYYY'.
        The period is always the calendar month, 'YYYY-MM'.
        """
        fy_start, fy_end = self.get_current_financial_year_dates(for_date)
        if fy_start.year == fy_end.year:
            fiscal_year = str(fy_start.year)
        else:
            fiscal_year = f"{fy_start.year}-{fy_end.year}"
        return fiscal_year, for_date.strftime('%Y-%m')


class CompanyMembership(models.Model):
    class Role(models.TextChoices):
        OWNER = 'OWNER', _('Owner/Super Admin')
        ADMIN = 'ADMIN', _('Administrator')
        ACCOUNTANT = 'ACCOUNTANT', _('Accountant')
        AUDITOR = 'AUDITOR', _('Auditor (Read-Only)')
        VIEW_ONLY = 'VIEW_ONLY', _('View Only')

    company = models.ForeignKey(
        Company,
        verbose_name=_("Company"),
        on_delete=models.CASCADE,
        related_name='memberships'
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        verbose_name=_("User"),
        on_delete=models.CASCADE,
        related_name='company_memberships'
    )
    role = models.CharField(
        _("Role"),
        max_length=30,
        choices=Role.choices,
        default=Role.ACCOUNTANT,
    )
    is_active_membership = models.BooleanField(
        _("Membership is Active"), default=True,
        help_text=_("User can access this company if their membership is active and company is active.")
    )
    is_default_for_user = models.BooleanField(
        _("Is Default Company for this User"), default=False,
        help_text=_("Selected when the request host does not name a company.")
    )
    date_joined = models.DateTimeField(_("Date Joined Company"), auto_now_add=True)

    class Meta:
        verbose_name = _("Company Membership")
        verbose_name_plural = _("Company Memberships")
        unique_together = ('company', 'user')
        ordering = ['company__name', 'user__email']

    def __str__(self):
        return f"{self.user.get_username()} - {self.company.name} ({self.get_role_display()})"

    def save(self, *args, **kwargs):
        if self.is_default_for_user:
            CompanyMembership.objects.filter(user=self.user, is_default_for_user=True)\
                                     .exclude(pk=self.pk)\
                                     .update(is_default_for_user=False)
        super().save(*args, **kwargs)

    @property
    def effective_can_access(self) -> bool:
        return self.is_active_membership and self.company.effective_is_active and self.user.is_active

    @classmethod
    def default_company_for(cls, user) -> Optional[Company]:
        membership = cls.objects.select_related('company').filter(
            user=user,
            is_active_membership=True,
            company__is_active=True,
            company__is_suspended_by_admin=False,
        ).order_by('-is_default_for_user', 'company__name').first()
        return membership.company if membership else None
