# crp_accounting/models/ledger.py

import logging
from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from crp_core.enums import DrCrType, EntryStatus, VoucherType
from .base import TenantScopedModel
from .coa import Account

logger = logging.getLogger("crp_accounting.models.ledger")

# Fields that never change once an entry has been posted.
IMMUTABLE_ENTRY_FIELDS = ('account_id', 'entry_type', 'amount', 'entry_date')
# The only fields a partial save of a posted entry may write (the void flip).
VOID_UPDATE_FIELDS = frozenset({'status', 'voided_at', 'void_reason', 'updated_by', 'updated_at'})


class LedgerEntry(TenantScopedModel):
    """
    One debit or credit posted to a single account.

    Entries are produced by the voucher workflow and are append-only: the only
    permitted change is ACTIVE -> VOID, after which the entry no longer counts
    towards any balance but stays visible for audit.
    """
    account = models.ForeignKey(
        Account, verbose_name=_("Account"), on_delete=models.PROTECT,
        related_name='ledger_entries', db_index=True,
        help_text=_("Leaf account of the same company.")
    )
    voucher_id = models.UUIDField(
        _("Voucher ID"), null=True, blank=True, db_index=True,
        help_text=_("Voucher that produced this entry.")
    )
    voucher_number = models.CharField(_("Voucher Number"), max_length=50, blank=True)
    voucher_type = models.CharField(_("Voucher Type"), max_length=5, choices=VoucherType.choices, blank=True)
    entry_type = models.CharField(_("Dr/Cr"), max_length=6, choices=DrCrType.choices)
    amount = models.DecimalField(
        _("Amount"), max_digits=20, decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    entry_date = models.DateField(_("Entry Date"), db_index=True)
    fiscal_year = models.CharField(
        _("Fiscal Year"), max_length=9, blank=True, db_index=True,
        help_text=_("Derived from the entry date and the company's financial year when left blank.")
    )
    fiscal_period = models.CharField(
        _("Fiscal Period"), max_length=7, blank=True, db_index=True,
        help_text=_("Calendar month of the entry date, YYYY-MM.")
    )
    status = models.CharField(
        _("Status"), max_length=10, choices=EntryStatus.choices, default=EntryStatus.ACTIVE, db_index=True
    )
    description = models.TextField(_("Description"), blank=True)
    reference_number = models.CharField(_("Reference Number"), max_length=100, blank=True)
    voided_at = models.DateTimeField(_("Voided At"), null=True, blank=True, editable=False)
    void_reason = models.CharField(_("Void Reason"), max_length=255, blank=True)

    class Meta:
        verbose_name = _("Ledger Entry")
        verbose_name_plural = _("Ledger Entries")
        ordering = ['entry_date', 'created_at', 'id']
        indexes = [
            models.Index(fields=['company', 'account', 'entry_date'], name='ledger_co_acct_date_idx'),
            models.Index(fields=['company', 'status', 'entry_date'], name='ledger_co_status_date_idx'),
            models.Index(fields=['company', 'fiscal_year'], name='ledger_co_fy_idx'),
        ]

    def __str__(self):
        return f"{self.get_entry_type_display()} {self.amount} on {self.entry_date} ({self.voucher_number or self.pk})"

    @property
    def is_active(self) -> bool:
        return self.status == EntryStatus.ACTIVE.value

    def _set_derived_fields(self):
        if self.entry_date and (not self.fiscal_year or not self.fiscal_period):
            fiscal_year, fiscal_period = self.company.fiscal_labels_for(self.entry_date)
            self.fiscal_year = self.fiscal_year or fiscal_year
            self.fiscal_period = self.fiscal_period or fiscal_period

    def clean(self):
        super().clean()
        errors = {}
        if self.amount is not None and self.amount <= Decimal('0'):
            errors['amount'] = _("Entry amount must be positive.")

        if self.account_id:
            account = self.account
            if account.company_id != self.company_id:
                errors['account'] = _("Account must belong to the same company as the entry.")
            elif self._state.adding and account.is_group:
                errors['account'] = _("Entries cannot be posted to a group account.")
            elif self._state.adding and account.deleted:
                errors['account'] = _("Entries cannot be posted to a deleted account.")

        if not self._state.adding:
            errors.update(self._immutability_errors())

        if errors:
            raise DjangoValidationError(errors)

    def _immutability_errors(self) -> dict:
        original = LedgerEntry.global_all_objects_including_deleted.filter(pk=self.pk).first()
        if original is None:
            return {}
        errors = {}
        for field_name in IMMUTABLE_ENTRY_FIELDS:
            if getattr(original, field_name) != getattr(self, field_name):
                errors[field_name.replace('_id', '')] = _("Posted ledger entries cannot be modified; void and re-post instead.")
        if original.status == EntryStatus.VOID.value and self.status != EntryStatus.VOID.value:
            errors['status'] = _("A void ledger entry cannot be reactivated.")
        return errors

    def void(self, reason: str = '', user=None):
        """Marks the entry VOID. Voiding twice is rejected."""
        if self.status == EntryStatus.VOID.value:
            raise DjangoValidationError({'status': _("Ledger entry is already void.")})
        self.status = EntryStatus.VOID.value
        self.voided_at = timezone.now()
        self.void_reason = reason or ''
        self.updated_by = user
        self.save(update_fields=sorted(VOID_UPDATE_FIELDS))
        logger.info(
            f"Voided LedgerEntry {self.pk} (Acc: {self.account_id}, Co: {self.company_id}) "
            f"by {getattr(user, 'name', 'System')}. Reason: {reason or 'N/A'}")
        return self

    def delete(self, *args, **kwargs):
        raise DjangoValidationError(_("Ledger entries cannot be deleted; void them instead."))

    def save(self, *args, **kwargs):
        update_fields = kwargs.get('update_fields')
        if update_fields and not self._state.adding:
            # Partial saves skip full_clean, so posted entries are checked here.
            errors = {
                name: _("Posted ledger entries cannot be modified; void and re-post instead.")
                for name in sorted(set(update_fields) - VOID_UPDATE_FIELDS)
            }
            errors.update(self._immutability_errors())
            if errors:
                logger.warning(
                    f"Rejected partial save of LedgerEntry {self.pk} (Co: {self.company_id}): {sorted(errors)}")
                raise DjangoValidationError(errors)
        super().save(*args, **kwargs)
