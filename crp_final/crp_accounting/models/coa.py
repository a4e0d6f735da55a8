# crp_accounting/models/coa.py
import logging
from decimal import Decimal
from typing import Dict, List

from django.core.exceptions import ValidationError
from django.core.validators import MinLengthValidator, RegexValidator, MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Q
from django.utils.translation import gettext_lazy as _

from crp_core.constants import MAX_ACCOUNT_LEVEL
from crp_core.enums import AccountType, AccountNature, AccountCategory
from .base import TenantScopedModel

logger = logging.getLogger(__name__)

# --- Constants ---
# Mapping from AccountType to its inherent AccountNature (Debit or Credit).
# Used only when an account is saved without an explicit nature.
ACCOUNT_TYPE_TO_NATURE: Dict[str, str] = {
    AccountType.ASSET.value: AccountNature.DEBIT.value,
    AccountType.LIABILITY.value: AccountNature.CREDIT.value,
    AccountType.EQUITY.value: AccountNature.CREDIT.value,
    AccountType.REVENUE.value: AccountNature.CREDIT.value,
    AccountType.EXPENSE.value: AccountNature.DEBIT.value,
}

# Fields a user may still change on a system (seeded) account.
SYSTEM_ACCOUNT_EDITABLE_FIELDS = frozenset({'description', 'notes', 'is_active'})

HIERARCHY_RECURSION_LIMIT = 20


class Account(TenantScopedModel):
    """
    Represents an individual account in the Chart of Accounts (COA).

    Accounts form a display tree through `parent_account`; group accounts
    (`is_group=True`) never receive postings and balances never roll up
    through the tree. The stored `account_nature` is the account's normal
    balance and is honoured by every balance computation, even when it
    differs from the type's default (contra accounts).
    """
    code = models.CharField(
        _("Account Code"),
        max_length=50,
        db_index=True,
        validators=[RegexValidator(
            regex=r'^[A-Za-z0-9_-]+$',
            message=_("Account code can only contain letters, numbers, hyphens, and underscores.")
        )],
        help_text=_("Identifier code for the account. Stored upper-case; unique within the company.")
    )
    name = models.CharField(
        _("Account Name"),
        max_length=200,
        validators=[MinLengthValidator(2)],
        help_text=_("Human-readable name (e.g., Cash in Hand).")
    )
    description = models.TextField(_("Description"), blank=True)
    account_type = models.CharField(
        _("Account Type"),
        max_length=20,
        choices=AccountType.choices,
        db_index=True,
        help_text=_("Fundamental accounting classification (Asset, Liability, etc.).")
    )
    account_nature = models.CharField(
        _("Normal Balance"),
        max_length=10,
        choices=AccountNature.choices,
        blank=True,
        help_text=_("Debit or Credit. Derived from the account type when left blank.")
    )
    category = models.CharField(
        _("Category"),
        max_length=30,
        choices=AccountCategory.choices,
        blank=True,
        db_index=True,
        help_text=_("Finer classification used for Balance Sheet sections.")
    )
    parent_account = models.ForeignKey(
        'self',
        verbose_name=_("Parent Account"),
        on_delete=models.PROTECT,
        null=True, blank=True,
        related_name='children',
        help_text=_("Group account this account is displayed under.")
    )
    level = models.PositiveSmallIntegerField(
        _("Level"), default=1, editable=False,
        validators=[MinValueValidator(1), MaxValueValidator(MAX_ACCOUNT_LEVEL)]
    )
    is_group = models.BooleanField(
        _("Is Group Account"), default=False,
        help_text=_("Group accounts summarise children for display and cannot receive postings.")
    )
    opening_balance = models.DecimalField(
        _("Opening Balance"), max_digits=20, decimal_places=2, default=Decimal('0.00'),
        help_text=_("Signed balance in the account's own normal-balance direction, counted before any entry.")
    )
    opening_balance_date = models.DateField(_("Opening Balance Date"), null=True, blank=True)
    is_active = models.BooleanField(
        _("Account is Active"), default=True, db_index=True,
        help_text=_("Inactive accounts are excluded from reports and new postings.")
    )
    is_system_account = models.BooleanField(
        _("System Account"), default=False,
        help_text=_("Seeded account. Only description, notes and active status may change.")
    )
    is_bank_account = models.BooleanField(_("Bank Account"), default=False)
    is_tax_account = models.BooleanField(_("Tax Account"), default=False)
    tax_rate = models.DecimalField(
        _("Tax Rate (%)"), max_digits=5, decimal_places=2, null=True, blank=True,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]
    )
    allow_manual_entry = models.BooleanField(_("Allow Manual Entry"), default=True)
    notes = models.TextField(_("Notes"), blank=True)

    class Meta:
        verbose_name = _('Account (COA Entry)')
        verbose_name_plural = _('Accounts (COA Entries)')
        ordering = ['code']
        indexes = [
            models.Index(fields=['company', 'account_type'], name='acct_co_type_idx'),
            models.Index(fields=['company', 'is_active', 'is_group'], name='acct_co_active_grp_idx'),
            models.Index(fields=['company', 'parent_account'], name='acct_co_parent_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['company', 'code'],
                condition=Q(deleted__isnull=True),
                name='acct_unique_live_code_per_co',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.code})"

    @property
    def is_debit_nature(self) -> bool:
        return self.account_nature == AccountNature.DEBIT.value

    @property
    def is_credit_nature(self) -> bool:
        return self.account_nature == AccountNature.CREDIT.value

    def _set_derived_fields(self):
        """
        Normalises the code and derives nature and level.
        A nature that is already set (e.g. a contra account) is left untouched.
        """
        if self.code:
            self.code = self.code.strip().upper()
        if self.name:
            self.name = self.name.strip()
        if not self.account_nature and self.account_type:
            inferred = ACCOUNT_TYPE_TO_NATURE.get(self.account_type)
            if not inferred:
                raise ValidationError({
                    'account_type': _("Cannot map account type '%(type)s' to a normal balance.") % {
                        'type': self.account_type}
                })
            self.account_nature = inferred
        self.level = (self.parent_account.level + 1) if self.parent_account_id else 1

    def clean(self):
        super().clean()
        self._set_derived_fields()

        if self.code and self.company_id:
            duplicate = Account.global_objects.filter(
                company_id=self.company_id, code=self.code
            ).exclude(pk=self.pk).exists()
            if duplicate:
                raise ValidationError(
                    {'code': _("Account with code '%(code)s' already exists.") % {'code': self.code}},
                    code='duplicate_code',
                )

        if self.parent_account_id:
            self._clean_parent()

        if self.level > MAX_ACCOUNT_LEVEL:
            raise ValidationError({'parent_account': _("Account hierarchy cannot be deeper than %(max)s levels.") % {
                'max': MAX_ACCOUNT_LEVEL}})

        if not self._state.adding:
            original = Account.global_all_objects_including_deleted.filter(pk=self.pk)\
                                                            .only('account_type', 'is_group').first()
            if original and original.account_type != self.account_type and self.has_ledger_entries():
                raise ValidationError({'account_type': _(
                    "Cannot change account type: ledger entries exist for this account.")})
            if original and self.is_group and not original.is_group and self.has_ledger_entries():
                raise ValidationError({'is_group': _(
                    "Cannot turn into a group account: ledger entries exist for this account.")})

    def _clean_parent(self):
        parent = self.parent_account
        if parent.company_id != self.company_id:
            raise ValidationError({'parent_account': _("Parent account must belong to the same company.")})
        if parent.account_type != self.account_type:
            raise ValidationError({'parent_account': _("Parent account must have the same account type.")})
        if parent.deleted:
            raise ValidationError({'parent_account': _("Parent account has been deleted.")})
        if not parent.is_group and parent.has_ledger_entries():
            raise ValidationError({'parent_account': _(
                "Parent account already has ledger entries and cannot become a group account.")})

        # A node cannot be its own ancestor.
        visited_ancestors = {self.pk} if not self._state.adding else set()
        while parent:
            if parent is self or parent.pk in visited_ancestors:
                raise ValidationError(
                    {'parent_account': _("Circular dependency detected: An account cannot be an ancestor of itself.")})
            visited_ancestors.add(parent.pk)
            parent = parent.parent_account

    def has_ledger_entries(self) -> bool:
        from .ledger import LedgerEntry
        return LedgerEntry.global_all_objects_including_deleted.filter(account_id=self.pk).exists()

    def get_children(self) -> models.QuerySet:
        """Non-deleted direct children ordered by code."""
        return Account.global_objects.filter(company_id=self.company_id, parent_account_id=self.pk).order_by('code')

    def get_hierarchy_path(self) -> List['Account']:
        """Ancestors then self, root first."""
        path = [self]
        parent = self.parent_account
        count = 0
        while parent and count < HIERARCHY_RECURSION_LIMIT:
            path.insert(0, parent)
            parent = parent.parent_account
            count += 1
        if parent is not None:
            logger.warning(
                f"Account {self.pk} hierarchy path truncated after {HIERARCHY_RECURSION_LIMIT} levels; possible cycle.")
        return path
