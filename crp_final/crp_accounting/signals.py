# crp_accounting/signals.py

import logging

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models.coa import Account
from .models.ledger import LedgerEntry
from .services.ledger_service import invalidate_opening_balance_cache

logger = logging.getLogger("crp_accounting.signals")


@receiver(post_save, sender=LedgerEntry, dispatch_uid="ledger_entry_invalidate_opening_balance")
def ledger_entry_saved(sender, instance: LedgerEntry, created: bool, **kwargs):
    """A new or voided entry changes every opening balance after its date."""
    company_id, account_id = instance.company_id, instance.account_id
    log_prefix = f"[LedgerEntrySignal][Co:{company_id}][Entry:{instance.pk}]"
    logger.debug(f"{log_prefix} {'Created' if created else 'Updated'}; invalidating Acc PK {account_id}.")
    invalidate_opening_balance_cache(company_id, account_id)


@receiver(post_save, sender=Account, dispatch_uid="account_invalidate_opening_balance")
def account_saved(sender, instance: Account, created: bool, **kwargs):
    """The stored opening balance is the seed of every cached figure."""
    if created:
        return
    invalidate_opening_balance_cache(instance.company_id, instance.pk)
