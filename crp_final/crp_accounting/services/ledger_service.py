# crp_accounting/services/ledger_service.py

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.conf import settings
from django.core.cache import cache

from crp_core.enums import DrCrType, EntryStatus
from crp_core.utils import ZERO_DECIMAL, dr_cr_display, entry_effect, round_decimal, signed_movement
from ..models.coa import Account
from ..models.ledger import LedgerEntry
from .balance_service import movements_by_account, active_entries, validate_date_range
from .coa_service import get_account

logger = logging.getLogger(__name__)

PK_TYPE = Any

# --- Constants ---
CACHE_OPENING_BALANCE_TIMEOUT = getattr(settings, 'CACHE_OPENING_BALANCE_TIMEOUT', 900)  # Default 15 mins


# =============================================================================
# Opening balance cache
# =============================================================================

def _cache_version_key(company_id: PK_TYPE, account_id: PK_TYPE) -> str:
    return f"acc_ob_ver_{company_id}_{account_id}"


def _opening_balance_cache_key(company_id: PK_TYPE, account_id: PK_TYPE, date_exclusive: date) -> str:
    version = cache.get_or_set(_cache_version_key(company_id, account_id), 1, timeout=None)
    return f"acc_ob_{company_id}_{account_id}_v{version}_{date_exclusive.isoformat()}"


def invalidate_opening_balance_cache(company_id: PK_TYPE, account_id: PK_TYPE) -> None:
    """Retires every cached opening balance of an account by bumping its key version."""
    version_key = _cache_version_key(company_id, account_id)
    try:
        cache.incr(version_key)
    except ValueError:
        cache.set(version_key, 2, timeout=None)
    logger.debug(f"Opening balance cache invalidated for Co {company_id}, Acc PK {account_id}.")


def calculate_account_balance_upto(
        company_id: PK_TYPE,
        account: Account,
        date_exclusive: Optional[date]
) -> Decimal:
    """
    Balance of an account from its stored opening balance and all ACTIVE
    entries strictly *before* `date_exclusive`. Includes caching.
    """
    seed = account.opening_balance or ZERO_DECIMAL
    if not date_exclusive:
        return round_decimal(seed)

    cache_key = _opening_balance_cache_key(company_id, account.pk, date_exclusive)
    cached_balance = cache.get(cache_key)
    if cached_balance is not None:
        return Decimal(cached_balance)

    logger.debug(
        f"Cache MISS for opening balance: Key='{cache_key}'. Calculating for Co {company_id}, Acc PK {account.pk}...")

    prior = movements_by_account(
        active_entries(company_id).filter(account_id=account.pk, entry_date__lt=date_exclusive))
    debit_total, credit_total = prior.get(account.pk, (ZERO_DECIMAL, ZERO_DECIMAL))
    balance = round_decimal(seed + signed_movement(account.account_nature, debit_total, credit_total))

    try:
        cache.set(cache_key, str(balance), timeout=CACHE_OPENING_BALANCE_TIMEOUT)
    except Exception as e:
        logger.error(f"Failed to cache opening balance for Key='{cache_key}': {e}", exc_info=True)

    return balance


# =============================================================================
# Account ledger (statement)
# =============================================================================

def get_account_ledger_data(
        company_id: PK_TYPE,
        account_id: PK_TYPE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        include_void: bool = False,
) -> Dict[str, Any]:
    """
    Entry-by-entry statement of one account with a running balance.

    Entries are ordered by (entry_date, created_at, pk). VOID entries are only
    fetched when `include_void` is set; every fetched row is folded into the
    running balance and the debit/credit totals. The opening balance always
    counts ACTIVE entries only.

    Raises:
        AccountNotFound: Account missing, deleted, or in another company.
        InvalidDateRange: start_date after end_date.
    """
    validate_date_range(start_date, end_date)
    account = get_account(company_id, account_id)
    nature = account.account_nature

    logger.info(
        f"Generating ledger for Co ID {company_id}, Acc: {account.name} ({account.code}) | "
        f"Period: {start_date or 'Beginning'} to {end_date or 'End'}"
    )

    opening_balance = calculate_account_balance_upto(company_id, account, start_date)

    statuses = [EntryStatus.ACTIVE.value]
    if include_void:
        statuses.append(EntryStatus.VOID.value)
    entries_qs = LedgerEntry.global_objects.filter(
        company_id=company_id, account_id=account.pk, status__in=statuses
    ).order_by('entry_date', 'created_at', 'pk')
    if start_date:
        entries_qs = entries_qs.filter(entry_date__gte=start_date)
    if end_date:
        entries_qs = entries_qs.filter(entry_date__lte=end_date)

    entries: List[Dict[str, Any]] = []
    running_balance = opening_balance
    period_total_debit = ZERO_DECIMAL
    period_total_credit = ZERO_DECIMAL

    for entry in entries_qs:
        is_debit = entry.entry_type == DrCrType.DEBIT.value
        running_balance += entry_effect(nature, entry.entry_type, entry.amount)
        if is_debit:
            period_total_debit += entry.amount
        else:
            period_total_credit += entry.amount

        entries.append({
            'entry_id': entry.pk,
            'date': entry.entry_date,
            'created_at': entry.created_at,
            'voucher_id': entry.voucher_id,
            'voucher_number': entry.voucher_number,
            'voucher_type': entry.voucher_type,
            'description': entry.description,
            'reference_number': entry.reference_number,
            'status': entry.status,
            'debit': entry.amount if is_debit else ZERO_DECIMAL,
            'credit': ZERO_DECIMAL if is_debit else entry.amount,
            'running_balance': round_decimal(running_balance),
            'running_balance_display': dr_cr_display(round_decimal(running_balance), nature),
        })

    closing_balance = round_decimal(running_balance)

    return {
        'account': {
            'id': account.pk,
            'code': account.code,
            'name': account.name,
            'account_type': account.account_type,
            'account_nature': nature,
        },
        'start_date': start_date,
        'end_date': end_date,
        'include_void': include_void,
        'opening_balance': opening_balance,
        'opening_balance_display': dr_cr_display(opening_balance, nature),
        'entries': entries,
        'total_debit': round_decimal(period_total_debit),
        'total_credit': round_decimal(period_total_credit),
        'closing_balance': closing_balance,
        'closing_balance_display': dr_cr_display(closing_balance, nature),
    }
