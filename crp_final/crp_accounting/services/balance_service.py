# crp_accounting/services/balance_service.py
"""
Balance Calculator.

Computes an account's balance as of a date from its stored opening balance and
its ACTIVE ledger entries, honouring the account's normal balance. Many-account
computations (reports) run in batches through a bounded thread pool; every
batch is a single grouped aggregate query, so the work is pure read-and-fold.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypedDict

from django.conf import settings
from django.db import connection, models
from django.db.models import Q, Sum
from django.db.models.functions import Coalesce

from crp_core.enums import DrCrType, EntryStatus
from crp_core.utils import ZERO_DECIMAL, round_decimal, signed_movement, split_net
from ..exceptions import InvalidDateRange
from ..models.coa import Account
from ..models.ledger import LedgerEntry
from .coa_service import get_account

logger = logging.getLogger(__name__)

PK_TYPE = Any

REPORT_MAX_WORKERS = getattr(settings, 'CRP_REPORT_MAX_WORKERS', 4)
REPORT_BATCH_SIZE = getattr(settings, 'CRP_REPORT_BATCH_SIZE', 200)


class AccountBalance(TypedDict):
    account_id: PK_TYPE
    opening_balance: Decimal   # seed + ACTIVE entries before start_date
    debit_total: Decimal       # raw debit activity within the window
    credit_total: Decimal      # raw credit activity within the window
    balance: Decimal           # signed closing balance, own polarity
    net_debit: Decimal
    net_credit: Decimal


def validate_date_range(start_date: Optional[date], end_date: Optional[date]) -> None:
    if start_date and end_date and start_date > end_date:
        raise InvalidDateRange(start_date=start_date, end_date=end_date)


def active_entries(company_id: PK_TYPE) -> models.QuerySet:
    return LedgerEntry.global_objects.filter(company_id=company_id, status=EntryStatus.ACTIVE.value)


def movements_by_account(queryset: models.QuerySet) -> Dict[PK_TYPE, Tuple[Decimal, Decimal]]:
    """Grouped (debit_total, credit_total) per account_id for the given entry queryset."""
    rows = queryset.order_by().values('account_id').annotate(
        total_debit=Coalesce(
            Sum('amount', filter=Q(entry_type=DrCrType.DEBIT.value)),
            ZERO_DECIMAL, output_field=models.DecimalField()
        ),
        total_credit=Coalesce(
            Sum('amount', filter=Q(entry_type=DrCrType.CREDIT.value)),
            ZERO_DECIMAL, output_field=models.DecimalField()
        ),
    )
    return {row['account_id']: (row['total_debit'], row['total_credit']) for row in rows}


def _compute_batch(
        company_id: PK_TYPE,
        accounts: Sequence[Account],
        as_of: Optional[date],
        start_date: Optional[date],
        fiscal_year: Optional[str],
        fiscal_period: Optional[str],
        include_opening_balance: bool,
) -> Dict[PK_TYPE, AccountBalance]:
    account_ids = [acc.pk for acc in accounts]
    base_qs = active_entries(company_id).filter(account_id__in=account_ids)

    prior: Dict[PK_TYPE, Tuple[Decimal, Decimal]] = {}
    if include_opening_balance and start_date:
        prior = movements_by_account(base_qs.filter(entry_date__lt=start_date))

    window_qs = base_qs
    if start_date:
        window_qs = window_qs.filter(entry_date__gte=start_date)
    if as_of:
        window_qs = window_qs.filter(entry_date__lte=as_of)
    if fiscal_year:
        window_qs = window_qs.filter(fiscal_year=fiscal_year)
    if fiscal_period:
        window_qs = window_qs.filter(fiscal_period=fiscal_period)
    window = movements_by_account(window_qs)

    results: Dict[PK_TYPE, AccountBalance] = {}
    for acc in accounts:
        nature = acc.account_nature
        opening = ZERO_DECIMAL
        if include_opening_balance:
            opening = acc.opening_balance or ZERO_DECIMAL
            prior_debit, prior_credit = prior.get(acc.pk, (ZERO_DECIMAL, ZERO_DECIMAL))
            opening += signed_movement(nature, prior_debit, prior_credit)

        debit_total, credit_total = window.get(acc.pk, (ZERO_DECIMAL, ZERO_DECIMAL))
        balance = round_decimal(opening + signed_movement(nature, debit_total, credit_total))
        net_debit, net_credit = split_net(nature, balance)
        results[acc.pk] = AccountBalance(
            account_id=acc.pk,
            opening_balance=round_decimal(opening),
            debit_total=round_decimal(debit_total),
            credit_total=round_decimal(credit_total),
            balance=balance,
            net_debit=net_debit,
            net_credit=net_credit,
        )
    return results


def _compute_batch_in_worker(*args) -> Dict[PK_TYPE, AccountBalance]:
    try:
        return _compute_batch(*args)
    finally:
        # Worker threads own their DB connection.
        connection.close()


def _batched(items: List[Account], size: int) -> Iterable[List[Account]]:
    for index in range(0, len(items), size):
        yield items[index:index + size]


def compute_balances(
        company_id: PK_TYPE,
        accounts: Iterable[Account],
        as_of: Optional[date] = None,
        start_date: Optional[date] = None,
        fiscal_year: Optional[str] = None,
        fiscal_period: Optional[str] = None,
        include_opening_balance: bool = True,
        max_workers: Optional[int] = None,
        batch_size: Optional[int] = None,
) -> Dict[PK_TYPE, AccountBalance]:
    """
    Balances for many accounts of one company, keyed by account pk.

    Accounts are processed in batches of `batch_size`; with more than one batch
    and `max_workers > 1` the batches run concurrently on a pool of at most
    `max_workers` threads. Results do not depend on the degree of parallelism.

    With `include_opening_balance=False` the result is pure window activity:
    the stored opening balance and entries before `start_date` are ignored.
    """
    validate_date_range(start_date, as_of)
    accounts = list(accounts)
    if not accounts:
        return {}

    max_workers = REPORT_MAX_WORKERS if max_workers is None else max_workers
    batch_size = max(1, batch_size or REPORT_BATCH_SIZE)
    batches = list(_batched(accounts, batch_size))
    args = (as_of, start_date, fiscal_year, fiscal_period, include_opening_balance)

    results: Dict[PK_TYPE, AccountBalance] = {}
    if max_workers <= 1 or len(batches) == 1:
        for batch in batches:
            results.update(_compute_batch(company_id, batch, *args))
        return results

    pool_size = min(max_workers, len(batches))
    logger.debug(
        f"Co {company_id}: computing {len(accounts)} balances in {len(batches)} batches on {pool_size} workers.")
    with ThreadPoolExecutor(max_workers=pool_size, thread_name_prefix='crp-balance') as executor:
        futures = [executor.submit(_compute_batch_in_worker, company_id, batch, *args) for batch in batches]
        for future in futures:
            results.update(future.result())
    return results


def compute_account_balance(
        company_id: PK_TYPE,
        account_id: PK_TYPE,
        as_of: Optional[date] = None,
        start_date: Optional[date] = None,
        fiscal_year: Optional[str] = None,
        fiscal_period: Optional[str] = None,
) -> AccountBalance:
    """
    Balance of one account as of `as_of` (inclusive, None = no upper bound).

    When `start_date` is given, ACTIVE entries before it are folded into the
    stored opening balance and debit/credit totals cover only the window.

    Raises:
        AccountNotFound: Account missing, deleted, or in another company.
        InvalidDateRange: start_date after as_of.
    """
    validate_date_range(start_date, as_of)
    account = get_account(company_id, account_id)
    result = compute_balances(
        company_id, [account], as_of=as_of, start_date=start_date,
        fiscal_year=fiscal_year, fiscal_period=fiscal_period, max_workers=1,
    )[account.pk]
    logger.debug(f"Co {company_id}, Acc {account.code}: balance {result['balance']} as of {as_of or 'latest'}.")
    return result
