"""
Utility functions used throughout the ledger.

Centralizes currency rounding, the normal-balance sign rule and query
parameter parsing so models, services and views share one implementation.
"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Tuple

from django.utils.translation import gettext_lazy as _
from rest_framework.exceptions import ParseError

from .enums import AccountNature, DrCrType

ZERO_DECIMAL = Decimal('0.00')


def round_decimal(value: Decimal, precision: str = '0.01') -> Decimal:
    """
    Rounds a Decimal to given precision using ROUND_HALF_UP method.

    Args:
        value (Decimal): The decimal number to round.
        precision (str): The decimal precision (default: 2 places).

    Returns:
        Decimal: Rounded decimal.
    """
    return value.quantize(Decimal(precision), rounding=ROUND_HALF_UP)


def signed_movement(nature: str, debit: Decimal, credit: Decimal) -> Decimal:
    """
    Net effect of debit/credit totals on an account of the given normal balance.
    DEBIT-normal accounts grow with debits, CREDIT-normal accounts with credits.
    """
    if nature == AccountNature.DEBIT.value:
        return debit - credit
    if nature == AccountNature.CREDIT.value:
        return credit - debit
    raise ValueError(f"Invalid account nature '{nature}'. Cannot calculate balance.")


def entry_effect(nature: str, entry_type: str, amount: Decimal) -> Decimal:
    """Signed effect of a single entry on an account's balance."""
    if entry_type == DrCrType.DEBIT.value:
        return signed_movement(nature, amount, ZERO_DECIMAL)
    return signed_movement(nature, ZERO_DECIMAL, amount)


def split_net(nature: str, balance: Decimal) -> Tuple[Decimal, Decimal]:
    """
    Splits a signed balance into (net_debit, net_credit) for trial-balance columns.
    At most one of the two is non-zero.
    """
    if nature == AccountNature.DEBIT.value:
        return (balance, ZERO_DECIMAL) if balance >= ZERO_DECIMAL else (ZERO_DECIMAL, -balance)
    return (-balance, ZERO_DECIMAL) if balance < ZERO_DECIMAL else (ZERO_DECIMAL, balance)


def dr_cr_display(amount: Decimal, nature: str) -> dict:
    """
    Dr/Cr presentation of a signed balance: positive balances sit on the
    account's normal side, negative ones on the opposite side.
    """
    is_debit_nature = nature == AccountNature.DEBIT.value
    if amount == ZERO_DECIMAL:
        side = ''
    elif (amount > ZERO_DECIMAL) == is_debit_nature:
        side = 'Dr'
    else:
        side = 'Cr'
    return {'amount': abs(amount), 'dr_cr': side}


def parse_date_param(request, key: str, required: bool = False, default: Optional[date] = None) -> Optional[date]:
    """
    Parses an ISO 'YYYY-MM-DD' query parameter from a DRF request.
    Raises ParseError (400) on malformed values.
    """
    raw = request.query_params.get(key)
    if not raw:
        if required:
            raise ParseError(detail=_("Query parameter '%(key)s' is required (YYYY-MM-DD).") % {'key': key})
        return default
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError):
        raise ParseError(detail=_("Invalid date format for '%(key)s'. Use YYYY-MM-DD.") % {'key': key})


def parse_bool_param(request, key: str, default: bool = False) -> bool:
    """Interprets 'true'/'1'/'yes' (case-insensitive) as True."""
    raw = request.query_params.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in ('true', '1', 'yes')
