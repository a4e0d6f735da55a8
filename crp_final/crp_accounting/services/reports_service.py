# crp_accounting/services/reports_service.py

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, TypedDict

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from company.models import Company
from crp_core.constants import BALANCE_TOLERANCE, DEFAULT_BALANCE_SHEET_PREFIXES
from crp_core.enums import AccountCategory, AccountNature, AccountType
from crp_core.utils import ZERO_DECIMAL, round_decimal
from ..exceptions import ReportGenerationError
from ..models.coa import Account
from .balance_service import AccountBalance, compute_balances, validate_date_range

logger = logging.getLogger("crp_accounting.services.reports")

PK_TYPE = Any

RETAINED_EARNINGS_ACCOUNT_NAME_DISPLAY = _("Retained Earnings (Calculated)")

# Side on which each section reports a positive figure.
SECTION_NATURE = {
    AccountType.ASSET.value: AccountNature.DEBIT.value,
    AccountType.EXPENSE.value: AccountNature.DEBIT.value,
    AccountType.LIABILITY.value: AccountNature.CREDIT.value,
    AccountType.EQUITY.value: AccountNature.CREDIT.value,
    AccountType.REVENUE.value: AccountNature.CREDIT.value,
}


# =============================================================================
# Result types
# =============================================================================

class TrialBalanceRow(TypedDict):
    account_id: PK_TYPE
    account_code: str
    account_name: str
    account_type: str
    account_nature: str
    opening_balance: Decimal
    debit_total: Decimal
    credit_total: Decimal
    balance: Decimal
    net_debit: Decimal
    net_credit: Decimal


class TrialBalanceTotals(TypedDict):
    debit: Decimal
    credit: Decimal
    difference: Decimal


class TrialBalance(TypedDict):
    company_id: PK_TYPE
    company_name: str
    period: Dict[str, Any]
    rows: List[TrialBalanceRow]
    grouped_by_type: Dict[str, List[TrialBalanceRow]]
    totals: TrialBalanceTotals
    is_balanced: bool
    generated_at: Any


class BalanceSheetLine(TypedDict):
    account_id: Optional[PK_TYPE]
    account_code: Optional[str]
    account_name: str
    category: Optional[str]
    balance: Decimal


# =============================================================================
# Helpers
# =============================================================================

def _get_company(company_id: PK_TYPE) -> Company:
    try:
        return Company.objects.get(pk=company_id)
    except (Company.DoesNotExist, ValueError):
        raise ReportGenerationError(f"Company with ID {company_id} not found.")


def _leaf_accounts(company_id: PK_TYPE, account_types: Optional[Iterable[str]] = None) -> models.QuerySet:
    """Active, non-deleted posting accounts of a company, ordered by code."""
    qs = Account.global_objects.filter(company_id=company_id, is_group=False, is_active=True)
    if account_types is not None:
        qs = qs.filter(account_type__in=list(account_types))
    return qs.order_by('code')


def _section_amount(account: Account, balance: Decimal) -> Decimal:
    """
    Expresses a balance on the side its statement section reports as positive.
    A contra account (nature opposite to its type) reduces its section.
    """
    if account.account_nature == SECTION_NATURE[account.account_type]:
        return balance
    return -balance


def get_balance_sheet_prefixes() -> Mapping[str, Sequence[str]]:
    return getattr(settings, 'CRP_BALANCE_SHEET_PREFIXES', DEFAULT_BALANCE_SHEET_PREFIXES)


def classify_asset(account: Account, prefixes: Optional[Mapping[str, Sequence[str]]] = None) -> str:
    """'current' or 'fixed': explicit category first, then the code-prefix table."""
    if account.category == AccountCategory.CURRENT_ASSET.value:
        return 'current'
    if account.category == AccountCategory.FIXED_ASSET.value:
        return 'fixed'
    prefixes = get_balance_sheet_prefixes() if prefixes is None else prefixes
    if account.code.startswith(tuple(prefixes.get('current_assets', ()))):
        return 'current'
    return 'fixed'


def classify_liability(account: Account, prefixes: Optional[Mapping[str, Sequence[str]]] = None) -> str:
    """'current' or 'long_term': explicit category first, then the code-prefix table."""
    if account.category == AccountCategory.CURRENT_LIABILITY.value:
        return 'current'
    if account.category == AccountCategory.LONG_TERM_LIABILITY.value:
        return 'long_term'
    prefixes = get_balance_sheet_prefixes() if prefixes is None else prefixes
    if account.code.startswith(tuple(prefixes.get('current_liabilities', ()))):
        return 'current'
    return 'long_term'


def _sum_lines(lines: Iterable[BalanceSheetLine]) -> Decimal:
    return round_decimal(sum((line['balance'] for line in lines), ZERO_DECIMAL))


def _line(account: Account, amount: Decimal) -> BalanceSheetLine:
    return BalanceSheetLine(
        account_id=account.pk,
        account_code=account.code,
        account_name=account.name,
        category=account.category,
        balance=amount,
    )


def _revenue_and_expense(
        accounts: Sequence[Account], balances: Dict[PK_TYPE, AccountBalance]) -> Tuple[Decimal, Decimal]:
    total_revenue, total_expense = ZERO_DECIMAL, ZERO_DECIMAL
    for account in accounts:
        amount = _section_amount(account, balances[account.pk]['balance'])
        if account.account_type == AccountType.REVENUE.value:
            total_revenue += amount
        else:
            total_expense += amount
    return round_decimal(total_revenue), round_decimal(total_expense)


# =============================================================================
# Trial Balance
# =============================================================================

def generate_trial_balance(
        company_id: PK_TYPE,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        fiscal_year: Optional[str] = None,
        fiscal_period: Optional[str] = None,
) -> TrialBalance:
    """
    Trial balance over leaf accounts.

    Debit/credit totals are activity inside the window; each row's net figure is
    its opening balance as of `start_date` plus that activity, split into the
    net_debit / net_credit columns. An out-of-balance result is logged and
    returned as is.
    """
    company = _get_company(company_id)
    validate_date_range(start_date, end_date)
    logger.info(
        f"Generating Trial Balance for Company ID {company_id} "
        f"(start={start_date}, end={end_date}, FY={fiscal_year}, period={fiscal_period})")

    accounts = list(_leaf_accounts(company_id))
    balances = compute_balances(
        company_id, accounts, as_of=end_date, start_date=start_date,
        fiscal_year=fiscal_year, fiscal_period=fiscal_period,
    )

    rows: List[TrialBalanceRow] = []
    grouped_by_type: Dict[str, List[TrialBalanceRow]] = {t.value: [] for t in AccountType}
    total_debit, total_credit = ZERO_DECIMAL, ZERO_DECIMAL

    for account in accounts:
        data = balances[account.pk]
        if not (data['debit_total'] or data['credit_total'] or data['opening_balance']):
            continue
        row = TrialBalanceRow(
            account_id=account.pk,
            account_code=account.code,
            account_name=account.name,
            account_type=account.account_type,
            account_nature=account.account_nature,
            opening_balance=data['opening_balance'],
            debit_total=data['debit_total'],
            credit_total=data['credit_total'],
            balance=data['balance'],
            net_debit=data['net_debit'],
            net_credit=data['net_credit'],
        )
        rows.append(row)
        grouped_by_type.setdefault(account.account_type, []).append(row)
        total_debit += data['net_debit']
        total_credit += data['net_credit']

    total_debit, total_credit = round_decimal(total_debit), round_decimal(total_credit)
    difference = total_debit - total_credit
    is_balanced = abs(difference) < BALANCE_TOLERANCE
    if not is_balanced:
        logger.error(
            f"Trial Balance for Co ID {company_id} is OUT OF BALANCE! "
            f"Debit Total: {total_debit}, Credit Total: {total_credit}, Difference: {difference}")

    return TrialBalance(
        company_id=company_id,
        company_name=company.name,
        period={
            'start_date': start_date,
            'end_date': end_date,
            'fiscal_year': fiscal_year,
            'fiscal_period': fiscal_period,
        },
        rows=rows,
        grouped_by_type=grouped_by_type,
        totals=TrialBalanceTotals(debit=total_debit, credit=total_credit, difference=difference),
        is_balanced=is_balanced,
        generated_at=timezone.now(),
    )


# =============================================================================
# Balance Sheet
# =============================================================================

def generate_balance_sheet(
        company_id: PK_TYPE,
        as_of_date: date,
        fiscal_year: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Statement of financial position as of `as_of_date`.

    Balances are cumulative since inception. Retained earnings is life-to-date
    revenue minus expense. `revenue_expense_summary` is a separate figure: the
    activity of `fiscal_year` up to the date when one is given, otherwise the
    same cumulative totals.
    """
    if not isinstance(as_of_date, date):
        raise ReportGenerationError(f"Invalid as-of date: {as_of_date!r}.")
    company = _get_company(company_id)
    logger.info(f"Generating Balance Sheet for Company ID {company_id} as of {as_of_date} (FY={fiscal_year})")

    bs_accounts = list(_leaf_accounts(
        company_id, (AccountType.ASSET.value, AccountType.LIABILITY.value, AccountType.EQUITY.value)))
    pl_accounts = list(_leaf_accounts(company_id, (AccountType.REVENUE.value, AccountType.EXPENSE.value)))

    balances = compute_balances(company_id, bs_accounts + pl_accounts, as_of=as_of_date)

    prefixes = get_balance_sheet_prefixes()
    assets: Dict[str, List[BalanceSheetLine]] = {'current': [], 'fixed': []}
    liabilities: Dict[str, List[BalanceSheetLine]] = {'current': [], 'long_term': []}
    equity_lines: List[BalanceSheetLine] = []

    for account in bs_accounts:
        balance = balances[account.pk]['balance']
        if abs(balance) < BALANCE_TOLERANCE:
            continue
        line = _line(account, _section_amount(account, balance))
        if account.account_type == AccountType.ASSET.value:
            assets[classify_asset(account, prefixes)].append(line)
        elif account.account_type == AccountType.LIABILITY.value:
            liabilities[classify_liability(account, prefixes)].append(line)
        else:
            equity_lines.append(line)

    total_revenue, total_expense = _revenue_and_expense(pl_accounts, balances)
    retained_earnings = total_revenue - total_expense

    if fiscal_year:
        fy_balances = compute_balances(
            company_id, pl_accounts, as_of=as_of_date, fiscal_year=fiscal_year, include_opening_balance=False)
        fy_revenue, fy_expense = _revenue_and_expense(pl_accounts, fy_balances)
    else:
        fy_revenue, fy_expense = total_revenue, total_expense

    current_assets = _sum_lines(assets['current'])
    fixed_assets = _sum_lines(assets['fixed'])
    total_assets = current_assets + fixed_assets

    current_liabilities = _sum_lines(liabilities['current'])
    long_term_liabilities = _sum_lines(liabilities['long_term'])
    total_liabilities = current_liabilities + long_term_liabilities

    total_equity = _sum_lines(equity_lines) + retained_earnings
    total_liabilities_and_equity = total_liabilities + total_equity

    difference = total_assets - total_liabilities_and_equity
    is_balanced = abs(difference) < BALANCE_TOLERANCE
    if not is_balanced:
        logger.error(
            f"Balance Sheet for Co ID {company_id} is OUT OF BALANCE! "
            f"Assets: {total_assets}, Liabilities: {total_liabilities}, Equity: {total_equity}, "
            f"Total L+E: {total_liabilities_and_equity}, Difference: {difference}")

    return {
        'company_id': company_id,
        'company_name': company.name,
        'as_of_date': as_of_date,
        'assets': {
            'current': assets['current'],
            'current_total': current_assets,
            'fixed': assets['fixed'],
            'fixed_total': fixed_assets,
            'total': total_assets,
        },
        'liabilities': {
            'current': liabilities['current'],
            'current_total': current_liabilities,
            'long_term': liabilities['long_term'],
            'long_term_total': long_term_liabilities,
            'total': total_liabilities,
        },
        'equity': {
            'accounts': equity_lines,
            'retained_earnings': retained_earnings,
            'retained_earnings_label': str(RETAINED_EARNINGS_ACCOUNT_NAME_DISPLAY),
            'total': total_equity,
        },
        'totals': {
            'assets': total_assets,
            'liabilities_and_equity': total_liabilities_and_equity,
            'difference': difference,
        },
        'total_assets': total_assets,
        'total_liabilities_and_equity': total_liabilities_and_equity,
        'difference': difference,
        'is_balanced': is_balanced,
        'revenue_expense_summary': {
            'fiscal_year': fiscal_year,
            'total_revenue': fy_revenue,
            'total_expense': fy_expense,
            'net_income': fy_revenue - fy_expense,
        },
        'generated_at': timezone.now(),
    }
