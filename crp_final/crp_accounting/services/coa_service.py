# crp_accounting/services/coa_service.py
"""
Account Registry: tenant-scoped lookups and maintenance of the Chart of Accounts.

All functions take an explicit company id and query through the unfiltered
managers, so they behave the same inside a request, a management command or
a worker thread.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.db.models import Count, Q
from django.utils.translation import gettext_lazy as _

from crp_core.enums import AccountType
from ..exceptions import AccountNotFound, AccountDeletionError, SystemAccountEditError
from ..models.coa import Account, SYSTEM_ACCOUNT_EDITABLE_FIELDS
from ..models.ledger import LedgerEntry

logger = logging.getLogger(__name__)

PK_TYPE = Any


def get_account(company_id: PK_TYPE, account_id: PK_TYPE) -> Account:
    """Non-deleted account of the company, else AccountNotFound (also for other companies)."""
    try:
        return Account.global_objects.select_related('parent_account').get(pk=account_id, company_id=company_id)
    except (Account.DoesNotExist, DjangoValidationError, ValueError):
        logger.warning(f"Account {account_id} not found for Co {company_id}.")
        raise AccountNotFound(account_id=account_id, company_id=company_id)


def resolve_children(company_id: PK_TYPE, account_id: PK_TYPE) -> List[Account]:
    account = get_account(company_id, account_id)
    return list(account.get_children())


def resolve_hierarchy_path(company_id: PK_TYPE, account_id: PK_TYPE) -> List[Account]:
    """Root-to-node chain of ancestors ending with the account itself."""
    account = get_account(company_id, account_id)
    return account.get_hierarchy_path()


def can_delete(account: Account, allow_system: bool = False) -> Tuple[bool, str]:
    """
    Returns (allowed, reason). Blocks deletion of accounts with children,
    with any ledger entries (active or void), and of system accounts unless
    explicitly overridden.
    """
    if account.is_system_account and not allow_system:
        return False, str(_("System accounts cannot be deleted."))
    if account.get_children().exists():
        return False, str(_("Account has child accounts; delete or move them first."))
    if LedgerEntry.global_all_objects_including_deleted.filter(account_id=account.pk).exists():
        return False, str(_("Account has ledger entries and cannot be deleted."))
    return True, ''


@transaction.atomic
def soft_delete_account(account: Account, user=None, allow_system: bool = False) -> Account:
    allowed, reason = can_delete(account, allow_system=allow_system)
    if not allowed:
        logger.warning(
            f"Deletion of Account {account.code} (ID: {account.pk}, Co: {account.company_id}) refused: {reason}")
        raise AccountDeletionError(message=reason)

    account.is_active = False
    account.updated_by = user
    account.save()
    account.delete()
    logger.info(
        f"Account {account.code} (ID: {account.pk}, Co: {account.company_id}) soft-deleted "
        f"by {getattr(user, 'name', 'System')}.")
    return account


def check_system_account_changes(account: Account, changes: Dict[str, Any]) -> None:
    """Raises SystemAccountEditError when a protected field of a system account would change."""
    if not account.is_system_account:
        return
    blocked = sorted(
        field for field, value in changes.items()
        if field not in SYSTEM_ACCOUNT_EDITABLE_FIELDS and getattr(account, field, None) != value
    )
    if blocked:
        raise SystemAccountEditError(fields=blocked)


@transaction.atomic
def update_account(account: Account, user=None, **changes) -> Account:
    """
    Applies field changes, honouring the system-account restriction.
    Assigning a parent turns that parent into a group account.
    """
    check_system_account_changes(account, changes)
    for field, value in changes.items():
        setattr(account, field, value)
    account.updated_by = user
    account.save()
    if account.parent_account_id:
        mark_as_group(account.parent_account, user=user)
    logger.info(f"Account {account.code} (ID: {account.pk}, Co: {account.company_id}) updated: {sorted(changes)}.")
    return account


def mark_as_group(account: Account, user=None) -> None:
    """A leaf that receives a child becomes a (non-posting) group account."""
    if account.is_group:
        return
    if account.has_ledger_entries():
        raise DjangoValidationError({'parent_account': _(
            "Parent account already has ledger entries and cannot become a group account.")})
    account.is_group = True
    account.updated_by = user
    account.save(update_fields=['is_group', 'updated_by', 'updated_at'])
    logger.info(f"Account {account.code} (ID: {account.pk}) converted to a group account.")


def build_account_tree(company_id: PK_TYPE, queryset=None) -> List[Dict[str, Any]]:
    """
    Nested representation of the chart: each node is a dict with the account
    and its `children` list, roots and siblings ordered by code.
    Accounts whose parent is outside the given queryset are treated as roots.
    """
    accounts = list(queryset if queryset is not None else Account.global_objects.filter(company_id=company_id))
    accounts.sort(key=lambda acc: acc.code)
    nodes = {acc.pk: {'account': acc, 'children': []} for acc in accounts}
    roots = []
    for acc in accounts:
        node = nodes[acc.pk]
        parent_node = nodes.get(acc.parent_account_id)
        if parent_node is not None:
            parent_node['children'].append(node)
        else:
            roots.append(node)
    return roots


def account_summary(company_id: PK_TYPE, queryset=None) -> Dict[str, Any]:
    """Counts used by the account listing: total, per type, active, inactive."""
    qs = queryset if queryset is not None else Account.global_objects.filter(company_id=company_id)
    totals = qs.aggregate(
        total=Count('pk'),
        active=Count('pk', filter=Q(is_active=True)),
        inactive=Count('pk', filter=Q(is_active=False)),
    )
    by_type = {account_type.value: 0 for account_type in AccountType}
    for row in qs.order_by().values('account_type').annotate(count=Count('pk')):
        by_type[row['account_type']] = row['count']
    return {
        'total': totals['total'],
        'by_type': by_type,
        'active': totals['active'],
        'inactive': totals['inactive'],
    }
