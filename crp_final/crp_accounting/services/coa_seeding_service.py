# crp_accounting/services/coa_seeding_service.py
import logging
from typing import Any, Dict, Optional

from django.db import transaction

from company.models import Company
from crp_core.constants import DEFAULT_CHART_OF_ACCOUNTS
from crp_core.enums import AccountType
from ..exceptions import AlreadySeeded
from ..models.coa import Account

logger = logging.getLogger(__name__)


def is_chart_seeded(company: Company) -> bool:
    """True once the company has at least one non-deleted account."""
    return Account.global_objects.filter(company_id=company.pk).exists()


@transaction.atomic
def seed_default_chart(company: Company, user=None) -> int:
    """
    Installs the default Chart of Accounts for a company in one transaction.

    Accounts are created parent-first so every child can be wired to its
    parent by code; all of them are flagged as system accounts.

    Returns:
        The number of accounts created.

    Raises:
        AlreadySeeded: If the company already has any non-deleted account.
    """
    existing = Account.global_objects.filter(company_id=company.pk).count()
    if existing:
        logger.warning(
            f"COA Seeding for '{company.name}' (ID: {company.pk}) refused: {existing} account(s) already exist.")
        raise AlreadySeeded(existing_count=existing)

    logger.info(f"Starting COA Seeding for Company: '{company.name}' (ID: {company.pk})")
    created: Dict[str, Account] = {}

    for code, name, account_type, category, parent_code, flags in DEFAULT_CHART_OF_ACCOUNTS:
        parent: Optional[Account] = created.get(parent_code) if parent_code else None
        if parent_code and parent is None:
            raise ValueError(f"Default chart lists '{code}' before its parent '{parent_code}'.")
        account = Account.create_for_company(
            company,
            user,
            code=code,
            name=name,
            account_type=account_type,
            category=category,
            parent_account=parent,
            is_system_account=True,
            description=f"Seeded account: {name}",
            **flags,
        )
        created[code] = account

    logger.info(f"Finished COA Seeding for Company: '{company.name}' (ID: {company.pk}). "
                f"Accounts Created: {len(created)}.")
    return len(created)


def seeding_summary(company_id: Any) -> Dict[str, Any]:
    """Total and per-type account counts reported after seeding."""
    by_type = {account_type.value: 0 for account_type in AccountType}
    for account_type in Account.global_objects.filter(company_id=company_id).values_list('account_type', flat=True):
        by_type[account_type] = by_type.get(account_type, 0) + 1
    return {'total': sum(by_type.values()), 'by_type': by_type}
