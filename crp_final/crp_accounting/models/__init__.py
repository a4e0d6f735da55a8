from .base import TenantScopedModel
from .coa import Account, ACCOUNT_TYPE_TO_NATURE, SYSTEM_ACCOUNT_EDITABLE_FIELDS
from .ledger import LedgerEntry

__all__ = [
    'TenantScopedModel',
    'Account',
    'ACCOUNT_TYPE_TO_NATURE',
    'SYSTEM_ACCOUNT_EDITABLE_FIELDS',
    'LedgerEntry',
]
