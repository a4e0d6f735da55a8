from .coa import AccountAdmin
from .ledger import LedgerEntryAdmin

__all__ = ['AccountAdmin', 'LedgerEntryAdmin']
