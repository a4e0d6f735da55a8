# crp_core/enums.py

from django.db import models
from django.utils.translation import gettext_lazy as _

# -------------------- CORE ACCOUNTING CLASSIFICATIONS --------------------

class AccountType(models.TextChoices):
    """
    Fundamental accounting classification for an Account.
    Determines whether the account lands on the Balance Sheet (Asset, Liability,
    Equity) or feeds retained earnings (Revenue, Expense).
    """
    ASSET     = 'ASSET', _('Asset')         # Resources owned (Cash, AR, Buildings)
    LIABILITY = 'LIABILITY', _('Liability')     # Obligations owed (AP, Loans)
    EQUITY    = 'EQUITY', _('Equity')        # Owner's stake (Capital, Retained Earnings)
    REVENUE   = 'REVENUE', _('Revenue')      # Sales, service and other income
    EXPENSE   = 'EXPENSE', _('Expense')       # Costs incurred (Salaries, Rent, Utilities)

class AccountNature(models.TextChoices):
    """
    Defines the normal balance side (Debit or Credit) of an Account.
    Derived from the AccountType unless explicitly stored (contra accounts).
    """
    DEBIT  = 'DEBIT', _('Debit')    # Normal balance increases with debits (Assets, Expenses)
    CREDIT = 'CREDIT', _('Credit')   # Normal balance increases with credits (Liabilities, Equity, Revenue)

class DrCrType(models.TextChoices):
    """
    Specifies whether a Ledger Entry represents a Debit or a Credit amount.
    """
    DEBIT  = 'DEBIT', _('Dr')
    CREDIT = 'CREDIT', _('Cr')

class AccountCategory(models.TextChoices):
    """
    Finer classification inside an AccountType. Drives Balance Sheet bucketing
    (current vs. fixed assets, current vs. long-term liabilities).
    """
    CURRENT_ASSET       = 'current_asset', _('Current Asset')
    FIXED_ASSET         = 'fixed_asset', _('Fixed Asset')
    OTHER_ASSET         = 'other_asset', _('Other Asset')
    CURRENT_LIABILITY   = 'current_liability', _('Current Liability')
    LONG_TERM_LIABILITY = 'long_term_liability', _('Long-term Liability')
    OTHER_LIABILITY     = 'other_liability', _('Other Liability')
    OWNER_EQUITY        = 'owner_equity', _('Owner Equity')
    RETAINED_EARNINGS   = 'retained_earnings', _('Retained Earnings')
    SALES_REVENUE       = 'sales_revenue', _('Sales Revenue')
    OTHER_REVENUE       = 'other_revenue', _('Other Revenue')
    COST_OF_GOODS_SOLD  = 'cost_of_goods_sold', _('Cost of Goods Sold')
    OPERATING_EXPENSE   = 'operating_expense', _('Operating Expense')
    FINANCIAL_EXPENSE   = 'financial_expense', _('Financial Expense')
    OTHER_EXPENSE       = 'other_expense', _('Other Expense')

# -------------------- LEDGER ENTRY CLASSIFICATIONS --------------------

class EntryStatus(models.TextChoices):
    """
    Lifecycle of a posted Ledger Entry. Only ACTIVE entries count towards
    balances; VOID entries stay for audit.
    """
    ACTIVE = 'ACTIVE', _('Active')
    VOID   = 'VOID', _('Void')

class VoucherType(models.TextChoices):
    """Display classification of the voucher that produced a Ledger Entry."""
    JOURNAL = 'JV', _('Journal Voucher')
    PAYMENT = 'PV', _('Payment Voucher')
    RECEIPT = 'RV', _('Receipt Voucher')
    CONTRA  = 'CV', _('Contra Voucher')

# -------------------- SUPPORTING ENUMS --------------------

class CurrencyType(models.TextChoices):
    """
    Represents standard currency codes (ISO 4217).
    """
    USD = 'USD', _('US Dollar')
    EUR = 'EUR', _('Euro')
    INR = 'INR', _('Indian Rupee')
    GBP = 'GBP', _('British Pound')
    AED = 'AED', _('UAE Dirham')
    PKR = 'PKR', _('Pakistani Rupee')
    JPY = 'JPY', _('Japanese Yen')
    CAD = 'CAD', _('Canadian Dollar')
    AUD = 'AUD', _('Australian Dollar')
    OTHER = 'OTHER', _('Other')
