# crp_core/constants.py

"""
Static constants used across the ledger: the default Chart of Accounts that
`seed_default_chart` installs for a new company, and the code-prefix table the
Balance Sheet falls back to when an account carries no category.
"""

from decimal import Decimal

# =============================================================================
# Default Chart of Accounts
# =============================================================================
# Format: (code, name, account_type, category, parent_code, flags)
# `flags` is an optional dict of extra Account field values (is_group,
# is_bank_account, is_tax_account, tax_rate). Parents must appear before
# their children. Every seeded account is marked as a system account.

DEFAULT_CHART_OF_ACCOUNTS = [
    # ========================== ASSETS ==========================
    ('1000', 'Assets', 'ASSET', 'current_asset', None, {'is_group': True}),
    ('1100', 'Current Assets', 'ASSET', 'current_asset', '1000', {'is_group': True}),
    ('1101', 'Cash in Hand', 'ASSET', 'current_asset', '1100', {}),
    ('1102', 'Cash at Bank', 'ASSET', 'current_asset', '1100', {'is_bank_account': True}),
    ('1103', 'Petty Cash', 'ASSET', 'current_asset', '1100', {}),
    ('1200', 'Accounts Receivable', 'ASSET', 'current_asset', '1100', {}),
    ('1300', 'Inventory', 'ASSET', 'current_asset', '1100', {}),
    ('1400', 'Fixed Assets', 'ASSET', 'fixed_asset', '1000', {'is_group': True}),
    ('1401', 'Land & Building', 'ASSET', 'fixed_asset', '1400', {}),
    ('1402', 'Plant & Machinery', 'ASSET', 'fixed_asset', '1400', {}),
    ('1403', 'Furniture & Fixtures', 'ASSET', 'fixed_asset', '1400', {}),
    ('1404', 'Vehicles', 'ASSET', 'fixed_asset', '1400', {}),
    ('1405', 'Computer Equipment', 'ASSET', 'fixed_asset', '1400', {}),

    # ========================== LIABILITIES ==========================
    ('2000', 'Liabilities', 'LIABILITY', 'current_liability', None, {'is_group': True}),
    ('2100', 'Current Liabilities', 'LIABILITY', 'current_liability', '2000', {'is_group': True}),
    ('2101', 'Accounts Payable', 'LIABILITY', 'current_liability', '2100', {}),
    ('2102', 'Sales Tax Payable', 'LIABILITY', 'current_liability', '2100',
     {'is_tax_account': True, 'tax_rate': Decimal('18.00')}),
    ('2103', 'Income Tax Payable', 'LIABILITY', 'current_liability', '2100', {'is_tax_account': True}),
    ('2104', 'Salary Payable', 'LIABILITY', 'current_liability', '2100', {}),
    ('2400', 'Long-term Liabilities', 'LIABILITY', 'long_term_liability', '2000', {'is_group': True}),
    ('2401', 'Long-term Loans', 'LIABILITY', 'long_term_liability', '2400', {}),

    # ========================== EQUITY ==========================
    ('3000', 'Owner Equity', 'EQUITY', 'owner_equity', None, {'is_group': True}),
    ('3001', 'Capital', 'EQUITY', 'owner_equity', '3000', {}),
    ('3002', 'Retained Earnings', 'EQUITY', 'retained_earnings', '3000', {}),
    ('3003', 'Current Year Earnings', 'EQUITY', 'retained_earnings', '3000', {}),

    # ========================== REVENUE ==========================
    ('4000', 'Revenue', 'REVENUE', 'sales_revenue', None, {'is_group': True}),
    ('4001', 'Sales Revenue', 'REVENUE', 'sales_revenue', '4000', {}),
    ('4002', 'Service Revenue', 'REVENUE', 'sales_revenue', '4000', {}),
    ('4100', 'Other Revenue', 'REVENUE', 'other_revenue', '4000', {'is_group': True}),
    ('4101', 'Interest Income', 'REVENUE', 'other_revenue', '4100', {}),

    # ========================== EXPENSES ==========================
    ('5000', 'Expenses', 'EXPENSE', 'operating_expense', None, {'is_group': True}),
    ('5100', 'Cost of Goods Sold', 'EXPENSE', 'cost_of_goods_sold', '5000', {'is_group': True}),
    ('5101', 'Purchases', 'EXPENSE', 'cost_of_goods_sold', '5100', {}),
    ('5102', 'Direct Labor', 'EXPENSE', 'cost_of_goods_sold', '5100', {}),
    ('5200', 'Operating Expenses', 'EXPENSE', 'operating_expense', '5000', {'is_group': True}),
    ('5201', 'Salaries & Wages', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5202', 'Rent Expense', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5203', 'Utilities Expense', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5204', 'Telephone & Internet', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5205', 'Office Supplies', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5206', 'Depreciation Expense', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5207', 'Insurance Expense', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5208', 'Repairs & Maintenance', 'EXPENSE', 'operating_expense', '5200', {}),
    ('5800', 'Financial Expenses', 'EXPENSE', 'financial_expense', '5000', {'is_group': True}),
    ('5801', 'Interest Expense', 'EXPENSE', 'financial_expense', '5800', {}),
    ('5802', 'Bank Charges', 'EXPENSE', 'financial_expense', '5800', {}),
]

# =============================================================================
# Balance Sheet bucketing
# =============================================================================
# Code prefixes consulted only when an account has no decisive category.
# Overridable through settings.CRP_BALANCE_SHEET_PREFIXES.

DEFAULT_BALANCE_SHEET_PREFIXES = {
    'current_assets': ('1001', '1002', '1003'),
    'current_liabilities': ('2001', '2002'),
}

# Maximum depth of the account hierarchy (roots are level 1).
MAX_ACCOUNT_LEVEL = 5

# Absolute threshold below which a balance or difference counts as zero.
BALANCE_TOLERANCE = Decimal('0.01')
