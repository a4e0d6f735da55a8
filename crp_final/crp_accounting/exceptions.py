"""
Custom exceptions for the CRP Accounting application: ledger lookups,
report parameters and chart-of-accounts maintenance.
"""

from django.utils.translation import gettext_lazy as _


class LedgerError(Exception):
    """
    Base exception for errors raised by the ledger services.
    Allows catching all ledger-specific issues easily.
    """
    default_message = _("An error occurred in the ledger.")
    code = 'ledger_error'

    def __init__(self, message=None, code=None):
        self.message = str(message or self.default_message)
        self.code = code or self.code
        super().__init__(self.message)


class AccountNotFound(LedgerError):
    """
    Raised when an account is missing, soft-deleted, or owned by another company.
    Cross-company lookups deliberately produce the same error as missing ones.
    """
    default_message = _("Account not found.")
    code = 'not_found'

    def __init__(self, account_id=None, company_id=None, message=None):
        self.account_id = account_id
        self.company_id = company_id
        if not message and account_id is not None:
            message = _("Account '%(account_id)s' was not found.") % {'account_id': account_id}
        super().__init__(message=message, code=self.code)


class InvalidDateRange(LedgerError):
    """Raised when the start date of a period is after its end date."""
    default_message = _("Start date cannot be after end date.")
    code = 'invalid_range'

    def __init__(self, start_date=None, end_date=None, message=None):
        self.start_date = start_date
        self.end_date = end_date
        if not message and start_date and end_date:
            message = _("Start date %(start)s cannot be after end date %(end)s.") % {
                'start': start_date.isoformat(),
                'end': end_date.isoformat(),
            }
        super().__init__(message=message, code=self.code)


class AlreadySeeded(LedgerError):
    """Raised when seeding is requested for a company that already has accounts."""
    default_message = _("Chart of accounts already exists for this company.")
    code = 'already_seeded'

    def __init__(self, existing_count=0, message=None):
        self.existing_count = existing_count
        super().__init__(message=message, code=self.code)


class AccountDeletionError(LedgerError):
    """Raised when an account cannot be soft-deleted; `message` carries the reason."""
    default_message = _("This account cannot be deleted.")
    code = 'deletion_blocked'


class SystemAccountEditError(LedgerError):
    """Raised when a protected field of a system account is changed."""
    default_message = _("System accounts only allow description, notes and active status to be changed.")
    code = 'system_account_protected'

    def __init__(self, fields=None, message=None):
        self.fields = list(fields or [])
        if not message and self.fields:
            message = _("Cannot modify protected fields of a system account: %(fields)s.") % {
                'fields': ', '.join(self.fields)
            }
        super().__init__(message=message, code=self.code)


class ReportGenerationError(Exception):
    """Custom exception for errors encountered during report generation."""
    pass
