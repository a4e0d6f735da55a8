"""
crp_core/exceptions.py

Contains API exception classes for the ledger's REST surface.
Views translate domain errors (crp_accounting.exceptions) into these so DRF can
render a consistent status code and error code.
"""

from rest_framework.exceptions import APIException
from rest_framework import status


class NotFoundException(APIException):
    """
    Raised when a requested account does not exist, is deleted, or belongs
    to a different company.
    """
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = 'The requested account was not found.'
    default_code = 'not_found'


class InvalidRangeException(APIException):
    """
    Raised when a report is requested with a start date after its end date.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Start date cannot be after end date.'
    default_code = 'invalid_range'


class AlreadySeededException(APIException):
    """
    Raised when the default chart is requested for a company that already has accounts.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Chart of accounts already exists for this company.'
    default_code = 'already_seeded'


class DuplicateAccountCodeException(APIException):
    """
    Raised when an attempt is made to create a COA account with an existing code.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'Account with this code already exists.'
    default_code = 'duplicate_account_code'


class SystemAccountProtectedException(APIException):
    """
    Raised when a protected field of a system account is edited.
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'System accounts only allow description, notes and active status to be changed.'
    default_code = 'system_account_protected'


class AccountDeletionBlockedException(APIException):
    """
    Raised when an account cannot be deleted (children, ledger entries, system account).
    """
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This account cannot be deleted.'
    default_code = 'account_deletion_blocked'
