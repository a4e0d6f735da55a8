# crp_accounting/views/errors.py
import logging
from contextlib import contextmanager

from rest_framework.exceptions import APIException

from crp_core.exceptions import (
    AccountDeletionBlockedException, AlreadySeededException, InvalidRangeException,
    NotFoundException, SystemAccountProtectedException,
)
from ..exceptions import (
    AccountDeletionError, AccountNotFound, AlreadySeeded, InvalidDateRange,
    ReportGenerationError, SystemAccountEditError,
)

logger = logging.getLogger(__name__)

# Domain error -> API exception rendered by DRF.
LEDGER_ERROR_MAP = (
    (AccountNotFound, NotFoundException),
    (InvalidDateRange, InvalidRangeException),
    (AlreadySeeded, AlreadySeededException),
    (AccountDeletionError, AccountDeletionBlockedException),
    (SystemAccountEditError, SystemAccountProtectedException),
)


@contextmanager
def ledger_errors_as_api_exceptions():
    """Re-raises ledger service errors as the matching DRF APIException."""
    try:
        yield
    except ReportGenerationError as e:
        raise NotFoundException(detail=str(e)) from e
    except tuple(domain for domain, _ in LEDGER_ERROR_MAP) as e:
        for domain_exc, api_exc in LEDGER_ERROR_MAP:
            if isinstance(e, domain_exc):
                raise api_exc(detail=e.message, code=e.code) from e
        raise
    except APIException:
        raise
    except Exception:
        logger.exception("Unexpected error while serving a ledger request.")
        raise
