# company/utils.py
import contextvars
import logging
from typing import Optional

# Company model is only referenced by name to avoid circular imports with managers.

logger = logging.getLogger(__name__)

# Use contextvars for both sync and async safety
current_company_context_var: contextvars.ContextVar[Optional['Company']] = contextvars.ContextVar(
    "current_company_context_var",
    default=None
)


def set_current_company(company_instance: Optional['Company']) -> None:
    """
    Sets the current company in the context variable for the current execution flow.
    Called by CompanyMiddleware once the tenant for a request is known.
    """
    current_company_context_var.set(company_instance)
    if company_instance:
        logger.debug(
            f"set_current_company: Context set to Company '{getattr(company_instance, 'name', 'N/A')}' (ID: {getattr(company_instance, 'pk', 'N/A')})")
    else:
        logger.debug("set_current_company: Context cleared (set to None)")


def clear_current_company() -> None:
    """Resets the context to no company. Called by middleware after the response."""
    current_company_context_var.set(None)


def get_current_company() -> Optional['Company']:
    """
    Retrieves the current company from the context variable.
    Used by CompanyManager to scope default querysets.
    """
    return current_company_context_var.get()


class override_current_company:
    """
    Context manager that temporarily switches the current company, restoring the
    previous one on exit. Used by management commands and tests.

        with override_current_company(company):
            Account.objects.count()  # scoped to `company`
    """

    def __init__(self, company_instance: Optional['Company']):
        self.company_instance_to_set = company_instance
        self._token = None

    def __enter__(self) -> Optional['Company']:
        self._token = current_company_context_var.set(self.company_instance_to_set)
        logger.debug(
            f"override_current_company: ENTER '{getattr(self.company_instance_to_set, 'name', 'None')}'.")
        return self.company_instance_to_set

    def __exit__(self, exc_type, exc_val, exc_tb):
        current_company_context_var.reset(self._token)
        logger.debug("override_current_company: EXIT, previous context restored.")
