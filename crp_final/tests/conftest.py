# tests/conftest.py
"""
Pytest fixtures for the CRP ledger tests.

- `company` is reachable through the tenant host `acme.crp.local`.
- `make_account` / `post_entry` build chart and ledger rows directly through
  the models, so every test states exactly which entries exist.
"""

from datetime import date
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from company.models import Company, CompanyMembership
from crp_accounting.models import Account, LedgerEntry
from crp_core.enums import DrCrType

User = get_user_model()

TENANT_HOST = "acme.crp.local"


@pytest.fixture(autouse=True)
def _clear_cache():
    """Opening balances are cached in locmem; no test may see another's figures."""
    cache.clear()
    yield
    cache.clear()


# =============================================================================
# Company & User Fixtures
# =============================================================================

@pytest.fixture
def company(db):
    return Company.objects.create(subdomain_prefix="acme", name="Acme Traders")


@pytest.fixture
def second_company(db):
    """A second tenant for isolation tests."""
    return Company.objects.create(subdomain_prefix="globex", name="Globex Corporation")


@pytest.fixture
def user(db):
    return User.objects.create_user(email="owner@acme.test", name="Olive Owner", password="testpass123")


@pytest.fixture
def membership(company, user):
    return CompanyMembership.objects.create(
        company=company, user=user, role=CompanyMembership.Role.OWNER, is_default_for_user=True,
    )


@pytest.fixture
def make_member(company):
    """Creates a user with the given role in `company`."""
    counter = {"n": 0}

    def _make(role):
        counter["n"] += 1
        member = User.objects.create_user(
            email=f"member{counter['n']}@acme.test", name=f"Member {counter['n']}", password="testpass123")
        CompanyMembership.objects.create(company=company, user=member, role=role)
        return member
    return _make


# =============================================================================
# Chart & Ledger helpers
# =============================================================================

@pytest.fixture
def make_account(company):
    """
    Factory: make_account("1101", account_type="ASSET", opening_balance=Decimal("10")).
    Defaults to a leaf asset account of `company`.
    """
    def _make(code, name=None, account_type="ASSET", company_obj=None, **kwargs):
        account = Account(
            company=company_obj or company,
            code=code,
            name=name or f"Account {code}",
            account_type=account_type,
            **kwargs,
        )
        account.save()
        return account
    return _make


@pytest.fixture
def post_entry():
    """Factory: post_entry(account, "DEBIT", "500.00", date(2024, 1, 1))."""
    def _post(account, entry_type, amount, entry_date, **kwargs):
        entry = LedgerEntry(
            company_id=account.company_id,
            account=account,
            entry_type=entry_type,
            amount=Decimal(str(amount)),
            entry_date=entry_date,
            **kwargs,
        )
        entry.save()
        return entry
    return _post


@pytest.fixture
def post_voucher(post_entry):
    """Posts a balanced two-line voucher: debit one account, credit another."""
    def _post(debit_account, credit_account, amount, entry_date, voucher_number="JV-0001"):
        return (
            post_entry(debit_account, DrCrType.DEBIT.value, amount, entry_date,
                       voucher_number=voucher_number, voucher_type="JV"),
            post_entry(credit_account, DrCrType.CREDIT.value, amount, entry_date,
                       voucher_number=voucher_number, voucher_type="JV"),
        )
    return _post


@pytest.fixture
def day1():
    return date(2024, 3, 1)


@pytest.fixture
def day2():
    return date(2024, 3, 2)


# =============================================================================
# API Fixtures
# =============================================================================

@pytest.fixture
def api_client(user, membership):
    """Authenticated client addressing the `acme` tenant host."""
    client = APIClient(HTTP_HOST=TENANT_HOST)
    client.force_authenticate(user=user)
    return client
