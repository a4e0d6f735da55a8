# tests/test_tenancy.py
"""
Tests for company scoping of the ledger models.

Tests cover:
- Context-scoped `objects` manager vs. the unfiltered `global_objects`
- Filling `company` from the current context on create
- Audited creation through `create_for_company`
"""

import pytest
from django.core.exceptions import PermissionDenied

from company.utils import get_current_company, override_current_company
from crp_accounting.models import Account
from crp_accounting.services import coa_seeding_service


@pytest.mark.django_db
class TestCompanyScopedManagers:

    def test_objects_is_empty_without_company_context(self, make_account):
        make_account("1101")

        assert get_current_company() is None
        assert Account.objects.count() == 0
        assert Account.global_objects.count() == 1

    def test_objects_follows_overridden_context(self, company, second_company, make_account):
        make_account("1101")
        make_account("1102")
        make_account("1101", company_obj=second_company)

        with override_current_company(company):
            assert Account.objects.count() == 2
            with override_current_company(second_company):
                assert list(Account.objects.values_list('code', flat=True)) == ["1101"]
            assert get_current_company() == company
        assert get_current_company() is None

    def test_for_company_ignores_context(self, company, second_company, make_account):
        make_account("1101", company_obj=second_company)

        with override_current_company(company):
            assert Account.global_objects.for_company(second_company.pk).count() == 1
            assert Account.objects.count() == 0

    def test_create_uses_context_company(self, company):
        with override_current_company(company):
            account = Account.objects.create(code="1101", name="Cash", account_type="ASSET")

        assert account.company == company

    def test_create_without_context_or_company_fails(self, db):
        with pytest.raises(ValueError):
            Account.objects.create(code="1101", name="Cash", account_type="ASSET")


@pytest.mark.django_db
class TestCreateForCompany:

    def test_sets_audit_fields_and_ignores_passed_company(self, company, second_company, user):
        account = Account.create_for_company(
            company, user, company_id=second_company.pk, code="1101", name="Cash", account_type="ASSET")

        assert account.company == company
        assert account.created_by == user
        assert account.updated_by == user

    def test_inactive_company_is_refused(self, company):
        company.is_suspended_by_admin = True
        company.save()

        with pytest.raises(PermissionDenied):
            coa_seeding_service.seed_default_chart(company)
        assert Account.global_objects.filter(company=company).count() == 0
