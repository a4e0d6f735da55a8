# tests/test_api.py
"""
Tests for the REST surface under /api/accounting/.

Tests cover:
- Tenant resolution from the host and membership / role checks
- Account CRUD, tree listing, detail with children and path
- Balance and ledger actions
- Seeding (201, then 409)
- Trial balance and balance sheet, including the xlsx export
- Error mapping (404 cross-company, 400 bad dates and ranges)
"""

from datetime import date
from decimal import Decimal

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from company.models import CompanyMembership
from crp_accounting.models import Account
from crp_accounting.utils.report_exporters import XLSX_CONTENT_TYPE
from crp_core.constants import DEFAULT_CHART_OF_ACCOUNTS
from crp_core.enums import DrCrType

from .conftest import TENANT_HOST

ACCOUNTS_URL = reverse("crp_accounting_api:account-api-list")
SEED_URL = reverse("crp_accounting_api:account-api-seed")
TRIAL_BALANCE_URL = reverse("crp_accounting_api:api_report_trial_balance")
BALANCE_SHEET_URL = reverse("crp_accounting_api:api_report_balance_sheet")


def account_url(account, action=None):
    if action is None:
        return reverse("crp_accounting_api:account-api-detail", args=[account.pk])
    return reverse(f"crp_accounting_api:account-api-{action}", args=[account.pk])


def client_for(user):
    client = APIClient(HTTP_HOST=TENANT_HOST)
    client.force_authenticate(user=user)
    return client


# =============================================================================
# Access
# =============================================================================

@pytest.mark.django_db
class TestAccess:

    def test_anonymous_is_rejected(self, company):
        response = APIClient(HTTP_HOST=TENANT_HOST).get(ACCOUNTS_URL)

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_non_member_is_forbidden(self, company, django_user_model):
        outsider = django_user_model.objects.create_user(email="x@other.test", name="Outsider", password="pw")

        response = client_for(outsider).get(ACCOUNTS_URL)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_unknown_tenant_host_is_404(self, user, membership):
        client = APIClient(HTTP_HOST="nobody.crp.local")
        client.force_authenticate(user=user)

        assert client.get(ACCOUNTS_URL).status_code == status.HTTP_404_NOT_FOUND

    def test_view_only_member_can_read_but_not_write(self, make_member):
        viewer = client_for(make_member(CompanyMembership.Role.VIEW_ONLY))

        assert viewer.get(ACCOUNTS_URL).status_code == status.HTTP_200_OK
        response = viewer.post(ACCOUNTS_URL, {"code": "1101", "name": "Cash", "account_type": "ASSET"})
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert viewer.get(TRIAL_BALANCE_URL).status_code == status.HTTP_200_OK

    def test_accountant_can_write_but_not_seed(self, make_member):
        accountant = client_for(make_member(CompanyMembership.Role.ACCOUNTANT))

        response = accountant.post(ACCOUNTS_URL, {"code": "1101", "name": "Cash", "account_type": "ASSET"})
        assert response.status_code == status.HTTP_201_CREATED
        assert accountant.post(SEED_URL).status_code == status.HTTP_403_FORBIDDEN


# =============================================================================
# Accounts
# =============================================================================

@pytest.mark.django_db
class TestAccountEndpoints:

    def test_create_normalises_code_and_stamps_company(self, api_client, company, user):
        response = api_client.post(
            ACCOUNTS_URL, {"code": "ab-1", "name": "  Petty Cash ", "account_type": "ASSET"}, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["code"] == "AB-1"
        assert response.data["account_nature"] == "DEBIT"
        account = Account.global_objects.get(pk=response.data["id"])
        assert account.company == company
        assert account.created_by == user

    def test_create_under_parent_flips_parent_to_group(self, api_client, make_account):
        parent = make_account("1100")

        response = api_client.post(ACCOUNTS_URL, {
            "code": "1101", "name": "Cash", "account_type": "ASSET", "parent_account_id": str(parent.pk),
        }, format="json")

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["level"] == 2
        parent.refresh_from_db()
        assert parent.is_group is True

    def test_parent_from_other_company_is_rejected(self, api_client, make_account, second_company):
        foreign = make_account("1100", company_obj=second_company)

        response = api_client.post(ACCOUNTS_URL, {
            "code": "1101", "name": "Cash", "account_type": "ASSET", "parent_account_id": str(foreign.pk),
        }, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_parent_of_other_type_is_rejected(self, api_client, make_account):
        parent = make_account("1100")

        response = api_client.post(ACCOUNTS_URL, {
            "code": "2101", "name": "Payables", "account_type": "LIABILITY", "parent_account_id": str(parent.pk),
        }, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "parent_account" in response.data

    def test_duplicate_code_is_conflict(self, api_client, make_account):
        make_account("1101")

        response = api_client.post(ACCOUNTS_URL, {"code": "1101", "name": "Cash", "account_type": "ASSET"})

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_list_is_scoped_and_carries_summary(self, api_client, make_account, second_company):
        make_account("1101")
        make_account("4001", account_type="REVENUE")
        make_account("9999", company_obj=second_company)

        response = api_client.get(ACCOUNTS_URL)

        assert response.status_code == status.HTTP_200_OK
        assert [row["code"] for row in response.data["results"]] == ["1101", "4001"]
        assert response.data["summary"]["total"] == 2
        assert response.data["summary"]["by_type"]["REVENUE"] == 1

    def test_list_filters(self, api_client, make_account):
        make_account("1101")
        make_account("4001", account_type="REVENUE")

        response = api_client.get(ACCOUNTS_URL, {"account_type": "REVENUE"})

        assert [row["code"] for row in response.data["results"]] == ["4001"]

    def test_tree_listing(self, api_client, make_account):
        root = make_account("1000", is_group=True)
        make_account("1101", parent_account=root)

        response = api_client.get(ACCOUNTS_URL, {"tree": "true"})

        assert response.status_code == status.HTTP_200_OK
        node = response.data["tree"][0]
        assert node["account"]["code"] == "1000"
        assert node["children"][0]["account"]["code"] == "1101"

    def test_detail_includes_children_and_path(self, api_client, make_account):
        root = make_account("1000", is_group=True)
        middle = make_account("1100", parent_account=root, is_group=True)
        make_account("1101", parent_account=middle)

        response = api_client.get(account_url(middle))

        assert [acc["code"] for acc in response.data["children"]] == ["1101"]
        assert [acc["code"] for acc in response.data["hierarchy_path"]] == ["1000", "1100"]

    def test_other_company_account_is_404(self, api_client, make_account, second_company):
        foreign = make_account("1101", company_obj=second_company)

        assert api_client.get(account_url(foreign)).status_code == status.HTTP_404_NOT_FOUND
        assert api_client.get(account_url(foreign, "balance")).status_code == status.HTTP_404_NOT_FOUND

    def test_system_account_protected_fields(self, api_client, make_account):
        account = make_account("1101", is_system_account=True)

        rejected = api_client.patch(account_url(account), {"name": "Renamed"}, format="json")
        accepted = api_client.patch(account_url(account), {"description": "Main till"}, format="json")

        assert rejected.status_code == status.HTTP_400_BAD_REQUEST
        assert accepted.status_code == status.HTTP_200_OK
        assert accepted.data["description"] == "Main till"

    def test_delete(self, api_client, make_account, post_entry):
        idle = make_account("1101")
        used = make_account("1102")
        post_entry(used, DrCrType.DEBIT.value, "1.00", date(2024, 1, 1))

        assert api_client.get(account_url(used, "can-delete")).data["can_delete"] is False
        assert api_client.delete(account_url(used)).status_code == status.HTTP_400_BAD_REQUEST
        assert api_client.delete(account_url(idle)).status_code == status.HTTP_204_NO_CONTENT
        assert not Account.global_objects.filter(pk=idle.pk).exists()


# =============================================================================
# Balance & ledger actions
# =============================================================================

@pytest.mark.django_db
class TestBalanceAndLedgerEndpoints:

    def test_balance(self, api_client, make_account, post_entry):
        cash = make_account("1101", opening_balance=Decimal("100.00"))
        post_entry(cash, DrCrType.DEBIT.value, "50.00", date(2024, 1, 1))
        post_entry(cash, DrCrType.CREDIT.value, "20.00", date(2024, 2, 1))

        response = api_client.get(account_url(cash, "balance"), {"as_of": "2024-01-31"})

        assert response.status_code == status.HTTP_200_OK
        assert Decimal(response.data["balance"]) == Decimal("150.00")
        assert response.data["as_of"] == "2024-01-31"

    def test_balance_rejects_bad_dates(self, api_client, make_account):
        cash = make_account("1101")

        malformed = api_client.get(account_url(cash, "balance"), {"as_of": "31/01/2024"})
        reversed_range = api_client.get(
            account_url(cash, "balance"), {"as_of": "2024-01-01", "start_date": "2024-02-01"})

        assert malformed.status_code == status.HTTP_400_BAD_REQUEST
        assert reversed_range.status_code == status.HTTP_400_BAD_REQUEST
        assert reversed_range.data["detail"].code == "invalid_range"

    def test_ledger(self, api_client, make_account, post_entry):
        cash = make_account("1101", opening_balance=Decimal("1000.00"))
        post_entry(cash, DrCrType.DEBIT.value, "500.00", date(2024, 3, 1))
        post_entry(cash, DrCrType.CREDIT.value, "200.00", date(2024, 3, 2))

        response = api_client.get(
            account_url(cash, "ledger"), {"start_date": "2024-03-01", "end_date": "2024-03-02"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["count"] == 2
        assert [Decimal(row["running_balance"]) for row in response.data["entries"]] == [
            Decimal("1500.00"), Decimal("1300.00")]
        assert Decimal(response.data["closing_balance"]) == Decimal("1300.00")
        assert response.data["closing_balance_display"]["dr_cr"] == "Dr"

    def test_ledger_include_void(self, api_client, make_account, post_entry):
        cash = make_account("1101")
        post_entry(cash, DrCrType.DEBIT.value, "5.00", date(2024, 3, 1)).void("typo")

        hidden = api_client.get(account_url(cash, "ledger"))
        shown = api_client.get(account_url(cash, "ledger"), {"include_void": "true"})

        assert hidden.data["entries"] == []
        assert [row["status"] for row in shown.data["entries"]] == ["VOID"]
        assert Decimal(hidden.data["closing_balance"]) == Decimal("0.00")
        assert Decimal(shown.data["closing_balance"]) == Decimal("5.00")


# =============================================================================
# Seeding & reports
# =============================================================================

@pytest.mark.django_db
class TestSeedAndReports:

    def test_seed_then_conflict(self, api_client):
        first = api_client.post(SEED_URL)
        second = api_client.post(SEED_URL)

        assert first.status_code == status.HTTP_201_CREATED
        assert first.data["created"] == len(DEFAULT_CHART_OF_ACCOUNTS)
        assert first.data["total"] == len(DEFAULT_CHART_OF_ACCOUNTS)
        assert second.status_code == status.HTTP_409_CONFLICT

    def test_trial_balance(self, api_client, make_account, post_voucher):
        expense = make_account("5201", account_type="EXPENSE")
        revenue = make_account("4001", account_type="REVENUE")
        post_voucher(expense, revenue, "300.00", date(2024, 3, 1))

        response = api_client.get(TRIAL_BALANCE_URL, {"end_date": "2024-12-31"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_balanced"] is True
        assert Decimal(response.data["totals"]["debit"]) == Decimal("300.00")
        assert [row["account_code"] for row in response.data["rows"]] == ["4001", "5201"]
        assert response.data["period"]["end_date"] == "2024-12-31"

    def test_trial_balance_invalid_range(self, api_client):
        response = api_client.get(TRIAL_BALANCE_URL, {"start_date": "2024-02-01", "end_date": "2024-01-01"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_trial_balance_xlsx_export(self, api_client, make_account, post_voucher):
        post_voucher(make_account("1101"), make_account("3001", account_type="EQUITY"), "10.00", date(2024, 1, 1))

        response = api_client.get(TRIAL_BALANCE_URL, {"export": "xlsx"})

        assert response.status_code == status.HTTP_200_OK
        assert response["Content-Type"] == XLSX_CONTENT_TYPE
        assert "attachment" in response["Content-Disposition"]
        assert response.content[:2] == b"PK"

    def test_balance_sheet(self, api_client, make_account, post_voucher):
        cash = make_account("1101", category="current_asset")
        capital = make_account("3001", account_type="EQUITY")
        sales = make_account("4001", account_type="REVENUE")
        post_voucher(cash, capital, "1000.00", date(2024, 1, 1), "JV-1")
        post_voucher(cash, sales, "250.00", date(2024, 1, 2), "JV-2")

        response = api_client.get(BALANCE_SHEET_URL, {"as_of_date": "2024-01-31"})

        assert response.status_code == status.HTTP_200_OK
        assert response.data["is_balanced"] is True
        assert Decimal(response.data["total_assets"]) == Decimal("1250.00")
        assert Decimal(response.data["equity"]["retained_earnings"]) == Decimal("250.00")
        assert response.data["revenue_expense_summary"]["fiscal_year"] is None

    def test_balance_sheet_defaults_to_today_and_exports(self, api_client):
        default = api_client.get(BALANCE_SHEET_URL)
        export = api_client.get(BALANCE_SHEET_URL, {"export": "xlsx", "as_of_date": "2024-01-31"})

        assert default.status_code == status.HTTP_200_OK
        assert default.data["as_of_date"] is not None
        assert export["Content-Type"] == XLSX_CONTENT_TYPE
        assert export.content[:2] == b"PK"
