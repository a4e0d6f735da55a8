# tests/test_reports.py
"""
Tests for the Trial Balance and Balance Sheet generators and their Excel export.

Tests cover:
- Trial balance debit/credit equality for balanced vouchers
- Expense/revenue scenario from a single voucher
- Rows: only leaf, active accounts with activity or an opening balance
- Balance sheet equation with retained earnings
- Current/fixed and current/long-term bucketing (category, then code prefixes)
- Contra accounts and the fiscal-year revenue/expense summary
- Workbooks produced by the exporters
"""

from datetime import date
from decimal import Decimal

import pytest
from django.test import override_settings

from crp_accounting.exceptions import InvalidDateRange, ReportGenerationError
from crp_accounting.services import coa_seeding_service, reports_service
from crp_accounting.models import Account
from crp_accounting.utils.report_exporters import generate_balance_sheet_excel, generate_trial_balance_excel
from crp_core.enums import AccountNature, DrCrType

DEBIT = DrCrType.DEBIT.value
CREDIT = DrCrType.CREDIT.value


def _row(report, code):
    return next(row for row in report["rows"] if row["account_code"] == code)


def _codes(lines):
    return [line["account_code"] for line in lines]


@pytest.fixture
def seeded(company):
    coa_seeding_service.seed_default_chart(company)

    def _acc(code):
        return Account.global_objects.get(company=company, code=code)
    return _acc


# =============================================================================
# Trial Balance
# =============================================================================

@pytest.mark.django_db
class TestTrialBalance:

    def test_single_voucher_expense_and_revenue(self, company, make_account, post_voucher, day1):
        expense = make_account("5201", account_type="EXPENSE")
        revenue = make_account("4001", account_type="REVENUE")
        post_voucher(expense, revenue, "300.00", day1)

        report = reports_service.generate_trial_balance(company.pk)

        assert _row(report, "5201")["net_debit"] == Decimal("300.00")
        assert _row(report, "4001")["net_credit"] == Decimal("300.00")
        assert report["totals"]["debit"] == report["totals"]["credit"] == Decimal("300.00")
        assert report["totals"]["difference"] == Decimal("0.00")
        assert report["is_balanced"] is True

    def test_balanced_vouchers_keep_totals_equal(self, company, seeded, post_voucher):
        post_voucher(seeded("1101"), seeded("3001"), "10000.00", date(2024, 1, 1), "JV-1")
        post_voucher(seeded("1401"), seeded("1102"), "2500.00", date(2024, 1, 2), "JV-2")
        post_voucher(seeded("1102"), seeded("1101"), "4000.00", date(2024, 1, 3), "JV-3")
        post_voucher(seeded("5202"), seeded("1102"), "750.00", date(2024, 1, 4), "JV-4")
        post_voucher(seeded("1200"), seeded("4001"), "1800.00", date(2024, 1, 5), "JV-5")
        for entry in post_voucher(seeded("5205"), seeded("1101"), "99.00", date(2024, 1, 6), "JV-6"):
            entry.void("voucher cancelled")

        report = reports_service.generate_trial_balance(company.pk)

        assert report["totals"]["debit"] == report["totals"]["credit"] == Decimal("11800.00")
        assert report["is_balanced"] is True
        assert _row(report, "1101")["balance"] == Decimal("6000.00")
        assert "5205" not in _codes(report["rows"])

    def test_imbalance_is_reported_not_raised(self, company, make_account, post_entry, day1):
        cash = make_account("1101")
        post_entry(cash, DEBIT, "10.00", day1)

        report = reports_service.generate_trial_balance(company.pk)

        assert report["is_balanced"] is False
        assert report["totals"]["difference"] == Decimal("10.00")

    def test_rows_skip_groups_inactive_and_idle_accounts(self, company, make_account, post_voucher, day1):
        group = make_account("1000", is_group=True)
        cash = make_account("1101", parent_account=group)
        capital = make_account("3001", account_type="EQUITY")
        make_account("1102")
        make_account("1103", opening_balance=Decimal("5.00"))
        dormant = make_account("1104", is_active=False)
        post_voucher(cash, capital, "100.00", day1)
        post_voucher(dormant, capital, "1.00", day1)

        report = reports_service.generate_trial_balance(company.pk)

        assert _codes(report["rows"]) == ["1101", "1103", "3001"]
        assert _codes(report["grouped_by_type"]["ASSET"]) == ["1101", "1103"]
        assert report["grouped_by_type"]["LIABILITY"] == []

    def test_window_activity_and_opening_balance(self, company, make_account, post_voucher):
        cash = make_account("1101")
        capital = make_account("3001", account_type="EQUITY")
        post_voucher(cash, capital, "100.00", date(2024, 1, 10))
        post_voucher(cash, capital, "40.00", date(2024, 2, 10))

        report = reports_service.generate_trial_balance(
            company.pk, start_date=date(2024, 2, 1), end_date=date(2024, 2, 29))

        row = _row(report, "1101")
        assert row["opening_balance"] == Decimal("100.00")
        assert row["debit_total"] == Decimal("40.00")
        assert row["net_debit"] == Decimal("140.00")
        assert report["period"]["start_date"] == date(2024, 2, 1)
        assert report["is_balanced"] is True

    def test_invalid_range_and_unknown_company(self, company):
        with pytest.raises(InvalidDateRange):
            reports_service.generate_trial_balance(
                company.pk, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))
        with pytest.raises(ReportGenerationError):
            reports_service.generate_trial_balance(company.pk + 999)


# =============================================================================
# Balance Sheet
# =============================================================================

@pytest.mark.django_db
class TestBalanceSheet:

    def test_accounting_equation_with_retained_earnings(self, company, seeded, post_voucher):
        post_voucher(seeded("1101"), seeded("3001"), "5000.00", date(2024, 1, 1), "JV-1")
        post_voucher(seeded("1401"), seeded("2401"), "3000.00", date(2024, 1, 2), "JV-2")
        post_voucher(seeded("1200"), seeded("4001"), "1200.00", date(2024, 1, 3), "JV-3")
        post_voucher(seeded("5202"), seeded("2101"), "200.00", date(2024, 1, 4), "JV-4")

        report = reports_service.generate_balance_sheet(company.pk, date(2024, 1, 31))

        assert report["assets"]["current_total"] == Decimal("6200.00")
        assert report["assets"]["fixed_total"] == Decimal("3000.00")
        assert report["liabilities"]["current_total"] == Decimal("200.00")
        assert report["liabilities"]["long_term_total"] == Decimal("3000.00")
        assert report["equity"]["retained_earnings"] == Decimal("1000.00")
        assert report["equity"]["total"] == Decimal("6000.00")
        assert report["total_assets"] == report["total_liabilities_and_equity"] == Decimal("9200.00")
        assert report["is_balanced"] is True
        assert _codes(report["assets"]["current"]) == ["1101", "1200"]

    def test_entries_after_date_are_ignored(self, company, seeded, post_voucher):
        post_voucher(seeded("1101"), seeded("3001"), "100.00", date(2024, 1, 1), "JV-1")
        post_voucher(seeded("1101"), seeded("3001"), "900.00", date(2024, 6, 1), "JV-2")

        report = reports_service.generate_balance_sheet(company.pk, date(2024, 3, 31))

        assert report["total_assets"] == Decimal("100.00")

    def test_prefix_table_used_without_category(self, company, make_account, post_voucher, day1):
        till = make_account("1001")
        land = make_account("1501")
        payable = make_account("2001", account_type="LIABILITY")
        mortgage = make_account("2501", account_type="LIABILITY")
        post_voucher(till, payable, "10.00", day1, "JV-1")
        post_voucher(land, mortgage, "20.00", day1, "JV-2")

        report = reports_service.generate_balance_sheet(company.pk, day1)

        assert _codes(report["assets"]["current"]) == ["1001"]
        assert _codes(report["assets"]["fixed"]) == ["1501"]
        assert _codes(report["liabilities"]["current"]) == ["2001"]
        assert _codes(report["liabilities"]["long_term"]) == ["2501"]

    def test_category_wins_over_prefix(self, make_account):
        account = make_account("1001", category="fixed_asset")

        assert reports_service.classify_asset(account) == "fixed"

    @override_settings(CRP_BALANCE_SHEET_PREFIXES={'current_assets': ('17',), 'current_liabilities': ()})
    def test_prefix_table_is_configurable(self, make_account):
        assert reports_service.classify_asset(make_account("1701")) == "current"
        assert reports_service.classify_asset(make_account("1001")) == "fixed"
        assert reports_service.classify_liability(make_account("2001", account_type="LIABILITY")) == "long_term"

    def test_contra_asset_reduces_its_section(self, company, make_account, post_voucher, day1):
        machine = make_account("1402", category="fixed_asset")
        depreciation = make_account(
            "1499", category="fixed_asset", account_nature=AccountNature.CREDIT.value)
        capital = make_account("3001", account_type="EQUITY")
        expense = make_account("5206", account_type="EXPENSE")
        post_voucher(machine, capital, "1000.00", day1, "JV-1")
        post_voucher(expense, depreciation, "100.00", day1, "JV-2")

        report = reports_service.generate_balance_sheet(company.pk, day1)

        lines = {line["account_code"]: line["balance"] for line in report["assets"]["fixed"]}
        assert lines == {"1402": Decimal("1000.00"), "1499": Decimal("-100.00")}
        assert report["assets"]["fixed_total"] == Decimal("900.00")
        assert report["equity"]["retained_earnings"] == Decimal("-100.00")
        assert report["is_balanced"] is True

    def test_zero_balances_are_dropped(self, company, make_account, post_voucher, day1):
        cash = make_account("1101")
        bank = make_account("1102")
        post_voucher(cash, bank, "50.00", day1, "JV-1")
        post_voucher(bank, cash, "50.00", day1, "JV-2")

        report = reports_service.generate_balance_sheet(company.pk, day1)

        assert report["assets"]["current"] == []
        assert report["total_assets"] == Decimal("0.00")

    def test_fiscal_year_summary_is_separate_from_retained_earnings(self, company, seeded, post_voucher):
        post_voucher(seeded("1101"), seeded("4001"), "700.00", date(2023, 6, 1), "JV-1")
        post_voucher(seeded("1101"), seeded("4001"), "500.00", date(2024, 2, 1), "JV-2")
        post_voucher(seeded("5202"), seeded("1101"), "100.00", date(2024, 2, 2), "JV-3")

        report = reports_service.generate_balance_sheet(company.pk, date(2024, 12, 31), fiscal_year="2024")
        cumulative = reports_service.generate_balance_sheet(company.pk, date(2024, 12, 31))

        assert report["equity"]["retained_earnings"] == Decimal("1100.00")
        assert report["revenue_expense_summary"] == {
            'fiscal_year': "2024",
            'total_revenue': Decimal("500.00"),
            'total_expense': Decimal("100.00"),
            'net_income': Decimal("400.00"),
        }
        assert cumulative["revenue_expense_summary"]["net_income"] == Decimal("1100.00")
        assert report["is_balanced"] is True

    def test_bad_date_and_unknown_company(self, company):
        with pytest.raises(ReportGenerationError):
            reports_service.generate_balance_sheet(company.pk, "2024-01-01")
        with pytest.raises(ReportGenerationError):
            reports_service.generate_balance_sheet(company.pk + 999, date(2024, 1, 1))


# =============================================================================
# Excel export
# =============================================================================

@pytest.mark.django_db
class TestExcelExport:

    def test_workbooks_are_xlsx_bytes(self, company, seeded, post_voucher, day1):
        post_voucher(seeded("1101"), seeded("3001"), "250.00", day1)

        tb = generate_trial_balance_excel(reports_service.generate_trial_balance(company.pk))
        bs = generate_balance_sheet_excel(reports_service.generate_balance_sheet(company.pk, day1))

        assert tb[:2] == b"PK"
        assert bs[:2] == b"PK"

    def test_trial_balance_sheet_contents(self, company, seeded, post_voucher, day1):
        import io
        from openpyxl import load_workbook

        post_voucher(seeded("1101"), seeded("3001"), "250.00", day1)
        content = generate_trial_balance_excel(reports_service.generate_trial_balance(company.pk))

        sheet = load_workbook(io.BytesIO(content)).active
        values = [cell.value for row in sheet.iter_rows() for cell in row if cell.value is not None]
        assert "Trial Balance" in values
        assert "1101" in values
        assert "Balanced" in values
