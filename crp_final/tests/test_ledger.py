# tests/test_ledger.py
"""
Tests for the Account Ledger (statement) generator.

Tests cover:
- Opening / running / closing balance for a debit-normal account
- VOID entries: hidden by default, folded into the statement with include_void
- Deterministic ordering; same-day entries follow created_at
- Opening-balance cache and its invalidation
"""

from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from crp_accounting.exceptions import AccountNotFound, InvalidDateRange
from crp_accounting.models import LedgerEntry
from crp_accounting.services import balance_service, ledger_service
from crp_core.enums import DrCrType, EntryStatus

DEBIT = DrCrType.DEBIT.value
CREDIT = DrCrType.CREDIT.value


@pytest.mark.django_db
class TestAccountLedger:

    def test_running_balance_scenario(self, company, make_account, post_entry, day1, day2):
        account = make_account("1101", opening_balance=Decimal("1000.00"))
        post_entry(account, DEBIT, "500.00", day1)
        post_entry(account, CREDIT, "200.00", day2)

        ledger = ledger_service.get_account_ledger_data(company.pk, account.pk, start_date=day1, end_date=day2)

        assert ledger["opening_balance"] == Decimal("1000.00")
        assert [row["running_balance"] for row in ledger["entries"]] == [Decimal("1500.00"), Decimal("1300.00")]
        assert ledger["closing_balance"] == Decimal("1300.00")
        assert ledger["total_debit"] == Decimal("500.00")
        assert ledger["total_credit"] == Decimal("200.00")
        assert ledger["closing_balance_display"] == {'amount': Decimal("1300.00"), 'dr_cr': 'Dr'}

    def test_rows_carry_debit_credit_columns(self, company, make_account, post_entry, day1):
        account = make_account("2101", account_type="LIABILITY")
        post_entry(account, CREDIT, "80.00", day1, voucher_number="PV-7", reference_number="INV-7")

        row = ledger_service.get_account_ledger_data(company.pk, account.pk)["entries"][0]

        assert (row["debit"], row["credit"]) == (Decimal("0.00"), Decimal("80.00"))
        assert row["running_balance_display"] == {'amount': Decimal("80.00"), 'dr_cr': 'Cr'}
        assert row["voucher_number"] == "PV-7"
        assert row["reference_number"] == "INV-7"

    def test_opening_balance_includes_entries_before_start(self, company, make_account, post_entry):
        account = make_account("1101", opening_balance=Decimal("10.00"))
        post_entry(account, DEBIT, "5.00", date(2024, 1, 1))
        post_entry(account, DEBIT, "7.00", date(2024, 2, 1))

        ledger = ledger_service.get_account_ledger_data(company.pk, account.pk, start_date=date(2024, 2, 1))

        assert ledger["opening_balance"] == Decimal("15.00")
        assert len(ledger["entries"]) == 1
        assert ledger["closing_balance"] == Decimal("22.00")

    def test_closing_matches_balance_calculator(self, company, make_account, post_entry):
        account = make_account("1101", opening_balance=Decimal("250.00"))
        for day, entry_type, amount in ((1, DEBIT, "40.10"), (3, CREDIT, "15.05"), (9, DEBIT, "3.33")):
            post_entry(account, entry_type, amount, date(2024, 4, day))

        ledger = ledger_service.get_account_ledger_data(
            company.pk, account.pk, start_date=date(2024, 4, 2), end_date=date(2024, 4, 30))
        balance = balance_service.compute_account_balance(
            company.pk, account.pk, as_of=date(2024, 4, 30), start_date=date(2024, 4, 2))

        assert ledger["opening_balance"] == balance["opening_balance"]
        assert ledger["closing_balance"] == balance["balance"] == Decimal("278.38")

    def test_void_entries_hidden_by_default(self, company, make_account, post_entry, day1):
        account = make_account("1101")
        post_entry(account, DEBIT, "100.00", day1)
        post_entry(account, DEBIT, "60.00", day1).void("duplicate")

        ledger = ledger_service.get_account_ledger_data(company.pk, account.pk)

        assert len(ledger["entries"]) == 1
        assert ledger["closing_balance"] == Decimal("100.00")

    def test_void_entries_are_folded_with_include_void(self, company, make_account, post_entry, day1, day2):
        account = make_account("1101")
        post_entry(account, DEBIT, "100.00", day1)
        post_entry(account, DEBIT, "60.00", day1).void("duplicate")
        post_entry(account, CREDIT, "30.00", day2)

        ledger = ledger_service.get_account_ledger_data(company.pk, account.pk, include_void=True)

        statuses = [row["status"] for row in ledger["entries"]]
        assert statuses == [EntryStatus.ACTIVE.value, EntryStatus.VOID.value, EntryStatus.ACTIVE.value]
        assert [row["running_balance"] for row in ledger["entries"]] == [
            Decimal("100.00"), Decimal("160.00"), Decimal("130.00")]
        assert ledger["closing_balance"] == Decimal("130.00")
        assert ledger["total_debit"] == Decimal("160.00")
        assert ledger["total_credit"] == Decimal("30.00")

    def test_void_entries_never_count_in_opening_balance(self, company, make_account, post_entry, day1, day2):
        account = make_account("1101")
        post_entry(account, DEBIT, "100.00", day1)
        post_entry(account, DEBIT, "60.00", day1).void("duplicate")

        ledger = ledger_service.get_account_ledger_data(company.pk, account.pk, start_date=day2, include_void=True)

        assert ledger["opening_balance"] == Decimal("100.00")
        assert ledger["entries"] == []

    def test_running_balance_is_deterministic(self, company, make_account, post_entry, day1, day2):
        account = make_account("1101")
        post_entry(account, CREDIT, "1.00", day2)
        for amount in ("3.00", "5.00", "7.00"):
            post_entry(account, DEBIT, amount, day1)

        first = ledger_service.get_account_ledger_data(company.pk, account.pk)
        second = ledger_service.get_account_ledger_data(company.pk, account.pk)

        assert [row["entry_id"] for row in first["entries"]] == [row["entry_id"] for row in second["entries"]]
        assert [row["running_balance"] for row in first["entries"]] == [
            Decimal("3.00"), Decimal("8.00"), Decimal("15.00"), Decimal("14.00")]
        assert [row["date"] for row in first["entries"]] == [day1, day1, day1, day2]

    def test_same_day_entries_follow_created_at(self, company, make_account, post_entry, day1):
        account = make_account("1101")
        debit = post_entry(account, DEBIT, "100.00", day1)
        credit = post_entry(account, CREDIT, "30.00", day1)
        earlier, later = timezone.now() - timedelta(hours=1), timezone.now()

        LedgerEntry.global_objects.filter(pk=debit.pk).update(created_at=earlier)
        LedgerEntry.global_objects.filter(pk=credit.pk).update(created_at=later)
        debit_first = ledger_service.get_account_ledger_data(company.pk, account.pk)

        LedgerEntry.global_objects.filter(pk=debit.pk).update(created_at=later)
        LedgerEntry.global_objects.filter(pk=credit.pk).update(created_at=earlier)
        credit_first = ledger_service.get_account_ledger_data(company.pk, account.pk)

        assert [row["entry_id"] for row in debit_first["entries"]] == [debit.pk, credit.pk]
        assert [row["running_balance"] for row in debit_first["entries"]] == [Decimal("100.00"), Decimal("70.00")]
        assert [row["entry_id"] for row in credit_first["entries"]] == [credit.pk, debit.pk]
        assert [row["running_balance"] for row in credit_first["entries"]] == [Decimal("-30.00"), Decimal("70.00")]
        assert debit_first["closing_balance"] == credit_first["closing_balance"] == Decimal("70.00")

    def test_errors(self, company, second_company, make_account):
        foreign = make_account("1101", company_obj=second_company)
        ours = make_account("1101")

        with pytest.raises(AccountNotFound):
            ledger_service.get_account_ledger_data(company.pk, foreign.pk)
        with pytest.raises(InvalidDateRange):
            ledger_service.get_account_ledger_data(
                company.pk, ours.pk, start_date=date(2024, 2, 1), end_date=date(2024, 1, 1))


@pytest.mark.django_db
class TestOpeningBalanceCache:

    def test_new_entry_invalidates_cached_opening(self, company, make_account, post_entry):
        account = make_account("1101")
        post_entry(account, DEBIT, "10.00", date(2024, 1, 1))
        start = date(2024, 2, 1)

        assert ledger_service.calculate_account_balance_upto(company.pk, account, start) == Decimal("10.00")
        post_entry(account, DEBIT, "5.00", date(2024, 1, 15))

        assert ledger_service.calculate_account_balance_upto(company.pk, account, start) == Decimal("15.00")

    def test_void_invalidates_cached_opening(self, company, make_account, post_entry):
        account = make_account("1101")
        entry = post_entry(account, DEBIT, "10.00", date(2024, 1, 1))
        start = date(2024, 2, 1)
        ledger_service.calculate_account_balance_upto(company.pk, account, start)

        entry.void("reversed")

        assert ledger_service.calculate_account_balance_upto(company.pk, account, start) == Decimal("0.00")

    def test_opening_balance_edit_invalidates_cache(self, company, make_account):
        account = make_account("1101", opening_balance=Decimal("1.00"))
        start = date(2024, 2, 1)
        ledger_service.calculate_account_balance_upto(company.pk, account, start)

        account.opening_balance = Decimal("9.00")
        account.save()

        assert ledger_service.calculate_account_balance_upto(company.pk, account, start) == Decimal("9.00")

    def test_no_start_date_returns_seed(self, company, make_account, post_entry, day1):
        account = make_account("1101", opening_balance=Decimal("4.00"))
        post_entry(account, DEBIT, "10.00", day1)

        assert ledger_service.calculate_account_balance_upto(company.pk, account, None) == Decimal("4.00")
