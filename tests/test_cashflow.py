"""Tests for the cash-flow summarizer and the eligibility gate."""

from __future__ import annotations

from datetime import date

import pytest

from offset_calc.cashflow import (
    Transaction,
    TransactionCategory,
    read_transactions_csv,
    summarize_cash_flow,
    transactions_from_records,
)
from offset_calc.data_models import DepositFrequency
from offset_calc.eligibility import check_eligibility, debt_to_income, property_value_is_plausible
from offset_calc.validation import ValidationError, input_from_mapping
from tests.conftest import assert_float_equal

STATEMENT = [
    {"date": "2025-01-01", "description": "Salary", "amount": "12000", "category": "income"},
    {"date": "2025-01-04", "description": "Rent", "amount": "-3000", "category": "Housing"},
    {"date": "2025-01-20", "description": "Bills", "amount": 1000, "category": "recurring"},
    {"date": "2025-02-01", "description": "Salary", "amount": 12000, "category": "income"},
    {"date": "2025-02-04", "description": "Rent", "amount": 3000, "category": "housing"},
    {"date": "2025-02-11", "description": "TV", "amount": 1400, "category": "one-time",
     "flagged": "yes", "flagReason": "large purchase"},
    {"date": "2025-02-12", "description": "Transfer", "amount": 9000, "category": "expense", "excluded": "true"},
]


def _txn(day, amount, category, **kwargs):
    return Transaction(date=day, description="txn", amount=amount, category=category, **kwargs)


class TestTransaction:
    def test_defaults_are_explicit(self):
        txn = _txn("2025-01-05", -120.5, "expense")
        assert txn.excluded is False
        assert txn.flagged is False
        assert txn.flag_reason is None
        assert txn.month == "2025-01"
        assert txn.amount == 120.5
        assert txn.category is TransactionCategory.EXPENSE
        assert txn.date == date(2025, 1, 5)
        assert not txn.is_income

    def test_unknown_category_rejected(self):
        with pytest.raises(ValueError):
            _txn("2025-01-05", 10, "gift")


class TestSummarizeCashFlow:
    @pytest.fixture
    def transactions(self):
        return [
            _txn("2025-01-01", 6000, "income"),
            _txn("2025-01-15", 6000, "income"),
            _txn("2025-01-03", 2500, "housing"),
            _txn("2025-01-20", 1200, "recurring"),
            _txn("2025-02-01", 12000, "income"),
            _txn("2025-02-03", 2500, "housing"),
            _txn("2025-02-14", 900, "one-time", flagged=True, flag_reason="unusual purchase"),
            _txn("2025-02-20", 5000, "expense", excluded=True),
        ]

    def test_totals_skip_excluded(self, transactions):
        summary = summarize_cash_flow(transactions)
        assert summary.total_income == 24_000
        assert summary.total_expenses == 7_100
        assert summary.net_cash_flow == 16_900
        assert summary.deposit_frequency is DepositFrequency.MONTHLY

    def test_monthly_breakdown(self, transactions):
        summary = summarize_cash_flow(transactions)
        assert [b.month for b in summary.monthly_breakdown] == ["2025-01", "2025-02"]
        january, february = summary.monthly_breakdown
        assert january.income == 12_000
        assert january.expenses == 3_700
        assert january.transaction_count == 4
        assert february.net_cash_flow == 12_000 - 3_400
        assert february.transaction_count == 3

    def test_monthly_averages(self, transactions):
        summary = summarize_cash_flow(transactions, "biweekly")
        assert summary.months_of_data == 2
        assert summary.monthly_income == 12_000
        assert_float_equal(summary.monthly_expenses, 3_550)
        assert_float_equal(summary.monthly_leftover, 8_450)
        assert summary.deposit_frequency is DepositFrequency.BIWEEKLY

    def test_flagged_still_counted(self, transactions):
        summary = summarize_cash_flow(transactions)
        assert [t.flag_reason for t in summary.flagged_transactions] == ["unusual purchase"]

    def test_empty_input(self):
        summary = summarize_cash_flow([])
        assert summary.monthly_breakdown == []
        assert summary.months_of_data == 1
        assert summary.monthly_leftover == 0.0


class TestTransactionRecords:
    def test_builds_transactions(self):
        transactions = transactions_from_records(STATEMENT)
        assert len(transactions) == 7
        assert transactions[1].category is TransactionCategory.HOUSING
        assert transactions[1].amount == 3000.0
        assert transactions[5].flagged is True
        assert transactions[5].flag_reason == "large purchase"
        assert transactions[6].excluded is True
        assert transactions[0].excluded is False

    def test_every_bad_row_reported(self):
        records = [
            STATEMENT[0],
            {"date": "2025-01-02", "amount": 10, "category": "gift"},
            {"date": "2025-01-03", "category": "income"},
            "not a row",
        ]
        with pytest.raises(ValidationError) as excinfo:
            transactions_from_records(records)
        assert [e.field for e in excinfo.value.errors] == ["transactions[1]", "transactions[2]", "transactions[3]"]

    @pytest.mark.parametrize("records", [[], {"date": "2025-01-01"}, "rows"])
    def test_rejects_empty_or_non_list(self, records):
        with pytest.raises(ValidationError) as excinfo:
            transactions_from_records(records)
        assert excinfo.value.errors[0].field == "transactions"

    def test_reads_csv(self, tmp_path):
        path = tmp_path / "statement.csv"
        path.write_text(
            "date,description,amount,category,excluded\n"
            "2025-01-01,Salary,12000,income,\n"
            "2025-01-04,Rent,3000,housing,\n"
            "2025-01-09,Refund,500,expense,1\n",
            encoding="utf-8",
        )
        transactions = read_transactions_csv(path)
        assert [t.amount for t in transactions] == [12000.0, 3000.0, 500.0]
        assert [t.excluded for t in transactions] == [False, False, True]


class TestCashFlowInput:
    LOAN = {
        "startingBalance": 650000,
        "interestRate": 0.08201,
        "propertyValue": 900000,
        "loanToValue": 0.8,
        "startDate": "2025-01-01",
    }

    def test_income_and_expenses_come_from_summary(self):
        summary = summarize_cash_flow(transactions_from_records(STATEMENT))
        data = input_from_mapping(self.LOAN, cash_flow=summary)
        assert data.monthly_income == 12_000.0
        assert data.monthly_expenses == 4_200.0
        assert data.monthly_leftover == 7_800.0
        assert data.deposit_frequency is DepositFrequency.MONTHLY

    def test_summary_overrides_raw_figures(self):
        summary = summarize_cash_flow(transactions_from_records(STATEMENT), "weekly")
        raw = dict(self.LOAN, monthlyIncome=1, monthlyExpenses=2)
        data = input_from_mapping(raw, cash_flow=summary)
        assert data.monthly_income == 12_000.0
        assert data.deposit_frequency is DepositFrequency.WEEKLY

    def test_explicit_frequency_wins(self):
        summary = summarize_cash_flow(transactions_from_records(STATEMENT), "weekly")
        data = input_from_mapping(dict(self.LOAN, depositFrequency="biweekly"), cash_flow=summary)
        assert data.deposit_frequency is DepositFrequency.BIWEEKLY

    def test_loan_terms_still_validated(self):
        summary = summarize_cash_flow(transactions_from_records(STATEMENT))
        with pytest.raises(ValidationError) as excinfo:
            input_from_mapping({"interestRate": 0.08201}, cash_flow=summary)
        assert {e.field for e in excinfo.value.errors} == {"starting_balance", "property_value", "loan_to_value"}


class TestEligibility:
    def test_reference_borrower_is_eligible(self):
        result = check_eligibility(650_000, 900_000, 4_807.86)
        assert result.eligible
        assert result.ltv_passed and result.cash_flow_passed
        assert_float_equal(result.ltv, 72.22, tolerance=0.01)
        assert result.reasons == [
            "LTV of 72.2% is within acceptable range",
            "Net cash flow of $4,807.86 meets minimum requirements",
        ]

    def test_high_ltv_fails(self):
        result = check_eligibility(850_000, 900_000, 5_000)
        assert not result.eligible
        assert not result.ltv_passed
        assert result.cash_flow_passed
        assert result.reasons[0] == "LTV of 94.4% exceeds maximum of 80%"

    def test_low_cash_flow_fails(self):
        result = check_eligibility(400_000, 900_000, 250)
        assert not result.eligible
        assert result.reasons[1] == "Net cash flow of $250.00 is below minimum of $500"

    def test_boundaries_pass(self):
        result = check_eligibility(80_000, 100_000, 500)
        assert result.eligible

    def test_zero_property_value_rejected(self):
        with pytest.raises(ValueError):
            check_eligibility(100_000, 0, 1_000)

    def test_debt_to_income(self):
        assert debt_to_income(2_000, 8_000) == 25.0
        assert debt_to_income(2_000, 0) == 100.0

    def test_property_value_plausibility(self):
        assert property_value_is_plausible(900_000, 650_000)
        assert not property_value_is_plausible(500_000, 650_000)
        assert not property_value_is_plausible(4_000_000, 650_000)
