"""Tests for input validation."""

from __future__ import annotations

from datetime import date

import pytest

from offset_calc.data_models import DepositFrequency
from offset_calc.validation import FieldError, ValidationError, input_from_mapping, validate_input
from tests.conftest import make_input

RAW = {
    "starting_balance": "650000",
    "interest_rate": 0.08201,
    "property_value": 900000,
    "loan_to_value": 0.8,
    "monthly_income": 12000,
    "monthly_expenses": 7192.14,
    "deposit_frequency": "monthly",
    "start_date": "2025-01-01",
}


def _fields(excinfo):
    return {e.field for e in excinfo.value.errors}


class TestValidateInput:
    def test_valid_input_is_returned(self, reference_input):
        assert validate_input(reference_input) is reference_input

    @pytest.mark.parametrize(
        "overrides, field",
        [
            ({"starting_balance": 0.0}, "starting_balance"),
            ({"interest_rate": 0.0}, "interest_rate"),
            ({"interest_rate": 1.0}, "interest_rate"),
            ({"property_value": -5.0}, "property_value"),
            ({"loan_to_value": 0.0}, "loan_to_value"),
            ({"loan_to_value": 1.01}, "loan_to_value"),
            ({"monthly_income": -1.0}, "monthly_income"),
            ({"monthly_expenses": -0.01}, "monthly_expenses"),
            ({"additional_principal": -10.0}, "additional_principal"),
            ({"traditional_rate": 1.2}, "traditional_rate"),
            ({"term_months": 0}, "term_months"),
            ({"term_months": True}, "term_months"),
            ({"deposit_frequency": "daily"}, "deposit_frequency"),
            ({"start_date": "2025-01-01"}, "start_date"),
            ({"interest_rate": float("nan")}, "interest_rate"),
        ],
    )
    def test_out_of_range_values(self, overrides, field):
        with pytest.raises(ValidationError) as excinfo:
            validate_input(make_input(**overrides))
        assert _fields(excinfo) == {field}

    def test_boundaries_accepted(self):
        data = make_input(loan_to_value=1.0, monthly_income=0.0, monthly_expenses=0.0, traditional_rate=0.0)
        assert validate_input(data) is data

    def test_all_errors_reported_together(self):
        with pytest.raises(ValidationError) as excinfo:
            validate_input(make_input(starting_balance=-1.0, property_value=0.0, monthly_income=-5.0))
        assert _fields(excinfo) == {"starting_balance", "property_value", "monthly_income"}

    def test_error_payload(self):
        error = ValidationError([FieldError("starting_balance", "must be > 0")])
        assert error.as_dict() == {
            "error": "validation_failed",
            "fields": [{"field": "starting_balance", "message": "must be > 0"}],
        }
        assert isinstance(error, ValueError)


class TestInputFromMapping:
    def test_snake_case(self):
        data = input_from_mapping(RAW)
        assert data.starting_balance == 650_000.0
        assert data.deposit_frequency is DepositFrequency.MONTHLY
        assert data.start_date == date(2025, 1, 1)
        assert data.term_months == 360
        assert data.additional_principal == 0.0
        assert data.traditional_rate is None

    def test_camel_case(self):
        raw = {
            "startingBalance": 650000,
            "interestRate": 0.08201,
            "propertyValue": 900000,
            "loanToValue": 0.8,
            "monthlyIncome": 12000,
            "monthlyExpenses": 7192.14,
            "depositFrequency": "Weekly",
            "traditionalRate": 0.065,
            "termMonths": 300,
            "additionalPrincipal": 250,
        }
        data = input_from_mapping(raw, today=date(2025, 6, 1))
        assert data.deposit_frequency is DepositFrequency.WEEKLY
        assert data.traditional_rate == 0.065
        assert data.comparison_rate == 0.065
        assert data.term_months == 300
        assert data.additional_principal == 250.0
        assert data.start_date == date(2025, 6, 1)

    def test_missing_and_malformed_fields(self):
        raw = dict(RAW)
        del raw["monthly_income"]
        raw["interest_rate"] = "abc"
        raw["start_date"] = "not a date"
        with pytest.raises(ValidationError) as excinfo:
            input_from_mapping(raw)
        assert _fields(excinfo) == {"monthly_income", "interest_rate", "start_date"}

    def test_range_checks_still_apply(self):
        raw = dict(RAW, loan_to_value=1.5)
        with pytest.raises(ValidationError) as excinfo:
            input_from_mapping(raw)
        assert _fields(excinfo) == {"loan_to_value"}

    @pytest.mark.parametrize("term", [12.7, "12.5", "twelve", True])
    def test_term_must_be_whole(self, term):
        with pytest.raises(ValidationError) as excinfo:
            input_from_mapping(dict(RAW, term_months=term))
        assert _fields(excinfo) == {"term_months"}

    @pytest.mark.parametrize("term", [240, 240.0, "240"])
    def test_whole_term_accepted(self, term):
        assert input_from_mapping(dict(RAW, termMonths=term)).term_months == 240

    def test_unknown_frequency(self):
        with pytest.raises(ValidationError) as excinfo:
            input_from_mapping(dict(RAW, deposit_frequency="fortnightly"))
        assert _fields(excinfo) == {"deposit_frequency"}
