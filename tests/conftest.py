"""Pytest configuration and shared fixtures for the offset calculator tests.

Provides input factories for the scenarios the simulator is checked against
and a float comparison helper for money values.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date

import pytest

from offset_calc.config import Settings
from offset_calc.data_models import CalculationInput, DepositFrequency
from offset_calc.logging_config import ROOT_LOGGER

START = date(2025, 1, 1)


def assert_float_equal(actual: float, expected: float, tolerance: float = 0.01):
    """Assert that two floats are equal within a tolerance.

    Args:
        actual: Actual value
        expected: Expected value
        tolerance: Maximum allowed difference (default 0.01 = 1 cent)
    """
    assert (
        abs(actual - expected) < tolerance
    ), f"Expected {expected}, got {actual} (diff: {abs(actual - expected)})"


def make_input(**overrides) -> CalculationInput:
    """Build the reference offset scenario, overriding any field."""
    base = CalculationInput(
        starting_balance=650_000.0,
        interest_rate=0.08201,
        property_value=900_000.0,
        loan_to_value=0.8,
        monthly_income=12_000.0,
        monthly_expenses=7_192.14,
        deposit_frequency=DepositFrequency.MONTHLY,
        start_date=START,
    )
    return replace(base, **overrides)


@pytest.fixture
def reference_input() -> CalculationInput:
    """Scenario used historically to validate the offset model."""
    return make_input()


@pytest.fixture
def non_convergent_input() -> CalculationInput:
    """Expenses exceed income, so the balance keeps growing."""
    return make_input(monthly_income=17_218.0, monthly_expenses=18_294.0)


@pytest.fixture
def small_input() -> CalculationInput:
    """A short loan that pays off within a couple of years."""
    return make_input(starting_balance=50_000.0, property_value=250_000.0)


@pytest.fixture
def settings(monkeypatch) -> Settings:
    """Settings built from a clean environment."""
    for name in (
        "OFFSET_CALC_HORIZON_DAYS",
        "OFFSET_CALC_MAX_MONTHS",
        "OFFSET_CALC_GRACE_MONTHS",
        "OFFSET_CALC_TERM_MONTHS",
        "OFFSET_CALC_RATE_TTL_SECONDS",
        "OFFSET_CALC_FALLBACK_RATE",
        "OFFSET_CALC_LOG_LEVEL",
        "OFFSET_CALC_LOG_JSON",
        "OFFSET_CALC_DEV_MODE",
    ):
        monkeypatch.delenv(name, raising=False)
    return Settings()


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers that ``setup_logging`` bound to a test's streams."""
    yield
    logger = logging.getLogger(ROOT_LOGGER)
    logger.handlers.clear()
    logger.propagate = True
