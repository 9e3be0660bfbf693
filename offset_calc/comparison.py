"""Comparison of an offset loan against a traditional mortgage.

``simulate`` is the single entry point callers use: it validates the input,
runs the traditional calculator on the traditional rate and the offset
simulator on the offset rate, and combines both into a ``SimulationResult``.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional

from .calendar_days import HORIZON_DAYS, DayCalendar
from .data_models import (
    AmortizationResult,
    CalculationInput,
    Comparison,
    LoanProjection,
    LoanType,
    MinimumCashFlow,
    OffsetResult,
    PayoffStatus,
    SimulationResult,
)
from .engine import amortize
from .logging_config import get_logger
from .offset import GRACE_MONTHS, MAX_MONTHS, simulate_offset
from .utils import add_months
from .validation import validate_input

logger = get_logger(__name__)

# An offset loan is worth proposing when it saves at least a year.
VIABLE_MONTHS_SAVED = 12
MAX_SEARCH_CASH_FLOW = 50_000.0
SEARCH_TOLERANCE = 10.0
SEARCH_ITERATIONS = 20


def traditional_projection(data: CalculationInput, result: AmortizationResult) -> LoanProjection:
    return LoanProjection(
        type=LoanType.TRADITIONAL,
        monthly_payment=result.monthly_payment,
        total_interest_paid=result.total_interest_paid,
        payoff_date=add_months(data.start_date, result.months_to_payoff),
        payoff_months=result.months_to_payoff,
    )


def offset_projection(data: CalculationInput, result: OffsetResult) -> LoanProjection:
    # The offset loan has no fixed installment; what reduces it each month is
    # the leftover cash.
    return LoanProjection(
        type=LoanType.OFFSET,
        monthly_payment=data.monthly_leftover + data.additional_principal,
        total_interest_paid=result.total_interest_paid,
        payoff_date=result.payoff_date,
        payoff_months=result.months_to_payoff,
        status=result.status,
        credit_limit_exceeded_month=result.credit_limit_exceeded_month,
    )


def compare_projections(traditional: LoanProjection, offset: LoanProjection) -> Comparison:
    """Savings of ``offset`` over ``traditional``.

    Only completed projections are compared; if the offset loan never pays off
    or runs past the horizon every figure is None.
    """
    if offset.status is not PayoffStatus.PAID_OFF or offset.payoff_months is None:
        return Comparison(interest_savings=None, time_saved_months=None, percentage_savings=None)
    interest_savings = traditional.total_interest_paid - offset.total_interest_paid
    time_saved = traditional.payoff_months - offset.payoff_months
    percentage: Optional[float] = None
    if traditional.total_interest_paid > 0:
        percentage = interest_savings / traditional.total_interest_paid
    return Comparison(
        interest_savings=interest_savings,
        time_saved_months=time_saved,
        percentage_savings=percentage,
    )


def minimum_cash_flow_needed(
    data: CalculationInput,
    traditional_months: int,
    *,
    calendar: Optional[DayCalendar] = None,
    horizon_days: int = HORIZON_DAYS,
    max_months: int = MAX_MONTHS,
    grace_months: int = GRACE_MONTHS,
) -> MinimumCashFlow:
    """Smallest monthly leftover for the offset loan to finish a year early.

    The borrower's expenses are kept and the income is varied, so the cash
    curve keeps its shape. The leftover is bisected between 0 and
    ``MAX_SEARCH_CASH_FLOW`` until the bracket is narrower than
    ``SEARCH_TOLERANCE``.
    """
    target = max(VIABLE_MONTHS_SAVED, traditional_months - VIABLE_MONTHS_SAVED)
    if calendar is None:
        calendar = DayCalendar(data.start_date, horizon_days)

    def payoff_months(leftover: float) -> float:
        trial = replace(data, monthly_income=data.monthly_expenses + leftover)
        outcome = simulate_offset(trial, calendar=calendar, max_months=max_months, grace_months=grace_months)
        return outcome.months_to_payoff if outcome.paid_off else math.inf

    low, high = 0.0, MAX_SEARCH_CASH_FLOW
    for _ in range(SEARCH_ITERATIONS):
        mid = (low + high) / 2
        if payoff_months(mid) <= target:
            high = mid
        else:
            low = mid
        if high - low < SEARCH_TOLERANCE:
            break

    minimum = float(math.ceil(high))
    current = data.monthly_leftover
    logger.debug("Minimum cash flow for %d-month payoff: %.2f (current %.2f)", target, minimum, current)
    return MinimumCashFlow(
        minimum_monthly_cash_flow=minimum,
        current_monthly_cash_flow=current,
        additional_needed=max(0.0, minimum - current),
        target_payoff_months=target,
    )


def simulate(
    data: CalculationInput,
    *,
    calendar: Optional[DayCalendar] = None,
    horizon_days: int = HORIZON_DAYS,
    max_months: int = MAX_MONTHS,
    grace_months: int = GRACE_MONTHS,
    with_minimum_cash_flow: bool = True,
) -> SimulationResult:
    """Compare the traditional and the offset loan for ``data``.

    Raises ``ValidationError`` before any work is done if ``data`` is out of
    range. Non-convergent offset loans are reported through the projection's
    ``status``, not raised.
    """
    validate_input(data)
    if calendar is None:
        calendar = DayCalendar(data.start_date, horizon_days)

    amortization = amortize(data.starting_balance, data.comparison_rate, data.term_months)
    traditional = traditional_projection(data, amortization)

    offset_result = simulate_offset(data, calendar=calendar, max_months=max_months, grace_months=grace_months)
    comparison = compare_projections(traditional, offset_projection(data, offset_result))
    offset = replace(
        offset_projection(data, offset_result),
        interest_savings=comparison.interest_savings,
        months_saved=comparison.time_saved_months,
    )

    minimum = None
    viable = comparison.time_saved_months is not None and comparison.time_saved_months >= VIABLE_MONTHS_SAVED
    if with_minimum_cash_flow and not viable:
        minimum = minimum_cash_flow_needed(
            data,
            traditional.payoff_months,
            calendar=calendar,
            max_months=max_months,
            grace_months=grace_months,
        )

    logger.info(
        "Simulation complete: traditional=%d months/%.2f interest, offset=%s, savings=%s",
        traditional.payoff_months,
        traditional.total_interest_paid,
        offset.status.value,
        "n/a" if comparison.interest_savings is None else f"{comparison.interest_savings:.2f}",
    )
    return SimulationResult(
        traditional=traditional,
        offset=offset,
        comparison=comparison,
        minimum_cash_flow=minimum,
    )
