"""Traditional amortization calculator.

This module implements the closed-form fixed-payment mortgage the offset loan
is compared against. The payment comes from the annuity formula and the
schedule is then simulated month by month so that the total interest is the
sum of the per-period interest charges.

The calculator works on a monthly rate basis (annual rate / 12) and never
sees the offset loan's rate: callers hand it the traditional rate only.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from .data_models import AmortizationResult, ScheduleEntry
from .logging_config import get_logger
from .utils import add_months

logger = get_logger(__name__)

BALANCE_EPSILON = 0.01


def monthly_rate_for(annual_rate: float) -> float:
    """Monthly rate used by the traditional calculator."""
    return annual_rate / 12


def calculate_monthly_payment(principal: float, annual_rate: float, term_months: int) -> float:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * (r * (1 + r)^n) / ((1 + r)^n - 1)

    where ``P`` is the principal, ``r`` is the monthly interest rate and
    ``n`` is the number of payments. When the interest rate is zero, the
    payment simplifies to ``P / n``.
    """
    if term_months <= 0:
        raise ValueError("Term must be positive")
    rate_per_month = monthly_rate_for(annual_rate)
    if rate_per_month == 0:
        return principal / term_months
    factor = (1 + rate_per_month) ** term_months
    return principal * (rate_per_month * factor) / (factor - 1)


def amortize(
    principal: float,
    annual_rate: float,
    term_months: int,
    *,
    start_date: Optional[date] = None,
    with_schedule: bool = False,
) -> AmortizationResult:
    """Simulate a fixed-rate, fixed-term loan month by month.

    Parameters
    ----------
    principal: float
        Amount borrowed.
    annual_rate: float
        Annual nominal rate as a fraction (0.065 for 6.5 %).
    term_months: int
        Number of monthly payments.
    start_date: date, optional
        Date of the first payment, used to date schedule rows.
    with_schedule: bool
        Whether to keep one ``ScheduleEntry`` per month on the result.

    Returns
    -------
    AmortizationResult
        Monthly payment, total interest and months until the balance reached
        ``BALANCE_EPSILON`` (or the end of the term).
    """
    if principal <= 0:
        raise ValueError("Principal must be positive")
    monthly_payment = calculate_monthly_payment(principal, annual_rate, term_months)
    rate_per_month = monthly_rate_for(annual_rate)

    balance = principal
    total_interest = 0.0
    months = 0
    schedule: List[ScheduleEntry] = []
    first_date = start_date or date.today()

    while balance > BALANCE_EPSILON and months < term_months:
        starting_balance = balance
        interest_payment = balance * rate_per_month
        principal_payment = monthly_payment - interest_payment
        # The last payment only clears what is left.
        if principal_payment > balance:
            principal_payment = balance
        balance -= principal_payment
        total_interest += interest_payment
        months += 1
        if with_schedule:
            schedule.append(
                ScheduleEntry(
                    period=months,
                    date=add_months(first_date, months - 1),
                    starting_balance=starting_balance,
                    payment=principal_payment + interest_payment,
                    principal_payment=principal_payment,
                    interest_payment=interest_payment,
                    ending_balance=max(balance, 0.0),
                )
            )

    logger.debug(
        "Traditional amortization: principal=%.2f rate=%.5f term=%d payment=%.2f interest=%.2f months=%d",
        principal,
        annual_rate,
        term_months,
        monthly_payment,
        total_interest,
        months,
    )
    return AmortizationResult(
        monthly_payment=monthly_payment,
        total_interest_paid=total_interest,
        months_to_payoff=months,
        schedule=schedule,
    )


def compute_schedule(principal: float, annual_rate: float, term_months: int, start_date: date) -> List[ScheduleEntry]:
    """Return the full traditional schedule, one entry per month."""
    return amortize(principal, annual_rate, term_months, start_date=start_date, with_schedule=True).schedule
