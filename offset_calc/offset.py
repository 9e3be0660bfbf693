"""Offset loan simulator.

An offset loan charges interest daily on the outstanding balance minus the
cash the borrower currently holds in the linked account. The simulation runs
one calendar month at a time:

1. Income arrives at the start of the month and is spent linearly over the
   month's actual number of days, so the cash on day ``d`` of a ``D``-day
   month is ``income - expenses * d / D``. More frequent deposits keep more
   cash in the account on average; this is modelled by scaling the cash curve
   by a cadence factor (1.15 biweekly, 1.25 weekly).
2. Each day accrues ``max(0, balance - cash) * rate / 365``.
3. At month end the balance falls by the month's leftover (income minus
   expenses, plus any additional principal) and by the interest the offset
   saved compared with accruing on the full balance.

The run stops when the balance reaches ``BALANCE_EPSILON``, when the loan has
stalled for ``grace_months`` consecutive months (the loan never pays off), or
when the calendar or the month limit runs out. A month stalls when the balance
did not decrease or when nothing is left over to pay down principal; interest
savings alone are not treated as progress.

The credit facility is ``property_value * loan_to_value`` at the start and
declines linearly to zero over ``CREDIT_DECLINE_MONTHS``. Each month records
the limit and the credit still available; a balance above the limit is
reported on the result rather than clamped.

Only ``CalculationInput.interest_rate`` is read here, always on a /365 basis.
The traditional rate belongs to ``engine``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .calendar_days import HORIZON_DAYS, DayCalendar
from .data_models import (
    CalculationInput,
    CalendarDay,
    DepositFrequency,
    OffsetResult,
    PayoffStatus,
    PeriodState,
)
from .logging_config import get_logger
from .utils import add_months

logger = get_logger(__name__)

BALANCE_EPSILON = 0.01
MAX_MONTHS = 360
GRACE_MONTHS = 12
DAYS_PER_YEAR = 365
CREDIT_DECLINE_MONTHS = 240

DEPOSIT_OFFSET_MULTIPLIERS: Dict[DepositFrequency, float] = {
    DepositFrequency.MONTHLY: 1.0,
    DepositFrequency.BIWEEKLY: 1.15,
    DepositFrequency.WEEKLY: 1.25,
}


def daily_rate_for(annual_rate: float) -> float:
    """Daily rate used by the offset simulator."""
    return annual_rate / DAYS_PER_YEAR


def credit_limit_for(property_value: float, loan_to_value: float, months_elapsed: int) -> float:
    """Credit facility after ``months_elapsed`` full months; zero once the decline ends."""
    if months_elapsed >= CREDIT_DECLINE_MONTHS:
        return 0.0
    return property_value * loan_to_value * (CREDIT_DECLINE_MONTHS - months_elapsed) / CREDIT_DECLINE_MONTHS


@dataclass
class MonthAccrual:
    """Interest figures for one simulated month."""

    days: int
    interest: float
    interest_savings: float
    average_cash: float
    average_effective_balance: float


def cash_available(income: float, expenses: float, day: int, days: int, multiplier: float = 1.0) -> float:
    """Cash left in the account after day ``day`` (1-based) of a ``days``-long month.

    Never negative; callers cap it at the loan balance.
    """
    return max(0.0, (income - expenses * day / days) * multiplier)


def simulate_month(
    balance: float,
    income: float,
    expenses: float,
    annual_rate: float,
    days: int,
    multiplier: float = 1.0,
) -> MonthAccrual:
    """Accrue one month of daily interest on ``balance`` net of available cash.

    The balance itself does not move within the month; only the cash does.
    """
    if days <= 0:
        raise ValueError("A month must have at least one day")
    daily_rate = daily_rate_for(annual_rate)
    interest = 0.0
    savings = 0.0
    total_cash = 0.0
    total_effective = 0.0
    for day in range(1, days + 1):
        cash = min(cash_available(income, expenses, day, days, multiplier), balance)
        effective = max(0.0, balance - cash)
        interest += effective * daily_rate
        savings += cash * daily_rate
        total_cash += cash
        total_effective += effective
    return MonthAccrual(
        days=days,
        interest=interest,
        interest_savings=savings,
        average_cash=total_cash / days,
        average_effective_balance=total_effective / days,
    )


def _period_days(calendar: DayCalendar, data: CalculationInput, index: int) -> Optional[Sequence[CalendarDay]]:
    start = add_months(data.start_date, index)
    end = add_months(data.start_date, index + 1)
    return calendar.period(start, end)


def simulate_offset(
    data: CalculationInput,
    *,
    calendar: Optional[DayCalendar] = None,
    horizon_days: int = HORIZON_DAYS,
    max_months: int = MAX_MONTHS,
    grace_months: int = GRACE_MONTHS,
) -> OffsetResult:
    """Run the offset loan described by ``data`` until payoff or a terminal state.

    ``data`` is expected to be validated already (see ``validation``). A fresh
    calendar is generated from ``data.start_date`` unless one is supplied.
    """
    if grace_months < 1:
        raise ValueError("grace_months must be at least 1")
    if calendar is None:
        calendar = DayCalendar(data.start_date, horizon_days)

    multiplier = DEPOSIT_OFFSET_MULTIPLIERS[data.deposit_frequency]
    leftover = data.monthly_leftover + data.additional_principal

    logger.debug(
        "Offset simulation: balance=%.2f rate=%.5f income=%.2f expenses=%.2f frequency=%s start=%s",
        data.starting_balance,
        data.interest_rate,
        data.monthly_income,
        data.monthly_expenses,
        data.deposit_frequency.value,
        data.start_date.isoformat(),
    )

    balance = data.starting_balance
    cumulative_interest = 0.0
    stalled_months = 0
    periods: List[PeriodState] = []
    status = PayoffStatus.EXCEEDS_HORIZON
    effective_principal: Optional[float] = None
    over_limit_month: Optional[int] = None

    for index in range(max_months):
        days = _period_days(calendar, data, index)
        if not days:
            break
        accrual = simulate_month(
            balance,
            data.monthly_income,
            data.monthly_expenses,
            data.interest_rate,
            len(days),
            multiplier,
        )
        if effective_principal is None:
            effective_principal = accrual.average_effective_balance

        reduction = leftover + accrual.interest_savings
        starting_balance = balance
        balance = max(0.0, balance - reduction)
        if balance <= BALANCE_EPSILON:
            balance = 0.0
        cumulative_interest += accrual.interest
        limit = credit_limit_for(data.property_value, data.loan_to_value, index)
        if balance > limit and over_limit_month is None:
            over_limit_month = index + 1
            logger.debug("Balance %.2f exceeds the credit limit %.2f in month %d", balance, limit, over_limit_month)
        periods.append(
            PeriodState(
                period_index=index,
                period_start=days[0].date,
                days=accrual.days,
                starting_balance=starting_balance,
                balance=balance,
                effective_balance=accrual.average_effective_balance,
                average_cash=accrual.average_cash,
                interest_accrued=accrual.interest,
                interest_savings=accrual.interest_savings,
                principal_reduction=starting_balance - balance,
                cumulative_interest=cumulative_interest,
                months_elapsed=index + 1,
                credit_limit=limit,
                available_credit=limit - balance,
            )
        )

        if balance == 0.0:
            status = PayoffStatus.PAID_OFF
            break
        stalled = leftover <= 0 or balance >= starting_balance
        stalled_months = stalled_months + 1 if stalled else 0
        if stalled_months >= grace_months:
            status = PayoffStatus.NEVER_PAYS_OFF
            break

    months_simulated = len(periods)
    paid_off = status is PayoffStatus.PAID_OFF
    result = OffsetResult(
        status=status,
        months_to_payoff=months_simulated if paid_off else None,
        months_simulated=months_simulated,
        total_interest_paid=cumulative_interest,
        payoff_date=add_months(data.start_date, months_simulated) if paid_off else None,
        effective_principal=effective_principal if effective_principal is not None else data.starting_balance,
        final_balance=balance,
        periods=periods,
        credit_limit_exceeded_month=over_limit_month,
    )
    logger.info(
        "Offset simulation finished: status=%s months=%d interest=%.2f final_balance=%.2f",
        status.value,
        months_simulated,
        cumulative_interest,
        balance,
    )
    return result
