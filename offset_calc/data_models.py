"""Data models for the offset loan calculator.

This module defines dataclasses representing the entities used by the
calculator: calendar days, the validated simulation input, the per-month state
of an offset loan run, the traditional schedule rows and the projections and
comparison produced for callers. Using dataclasses makes it easy to construct,
inspect and serialize these structures.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional


class DepositFrequency(str, Enum):
    """Cadence at which income arrives in the offset account."""

    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"

    @classmethod
    def parse(cls, value) -> "DepositFrequency":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(f.value for f in cls)
            raise ValueError(f"Deposit frequency must be one of {choices}; got {value!r}") from None


class LoanType(str, Enum):
    TRADITIONAL = "traditional"
    OFFSET = "offset"


class PayoffStatus(str, Enum):
    """Terminal state of a simulation run.

    ``EXCEEDS_HORIZON`` means the balance was still falling when the calendar
    (or the month limit) ran out. ``NEVER_PAYS_OFF`` means the balance stopped
    decreasing for a whole grace window.
    """

    PAID_OFF = "paid_off"
    EXCEEDS_HORIZON = "exceeds_horizon"
    NEVER_PAYS_OFF = "never_pays_off"


@dataclass(frozen=True)
class CalendarDay:
    """One day of a generated calendar.

    Attributes
    ----------
    day_index: int
        0-based offset from the calendar's start date.
    date: date
        The calendar date.
    day_of_month, month, year: int
        Components of ``date`` (month is 1-12).
    day_of_year: int
        1-based day count since January 1st (1-366).
    is_last_day_of_month: bool
        True when the following day falls in another month.
    is_leap_year: bool
        Gregorian leap-year flag for ``year``.
    days_in_month: int
        Length of the month ``date`` falls in (28-31).
    """

    day_index: int
    date: date
    day_of_month: int
    month: int
    year: int
    day_of_year: int
    is_last_day_of_month: bool
    is_leap_year: bool
    days_in_month: int


@dataclass(frozen=True)
class CalculationInput:
    """Input to one comparison run.

    Rates are annual fractions (0.065 for 6.5 %). ``interest_rate`` is the
    offset loan's rate; ``traditional_rate`` is the rate of the conventional
    mortgage it is compared against and defaults to ``interest_rate``.
    """

    starting_balance: float
    interest_rate: float
    property_value: float
    loan_to_value: float
    monthly_income: float
    monthly_expenses: float
    deposit_frequency: DepositFrequency
    start_date: date
    traditional_rate: Optional[float] = None
    term_months: int = 360
    additional_principal: float = 0.0

    @property
    def monthly_leftover(self) -> float:
        return self.monthly_income - self.monthly_expenses

    @property
    def comparison_rate(self) -> float:
        """Rate consumed by the traditional calculator."""
        return self.interest_rate if self.traditional_rate is None else self.traditional_rate


@dataclass
class PeriodState:
    """State of an offset loan at the end of one simulated month.

    ``balance`` is the balance after the month-end principal reduction;
    ``effective_balance`` is the time-averaged interest-bearing balance over
    the month.
    ``credit_limit`` is the facility in force during the month and
    ``available_credit`` is that limit minus ``balance`` (negative when the
    balance is over the limit).
    """

    period_index: int
    period_start: date
    days: int
    starting_balance: float
    balance: float
    effective_balance: float
    average_cash: float
    interest_accrued: float
    interest_savings: float
    principal_reduction: float
    cumulative_interest: float
    months_elapsed: int
    credit_limit: float = 0.0
    available_credit: float = 0.0


@dataclass
class ScheduleEntry:
    """An entry in the traditional amortization schedule (one month)."""

    period: int
    date: date
    starting_balance: float
    payment: float
    principal_payment: float
    interest_payment: float
    ending_balance: float


@dataclass
class AmortizationResult:
    """Outcome of the traditional amortization calculator."""

    monthly_payment: float
    total_interest_paid: float
    months_to_payoff: int
    schedule: List[ScheduleEntry] = field(default_factory=list)


@dataclass
class OffsetResult:
    """Outcome of the offset loan simulator.

    ``months_to_payoff`` and ``payoff_date`` are None unless ``status`` is
    ``PAID_OFF``; ``months_simulated`` always tells how far the run got.
    ``credit_limit_exceeded_month`` is the first month (1-based) whose closing
    balance was above the credit limit, or None.
    """

    status: PayoffStatus
    months_to_payoff: Optional[int]
    months_simulated: int
    total_interest_paid: float
    payoff_date: Optional[date]
    effective_principal: float
    final_balance: float
    periods: List[PeriodState] = field(default_factory=list)
    credit_limit_exceeded_month: Optional[int] = None

    @property
    def paid_off(self) -> bool:
        return self.status is PayoffStatus.PAID_OFF


@dataclass(frozen=True)
class LoanProjection:
    type: LoanType
    monthly_payment: float
    total_interest_paid: float
    payoff_date: Optional[date]
    payoff_months: Optional[int]
    status: PayoffStatus = PayoffStatus.PAID_OFF
    interest_savings: Optional[float] = None
    months_saved: Optional[int] = None
    credit_limit_exceeded_month: Optional[int] = None

    @property
    def never_pays_off(self) -> bool:
        return self.status is PayoffStatus.NEVER_PAYS_OFF

    @property
    def exceeds_horizon(self) -> bool:
        return self.status is PayoffStatus.EXCEEDS_HORIZON


@dataclass(frozen=True)
class Comparison:
    """Savings of the offset loan over the traditional one.

    All three figures are None when the offset loan did not pay off, and
    ``percentage_savings`` (a fraction) is None when the traditional loan
    carries no interest.
    """

    interest_savings: Optional[float]
    time_saved_months: Optional[int]
    percentage_savings: Optional[float]


@dataclass(frozen=True)
class MinimumCashFlow:
    """Monthly leftover the offset loan needs to beat the traditional term by a year."""

    minimum_monthly_cash_flow: float
    current_monthly_cash_flow: float
    additional_needed: float
    target_payoff_months: int


@dataclass(frozen=True)
class SimulationResult:
    traditional: LoanProjection
    offset: LoanProjection
    comparison: Comparison
    minimum_cash_flow: Optional[MinimumCashFlow] = None
