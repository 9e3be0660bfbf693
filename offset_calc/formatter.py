"""Output helpers for the offset loan calculator.

This module renders simulation results in a tabular text format and turns
them into plain dictionaries for JSON export. Rounding happens only here; the
engine keeps full precision.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from .cashflow import CashFlowSummary
from .data_models import (
    CalendarDay,
    Comparison,
    LoanProjection,
    MinimumCashFlow,
    PayoffStatus,
    PeriodState,
    ScheduleEntry,
    SimulationResult,
)


def _money(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(value, 2)


def _iso(value: Optional[date]) -> Optional[str]:
    return None if value is None else value.isoformat()


def format_months(months: Optional[int]) -> str:
    """Render a month count as years and months, e.g. ``8 years, 5 months``."""
    if months is None:
        return "n/a"
    sign = "-" if months < 0 else ""
    years, rest = divmod(abs(months), 12)
    year_part = f"{years} {'year' if years == 1 else 'years'}"
    if rest == 0:
        return f"{sign}{year_part}"
    return f"{sign}{year_part}, {rest} {'month' if rest == 1 else 'months'}"


def projection_to_dict(projection: LoanProjection) -> Dict[str, Any]:
    return {
        "type": projection.type.value,
        "status": projection.status.value,
        "monthly_payment": _money(projection.monthly_payment),
        "total_interest_paid": _money(projection.total_interest_paid),
        "payoff_date": _iso(projection.payoff_date),
        "payoff_months": projection.payoff_months,
        "interest_savings": _money(projection.interest_savings),
        "months_saved": projection.months_saved,
        "credit_limit_exceeded_month": projection.credit_limit_exceeded_month,
        "never_pays_off": projection.never_pays_off,
        "exceeds_horizon": projection.exceeds_horizon,
    }


def comparison_to_dict(comparison: Comparison) -> Dict[str, Any]:
    pct = comparison.percentage_savings
    return {
        "interest_savings": _money(comparison.interest_savings),
        "time_saved_months": comparison.time_saved_months,
        "percentage_savings": None if pct is None else round(pct, 6),
    }


def minimum_cash_flow_to_dict(minimum: Optional[MinimumCashFlow]) -> Optional[Dict[str, Any]]:
    if minimum is None:
        return None
    return {
        "minimum_monthly_cash_flow": _money(minimum.minimum_monthly_cash_flow),
        "current_monthly_cash_flow": _money(minimum.current_monthly_cash_flow),
        "additional_needed": _money(minimum.additional_needed),
        "target_payoff_months": minimum.target_payoff_months,
    }


def cash_flow_to_dict(summary: CashFlowSummary) -> Dict[str, Any]:
    return {
        "monthly_income": _money(summary.monthly_income),
        "monthly_expenses": _money(summary.monthly_expenses),
        "monthly_leftover": _money(summary.monthly_leftover),
        "months_of_data": summary.months_of_data,
        "flagged_transactions": [
            {"date": _iso(t.date), "description": t.description, "amount": _money(t.amount), "reason": t.flag_reason}
            for t in summary.flagged_transactions
        ],
    }


def simulation_to_dict(result: SimulationResult) -> Dict[str, Any]:
    """Convert a ``SimulationResult`` into JSON-serialisable data."""
    return {
        "traditional": projection_to_dict(result.traditional),
        "offset": projection_to_dict(result.offset),
        "comparison": comparison_to_dict(result.comparison),
        "minimum_cash_flow": minimum_cash_flow_to_dict(result.minimum_cash_flow),
    }


def periods_to_dicts(periods: Iterable[PeriodState]) -> List[Dict[str, Any]]:
    return [
        {
            "period": p.period_index + 1,
            "date": p.period_start.strftime("%Y-%m"),
            "days": p.days,
            "starting_balance": _money(p.starting_balance),
            "average_cash": _money(p.average_cash),
            "effective_balance": _money(p.effective_balance),
            "interest": _money(p.interest_accrued),
            "interest_savings": _money(p.interest_savings),
            "principal": _money(p.principal_reduction),
            "ending_balance": _money(p.balance),
            "cumulative_interest": _money(p.cumulative_interest),
            "credit_limit": _money(p.credit_limit),
            "available_credit": _money(p.available_credit),
        }
        for p in periods
    ]


def schedule_to_dicts(schedule: Iterable[ScheduleEntry]) -> List[Dict[str, Any]]:
    return [
        {
            "period": e.period,
            "date": e.date.strftime("%Y-%m"),
            "starting_balance": _money(e.starting_balance),
            "payment": _money(e.payment),
            "principal": _money(e.principal_payment),
            "interest": _money(e.interest_payment),
            "ending_balance": _money(e.ending_balance),
        }
        for e in schedule
    ]


_STATUS_TEXT = {
    PayoffStatus.PAID_OFF: "paid off",
    PayoffStatus.EXCEEDS_HORIZON: "not paid off within the simulation horizon",
    PayoffStatus.NEVER_PAYS_OFF: "never pays off (balance is not decreasing)",
}


def print_summary(result: SimulationResult) -> None:
    """Print both projections and the savings in a human-readable format."""
    trad = result.traditional
    off = result.offset
    print("Summary")
    print("-" * 72)
    print(f"{'':20s} {'Traditional':>20s} {'Offset':>20s}")
    print(f"{'Monthly payment':20s} {trad.monthly_payment:20.2f} {off.monthly_payment:20.2f}")
    print(f"{'Total interest':20s} {trad.total_interest_paid:20.2f} {off.total_interest_paid:20.2f}")
    print(f"{'Payoff':20s} {format_months(trad.payoff_months):>20s} {format_months(off.payoff_months):>20s}")
    print(f"{'Payoff date':20s} {_iso(trad.payoff_date) or 'n/a':>20s} {_iso(off.payoff_date) or 'n/a':>20s}")
    print(f"Offset loan status : {_STATUS_TEXT[off.status]}")
    if off.credit_limit_exceeded_month is not None:
        print(f"Credit limit       : balance above the limit from month {off.credit_limit_exceeded_month}")
    comparison = result.comparison
    if comparison.interest_savings is not None:
        print(f"Interest saved     : {comparison.interest_savings:.2f}")
        print(f"Time saved         : {format_months(comparison.time_saved_months)}")
        if comparison.percentage_savings is not None:
            print(f"Percentage saved   : {comparison.percentage_savings * 100:.2f}%")
        else:
            print("Percentage saved   : n/a (traditional loan carries no interest)")
    minimum = result.minimum_cash_flow
    if minimum is not None:
        print(f"Cash flow needed   : {minimum.minimum_monthly_cash_flow:.2f} per month "
              f"(currently {minimum.current_monthly_cash_flow:.2f}, "
              f"{minimum.additional_needed:.2f} more) to finish within {minimum.target_payoff_months} months")
    print("-" * 72)


def print_offset_schedule(periods: Iterable[PeriodState]) -> None:
    """Print the offset loan month by month as a simple table."""
    headers = ["Period", "Date", "Days", "StartBal", "AvgCash", "Interest", "Saved", "Principal", "EndBal"]
    print("\t".join(headers))
    for p in periods:
        row = [
            str(p.period_index + 1),
            p.period_start.strftime("%Y-%m"),
            str(p.days),
            f"{p.starting_balance:.2f}",
            f"{p.average_cash:.2f}",
            f"{p.interest_accrued:.2f}",
            f"{p.interest_savings:.2f}",
            f"{p.principal_reduction:.2f}",
            f"{p.balance:.2f}",
        ]
        print("\t".join(row))


def print_schedule(schedule: Iterable[ScheduleEntry]) -> None:
    """Print the traditional amortization schedule as a simple table."""
    headers = ["Period", "Date", "StartBal", "Payment", "Principal", "Interest", "EndBal"]
    print("\t".join(headers))
    for entry in schedule:
        row = [
            str(entry.period),
            entry.date.strftime("%Y-%m"),
            f"{entry.starting_balance:.2f}",
            f"{entry.payment:.2f}",
            f"{entry.principal_payment:.2f}",
            f"{entry.interest_payment:.2f}",
            f"{entry.ending_balance:.2f}",
        ]
        print("\t".join(row))


def print_calendar(days: Iterable[CalendarDay]) -> None:
    print("\t".join(["Index", "Date", "DayOfYear", "DaysInMonth", "LastDay", "Leap"]))
    for day in days:
        print(
            "\t".join(
                [
                    str(day.day_index),
                    day.date.isoformat(),
                    str(day.day_of_year),
                    str(day.days_in_month),
                    "Yes" if day.is_last_day_of_month else "No",
                    "Yes" if day.is_leap_year else "No",
                ]
            )
        )
