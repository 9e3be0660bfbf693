"""Eligibility gate for offset loan proposals.

A deliberately small rule set: the loan-to-value ratio must not exceed 80 %
and the borrower must have at least $500 of positive monthly cash flow.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

MAX_LTV = 80.0
MIN_CASH_FLOW = 500.0


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    ltv: float  # percent
    ltv_passed: bool
    cash_flow_passed: bool
    reasons: List[str] = field(default_factory=list)


def check_eligibility(starting_balance: float, property_value: float, net_cash_flow: float) -> EligibilityResult:
    """Apply the LTV and cash-flow rules; ``reasons`` explains both outcomes."""
    if property_value <= 0:
        raise ValueError("Property value must be positive")
    reasons: List[str] = []
    ltv = starting_balance * 100 / property_value

    ltv_passed = ltv <= MAX_LTV
    if ltv_passed:
        reasons.append(f"LTV of {ltv:.1f}% is within acceptable range")
    else:
        reasons.append(f"LTV of {ltv:.1f}% exceeds maximum of {MAX_LTV:.0f}%")

    cash_flow_passed = net_cash_flow >= MIN_CASH_FLOW
    if cash_flow_passed:
        reasons.append(f"Net cash flow of ${net_cash_flow:,.2f} meets minimum requirements")
    else:
        reasons.append(f"Net cash flow of ${net_cash_flow:,.2f} is below minimum of ${MIN_CASH_FLOW:,.0f}")

    return EligibilityResult(
        eligible=ltv_passed and cash_flow_passed,
        ltv=ltv,
        ltv_passed=ltv_passed,
        cash_flow_passed=cash_flow_passed,
        reasons=reasons,
    )


def debt_to_income(monthly_debts: float, monthly_income: float) -> float:
    """Debt-to-income ratio in percent; 100 when there is no income."""
    if monthly_income == 0:
        return 100.0
    return monthly_debts * 100 / monthly_income


def property_value_is_plausible(property_value: float, loan_amount: float) -> bool:
    """A property should be worth at least the loan and at most five times it."""
    return loan_amount <= property_value <= loan_amount * 5
