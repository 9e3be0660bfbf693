"""Input validation for simulation runs.

Every check runs before any simulation starts; all violations are collected
and raised together as a single ``ValidationError`` so that callers (the CLI,
the web API) can report them in one go.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional

from .data_models import CalculationInput, DepositFrequency
from .utils import parse_date

if TYPE_CHECKING:
    from .cashflow import CashFlowSummary


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str


class ValidationError(ValueError):
    """Raised when a ``CalculationInput`` (or its raw form) is out of range."""

    def __init__(self, errors: List[FieldError]) -> None:
        self.errors = list(errors)
        detail = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Invalid calculation input: {detail}")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "error": "validation_failed",
            "fields": [{"field": e.field, "message": e.message} for e in self.errors],
        }


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _check(errors: List[FieldError], name: str, value: Any, *, low: float, high: Optional[float] = None,
           low_inclusive: bool = False, high_inclusive: bool = False) -> None:
    if not _is_number(value):
        errors.append(FieldError(name, "must be a finite number"))
        return
    if value < low or (value == low and not low_inclusive):
        op = ">=" if low_inclusive else ">"
        errors.append(FieldError(name, f"must be {op} {low:g}; got {value:g}"))
        return
    if high is not None and (value > high or (value == high and not high_inclusive)):
        op = "<=" if high_inclusive else "<"
        errors.append(FieldError(name, f"must be {op} {high:g}; got {value:g}"))


def validate_input(data: CalculationInput) -> CalculationInput:
    """Return ``data`` unchanged if it is valid, else raise ``ValidationError``."""
    errors: List[FieldError] = []
    _check(errors, "starting_balance", data.starting_balance, low=0)
    _check(errors, "interest_rate", data.interest_rate, low=0, high=1)
    if data.traditional_rate is not None:
        # A zero traditional rate is allowed: the amortization falls back to P/n.
        _check(errors, "traditional_rate", data.traditional_rate, low=0, high=1, low_inclusive=True)
    _check(errors, "property_value", data.property_value, low=0)
    _check(errors, "loan_to_value", data.loan_to_value, low=0, high=1, high_inclusive=True)
    _check(errors, "monthly_income", data.monthly_income, low=0, low_inclusive=True)
    _check(errors, "monthly_expenses", data.monthly_expenses, low=0, low_inclusive=True)
    _check(errors, "additional_principal", data.additional_principal, low=0, low_inclusive=True)
    if isinstance(data.term_months, bool) or not isinstance(data.term_months, int) or data.term_months <= 0:
        errors.append(FieldError("term_months", f"must be a positive whole number of months; got {data.term_months!r}"))
    if not isinstance(data.deposit_frequency, DepositFrequency):
        errors.append(FieldError("deposit_frequency", f"unsupported deposit frequency {data.deposit_frequency!r}"))
    if not isinstance(data.start_date, date):
        errors.append(FieldError("start_date", "must be a date"))
    if errors:
        raise ValidationError(errors)
    return data


_NUMERIC_FIELDS = (
    "starting_balance",
    "interest_rate",
    "property_value",
    "loan_to_value",
    "monthly_income",
    "monthly_expenses",
)


def input_from_mapping(raw: Mapping[str, Any], *, today: Optional[date] = None,
                       cash_flow: Optional["CashFlowSummary"] = None) -> CalculationInput:
    """Build and validate a ``CalculationInput`` from a JSON-like mapping.

    Both ``snake_case`` and ``camelCase`` keys are accepted. Missing or
    malformed fields are reported as ``ValidationError`` like range errors.

    With ``cash_flow`` the monthly income and expenses come from the summary
    instead of ``raw``, and its deposit frequency is the default.
    """
    def pick(name: str, default: Any = None) -> Any:
        camel = name.split("_")[0] + "".join(part.title() for part in name.split("_")[1:])
        if name in raw:
            return raw[name]
        return raw.get(camel, default)

    errors: List[FieldError] = []
    values: Dict[str, Any] = {}
    for name in _NUMERIC_FIELDS:
        if cash_flow is not None and name in ("monthly_income", "monthly_expenses"):
            values[name] = float(getattr(cash_flow, name))
            continue
        value = pick(name)
        if value is None:
            errors.append(FieldError(name, "is required"))
            continue
        try:
            values[name] = float(value)
        except (TypeError, ValueError):
            errors.append(FieldError(name, f"must be a number; got {value!r}"))

    for name, default in (("additional_principal", 0.0), ("traditional_rate", None)):
        value = pick(name, default)
        if value is None:
            values[name] = None
            continue
        try:
            values[name] = float(value)
        except (TypeError, ValueError):
            errors.append(FieldError(name, f"must be a number; got {value!r}"))

    term = pick("term_months", 360)
    try:
        months = float(term)
        if isinstance(term, bool) or not months.is_integer():
            raise ValueError(term)
        values["term_months"] = int(months)
    except (TypeError, ValueError):
        errors.append(FieldError("term_months", f"must be a whole number; got {term!r}"))

    try:
        values["deposit_frequency"] = DepositFrequency.parse(
            pick("deposit_frequency", cash_flow.deposit_frequency if cash_flow is not None else "monthly")
        )
    except ValueError as exc:
        errors.append(FieldError("deposit_frequency", str(exc)))

    raw_start = pick("start_date")
    if raw_start is None:
        values["start_date"] = today or datetime.now().date()
    else:
        try:
            values["start_date"] = parse_date(raw_start)
        except (TypeError, ValueError) as exc:
            errors.append(FieldError("start_date", str(exc)))

    if errors:
        raise ValidationError(errors)
    if values["additional_principal"] is None:
        values["additional_principal"] = 0.0
    return validate_input(CalculationInput(**values))
