"""Cash-flow summaries consumed by the offset simulator.

Statement parsing happens elsewhere; this module takes already-structured
transactions (JSON objects or CSV rows) and reduces them to the monthly
figures the simulator needs.
Optional annotations on a transaction (excluded, flagged, flag reason) have
explicit defaults rather than being absent.
"""

from __future__ import annotations

import csv
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .data_models import DepositFrequency
from .utils import parse_date
from .validation import FieldError, ValidationError


class TransactionCategory(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"
    HOUSING = "housing"
    ONE_TIME = "one-time"
    RECURRING = "recurring"


@dataclass
class Transaction:
    """One bank-statement line.

    Attributes
    ----------
    date: date
        Posting date.
    description: str
        Statement text.
    amount: float
        Absolute amount; the category decides whether it is money in or out.
    category: TransactionCategory
        ``INCOME`` is money in; every other category is money out.
    excluded: bool
        Left out of every total when True.
    flagged: bool
        Marked as irregular and worth a manual review.
    flag_reason: str, optional
        Why the transaction was flagged.
    month: str, optional
        ``YYYY-MM`` grouping key; derived from ``date`` when not given.
    """

    date: date
    description: str
    amount: float
    category: TransactionCategory
    excluded: bool = False
    flagged: bool = False
    flag_reason: Optional[str] = None
    month: Optional[str] = None

    def __post_init__(self) -> None:
        self.date = parse_date(self.date)
        self.category = TransactionCategory(self.category)
        self.amount = abs(float(self.amount))
        if self.month is None:
            self.month = self.date.strftime("%Y-%m")

    @property
    def is_income(self) -> bool:
        return self.category is TransactionCategory.INCOME


@dataclass
class MonthlyBreakdown:
    month: str
    income: float = 0.0
    expenses: float = 0.0
    transaction_count: int = 0

    @property
    def net_cash_flow(self) -> float:
        return self.income - self.expenses


@dataclass
class CashFlowSummary:
    """Totals and monthly averages over the summarized months."""

    total_income: float
    total_expenses: float
    deposit_frequency: DepositFrequency
    monthly_breakdown: List[MonthlyBreakdown] = field(default_factory=list)
    flagged_transactions: List[Transaction] = field(default_factory=list)

    @property
    def net_cash_flow(self) -> float:
        return self.total_income - self.total_expenses

    @property
    def months_of_data(self) -> int:
        return max(1, len(self.monthly_breakdown))

    @property
    def monthly_income(self) -> float:
        return self.total_income / self.months_of_data

    @property
    def monthly_expenses(self) -> float:
        return self.total_expenses / self.months_of_data

    @property
    def monthly_leftover(self) -> float:
        return self.monthly_income - self.monthly_expenses


def summarize_cash_flow(
    transactions: Iterable[Transaction],
    deposit_frequency: DepositFrequency = DepositFrequency.MONTHLY,
) -> CashFlowSummary:
    """Group ``transactions`` by month and total them.

    Excluded transactions are skipped entirely. Flagged ones still count
    towards the totals and are also listed for review.
    """
    months: Dict[str, MonthlyBreakdown] = OrderedDict()
    flagged: List[Transaction] = []
    total_income = 0.0
    total_expenses = 0.0
    for txn in sorted(transactions, key=lambda t: t.date):
        if txn.excluded:
            continue
        bucket = months.setdefault(txn.month, MonthlyBreakdown(month=txn.month))
        bucket.transaction_count += 1
        if txn.is_income:
            bucket.income += txn.amount
            total_income += txn.amount
        else:
            bucket.expenses += txn.amount
            total_expenses += txn.amount
        if txn.flagged:
            flagged.append(txn)
    return CashFlowSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        deposit_frequency=DepositFrequency.parse(deposit_frequency),
        monthly_breakdown=sorted(months.values(), key=lambda b: b.month),
        flagged_transactions=flagged,
    )


def _truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def transactions_from_records(records: Any) -> List[Transaction]:
    """Build ``Transaction`` objects from JSON objects or CSV rows.

    Keys are ``date``, ``description``, ``amount``, ``category`` and the
    optional ``excluded``, ``flagged`` and ``flag_reason`` (``flagReason``).
    Every malformed record is reported in one ``ValidationError``.
    """
    if not isinstance(records, (list, tuple)):
        raise ValidationError([FieldError("transactions", "must be a list of transactions")])
    if not records:
        raise ValidationError([FieldError("transactions", "must not be empty")])
    transactions: List[Transaction] = []
    errors: List[FieldError] = []
    for i, record in enumerate(records):
        if not isinstance(record, Mapping):
            errors.append(FieldError(f"transactions[{i}]", "must be an object"))
            continue
        try:
            transactions.append(
                Transaction(
                    date=record["date"],
                    description=str(record.get("description") or ""),
                    amount=record["amount"],
                    category=str(record["category"]).strip().lower(),
                    excluded=_truthy(record.get("excluded", False)),
                    flagged=_truthy(record.get("flagged", False)),
                    flag_reason=record.get("flag_reason") or record.get("flagReason") or None,
                )
            )
        except KeyError as exc:
            errors.append(FieldError(f"transactions[{i}]", f"missing {exc.args[0]!r}"))
        except (TypeError, ValueError) as exc:
            errors.append(FieldError(f"transactions[{i}]", str(exc)))
    if errors:
        raise ValidationError(errors)
    return transactions


def read_transactions_csv(path: Union[str, Path]) -> List[Transaction]:
    """Load transactions from a CSV file with a header row."""
    with Path(path).open(newline="", encoding="utf-8") as f:
        return transactions_from_records(list(csv.DictReader(f)))
