"""Command-line interface for the offset loan calculator.

This module uses the ``click`` library to implement a multi-command
interface. Users can compare an offset loan against a traditional mortgage,
print either month-by-month schedule, run the traditional calculator alone or
inspect the day calendar. Results can be printed to the terminal or exported
to JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import click

from .calendar_days import DayCalendar
from .cashflow import read_transactions_csv, summarize_cash_flow
from .comparison import simulate
from .config import Settings
from .data_models import CalculationInput, DepositFrequency
from .engine import amortize
from .formatter import (
    periods_to_dicts,
    print_calendar,
    print_offset_schedule,
    print_schedule,
    print_summary,
    schedule_to_dicts,
    simulation_to_dict,
)
from .logging_config import setup_logging
from .offset import simulate_offset
from .utils import parse_amount, parse_date, parse_rate
from .validation import ValidationError, validate_input

MAX_PRINTED_ROWS = 120


def _amount(ctx, param, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_amount(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _rate(ctx, param, value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return parse_rate(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def _percent(ctx, param, value: Optional[str]) -> Optional[float]:
    """Parse a percentage such as "80", "80%" or "0.8" into a fraction."""
    if value is None:
        return None
    text = value.strip()
    percent = text.endswith("%")
    try:
        p = float(text.rstrip("%"))
    except ValueError as exc:
        raise click.BadParameter(f"Invalid percentage: {value}") from exc
    # If the user enters a number like 80, treat it as 80%
    if percent or p > 1:
        p = p / 100
    return p


def _date(ctx, param, value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc


def loan_options(func: Callable) -> Callable:
    """Attach the options describing one offset loan scenario."""
    options = [
        click.option("--balance", "-b", "balance", required=True, callback=_amount, help="Loan balance (e.g. 650k)"),
        click.option("--rate", "-r", "rate", required=True, callback=_rate, help="Offset loan annual rate (8.201 or 0.08201)"),
        click.option("--traditional-rate", "traditional_rate", callback=_rate, help="Traditional mortgage rate; defaults to --rate"),
        click.option("--property-value", "-v", "property_value", required=True, callback=_amount, help="Property value"),
        click.option("--ltv", "loan_to_value", default="0.8", show_default=True, callback=_percent, help="Loan-to-value limit"),
        click.option("--income", "-i", "income", callback=_amount, help="Monthly income"),
        click.option("--expenses", "-e", "expenses", callback=_amount, help="Monthly expenses"),
        click.option(
            "--transactions",
            "transactions",
            type=click.Path(exists=True, dir_okay=False),
            help="CSV of statement lines (date,description,amount,category) to average income and expenses from",
        ),
        click.option(
            "--frequency",
            "frequency",
            type=click.Choice([f.value for f in DepositFrequency]),
            default=DepositFrequency.MONTHLY.value,
            show_default=True,
            help="Deposit frequency",
        ),
        click.option("--start-date", "-s", "start_date", callback=_date, help="Start date (YYYY-MM-DD); defaults to today"),
        click.option("--term", "-t", "term", type=int, help="Traditional term in months"),
        click.option("--additional-principal", "additional_principal", default="0", callback=_amount, help="Extra monthly principal"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_input_from_options(
    balance: float,
    rate: float,
    traditional_rate: Optional[float],
    property_value: float,
    loan_to_value: float,
    income: Optional[float],
    expenses: Optional[float],
    frequency: str,
    start_date: Optional[date],
    term: Optional[int],
    additional_principal: float,
    transactions: Optional[str] = None,
    default_term: int = 360,
) -> CalculationInput:
    if transactions is not None:
        if income is not None or expenses is not None:
            raise click.UsageError("Use either --transactions or --income/--expenses, not both")
        try:
            summary = summarize_cash_flow(read_transactions_csv(transactions), DepositFrequency.parse(frequency))
        except ValidationError as exc:
            raise click.BadParameter(
                "; ".join(f"{e.field} {e.message}" for e in exc.errors), param_hint="--transactions"
            ) from exc
        income, expenses = summary.monthly_income, summary.monthly_expenses
    elif income is None or expenses is None:
        raise click.UsageError("Provide --income and --expenses, or --transactions")
    data = CalculationInput(
        starting_balance=balance,
        interest_rate=rate,
        property_value=property_value,
        loan_to_value=loan_to_value,
        monthly_income=income,
        monthly_expenses=expenses,
        deposit_frequency=DepositFrequency.parse(frequency),
        start_date=start_date or date.today(),
        traditional_rate=traditional_rate,
        term_months=term if term is not None else default_term,
        additional_principal=additional_principal or 0.0,
    )
    try:
        return validate_input(data)
    except ValidationError as exc:
        raise click.BadParameter("; ".join(f"{e.field} {e.message}" for e in exc.errors)) from exc


def export_to_json(path: Path, data: Dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, rows: List[Dict[str, Any]]) -> None:
    """Write ``rows`` (dicts sharing the same keys) to a CSV file."""
    with path.open("w", newline="", encoding="utf-8") as f:
        if not rows:
            return
        writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
        writer.writeheader()
        writer.writerows(rows)


def _export_rows(output: str, summary: Dict[str, Any], rows: List[Dict[str, Any]]) -> None:
    path = Path(output)
    if path.suffix.lower() == ".json":
        export_to_json(path, {"summary": summary, "schedule": rows})
    elif path.suffix.lower() == ".csv":
        export_to_csv(path, rows)
    else:
        raise click.BadParameter("Unsupported output format; use .json or .csv")
    click.echo(f"Schedule exported to {path}")


def _print_rows(rows: List[Any], printer: Callable[[List[Any]], None]) -> None:
    # Limit schedule length printed to avoid flooding the terminal
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    printer(rows)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Compare an offset (cash-offset line of credit) loan with a traditional mortgage."""
    try:
        settings = Settings()
    except ValueError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(settings)
    ctx.obj = settings


@cli.command(name="simulate")
@loan_options
@click.option("--output", "output", type=str, help="Output file path (.json)")
@click.pass_obj
def simulate_command(settings: Settings, output: Optional[str], **options: Any) -> None:
    """Run both calculators and print the savings."""
    data = build_input_from_options(**options, default_term=settings.TERM_MONTHS)
    result = simulate(data, **settings.simulation_options())
    if output:
        path = Path(output)
        if path.suffix.lower() != ".json":
            raise click.BadParameter("Simulation export must use .json extension")
        export_to_json(path, simulation_to_dict(result))
        click.echo(f"Simulation exported to {path}")
    else:
        print_summary(result)


@cli.command()
@loan_options
@click.option(
    "--loan",
    "loan",
    type=click.Choice(["offset", "traditional"]),
    default="offset",
    show_default=True,
    help="Which loan's schedule to show",
)
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.pass_obj
def schedule(settings: Settings, loan: str, output: Optional[str], **options: Any) -> None:
    """Compute and print a month-by-month schedule."""
    data = build_input_from_options(**options, default_term=settings.TERM_MONTHS)
    if loan == "offset":
        result = simulate_offset(
            data,
            horizon_days=settings.HORIZON_DAYS,
            max_months=settings.MAX_MONTHS,
            grace_months=settings.GRACE_MONTHS,
        )
        summary = {
            "status": result.status.value,
            "months_to_payoff": result.months_to_payoff,
            "months_simulated": result.months_simulated,
            "total_interest_paid": round(result.total_interest_paid, 2),
            "payoff_date": result.payoff_date.isoformat() if result.payoff_date else None,
            "effective_principal": round(result.effective_principal, 2),
            "credit_limit_exceeded_month": result.credit_limit_exceeded_month,
        }
        if output:
            _export_rows(output, summary, periods_to_dicts(result.periods))
        else:
            _print_rows(result.periods, print_offset_schedule)
            click.echo(f"Status: {result.status.value}, total interest {result.total_interest_paid:.2f}")
    else:
        result = amortize(
            data.starting_balance,
            data.comparison_rate,
            data.term_months,
            start_date=data.start_date,
            with_schedule=True,
        )
        summary = {
            "monthly_payment": round(result.monthly_payment, 2),
            "total_interest_paid": round(result.total_interest_paid, 2),
            "months_to_payoff": result.months_to_payoff,
        }
        if output:
            _export_rows(output, summary, schedule_to_dicts(result.schedule))
        else:
            _print_rows(result.schedule, print_schedule)


@cli.command(name="amortize")
@click.option("--principal", "-p", "principal", required=True, callback=_amount, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, callback=_rate, help="Annual interest rate (6.5 or 0.065)")
@click.option("--term", "-t", "term", type=int, default=360, show_default=True, help="Loan term in months")
def amortize_command(principal: float, rate: float, term: int) -> None:
    """Run the traditional amortization calculator only."""
    if principal <= 0:
        raise click.BadParameter("Principal must be positive", param_hint="--principal")
    if term <= 0:
        raise click.BadParameter("Term must be positive", param_hint="--term")
    if not 0 <= rate < 1:
        raise click.BadParameter("Rate must be between 0 and 100%", param_hint="--rate")
    result = amortize(principal, rate, term)
    click.echo(f"Monthly payment    : {result.monthly_payment:.2f}")
    click.echo(f"Total interest     : {result.total_interest_paid:.2f}")
    click.echo(f"Months to payoff   : {result.months_to_payoff}")


@cli.command(name="calendar")
@click.option("--start-date", "-s", "start_date", required=True, callback=_date, help="First day (YYYY-MM-DD)")
@click.option("--days", "-n", "days", type=click.IntRange(min=1), default=31, show_default=True, help="Number of days")
def calendar_command(start_date: date, days: int) -> None:
    """Print generated calendar days."""
    print_calendar(DayCalendar(start_date, days).days)


if __name__ == "__main__":
    cli()
