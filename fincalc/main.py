"""Command‑line interface for the finance calculator.

This module uses the ``click`` library to implement a multi‑command
interface. Users can compute the EMI of a loan, solve the tenure for a fixed
installment, measure the effect of prepayments and project the growth of a
fixed deposit. Results can be printed to the terminal or exported to
JSON/CSV files.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import click

from .data_models import (
    AmortizationRow,
    DepositResult,
    DepositScheduleRow,
    InstallmentResult,
    PrepaymentOutcome,
)
from .engine import (
    COMPOUNDING_FREQUENCIES,
    PAYOUT_MATURITY,
    PREPAYMENT_FREQUENCIES,
    build_deposit_schedule,
    build_schedule,
    compute_deposit,
    simulate_with_prepayments,
    solve_installment,
    summarize_fixed_installment,
)
from .formatter import (
    print_deposit_schedule,
    print_deposit_summary,
    print_installment_summary,
    print_prepayment_summary,
    print_schedule,
)
from .utils import (
    DEPOSIT_TERM_RANGE,
    INSTALLMENT_RANGE,
    PRINCIPAL_RANGE,
    RATE_RANGE,
    TENURE_MONTHS_RANGE,
    TENURE_YEARS_RANGE,
    check_range,
    decimal_from_str,
    parse_date,
)

logger = logging.getLogger(__name__)

MAX_PRINTED_ROWS = 120


def parse_amount(value: str) -> Decimal:
    """Parse a numeric string with optional suffixes.

    Accepts plain numbers ("500000"), thousands separators ("5,00,000") and
    shorthand with ``k``/``m`` suffixes (e.g., "500k" meaning 500_000).
    """
    value = str(value).strip().lower().replace(",", "")
    factor = Decimal(1)
    if value.endswith("k"):
        factor = Decimal(1_000)
        value = value[:-1]
    elif value.endswith("m"):
        factor = Decimal(1_000_000)
        value = value[:-1]
    try:
        return decimal_from_str(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def parse_start_date(value: Optional[str]) -> date:
    if not value:
        return date.today()
    try:
        return parse_date(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def checked(name: str, value: Decimal, bounds) -> Decimal:
    try:
        return check_range(name, value, bounds)
    except ValueError as exc:
        raise click.BadParameter(str(exc))


def parse_principal(value: str) -> Decimal:
    return checked("principal", parse_amount(value), PRINCIPAL_RANGE)


def tenure_in_years(tenure: float, in_months: bool) -> Decimal:
    """Convert the ``--tenure`` option to years.

    The bound applies in the unit the user typed: 0.1 to 100 years or 0.1
    to 1200 months.
    """
    value = decimal_from_str(str(tenure))
    if in_months:
        return checked("tenure (months)", value, TENURE_MONTHS_RANGE) / 12
    return checked("tenure (years)", value, TENURE_YEARS_RANGE)


def json_number(value: Decimal) -> Optional[float]:
    """Float for JSON output; unbounded figures become ``None``."""
    return float(value) if value.is_finite() else None


def installment_summary(result: InstallmentResult, tenure_years: Decimal) -> Dict[str, Any]:
    return {
        "installment": json_number(result.installment),
        "tenure_years": json_number(tenure_years),
        "total_interest": json_number(result.total_interest),
        "total_payment": json_number(result.total_payment),
        "unbounded": result.is_unbounded,
    }


def prepayment_summary(outcome: PrepaymentOutcome) -> Dict[str, Any]:
    return {
        "baseline_total_interest": float(outcome.baseline_total_interest),
        "revised_total_interest": float(outcome.revised_total_interest),
        "interest_saved": float(outcome.interest_saved),
        "baseline_tenure_months": float(outcome.baseline_tenure_months),
        "revised_tenure_months": outcome.revised_tenure_months,
        "months_saved": float(outcome.months_saved),
    }


def deposit_summary(result: DepositResult, principal: Decimal) -> Dict[str, Any]:
    return {
        "principal": float(principal),
        "total_amount": float(result.total_amount),
        "total_interest": float(result.total_interest),
    }


def serialize_schedule(schedule: Iterable[AmortizationRow]) -> List[Dict[str, Any]]:
    """Convert amortization rows into JSON-serialisable dictionaries."""
    return [
        {
            "month": row.period_index,
            "date": row.period_date.isoformat(),
            "label": row.period_label,
            "payment": float(row.payment_amount),
            "extra_payment": float(row.extra_payment_amount),
            "principal": float(row.principal_component),
            "interest": float(row.interest_component),
            "balance": float(row.remaining_balance),
        }
        for row in schedule
    ]


def serialize_deposit_schedule(schedule: Iterable[DepositScheduleRow]) -> List[Dict[str, Any]]:
    return [
        {
            "period": row.period_index,
            "date": row.period_date.isoformat(),
            "label": row.period_label,
            "interest_earned": float(row.interest_earned),
            "total_amount": float(row.running_total_amount),
        }
        for row in schedule
    ]


def serialize_balance_comparison(
    standard: List[AmortizationRow], revised: List[AmortizationRow]
) -> List[Dict[str, Any]]:
    """Pair the plain schedule's balances with the prepaid schedule's.

    One entry per month of the plain schedule; once the prepaid loan is
    closed its balance stays at zero.
    """
    revised_by_month = {row.period_index: row.remaining_balance for row in revised}
    return [
        {
            "month": row.period_index,
            "label": row.period_label,
            "standard_balance": float(row.remaining_balance),
            "prepayment_balance": float(revised_by_month.get(row.period_index, Decimal(0))),
        }
        for row in standard
    ]


def export_to_json(
    path: Path,
    summary: Dict[str, Any],
    schedule: List[Dict[str, Any]],
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Export summary and schedule to a JSON file."""
    payload = {"summary": summary, "schedule": schedule}
    payload.update(extra or {})
    with path.open("w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)


def export_to_csv(path: Path, schedule: List[Dict[str, Any]]) -> None:
    """Export schedule rows to a CSV file, one column per field."""
    with path.open("w", newline="", encoding="utf-8") as f:
        if not schedule:
            return
        writer = csv.DictWriter(f, fieldnames=list(schedule[0].keys()))
        writer.writeheader()
        writer.writerows(schedule)


def write_output(
    output: str,
    summary: Dict[str, Any],
    schedule: List[Dict[str, Any]],
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    path = Path(output)
    suffix = path.suffix.lower()
    if suffix == ".json":
        export_to_json(path, summary, schedule, extra)
    elif suffix == ".csv":
        export_to_csv(path, schedule)
    else:
        raise click.BadParameter("Unsupported output format; use .json or .csv")
    logger.debug("Wrote %d schedule rows to %s", len(schedule), path)
    click.echo(f"Results exported to {path}")


def _echo_truncated(rows: list, printer) -> None:
    # Limit schedule length printed to avoid flooding the terminal
    if len(rows) > MAX_PRINTED_ROWS:
        click.echo(f"Schedule has {len(rows)} rows; showing first {MAX_PRINTED_ROWS} rows.")
        rows = rows[:MAX_PRINTED_ROWS]
    printer(rows)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log engine fallbacks and diagnostics")
def cli(verbose: bool) -> None:
    """A command‑line calculator for loan EMIs, prepayments and fixed deposits."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=click.FloatRange(0, 100), help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", required=True, type=float, help="Loan tenure (years, or months with --months)")
@click.option("--months", "in_months", is_flag=True, help="Interpret --tenure as months")
@click.option("--start-date", "-s", "start_date", help="Loan start date (YYYY-MM-DD or YYYY-MM)")
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the amortization schedule")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def emi(
    principal: str,
    rate: float,
    tenure: float,
    in_months: bool,
    start_date: Optional[str],
    show_schedule: bool,
    output: Optional[str],
) -> None:
    """Compute the monthly installment (EMI) for a loan."""
    principal_value = parse_principal(principal)
    rate_value = checked("rate", decimal_from_str(str(rate)), RATE_RANGE)
    years = tenure_in_years(tenure, in_months)
    start = parse_start_date(start_date)

    result = solve_installment(principal_value, rate_value, years)
    rows = build_schedule(principal_value, rate_value, years, result.installment, start)
    if output:
        write_output(output, installment_summary(result, years), serialize_schedule(rows))
        return
    print_installment_summary(result, years)
    if show_schedule:
        _echo_truncated(rows, print_schedule)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=click.FloatRange(0, 100), help="Annual interest rate (percent)")
@click.option("--installment", "-i", "installment", required=True, help="Fixed monthly installment")
@click.option("--start-date", "-s", "start_date", help="Loan start date (YYYY-MM-DD or YYYY-MM)")
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the amortization schedule")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def tenure(
    principal: str,
    rate: float,
    installment: str,
    start_date: Optional[str],
    show_schedule: bool,
    output: Optional[str],
) -> None:
    """Solve how long a fixed installment takes to repay a loan."""
    principal_value = parse_principal(principal)
    rate_value = checked("rate", decimal_from_str(str(rate)), RATE_RANGE)
    emi_value = checked("installment", parse_amount(installment), INSTALLMENT_RANGE)
    start = parse_start_date(start_date)

    years, result = summarize_fixed_installment(principal_value, rate_value, emi_value)
    rows: List[AmortizationRow] = []
    if not result.is_unbounded:
        rows = build_schedule(principal_value, rate_value, years, emi_value, start)
    if output:
        write_output(output, installment_summary(result, years), serialize_schedule(rows))
        return
    print_installment_summary(result, years)
    if result.is_unbounded:
        click.echo("The installment does not cover the monthly interest; the loan is never repaid.")
    elif show_schedule:
        _echo_truncated(rows, print_schedule)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Loan amount")
@click.option("--rate", "-r", "rate", required=True, type=click.FloatRange(0, 100), help="Annual interest rate (percent)")
@click.option("--tenure", "-t", "tenure", type=float, help="Loan tenure (years, or months with --months)")
@click.option("--installment", "-i", "installment", help="Fixed monthly installment, instead of --tenure")
@click.option("--months", "in_months", is_flag=True, help="Interpret --tenure as months")
@click.option("--recurring", "recurring", default="0", help="Recurring prepayment amount")
@click.option(
    "--frequency",
    "frequency",
    type=click.Choice(PREPAYMENT_FREQUENCIES),
    default="monthly",
    help="Recurring prepayment cadence; 'daily' amounts are per calendar day",
)
@click.option("--lump-sum", "lump_sum", default="0", help="One-time prepayment amount")
@click.option("--lump-sum-month", "lump_sum_month", type=int, default=12, help="Month in which the lump sum is paid")
@click.option("--start-date", "-s", "start_date", help="Loan start date (YYYY-MM-DD or YYYY-MM)")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def prepayment(
    principal: str,
    rate: float,
    tenure: Optional[float],
    installment: Optional[str],
    in_months: bool,
    recurring: str,
    frequency: str,
    lump_sum: str,
    lump_sum_month: int,
    start_date: Optional[str],
    output: Optional[str],
) -> None:
    """Show how much interest and time prepayments save.

    The loan is described either by ``--tenure`` or by a fixed
    ``--installment``; in the latter case the tenure is solved first.
    """
    if (tenure is None) == (installment is None):
        raise click.UsageError("Give exactly one of --tenure or --installment")
    principal_value = parse_principal(principal)
    rate_value = checked("rate", decimal_from_str(str(rate)), RATE_RANGE)
    start = parse_start_date(start_date)
    if installment is not None:
        years, fixed = summarize_fixed_installment(
            principal_value, rate_value, checked("installment", parse_amount(installment), INSTALLMENT_RANGE)
        )
        if fixed.is_unbounded:
            if output:
                write_output(output, installment_summary(fixed, years), [])
                return
            print_installment_summary(fixed, years)
            click.echo("The installment does not cover the monthly interest; the loan is never repaid.")
            return
    else:
        years = tenure_in_years(tenure, in_months)
    outcome = simulate_with_prepayments(
        principal_value,
        rate_value,
        years,
        recurring_amount=parse_amount(recurring),
        recurring_frequency=frequency,
        lump_sum_amount=parse_amount(lump_sum),
        lump_sum_at_month=lump_sum_month,
        start_date=start,
    )
    if output:
        standard = build_schedule(
            principal_value, rate_value, years, solve_installment(principal_value, rate_value, years).installment, start
        )
        comparison = serialize_balance_comparison(standard, outcome.schedule)
        write_output(
            output, prepayment_summary(outcome), serialize_schedule(outcome.schedule), {"comparison": comparison}
        )
        return
    print_prepayment_summary(outcome)
    _echo_truncated(outcome.schedule, print_schedule)


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Deposit amount")
@click.option("--rate", "-r", "rate", required=True, type=click.FloatRange(0, 100), help="Annual interest rate (percent)")
@click.option("--term", "-t", "term", required=True, type=click.FloatRange(1, 100), help="Deposit term in years")
@click.option(
    "--compounding",
    "compounding",
    type=click.Choice([str(k) for k in COMPOUNDING_FREQUENCIES]),
    default="4",
    help="Compounding periods per year",
)
@click.option(
    "--payout",
    "payout",
    type=click.Choice([PAYOUT_MATURITY] + [str(k) for k in COMPOUNDING_FREQUENCIES]),
    default=PAYOUT_MATURITY,
    help="Pay interest at maturity or this many times a year",
)
@click.option("--start-date", "-s", "start_date", help="Deposit start date (YYYY-MM-DD or YYYY-MM)")
@click.option("--schedule", "show_schedule", is_flag=True, help="Print the growth schedule")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def deposit(
    principal: str,
    rate: float,
    term: float,
    compounding: str,
    payout: str,
    start_date: Optional[str],
    show_schedule: bool,
    output: Optional[str],
) -> None:
    """Project the growth of a fixed deposit."""
    principal_value = parse_principal(principal)
    rate_value = checked("rate", decimal_from_str(str(rate)), RATE_RANGE)
    years = checked("term", decimal_from_str(str(term)), DEPOSIT_TERM_RANGE)
    result = compute_deposit(principal_value, rate_value, years, int(compounding), payout)
    rows = build_deposit_schedule(
        principal_value, rate_value, years, int(compounding), parse_start_date(start_date), payout
    )
    if output:
        write_output(output, deposit_summary(result, principal_value), serialize_deposit_schedule(rows))
        return
    print_deposit_summary(result, principal_value)
    if show_schedule:
        _echo_truncated(rows, print_deposit_schedule)


if __name__ == "__main__":
    cli()
