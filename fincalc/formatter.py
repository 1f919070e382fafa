"""Output helpers for the finance calculator.

This module renders installment summaries, prepayment savings, deposit
results and their schedules as plain text tables. Unbounded figures (a loan
whose installment never covers the interest) are shown as ``never`` rather
than formatted as numbers.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from .data_models import (
    AmortizationRow,
    DepositResult,
    DepositScheduleRow,
    InstallmentResult,
    PrepaymentOutcome,
)


def format_amount(value: Decimal) -> str:
    if not value.is_finite():
        return "never"
    return f"{value:,.2f}"


def print_installment_summary(result: InstallmentResult, tenure_years: Decimal) -> None:
    """Print the EMI, tenure and totals of a loan."""
    print("Summary")
    print("-" * 72)
    print(f"Monthly installment : {format_amount(result.installment)}")
    if tenure_years.is_finite():
        print(f"Tenure (years)      : {tenure_years:.2f}")
    else:
        print("Tenure (years)      : never paid off")
    print(f"Total interest      : {format_amount(result.total_interest)}")
    print(f"Total payment       : {format_amount(result.total_payment)}")
    print("-" * 72)


def print_prepayment_summary(outcome: PrepaymentOutcome) -> None:
    print("Prepayment impact")
    print("-" * 72)
    print(f"Baseline interest   : {format_amount(outcome.baseline_total_interest)}")
    print(f"Revised interest    : {format_amount(outcome.revised_total_interest)}")
    print(f"Interest saved      : {format_amount(outcome.interest_saved)}")
    print(f"Baseline tenure     : {outcome.baseline_tenure_months:.0f} months")
    print(f"Revised tenure      : {outcome.revised_tenure_months} months")
    print(f"Term reduction      : {outcome.months_saved:.0f} months")
    print("-" * 72)


def print_schedule(schedule: Iterable[AmortizationRow]) -> None:
    """Print an amortization schedule as a simple tab separated table."""
    headers = ["Month", "Date", "Payment", "Extra", "Principal", "Interest", "Balance"]
    print("\t".join(headers))
    for row in schedule:
        print(
            "\t".join(
                [
                    str(row.period_index),
                    row.period_label,
                    f"{row.payment_amount:.2f}",
                    f"{row.extra_payment_amount:.2f}",
                    f"{row.principal_component:.2f}",
                    f"{row.interest_component:.2f}",
                    f"{row.remaining_balance:.2f}",
                ]
            )
        )


def print_deposit_summary(result: DepositResult, principal: Decimal) -> None:
    print("Deposit")
    print("-" * 72)
    print(f"Principal           : {format_amount(principal)}")
    print(f"Total interest      : {format_amount(result.total_interest)}")
    print(f"Maturity amount     : {format_amount(result.total_amount)}")
    print("-" * 72)


def print_deposit_schedule(schedule: Iterable[DepositScheduleRow]) -> None:
    print("\t".join(["Period", "Date", "Interest", "Total"]))
    for row in schedule:
        print(
            "\t".join(
                [
                    str(row.period_index),
                    row.period_label,
                    f"{row.interest_earned:.2f}",
                    f"{row.running_total_amount:.2f}",
                ]
            )
        )
