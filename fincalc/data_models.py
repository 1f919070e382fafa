"""Data models for the finance calculator.

This module defines dataclasses for the entities the engine works with: loan
terms, installment results, amortization rows, the outcome of a prepayment
simulation, deposit terms and deposit schedule rows. All of them are frozen;
each calculation builds new instances and nothing is updated in place.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import List, Union


@dataclass(frozen=True)
class LoanTerms:
    """Inputs of a loan.

    Attributes
    ----------
    principal: Decimal
        The financed amount.
    annual_rate_percent: Decimal
        Nominal annual interest rate in percent (``8.5`` means 8.5 %).
    tenure_years: Decimal
        Repayment duration in years. May be fractional, e.g. ``Decimal("1.5")``
        for eighteen months.
    """

    principal: Decimal
    annual_rate_percent: Decimal
    tenure_years: Decimal

    @property
    def monthly_rate(self) -> Decimal:
        """Monthly decimal rate; the raw percent is never used directly."""
        return self.annual_rate_percent / Decimal(1200)

    @property
    def tenure_months(self) -> Decimal:
        return self.tenure_years * 12


@dataclass(frozen=True)
class InstallmentResult:
    """Equal monthly installment (EMI) and the totals it implies.

    ``total_payment`` is ``installment * tenure_months`` and
    ``total_interest`` is ``total_payment - principal``. When the tenure is
    unbounded both totals are ``Decimal("Infinity")``.
    """

    installment: Decimal
    total_interest: Decimal
    total_payment: Decimal

    @property
    def is_unbounded(self) -> bool:
        return not self.total_payment.is_finite()


@dataclass(frozen=True)
class AmortizationRow:
    """One month of a repayment schedule.

    ``period_date`` is the start date shifted by ``period_index`` months and
    ``period_label`` is the same date rendered as ``"Feb 2026"``.
    ``payment_amount`` includes ``extra_payment_amount``.
    """

    period_index: int
    period_date: date
    period_label: str
    payment_amount: Decimal
    extra_payment_amount: Decimal
    principal_component: Decimal
    interest_component: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class PrepaymentOutcome:
    """Result of simulating a loan with extra payments.

    The baseline figures come from the closed-form installment over the
    original tenure; the revised figures come from the simulated path.
    """

    baseline_total_interest: Decimal
    revised_total_interest: Decimal
    interest_saved: Decimal
    baseline_tenure_months: Decimal
    revised_tenure_months: int
    months_saved: Decimal
    schedule: List[AmortizationRow] = field(default_factory=list)


# "maturity" or a payout frequency per year (1, 2, 4 or 12)
Payout = Union[str, int]


@dataclass(frozen=True)
class DepositTerms:
    """Inputs of a fixed deposit."""

    principal: Decimal
    annual_rate_percent: Decimal
    term_years: Decimal
    compounding_periods_per_year: int = 1
    payout: Payout = "maturity"

    @property
    def at_maturity(self) -> bool:
        return self.payout == "maturity"

    @property
    def periods_per_year(self) -> int:
        """Compounding periods at maturity, otherwise payouts per year."""
        return self.compounding_periods_per_year if self.at_maturity else int(self.payout)


@dataclass(frozen=True)
class DepositResult:
    total_amount: Decimal
    total_interest: Decimal


@dataclass(frozen=True)
class DepositScheduleRow:
    """One compounding or payout period of a deposit.

    At maturity ``running_total_amount`` is the compounded balance. With
    periodic payouts it is the principal plus the interest paid out so far.
    """

    period_index: int
    period_date: date
    period_label: str
    interest_earned: Decimal
    running_total_amount: Decimal
