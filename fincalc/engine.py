"""Core calculation engine for the finance calculator.

This module implements the financial logic behind the calculator screens:

* the closed-form annuity solver (equal monthly installment, EMI),
* its inverse, which solves the tenure for a fixed installment,
* the standard month-by-month amortization schedule,
* a prepayment simulation with recurring and one-time extra payments,
* fixed-deposit growth, either compounding to maturity or paying out
  interest periodically.

Every function is pure and works in ``Decimal`` arithmetic. Degenerate inputs
(non-positive principal, rate or tenure) never raise: they produce zero
results and empty schedules. An installment that does not cover the monthly
interest produces an infinite tenure, ``Decimal("Infinity")``, which callers
must check for before asking for a schedule.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_CEILING, ROUND_FLOOR, ROUND_HALF_UP, Decimal, localcontext
from typing import List, Optional, Tuple

from .data_models import (
    AmortizationRow,
    DepositResult,
    DepositScheduleRow,
    DepositTerms,
    InstallmentResult,
    LoanTerms,
    Payout,
    PrepaymentOutcome,
)
from .utils import Number, add_months, days_in_month, month_label, to_decimal

logger = logging.getLogger(__name__)

PRECISION = 28  # significant digits for financial calculations

ZERO = Decimal(0)
INFINITY = Decimal("Infinity")
TWO_PLACES = Decimal("0.01")

PREPAYMENT_FREQUENCIES = ("daily", "monthly", "quarterly", "yearly")
COMPOUNDING_FREQUENCIES = (1, 2, 4, 12)
PAYOUT_MATURITY = "maturity"


def _is_degenerate(*values: Decimal) -> bool:
    """True when any value is non-finite or not strictly positive."""
    return any(not v.is_finite() or v <= 0 for v in values)


def _finite_or_zero(value: Decimal) -> Decimal:
    return value if value.is_finite() else ZERO


def _whole_periods(value: Decimal, rounding: str) -> int:
    return int(value.to_integral_value(rounding=rounding))


def _loan_terms(principal: Number, annual_rate_percent: Number, tenure_years: Number) -> LoanTerms:
    return LoanTerms(
        principal=to_decimal(principal),
        annual_rate_percent=to_decimal(annual_rate_percent),
        tenure_years=to_decimal(tenure_years),
    )


def _amortization_row(
    period: int,
    start_date: date,
    payment: Decimal,
    extra: Decimal,
    principal_component: Decimal,
    interest: Decimal,
    balance: Decimal,
) -> AmortizationRow:
    period_date = add_months(start_date, period)
    return AmortizationRow(
        period_index=period,
        period_date=period_date,
        period_label=month_label(period_date),
        payment_amount=payment,
        extra_payment_amount=extra,
        principal_component=principal_component,
        interest_component=interest,
        remaining_balance=balance,
    )


def _annuity_installment(principal: Decimal, rate_per_month: Decimal, months: Decimal) -> Decimal:
    """Return the annuity (equal installment) monthly payment for a loan.

    The formula is:

        payment = P * i * (1 + i)^n / ((1 + i)^n - 1)

    where ``P`` is the principal, ``i`` is the monthly interest rate and
    ``n`` is the number of payments, which may be fractional.
    """
    factor = (1 + rate_per_month) ** months
    return principal * rate_per_month * factor / (factor - 1)


def solve_installment(
    principal: Number, annual_rate_percent: Number, tenure_years: Number
) -> InstallmentResult:
    """Compute the EMI for a loan along with total interest and payment.

    Non-positive inputs return an all-zero result. If the arithmetic fails
    for extreme inputs (overflow, or a rate so small that ``(1 + i)^n``
    rounds to one) the affected figures are reported as zero.
    """
    terms = _loan_terms(principal, annual_rate_percent, tenure_years)
    if _is_degenerate(terms.principal, terms.annual_rate_percent, terms.tenure_years):
        logger.debug("Degenerate loan terms %s; returning zero installment", terms)
        return InstallmentResult(ZERO, ZERO, ZERO)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        try:
            months = terms.tenure_months
            installment = _annuity_installment(terms.principal, terms.monthly_rate, months)
            total_payment = installment * months
            total_interest = total_payment - terms.principal
        except ArithmeticError as exc:
            logger.debug("Installment arithmetic failed for %s: %r", terms, exc)
            return InstallmentResult(ZERO, ZERO, ZERO)

    return InstallmentResult(
        installment=_finite_or_zero(installment),
        total_interest=_finite_or_zero(total_interest),
        total_payment=_finite_or_zero(total_payment),
    )


def solve_tenure_years(
    principal: Number, annual_rate_percent: Number, installment: Number
) -> Decimal:
    """Return the tenure in years that a fixed installment implies.

    The result is rounded to two decimal places. When the installment does
    not exceed the first month's interest the loan never amortizes and
    ``Decimal("Infinity")`` is returned.
    """
    p = to_decimal(principal)
    rate = to_decimal(annual_rate_percent)
    emi = to_decimal(installment)
    if _is_degenerate(p, rate, emi):
        logger.debug("Degenerate tenure inputs p=%s rate=%s emi=%s", p, rate, emi)
        return ZERO

    with localcontext() as ctx:
        ctx.prec = PRECISION
        rate_per_month = rate / Decimal(1200)
        monthly_interest = p * rate_per_month
        if emi <= monthly_interest:
            return INFINITY
        try:
            months = (emi / (emi - monthly_interest)).ln() / (1 + rate_per_month).ln()
            years = (months / 12).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
        except ArithmeticError as exc:
            logger.debug("Tenure arithmetic failed for p=%s rate=%s emi=%s: %r", p, rate, emi, exc)
            return ZERO
    return _finite_or_zero(years)


def summarize_fixed_installment(
    principal: Number, annual_rate_percent: Number, installment: Number
) -> Tuple[Decimal, InstallmentResult]:
    """Totals for "solve for tenure" mode.

    Returns the solved tenure in years and an ``InstallmentResult`` whose
    totals are based on that (rounded) tenure. An infinite tenure yields
    infinite totals; a zero tenure yields an all-zero result.
    """
    emi = to_decimal(installment)
    years = solve_tenure_years(principal, annual_rate_percent, emi)
    if years == INFINITY:
        return years, InstallmentResult(emi, INFINITY, INFINITY)
    if years == ZERO:
        return years, InstallmentResult(ZERO, ZERO, ZERO)
    with localcontext() as ctx:
        ctx.prec = PRECISION
        total_payment = emi * years * 12
        total_interest = total_payment - to_decimal(principal)
    return years, InstallmentResult(emi, total_interest, total_payment)


def build_schedule(
    principal: Number,
    annual_rate_percent: Number,
    tenure_years: Number,
    installment: Number,
    start_date: Optional[date] = None,
) -> List[AmortizationRow]:
    """Compute the month-by-month amortization schedule of a fixed installment.

    Parameters
    ----------
    principal, annual_rate_percent, tenure_years:
        The loan terms. A fractional tenure is rounded up to whole months.
    installment:
        The monthly payment, usually ``solve_installment(...).installment``.
    start_date:
        The loan start; period ``i`` is dated ``i`` months later. Defaults
        to today.

    Returns
    -------
    List[AmortizationRow]
        One row per month until the balance reaches zero. The principal
        component is clamped to the remaining balance on the last period, or
        whenever the installment would overshoot it, so balances never go
        negative. The list is empty for degenerate inputs, an infinite
        tenure, or an installment that does not cover the first month's
        interest.
    """
    terms = _loan_terms(principal, annual_rate_percent, tenure_years)
    emi = to_decimal(installment)
    if _is_degenerate(terms.principal, terms.annual_rate_percent, terms.tenure_years, emi):
        return []
    start_date = start_date or date.today()

    schedule: List[AmortizationRow] = []
    with localcontext() as ctx:
        ctx.prec = PRECISION
        rate_per_month = terms.monthly_rate
        if emi <= terms.principal * rate_per_month:
            logger.debug("Installment %s does not amortize %s; no schedule", emi, terms)
            return []

        total_months = _whole_periods(terms.tenure_months, ROUND_CEILING)
        balance = terms.principal
        for period in range(1, total_months + 1):
            interest = balance * rate_per_month
            principal_payment = emi - interest
            if principal_payment > balance or period == total_months:
                principal_payment = balance
            balance -= principal_payment
            if balance < 0:
                balance = ZERO
            schedule.append(
                _amortization_row(
                    period,
                    start_date,
                    payment=principal_payment + interest,
                    extra=ZERO,
                    principal_component=principal_payment,
                    interest=interest,
                    balance=balance,
                )
            )
            if balance <= 0:
                break
    return schedule


def _prepayment_amount(value: Number) -> Decimal:
    """Non-finite and negative plans are treated as no prepayment."""
    amount = to_decimal(value)
    return amount if amount.is_finite() and amount > 0 else ZERO


def _recurring_extra(frequency: str, amount: Decimal, period: int, period_date: date) -> Decimal:
    """Extra payment due in ``period`` for a recurring prepayment plan.

    ``daily`` is a per-day amount, so it is multiplied by the number of days
    in the calendar month the period falls in.
    """
    if frequency == "monthly":
        return amount
    if frequency == "quarterly":
        return amount if period % 3 == 0 else ZERO
    if frequency == "yearly":
        return amount if period % 12 == 0 else ZERO
    # daily
    return amount * days_in_month(period_date)


def simulate_with_prepayments(
    principal: Number,
    annual_rate_percent: Number,
    tenure_years: Number,
    recurring_amount: Number = 0,
    recurring_frequency: str = "monthly",
    lump_sum_amount: Number = 0,
    lump_sum_at_month: Optional[int] = None,
    start_date: Optional[date] = None,
) -> PrepaymentOutcome:
    """Simulate a loan repaid with the regular EMI plus extra payments.

    The baseline installment and interest come from ``solve_installment``
    over the original tenure; savings are measured against that fixed
    baseline. The simulation runs at most the original number of months,
    stopping as soon as the balance is cleared. An extra payment that would
    overshoot the balance is reduced so the final period never overpays.

    Raises
    ------
    ValueError
        If ``recurring_frequency`` is not one of ``daily``, ``monthly``,
        ``quarterly`` or ``yearly``.
    """
    frequency = (recurring_frequency or "").lower()
    if frequency not in PREPAYMENT_FREQUENCIES:
        raise ValueError(
            f"Prepayment frequency must be one of {', '.join(PREPAYMENT_FREQUENCIES)}; got {recurring_frequency}"
        )
    terms = _loan_terms(principal, annual_rate_percent, tenure_years)
    baseline = solve_installment(terms.principal, terms.annual_rate_percent, terms.tenure_years)
    if baseline.installment == ZERO:
        return PrepaymentOutcome(ZERO, ZERO, ZERO, ZERO, 0, ZERO, [])
    start_date = start_date or date.today()

    recurring = _prepayment_amount(recurring_amount)
    lump_sum = _prepayment_amount(lump_sum_amount)
    emi = baseline.installment

    schedule: List[AmortizationRow] = []
    with localcontext() as ctx:
        ctx.prec = PRECISION
        rate_per_month = terms.monthly_rate
        baseline_months = terms.tenure_months
        max_months = _whole_periods(baseline_months, ROUND_CEILING)

        balance = terms.principal
        revised_interest = ZERO
        months_count = 0
        while balance > 0 and months_count < max_months:
            months_count += 1
            period_date = add_months(start_date, months_count)

            interest = balance * rate_per_month
            revised_interest += interest

            extra = _recurring_extra(frequency, recurring, months_count, period_date)
            if lump_sum_at_month is not None and months_count == lump_sum_at_month:
                extra += lump_sum

            payment = emi + extra
            principal_payment = payment - interest
            # the last permitted month clears whatever rounding left behind
            if principal_payment > balance or months_count == max_months:
                principal_payment = balance
                payment = principal_payment + interest
                extra = max(payment - emi, ZERO)

            balance -= principal_payment
            if balance <= 0:
                balance = ZERO

            schedule.append(
                _amortization_row(
                    months_count,
                    start_date,
                    payment=payment,
                    extra=extra,
                    principal_component=principal_payment,
                    interest=interest,
                    balance=balance,
                )
            )

        outcome = PrepaymentOutcome(
            baseline_total_interest=baseline.total_interest,
            revised_total_interest=revised_interest,
            interest_saved=baseline.total_interest - revised_interest,
            baseline_tenure_months=baseline_months,
            revised_tenure_months=months_count,
            months_saved=baseline_months - months_count,
            schedule=schedule,
        )
    logger.debug(
        "Prepayment simulation finished in %d of %s months, interest saved %s",
        outcome.revised_tenure_months,
        baseline_months,
        outcome.interest_saved,
    )
    return outcome


def _check_compounding(compounding_periods_per_year: int) -> int:
    try:
        periods = int(compounding_periods_per_year)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid compounding frequency: {compounding_periods_per_year}") from exc
    if periods not in COMPOUNDING_FREQUENCIES:
        raise ValueError(
            f"Compounding frequency must be one of {COMPOUNDING_FREQUENCIES}; got {compounding_periods_per_year}"
        )
    return periods


def _payout_periods(payout: Payout) -> Optional[int]:
    """Payouts per year, or ``None`` when interest stays in until maturity."""
    if payout is None or (isinstance(payout, str) and payout.strip().lower() == PAYOUT_MATURITY):
        return None
    try:
        periods = int(payout)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid payout frequency: {payout}") from exc
    if periods not in COMPOUNDING_FREQUENCIES:
        raise ValueError(
            f"Payout frequency must be '{PAYOUT_MATURITY}' or one of {COMPOUNDING_FREQUENCIES}; got {payout}"
        )
    return periods


def _deposit_terms(
    principal: Number,
    annual_rate_percent: Number,
    term_years: Number,
    compounding_periods_per_year: int,
    payout: Payout,
) -> DepositTerms:
    payouts = _payout_periods(payout)
    return DepositTerms(
        principal=to_decimal(principal),
        annual_rate_percent=to_decimal(annual_rate_percent),
        term_years=to_decimal(term_years),
        compounding_periods_per_year=_check_compounding(compounding_periods_per_year),
        payout=PAYOUT_MATURITY if payouts is None else payouts,
    )


def compute_deposit(
    principal: Number,
    annual_rate_percent: Number,
    term_years: Number,
    compounding_periods_per_year: int = 1,
    payout: Payout = PAYOUT_MATURITY,
) -> DepositResult:
    """Compute the value of a fixed deposit at the end of its term.

    At maturity the interest compounds ``compounding_periods_per_year``
    times a year:

        total = P * (1 + rate / k)^(k * t)

    With periodic payouts the interest is withdrawn every period, so each
    payout is simple interest on the original principal and the compounding
    frequency plays no part:

        total = P + P * rate / m * (m * t)
    """
    terms = _deposit_terms(principal, annual_rate_percent, term_years, compounding_periods_per_year, payout)
    p = terms.principal
    if _is_degenerate(p, terms.annual_rate_percent, terms.term_years):
        return DepositResult(ZERO, ZERO)

    with localcontext() as ctx:
        ctx.prec = PRECISION
        periods = terms.periods_per_year
        rate = terms.annual_rate_percent / 100
        try:
            if terms.at_maturity:
                total = p * (1 + rate / periods) ** (periods * terms.term_years)
            else:
                period_interest = p * rate / periods
                total = p + period_interest * (terms.term_years * periods)
            interest = total - p
        except ArithmeticError as exc:
            logger.debug("Deposit arithmetic failed for %s: %r", terms, exc)
            return DepositResult(ZERO, ZERO)
    return DepositResult(_finite_or_zero(total), _finite_or_zero(interest))


def build_deposit_schedule(
    principal: Number,
    annual_rate_percent: Number,
    term_years: Number,
    compounding_periods_per_year: int = 1,
    start_date: Optional[date] = None,
    payout: Payout = PAYOUT_MATURITY,
) -> List[DepositScheduleRow]:
    """Compute the period-by-period growth of a fixed deposit.

    At maturity there is one row per compounding period and each row earns
    interest on the running balance. With periodic payouts there is one row
    per payout, each earning interest on the original principal, and the
    running total is the principal plus the interest paid out so far. Only
    whole periods within the term produce rows. Period ``i`` is dated
    ``i * 12 / periods_per_year`` months after ``start_date``.
    """
    terms = _deposit_terms(principal, annual_rate_percent, term_years, compounding_periods_per_year, payout)
    p = terms.principal
    if _is_degenerate(p, terms.annual_rate_percent, terms.term_years):
        return []
    start_date = start_date or date.today()

    periods_per_year = terms.periods_per_year
    months_per_period = 12 // periods_per_year

    schedule: List[DepositScheduleRow] = []
    with localcontext() as ctx:
        ctx.prec = PRECISION
        period_rate = terms.annual_rate_percent / 100 / periods_per_year
        total_periods = _whole_periods(terms.term_years * periods_per_year, ROUND_FLOOR)

        balance = p
        paid_out = ZERO
        for period in range(1, total_periods + 1):
            if terms.at_maturity:
                interest = balance * period_rate
                balance += interest
                running_total = balance
            else:
                interest = p * period_rate
                paid_out += interest
                running_total = p + paid_out
            period_date = add_months(start_date, period * months_per_period)
            schedule.append(
                DepositScheduleRow(
                    period_index=period,
                    period_date=period_date,
                    period_label=month_label(period_date),
                    interest_earned=interest,
                    running_total_amount=running_total,
                )
            )
    return schedule
