"""Tests for the EMI solver and its inverse, the tenure solver."""
from decimal import Decimal

import pytest

from fincalc.engine import (
    INFINITY,
    solve_installment,
    solve_tenure_years,
    summarize_fixed_installment,
)

ZERO = Decimal("0")


class TestSolveInstallment:
    def test_home_loan(self):
        """5,000,000 at 8.5% over 20 years."""
        result = solve_installment(5000000, 8.5, 20)
        assert abs(result.installment - Decimal("43391")) <= 1
        assert abs(result.total_payment - Decimal("10413840")) < 100
        assert abs(result.total_interest - Decimal("5413840")) < 100

    def test_totals_follow_installment(self):
        result = solve_installment(Decimal("250000"), Decimal("10"), Decimal("3"))
        assert result.total_payment == result.installment * 36
        assert result.total_interest == result.total_payment - Decimal("250000")

    def test_accepts_numeric_strings(self):
        assert solve_installment("5000000", "8.5", "20") == solve_installment(5000000, 8.5, 20)

    def test_fractional_tenure(self):
        eighteen_months = solve_installment(120000, 12, Decimal("1.5"))
        one_year = solve_installment(120000, 12, 1)
        two_years = solve_installment(120000, 12, 2)
        assert two_years.installment < eighteen_months.installment < one_year.installment

    @pytest.mark.parametrize("principal,rate,tenure", [
        (0, 8.5, 20),
        (1000000, 0, 20),
        (1000000, 8.5, 0),
        (-5, 8.5, 20),
        (1000000, -1, 20),
    ])
    def test_degenerate_inputs_give_zero(self, principal, rate, tenure):
        result = solve_installment(principal, rate, tenure)
        assert (result.installment, result.total_interest, result.total_payment) == (ZERO, ZERO, ZERO)

    def test_blank_fields_give_zero(self):
        result = solve_installment("", None, 20)
        assert result.installment == ZERO

    def test_vanishing_rate_is_contained(self):
        """(1 + i)^n rounds to exactly one, so the formula divides by zero."""
        result = solve_installment(1000000, Decimal("1E-30"), 20)
        assert (result.installment, result.total_interest, result.total_payment) == (ZERO, ZERO, ZERO)

    def test_result_is_finite(self):
        result = solve_installment(Decimal("1E+12"), 99, 100)
        assert result.installment.is_finite()
        assert not result.is_unbounded


class TestSolveTenureYears:
    def test_installment_below_interest_never_repays(self):
        # monthly interest is 1,000,000 * 0.01 = 10,000
        assert solve_tenure_years(1000000, 12, 5000) == INFINITY

    def test_installment_equal_to_interest_never_repays(self):
        assert solve_tenure_years(1000000, 12, 10000) == INFINITY

    @pytest.mark.parametrize("years", [1, 5, 20, 30, Decimal("7.5")])
    def test_inverts_installment(self, years):
        installment = solve_installment(5000000, 8.5, years).installment
        solved = solve_tenure_years(5000000, 8.5, installment)
        assert abs(solved - Decimal(str(years))) <= Decimal("0.01")

    def test_rounded_to_two_places(self):
        solved = solve_tenure_years(5000000, 8.5, 50000)
        assert solved == solved.quantize(Decimal("0.01"))
        assert solved.as_tuple().exponent == -2

    @pytest.mark.parametrize("principal,rate,installment", [
        (0, 8.5, 43391),
        (5000000, 0, 43391),
        (5000000, 8.5, 0),
    ])
    def test_degenerate_inputs_give_zero(self, principal, rate, installment):
        assert solve_tenure_years(principal, rate, installment) == ZERO

    def test_vanishing_rate_is_contained(self):
        assert solve_tenure_years(1000000, Decimal("1E-30"), 5000) == ZERO


class TestSummarizeFixedInstallment:
    def test_totals_use_solved_tenure(self):
        years, result = summarize_fixed_installment(5000000, 8.5, 43391)
        assert years == Decimal("20.00")
        assert result.installment == Decimal("43391")
        assert result.total_payment == Decimal("43391") * years * 12
        assert result.total_interest == result.total_payment - 5000000

    def test_unbounded_totals(self):
        years, result = summarize_fixed_installment(1000000, 12, 5000)
        assert years == INFINITY
        assert result.is_unbounded
        assert result.total_interest == INFINITY
        assert result.installment == Decimal("5000")

    def test_degenerate_inputs(self):
        years, result = summarize_fixed_installment(1000000, 0, 5000)
        assert years == ZERO
        assert result.total_payment == ZERO
