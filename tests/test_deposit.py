"""Tests for fixed-deposit growth at maturity and with periodic payouts."""
from datetime import date
from decimal import Decimal

import pytest

from fincalc.engine import build_deposit_schedule, compute_deposit

START = date(2026, 1, 31)
ZERO = Decimal("0")


class TestComputeDeposit:
    def test_quarterly_compounding(self):
        """50,000 at 7.5% for 5 years, compounded quarterly: 50000 * 1.01875^20."""
        result = compute_deposit(50000, 7.5, 5, 4, "maturity")
        assert abs(result.total_amount - Decimal("72497.4")) < 1
        assert result.total_interest == result.total_amount - 50000

    def test_annual_compounding(self):
        result = compute_deposit(100000, 10, 2, 1)
        assert result.total_amount == Decimal("121000")
        assert result.total_interest == Decimal("21000")

    def test_more_frequent_compounding_earns_more(self):
        totals = [compute_deposit(100000, 8, 5, k).total_amount for k in (1, 2, 4, 12)]
        assert totals == sorted(totals)
        assert len(set(totals)) == 4

    def test_periodic_payout_is_simple_interest(self):
        result = compute_deposit(100000, 6, 2, 4, payout=12)
        assert result.total_interest == Decimal("12000")
        assert result.total_amount == Decimal("112000")

    def test_periodic_payout_ignores_compounding(self):
        quarterly = compute_deposit(100000, 6, 2, 4, payout=4)
        monthly = compute_deposit(100000, 6, 2, 12, payout=4)
        assert quarterly == monthly

    def test_payout_accepts_strings(self):
        assert compute_deposit(100000, 6, 2, 4, payout="12") == compute_deposit(100000, 6, 2, 4, payout=12)
        assert compute_deposit(100000, 6, 2, 4, payout="Maturity") == compute_deposit(100000, 6, 2, 4)

    @pytest.mark.parametrize("principal,rate,term", [
        (0, 7.5, 5),
        (50000, 0, 5),
        (50000, 7.5, 0),
    ])
    def test_degenerate_inputs_give_zero(self, principal, rate, term):
        result = compute_deposit(principal, rate, term, 4)
        assert (result.total_amount, result.total_interest) == (ZERO, ZERO)

    def test_unsupported_compounding(self):
        with pytest.raises(ValueError, match="Compounding"):
            compute_deposit(50000, 7.5, 5, 3)

    @pytest.mark.parametrize("payout", ["weekly", 6, "0"])
    def test_unsupported_payout(self, payout):
        with pytest.raises(ValueError, match="[Pp]ayout"):
            compute_deposit(50000, 7.5, 5, 4, payout=payout)


class TestBuildDepositSchedule:
    def test_maturity_compounds_on_running_balance(self):
        schedule = build_deposit_schedule(50000, 7.5, 5, 4, START)
        assert len(schedule) == 20
        interest = [row.interest_earned for row in schedule]
        assert interest == sorted(interest)
        assert interest[0] == Decimal("937.5")
        assert schedule[0].running_total_amount == Decimal("50937.5")

    def test_maturity_ends_at_total(self):
        schedule = build_deposit_schedule(50000, 7.5, 5, 4, START)
        total = compute_deposit(50000, 7.5, 5, 4).total_amount
        assert abs(schedule[-1].running_total_amount - total) < Decimal("0.0001")

    def test_periodic_payout_on_original_principal(self):
        schedule = build_deposit_schedule(100000, 6, 2, 4, START, payout=12)
        assert len(schedule) == 24
        for row in schedule:
            assert row.interest_earned == Decimal("500")
            assert row.running_total_amount == 100000 + 500 * row.period_index

    def test_periodic_payout_uses_payout_cadence(self):
        schedule = build_deposit_schedule(100000, 6, 2, 12, START, payout=2)
        assert len(schedule) == 4
        assert schedule[0].interest_earned == Decimal("3000")
        assert schedule[0].period_date == date(2026, 7, 31)

    def test_quarterly_dates(self):
        schedule = build_deposit_schedule(50000, 7.5, 1, 4, START)
        assert [row.period_date for row in schedule] == [
            date(2026, 4, 30),
            date(2026, 7, 31),
            date(2026, 10, 31),
            date(2027, 1, 31),
        ]
        assert schedule[0].period_label == "Apr 2026"

    def test_monthly_dates_clamp_to_month_end(self):
        schedule = build_deposit_schedule(50000, 7.5, 1, 12, START)
        assert schedule[0].period_date == date(2026, 2, 28)
        assert schedule[1].period_date == date(2026, 3, 31)

    @pytest.mark.parametrize("term,compounding,rows", [
        (Decimal("2.5"), 12, 30),
        (Decimal("1.3"), 4, 5),
        (Decimal("0.4"), 1, 0),
    ])
    def test_only_whole_periods(self, term, compounding, rows):
        assert len(build_deposit_schedule(50000, 7.5, term, compounding, START)) == rows

    def test_running_totals_are_positive(self):
        for payout in ("maturity", 1, 2, 4, 12):
            schedule = build_deposit_schedule(50000, 7.5, 5, 4, START, payout=payout)
            assert all(row.running_total_amount > 0 for row in schedule)

    def test_degenerate_inputs_give_empty_schedule(self):
        assert build_deposit_schedule(0, 7.5, 5, 4, START) == []
        assert build_deposit_schedule(50000, 7.5, -1, 4, START, payout=12) == []
