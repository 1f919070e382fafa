from datetime import date
from decimal import Decimal

import pytest

from fincalc.utils import (
    DEPOSIT_TERM_RANGE,
    PRINCIPAL_RANGE,
    RATE_RANGE,
    TENURE_MONTHS_RANGE,
    add_months,
    check_range,
    days_in_month,
    decimal_from_str,
    month_label,
    parse_date,
    parse_year_month,
    to_decimal,
)


class TestDates:
    def test_add_months_clamps_day(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)

    def test_add_months_crosses_years(self):
        assert add_months(date(2026, 11, 15), 3) == date(2027, 2, 15)
        assert add_months(date(2026, 1, 15), 240) == date(2046, 1, 15)

    def test_days_in_month(self):
        assert days_in_month(date(2026, 2, 10)) == 28
        assert days_in_month(date(2028, 2, 10)) == 29
        assert days_in_month(date(2026, 4, 1)) == 30

    def test_month_label(self):
        assert month_label(date(2026, 10, 19)) == "Oct 2026"

    def test_parse_date(self):
        assert parse_date("2026-10-19") == date(2026, 10, 19)
        assert parse_date("2026-10") == date(2026, 10, 1)
        assert parse_year_month("2026-03-17") == date(2026, 3, 1)

    @pytest.mark.parametrize("value", ["", "2026", "2026-13", "19/10/2026", "2026-02-30"])
    def test_parse_date_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_date(value)


class TestNumbers:
    def test_decimal_from_str_strips_commas(self):
        assert decimal_from_str("5,000,000") == Decimal("5000000")
        assert decimal_from_str(" 8.5 ") == Decimal("8.5")

    def test_decimal_from_str_rejects_garbage(self):
        with pytest.raises(ValueError, match="Invalid numeric value"):
            decimal_from_str("lots")

    def test_to_decimal(self):
        assert to_decimal(8.5) == Decimal("8.5")
        assert to_decimal(0.1) == Decimal("0.1")
        assert to_decimal(20) == Decimal("20")
        assert to_decimal("1,200") == Decimal("1200")
        assert to_decimal(None) == Decimal("0")
        assert to_decimal("") == Decimal("0")

    def test_to_decimal_rejects_booleans(self):
        with pytest.raises(ValueError):
            to_decimal(True)


class TestCheckRange:
    def test_inclusive_bounds(self):
        assert check_range("rate", Decimal("0"), RATE_RANGE) == Decimal("0")
        assert check_range("rate", Decimal("100"), RATE_RANGE) == Decimal("100")
        assert check_range("term", Decimal("1"), DEPOSIT_TERM_RANGE) == Decimal("1")

    @pytest.mark.parametrize("value", ["250", "-0.5", "NaN", "Infinity"])
    def test_rate_outside_bounds(self, value):
        with pytest.raises(ValueError, match="rate must be between 0 and 100"):
            check_range("rate", Decimal(value), RATE_RANGE)

    def test_open_upper_bound(self):
        assert check_range("principal", Decimal("1e12"), PRINCIPAL_RANGE) == Decimal("1e12")
        with pytest.raises(ValueError, match="principal must be at least 0"):
            check_range("principal", Decimal("-1"), PRINCIPAL_RANGE)

    def test_months_bound(self):
        assert check_range("tenure", Decimal("1200"), TENURE_MONTHS_RANGE) == Decimal("1200")
        with pytest.raises(ValueError):
            check_range("tenure", Decimal("1300"), TENURE_MONTHS_RANGE)
