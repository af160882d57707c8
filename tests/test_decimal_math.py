"""
Tests for Decimal Math Utilities.

Every amount in the engine is integer cents; these helpers are the only
place rates meet money, so rounding must be half-up and exact.
"""

from decimal import Decimal

import pytest

from calculator.decimal_math import (
    cents,
    dollars_to_cents,
    format_money,
    percent,
    phaseout_steps,
    ratio_of,
    round_up_to,
    to_decimal,
)


class TestDecimalConversion:
    """Tests for value conversion to Decimal."""

    def test_to_decimal_from_int(self):
        result = to_decimal(100)
        assert result == Decimal("100")
        assert isinstance(result, Decimal)

    def test_to_decimal_from_float_keeps_representation(self):
        """0.22 must not become 0.2200000000000000011102..."""
        assert to_decimal(0.22) == Decimal("0.22")

    def test_dollars_to_cents(self):
        assert dollars_to_cents(11925) == 1192500
        assert dollars_to_cents("100.10") == 10010
        assert dollars_to_cents(0.1 + 0.2) == 30


class TestRounding:
    """IRS worksheets round half-up, not to even."""

    def test_half_up_positive(self):
        assert cents(Decimal("2.5")) == 3
        assert cents(Decimal("3.5")) == 4

    def test_half_up_negative(self):
        assert cents(Decimal("-0.5")) == -1

    def test_percent_rounds_once(self):
        assert percent(1001, 0.5) == 501
        assert percent(2000000, 0.30) == 600000

    def test_percent_of_zero(self):
        assert percent(0, 0.37) == 0

    def test_ratio_of(self):
        # $1,000 x 2/3 = $666.666... -> $666.67
        assert ratio_of(100000, 2, 3) == 66667

    def test_ratio_of_zero_denominator(self):
        assert ratio_of(100000, 1, 0) == 0


class TestPhaseoutHelpers:

    @pytest.mark.parametrize("excess,step,expected", [
        (0, 100000, 0),
        (1, 100000, 1),
        (100000, 100000, 1),
        (100001, 100000, 2),
        (-500, 100000, 0),
    ])
    def test_fraction_counts_as_full_step(self, excess, step, expected):
        """'For each $1,000 or fraction thereof'"""
        assert phaseout_steps(excess, step) == expected

    def test_round_up_to_ten_dollars(self):
        assert round_up_to(470001, 1000) == 471000
        assert round_up_to(470000, 1000) == 470000
        assert round_up_to(0, 1000) == 0


class TestFormatting:

    def test_format_money(self):
        assert format_money(123456789) == "$1,234,567.89"
        assert format_money(0) == "$0.00"

    def test_format_negative_money(self):
        assert format_money(-5050) == "-$50.50"
