"""Tests for residency apportionment of part-year and nonresident state returns."""

import pytest

from calculator.apportionment import (
    apportion,
    compute_apportionment_ratio,
    days_in_year,
    is_leap_year,
    residency_days,
)
from models import ResidencyType, StateReturnConfig


def part_year(move_in=None, move_out=None) -> StateReturnConfig:
    return StateReturnConfig(state_code="CA", residency_type=ResidencyType.PART_YEAR,
                             move_in_date=move_in, move_out_date=move_out)


class TestResidencyRatio:

    def test_full_year(self):
        assert compute_apportionment_ratio(StateReturnConfig(state_code="ca"), 2025) == 1.0

    def test_nonresident(self):
        config = StateReturnConfig(state_code="NY", residency_type=ResidencyType.NONRESIDENT)
        assert compute_apportionment_ratio(config, 2025) == 0.0

    def test_moved_in_july_first(self):
        config = part_year(move_in="2025-07-01")
        assert residency_days(config, 2025) == 184
        assert compute_apportionment_ratio(config, 2025) == pytest.approx(184 / 365)

    def test_moved_out(self):
        assert residency_days(part_year(move_out="2025-01-31"), 2025) == 31

    def test_window_inside_year(self):
        assert residency_days(part_year("2025-03-01", "2025-03-31"), 2025) == 31

    def test_leap_year_denominator(self):
        config = part_year(move_in="2024-07-01")
        assert compute_apportionment_ratio(config, 2024) == pytest.approx(184 / 366)

    def test_inverted_window_is_zero(self):
        config = part_year("2025-09-01", "2025-03-01")
        assert residency_days(config, 2025) == 0
        assert compute_apportionment_ratio(config, 2025) == 0.0

    def test_dates_outside_year_are_clamped(self):
        assert residency_days(part_year("2024-06-01", "2026-06-01"), 2025) == 365

    def test_unparseable_date_uses_year_boundary(self):
        assert residency_days(part_year(move_in="not-a-date"), 2025) == 365


class TestCalendar:

    @pytest.mark.parametrize("year,leap", [(2024, True), (2025, False), (1900, False), (2000, True)])
    def test_leap_years(self, year, leap):
        assert is_leap_year(year) is leap
        assert days_in_year(year) == (366 if leap else 365)


class TestApportion:

    def test_full_ratio_unchanged(self):
        assert apportion(123_457, 1.0) == 123_457

    def test_half(self):
        assert apportion(100_001, 0.5) == 50_001

    def test_zero(self):
        assert apportion(100_000, 0.0) == 0
