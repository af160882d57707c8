"""
Tests for progressive bracket tax and the Qualified Dividends and Capital
Gain Tax Worksheet.

2025 single brackets: 10% to $11,925, 12% to $48,475, 22% to $103,350.
2025 MFJ brackets: 10% to $23,850, 12% to $96,950, 22% to $206,700.
"""

import math

import pytest

from calculator.brackets import (
    Bracket,
    compute_bracket_tax,
    compute_qdcg_tax,
    compute_tax_with_preferential_rates,
    marginal_rate,
    net_capital_gain_for_worksheet,
)
from calculator.errors import BracketTableError
from calculator.tax_year_config import TaxYearConfig
from models import FilingStatus


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def test_zero_income_has_zero_tax(config):
    assert compute_bracket_tax(0, config.brackets_for(FilingStatus.SINGLE)) == 0


def test_negative_income_has_zero_tax(config):
    assert compute_bracket_tax(-500000, config.brackets_for(FilingStatus.SINGLE)) == 0


def test_single_first_bracket_only(config):
    # $10,000 x 10%
    assert compute_bracket_tax(1_000_000, config.brackets_for(FilingStatus.SINGLE)) == 100_000


def test_single_50000(config):
    # 1,192.50 + 4,386.00 + 22% x 1,525 = 5,914.00
    assert compute_bracket_tax(5_000_000, config.brackets_for(FilingStatus.SINGLE)) == 591_400


def test_single_100000(config):
    # 1,192.50 + 4,386.00 + 22% x 51,525 = 16,914.00
    assert compute_bracket_tax(10_000_000, config.brackets_for(FilingStatus.SINGLE)) == 1_691_400


def test_married_joint_100000(config):
    # 2,385.00 + 8,772.00 + 22% x 3,050 = 11,828.00
    assert compute_bracket_tax(10_000_000, config.brackets_for(FilingStatus.MARRIED_JOINT)) == 1_182_800


def test_qualifying_widow_uses_joint_brackets(config):
    assert config.brackets_for(FilingStatus.QUALIFYING_WIDOW) == config.brackets_for(FilingStatus.MARRIED_JOINT)


def test_tax_is_monotonic_in_income(config):
    """More taxable income never produces less tax."""
    for status in FilingStatus:
        brackets = config.brackets_for(status)
        previous = 0
        for income in range(0, 100_000_000, 1_733_300):
            tax = compute_bracket_tax(income, brackets)
            assert tax >= previous
            previous = tax


def test_tax_never_exceeds_top_rate(config):
    brackets = config.brackets_for(FilingStatus.SINGLE)
    for income in (1, 99, 5_000_000, 80_000_000):
        assert compute_bracket_tax(income, brackets) <= math.ceil(income * 0.37)


def test_marginal_rate(config):
    brackets = config.brackets_for(FilingStatus.SINGLE)
    assert marginal_rate(500_000, brackets) == 0.10
    assert marginal_rate(5_000_000, brackets) == 0.22
    assert marginal_rate(100_000_000, brackets) == 0.37


def test_limit_below_previous_contributes_nothing():
    table = [Bracket(1_000_000, 0.10), Bracket(500_000, 0.50), Bracket(math.inf, 0.20)]
    # 10,000 at 10% + 10,000 at 20%
    assert compute_bracket_tax(2_000_000, table) == 300_000


def test_malformed_table_raises():
    with pytest.raises(BracketTableError):
        compute_bracket_tax(100_000, [("ten", 0.10)])


def test_negative_rate_raises():
    with pytest.raises(BracketTableError):
        compute_bracket_tax(100_000, [(math.inf, -0.10)])


class TestQualifiedDividendsWorksheet:
    """Preferential income stacks on top of ordinary income."""

    def test_all_preferential_below_zero_rate_ceiling(self, config):
        """$40,000 of qualified dividends and nothing else is taxed at 0%."""
        tax = compute_qdcg_tax(
            4_000_000, 4_000_000, 0,
            config.brackets_for(FilingStatus.SINGLE),
            config.preferential_brackets_for(FilingStatus.SINGLE),
        )
        assert tax == 0

    def test_stacking_across_zero_and_fifteen(self, config):
        """
        $60,000 taxable including $20,000 qualified dividends:
        ordinary 40,000 -> 4,561.50; 8,350 at 0%; 11,650 at 15% = 1,747.50.
        """
        tax = compute_qdcg_tax(
            6_000_000, 2_000_000, 0,
            config.brackets_for(FilingStatus.SINGLE),
            config.preferential_brackets_for(FilingStatus.SINGLE),
        )
        assert tax == 630_900

    def test_never_exceeds_ordinary_tax(self, config):
        ordinary = config.brackets_for(FilingStatus.SINGLE)
        preferential = config.preferential_brackets_for(FilingStatus.SINGLE)
        for taxable in (500_000, 3_000_000, 20_000_000, 90_000_000):
            assert compute_qdcg_tax(taxable, taxable, 0, ordinary, preferential) <= compute_bracket_tax(
                taxable, ordinary
            )

    def test_preferential_limited_to_taxable_income(self, config):
        ordinary = config.brackets_for(FilingStatus.SINGLE)
        preferential = config.preferential_brackets_for(FilingStatus.SINGLE)
        assert compute_qdcg_tax(1_000_000, 5_000_000, 0, ordinary, preferential) == 0

    def test_worksheet_only_when_preferential_income(self, config):
        ordinary = config.brackets_for(FilingStatus.SINGLE)
        preferential = config.preferential_brackets_for(FilingStatus.SINGLE)
        tax, used = compute_tax_with_preferential_rates(5_000_000, 0, 0, ordinary, preferential)
        assert not used
        assert tax == 591_400
        _, used = compute_tax_with_preferential_rates(5_000_000, 100_000, 0, ordinary, preferential)
        assert used

    def test_net_capital_gain_uses_smaller_line(self):
        assert net_capital_gain_for_worksheet(500_000, 300_000) == 300_000
        assert net_capital_gain_for_worksheet(500_000, -100_000) == 0
        assert net_capital_gain_for_worksheet(0, 300_000) == 0
