"""Tests for the Ohio IT 1040 module."""

import pytest

from calculator.state.configs.state_2025.ohio import get_ohio_config, tier_value
from calculator.state.state_tax_config import DataConfidence
from models import Person


class TestOhioConfig:

    def test_provisional(self):
        assert get_ohio_config().data_confidence == DataConfidence.PROVISIONAL

    @pytest.mark.parametrize("agi,per_person", [
        (4_000_000, 240_000),
        (4_000_001, 215_000),
        (8_000_000, 215_000),
        (75_000_000, 190_000),
        (75_000_001, 0),
    ])
    def test_exemption_tiers(self, agi, per_person):
        assert tier_value(agi, get_ohio_config().param("exemption_tiers")) == per_person


class TestOhioTax:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("OH", 7_500_000, withheld=100_000), "OH")
        assert result.deduction.amount == 0
        assert result.line("personalExemptions").amount == 215_000
        assert result.state_taxable_income.amount == 7_285_000
        assert result.line("tax").amount == 128_700
        assert result.state_credits.amount == 0
        assert result.owed == 28_700

    def test_zero_bracket(self, compute_state, wage_return):
        result = compute_state(wage_return("OH", 2_000_000), "OH")
        assert result.state_taxable_income.amount == 1_760_000
        assert result.line("tax").amount == 0
        assert result.state_credits.amount == 0

    def test_exemption_credit(self, compute_state, wage_return):
        result = compute_state(wage_return("OH", 3_100_000), "OH")
        assert result.line("tax").amount == 7_013
        assert result.line("exemptionCredit").amount == 2_000
        assert result.tax_after_credits.amount == 5_013

    def test_senior_credit(self, compute_state, wage_return):
        model = wage_return("OH", 5_000_000, taxpayer=Person(date_of_birth="1950-01-01"))
        result = compute_state(model, "OH")
        assert result.line("tax").amount == 59_950
        assert result.line("seniorCredit").amount == 5_000

    def test_joint_filing_credit(self, family_return, compute_state):
        result = compute_state(family_return, "OH")
        assert result.line("personalExemptions").amount == 760_000
        assert result.state_taxable_income.amount == 12_240_000
        assert result.line("tax").amount == 273_363
        # 5% of tax once Ohio taxable income passes $75,000
        assert result.line("jointFilingCredit").amount == 13_668
        assert result.tax_after_credits.amount == 259_695
