"""Tests for the Maryland Form 502 module."""

import logging

import pytest

from calculator.state.configs.state_2025.maryland import MarylandModule, get_maryland_config
from calculator.state.state_tax_config import DataConfidence
from models import Deductions, DeductionMethod, ItemizedDeductions


class TestMarylandConfig:

    def test_provisional(self):
        assert get_maryland_config().data_confidence == DataConfidence.PROVISIONAL

    @pytest.mark.parametrize("county,rate", [
        (None, 0.032),
        ("Talbot", 0.024),
        ("Baltimore City", 0.032),
        ("Prince George's", 0.032),
        ("St Marys", 0.030),
    ])
    def test_county_rate(self, county, rate):
        assert MarylandModule().county_rate(county) == rate

    def test_unknown_county_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            assert MarylandModule().county_rate("Atlantis") == 0.032
        assert "Atlantis" in caplog.text


class TestMarylandTax:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("MD", 7_500_000, withheld=500_000), "MD")
        assert result.deduction.amount == 335_000
        assert result.line("personalExemption").amount == 320_000
        assert result.state_taxable_income.amount == 6_845_000
        assert result.line("tax").amount == 319_888
        assert result.line("localTax").amount == 219_040
        assert result.state_tax.amount == 538_928
        assert result.owed == 38_928

    def test_county_changes_local_tax(self, compute_state, wage_return):
        result = compute_state(wage_return("MD", 7_500_000), "MD", county="Talbot")
        assert result.line("localTax").amount == 164_280

    def test_joint_return(self, family_return, compute_state):
        result = compute_state(family_return, "MD")
        assert result.line("personalExemption").amount == 640_000
        assert result.line("dependentExemption").amount == 640_000
        assert result.state_taxable_income.amount == 11_050_000
        assert result.line("tax").amount == 519_625
        assert result.line("localTax").amount == 353_600

    def test_exemption_halved(self, compute_state, wage_return):
        result = compute_state(wage_return("MD", 11_000_000), "MD")
        assert result.line("personalExemption").amount == 160_000

    def test_exemption_gone_at_high_income(self, compute_state, wage_return):
        result = compute_state(wage_return("MD", 16_000_000), "MD")
        assert result.exemptions.amount == 0


class TestMarylandCredits:

    def test_earned_income_credit_is_nonrefundable(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("MD"), "MD")
        # 45% of the federal credit with a qualifying child
        assert result.line("earnedIncomeCredit").amount == 194_760
        assert result.state_credits.amount == 194_760
        assert result.tax_after_credits.amount == 0
        assert result.refundable_credits.amount == 0
        assert result.refund == 0

    def test_itemized_drops_income_taxes(self, compute_state, wage_return):
        itemized = ItemizedDeductions(state_local_income_taxes=1_000_000, real_estate_taxes=400_000,
                                      mortgage_interest=1_200_000)
        model = wage_return("MD", 7_500_000,
                            deductions=Deductions(method=DeductionMethod.ITEMIZED, itemized=itemized))
        result = compute_state(model, "MD")
        assert result.line("itemizedDeduction").amount == 1_600_000
