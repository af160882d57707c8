"""Tests for the Virginia Form 760 module."""

import pytest

from calculator.state.configs.state_2025.virginia import VirginiaModule, get_virginia_config
from calculator.state.state_tax_config import DataConfidence
from models import Deductions, DeductionMethod, FilingStatus, ItemizedDeductions, Person


class TestVirginiaConfig:

    def test_standard_deduction(self):
        config = get_virginia_config()
        assert config.get_standard_deduction(FilingStatus.SINGLE) == 875_000
        assert config.get_standard_deduction(FilingStatus.MARRIED_JOINT) == 1_750_000

    def test_provisional(self):
        assert get_virginia_config().data_confidence == DataConfidence.PROVISIONAL

    @pytest.mark.parametrize("size,guideline", [(1, 1_565_000), (4, 3_215_000), (8, 5_415_000), (9, 5_965_000)])
    def test_poverty_guideline(self, size, guideline):
        assert VirginiaModule().poverty_guideline(size) == guideline


class TestVirginiaTax:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("VA", 7_500_000, withheld=350_000), "VA")
        assert result.deduction.amount == 875_000
        # Exemptions reduce income, not tax
        assert result.line("personalExemption").amount == 93_000
        assert result.state_taxable_income.amount == 6_532_000
        assert result.line("tax").amount == 349_840
        assert result.refund == 160

    def test_joint_return(self, family_return, compute_state):
        result = compute_state(family_return, "VA")
        assert result.line("personalExemption").amount == 186_000
        assert result.line("dependentExemption").amount == 186_000
        assert result.state_taxable_income.amount == 10_878_000
        assert result.line("tax").amount == 599_735

    def test_itemized_less_income_taxes(self, compute_state, wage_return):
        itemized = ItemizedDeductions(state_local_income_taxes=1_000_000, real_estate_taxes=500_000,
                                      mortgage_interest=1_500_000)
        model = wage_return("VA", 7_500_000,
                            deductions=Deductions(method=DeductionMethod.ITEMIZED, itemized=itemized))
        result = compute_state(model, "VA")
        assert result.line("itemizedDeduction").amount == 2_000_000
        assert result.state_taxable_income.amount == 5_407_000


class TestAgeDeduction:

    def test_full_age_deduction(self, compute_state, wage_return):
        model = wage_return("VA", 5_000_000, taxpayer=Person(date_of_birth="1950-01-01"))
        result = compute_state(model, "VA")
        assert result.line("ageDeduction").amount == 1_200_000
        assert result.line("additionalExemptions").amount == 80_000

    def test_reduced_above_threshold(self, compute_state, wage_return):
        model = wage_return("VA", 8_000_000, taxpayer=Person(date_of_birth="1950-01-01"))
        result = compute_state(model, "VA")
        assert result.line("ageDeduction").amount == 700_000

    def test_none_under_65(self, compute_state, wage_return):
        result = compute_state(wage_return("VA", 5_000_000), "VA")
        assert "form760.ageDeduction" not in result.detail


class TestVirginiaCredits:

    def test_low_income_credit(self, compute_state, wage_return):
        result = compute_state(wage_return("VA", 1_200_000), "VA")
        assert result.line("tax").amount == 4_640
        assert result.line("lowIncomeCredit").amount == 4_640
        assert result.tax_after_credits.amount == 0

    def test_earned_income_credit_refundable(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("VA"), "VA")
        assert result.line("earnedIncomeCredit").amount == 64_920
        assert result.refundable_credits.amount == 64_920
