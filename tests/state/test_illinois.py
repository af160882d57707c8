"""Tests for the Illinois IL-1040 module."""

import pytest

from calculator.state.configs.state_2025.illinois import get_illinois_config
from models import Form1099INT, Person, SSA1099
from models.state import ResidencyType


class TestIllinoisConfig:

    def test_flat_rate(self):
        config = get_illinois_config()
        assert config.is_flat_tax is True
        assert config.flat_rate == 0.0495
        assert config.allows_itemized is False

    def test_exemption_allowance(self):
        assert get_illinois_config().param("exemption_allowance") == 285_000


class TestIllinoisTax:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("IL", 7_500_000, withheld=350_000), "IL")
        assert result.deduction.amount == 0
        assert result.line("exemptionAllowance").amount == 285_000
        assert result.state_taxable_income.amount == 7_215_000
        # $3,571.425 rounds half up
        assert result.line("tax").amount == 357_143
        assert result.owed == 7_143

    def test_joint_return(self, family_return, compute_state):
        result = compute_state(family_return, "IL")
        assert result.line("exemptionAllowance").amount == 1_140_000
        assert result.line("tax").amount == 587_070

    def test_no_allowance_over_income_limit(self, compute_state, wage_return):
        result = compute_state(wage_return("IL", 26_000_000), "IL")
        assert result.exemptions.amount == 0
        assert result.state_taxable_income.amount == 26_000_000

    def test_senior_allowance(self, compute_state, wage_return):
        model = wage_return("IL", 5_000_000, taxpayer=Person(date_of_birth="1950-07-04"))
        result = compute_state(model, "IL")
        assert result.line("exemptionAllowance").amount == 385_000


class TestIllinoisAdjustments:

    def test_tax_exempt_interest_added(self, compute_state, wage_return):
        model = wage_return("IL", 7_500_000,
                            form1099_ints=[Form1099INT(id="muni", tax_exempt_interest=40_000)])
        result = compute_state(model, "IL")
        assert result.line("taxExemptInterest").amount == 40_000
        assert result.state_agi.amount == 7_540_000

    def test_social_security_subtracted(self, compute_state, wage_return):
        model = wage_return("IL", 3_000_000, ssa1099s=[SSA1099(net_benefits=2_000_000)])
        result = compute_state(model, "IL")
        assert result.line("socialSecurity").amount == 960_000
        assert result.state_agi.amount == 3_000_000

    def test_base_income_label(self, compute_state, wage_return):
        result = compute_state(wage_return("IL", 7_500_000), "IL")
        assert result.state_agi.label == "IL-1040: Illinois base income"


class TestIllinoisCredits:

    def test_property_tax_credit(self, compute_state, wage_return):
        result = compute_state(wage_return("IL", 7_500_000), "IL", property_tax_paid=500_000)
        assert result.line("propertyTaxCredit").amount == 25_000
        assert result.tax_after_credits.amount == 357_143 - 25_000

    def test_earned_income_and_child_credits(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("IL"), "IL")
        assert result.line("tax").amount == 70_785
        assert result.line("earnedIncomeCredit").amount == 86_560
        # 40% of the Illinois EIC for a child under 12
        assert result.line("childTaxCredit").amount == 34_624
        assert result.refundable_credits.amount == 121_184
        assert result.owed == 0
        assert result.refund == 121_184 - 70_785

    def test_part_year_apportions_income(self, compute_state, wage_return):
        result = compute_state(wage_return("IL", 7_500_000), "IL",
                               residency_type=ResidencyType.PART_YEAR, move_in_date="2025-10-01")
        assert result.line("apportionedIncome").amount == pytest.approx(7_215_000 * 92 / 365, abs=1)
