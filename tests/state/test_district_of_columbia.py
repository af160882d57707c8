"""Tests for the District of Columbia D-40 module."""

from calculator.state.configs.state_2025.district_of_columbia import get_district_of_columbia_config
from models import Deductions, DeductionMethod, Form1099INT, ItemizedDeductions, SSA1099
from models.state import ResidencyType


class TestDistrictOfColumbia:

    def test_config(self):
        config = get_district_of_columbia_config()
        assert config.social_security_taxable is True
        assert config.us_obligation_interest_exempt is False

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("DC", 7_500_000, withheld=400_000), "DC")
        assert result.deduction.amount == 1_575_000
        assert result.state_taxable_income.amount == 5_925_000
        assert result.line("tax").amount == 345_125
        assert result.refund == 54_875

    def test_joint_return_uses_shared_schedule(self, family_return, compute_state):
        result = compute_state(family_return, "DC")
        assert result.deduction.amount == 3_150_000
        assert result.line("tax").amount == 677_250

    def test_social_security_and_treasury_interest_not_subtracted(self, compute_state, wage_return):
        model = wage_return("DC", 3_000_000,
                            ssa1099s=[SSA1099(net_benefits=2_000_000)],
                            form1099_ints=[Form1099INT(id="tbill", us_obligation_interest=100_000)])
        result = compute_state(model, "DC")
        assert result.subtractions.amount == 0
        assert result.state_agi.amount == result.starting_income.amount

    def test_itemized_follows_federal_schedule_a(self, compute_state, wage_return):
        itemized = ItemizedDeductions(state_local_income_taxes=1_000_000, mortgage_interest=1_500_000)
        model = wage_return("DC", 7_500_000,
                            deductions=Deductions(method=DeductionMethod.ITEMIZED, itemized=itemized))
        result = compute_state(model, "DC")
        assert result.line("itemizedDeduction").amount == 2_500_000
        assert result.line("itemizedDeduction").input_ids == ("scheduleA.line17",)

    def test_commuter_from_maryland_exempt(self, compute_state, wage_return):
        result = compute_state(wage_return("DC", 7_500_000, withheld=100_000), "DC",
                               residency_type=ResidencyType.NONRESIDENT, resident_state="md")
        assert result.line("tax").amount == 0
        assert result.refund == 100_000

    def test_part_year_apportions_taxable_income(self, compute_state, wage_return):
        result = compute_state(wage_return("DC", 7_500_000), "DC",
                               residency_type=ResidencyType.PART_YEAR, move_in_date="2025-07-01")
        assert result.line("apportionedIncome").amount < result.state_taxable_income.amount
        assert result.line("tax").amount < 345_125
