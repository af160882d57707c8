"""Tests for the New Jersey NJ-1040 module."""

from calculator.state.configs.state_2025.new_jersey import NewJerseyModule, get_new_jersey_config
from models import (
    Dependent,
    DependentRelationship,
    Form1099R,
    Person,
    ScheduleEProperty,
    ScheduleK1,
    SSA1099,
)


class TestNewJerseyConfig:

    def test_tables_by_status(self):
        config = get_new_jersey_config()
        assert config.brackets["single"] is not config.brackets["married_joint"]
        assert config.brackets["head_of_household"] == config.brackets["married_joint"]

    def test_top_rate(self):
        assert get_new_jersey_config().brackets["single"][-1].rate == 0.1075


class TestNewJerseyIncome:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("NJ", 7_500_000, withheld=200_000), "NJ")
        assert result.line("wages").input_ids == ("w2:job:box16",)
        assert result.state_agi.amount == 7_500_000
        assert result.exemptions.amount == 100_000
        assert result.state_taxable_income.amount == 7_400_000
        assert result.line("tax").amount == 259_600
        assert result.owed == 59_600

    def test_out_of_state_w2_uses_box1(self, family_return, compute_state):
        result = compute_state(family_return, "NJ")
        assert result.line("wages").input_ids == ("w2:w2a:box1", "w2:w2b:box1")
        assert result.state_agi.amount == 13_000_000
        assert result.exemptions.amount == 500_000
        assert result.line("tax").amount == 413_125

    def test_social_security_excluded(self, compute_state, wage_return):
        model = wage_return("NJ", 3_000_000, ssa1099s=[SSA1099(net_benefits=2_000_000)])
        result = compute_state(model, "NJ")
        assert result.starting_income.amount == 3_000_000
        assert result.subtractions.amount == 0

    def test_pension_exclusion(self, compute_state, wage_return):
        model = wage_return(
            "NJ", 5_000_000,
            taxpayer=Person(date_of_birth="1959-02-01"),
            form1099_rs=[Form1099R(id="pension", gross_distribution=3_000_000, taxable_amount=3_000_000)],
        )
        result = compute_state(model, "NJ")
        assert result.line("pensions").input_ids == ("1099r:pension:box2a",)
        assert result.line("pensionExclusion").amount == 3_000_000
        assert result.state_agi.amount == 5_000_000

    def test_no_pension_exclusion_over_income_limit(self, compute_state, wage_return):
        model = wage_return(
            "NJ", 14_000_000,
            taxpayer=Person(date_of_birth="1959-02-01"),
            form1099_rs=[Form1099R(id="pension", gross_distribution=3_000_000, taxable_amount=3_000_000)],
        )
        assert "nj1040.pensionExclusion" not in compute_state(model, "NJ").detail

    def test_rental_loss_does_not_offset_partnership_income(self, compute_state, wage_return):
        model = wage_return(
            "NJ", 5_000_000,
            schedule_e_properties=[ScheduleEProperty(id="duplex", rents_received=100_000, repairs=900_000)],
            schedule_k1s=[ScheduleK1(id="firm", ordinary_business_income=1_000_000)],
        )
        result = compute_state(model, "NJ")
        assert "nj1040.rentalIncome" not in result.detail
        assert result.line("partnershipIncome").amount == 1_000_000
        assert result.line("partnershipIncome").input_ids == ("scheduleE.partnershipIncome",)
        assert result.state_agi.amount == 6_000_000


class TestPropertyTaxChoice:

    def test_deduction_when_saving_reaches_credit(self, compute_state, wage_return):
        result = compute_state(wage_return("NJ", 7_500_000), "NJ", is_homeowner=True, property_tax_paid=800_000)
        assert result.line("propertyTaxDeduction").amount == 800_000
        assert result.state_taxable_income.amount == 6_600_000
        assert result.line("tax").amount == 215_400
        assert "nj1040.propertyTaxCredit" not in result.detail

    def test_credit_when_deduction_saves_less(self, compute_state, wage_return):
        result = compute_state(wage_return("NJ", 1_000_000), "NJ", rent_paid=1_000_000)
        assert "nj1040.propertyTaxDeduction" not in result.detail
        assert result.line("propertyTaxCredit").amount == 5_000
        assert result.line("tax").amount == 12_600

    def test_rent_counts_at_18_percent(self, compute_state, wage_return):
        module = NewJerseyModule()
        result = compute_state(wage_return("NJ", 7_500_000), "NJ", rent_paid=1_000_000)
        assert result.line("propertyTaxDeduction").amount == 180_000
        assert module.config.param("rent_property_tax_ratio") == 0.18

    def test_deduction_capped(self, compute_state, wage_return):
        result = compute_state(wage_return("NJ", 30_000_000), "NJ", is_homeowner=True, property_tax_paid=2_000_000)
        assert result.line("propertyTaxDeduction").amount == 1_500_000


class TestNewJerseyCredits:

    def test_child_tax_credit_for_young_child(self, compute_state, wage_return):
        toddler = Dependent(name="Baby", ssn="900-22-3333", relationship=DependentRelationship.SON,
                            date_of_birth="2022-03-03")
        result = compute_state(wage_return("NJ", 5_000_000, dependents=[toddler]), "NJ")
        assert result.line("childTaxCredit").amount == 100_000

    def test_earned_income_credit(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("NJ"), "NJ")
        assert result.line("earnedIncomeCredit").amount == 173_120
        assert "nj1040.childTaxCredit" not in result.detail
