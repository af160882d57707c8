"""Tests for the Michigan MI-1040 module."""

from calculator.state.configs.state_2025.michigan import get_michigan_config
from models import Form1099INT, Person
from models.state import ResidencyType


def test_config():
    config = get_michigan_config()
    assert config.flat_rate == 0.0425
    assert config.param("exemption") == 580_000


class TestMichigan:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("MI", 7_500_000, withheld=300_000), "MI")
        assert result.deduction.amount == 0
        assert result.line("personalExemptions").amount == 580_000
        assert result.line("tax").amount == 294_100
        assert result.refund == 5_900

    def test_joint_return(self, family_return, compute_state):
        result = compute_state(family_return, "MI")
        assert result.line("personalExemptions").amount == 2_320_000
        assert result.line("tax").amount == 453_900

    def test_blind_special_exemption(self, compute_state, wage_return):
        model = wage_return("MI", 7_500_000, taxpayer=Person(is_blind=True))
        result = compute_state(model, "MI")
        assert result.line("specialExemptions").amount == 330_000
        assert result.exemptions.amount == 910_000

    def test_other_state_bond_interest_added(self, compute_state, wage_return):
        model = wage_return("MI", 7_500_000,
                            form1099_ints=[Form1099INT(id="muni", tax_exempt_interest=25_000)])
        result = compute_state(model, "MI")
        assert result.line("otherStateObligationInterest").amount == 25_000
        assert result.state_agi.amount == 7_525_000

    def test_earned_income_credit(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("MI"), "MI")
        assert result.line("earnedIncomeCredit").amount == 129_840

    def test_nonresident_owes_nothing(self, compute_state, wage_return):
        result = compute_state(wage_return("MI", 7_500_000), "MI", residency_type=ResidencyType.NONRESIDENT)
        assert result.apportionment_ratio == 0.0
        assert result.line("totalTax").amount == 294_100
        assert result.state_tax.amount == 0
