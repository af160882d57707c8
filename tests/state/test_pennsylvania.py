"""Tests for the Pennsylvania PA-40 module."""

import pytest

from calculator.state.configs.state_2025.pennsylvania import forgiveness_percentage
from models import CapitalTransaction, Form1099INT, ScheduleCBusiness, ScheduleK1, W2Info
from models.state import ResidencyType


@pytest.mark.parametrize("income,expected", [
    (650_000, 100),
    (650_001, 90),
    (675_000, 90),
    (675_001, 80),
    (1_000_000, 0),
])
def test_forgiveness_percentage(income, expected):
    assert forgiveness_percentage(income, 650_000, 25_000) == expected


class TestPennsylvaniaTax:

    def test_single_wage_earner(self, compute_state, wage_return):
        result = compute_state(wage_return("PA", 7_500_000, withheld=230_250), "PA")
        assert result.line("compensation").input_ids == ("w2:job:box16",)
        assert result.state_taxable_income.amount == 7_500_000
        assert result.line("tax").amount == 230_250
        assert result.refund == 0
        assert result.owed == 0

    def test_joint_return(self, family_return, compute_state):
        result = compute_state(family_return, "PA")
        assert result.line("tax").amount == 399_100
        assert result.state_credits.amount == 0

    def test_full_forgiveness(self, compute_state, wage_return):
        result = compute_state(wage_return("PA", 600_000), "PA")
        assert result.line("taxForgiveness").amount == 18_420
        assert result.tax_after_credits.amount == 0

    def test_partial_forgiveness(self, compute_state, wage_return):
        result = compute_state(wage_return("PA", 670_000), "PA")
        assert result.line("tax").amount == 20_569
        assert result.line("taxForgiveness").amount == 18_512

    def test_section_529_deduction_capped(self, compute_state, wage_return):
        result = compute_state(wage_return("PA", 7_500_000), "PA", contributions_529=2_500_000)
        assert result.line("section529Deduction").amount == 1_900_000
        assert result.state_taxable_income.amount == 5_600_000


class TestIncomeClasses:

    def test_business_loss_does_not_offset_wages(self, compute_state, wage_return):
        shop = ScheduleCBusiness(id="shop", gross_receipts=100_000, other_expenses=1_100_000)
        result = compute_state(wage_return("PA", 5_000_000, schedule_c_businesses=[shop]), "PA")
        assert "pa40.businessIncome" not in result.detail
        assert result.state_agi.amount == 5_000_000

    def test_gains_and_interest_classes(self, compute_state, wage_return):
        model = wage_return(
            "PA", 5_000_000,
            form1099_ints=[Form1099INT(id="bank", interest_income=100_000, us_obligation_interest=50_000,
                                       tax_exempt_interest=20_000)],
            capital_transactions=[CapitalTransaction(id="sale", proceeds=300_000, cost_basis=100_000)],
        )
        result = compute_state(model, "PA")
        # Treasury interest is exempt; other states' municipal interest is not
        assert result.line("interest").amount == 120_000
        assert result.line("netGains").amount == 200_000
        assert result.line("netGains").input_ids == ("tx:sale",)
        assert result.state_agi.amount == 5_320_000

    def test_k1_income_classes(self, compute_state, wage_return):
        k1 = ScheduleK1(id="llc", ordinary_business_income=800_000, guaranteed_payments=200_000,
                        interest_income=30_000, long_term_capital_gain=50_000)
        result = compute_state(wage_return("PA", 5_000_000, schedule_k1s=[k1]), "PA")
        assert result.line("partnershipIncome").amount == 1_000_000
        assert result.line("partnershipIncome").input_ids == ("k1:llc:box1", "k1:llc:box4")
        assert result.line("interest").input_ids == ("k1:llc:box5",)
        assert result.line("netGains").amount == 50_000
        assert result.state_agi.amount == 6_080_000


class TestNonresident:

    def test_only_pennsylvania_source_income(self, compute_state, wage_return):
        model = wage_return(
            "PA", 5_000_000,
            w2s=[
                W2Info(id="pa", wages=5_000_000, state="PA", state_wages=5_000_000),
                W2Info(id="ny", wages=3_000_000, state="NY", state_wages=3_000_000),
            ],
            form1099_ints=[Form1099INT(id="bank", interest_income=100_000)],
        )
        result = compute_state(model, "PA", residency_type=ResidencyType.NONRESIDENT)
        assert result.apportionment_ratio == 1.0
        assert result.line("compensation").input_ids == ("w2:pa:box16",)
        assert "pa40.interest" not in result.detail
        assert result.line("tax").amount == 153_500
        assert "pa40.apportionedTax" not in result.detail

    def test_k1_sourced_by_entity_state(self, compute_state, wage_return):
        model = wage_return(
            "PA", 5_000_000,
            schedule_k1s=[
                ScheduleK1(id="pa", entity_state="pa", ordinary_business_income=400_000),
                ScheduleK1(id="nj", entity_state="NJ", ordinary_business_income=900_000),
            ],
        )
        result = compute_state(model, "PA", residency_type=ResidencyType.NONRESIDENT)
        assert result.line("partnershipIncome").input_ids == ("k1:pa:box1",)

    def test_resident_includes_all_wages(self, compute_state, wage_return):
        model = wage_return(
            "PA", 5_000_000,
            w2s=[
                W2Info(id="pa", wages=5_000_000, state="PA", state_wages=5_000_000),
                W2Info(id="ny", wages=3_000_000, state="NY", state_wages=3_000_000),
            ],
        )
        result = compute_state(model, "PA")
        assert result.line("compensation").amount == 8_000_000
