"""Tests for the Colorado DR 0104 module."""

import pytest

from calculator.state.configs.state_2025.colorado import get_colorado_config, tabor_refund
from models import Deductions, DeductionMethod, Form1099R, ItemizedDeductions, Person
from models.state import ResidencyType


@pytest.fixture
def tiers():
    return get_colorado_config().param("tabor_tiers")


class TestTaborRefund:

    @pytest.mark.parametrize("magi,joint,expected", [
        (5_300_000, False, 17_700),
        (5_300_001, False, 24_000),
        (13_000_000, True, 55_400),
        (50_000_000, False, 56_500),
        (50_000_000, True, 113_000),
    ])
    def test_tiers(self, tiers, magi, joint, expected):
        assert tabor_refund(magi, joint, tiers) == expected


class TestColoradoReturn:

    def test_starts_from_federal_taxable_income(self, compute_state, wage_return):
        result = compute_state(wage_return("CO", 7_500_000, withheld=200_000), "CO")
        assert result.starting_income.amount == 5_925_000
        assert result.line("federalTaxableIncome").input_ids == ("form1040.line15",)
        assert result.deduction.amount == 0
        assert result.state_taxable_income.amount == 5_925_000
        assert result.line("tax").amount == 260_700

    def test_tabor_refund_for_full_year_residents(self, compute_state, wage_return):
        result = compute_state(wage_return("CO", 7_500_000, withheld=200_000), "CO")
        assert result.line("taborRefund").amount == 24_000
        assert result.total_payments.amount == 224_000
        assert result.owed == 36_700

    def test_family_child_tax_credit(self, family_return, compute_state):
        result = compute_state(family_return, "CO")
        assert result.line("tax").amount == 433_400
        # 20% of the federal credit after phase-out
        assert result.line("childTaxCredit").amount == 88_000
        assert result.tax_after_credits.amount == 345_400
        assert result.line("taborRefund").amount == 55_400

    def test_salt_addback_when_itemizing(self, compute_state, wage_return):
        itemized = ItemizedDeductions(state_local_income_taxes=1_000_000, real_estate_taxes=800_000,
                                      mortgage_interest=1_500_000)
        model = wage_return("CO", 7_500_000,
                            deductions=Deductions(method=DeductionMethod.ITEMIZED, itemized=itemized))
        result = compute_state(model, "CO")
        assert result.line("saltAddback").amount == 1_000_000
        assert result.state_agi.amount == result.starting_income.amount + 1_000_000

    def test_pension_subtraction_at_65(self, compute_state, wage_return):
        model = wage_return(
            "CO", 5_000_000,
            taxpayer=Person(date_of_birth="1959-02-01"),
            form1099_rs=[Form1099R(id="pension", gross_distribution=3_000_000, taxable_amount=3_000_000)],
        )
        result = compute_state(model, "CO")
        # Federal taxable income is after the $5,700 senior deduction ($6,000 less 6% of $5,000)
        assert result.starting_income.amount == 5_655_000
        assert result.line("pensionSubtraction").amount == 2_400_000
        assert result.state_taxable_income.amount == 3_255_000
        assert result.line("tax").amount == 143_220

    def test_no_pension_subtraction_under_55(self, compute_state, wage_return):
        model = wage_return(
            "CO", 5_000_000,
            taxpayer=Person(date_of_birth="1980-02-01"),
            form1099_rs=[Form1099R(id="pension", gross_distribution=3_000_000, taxable_amount=3_000_000)],
        )
        assert "dr0104.pensionSubtraction" not in compute_state(model, "CO").detail


class TestColoradoPartYear:

    def test_income_apportioned_and_no_tabor(self, compute_state, wage_return):
        result = compute_state(wage_return("CO", 7_500_000), "CO",
                               residency_type=ResidencyType.PART_YEAR, move_out_date="2025-06-30")
        apportioned = result.line("apportionedIncome")
        assert apportioned.amount < 5_925_000
        assert result.line("tax").input_ids == (apportioned.node_id,)
        assert "dr0104.apportionedTax" not in result.detail
        assert "dr0104.taborRefund" not in result.detail
