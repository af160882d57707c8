"""
End-to-end tests for the Form 1040 orchestrator.

Checks the line arithmetic that holds for every return, plus the two shared
fixtures computed by hand.
"""

import pytest

from calculator.form1040 import compute_form1040
from models import (
    DependentCareInfo,
    EnergyCreditInputs,
    FilingStatus,
    Form1099INT,
    IRAContributions,
    TaxReturn,
    W2Info,
)


def assert_line_invariants(result):
    assert result.line9.amount == sum(
        line.amount for line in (result.line1z, result.line2b, result.line3b, result.line4b,
                                 result.line5b, result.line6b, result.line7, result.line8)
    )
    assert result.line11.amount == result.line9.amount - result.line10.amount
    assert result.line15.amount == max(0, result.line11.amount - result.line14.amount)
    assert result.line18.amount == result.line16.amount + result.line17.amount
    assert result.line21.amount == result.line19.amount + result.line20.amount
    assert result.line22.amount == max(0, result.line18.amount - result.line21.amount)
    assert result.line24.amount == result.line22.amount + result.line23.amount
    assert result.line33.amount == result.line25.amount + result.line26.amount + result.line32.amount
    assert result.line34.amount >= 0 and result.line37.amount >= 0
    assert result.line34.amount == 0 or result.line37.amount == 0


class TestSingleW2:
    """$75,000 wages, $9,000 withheld."""

    def test_lines(self, single_w2_return):
        result = compute_form1040(single_w2_return)
        assert result.agi == 7_500_000
        assert result.line12.amount == 1_575_000
        assert result.taxable_income == 5_925_000
        assert result.line16.amount == 794_900
        assert result.total_tax == 794_900
        assert result.refund == 105_100
        assert result.amount_owed == 0
        assert_line_invariants(result)

    def test_provenance(self, single_w2_return):
        result = compute_form1040(single_w2_return)
        assert result.line1a.input_ids == ("w2:acme:box1",)
        assert result.line12.input_ids == ("form1040.standardDeduction",)
        assert result.line25.input_ids == ("w2:acme:box2",)
        assert result.line16.node_id == "form1040.line16"

    def test_executed_schedules(self, single_w2_return):
        executed = compute_form1040(single_w2_return).executed_schedules()
        assert "other_taxes" in executed
        assert "amt" in executed
        assert "schedule_d" not in executed
        assert "child_tax_credit" not in executed

    def test_unused_credit_line_is_zero(self, single_w2_return):
        result = compute_form1040(single_w2_return)
        assert result.line20.amount == 0
        assert result.line20.input_ids == ()

    def test_balance_due(self):
        model = TaxReturn(w2s=[W2Info(id="acme", wages=7_500_000, federal_tax_withheld=500_000)])
        result = compute_form1040(model)
        assert result.amount_owed == 294_900
        assert result.refund == 0
        assert_line_invariants(result)

    def test_config_version_recorded(self, single_w2_return):
        assert compute_form1040(single_w2_return).config_version == "2025.2"


class TestFamily:
    """Married filing jointly, $130,000 wages, two children."""

    def test_lines(self, family_return):
        result = compute_form1040(family_return)
        assert result.agi == 13_000_000
        assert result.line12.amount == 3_150_000
        assert result.taxable_income == 9_850_000
        assert result.line16.amount == 1_149_800
        assert result.line19.amount == 440_000
        assert result.total_tax == 709_800
        assert result.line25.amount == 1_100_000
        assert result.refund == 390_200
        assert_line_invariants(result)

    def test_child_tax_credit_executed(self, family_return):
        assert "child_tax_credit" in compute_form1040(family_return).executed_schedules()


class TestDeterminism:

    def test_same_input_same_output(self, family_return):
        assert compute_form1040(family_return) == compute_form1040(family_return)

    def test_input_not_mutated(self, family_return):
        before = family_return.model_dump()
        compute_form1040(family_return)
        assert family_return.model_dump() == before


@pytest.mark.parametrize("status", list(FilingStatus))
def test_invariants_for_every_filing_status(status):
    model = TaxReturn(
        filing_status=status,
        w2s=[W2Info(id="w2", wages=6_000_000, federal_tax_withheld=600_000)],
        form1099_ints=[Form1099INT(id="bank", interest_income=150_000)],
    )
    assert_line_invariants(compute_form1040(model))


def test_zero_income_return():
    result = compute_form1040(TaxReturn())
    assert result.agi == 0
    assert result.taxable_income == 0
    assert result.total_tax == 0
    assert result.refund == 0
    assert_line_invariants(result)


class TestLine20Aggregation:
    """Dependent care, saver's and energy credits all land on line 20."""

    @pytest.fixture
    def result(self):
        model = TaxReturn(
            w2s=[W2Info(id="w2", wages=3_500_000, federal_tax_withheld=200_000)],
            dependent_care=DependentCareInfo(total_expenses=300_000, num_qualifying_persons=1),
            ira_contributions=IRAContributions(taxpayer_roth=200_000),
            energy=EnergyCreditInputs(windows=500_000),
        )
        return compute_form1040(model)

    def test_line20_is_exact_sum(self, result):
        care = result.dependent_care_credit.value.credit.amount
        savers = result.savers_credit.value.credit.amount
        energy = result.energy_credit.value.credit.amount
        assert care > 0
        # 10% tier at $35,000 AGI
        assert savers == 20_000
        assert energy == 60_000
        assert result.line20.amount == care + savers + energy
        assert result.line20.input_ids == ("form2441.line11", "form8880.line12", "form5695.totalCredit")

    def test_propagates_through_lines_21_22_24(self, result):
        assert result.line19.amount == 0
        assert result.line21.amount == result.line20.amount
        assert result.line22.amount == result.line18.amount - result.line21.amount
        assert result.line22.amount > 0
        assert result.line24.amount == result.line22.amount + result.line23.amount
        assert_line_invariants(result)
