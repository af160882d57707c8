"""
Tests for the Alternative Minimum Tax (Form 6251).

2025: exemption $88,100 single / $137,000 joint, phased out at 25% of AMTI
above $626,350 / $1,252,700; 26% rate up to $239,100 and 28% above.
"""

import pytest

from calculator.federal.amt import amt_exemption, compute_amt
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import traced_from_computation
from models import FilingStatus, Form1099INT, ISOExercise, TaxReturn, W2Info


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def iso_return() -> TaxReturn:
    return TaxReturn(
        w2s=[W2Info(id="w2", wages=10_000_000)],
        iso_exercises=[ISOExercise(id="grant1", shares=1000, exercise_price=1_000, fmv_at_exercise=21_000)],
    )


class TestAMTExemption:

    def test_full_exemption_below_phaseout(self, config):
        assert amt_exemption(50_000_000, FilingStatus.SINGLE, config) == 8_810_000

    def test_partial_phaseout(self, config):
        # 88,100 - 25% x (726,350 - 626,350) = 63,100
        assert amt_exemption(72_635_000, FilingStatus.SINGLE, config) == 6_310_000

    def test_fully_phased_out(self, config):
        assert amt_exemption(200_000_000, FilingStatus.SINGLE, config) == 0

    def test_joint_exemption(self, config):
        assert amt_exemption(50_000_000, FilingStatus.MARRIED_JOINT, config) == 13_700_000


class TestISOExercise:

    def test_bargain_element(self):
        assert ISOExercise(shares=1000, exercise_price=1_000, fmv_at_exercise=21_000).spread == 20_000_000

    def test_underwater_option_has_no_spread(self):
        assert ISOExercise(shares=10, exercise_price=5_000, fmv_at_exercise=4_000).spread == 0

    def test_amt_from_iso(self):
        """$84,250 taxable plus a $200,000 spread: TMT 50,999 vs regular 13,449."""
        result = compute_form1040(iso_return())
        amt = result.amt.value
        assert result.line16.amount == 1_344_900
        assert amt.line4.amount == 28_425_000
        assert amt.line5.amount == 8_810_000
        assert amt.line7.amount == 5_099_900
        assert amt.line11.amount == 3_755_000
        assert result.line17.amount == 3_755_000
        assert result.line17.input_ids == ("form6251.line11",)

    def test_line4_cites_preference_items(self):
        amt = compute_form1040(iso_return()).amt.value
        assert "form6251.line2i" in amt.line4.input_ids
        assert amt.line2i.input_ids == ("iso:grant1:spread",)


class TestAMTDirect:

    def test_no_amt_on_plain_wages(self, config):
        result = compute_form1040(TaxReturn(w2s=[W2Info(id="w2", wages=10_000_000)]))
        assert result.amt.value.line11.amount == 0
        assert result.line17.amount == 0

    def test_salt_addback(self, config):
        taxable = traced_from_computation(10_000_000, "form1040.line15", [], "Taxable income")
        regular = traced_from_computation(1_800_000, "form1040.line16", [], "Tax")
        result = compute_amt(TaxReturn(), config, taxable, regular, 1_000_000, 0, 0)
        assert result.line2a.amount == 1_000_000
        assert result.line2a.input_ids == ("scheduleA.line7",)
        assert result.line4.amount == 11_000_000

    def test_private_activity_bond_interest(self, config):
        model = TaxReturn(form1099_ints=[Form1099INT(id="muni", private_activity_bond_interest=500_000)])
        taxable = traced_from_computation(5_000_000, "form1040.line15", [], "Taxable income")
        regular = traced_from_computation(500_000, "form1040.line16", [], "Tax")
        result = compute_amt(model, config, taxable, regular, 0, 0, 0)
        assert result.line2g.amount == 500_000
        assert result.line2g.input_ids == ("1099int:muni:box9",)
