"""
Tests for the Child Tax Credit, Credit for Other Dependents and ACTC
(Schedule 8812).
"""

import pytest

from calculator.federal.child_tax_credit import compute_child_tax_credit
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import Dependent, DependentRelationship, FilingStatus, TaxReturn


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def child(born="2016-01-01", ssn="900-11-2222", **kwargs):
    return Dependent(name="Child", ssn=ssn, relationship=DependentRelationship.SON, date_of_birth=born, **kwargs)


def make_return(*dependents, status=FilingStatus.SINGLE) -> TaxReturn:
    return TaxReturn(filing_status=status, dependents=list(dependents))


class TestCTCQualification:

    def test_child_under_17(self, config):
        result = compute_child_tax_credit(make_return(child()), config, 5_000_000, 1_000_000, 5_000_000)
        assert result.num_qualifying_children == 1
        assert result.nonrefundable.amount == 220_000

    def test_seventeen_year_old_gets_odc(self, config):
        result = compute_child_tax_credit(make_return(child(born="2008-03-01")), config, 5_000_000, 1_000_000, 5_000_000)
        assert result.num_qualifying_children == 0
        assert result.num_other_dependents == 1
        assert result.initial_credit == 50_000

    def test_child_without_ssn_gets_odc(self, config):
        result = compute_child_tax_credit(make_return(child(ssn=None)), config, 5_000_000, 1_000_000, 5_000_000)
        assert result.initial_credit == 50_000

    def test_child_living_elsewhere(self, config):
        result = compute_child_tax_credit(make_return(child(months_lived_with_taxpayer=5)), config,
                                          5_000_000, 1_000_000, 5_000_000)
        assert result.num_qualifying_children == 0


class TestCTCPhaseout:

    def test_joint_phaseout(self, config):
        """$10,000 over the $400,000 threshold removes $500."""
        model = make_return(child(), child(ssn="900-11-3333"), status=FilingStatus.MARRIED_JOINT)
        result = compute_child_tax_credit(model, config, 41_000_000, 10_000_000, 41_000_000)
        assert result.phaseout_reduction == 50_000
        assert result.credit_after_phaseout.amount == 390_000

    def test_fraction_of_thousand_counts_as_step(self, config):
        result = compute_child_tax_credit(make_return(child()), config, 20_000_001, 5_000_000, 20_000_001)
        assert result.phaseout_reduction == 5_000


class TestACTC:

    def test_refundable_limited_by_earned_income(self, config):
        # 15% x (10,000 - 2,500) = 1,125
        result = compute_child_tax_credit(make_return(child()), config, 1_000_000, 0, 1_000_000)
        assert result.nonrefundable.amount == 0
        assert result.additional.amount == 112_500

    def test_refundable_capped_per_child(self, config):
        result = compute_child_tax_credit(make_return(child()), config, 4_000_000, 0, 4_000_000)
        assert result.additional.amount == 170_000

    def test_odc_is_never_refundable(self, config):
        result = compute_child_tax_credit(make_return(child(born="2000-01-01")), config, 4_000_000, 0, 4_000_000)
        assert result.additional.amount == 0


def test_family_credit_on_return(family_return):
    result = compute_form1040(family_return)
    assert result.child_tax_credit.value.initial_credit == 440_000
    assert result.line19.amount == 440_000
    assert result.line19.input_ids == ("schedule8812.line14",)
    assert result.line28.amount == 0
