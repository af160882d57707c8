"""
Tests for the Earned Income Credit (Form 1040 line 27).

2025 phase-in rates: 7.65% (no children), 34% (one), 40% (two), 45% (three
or more). The credit is the smaller of the amounts at earned income and
at AGI.
"""

import pytest

from calculator.federal.earned_income_credit import compute_earned_income_credit
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import Dependent, DependentRelationship, FilingStatus, Person, TaxReturn, W2Info


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def make_children(count: int):
    return [
        Dependent(name=f"Child {i}", ssn=f"900-00-000{i}", relationship=DependentRelationship.DAUGHTER,
                  date_of_birth="2016-06-01")
        for i in range(count)
    ]


def make_return(children: int = 0, status=FilingStatus.SINGLE, born="1990-03-15") -> TaxReturn:
    return TaxReturn(
        filing_status=status,
        taxpayer=Person(date_of_birth=born),
        dependents=make_children(children),
    )


def eic(config, model, earned, agi=None, investment=0):
    return compute_earned_income_credit(model, config, earned, earned if agi is None else agi, investment)


class TestEITCPhaseIn:

    def test_no_children(self, config):
        assert eic(config, make_return(0), 500_000).credit.amount == 38_250

    def test_one_child(self, config):
        assert eic(config, make_return(1), 1_000_000).credit.amount == 340_000

    def test_two_children(self, config):
        assert eic(config, make_return(2), 1_000_000).credit.amount == 400_000

    def test_three_children(self, config):
        assert eic(config, make_return(3), 1_000_000).credit.amount == 450_000

    def test_four_children_use_three_child_table(self, config):
        assert eic(config, make_return(4), 1_000_000).credit.amount == 450_000


class TestEITCPlateauAndPhaseout:

    def test_plateau_maximum(self, config):
        assert eic(config, make_return(1), 2_000_000).credit.amount == 432_800

    def test_phaseout(self, config):
        # 4,328 - 15.98% x (30,000 - 23,350) = 3,265.33
        assert eic(config, make_return(1), 3_000_000).credit.amount == 326_533

    def test_uses_smaller_of_earned_and_agi(self, config):
        result = eic(config, make_return(1), 2_000_000, agi=3_000_000)
        assert result.credit_at_earned_income == 432_800
        assert result.credit.amount == result.credit_at_agi


class TestEITCEligibility:

    def test_married_separate(self, config):
        result = eic(config, make_return(1, FilingStatus.MARRIED_SEPARATE), 1_000_000)
        assert not result.eligible
        assert result.ineligible_reason == "married_separate"

    def test_investment_income_limit(self, config):
        result = eic(config, make_return(1), 1_000_000, investment=1_200_000)
        assert result.ineligible_reason == "investment_income"
        assert result.credit.amount == 0

    def test_childless_age_window(self, config):
        result = eic(config, make_return(0, born="1955-01-10"), 500_000)
        assert result.ineligible_reason == "age"

    def test_child_without_ssn_does_not_count(self, config):
        model = TaxReturn(dependents=[Dependent(name="No SSN", relationship=DependentRelationship.SON,
                                                date_of_birth="2016-06-01")])
        assert eic(config, model, 1_000_000).num_qualifying_children == 0


def test_eic_is_refundable_on_return():
    model = TaxReturn(
        taxpayer=Person(date_of_birth="1990-03-15"),
        dependents=make_children(2),
        w2s=[W2Info(id="w2", wages=1_000_000)],
    )
    result = compute_form1040(model)
    assert result.line15.amount == 0
    assert result.line27.amount == 400_000
    assert result.line34.amount >= 400_000
