"""Tests for the Schedule 1-A enhanced deduction for seniors."""

import pytest

from calculator.federal.senior_deduction import compute_senior_deduction, qualifying_seniors
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import (
    DeductionMethod,
    Deductions,
    FilingStatus,
    ItemizedDeductions,
    Person,
    TaxReturn,
    W2Info,
)


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def senior(**kwargs) -> TaxReturn:
    kwargs.setdefault("taxpayer", Person(date_of_birth="1955-05-05"))
    return TaxReturn(**kwargs)


class TestSeniorDeduction:

    def test_full_amount_below_phaseout(self, config):
        result = compute_senior_deduction(senior(), config, 5_000_000)
        assert result.deduction.amount == 600_000
        assert result.deduction.node_id == "schedule1A.seniorDeduction"

    def test_six_percent_phaseout(self, config):
        # $25,000 over $75,000 costs $1,500
        result = compute_senior_deduction(senior(), config, 10_000_000)
        assert result.reduction == 150_000
        assert result.deduction.amount == 450_000

    def test_fully_phased_out(self, config):
        assert compute_senior_deduction(senior(), config, 17_500_000).deduction.amount == 0

    def test_joint_counts_each_spouse(self, config):
        model = senior(filing_status=FilingStatus.MARRIED_JOINT, spouse=Person(date_of_birth="1958-01-01"))
        result = compute_senior_deduction(model, config, 20_000_000)
        assert result.qualifying_persons == 2
        assert result.deduction.amount == 600_000

    def test_married_separate_not_eligible(self):
        assert qualifying_seniors(senior(filing_status=FilingStatus.MARRIED_SEPARATE)) == 0

    def test_under_65_not_eligible(self):
        assert qualifying_seniors(TaxReturn(taxpayer=Person(date_of_birth="1970-01-01"))) == 0


class TestSeniorDeductionOnTheReturn:

    def test_on_line13_with_standard_deduction(self):
        model = senior(w2s=[W2Info(id="job", wages=5_000_000)])
        result = compute_form1040(model)
        assert result.line12.amount == 1_775_000
        assert result.line13.amount == 600_000
        assert result.line13.input_ids == ("schedule1A.seniorDeduction",)
        assert result.line15.amount == 5_000_000 - 1_775_000 - 600_000

    def test_allowed_when_itemizing(self):
        model = senior(
            w2s=[W2Info(id="job", wages=5_000_000)],
            deductions=Deductions(
                method=DeductionMethod.ITEMIZED,
                itemized=ItemizedDeductions(mortgage_interest=2_000_000),
            ),
        )
        result = compute_form1040(model)
        assert result.line12.input_ids == ("scheduleA.line17",)
        assert result.line13.amount == 600_000
