"""
Tests for education credits (Form 8863).

AOTC: 100% of the first $2,000 plus 25% of the next $2,000, 40% refundable.
LLC: 20% of up to $10,000. Phase-out $80,000-$90,000 single.
"""

import pytest

from calculator.federal.education_credit import aotc_tentative, compute_education_credit
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import EducationCreditType, EducationExpense, FilingStatus, Person, TaxReturn, W2Info


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def make_return(*expenses, status=FilingStatus.SINGLE, **kwargs) -> TaxReturn:
    return TaxReturn(filing_status=status, education_expenses=list(expenses), **kwargs)


def aotc(amount, **kwargs):
    return EducationExpense(student_name="Student", credit_type=EducationCreditType.AOTC,
                            qualified_expenses=amount, **kwargs)


def llc(amount):
    return EducationExpense(student_name="Student", credit_type=EducationCreditType.LLC, qualified_expenses=amount)


class TestAOTC:

    @pytest.mark.parametrize("expenses,expected", [
        (100_000, 100_000),
        (200_000, 200_000),
        (300_000, 225_000),
        (400_000, 250_000),
        (900_000, 250_000),
    ])
    def test_tentative_credit(self, config, expenses, expected):
        assert aotc_tentative(expenses, config) == expected

    def test_refundable_split(self, config):
        result = compute_education_credit(make_return(aotc(400_000)), config, 5_000_000)
        assert result.refundable.amount == 100_000
        assert result.nonrefundable.amount == 150_000

    def test_phaseout_midpoint(self, config):
        result = compute_education_credit(make_return(aotc(400_000)), config, 8_500_000)
        assert result.students[0].credit == 125_000

    def test_completed_four_years_not_eligible(self, config):
        result = compute_education_credit(make_return(aotc(400_000, completed_four_years=True)), config, 5_000_000)
        assert result.students == ()
        assert result.refundable.amount == 0

    def test_dependent_filer_gets_no_refundable_part(self, config):
        model = make_return(aotc(400_000), taxpayer=Person(can_be_claimed_as_dependent=True))
        result = compute_education_credit(model, config, 1_000_000)
        assert result.refundable.amount == 0
        assert result.nonrefundable.amount == 250_000


class TestLLC:

    def test_twenty_percent(self, config):
        assert compute_education_credit(make_return(llc(1_000_000)), config, 5_000_000).llc_credit == 200_000

    def test_expense_cap_per_return(self, config):
        result = compute_education_credit(make_return(llc(800_000), llc(700_000)), config, 5_000_000)
        assert result.llc_expenses == 1_000_000
        assert result.llc_credit == 200_000


def test_married_separate_gets_nothing(config):
    result = compute_education_credit(
        make_return(aotc(400_000), llc(500_000), status=FilingStatus.MARRIED_SEPARATE), config, 3_000_000
    )
    assert result.nonrefundable.amount == 0
    assert result.refundable.amount == 0


def test_credit_lines_on_return():
    model = make_return(aotc(400_000), w2s=[W2Info(id="w2", wages=5_000_000)])
    result = compute_form1040(model)
    assert result.line29.amount == 100_000
    assert result.line29.input_ids == ("form8863.line8",)
    assert "form8863.line19" in result.line20.input_ids
