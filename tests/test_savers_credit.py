"""
Tests for the Retirement Savings Contributions Credit (Form 8880).

2025 AGI ceilings for single filers: 50% to $23,750, 20% to $25,500,
10% to $39,500. Contributions count up to $2,000 per person.
"""

import pytest

from calculator.federal.savers_credit import compute_savers_credit, savers_credit_rate
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import FilingStatus, IRAContributions, Person, TaxReturn, W2Box12Entry, W2Info


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def make_w2(wages: int, deferral: int = 0) -> W2Info:
    """Helper to create a W-2 with an optional 401(k) deferral (box 12 code D)."""
    box12 = [W2Box12Entry(code="D", amount=deferral)] if deferral else []
    return W2Info(id="emp", employer_name="Test Employer", wages=wages, box12=box12)


def make_return(wages: int, roth: int = 0, deferral: int = 0, status=FilingStatus.SINGLE, **kwargs) -> TaxReturn:
    return TaxReturn(
        filing_status=status,
        w2s=[make_w2(wages, deferral)],
        ira_contributions=IRAContributions(taxpayer_roth=roth) if roth else None,
        **kwargs,
    )


class TestSaversCreditRates:
    """Rate tiers by AGI and filing status."""

    def test_fifty_percent_tier(self, config):
        assert savers_credit_rate(2_000_000, FilingStatus.SINGLE, config) == 0.50

    def test_twenty_percent_tier(self, config):
        assert savers_credit_rate(2_500_000, FilingStatus.SINGLE, config) == 0.20

    def test_ten_percent_tier(self, config):
        assert savers_credit_rate(3_900_000, FilingStatus.SINGLE, config) == 0.10

    def test_above_ceiling(self, config):
        assert savers_credit_rate(4_000_000, FilingStatus.SINGLE, config) == 0.0

    def test_joint_ceilings_are_higher(self, config):
        assert savers_credit_rate(4_000_000, FilingStatus.MARRIED_JOINT, config) == 0.50


class TestSaversCreditAmounts:

    def test_agi_20000_with_2000_roth(self, config):
        """$2,000 x 50% = $1,000."""
        model = make_return(2_000_000, roth=200_000)
        result = compute_savers_credit(model, config, 2_000_000)
        assert result.eligible_contributions == 200_000
        assert result.credit.amount == 100_000

    def test_agi_40000_gets_nothing(self, config):
        model = make_return(4_000_000, roth=200_000)
        assert compute_savers_credit(model, config, 4_000_000).credit.amount == 0

    def test_contributions_capped_at_2000(self, config):
        model = make_return(2_000_000, roth=500_000)
        result = compute_savers_credit(model, config, 2_000_000)
        assert result.eligible_contributions == 200_000

    def test_elective_deferrals_count(self, config):
        model = make_return(2_400_000, deferral=150_000)
        result = compute_savers_credit(model, config, 2_400_000)
        assert result.elective_deferrals == 150_000
        # 20% tier
        assert result.credit.amount == 30_000
        assert "w2:emp:box12" in result.credit.input_ids

    def test_dependent_cannot_claim(self, config):
        model = make_return(1_000_000, roth=200_000, taxpayer=Person(can_be_claimed_as_dependent=True))
        assert compute_savers_credit(model, config, 1_000_000).credit.amount == 0


class TestSaversCreditOnReturn:

    def test_flows_to_line_20(self):
        result = compute_form1040(make_return(2_000_000, roth=200_000))
        assert result.savers_credit.value.credit.amount == 100_000
        assert "form8880.line12" in result.line20.input_ids

    def test_absent_without_contributions(self):
        result = compute_form1040(make_return(2_000_000))
        assert not result.savers_credit.is_present
