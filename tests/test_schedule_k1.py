"""
Tests for Schedule K-1 routing.

Box 1 and box 4 reach Schedule 1 line 5 through Schedule E; interest and
dividends land on lines 2b, 3a and 3b; boxes 8 and 9a on Schedule D lines 5
and 12; guaranteed payments (or box 14 code A) on Schedule SE.
"""

import pytest

from calculator.explain import collect_all_values
from calculator.form1040 import compute_form1040
from models import K1EntityType, ScheduleK1, TaxReturn


def partnership_k1(**kwargs) -> ScheduleK1:
    fields = dict(
        id="p", entity_name="Maple Partners LP",
        ordinary_business_income=3_000_000,
        guaranteed_payments=1_200_000,
        interest_income=50_000,
        ordinary_dividends=80_000,
        qualified_dividends=60_000,
        short_term_capital_gain=-20_000,
        long_term_capital_gain=400_000,
    )
    fields.update(kwargs)
    return ScheduleK1(**fields)


class TestK1Routing:

    @pytest.fixture
    def result(self):
        return compute_form1040(TaxReturn(schedule_k1s=[partnership_k1()]))

    def test_interest_and_dividends(self, result):
        assert result.line2b.amount == 50_000
        assert result.line2b.input_ids == ("k1:p:box5",)
        assert result.line3a.amount == 60_000
        assert result.line3b.amount == 80_000
        assert result.line3b.input_ids == ("k1:p:box6a",)

    def test_capital_gains_on_schedule_d(self, result):
        sd = result.schedule_d.value
        assert sd.line5.amount == -20_000
        assert sd.line5.input_ids == ("k1:p:box8",)
        assert sd.line12.amount == 400_000
        assert sd.line7.amount == -20_000
        assert sd.line15.amount == 400_000
        assert result.line7.amount == 380_000

    def test_ordinary_income_through_schedule_e(self, result):
        sched_e = result.schedule_e.value
        assert sched_e.partnership_income.amount == 4_200_000
        assert sched_e.partnership_income.input_ids == ("k1:p:box1", "k1:p:box4")
        assert sched_e.rental_income.amount == 0
        line5 = result.schedule_1.value.line5
        assert line5.amount == 4_200_000
        assert line5.input_ids == ("scheduleE.line41",)

    def test_guaranteed_payments_are_se_earnings(self, result):
        line2 = result.schedule_se.value.line2
        assert line2.amount == 1_200_000
        assert line2.input_ids == ("k1:p:box4",)


class TestK1SelfEmployment:

    def test_box_14a_overrides_guaranteed_payments(self):
        model = TaxReturn(schedule_k1s=[partnership_k1(self_employment_earnings=4_200_000)])
        line2 = compute_form1040(model).schedule_se.value.line2
        assert line2.amount == 4_200_000
        assert line2.input_ids == ("k1:p:box14A",)

    def test_s_corporation_has_no_se_tax(self):
        k1 = partnership_k1(entity_type=K1EntityType.S_CORPORATION, guaranteed_payments=0,
                            self_employment_earnings=0)
        assert not compute_form1040(TaxReturn(schedule_k1s=[k1])).schedule_se.is_present

    def test_business_loss_reduces_income(self):
        k1 = ScheduleK1(id="loss", ordinary_business_income=-500_000)
        result = compute_form1040(TaxReturn(schedule_k1s=[k1]))
        assert result.schedule_1.value.line5.amount == -500_000
        assert result.line9.amount == -500_000


class TestK1Explain:

    def test_boxes_are_document_leaves(self):
        model = TaxReturn(schedule_k1s=[partnership_k1()])
        values = collect_all_values(compute_form1040(model), model)
        leaf = values["k1:p:box1"]
        assert leaf.amount == 3_000_000
        assert leaf.label == "Schedule K-1 from Maple Partners LP: Box 1 ordinary business income"
        assert "k1:p:box14A" not in values
