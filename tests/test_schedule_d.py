"""
Tests for Schedule D and Form 8949.

Short-term transactions land in boxes A/B, long-term in D/E. Capital gain
distributions from 1099-DIV box 2a are long-term (line 13).
"""

import pytest

from calculator.errors import FieldLookupError
from calculator.federal.schedule_d import compute_form8949, compute_schedule_d
from calculator.form1040 import compute_form1040
from calculator.tax_year_config import TaxYearConfig
from models import CapitalTransaction, Form1099DIV, Form8949Category, TaxReturn, W2Info


@pytest.fixture(scope="module")
def config():
    return TaxYearConfig.for_year(2025)


def sale(tx_id: str, proceeds: int, basis: int, category=Form8949Category.A, adjustment: int = 0):
    return CapitalTransaction(
        id=tx_id, description=f"Sale {tx_id}", proceeds=proceeds, cost_basis=basis,
        category=category, adjustment_amount=adjustment,
    )


class TestForm8949:

    def test_groups_by_category(self):
        result = compute_form8949([
            sale("a1", 1_000_000, 800_000),
            sale("a2", 500_000, 600_000),
            sale("d1", 2_000_000, 1_000_000, Form8949Category.D),
        ])
        assert result.totals_for(Form8949Category.A).total_gain_loss.amount == 100_000
        assert result.totals_for(Form8949Category.D).total_gain_loss.amount == 1_000_000
        assert result.totals_for(Form8949Category.B).total_gain_loss.amount == 0

    def test_gain_loss_cites_transactions(self):
        totals = compute_form8949([sale("a1", 100, 50), sale("a2", 100, 50)]).totals_for(Form8949Category.A)
        assert totals.total_gain_loss.input_ids == ("tx:a1", "tx:a2")

    def test_wash_sale_adjustment(self):
        """Column (g) adds back the disallowed loss."""
        totals = compute_form8949([sale("w", 800_000, 1_000_000, adjustment=150_000)]).totals_for(
            Form8949Category.A
        )
        assert totals.total_gain_loss.amount == -50_000

    def test_transaction_at_row(self):
        totals = compute_form8949([sale("a1", 100, 50), sale("a2", 300, 50)]).totals_for(Form8949Category.A)
        assert totals.transaction_at(1).id == "a2"
        with pytest.raises(FieldLookupError):
            totals.transaction_at(2)


class TestScheduleD:

    def test_short_and_long_term_gains(self, config):
        model = TaxReturn(capital_transactions=[
            sale("st", 1_500_000, 1_000_000),
            sale("lt", 3_000_000, 2_000_000, Form8949Category.D),
        ])
        result = compute_schedule_d(model, config)
        assert result.line7.amount == 500_000
        assert result.line15.amount == 1_000_000
        assert result.line16.amount == 1_500_000
        assert result.line21.amount == 1_500_000
        assert result.capital_loss_carryforward == 0

    def test_capital_gain_distributions(self, config):
        model = TaxReturn(form1099_divs=[Form1099DIV(id="fund", capital_gain_distributions=250_000)])
        result = compute_schedule_d(model, config)
        assert result.line13.amount == 250_000
        assert result.line13.input_ids == ("1099div:fund:box2a",)
        assert result.line15.amount == 250_000


class TestScheduleDOnReturn:

    def test_line7_carries_schedule_d(self):
        model = TaxReturn(
            w2s=[W2Info(id="w2", wages=6_000_000)],
            capital_transactions=[sale("lt", 3_000_000, 1_000_000, Form8949Category.D)],
        )
        result = compute_form1040(model)
        assert result.line7.amount == 2_000_000
        assert result.line7.input_ids == ("scheduleD.line21",)
        assert result.used_qdcg_worksheet
        assert "schedule_d" in result.executed_schedules()

    def test_long_term_gain_taxed_at_preferential_rates(self):
        """Same taxable income costs less tax as LTCG than as wages."""
        gains = compute_form1040(TaxReturn(
            w2s=[W2Info(id="w2", wages=6_000_000)],
            capital_transactions=[sale("lt", 3_000_000, 1_000_000, Form8949Category.D)],
        ))
        wages = compute_form1040(TaxReturn(w2s=[W2Info(id="w2", wages=8_000_000)]))
        assert gains.line15.amount == wages.line15.amount
        assert gains.line16.amount < wages.line16.amount

    def test_no_schedule_d_without_sales(self):
        result = compute_form1040(TaxReturn(w2s=[W2Info(id="w2", wages=6_000_000)]))
        assert not result.schedule_d.is_present
        assert result.line7.amount == 0
