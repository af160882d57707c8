"""Tests for the whole-return computation engine."""

import pytest

from calculator.engine import TaxComputationEngine, compute_all
from calculator.errors import TaxEngineError, UnsupportedTaxYearError
from calculator.tax_year_config import TaxYearConfig
from models import NonresidentAlienInfo, StateReturnConfig, TaxReturn, W2Info


class TestComputeResult:

    def test_federal_and_state(self, family_return):
        result = compute_all(family_return)
        assert result.federal.refund == 390_200
        assert len(result.states) == 1
        ca = result.state("ca")
        assert ca is not None
        assert result.total_state_tax == ca.tax_after_credits.amount

    def test_missing_state(self, family_return):
        assert compute_all(family_return).state("NY") is None

    def test_net_refund(self, family_return):
        result = compute_all(family_return)
        ca = result.state("CA")
        assert result.net_refund == 390_200 + ca.refund - ca.owed

    def test_executed_schedules_include_state_form(self, family_return):
        result = compute_all(family_return)
        assert "child_tax_credit" in result.executed_schedules
        assert result.state("CA").form_label in result.executed_schedules

    def test_summary(self, single_w2_return):
        summary = compute_all(single_w2_return).summary()
        assert summary["form"] == "1040"
        assert summary["agi"] == 7_500_000
        assert summary["refund"] == 105_100
        assert summary["states"] == {}
        assert summary["config_version"] == "2025.2"

    def test_values_contain_lines_and_leaves(self, single_w2_return):
        values = compute_all(single_w2_return).values
        assert values["form1040.line15"].amount == 5_925_000
        assert values["w2:acme:box1"].amount == 7_500_000


class TestStateSelection:

    def test_no_tax_state_skipped(self, single_w2_return):
        model = single_w2_return.model_copy(update={"state_returns": [StateReturnConfig(state_code="TX")]})
        assert compute_all(model).states == ()

    def test_unsupported_state_skipped(self, single_w2_return, caplog):
        model = single_w2_return.model_copy(update={"state_returns": [StateReturnConfig(state_code="OR")]})
        with caplog.at_level("WARNING"):
            result = compute_all(model)
        assert result.states == ()
        assert "OR" in caplog.text


class TestYearHandling:

    def test_year_mismatch(self):
        engine = TaxComputationEngine(config=TaxYearConfig.for_year(2025))
        with pytest.raises(TaxEngineError):
            engine.calculate(TaxReturn(tax_year=2024))

    def test_unsupported_year(self):
        with pytest.raises(UnsupportedTaxYearError):
            TaxComputationEngine().calculate(TaxReturn(tax_year=2019))


class TestNonresidentRouting:

    def test_nonresident_uses_1040nr(self):
        model = TaxReturn(
            w2s=[W2Info(id="uni", wages=5_000_000, federal_tax_withheld=700_000)],
            nonresident_alien=NonresidentAlienInfo(country_of_residence="India"),
        )
        result = compute_all(model)
        assert result.is_nonresident
        assert result.executed_schedules[0] == "1040-NR"
        assert result.federal.total_tax == 591_400
        assert result.summary()["form"] == "1040-NR"
        assert "form1040nr.eciTax" in result.values

    def test_resident_has_no_1040nr(self, single_w2_return):
        assert not compute_all(single_w2_return).is_nonresident
