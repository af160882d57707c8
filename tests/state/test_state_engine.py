"""Tests for the state module registry and the state tax engine."""

import logging

import pytest

from calculator.apportionment import apportion
from calculator.errors import UnsupportedStateError
from calculator.form1040 import compute_form1040
from calculator.state import StateRulesModule, StateTaxEngine, compute_state_returns
from calculator.state.state_registry import NO_INCOME_TAX_STATES, StateModuleRegistry, has_income_tax
from models import StateReturnConfig
from models.state import ResidencyType

SUPPORTED = ["AZ", "CA", "CO", "DC", "GA", "IL", "MA", "MD", "MI", "NC", "NJ", "NY", "OH", "PA", "VA"]


class TestRegistry:

    def test_supported_states(self):
        assert StateModuleRegistry.get_supported_states(2025) == SUPPORTED

    def test_list_supported_states_has_names(self):
        entries = StateModuleRegistry.list_supported_states(2025)
        assert {"code": "DC", "name": "District of Columbia"} in entries

    def test_get_module_is_case_insensitive(self):
        module = StateModuleRegistry.get_module("ny", 2025)
        assert isinstance(module, StateRulesModule)
        assert module.state_code == "NY"

    def test_get_module_returns_fresh_instances(self):
        assert StateModuleRegistry.get_module("CA", 2025) is not StateModuleRegistry.get_module("CA", 2025)

    @pytest.mark.parametrize("code,year", [("OR", 2025), ("CA", 2019)])
    def test_unsupported_raises(self, code, year):
        with pytest.raises(UnsupportedStateError):
            StateModuleRegistry.get_module(code, year)

    def test_no_income_tax_states_count_as_supported(self):
        assert StateModuleRegistry.is_supported("TX", 2025)
        assert StateModuleRegistry.is_supported("CA", 2025)
        assert not StateModuleRegistry.is_supported("OR", 2025)

    def test_has_income_tax(self):
        assert not has_income_tax("wa")
        assert has_income_tax("CA")

    @pytest.mark.parametrize("code", SUPPORTED)
    def test_module_metadata(self, code):
        module = StateModuleRegistry.get_module(code, 2025)
        assert module.tax_year == 2025
        assert module.config.state_code == code
        assert module.node_prefix
        assert module.node("taxableIncome") == f"{module.node_prefix}.taxableIncome"

    @pytest.mark.parametrize("code", SUPPORTED)
    def test_review_layout_points_at_module_nodes(self, code):
        module = StateModuleRegistry.get_module(code, 2025)
        for section in module.review_layout():
            for item in section.items:
                assert item.node_id.startswith(module.node_prefix + ".")
        kinds = [line.kind for line in module.review_result_lines()]
        assert kinds == ["refund", "owed"]


class TestComputeStateReturns:

    @pytest.fixture
    def multi_state(self, family_return):
        configs = [StateReturnConfig(state_code=c) for c in ("CA", "TX", "OR", "NY", "IL")]
        return family_return.model_copy(update={"state_returns": configs})

    def test_skips_no_tax_and_unsupported(self, multi_state):
        results = compute_state_returns(multi_state, compute_form1040(multi_state))
        assert [r.state_code for r in results] == ["CA", "NY", "IL"]

    def test_thread_pool_keeps_order(self, multi_state):
        federal = compute_form1040(multi_state)
        sequential = compute_state_returns(multi_state, federal)
        pooled = compute_state_returns(multi_state, federal, max_workers=4)
        assert [r.state_code for r in pooled] == ["CA", "NY", "IL"]
        assert pooled == sequential

    def test_provisional_state_warns(self, family_return, caplog):
        model = family_return.model_copy(update={"state_returns": [StateReturnConfig(state_code="GA")]})
        with caplog.at_level(logging.WARNING):
            compute_state_returns(model, compute_form1040(model))
        assert "provisional" in caplog.text

    def test_every_state_satisfies_line_identities(self, family_return):
        model = family_return.model_copy(update={
            "state_returns": [StateReturnConfig(state_code=c) for c in SUPPORTED],
        })
        for result in compute_state_returns(model, compute_form1040(model)):
            assert result.state_taxable_income.amount >= 0
            assert result.tax_after_credits.amount == max(0, result.state_tax.amount - result.state_credits.amount)
            assert result.total_payments.amount == (result.state_withholding.amount
                                                    + result.refundable_credits.amount)
            assert result.refund - result.owed == result.total_payments.amount - result.tax_after_credits.amount
            assert result.refund == 0 or result.owed == 0
            for node_id, value in result.detail.items():
                assert value.node_id == node_id

    def test_federal_result_not_modified(self, family_return):
        federal = compute_form1040(family_return)
        before = federal.line11
        compute_state_returns(family_return, federal)
        assert federal.line11 is before


class TestResidencyScalesRefundableCredits:
    """Refundable credits follow the residency ratio like the tax does."""

    REFUNDABLE = ["CO", "IL", "MA", "MI", "NJ", "NY", "VA"]

    @pytest.mark.parametrize("code", SUPPORTED)
    def test_nonresident_gets_no_refund(self, code, compute_state, earned_income_return):
        result = compute_state(earned_income_return(code), code, residency_type=ResidencyType.NONRESIDENT)
        assert result.refundable_credits.amount == 0
        assert result.refund == 0

    @pytest.mark.parametrize("code", REFUNDABLE)
    def test_part_year_apportions_refundable_credits(self, code, compute_state, earned_income_return):
        model = earned_income_return(code)
        full = compute_state(model, code)
        part = compute_state(model, code, residency_type=ResidencyType.PART_YEAR, move_in_date="2025-07-01")
        assert full.refundable_credits.amount > 0
        assert part.apportionment_ratio == pytest.approx(184 / 365)
        assert part.refundable_credits.amount == apportion(full.refundable_credits.amount,
                                                           part.apportionment_ratio)
        assert part.refundable_credits.node_id.endswith(".apportionedRefundableCredits")
        assert "input.residency" in part.refundable_credits.input_ids

    def test_full_year_not_apportioned(self, compute_state, earned_income_return):
        result = compute_state(earned_income_return("MA"), "MA")
        assert result.refundable_credits.node_id == "ma1.refundableCredits"


class TestStateTaxEngine:

    def test_support_queries(self):
        engine = StateTaxEngine()
        assert engine.is_state_supported("ca")
        assert len(engine.get_supported_states()) == 15
        assert engine.get_no_income_tax_states() == sorted(NO_INCOME_TAX_STATES)

    def test_calculate(self, family_return):
        results = StateTaxEngine(max_workers=2).calculate(family_return, compute_form1040(family_return))
        assert len(results) == 1
        assert results[0].refund == 100_086
