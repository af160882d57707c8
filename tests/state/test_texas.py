"""States without an individual income tax produce no state return."""

import pytest

from calculator.engine import compute_all
from calculator.errors import UnsupportedStateError
from calculator.state.state_registry import NO_INCOME_TAX_STATES, StateModuleRegistry
from models import StateReturnConfig


@pytest.mark.parametrize("code", ["TX", "FL", "WA", "NV", "SD", "WY", "AK", "TN", "NH"])
def test_no_income_tax_states(code):
    assert code in NO_INCOME_TAX_STATES


def test_texas_has_no_module():
    with pytest.raises(UnsupportedStateError):
        StateModuleRegistry.get_module("TX", 2025)


def test_texas_resident_gets_federal_only(single_w2_return):
    model = single_w2_return.model_copy(update={"state_returns": [StateReturnConfig(state_code="tx")]})
    result = compute_all(model)
    assert result.states == ()
    assert result.total_state_tax == 0
    assert result.net_refund == result.federal.refund - result.federal.amount_owed


def test_texas_alongside_taxing_state(family_return):
    configs = [StateReturnConfig(state_code="TX"), StateReturnConfig(state_code="CA")]
    result = compute_all(family_return.model_copy(update={"state_returns": configs}))
    assert [s.state_code for s in result.states] == ["CA"]
