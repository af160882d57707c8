"""
Tests for Determinism - Verifying same inputs always produce same outputs.

The engine holds no state between calls, so repeated computations of one
return must compare equal, with and without the state thread pool.
"""

from calculator.engine import TaxComputationEngine, compute_all
from models import StateReturnConfig


class TestCalculationDeterminism:
    """Tests for tax calculation determinism."""

    def test_repeated_federal_results_equal(self, single_w2_return):
        engine = TaxComputationEngine()
        results = [engine.calculate(single_w2_return).federal for _ in range(3)]
        assert results[0] == results[1] == results[2]

    def test_fresh_engines_agree(self, family_return):
        assert compute_all(family_return).summary() == compute_all(family_return).summary()

    def test_thread_pool_matches_sequential(self, family_return):
        model = family_return.model_copy(update={
            "state_returns": [StateReturnConfig(state_code="CA"), StateReturnConfig(state_code="NY"),
                              StateReturnConfig(state_code="IL")],
        })
        sequential = TaxComputationEngine(state_workers=1).calculate(model)
        pooled = TaxComputationEngine(state_workers=4).calculate(model)
        assert [s.state_code for s in pooled.states] == ["CA", "NY", "IL"]
        assert sequential.states == pooled.states
        assert sequential.values == pooled.values

    def test_input_unchanged(self, family_return):
        before = family_return.model_dump()
        compute_all(family_return)
        assert family_return.model_dump() == before
