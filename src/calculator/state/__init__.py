"""State tax calculation module."""

from calculator.state.state_tax_config import DataConfidence, StateTaxConfig
from calculator.state.state_tax_engine import StateTaxEngine, compute_state_returns
from calculator.state.state_registry import StateModuleRegistry, NO_INCOME_TAX_STATES, register_state
from calculator.state.base_state_calculator import (
    ApportionmentBasis,
    ReviewItem,
    ReviewResultLine,
    ReviewSection,
    StateComputeResult,
    StateRulesModule,
)

# Import configs to register state modules
from calculator.state import configs  # noqa: F401

__all__ = [
    "ApportionmentBasis",
    "DataConfidence",
    "StateTaxConfig",
    "StateTaxEngine",
    "compute_state_returns",
    "StateModuleRegistry",
    "NO_INCOME_TAX_STATES",
    "register_state",
    "ReviewItem",
    "ReviewResultLine",
    "ReviewSection",
    "StateComputeResult",
    "StateRulesModule",
]
