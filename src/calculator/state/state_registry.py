"""State module registry for dynamic lookup."""

from __future__ import annotations

from typing import Callable, Dict, List, Type

from calculator.errors import UnsupportedStateError
from calculator.state.base_state_calculator import StateRulesModule


# States without income tax
NO_INCOME_TAX_STATES = frozenset({
    "AK",  # Alaska
    "FL",  # Florida
    "NV",  # Nevada
    "SD",  # South Dakota
    "TX",  # Texas
    "WA",  # Washington
    "WY",  # Wyoming
    "TN",  # Tennessee (no tax on wages)
    "NH",  # New Hampshire (interest and dividends tax repealed)
})


class StateModuleRegistry:
    """
    Registry for state tax modules.

    Modules are registered by state code and tax year and instantiated on
    lookup, so every computation gets a fresh, stateless module.
    """

    # Storage: state_code -> tax_year -> module class
    _modules: Dict[str, Dict[int, Type[StateRulesModule]]] = {}

    @classmethod
    def register(cls, state_code: str, tax_year: int, module_class: Type[StateRulesModule]) -> None:
        """
        Register a module for a state and year.

        Args:
            state_code: Two-letter state code (e.g., "CA", "NY")
            tax_year: Tax year this module handles
            module_class: The module class to register
        """
        cls._modules.setdefault(state_code.upper(), {})[tax_year] = module_class

    @classmethod
    def get_module(cls, state_code: str, tax_year: int) -> StateRulesModule:
        """
        Module instance for a state and year.

        Raises:
            UnsupportedStateError: If no module is registered for the pair
        """
        state_upper = state_code.upper()
        module_class = cls._modules.get(state_upper, {}).get(tax_year)
        if module_class is None:
            raise UnsupportedStateError(state_upper, tax_year)
        return module_class()

    @classmethod
    def list_supported_states(cls, tax_year: int) -> List[Dict[str, str]]:
        """``[{"code": "CA", "name": "California"}, ...]`` sorted by code."""
        out = []
        for state_code in sorted(cls._modules):
            module_class = cls._modules[state_code].get(tax_year)
            if module_class is not None:
                out.append({"code": state_code, "name": module_class.state_name})
        return out

    @classmethod
    def get_supported_states(cls, tax_year: int) -> List[str]:
        return [entry["code"] for entry in cls.list_supported_states(tax_year)]

    @classmethod
    def is_supported(cls, state_code: str, tax_year: int) -> bool:
        """
        True when a module is registered for the year. States without an
        income tax count as supported: they simply produce no return.
        """
        state_upper = state_code.upper()
        if state_upper in NO_INCOME_TAX_STATES:
            return True
        return tax_year in cls._modules.get(state_upper, {})

    @classmethod
    def clear(cls) -> None:
        """Clear all registered modules. Useful for testing."""
        cls._modules.clear()


def register_state(state_code: str, tax_year: int) -> Callable:
    """
    Decorator to register a state module.

    Usage:
        @register_state("CA", 2025)
        class California2025(StateRulesModule):
            ...
    """
    def decorator(cls: Type[StateRulesModule]) -> Type[StateRulesModule]:
        StateModuleRegistry.register(state_code, tax_year, cls)
        return cls
    return decorator


def has_income_tax(state_code: str) -> bool:
    return state_code.upper() not in NO_INCOME_TAX_STATES
