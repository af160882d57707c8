"""State tax configurations by year."""

# Import all state calculators to register them
from calculator.state.configs import state_2025

__all__ = ["state_2025"]
