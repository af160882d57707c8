"""State tax modules for tax year 2025."""

from calculator.state.configs.state_2025 import (  # noqa: F401
    arizona,
    california,
    colorado,
    district_of_columbia,
    georgia,
    illinois,
    maryland,
    massachusetts,
    michigan,
    new_jersey,
    new_york,
    north_carolina,
    ohio,
    pennsylvania,
    virginia,
)
