from .traced import TracedValue, traced_from_computation, traced_zero
from .outcome import ABSENT, Present
from .tax_year_config import TaxYearConfig
from .form1040 import Form1040Result, compute_form1040
from .form1040nr import Form1040NRResult, compute_form1040nr
from .engine import ComputeResult, TaxComputationEngine, compute_all
from .explain import build_trace, collect_all_values, explain_line
from .state import (
    StateTaxEngine,
    StateTaxConfig,
    StateModuleRegistry,
    StateRulesModule,
    StateComputeResult,
    NO_INCOME_TAX_STATES,
)

__all__ = [
    "TracedValue",
    "traced_from_computation",
    "traced_zero",
    "ABSENT",
    "Present",
    "TaxYearConfig",
    "Form1040Result",
    "compute_form1040",
    "Form1040NRResult",
    "compute_form1040nr",
    "ComputeResult",
    "TaxComputationEngine",
    "compute_all",
    "build_trace",
    "collect_all_values",
    "explain_line",
    "StateTaxEngine",
    "StateTaxConfig",
    "StateModuleRegistry",
    "StateRulesModule",
    "StateComputeResult",
    "NO_INCOME_TAX_STATES",
]
