"""
Whole-return computation engine.

``TaxComputationEngine`` runs the federal return (Form 1040, or Form 1040-NR
for a nonresident alien), then every configured state return, and collects
the provenance graph of the result. Each call is a full recompute: the engine
holds no state between calls, so computing the same return twice yields equal
results.

Usage:
    engine = TaxComputationEngine()
    result = engine.calculate(tax_return)
    print(result.explain("form1040.line15"))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple

from calculator.errors import TaxEngineError
from calculator.explain import collect_all_values, explain_line
from calculator.form1040 import Form1040Result, compute_form1040
from calculator.form1040nr import Form1040NRResult, compute_form1040nr, form1040nr_to_form1040
from calculator.outcome import ABSENT, Outcome, Present
from calculator.state.state_tax_engine import compute_state_returns
from calculator.state.base_state_calculator import StateComputeResult
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComputeResult:
    """Everything computed for one return."""
    federal: Form1040Result
    states: Tuple[StateComputeResult, ...]
    values: Mapping[str, TracedValue]
    executed_schedules: Tuple[str, ...]
    form1040nr: Outcome[Form1040NRResult] = ABSENT

    @property
    def is_nonresident(self) -> bool:
        return isinstance(self.form1040nr, Present)

    def state(self, state_code: str) -> Optional[StateComputeResult]:
        code = state_code.upper()
        for result in self.states:
            if result.state_code == code:
                return result
        return None

    def explain(self, node_id: str) -> str:
        return explain_line(node_id, self.values)

    @property
    def total_state_tax(self) -> int:
        return sum(s.tax_after_credits.amount for s in self.states)

    @property
    def net_refund(self) -> int:
        """Federal plus state refunds less amounts owed; negative when a balance is due."""
        federal = self.federal.refund - self.federal.amount_owed
        return federal + sum(s.refund - s.owed for s in self.states)

    def summary(self) -> Dict[str, Any]:
        """Headline figures in cents, keyed for logging and audit records."""
        fed = self.federal
        return {
            "tax_year": fed.tax_year,
            "config_version": fed.config_version,
            "form": "1040-NR" if self.is_nonresident else "1040",
            "agi": fed.agi,
            "taxable_income": fed.taxable_income,
            "total_tax": fed.total_tax,
            "total_payments": fed.line33.amount,
            "refund": fed.refund,
            "amount_owed": fed.amount_owed,
            "itemized": fed.itemized,
            "states": {
                s.state_code: {
                    "residency": s.residency_type.value,
                    "ratio": s.apportionment_ratio,
                    "taxable_income": s.state_taxable_income.amount,
                    "tax": s.tax_after_credits.amount,
                    "refund": s.refund,
                    "amount_owed": s.owed,
                    "data_confidence": s.data_confidence.value,
                }
                for s in self.states
            },
            "executed_schedules": list(self.executed_schedules),
        }


class TaxComputationEngine:
    """
    Computes the federal return and every state return for a TaxReturn.

    Args:
        config: Year configuration. When omitted, the configuration for each
            return's ``tax_year`` is used.
        state_workers: Thread pool size for state returns; sequential when
            None or 1
    """

    def __init__(self, config: Optional[TaxYearConfig] = None, state_workers: Optional[int] = None):
        self.config = config
        self.state_workers = state_workers

    def config_for(self, model: TaxReturn) -> TaxYearConfig:
        if self.config is None:
            return TaxYearConfig.for_year(model.tax_year)
        if self.config.tax_year != model.tax_year:
            raise TaxEngineError(
                f"Engine configured for {self.config.tax_year} cannot compute a {model.tax_year} return"
            )
        return self.config

    def calculate_federal(self, model: TaxReturn) -> Tuple[Form1040Result, Outcome[Form1040NRResult]]:
        """
        The federal result in Form 1040 layout, plus the 1040-NR result when
        the return carries nonresident alien inputs.
        """
        config = self.config_for(model)
        if model.is_nonresident:
            nr = compute_form1040nr(model, config)
            return form1040nr_to_form1040(nr), Present(nr)
        return compute_form1040(model, config), ABSENT

    def calculate(self, model: TaxReturn) -> ComputeResult:
        """
        Compute the whole return.

        Args:
            model: The return to compute; never modified

        Returns:
            ComputeResult with federal and state results and the flattened
            provenance graph

        Raises:
            UnsupportedTaxYearError: If no configuration exists for the year
        """
        federal, nr = self.calculate_federal(model)
        states = tuple(compute_state_returns(model, federal, max_workers=self.state_workers))

        executed = ["1040-NR"] if isinstance(nr, Present) else []
        executed.extend(federal.executed_schedules())
        executed.extend(s.form_label for s in states)

        values = collect_all_values(federal, model, states, nr.to_optional())
        result = ComputeResult(
            federal=federal,
            form1040nr=nr,
            states=states,
            values=values,
            executed_schedules=tuple(executed),
        )
        logger.info(
            "Return computed for %s: federal tax %s, %d state return(s), %d traced values",
            model.tax_year, federal.total_tax, len(states), len(values),
        )
        return result


def compute_all(model: TaxReturn, config: Optional[TaxYearConfig] = None) -> ComputeResult:
    """Convenience wrapper: one full computation with a fresh engine."""
    return TaxComputationEngine(config).calculate(model)
