"""State tax engine - runs every state return configured on a TaxReturn."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

from calculator.errors import UnsupportedStateError
from calculator.form1040 import Form1040Result
from calculator.state.base_state_calculator import StateComputeResult, StateRulesModule
from calculator.state.state_registry import NO_INCOME_TAX_STATES, StateModuleRegistry
from calculator.state.state_tax_config import DataConfidence
from models.state import StateReturnConfig
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


def _resolve_modules(model: TaxReturn) -> List[Tuple[StateRulesModule, StateReturnConfig]]:
    jobs = []
    for residency in model.state_returns:
        code = residency.state_code
        if code in NO_INCOME_TAX_STATES:
            logger.debug("%s has no individual income tax; no state return", code)
            continue
        try:
            module = StateModuleRegistry.get_module(code, model.tax_year)
        except UnsupportedStateError as exc:
            logger.warning("Skipping state return: %s", exc)
            continue
        if module.data_confidence == DataConfidence.PROVISIONAL:
            logger.warning(
                "%s %s constants are provisional: %s",
                code, model.tax_year, module.config.confidence_note or "not yet checked against published forms",
            )
        jobs.append((module, residency))
    return jobs


def compute_state_returns(
    model: TaxReturn,
    federal: Form1040Result,
    max_workers: Optional[int] = None,
) -> List[StateComputeResult]:
    """
    Compute every state return configured on ``model``.

    States are independent of each other and only read ``federal``, so with
    ``max_workers`` greater than one they are fanned out on a thread pool.
    Results keep the order of ``model.state_returns``.

    Args:
        model: The return being computed
        federal: The completed federal result
        max_workers: Thread pool size; sequential when None or 1

    Returns:
        One StateComputeResult per supported income-tax state
    """
    jobs = _resolve_modules(model)
    if not jobs:
        return []

    if max_workers is None or max_workers <= 1 or len(jobs) == 1:
        results = [module.compute(model, federal, residency) for module, residency in jobs]
    else:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            futures = [pool.submit(module.compute, model, federal, residency) for module, residency in jobs]
            results = [f.result() for f in futures]

    for result in results:
        logger.info(
            "%s return computed: tax %s, refund %s, owed %s",
            result.state_code, result.tax_after_credits.amount, result.refund, result.owed,
        )
    return results


class StateTaxEngine:
    """
    Orchestrates state tax calculations for one tax year.

    Thin wrapper over the registry for callers that want to ask about
    support before computing.
    """

    def __init__(self, tax_year: int = 2025, max_workers: Optional[int] = None):
        self.tax_year = tax_year
        self.max_workers = max_workers

    def calculate(self, model: TaxReturn, federal: Form1040Result) -> List[StateComputeResult]:
        return compute_state_returns(model, federal, max_workers=self.max_workers)

    def is_state_supported(self, state_code: str) -> bool:
        return StateModuleRegistry.is_supported(state_code, self.tax_year)

    def get_supported_states(self) -> list:
        return StateModuleRegistry.list_supported_states(self.tax_year)

    def get_no_income_tax_states(self) -> list:
        return sorted(NO_INCOME_TAX_STATES)
