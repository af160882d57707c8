"""
Child Tax Credit, Credit for Other Dependents and Additional Child Tax Credit
(Schedule 8812).

The combined credit is reduced by $50 for each $1,000, or fraction of $1,000,
of AGI above the threshold. The nonrefundable part is limited to tax; the
unused part of the child portion is refundable as ACTC, up to $1,700 per
child and 15% of earned income above $2,500.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent, phaseout_steps
from calculator.federal.dependents import is_ctc_qualifying_child
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChildTaxCreditResult:
    num_qualifying_children: int
    num_other_dependents: int
    initial_credit: int
    phaseout_reduction: int
    credit_after_phaseout: TracedValue
    nonrefundable: TracedValue   # Form 1040 line 19
    additional: TracedValue      # Form 1040 line 28


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"schedule8812.{line}", inputs, f"Schedule 8812, Line {line[4:]}")


def compute_child_tax_credit(
    model: TaxReturn,
    config: TaxYearConfig,
    agi: int,
    tax_liability: int,
    earned_income: int,
) -> ChildTaxCreditResult:
    children = sum(1 for d in model.dependents if is_ctc_qualifying_child(d, model.tax_year, config))
    others = len(model.dependents) - children
    initial = children * config.ctc_per_child + others * config.odc_per_dependent

    threshold = config.lookup("ctc_phaseout_threshold", model.filing_status)
    steps = phaseout_steps(max(0, agi - threshold), config.ctc_phaseout_step)
    reduction = min(initial, steps * config.ctc_phaseout_per_step)
    after = initial - reduction
    line12 = _line("line12", after, ["input.dependents", "form1040.line11"])

    nonrefundable = min(after, max(0, tax_liability))
    line14 = _line("line14", nonrefundable, ["schedule8812.line12", "form1040.line18"])

    additional = 0
    if children > 0 and after > nonrefundable:
        # Only the child portion of the unused credit is refundable
        child_portion = max(0, min(after, children * config.ctc_per_child) - nonrefundable)
        cap = children * config.actc_max_per_child
        earned_based = percent(max(0, earned_income - config.actc_earned_income_threshold), config.actc_rate)
        additional = min(child_portion, cap, earned_based)
    line27 = _line("line27", additional, ["schedule8812.line12", "schedule8812.line14", "form1040.line1z"])

    logger.debug("CTC: children=%s others=%s initial=%s reduction=%s nonref=%s actc=%s",
                 children, others, initial, reduction, nonrefundable, additional)
    return ChildTaxCreditResult(
        num_qualifying_children=children,
        num_other_dependents=others,
        initial_credit=initial,
        phaseout_reduction=reduction,
        credit_after_phaseout=line12,
        nonrefundable=line14,
        additional=line27,
    )
