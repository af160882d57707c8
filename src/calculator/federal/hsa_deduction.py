"""
Health Savings Account (Form 8889).

Deductible contributions are the taxpayer's own contributions up to the
coverage limit left after employer contributions (W-2 box 12 code W).
Distributions not used for qualified medical expenses are taxable income
with a 20% additional tax unless the holder is 65 or disabled. Excess
contributions owe a 6% excise tax.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.deductions import HSACoverage
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HSAResult:
    contribution_limit: int
    employer_contributions: int
    excess_contributions: int
    total_distributions: int
    deduction: TracedValue               # Schedule 1 line 13
    taxable_distributions: TracedValue   # Schedule 1 line 8f
    distribution_penalty: TracedValue    # Schedule 2 line 17c
    excess_contribution_tax: TracedValue  # Form 5329 line 49

    @property
    def total_penalties(self) -> int:
        return self.distribution_penalty.amount + self.excess_contribution_tax.amount


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"form8889.{line}", inputs, f"Form 8889, {line}")


def compute_hsa(model: TaxReturn, config: TaxYearConfig) -> HSAResult:
    hsa = model.hsa
    if hsa.coverage_type == HSACoverage.FAMILY:
        limit = config.hsa_family_limit
    else:
        limit = config.hsa_self_only_limit
    if hsa.age_55_or_older:
        limit += config.hsa_catchup_55_plus

    employer = sum(w.box12_total(("W",)) for w in model.w2s)
    own = hsa.taxpayer_contributions
    excess = max(0, employer + own - limit)
    deductible = min(own, max(0, limit - employer))

    distributions = sum(f.gross_distribution for f in model.form1099_sas)
    taxable = max(0, distributions - hsa.qualified_medical_expenses)
    penalty = 0 if hsa.age_65_or_disabled else percent(taxable, config.hsa_distribution_penalty_rate)
    excise = percent(excess, config.hsa_excess_contribution_rate)

    sa_ids = [f"1099sa:{f.id}:box1" for f in model.form1099_sas]
    logger.debug("Form 8889: deduction=%s taxable_dist=%s excess=%s", deductible, taxable, excess)
    return HSAResult(
        contribution_limit=limit,
        employer_contributions=employer,
        excess_contributions=excess,
        total_distributions=distributions,
        deduction=_line("deduction", deductible, ["input.hsa"]),
        taxable_distributions=_line("taxableDistributions", taxable, ["input.hsa", *sa_ids]),
        distribution_penalty=_line("additionalTax", penalty, ["form8889.taxableDistributions"]),
        excess_contribution_tax=traced_from_computation(
            excise, "form5329.line49", ["input.hsa"], "Form 5329, Line 49"
        ),
    )
