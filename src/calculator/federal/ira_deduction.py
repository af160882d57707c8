"""
Traditional IRA deduction (Schedule 1 line 20, Pub. 590-A Worksheet 1-2).

Each spouse's contribution is limited to $7,000 ($8,000 at 50 or older). When
the contributor is an active participant in an employer plan, or only the
spouse is, the deduction phases out over the MAGI range. The reduced limit is
rounded up to the next $10 and, if not zero, is at least $200.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from calculator.decimal_math import ratio_of, round_up_to
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn
from models.taxpayer import FilingStatus, Person

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PersonIRADeduction:
    role: str
    contribution: int
    contribution_limit: int
    phaseout_start: Optional[int]
    phaseout_range: Optional[int]
    deductible: int


@dataclass(frozen=True)
class IRADeductionResult:
    persons: Tuple[PersonIRADeduction, ...]
    deduction: TracedValue


def contribution_limit(person: Person, tax_year: int, config: TaxYearConfig) -> int:
    age = person.age_at_year_end(tax_year)
    if age is not None and age >= 50:
        return config.ira_contribution_limit + config.ira_catchup_50_plus
    return config.ira_contribution_limit


def _phaseout(model: TaxReturn, person: Person, other: Optional[Person], config: TaxYearConfig):
    """``(start, range)`` for the contributor, or ``(None, None)`` when no phase-out applies."""
    fs = model.filing_status
    if person.covered_by_employer_plan:
        return (
            config.lookup("ira_phaseout_start_covered", fs),
            config.lookup("ira_phaseout_range_covered", fs),
        )
    if other is not None and other.covered_by_employer_plan:
        if fs == FilingStatus.MARRIED_SEPARATE:
            return 0, config.ira_phaseout_range_spouse_covered
        return config.ira_phaseout_start_spouse_covered, config.ira_phaseout_range_spouse_covered
    return None, None


def _reduced_limit(limit: int, magi: int, start: int, width: int, config: TaxYearConfig) -> int:
    if magi <= start:
        return limit
    if width <= 0 or magi >= start + width:
        return 0
    reduced = round_up_to(ratio_of(limit, start + width - magi, width), config.ira_phaseout_rounding)
    return max(reduced, config.ira_minimum_deduction)


def compute_ira_deduction(model: TaxReturn, config: TaxYearConfig, magi: int) -> IRADeductionResult:
    contributions = model.ira_contributions
    rows = []
    people = [("taxpayer", model.taxpayer, model.spouse, contributions.taxpayer_traditional)]
    if model.spouse is not None and model.filing_status == FilingStatus.MARRIED_JOINT:
        people.append(("spouse", model.spouse, model.taxpayer, contributions.spouse_traditional))

    for role, person, other, contributed in people:
        limit = contribution_limit(person, model.tax_year, config)
        start, width = _phaseout(model, person, other, config)
        allowed = limit if start is None else _reduced_limit(limit, magi, start, width, config)
        rows.append(PersonIRADeduction(
            role=role,
            contribution=contributed,
            contribution_limit=limit,
            phaseout_start=start,
            phaseout_range=width,
            deductible=min(contributed, allowed),
        ))

    total = sum(r.deductible for r in rows)
    logger.debug("IRA deduction %s at MAGI %s", total, magi)
    return IRADeductionResult(
        persons=tuple(rows),
        deduction=traced_from_computation(
            total, "iraDeduction.total", ["input.iraContributions", "form1040.line9"], "IRA Deduction"
        ),
    )
