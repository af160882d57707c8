"""
Earned Income Credit (Form 1040 line 27).

The credit phases in with earned income, plateaus at the maximum, then phases
out above the threshold (higher for joint filers). It is the smaller of the
credit computed at earned income and at AGI. Married filing separately,
investment income above the limit, and childless filers outside ages 25-64
are ineligible.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from calculator.decimal_math import percent
from calculator.federal.dependents import is_eic_qualifying_child
from calculator.tax_year_config import EICSchedule, TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.tax_return import TaxReturn
from models.taxpayer import FilingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EarnedIncomeCreditResult:
    num_qualifying_children: int
    eligible: bool
    ineligible_reason: Optional[str]
    credit_at_earned_income: int
    credit_at_agi: int
    credit: TracedValue


def credit_at_income(income: int, schedule: EICSchedule, phaseout_start: int) -> int:
    if income <= 0:
        return 0
    if income <= schedule.earned_income_amount:
        return percent(income, schedule.phase_in_rate)
    if income <= phaseout_start:
        return schedule.max_credit
    return max(0, schedule.max_credit - percent(income - phaseout_start, schedule.phase_out_rate))


def _ineligible(children: int, reason: str) -> EarnedIncomeCreditResult:
    logger.debug("EIC ineligible: %s", reason)
    return EarnedIncomeCreditResult(
        num_qualifying_children=children,
        eligible=False,
        ineligible_reason=reason,
        credit_at_earned_income=0,
        credit_at_agi=0,
        credit=traced_zero("form1040.line27", "Form 1040, Line 27"),
    )


def _childless_age_ok(model: TaxReturn, config: TaxYearConfig) -> bool:
    """At least one filer on the return must fall inside the age window."""
    ages = [p.age_at_year_end(model.tax_year) for p in model.persons()]
    known = [a for a in ages if a is not None]
    if not known:
        return True
    return any(config.eic_childless_min_age <= a <= config.eic_childless_max_age for a in known)


def compute_earned_income_credit(
    model: TaxReturn,
    config: TaxYearConfig,
    earned_income: int,
    agi: int,
    investment_income: int,
) -> EarnedIncomeCreditResult:
    children = sum(1 for d in model.dependents if is_eic_qualifying_child(d, model.tax_year, config))

    if model.filing_status == FilingStatus.MARRIED_SEPARATE:
        return _ineligible(children, "married_separate")
    if investment_income > config.eic_investment_income_limit:
        return _ineligible(children, "investment_income")
    if earned_income <= 0:
        return _ineligible(children, "no_earned_income")
    if children == 0 and not _childless_age_ok(model, config):
        return _ineligible(children, "age")

    schedule = config.eic_schedule(children)
    if model.filing_status == FilingStatus.MARRIED_JOINT:
        start = schedule.phaseout_start_joint
    else:
        start = schedule.phaseout_start
    at_earned = credit_at_income(earned_income, schedule, start)
    at_agi = credit_at_income(agi, schedule, start)
    amount = min(at_earned, at_agi)

    return EarnedIncomeCreditResult(
        num_qualifying_children=children,
        eligible=True,
        ineligible_reason=None,
        credit_at_earned_income=at_earned,
        credit_at_agi=at_agi,
        credit=traced_from_computation(
            amount, "form1040.line27", ["form1040.line1z", "form1040.line11", "input.dependents"],
            "Form 1040, Line 27",
        ),
    )
