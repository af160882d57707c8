"""
Child and Dependent Care Credit (Form 2441).

Expenses are capped at $3,000 for one qualifying person or $6,000 for two or
more, and at earned income. The rate starts at 35% and drops one point for
each $2,000 (or part) of AGI above $15,000, to a floor of 20%.

Examples:
    $5,000 of care for one child at $100,000 AGI: min(5,000, 3,000) x 20% = $600.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent, phaseout_steps
from calculator.federal.dependents import count_dependent_care_persons
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.credits import DependentCareInfo
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependentCareCreditResult:
    num_qualifying_persons: int
    expense_limit: int
    allowable_expenses: int
    credit_rate: float
    credit: TracedValue


def dependent_care_rate(agi: int, config: TaxYearConfig) -> float:
    steps = phaseout_steps(max(0, agi - config.dependent_care_agi_floor), config.dependent_care_agi_step)
    rate = round(config.dependent_care_max_rate - steps * 0.01, 2)
    return max(config.dependent_care_min_rate, rate)


def compute_dependent_care_credit(
    care: DependentCareInfo,
    model: TaxReturn,
    config: TaxYearConfig,
    agi: int,
    earned_income: int,
) -> DependentCareCreditResult:
    if care.num_qualifying_persons is not None:
        persons = care.num_qualifying_persons
    else:
        persons = count_dependent_care_persons(model.dependents, model.tax_year, config)

    if persons <= 0:
        limit = 0
    elif persons == 1:
        limit = config.dependent_care_expense_cap_one
    else:
        limit = config.dependent_care_expense_cap_two
    allowable = max(0, min(care.total_expenses, limit, earned_income))
    rate = dependent_care_rate(agi, config)
    amount = percent(allowable, rate) if allowable else 0

    logger.debug("Form 2441: persons=%s allowable=%s rate=%.2f credit=%s", persons, allowable, rate, amount)
    return DependentCareCreditResult(
        num_qualifying_persons=persons,
        expense_limit=limit,
        allowable_expenses=allowable,
        credit_rate=rate,
        credit=traced_from_computation(
            amount, "form2441.line11", ["input.dependentCare", "form1040.line11"], "Form 2441, Line 11"
        ),
    )
