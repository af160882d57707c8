"""
Enhanced deduction for seniors (Schedule 1-A), tax years 2025 through 2028.

$6,000 for each taxpayer or spouse who is 65 or older at year end, claimed
whether or not the return itemizes. Each person's amount is reduced by 6% of
modified AGI over $75,000 ($150,000 joint). Married people must file jointly
to claim it.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.taxpayer import FilingStatus
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeniorDeductionResult:
    qualifying_persons: int
    reduction: int          # per person
    deduction: TracedValue


def qualifying_seniors(model: TaxReturn) -> int:
    if model.filing_status == FilingStatus.MARRIED_SEPARATE:
        return 0
    return sum(1 for p in model.persons() if p.is_65_or_older(model.tax_year))


def compute_senior_deduction(model: TaxReturn, config: TaxYearConfig, magi: int) -> SeniorDeductionResult:
    count = qualifying_seniors(model)
    threshold = config.lookup("senior_deduction_phaseout_start", model.filing_status)
    reduction = percent(max(0, magi - threshold), config.senior_deduction_phaseout_rate)
    per_person = max(0, config.senior_deduction_amount - reduction)
    deduction = traced_from_computation(
        per_person * count, "schedule1A.seniorDeduction", ["input.ageBlindness", "form1040.line11"],
        "Schedule 1-A, Enhanced deduction for seniors",
    )
    logger.debug("Senior deduction %s for %s person(s), reduction %s", deduction.amount, count, reduction)
    return SeniorDeductionResult(qualifying_persons=count, reduction=reduction, deduction=deduction)
