"""Standard deduction (Form 1040 line 12 when not itemizing)."""

import logging

from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


def additional_deduction_count(model: TaxReturn) -> int:
    """One box each for age 65 or older and blindness, per person on the return."""
    count = 0
    for person in model.persons():
        if person.is_65_or_older(model.tax_year):
            count += 1
        if person.is_blind:
            count += 1
    return count


def compute_standard_deduction(model: TaxReturn, config: TaxYearConfig, earned_income: int) -> TracedValue:
    """
    Base amount plus $2,000 ($1,600 married) per age/blind box. A filer who can
    be claimed as a dependent is limited to the greater of $1,350 or earned
    income plus $450, not above the base amount.
    """
    fs = model.filing_status
    base = config.lookup("standard_deduction", fs)
    if model.taxpayer.can_be_claimed_as_dependent:
        base = min(base, max(config.dependent_standard_deduction_min,
                             earned_income + config.dependent_standard_deduction_earned_addon))
    boxes = additional_deduction_count(model)
    amount = base + boxes * config.lookup("additional_standard_deduction", fs)
    logger.debug("Standard deduction %s (%s additional boxes)", amount, boxes)
    inputs = ["input.filingStatus"]
    if boxes:
        inputs.append("input.ageBlindness")
    return traced_from_computation(amount, "form1040.standardDeduction", inputs, "Standard Deduction")
