"""
Other refundable credits (Schedule 3 Part II, Form 1040 line 31).

Only excess Social Security withholding is modeled: with two or more
employers, employee Social Security tax withheld above 6.2% of the wage base
is refunded.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefundableCreditsResult:
    excess_social_security: TracedValue   # Schedule 3 line 11
    total: TracedValue                    # Schedule 3 line 15


def max_social_security_withholding(config: TaxYearConfig) -> int:
    return percent(config.ss_wage_base, config.ss_employee_rate)


def compute_excess_social_security(model: TaxReturn, config: TaxYearConfig) -> TracedValue:
    """W-2s are not split by spouse, so a joint return gets one maximum per spouse."""
    if len(model.w2s) < 2:
        return traced_zero("schedule3.line11", "Schedule 3, Line 11")
    withheld = sum(w.social_security_tax_withheld for w in model.w2s)
    ceiling = max_social_security_withholding(config) * len(model.persons())
    excess = max(0, withheld - ceiling)
    if excess == 0:
        return traced_zero("schedule3.line11", "Schedule 3, Line 11")
    logger.debug("Excess Social Security withholding %s over %s", excess, ceiling)
    return traced_from_computation(
        excess, "schedule3.line11", [f"w2:{w.id}:box4" for w in model.w2s], "Schedule 3, Line 11"
    )


def compute_refundable_credits(model: TaxReturn, config: TaxYearConfig) -> RefundableCreditsResult:
    excess = compute_excess_social_security(model, config)
    return RefundableCreditsResult(
        excess_social_security=excess,
        total=traced_from_computation(excess.amount, "schedule3.line15", ["schedule3.line11"], "Schedule 3, Line 15"),
    )
