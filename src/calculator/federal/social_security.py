"""
Taxable Social Security benefits (Form 1040 line 6b, Pub. 915 Worksheet 1).

Provisional income is other income plus tax-exempt interest plus half the
benefits. Up to 50% of benefits are taxable above the base amount and up to
85% above the second base amount. Married filing separately uses a base of
zero, so 85% of benefits are taxable from the first dollar.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SocialSecurityResult:
    gross_benefits: int
    provisional_income: int
    base_amount: int
    second_base_amount: int
    tier: int             # 0 = none taxable, 1 = 50% tier, 2 = 85% tier
    taxable_benefits: TracedValue


def compute_taxable_social_security(
    gross_benefits: int,
    other_income: int,
    tax_exempt_interest: int,
    filing_status,
    config: TaxYearConfig,
    inputs=(),
) -> SocialSecurityResult:
    """
    Examples:
        Single, $20,000 benefits, $30,000 other income: provisional income is
        $40,000, so taxable = min(85% x 6,000 + min(4,500, 10,000), 17,000)
        = $9,600.
    """
    base = config.lookup("ss_base_amount", filing_status)
    second = config.lookup("ss_second_base_amount", filing_status)
    half = percent(gross_benefits, 0.5)
    provisional = other_income + tax_exempt_interest + half

    if gross_benefits <= 0 or provisional <= base:
        taxable, tier = 0, 0
    elif provisional <= second:
        taxable = min(percent(provisional - base, 0.5), half)
        tier = 1
    else:
        tier1 = min(percent(second - base, 0.5), half)
        taxable = min(
            percent(provisional - second, 0.85) + tier1,
            percent(gross_benefits, 0.85),
        )
        tier = 2

    logger.debug("SS benefits: provisional=%s tier=%s taxable=%s", provisional, tier, taxable)
    return SocialSecurityResult(
        gross_benefits=gross_benefits,
        provisional_income=provisional,
        base_amount=base,
        second_base_amount=second,
        tier=tier,
        taxable_benefits=traced_from_computation(
            taxable, "form1040.line6b", ["form1040.line6a", *inputs], "Form 1040, Line 6b"
        ),
    )
