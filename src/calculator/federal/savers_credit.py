"""
Retirement Savings Contributions Credit (Form 8880).

Eligible contributions are IRA contributions plus W-2 box 12 elective
deferrals, capped at $2,000 per person. The rate is 50%, 20% or 10% by AGI
band, and zero above the top band. Filers who can be claimed as a dependent
get nothing.
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)

_RATES = (0.50, 0.20, 0.10)


@dataclass(frozen=True)
class SaversCreditResult:
    elective_deferrals: int
    ira_contributions: int
    eligible_contributions: int
    credit_rate: float
    credit: TracedValue


def savers_credit_rate(agi: int, filing_status, config: TaxYearConfig) -> float:
    limits = config.savers_credit_limits[getattr(filing_status, "value", filing_status)]
    for ceiling, rate in zip(limits, _RATES):
        if agi <= ceiling:
            return rate
    return 0.0


def compute_savers_credit(model: TaxReturn, config: TaxYearConfig, agi: int) -> SaversCreditResult:
    deferrals = sum(w.box12_total(config.savers_credit_deferral_codes) for w in model.w2s)
    ira = 0
    if model.ira_contributions is not None:
        c = model.ira_contributions
        ira = c.taxpayer_traditional + c.taxpayer_roth
        if len(model.persons()) > 1:
            ira += c.spouse_traditional + c.spouse_roth

    if model.taxpayer.can_be_claimed_as_dependent:
        eligible = 0
    else:
        eligible = min(deferrals + ira, config.savers_credit_max_contribution * len(model.persons()))
    rate = savers_credit_rate(agi, model.filing_status, config)
    amount = percent(eligible, rate)

    inputs = ["form1040.line11"]
    if deferrals:
        inputs.extend(f"w2:{w.id}:box12" for w in model.w2s if w.box12_total(config.savers_credit_deferral_codes))
    if ira:
        inputs.append("input.iraContributions")
    logger.debug("Form 8880: eligible=%s rate=%s credit=%s", eligible, rate, amount)
    return SaversCreditResult(
        elective_deferrals=deferrals,
        ira_contributions=ira,
        eligible_contributions=eligible,
        credit_rate=rate,
        credit=traced_from_computation(amount, "form8880.line12", inputs, "Form 8880, Line 12"),
    )
