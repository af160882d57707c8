"""
Other taxes (Schedule 2 Part II, Form 1040 line 23).

- Additional Medicare Tax (Form 8959): 0.9% of Medicare wages plus
  self-employment earnings above the filing-status threshold.
- Net Investment Income Tax (Form 8960): 3.8% of the smaller of net
  investment income and MAGI above the threshold.
- 10% additional tax on early retirement distributions (1099-R code 1).
- HSA additional taxes from Form 8889 / Form 5329.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from calculator.decimal_math import percent
from calculator.federal.hsa_deduction import HSAResult
from calculator.federal.schedule_se import ScheduleSEResult
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)

MEDICARE_EMPLOYEE_RATE = 0.0145


@dataclass(frozen=True)
class OtherTaxesResult:
    self_employment_tax: TracedValue     # Schedule 2 line 4
    additional_medicare: TracedValue     # Schedule 2 line 11
    niit: TracedValue                    # Schedule 2 line 12
    net_investment_income: TracedValue   # Form 8960 line 8
    early_withdrawal: TracedValue        # Schedule 2 line 8
    hsa_penalties: TracedValue           # Schedule 2 line 17c
    total: TracedValue                   # Schedule 2 line 21


def compute_additional_medicare(model: TaxReturn, config: TaxYearConfig, se_earnings: int) -> int:
    medicare_wages = sum(w.medicare_wages for w in model.w2s)
    threshold = config.lookup("additional_medicare_threshold", model.filing_status)
    return percent(max(0, medicare_wages + max(0, se_earnings) - threshold), config.additional_medicare_rate)


def additional_medicare_withheld(model: TaxReturn) -> int:
    """Medicare tax withheld above the regular 1.45% (Form 8959 line 24)."""
    return sum(
        max(0, w.medicare_tax_withheld - percent(w.medicare_wages, MEDICARE_EMPLOYEE_RATE))
        for w in model.w2s
    )


def net_investment_income(
    taxable_interest: TracedValue,
    ordinary_dividends: TracedValue,
    capital_gain: TracedValue,
    rental_income: Optional[TracedValue] = None,
) -> TracedValue:
    """Form 8960 net investment income from the return lines it is built on."""
    amount = taxable_interest.amount + ordinary_dividends.amount + max(0, capital_gain.amount)
    inputs = [taxable_interest.node_id, ordinary_dividends.node_id, capital_gain.node_id]
    if rental_income is not None:
        amount += rental_income.amount
        inputs.append(rental_income.node_id)
    return traced_from_computation(max(0, amount), "form8960.netInvestmentIncome", inputs,
                                   "Form 8960, Net investment income")


def compute_niit(nii: int, magi: int, filing_status, config: TaxYearConfig) -> int:
    excess = max(0, magi - config.lookup("niit_threshold", filing_status))
    return percent(min(nii, excess), config.niit_rate)


def compute_early_withdrawal_penalty(model: TaxReturn, config: TaxYearConfig) -> int:
    early = sum(f.taxable_amount for f in model.form1099_rs if f.is_early_distribution and not f.is_rollover)
    return percent(early, config.early_withdrawal_penalty_rate)


def compute_other_taxes(
    model: TaxReturn,
    config: TaxYearConfig,
    agi: int,
    nii: TracedValue,
    schedule_se: Optional[ScheduleSEResult],
    hsa: Optional[HSAResult],
) -> OtherTaxesResult:
    if schedule_se is not None:
        se_tax = traced_from_computation(
            schedule_se.line6.amount, "schedule2.line4", ["scheduleSE.line6"], "Schedule 2, Line 4"
        )
        se_earnings = schedule_se.line3.amount
    else:
        se_tax = traced_zero("schedule2.line4", "Schedule 2, Line 4")
        se_earnings = 0

    add_medicare = traced_from_computation(
        compute_additional_medicare(model, config, se_earnings), "schedule2.line11",
        [f"w2:{w.id}:box5" for w in model.w2s] + (["scheduleSE.line3"] if se_earnings else []),
        "Schedule 2, Line 11",
    )
    niit = traced_from_computation(
        compute_niit(nii.amount, agi, model.filing_status, config), "schedule2.line12",
        [nii.node_id, "form1040.line11"], "Schedule 2, Line 12",
    )
    early = traced_from_computation(
        compute_early_withdrawal_penalty(model, config), "schedule2.line8",
        [f"1099r:{f.id}:box2a" for f in model.form1099_rs if f.is_early_distribution],
        "Schedule 2, Line 8",
    )
    if hsa is not None:
        hsa_penalties = traced_from_computation(
            hsa.total_penalties, "schedule2.line17c", ["form8889.additionalTax", "form5329.line49"],
            "Schedule 2, Line 17c",
        )
    else:
        hsa_penalties = traced_zero("schedule2.line17c", "Schedule 2, Line 17c")

    parts = (se_tax, add_medicare, niit, early, hsa_penalties)
    total = traced_from_computation(
        sum(p.amount for p in parts), "schedule2.line21", [p.node_id for p in parts], "Schedule 2, Line 21"
    )
    logger.debug("Other taxes: se=%s medicare=%s niit=%s early=%s hsa=%s",
                 se_tax.amount, add_medicare.amount, niit.amount, early.amount, hsa_penalties.amount)
    return OtherTaxesResult(
        self_employment_tax=se_tax,
        additional_medicare=add_medicare,
        niit=niit,
        net_investment_income=nii,
        early_withdrawal=early,
        hsa_penalties=hsa_penalties,
        total=total,
    )
