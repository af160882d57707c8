"""
Schedule A (Itemized Deductions).

SALT follows the 2025 cap of $40,000 ($20,000 MFS), reduced by 30% of MAGI
above $500,000 ($250,000 MFS) but never below $10,000 ($5,000 MFS).
"""

import logging
from dataclasses import dataclass

from calculator.decimal_math import percent, ratio_of
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.deductions import ItemizedDeductions
from models.taxpayer import FilingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleAResult:
    line1: TracedValue    # medical and dental expenses
    line2: TracedValue    # AGI
    line3: TracedValue    # 7.5% of AGI
    line4: TracedValue    # deductible medical
    line5a: TracedValue   # income or sales tax (larger)
    line5b: TracedValue   # real estate taxes
    line5c: TracedValue   # personal property taxes
    line5e: TracedValue   # SALT before cap
    line7: TracedValue    # SALT after cap
    line8a: TracedValue   # deductible mortgage interest
    line9: TracedValue    # deductible investment interest
    line10: TracedValue   # total interest
    line11: TracedValue   # cash gifts (60% AGI limit)
    line12: TracedValue   # noncash gifts (30% AGI limit)
    line14: TracedValue   # total gifts (60% AGI overall)
    line16: TracedValue   # other itemized deductions
    line17: TracedValue   # total itemized deductions
    salt_cap: int
    investment_interest_carryforward: int


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"scheduleA.{line}", inputs, f"Schedule A, Line {line[4:]}")


def compute_salt_cap(filing_status: FilingStatus, magi: int, config: TaxYearConfig) -> int:
    """
    Effective SALT cap after the high-income reduction.

    Examples:
        At MAGI $600,000 single: 40,000 - 30% x 100,000 = $10,000 (the floor).
    """
    base_cap = config.lookup("salt_cap", filing_status)
    threshold = config.lookup("salt_phaseout_threshold", filing_status)
    floor = config.lookup("salt_floor", filing_status)
    reduction = percent(max(0, magi - threshold), config.salt_phaseout_rate)
    return max(floor, base_cap - reduction)


def compute_mortgage_interest(d: ItemizedDeductions, filing_status: FilingStatus, config: TaxYearConfig) -> int:
    """Interest on acquisition debt above the limit is disallowed proportionally."""
    table = "mortgage_principal_limit_pre_tcja" if d.mortgage_pre_tcja else "mortgage_principal_limit"
    limit = config.lookup(table, filing_status)
    if d.mortgage_principal > limit > 0:
        return ratio_of(d.mortgage_interest, limit, d.mortgage_principal)
    return d.mortgage_interest


def compute_schedule_a(
    itemized: ItemizedDeductions,
    filing_status: FilingStatus,
    agi: int,
    net_investment_income: int,
    config: TaxYearConfig,
    investment_interest_carryover: int = 0,
) -> ScheduleAResult:
    d = itemized

    line1 = _line("line1", d.medical_expenses, ["itemized.medicalExpenses"])
    line2 = _line("line2", agi, ["form1040.line11"])
    floor_amount = percent(max(0, agi), config.medical_expense_floor_rate)
    line3 = _line("line3", floor_amount, ["scheduleA.line2"])
    medical = max(0, d.medical_expenses - floor_amount)
    line4 = _line("line4", medical, ["scheduleA.line1", "scheduleA.line3"])

    elected = max(d.state_local_income_taxes, d.state_local_sales_taxes)
    line5a = _line("line5a", elected, ["itemized.stateLocalIncomeTaxes", "itemized.stateLocalSalesTaxes"])
    line5b = _line("line5b", d.real_estate_taxes, ["itemized.realEstateTaxes"])
    line5c = _line("line5c", d.personal_property_taxes, ["itemized.personalPropertyTaxes"])
    salt_total = elected + d.real_estate_taxes + d.personal_property_taxes
    line5e = _line("line5e", salt_total, ["scheduleA.line5a", "scheduleA.line5b", "scheduleA.line5c"])
    salt_cap = compute_salt_cap(filing_status, agi, config)
    salt = min(salt_total, salt_cap)
    line7 = _line("line7", salt, ["scheduleA.line5e"])

    mortgage = compute_mortgage_interest(d, filing_status, config)
    line8a = _line("line8a", mortgage, ["itemized.mortgageInterest"])

    # Form 4952: investment interest limited to net investment income
    nii = d.net_investment_income if d.net_investment_income is not None else net_investment_income
    invest_expense = d.investment_interest + investment_interest_carryover
    invest = min(invest_expense, max(0, nii))
    line9 = _line("line9", invest, ["itemized.investmentInterest"])
    line10 = _line("line10", mortgage + invest, ["scheduleA.line8a", "scheduleA.line9"])

    sixty_pct = percent(max(0, agi), config.charitable_cash_agi_limit)
    cash = min(d.charitable_cash, sixty_pct)
    line11 = _line("line11", cash, ["itemized.charitableCash"])
    noncash = min(d.charitable_noncash, percent(max(0, agi), config.charitable_noncash_agi_limit))
    line12 = _line("line12", noncash, ["itemized.charitableNoncash"])
    charitable = min(cash + noncash, sixty_pct)
    line14 = _line("line14", charitable, ["scheduleA.line11", "scheduleA.line12"])

    other = d.gambling_losses + d.casualty_theft_losses + d.other_deductions
    line16 = _line("line16", other, ["itemized.otherDeductions"])

    total = medical + salt + mortgage + invest + charitable + other
    line17 = _line("line17", total, [
        "scheduleA.line4", "scheduleA.line7", "scheduleA.line10", "scheduleA.line14", "scheduleA.line16",
    ])
    logger.debug("Schedule A total %s (SALT %s of %s, cap %s)", total, salt, salt_total, salt_cap)

    return ScheduleAResult(
        line1=line1, line2=line2, line3=line3, line4=line4,
        line5a=line5a, line5b=line5b, line5c=line5c, line5e=line5e, line7=line7,
        line8a=line8a, line9=line9, line10=line10,
        line11=line11, line12=line12, line14=line14,
        line16=line16, line17=line17,
        salt_cap=salt_cap,
        investment_interest_carryforward=max(0, invest_expense - invest),
    )
