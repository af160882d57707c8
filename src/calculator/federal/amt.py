"""
Form 6251 (Alternative Minimum Tax).

AMTI adds back the SALT deduction (itemizers only), private activity bond
interest and the ISO bargain element to taxable income. The exemption phases
out at 25 cents per dollar above the threshold. Tentative minimum tax is 26% up
to the 28% threshold and 28% above it, with qualified dividends and long-term
gains keeping their preferential rates (Part III).
"""

import logging
import math
from dataclasses import dataclass

from calculator.brackets import Bracket, BracketTable, compute_bracket_tax, compute_qdcg_tax
from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AMTResult:
    line1: TracedValue    # taxable income
    line2a: TracedValue   # SALT add-back
    line2g: TracedValue   # private activity bond interest
    line2i: TracedValue   # ISO bargain element
    line4: TracedValue    # AMTI
    line5: TracedValue    # exemption after phase-out
    line6: TracedValue    # AMTI less exemption
    line7: TracedValue    # tentative minimum tax
    line10: TracedValue   # regular tax
    line11: TracedValue   # AMT


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"form6251.{line}", inputs, f"Form 6251, Line {line[4:]}")


def amt_brackets(filing_status, config: TaxYearConfig) -> BracketTable:
    return (
        Bracket(config.lookup("amt_high_rate_threshold", filing_status), config.amt_rate_low),
        Bracket(math.inf, config.amt_rate_high),
    )


def amt_exemption(amti: int, filing_status, config: TaxYearConfig) -> int:
    exemption = config.lookup("amt_exemption", filing_status)
    excess = max(0, amti - config.lookup("amt_phaseout_start", filing_status))
    return max(0, exemption - percent(excess, config.amt_phaseout_rate))


def private_activity_bond_interest(model: TaxReturn) -> int:
    return (
        sum(f.private_activity_bond_interest for f in model.form1099_ints)
        + sum(f.private_activity_bond_dividends for f in model.form1099_divs)
    )


def compute_amt(
    model: TaxReturn,
    config: TaxYearConfig,
    taxable_income: TracedValue,
    regular_tax: TracedValue,
    salt_deduction: int,
    qualified_dividends: int,
    net_capital_gain: int,
) -> AMTResult:
    fs = model.filing_status
    line1 = _line("line1", taxable_income.amount, [taxable_income.node_id])
    if salt_deduction > 0:
        line2a = _line("line2a", salt_deduction, ["scheduleA.line7"])
    else:
        line2a = traced_zero("form6251.line2a", "Form 6251, Line 2a")
    pab = private_activity_bond_interest(model)
    pab_inputs = [f"1099int:{f.id}:box9" for f in model.form1099_ints if f.private_activity_bond_interest]
    pab_inputs += [f"1099div:{f.id}:box13" for f in model.form1099_divs if f.private_activity_bond_dividends]
    line2g = _line("line2g", pab, pab_inputs)
    iso = sum(e.spread for e in model.iso_exercises)
    line2i = _line("line2i", iso, [f"iso:{e.id}:spread" for e in model.iso_exercises])
    amti = line1.amount + line2a.amount + line2g.amount + line2i.amount
    line4 = _line("line4", amti, ["form6251.line1", "form6251.line2a", "form6251.line2g", "form6251.line2i"])

    exemption = amt_exemption(amti, fs, config)
    line5 = _line("line5", exemption, ["form6251.line4"])
    base = max(0, amti - exemption)
    line6 = _line("line6", base, ["form6251.line4", "form6251.line5"])

    brackets = amt_brackets(fs, config)
    if qualified_dividends > 0 or net_capital_gain > 0:
        tmt = compute_qdcg_tax(
            base, qualified_dividends, net_capital_gain, brackets, config.preferential_brackets_for(fs)
        )
    else:
        tmt = compute_bracket_tax(base, brackets)
    line7 = _line("line7", tmt, ["form6251.line6"])
    line10 = _line("line10", regular_tax.amount, [regular_tax.node_id])
    line11 = _line("line11", max(0, tmt - regular_tax.amount), ["form6251.line7", "form6251.line10"])

    logger.debug("AMT: amti=%s exemption=%s tmt=%s regular=%s amt=%s",
                 amti, exemption, tmt, regular_tax.amount, line11.amount)
    return AMTResult(
        line1=line1, line2a=line2a, line2g=line2g, line2i=line2i, line4=line4,
        line5=line5, line6=line6, line7=line7, line10=line10, line11=line11,
    )
