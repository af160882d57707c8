"""
Form 8582 (Passive Activity Loss Limitations).

Rental real estate is passive. A net rental loss, after netting against
rental income and last year's unallowed loss, is deductible only up to the
special allowance for active participants: $25,000, reduced by half of the
modified AGI over $100,000. Married filing separately gets $12,500 phased
out from $50,000 when the spouses lived apart all year, and nothing
otherwise. The rest is suspended and carried to next year.

Every rental activity on the return is treated as actively participated.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from calculator.decimal_math import percent
from calculator.federal.schedule_k1 import k1_pairs
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, document_node_id, traced_from_computation, traced_zero
from models.taxpayer import FilingStatus
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Form8582Result:
    line1a: TracedValue   # activities with net income
    line1b: TracedValue   # activities with net loss
    line1c: TracedValue   # prior year unallowed losses
    line1d: TracedValue   # combined
    modified_agi: TracedValue
    line5: TracedValue    # phase-out ceiling
    line6: TracedValue    # modified AGI
    line7: TracedValue
    line8: TracedValue    # half of line 7
    line9: TracedValue    # maximum special allowance
    line10: TracedValue   # special allowance
    allowed: TracedValue  # rental income, or the allowed loss, reported on Schedule E
    suspended_loss: int

    @property
    def limited(self) -> bool:
        return self.suspended_loss > 0


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"form8582.{line}", inputs, f"Form 8582, Line {line[4:]}")


def rental_activities(model: TaxReturn) -> List[Tuple[int, str]]:
    """Net income or loss of each rental activity: Schedule E properties and K-1 box 2."""
    if model.schedule_e_properties:
        activities = [
            (p.net_income(), document_node_id("sche", p.id, "netIncome")) for p in model.schedule_e_properties
        ]
    else:
        activities = []
        for f in model.form1099_miscs:
            activities.append((f.rents, document_node_id("1099misc", f.id, "box1")))
            activities.append((f.royalties, document_node_id("1099misc", f.id, "box2")))
    activities += k1_pairs(model, "net_rental_income")
    return [(amount, node) for amount, node in activities if amount]


def needs_form_8582(model: TaxReturn) -> bool:
    return model.prior_year.passive_loss_carryover > 0 or any(
        amount < 0 for amount, _ in rental_activities(model)
    )


def special_allowance_cap(model: TaxReturn, config: TaxYearConfig) -> Tuple[int, int]:
    """(maximum allowance, phase-out start) for the filing status."""
    fs = model.filing_status
    if fs == FilingStatus.MARRIED_SEPARATE and not model.deductions.lived_apart_all_year:
        return 0, 0
    return config.lookup("passive_loss_allowance", fs), config.lookup("passive_loss_phaseout_start", fs)


def compute_form8582(model: TaxReturn, config: TaxYearConfig, magi: TracedValue) -> Form8582Result:
    """
    Args:
        model: The return; rental activities and the prior year carryover are read from it
        config: Year configuration
        magi: Modified AGI, figured without any rental activity or taxable
            Social Security benefits
    """
    activities = rental_activities(model)
    gains = [(a, n) for a, n in activities if a > 0]
    losses = [(a, n) for a, n in activities if a < 0]
    line1a = _line("line1a", sum(a for a, _ in gains), [n for _, n in gains])
    line1b = _line("line1b", sum(a for a, _ in losses), [n for _, n in losses])
    carryover = model.prior_year.passive_loss_carryover
    if carryover:
        line1c = _line("line1c", -carryover, ["priorYear.passiveLossCarryover"])
    else:
        line1c = traced_zero("form8582.line1c", "Form 8582, Line 1c")
    line1d = _line("line1d", line1a.amount + line1b.amount + line1c.amount,
                   ["form8582.line1a", "form8582.line1b", "form8582.line1c"])

    max_allowance, phaseout_start = special_allowance_cap(model, config)
    ceiling = phaseout_start + (
        int(max_allowance / config.passive_loss_phaseout_rate) if max_allowance else 0
    )
    line5 = _line("line5", ceiling, ["input.filingStatus"])
    line6 = _line("line6", magi.amount, [magi.node_id])
    line7 = _line("line7", max(0, line5.amount - line6.amount), ["form8582.line5", "form8582.line6"])
    line8 = _line("line8", percent(line7.amount, config.passive_loss_phaseout_rate), ["form8582.line7"])
    line9 = _line("line9", max_allowance, ["input.filingStatus"])
    line10 = _line("line10", min(line8.amount, line9.amount), ["form8582.line8", "form8582.line9"])

    net = line1d.amount
    if net >= 0:
        reported, suspended = net, 0
    else:
        allowed_loss = min(-net, line10.amount)
        reported, suspended = -allowed_loss, -net - allowed_loss
    allowed = traced_from_computation(
        reported, "form8582.allowed", ["form8582.line1d", "form8582.line10"],
        "Form 8582, Rental income or allowed loss",
    )
    if suspended:
        logger.info("Passive rental loss limited: allowed=%s suspended=%s", -reported, suspended)
    return Form8582Result(
        line1a=line1a, line1b=line1b, line1c=line1c, line1d=line1d,
        modified_agi=magi,
        line5=line5, line6=line6, line7=line7, line8=line8, line9=line9, line10=line10,
        allowed=allowed, suspended_loss=suspended,
    )
