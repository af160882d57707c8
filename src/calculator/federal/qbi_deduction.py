"""
Qualified business income deduction (Form 8995 and Form 8995-A, IRC 199A).

At or below the taxable income threshold the deduction is 20% of combined
QBI. Above it, each business's 20% is limited by the greater of 50% of the
W-2 wages it paid or 25% of those wages plus 2.5% of the UBIA of its
qualified property; inside the phase-in range only part of the excess over
that limit is lost. A specified service business is phased out over the
same range. Either way the deduction cannot exceed 20% of taxable income
before the deduction less net capital gain.

A combined QBI loss is carried to next year as a qualified business loss.
"""

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from calculator.decimal_math import percent, ratio_of
from calculator.federal.schedule_k1 import k1_node
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, document_node_id, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QualifiedBusiness:
    node_id: str
    qbi: int
    w2_wages: int = 0
    ubia: int = 0
    is_sstb: bool = False


@dataclass(frozen=True)
class BusinessComponent:
    business: QualifiedBusiness
    twenty_percent: int
    wage_limitation: int
    component: int
    sstb_excluded: bool = False


@dataclass(frozen=True)
class QBIDeductionResult:
    line2: TracedValue    # total qualified business income
    line3: TracedValue    # prior year qualified business loss carryforward
    line4: TracedValue    # total QBI
    line5: TracedValue    # QBI component
    line11: TracedValue   # taxable income before the deduction
    line12: TracedValue   # net capital gain
    line13: TracedValue
    line14: TracedValue   # income limitation
    line15: TracedValue   # QBI deduction
    above_threshold: bool
    components: Tuple[BusinessComponent, ...]
    loss_carryforward: int

    @property
    def deduction(self) -> TracedValue:
        return self.line15


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"form8995.{line}", inputs, f"Form 8995, Line {line[4:]}")


def qualified_businesses(model: TaxReturn, se_deduction: int = 0, se_base: int = 0) -> List[QualifiedBusiness]:
    """
    Schedule C businesses (or 1099-NEC income standing in for one) and K-1
    box 20 code Z amounts. The deductible part of SE tax is allocated to
    each profitable Schedule C in proportion to its share of ``se_base``
    (Schedule SE line 2).
    """
    def after_se(profit: int) -> int:
        if profit <= 0 or not se_deduction or not se_base:
            return profit
        return profit - ratio_of(se_deduction, profit, se_base)

    businesses = []
    if model.schedule_c_businesses:
        for b in model.schedule_c_businesses:
            businesses.append(QualifiedBusiness(
                node_id=document_node_id("schc", b.id, "netProfit"),
                qbi=after_se(b.net_profit()),
                w2_wages=b.wages,
                ubia=b.qualified_property_ubia,
                is_sstb=b.is_sstb,
            ))
    else:
        for f in model.form1099_necs:
            if f.nonemployee_compensation:
                businesses.append(QualifiedBusiness(
                    node_id=document_node_id("1099nec", f.id, "box1"),
                    qbi=after_se(f.nonemployee_compensation),
                ))
    for k in model.schedule_k1s:
        if k.section_199a_qbi:
            businesses.append(QualifiedBusiness(
                node_id=k1_node(k, "section_199a_qbi"),
                qbi=k.section_199a_qbi,
                w2_wages=k.section_199a_w2_wages,
                ubia=k.section_199a_ubia,
                is_sstb=k.is_sstb,
            ))
    return [b for b in businesses if b.qbi]


def wage_limitation(w2_wages: int, ubia: int, config: TaxYearConfig) -> int:
    return max(
        percent(w2_wages, config.qbi_wage_rate),
        percent(w2_wages, config.qbi_wage_ubia_wage_rate) + percent(ubia, config.qbi_ubia_rate),
    )


def business_component(biz: QualifiedBusiness, phase_in: float, config: TaxYearConfig) -> BusinessComponent:
    """Form 8995-A Part II for one profitable business; ``phase_in`` is 0 at the threshold, 1 at its top."""
    if biz.is_sstb and phase_in >= 1:
        return BusinessComponent(biz, percent(biz.qbi, config.qbi_rate), 0, 0, sstb_excluded=True)
    applicable = 1 - phase_in if biz.is_sstb else 1
    qbi = percent(biz.qbi, applicable)
    wages = percent(biz.w2_wages, applicable)
    ubia = percent(biz.ubia, applicable)
    twenty = percent(qbi, config.qbi_rate)
    limit = wage_limitation(wages, ubia, config)
    if phase_in >= 1:
        component = min(twenty, limit)
    elif twenty > limit:
        component = twenty - percent(twenty - limit, phase_in)
    else:
        component = twenty
    return BusinessComponent(biz, twenty, limit, max(0, component))


def compute_qbi_deduction(
    model: TaxReturn,
    config: TaxYearConfig,
    businesses: Sequence[QualifiedBusiness],
    taxable_income_before: int,
    net_capital_gain: int,
    taxable_income_inputs: Sequence[str] = (),
    capital_gain_inputs: Sequence[str] = (),
) -> QBIDeductionResult:
    """
    Args:
        model: The return; filing status and the prior year carryforward are read from it
        config: Year configuration
        businesses: Output of ``qualified_businesses``
        taxable_income_before: AGI less line 12 and the Schedule 1-A deductions
        net_capital_gain: Qualified dividends plus net capital gain
        taxable_income_inputs: Node ids ``taxable_income_before`` was built from
        capital_gain_inputs: Node ids ``net_capital_gain`` was built from
    """
    fs = model.filing_status
    line2 = _line("line2", sum(b.qbi for b in businesses), [b.node_id for b in businesses])
    carryforward = model.prior_year.qbi_loss_carryforward
    if carryforward:
        line3 = _line("line3", -carryforward, ["priorYear.qbiLossCarryforward"])
    else:
        line3 = traced_zero("form8995.line3", "Form 8995, Line 3")
    line4 = _line("line4", line2.amount + line3.amount, ["form8995.line2", "form8995.line3"])

    threshold = config.lookup("qbi_threshold", fs)
    ti = taxable_income_before
    above = ti > threshold
    components: Tuple[BusinessComponent, ...] = ()
    if line4.amount <= 0:
        qbi_component = 0
    elif not above:
        qbi_component = percent(line4.amount, config.qbi_rate)
    else:
        phase_in = min(1.0, (ti - threshold) / config.lookup("qbi_phase_in_range", fs))
        components = tuple(business_component(b, phase_in, config) for b in businesses if b.qbi > 0)
        losses = sum(b.qbi for b in businesses if b.qbi < 0) + line3.amount
        qbi_component = max(0, sum(c.component for c in components) + percent(losses, config.qbi_rate))
    line5 = _line("line5", qbi_component, ["form8995.line4"])

    line11 = _line("line11", max(0, ti), taxable_income_inputs)
    line12 = _line("line12", net_capital_gain, capital_gain_inputs)
    line13 = _line("line13", max(0, line11.amount - line12.amount), ["form8995.line11", "form8995.line12"])
    line14 = _line("line14", percent(line13.amount, config.qbi_rate), ["form8995.line13"])
    line15 = _line("line15", min(line5.amount, line14.amount), ["form8995.line5", "form8995.line14"])

    loss_carryforward = max(0, -line4.amount)
    logger.debug("QBI deduction %s (QBI %s, limit %s, above threshold %s)",
                 line15.amount, line4.amount, line14.amount, above)
    return QBIDeductionResult(
        line2=line2, line3=line3, line4=line4, line5=line5,
        line11=line11, line12=line12, line13=line13, line14=line14, line15=line15,
        above_threshold=above,
        components=components,
        loss_carryforward=loss_carryforward,
    )
