"""
Schedule 1 (Additional Income and Adjustments to Income).

Part I feeds Form 1040 line 8; Part II feeds line 10.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from calculator.federal.schedule_e import ScheduleEResult, needs_schedule_e
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, document_node_id, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Schedule1Result:
    line1: TracedValue    # taxable state/local refunds
    line3: TracedValue    # business income (Schedule C)
    line5: TracedValue    # rental real estate, royalties
    line7: TracedValue    # unemployment compensation
    line8z: TracedValue   # other income
    line9: TracedValue    # total other income
    line10: TracedValue   # total additional income


@dataclass(frozen=True)
class Schedule1AdjustmentsResult:
    line11: TracedValue   # educator expenses
    line13: TracedValue   # HSA deduction
    line15: TracedValue   # deductible part of SE tax
    line20: TracedValue   # IRA deduction
    line21: TracedValue   # student loan interest deduction
    line26: TracedValue   # total adjustments


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"schedule1.{line}", inputs, f"Schedule 1, Line {line[4:]}")


def _sum_line(line: str, pairs) -> TracedValue:
    """Line built from ``(amount, node_id)`` pairs; zero pairs are dropped from the inputs."""
    pairs = [(amount, node) for amount, node in pairs if amount]
    if not pairs:
        return traced_zero(f"schedule1.{line}", f"Schedule 1, Line {line[4:]}")
    return _line(line, sum(amount for amount, _ in pairs), [node for _, node in pairs])


def _carried(line: str, source: TracedValue) -> TracedValue:
    if not source.amount:
        return traced_zero(f"schedule1.{line}", f"Schedule 1, Line {line[4:]}")
    return _line(line, source.amount, [source.node_id])


def needs_schedule_1(model: TaxReturn) -> bool:
    return bool(
        model.form1099_miscs or model.form1099_gs or model.form1099_necs
        or model.schedule_c_businesses or needs_schedule_e(model)
    )


def business_income(model: TaxReturn) -> int:
    """
    Schedule C net profit. 1099-NEC amounts stand in for a Schedule C only when
    no business is entered; otherwise they are part of its gross receipts.
    """
    if model.schedule_c_businesses:
        return sum(b.net_profit() for b in model.schedule_c_businesses)
    return sum(f.nonemployee_compensation for f in model.form1099_necs)


def _refund_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    if not model.prior_year.itemized_last_year:
        return []
    return [(f.state_tax_refund, document_node_id("1099g", f.id, "box2")) for f in model.form1099_gs]


def _business_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    if model.schedule_c_businesses:
        return [(b.net_profit(), document_node_id("schc", b.id, "netProfit")) for b in model.schedule_c_businesses]
    return [(f.nonemployee_compensation, document_node_id("1099nec", f.id, "box1")) for f in model.form1099_necs]


def _unemployment_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    return [(f.unemployment_compensation, document_node_id("1099g", f.id, "box1")) for f in model.form1099_gs]


def _other_income_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    return [(f.other_income, document_node_id("1099misc", f.id, "box3")) for f in model.form1099_miscs]


def nonrental_income_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    """Schedule 1 Part I income other than line 5, as source document amounts."""
    pairs = (
        _refund_pairs(model) + _business_pairs(model)
        + _unemployment_pairs(model) + _other_income_pairs(model)
    )
    return [(amount, node) for amount, node in pairs if amount]


def compute_schedule_1(model: TaxReturn, schedule_e: Optional[ScheduleEResult] = None) -> Schedule1Result:
    line1 = _sum_line("line1", _refund_pairs(model))
    line3 = _sum_line("line3", _business_pairs(model))
    if schedule_e is not None:
        line5 = _carried("line5", schedule_e.line41)
    else:
        line5 = traced_zero("schedule1.line5", "Schedule 1, Line 5")
    line7 = _sum_line("line7", _unemployment_pairs(model))
    line8z = _sum_line("line8z", _other_income_pairs(model))
    line9 = _line("line9", line8z.amount, ["schedule1.line8z"])
    line10 = _line(
        "line10",
        line1.amount + line3.amount + line5.amount + line7.amount + line9.amount,
        ["schedule1.line1", "schedule1.line3", "schedule1.line5", "schedule1.line7", "schedule1.line9"],
    )
    logger.debug("Schedule 1 additional income %s (business %s, rental %s)", line10.amount, line3.amount, line5.amount)
    return Schedule1Result(
        line1=line1, line3=line3, line5=line5, line7=line7,
        line8z=line8z, line9=line9, line10=line10,
    )


def educator_expense_limit(model: TaxReturn, config: TaxYearConfig) -> int:
    """$300 per eligible educator; two on a joint return."""
    return config.educator_expense_limit * len(model.persons())


def compute_schedule1_adjustments(
    model: TaxReturn,
    config: TaxYearConfig,
    hsa_deduction: TracedValue,
    se_deduction: TracedValue,
    ira_deduction: TracedValue,
    student_loan_deduction: TracedValue,
) -> Schedule1AdjustmentsResult:
    educator = min(model.educator_expenses, educator_expense_limit(model, config))
    if educator:
        line11 = _line("line11", educator, ["input.educatorExpenses"])
    else:
        line11 = traced_zero("schedule1.line11", "Schedule 1, Line 11")
    line13 = _carried("line13", hsa_deduction)
    line15 = _carried("line15", se_deduction)
    line20 = _carried("line20", ira_deduction)
    line21 = _carried("line21", student_loan_deduction)
    parts = (line11, line13, line15, line20, line21)
    line26 = _line("line26", sum(p.amount for p in parts), [p.node_id for p in parts])
    return Schedule1AdjustmentsResult(
        line11=line11, line13=line13, line15=line15,
        line20=line20, line21=line21, line26=line26,
    )
