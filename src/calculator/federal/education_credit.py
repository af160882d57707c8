"""
Education Credits (Form 8863).

American Opportunity Credit: 100% of the first $2,000 and 25% of the next
$2,000 per eligible student (max $2,500), 40% of it refundable. Lifetime
Learning Credit: 20% of up to $10,000 of expenses per return. Both phase out
linearly over the MAGI range; married filing separately may claim neither.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

from calculator.decimal_math import percent, ratio_of
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.credits import EducationCreditType, EducationExpense
from models.tax_return import TaxReturn
from models.taxpayer import FilingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentAOTC:
    student_name: str
    qualified_expenses: int
    tentative_credit: int
    credit: int
    refundable: int
    nonrefundable: int


@dataclass(frozen=True)
class EducationCreditResult:
    students: Tuple[StudentAOTC, ...]
    llc_expenses: int
    llc_credit: int
    phaseout_fraction_allowed: float
    nonrefundable: TracedValue   # Form 8863 line 19, to Schedule 3 line 3
    refundable: TracedValue      # Form 8863 line 8, to Form 1040 line 29


def aotc_tentative(expenses: int, config: TaxYearConfig) -> int:
    first = min(expenses, config.aotc_first_tier)
    second = min(max(0, expenses - config.aotc_first_tier), config.aotc_second_tier)
    return min(first + percent(second, config.aotc_second_tier_rate), config.aotc_max_credit)


def aotc_eligible(student: EducationExpense, config: TaxYearConfig) -> bool:
    return (
        student.at_least_half_time
        and not student.completed_four_years
        and student.prior_years_aotc_claimed < config.aotc_max_years
    )


def _allowed(amount: int, magi: int, start: int, width: int) -> int:
    """Amount left after the linear MAGI phase-out."""
    if width <= 0:
        return 0
    if magi <= start:
        return amount
    if magi >= start + width:
        return 0
    return ratio_of(amount, start + width - magi, width)


def compute_education_credit(model: TaxReturn, config: TaxYearConfig, magi: int) -> EducationCreditResult:
    fs = model.filing_status
    start = config.lookup("education_phaseout_start", fs)
    width = config.lookup("education_phaseout_range", fs)
    if fs == FilingStatus.MARRIED_SEPARATE:
        width = 0

    students = []
    for s in model.education_expenses:
        if s.credit_type != EducationCreditType.AOTC or not aotc_eligible(s, config):
            continue
        tentative = aotc_tentative(s.qualified_expenses, config)
        credit = _allowed(tentative, magi, start, width)
        refundable = percent(credit, config.aotc_refundable_rate)
        if model.taxpayer.can_be_claimed_as_dependent:
            refundable = 0
        students.append(StudentAOTC(
            student_name=s.student_name,
            qualified_expenses=s.qualified_expenses,
            tentative_credit=tentative,
            credit=credit,
            refundable=refundable,
            nonrefundable=credit - refundable,
        ))

    llc_expenses = min(
        sum(s.qualified_expenses for s in model.education_expenses if s.credit_type == EducationCreditType.LLC),
        config.llc_expense_limit,
    )
    llc = _allowed(percent(llc_expenses, config.llc_rate), magi, start, width)

    aotc_nonref = sum(s.nonrefundable for s in students)
    aotc_ref = sum(s.refundable for s in students)
    fraction = 0.0 if width <= 0 else min(1.0, max(0.0, (start + width - magi) / width))

    logger.debug("Form 8863: AOTC students=%s refundable=%s LLC=%s", len(students), aotc_ref, llc)
    return EducationCreditResult(
        students=tuple(students),
        llc_expenses=llc_expenses,
        llc_credit=llc,
        phaseout_fraction_allowed=fraction,
        nonrefundable=traced_from_computation(
            aotc_nonref + llc, "form8863.line19", ["input.educationExpenses", "form1040.line11"],
            "Form 8863, Line 19",
        ),
        refundable=traced_from_computation(
            aotc_ref, "form8863.line8", ["input.educationExpenses", "form1040.line11"], "Form 8863, Line 8",
        ),
    )
