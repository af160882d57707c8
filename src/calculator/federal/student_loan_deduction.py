"""Student loan interest deduction (Schedule 1 line 21)."""

import logging
from dataclasses import dataclass

from calculator.decimal_math import ratio_of
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation
from models.tax_return import TaxReturn
from models.taxpayer import FilingStatus

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StudentLoanDeductionResult:
    interest_paid: int
    max_deduction: int
    magi: int
    deduction: TracedValue


def compute_student_loan_deduction(model: TaxReturn, config: TaxYearConfig, magi: int) -> StudentLoanDeductionResult:
    """
    Up to $2,500 of interest, reduced proportionally across the MAGI phase-out
    range. Not available when married filing separately or claimable as a
    dependent.
    """
    paid = model.student_loan_interest
    capped = min(paid, config.student_loan_interest_max)
    fs = model.filing_status
    start = config.lookup("student_loan_phaseout_start", fs)
    width = config.lookup("student_loan_phaseout_range", fs)

    if fs == FilingStatus.MARRIED_SEPARATE or model.taxpayer.can_be_claimed_as_dependent:
        allowed = 0
    elif magi <= start:
        allowed = capped
    elif width <= 0 or magi >= start + width:
        allowed = 0
    else:
        allowed = capped - ratio_of(capped, magi - start, width)

    logger.debug("Student loan interest deduction %s of %s (MAGI %s)", allowed, paid, magi)
    return StudentLoanDeductionResult(
        interest_paid=paid,
        max_deduction=capped,
        magi=magi,
        deduction=traced_from_computation(
            allowed, "studentLoanDeduction.total", ["input.studentLoanInterest", "form1040.line9"],
            "Student Loan Interest Deduction",
        ),
    )
