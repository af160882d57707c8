"""
Schedule E (Supplemental Income and Loss).

Rental real estate and royalties, including a K-1's box 2 share, go through
Form 8582 when any of them lost money. Partnership and S corporation
ordinary income and guaranteed payments are nonpassive and pass straight
through. Line 41 is carried to Schedule 1 line 5.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from calculator.federal.form8582 import Form8582Result, compute_form8582, needs_form_8582, rental_activities
from calculator.federal.schedule_k1 import has_k1_schedule_e_income, k1_pairs
from calculator.outcome import ABSENT, Outcome, Present, present_if
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleEResult:
    rental_income: TracedValue        # rental real estate and royalties after Form 8582
    partnership_income: TracedValue   # K-1 ordinary income and guaranteed payments
    line41: TracedValue               # total supplemental income
    form8582: Outcome[Form8582Result] = ABSENT


def needs_schedule_e(model: TaxReturn) -> bool:
    return bool(
        model.schedule_e_properties
        or any(f.rents or f.royalties for f in model.form1099_miscs)
        or has_k1_schedule_e_income(model)
        or model.prior_year.passive_loss_carryover
    )


def compute_schedule_e(
    model: TaxReturn,
    config: TaxYearConfig,
    magi: Callable[[], TracedValue],
) -> ScheduleEResult:
    """
    Args:
        magi: Builds the Form 8582 modified AGI; called only when a rental
            loss makes Form 8582 necessary
    """
    form8582 = present_if(needs_form_8582(model), lambda: compute_form8582(model, config, magi()))
    if isinstance(form8582, Present):
        rental = traced_from_computation(
            form8582.value.allowed.amount, "scheduleE.rentalIncome", ["form8582.allowed"],
            "Schedule E, Rental real estate and royalty income",
        )
    else:
        activities = rental_activities(model)
        rental = traced_from_computation(
            sum(a for a, _ in activities), "scheduleE.rentalIncome", [n for _, n in activities],
            "Schedule E, Rental real estate and royalty income",
        )

    nonpassive = [
        (a, n) for a, n in k1_pairs(model, "ordinary_business_income") + k1_pairs(model, "guaranteed_payments") if a
    ]
    if nonpassive:
        partnership = traced_from_computation(
            sum(a for a, _ in nonpassive), "scheduleE.partnershipIncome", [n for _, n in nonpassive],
            "Schedule E, Partnership and S corporation income",
        )
    else:
        partnership = traced_zero("scheduleE.partnershipIncome", "Schedule E, Partnership and S corporation income")
    line41 = traced_from_computation(
        rental.amount + partnership.amount, "scheduleE.line41",
        ["scheduleE.rentalIncome", "scheduleE.partnershipIncome"], "Schedule E, Line 41",
    )
    logger.debug("Schedule E: rental=%s partnership=%s", rental.amount, partnership.amount)
    return ScheduleEResult(
        rental_income=rental,
        partnership_income=partnership,
        line41=line41,
        form8582=form8582,
    )
