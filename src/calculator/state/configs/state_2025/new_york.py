"""
New York IT-201 (2025).

Full-year residents compute New York tax on NY taxable income using the
graduated schedule for their filing status. Residents of New York City also
owe the NYC resident income tax on the same base.
"""

import math
from typing import List, Optional

from calculator.brackets import brackets_from_limits, compute_bracket_tax
from calculator.decimal_math import dollars_to_cents, percent
from calculator.outcome import Present
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts, state_brackets
from models.deductions import DeductionMethod

_TOP = ((5000000, 0.0965), (25000000, 0.103), (math.inf, 0.109))

NY_SINGLE = brackets_from_limits(
    ((8500, 0.04), (11700, 0.045), (13900, 0.0525), (80650, 0.0585),
     (215400, 0.0625), (1077550, 0.0685)) + _TOP
)
NY_JOINT = brackets_from_limits(
    ((17150, 0.04), (23600, 0.045), (27900, 0.0525), (161550, 0.0585),
     (323200, 0.0625), (2155350, 0.0685)) + _TOP
)
NY_HEAD_OF_HOUSEHOLD = brackets_from_limits(
    ((12800, 0.04), (17650, 0.045), (20900, 0.0525), (107650, 0.0585),
     (269300, 0.0625), (1616450, 0.0685)) + _TOP
)


def get_new_york_config() -> StateTaxConfig:
    """Create New York tax configuration for 2025."""
    return StateTaxConfig(
        state_code="NY",
        state_name="New York",
        tax_year=2025,
        is_flat_tax=False,
        brackets={
            "single": NY_SINGLE,
            "married_separate": NY_SINGLE,
            "married_joint": NY_JOINT,
            "qualifying_widow": NY_JOINT,
            "head_of_household": NY_HEAD_OF_HOUSEHOLD,
        },
        standard_deduction=state_amounts(8000, 16050, head_of_household=11200),
        allows_itemized=True,
        dependent_exemption_amount=dollars_to_cents(1000),
        social_security_taxable=False,
        eitc_percentage=0.30,
        has_local_tax=True,
        local_tax_brackets=state_brackets(
            single=[(0, 0.03078), (12000, 0.03762), (25000, 0.03819), (50000, 0.03876)],
            married_joint=[(0, 0.03078), (21600, 0.03762), (45000, 0.03819), (90000, 0.03876)],
            head_of_household=[(0, 0.03078), (14400, 0.03762), (30000, 0.03819), (60000, 0.03876)],
        ),
        parameters={
            # (NY AGI ceiling, share of the federal credit)
            "child_care_tiers": (
                (dollars_to_cents(25000), 1.10),
                (dollars_to_cents(50000), 1.00),
                (math.inf, 0.20),
            ),
            "nyc_county_codes": frozenset({"NYC", "NEW YORK CITY"}),
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="NY DTF 2025 IT-201 instructions and tax rate schedules",
    )


@register_state("NY", 2025)
class NewYorkModule(StateRulesModule):
    """New York IT-201 for tax year 2025."""

    state_code = "NY"
    state_name = "New York"
    form_label = "NY IT-201"
    node_prefix = "it201"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "itemizedDeduction": "New York itemized deduction",
        "nycResidentTax": "New York City resident tax",
        "earnedIncomeCredit": "New York State earned income credit",
        "childCareCredit": "Child and dependent care credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_new_york_config()

    def is_nyc_resident(self, ctx: StateContext) -> bool:
        county = (ctx.residency.county or "").strip().upper()
        return county in self.config.param("nyc_county_codes")

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """
        Federal itemized deductions with taxes uncapped, less any state and
        local income taxes (sales tax stays deductible when elected).
        """
        items = ctx.itemized
        sched_a = ctx.federal.schedule_a
        if ctx.model.deductions.method != DeductionMethod.ITEMIZED or items is None:
            return None
        if not isinstance(sched_a, Present):
            return None
        sa = sched_a.value
        uncapped = sa.line5e.amount
        if items.state_local_income_taxes >= items.state_local_sales_taxes:
            uncapped -= items.state_local_income_taxes
        amount = max(0, sa.line17.amount - sa.line7.amount + uncapped)
        return Adjustment(
            "itemizedDeduction", amount, "New York itemized deduction",
            ("scheduleA.line17", "scheduleA.line7", "scheduleA.line5e", "itemized.stateLocalIncomeTaxes"),
        )

    def other_taxes(self, ctx: StateContext, taxable_income: int, state_agi: int) -> List[Adjustment]:
        if not self.is_nyc_resident(ctx) or taxable_income <= 0:
            return []
        amount = compute_bracket_tax(taxable_income, self.config.get_local_brackets(ctx.filing_status))
        return [Adjustment("nycResidentTax", amount, "New York City resident tax",
                           (self.node("taxableIncome"), "input.residency"))]

    def child_care_rate(self, state_agi: int) -> float:
        for ceiling, rate in self.config.param("child_care_tiers"):
            if state_agi <= ceiling:
                return rate
        return self.config.param("child_care_tiers")[-1][1]

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().refundable_credits(ctx, state_agi)
        care = ctx.federal.dependent_care_credit
        if isinstance(care, Present) and care.value.credit.amount:
            amount = percent(care.value.credit.amount, self.child_care_rate(state_agi))
            items.append(Adjustment("childCareCredit", amount, "Child and dependent care credit",
                                    (care.value.credit.node_id, self.node("stateAGI"))))
        return items

    def review_extras(self):
        return (
            ReviewItem("NYC resident tax", self.node("nycResidentTax"),
                       "Owed by residents of the five boroughs on NY taxable income.", ShowWhen.NONZERO),
            ReviewItem("Child care credit", self.node("childCareCredit"),
                       "A share of the federal credit that falls as NY AGI rises.", ShowWhen.NONZERO),
        )
