"""
North Carolina Form D-400 (2025).

Flat 4.25% on NC taxable income: federal AGI with NC additions and
deductions, less the larger of the NC standard deduction and NC itemized
deductions, less the child deduction.
"""

from typing import List, Optional

from calculator.decimal_math import dollars_to_cents, phaseout_steps
from calculator.outcome import Present
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
    state_income_tax_paid,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts
from models.deductions import DeductionMethod


def get_north_carolina_config() -> StateTaxConfig:
    """Create North Carolina tax configuration for 2025."""
    return StateTaxConfig(
        state_code="NC",
        state_name="North Carolina",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.0425,
        standard_deduction=state_amounts(12750, 25500, head_of_household=19125),
        allows_itemized=True,
        social_security_taxable=False,
        parameters={
            "mortgage_property_tax_cap": dollars_to_cents(20000),
            "child_deduction_max": dollars_to_cents(3000),
            "child_deduction_step_amount": dollars_to_cents(500),
            "child_deduction_start": state_amounts(20000, 40000, head_of_household=30000),
            "child_deduction_step": state_amounts(10000, 20000, head_of_household=15000),
            "child_age_limit": 17,
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="NCDOR 2025 D-400 instructions",
    )


@register_state("NC", 2025)
class NorthCarolinaModule(StateRulesModule):
    """North Carolina D-400 for tax year 2025."""

    state_code = "NC"
    state_name = "North Carolina"
    form_label = "NC D-400"
    node_prefix = "d400"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "hsaAddBack": "HSA deduction add-back",
        "stateIncomeTaxAddback": "State income taxes deducted federally",
        "itemizedDeduction": "NC itemized deductions",
        "childDeduction": "Child deduction",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_north_carolina_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        items = []
        hsa = ctx.federal.hsa
        if isinstance(hsa, Present) and hsa.value.deduction.amount:
            items.append(Adjustment("hsaAddBack", hsa.value.deduction.amount, "HSA deduction add-back",
                                    (hsa.value.deduction.node_id,)))
        if ctx.model.deductions.method == DeductionMethod.ITEMIZED:
            addback = state_income_tax_paid(ctx)
            if addback is not None:
                items.append(addback)
        return items

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """
        Qualified mortgage interest and real estate taxes (together capped at
        $20,000) plus charitable contributions and medical expenses as
        allowed federally.
        """
        items = ctx.itemized
        sched_a = ctx.federal.schedule_a
        if items is None or not isinstance(sched_a, Present):
            return None
        sa = sched_a.value
        housing = min(self.config.param("mortgage_property_tax_cap"),
                      sa.line8a.amount + items.real_estate_taxes)
        amount = housing + sa.line14.amount + sa.line4.amount
        return Adjustment("itemizedDeduction", amount, "NC itemized deductions",
                          ("scheduleA.line8a", "itemized.realEstateTaxes", "scheduleA.line14", "scheduleA.line4"))

    def child_deduction_per_child(self, ctx: StateContext) -> int:
        cfg = self.config
        fs = ctx.filing_status
        excess = ctx.federal.line11.amount - cfg.param("child_deduction_start", fs)
        steps = phaseout_steps(excess, cfg.param("child_deduction_step", fs))
        return max(0, cfg.param("child_deduction_max") - steps * cfg.param("child_deduction_step_amount"))

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().deductions(ctx, state_agi)
        age_limit = self.config.param("child_age_limit")
        children = sum(
            1 for d in ctx.model.dependents
            if d.age_at_year_end(ctx.tax_year) is not None and d.age_at_year_end(ctx.tax_year) < age_limit
        )
        if children:
            per_child = self.child_deduction_per_child(ctx)
            if per_child:
                items.append(Adjustment("childDeduction", children * per_child, "Child deduction",
                                        ("input.dependents", "form1040.line11")))
        return items

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("HSA add-back", self.node("hsaAddBack"), "", ShowWhen.NONZERO),
            ReviewItem("Child deduction", self.node("childDeduction"),
                       "Up to $3,000 per qualifying child, reduced as federal AGI rises.", ShowWhen.NONZERO),
        )
