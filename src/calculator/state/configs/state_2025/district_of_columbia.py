"""District of Columbia Form D-40 (2025)."""

import logging
from typing import List, Optional

from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    StateContext,
    StateRulesModule,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts, state_brackets
from models.deductions import DeductionMethod
from models.state import ResidencyType

logger = logging.getLogger(__name__)

# Residents of these states working in DC are exempt under reciprocity
DC_COMMUTER_EXEMPT_STATES = frozenset({"MD", "VA"})


def get_district_of_columbia_config() -> StateTaxConfig:
    """Create District of Columbia tax configuration for 2025."""
    return StateTaxConfig(
        state_code="DC",
        state_name="District of Columbia",
        tax_year=2025,
        is_flat_tax=False,
        brackets=state_brackets(single=[
            (0, 0.04), (10000, 0.06), (40000, 0.065), (60000, 0.085),
            (250000, 0.0925), (500000, 0.0975), (1000000, 0.1075),
        ]),
        # DC follows the federal standard deduction
        standard_deduction=state_amounts(15750, 31500, head_of_household=23625),
        allows_itemized=True,
        social_security_taxable=True,
        us_obligation_interest_exempt=False,
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="OTR 2025 D-40 rate table",
    )


def is_commuter_exempt(ctx: StateContext) -> bool:
    """A nonresident living in Maryland or Virginia owes DC no income tax."""
    return (ctx.residency.residency_type == ResidencyType.NONRESIDENT
            and ctx.residency.resident_state in DC_COMMUTER_EXEMPT_STATES)


@register_state("DC", 2025)
class DistrictOfColumbiaModule(StateRulesModule):
    """District of Columbia Form D-40 for tax year 2025."""

    state_code = "DC"
    state_name = "District of Columbia"
    form_label = "DC D-40"
    node_prefix = "d40"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "itemizedDeduction": "Itemized deductions (federal Schedule A)",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_district_of_columbia_config()

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        if ctx.model.deductions.method != DeductionMethod.ITEMIZED:
            return None
        total = ctx.federal_schedule_a_total()
        if not total:
            return None
        return Adjustment("itemizedDeduction", total, "Itemized deductions (federal Schedule A)",
                          ("scheduleA.line17",))

    def compute_tax(self, ctx: StateContext, taxable_income: int) -> int:
        if is_commuter_exempt(ctx):
            logger.debug("DC commuter exemption applies (resident of %s)", ctx.residency.resident_state)
            return 0
        return super().compute_tax(ctx, taxable_income)

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []
