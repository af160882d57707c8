"""Michigan MI-1040 (2025)."""

from typing import List

from calculator.decimal_math import dollars_to_cents
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    StateContext,
    StateRulesModule,
    tax_exempt_interest,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig


def get_michigan_config() -> StateTaxConfig:
    """Create Michigan tax configuration for 2025."""
    return StateTaxConfig(
        state_code="MI",
        state_name="Michigan",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.0425,
        social_security_taxable=False,
        eitc_percentage=0.30,
        parameters={
            "exemption": dollars_to_cents(5800),
            "special_exemption": dollars_to_cents(3300),
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="Michigan Treasury 2025 MI-1040 instructions",
    )


@register_state("MI", 2025)
class MichiganModule(StateRulesModule):
    """Michigan MI-1040 for tax year 2025."""

    state_code = "MI"
    state_name = "Michigan"
    form_label = "MI-1040"
    node_prefix = "mi1040"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "otherStateObligationInterest": "Interest from obligations of other states",
        "personalExemptions": "Personal and dependent exemptions",
        "specialExemptions": "Special exemptions (blind)",
        "earnedIncomeCredit": "Michigan earned income tax credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_michigan_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        pairs = [(a, n) for a, n in tax_exempt_interest(ctx.model) if n.startswith("1099int:")]
        if not pairs:
            return []
        return [Adjustment("otherStateObligationInterest", sum(a for a, _ in pairs),
                           "Interest from obligations of other states", tuple(n for _, n in pairs))]

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = [Adjustment("personalExemptions",
                            (ctx.num_persons + ctx.num_dependents) * self.config.param("exemption"),
                            "Personal and dependent exemptions", ("input.filingStatus", "input.dependents"))]
        blind = ctx.count_blind()
        if blind:
            items.append(Adjustment("specialExemptions", blind * self.config.param("special_exemption"),
                                    "Special exemptions (blind)", ("input.filingStatus",)))
        return items
