"""
Illinois Form IL-1040 (2025).

Illinois has no standard deduction. Base income is federal AGI plus
federally tax-exempt interest, less US obligation interest, Social Security
and state refunds; a per-person exemption allowance comes off base income
and the remainder is taxed at a flat 4.95%.
"""

from typing import List

from calculator.decimal_math import dollars_to_cents, percent
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
    state_refund_income,
    tax_exempt_interest,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts


def get_illinois_config() -> StateTaxConfig:
    """Create Illinois tax configuration for 2025."""
    return StateTaxConfig(
        state_code="IL",
        state_name="Illinois",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.0495,
        allows_itemized=False,
        social_security_taxable=False,
        eitc_percentage=0.20,
        parameters={
            "exemption_allowance": dollars_to_cents(2850),
            "senior_exemption": dollars_to_cents(1000),
            "blind_exemption": dollars_to_cents(1000),
            "exemption_agi_limit": state_amounts(250000, 500000),
            "property_tax_credit_rate": 0.05,
            "property_tax_credit_agi_limit": state_amounts(250000, 500000),
            "child_credit_rate": 0.40,
            "child_credit_age_limit": 12,
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="IDOR 2025 IL-1040 instructions",
    )


@register_state("IL", 2025)
class IllinoisModule(StateRulesModule):
    """Illinois Form IL-1040 for tax year 2025."""

    state_code = "IL"
    state_name = "Illinois"
    form_label = "IL-1040"
    node_prefix = "il1040"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "stateAGI": "Illinois base income",
        "taxExemptInterest": "Federally tax-exempt interest and dividends",
        "stateRefund": "Illinois income tax refund",
        "exemptionAllowance": "Exemption allowance",
        "propertyTaxCredit": "Property tax credit",
        "earnedIncomeCredit": "Illinois earned income credit",
        "childTaxCredit": "Illinois child tax credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_illinois_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        pairs = tax_exempt_interest(ctx.model)
        if not pairs:
            return []
        return [Adjustment("taxExemptInterest", sum(a for a, _ in pairs),
                           "Federally tax-exempt interest and dividends", tuple(n for _, n in pairs))]

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = super().subtractions(ctx)
        refunds = state_refund_income(ctx.model)
        if refunds and ctx.model.prior_year.itemized_last_year:
            items.append(Adjustment("stateRefund", sum(a for a, _ in refunds), "Illinois income tax refund",
                                    tuple(n for _, n in refunds)))
        return items

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        """No exemption allowance once federal AGI passes the limit."""
        cfg = self.config
        if ctx.federal.line11.amount > cfg.param("exemption_agi_limit", ctx.filing_status):
            return []
        amount = ((ctx.num_persons + ctx.num_dependents) * cfg.param("exemption_allowance")
                  + ctx.count_65_or_older() * cfg.param("senior_exemption")
                  + ctx.count_blind() * cfg.param("blind_exemption"))
        return [Adjustment("exemptionAllowance", amount, "Exemption allowance",
                           ("input.filingStatus", "input.dependents", "form1040.line11"))]

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        paid = ctx.residency.property_tax_paid
        if not paid or ctx.federal.line11.amount > cfg.param("property_tax_credit_agi_limit", ctx.filing_status):
            return []
        credit = min(tax, percent(paid, cfg.param("property_tax_credit_rate")))
        return [Adjustment("propertyTaxCredit", credit, "Property tax credit", ("input.residency",))]

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        eic = self.state_eitc(ctx)
        if eic is None:
            return []
        items = [eic]
        age_limit = self.config.param("child_credit_age_limit")
        young = [d for d in ctx.model.dependents
                 if d.age_at_year_end(ctx.tax_year) is not None and d.age_at_year_end(ctx.tax_year) < age_limit]
        if young:
            items.append(Adjustment("childTaxCredit", percent(eic.amount, self.config.param("child_credit_rate")),
                                    "Illinois child tax credit", (self.node("earnedIncomeCredit"), "input.dependents")))
        return items

    def review_extras(self):
        return (
            ReviewItem("Exemption allowance", self.node("exemptionAllowance"),
                       "$2,850 per person and dependent; none when federal AGI exceeds $250,000 ($500,000 joint)."),
            ReviewItem("Property tax credit", self.node("propertyTaxCredit"),
                       "5% of Illinois property tax paid on a principal residence.", ShowWhen.NONZERO),
        )
