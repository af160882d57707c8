"""
Massachusetts Form 1 (2025).

Part B income is taxed at 5%, with the 4% Fair Share surtax on taxable
income above the inflation-adjusted $1M threshold. Massachusetts has no
standard deduction; it allows specific deductions (rent, medical) and
personal exemptions instead.
"""

from typing import List

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
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts


def get_massachusetts_config() -> StateTaxConfig:
    """Create Massachusetts tax configuration for 2025."""
    return StateTaxConfig(
        state_code="MA",
        state_name="Massachusetts",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.05,
        allows_itemized=False,
        personal_exemption_amount=state_amounts(4400, 8800, head_of_household=6800, qualifying_widow=4400),
        dependent_exemption_amount=dollars_to_cents(1000),
        social_security_taxable=False,
        eitc_percentage=0.40,
        parameters={
            "senior_exemption": dollars_to_cents(700),
            "blind_exemption": dollars_to_cents(2200),
            "surtax_threshold": dollars_to_cents(1083150),
            "surtax_rate": 0.04,
            "rent_deduction_rate": 0.50,
            "rent_deduction_cap": state_amounts(4000, 4000, married_separate=2000),
            "medical_floor_rate": 0.075,
            "child_family_credit": dollars_to_cents(440),
            "child_family_credit_age": 13,
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="MA DOR 2025 Form 1 instructions",
    )


@register_state("MA", 2025)
class MassachusettsModule(StateRulesModule):
    """Massachusetts Form 1 for tax year 2025."""

    state_code = "MA"
    state_name = "Massachusetts"
    form_label = "MA Form 1"
    node_prefix = "ma1"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "hsaAddBack": "HSA deduction add-back",
        "rentDeduction": "Rental deduction",
        "medicalDeduction": "Medical and dental expenses",
        "seniorExemption": "Age 65 or over exemption",
        "blindExemption": "Blindness exemption",
        "surtax": "4% surtax on income over $1,083,150",
        "childFamilyCredit": "Child and family tax credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_massachusetts_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        hsa = ctx.federal.hsa
        if isinstance(hsa, Present) and hsa.value.deduction.amount:
            return [Adjustment("hsaAddBack", hsa.value.deduction.amount, "HSA deduction add-back",
                               (hsa.value.deduction.node_id,))]
        return []

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        items = []
        rent = ctx.residency.rent_paid
        if rent:
            amount = min(cfg.param("rent_deduction_cap", ctx.filing_status),
                         percent(rent, cfg.param("rent_deduction_rate")))
            items.append(Adjustment("rentDeduction", amount, "Rental deduction", ("input.rentPaid",)))
        itemized = ctx.itemized
        if itemized is not None and itemized.medical_expenses:
            floor = percent(max(0, ctx.federal.line11.amount), cfg.param("medical_floor_rate"))
            medical = max(0, itemized.medical_expenses - floor)
            if medical:
                items.append(Adjustment("medicalDeduction", medical, "Medical and dental expenses",
                                        ("itemized.medicalExpenses", "form1040.line11")))
        return items

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().exemptions(ctx, state_agi)
        seniors = ctx.count_65_or_older()
        if seniors:
            items.append(Adjustment("seniorExemption", seniors * self.config.param("senior_exemption"),
                                    "Age 65 or over exemption", ("input.filingStatus",)))
        blind = ctx.count_blind()
        if blind:
            items.append(Adjustment("blindExemption", blind * self.config.param("blind_exemption"),
                                    "Blindness exemption", ("input.filingStatus",)))
        return items

    def other_taxes(self, ctx: StateContext, taxable_income: int, state_agi: int) -> List[Adjustment]:
        threshold = self.config.param("surtax_threshold")
        if taxable_income <= threshold:
            return []
        amount = percent(taxable_income - threshold, self.config.param("surtax_rate"))
        return [Adjustment("surtax", amount, "4% surtax on income over $1,083,150",
                           (self.node("taxableIncome"),))]

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().refundable_credits(ctx, state_agi)
        age_limit = self.config.param("child_family_credit_age")
        qualifying = sum(
            1 for d in ctx.model.dependents
            if d.is_permanently_disabled
            or (d.age_at_year_end(ctx.tax_year) is not None and d.age_at_year_end(ctx.tax_year) < age_limit)
        )
        if qualifying:
            items.append(Adjustment("childFamilyCredit", qualifying * self.config.param("child_family_credit"),
                                    "Child and family tax credit", ("input.dependents",)))
        return items

    def review_extras(self):
        return (
            ReviewItem("HSA add-back", self.node("hsaAddBack"),
                       "Massachusetts does not allow the federal HSA deduction.", ShowWhen.NONZERO),
            ReviewItem("Rental deduction", self.node("rentDeduction"),
                       "Half of rent paid, up to $4,000 ($2,000 married filing separately).", ShowWhen.NONZERO),
            ReviewItem("Surtax", self.node("surtax"), "", ShowWhen.NONZERO),
        )
