"""Georgia Form 500 (2025): flat 5.19% after the HB 111 rate cut."""

from typing import List, Optional

from calculator.decimal_math import dollars_to_cents, percent
from calculator.outcome import Present
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
    person_ages,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts


def get_georgia_config() -> StateTaxConfig:
    """Create Georgia tax configuration for 2025."""
    return StateTaxConfig(
        state_code="GA",
        state_name="Georgia",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.0519,
        standard_deduction=state_amounts(12000, 24000),
        allows_itemized=True,
        dependent_exemption_amount=dollars_to_cents(4000),
        social_security_taxable=False,
        parameters={
            "retirement_exclusion_62_to_64": dollars_to_cents(35000),
            "retirement_exclusion_65_plus": dollars_to_cents(65000),
            "low_income_agi_limit": dollars_to_cents(20000),
            "low_income_credit": state_amounts(26, 52),
            "dependent_care_rate": 0.30,
            "medical_floor_rate": 0.075,
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="low-income credit is a flat amount per filing status rather than the per-exemption table",
    )


@register_state("GA", 2025)
class GeorgiaModule(StateRulesModule):
    """Georgia Form 500 for tax year 2025."""

    state_code = "GA"
    state_name = "Georgia"
    form_label = "GA Form 500"
    node_prefix = "form500"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "retirementExclusion": "Retirement income exclusion",
        "itemizedDeduction": "Georgia itemized deductions",
        "lowIncomeCredit": "Low income credit",
        "dependentCareCredit": "Child and dependent care expense credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_georgia_config()

    def retirement_exclusion_limit(self, ctx: StateContext) -> int:
        limit = 0
        for age in person_ages(ctx):
            if age is None:
                continue
            if age >= 65:
                limit += self.config.param("retirement_exclusion_65_plus")
            elif age >= 62:
                limit += self.config.param("retirement_exclusion_62_to_64")
        return limit

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = super().subtractions(ctx)
        retirement = max(0, ctx.federal.line4b.amount + ctx.federal.line5b.amount)
        exclusion = min(retirement, self.retirement_exclusion_limit(ctx))
        if exclusion:
            items.append(Adjustment("retirementExclusion", exclusion, "Retirement income exclusion",
                                    ("form1040.line4b", "form1040.line5b", "input.filingStatus")))
        return items

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """
        Schedule A with the medical floor measured against Georgia AGI and
        no deduction for income taxes; property and sales taxes are uncapped.
        """
        items = ctx.itemized
        sched_a = ctx.federal.schedule_a
        if items is None or not isinstance(sched_a, Present):
            return None
        floor = percent(max(0, state_agi), self.config.param("medical_floor_rate"))
        medical = max(0, items.medical_expenses - floor)
        taxes = items.real_estate_taxes + items.personal_property_taxes + items.state_local_sales_taxes
        sa = sched_a.value
        amount = (medical + taxes + sa.line8a.amount + sa.line9.amount
                  + sa.line14.amount + sa.line16.amount)
        return Adjustment(
            "itemizedDeduction", amount, "Georgia itemized deductions",
            (self.node("stateAGI"), "itemized.medicalExpenses", "itemized.realEstateTaxes",
             "scheduleA.line8a", "scheduleA.line9", "scheduleA.line14", "scheduleA.line16"),
        )

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        credits = []
        if (not ctx.model.taxpayer.can_be_claimed_as_dependent
                and ctx.federal.line11.amount < cfg.param("low_income_agi_limit")):
            credits.append(Adjustment("lowIncomeCredit", cfg.param("low_income_credit", ctx.filing_status),
                                      "Low income credit", ("form1040.line11", "input.filingStatus")))
        care = ctx.federal.dependent_care_credit
        if isinstance(care, Present) and care.value.credit.amount:
            credits.append(Adjustment("dependentCareCredit",
                                      percent(care.value.credit.amount, cfg.param("dependent_care_rate")),
                                      "Child and dependent care expense credit", (care.value.credit.node_id,)))
        return credits

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("Retirement exclusion", self.node("retirementExclusion"),
                       "Up to $35,000 per person aged 62 to 64 and $65,000 at 65 or older.", ShowWhen.NONZERO),
            ReviewItem("Low income credit", self.node("lowIncomeCredit"), "", ShowWhen.NONZERO),
        )
