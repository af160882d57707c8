"""
Virginia Form 760 (2025).

Virginia AGI is federal AGI adjusted on Schedule ADJ, where filers 65 or
older take the age deduction. Taxable income is taxed on a single schedule
for every filing status.
"""

from typing import List, Optional

from calculator.decimal_math import dollars_to_cents
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
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts, state_brackets
from models.deductions import DeductionMethod

# 2025 HHS poverty guidelines by family size
VA_POVERTY_GUIDELINES = (15650, 21150, 26650, 32150, 37650, 43150, 48650, 54150)
VA_POVERTY_PER_ADDITIONAL = 5500


def get_virginia_config() -> StateTaxConfig:
    """Create Virginia tax configuration for 2025."""
    return StateTaxConfig(
        state_code="VA",
        state_name="Virginia",
        tax_year=2025,
        is_flat_tax=False,
        brackets=state_brackets(single=[(0, 0.02), (3000, 0.03), (5000, 0.05), (17000, 0.0575)]),
        standard_deduction=state_amounts(8750, 17500),
        allows_itemized=True,
        personal_exemption_amount=state_amounts(930, 1860, married_separate=930, qualifying_widow=930),
        dependent_exemption_amount=dollars_to_cents(930),
        social_security_taxable=False,
        eitc_percentage=0.15,
        parameters={
            "additional_exemption": dollars_to_cents(800),
            "age_deduction": dollars_to_cents(12000),
            "age_deduction_threshold": state_amounts(75000, 150000, married_separate=75000),
            "poverty_guidelines": tuple(dollars_to_cents(v) for v in VA_POVERTY_GUIDELINES),
            "poverty_per_additional": dollars_to_cents(VA_POVERTY_PER_ADDITIONAL),
            "low_income_credit_per_exemption": dollars_to_cents(300),
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="the low-income credit and refundable EITC are not compared; both are allowed",
    )


@register_state("VA", 2025)
class VirginiaModule(StateRulesModule):
    """Virginia Form 760 for tax year 2025."""

    state_code = "VA"
    state_name = "Virginia"
    form_label = "VA Form 760"
    node_prefix = "form760"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "ageDeduction": "Age deduction",
        "itemizedDeduction": "Itemized deductions",
        "additionalExemptions": "Age 65 and blind exemptions",
        "lowIncomeCredit": "Credit for low-income individuals",
        "earnedIncomeCredit": "Refundable earned income credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_virginia_config()

    def age_deduction(self, ctx: StateContext) -> int:
        """$12,000 per filer 65 or older, reduced dollar for dollar above the AGI threshold."""
        seniors = ctx.count_65_or_older()
        if not seniors:
            return 0
        cfg = self.config
        excess = max(0, ctx.federal.line11.amount - cfg.param("age_deduction_threshold", ctx.filing_status))
        return max(0, seniors * cfg.param("age_deduction") - excess)

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = super().subtractions(ctx)
        age = self.age_deduction(ctx)
        if age:
            items.append(Adjustment("ageDeduction", age, "Age deduction", ("form1040.line11", "input.filingStatus")))
        return items

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """Federal itemized deductions less state and local income taxes."""
        if ctx.model.deductions.method != DeductionMethod.ITEMIZED:
            return None
        sched_a = ctx.federal.schedule_a
        if not isinstance(sched_a, Present):
            return None
        income_tax = state_income_tax_paid(ctx)
        amount = sched_a.value.line17.amount - (income_tax.amount if income_tax else 0)
        return Adjustment("itemizedDeduction", max(0, amount), "Itemized deductions",
                          ("scheduleA.line17", "scheduleA.line7"))

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().exemptions(ctx, state_agi)
        extra = ctx.count_65_or_older() + ctx.count_blind()
        if extra:
            items.append(Adjustment("additionalExemptions", extra * self.config.param("additional_exemption"),
                                    "Age 65 and blind exemptions", ("input.filingStatus",)))
        return items

    def poverty_guideline(self, family_size: int) -> int:
        guidelines = self.config.param("poverty_guidelines")
        if family_size <= len(guidelines):
            return guidelines[max(1, family_size) - 1]
        return guidelines[-1] + (family_size - len(guidelines)) * self.config.param("poverty_per_additional")

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        family = ctx.num_persons + ctx.num_dependents
        if state_agi > self.poverty_guideline(family):
            return []
        amount = min(tax, family * self.config.param("low_income_credit_per_exemption"))
        if not amount:
            return []
        return [Adjustment("lowIncomeCredit", amount, "Credit for low-income individuals",
                           (self.node("stateAGI"), "input.filingStatus", "input.dependents"))]

    def review_extras(self):
        return (
            ReviewItem("Age deduction", self.node("ageDeduction"),
                       "Up to $12,000 per filer 65 or older, reduced above $75,000 AGI ($150,000 married).",
                       ShowWhen.NONZERO),
            ReviewItem("Low-income credit", self.node("lowIncomeCredit"), "", ShowWhen.NONZERO),
        )
