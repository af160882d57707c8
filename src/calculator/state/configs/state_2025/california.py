"""
California Form 540 (2025).

California starts from federal AGI and adjusts it through Schedule CA:
- HSA deductions are added back (no conformity to IRC 223)
- Social Security benefits and US obligation interest are exempt

Deductions do not follow TCJA: no SALT cap, a $1M mortgage limit and
deductible home equity interest. Personal and dependent exemptions are
credits against tax, phased out 6% per $2,500 of AGI above the threshold.

Sources: FTB 2025 Tax Rate Schedules; FTB 2025 Form 540 Instructions.
"""

from typing import List, Optional

from calculator.apportionment import apportion
from calculator.decimal_math import dollars_to_cents, percent, phaseout_steps, ratio_of
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
from models.taxpayer import FilingStatus


def get_california_config() -> StateTaxConfig:
    """Create California tax configuration for 2025."""
    return StateTaxConfig(
        state_code="CA",
        state_name="California",
        tax_year=2025,
        is_flat_tax=False,
        brackets=state_brackets(
            single=[
                (0, 0.01), (11079, 0.02), (26264, 0.04), (41452, 0.06), (57542, 0.08),
                (72724, 0.093), (371479, 0.103), (445771, 0.113), (742953, 0.123),
            ],
            married_joint=[
                (0, 0.01), (22158, 0.02), (52528, 0.04), (82904, 0.06), (115084, 0.08),
                (145448, 0.093), (742958, 0.103), (891542, 0.113), (1485906, 0.123),
            ],
            head_of_household=[
                (0, 0.01), (22173, 0.02), (52530, 0.04), (67716, 0.06), (83805, 0.08),
                (98990, 0.093), (505208, 0.103), (606251, 0.113), (1010417, 0.123),
            ],
        ),
        standard_deduction=state_amounts(5706, 11412, head_of_household=11412),
        allows_itemized=True,
        social_security_taxable=False,
        parameters={
            "personal_exemption_credit": dollars_to_cents(153),
            "dependent_exemption_credit": dollars_to_cents(475),
            "exemption_phaseout_threshold": state_amounts(252203, 504411, head_of_household=378310),
            "exemption_phaseout_step": dollars_to_cents(2500),
            "exemption_phaseout_rate": 0.06,
            "mental_health_threshold": dollars_to_cents(1000000),
            "mental_health_rate": 0.01,
            "renters_credit": state_amounts(60, 120, married_separate=60, head_of_household=120),
            "renters_credit_agi_limit": state_amounts(53994, 107987, married_separate=53994,
                                                      head_of_household=107987),
            "mortgage_limit": state_amounts(1000000, 1000000, married_separate=500000),
            "home_equity_limit": state_amounts(100000, 100000, married_separate=50000),
            "medical_floor_rate": 0.075,
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="FTB 2025 rate schedules and Form 540 instructions",
    )


def _limited_interest(interest: int, principal: int, limit: int) -> int:
    """Interest on debt above the limit is allowed proportionally."""
    if principal <= 0 or principal <= limit:
        return interest
    return ratio_of(interest, limit, principal)


@register_state("CA", 2025)
class CaliforniaModule(StateRulesModule):
    """California Form 540 for tax year 2025."""

    state_code = "CA"
    state_name = "California"
    form_label = "CA Form 540"
    node_prefix = "form540"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "hsaAddBack": "HSA deduction add-back",
        "itemizedDeduction": "California itemized deductions",
        "exemptionCredits": "Exemption credits",
        "mentalHealthTax": "Mental health services tax (1%)",
        "rentersCredit": "Nonrefundable renter's credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_california_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        hsa = ctx.federal.hsa
        if isinstance(hsa, Present) and hsa.value.deduction.amount:
            return [Adjustment("hsaAddBack", hsa.value.deduction.amount, "HSA deduction add-back",
                               (hsa.value.deduction.node_id,))]
        return []

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """
        Federal Schedule A with California differences: medical floor on CA
        AGI, no state income tax and no SALT cap, the pre-TCJA mortgage limit
        and home equity interest.
        """
        items = ctx.itemized
        sched_a = ctx.federal.schedule_a
        if items is None or not isinstance(sched_a, Present):
            return None
        fs = ctx.filing_status
        cfg = self.config
        medical = max(0, items.medical_expenses - percent(max(0, state_agi), cfg.param("medical_floor_rate")))
        taxes = items.real_estate_taxes + items.personal_property_taxes + items.state_local_sales_taxes
        mortgage = _limited_interest(items.mortgage_interest, items.mortgage_principal,
                                     cfg.param("mortgage_limit", fs))
        home_equity = _limited_interest(items.home_equity_interest, items.home_equity_principal,
                                        cfg.param("home_equity_limit", fs))
        sa = sched_a.value
        amount = (medical + taxes + mortgage + home_equity
                  + sa.line9.amount + sa.line14.amount + sa.line16.amount)
        return Adjustment(
            "itemizedDeduction", amount, "California itemized deductions",
            (self.node("stateAGI"), "itemized.medicalExpenses", "itemized.realEstateTaxes",
             "itemized.mortgageInterest", "scheduleA.line9", "scheduleA.line14", "scheduleA.line16"),
        )

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        # California exemptions are credits, applied in nonrefundable_credits
        return []

    def exemption_credits(self, ctx: StateContext, state_agi: int) -> int:
        cfg = self.config
        fs = ctx.filing_status
        persons = 2 if fs in (FilingStatus.MARRIED_JOINT, FilingStatus.MARRIED_SEPARATE) else 1
        before = (persons * cfg.param("personal_exemption_credit")
                  + ctx.num_dependents * cfg.param("dependent_exemption_credit"))
        excess = state_agi - cfg.param("exemption_phaseout_threshold", fs)
        steps = phaseout_steps(excess, cfg.param("exemption_phaseout_step"))
        reduction = min(before, percent(before, steps * cfg.param("exemption_phaseout_rate")))
        return max(0, before - reduction)

    def mental_health_tax(self, taxable_income: int) -> int:
        threshold = self.config.param("mental_health_threshold")
        if taxable_income <= threshold:
            return 0
        return percent(taxable_income - threshold, self.config.param("mental_health_rate"))

    def other_taxes(self, ctx: StateContext, taxable_income: int, state_agi: int) -> List[Adjustment]:
        amount = self.mental_health_tax(taxable_income)
        if not amount:
            return []
        return [Adjustment("mentalHealthTax", amount, "Mental health services tax (1%)",
                           (self.node("taxableIncome"),))]

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        # Credits reduce the regular tax only; the mental health tax is added after them
        taxable = max(0, state_agi - sum(d.amount for d in self.deductions(ctx, state_agi)))
        remaining = max(0, tax - apportion(self.mental_health_tax(taxable), ctx.ratio))
        credits = []
        exemption = min(remaining, self.exemption_credits(ctx, state_agi))
        if exemption:
            credits.append(Adjustment("exemptionCredits", exemption, "Exemption credits",
                                      ("input.filingStatus", "input.dependents", self.node("stateAGI"))))
            remaining -= exemption
        fs = ctx.filing_status
        if ctx.residency.rent_paid > 0 and state_agi <= self.config.param("renters_credit_agi_limit", fs):
            renters = min(remaining, self.config.param("renters_credit", fs))
            credits.append(Adjustment("rentersCredit", renters,
                                      "Nonrefundable renter's credit", ("input.rentPaid", self.node("stateAGI"))))
        return credits

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("HSA add-back", self.node("hsaAddBack"),
                       "California does not recognize HSA deductions, so the federal deduction is added back.",
                       ShowWhen.NONZERO),
            ReviewItem("Exemption credits", self.node("exemptionCredits"),
                       "$153 per person and $475 per dependent, reduced 6% per $2,500 of AGI over the threshold.",
                       ShowWhen.NONZERO),
            ReviewItem("Mental health services tax", self.node("mentalHealthTax"),
                       "1% of taxable income over $1,000,000.", ShowWhen.NONZERO),
            ReviewItem("Renter's credit", self.node("rentersCredit"), "", ShowWhen.NONZERO),
        )
