"""Arizona Form 140 (2025): flat 2.5% on Arizona taxable income."""

from typing import List

from calculator.decimal_math import dollars_to_cents, percent, phaseout_steps
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    StateContext,
    StateRulesModule,
    state_income_tax_paid,
    state_refund_income,
    tax_exempt_interest,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts
from models.deductions import DeductionMethod


def get_arizona_config() -> StateTaxConfig:
    """Create Arizona tax configuration for 2025."""
    return StateTaxConfig(
        state_code="AZ",
        state_name="Arizona",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.025,
        standard_deduction=state_amounts(15750, 31500, head_of_household=23625),
        social_security_taxable=False,
        parameters={
            "dependent_credit_under_17": dollars_to_cents(100),
            "dependent_credit_17_and_over": dollars_to_cents(25),
            "dependent_credit_phaseout_start": state_amounts(200000, 400000),
            "dependent_credit_phaseout_step": dollars_to_cents(1000),
            "dependent_credit_phaseout_rate": 0.05,
            "family_credit_per_person": dollars_to_cents(40),
            "family_credit_max": dollars_to_cents(240),
            "family_credit_agi_limit": dollars_to_cents(50000),
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="family tax credit amounts and AGI limit not yet checked against the 2025 Form 140",
    )


@register_state("AZ", 2025)
class ArizonaModule(StateRulesModule):
    """Arizona Form 140 for tax year 2025."""

    state_code = "AZ"
    state_name = "Arizona"
    form_label = "AZ Form 140"
    node_prefix = "az140"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "nonArizonaMunicipalInterest": "Non-Arizona municipal bond interest",
        "stateIncomeTaxAddback": "Arizona income taxes deducted federally",
        "stateRefund": "State income tax refund included in federal AGI",
        "dependentCredit": "Dependent tax credit",
        "familyTaxCredit": "Family income tax credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_arizona_config()

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        items = []
        # All tax-exempt interest is treated as non-Arizona municipal interest
        muni = [(a, n) for a, n in tax_exempt_interest(ctx.model) if n.startswith("1099int:")]
        if muni:
            items.append(Adjustment("nonArizonaMunicipalInterest", sum(a for a, _ in muni),
                                    "Non-Arizona municipal bond interest", tuple(n for _, n in muni)))
        if ctx.model.deductions.method == DeductionMethod.ITEMIZED:
            addback = state_income_tax_paid(ctx)
            if addback is not None:
                items.append(addback)
        return items

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = super().subtractions(ctx)
        refunds = state_refund_income(ctx.model)
        if refunds and ctx.federal.schedule_1.is_present and ctx.model.prior_year.itemized_last_year:
            items.append(Adjustment("stateRefund", sum(a for a, _ in refunds),
                                    "State income tax refund included in federal AGI",
                                    tuple(n for _, n in refunds)))
        return items

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        # Arizona replaced dependent exemptions with the dependent tax credit
        return []

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        credits = []
        under_17 = sum(
            1 for d in ctx.model.dependents
            if (d.age_at_year_end(ctx.tax_year) or 0) < 17
        )
        older = ctx.num_dependents - under_17
        dependent = (under_17 * cfg.param("dependent_credit_under_17")
                     + older * cfg.param("dependent_credit_17_and_over"))
        if dependent:
            excess = ctx.federal.line11.amount - cfg.param("dependent_credit_phaseout_start", ctx.filing_status)
            steps = phaseout_steps(excess, cfg.param("dependent_credit_phaseout_step"))
            reduction_rate = min(1.0, steps * cfg.param("dependent_credit_phaseout_rate"))
            dependent -= min(dependent, percent(dependent, reduction_rate))
            if dependent:
                credits.append(Adjustment("dependentCredit", dependent, "Dependent tax credit",
                                          ("input.dependents", "form1040.line11")))

        if (not ctx.model.taxpayer.can_be_claimed_as_dependent
                and ctx.federal.line11.amount < cfg.param("family_credit_agi_limit")):
            family = min(cfg.param("family_credit_max"),
                         (ctx.num_persons + ctx.num_dependents) * cfg.param("family_credit_per_person"))
            credits.append(Adjustment("familyTaxCredit", family, "Family income tax credit",
                                      ("input.filingStatus", "input.dependents", "form1040.line11")))
        return credits

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []
