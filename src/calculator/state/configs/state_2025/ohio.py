"""Ohio IT 1040 (2025)."""

import math
from typing import List

from calculator.decimal_math import dollars_to_cents, percent
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_brackets
from models.taxpayer import FilingStatus


def _tiers(*rows):
    return tuple((math.inf if ceiling is None else dollars_to_cents(ceiling), value) for ceiling, value in rows)


def get_ohio_config() -> StateTaxConfig:
    """Create Ohio tax configuration for 2025."""
    return StateTaxConfig(
        state_code="OH",
        state_name="Ohio",
        tax_year=2025,
        is_flat_tax=False,
        # One schedule for every filing status
        brackets=state_brackets(single=[(0, 0.0), (26050, 0.0275), (100000, 0.03125)]),
        social_security_taxable=False,
        parameters={
            # (Ohio AGI ceiling, exemption per person in cents)
            "exemption_tiers": _tiers((40000, dollars_to_cents(2400)), (80000, dollars_to_cents(2150)),
                                      (750000, dollars_to_cents(1900))),
            "exemption_credit": dollars_to_cents(20),
            "exemption_credit_income_limit": dollars_to_cents(30000),
            "senior_credit": dollars_to_cents(50),
            "senior_credit_income_limit": dollars_to_cents(100000),
            # (Ohio taxable income ceiling, share of tax)
            "joint_credit_tiers": _tiers((25000, 0.20), (50000, 0.15), (75000, 0.10), (None, 0.05)),
            "joint_credit_max": dollars_to_cents(650),
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="joint filing credit does not check the $500 qualifying income test for each spouse",
    )


def tier_value(amount: int, tiers, default=0):
    for ceiling, value in tiers:
        if amount <= ceiling:
            return value
    return default


@register_state("OH", 2025)
class OhioModule(StateRulesModule):
    """Ohio IT 1040 for tax year 2025."""

    state_code = "OH"
    state_name = "Ohio"
    form_label = "OH IT 1040"
    node_prefix = "it1040"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "personalExemptions": "Personal and dependent exemptions",
        "exemptionCredit": "Exemption credit",
        "seniorCredit": "Senior citizen credit",
        "jointFilingCredit": "Joint filing credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_ohio_config()

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def exemption_count(self, ctx: StateContext) -> int:
        return ctx.num_persons + ctx.num_dependents

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        per_person = tier_value(state_agi, self.config.param("exemption_tiers"))
        if not per_person:
            return []
        return [Adjustment("personalExemptions", self.exemption_count(ctx) * per_person,
                           "Personal and dependent exemptions",
                           ("input.filingStatus", "input.dependents", self.node("stateAGI")))]

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        credits = []
        remaining = tax
        taxable = max(0, state_agi - sum(e.amount for e in self.exemptions(ctx, state_agi)))
        if taxable < cfg.param("exemption_credit_income_limit"):
            amount = min(remaining, self.exemption_count(ctx) * cfg.param("exemption_credit"))
            if amount:
                credits.append(Adjustment("exemptionCredit", amount, "Exemption credit",
                                          ("input.filingStatus", "input.dependents", self.node("taxableIncome"))))
                remaining -= amount
        if ctx.count_65_or_older() and state_agi < cfg.param("senior_credit_income_limit"):
            amount = min(remaining, cfg.param("senior_credit"))
            if amount:
                credits.append(Adjustment("seniorCredit", amount, "Senior citizen credit",
                                          ("input.filingStatus", self.node("stateAGI"))))
                remaining -= amount
        if ctx.filing_status == FilingStatus.MARRIED_JOINT and remaining > 0:
            rate = tier_value(taxable, cfg.param("joint_credit_tiers"))
            amount = min(remaining, cfg.param("joint_credit_max"), percent(remaining, rate))
            if amount:
                credits.append(Adjustment("jointFilingCredit", amount, "Joint filing credit",
                                          ("input.filingStatus", self.node("totalTax"))))
        return credits

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("Exemptions", self.node("personalExemptions"),
                       "$2,400, $2,150 or $1,900 per person depending on Ohio AGI; none above $750,000."),
            ReviewItem("Joint filing credit", self.node("jointFilingCredit"),
                       "A percentage of tax for married couples filing jointly, up to $650.", ShowWhen.NONZERO),
        )
