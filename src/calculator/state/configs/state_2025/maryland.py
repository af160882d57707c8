"""
Maryland Form 502 (2025).

Maryland taxes twice on the same base: the state graduated schedule (with
the two top brackets added for 2025) and a county or Baltimore City local
income tax at a flat county rate. Personal exemptions step down to half,
a quarter and nothing as Maryland AGI rises.
"""

import logging
from typing import List, Optional

from calculator.decimal_math import cents, dollars_to_cents, percent, to_decimal
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
from models.deductions import DeductionMethod

logger = logging.getLogger(__name__)

MD_DEFAULT_COUNTY = "montgomery"

# Local income tax rates for 2025
MD_COUNTY_RATES = {
    "allegany": 0.0303,
    "anne_arundel": 0.0281,
    "baltimore_city": 0.032,
    "baltimore_county": 0.032,
    "calvert": 0.030,
    "carroll": 0.0303,
    "charles": 0.0303,
    "frederick": 0.0296,
    "harford": 0.0306,
    "howard": 0.032,
    "montgomery": 0.032,
    "prince_georges": 0.032,
    "st_marys": 0.030,
    "talbot": 0.024,
    "washington": 0.0295,
    "worcester": 0.0225,
}


def get_maryland_config() -> StateTaxConfig:
    """Create Maryland tax configuration for 2025."""
    return StateTaxConfig(
        state_code="MD",
        state_name="Maryland",
        tax_year=2025,
        is_flat_tax=False,
        brackets=state_brackets(
            single=[
                (0, 0.02), (1000, 0.03), (2000, 0.04), (3000, 0.0475), (100000, 0.05),
                (125000, 0.0525), (150000, 0.055), (250000, 0.0575), (500000, 0.0625),
                (1000000, 0.065),
            ],
            married_joint=[
                (0, 0.02), (1000, 0.03), (2000, 0.04), (3000, 0.0475), (150000, 0.05),
                (175000, 0.0525), (225000, 0.055), (300000, 0.0575), (600000, 0.0625),
                (1200000, 0.065),
            ],
            head_of_household=[
                (0, 0.02), (1000, 0.03), (2000, 0.04), (3000, 0.0475), (150000, 0.05),
                (175000, 0.0525), (225000, 0.055), (300000, 0.0575), (600000, 0.0625),
                (1200000, 0.065),
            ],
        ),
        standard_deduction=state_amounts(3350, 6700, head_of_household=6700),
        allows_itemized=True,
        social_security_taxable=False,
        has_local_tax=True,
        parameters={
            "personal_exemption": dollars_to_cents(3200),
            # (full, half, quarter) ceilings on Maryland AGI
            "exemption_thresholds": {
                "single": tuple(dollars_to_cents(v) for v in (100000, 125000, 150000)),
                "married_separate": tuple(dollars_to_cents(v) for v in (100000, 125000, 150000)),
                "married_joint": tuple(dollars_to_cents(v) for v in (150000, 175000, 200000)),
                "head_of_household": tuple(dollars_to_cents(v) for v in (150000, 175000, 200000)),
                "qualifying_widow": tuple(dollars_to_cents(v) for v in (150000, 175000, 200000)),
            },
            "county_rates": MD_COUNTY_RATES,
            "eic_rate_with_children": 0.45,
            "eic_rate_without_children": 1.00,
            "capital_gains_surtax_agi": dollars_to_cents(350000),
            "capital_gains_surtax_rate": 0.02,
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="2025 bracket changes and county rates not yet checked against the final Form 502",
    )


@register_state("MD", 2025)
class MarylandModule(StateRulesModule):
    """Maryland Form 502 for tax year 2025."""

    state_code = "MD"
    state_name = "Maryland"
    form_label = "MD Form 502"
    node_prefix = "form502"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "itemizedDeduction": "Maryland itemized deductions",
        "personalExemption": "Personal exemptions",
        "dependentExemption": "Dependent exemptions",
        "localTax": "Local income tax",
        "capitalGainsSurtax": "Capital gains surtax",
        "earnedIncomeCredit": "Maryland earned income credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_maryland_config()

    def county_rate(self, county: Optional[str]) -> float:
        rates = self.config.param("county_rates")
        key = (county or MD_DEFAULT_COUNTY).strip().lower().replace(" ", "_").replace("'", "")
        if key not in rates:
            logger.warning("Unknown Maryland county %r; using %s rate", county, MD_DEFAULT_COUNTY)
            key = MD_DEFAULT_COUNTY
        return rates[key]

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        """Federal Schedule A without state income or sales taxes and without the SALT cap."""
        items = ctx.itemized
        sched_a = ctx.federal.schedule_a
        if ctx.model.deductions.method != DeductionMethod.ITEMIZED or items is None:
            return None
        if not isinstance(sched_a, Present):
            return None
        sa = sched_a.value
        amount = (sa.line4.amount + items.real_estate_taxes + items.personal_property_taxes
                  + sa.line10.amount + sa.line14.amount + sa.line16.amount)
        return Adjustment(
            "itemizedDeduction", amount, "Maryland itemized deductions",
            ("scheduleA.line4", "itemized.realEstateTaxes", "scheduleA.line10",
             "scheduleA.line14", "scheduleA.line16"),
        )

    def exemption_per_person(self, ctx: StateContext, state_agi: int) -> int:
        full, half, quarter = self.config.param("exemption_thresholds", ctx.filing_status)
        amount = self.config.param("personal_exemption")
        if state_agi <= full:
            return amount
        if state_agi <= half:
            return cents(to_decimal(amount) / 2)
        if state_agi <= quarter:
            return cents(to_decimal(amount) / 4)
        return 0

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        per_person = self.exemption_per_person(ctx, state_agi)
        if not per_person:
            return []
        items = [Adjustment("personalExemption", ctx.num_persons * per_person, "Personal exemptions",
                            ("input.filingStatus", self.node("stateAGI")))]
        if ctx.num_dependents:
            items.append(Adjustment("dependentExemption", ctx.num_dependents * per_person,
                                    "Dependent exemptions", ("input.dependents", self.node("stateAGI"))))
        return items

    def other_taxes(self, ctx: StateContext, taxable_income: int, state_agi: int) -> List[Adjustment]:
        items = []
        rate = self.county_rate(ctx.residency.county)
        if taxable_income > 0:
            items.append(Adjustment("localTax", percent(taxable_income, rate), "Local income tax",
                                    (self.node("taxableIncome"), "input.residency")))
        cfg = self.config
        gains = max(0, ctx.federal.line7.amount)
        if gains and ctx.federal.line11.amount > cfg.param("capital_gains_surtax_agi"):
            items.append(Adjustment("capitalGainsSurtax", percent(gains, cfg.param("capital_gains_surtax_rate")),
                                    "Capital gains surtax", ("form1040.line7", "form1040.line11")))
        return items

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        eic = ctx.federal.earned_income_credit
        if not isinstance(eic, Present) or not eic.value.credit.amount:
            return []
        if eic.value.num_qualifying_children > 0:
            rate = self.config.param("eic_rate_with_children")
        else:
            rate = self.config.param("eic_rate_without_children")
        return [Adjustment("earnedIncomeCredit", percent(eic.value.credit.amount, rate),
                           "Maryland earned income credit", ("form1040.line27",))]

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("Local income tax", self.node("localTax"),
                       "County or Baltimore City tax on Maryland taxable income."),
            ReviewItem("Capital gains surtax", self.node("capitalGainsSurtax"),
                       "2% of net capital gain when federal AGI exceeds $350,000.", ShowWhen.NONZERO),
        )
