"""
Pennsylvania PA-40 (2025).

Pennsylvania ignores federal AGI. Income is sorted into classes (compensation,
interest, dividends, business income, net gains and rents), each class is
floored at zero, and the positive classes are added together: a loss in one
class never offsets income in another. The result is taxed at a flat 3.07%.

Nonresidents report only Pennsylvania-source income, so their tax is not
apportioned again. Intangible income (interest, dividends, securities gains)
is never Pennsylvania-source for a nonresident.
"""

from typing import List, Tuple

from calculator.decimal_math import dollars_to_cents, phaseout_steps, ratio_of
from calculator.federal.schedule_k1 import k1_node, k1_pairs
from calculator.state.base_state_calculator import (
    Adjustment,
    ApportionmentBasis,
    ReviewItem,
    ShowWhen,
    StateContext,
    StateRulesModule,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig
from calculator.traced import document_node_id
from models.state import ResidencyType, StateReturnConfig
from models.taxpayer import FilingStatus


def get_pennsylvania_config() -> StateTaxConfig:
    """Create Pennsylvania tax configuration for 2025."""
    return StateTaxConfig(
        state_code="PA",
        state_name="Pennsylvania",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.0307,
        allows_itemized=False,
        parameters={
            "section_529_limit": dollars_to_cents(19000),
            "forgiveness_single_base": dollars_to_cents(6500),
            "forgiveness_married_base": dollars_to_cents(13000),
            "forgiveness_per_dependent": dollars_to_cents(9500),
            "forgiveness_step": dollars_to_cents(250),
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="PA DOR 2025 PA-40 and Schedule SP instructions",
    )


def forgiveness_percentage(eligibility_income: int, base: int, step: int) -> int:
    """
    Schedule SP forgiveness: 100% up to the base, then 10 points less for
    each $250 (or part) above it.

    Examples:
        >>> forgiveness_percentage(650000, 650000, 25000)
        100
        >>> forgiveness_percentage(650001, 650000, 25000)
        90
    """
    steps = phaseout_steps(eligibility_income - base, step)
    return max(0, 100 - 10 * steps)


@register_state("PA", 2025)
class PennsylvaniaModule(StateRulesModule):
    """Pennsylvania PA-40 for tax year 2025."""

    state_code = "PA"
    state_name = "Pennsylvania"
    form_label = "PA-40"
    node_prefix = "pa40"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "startingIncome": "Total PA taxable income",
        "stateAGI": "Total PA taxable income",
        "compensation": "Gross compensation",
        "interest": "Interest income",
        "dividends": "Dividends and capital gains distributions",
        "businessIncome": "Net income from business",
        "netGains": "Net gains from the sale of property",
        "rentsRoyalties": "Net income from rents and royalties",
        "partnershipIncome": "Income from partnerships, S corporations and LLCs",
        "section529Deduction": "IRC Section 529 contributions",
        "taxForgiveness": "Tax forgiveness (Schedule SP)",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_pennsylvania_config()

    def residency_ratio(self, residency: StateReturnConfig, tax_year: int) -> float:
        # Nonresident income is already limited to PA sources
        if residency.residency_type == ResidencyType.NONRESIDENT:
            return 1.0
        return super().residency_ratio(residency, tax_year)

    @staticmethod
    def _nonresident(ctx: StateContext) -> bool:
        return ctx.residency.residency_type == ResidencyType.NONRESIDENT

    def compensation(self, ctx: StateContext) -> List[Tuple[int, str]]:
        pairs = []
        for w in ctx.model.w2s:
            is_pa = w.state == self.state_code
            if self._nonresident(ctx) and not is_pa:
                continue
            if is_pa and w.state_wages is not None:
                pairs.append((w.state_wages, document_node_id("w2", w.id, "box16")))
            else:
                pairs.append((w.wages, document_node_id("w2", w.id, "box1")))
        return [(a, n) for a, n in pairs if a]

    def income_items(self, ctx: StateContext) -> List[Adjustment]:
        model = ctx.model
        nonresident = self._nonresident(ctx)
        items = []

        comp = self.compensation(ctx)
        if comp:
            items.append(Adjustment("compensation", sum(a for a, _ in comp), "Gross compensation",
                                    tuple(n for _, n in comp)))

        if not nonresident:
            # PA taxes other states' municipal interest but not US obligations
            interest = [(f.interest_income, document_node_id("1099int", f.id, "box1"))
                        for f in model.form1099_ints if f.interest_income]
            interest += [(f.tax_exempt_interest, document_node_id("1099int", f.id, "box8"))
                         for f in model.form1099_ints if f.tax_exempt_interest]
            interest += [(a, n) for a, n in k1_pairs(model, "interest_income") if a]
            if interest:
                items.append(Adjustment("interest", sum(a for a, _ in interest), "Interest income",
                                        tuple(n for _, n in interest)))
            dividends = [(f.ordinary_dividends, document_node_id("1099div", f.id, "box1a"))
                         for f in model.form1099_divs if f.ordinary_dividends]
            dividends += [(f.capital_gain_distributions, document_node_id("1099div", f.id, "box2a"))
                          for f in model.form1099_divs if f.capital_gain_distributions]
            dividends += [(a, n) for a, n in k1_pairs(model, "ordinary_dividends") if a]
            if dividends:
                items.append(Adjustment("dividends", sum(a for a, _ in dividends),
                                        "Dividends and capital gains distributions",
                                        tuple(n for _, n in dividends)))
            gains = [(t.gain_loss, f"tx:{t.id}") for t in model.capital_transactions]
            gains += [(a, n) for a, n in k1_pairs(model, "short_term_capital_gain")
                      + k1_pairs(model, "long_term_capital_gain") if a]
            if sum(a for a, _ in gains) > 0:
                items.append(Adjustment("netGains", sum(a for a, _ in gains), "Net gains from the sale of property",
                                        tuple(n for _, n in gains)))

        businesses = [b for b in model.schedule_c_businesses
                      if not nonresident or b.business_state == self.state_code]
        business = sum(b.net_profit() for b in businesses)
        if business > 0:
            items.append(Adjustment("businessIncome", business, "Net income from business",
                                    tuple(document_node_id("schc", b.id, "netProfit") for b in businesses)))

        properties = [p for p in model.schedule_e_properties
                      if not nonresident or p.property_state == self.state_code]
        rents = sum(p.net_income() for p in properties)
        if rents > 0:
            items.append(Adjustment("rentsRoyalties", rents, "Net income from rents and royalties",
                                    tuple(document_node_id("sche", p.id, "netIncome") for p in properties)))

        k1s = [k for k in model.schedule_k1s if not nonresident or k.entity_state == self.state_code]
        shares = [
            (getattr(k, field), k1_node(k, field))
            for k in k1s
            for field in ("ordinary_business_income", "net_rental_income", "guaranteed_payments")
            if getattr(k, field)
        ]
        if sum(a for a, _ in shares) > 0:
            items.append(Adjustment("partnershipIncome", sum(a for a, _ in shares),
                                    "Income from partnerships, S corporations and LLCs",
                                    tuple(n for _, n in shares)))
        return items

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        return []

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        contributed = ctx.residency.contributions_529
        if not contributed:
            return []
        return [Adjustment("section529Deduction", min(contributed, self.config.param("section_529_limit")),
                           "IRC Section 529 contributions", ("input.residency",))]

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def eligibility_income(self, ctx: StateContext, state_agi: int) -> int:
        taxable = max(0, state_agi - sum(d.amount for d in self.deductions(ctx, state_agi)))
        social_security = sum(s.net_benefits for s in ctx.model.ssa1099s)
        return taxable + max(0, social_security)

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        if ctx.filing_status == FilingStatus.MARRIED_JOINT:
            base = cfg.param("forgiveness_married_base")
        else:
            base = cfg.param("forgiveness_single_base")
        base += ctx.num_dependents * cfg.param("forgiveness_per_dependent")
        pct = forgiveness_percentage(self.eligibility_income(ctx, state_agi), base, cfg.param("forgiveness_step"))
        if not pct or not tax:
            return []
        return [Adjustment("taxForgiveness", ratio_of(tax, pct, 100), "Tax forgiveness (Schedule SP)",
                           (self.node("taxableIncome"), "input.filingStatus", "input.dependents"))]

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        return []

    def review_extras(self):
        return (
            ReviewItem("Section 529 deduction", self.node("section529Deduction"),
                       "Up to $19,000 per beneficiary.", ShowWhen.NONZERO),
            ReviewItem("Tax forgiveness", self.node("taxForgiveness"),
                       "Schedule SP forgiveness for low eligibility income.", ShowWhen.NONZERO),
        )
