"""
Colorado DR 0104 (2025).

Colorado starts from federal taxable income (Form 1040 line 15), not AGI,
and taxes it at a flat 4.40%. Full-year residents also receive the TABOR
state sales tax refund, paid through the return by modified AGI tier.
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
    tax_exempt_interest,
)
from calculator.state.state_registry import register_state
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig
from models.deductions import DeductionMethod

# (modified AGI ceiling, single refund, joint refund) in dollars
TABOR_TIERS = (
    (53000, 177, 354),
    (105000, 240, 480),
    (166000, 277, 554),
    (233000, 323, 646),
    (302000, 350, 700),
    (float("inf"), 565, 1130),
)


def get_colorado_config() -> StateTaxConfig:
    """Create Colorado tax configuration for 2025."""
    return StateTaxConfig(
        state_code="CO",
        state_name="Colorado",
        tax_year=2025,
        is_flat_tax=True,
        flat_rate=0.044,
        social_security_taxable=False,
        eitc_percentage=0.35,
        parameters={
            "ctc_rate": 0.20,
            "pension_subtraction_55_to_64": dollars_to_cents(20000),
            "pension_subtraction_65_plus": dollars_to_cents(24000),
            "tabor_tiers": tuple(
                (limit if limit == float("inf") else dollars_to_cents(limit),
                 dollars_to_cents(single), dollars_to_cents(joint))
                for limit, single, joint in TABOR_TIERS
            ),
        },
        data_confidence=DataConfidence.PROVISIONAL,
        confidence_note="CO EITC and child tax credit use flat rates of the federal credits; TABOR tiers are estimates",
    )


def tabor_refund(modified_agi: int, joint: bool, tiers) -> int:
    """TABOR sales tax refund for the tier containing ``modified_agi``."""
    for ceiling, single, joint_amount in tiers:
        if modified_agi <= ceiling:
            return joint_amount if joint else single
    _, single, joint_amount = tiers[-1]
    return joint_amount if joint else single


@register_state("CO", 2025)
class ColoradoModule(StateRulesModule):
    """Colorado DR 0104 for tax year 2025."""

    state_code = "CO"
    state_name = "Colorado"
    form_label = "CO DR 0104"
    node_prefix = "dr0104"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAXABLE_INCOME

    labels = {
        "federalTaxableIncome": "Federal taxable income",
        "saltAddback": "State and local taxes deducted federally",
        "pensionSubtraction": "Pension and annuity subtraction",
        "childTaxCredit": "Colorado child tax credit",
        "earnedIncomeCredit": "Colorado earned income tax credit",
        "taborRefund": "TABOR state sales tax refund",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_colorado_config()

    def income_items(self, ctx: StateContext) -> List[Adjustment]:
        return [Adjustment("federalTaxableIncome", ctx.federal.line15.amount, "Federal taxable income",
                           ("form1040.line15",))]

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        items = ctx.itemized
        if ctx.model.deductions.method != DeductionMethod.ITEMIZED or items is None:
            return []
        amount = max(items.state_local_income_taxes, items.state_local_sales_taxes)
        if not amount:
            return []
        return [Adjustment("saltAddback", amount, "State and local taxes deducted federally",
                           ("itemized.stateLocalIncomeTaxes", "itemized.stateLocalSalesTaxes"))]

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = super().subtractions(ctx)
        age = ctx.model.taxpayer.age_at_year_end(ctx.tax_year) or 0
        if age >= 65:
            limit = self.config.param("pension_subtraction_65_plus")
        elif age >= 55:
            limit = self.config.param("pension_subtraction_55_to_64")
        else:
            limit = 0
        retirement = ctx.federal.line4b.amount + ctx.federal.line5b.amount
        pension = min(limit, max(0, retirement))
        if pension:
            items.append(Adjustment("pensionSubtraction", pension, "Pension and annuity subtraction",
                                    ("form1040.line4b", "form1040.line5b")))
        return items

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        # The federal deduction is already out of federal taxable income
        return []

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        ctc = ctx.federal.child_tax_credit
        if not isinstance(ctc, Present) or not ctc.value.credit_after_phaseout.amount:
            return []
        amount = min(tax, percent(ctc.value.credit_after_phaseout.amount, self.config.param("ctc_rate")))
        return [Adjustment("childTaxCredit", amount, "Colorado child tax credit",
                           (ctc.value.credit_after_phaseout.node_id,))]

    def modified_agi(self, ctx: StateContext) -> int:
        nontaxable_ss = max(0, ctx.federal.line6a.amount - ctx.federal.line6b.amount)
        exempt_interest = sum(a for a, n in tax_exempt_interest(ctx.model) if n.startswith("1099int:"))
        return ctx.federal.line11.amount + nontaxable_ss + exempt_interest

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = super().refundable_credits(ctx, state_agi)
        if ctx.is_full_year:
            refund = tabor_refund(self.modified_agi(ctx), ctx.is_joint, self.config.param("tabor_tiers"))
            items.append(Adjustment("taborRefund", refund, "TABOR state sales tax refund",
                                    ("form1040.line11", "form1040.line6a", "form1040.line6b", "input.filingStatus")))
        return items

    def review_extras(self):
        return (
            ReviewItem("Pension subtraction", self.node("pensionSubtraction"),
                       "Up to $20,000 at ages 55 to 64 and $24,000 at 65 or older.", ShowWhen.NONZERO),
            ReviewItem("TABOR refund", self.node("taborRefund"),
                       "State sales tax refund for full-year residents, by modified AGI.", ShowWhen.NONZERO),
        )
