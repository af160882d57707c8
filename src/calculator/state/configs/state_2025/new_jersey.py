"""
New Jersey NJ-1040 (2025).

New Jersey does not start from federal AGI. Gross income is built from the
NJ income categories (wages, interest, dividends, business income, gains,
pensions, rents and other income), each category floored at zero because
losses in one category cannot offset income in another. Social Security is
never included.

The property tax deduction and the $50 property tax credit are mutually
exclusive; the deduction is taken when its tax saving is at least $50.
"""

from typing import List, Tuple

from calculator.brackets import compute_bracket_tax
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
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig, state_amounts, state_brackets
from calculator.traced import document_node_id

NJ_TABLE_A = [
    (0, 0.014), (20000, 0.0175), (35000, 0.035), (40000, 0.05525),
    (75000, 0.0637), (500000, 0.0897), (1000000, 0.1075),
]
NJ_TABLE_B = [
    (0, 0.014), (20000, 0.0175), (50000, 0.0245), (70000, 0.035), (80000, 0.05525),
    (150000, 0.0637), (500000, 0.0897), (1000000, 0.1075),
]


def get_new_jersey_config() -> StateTaxConfig:
    """Create New Jersey tax configuration for 2025."""
    return StateTaxConfig(
        state_code="NJ",
        state_name="New Jersey",
        tax_year=2025,
        is_flat_tax=False,
        # Table B covers joint filers, heads of household and surviving spouses
        brackets=state_brackets(single=NJ_TABLE_A, married_joint=NJ_TABLE_B, head_of_household=NJ_TABLE_B),
        allows_itemized=False,
        eitc_percentage=0.40,
        parameters={
            "regular_exemption": dollars_to_cents(1000),
            "senior_exemption": dollars_to_cents(1000),
            "blind_disabled_exemption": dollars_to_cents(1000),
            "dependent_exemption": dollars_to_cents(1500),
            "college_student_exemption": dollars_to_cents(1000),
            "college_student_age_limit": 24,
            "pension_exclusion": state_amounts(75000, 100000, married_separate=50000),
            "pension_exclusion_income_limit": state_amounts(150000, 150000, married_separate=75000),
            "pension_exclusion_age": 62,
            "property_tax_deduction_max": dollars_to_cents(15000),
            "rent_property_tax_ratio": 0.18,
            "property_tax_credit": dollars_to_cents(50),
            "medical_floor_rate": 0.02,
            "child_tax_credit": dollars_to_cents(1000),
            "child_tax_credit_income_cap": dollars_to_cents(80000),
            "child_tax_credit_max_age": 5,
        },
        data_confidence=DataConfidence.VERIFIED,
        confidence_note="NJ Division of Taxation 2025 NJ-1040 instructions",
    )


@register_state("NJ", 2025)
class NewJerseyModule(StateRulesModule):
    """New Jersey NJ-1040 for tax year 2025."""

    state_code = "NJ"
    state_name = "New Jersey"
    form_label = "NJ-1040"
    node_prefix = "nj1040"
    tax_year = 2025
    apportionment_basis = ApportionmentBasis.TAX

    labels = {
        "startingIncome": "Total income",
        "stateAGI": "New Jersey gross income",
        "wages": "Wages, salaries, tips",
        "interest": "Taxable interest",
        "dividends": "Dividends",
        "businessIncome": "Net profits from business",
        "capitalGains": "Net gains from disposition of property",
        "pensions": "Pensions, annuities and IRA withdrawals",
        "rentalIncome": "Net rents, royalties, patents and copyrights",
        "partnershipIncome": "Distributive share of partnership and S corporation income",
        "otherIncome": "Other income",
        "pensionExclusion": "Pension exclusion",
        "propertyTaxDeduction": "Property tax deduction",
        "medicalExpenses": "Medical expenses",
        "personalExemptions": "Exemptions",
        "propertyTaxCredit": "Property tax credit",
        "earnedIncomeCredit": "New Jersey earned income tax credit",
        "childTaxCredit": "New Jersey child tax credit",
    }

    @classmethod
    def default_config(cls) -> StateTaxConfig:
        return get_new_jersey_config()

    # Income
    def wages(self, ctx: StateContext) -> List[Tuple[int, str]]:
        """Box 16 for NJ W-2s, box 1 for all other W-2s."""
        pairs = []
        for w in ctx.model.w2s:
            if w.state == self.state_code and w.state_wages is not None:
                pairs.append((w.state_wages, document_node_id("w2", w.id, "box16")))
            else:
                pairs.append((w.wages, document_node_id("w2", w.id, "box1")))
        return [(a, n) for a, n in pairs if a]

    def pensions(self, ctx: StateContext) -> List[Tuple[int, str]]:
        return [
            (f.taxable_amount, document_node_id("1099r", f.id, "box2a"))
            for f in ctx.model.form1099_rs if f.taxable_amount and not f.is_rollover
        ]

    def income_items(self, ctx: StateContext) -> List[Adjustment]:
        fed = ctx.federal
        items = []
        wages = self.wages(ctx)
        if wages:
            items.append(Adjustment("wages", sum(a for a, _ in wages), "Wages, salaries, tips",
                                    tuple(n for _, n in wages)))
        items.append(Adjustment("interest", fed.line2b.amount, "Taxable interest", ("form1040.line2b",)))
        items.append(Adjustment("dividends", fed.line3b.amount, "Dividends", ("form1040.line3b",)))
        sched_1 = fed.schedule_1
        if isinstance(sched_1, Present):
            items.append(Adjustment("businessIncome", max(0, sched_1.value.line3.amount),
                                    "Net profits from business", (sched_1.value.line3.node_id,)))
        sched_e = fed.schedule_e
        if isinstance(sched_e, Present):
            rental = sched_e.value.rental_income
            items.append(Adjustment("rentalIncome", max(0, rental.amount),
                                    "Net rents, royalties, patents and copyrights", (rental.node_id,)))
            partnership = sched_e.value.partnership_income
            items.append(Adjustment("partnershipIncome", max(0, partnership.amount),
                                    "Distributive share of partnership and S corporation income",
                                    (partnership.node_id,)))
        items.append(Adjustment("capitalGains", max(0, fed.line7.amount),
                                "Net gains from disposition of property", ("form1040.line7",)))
        pensions = self.pensions(ctx)
        if pensions:
            items.append(Adjustment("pensions", sum(a for a, _ in pensions),
                                    "Pensions, annuities and IRA withdrawals", tuple(n for _, n in pensions)))
        other = [(f.other_income, document_node_id("1099misc", f.id, "box3"))
                 for f in ctx.model.form1099_miscs if f.other_income]
        if other:
            items.append(Adjustment("otherIncome", sum(a for a, _ in other), "Other income",
                                    tuple(n for _, n in other)))
        return items

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        items = []
        us = self.us_interest_subtraction(ctx)
        if us is not None:
            items.append(us)
        exclusion = self.pension_exclusion(ctx)
        if exclusion:
            items.append(Adjustment("pensionExclusion", exclusion, "Pension exclusion",
                                    (self.node("pensions"), self.node("startingIncome"), "input.filingStatus")))
        return items

    def pension_exclusion(self, ctx: StateContext) -> int:
        cfg = self.config
        fs = ctx.filing_status
        pension = sum(a for a, _ in self.pensions(ctx))
        if not pension:
            return 0
        age = cfg.param("pension_exclusion_age")
        eligible = any(
            p.is_disabled or (p.age_at_year_end(ctx.tax_year) or 0) >= age
            for p in ctx.model.persons()
        )
        if not eligible:
            return 0
        total_income = sum(i.amount for i in self.income_items(ctx))
        if total_income > cfg.param("pension_exclusion_income_limit", fs):
            return 0
        return min(pension, cfg.param("pension_exclusion", fs))

    # Deductions
    def property_tax_amount(self, ctx: StateContext) -> int:
        cfg = self.config
        residency = ctx.residency
        if residency.is_homeowner:
            paid = residency.property_tax_paid
        else:
            paid = percent(residency.rent_paid, cfg.param("rent_property_tax_ratio"))
        return min(paid, cfg.param("property_tax_deduction_max"))

    def medical_deduction(self, ctx: StateContext, gross_income: int) -> int:
        items = ctx.itemized
        if items is None or not items.medical_expenses:
            return 0
        floor = percent(max(0, gross_income), self.config.param("medical_floor_rate"))
        return max(0, items.medical_expenses - floor)

    def uses_property_tax_deduction(self, ctx: StateContext, gross_income: int) -> bool:
        """The deduction wins when it saves at least as much tax as the credit pays."""
        amount = self.property_tax_amount(ctx)
        if not amount:
            return False
        exemptions = sum(e.amount for e in self.exemptions(ctx, gross_income))
        base = max(0, gross_income - self.medical_deduction(ctx, gross_income) - exemptions)
        brackets = self.config.get_brackets(ctx.filing_status)
        saving = compute_bracket_tax(base, brackets) - compute_bracket_tax(max(0, base - amount), brackets)
        return saving >= self.config.param("property_tax_credit")

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = []
        if self.uses_property_tax_deduction(ctx, state_agi):
            items.append(Adjustment("propertyTaxDeduction", self.property_tax_amount(ctx),
                                    "Property tax deduction", ("input.residency",)))
        medical = self.medical_deduction(ctx, state_agi)
        if medical:
            items.append(Adjustment("medicalExpenses", medical, "Medical expenses",
                                    ("itemized.medicalExpenses", self.node("stateAGI"))))
        return items

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        year = ctx.tax_year
        students = sum(
            1 for d in ctx.model.dependents
            if d.is_student and (d.age_at_year_end(year) or 0) < cfg.param("college_student_age_limit")
        )
        disabled_or_blind = sum(1 for p in ctx.model.persons() if p.is_blind or p.is_disabled)
        amount = (ctx.num_persons * cfg.param("regular_exemption")
                  + ctx.count_65_or_older() * cfg.param("senior_exemption")
                  + disabled_or_blind * cfg.param("blind_disabled_exemption")
                  + ctx.num_dependents * cfg.param("dependent_exemption")
                  + students * cfg.param("college_student_exemption"))
        return [Adjustment("personalExemptions", amount, "Exemptions", ("input.filingStatus", "input.dependents"))]

    # Credits
    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        cfg = self.config
        items = []
        if self.property_tax_amount(ctx) and not self.uses_property_tax_deduction(ctx, state_agi):
            items.append(Adjustment("propertyTaxCredit", cfg.param("property_tax_credit"),
                                    "Property tax credit", ("input.residency",)))
        eitc = self.state_eitc(ctx)
        if eitc is not None:
            items.append(eitc)
        if state_agi <= cfg.param("child_tax_credit_income_cap"):
            young = sum(
                1 for d in ctx.model.dependents
                if d.age_at_year_end(ctx.tax_year) is not None
                and d.age_at_year_end(ctx.tax_year) <= cfg.param("child_tax_credit_max_age")
            )
            if young:
                items.append(Adjustment("childTaxCredit", young * cfg.param("child_tax_credit"),
                                        "New Jersey child tax credit", ("input.dependents", self.node("stateAGI"))))
        return items

    def review_extras(self):
        return (
            ReviewItem("Pension exclusion", self.node("pensionExclusion"), "", ShowWhen.NONZERO),
            ReviewItem("Property tax deduction", self.node("propertyTaxDeduction"),
                       "Property tax paid, or 18% of rent, up to $15,000.", ShowWhen.NONZERO),
            ReviewItem("Property tax credit", self.node("propertyTaxCredit"),
                       "Paid instead of the deduction when the deduction saves less than $50.", ShowWhen.NONZERO),
        )
