"""
Base class for state income tax modules.

A state module is a typed descriptor for one jurisdiction and tax year. It
reads the completed federal return, applies the state's additions,
subtractions, deductions, exemptions, rates and credits, and returns a
``StateComputeResult`` whose lines are TracedValues under the module's node
prefix (``form540.taxableIncome``). Federal results are only ever read.

Subclasses override the hooks they need; the template in ``compute`` keeps the
order of evaluation and the apportionment of part-year and nonresident
returns the same for every state.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from calculator.apportionment import apportion, compute_apportionment_ratio
from calculator.brackets import compute_bracket_tax
from calculator.decimal_math import percent
from calculator.form1040 import Form1040Result
from calculator.outcome import Present
from calculator.state.state_tax_config import DataConfidence, StateTaxConfig
from calculator.traced import TracedValue, document_node_id, traced_from_computation, traced_zero
from models.deductions import ItemizedDeductions
from models.state import ResidencyType, StateReturnConfig
from models.taxpayer import FilingStatus
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


class ApportionmentBasis(str, Enum):
    """What the residency ratio scales on a part-year or nonresident return."""
    TAX = "tax"
    TAXABLE_INCOME = "taxable_income"


@dataclass(frozen=True)
class Adjustment:
    """
    One state-specific amount produced by a hook.

    ``key`` becomes the node suffix (``<prefix>.<key>``) and ``inputs`` are the
    node ids the amount was derived from.
    """
    key: str
    amount: int
    label: str
    inputs: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StateContext:
    """Everything a hook may read. None of it may be modified."""
    model: TaxReturn
    federal: Form1040Result
    residency: StateReturnConfig
    ratio: float

    @property
    def filing_status(self) -> FilingStatus:
        return self.model.filing_status

    @property
    def tax_year(self) -> int:
        return self.model.tax_year

    @property
    def is_joint(self) -> bool:
        return self.model.filing_status.is_joint_schedule

    @property
    def is_full_year(self) -> bool:
        return self.residency.residency_type == ResidencyType.FULL_YEAR

    @property
    def itemized(self) -> Optional[ItemizedDeductions]:
        return self.model.deductions.itemized

    @property
    def num_dependents(self) -> int:
        return len(self.model.dependents)

    @property
    def num_persons(self) -> int:
        """Exemptions claimed for the filer: two on a joint return."""
        return 2 if self.is_joint else 1

    def count_65_or_older(self) -> int:
        return sum(1 for p in self.model.persons() if p.is_65_or_older(self.tax_year))

    def count_blind(self) -> int:
        return sum(1 for p in self.model.persons() if p.is_blind)

    def federal_eic(self) -> int:
        eic = self.federal.earned_income_credit
        return eic.value.credit.amount if isinstance(eic, Present) else 0

    def federal_schedule_a_total(self) -> int:
        sched_a = self.federal.schedule_a
        return sched_a.value.line17.amount if isinstance(sched_a, Present) else 0


class ShowWhen(str, Enum):
    ALWAYS = "always"
    NONZERO = "nonzero"


@dataclass(frozen=True)
class ReviewItem:
    label: str
    node_id: str
    explanation: str = ""
    show_when: ShowWhen = ShowWhen.ALWAYS


@dataclass(frozen=True)
class ReviewSection:
    title: str
    items: Tuple[ReviewItem, ...]


@dataclass(frozen=True)
class ReviewResultLine:
    kind: str  # "refund", "owed" or "zero"
    label: str
    node_id: str


@dataclass(frozen=True)
class StateComputeResult:
    state_code: str
    state_name: str
    form_label: str
    tax_year: int
    residency_type: ResidencyType
    apportionment_ratio: float
    data_confidence: DataConfidence

    starting_income: TracedValue
    additions: TracedValue
    subtractions: TracedValue
    state_agi: TracedValue
    deduction: TracedValue
    exemptions: TracedValue
    state_taxable_income: TracedValue
    state_tax: TracedValue
    state_credits: TracedValue
    tax_after_credits: TracedValue
    state_withholding: TracedValue
    refundable_credits: TracedValue
    total_payments: TracedValue
    overpaid: TracedValue
    amount_owed: TracedValue

    detail: Mapping[str, TracedValue]

    @property
    def lines(self) -> Tuple[TracedValue, ...]:
        return tuple(self.detail.values())

    @property
    def refund(self) -> int:
        return self.overpaid.amount

    @property
    def owed(self) -> int:
        return self.amount_owed.amount

    def line(self, node_id: str) -> TracedValue:
        """
        A computed line by full node id or by suffix under this state's prefix.

        Raises:
            KeyError: If the return has no such line
        """
        if node_id in self.detail:
            return self.detail[node_id]
        prefix = self.starting_income.node_id.rsplit(".", 1)[0]
        return self.detail[f"{prefix}.{node_id}"]


_BASE_LABELS = {
    "startingIncome": "Starting income",
    "additions": "Total additions",
    "subtractions": "Total subtractions",
    "stateAGI": "State adjusted gross income",
    "deduction": "Deduction",
    "exemptions": "Exemptions",
    "taxableIncome": "Taxable income",
    "apportionedIncome": "Taxable income apportioned to the state",
    "tax": "Tax",
    "otherTaxes": "Other state taxes",
    "totalTax": "Total tax",
    "apportionedTax": "Tax apportioned to the state",
    "credits": "Nonrefundable credits",
    "taxAfterCredits": "Tax after credits",
    "stateWithholding": "State income tax withheld",
    "refundableCredits": "Refundable credits",
    "apportionedRefundableCredits": "Refundable credits apportioned to the state",
    "totalPayments": "Total payments and refundable credits",
    "overpaid": "Overpayment",
    "amountOwed": "Amount you owe",
}


class StateRulesModule(ABC):
    """
    Abstract base class for state tax modules.

    Each state implements this class with state-specific logic for:
    - Income adjustments (additions and subtractions)
    - Deduction and exemption amounts
    - Tax rates, surtaxes and local taxes
    - Nonrefundable and refundable credits
    """

    state_code: str = ""
    state_name: str = ""
    form_label: str = ""
    node_prefix: str = ""
    tax_year: int = 0
    apportionment_basis: ApportionmentBasis = ApportionmentBasis.TAX

    # Labels for state-specific nodes, keyed by node suffix
    labels: Mapping[str, str] = {}

    def __init__(self, config: Optional[StateTaxConfig] = None):
        self.config = config or self.default_config()

    @classmethod
    @abstractmethod
    def default_config(cls) -> StateTaxConfig:
        """The jurisdiction's constants for ``tax_year``."""

    @property
    def data_confidence(self) -> DataConfidence:
        return self.config.data_confidence

    def node(self, key: str) -> str:
        return f"{self.node_prefix}.{key}"

    def label(self, key: str) -> str:
        text = self.labels.get(key) or _BASE_LABELS.get(key, key)
        return f"{self.form_label}: {text}"

    @property
    def node_labels(self) -> Mapping[str, str]:
        """Human labels for every node this module can produce."""
        keys = list(_BASE_LABELS) + [k for k in self.labels if k not in _BASE_LABELS]
        return MappingProxyType({self.node(k): self.label(k) for k in keys})

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def residency_ratio(self, residency: StateReturnConfig, tax_year: int) -> float:
        return compute_apportionment_ratio(residency, tax_year)

    def income_items(self, ctx: StateContext) -> List[Adjustment]:
        """
        Components of the state's starting income.

        Most states start from federal AGI. A few start from federal taxable
        income or build their own gross income (NJ, PA).
        """
        return [Adjustment("federalAGI", ctx.federal.line11.amount, "Federal adjusted gross income",
                           ("form1040.line11",))]

    def additions(self, ctx: StateContext) -> List[Adjustment]:
        return []

    def subtractions(self, ctx: StateContext) -> List[Adjustment]:
        """
        Common subtractions: Social Security benefits and US obligation
        interest for states that exempt them.
        """
        items = []
        ss = self.social_security_subtraction(ctx)
        if ss is not None:
            items.append(ss)
        us = self.us_interest_subtraction(ctx)
        if us is not None:
            items.append(us)
        return items

    def itemized_deduction(self, ctx: StateContext, state_agi: int) -> Optional[Adjustment]:
        return None

    def deductions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        """The larger of the standard deduction and the state itemized deduction."""
        standard = self.config.get_standard_deduction(ctx.filing_status)
        itemized = self.itemized_deduction(ctx, state_agi) if self.config.allows_itemized else None
        if itemized is not None and itemized.amount > standard:
            return [itemized]
        if standard:
            return [Adjustment("standardDeduction", standard, "Standard deduction", ("input.filingStatus",))]
        return []

    def exemptions(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        items = []
        personal = self.config.get_personal_exemption(ctx.filing_status)
        if personal:
            items.append(Adjustment("personalExemption", personal, "Personal exemption", ("input.filingStatus",)))
        if self.config.dependent_exemption_amount and ctx.num_dependents:
            items.append(Adjustment(
                "dependentExemption",
                self.config.dependent_exemption_amount * ctx.num_dependents,
                "Dependent exemptions",
                ("input.dependents",),
            ))
        return items

    def compute_tax(self, ctx: StateContext, taxable_income: int) -> int:
        return compute_bracket_tax(taxable_income, self.config.get_brackets(ctx.filing_status))

    def other_taxes(self, ctx: StateContext, taxable_income: int, state_agi: int) -> List[Adjustment]:
        """Surtaxes and local income taxes."""
        return []

    def nonrefundable_credits(self, ctx: StateContext, tax: int, state_agi: int) -> List[Adjustment]:
        return []

    def refundable_credits(self, ctx: StateContext, state_agi: int) -> List[Adjustment]:
        """The state EITC, when the state pays one as a share of the federal credit."""
        eitc = self.state_eitc(ctx)
        return [eitc] if eitc is not None else []

    # ------------------------------------------------------------------
    # Shared building blocks for hooks
    # ------------------------------------------------------------------

    def social_security_subtraction(self, ctx: StateContext) -> Optional[Adjustment]:
        if self.config.social_security_taxable or not ctx.federal.line6b.amount:
            return None
        return Adjustment("socialSecurity", ctx.federal.line6b.amount,
                          "Taxable Social Security benefits", ("form1040.line6b",))

    def us_interest_subtraction(self, ctx: StateContext) -> Optional[Adjustment]:
        if not self.config.us_obligation_interest_exempt:
            return None
        pairs = us_obligation_interest(ctx.model)
        if not pairs:
            return None
        return Adjustment("usObligationInterest", sum(a for a, _ in pairs),
                          "US government obligation interest", tuple(n for _, n in pairs))

    def state_eitc(self, ctx: StateContext, rate: Optional[float] = None) -> Optional[Adjustment]:
        rate = self.config.eitc_percentage if rate is None else rate
        federal_eic = ctx.federal_eic()
        if not rate or not federal_eic:
            return None
        return Adjustment("earnedIncomeCredit", percent(federal_eic, rate),
                          "Earned income credit", ("form1040.line27",))

    def state_withholding(self, model: TaxReturn) -> List[Tuple[int, str]]:
        """State income tax withheld on W-2s issued for this state (box 17)."""
        return [
            (w.state_tax_withheld, document_node_id("w2", w.id, "box17"))
            for w in model.w2s if w.state == self.state_code
        ]

    # ------------------------------------------------------------------
    # Template
    # ------------------------------------------------------------------

    def compute(
        self,
        model: TaxReturn,
        federal: Form1040Result,
        residency: StateReturnConfig,
    ) -> StateComputeResult:
        """
        Compute the state return.

        Args:
            model: The return being computed; never modified
            federal: The completed federal result; never modified
            residency: This state's residency configuration

        Returns:
            StateComputeResult with every line traced under the state prefix
        """
        ratio = self.residency_ratio(residency, model.tax_year)
        ctx = StateContext(model=model, federal=federal, residency=residency, ratio=ratio)
        detail: Dict[str, TracedValue] = {}

        def put(value: TracedValue) -> TracedValue:
            detail[value.node_id] = value
            return value

        def line(key: str, amount: int, inputs: Sequence[str]) -> TracedValue:
            return put(traced_from_computation(amount, self.node(key), inputs, self.label(key)))

        def zero(key: str) -> TracedValue:
            return put(traced_zero(self.node(key), self.label(key)))

        def total(key: str, items: List[Adjustment]) -> TracedValue:
            nodes = []
            for item in items:
                if not item.amount:
                    continue
                put(traced_from_computation(item.amount, self.node(item.key), item.inputs,
                                            f"{self.form_label}: {item.label}"))
                nodes.append(item)
            if not nodes:
                return zero(key)
            return line(key, sum(i.amount for i in nodes), [self.node(i.key) for i in nodes])

        starting = total("startingIncome", self.income_items(ctx))
        additions = total("additions", self.additions(ctx))
        subtractions = total("subtractions", self.subtractions(ctx))
        state_agi = line(
            "stateAGI",
            starting.amount + additions.amount - subtractions.amount,
            [starting.node_id, additions.node_id, subtractions.node_id],
        )
        deduction = total("deduction", self.deductions(ctx, state_agi.amount))
        exemptions = total("exemptions", self.exemptions(ctx, state_agi.amount))
        taxable = line(
            "taxableIncome",
            max(0, state_agi.amount - deduction.amount - exemptions.amount),
            [state_agi.node_id, deduction.node_id, exemptions.node_id],
        )

        partial = ratio < 1.0
        tax_base = taxable
        if partial and self.apportionment_basis == ApportionmentBasis.TAXABLE_INCOME:
            tax_base = line("apportionedIncome", apportion(taxable.amount, ratio),
                            [taxable.node_id, "input.residency"])
        tax = line("tax", self.compute_tax(ctx, tax_base.amount), [tax_base.node_id])
        other = total("otherTaxes", self.other_taxes(ctx, tax_base.amount, state_agi.amount))
        total_tax = line("totalTax", tax.amount + other.amount, [tax.node_id, other.node_id])
        if partial and self.apportionment_basis == ApportionmentBasis.TAX:
            total_tax = line("apportionedTax", apportion(total_tax.amount, ratio),
                             [total_tax.node_id, "input.residency"])

        credits = total("credits", self.nonrefundable_credits(ctx, total_tax.amount, state_agi.amount))
        after_credits = line(
            "taxAfterCredits",
            max(0, total_tax.amount - credits.amount),
            [total_tax.node_id, credits.node_id],
        )

        withholding_pairs = [(a, n) for a, n in self.state_withholding(model) if a]
        if withholding_pairs:
            withholding = line("stateWithholding", sum(a for a, _ in withholding_pairs),
                               [n for _, n in withholding_pairs])
        else:
            withholding = zero("stateWithholding")
        refundable = total("refundableCredits", self.refundable_credits(ctx, state_agi.amount))
        if partial and refundable.amount:
            refundable = line("apportionedRefundableCredits", apportion(refundable.amount, ratio),
                              [refundable.node_id, "input.residency"])
        payments = line("totalPayments", withholding.amount + refundable.amount,
                        [withholding.node_id, refundable.node_id])

        balance = payments.amount - after_credits.amount
        overpaid = line("overpaid", max(0, balance), [payments.node_id, after_credits.node_id])
        owed = line("amountOwed", max(0, -balance), [after_credits.node_id, payments.node_id])

        logger.debug(
            "%s: AGI %s taxable %s tax %s credits %s ratio %.4f",
            self.state_code, state_agi.amount, taxable.amount, total_tax.amount, credits.amount, ratio,
        )
        return StateComputeResult(
            state_code=self.state_code,
            state_name=self.state_name,
            form_label=self.form_label,
            tax_year=model.tax_year,
            residency_type=residency.residency_type,
            apportionment_ratio=ratio,
            data_confidence=self.data_confidence,
            starting_income=starting,
            additions=additions,
            subtractions=subtractions,
            state_agi=state_agi,
            deduction=deduction,
            exemptions=exemptions,
            state_taxable_income=taxable,
            state_tax=total_tax,
            state_credits=credits,
            tax_after_credits=after_credits,
            state_withholding=withholding,
            refundable_credits=refundable,
            total_payments=payments,
            overpaid=overpaid,
            amount_owed=owed,
            detail=MappingProxyType(detail),
        )

    # ------------------------------------------------------------------
    # Provenance and review metadata
    # ------------------------------------------------------------------

    def collect_traced_values(self, result: StateComputeResult) -> Dict[str, TracedValue]:
        """This state's provenance subgraph, keyed by node id."""
        return dict(result.detail)

    def review_extras(self) -> Tuple[ReviewItem, ...]:
        """State-specific review items; shown in their own section."""
        return ()

    def review_layout(self) -> Tuple[ReviewSection, ...]:
        def item(key: str, show_when: ShowWhen = ShowWhen.ALWAYS) -> ReviewItem:
            return ReviewItem(_BASE_LABELS[key], self.node(key), show_when=show_when)

        sections = [
            ReviewSection("Income", (
                item("startingIncome"),
                item("additions", ShowWhen.NONZERO),
                item("subtractions", ShowWhen.NONZERO),
                item("stateAGI"),
            )),
            ReviewSection("Deductions and Exemptions", (
                item("deduction"),
                item("exemptions", ShowWhen.NONZERO),
                item("taxableIncome"),
            )),
            ReviewSection("Tax and Credits", (
                item("tax"),
                item("otherTaxes", ShowWhen.NONZERO),
                item("credits", ShowWhen.NONZERO),
                item("taxAfterCredits"),
            )),
            ReviewSection("Payments", (
                item("stateWithholding"),
                item("refundableCredits", ShowWhen.NONZERO),
                item("totalPayments"),
            )),
        ]
        extras = self.review_extras()
        if extras:
            sections.append(ReviewSection(f"{self.state_name} Adjustments", extras))
        return tuple(sections)

    def review_result_lines(self) -> Tuple[ReviewResultLine, ...]:
        return (
            ReviewResultLine("refund", f"{self.state_name} refund", self.node("overpaid")),
            ReviewResultLine("owed", f"{self.state_name} amount owed", self.node("amountOwed")),
        )


def us_obligation_interest(model: TaxReturn) -> List[Tuple[int, str]]:
    """1099-INT box 3 amounts with their leaf node ids."""
    return [
        (f.us_obligation_interest, document_node_id("1099int", f.id, "box3"))
        for f in model.form1099_ints if f.us_obligation_interest
    ]


def tax_exempt_interest(model: TaxReturn) -> List[Tuple[int, str]]:
    """Federally tax-exempt interest (1099-INT box 8, 1099-DIV box 12)."""
    pairs = [(f.tax_exempt_interest, document_node_id("1099int", f.id, "box8"))
             for f in model.form1099_ints if f.tax_exempt_interest]
    pairs += [(f.exempt_interest_dividends, document_node_id("1099div", f.id, "box12"))
              for f in model.form1099_divs if f.exempt_interest_dividends]
    return pairs


def state_refund_income(model: TaxReturn) -> List[Tuple[int, str]]:
    """State income tax refunds reported on 1099-G box 2."""
    return [(f.state_tax_refund, document_node_id("1099g", f.id, "box2"))
            for f in model.form1099_gs if f.state_tax_refund]


def state_income_tax_paid(ctx: StateContext) -> Optional[Adjustment]:
    """
    State and local income tax deducted on the federal Schedule A. States that
    start from federal figures add it back when the filer itemized.
    """
    if not ctx.federal.itemized or ctx.itemized is None:
        return None
    sched_a = ctx.federal.schedule_a
    if not isinstance(sched_a, Present):
        return None
    items = ctx.itemized
    if items.state_local_income_taxes < items.state_local_sales_taxes:
        return None
    amount = min(items.state_local_income_taxes, sched_a.value.line7.amount)
    if not amount:
        return None
    return Adjustment("stateIncomeTaxAddback", amount, "State income taxes deducted federally",
                      ("scheduleA.line7", "itemized.stateLocalIncomeTaxes"))


def person_ages(ctx: StateContext) -> List[Optional[int]]:
    return [p.age_at_year_end(ctx.tax_year) for p in ctx.model.persons()]
