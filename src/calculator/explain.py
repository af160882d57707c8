"""
Explainability over the provenance graph.

``collect_all_values`` flattens a computed return into one mapping of node id
to TracedValue: every computed line of the federal return, its triggered
schedules, each state return, plus leaf nodes for the source document boxes
and itemized inputs the lines cite. ``build_trace`` turns one node into a
tree of its inputs and ``explain_line`` renders that tree as indented text:

    Taxable income: $41,250.00 [form1040.line15]
      |- Adjusted gross income: $56,250.00 [form1040.line11]
      ...

Node ids that are cited but were never produced (``input.filingStatus``, a
zero document box) are rendered as leaves with no amount rather than treated
as errors.
"""

import logging
from collections import deque
from dataclasses import dataclass, fields, is_dataclass
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from calculator.decimal_math import format_money
from calculator.errors import ProvenanceCycleError
from calculator.federal.schedule_k1 import K1_BOXES
from calculator.outcome import Present
from calculator.traced import TracedValue, traced_from_document, traced_zero
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


NODE_LABELS: Dict[str, str] = {
    # Form 1040
    "form1040.line1a": "Wages, salaries, tips",
    "form1040.line1z": "Add lines 1a through 1h",
    "form1040.line2a": "Tax-exempt interest",
    "form1040.line2b": "Taxable interest",
    "form1040.line3a": "Qualified dividends",
    "form1040.line3b": "Ordinary dividends",
    "form1040.line4a": "IRA distributions",
    "form1040.line4b": "IRA distributions (taxable)",
    "form1040.line5a": "Pensions and annuities",
    "form1040.line5b": "Pensions and annuities (taxable)",
    "form1040.line6a": "Social Security benefits",
    "form1040.line6b": "Social Security benefits (taxable)",
    "form1040.line7": "Capital gain or (loss)",
    "form1040.line8": "Additional income from Schedule 1",
    "form1040.line9": "Total income",
    "form1040.line10": "Adjustments to income",
    "form1040.line11": "Adjusted gross income",
    "form1040.standardDeduction": "Standard deduction",
    "form1040.line12": "Standard deduction or itemized deductions",
    "form1040.line13": "Qualified business income deduction",
    "form1040.line14": "Total deductions",
    "form1040.line15": "Taxable income",
    "form1040.line16": "Tax",
    "form1040.line17": "Amount from Schedule 2, Part I",
    "form1040.line18": "Tax plus Schedule 2, Part I",
    "form1040.line19": "Child tax credit or credit for other dependents",
    "form1040.line20": "Amount from Schedule 3, line 8",
    "form1040.line21": "Total credits",
    "form1040.line22": "Tax after credits",
    "form1040.line23": "Other taxes, including self-employment tax",
    "form1040.line24": "Total tax",
    "form1040.line25": "Federal income tax withheld",
    "form1040.line26": "Estimated tax payments",
    "form1040.line27": "Earned income credit",
    "form1040.line28": "Additional child tax credit",
    "form1040.line29": "American opportunity credit",
    "form1040.line31": "Amount from Schedule 3, line 15",
    "form1040.line32": "Total other payments and refundable credits",
    "form1040.line33": "Total payments",
    "form1040.line34": "Overpaid",
    "form1040.line37": "Amount you owe",

    # Schedule 1
    "schedule1.line1": "Taxable refunds of state and local income taxes",
    "schedule1.line3": "Business income or (loss)",
    "schedule1.line5": "Rental real estate, royalties, partnerships, S corporations",
    "schedule1.line7": "Unemployment compensation",
    "schedule1.line8z": "Other income",
    "schedule1.line9": "Total other income",
    "schedule1.line10": "Total additional income",
    "schedule1.line11": "Educator expenses",
    "schedule1.line26": "Total adjustments to income",

    # Schedule A
    "scheduleA.line1": "Medical and dental expenses",
    "scheduleA.line2": "AGI (from Form 1040)",
    "scheduleA.line3": "AGI x 7.5%",
    "scheduleA.line4": "Medical deduction (excess over floor)",
    "scheduleA.line5a": "State and local income or sales taxes",
    "scheduleA.line5b": "Real estate taxes",
    "scheduleA.line5c": "Personal property taxes",
    "scheduleA.line5e": "State and local taxes before the cap",
    "scheduleA.line7": "State and local taxes after the cap",
    "scheduleA.line8a": "Home mortgage interest",
    "scheduleA.line9": "Investment interest",
    "scheduleA.line10": "Total interest you paid",
    "scheduleA.line11": "Gifts by cash or check",
    "scheduleA.line12": "Gifts other than by cash or check",
    "scheduleA.line14": "Gifts to charity",
    "scheduleA.line16": "Other itemized deductions",
    "scheduleA.line17": "Total itemized deductions",

    # Schedule D
    "scheduleD.line1a": "Short-term gain or (loss), box A",
    "scheduleD.line1b": "Short-term gain or (loss), box B",
    "scheduleD.line5": "Short-term gain or (loss) from Schedules K-1",
    "scheduleD.line6": "Short-term capital loss carryover",
    "scheduleD.line7": "Net short-term capital gain or (loss)",
    "scheduleD.line8a": "Long-term gain or (loss), box D",
    "scheduleD.line8b": "Long-term gain or (loss), box E",
    "scheduleD.line12": "Long-term gain or (loss) from Schedules K-1",
    "scheduleD.line13": "Capital gain distributions",
    "scheduleD.line14": "Long-term capital loss carryover",
    "scheduleD.line15": "Net long-term capital gain or (loss)",
    "scheduleD.line16": "Combined net gain or (loss)",
    "scheduleD.line21": "Capital gain or (loss) for Form 1040",

    # Schedule E and Form 8582
    "scheduleE.rentalIncome": "Rental real estate and royalty income or (loss)",
    "scheduleE.partnershipIncome": "Partnership and S corporation income",
    "scheduleE.line41": "Total supplemental income",
    "form8582.line1d": "Net rental real estate income or (loss)",
    "form8582.line6": "Modified adjusted gross income",
    "form8582.line10": "Special allowance for rental real estate",
    "form8582.allowed": "Rental income or allowed loss",
    "form8582.modifiedAgi": "Modified AGI for the rental allowance",

    # Deductions below AGI
    "form8995.line4": "Total qualified business income",
    "form8995.line5": "Qualified business income component",
    "form8995.line14": "Income limitation",
    "form8995.line15": "Qualified business income deduction",
    "schedule1A.seniorDeduction": "Enhanced deduction for seniors",

    # Schedule SE
    "scheduleSE.line2": "Net profit from Schedule C and partnerships",
    "scheduleSE.line3": "Net earnings from self-employment",
    "scheduleSE.line6": "Self-employment tax",
    "scheduleSE.deductibleHalf": "Deductible part of self-employment tax",

    # Adjustments
    "iraDeduction.total": "IRA deduction",
    "studentLoanDeduction.total": "Student loan interest deduction",
    "form8889.deduction": "HSA deduction",
    "form8889.taxableDistributions": "Taxable HSA distributions",
    "form8889.additionalTax": "Additional tax on HSA distributions",

    # Credits
    "schedule3.line1": "Foreign tax credit",
    "form1116.foreignTaxes": "Foreign taxes paid",
    "schedule8812.line12": "Child tax credit after phase-out",
    "schedule8812.line14": "Nonrefundable child tax credit",
    "schedule8812.line27": "Additional child tax credit",
    "form2441.line11": "Credit for child and dependent care expenses",
    "form8880.line12": "Retirement savings contributions credit",
    "form5695.totalCredit": "Residential energy credits",
    "form8863.line8": "Refundable American opportunity credit",
    "form8863.line19": "Nonrefundable education credits",
    "schedule3.line15": "Other payments and refundable credits",

    # Other taxes and AMT
    "form6251.line4": "Alternative minimum taxable income",
    "form6251.line11": "Alternative minimum tax",
    "form8959.line24": "Additional Medicare tax withheld",
    "form8960.netInvestmentIncome": "Net investment income",
    "schedule2.line21": "Total other taxes",

    # Form 1040-NR
    "form1040nr.totalECI": "Total effectively connected income",
    "form1040nr.agi": "Adjusted gross income",
    "form1040nr.taxableIncome": "Taxable income",
    "form1040nr.eciTax": "Tax on effectively connected income",
    "form1040nr.totalFDAP": "Income not effectively connected (Schedule NEC)",
    "form1040nr.fdapTax": "Tax on income not effectively connected",
    "form1040nr.totalTax": "Total tax",
    "form1040nr.totalPayments": "Total payments",

    # Input pseudo-nodes
    "input.filingStatus": "Filing status",
    "input.dependents": "Dependents",
    "input.residency": "State residency",
    "input.estimatedPayments": "Estimated tax payments",
    "input.ageBlindness": "Age and blindness",
    "priorYear.shortTermLossCarryover": "Prior year short-term capital loss carryover",
    "priorYear.longTermLossCarryover": "Prior year long-term capital loss carryover",
    "priorYear.passiveLossCarryover": "Prior year unallowed rental losses",
    "priorYear.qbiLossCarryforward": "Prior year qualified business loss carryforward",
    "itemized.medicalExpenses": "Medical expenses",
    "itemized.stateLocalIncomeTaxes": "State and local income taxes",
    "itemized.stateLocalSalesTaxes": "General sales taxes",
    "itemized.realEstateTaxes": "Real estate taxes",
    "itemized.personalPropertyTaxes": "Personal property taxes",
    "itemized.mortgageInterest": "Mortgage interest",
    "itemized.investmentInterest": "Investment interest",
    "itemized.charitableCash": "Charitable contributions (cash)",
    "itemized.charitableNoncash": "Charitable contributions (non-cash)",
    "itemized.otherDeductions": "Gambling, casualty and other deductions",
}


# (TaxReturn attribute, leaf prefix, form label, ((field, box, box label), ...))
_DOCUMENT_BOXES = (
    ("w2s", "w2", "W-2", (
        ("wages", "box1", "Box 1 wages"),
        ("federal_tax_withheld", "box2", "Box 2 federal withholding"),
        ("social_security_wages", "box3", "Box 3 Social Security wages"),
        ("social_security_tax_withheld", "box4", "Box 4 Social Security tax"),
        ("medicare_wages", "box5", "Box 5 Medicare wages"),
        ("state_wages", "box16", "Box 16 state wages"),
        ("state_tax_withheld", "box17", "Box 17 state income tax"),
    )),
    ("form1099_ints", "1099int", "1099-INT", (
        ("interest_income", "box1", "Box 1 interest income"),
        ("us_obligation_interest", "box3", "Box 3 US obligation interest"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
        ("foreign_tax_paid", "box6", "Box 6 foreign tax paid"),
        ("tax_exempt_interest", "box8", "Box 8 tax-exempt interest"),
        ("private_activity_bond_interest", "box9", "Box 9 private activity bond interest"),
    )),
    ("form1099_divs", "1099div", "1099-DIV", (
        ("ordinary_dividends", "box1a", "Box 1a ordinary dividends"),
        ("qualified_dividends", "box1b", "Box 1b qualified dividends"),
        ("capital_gain_distributions", "box2a", "Box 2a capital gain distributions"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
        ("foreign_tax_paid", "box7", "Box 7 foreign tax paid"),
        ("exempt_interest_dividends", "box12", "Box 12 exempt-interest dividends"),
        ("private_activity_bond_dividends", "box13", "Box 13 private activity bond dividends"),
    )),
    ("form1099_rs", "1099r", "1099-R", (
        ("gross_distribution", "box1", "Box 1 gross distribution"),
        ("taxable_amount", "box2a", "Box 2a taxable amount"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
    )),
    ("form1099_gs", "1099g", "1099-G", (
        ("unemployment_compensation", "box1", "Box 1 unemployment compensation"),
        ("state_tax_refund", "box2", "Box 2 state or local income tax refund"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
    )),
    ("form1099_miscs", "1099misc", "1099-MISC", (
        ("rents", "box1", "Box 1 rents"),
        ("royalties", "box2", "Box 2 royalties"),
        ("other_income", "box3", "Box 3 other income"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
    )),
    ("form1099_necs", "1099nec", "1099-NEC", (
        ("nonemployee_compensation", "box1", "Box 1 nonemployee compensation"),
        ("federal_tax_withheld", "box4", "Box 4 federal withholding"),
    )),
    ("form1099_sas", "1099sa", "1099-SA", (
        ("gross_distribution", "box1", "Box 1 gross distribution"),
    )),
    ("ssa1099s", "ssa1099", "SSA-1099", (
        ("net_benefits", "box5", "Box 5 net benefits"),
        ("federal_tax_withheld", "box6", "Box 6 federal withholding"),
    )),
    ("schedule_k1s", "k1", "Schedule K-1", tuple((field, box, label) for field, (box, label) in K1_BOXES.items())),
)

_ITEMIZED_FIELDS = (
    ("medical_expenses", "itemized.medicalExpenses"),
    ("state_local_income_taxes", "itemized.stateLocalIncomeTaxes"),
    ("state_local_sales_taxes", "itemized.stateLocalSalesTaxes"),
    ("real_estate_taxes", "itemized.realEstateTaxes"),
    ("personal_property_taxes", "itemized.personalPropertyTaxes"),
    ("mortgage_interest", "itemized.mortgageInterest"),
    ("investment_interest", "itemized.investmentInterest"),
    ("charitable_cash", "itemized.charitableCash"),
    ("charitable_noncash", "itemized.charitableNoncash"),
)


@dataclass(frozen=True)
class ComputeTrace:
    """One node of an explanation tree."""
    node_id: str
    label: str
    value: TracedValue
    inputs: Tuple["ComputeTrace", ...] = ()
    known: bool = True
    cycle: bool = False

    @property
    def amount(self) -> int:
        return self.value.amount

    def walk(self) -> Iterable["ComputeTrace"]:
        yield self
        for child in self.inputs:
            yield from child.walk()


def _collect(obj, values: Dict[str, TracedValue]) -> None:
    if isinstance(obj, TracedValue):
        values[obj.node_id] = obj
    elif isinstance(obj, Present):
        _collect(obj.value, values)
    elif isinstance(obj, (list, tuple)):
        for item in obj:
            _collect(item, values)
    elif is_dataclass(obj) and not isinstance(obj, type):
        for f in fields(obj):
            _collect(getattr(obj, f.name), values)


def document_leaves(model: TaxReturn) -> Dict[str, TracedValue]:
    """Leaf nodes for every nonzero source document box on the return."""
    leaves: Dict[str, TracedValue] = {}
    for attr, prefix, form, boxes in _DOCUMENT_BOXES:
        for doc in getattr(model, attr):
            source = (
                getattr(doc, "employer_name", "") or getattr(doc, "payer_name", "")
                or getattr(doc, "entity_name", "") or doc.id
            )
            for field_name, box, box_label in boxes:
                amount = getattr(doc, field_name)
                if amount:
                    leaf = traced_from_document(amount, prefix, doc.id, box, f"{form} from {source}: {box_label}")
                    leaves[leaf.node_id] = leaf
    for tx in model.capital_transactions:
        node_id = f"tx:{tx.id}"
        leaves[node_id] = TracedValue(tx.gain_loss, node_id, (), f"Sale of {tx.description or tx.id}")
    for b in model.schedule_c_businesses:
        leaf = traced_from_document(b.net_profit(), "schc", b.id, "netProfit",
                                    f"Schedule C: {b.business_name or b.id} net profit")
        leaves[leaf.node_id] = leaf
    for p in model.schedule_e_properties:
        leaf = traced_from_document(p.net_income(), "sche", p.id, "netIncome",
                                    f"Schedule E: {p.address or p.id} net income")
        leaves[leaf.node_id] = leaf
        if p.rents_received + p.royalties_received:
            leaf = traced_from_document(p.rents_received + p.royalties_received, "sche", p.id, "grossRents",
                                        f"Schedule E: {p.address or p.id} rents and royalties")
            leaves[leaf.node_id] = leaf
    for e in model.rsu_vest_events:
        if not e.included_in_w2:
            leaf = traced_from_document(e.income, "rsu", e.id, "income", f"RSU vest {e.id} income")
            leaves[leaf.node_id] = leaf
    return leaves


def itemized_leaves(model: TaxReturn) -> Dict[str, TracedValue]:
    items = model.deductions.itemized
    if items is None:
        return {}
    leaves = {
        node_id: TracedValue(getattr(items, field_name), node_id, (), NODE_LABELS[node_id])
        for field_name, node_id in _ITEMIZED_FIELDS
    }
    other = items.gambling_losses + items.casualty_theft_losses + items.other_deductions
    leaves["itemized.otherDeductions"] = TracedValue(
        other, "itemized.otherDeductions", (), NODE_LABELS["itemized.otherDeductions"],
    )
    return leaves


def input_leaves(model: TaxReturn) -> Dict[str, TracedValue]:
    """Leaf nodes for the ``input.*`` ids that stand for an entered amount."""
    amounts = {
        "input.studentLoanInterest": ("Student loan interest paid", model.student_loan_interest),
        "input.educatorExpenses": ("Educator expenses", model.educator_expenses),
    }
    if model.dependent_care is not None:
        amounts["input.dependentCare"] = ("Dependent care expenses", model.dependent_care.total_expenses)
    energy = model.energy
    if energy is not None:
        amounts["input.energy.cleanEnergy"] = (
            "Residential clean energy costs",
            energy.solar_electric + energy.solar_water_heating + energy.small_wind
            + energy.geothermal_heat_pump + energy.battery_storage,
        )
        amounts["input.energy.homeImprovement"] = (
            "Energy efficient home improvement costs",
            energy.heat_pump + energy.insulation + energy.windows + energy.doors
            + energy.central_air + energy.water_heater + energy.home_energy_audit,
        )
    if model.education_expenses:
        amounts["input.educationExpenses"] = (
            "Qualified education expenses", sum(e.qualified_expenses for e in model.education_expenses),
        )
    if model.estimated_payments is not None:
        amounts["input.estimatedPayments"] = ("Estimated tax payments", model.estimated_payments.total)
    if model.hsa is not None:
        amounts["input.hsa"] = ("HSA contributions", model.hsa.taxpayer_contributions)
    ira = model.ira_contributions
    if ira is not None:
        amounts["input.iraContributions"] = (
            "IRA contributions",
            ira.taxpayer_traditional + ira.spouse_traditional + ira.taxpayer_roth + ira.spouse_roth,
        )
    prior = model.prior_year
    amounts.update({
        "priorYear.shortTermLossCarryover": (NODE_LABELS["priorYear.shortTermLossCarryover"], prior.short_term_loss_carryover),
        "priorYear.longTermLossCarryover": (NODE_LABELS["priorYear.longTermLossCarryover"], prior.long_term_loss_carryover),
        "priorYear.passiveLossCarryover": (NODE_LABELS["priorYear.passiveLossCarryover"], prior.passive_loss_carryover),
        "priorYear.qbiLossCarryforward": (NODE_LABELS["priorYear.qbiLossCarryforward"], prior.qbi_loss_carryforward),
    })
    nra = model.nonresident_alien
    if nra is not None:
        amounts.update({
            "input.nonresident.fdapDividends": ("FDAP dividends", nra.fdap_dividends),
            "input.nonresident.fdapInterest": ("FDAP interest", nra.fdap_interest),
            "input.nonresident.fdapRoyalties": ("FDAP royalties", nra.fdap_royalties),
            "input.nonresident.fdapOther": ("Other FDAP income", nra.fdap_other_income),
            "input.nonresident.scholarship": ("Scholarship income", nra.scholarship_income),
            "input.nonresident.treatyExempt": ("Income exempt by treaty", nra.treaty_exempt_income),
        })
    return {
        node_id: TracedValue(amount, node_id, (), label)
        for node_id, (label, amount) in amounts.items() if amount
    }


def collect_all_values(
    federal,
    model: TaxReturn,
    states: Iterable = (),
    form1040nr=None,
) -> Dict[str, TracedValue]:
    """
    Flatten a computed return into ``{node_id: TracedValue}``.

    Args:
        federal: Form1040Result (for a nonresident, the mapped 1040-NR result)
        model: The return that was computed
        states: StateComputeResults to include
        form1040nr: Form1040NRResult when the return was filed as a nonresident

    Returns:
        Every computed node plus document and itemized leaf nodes
    """
    values: Dict[str, TracedValue] = {}
    values.update(document_leaves(model))
    values.update(itemized_leaves(model))
    values.update(input_leaves(model))
    if form1040nr is not None:
        _collect(form1040nr, values)
    _collect(federal, values)
    for state in states:
        values.update(state.detail)
    logger.debug("Collected %d traced values", len(values))
    return values


def _label(node_id: str, value: Optional[TracedValue], labels: Mapping[str, str]) -> str:
    if node_id in labels:
        return labels[node_id]
    if value is not None and value.label:
        return value.label
    return node_id


def build_trace(
    node_id: str,
    values: Mapping[str, TracedValue],
    labels: Optional[Mapping[str, str]] = None,
) -> ComputeTrace:
    """
    Provenance tree rooted at ``node_id``.

    An id missing from ``values`` becomes a zero leaf with ``known=False``. A
    node that reappears on its own path is cut off as a leaf with
    ``cycle=True`` instead of recursing forever.
    """
    labels = NODE_LABELS if labels is None else labels

    def build(nid: str, path: frozenset) -> ComputeTrace:
        value = values.get(nid)
        if value is None:
            return ComputeTrace(nid, _label(nid, None, labels), traced_zero(nid), known=False)
        if nid in path:
            logger.warning("Provenance cycle at %s", nid)
            return ComputeTrace(nid, _label(nid, value, labels), value, cycle=True)
        path = path | {nid}
        children = tuple(build(i, path) for i in value.input_ids)
        return ComputeTrace(nid, _label(nid, value, labels), value, children)

    return build(node_id, frozenset())


def format_trace(trace: ComputeTrace, depth: int = 0) -> List[str]:
    prefix = "" if depth == 0 else "  " * depth + "|- "
    suffix = " (cycle)" if trace.cycle else ""
    if trace.known:
        lines = [f"{prefix}{trace.label}: {format_money(trace.amount)} [{trace.node_id}]{suffix}"]
    else:
        # Never produced; there is no amount to show
        lines = [f"{prefix}{trace.label} [{trace.node_id}]"]
    for child in trace.inputs:
        lines.extend(format_trace(child, depth + 1))
    return lines


def explain_line(
    node_id: str,
    values: Mapping[str, TracedValue],
    labels: Optional[Mapping[str, str]] = None,
) -> str:
    """Human-readable, indented explanation of how ``node_id`` was computed."""
    return "\n".join(format_trace(build_trace(node_id, values, labels)))


def topological_order(values: Mapping[str, TracedValue]) -> List[str]:
    """
    Node ids ordered so that every node follows the inputs it cites.

    Inputs outside ``values`` are ignored.

    Raises:
        ProvenanceCycleError: If the graph is not acyclic
    """
    in_degree = {nid: 0 for nid in values}
    dependents: Dict[str, List[str]] = {nid: [] for nid in values}
    for nid, value in values.items():
        for input_id in value.input_ids:
            if input_id in values:
                in_degree[nid] += 1
                dependents[input_id].append(nid)

    queue = deque(nid for nid, degree in in_degree.items() if degree == 0)
    order = []
    while queue:
        nid = queue.popleft()
        order.append(nid)
        for dependent in dependents[nid]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(order) != len(values):
        remaining = sorted(set(values) - set(order))
        raise ProvenanceCycleError(remaining)
    return order
