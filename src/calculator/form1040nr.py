"""
Form 1040-NR orchestrator (nonresident aliens).

Income is split in two:

- Effectively connected income (ECI) is taxed at the graduated rates after
  the limited adjustments and deductions a nonresident may take.
- Fixed, determinable, annual or periodic income (FDAP, Schedule NEC) is taxed
  at a flat 30% of gross, or the treaty rate when one is entered.

Interest and dividends are ECI only when the filer runs a U.S. business
(a Schedule C is present); otherwise they land on Schedule NEC.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from calculator.brackets import compute_bracket_tax
from calculator.decimal_math import percent
from calculator.federal.dependents import is_ctc_qualifying_child
from calculator.federal.schedule_1 import business_income
from calculator.form1040 import Form1040Result
from calculator.outcome import ABSENT, Outcome, Present
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.deductions import DeductionMethod
from models.taxpayer import FilingStatus
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)

DEFAULT_FDAP_RATE = 0.30
SOCIAL_SECURITY_FDAP_FRACTION = 0.85
NONRESIDENT_SALT_CAP = 1_000_000

# Treaty withholding rates on portfolio dividends, keyed by residence country.
TREATY_DIVIDEND_RATES = {
    "Australia": 0.15,
    "Austria": 0.15,
    "Belgium": 0.15,
    "Canada": 0.15,
    "China": 0.10,
    "France": 0.15,
    "Germany": 0.15,
    "India": 0.25,
    "Ireland": 0.15,
    "Israel": 0.25,
    "Italy": 0.15,
    "Japan": 0.10,
    "Korea (South)": 0.15,
    "Mexico": 0.10,
    "Netherlands": 0.15,
    "Switzerland": 0.15,
    "United Kingdom": 0.15,
}

# Treaties under which U.S. Social Security benefits are taxed only in the
# country of residence.
SS_TREATY_EXEMPT_COUNTRIES = frozenset({
    "Australia", "Austria", "Belgium", "Canada", "Czech Republic",
    "Denmark", "Finland", "France", "Germany", "Greece", "Hungary",
    "Ireland", "Italy", "Japan", "Korea (South)", "Luxembourg",
    "Netherlands", "Norway", "Poland", "Portugal", "Slovakia", "Spain",
    "Sweden", "Switzerland", "United Kingdom",
})


@dataclass(frozen=True)
class Form1040NRResult:
    tax_year: int
    config_version: str

    # Effectively connected income
    eci_wages: TracedValue
    eci_interest: TracedValue
    eci_dividends: TracedValue
    eci_capital_gains: TracedValue
    eci_business_income: TracedValue
    eci_scholarship: TracedValue
    eci_other_income: TracedValue
    eci_retirement: TracedValue
    eci_rental_income: TracedValue
    treaty_exemption: TracedValue
    total_eci: TracedValue

    adjustments: TracedValue
    agi: TracedValue
    deductions: TracedValue
    taxable_income: TracedValue
    eci_tax: TracedValue

    # Schedule NEC
    fdap_dividends: TracedValue
    fdap_interest: TracedValue
    fdap_royalties: TracedValue
    fdap_other: TracedValue
    fdap_retirement: TracedValue
    fdap_rental_income: TracedValue
    ssa_benefits: TracedValue
    fdap_social_security: TracedValue
    total_fdap: TracedValue
    fdap_tax_rate: float
    fdap_tax: TracedValue

    # Credits, tax and payments
    foreign_tax_credit: TracedValue
    child_tax_credit: TracedValue
    credit_total: TracedValue
    total_tax: TracedValue
    withheld: TracedValue
    estimated_payments: TracedValue
    total_payments: TracedValue
    refund: TracedValue
    amount_owed: TracedValue

    itemized: bool
    social_security_treaty_exempt: bool
    treaty_dividend_rate: Outcome[float] = ABSENT


def _line(name: str, amount: int, inputs=(), label: str = "") -> TracedValue:
    return traced_from_computation(amount, f"form1040nr.{name}", inputs, label or f"Form 1040-NR, {name}")


def _sum_line(name: str, pairs, label: str = "") -> TracedValue:
    pairs = [(amount, node) for amount, node in pairs if amount]
    if not pairs:
        return traced_zero(f"form1040nr.{name}", label or f"Form 1040-NR, {name}")
    return _line(name, sum(a for a, _ in pairs), [n for _, n in pairs], label)


def _add(name: str, label: str, *parts: TracedValue) -> TracedValue:
    return _line(name, sum(p.amount for p in parts), [p.node_id for p in parts], label)


def nonresident_filing_status(filing_status: FilingStatus) -> FilingStatus:
    """A nonresident files as married filing separately or single; never jointly."""
    if filing_status == FilingStatus.MARRIED_SEPARATE:
        return FilingStatus.MARRIED_SEPARATE
    return FilingStatus.SINGLE


def social_security_is_treaty_exempt(model: TaxReturn) -> bool:
    nra = model.nonresident_alien
    if nra is None:
        return False
    if nra.social_security_treaty_exempt is not None:
        return nra.social_security_treaty_exempt
    return (nra.treaty_country or nra.country_of_residence) in SS_TREATY_EXEMPT_COUNTRIES


def treaty_dividend_rate(country: str) -> Optional[float]:
    return TREATY_DIVIDEND_RATES.get(country)


def compute_form1040nr(model: TaxReturn, config: Optional[TaxYearConfig] = None) -> Form1040NRResult:
    """
    Compute Form 1040-NR for a return carrying ``nonresident_alien`` inputs.

    A return without that section is computed as if every optional 1040-NR
    field were left blank.
    """
    config = config or TaxYearConfig.for_year(model.tax_year)
    nra = model.nonresident_alien
    fs = nonresident_filing_status(model.filing_status)
    has_business = bool(model.schedule_c_businesses)
    rental_elect_eci = nra.rental_elect_eci if nra else False

    # ECI
    eci_wages = _sum_line("eciWages", [(w.wages, f"w2:{w.id}:box1") for w in model.w2s], "Wages (ECI)")
    interest_pairs = [(f.interest_income, f"1099int:{f.id}:box1") for f in model.form1099_ints]
    dividend_pairs = [(f.ordinary_dividends, f"1099div:{f.id}:box1a") for f in model.form1099_divs]
    if has_business:
        eci_interest = _sum_line("eciInterest", interest_pairs, "Interest (ECI)")
        eci_dividends = _sum_line("eciDividends", dividend_pairs, "Dividends (ECI)")
    else:
        eci_interest = traced_zero("form1040nr.eciInterest", "Interest (ECI)")
        eci_dividends = traced_zero("form1040nr.eciDividends", "Dividends (ECI)")

    net_gain = sum(t.gain_loss for t in model.capital_transactions)
    if net_gain < 0:
        net_gain = max(net_gain, -config.lookup("capital_loss_limit", fs))
    eci_capital_gains = _line(
        "eciCapitalGains", net_gain, [f"tx:{t.id}" for t in model.capital_transactions], "Capital gains (ECI)"
    ) if model.capital_transactions else traced_zero("form1040nr.eciCapitalGains", "Capital gains (ECI)")

    if model.schedule_c_businesses:
        business_inputs = [f"schc:{b.id}:netProfit" for b in model.schedule_c_businesses]
    else:
        business_inputs = [f"1099nec:{f.id}:box1" for f in model.form1099_necs]
    profit = business_income(model)
    eci_business = (
        _line("eciBusinessIncome", profit, business_inputs, "Business income (ECI)")
        if profit else traced_zero("form1040nr.eciBusinessIncome", "Business income (ECI)")
    )
    eci_scholarship = _sum_line(
        "eciScholarship", [(nra.scholarship_income if nra else 0, "input.nonresident.scholarship")],
        "Scholarship and fellowship grants",
    )
    eci_other = _sum_line(
        "eciOtherIncome",
        [(f.unemployment_compensation, f"1099g:{f.id}:box1") for f in model.form1099_gs]
        + [(f.other_income, f"1099misc:{f.id}:box3") for f in model.form1099_miscs],
        "Other income (ECI)",
    )
    eci_retirement = _sum_line(
        "eciRetirement",
        [(f.taxable_amount, f"1099r:{f.id}:box2a") for f in model.form1099_rs
         if not f.is_ira_sep_simple and not f.is_rollover],
        "Pensions and annuities (ECI)",
    )

    rental_pairs = []
    if model.schedule_e_properties:
        rental_net = [(p.net_income(), f"sche:{p.id}:netIncome") for p in model.schedule_e_properties]
        rental_gross = [(p.rents_received + p.royalties_received, f"sche:{p.id}:grossRents")
                        for p in model.schedule_e_properties]
    else:
        rental_net = []
        rental_gross = []
    if rental_elect_eci:
        rental_pairs = rental_net
    eci_rental = _sum_line("eciRentalIncome", rental_pairs, "Rental income (871(d) election)")

    exempt_amount = nra.treaty_exempt_income if nra else 0
    treaty_exemption = _sum_line("treatyExemption", [(exempt_amount, "input.nonresident.treatyExempt")],
                                 "Income exempt by treaty")
    eci_parts = (eci_wages, eci_interest, eci_dividends, eci_capital_gains, eci_business,
                 eci_scholarship, eci_other, eci_retirement, eci_rental)
    total_eci = _line(
        "totalECI",
        max(0, sum(p.amount for p in eci_parts) - treaty_exemption.amount),
        [p.node_id for p in eci_parts] + [treaty_exemption.node_id],
        "Total effectively connected income",
    )

    student_loan = min(model.student_loan_interest, config.student_loan_interest_max)
    educator = min(model.educator_expenses, config.educator_expense_limit)
    adjustments = _sum_line(
        "adjustments",
        [(student_loan, "input.studentLoanInterest"), (educator, "input.educatorExpenses")],
        "Adjustments to income",
    )
    agi = _line("agi", total_eci.amount - adjustments.amount,
                ["form1040nr.totalECI", "form1040nr.adjustments"], "Adjusted gross income")

    # Nonresidents get no standard deduction; itemized deductions are limited
    # to state and local taxes and charitable gifts.
    itemized = model.deductions.itemized
    use_itemized = itemized is not None and model.deductions.method == DeductionMethod.ITEMIZED
    if use_itemized:
        salt = min(
            itemized.state_local_income_taxes + itemized.real_estate_taxes + itemized.personal_property_taxes,
            NONRESIDENT_SALT_CAP,
        )
        deductions = _sum_line(
            "deductions",
            [(salt, "itemized.salt"),
             (itemized.charitable_cash, "itemized.charitableCash"),
             (itemized.charitable_noncash, "itemized.charitableNoncash")],
            "Itemized deductions",
        )
    else:
        deductions = traced_zero("form1040nr.deductions", "Itemized deductions")
    taxable_income = _line(
        "taxableIncome", max(0, agi.amount - deductions.amount),
        ["form1040nr.agi", "form1040nr.deductions"], "Taxable income",
    )
    eci_tax = _line(
        "eciTax", compute_bracket_tax(taxable_income.amount, config.brackets_for(fs)),
        ["form1040nr.taxableIncome"], "Tax on effectively connected income",
    )

    # Schedule NEC
    fdap_dividends = _sum_line(
        "fdapDividends",
        [(nra.fdap_dividends if nra else 0, "input.nonresident.fdapDividends")]
        + ([] if has_business else dividend_pairs),
        "Dividends (NEC)",
    )
    fdap_interest = _sum_line(
        "fdapInterest",
        [(nra.fdap_interest if nra else 0, "input.nonresident.fdapInterest")]
        + ([] if has_business else interest_pairs),
        "Interest (NEC)",
    )
    fdap_royalties = _sum_line(
        "fdapRoyalties",
        [(nra.fdap_royalties if nra else 0, "input.nonresident.fdapRoyalties")]
        + [(f.royalties, f"1099misc:{f.id}:box2") for f in model.form1099_miscs],
        "Royalties (NEC)",
    )
    fdap_other = _sum_line(
        "fdapOther", [(nra.fdap_other_income if nra else 0, "input.nonresident.fdapOther")], "Other income (NEC)"
    )
    fdap_retirement = _sum_line(
        "fdapRetirement",
        [(f.taxable_amount, f"1099r:{f.id}:box2a") for f in model.form1099_rs
         if f.is_ira_sep_simple and not f.is_rollover],
        "IRA distributions (NEC)",
    )
    if rental_elect_eci:
        fdap_rental = traced_zero("form1040nr.fdapRentalIncome", "Rents (NEC)")
    else:
        fdap_rental = _sum_line(
            "fdapRentalIncome",
            rental_gross + [(f.rents, f"1099misc:{f.id}:box1") for f in model.form1099_miscs],
            "Rents (NEC)",
        )

    ssa_benefits = _sum_line(
        "ssaBenefits", [(f.net_benefits, f"ssa1099:{f.id}:box5") for f in model.ssa1099s], "Social Security benefits"
    )
    ss_exempt = social_security_is_treaty_exempt(model)
    if ss_exempt or not ssa_benefits.amount:
        fdap_ss = traced_zero("form1040nr.fdapSocialSecurity", "Social Security benefits (NEC)")
    else:
        fdap_ss = _line(
            "fdapSocialSecurity", percent(ssa_benefits.amount, SOCIAL_SECURITY_FDAP_FRACTION),
            ["form1040nr.ssaBenefits"], "Social Security benefits (NEC)",
        )

    total_fdap = _add("totalFDAP", "Total FDAP income", fdap_dividends, fdap_interest, fdap_royalties,
                      fdap_other, fdap_retirement, fdap_rental, fdap_ss)
    rate = DEFAULT_FDAP_RATE
    if nra is not None and nra.fdap_withholding_rate is not None:
        rate = nra.fdap_withholding_rate
    fdap_tax = _line("fdapTax", percent(total_fdap.amount, rate), ["form1040nr.totalFDAP"],
                     f"Schedule NEC tax on FDAP income ({rate:.0%})")

    # Credits
    foreign_paid = [(f.foreign_tax_paid, f"1099int:{f.id}:box6") for f in model.form1099_ints]
    foreign_paid += [(f.foreign_tax_paid, f"1099div:{f.id}:box7") for f in model.form1099_divs]
    ftc_amount = min(sum(a for a, _ in foreign_paid), eci_tax.amount)
    if ftc_amount:
        foreign_tax_credit = _line(
            "foreignTaxCredit", ftc_amount,
            [n for a, n in foreign_paid if a] + ["form1040nr.eciTax"], "Foreign tax credit",
        )
    else:
        foreign_tax_credit = traced_zero("form1040nr.foreignTaxCredit", "Foreign tax credit")

    children = sum(1 for d in model.dependents if is_ctc_qualifying_child(d, model.tax_year, config))
    ctc_amount = min(children * config.ctc_per_child, max(0, eci_tax.amount - foreign_tax_credit.amount))
    if ctc_amount:
        child_tax_credit = _line(
            "childTaxCredit", ctc_amount, ["input.dependents", "form1040nr.eciTax"], "Child tax credit"
        )
    else:
        child_tax_credit = traced_zero("form1040nr.childTaxCredit", "Child tax credit")
    credit_total = _add("creditTotal", "Total credits", foreign_tax_credit, child_tax_credit)
    total_tax = _line(
        "totalTax",
        max(0, eci_tax.amount - credit_total.amount) + fdap_tax.amount,
        ["form1040nr.eciTax", "form1040nr.creditTotal", "form1040nr.fdapTax"],
        "Total tax",
    )

    # Payments
    withholding = [(w.federal_tax_withheld, f"w2:{w.id}:box2") for w in model.w2s]
    withholding += [(f.federal_tax_withheld, f"1099int:{f.id}:box4") for f in model.form1099_ints]
    withholding += [(f.federal_tax_withheld, f"1099div:{f.id}:box4") for f in model.form1099_divs]
    withholding += [(f.federal_tax_withheld, f"1099misc:{f.id}:box4") for f in model.form1099_miscs]
    withholding += [(f.federal_tax_withheld, f"1099g:{f.id}:box4") for f in model.form1099_gs]
    withholding += [(t.federal_tax_withheld, f"tx:{t.id}") for t in model.capital_transactions]
    withholding += [(f.federal_tax_withheld, f"1099nec:{f.id}:box4") for f in model.form1099_necs]
    withholding += [(f.federal_tax_withheld, f"1099r:{f.id}:box4") for f in model.form1099_rs]
    withholding += [(f.federal_tax_withheld, f"ssa1099:{f.id}:box6") for f in model.ssa1099s]
    withheld = _sum_line("withheld", withholding, "Federal income tax withheld")
    estimated = model.estimated_payments.total if model.estimated_payments else 0
    estimated_payments = _sum_line("estimatedPayments", [(estimated, "input.estimatedPayments")],
                                   "Estimated tax payments")
    total_payments = _add("totalPayments", "Total payments", withheld, estimated_payments)
    refund = _line("refund", max(0, total_payments.amount - total_tax.amount),
                   ["form1040nr.totalPayments", "form1040nr.totalTax"], "Refund")
    amount_owed = _line("amountOwed", max(0, total_tax.amount - total_payments.amount),
                        ["form1040nr.totalTax", "form1040nr.totalPayments"], "Amount you owe")

    country = (nra.treaty_country or nra.country_of_residence) if nra else ""
    dividend_rate = treaty_dividend_rate(country)

    logger.info(
        "Form 1040-NR computed: ECI=%s taxable=%s eci_tax=%s fdap=%s fdap_tax=%s total_tax=%s",
        total_eci.amount, taxable_income.amount, eci_tax.amount,
        total_fdap.amount, fdap_tax.amount, total_tax.amount,
    )
    return Form1040NRResult(
        tax_year=model.tax_year,
        config_version=config.version,
        eci_wages=eci_wages,
        eci_interest=eci_interest,
        eci_dividends=eci_dividends,
        eci_capital_gains=eci_capital_gains,
        eci_business_income=eci_business,
        eci_scholarship=eci_scholarship,
        eci_other_income=eci_other,
        eci_retirement=eci_retirement,
        eci_rental_income=eci_rental,
        treaty_exemption=treaty_exemption,
        total_eci=total_eci,
        adjustments=adjustments,
        agi=agi,
        deductions=deductions,
        taxable_income=taxable_income,
        eci_tax=eci_tax,
        fdap_dividends=fdap_dividends,
        fdap_interest=fdap_interest,
        fdap_royalties=fdap_royalties,
        fdap_other=fdap_other,
        fdap_retirement=fdap_retirement,
        fdap_rental_income=fdap_rental,
        ssa_benefits=ssa_benefits,
        fdap_social_security=fdap_ss,
        total_fdap=total_fdap,
        fdap_tax_rate=rate,
        fdap_tax=fdap_tax,
        foreign_tax_credit=foreign_tax_credit,
        child_tax_credit=child_tax_credit,
        credit_total=credit_total,
        total_tax=total_tax,
        withheld=withheld,
        estimated_payments=estimated_payments,
        total_payments=total_payments,
        refund=refund,
        amount_owed=amount_owed,
        itemized=use_itemized,
        social_security_treaty_exempt=ss_exempt,
        treaty_dividend_rate=ABSENT if dividend_rate is None else Present(dividend_rate),
    )


def form1040nr_to_form1040(result: Form1040NRResult) -> Form1040Result:
    """
    Map a 1040-NR result onto the Form 1040 line layout.

    State modules and the explanation layer read federal figures from a
    Form1040Result; this gives them one shape for residents and nonresidents.
    Lines with no 1040-NR counterpart are zero, and every sub-result is ABSENT.
    """
    def zero(line: str) -> TracedValue:
        return traced_zero(f"form1040.{line}", f"Form 1040, Line {line[4:]}")

    def carried(line: str, source: TracedValue) -> TracedValue:
        return traced_from_computation(source.amount, f"form1040.{line}", [source.node_id],
                                       f"Form 1040, Line {line[4:]}")

    other_parts = (result.eci_business_income, result.eci_scholarship,
                   result.eci_other_income, result.eci_rental_income)
    line8 = traced_from_computation(
        sum(p.amount for p in other_parts), "form1040.line8", [p.node_id for p in other_parts],
        "Form 1040, Line 8",
    )
    tax_after_credits = max(0, result.eci_tax.amount - result.credit_total.amount) + result.fdap_tax.amount
    return Form1040Result(
        tax_year=result.tax_year,
        config_version=result.config_version,
        line1a=carried("line1a", result.eci_wages),
        line1z=carried("line1z", result.eci_wages),
        line2a=zero("line2a"),
        line2b=carried("line2b", result.eci_interest),
        line3a=zero("line3a"),
        line3b=carried("line3b", result.eci_dividends),
        line4a=zero("line4a"),
        line4b=zero("line4b"),
        line5a=zero("line5a"),
        line5b=carried("line5b", result.eci_retirement),
        line6a=zero("line6a"),
        line6b=zero("line6b"),
        line7=carried("line7", result.eci_capital_gains),
        line8=line8,
        line9=carried("line9", result.total_eci),
        line10=carried("line10", result.adjustments),
        line11=carried("line11", result.agi),
        standard_deduction=traced_zero("form1040.standardDeduction", "Standard Deduction"),
        line12=carried("line12", result.deductions),
        line13=zero("line13"),
        line14=carried("line14", result.deductions),
        line15=carried("line15", result.taxable_income),
        line16=carried("line16", result.eci_tax),
        line17=carried("line17", result.fdap_tax),
        line18=traced_from_computation(
            result.eci_tax.amount + result.fdap_tax.amount, "form1040.line18",
            ["form1040nr.eciTax", "form1040nr.fdapTax"], "Form 1040, Line 18",
        ),
        line19=carried("line19", result.child_tax_credit),
        line20=carried("line20", result.foreign_tax_credit),
        line21=carried("line21", result.credit_total),
        line22=traced_from_computation(
            tax_after_credits, "form1040.line22",
            ["form1040nr.eciTax", "form1040nr.creditTotal", "form1040nr.fdapTax"], "Form 1040, Line 22",
        ),
        line23=zero("line23"),
        line24=carried("line24", result.total_tax),
        line25=carried("line25", result.withheld),
        line26=carried("line26", result.estimated_payments),
        line27=zero("line27"),
        line28=zero("line28"),
        line29=zero("line29"),
        line31=zero("line31"),
        line32=zero("line32"),
        line33=carried("line33", result.total_payments),
        line34=carried("line34", result.refund),
        line37=carried("line37", result.amount_owed),
        itemized=result.itemized,
        used_qdcg_worksheet=False,
        earned_income=result.eci_wages.amount + max(0, result.eci_business_income.amount),
    )
