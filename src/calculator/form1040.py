"""
Form 1040 orchestrator.

Computes the whole federal return line by line. Every line is a TracedValue
whose inputs reference only lines and documents already built earlier in the
pass, so the provenance graph is acyclic by construction. Schedules and
credits that a return does not trigger are reported as ``ABSENT``.
"""

import logging
from dataclasses import dataclass, fields
from typing import List, Optional, Tuple

from calculator.brackets import compute_tax_with_preferential_rates, net_capital_gain_for_worksheet
from calculator.federal.amt import AMTResult, compute_amt, private_activity_bond_interest
from calculator.federal.child_tax_credit import ChildTaxCreditResult, compute_child_tax_credit
from calculator.federal.dependent_care_credit import DependentCareCreditResult, compute_dependent_care_credit
from calculator.federal.earned_income_credit import EarnedIncomeCreditResult, compute_earned_income_credit
from calculator.federal.education_credit import EducationCreditResult, compute_education_credit
from calculator.federal.energy_credit import EnergyCreditResult, compute_energy_credit
from calculator.federal.foreign_tax_credit import ForeignTaxCreditResult, compute_foreign_tax_credit, foreign_taxes_paid
from calculator.federal.hsa_deduction import HSAResult, compute_hsa
from calculator.federal.ira_deduction import IRADeductionResult, compute_ira_deduction
from calculator.federal.other_taxes import (
    OtherTaxesResult,
    additional_medicare_withheld,
    compute_other_taxes,
    net_investment_income,
)
from calculator.federal.qbi_deduction import QBIDeductionResult, compute_qbi_deduction, qualified_businesses
from calculator.federal.refundable_credits import RefundableCreditsResult, compute_refundable_credits
from calculator.federal.savers_credit import SaversCreditResult, compute_savers_credit
from calculator.federal.schedule_1 import (
    Schedule1AdjustmentsResult,
    Schedule1Result,
    compute_schedule1_adjustments,
    compute_schedule_1,
    needs_schedule_1,
    nonrental_income_pairs,
)
from calculator.federal.schedule_a import ScheduleAResult, compute_schedule_a
from calculator.federal.schedule_d import ScheduleDResult, compute_schedule_d
from calculator.federal.schedule_e import ScheduleEResult, compute_schedule_e, needs_schedule_e
from calculator.federal.schedule_k1 import has_k1_capital_gains, k1_pairs, k1_se_pairs
from calculator.federal.schedule_se import ScheduleSEResult, compute_schedule_se
from calculator.federal.senior_deduction import SeniorDeductionResult, compute_senior_deduction, qualifying_seniors
from calculator.federal.social_security import SocialSecurityResult, compute_taxable_social_security
from calculator.federal.standard_deduction import compute_standard_deduction
from calculator.federal.student_loan_deduction import StudentLoanDeductionResult, compute_student_loan_deduction
from calculator.outcome import ABSENT, Outcome, Present, present_if
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from models.deductions import DeductionMethod
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Form1040Result:
    tax_year: int
    config_version: str

    # Income
    line1a: TracedValue
    line1z: TracedValue
    line2a: TracedValue
    line2b: TracedValue
    line3a: TracedValue
    line3b: TracedValue
    line4a: TracedValue
    line4b: TracedValue
    line5a: TracedValue
    line5b: TracedValue
    line6a: TracedValue
    line6b: TracedValue
    line7: TracedValue
    line8: TracedValue
    line9: TracedValue
    line10: TracedValue
    line11: TracedValue

    # Deductions and taxable income
    standard_deduction: TracedValue
    line12: TracedValue
    line13: TracedValue
    line14: TracedValue
    line15: TracedValue

    # Tax and credits
    line16: TracedValue
    line17: TracedValue
    line18: TracedValue
    line19: TracedValue
    line20: TracedValue
    line21: TracedValue
    line22: TracedValue
    line23: TracedValue
    line24: TracedValue

    # Payments and result
    line25: TracedValue
    line26: TracedValue
    line27: TracedValue
    line28: TracedValue
    line29: TracedValue
    line31: TracedValue
    line32: TracedValue
    line33: TracedValue
    line34: TracedValue
    line37: TracedValue

    itemized: bool
    used_qdcg_worksheet: bool
    earned_income: int

    schedule_d: Outcome[ScheduleDResult] = ABSENT
    schedule_1: Outcome[Schedule1Result] = ABSENT
    schedule_e: Outcome[ScheduleEResult] = ABSENT
    schedule_1_adjustments: Outcome[Schedule1AdjustmentsResult] = ABSENT
    schedule_a: Outcome[ScheduleAResult] = ABSENT
    schedule_se: Outcome[ScheduleSEResult] = ABSENT
    social_security: Outcome[SocialSecurityResult] = ABSENT
    hsa: Outcome[HSAResult] = ABSENT
    ira_deduction: Outcome[IRADeductionResult] = ABSENT
    student_loan_deduction: Outcome[StudentLoanDeductionResult] = ABSENT
    senior_deduction: Outcome[SeniorDeductionResult] = ABSENT
    qbi_deduction: Outcome[QBIDeductionResult] = ABSENT
    amt: Outcome[AMTResult] = ABSENT
    foreign_tax_credit: Outcome[ForeignTaxCreditResult] = ABSENT
    child_tax_credit: Outcome[ChildTaxCreditResult] = ABSENT
    earned_income_credit: Outcome[EarnedIncomeCreditResult] = ABSENT
    dependent_care_credit: Outcome[DependentCareCreditResult] = ABSENT
    savers_credit: Outcome[SaversCreditResult] = ABSENT
    energy_credit: Outcome[EnergyCreditResult] = ABSENT
    education_credit: Outcome[EducationCreditResult] = ABSENT
    other_taxes: Outcome[OtherTaxesResult] = ABSENT
    refundable_credits: Outcome[RefundableCreditsResult] = ABSENT

    @property
    def agi(self) -> int:
        return self.line11.amount

    @property
    def taxable_income(self) -> int:
        return self.line15.amount

    @property
    def total_tax(self) -> int:
        return self.line24.amount

    @property
    def refund(self) -> int:
        return self.line34.amount

    @property
    def amount_owed(self) -> int:
        return self.line37.amount

    def executed_schedules(self) -> List[str]:
        """Names of the sub-results that were triggered for this return."""
        return [
            f.name for f in fields(self)
            if isinstance(getattr(self, f.name), Present)
        ]


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"form1040.{line}", inputs, f"Form 1040, Line {line[4:]}")


def _sum_line(line: str, pairs) -> TracedValue:
    pairs = [(amount, node) for amount, node in pairs if amount]
    if not pairs:
        return traced_zero(f"form1040.{line}", f"Form 1040, Line {line[4:]}")
    return _line(line, sum(a for a, _ in pairs), [n for _, n in pairs])


def _add(line: str, *parts: TracedValue) -> TracedValue:
    return _line(line, sum(p.amount for p in parts), [p.node_id for p in parts])


def needs_schedule_d(model: TaxReturn) -> bool:
    return (
        bool(model.capital_transactions)
        or any(f.capital_gain_distributions > 0 for f in model.form1099_divs)
        or has_k1_capital_gains(model)
    )


def passive_activity_magi(model: TaxReturn, income_lines: Tuple[TracedValue, ...]) -> TracedValue:
    """
    Form 8582 modified AGI: income lines 1z through 7 plus nonrental Schedule 1
    and K-1 income, without rental activity, taxable Social Security or any
    adjustment to income.
    """
    pairs = [(line.amount, line.node_id) for line in income_lines]
    pairs += nonrental_income_pairs(model)
    pairs += k1_pairs(model, "ordinary_business_income") + k1_pairs(model, "guaranteed_payments")
    pairs = [(amount, node) for amount, node in pairs if amount]
    return traced_from_computation(
        sum(a for a, _ in pairs), "form8582.modifiedAgi", [n for _, n in pairs], "Form 8582, Modified AGI",
    )


def _retirement_lines(model: TaxReturn, ira: bool) -> Tuple[TracedValue, TracedValue]:
    forms = [f for f in model.form1099_rs if f.is_ira_sep_simple == ira]
    gross_line, taxable_line = ("line4a", "line4b") if ira else ("line5a", "line5b")
    gross = _sum_line(gross_line, [(f.gross_distribution, f"1099r:{f.id}:box1") for f in forms])
    taxable = _sum_line(taxable_line, [
        (f.taxable_amount, f"1099r:{f.id}:box2a") for f in forms if not f.is_rollover
    ])
    return gross, taxable


def compute_form1040(model: TaxReturn, config: Optional[TaxYearConfig] = None) -> Form1040Result:
    """
    Compute Form 1040 for ``model``.

    Args:
        model: The return to compute; never modified
        config: Year configuration; defaults to the configuration for
            ``model.tax_year``

    Returns:
        Form1040Result with every line and triggered sub-result
    """
    config = config or TaxYearConfig.for_year(model.tax_year)
    fs = model.filing_status

    schedule_d = present_if(needs_schedule_d(model), lambda: compute_schedule_d(model, config))
    hsa = present_if(model.hsa is not None, lambda: compute_hsa(model, config))

    # Lines 1-7
    rsu_extra = [e for e in model.rsu_vest_events if not e.included_in_w2]
    line1a = _sum_line("line1a", [(w.wages, f"w2:{w.id}:box1") for w in model.w2s]
                       + [(e.income, f"rsu:{e.id}:income") for e in rsu_extra])
    line1z = _line("line1z", line1a.amount, ["form1040.line1a"])
    line2a = _sum_line("line2a", [(f.tax_exempt_interest, f"1099int:{f.id}:box8") for f in model.form1099_ints]
                       + [(f.exempt_interest_dividends, f"1099div:{f.id}:box12") for f in model.form1099_divs])
    line2b = _sum_line("line2b", [(f.interest_income, f"1099int:{f.id}:box1") for f in model.form1099_ints]
                       + [(f.us_obligation_interest, f"1099int:{f.id}:box3") for f in model.form1099_ints]
                       + k1_pairs(model, "interest_income"))
    line3a = _sum_line("line3a", [(f.qualified_dividends, f"1099div:{f.id}:box1b") for f in model.form1099_divs]
                       + k1_pairs(model, "qualified_dividends"))
    line3b = _sum_line("line3b", [(f.ordinary_dividends, f"1099div:{f.id}:box1a") for f in model.form1099_divs]
                       + k1_pairs(model, "ordinary_dividends"))
    line4a, line4b = _retirement_lines(model, ira=True)
    line5a, line5b = _retirement_lines(model, ira=False)
    line6a = _sum_line("line6a", [(f.net_benefits, f"ssa1099:{f.id}:box5") for f in model.ssa1099s])

    if isinstance(schedule_d, Present):
        line7 = _line("line7", schedule_d.value.line21.amount, ["scheduleD.line21"])
    else:
        line7 = traced_zero("form1040.line7", "Form 1040, Line 7")

    # Schedules feeding line 8
    schedule_e = present_if(
        needs_schedule_e(model),
        lambda: compute_schedule_e(
            model, config,
            lambda: passive_activity_magi(model, (line1z, line2b, line3b, line4b, line5b, line7)),
        ),
    )
    schedule_1 = present_if(needs_schedule_1(model), lambda: compute_schedule_1(model, schedule_e.to_optional()))

    business_profit = schedule_1.value.line3.amount if isinstance(schedule_1, Present) else 0
    partnership_se = k1_se_pairs(model)
    w2_ss_wages = sum(w.social_security_wages for w in model.w2s)
    schedule_se = present_if(
        business_profit + sum(a for a, _ in partnership_se) > 0,
        lambda: compute_schedule_se(business_profit, w2_ss_wages, config, partnership_se),
    )

    line8_parts = []
    if isinstance(schedule_1, Present):
        line8_parts.append((schedule_1.value.line10.amount, "schedule1.line10"))
    if isinstance(hsa, Present):
        line8_parts.append((hsa.value.taxable_distributions.amount, "form8889.taxableDistributions"))
    line8 = _sum_line("line8", line8_parts)

    other_income = (
        line1z.amount + line2b.amount + line3b.amount + line4b.amount
        + line5b.amount + line7.amount + line8.amount
    )
    social_security = present_if(
        line6a.amount > 0,
        lambda: compute_taxable_social_security(line6a.amount, other_income, line2a.amount, fs, config),
    )
    if isinstance(social_security, Present):
        line6b = social_security.value.taxable_benefits
    else:
        line6b = traced_zero("form1040.line6b", "Form 1040, Line 6b")

    line9 = _add("line9", line1z, line2b, line3b, line4b, line5b, line6b, line7, line8)

    # Adjustments (line 10)
    ira = present_if(
        model.ira_contributions is not None
        and (model.ira_contributions.taxpayer_traditional + model.ira_contributions.spouse_traditional) > 0,
        lambda: compute_ira_deduction(model, config, line9.amount),
    )
    ira_amount = ira.value.deduction if isinstance(ira, Present) else traced_zero("iraDeduction.total", "IRA Deduction")
    hsa_amount = hsa.value.deduction if isinstance(hsa, Present) else traced_zero("form8889.deduction", "Form 8889, deduction")
    loan_magi = line9.amount - ira_amount.amount - hsa_amount.amount
    student_loan = present_if(
        model.student_loan_interest > 0,
        lambda: compute_student_loan_deduction(model, config, loan_magi),
    )
    loan_amount = (
        student_loan.value.deduction if isinstance(student_loan, Present)
        else traced_zero("studentLoanDeduction.total", "Student Loan Interest Deduction")
    )
    se_half = (
        schedule_se.value.deductible_half if isinstance(schedule_se, Present)
        else traced_zero("scheduleSE.deductibleHalf", "Schedule SE, Deductible part of SE tax")
    )
    adjustments = compute_schedule1_adjustments(model, config, hsa_amount, se_half, ira_amount, loan_amount)
    schedule_1_adjustments = present_if(adjustments.line26.amount > 0, lambda: adjustments)
    if adjustments.line26.amount:
        line10 = _line("line10", adjustments.line26.amount, ["schedule1.line26"])
    else:
        line10 = traced_zero("form1040.line10", "Form 1040, Line 10")
    line11 = _line("line11", line9.amount - line10.amount, ["form1040.line9", "form1040.line10"])
    agi = line11.amount

    se_earnings = schedule_se.value.line3.amount - se_half.amount if isinstance(schedule_se, Present) else 0
    earned_income = line1z.amount + max(0, se_earnings)

    # Line 12: the larger of the standard deduction and Schedule A
    standard = compute_standard_deduction(model, config, earned_income)
    itemized_inputs = model.deductions.itemized
    nii_4952 = line2b.amount + max(0, line3b.amount - line3a.amount)
    if isinstance(schedule_d, Present):
        nii_4952 += max(0, schedule_d.value.line7.amount)
    schedule_a = present_if(
        itemized_inputs is not None,
        lambda: compute_schedule_a(
            itemized_inputs, fs, agi, nii_4952, config,
            investment_interest_carryover=model.prior_year.investment_interest_carryover,
        ),
    )
    itemize = isinstance(schedule_a, Present) and (
        schedule_a.value.line17.amount > standard.amount
        or (model.deductions.method == DeductionMethod.ITEMIZED
            and schedule_a.value.line17.amount == standard.amount)
    )
    if itemize:
        line12 = _line("line12", schedule_a.value.line17.amount, ["scheduleA.line17"])
    else:
        line12 = _line("line12", standard.amount, ["form1040.standardDeduction"])

    if isinstance(schedule_d, Present):
        sd = schedule_d.value
        net_cap_gain = net_capital_gain_for_worksheet(sd.line15.amount, sd.line16.amount)
        cap_gain_inputs = ["form1040.line3a", "scheduleD.line15", "scheduleD.line16"]
    else:
        net_cap_gain = sum(f.capital_gain_distributions for f in model.form1099_divs)
        cap_gain_inputs = ["form1040.line3a"] + [
            f"1099div:{f.id}:box2a" for f in model.form1099_divs if f.capital_gain_distributions
        ]

    # Line 13: QBI deduction and the Schedule 1-A senior deduction
    senior = present_if(
        qualifying_seniors(model) > 0,
        lambda: compute_senior_deduction(model, config, agi),
    )
    senior_amount = senior.value.deduction.amount if isinstance(senior, Present) else 0
    se_base = schedule_se.value.line2.amount if isinstance(schedule_se, Present) else 0
    businesses = qualified_businesses(model, se_half.amount, se_base)
    qbi = present_if(
        bool(businesses) or model.prior_year.qbi_loss_carryforward > 0,
        lambda: compute_qbi_deduction(
            model, config, businesses,
            agi - line12.amount - senior_amount,
            line3a.amount + net_cap_gain,
            taxable_income_inputs=["form1040.line11", "form1040.line12"]
            + (["schedule1A.seniorDeduction"] if senior_amount else []),
            capital_gain_inputs=cap_gain_inputs,
        ),
    )
    line13 = _sum_line("line13", [
        (qbi.value.deduction.amount if isinstance(qbi, Present) else 0, "form8995.line15"),
        (senior_amount, "schedule1A.seniorDeduction"),
    ])
    line14 = _add("line14", line12, line13)
    line15 = _line("line15", max(0, line11.amount - line14.amount), ["form1040.line11", "form1040.line14"])

    # Line 16: regular tax, through the QDCG worksheet when it applies
    tax, used_worksheet = compute_tax_with_preferential_rates(
        line15.amount, line3a.amount, net_cap_gain,
        config.brackets_for(fs), config.preferential_brackets_for(fs),
    )
    line16_inputs = ["form1040.line15"]
    if used_worksheet:
        line16_inputs.append("form1040.line3a")
        if isinstance(schedule_d, Present):
            line16_inputs.extend(["scheduleD.line15", "scheduleD.line16"])
    line16 = _line("line16", tax, line16_inputs)

    # Line 17: AMT
    salt = schedule_a.value.line7.amount if itemize else 0
    amt = present_if(
        line15.amount > 0 or bool(model.iso_exercises) or private_activity_bond_interest(model) > 0,
        lambda: compute_amt(model, config, line15, line16, salt, line3a.amount, net_cap_gain),
    )
    if isinstance(amt, Present) and amt.value.line11.amount:
        line17 = _line("line17", amt.value.line11.amount, ["form6251.line11"])
    else:
        line17 = traced_zero("form1040.line17", "Form 1040, Line 17")
    line18 = _add("line18", line16, line17)

    # Credits
    ctc = present_if(
        bool(model.dependents),
        lambda: compute_child_tax_credit(model, config, agi, line18.amount, earned_income),
    )
    if isinstance(ctc, Present):
        line19 = _line("line19", ctc.value.nonrefundable.amount, ["schedule8812.line14"])
    else:
        line19 = traced_zero("form1040.line19", "Form 1040, Line 19")

    dependent_care = present_if(
        model.dependent_care is not None,
        lambda: compute_dependent_care_credit(model.dependent_care, model, config, agi, earned_income),
    )
    has_deferrals = any(w.box12_total(config.savers_credit_deferral_codes) for w in model.w2s)
    savers = present_if(
        model.ira_contributions is not None or has_deferrals,
        lambda: compute_savers_credit(model, config, agi),
    )
    energy = present_if(model.energy is not None, lambda: compute_energy_credit(model.energy, config))
    education = present_if(
        bool(model.education_expenses),
        lambda: compute_education_credit(model, config, agi),
    )
    foreign_tax = present_if(
        foreign_taxes_paid(model) > 0,
        lambda: compute_foreign_tax_credit(model, config, line15.amount, line16.amount, line18.amount),
    )
    line20_parts = []
    if isinstance(foreign_tax, Present):
        line20_parts.append((foreign_tax.value.credit.amount, "schedule3.line1"))
    if isinstance(dependent_care, Present):
        line20_parts.append((dependent_care.value.credit.amount, "form2441.line11"))
    if isinstance(savers, Present):
        line20_parts.append((savers.value.credit.amount, "form8880.line12"))
    if isinstance(energy, Present):
        line20_parts.append((energy.value.credit.amount, "form5695.totalCredit"))
    if isinstance(education, Present):
        line20_parts.append((education.value.nonrefundable.amount, "form8863.line19"))
    line20 = _sum_line("line20", line20_parts)
    line21 = _add("line21", line19, line20)
    line22 = _line("line22", max(0, line18.amount - line21.amount), ["form1040.line18", "form1040.line21"])

    # Other taxes
    rental = schedule_e.value.rental_income if isinstance(schedule_e, Present) else None
    nii = net_investment_income(line2b, line3b, line7, rental)
    other_taxes = compute_other_taxes(
        model, config, agi, nii,
        schedule_se.to_optional(), hsa.to_optional(),
    )
    line23 = _line("line23", other_taxes.total.amount, ["schedule2.line21"])
    line24 = _add("line24", line22, line23)

    # Payments
    withholding = [(w.federal_tax_withheld, f"w2:{w.id}:box2") for w in model.w2s]
    withholding += [(f.federal_tax_withheld, f"1099int:{f.id}:box4") for f in model.form1099_ints]
    withholding += [(f.federal_tax_withheld, f"1099div:{f.id}:box4") for f in model.form1099_divs]
    withholding += [(f.federal_tax_withheld, f"1099r:{f.id}:box4") for f in model.form1099_rs]
    withholding += [(f.federal_tax_withheld, f"1099g:{f.id}:box4") for f in model.form1099_gs]
    withholding += [(f.federal_tax_withheld, f"1099misc:{f.id}:box4") for f in model.form1099_miscs]
    withholding += [(f.federal_tax_withheld, f"1099nec:{f.id}:box4") for f in model.form1099_necs]
    withholding += [(f.federal_tax_withheld, f"ssa1099:{f.id}:box6") for f in model.ssa1099s]
    withholding += [(t.federal_tax_withheld, f"tx:{t.id}") for t in model.capital_transactions]
    withholding.append((additional_medicare_withheld(model), "form8959.line24"))
    line25 = _sum_line("line25", withholding)

    estimated = model.estimated_payments.total if model.estimated_payments else 0
    line26 = _sum_line("line26", [(estimated, "input.estimatedPayments")])

    eic = present_if(
        earned_income > 0,
        lambda: compute_earned_income_credit(
            model, config, earned_income, agi,
            line2a.amount + line2b.amount + line3b.amount + max(0, line7.amount),
        ),
    )
    line27 = eic.value.credit if isinstance(eic, Present) else traced_zero("form1040.line27", "Form 1040, Line 27")
    if isinstance(ctc, Present) and ctc.value.additional.amount:
        line28 = _line("line28", ctc.value.additional.amount, ["schedule8812.line27"])
    else:
        line28 = traced_zero("form1040.line28", "Form 1040, Line 28")
    if isinstance(education, Present) and education.value.refundable.amount:
        line29 = _line("line29", education.value.refundable.amount, ["form8863.line8"])
    else:
        line29 = traced_zero("form1040.line29", "Form 1040, Line 29")
    refundable = compute_refundable_credits(model, config)
    if refundable.total.amount:
        line31 = _line("line31", refundable.total.amount, ["schedule3.line15"])
    else:
        line31 = traced_zero("form1040.line31", "Form 1040, Line 31")
    line32 = _add("line32", line27, line28, line29, line31)
    line33 = _add("line33", line25, line26, line32)
    line34 = _line("line34", max(0, line33.amount - line24.amount), ["form1040.line33", "form1040.line24"])
    line37 = _line("line37", max(0, line24.amount - line33.amount), ["form1040.line24", "form1040.line33"])

    logger.info(
        "Form 1040 computed: AGI=%s taxable=%s total_tax=%s refund=%s owed=%s",
        agi, line15.amount, line24.amount, line34.amount, line37.amount,
    )
    return Form1040Result(
        tax_year=model.tax_year,
        config_version=config.version,
        line1a=line1a, line1z=line1z, line2a=line2a, line2b=line2b,
        line3a=line3a, line3b=line3b, line4a=line4a, line4b=line4b,
        line5a=line5a, line5b=line5b, line6a=line6a, line6b=line6b,
        line7=line7, line8=line8, line9=line9, line10=line10, line11=line11,
        standard_deduction=standard,
        line12=line12, line13=line13, line14=line14, line15=line15,
        line16=line16, line17=line17, line18=line18, line19=line19,
        line20=line20, line21=line21, line22=line22, line23=line23, line24=line24,
        line25=line25, line26=line26, line27=line27, line28=line28, line29=line29,
        line31=line31, line32=line32, line33=line33, line34=line34, line37=line37,
        itemized=itemize,
        used_qdcg_worksheet=used_worksheet,
        earned_income=earned_income,
        schedule_d=schedule_d,
        schedule_1=schedule_1,
        schedule_e=schedule_e,
        schedule_1_adjustments=schedule_1_adjustments,
        schedule_a=schedule_a,
        schedule_se=schedule_se,
        social_security=social_security,
        hsa=hsa,
        ira_deduction=ira,
        student_loan_deduction=student_loan,
        senior_deduction=senior,
        qbi_deduction=qbi,
        amt=amt,
        foreign_tax_credit=foreign_tax,
        child_tax_credit=ctc,
        earned_income_credit=eic,
        dependent_care_credit=dependent_care,
        savers_credit=savers,
        energy_credit=energy,
        education_credit=education,
        other_taxes=Present(other_taxes),
        refundable_credits=Present(refundable),
    )
