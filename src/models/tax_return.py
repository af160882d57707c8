from typing import List, Optional
from pydantic import BaseModel, Field

from .taxpayer import FilingStatus, Person, Dependent
from .documents import (
    W2Info,
    Form1099INT,
    Form1099DIV,
    Form1099R,
    Form1099G,
    Form1099MISC,
    Form1099NEC,
    Form1099SA,
    SSA1099,
    CapitalTransaction,
    ScheduleCBusiness,
    ScheduleEProperty,
    RSUVestEvent,
    ISOExercise,
    ScheduleK1,
)
from .deductions import Deductions, IRAContributions, HSAInfo
from .credits import DependentCareInfo, EnergyCreditInputs, EducationExpense
from .state import StateReturnConfig


class PriorYearInfo(BaseModel):
    """Carryovers and elections from the prior year's return."""
    itemized_last_year: bool = Field(default=False, description="State refund is taxable only if itemized last year")
    short_term_loss_carryover: int = Field(default=0, ge=0)
    long_term_loss_carryover: int = Field(default=0, ge=0)
    investment_interest_carryover: int = Field(default=0, ge=0)
    passive_loss_carryover: int = Field(default=0, ge=0, description="Form 8582 prior year unallowed rental losses")
    qbi_loss_carryforward: int = Field(default=0, ge=0, description="Qualified business loss carried from last year")


class EstimatedTaxPayments(BaseModel):
    q1: int = Field(default=0, ge=0)
    q2: int = Field(default=0, ge=0)
    q3: int = Field(default=0, ge=0)
    q4: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.q1 + self.q2 + self.q3 + self.q4


class NonresidentAlienInfo(BaseModel):
    """
    Form 1040-NR inputs.

    Presence of this section on a return routes the federal computation
    through the nonresident orchestrator.
    """
    country_of_residence: str = ""
    treaty_country: str = ""
    treaty_article: str = ""
    treaty_exempt_income: int = Field(default=0, ge=0)
    scholarship_income: int = Field(default=0, ge=0)

    # Schedule NEC amounts entered directly
    fdap_dividends: int = Field(default=0, ge=0)
    fdap_interest: int = Field(default=0, ge=0)
    fdap_royalties: int = Field(default=0, ge=0)
    fdap_other_income: int = Field(default=0, ge=0)
    fdap_withholding_rate: Optional[float] = Field(default=None, ge=0, le=1, description="Treaty rate; 30% when omitted")

    rental_elect_eci: bool = Field(default=False, description="IRC 871(d) election to treat real property income as ECI")
    social_security_treaty_exempt: Optional[bool] = Field(
        default=None, description="Overrides the treaty-country lookup"
    )
    days_in_us: int = Field(default=0, ge=0, le=366)


class TaxReturn(BaseModel):
    """
    Complete tax return input.

    The engine treats a TaxReturn as read-only: every computation is a fresh
    pass over this model and nothing is written back to it.
    """
    tax_year: int = 2025
    filing_status: FilingStatus = FilingStatus.SINGLE
    taxpayer: Person = Field(default_factory=Person)
    spouse: Optional[Person] = None
    dependents: List[Dependent] = Field(default_factory=list)

    # Source documents
    w2s: List[W2Info] = Field(default_factory=list)
    form1099_ints: List[Form1099INT] = Field(default_factory=list)
    form1099_divs: List[Form1099DIV] = Field(default_factory=list)
    form1099_rs: List[Form1099R] = Field(default_factory=list)
    form1099_gs: List[Form1099G] = Field(default_factory=list)
    form1099_miscs: List[Form1099MISC] = Field(default_factory=list)
    form1099_necs: List[Form1099NEC] = Field(default_factory=list)
    form1099_sas: List[Form1099SA] = Field(default_factory=list)
    ssa1099s: List[SSA1099] = Field(default_factory=list)
    capital_transactions: List[CapitalTransaction] = Field(default_factory=list)
    schedule_c_businesses: List[ScheduleCBusiness] = Field(default_factory=list)
    schedule_e_properties: List[ScheduleEProperty] = Field(default_factory=list)
    schedule_k1s: List[ScheduleK1] = Field(default_factory=list)
    rsu_vest_events: List[RSUVestEvent] = Field(default_factory=list)
    iso_exercises: List[ISOExercise] = Field(default_factory=list)

    # Deductions and adjustments
    deductions: Deductions = Field(default_factory=Deductions)
    ira_contributions: Optional[IRAContributions] = None
    hsa: Optional[HSAInfo] = None
    student_loan_interest: int = Field(default=0, ge=0)
    educator_expenses: int = Field(default=0, ge=0)

    # Credit inputs
    dependent_care: Optional[DependentCareInfo] = None
    energy: Optional[EnergyCreditInputs] = None
    education_expenses: List[EducationExpense] = Field(default_factory=list)

    prior_year: PriorYearInfo = Field(default_factory=PriorYearInfo)
    estimated_payments: Optional[EstimatedTaxPayments] = None
    nonresident_alien: Optional[NonresidentAlienInfo] = None
    state_returns: List[StateReturnConfig] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_nonresident(self) -> bool:
        return self.nonresident_alien is not None

    def persons(self) -> List[Person]:
        """Taxpayer plus spouse when filing jointly."""
        if self.filing_status == FilingStatus.MARRIED_JOINT and self.spouse is not None:
            return [self.taxpayer, self.spouse]
        return [self.taxpayer]
