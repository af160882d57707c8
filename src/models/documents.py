"""
Source documents feeding the return.

Every money field is an integer number of cents. Box numbers follow the
2025 IRS form layouts; the `id` of each document is used to build provenance
leaf nodes such as ``w2:<id>:box1``.
"""

import math
from enum import Enum
from typing import Iterable, List, Optional
from pydantic import BaseModel, Field, field_validator


Cents = int


class W2Box12Entry(BaseModel):
    """A single W-2 box 12 coded amount (e.g. D = 401(k) deferral, W = employer HSA)."""
    code: str
    amount: Cents = Field(default=0, ge=0)

    @field_validator("code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()


class W2Info(BaseModel):
    """W-2 form information"""
    id: str = "w2"
    employer_name: str = ""
    employer_ein: Optional[str] = None
    wages: Cents = Field(default=0, ge=0, description="Box 1: Wages, tips, other compensation")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 2: Federal income tax withheld")
    social_security_wages: Cents = Field(default=0, ge=0, description="Box 3")
    social_security_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")
    medicare_wages: Cents = Field(default=0, ge=0, description="Box 5")
    medicare_tax_withheld: Cents = Field(default=0, ge=0, description="Box 6")
    box12: List[W2Box12Entry] = Field(default_factory=list)
    retirement_plan: bool = Field(default=False, description="Box 13: Retirement plan")
    state: Optional[str] = Field(default=None, description="Box 15: two-letter state code")
    state_wages: Optional[Cents] = Field(default=None, ge=0, description="Box 16: State wages")
    state_tax_withheld: Cents = Field(default=0, ge=0, description="Box 17: State income tax")

    @field_validator("state")
    @classmethod
    def _upper_state(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    def box12_total(self, codes: Iterable[str]) -> Cents:
        wanted = set(codes)
        return sum(e.amount for e in self.box12 if e.code in wanted)


class Form1099INT(BaseModel):
    id: str = "1099int"
    payer_name: str = ""
    interest_income: Cents = Field(default=0, ge=0, description="Box 1")
    us_obligation_interest: Cents = Field(default=0, ge=0, description="Box 3: US Savings Bonds and Treasury interest")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")
    foreign_tax_paid: Cents = Field(default=0, ge=0, description="Box 6")
    tax_exempt_interest: Cents = Field(default=0, ge=0, description="Box 8")
    private_activity_bond_interest: Cents = Field(default=0, ge=0, description="Box 9")


class Form1099DIV(BaseModel):
    id: str = "1099div"
    payer_name: str = ""
    ordinary_dividends: Cents = Field(default=0, ge=0, description="Box 1a")
    qualified_dividends: Cents = Field(default=0, ge=0, description="Box 1b")
    capital_gain_distributions: Cents = Field(default=0, ge=0, description="Box 2a")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")
    foreign_tax_paid: Cents = Field(default=0, ge=0, description="Box 7")
    exempt_interest_dividends: Cents = Field(default=0, ge=0, description="Box 12")
    private_activity_bond_dividends: Cents = Field(default=0, ge=0, description="Box 13")


class Form1099R(BaseModel):
    id: str = "1099r"
    payer_name: str = ""
    gross_distribution: Cents = Field(default=0, ge=0, description="Box 1")
    taxable_amount: Cents = Field(default=0, ge=0, description="Box 2a")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")
    distribution_code: str = Field(default="7", description="Box 7: distribution code(s)")
    is_ira_sep_simple: bool = Field(default=False, description="IRA/SEP/SIMPLE checkbox")

    @property
    def is_rollover(self) -> bool:
        return "G" in self.distribution_code.upper()

    @property
    def is_early_distribution(self) -> bool:
        return "1" in self.distribution_code


class Form1099G(BaseModel):
    id: str = "1099g"
    payer_name: str = ""
    unemployment_compensation: Cents = Field(default=0, ge=0, description="Box 1")
    state_tax_refund: Cents = Field(default=0, ge=0, description="Box 2")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")


class Form1099MISC(BaseModel):
    id: str = "1099misc"
    payer_name: str = ""
    rents: Cents = Field(default=0, ge=0, description="Box 1")
    royalties: Cents = Field(default=0, ge=0, description="Box 2")
    other_income: Cents = Field(default=0, ge=0, description="Box 3")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")


class Form1099NEC(BaseModel):
    id: str = "1099nec"
    payer_name: str = ""
    nonemployee_compensation: Cents = Field(default=0, ge=0, description="Box 1")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 4")


class Form1099SA(BaseModel):
    id: str = "1099sa"
    payer_name: str = ""
    gross_distribution: Cents = Field(default=0, ge=0, description="Box 1")
    distribution_code: str = "1"


class SSA1099(BaseModel):
    id: str = "ssa1099"
    recipient: str = "taxpayer"
    net_benefits: Cents = Field(default=0, ge=0, description="Box 5")
    federal_tax_withheld: Cents = Field(default=0, ge=0, description="Box 6")


class Form8949Category(str, Enum):
    """Form 8949 reporting boxes."""
    A = "A"  # short-term, basis reported to IRS
    B = "B"  # short-term, basis not reported
    D = "D"  # long-term, basis reported to IRS
    E = "E"  # long-term, basis not reported

    @property
    def is_long_term(self) -> bool:
        return self in (Form8949Category.D, Form8949Category.E)


class CapitalTransaction(BaseModel):
    """One Form 8949 row (typically one 1099-B lot)."""
    id: str = "txn"
    description: str = ""
    date_acquired: Optional[str] = None
    date_sold: Optional[str] = None
    proceeds: Cents = Field(default=0, ge=0)
    cost_basis: Cents = Field(default=0, ge=0)
    adjustment_code: Optional[str] = None
    adjustment_amount: Cents = Field(default=0, description="Column (g), e.g. wash sale disallowed loss")
    category: Form8949Category = Form8949Category.A
    federal_tax_withheld: Cents = Field(default=0, ge=0)

    @property
    def gain_loss(self) -> Cents:
        return self.proceeds - self.cost_basis + self.adjustment_amount


class ScheduleCBusiness(BaseModel):
    """Sole proprietorship summary (Schedule C)."""
    id: str = "schc"
    business_name: str = ""
    business_state: Optional[str] = None
    gross_receipts: Cents = Field(default=0, ge=0)
    returns_and_allowances: Cents = Field(default=0, ge=0)
    cost_of_goods_sold: Cents = Field(default=0, ge=0)
    advertising: Cents = Field(default=0, ge=0)
    car_and_truck: Cents = Field(default=0, ge=0)
    contract_labor: Cents = Field(default=0, ge=0)
    depreciation: Cents = Field(default=0, ge=0)
    insurance: Cents = Field(default=0, ge=0)
    interest: Cents = Field(default=0, ge=0)
    legal_and_professional: Cents = Field(default=0, ge=0)
    office_expense: Cents = Field(default=0, ge=0)
    rent_or_lease: Cents = Field(default=0, ge=0)
    repairs: Cents = Field(default=0, ge=0)
    supplies: Cents = Field(default=0, ge=0)
    taxes_and_licenses: Cents = Field(default=0, ge=0)
    travel: Cents = Field(default=0, ge=0)
    meals: Cents = Field(default=0, ge=0, description="Business meals before the 50% limit")
    utilities: Cents = Field(default=0, ge=0)
    wages: Cents = Field(default=0, ge=0)
    other_expenses: Cents = Field(default=0, ge=0)
    qualified_property_ubia: Cents = Field(default=0, ge=0, description="Section 199A UBIA of qualified property")
    is_sstb: bool = Field(default=False, description="Specified service trade or business")

    def total_expenses(self) -> Cents:
        meals_allowed = (self.meals + 1) // 2
        return (
            self.advertising + self.car_and_truck + self.contract_labor
            + self.depreciation + self.insurance + self.interest
            + self.legal_and_professional + self.office_expense
            + self.rent_or_lease + self.repairs + self.supplies
            + self.taxes_and_licenses + self.travel + meals_allowed
            + self.utilities + self.wages + self.other_expenses
        )

    def net_profit(self) -> Cents:
        gross_profit = self.gross_receipts - self.returns_and_allowances - self.cost_of_goods_sold
        return gross_profit - self.total_expenses()


class ScheduleEProperty(BaseModel):
    """Rental real estate / royalty property (Schedule E Part I)."""
    id: str = "sche"
    address: str = ""
    property_state: Optional[str] = None
    rents_received: Cents = Field(default=0, ge=0)
    royalties_received: Cents = Field(default=0, ge=0)
    advertising: Cents = Field(default=0, ge=0)
    cleaning_and_maintenance: Cents = Field(default=0, ge=0)
    insurance: Cents = Field(default=0, ge=0)
    management_fees: Cents = Field(default=0, ge=0)
    mortgage_interest: Cents = Field(default=0, ge=0)
    repairs: Cents = Field(default=0, ge=0)
    taxes: Cents = Field(default=0, ge=0)
    utilities: Cents = Field(default=0, ge=0)
    depreciation: Cents = Field(default=0, ge=0)
    other_expenses: Cents = Field(default=0, ge=0)

    def total_expenses(self) -> Cents:
        return (
            self.advertising + self.cleaning_and_maintenance + self.insurance
            + self.management_fees + self.mortgage_interest + self.repairs
            + self.taxes + self.utilities + self.depreciation + self.other_expenses
        )

    def net_income(self) -> Cents:
        return self.rents_received + self.royalties_received - self.total_expenses()


class RSUVestEvent(BaseModel):
    """Restricted stock unit vest; income is normally already on the W-2."""
    id: str = "rsu"
    vest_date: Optional[str] = None
    shares: float = Field(default=0.0, ge=0)
    fmv_per_share: Cents = Field(default=0, ge=0)
    included_in_w2: bool = True

    @property
    def income(self) -> Cents:
        return math.floor(self.shares * self.fmv_per_share + 0.5)


class ISOExercise(BaseModel):
    """Incentive stock option exercise (AMT preference item when shares are held)."""
    id: str = "iso"
    exercise_date: Optional[str] = None
    shares: float = Field(default=0.0, ge=0)
    exercise_price: Cents = Field(default=0, ge=0, description="Strike price per share")
    fmv_at_exercise: Cents = Field(default=0, ge=0, description="Fair market value per share")

    @property
    def spread(self) -> Cents:
        per_share = max(0, self.fmv_at_exercise - self.exercise_price)
        return math.floor(per_share * self.shares + 0.5)


class K1EntityType(str, Enum):
    PARTNERSHIP = "partnership"
    S_CORPORATION = "s_corporation"
    TRUST_ESTATE = "trust_estate"


class ScheduleK1(BaseModel):
    """
    Owner's share from a pass-through entity.

    Box numbers follow Schedule K-1 (Form 1065); S corporation and fiduciary
    amounts are entered in the same fields. Income fields may be negative.
    """
    id: str = "k1"
    entity_name: str = ""
    entity_ein: Optional[str] = None
    entity_type: K1EntityType = K1EntityType.PARTNERSHIP
    entity_state: Optional[str] = None
    ordinary_business_income: Cents = Field(default=0, description="Box 1")
    net_rental_income: Cents = Field(default=0, description="Box 2: Net rental real estate income")
    guaranteed_payments: Cents = Field(default=0, ge=0, description="Box 4")
    interest_income: Cents = Field(default=0, ge=0, description="Box 5")
    ordinary_dividends: Cents = Field(default=0, ge=0, description="Box 6a")
    qualified_dividends: Cents = Field(default=0, ge=0, description="Box 6b")
    short_term_capital_gain: Cents = Field(default=0, description="Box 8")
    long_term_capital_gain: Cents = Field(default=0, description="Box 9a")
    self_employment_earnings: Optional[Cents] = Field(
        default=None, description="Box 14 code A; guaranteed payments are used when omitted"
    )
    section_199a_qbi: Cents = Field(default=0, description="Box 20 code Z: qualified business income")
    section_199a_w2_wages: Cents = Field(default=0, ge=0)
    section_199a_ubia: Cents = Field(default=0, ge=0, description="UBIA of qualified property")
    is_sstb: bool = Field(default=False, description="Specified service trade or business")

    @field_validator("entity_state")
    @classmethod
    def _upper_state(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v

    @property
    def se_earnings(self) -> Cents:
        if self.self_employment_earnings is not None:
            return self.self_employment_earnings
        return self.guaranteed_payments

    @property
    def has_capital_gains(self) -> bool:
        return bool(self.short_term_capital_gain or self.long_term_capital_gain)
