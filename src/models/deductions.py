from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class DeductionMethod(str, Enum):
    STANDARD = "standard"
    ITEMIZED = "itemized"


class ItemizedDeductions(BaseModel):
    """Schedule A inputs, in cents."""
    medical_expenses: int = Field(default=0, ge=0)

    # Taxes you paid (line 5); income vs. sales tax is an election, the larger is used
    state_local_income_taxes: int = Field(default=0, ge=0)
    state_local_sales_taxes: int = Field(default=0, ge=0)
    real_estate_taxes: int = Field(default=0, ge=0)
    personal_property_taxes: int = Field(default=0, ge=0)

    # Interest you paid (lines 8-9)
    mortgage_interest: int = Field(default=0, ge=0, description="Form 1098 box 1")
    mortgage_principal: int = Field(default=0, ge=0, description="Average acquisition debt outstanding")
    mortgage_pre_tcja: bool = Field(default=False, description="Acquisition debt incurred before Dec 16, 2017")
    home_equity_interest: int = Field(default=0, ge=0, description="Not deductible federally; some states allow it")
    home_equity_principal: int = Field(default=0, ge=0)
    investment_interest: int = Field(default=0, ge=0)
    net_investment_income: Optional[int] = Field(
        default=None, ge=0,
        description="Form 4952 line 6; derived from interest and ordinary dividends when omitted"
    )

    # Gifts to charity (lines 11-12)
    charitable_cash: int = Field(default=0, ge=0)
    charitable_noncash: int = Field(default=0, ge=0)

    # Other itemized deductions (line 16)
    gambling_losses: int = Field(default=0, ge=0)
    casualty_theft_losses: int = Field(default=0, ge=0)
    other_deductions: int = Field(default=0, ge=0)


class Deductions(BaseModel):
    """Deduction election plus itemized detail."""
    method: DeductionMethod = DeductionMethod.STANDARD
    itemized: Optional[ItemizedDeductions] = None
    lived_apart_all_year: bool = Field(
        default=False, description="Married filing separately and lived apart from the spouse all year"
    )


class IRAContributions(BaseModel):
    """Traditional and Roth IRA contributions for the tax year."""
    taxpayer_traditional: int = Field(default=0, ge=0)
    spouse_traditional: int = Field(default=0, ge=0)
    taxpayer_roth: int = Field(default=0, ge=0)
    spouse_roth: int = Field(default=0, ge=0)


class HSACoverage(str, Enum):
    SELF_ONLY = "self_only"
    FAMILY = "family"


class HSAInfo(BaseModel):
    """Form 8889 inputs."""
    coverage_type: HSACoverage = HSACoverage.SELF_ONLY
    taxpayer_contributions: int = Field(default=0, ge=0, description="Contributions made outside payroll")
    qualified_medical_expenses: int = Field(default=0, ge=0, description="Distributions used for qualified expenses")
    age_55_or_older: bool = False
    age_65_or_disabled: bool = False
