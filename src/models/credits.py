from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class DependentCareInfo(BaseModel):
    """Form 2441 inputs."""
    total_expenses: int = Field(default=0, ge=0, description="Qualified care expenses paid")
    num_qualifying_persons: Optional[int] = Field(
        default=None, ge=0,
        description="Entered count; when omitted, dependents under 13 are counted"
    )


class EnergyCreditInputs(BaseModel):
    """Form 5695 inputs (costs in cents)."""
    # Part I: Residential Clean Energy Credit (uncapped 30%)
    solar_electric: int = Field(default=0, ge=0)
    solar_water_heating: int = Field(default=0, ge=0)
    small_wind: int = Field(default=0, ge=0)
    geothermal_heat_pump: int = Field(default=0, ge=0)
    battery_storage: int = Field(default=0, ge=0)
    # Part II: Energy Efficient Home Improvement Credit
    heat_pump: int = Field(default=0, ge=0, description="Heat pumps and heat pump water heaters")
    insulation: int = Field(default=0, ge=0)
    windows: int = Field(default=0, ge=0)
    doors: int = Field(default=0, ge=0)
    central_air: int = Field(default=0, ge=0)
    water_heater: int = Field(default=0, ge=0)
    home_energy_audit: int = Field(default=0, ge=0)


class EducationCreditType(str, Enum):
    AOTC = "aotc"
    LLC = "llc"


class EducationExpense(BaseModel):
    """Form 8863 per-student inputs."""
    student_name: str = ""
    credit_type: EducationCreditType = EducationCreditType.AOTC
    qualified_expenses: int = Field(default=0, ge=0)
    at_least_half_time: bool = True
    prior_years_aotc_claimed: int = Field(default=0, ge=0)
    completed_four_years: bool = False
