from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class ResidencyType(str, Enum):
    FULL_YEAR = "full-year"
    PART_YEAR = "part-year"
    NONRESIDENT = "nonresident"


class StateReturnConfig(BaseModel):
    """
    Per-state filing configuration supplied by the interview.

    Only `state_code` and `residency_type` are common to every state; the
    remaining fields are read by the states that use them and ignored elsewhere.
    """
    state_code: str
    residency_type: ResidencyType = ResidencyType.FULL_YEAR
    move_in_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, part-year only")
    move_out_date: Optional[str] = Field(default=None, description="YYYY-MM-DD, part-year only")

    # Housing
    rent_paid: int = Field(default=0, ge=0, description="Rent paid on a principal residence in the state")
    is_homeowner: bool = False
    property_tax_paid: int = Field(default=0, ge=0)

    # Local tax jurisdiction (MD county, OH school district, etc.)
    county: Optional[str] = None
    resident_state: Optional[str] = Field(
        default=None, description="Home state of a nonresident filer (DC commuter exemption)"
    )

    contributions_529: int = Field(default=0, ge=0)

    @field_validator("state_code")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("resident_state")
    @classmethod
    def _upper_resident(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v
