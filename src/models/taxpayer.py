from datetime import date
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class FilingStatus(str, Enum):
    """IRS filing status options"""
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"
    QUALIFYING_WIDOW = "qualifying_widow"

    @property
    def is_joint_schedule(self) -> bool:
        """MFJ and qualifying surviving spouse share the joint rate schedules."""
        return self in (FilingStatus.MARRIED_JOINT, FilingStatus.QUALIFYING_WIDOW)


class DependentRelationship(str, Enum):
    """IRS-recognized dependent relationships for Qualifying Child/Relative tests."""
    # Qualifying Child relationships
    SON = "son"
    DAUGHTER = "daughter"
    STEPCHILD = "stepchild"
    FOSTER_CHILD = "foster_child"
    BROTHER = "brother"
    SISTER = "sister"
    HALF_BROTHER = "half_brother"
    HALF_SISTER = "half_sister"
    STEPBROTHER = "stepbrother"
    STEPSISTER = "stepsister"
    # Descendants of above
    GRANDCHILD = "grandchild"
    NIECE = "niece"
    NEPHEW = "nephew"
    # Qualifying Relative relationships
    PARENT = "parent"
    GRANDPARENT = "grandparent"
    AUNT = "aunt"
    UNCLE = "uncle"
    IN_LAW = "in_law"
    OTHER = "other"


QUALIFYING_CHILD_RELATIONSHIPS = frozenset({
    DependentRelationship.SON,
    DependentRelationship.DAUGHTER,
    DependentRelationship.STEPCHILD,
    DependentRelationship.FOSTER_CHILD,
    DependentRelationship.BROTHER,
    DependentRelationship.SISTER,
    DependentRelationship.HALF_BROTHER,
    DependentRelationship.HALF_SISTER,
    DependentRelationship.STEPBROTHER,
    DependentRelationship.STEPSISTER,
    DependentRelationship.GRANDCHILD,
    DependentRelationship.NIECE,
    DependentRelationship.NEPHEW,
})


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse a YYYY-MM-DD string, returning None when absent or malformed."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


class Dependent(BaseModel):
    """
    Tax dependent information.

    Qualifying Child tests used by the credit computations:
    - relationship (son, daughter, stepchild, foster child, sibling, descendant)
    - age at the end of the tax year
    - residency (more than half the year with the taxpayer)
    - a valid 9-digit SSN for the Child Tax Credit
    """
    name: str = ""
    ssn: Optional[str] = None
    relationship: DependentRelationship = DependentRelationship.OTHER
    date_of_birth: Optional[str] = None  # YYYY-MM-DD format
    months_lived_with_taxpayer: int = Field(default=12, ge=0, le=12, description="Months lived with taxpayer in tax year")
    is_student: bool = Field(default=False, description="Full-time student for 5+ months")
    is_permanently_disabled: bool = Field(default=False, description="Permanently and totally disabled")

    @property
    def birth_date(self) -> Optional[date]:
        return parse_iso_date(self.date_of_birth)

    def age_at_year_end(self, tax_year: int) -> Optional[int]:
        """Age on December 31 of the tax year, or None without a valid date of birth."""
        dob = self.birth_date
        if dob is None:
            return None
        return tax_year - dob.year

    def has_valid_ssn(self) -> bool:
        if not self.ssn:
            return False
        digits = self.ssn.replace("-", "").replace(" ", "")
        return len(digits) == 9 and digits.isdigit()

    @property
    def is_qualifying_child_relationship(self) -> bool:
        return self.relationship in QUALIFYING_CHILD_RELATIONSHIPS


class Person(BaseModel):
    """Taxpayer or spouse identity and the per-person flags the engine reads."""
    first_name: str = ""
    last_name: str = ""
    ssn: Optional[str] = Field(None, description="Social Security Number (never logged in plaintext)")
    date_of_birth: Optional[str] = None
    is_blind: bool = False
    is_disabled: bool = False
    can_be_claimed_as_dependent: bool = False
    covered_by_employer_plan: bool = Field(
        default=False,
        description="Active participant in an employer retirement plan (W-2 box 13)"
    )

    @field_validator("date_of_birth")
    @classmethod
    def _strip_time(cls, v: Optional[str]) -> Optional[str]:
        return v[:10] if v else v

    @property
    def birth_date(self) -> Optional[date]:
        return parse_iso_date(self.date_of_birth)

    def age_at_year_end(self, tax_year: int) -> Optional[int]:
        dob = self.birth_date
        if dob is None:
            return None
        return tax_year - dob.year

    def is_65_or_older(self, tax_year: int) -> bool:
        """IRS treats a person born on January 1 as turning 65 on December 31 of the prior year."""
        dob = self.birth_date
        if dob is None:
            return False
        if dob.month == 1 and dob.day == 1:
            return tax_year - dob.year + 1 >= 65
        return tax_year - dob.year >= 65
