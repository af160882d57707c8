"""State tax configuration dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from calculator.brackets import Bracket, BracketTable, brackets_from_floors
from calculator.decimal_math import dollars_to_cents
from calculator.tax_year_config import FILING_STATUSES, status_key


# filing_status -> bracket table in cents
StateBracketTable = Mapping[str, BracketTable]


class DataConfidence(str, Enum):
    """How far a jurisdiction's constants have been checked against published forms."""
    VERIFIED = "verified"
    PROVISIONAL = "provisional"


def state_amounts(
    single: float,
    married_joint: float,
    married_separate: Optional[float] = None,
    head_of_household: Optional[float] = None,
    qualifying_widow: Optional[float] = None,
) -> Mapping[str, int]:
    """Dollar amounts per filing status, converted to cents."""
    values = {
        "single": single,
        "married_joint": married_joint,
        "married_separate": single if married_separate is None else married_separate,
        "head_of_household": single if head_of_household is None else head_of_household,
        "qualifying_widow": married_joint if qualifying_widow is None else qualifying_widow,
    }
    return MappingProxyType({k: dollars_to_cents(v) for k, v in values.items()})


def state_brackets(
    single: Sequence[Tuple[float, float]],
    married_joint: Optional[Sequence[Tuple[float, float]]] = None,
    married_separate: Optional[Sequence[Tuple[float, float]]] = None,
    head_of_household: Optional[Sequence[Tuple[float, float]]] = None,
    qualifying_widow: Optional[Sequence[Tuple[float, float]]] = None,
) -> StateBracketTable:
    """
    Floor-format dollar tables per filing status. Omitted statuses share the
    single schedule, except qualifying widow(er) which follows married joint.
    """
    joint = married_joint or single
    tables = {
        "single": single,
        "married_joint": joint,
        "married_separate": married_separate or single,
        "head_of_household": head_of_household or single,
        "qualifying_widow": qualifying_widow or joint,
    }
    return MappingProxyType({k: brackets_from_floors(v) for k, v in tables.items()})


@dataclass(frozen=True)
class StateTaxConfig:
    """
    Configuration for a specific state and tax year.

    Holds the static data needed to compute a state's income tax: brackets,
    deductions, exemptions and the state-specific constants its rules read.
    Money is in integer cents. Instances are immutable and built once per
    state by its ``get_<state>_config()`` function.
    """

    # Basic identification
    state_code: str
    state_name: str
    tax_year: int

    # Tax structure
    is_flat_tax: bool
    flat_rate: Optional[float] = None  # If is_flat_tax is True
    brackets: Optional[StateBracketTable] = None  # If progressive

    # Deductions and exemptions
    standard_deduction: Mapping[str, int] = field(default_factory=dict)
    allows_itemized: bool = False
    personal_exemption_amount: Mapping[str, int] = field(default_factory=dict)
    dependent_exemption_amount: int = 0

    # State-specific income rules
    social_security_taxable: bool = False
    us_obligation_interest_exempt: bool = True

    # State EITC (as percentage of federal EITC, e.g., 0.30 = 30%)
    eitc_percentage: Optional[float] = None

    # Local tax support (NYC, MD counties)
    has_local_tax: bool = False
    local_tax_brackets: Optional[StateBracketTable] = None

    # Remaining state-specific constants, keyed by name
    parameters: Mapping[str, Any] = field(default_factory=dict)

    data_confidence: DataConfidence = DataConfidence.PROVISIONAL
    confidence_note: str = ""

    def __post_init__(self):
        object.__setattr__(self, "standard_deduction", MappingProxyType(dict(self.standard_deduction)))
        object.__setattr__(self, "personal_exemption_amount", MappingProxyType(dict(self.personal_exemption_amount)))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))

    def get_standard_deduction(self, filing_status: Any) -> int:
        """Get standard deduction for a filing status."""
        return self.standard_deduction.get(status_key(filing_status), 0)

    def get_personal_exemption(self, filing_status: Any) -> int:
        """Get personal exemption amount for a filing status."""
        return self.personal_exemption_amount.get(status_key(filing_status), 0)

    def get_brackets(self, filing_status: Any) -> BracketTable:
        """Get tax brackets for a filing status."""
        if self.is_flat_tax:
            return (Bracket(float("inf"), self.flat_rate or 0.0),)
        if self.brackets:
            return self.brackets.get(status_key(filing_status), self.brackets.get("single", ()))
        return ()

    def get_local_brackets(self, filing_status: Any) -> BracketTable:
        if not self.local_tax_brackets:
            return ()
        return self.local_tax_brackets.get(status_key(filing_status), self.local_tax_brackets.get("single", ()))

    def param(self, name: str, filing_status: Any = None) -> Any:
        """
        A state-specific constant. Per-status tables are resolved when a
        filing status is given.

        Raises:
            KeyError: If the state defines no such constant
        """
        value = self.parameters[name]
        if filing_status is not None and isinstance(value, Mapping):
            return value[status_key(filing_status)]
        return value

    @property
    def is_verified(self) -> bool:
        return self.data_confidence == DataConfidence.VERIFIED


def all_statuses(value: Any) -> Dict[str, Any]:
    """The same value for every filing status."""
    return {status: value for status in FILING_STATUSES}
