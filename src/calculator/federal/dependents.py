"""Qualifying-child tests shared by the dependent-based credits."""

from typing import List

from calculator.tax_year_config import TaxYearConfig
from models.taxpayer import Dependent


def lived_with_taxpayer_over_half_year(dep: Dependent) -> bool:
    return dep.months_lived_with_taxpayer >= 7


def is_ctc_qualifying_child(dep: Dependent, tax_year: int, config: TaxYearConfig) -> bool:
    """Under 17 at year end, qualifying relationship and residency, valid SSN."""
    age = dep.age_at_year_end(tax_year)
    if age is None or not dep.has_valid_ssn():
        return False
    return (
        dep.is_qualifying_child_relationship
        and lived_with_taxpayer_over_half_year(dep)
        and 0 <= age < config.ctc_child_age_limit
    )


def is_eic_qualifying_child(dep: Dependent, tax_year: int, config: TaxYearConfig) -> bool:
    """Under 19, under 24 if a student, or any age if permanently disabled."""
    age = dep.age_at_year_end(tax_year)
    if age is None or age < 0 or not dep.has_valid_ssn():
        return False
    if not (dep.is_qualifying_child_relationship and lived_with_taxpayer_over_half_year(dep)):
        return False
    if dep.is_permanently_disabled:
        return True
    limit = config.eic_student_age_limit if dep.is_student else config.eic_child_age_limit
    return age < limit


def count_dependent_care_persons(dependents: List[Dependent], tax_year: int, config: TaxYearConfig) -> int:
    """Dependents under 13, plus disabled dependents of any age."""
    count = 0
    for dep in dependents:
        age = dep.age_at_year_end(tax_year)
        if dep.is_permanently_disabled:
            count += 1
        elif age is not None and 0 <= age < config.dependent_care_child_age_limit:
            count += 1
    return count
