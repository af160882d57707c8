"""Fixtures shared by the state module tests."""

import pytest

from calculator.form1040 import compute_form1040
from calculator.state.state_registry import StateModuleRegistry
from models import (
    Dependent,
    DependentRelationship,
    FilingStatus,
    Person,
    StateReturnConfig,
    TaxReturn,
    W2Info,
)


def _wage_return(state: str, wages: int, withheld: int = 0, **kwargs) -> TaxReturn:
    """A return with one W-2 issued for ``state``."""
    w2 = W2Info(id="job", employer_name="Employer", wages=wages, social_security_wages=wages,
                state=state, state_wages=wages, state_tax_withheld=withheld)
    kwargs.setdefault("w2s", [w2])
    return TaxReturn(**kwargs)


@pytest.fixture
def wage_return():
    """Build a return with one W-2 for a state: wage_return("CA", 7_500_000, withheld=...)."""
    return _wage_return


@pytest.fixture
def compute_state():
    """Run one state module against a return: compute_state(model, "CA", **residency)."""
    def run(model: TaxReturn, state_code: str, **residency):
        module = StateModuleRegistry.get_module(state_code, model.tax_year)
        federal = compute_form1040(model)
        config = StateReturnConfig(state_code=state_code, **residency)
        return module.compute(model, federal, config)
    return run


@pytest.fixture
def earned_income_return():
    """
    Single parent with $20,000 of wages and one child: the federal earned
    income credit is the one-child maximum, $4,328.
    """
    def build(state: str, **kwargs) -> TaxReturn:
        kwargs.setdefault("taxpayer", Person(first_name="Lee", date_of_birth="1990-04-12"))
        kwargs.setdefault("filing_status", FilingStatus.HEAD_OF_HOUSEHOLD)
        kwargs.setdefault("dependents", [
            Dependent(name="Kid", ssn="900-11-2222", relationship=DependentRelationship.DAUGHTER,
                      date_of_birth="2018-08-08"),
        ])
        return _wage_return(state, 2_000_000, **kwargs)
    return build
