"""Pytest configuration and fixtures for test suite."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from audit.audit_logger import AuditLogger, reset_audit_logger  # noqa: E402
from config.settings import get_settings  # noqa: E402
from models import (  # noqa: E402
    Dependent,
    DependentRelationship,
    FilingStatus,
    Person,
    StateReturnConfig,
    TaxReturn,
    W2Info,
)


@pytest.fixture(autouse=True)
def reset_engine_globals():
    """Settings and the global audit logger are process-wide; reset them around each test."""
    get_settings.cache_clear()
    reset_audit_logger()
    yield
    get_settings.cache_clear()
    reset_audit_logger()


@pytest.fixture
def audit_logger(tmp_path):
    """Audit logger backed by a throwaway sqlite file."""
    return AuditLogger(str(tmp_path / "audit.db"))


@pytest.fixture
def single_w2_return():
    """Single filer, one $75,000 W-2 with $9,000 withheld."""
    return TaxReturn(
        tax_year=2025,
        filing_status=FilingStatus.SINGLE,
        taxpayer=Person(first_name="Test", last_name="User", ssn="123-45-6789", date_of_birth="1985-06-15"),
        w2s=[W2Info(id="acme", employer_name="Acme Corp", wages=7_500_000, federal_tax_withheld=900_000)],
    )


@pytest.fixture
def family_return():
    """Married filing jointly, two W-2s and two children under 17."""
    return TaxReturn(
        tax_year=2025,
        filing_status=FilingStatus.MARRIED_JOINT,
        taxpayer=Person(first_name="Pat", last_name="Doe", ssn="111-22-3333", date_of_birth="1982-03-01"),
        spouse=Person(first_name="Sam", last_name="Doe", ssn="111-22-4444", date_of_birth="1983-09-20"),
        dependents=[
            Dependent(name="Kid One", ssn="222-33-4444", relationship=DependentRelationship.SON,
                      date_of_birth="2015-04-10"),
            Dependent(name="Kid Two", ssn="222-33-5555", relationship=DependentRelationship.DAUGHTER,
                      date_of_birth="2018-11-02"),
        ],
        w2s=[
            W2Info(id="w2a", employer_name="Alpha LLC", wages=9_000_000, federal_tax_withheld=800_000,
                   social_security_wages=9_000_000, state="CA", state_wages=9_000_000,
                   state_tax_withheld=300_000),
            W2Info(id="w2b", employer_name="Beta Inc", wages=4_000_000, federal_tax_withheld=300_000,
                   social_security_wages=4_000_000, state="CA", state_wages=4_000_000,
                   state_tax_withheld=100_000),
        ],
        state_returns=[StateReturnConfig(state_code="CA")],
    )
