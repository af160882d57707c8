"""
Residency apportionment shared by every state module.

The ratio is the fraction of the tax year a filer was a resident of the
state: 1.0 for full-year residents, 0.0 for nonresidents, and
``days_in_state / days_in_year`` for part-year residents. States that
apportion tax, income or deductions all call ``compute_apportionment_ratio``.
"""

import logging
from datetime import date
from typing import Optional

from calculator.decimal_math import percent
from models.state import ResidencyType, StateReturnConfig
from models.taxpayer import parse_iso_date

logger = logging.getLogger(__name__)


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def _parse_or_default(value: Optional[str], default: date, field: str) -> date:
    if not value:
        return default
    parsed = parse_iso_date(value)
    if parsed is None:
        logger.warning("Unparseable residency %s %r; using %s", field, value, default.isoformat())
        return default
    return parsed


def residency_days(config: StateReturnConfig, tax_year: int) -> int:
    """
    Days of the tax year inside the residency window, inclusive of both ends.

    The window is ``[max(year_start, move_in), min(year_end, move_out)]``; an
    inverted window yields zero.
    """
    if config.residency_type == ResidencyType.FULL_YEAR:
        return days_in_year(tax_year)
    if config.residency_type == ResidencyType.NONRESIDENT:
        return 0

    year_start = date(tax_year, 1, 1)
    year_end = date(tax_year, 12, 31)
    start = max(year_start, _parse_or_default(config.move_in_date, year_start, "move-in date"))
    end = min(year_end, _parse_or_default(config.move_out_date, year_end, "move-out date"))
    if end < start:
        return 0
    return (end - start).days + 1


def compute_apportionment_ratio(config: StateReturnConfig, tax_year: int) -> float:
    """
    Fraction of the tax year the filer resided in the state, in ``[0, 1]``.

    Examples:
        >>> compute_apportionment_ratio(StateReturnConfig(state_code="CA"), 2025)
        1.0
    """
    if config.residency_type == ResidencyType.FULL_YEAR:
        return 1.0
    if config.residency_type == ResidencyType.NONRESIDENT:
        return 0.0
    ratio = residency_days(config, tax_year) / days_in_year(tax_year)
    return min(1.0, max(0.0, ratio))


def apportion(amount: int, ratio: float) -> int:
    """Scale ``amount`` by the residency ratio, half-up to the cent."""
    if ratio >= 1.0:
        return amount
    return percent(amount, max(0.0, ratio))
