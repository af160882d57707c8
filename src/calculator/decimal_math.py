"""
Decimal Math Utilities for Tax Calculations.

Every amount in the engine is an integer number of cents. Rates are carried as
floats in configuration (0.22 for 22%) but all multiplication happens in
Decimal so that results are reproducible and rounded exactly once, half-up, at
the point of computation.

Why not float arithmetic?
- Float: 0.1 + 0.2 = 0.30000000000000004
- Decimal: 0.1 + 0.2 = 0.3
- Python's round() uses banker's rounding (round(2.5) == 2); IRS worksheets
  round half-up.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union
import logging

logger = logging.getLogger(__name__)

# Type alias for values that can be converted to Decimal
Numeric = Union[int, float, str, Decimal]

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")


def to_decimal(value: Numeric) -> Decimal:
    """
    Convert a numeric value to Decimal.

    Examples:
        >>> to_decimal(0.22)
        Decimal('0.22')
        >>> to_decimal(100)
        Decimal('100')
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Convert float to string first to preserve representation
        return Decimal(str(value))
    return Decimal(value)


def cents(value: Numeric) -> int:
    """
    Round a fractional cent amount to whole cents, half-up.

    Examples:
        >>> cents(Decimal("1234.5"))
        1235
        >>> cents(-0.5)
        -1
    """
    return int(to_decimal(value).quantize(ONE, rounding=ROUND_HALF_UP))


def dollars_to_cents(value: Numeric) -> int:
    """
    Convert a dollar figure to integer cents.

    Examples:
        >>> dollars_to_cents(11925)
        1192500
        >>> dollars_to_cents("100.10")
        10010
    """
    return cents(to_decimal(value) * HUNDRED)


def percent(amount: int, rate: Numeric) -> int:
    """
    Apply a rate to a cent amount, rounding half-up.

    Examples:
        >>> percent(2000000, 0.30)
        600000
        >>> percent(1001, 0.5)
        501
    """
    return cents(to_decimal(amount) * to_decimal(rate))


def ratio_of(amount: int, numerator: Numeric, denominator: Numeric) -> int:
    """
    ``amount * numerator / denominator`` rounded half-up; zero when the
    denominator is zero.
    """
    denom = to_decimal(denominator)
    if denom == 0:
        return 0
    return cents(to_decimal(amount) * to_decimal(numerator) / denom)


def phaseout_steps(excess: int, step: int) -> int:
    """
    Number of whole-or-partial ``step`` increments contained in ``excess``.

    Used by credits reduced "for each $1,000 or fraction thereof".
    """
    if excess <= 0 or step <= 0:
        return 0
    return -(-excess // step)


def round_up_to(value: int, multiple: int) -> int:
    """Round a positive cent amount up to the next multiple (e.g. $10 for IRA phase-outs)."""
    if value <= 0:
        return 0
    return -(-value // multiple) * multiple


def format_money(value: int) -> str:
    """
    Format an integer cent amount as a dollar string.

    Examples:
        >>> format_money(123456789)
        '$1,234,567.89'
        >>> format_money(-5050)
        '-$50.50'
    """
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value) / 100:,.2f}"
