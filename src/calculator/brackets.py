"""
Progressive bracket tax and the Qualified Dividends and Capital Gain Tax
Worksheet (Form 1040 line 16).

Bracket tables are ordered sequences of ``Bracket(limit, rate)`` where
``limit`` is the upper bound of the bracket in cents and the top bracket uses
``math.inf``. The same evaluator serves federal ordinary rates, the 0/15/20%
preferential rates and every state schedule.
"""

import logging
import math
from decimal import Decimal
from typing import Iterable, NamedTuple, Sequence, Tuple, Union

from calculator.decimal_math import cents, dollars_to_cents, to_decimal
from calculator.errors import BracketTableError

logger = logging.getLogger(__name__)


class Bracket(NamedTuple):
    limit: Union[int, float]
    rate: float


BracketTable = Tuple[Bracket, ...]


def brackets_from_floors(floors: Sequence[Tuple[float, float]]) -> BracketTable:
    """
    Convert a floor-format table ``[(0, 0.10), (11925, 0.12), ...]`` in dollars
    into limit-format cents.

    Examples:
        >>> brackets_from_floors([(0, 0.10), (100, 0.20)])
        (Bracket(limit=10000, rate=0.1), Bracket(limit=inf, rate=0.2))
    """
    out = []
    for idx, (_, rate) in enumerate(floors):
        if idx + 1 < len(floors):
            limit = dollars_to_cents(floors[idx + 1][0])
        else:
            limit = math.inf
        out.append(Bracket(limit, rate))
    return tuple(out)


def brackets_from_limits(limits: Sequence[Tuple[float, float]]) -> BracketTable:
    """Convert a limit-format table in dollars (top limit ``math.inf``) to cents."""
    return tuple(
        Bracket(limit if math.isinf(limit) else dollars_to_cents(limit), rate)
        for limit, rate in limits
    )


def _validated(brackets: Iterable) -> BracketTable:
    try:
        table = tuple(Bracket(*b) for b in brackets)
    except TypeError as exc:
        raise BracketTableError(f"bracket entries must be (limit, rate) pairs: {exc}") from exc
    for b in table:
        if not isinstance(b.limit, (int, float)) or not isinstance(b.rate, (int, float)):
            raise BracketTableError(f"non-numeric bracket entry {b!r}")
        if b.rate < 0:
            raise BracketTableError(f"negative bracket rate {b.rate}")
    return table


def compute_bracket_tax(taxable_income: int, brackets: Iterable) -> int:
    """
    Tax on ``taxable_income`` cents under a progressive bracket table.

    Each marginal slice is ``min(remaining, limit - prev_limit)``, clipped to
    zero so that a limit at or below the previous one contributes nothing. The
    sum is rounded once.

    Examples:
        >>> compute_bracket_tax(0, [(math.inf, 0.10)])
        0
        >>> compute_bracket_tax(2000000, [(1000000, 0.10), (math.inf, 0.20)])
        300000
    """
    table = _validated(brackets)
    if taxable_income <= 0:
        return 0

    remaining = Decimal(taxable_income)
    prev_limit = Decimal(0)
    tax = Decimal(0)
    for limit, rate in table:
        if remaining <= 0:
            break
        if math.isinf(limit):
            width = remaining
        else:
            limit_d = to_decimal(limit)
            width = max(Decimal(0), min(remaining, limit_d - prev_limit))
            prev_limit = max(prev_limit, limit_d)
        tax += width * to_decimal(rate)
        remaining -= width
    return cents(tax)


def marginal_rate(taxable_income: int, brackets: Iterable) -> float:
    """Rate applied to the last cent of ``taxable_income``."""
    table = _validated(brackets)
    for limit, rate in table:
        if taxable_income < limit:
            return rate
    return table[-1].rate if table else 0.0


def net_capital_gain_for_worksheet(schedule_d_line15: int, schedule_d_line16: int) -> int:
    """
    Worksheet line 3: the smaller of Schedule D lines 15 and 16, or zero when
    either is zero or a loss.
    """
    if schedule_d_line15 <= 0 or schedule_d_line16 <= 0:
        return 0
    return min(schedule_d_line15, schedule_d_line16)


def qdcg_worksheet_applies(qualified_dividends: int, net_capital_gain: int) -> bool:
    return qualified_dividends > 0 or net_capital_gain > 0


def compute_qdcg_tax(
    taxable_income: int,
    qualified_dividends: int,
    net_capital_gain: int,
    ordinary_brackets: BracketTable,
    preferential_brackets: BracketTable,
) -> int:
    """
    Qualified Dividends and Capital Gain Tax Worksheet.

    Preferential income (qualified dividends plus net capital gain, limited to
    taxable income) stacks on top of ordinary income; the slice of each
    preferential bracket left above the ordinary portion is taxed at that
    bracket's rate. The result never exceeds tax on all income at ordinary
    rates (worksheet lines 24-25).
    """
    if taxable_income <= 0:
        return 0

    preferential = min(max(0, qualified_dividends) + max(0, net_capital_gain), taxable_income)
    ordinary_portion = taxable_income - preferential
    ordinary_tax = compute_bracket_tax(ordinary_portion, ordinary_brackets)

    pref_tax = Decimal(0)
    stacked_floor = Decimal(ordinary_portion)
    top = Decimal(taxable_income)
    prev_limit = Decimal(0)
    for limit, rate in _validated(preferential_brackets):
        upper = top if math.isinf(limit) else min(top, to_decimal(limit))
        lower = max(stacked_floor, prev_limit)
        if upper > lower:
            pref_tax += (upper - lower) * to_decimal(rate)
        if not math.isinf(limit):
            prev_limit = max(prev_limit, to_decimal(limit))
        if prev_limit >= top:
            break

    stacked = ordinary_tax + cents(pref_tax)
    all_ordinary = compute_bracket_tax(taxable_income, ordinary_brackets)
    logger.debug(
        "QDCG worksheet: ordinary=%s preferential=%s stacked=%s all_ordinary=%s",
        ordinary_portion, preferential, stacked, all_ordinary,
    )
    return min(stacked, all_ordinary)


def compute_tax_with_preferential_rates(
    taxable_income: int,
    qualified_dividends: int,
    net_capital_gain: int,
    ordinary_brackets: BracketTable,
    preferential_brackets: BracketTable,
) -> Tuple[int, bool]:
    """
    Line 16 selection: the worksheet when it applies, plain brackets otherwise.

    Returns ``(tax, used_worksheet)``.
    """
    if qdcg_worksheet_applies(qualified_dividends, net_capital_gain):
        return (
            compute_qdcg_tax(
                taxable_income, qualified_dividends, net_capital_gain,
                ordinary_brackets, preferential_brackets,
            ),
            True,
        )
    return compute_bracket_tax(taxable_income, ordinary_brackets), False
