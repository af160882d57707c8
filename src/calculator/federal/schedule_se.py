"""
Schedule SE (Self-Employment Tax).

Net earnings are 92.35% of Schedule C profit plus partnership self-employment
earnings. The 12.4% Social Security part applies only up to the wage base left
after W-2 Social Security wages; the 2.9% Medicare part has no ceiling.
Earnings under $400 owe nothing.
"""

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from calculator.decimal_math import percent
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleSEResult:
    line2: TracedValue    # Schedule C profit plus K-1 box 14 code A
    line3: TracedValue    # net earnings (92.35%)
    line4a: TracedValue   # earnings subject to Social Security
    line4b: TracedValue   # Social Security portion
    line5: TracedValue    # Medicare portion
    line6: TracedValue    # total SE tax
    deductible_half: TracedValue

    @property
    def total_tax(self) -> int:
        return self.line6.amount


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"scheduleSE.{line}", inputs, f"Schedule SE, Line {line[4:]}")


def compute_schedule_se(
    net_profit: int,
    w2_ss_wages: int,
    config: TaxYearConfig,
    partnership_earnings: Sequence[Tuple[int, str]] = (),
) -> ScheduleSEResult:
    """
    Args:
        net_profit: Schedule C profit (Schedule 1 line 3)
        w2_ss_wages: W-2 Social Security wages already taxed
        config: Year configuration
        partnership_earnings: ``(amount, node_id)`` K-1 self-employment earnings
    """
    inputs = ["schedule1.line3"] if net_profit else []
    partnership = [(a, n) for a, n in partnership_earnings if a]
    inputs += [n for _, n in partnership]
    profit = max(0, net_profit + sum(a for a, _ in partnership))
    line2 = _line("line2", profit, inputs)
    earnings = percent(profit, config.se_net_earnings_factor)
    if earnings < config.se_minimum_earnings:
        earnings = 0
    line3 = _line("line3", earnings, ["scheduleSE.line2"])

    remaining_base = max(0, config.ss_wage_base - w2_ss_wages)
    ss_earnings = min(earnings, remaining_base)
    line4a = _line("line4a", ss_earnings, ["scheduleSE.line3"])
    line4b = _line("line4b", percent(ss_earnings, config.se_ss_rate), ["scheduleSE.line4a"])
    line5 = _line("line5", percent(earnings, config.se_medicare_rate), ["scheduleSE.line3"])
    total = line4b.amount + line5.amount
    line6 = _line("line6", total, ["scheduleSE.line4b", "scheduleSE.line5"])
    half = traced_from_computation(
        percent(total, 0.5), "scheduleSE.deductibleHalf", ["scheduleSE.line6"],
        "Schedule SE, Deductible part of SE tax",
    )
    logger.debug("Schedule SE: earnings=%s ss_base_left=%s tax=%s", earnings, remaining_base, total)
    return ScheduleSEResult(
        line2=line2, line3=line3, line4a=line4a, line4b=line4b,
        line5=line5, line6=line6, deductible_half=half,
    )
