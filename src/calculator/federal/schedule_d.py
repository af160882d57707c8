"""
Form 8949 and Schedule D (Capital Gains and Losses).

Form 8949 groups transactions into reporting boxes A/B (short-term) and D/E
(long-term); Schedule D nets them with K-1 gains, capital gain distributions
and prior year carryovers, then limits a net loss to $3,000 ($1,500 MFS)
for Form 1040 line 7.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Tuple

from calculator.federal.schedule_k1 import k1_pairs
from calculator.tax_year_config import TaxYearConfig
from calculator.traced import TracedValue, traced_from_computation, traced_zero
from calculator.errors import FieldLookupError
from models.documents import CapitalTransaction, Form8949Category
from models.tax_return import TaxReturn

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Form8949CategoryTotals:
    category: Form8949Category
    transactions: Tuple[CapitalTransaction, ...]
    total_proceeds: TracedValue
    total_basis: TracedValue
    total_adjustments: TracedValue
    total_gain_loss: TracedValue

    def transaction_at(self, row: int) -> CapitalTransaction:
        """Row lookup used by form-field mapping; rows are zero-based."""
        if row < 0 or row >= len(self.transactions):
            raise FieldLookupError(
                f"Form 8949 box {self.category.value} has {len(self.transactions)} rows; row {row} requested"
            )
        return self.transactions[row]


@dataclass(frozen=True)
class Form8949Result:
    categories: Tuple[Form8949CategoryTotals, ...]

    def totals_for(self, category: Form8949Category) -> Form8949CategoryTotals:
        for totals in self.categories:
            if totals.category == category:
                return totals
        return _category_totals(category, [])


def _category_totals(category: Form8949Category, transactions: List[CapitalTransaction]) -> Form8949CategoryTotals:
    tx_ids = [f"tx:{t.id}" for t in transactions]
    prefix = f"form8949.{category.value}"
    box = f"Form 8949, Box {category.value}"
    return Form8949CategoryTotals(
        category=category,
        transactions=tuple(transactions),
        total_proceeds=traced_from_computation(
            sum(t.proceeds for t in transactions), f"{prefix}.proceeds", tx_ids, f"{box}: Total Proceeds"),
        total_basis=traced_from_computation(
            sum(t.cost_basis for t in transactions), f"{prefix}.basis", tx_ids, f"{box}: Total Basis"),
        total_adjustments=traced_from_computation(
            sum(t.adjustment_amount for t in transactions), f"{prefix}.adjustments", tx_ids, f"{box}: Total Adjustments"),
        total_gain_loss=traced_from_computation(
            sum(t.gain_loss for t in transactions), f"{prefix}.gainLoss", tx_ids, f"{box}: Total Gain/Loss"),
    )


def compute_form8949(transactions: List[CapitalTransaction]) -> Form8949Result:
    grouped: Dict[Form8949Category, List[CapitalTransaction]] = {c: [] for c in Form8949Category}
    for tx in transactions:
        grouped[tx.category].append(tx)
    return Form8949Result(
        categories=tuple(
            _category_totals(cat, txs) for cat, txs in grouped.items() if txs
        )
    )


@dataclass(frozen=True)
class ScheduleDResult:
    form8949: Form8949Result
    line1a: TracedValue   # box A gain/loss
    line1b: TracedValue   # box B gain/loss
    line5: TracedValue    # short-term from Schedule K-1
    line6: TracedValue    # short-term carryover (negative)
    line7: TracedValue    # net short-term
    line8a: TracedValue   # box D gain/loss
    line8b: TracedValue   # box E gain/loss
    line12: TracedValue   # long-term from Schedule K-1
    line13: TracedValue   # capital gain distributions
    line14: TracedValue   # long-term carryover (negative)
    line15: TracedValue   # net long-term
    line16: TracedValue   # combined
    line21: TracedValue   # to Form 1040 line 7 (loss-limited)
    short_term_carryforward: int
    long_term_carryforward: int

    @property
    def capital_loss_carryforward(self) -> int:
        return self.short_term_carryforward + self.long_term_carryforward


def _line(line: str, amount: int, inputs=()) -> TracedValue:
    return traced_from_computation(amount, f"scheduleD.{line}", inputs, f"Schedule D, Line {line[4:]}")


def _k1_line(line: str, pairs) -> TracedValue:
    pairs = [(amount, node) for amount, node in pairs if amount]
    if not pairs:
        return traced_zero(f"scheduleD.{line}", f"Schedule D, Line {line[4:]}")
    return _line(line, sum(a for a, _ in pairs), [n for _, n in pairs])


def split_carryforward(line7: int, line15: int, allowed_loss: int) -> Tuple[int, int]:
    """
    Capital Loss Carryover Worksheet: unused loss split into short-term and
    long-term parts. The allowed deduction absorbs short-term loss first.
    """
    st_carry = 0
    st_used = 0
    if line7 < 0:
        st_net = -line7 - max(0, line15)
        st_used = min(allowed_loss, max(0, st_net))
        st_carry = max(0, st_net - allowed_loss)
    lt_carry = 0
    if line15 < 0:
        lt_carry = max(0, -line15 - max(0, line7) - (allowed_loss - st_used))
    return st_carry, lt_carry


def compute_schedule_d(model: TaxReturn, config: TaxYearConfig) -> ScheduleDResult:
    form8949 = compute_form8949(model.capital_transactions)
    cat_a = form8949.totals_for(Form8949Category.A)
    cat_b = form8949.totals_for(Form8949Category.B)
    cat_d = form8949.totals_for(Form8949Category.D)
    cat_e = form8949.totals_for(Form8949Category.E)

    line1a = _line("line1a", cat_a.total_gain_loss.amount, ["form8949.A.gainLoss"])
    line1b = _line("line1b", cat_b.total_gain_loss.amount, ["form8949.B.gainLoss"])
    line5 = _k1_line("line5", k1_pairs(model, "short_term_capital_gain"))
    st_carryover = model.prior_year.short_term_loss_carryover
    line6 = _line("line6", -st_carryover if st_carryover > 0 else 0, ["priorYear.shortTermLossCarryover"] if st_carryover else [])
    line7 = _line("line7", line1a.amount + line1b.amount + line5.amount + line6.amount,
                  ["scheduleD.line1a", "scheduleD.line1b", "scheduleD.line5", "scheduleD.line6"])

    line8a = _line("line8a", cat_d.total_gain_loss.amount, ["form8949.D.gainLoss"])
    line8b = _line("line8b", cat_e.total_gain_loss.amount, ["form8949.E.gainLoss"])
    line12 = _k1_line("line12", k1_pairs(model, "long_term_capital_gain"))
    cap_gain_dist = sum(f.capital_gain_distributions for f in model.form1099_divs)
    if cap_gain_dist > 0:
        line13 = _line("line13", cap_gain_dist, [f"1099div:{f.id}:box2a" for f in model.form1099_divs])
    else:
        line13 = traced_zero("scheduleD.line13", "Schedule D, Line 13")
    lt_carryover = model.prior_year.long_term_loss_carryover
    line14 = _line("line14", -lt_carryover if lt_carryover > 0 else 0, ["priorYear.longTermLossCarryover"] if lt_carryover else [])
    line15 = _line("line15", line8a.amount + line8b.amount + line12.amount + line13.amount + line14.amount,
                   ["scheduleD.line8a", "scheduleD.line8b", "scheduleD.line12", "scheduleD.line13", "scheduleD.line14"])

    line16 = _line("line16", line7.amount + line15.amount, ["scheduleD.line7", "scheduleD.line15"])

    loss_limit = config.lookup("capital_loss_limit", model.filing_status)
    if line16.amount >= 0:
        line21_amount = line16.amount
        st_carry, lt_carry = 0, 0
    else:
        line21_amount = max(line16.amount, -loss_limit)
        st_carry, lt_carry = split_carryforward(line7.amount, line15.amount, -line21_amount)
    line21 = _line("line21", line21_amount, ["scheduleD.line16"])

    logger.debug("Schedule D: line16=%s line21=%s carryforward=(%s, %s)",
                 line16.amount, line21_amount, st_carry, lt_carry)
    return ScheduleDResult(
        form8949=form8949,
        line1a=line1a, line1b=line1b, line5=line5, line6=line6, line7=line7,
        line8a=line8a, line8b=line8b, line12=line12, line13=line13, line14=line14, line15=line15,
        line16=line16, line21=line21,
        short_term_carryforward=st_carry,
        long_term_carryforward=lt_carry,
    )
