"""
Schedule K-1 routing.

Each K-1 box lands on the line the K-1 instructions send it to:

    Box 1, 2 and 4   Schedule E Part II, then Schedule 1 line 5
    Box 5            Form 1040 line 2b
    Box 6a / 6b      Form 1040 lines 3b / 3a
    Box 8 / 9a       Schedule D lines 5 / 12
    Box 14 code A    Schedule SE line 2
    Box 20 code Z    Form 8995

The K-1 amounts themselves are leaves (``k1:<id>:box1``); the lines that
receive them cite those leaves directly.
"""

from typing import List, Tuple

from calculator.traced import document_node_id
from models.documents import ScheduleK1
from models.tax_return import TaxReturn

K1_BOXES = {
    "ordinary_business_income": ("box1", "Box 1 ordinary business income"),
    "net_rental_income": ("box2", "Box 2 net rental real estate income"),
    "guaranteed_payments": ("box4", "Box 4 guaranteed payments"),
    "interest_income": ("box5", "Box 5 interest income"),
    "ordinary_dividends": ("box6a", "Box 6a ordinary dividends"),
    "qualified_dividends": ("box6b", "Box 6b qualified dividends"),
    "short_term_capital_gain": ("box8", "Box 8 net short-term capital gain"),
    "long_term_capital_gain": ("box9a", "Box 9a net long-term capital gain"),
    "self_employment_earnings": ("box14A", "Box 14 code A self-employment earnings"),
    "section_199a_qbi": ("box20Z", "Box 20 code Z qualified business income"),
}


def k1_node(k1: ScheduleK1, field: str) -> str:
    return document_node_id("k1", k1.id, K1_BOXES[field][0])


def k1_pairs(model: TaxReturn, field: str) -> List[Tuple[int, str]]:
    """``(amount, node_id)`` for one box across every K-1 on the return."""
    return [(getattr(k, field), k1_node(k, field)) for k in model.schedule_k1s]


def k1_se_pairs(model: TaxReturn) -> List[Tuple[int, str]]:
    """Schedule SE earnings; box 4 stands in when box 14 code A was not entered."""
    pairs = []
    for k in model.schedule_k1s:
        field = "self_employment_earnings" if k.self_employment_earnings is not None else "guaranteed_payments"
        pairs.append((k.se_earnings, k1_node(k, field)))
    return pairs


def has_k1_capital_gains(model: TaxReturn) -> bool:
    return any(k.has_capital_gains for k in model.schedule_k1s)


def has_k1_schedule_e_income(model: TaxReturn) -> bool:
    return any(
        k.ordinary_business_income or k.net_rental_income or k.guaranteed_payments
        for k in model.schedule_k1s
    )
