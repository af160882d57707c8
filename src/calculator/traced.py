"""
Traced values: amounts that carry their own provenance.

Every computed line is a TracedValue whose ``input_ids`` name the nodes it was
derived from. Together they form a directed acyclic graph that the
explanation layer walks to answer "where did this number come from?".

Node ids follow a dotted convention, ``<form>.<line>`` for computed lines
(``form1040.line16``, ``scheduleA.line7``, ``form8949.A.gainLoss``) and
``<document>:<id>:<box>`` for source document leaves (``w2:acme:box1``).
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple


@dataclass(frozen=True)
class TracedValue:
    """An integer-cent amount plus the node ids it was derived from."""
    amount: int
    node_id: str
    input_ids: Tuple[str, ...] = ()
    label: str = ""

    @property
    def dollars(self) -> float:
        return self.amount / 100

    def __str__(self) -> str:
        return f"{self.node_id}={self.amount}"


def traced_zero(node_id: str, label: Optional[str] = None) -> TracedValue:
    """A zero-amount node with no inputs (unused or suppressed line)."""
    return TracedValue(0, node_id, (), label or "")


def traced_from_computation(
    amount: int,
    node_id: str,
    input_ids: Iterable[str],
    label: Optional[str] = None,
) -> TracedValue:
    """A node asserting that ``amount`` was derived from ``input_ids``."""
    return TracedValue(int(amount), node_id, tuple(input_ids), label or "")


def traced_from_document(
    amount: int,
    document_type: str,
    document_id: str,
    box: str,
    label: Optional[str] = None,
) -> TracedValue:
    """A leaf node for a single source-document box, e.g. ``w2:acme:box1``."""
    node_id = document_node_id(document_type, document_id, box)
    return TracedValue(int(amount), node_id, (), label or f"{document_type.upper()} {document_id} {box}")


def document_node_id(document_type: str, document_id: str, box: str) -> str:
    return f"{document_type}:{document_id}:{box}"
