"""
Option type for schedule and credit sub-results.

A sub-result is either ``Present(value)`` when its schedule was triggered, or
``ABSENT`` when it was not. Callers distinguish the two cases explicitly:

    if isinstance(result.schedule_d, Present):
        sched_d = result.schedule_d.value
"""

from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar, Union

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True)
class Present(Generic[T]):
    value: T

    @property
    def is_present(self) -> bool:
        return True

    def get(self) -> T:
        return self.value

    def get_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Present[U]":
        return Present(fn(self.value))

    def to_optional(self) -> Optional[T]:
        return self.value


@dataclass(frozen=True)
class Absent:
    @property
    def is_present(self) -> bool:
        return False

    def get(self):
        raise LookupError("sub-result was not computed")

    def get_or(self, default):
        return default

    def map(self, fn) -> "Absent":
        return self

    def to_optional(self):
        return None

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent()

Outcome = Union[Present[T], Absent]


def present_if(condition: bool, build: Callable[[], T]) -> "Outcome[T]":
    """Build the sub-result only when ``condition`` holds."""
    return Present(build()) if condition else ABSENT
