"""
Outcome of a bounded accumulation.

An accumulation either completes, carrying its value, or is refused at
some iteration because the next application would leave the domain.
A refused accumulation carries no partial value.

    Ok(value)
    Overflow(domain, iteration)     addition direction
    Underflow(domain, iteration)    subtraction direction
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> Any:
        return self.value

    def unwrap_or(self, default: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class RangeViolation:
    """The application at ``iteration`` (1-based) was refused."""

    domain: str
    iteration: int

    kind = "range violation"

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise OverflowError(
            f"{self.kind} in {self.domain} at iteration {self.iteration}"
        )

    def unwrap_or(self, default: Any) -> Any:
        return default


@dataclass(frozen=True)
class Overflow(RangeViolation):
    kind = "overflow"


@dataclass(frozen=True)
class Underflow(RangeViolation):
    kind = "underflow"


Outcome = Union[Ok, Overflow, Underflow]
