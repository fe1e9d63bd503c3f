"""
Checked accumulation over fixed-width numeric domains.

Each operation repeatedly applies a step to a start value and checks,
*before* every application, whether the result would leave the
domain's range.  The application that would leave the range is never
executed; the call returns ``Overflow`` / ``Underflow`` instead and no
partially accumulated value escapes.

Check expressions (evaluated in the domain's own type, where they
cannot themselves overflow for in-domain inputs):

    add       step > 0:  result > hi - step
              step < 0:  result < lo - step
    subtract  step > 0:  result < lo + step
              step < 0:  result > hi + step
"""

from __future__ import annotations

import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np

from domains import NumericDomain, resolve_domain
from logging_config import get_logger
from outcome import Ok, Outcome, Overflow, Underflow

logger = get_logger(__name__)


class Direction(str, Enum):
    ADD = "add"
    SUBTRACT = "subtract"


def _check_steps(steps: Any) -> int:
    if isinstance(steps, (bool, np.bool_)):
        raise TypeError("steps must be an integer, got bool")
    try:
        count = operator.index(steps)
    except TypeError:
        raise TypeError(
            f"steps must be an integer, got {type(steps).__name__}"
        ) from None
    if count < 0:
        raise ValueError(f"steps must be a non-negative count, got {count}")
    return count


# ---------------------------------------------------------------------------
# Core operations
# ---------------------------------------------------------------------------

def bounded_add(
    domain: NumericDomain | str, start: Any, increment: Any, steps: int
) -> Outcome:
    """Add ``increment`` to ``start`` ``steps`` times, or report Overflow."""
    domain = resolve_domain(domain)
    count = _check_steps(steps)
    result = domain.cast(start)
    increment = domain.cast(increment)

    if count == 0 or increment == 0:
        return Ok(result)

    lo, hi = domain.lo, domain.hi
    for i in range(count):
        if (increment > 0 and result > hi - increment) or (
            increment < 0 and result < lo - increment
        ):
            logger.debug(
                "overflow in %s at iteration %d of %d", domain, i + 1, count
            )
            return Overflow(domain=domain.name, iteration=i + 1)
        result = result + increment

    return Ok(result)


def bounded_subtract(
    domain: NumericDomain | str, start: Any, decrement: Any, steps: int
) -> Outcome:
    """Subtract ``decrement`` from ``start`` ``steps`` times, or report Underflow."""
    domain = resolve_domain(domain)
    count = _check_steps(steps)
    result = domain.cast(start)
    decrement = domain.cast(decrement)

    if count == 0 or decrement == 0:
        return Ok(result)

    lo, hi = domain.lo, domain.hi
    for i in range(count):
        if (decrement > 0 and result < lo + decrement) or (
            decrement < 0 and result > hi + decrement
        ):
            logger.debug(
                "underflow in %s at iteration %d of %d", domain, i + 1, count
            )
            return Underflow(domain=domain.name, iteration=i + 1)
        result = result - decrement

    return Ok(result)


def bounded_accumulate(
    domain: NumericDomain | str,
    start: Any,
    step: Any,
    steps: int,
    direction: Direction | str = Direction.ADD,
) -> Outcome:
    direction = Direction(direction)
    if direction is Direction.ADD:
        return bounded_add(domain, start, step, steps)
    return bounded_subtract(domain, start, step, steps)


def default_step(domain: NumericDomain | str, steps: int) -> Any:
    """
    The step that reaches (at most) MAX in ``steps`` applications:
    ``MAX / steps``, truncated for integral domains.
    """
    domain = resolve_domain(domain)
    count = _check_steps(steps)
    if count == 0:
        raise ValueError("steps must be positive to derive a step")
    if domain.integral:
        return domain.dtype(int(domain.hi) // count)
    return domain.hi / domain.dtype(count)


# ---------------------------------------------------------------------------
# Domain-bound form
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BoundedAccumulator:
    """The three operations bound to a single numeric domain."""

    domain: NumericDomain

    def add(self, start: Any, increment: Any, steps: int) -> Outcome:
        return bounded_add(self.domain, start, increment, steps)

    def subtract(self, start: Any, decrement: Any, steps: int) -> Outcome:
        return bounded_subtract(self.domain, start, decrement, steps)

    def accumulate(
        self,
        start: Any,
        step: Any,
        steps: int,
        direction: Direction | str = Direction.ADD,
    ) -> Outcome:
        return bounded_accumulate(self.domain, start, step, steps, direction)

    def default_step(self, steps: int) -> Any:
        return default_step(self.domain, steps)
