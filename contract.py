"""
Contract layer for bounded accumulators.

A Contract is the set of properties an accumulator must satisfy for a
given domain.  It is purely declarative - each property is a named
predicate over an accumulator and (optionally) a sample
``(start, step, steps)``; the factory decides which inputs to feed it.

Properties with ``arity == 0`` are fixed scenarios evaluated once.
Properties flagged ``integral_only`` compare against exact integer
arithmetic and are skipped for floating domains.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from accumulator import default_step
from domains import NumericDomain
from outcome import Ok, Overflow, RangeViolation, Underflow


# ---------------------------------------------------------------------------
# Core contract primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Property:
    """A single verifiable property of an accumulator."""

    name: str
    description: str
    predicate: Callable[..., bool]
    domain: NumericDomain
    arity: int = 3
    integral_only: bool = False

    def applies(self) -> bool:
        return self.domain.integral or not self.integral_only

    def check(self, *args: Any) -> bool:
        """Evaluate the property predicate with the given arguments."""
        return self.predicate(*args)


@dataclass
class Contract:
    """An ordered collection of properties that together form a contract."""

    name: str
    properties: list[Property] = field(default_factory=list)

    def add(self, prop: Property) -> None:
        self.properties.append(prop)

    def applicable(self) -> list[Property]:
        return [p for p in self.properties if p.applies()]

    def __iter__(self):
        return iter(self.properties)

    def __len__(self):
        return len(self.properties)


# ---------------------------------------------------------------------------
# Reference models
# ---------------------------------------------------------------------------

def exact_outcome(
    domain: NumericDomain, start: Any, step: Any, steps: int, sign: int
) -> tuple[bool, int]:
    """
    (fits, total) for ``start + sign*step*steps`` in exact integers.

    Partial sums move monotonically, so the whole run stays in range
    exactly when its end point does.
    """
    total = int(start) + sign * int(step) * steps
    return int(domain.lo) <= total <= int(domain.hi), total


def _matches_exact(
    outcome: Any, fits: bool, total: int, violation: type
) -> bool:
    if fits:
        return isinstance(outcome, Ok) and int(outcome.value) == total
    return isinstance(outcome, violation)


def _in_range(domain: NumericDomain, outcome: Any) -> bool:
    if not isinstance(outcome, Ok):
        return True
    return domain.lo <= outcome.value <= domain.hi


def _absorbing(outcome: Any, rerun: Callable[[int], Any]) -> bool:
    if not isinstance(outcome, RangeViolation):
        return True
    k = outcome.iteration
    return rerun(k) == outcome and rerun(k + 5) == outcome


# ---------------------------------------------------------------------------
# Contract builder
# ---------------------------------------------------------------------------

def accumulation_contract(domain: NumericDomain) -> Contract:
    """Build the full contract for accumulation in ``domain``."""
    contract = Contract(name=f"accumulation[{domain.name}]")

    contract.add(Property(
        name="add_exact",
        description="add(start, step, n) == Ok(start + step*n) when in range, else Overflow",
        predicate=lambda acc, start, step, n: _matches_exact(
            acc.add(start, step, n),
            *exact_outcome(domain, start, step, n, +1),
            Overflow,
        ),
        domain=domain,
        integral_only=True,
    ))

    contract.add(Property(
        name="subtract_exact",
        description="subtract(start, step, n) == Ok(start - step*n) when in range, else Underflow",
        predicate=lambda acc, start, step, n: _matches_exact(
            acc.subtract(start, step, n),
            *exact_outcome(domain, start, step, n, -1),
            Underflow,
        ),
        domain=domain,
        integral_only=True,
    ))

    contract.add(Property(
        name="closure",
        description="Every Ok value lies within [lo, hi]",
        predicate=lambda acc, start, step, n: (
            _in_range(domain, acc.add(start, step, n))
            and _in_range(domain, acc.subtract(start, step, n))
        ),
        domain=domain,
    ))

    contract.add(Property(
        name="zero_steps",
        description="add(start, step, 0) == subtract(start, step, 0) == Ok(start)",
        predicate=lambda acc, start, step, _: (
            acc.add(start, step, 0) == Ok(domain.cast(start))
            and acc.subtract(start, step, 0) == Ok(domain.cast(start))
        ),
        domain=domain,
    ))

    contract.add(Property(
        name="zero_step",
        description="add(start, 0, n) == subtract(start, 0, n) == Ok(start)",
        predicate=lambda acc, start, _, n: (
            acc.add(start, 0, n) == Ok(domain.cast(start))
            and acc.subtract(start, 0, n) == Ok(domain.cast(start))
        ),
        domain=domain,
    ))

    contract.add(Property(
        name="absorbing_failure",
        description="A violation at iteration k is identical for k and k+5 steps",
        predicate=lambda acc, start, step, n: (
            _absorbing(acc.add(start, step, n), lambda m: acc.add(start, step, m))
            and _absorbing(
                acc.subtract(start, step, n),
                lambda m: acc.subtract(start, step, m),
            )
        ),
        domain=domain,
    ))

    contract.add(Property(
        name="fifth_of_max",
        description="add(0, hi/5, 5) is Ok(5*(hi/5)); add(0, hi/5, 6) is Overflow",
        predicate=lambda acc: (
            acc.add(0, default_step(domain, 5), 5)
            == Ok(domain.dtype(5 * int(default_step(domain, 5))))
            and isinstance(acc.add(0, default_step(domain, 5), 6), Overflow)
        ),
        domain=domain,
        arity=0,
        integral_only=True,
    ))

    contract.add(Property(
        name="fifth_of_max_down",
        description="subtract(hi, hi/5, 5) is Ok(hi - 5*(hi/5)); 6 steps follow the exact model",
        predicate=lambda acc: (
            acc.subtract(domain.hi, default_step(domain, 5), 5)
            == Ok(domain.dtype(int(domain.hi) - 5 * int(default_step(domain, 5))))
            and _matches_exact(
                acc.subtract(domain.hi, default_step(domain, 5), 6),
                *exact_outcome(domain, domain.hi, default_step(domain, 5), 6, -1),
                Underflow,
            )
        ),
        domain=domain,
        arity=0,
        integral_only=True,
    ))

    contract.add(Property(
        name="sixth_step_overflows",
        description="add(0, hi/5, 6) is Overflow",
        predicate=lambda acc: isinstance(
            acc.add(0, default_step(domain, 5), 6), Overflow
        ),
        domain=domain,
        arity=0,
    ))

    return contract

