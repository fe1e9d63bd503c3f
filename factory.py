"""
The accumulator factory.

The factory does NOT just construct accumulators - it *verifies* them
against their contract before releasing them.

Flow:
  1. Caller requests an accumulator for a domain.
  2. Factory builds the BoundedAccumulator.
  3. Factory runs every applicable contract property against
     edge-case and seeded random samples of (start, step, steps).
  4. If verification passes  -> return the accumulator.
     If verification fails   -> raise, never hand out a broken instance.

No domain in the registry is small enough for exhaustive checking of
all (start, step, steps) triples, so verification is always
sample-based; the hypothesis suite in tests/ explores further.
"""

from __future__ import annotations

import itertools
import random
from dataclasses import dataclass, field
from typing import Any

from accumulator import BoundedAccumulator, default_step
from contract import Contract, Property, accumulation_contract
from domains import NumericDomain, resolve_domain
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class VerificationResult:
    """Outcome of checking one property over the sample set."""

    property_name: str
    passed: bool
    counterexample: tuple | None = None
    tests_run: int = 0

    def describe(self) -> str:
        if self.passed:
            return f"[PASS] {self.property_name} ({self.tests_run} checked)"
        line = f"[FAIL] {self.property_name} at check {self.tests_run}:"
        if self.counterexample:
            start, step, steps = self.counterexample
            line += f" start={start} step={step} steps={steps}"
        return line

    def __repr__(self) -> str:
        return self.describe()


@dataclass
class VerificationReport:
    """Every property result for one domain's contract."""

    contract_name: str
    domain: str = ""
    samples: int = 0
    seed: int | None = None
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def failures(self) -> list[VerificationResult]:
        return [r for r in self.results if not r.passed]

    def summary(self) -> str:
        header = f"--- {self.contract_name}"
        if self.samples:
            header += f": {self.samples} samples, seed {self.seed}"
        lines = [header + " ---"]
        lines += [f"  {r.describe()}" for r in self.results]
        if self.passed:
            lines.append(f"  => ALL PASSED ({len(self.results)} properties)")
        else:
            lines.append(
                f"  => FAILED ({len(self.failures)} of {len(self.results)} properties)"
            )
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when an accumulator fails its contract."""

    def __init__(self, report: VerificationReport):
        self.report = report
        names = ", ".join(r.property_name for r in report.failures)
        super().__init__(
            f"{report.domain or report.contract_name} accumulator failed "
            f"{names}\n{report.summary()}"
        )


# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class AccumulatorFactory:
    """Produces BoundedAccumulator instances that passed their contract."""

    DEFAULT_SAMPLES = 500
    MAX_SAMPLE_STEPS = 16

    @classmethod
    def create(
        cls,
        domain: NumericDomain | str,
        samples: int | None = None,
        seed: int | None = 0,
    ) -> BoundedAccumulator:
        """Build, verify, and return a BoundedAccumulator."""
        acc = BoundedAccumulator(domain=resolve_domain(domain))
        report = cls.verify(acc, samples=samples, seed=seed)
        if not report.passed:
            raise VerificationError(report)
        return acc

    @classmethod
    def verify(
        cls,
        acc: BoundedAccumulator,
        samples: int | None = None,
        seed: int | None = 0,
    ) -> VerificationReport:
        """Run the domain's contract against ``acc`` and report."""
        contract = accumulation_contract(acc.domain)
        inputs = _generate_samples(
            acc.domain,
            count=samples or cls.DEFAULT_SAMPLES,
            max_steps=cls.MAX_SAMPLE_STEPS,
            rng=random.Random(seed),
        )
        report = cls._verify_contract(contract, acc, inputs, seed=seed)
        if report.passed:
            logger.info(
                "%s verified (%d properties, %d samples)",
                contract.name,
                len(report.results),
                report.samples,
            )
        else:
            logger.warning(
                "%s failed: %s",
                contract.name,
                ", ".join(r.property_name for r in report.failures),
            )
        return report

    # -- internal ---------------------------------------------------------

    @classmethod
    def _verify_contract(
        cls,
        contract: Contract,
        acc: BoundedAccumulator,
        inputs: list[tuple[Any, Any, int]],
        seed: int | None = None,
    ) -> VerificationReport:
        report = VerificationReport(
            contract_name=contract.name,
            domain=acc.domain.name,
            samples=len(inputs),
            seed=seed,
        )
        for prop in contract.applicable():
            report.results.append(cls._verify_property(prop, acc, inputs))
        return report

    @classmethod
    def _verify_property(
        cls,
        prop: Property,
        acc: BoundedAccumulator,
        inputs: list[tuple[Any, Any, int]],
    ) -> VerificationResult:
        if prop.arity == 0:
            inputs = [()]

        tests_run = 0
        for combo in inputs:
            tests_run += 1
            if not prop.check(acc, *combo):
                return VerificationResult(
                    property_name=prop.name,
                    passed=False,
                    counterexample=combo or None,
                    tests_run=tests_run,
                )

        return VerificationResult(
            property_name=prop.name,
            passed=True,
            tests_run=tests_run,
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def edge_values(domain: NumericDomain) -> list[Any]:
    """Boundary and characteristic values of a domain, deduplicated."""
    fifth = default_step(domain, 5)
    if domain.integral:
        candidates = [
            int(domain.lo), int(domain.lo) + 1, -int(fifth), -1, 0, 1,
            int(fifth), int(domain.hi) - 1, int(domain.hi),
        ]
    else:
        candidates = [domain.lo, -fifth, -1, 0, 1, fifth, domain.hi]

    values: list[Any] = []
    for v in candidates:
        if not domain.contains(v):
            continue
        cast = domain.cast(v)
        if cast not in values:
            values.append(cast)
    return values


def _random_value(domain: NumericDomain, rng: random.Random) -> Any:
    if domain.integral:
        return domain.dtype(rng.randint(int(domain.lo), int(domain.hi)))
    # hi * u for u in [-1, 1) avoids computing hi - lo, which overflows
    return domain.hi * domain.dtype(2.0 * rng.random() - 1.0)


def _generate_samples(
    domain: NumericDomain,
    count: int,
    max_steps: int,
    rng: random.Random,
) -> list[tuple[Any, Any, int]]:
    """Edge-case combinations followed by random fill up to ``count``."""
    edges = edge_values(domain)
    step_counts = [0, 1, 2, 5, 6, max_steps]

    samples: list[tuple[Any, Any, int]] = list(
        itertools.product(edges, edges, step_counts)
    )

    while len(samples) < count:
        samples.append((
            _random_value(domain, rng),
            _random_value(domain, rng),
            rng.randint(0, max_steps),
        ))

    return samples
