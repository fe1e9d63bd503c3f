"""
Console driver: the classic numeric overflow / underflow exercise.

For each domain the overflow test starts at 0 and adds ``MAX / steps``
first ``steps`` times (expected to fit) and then ``steps + 1`` times
(expected to be refused).  The underflow test starts at MAX and
subtracts the same step.  Results are printed in the classic banner
format.

Run::

    bounded-accumulation                     # every registry domain
    bounded-accumulation --c-types           # C primitive names, LP64
    bounded-accumulation --domain uint8 --verify
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Any, Iterable

from accumulator import BoundedAccumulator, Direction, bounded_accumulate, default_step
from domains import C_TYPES, DOMAINS, NumericDomain, UnknownDomainError, resolve_domain
from factory import AccumulatorFactory
from logging_config import get_logger, setup_logging
from outcome import Ok, Outcome
from settings import Settings

logger = get_logger(__name__)

STAR_LINE = "*" * 50


@dataclass(frozen=True)
class DomainRun:
    """One overflow or underflow test for a single domain."""

    domain: NumericDomain
    label: str
    direction: Direction
    start: Any
    step: Any
    steps: int
    within: Outcome     # `steps` applications
    beyond: Outcome     # `steps + 1` applications


def _run(
    domain: NumericDomain, direction: Direction, steps: int, label: str | None
) -> DomainRun:
    step = default_step(domain, steps)
    start = domain.dtype(0) if direction is Direction.ADD else domain.hi
    return DomainRun(
        domain=domain,
        label=label or domain.name,
        direction=direction,
        start=start,
        step=step,
        steps=steps,
        within=bounded_accumulate(domain, start, step, steps, direction),
        beyond=bounded_accumulate(domain, start, step, steps + 1, direction),
    )


def run_overflow_test(
    domain: NumericDomain | str, steps: int = 5, label: str | None = None
) -> DomainRun:
    return _run(resolve_domain(domain), Direction.ADD, steps, label)


def run_underflow_test(
    domain: NumericDomain | str, steps: int = 5, label: str | None = None
) -> DomainRun:
    return _run(resolve_domain(domain), Direction.SUBTRACT, steps, label)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def _format_outcome(run: DomainRun, outcome: Outcome, beyond: bool) -> str:
    if run.direction is Direction.ADD:
        verb, event = "Adding", "Overflow"
    else:
        verb, event = "Subtracting", "Underflow"

    if isinstance(outcome, Ok):
        with_or_without = "With" if beyond else "Without"
        return f"\t{verb} Numbers {with_or_without} {event}: {outcome.value}"
    return f"\t{event} detected!"


def format_run(run: DomainRun) -> list[str]:
    title = "Overflow" if run.direction is Direction.ADD else "Underflow"
    return [
        f"{title} Test of Type = {run.label}",
        _format_outcome(run, run.within, beyond=False),
        _format_outcome(run, run.beyond, beyond=True),
    ]


def _section(title: str) -> list[str]:
    return ["", STAR_LINE, f"*** Running {title} Tests ***", STAR_LINE]


def render_report(
    targets: Iterable[tuple[str, NumericDomain]], steps: int = 5
) -> str:
    """Full report for ``(label, domain)`` targets."""
    targets = list(targets)
    lines = ["Starting Numeric Underflow / Overflow Tests!"]

    lines += _section("Overflow")
    for label, domain in targets:
        lines += format_run(run_overflow_test(domain, steps, label))

    lines += _section("Underflow")
    for label, domain in targets:
        lines += format_run(run_underflow_test(domain, steps, label))

    lines += ["", "All Numeric Underflow / Overflow Tests Complete!"]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bounded-accumulation",
        description="Run the numeric overflow / underflow exercise.",
    )
    parser.add_argument(
        "--domain", action="append", dest="domains", metavar="NAME",
        help="domain or C type name (repeatable; default: all domains)",
    )
    parser.add_argument(
        "--c-types", action="store_true",
        help="run the C primitive types (LP64) with their C names",
    )
    parser.add_argument("--steps", type=int, default=None)
    parser.add_argument(
        "--verify", action="store_true",
        help="verify each domain's accumulator against its contract",
    )
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--json-logs", action="store_true")
    return parser


def _targets(args: argparse.Namespace) -> list[tuple[str, NumericDomain]]:
    if args.domains:
        return [(name, resolve_domain(name)) for name in args.domains]
    if args.c_types:
        return list(C_TYPES.items())
    return list(DOMAINS.items())


def main(argv: list[str] | None = None) -> int:
    args = _parser().parse_args(argv)
    settings = Settings.from_env()
    setup_logging(
        level=args.log_level or settings.log_level,
        json_format=args.json_logs or settings.log_json,
    )

    steps = args.steps if args.steps is not None else settings.default_steps
    if steps < 1:
        print(f"error: --steps must be >= 1, got {steps}", file=sys.stderr)
        return 2

    try:
        targets = _targets(args)
    except UnknownDomainError as e:
        print(f"error: {e.args[0]}", file=sys.stderr)
        return 2

    logger.debug("running %d targets with steps=%d", len(targets), steps)
    print(render_report(targets, steps))

    if not args.verify:
        return 0

    print()
    failed = False
    seen: set[str] = set()
    for _, domain in targets:
        if domain.name in seen:
            continue
        seen.add(domain.name)
        report = AccumulatorFactory.verify(
            BoundedAccumulator(domain=domain),
            samples=settings.verification_samples,
            seed=settings.verification_seed,
        )
        print(report.summary())
        failed = failed or not report.passed

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
