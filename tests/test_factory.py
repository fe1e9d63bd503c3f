"""
Contract conformance tests.

These test the factory's end-to-end verification:
  - A correct accumulator passes verification in every domain.
  - A broken accumulator is rejected with a counterexample.
  - Scenario properties run once; sampled properties cover the edges.
"""

from __future__ import annotations

import random
from dataclasses import dataclass

import pytest

from accumulator import BoundedAccumulator
from contract import Contract, Property, accumulation_contract, exact_outcome
from domains import DOMAINS, FLOAT64, INT8, UINT8
from factory import (
    AccumulatorFactory,
    VerificationError,
    VerificationReport,
    _generate_samples,
    edge_values,
)
from outcome import Ok


# ---------------------------------------------------------------------------
# Deliberately broken accumulators
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class WrappingAccumulator(BoundedAccumulator):
    """Adds with modular wrap-around instead of refusing."""

    def add(self, start, increment, steps):
        lo, hi = int(self.domain.lo), int(self.domain.hi)
        raw = int(start) + int(increment) * steps
        return Ok(self.domain.dtype(lo + (raw - lo) % (hi - lo + 1)))


@dataclass(frozen=True)
class PartialAccumulator(BoundedAccumulator):
    """Returns the last in-range value instead of reporting Underflow."""

    def subtract(self, start, decrement, steps):
        outcome = super().subtract(start, decrement, steps)
        if outcome.ok:
            return outcome
        return super().subtract(start, decrement, outcome.iteration - 1)


# ---------------------------------------------------------------------------
# Factory produces verified accumulators
# ---------------------------------------------------------------------------

class TestFactoryProducesVerified:

    @pytest.mark.parametrize("name", list(DOMAINS))
    def test_every_domain_verifies(self, name):
        acc = AccumulatorFactory.create(name, samples=60)
        assert isinstance(acc, BoundedAccumulator)
        assert acc.domain is DOMAINS[name]

    def test_c_type_name(self):
        acc = AccumulatorFactory.create("unsigned char", samples=10)
        assert acc.domain is UINT8

    def test_report_lists_applicable_properties(self):
        report = AccumulatorFactory.verify(BoundedAccumulator(domain=INT8), samples=10)
        names = [r.property_name for r in report.results]
        assert names == [p.name for p in accumulation_contract(INT8).applicable()]
        assert report.passed
        assert "ALL PASSED" in report.summary()


# ---------------------------------------------------------------------------
# Factory rejects broken accumulators
# ---------------------------------------------------------------------------

class TestFactoryRejectsBroken:

    def test_wrapping_add_detected(self):
        report = AccumulatorFactory.verify(WrappingAccumulator(domain=UINT8), samples=10)
        assert not report.passed
        failed = {r.property_name for r in report.failures}
        assert "add_exact" in failed
        assert "fifth_of_max" in failed

    def test_partial_result_detected(self):
        report = AccumulatorFactory.verify(PartialAccumulator(domain=INT8), samples=10)
        failed = {r.property_name for r in report.failures}
        assert "subtract_exact" in failed

    def test_failure_has_counterexample(self):
        report = AccumulatorFactory.verify(WrappingAccumulator(domain=UINT8), samples=10)
        add_exact = next(r for r in report.results if r.property_name == "add_exact")
        start, step, steps = add_exact.counterexample
        assert int(start) + int(step) * steps > 255

    def test_verification_error_carries_report(self):
        report = AccumulatorFactory.verify(WrappingAccumulator(domain=UINT8), samples=10)
        err = VerificationError(report)
        assert err.report is report
        assert "FAILED" in str(err)

    def test_contract_level_counterexample(self):
        """A property that is simply false is caught on the first sample."""
        bad = Property(
            name="always_ok",
            description="add never overflows",
            predicate=lambda acc, start, step, n: acc.add(start, step, n).ok,
            domain=UINT8,
        )
        contract = Contract(name="bad", properties=[bad])
        acc = BoundedAccumulator(domain=UINT8)
        inputs = [(0, 1, 1), (255, 1, 1), (0, 1, 2)]
        report = AccumulatorFactory._verify_contract(contract, acc, inputs)
        assert not report.passed
        assert report.results[0].counterexample == (255, 1, 1)
        assert report.results[0].tests_run == 2


# ---------------------------------------------------------------------------
# Contract shape
# ---------------------------------------------------------------------------

class TestContract:

    def test_integral_contract_applies_everything(self):
        contract = accumulation_contract(INT8)
        assert len(contract.applicable()) == len(contract)

    def test_floating_contract_skips_exact_models(self):
        names = {p.name for p in accumulation_contract(FLOAT64).applicable()}
        assert "add_exact" not in names
        assert "subtract_exact" not in names
        assert {"closure", "zero_steps", "zero_step", "absorbing_failure"} <= names
        assert "sixth_step_overflows" in names

    def test_scenarios_run_once(self):
        acc = BoundedAccumulator(domain=UINT8)
        prop = next(p for p in accumulation_contract(UINT8) if p.name == "fifth_of_max")
        result = AccumulatorFactory._verify_property(prop, acc, [(0, 1, 1)] * 5)
        assert result.passed
        assert result.tests_run == 1

    def test_exact_outcome(self):
        assert exact_outcome(UINT8, 0, 51, 5, +1) == (True, 255)
        assert exact_outcome(UINT8, 0, 51, 6, +1) == (False, 306)
        assert exact_outcome(INT8, 127, 25, 6, -1) == (True, -23)


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

class TestSampling:

    def test_uint8_edges(self):
        assert [int(v) for v in edge_values(UINT8)] == [0, 1, 51, 254, 255]

    def test_int8_edges(self):
        assert [int(v) for v in edge_values(INT8)] == [
            -128, -127, -25, -1, 0, 1, 25, 126, 127,
        ]

    def test_float_edges_include_limits(self):
        edges = edge_values(FLOAT64)
        assert FLOAT64.lo in edges
        assert FLOAT64.hi in edges
        assert 0.0 in edges

    def test_edge_products_come_first(self):
        samples = _generate_samples(UINT8, count=10, max_steps=16, rng=random.Random(0))
        assert len(samples) == 5 * 5 * 6
        assert samples[0] == (0, 0, 0)

    def test_random_fill_stays_in_domain(self):
        samples = _generate_samples(INT8, count=1000, max_steps=16, rng=random.Random(1))
        assert len(samples) == 1000
        for start, step, steps in samples:
            assert INT8.contains(start)
            assert INT8.contains(step)
            assert 0 <= steps <= 16

    def test_float_random_fill_is_finite(self):
        samples = _generate_samples(FLOAT64, count=400, max_steps=16, rng=random.Random(2))
        for start, step, _ in samples:
            assert FLOAT64.contains(start)
            assert FLOAT64.contains(step)

    def test_seed_is_reproducible(self):
        a = _generate_samples(INT8, count=600, max_steps=16, rng=random.Random(7))
        b = _generate_samples(INT8, count=600, max_steps=16, rng=random.Random(7))
        assert a == b


class TestReportShape:

    def test_empty_report_passes(self):
        assert VerificationReport(contract_name="empty").passed

    def test_summary_names_samples_and_seed(self):
        report = AccumulatorFactory.verify(BoundedAccumulator(domain=UINT8), samples=10, seed=3)
        assert report.domain == "uint8"
        assert report.samples == 150
        summary = report.summary()
        assert summary.splitlines()[0] == "--- accumulation[uint8]: 150 samples, seed 3 ---"
        assert "[PASS] add_exact (150 checked)" in summary
        assert "[PASS] fifth_of_max (1 checked)" in summary
        assert summary.endswith(f"=> ALL PASSED ({len(report.results)} properties)")

    def test_summary_shows_failing_sample(self):
        report = AccumulatorFactory.verify(WrappingAccumulator(domain=UINT8), samples=10)
        summary = report.summary()
        assert "[FAIL] add_exact at check " in summary
        assert "start=0 step=51 steps=6" in summary
        assert f"=> FAILED ({len(report.failures)} of {len(report.results)} properties)" in summary

    def test_error_names_domain_and_failures(self):
        report = AccumulatorFactory.verify(WrappingAccumulator(domain=UINT8), samples=10)
        message = str(VerificationError(report))
        assert message.startswith("uint8 accumulator failed add_exact")
