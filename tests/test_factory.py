"""
Tests for the type factory and the property suites it verifies against.

The factory must never hand out a class that disagrees with its spec,
and verification of a given parameter set happens only once.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import logging

import pytest

from config import ModularConfig, RangeConfig
from factory import (
    TypeFactory,
    VerificationError,
    _generate_samples,
    modular,
    ranged,
)
from host import INT8, INT16
from modular import ModularInteger
from ranged import RangeConstrainedInteger
from spec import Domain, Property, Spec, modular_spec, ranged_spec


# ---------------------------------------------------------------------------
# Domain
# ---------------------------------------------------------------------------

class TestDomain:
    def test_width_and_values(self):
        d = Domain(-2, 2)
        assert d.width == 5
        assert list(d.all_values()) == [-2, -1, 0, 1, 2]
        assert d.contains(0) and not d.contains(3)

    def test_edge_values(self):
        assert Domain(-128, 127).edge_values() == [-128, -127, -1, 0, 1, 126, 127]
        assert Domain(5, 10).edge_values() == [5, 6, 9, 10]

    def test_edge_values_deduplicated(self):
        assert Domain(0, 1).edge_values() == [0, 1]
        assert Domain(3, 3).edge_values() == [3]

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            Domain(5, 3)


# ---------------------------------------------------------------------------
# Spec builders
# ---------------------------------------------------------------------------

class TestSpecs:
    def test_modular_properties(self):
        spec = modular_spec(ModularConfig(host=INT8, bound=10))
        assert spec.name == "modular[int8, 10]"
        assert [p.name for p in spec] == [
            "containment", "reduction", "addition",
            "subtraction", "negation", "multiplication",
        ]

    def test_ranged_properties(self):
        spec = ranged_spec(RangeConfig(host=INT8, low=-2, high=2))
        assert spec.name == "ranged[int8, -2, 2]"
        assert len(spec) == 7
        arities = {p.name: p.arity for p in spec}
        assert arities["round_trip"] == 1
        assert arities["multiplication"] == 2


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

class TestVerification:
    def test_small_range_checked_exhaustively(self):
        config = RangeConfig(host=INT8, low=-2, high=2)
        built = RangeConstrainedInteger.specialize(config)
        report = TypeFactory._verify_spec(ranged_spec(config), built)
        assert report.passed
        counts = {r.property_name: r.tests_run for r in report.results}
        assert counts["round_trip"] == 5
        assert counts["construction"] == 256
        assert counts["addition"] == 5 * 256
        assert "ALL PASSED" in report.summary()

    def test_large_grid_is_sampled(self):
        config = ModularConfig(host=INT16, bound=1000)
        built = ModularInteger.specialize(config)
        report = TypeFactory._verify_spec(modular_spec(config), built)
        assert report.passed
        counts = {r.property_name: r.tests_run for r in report.results}
        assert counts["addition"] == TypeFactory.SAMPLE_COUNT

    def test_broken_property_reports_counterexample(self):
        config = RangeConfig(host=INT8, low=-2, high=2)
        built = RangeConstrainedInteger.specialize(config)
        spec = Spec(name="broken")
        spec.add(Property(
            name="never_two",
            description="no value equals 2",
            predicate=lambda R, a: R(a).value != 2,
            domains=(Domain(-2, 2),),
        ))
        report = TypeFactory._verify_spec(spec, built)
        assert not report.passed
        (result,) = report.results
        assert result.counterexample == (2,)
        assert result.tests_run == 5
        assert "[FAIL] never_two" in repr(result)

    def test_host_overflow_is_a_failure(self):
        prop = Property(
            name="bump",
            description="a + 1 stays in int8",
            predicate=lambda cls, a: INT8.add(a, 1) > a,
            domains=(Domain(120, 127),),
        )
        result = TypeFactory._verify_property(prop, None)
        assert not result.passed
        assert result.counterexample == (127,)
        assert result.tests_run == 8
        assert "int8" in result.error

    def test_failed_verification_raises(self):
        config = RangeConfig(host=INT16, low=-7, high=13)
        built = RangeConstrainedInteger.specialize(config)
        spec = Spec(name="impossible")
        spec.add(Property(
            name="false",
            description="never holds",
            predicate=lambda R, a: False,
            domains=(Domain(0, 0),),
        ))
        with pytest.raises(VerificationError) as info:
            TypeFactory._verify_once(config, built, spec)
        assert not info.value.report.passed
        assert config not in TypeFactory._verified

    def test_verification_logged_once(self, caplog):
        caplog.set_level(logging.DEBUG, logger="factory")
        ranged(INT16, -3, 17)
        assert "verified" in caplog.text
        caplog.clear()
        ranged(INT16, -3, 17)
        assert "verified" not in caplog.text

    def test_verify_false_skips(self):
        cls = ranged(INT16, 100, 200, verify=False)
        assert cls.low == 100
        assert RangeConfig(host=INT16, low=100, high=200) not in TypeFactory._verified


# ---------------------------------------------------------------------------
# Caching
# ---------------------------------------------------------------------------

class TestCaching:
    def test_same_parameters_same_class(self):
        assert modular(INT8, 10) is modular(INT8, 10)
        assert ranged(INT8, -2, 2) is ranged(INT8, -2, 2)

    def test_different_parameters_different_class(self):
        assert modular(INT8, 10) is not modular(INT8, 11)
        assert ranged(INT8, -2, 2) is not ranged(INT16, -2, 2)

    def test_class_names(self):
        assert modular(INT8, 10).__name__ == "ModularInteger[int8, 10]"
        assert ranged(INT8, -2, 2).__name__ == "RangeConstrainedInteger[int8, -2, 2]"


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

class TestSamples:
    def test_edges_first(self):
        d = Domain(-128, 127)
        samples = _generate_samples((d, d), 100, seed=0)
        assert len(samples) == 100
        edges = d.edge_values()
        assert samples[:len(edges) ** 2][0] == (edges[0], edges[0])
        assert (127, -128) in samples[:len(edges) ** 2]

    def test_deterministic(self):
        d = Domain(-1000, 1000)
        assert _generate_samples((d,), 50, seed=3) == _generate_samples((d,), 50, seed=3)

    def test_samples_in_domain(self):
        d = Domain(10, 20)
        assert all(d.contains(a) for (a,) in _generate_samples((d,), 200, seed=1))
