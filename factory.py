"""
The type factory.

Parameterised range types are built here.  The factory does NOT just
construct classes - it *verifies* them against their specs before
releasing them.

Flow:
  1. Caller requests a type for a parameter set (host type + bounds).
  2. The parameter set is validated once (config.py).
  3. Factory builds the class, or reuses the one cached for that set.
  4. Factory runs the type's spec suite the first time it is requested.
  5. If verification passes  -> return the class.
     If verification fails   -> raise, never hand out a broken type.
"""

from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from typing import Any

from config import ModularConfig, RangeConfig
from errors import HostOverflowError
from host import IntType
from modular import ModularInteger
from ranged import RangeConstrainedInteger
from spec import Domain, Property, Spec, modular_spec, ranged_spec

logger = logging.getLogger(__name__)


@dataclass
class VerificationResult:
    """Outcome of verifying one property."""

    property_name: str
    passed: bool
    counterexample: tuple | None = None
    tests_run: int = 0
    error: str | None = None

    def __repr__(self) -> str:
        status = "PASS" if self.passed else "FAIL"
        ce = f"  counterexample={self.counterexample}" if self.counterexample else ""
        err = f"  error={self.error}" if self.error else ""
        return f"[{status}] {self.property_name} ({self.tests_run} tests){ce}{err}"


@dataclass
class VerificationReport:
    """Aggregate result of verifying an entire spec."""

    spec_name: str
    results: list[VerificationResult] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all(r.passed for r in self.results)

    @property
    def tests_run(self) -> int:
        return sum(r.tests_run for r in self.results)

    def summary(self) -> str:
        lines = [f"--- {self.spec_name} ---"]
        for r in self.results:
            lines.append(f"  {r}")
        status = "ALL PASSED" if self.passed else "FAILED"
        lines.append(f"  => {status}")
        return "\n".join(lines)


class VerificationError(Exception):
    """Raised when a built type fails its spec."""

    def __init__(self, report: VerificationReport):
        self.report = report
        super().__init__(f"Verification failed:\n{report.summary()}")


# ---------------------------------------------------------------------------
# The factory
# ---------------------------------------------------------------------------

class TypeFactory:
    """
    Produces ModularInteger and RangeConstrainedInteger classes that are
    checked against their specs.

    When the input grid of a property is small the factory checks it
    *exhaustively*.  Otherwise it samples: every combination of edge
    values first, then a deterministic random fill.
    """

    EXHAUSTIVE_LIMIT = 4096   # max grid size for brute-force check
    SAMPLE_COUNT = 512
    SEED = 0

    _verified: set = set()

    @classmethod
    def create_modular(
        cls, config: ModularConfig, verify: bool = True
    ) -> type[ModularInteger]:
        """Build, verify, and return the ModularInteger class for ``config``."""
        built = ModularInteger.specialize(config)
        logger.debug("built %s", built.__name__)
        if verify:
            cls._verify_once(config, built, modular_spec(config))
        return built

    @classmethod
    def create_ranged(
        cls, config: RangeConfig, verify: bool = True
    ) -> type[RangeConstrainedInteger]:
        """Build, verify, and return the RangeConstrainedInteger class for ``config``."""
        built = RangeConstrainedInteger.specialize(config)
        logger.debug("built %s", built.__name__)
        if verify:
            cls._verify_once(config, built, ranged_spec(config))
        return built

    # -- internal ---------------------------------------------------------

    @classmethod
    def _verify_once(cls, config: Any, built: type, spec: Spec) -> None:
        if config in cls._verified:
            return
        report = cls._verify_spec(spec, built)
        if not report.passed:
            logger.warning("verification failed:\n%s", report.summary())
            raise VerificationError(report)
        cls._verified.add(config)
        logger.debug("%s verified (%d tests)", built.__name__, report.tests_run)

    @classmethod
    def _verify_spec(cls, spec: Spec, built: type) -> VerificationReport:
        report = VerificationReport(spec_name=spec.name)
        for prop in spec:
            result = cls._verify_property(prop, built)
            report.results.append(result)
        return report

    @classmethod
    def _verify_property(cls, prop: Property, built: type) -> VerificationResult:
        grid = 1
        for domain in prop.domains:
            grid *= domain.width

        if grid <= cls.EXHAUSTIVE_LIMIT:
            # Check every combination
            combos = itertools.product(*(d.all_values() for d in prop.domains))
        else:
            combos = _generate_samples(prop.domains, cls.SAMPLE_COUNT, cls.SEED)

        tests_run = 0
        for combo in combos:
            tests_run += 1
            try:
                ok = prop.check(built, *combo)
            except HostOverflowError as exc:
                # The algorithm drove a host primitive out of range.
                return VerificationResult(
                    property_name=prop.name,
                    passed=False,
                    counterexample=combo,
                    tests_run=tests_run,
                    error=str(exc),
                )
            if not ok:
                return VerificationResult(
                    property_name=prop.name,
                    passed=False,
                    counterexample=combo,
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

def _generate_samples(
    domains: tuple[Domain, ...], count: int, seed: int
) -> list[tuple[int, ...]]:
    """Generate edge-case + random samples for property checking."""
    rng = random.Random(seed)

    samples: list[tuple[int, ...]] = []

    # All edge combinations
    for combo in itertools.product(*(d.edge_values() for d in domains)):
        samples.append(combo)

    # Random fill
    while len(samples) < count:
        samples.append(tuple(rng.randint(d.lo, d.hi) for d in domains))

    return samples


# ---------------------------------------------------------------------------
# Convenience entry points
# ---------------------------------------------------------------------------

def modular(host: IntType, bound: int, *, verify: bool = True) -> type[ModularInteger]:
    """``ModularInteger`` class over ``host`` with values in [0, bound)."""
    return TypeFactory.create_modular(ModularConfig(host=host, bound=bound), verify)


def ranged(
    host: IntType, low: int, high: int, *, verify: bool = True
) -> type[RangeConstrainedInteger]:
    """``RangeConstrainedInteger`` class over ``host`` with values in [low, high]."""
    return TypeFactory.create_ranged(RangeConfig(host=host, low=low, high=high), verify)
