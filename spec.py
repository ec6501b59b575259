"""
Property suites for the range types.

A Spec is the *contract* a built type must satisfy.  It is purely
declarative - it says WHAT must hold, not HOW it is computed.  The
reference for every property is plain unbounded Python arithmetic: the
host-bounded algorithms must agree with it whenever the mathematical
result is in range, and fail with the right error kind when it is not.

Each property is a named predicate with:
  - a human-readable description
  - a callable taking the built class followed by the input values
  - one Domain per input value
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from config import ModularConfig, RangeConfig
from errors import (
    AdditionOverflowError,
    AdditionUnderflowError,
    MultiplicationOverflowError,
    MultiplicationUnderflowError,
    OutOfRangeError,
    RangeTypeError,
    SubtractionOverflowError,
    SubtractionUnderflowError,
)


# ---------------------------------------------------------------------------
# Core spec primitives
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Domain:
    """Inclusive integer interval a property input is drawn from."""

    lo: int
    hi: int

    def __post_init__(self):
        if self.lo > self.hi:
            raise ValueError(f"lo ({self.lo}) must be <= hi ({self.hi})")

    @property
    def width(self) -> int:
        return self.hi - self.lo + 1

    def contains(self, value: int) -> bool:
        return self.lo <= value <= self.hi

    def all_values(self) -> range:
        return range(self.lo, self.hi + 1)

    def edge_values(self) -> list[int]:
        """Boundary values worth checking first, without duplicates."""
        candidates = [self.lo, self.lo + 1, -1, 0, 1, self.hi - 1, self.hi]
        edges: list[int] = []
        for v in candidates:
            if self.contains(v) and v not in edges:
                edges.append(v)
        return edges


@dataclass(frozen=True)
class Property:
    """A single verifiable property of a built type."""

    name: str
    description: str
    predicate: Callable[..., bool]
    domains: tuple[Domain, ...]

    @property
    def arity(self) -> int:
        return len(self.domains)

    def check(self, *args: Any) -> bool:
        """Evaluate the predicate with the built class and input values."""
        return self.predicate(*args)


@dataclass
class Spec:
    """An ordered collection of properties that together form a contract."""

    name: str
    properties: list[Property] = field(default_factory=list)

    def add(self, prop: Property) -> None:
        self.properties.append(prop)

    def __iter__(self):
        return iter(self.properties)

    def __len__(self):
        return len(self.properties)


# ---------------------------------------------------------------------------
# Helpers used inside the predicates
# ---------------------------------------------------------------------------

def agrees(
    cls: Any,
    compute: Callable[[], Any],
    raw: int,
    over: type[RangeTypeError],
    under: type[RangeTypeError],
) -> bool:
    """
    ``compute()`` must return ``raw`` when it lies in the range of ``cls``,
    raise ``over`` when it lies above and ``under`` when it lies below.
    """
    try:
        got = compute()
    except RangeTypeError as exc:
        if raw > cls.high:
            return type(exc) is over
        if raw < cls.low:
            return type(exc) is under
        return False
    return cls.low <= raw <= cls.high and got.value == raw


# ---------------------------------------------------------------------------
# Spec builders
# ---------------------------------------------------------------------------

def modular_spec(config: ModularConfig) -> Spec:
    """Build the property suite of a modular integer type."""
    host, bound = config.host, config.bound
    h = Domain(host.min, host.max)

    spec = Spec(name=f"modular[{config.label()}]")

    spec.add(Property(
        name="containment",
        description="0 <= M(a) < bound for every host value a",
        predicate=lambda M, a: 0 <= M(a).value < bound,
        domains=(h,),
    ))

    spec.add(Property(
        name="reduction",
        description="M(a) == a mod bound",
        predicate=lambda M, a: M(a).value == a % bound,
        domains=(h,),
    ))

    spec.add(Property(
        name="addition",
        description="M(a) + M(b) == (a + b) mod bound",
        predicate=lambda M, a, b: (M(a) + M(b)).value == (a + b) % bound,
        domains=(h, h),
    ))

    spec.add(Property(
        name="subtraction",
        description="M(a) - b == (a - b) mod bound",
        predicate=lambda M, a, b: (M(a) - b).value == (a - b) % bound,
        domains=(h, h),
    ))

    spec.add(Property(
        name="negation",
        description="-M(a) == (-a) mod bound",
        predicate=lambda M, a: (-M(a)).value == (-a) % bound,
        domains=(h,),
    ))

    spec.add(Property(
        name="multiplication",
        description="M(a) * M(b) == (a * b) mod bound",
        predicate=lambda M, a, b: (M(a) * M(b)).value == (a * b) % bound,
        domains=(h, h),
    ))

    return spec


def ranged_spec(config: RangeConfig) -> Spec:
    """Build the property suite of a range-checked integer type."""
    host = config.host
    r = Domain(config.low, config.high)
    h = Domain(host.min, host.max)

    def construct(R, v):
        if not config.contains(v):
            try:
                R(v)
            except OutOfRangeError:
                return True
            return False
        return R(v).value == v

    spec = Spec(name=f"ranged[{config.label()}]")

    spec.add(Property(
        name="round_trip",
        description="R(a).value == a for every a in [low, high]",
        predicate=lambda R, a: R(a).value == a and R(R(a)) == R(a),
        domains=(r,),
    ))

    spec.add(Property(
        name="construction",
        description="R(v) succeeds iff low <= v <= high",
        predicate=construct,
        domains=(h,),
    ))

    spec.add(Property(
        name="addition",
        description="R(a) + b == a + b, or the matching addition error",
        predicate=lambda R, a, b: agrees(
            R, lambda: R(a) + b, a + b,
            AdditionOverflowError, AdditionUnderflowError,
        ),
        domains=(r, h),
    ))

    spec.add(Property(
        name="subtraction",
        description="R(a) - b == a - b, or the matching subtraction error",
        predicate=lambda R, a, b: agrees(
            R, lambda: R(a) - b, a - b,
            SubtractionOverflowError, SubtractionUnderflowError,
        ),
        domains=(r, h),
    ))

    spec.add(Property(
        name="reflected_subtraction",
        description="b - R(a) == b - a, or the matching subtraction error",
        predicate=lambda R, a, b: agrees(
            R, lambda: b - R(a), b - a,
            SubtractionOverflowError, SubtractionUnderflowError,
        ),
        domains=(r, h),
    ))

    spec.add(Property(
        name="multiplication",
        description="R(a) * b == a * b, or the matching multiplication error",
        predicate=lambda R, a, b: agrees(
            R, lambda: R(a) * b, a * b,
            MultiplicationOverflowError, MultiplicationUnderflowError,
        ),
        domains=(r, h),
    ))

    spec.add(Property(
        name="negation",
        description="-R(a) == -a, or OutOfRangeError",
        predicate=lambda R, a: agrees(
            R, lambda: -R(a), -a, OutOfRangeError, OutOfRangeError,
        ),
        domains=(r,),
    ))

    return spec
