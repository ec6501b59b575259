"""Two-limb scratch values for headroom computations.

``high - a`` or ``a - low`` can overflow the host type when the interval
reaches towards the host limits.  A WideAccumulator keeps such a
quantity as ``T_max * multiplier + remainder`` with the remainder held
in a ModularInteger modulo T_max, so sums and differences of host values
can be formed and compared exactly.  The multiplier stays within a few
units of zero for every value the range types feed in.
"""

from __future__ import annotations

import functools

from config import ModularConfig
from host import IntType
from modular import ModularInteger


@functools.lru_cache(maxsize=None)
def remainder_type(host: IntType) -> type[ModularInteger]:
    return ModularInteger.specialize(ModularConfig(host=host, bound=host.max))


@functools.total_ordering
class WideAccumulator:
    """
    Exact sum or difference of host values, held in host-sized limbs.

    Plain host ints are promoted on the fly, so ``wide(high) - wide(a) < b``
    compares a headroom against an operand without leaving the host type.
    Instances are immutable.
    """

    __slots__ = ("host", "multiplier", "remainder")

    def __init__(
        self,
        host: IntType,
        multiplier: int = 0,
        remainder: ModularInteger | None = None,
    ) -> None:
        if remainder is None:
            remainder = remainder_type(host)()
        object.__setattr__(self, "host", host)
        object.__setattr__(self, "multiplier", multiplier)
        object.__setattr__(self, "remainder", remainder)

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def of(cls, host: IntType, value: int) -> WideAccumulator:
        """Split a host value into multiplier and remainder (floor division)."""
        t_max = host.max
        host.require(value)
        m = host.truncdiv(value, t_max)
        r = host.sub(value, host.mul(m, t_max))
        if r < 0:
            m = host.sub(m, 1)
            r = host.add(r, t_max)
        return cls(host, m, remainder_type(host)(r))

    def _promote(self, other) -> WideAccumulator | None:
        if isinstance(other, WideAccumulator):
            return other if other.host == self.host else None
        if isinstance(other, int):
            return WideAccumulator.of(self.host, other)
        return None

    # -- arithmetic -------------------------------------------------------

    def __add__(self, other):
        b = self._promote(other)
        if b is None:
            return NotImplemented
        host = self.host
        m = host.add(self.multiplier, b.multiplier)
        # carry when the remainders together reach T_max
        if b.remainder.value >= host.sub(host.max, self.remainder.value):
            m = host.add(m, 1)
        return WideAccumulator(host, m, self.remainder + b.remainder)

    __radd__ = __add__

    def __sub__(self, other):
        b = self._promote(other)
        if b is None:
            return NotImplemented
        host = self.host
        m = self.multiplier
        if self.remainder.value < b.remainder.value:
            m = host.sub(m, 1)
        m = host.sub(m, b.multiplier)
        return WideAccumulator(host, m, self.remainder - b.remainder)

    def __rsub__(self, other):
        a = self._promote(other)
        if a is None:
            return NotImplemented
        return a - self

    # -- comparison -------------------------------------------------------

    def _key(self) -> tuple[int, int]:
        return (self.multiplier, self.remainder.value)

    def __eq__(self, other):
        b = self._promote(other)
        if b is None:
            return NotImplemented
        return self._key() == b._key()

    def __lt__(self, other):
        b = self._promote(other)
        if b is None:
            return NotImplemented
        return self._key() < b._key()

    def __hash__(self) -> int:
        return hash((self.host, self._key()))

    # -- rendering --------------------------------------------------------

    def to_int(self) -> int:
        """Unbounded value, for diagnostics and tests."""
        return self.host.max * self.multiplier + self.remainder.value

    def __str__(self) -> str:
        return f"{self.host.max} * {self.multiplier} + {self.remainder.value}"

    def __repr__(self) -> str:
        return f"WideAccumulator({self.host.name}: {self})"
