"""
Host integer layer.

Python integers never overflow, so the fixed-width integer type that the
range types are built on top of is modelled here explicitly.  An IntType
knows its representable interval and offers the handful of primitives
the arithmetic layers are allowed to use.

Every primitive checks that its result is representable and raises
HostOverflowError otherwise.  That error stands in for undefined
behaviour: the algorithms in modular.py, wide.py and ranged.py are
written so that it can never be raised, and nothing in the library
catches it.
"""

from __future__ import annotations

from dataclasses import dataclass

from errors import HostOverflowError, NotRepresentableError


@dataclass(frozen=True)
class IntType:
    """
    A fixed-width two's-complement (or unsigned) integer type.

    This is the "T" every range type is parameterised over.
    """

    name: str
    bits: int
    signed: bool = True

    def __post_init__(self):
        if self.bits < 4:
            raise ValueError(f"bits ({self.bits}) must be >= 4")

    @property
    def min(self) -> int:
        return -(1 << (self.bits - 1)) if self.signed else 0

    @property
    def max(self) -> int:
        return (1 << (self.bits - 1)) - 1 if self.signed else (1 << self.bits) - 1

    @property
    def width(self) -> int:
        """Total number of representable values."""
        return 1 << self.bits

    def contains(self, value: int) -> bool:
        return self.min <= value <= self.max

    def require(self, value: int) -> int:
        """Return ``value`` unchanged if it is a value of this type."""
        if not self.contains(value):
            raise NotRepresentableError(value, self)
        return value

    # -- checked primitives -----------------------------------------------

    def _checked(self, raw: int, op: str, *operands: int) -> int:
        if not self.min <= raw <= self.max:
            raise HostOverflowError(self, op, operands)
        return raw

    def add(self, a: int, b: int) -> int:
        return self._checked(a + b, "+", a, b)

    def sub(self, a: int, b: int) -> int:
        return self._checked(a - b, "-", a, b)

    def mul(self, a: int, b: int) -> int:
        return self._checked(a * b, "*", a, b)

    def neg(self, a: int) -> int:
        return self._checked(-a, "neg", a)

    def truncdiv(self, a: int, b: int) -> int:
        """Integer division truncating toward zero, as C does.

        Python's ``//`` rounds toward negative infinity, so adjust when
        the quotient is negative and there is a remainder.
        """
        if b == 0:
            raise ZeroDivisionError("division by zero")
        q, r = divmod(a, b)
        if r != 0 and (a < 0) != (b < 0):
            q += 1
        return self._checked(q, "/", a, b)

    def rem(self, a: int, b: int) -> int:
        """Remainder with the sign of the dividend (C ``%``)."""
        q = self.truncdiv(a, b)
        return self._checked(a - b * q, "%", a, b)

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Common host types
# ---------------------------------------------------------------------------

INT8 = IntType("int8", 8)
INT16 = IntType("int16", 16)
INT32 = IntType("int32", 32)
INT64 = IntType("int64", 64)
UINT8 = IntType("uint8", 8, signed=False)
UINT16 = IntType("uint16", 16, signed=False)
UINT32 = IntType("uint32", 32, signed=False)
UINT64 = IntType("uint64", 64, signed=False)
