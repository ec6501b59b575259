"""
Range-checked integers.

A RangeConstrainedInteger holds a value in the closed interval
[low, high] of a host type.  Construction and every arithmetic operator
either produce a value that is still inside the interval or raise a
RangeTypeError naming the violated boundary, the operation and the
operands.  Nothing is clamped and nothing wraps.

Every check happens *before* the operation that could overflow.  The
distances to the two boundaries are formed with WideAccumulator, and
the multiplication limits come from truncating division of the bounds,
so the checks themselves stay inside the host type as well.
"""

from __future__ import annotations

import operator
from collections.abc import Sequence
from typing import ClassVar

from config import RangeConfig
from errors import (
    AdditionOverflowError,
    AdditionUnderflowError,
    MultiplicationOverflowError,
    MultiplicationUnderflowError,
    OutOfRangeError,
    SubtractionOverflowError,
    SubtractionUnderflowError,
)
from host import IntType
from wide import WideAccumulator

BELOW_LOW = "Value is lower than smallest possible value"
ABOVE_HIGH = "Value is greater than largest possible value"

_TYPES: dict[RangeConfig, type[RangeConstrainedInteger]] = {}


class RangeConstrainedInteger:
    """
    Integer confined to [low, high] over a host type.

    Use ``factory.ranged(host, low, high)`` to obtain a concrete class.
    There is deliberately no implicit conversion to ``int``: read
    ``.value`` instead.
    """

    __slots__ = ("_val",)

    config: ClassVar[RangeConfig | None] = None
    host: ClassVar[IntType]
    low: ClassVar[int]
    high: ClassVar[int]
    size: ClassVar[int]

    @classmethod
    def specialize(cls, config: RangeConfig) -> type[RangeConstrainedInteger]:
        """Return the (cached) class for one parameter set."""
        existing = _TYPES.get(config)
        if existing is not None:
            return existing
        sub = type(
            f"RangeConstrainedInteger[{config.label()}]",
            (RangeConstrainedInteger,),
            {
                "__slots__": (),
                "config": config,
                "host": config.host,
                "low": config.low,
                "high": config.high,
                "size": config.size,
            },
        )
        _TYPES[config] = sub
        return sub

    def __init__(self, value: int | RangeConstrainedInteger | None = None) -> None:
        if self.config is None:
            raise TypeError(
                "RangeConstrainedInteger is unparameterised; build a class with ranged()"
            )
        if value is None:
            val = self.low
        elif isinstance(value, RangeConstrainedInteger):
            if type(value) is not type(self):
                raise TypeError(
                    f"cannot convert {type(value).__name__} to {type(self).__name__}"
                )
            val = self.val_check(value._val)
        else:
            val = self.val_check(operator.index(value))
        object.__setattr__(self, "_val", val)

    @classmethod
    def _make(cls, val: int) -> RangeConstrainedInteger:
        obj = object.__new__(cls)
        object.__setattr__(obj, "_val", val)
        return obj

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _coerce(self, other) -> int | None:
        if isinstance(other, RangeConstrainedInteger):
            return other._val if type(other) is type(self) else None
        if isinstance(other, int):
            return self.host.require(other)
        return None

    # -- checks -----------------------------------------------------------

    @classmethod
    def val_check(
        cls,
        value: int,
        operation: str = "construct",
        operands: tuple[int, ...] | None = None,
    ) -> int:
        """Return ``value`` if it lies in [low, high], raise otherwise."""
        if operands is None:
            operands = (value,)
        if value < cls.low:
            raise OutOfRangeError(cls.low, cls.high, operation, operands, BELOW_LOW)
        if value > cls.high:
            raise OutOfRangeError(cls.low, cls.high, operation, operands, ABOVE_HIGH)
        return value

    @classmethod
    def _wide(cls, value: int) -> WideAccumulator:
        return WideAccumulator.of(cls.host, value)

    @classmethod
    def _magnitude(cls, b: int) -> tuple[int, int]:
        """Split a negative ``b`` into (spare, magnitude) with -b == magnitude + spare.

        The host minimum cannot be negated, so one unit is put aside first.
        """
        host = cls.host
        if b == host.min:
            return 1, host.neg(host.add(b, 1))
        return 0, host.neg(b)

    # -- arithmetic -------------------------------------------------------

    @classmethod
    def val_add(cls, a: int, b: int) -> int:
        host = cls.host
        cls.val_check(a)

        if b >= 0:
            up_space = cls._wide(cls.high) - cls._wide(a)
            if up_space < b:
                raise AdditionOverflowError(cls.low, cls.high, "+", (a, b))
            return host.add(a, b)

        low_space = cls._wide(a) - cls._wide(cls.low)
        spare, magnitude = cls._magnitude(b)
        if low_space < cls._wide(magnitude) + spare:
            raise AdditionUnderflowError(cls.low, cls.high, "+", (a, b))
        return host.sub(host.sub(a, magnitude), spare)

    @classmethod
    def val_sub(cls, a: int, b: int) -> int:
        host = cls.host
        cls.val_check(a)

        if b >= 0:
            low_space = cls._wide(a) - cls._wide(cls.low)
            if low_space < b:
                raise SubtractionUnderflowError(cls.low, cls.high, "-", (a, b))
            return host.sub(a, b)

        up_space = cls._wide(cls.high) - cls._wide(a)
        spare, magnitude = cls._magnitude(b)
        if up_space < cls._wide(magnitude) + spare:
            raise SubtractionOverflowError(cls.low, cls.high, "-", (a, b))
        return host.add(host.add(a, magnitude), spare)

    @classmethod
    def val_rsub(cls, a: int, b: int) -> int:
        """``b - a`` where only ``a`` is known to be in range."""
        host = cls.host
        cls.val_check(a)

        wide_a, wide_b = cls._wide(a), cls._wide(b)
        if wide_b < wide_a + cls.low:
            raise SubtractionUnderflowError(cls.low, cls.high, "-", (b, a))
        if wide_b > wide_a + cls.high:
            raise SubtractionOverflowError(cls.low, cls.high, "-", (b, a))
        return host.sub(b, a)

    @classmethod
    def val_mul(cls, a: int, b: int) -> int:
        host, low, high = cls.host, cls.low, cls.high
        cls.val_check(a)

        if a == 0 or b == 0:
            if low > 0:
                raise MultiplicationUnderflowError(low, high, "*", (a, b))
            if high < 0:
                raise MultiplicationOverflowError(low, high, "*", (a, b))
            return 0

        # Largest multiplier allowed in each direction.  Truncation toward
        # zero rounds both limits towards the inside of the interval.
        if a > 0:
            max_pos = host.truncdiv(high, a)
            max_neg = host.truncdiv(low, a) if low < 0 else 0
        else:
            if low == host.min and a == -1:
                max_pos = host.max      # the exact quotient does not fit
            else:
                max_pos = host.truncdiv(low, a)
            max_neg = host.truncdiv(high, a) if high >= 0 else 0

        if b > 0 and b > max_pos:
            error = MultiplicationOverflowError if a > 0 else MultiplicationUnderflowError
            raise error(low, high, "*", (a, b))
        if b < 0 and b < max_neg:
            error = MultiplicationUnderflowError if a > 0 else MultiplicationOverflowError
            raise error(low, high, "*", (a, b))

        return host.mul(a, b)

    # -- operators --------------------------------------------------------

    def __pos__(self) -> RangeConstrainedInteger:
        return self

    def __neg__(self) -> RangeConstrainedInteger:
        a, host = self._val, self.host
        if a == 0 or (host.signed and a != host.min):
            return self._make(self.val_check(host.neg(a), "-", (a,)))
        # -a is not a host value at all
        reason = ABOVE_HIGH if a < 0 else BELOW_LOW
        raise OutOfRangeError(self.low, self.high, "-", (a,), reason)

    def __add__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(self.val_add(self._val, b))

    __radd__ = __add__

    def __sub__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(self.val_sub(self._val, b))

    def __rsub__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(self.val_rsub(self._val, b))

    def __mul__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(self.val_mul(self._val, b))

    __rmul__ = __mul__

    def succ(self) -> RangeConstrainedInteger:
        return self + 1

    def pred(self) -> RangeConstrainedInteger:
        return self - 1

    # -- accessors and comparison -----------------------------------------

    @property
    def value(self) -> int:
        return self._val

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._val == other._val

    def __hash__(self) -> int:
        return hash((type(self), self._val))

    def __bool__(self):
        raise TypeError(
            f"{type(self).__name__} has no truth value; compare .value instead"
        )

    @classmethod
    def span(cls) -> RangeSpan:
        """All values of this type, lowest first."""
        return RangeSpan(cls)

    # -- rendering --------------------------------------------------------

    def __str__(self) -> str:
        return str(self._val)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._val})"


class RangeSpan(Sequence):
    """Lazy, restartable sequence over every value of a range type."""

    __slots__ = ("_cls",)

    def __init__(self, cls: type[RangeConstrainedInteger]) -> None:
        self._cls = cls

    def _values(self) -> range:
        return range(self._cls.low, self._cls.high + 1)

    def __len__(self) -> int:
        return self._cls.size

    def __getitem__(self, index):
        if isinstance(index, slice):
            return [self._cls._make(v) for v in self._values()[index]]
        return self._cls._make(self._values()[index])

    def __iter__(self):
        for v in self._values():
            yield self._cls._make(v)

    def __contains__(self, item) -> bool:
        return type(item) is self._cls

    def __repr__(self) -> str:
        return f"RangeSpan({self._cls.__name__})"
