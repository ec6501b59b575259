"""
Modular (wrap-around) integers.

A ModularInteger holds a value in [0, bound) and never fails: every
operation wraps.  The interesting part is that the wrapping is computed
with host primitives only, and no intermediate result is ever allowed
to leave the host type's range - not even when the operands sit right
next to the host type's minimum or maximum.
"""

from __future__ import annotations

import operator
from typing import ClassVar

from config import ModularConfig
from host import IntType


# ---------------------------------------------------------------------------
# Overflow-free primitives
# ---------------------------------------------------------------------------

def mod_reduce(host: IntType, bound: int, a: int) -> int:
    """Map any host value into [0, bound)."""
    if a >= 0:
        return host.rem(a, bound)

    if a == host.min:
        # -min is not representable; adding bound changes nothing mod bound
        a = host.add(a, bound)

    a = host.neg(a)
    r = host.rem(a, bound)
    return 0 if r == 0 else host.sub(bound, r)


def mod_add(host: IntType, bound: int, a: int, b: int) -> int:
    """(a + b) mod bound without letting the host sum overflow."""
    a = mod_reduce(host, bound, a)
    b = mod_reduce(host, bound, b)

    while b > 0:
        room = host.sub(bound, a)   # steps left before a wraps to zero
        if b < room:
            a = host.add(a, b)
            break
        b = host.sub(b, room)
        a = 0

    return host.rem(a, bound)


def mod_neg(host: IntType, bound: int, a: int) -> int:
    a = mod_reduce(host, bound, a)
    return host.rem(host.sub(bound, a), bound)


def mod_mul(host: IntType, bound: int, a: int, b: int) -> int:
    """
    (a * b) mod bound, one chunk at a time.

    A product is only formed once the remaining multiplier is no larger
    than the biggest multiplier of ``a`` that fits in the host type.
    Until then the multiplier is halved and ``a`` doubled with mod_add,
    so the loop finishes after at most log2(b) rounds.
    """
    a = mod_reduce(host, bound, a)
    b = mod_reduce(host, bound, b)
    result = 0

    while a != 0 and b != 0:
        if b <= host.truncdiv(host.max, a):
            chunk = host.rem(host.mul(a, b), bound)
            return mod_add(host, bound, result, chunk)
        if host.rem(b, 2) == 1:
            result = mod_add(host, bound, result, a)
        a = mod_add(host, bound, a, a)
        b = host.truncdiv(b, 2)

    return result


# ---------------------------------------------------------------------------
# The value type
# ---------------------------------------------------------------------------

_TYPES: dict[ModularConfig, type[ModularInteger]] = {}


class ModularInteger:
    """
    Integer modulo ``bound`` over a host type.

    Use ``factory.modular(host, bound)`` to obtain a concrete class; the
    base class itself carries no parameters and cannot be instantiated.
    """

    __slots__ = ("_val",)

    config: ClassVar[ModularConfig | None] = None
    host: ClassVar[IntType]
    bound: ClassVar[int]

    @classmethod
    def specialize(cls, config: ModularConfig) -> type[ModularInteger]:
        """Return the (cached) class for one parameter set."""
        existing = _TYPES.get(config)
        if existing is not None:
            return existing
        sub = type(
            f"ModularInteger[{config.label()}]",
            (ModularInteger,),
            {
                "__slots__": (),
                "config": config,
                "host": config.host,
                "bound": config.bound,
            },
        )
        _TYPES[config] = sub
        return sub

    def __init__(self, value: int | ModularInteger = 0) -> None:
        if self.config is None:
            raise TypeError(
                "ModularInteger is unparameterised; build a class with modular()"
            )
        if isinstance(value, ModularInteger):
            if type(value) is not type(self):
                raise TypeError(
                    f"cannot convert {type(value).__name__} to {type(self).__name__}"
                )
            val = value._val
        else:
            raw = self.host.require(operator.index(value))
            val = mod_reduce(self.host, self.bound, raw)
        object.__setattr__(self, "_val", val)

    @classmethod
    def _make(cls, val: int) -> ModularInteger:
        obj = object.__new__(cls)
        object.__setattr__(obj, "_val", val)
        return obj

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def _coerce(self, other) -> int | None:
        if isinstance(other, ModularInteger):
            return other._val if type(other) is type(self) else None
        if isinstance(other, int):
            return self.host.require(other)
        return None

    # -- accessors --------------------------------------------------------

    @property
    def value(self) -> int:
        return self._val

    def __int__(self) -> int:
        return self._val

    def __index__(self) -> int:
        return self._val

    # -- arithmetic -------------------------------------------------------

    def __pos__(self) -> ModularInteger:
        return self

    def __neg__(self) -> ModularInteger:
        return self._make(mod_neg(self.host, self.bound, self._val))

    def __add__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(mod_add(self.host, self.bound, self._val, b))

    __radd__ = __add__

    def __sub__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        neg_b = mod_neg(self.host, self.bound, b)
        return self._make(mod_add(self.host, self.bound, self._val, neg_b))

    def __rsub__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        neg_a = mod_neg(self.host, self.bound, self._val)
        return self._make(mod_add(self.host, self.bound, b, neg_a))

    def __mul__(self, other):
        b = self._coerce(other)
        if b is None:
            return NotImplemented
        return self._make(mod_mul(self.host, self.bound, self._val, b))

    __rmul__ = __mul__

    def succ(self) -> ModularInteger:
        return self + 1

    def pred(self) -> ModularInteger:
        return self - 1

    # -- comparison -------------------------------------------------------

    def __eq__(self, other):
        if isinstance(other, ModularInteger):
            if type(other) is not type(self):
                return NotImplemented
            return self._val == other._val
        if isinstance(other, int):
            return self._val == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._val)

    # -- rendering --------------------------------------------------------

    def __str__(self) -> str:
        return str(self._val)

    def __format__(self, spec: str) -> str:
        return format(self._val, spec)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._val})"
