"""
Bounds-checked pointers.

A BoundsCheckedPointer is an index into the bytes of one referent object,
presented as an address.  It may only ever point inside
[base, base + size - 1].  The offset is itself a RangeConstrainedInteger
over [0, size - 1], so every bounds check is that type's check; a range
failure is re-raised as PointerOutOfBoundsError with the same story told
in addresses.

The pointer holds a strong reference to its referent, so the referent
outlives every pointer into it.  Referents are ctypes instances (the
address is the real data address) or any other object exporting a
buffer (the address is the object's id).
"""

from __future__ import annotations

import ctypes
import operator

from errors import (
    MismatchedBaseError,
    NotRepresentableError,
    PointerOutOfBoundsError,
    RangeTypeError,
)
from factory import ranged
from host import INT32, UINT8
from ranged import RangeConstrainedInteger

#: host type of pointer offsets and pointer arithmetic operands
PTR_INT = INT32


def _byte_view(referent):
    """Byte view of ``referent`` and the address of its first byte.

    memoryview cannot cast the explicitly little-endian formats ctypes
    exports, so ctypes referents are overlaid with a c_ubyte array instead.
    """
    try:
        base = ctypes.addressof(referent)
    except TypeError:
        return memoryview(referent).cast("B"), id(referent)
    size = ctypes.sizeof(referent)
    return (ctypes.c_ubyte * size).from_buffer(referent), base


class BoundsCheckedPointer:
    """
    Pointer into the byte extent of a single referent.

    ``p + n`` / ``p - n`` move the pointer, ``p[i]`` reads the byte at
    ``p + i``, ``load()`` / ``store()`` access the byte under the pointer
    and ``obj`` is the referent itself.  Combining two pointers
    arithmetically is not defined, and neither is ``n - p``.

    Pointers are unhashable: comparing pointers into different referents
    raises MismatchedBaseError, so they cannot share a set or dict.
    """

    __slots__ = ("_referent", "_view", "_base", "_index_type", "_offset")

    def __init__(self, referent, address: int | None = None) -> None:
        view, base = _byte_view(referent)
        size = len(view)
        if size == 0:
            raise ValueError("cannot point into a zero-sized referent")

        object.__setattr__(self, "_referent", referent)
        object.__setattr__(self, "_view", view)
        object.__setattr__(self, "_base", base)
        object.__setattr__(self, "_index_type", ranged(PTR_INT, 0, size - 1))

        if address is None:
            offset = self._index_type()
        else:
            offset = self._offset_for(operator.index(address))
        object.__setattr__(self, "_offset", offset)

    @classmethod
    def at(cls, referent, index: int) -> BoundsCheckedPointer:
        """Pointer to byte ``index`` of ``referent``."""
        ptr = cls(referent)
        return ptr._with_offset(ptr._offset_for(ptr._base + operator.index(index)))

    def _with_offset(self, offset: RangeConstrainedInteger) -> BoundsCheckedPointer:
        ptr = object.__new__(type(self))
        for name in ("_referent", "_view", "_base", "_index_type"):
            object.__setattr__(ptr, name, getattr(self, name))
        object.__setattr__(ptr, "_offset", offset)
        return ptr

    def __setattr__(self, name, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    # -- bounds checks ----------------------------------------------------

    def _offset_for(self, address: int) -> RangeConstrainedInteger:
        try:
            return self._index_type(address - self._base)
        except RangeTypeError as exc:
            raise PointerOutOfBoundsError(
                "Goal pointer value out of bound",
                self.first, self.last, address, exc,
            ) from exc

    def _moved(self, n: int, forward: bool) -> BoundsCheckedPointer:
        try:
            offset = self._offset + n if forward else self._offset - n
        except (RangeTypeError, NotRepresentableError) as exc:
            # an operand outside int32 is out of bounds for any referent
            if forward:
                reason = "Pointer addition results in out of bound pointer value"
                goal = self.address + n
            else:
                reason = "Pointer subtraction results in out of bound pointer value"
                goal = self.address - n
            raise PointerOutOfBoundsError(
                reason, self.first, self.last, goal, exc,
            ) from exc
        return self._with_offset(offset)

    def _same_base(self, other: BoundsCheckedPointer, context: str) -> None:
        if other._base != self._base:
            raise MismatchedBaseError(context, self._base, other._base)

    # -- accessors --------------------------------------------------------

    @property
    def address(self) -> int:
        return self._base + self._offset.value

    @property
    def base(self) -> int:
        return self._base

    @property
    def first(self) -> int:
        return self._base

    @property
    def last(self) -> int:
        return self._base + self._index_type.high

    @property
    def size(self) -> int:
        return self._index_type.size

    @property
    def offset(self) -> RangeConstrainedInteger:
        return self._offset

    @property
    def index(self) -> int:
        return self._offset.value

    @property
    def obj(self):
        """The referent itself; not bounds checked."""
        return self._referent

    referent = obj

    # -- arithmetic -------------------------------------------------------

    def __add__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._moved(other, forward=True)

    __radd__ = __add__

    def __sub__(self, other):
        if not isinstance(other, int):
            return NotImplemented
        return self._moved(other, forward=False)

    def succ(self) -> BoundsCheckedPointer:
        return self + 1

    def pred(self) -> BoundsCheckedPointer:
        return self - 1

    def assign(self, other) -> BoundsCheckedPointer:
        """Pointer at ``other``'s address (a pointer or a raw address)."""
        if isinstance(other, BoundsCheckedPointer):
            self._same_base(other, "Goal pointer")
            return self._with_offset(self._offset_for(other.address))
        return self._with_offset(self._offset_for(operator.index(other)))

    # -- dereference ------------------------------------------------------

    def load(self) -> int:
        return self._view[self._offset.value]

    def store(self, value: int) -> None:
        self._view[self._offset.value] = UINT8.require(operator.index(value))

    def __getitem__(self, i: int) -> int:
        return self._view[(self + i).index]

    def __setitem__(self, i: int, value: int) -> None:
        self._view[(self + i).index] = UINT8.require(operator.index(value))

    # -- comparison -------------------------------------------------------

    def __eq__(self, other):
        if not isinstance(other, BoundsCheckedPointer):
            return NotImplemented
        self._same_base(other, "Pointers used in comparison")
        return self.address == other.address

    # -- rendering --------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.address:#x}"

    def __repr__(self) -> str:
        return (
            f"BoundsCheckedPointer({self.address:#x}, "
            f"index={self.index}, size={self.size})"
        )
