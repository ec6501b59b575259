"""
Tests for bounds-checked pointers.

A pointer may move anywhere inside its referent and nowhere else.  Every
failure carries the same range story twice: once in addresses and once
in indices.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import ctypes

import pytest

from errors import (
    AdditionOverflowError,
    ErrorKind,
    MismatchedBaseError,
    NotRepresentableError,
    OutOfRangeError,
    PointerOutOfBoundsError,
    SubtractionUnderflowError,
)
from host import INT32
from pointer import BoundsCheckedPointer


class Pair(ctypes.Structure):
    _fields_ = [("x", ctypes.c_uint32), ("y", ctypes.c_uint32)]


@pytest.fixture
def buf():
    return bytearray(range(8))


@pytest.fixture
def p(buf):
    return BoundsCheckedPointer(buf)


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_starts_at_base(self, p, buf):
        assert p.index == 0
        assert p.address == p.base == p.first == id(buf)
        assert p.last == p.base + 7
        assert p.size == 8

    def test_at_index(self, buf):
        q = BoundsCheckedPointer.at(buf, 7)
        assert q.index == 7
        assert q.load() == 7

    def test_at_index_out_of_bounds(self, buf):
        with pytest.raises(PointerOutOfBoundsError, match="Goal pointer value out of bound"):
            BoundsCheckedPointer.at(buf, 8)

    def test_from_address(self, p, buf):
        q = BoundsCheckedPointer(buf, p.address + 3)
        assert q.index == 3
        with pytest.raises(PointerOutOfBoundsError):
            BoundsCheckedPointer(buf, p.address - 1)

    def test_ctypes_base_is_data_address(self):
        value = ctypes.c_uint64(0)
        q = BoundsCheckedPointer(value)
        assert q.base == ctypes.addressof(value)
        assert q.size == 8

    def test_zero_sized_referent(self):
        with pytest.raises(ValueError):
            BoundsCheckedPointer(bytearray())

    def test_not_a_buffer(self):
        with pytest.raises(TypeError):
            BoundsCheckedPointer(42)

    def test_offset_type(self, p):
        index_type = type(p.offset)
        assert index_type.host == INT32
        assert (index_type.low, index_type.high) == (0, 7)

    def test_referent_kept(self, p, buf):
        assert p.obj is buf
        assert p.referent is buf


# ---------------------------------------------------------------------------
# Movement
# ---------------------------------------------------------------------------

class TestMovement:
    def test_round_trip(self, p):
        assert (p + 5 - 5) == p
        assert (p + 5).index == 5
        assert (5 + p).index == 5

    def test_succ_pred(self, p):
        q = p.succ().succ()
        assert q.index == 2
        assert q.pred().index == 1

    def test_compound_assignment(self, p):
        q = p
        q += 7
        assert q.index == 7
        q -= 7
        assert q == p

    def test_past_last(self, buf):
        last = BoundsCheckedPointer.at(buf, 7)
        with pytest.raises(PointerOutOfBoundsError) as info:
            last + 1
        err = info.value
        assert err.kind is ErrorKind.POINTER_OUT_OF_BOUNDS
        assert isinstance(err.cause, AdditionOverflowError)
        assert isinstance(err.__cause__, AdditionOverflowError)
        assert err.goal == last.address + 1
        assert (err.first, err.last) == (last.first, last.last)

    def test_before_first(self, p):
        with pytest.raises(PointerOutOfBoundsError) as info:
            p - 1
        assert isinstance(info.value.cause, SubtractionUnderflowError)
        assert "Pointer subtraction results in out of bound pointer value" in str(info.value)

    def test_message_in_both_units(self, buf):
        last = BoundsCheckedPointer.at(buf, 7)
        with pytest.raises(PointerOutOfBoundsError) as info:
            last + 1
        text = str(info.value)
        assert "Pointer addition results in out of bound pointer value" in text
        assert "Expressed in pointers:" in text
        assert f"Range : [ {last.first:#x}, {last.last:#x} ]" in text
        assert f"Goal : {last.address + 1:#x}" in text
        assert "Expressed in indices:" in text
        assert "Range : [ 0, 7 ]" in text

    def test_failed_move_leaves_pointer(self, p):
        with pytest.raises(PointerOutOfBoundsError):
            p - 1
        assert p.index == 0

    def test_operand_outside_int32(self, p):
        with pytest.raises(PointerOutOfBoundsError) as info:
            p + 2**40
        assert isinstance(info.value.cause, NotRepresentableError)
        assert info.value.goal == p.address + 2**40
        with pytest.raises(PointerOutOfBoundsError, match="Pointer subtraction"):
            p - 2**31
        with pytest.raises(PointerOutOfBoundsError):
            p[2**31]

    def test_pointer_plus_pointer_undefined(self, p):
        with pytest.raises(TypeError):
            p + p
        with pytest.raises(TypeError):
            p - p
        with pytest.raises(TypeError):
            p * 2
        with pytest.raises(TypeError):
            3 - p

    def test_assign(self, p, buf):
        q = BoundsCheckedPointer.at(buf, 4)
        assert p.assign(q).index == 4
        assert p.assign(p.address + 6).index == 6
        with pytest.raises(PointerOutOfBoundsError):
            p.assign(p.address + 8)

    def test_assign_other_referent(self, p):
        other = BoundsCheckedPointer(bytearray(8))
        with pytest.raises(MismatchedBaseError, match="Goal pointer has different base"):
            p.assign(other)


# ---------------------------------------------------------------------------
# Dereference
# ---------------------------------------------------------------------------

class TestDereference:
    def test_load(self, p):
        assert (p + 3).load() == 3

    def test_store(self, p, buf):
        (p + 2).store(200)
        assert buf[2] == 200

    def test_indexing(self, p, buf):
        assert p[7] == 7
        q = p + 4
        assert q[-4] == 0
        q[1] = 99
        assert buf[5] == 99

    def test_indexing_out_of_bounds(self, p):
        with pytest.raises(PointerOutOfBoundsError):
            p[8]
        with pytest.raises(PointerOutOfBoundsError):
            p[-1] = 0

    def test_store_not_a_byte(self, p):
        with pytest.raises(NotRepresentableError):
            p.store(256)

    def test_read_only_referent(self):
        q = BoundsCheckedPointer(b"abc")
        assert q.load() == ord("a")
        with pytest.raises(TypeError):
            q.store(0)

    def test_ctypes_store(self):
        value = ctypes.c_uint64(0)
        q = BoundsCheckedPointer(value)
        q.store(0xFF)
        assert bytes(value)[0] == 0xFF
        assert value.value != 0

    def test_structure(self):
        pair = Pair(1, 2)
        q = BoundsCheckedPointer(pair)
        assert q.size == ctypes.sizeof(Pair)
        offset = Pair.y.offset
        assert bytes(pair)[offset:offset + 4] == (2).to_bytes(4, sys.byteorder)
        assert q[offset] == bytes(pair)[offset]


# ---------------------------------------------------------------------------
# Comparison and rendering
# ---------------------------------------------------------------------------

class TestComparison:
    def test_same_referent(self, p, buf):
        assert p == BoundsCheckedPointer(buf)
        assert p != p + 1

    def test_different_referents(self, p):
        other = BoundsCheckedPointer(bytearray(8))
        with pytest.raises(MismatchedBaseError) as info:
            p == other
        assert info.value.kind is ErrorKind.MISMATCHED_BASE
        assert "Pointers used in comparison" in str(info.value)
        with pytest.raises(MismatchedBaseError):
            p != other

    def test_unhashable(self, p):
        with pytest.raises(TypeError):
            hash(p)
        with pytest.raises(TypeError):
            {p}

    def test_not_a_pointer(self, p):
        assert p != p.address
        assert not (p == "p")

    def test_rendering(self, p):
        assert str(p) == hex(p.address)
        assert "index=0" in repr(p)
        assert "size=8" in repr(p)


# ---------------------------------------------------------------------------
# The offset type does the checking
# ---------------------------------------------------------------------------

class TestOffset:
    def test_offset_is_range_checked(self, p):
        index_type = type(p.offset)
        with pytest.raises(OutOfRangeError):
            index_type(8)
        assert (p + 3).offset == index_type(3)
