"""
Error taxonomy for the range types.

Range failures carry the violated interval, the attempted operation and
its operands so a caller can tell exactly what went wrong.  Pointer
failures wrap the underlying range failure and add the same information
expressed as addresses.
"""

from __future__ import annotations

from enum import Enum, auto
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from host import IntType


class ErrorKind(Enum):
    OUT_OF_RANGE = auto()
    ADDITION_OVERFLOW = auto()
    ADDITION_UNDERFLOW = auto()
    SUBTRACTION_OVERFLOW = auto()
    SUBTRACTION_UNDERFLOW = auto()
    MULTIPLICATION_OVERFLOW = auto()
    MULTIPLICATION_UNDERFLOW = auto()
    POINTER_OUT_OF_BOUNDS = auto()
    MISMATCHED_BASE = auto()


def _operand(v: int) -> str:
    return f"({v})" if v < 0 else str(v)


def describe(operation: str, operands: tuple[int, ...]) -> str:
    """Render an attempted operation the way error messages show it."""
    if len(operands) == 2:
        a, b = operands
        return f"Operation : {a} {operation} {_operand(b)}"
    if operation == "-" and len(operands) == 1:
        return f"Operation : -{_operand(operands[0])}"
    return "Goal : " + ", ".join(str(v) for v in operands)


# ---------------------------------------------------------------------------
# Range failures
# ---------------------------------------------------------------------------

class RangeTypeError(ArithmeticError):
    """Raised when a range-checked value would leave [low, high]."""

    kind: ErrorKind = ErrorKind.OUT_OF_RANGE
    reason: str = "Value is out of range"

    def __init__(
        self,
        low: int,
        high: int,
        operation: str,
        operands: tuple[int, ...],
        reason: str | None = None,
    ) -> None:
        self.low = low
        self.high = high
        self.operation = operation
        self.operands = tuple(operands)
        if reason is not None:
            self.reason = reason
        super().__init__(
            f"Range : [ {low}, {high} ]    {describe(operation, self.operands)}\n"
            f"{self.reason}"
        )


class OutOfRangeError(RangeTypeError):
    kind = ErrorKind.OUT_OF_RANGE
    reason = "Value is out of range"


class AdditionOverflowError(RangeTypeError):
    kind = ErrorKind.ADDITION_OVERFLOW
    reason = "Addition causes overflow"


class AdditionUnderflowError(RangeTypeError):
    kind = ErrorKind.ADDITION_UNDERFLOW
    reason = "Addition causes underflow"


class SubtractionOverflowError(RangeTypeError):
    kind = ErrorKind.SUBTRACTION_OVERFLOW
    reason = "Subtraction causes overflow"


class SubtractionUnderflowError(RangeTypeError):
    kind = ErrorKind.SUBTRACTION_UNDERFLOW
    reason = "Subtraction causes underflow"


class MultiplicationOverflowError(RangeTypeError):
    kind = ErrorKind.MULTIPLICATION_OVERFLOW
    reason = "Multiplication causes overflow"


class MultiplicationUnderflowError(RangeTypeError):
    kind = ErrorKind.MULTIPLICATION_UNDERFLOW
    reason = "Multiplication causes underflow"


# ---------------------------------------------------------------------------
# Pointer failures
# ---------------------------------------------------------------------------

class PointerError(Exception):
    """Base class for bounds-checked pointer failures."""

    kind: ErrorKind


class PointerOutOfBoundsError(PointerError):
    """Raised when a pointer would point outside its referent."""

    kind = ErrorKind.POINTER_OUT_OF_BOUNDS

    def __init__(
        self,
        reason: str,
        first: int,
        last: int,
        goal: int,
        cause: RangeTypeError | NotRepresentableError,
    ) -> None:
        self.reason = reason
        self.first = first
        self.last = last
        self.goal = goal
        self.cause = cause
        super().__init__(
            f"{reason}\n"
            f"Expressed in pointers:\n"
            f"Range : [ {first:#x}, {last:#x} ]    Goal : {goal:#x}\n"
            f"Expressed in indices:\n"
            f"{cause}"
        )


class MismatchedBaseError(PointerError):
    """Raised when pointers anchored to different referents are mixed."""

    kind = ErrorKind.MISMATCHED_BASE

    def __init__(self, context: str, left_base: int, right_base: int) -> None:
        self.context = context
        self.left_base = left_base
        self.right_base = right_base
        super().__init__(
            f"{context} has different base    "
            f"left base : {left_base:#x} right base : {right_base:#x}"
        )


# ---------------------------------------------------------------------------
# Host-level failures
# ---------------------------------------------------------------------------

class NotRepresentableError(ValueError):
    """Raised when an int operand is not a value of the host type."""

    def __init__(self, value: int, host: IntType) -> None:
        self.value = value
        self.host = host
        super().__init__(
            f"{value} is not representable in {host.name} "
            f"[{host.min}, {host.max}]"
        )


class HostOverflowError(ArithmeticError):
    """
    A host primitive produced an unrepresentable result.

    This models undefined behaviour in the host type.  The arithmetic
    layers never let it happen, so seeing one means an algorithm is wrong.
    """

    def __init__(self, host: IntType, operation: str, operands: tuple[int, ...]) -> None:
        self.host = host
        self.operation = operation
        self.operands = tuple(operands)
        super().__init__(
            f"{host.name} primitive {operation!r} overflowed on {self.operands}"
        )
