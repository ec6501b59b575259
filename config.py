"""Parameter sets for the range types.

A parameter set plays the role of a template argument list: the host
type plus the bound (modular) or the interval (ranged).  Each set is
validated once when the model is built; the factory then caches the
class it produces per set, so the models are frozen and hashable.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, StrictInt, model_validator

from host import IntType


class ModularConfig(BaseModel):
    """Parameters of a ModularInteger: values live in [0, bound)."""

    model_config = ConfigDict(frozen=True)

    host: IntType
    bound: StrictInt

    @model_validator(mode="after")
    def bound_fits_host(self) -> ModularConfig:
        if self.bound <= 0:
            raise ValueError(f"bound ({self.bound}) must be positive")
        if self.bound > self.host.max:
            raise ValueError(
                f"bound ({self.bound}) exceeds {self.host.name} maximum "
                f"({self.host.max})"
            )
        return self

    def label(self) -> str:
        return f"{self.host.name}, {self.bound}"


class RangeConfig(BaseModel):
    """Parameters of a RangeConstrainedInteger: values live in [low, high]."""

    model_config = ConfigDict(frozen=True)

    host: IntType
    low: StrictInt
    high: StrictInt

    @model_validator(mode="after")
    def interval_fits_host(self) -> RangeConfig:
        if self.low < self.host.min:
            raise ValueError(
                f"low ({self.low}) is smaller than {self.host.name} minimum "
                f"({self.host.min})"
            )
        if self.high > self.host.max:
            raise ValueError(
                f"high ({self.high}) exceeds {self.host.name} maximum "
                f"({self.host.max})"
            )
        if self.low > self.high:
            raise ValueError(f"low ({self.low}) must be <= high ({self.high})")
        return self

    @property
    def size(self) -> int:
        """Number of values in the interval."""
        return self.high - self.low + 1

    def contains(self, value: int) -> bool:
        return self.low <= value <= self.high

    def label(self) -> str:
        return f"{self.host.name}, {self.low}, {self.high}"
