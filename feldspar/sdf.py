"""Fixed-precision signed values used for signed distance fields."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from typing import ClassVar


def _f32(x: float) -> float:
    """Round ``x`` to the nearest single-precision float."""
    return struct.unpack("<f", struct.pack("<f", x))[0]


def _constants(bits: int, max_value: float) -> tuple[int, float, float, float]:
    """Return ``(BITS, MAX_VALUE, RESOLUTION, PRECISION)`` for a type."""
    if bits < 2:
        raise ValueError("a fixed precision type needs at least 2 bits")
    if max_value <= 0:
        raise ValueError("max_value must be positive")
    resolution = _f32(float((1 << (bits - 1)) - 1))
    precision = _f32(_f32(max_value) / resolution)
    return bits, float(max_value), resolution, precision


@dataclass(frozen=True)
class FixedPrecision:
    """A signed integer that represents a float in ``[-MAX_VALUE, MAX_VALUE]``."""

    value: int

    BITS: ClassVar[int] = 0
    MAX_VALUE: ClassVar[float] = 0.0
    RESOLUTION: ClassVar[float] = 0.0
    PRECISION: ClassVar[float] = 0.0
    MIN: ClassVar["FixedPrecision"]
    MAX: ClassVar["FixedPrecision"]
    ZERO: ClassVar["FixedPrecision"]

    def __post_init__(self) -> None:
        if self.BITS == 0:
            raise TypeError("use fixed_precision_type to create a concrete type")
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError("fixed precision values hold an integer")
        low, high = self._limits()
        if not low <= self.value <= high:
            raise ValueError(f"{self.value} does not fit in {self.BITS} signed bits")

    @classmethod
    def _limits(cls) -> tuple[int, int]:
        high = (1 << (cls.BITS - 1)) - 1
        return -high - 1, high

    @classmethod
    def _install_constants(cls) -> None:
        high = (1 << (cls.BITS - 1)) - 1
        cls.MIN = cls(-high)
        cls.MAX = cls(high)
        cls.ZERO = cls(0)

    @classmethod
    def from_float(cls, value: float) -> "FixedPrecision":
        """Quantize ``value``, clamping it to the representable range."""
        limit = _f32(cls.MAX_VALUE)
        s = _f32(float(value))
        if math.isnan(s):
            clamped = limit
        else:
            clamped = max(min(s, limit), -limit)
        scaled = _f32(cls.RESOLUTION * clamped)
        low, high = cls._limits()
        return cls(max(low, min(high, math.trunc(scaled))))

    def to_float(self) -> float:
        """Return the float this value represents."""
        return _f32(_f32(float(self.value)) * self.PRECISION)

    def __float__(self) -> float:
        return self.to_float()


def fixed_precision_type(name: str, bits: int, max_value: float) -> type[FixedPrecision]:
    """Create a fixed-precision type stored in ``bits`` signed bits."""
    bits_, max_, resolution, precision = _constants(bits, max_value)
    namespace = {
        "BITS": bits_,
        "MAX_VALUE": max_,
        "RESOLUTION": resolution,
        "PRECISION": precision,
        "__module__": __name__,
        "__qualname__": name,
    }
    kind = type(name, (FixedPrecision,), namespace)
    kind._install_constants()
    return kind


class Sd8(FixedPrecision):
    """An 8-bit value in the range ``[-1.0, 1.0]``."""

    BITS, MAX_VALUE, RESOLUTION, PRECISION = _constants(8, 1.0)

    @classmethod
    def from_float(cls, value: float) -> "Sd8":
        """Quantize ``value`` to an 8-bit signed distance, clamping to ``[-1, 1]``."""
        return super().from_float(value)

    def to_float(self) -> float:
        """Return the signed distance this value represents."""
        return super().to_float()


Sd8._install_constants()