"""Database keys for chunks: a level of detail plus a Morton code."""

from __future__ import annotations

from dataclasses import dataclass

from feldspar.coordinates import Extent

_I32_MIN = -(1 << 31)
_I32_MAX = (1 << 31) - 1
_BIAS = 1 << 31
_MORTON_BITS = 96
_MORTON_BYTES = _MORTON_BITS // 8
_KEY_BYTES = 1 + _MORTON_BYTES


def _spread(v: int) -> int:
    return sum(((v >> bit) & 1) << (3 * bit) for bit in range(32))


def _compact(v: int) -> int:
    return sum(((v >> (3 * bit)) & 1) << bit for bit in range(32))


def _check_level(level: int) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise TypeError("levels are integers")
    if not 0 <= level <= 0xFF:
        raise ValueError(f"level {level} does not fit in 8 bits")
    return level


@dataclass(frozen=True, order=True)
class Morton3:
    """A 96-bit Morton code of a 3D point with 32-bit signed coordinates.

    Coordinates are biased so that the order of each axis is preserved; X
    takes the least significant bit of each triple.
    """

    value: int

    def __post_init__(self) -> None:
        if not 0 <= self.value < (1 << _MORTON_BITS):
            raise ValueError("a Morton code uses at most 96 bits")

    @classmethod
    def from_coords(cls, coords) -> "Morton3":
        coords = tuple(coords)
        if len(coords) != 3:
            raise ValueError(f"expected 3 coordinates, got {len(coords)}")
        for c in coords:
            if not _I32_MIN <= c <= _I32_MAX:
                raise ValueError(f"coordinate {c} does not fit in 32 bits")
        x, y, z = (c + _BIAS for c in coords)
        return cls(_spread(x) | (_spread(y) << 1) | (_spread(z) << 2))

    def to_coords(self) -> tuple[int, int, int]:
        return tuple(_compact(self.value >> axis) - _BIAS for axis in range(3))


@dataclass(frozen=True, order=True)
class ChunkDbKey:
    """Orders first by level, then by Morton code; byte keys sort the same way."""

    level: int
    morton: Morton3

    def __post_init__(self) -> None:
        _check_level(self.level)

    @classmethod
    def from_coords(cls, level: int, coords) -> "ChunkDbKey":
        return cls(level, Morton3.from_coords(coords))

    def coordinates(self) -> tuple[int, int, int]:
        return self.morton.to_coords()

    def to_bytes(self) -> bytes:
        """13 bytes: one for the level and twelve for the Morton code."""
        return bytes([self.level]) + self.morton.value.to_bytes(_MORTON_BYTES, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "ChunkDbKey":
        if len(data) != _KEY_BYTES:
            raise ValueError(f"a chunk key is {_KEY_BYTES} bytes, got {len(data)}")
        return cls(data[0], Morton3(int.from_bytes(data[1:], "big")))

    @classmethod
    def extent_range(cls, level: int, extent: Extent) -> tuple["ChunkDbKey", "ChunkDbKey"]:
        """The inclusive key range that covers every point of ``extent``."""
        return (
            cls.from_coords(level, extent.minimum),
            cls.from_coords(level, extent.max()),
        )

    @classmethod
    def min_key(cls, level: int) -> "ChunkDbKey":
        return cls.from_coords(level, (_I32_MIN,) * 3)

    @classmethod
    def max_key(cls, level: int) -> "ChunkDbKey":
        return cls.from_coords(level, (_I32_MAX,) * 3)