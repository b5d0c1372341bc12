"""Unit markers that tag a value as being measured in voxels or in chunks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")
S = TypeVar("S")
R = TypeVar("R")


def _check_same_unit(this: Any, other: Any) -> None:
    if type(other) is not type(this):
        raise TypeError(
            f"cannot combine {type(this).__name__} with {type(other).__name__}"
        )


@dataclass(frozen=True)
class VoxelUnits(Generic[T]):
    """The inner value is given in units of voxels. LOD is left unspecified."""

    value: T

    def into_inner(self) -> T:
        """Return the wrapped value."""
        return self.value

    def map(self, f: Callable[[T], S]) -> "VoxelUnits[S]":
        """Apply ``f`` to the wrapped value, keeping the unit."""
        return VoxelUnits(f(self.value))

    def map2(self, other: "VoxelUnits[S]", f: Callable[[T, S], R]) -> "VoxelUnits[R]":
        """Combine this value with another voxel-unit value using ``f``."""
        _check_same_unit(self, other)
        return VoxelUnits(f(self.value, other.value))


@dataclass(frozen=True)
class ChunkUnits(Generic[T]):
    """The inner value is given in units of chunks. LOD is left unspecified."""

    value: T

    def into_inner(self) -> T:
        """Return the wrapped value."""
        return self.value

    def map(self, f: Callable[[T], S]) -> "ChunkUnits[S]":
        """Apply ``f`` to the wrapped value, keeping the unit."""
        return ChunkUnits(f(self.value))

    def map2(self, other: "ChunkUnits[S]", f: Callable[[T, S], R]) -> "ChunkUnits[R]":
        """Combine this value with another chunk-unit value using ``f``."""
        _check_same_unit(self, other)
        return ChunkUnits(f(self.value, other.value))