"""An N-dimensional view over a flat sequence."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, MutableSequence, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class GridShape:
    """A dense N-dimensional grid shape where the first axis varies fastest."""

    dims: tuple[int, ...]

    def __post_init__(self) -> None:
        dims = tuple(self.dims)
        if not dims:
            raise ValueError("a grid shape needs at least one dimension")
        if any(d <= 0 for d in dims):
            raise ValueError("grid dimensions must be positive")
        object.__setattr__(self, "dims", dims)

    @property
    def size(self) -> int:
        return math.prod(self.dims)

    def linearize(self, point: Sequence[int]) -> int:
        """Return the flat index of ``point``."""
        point = tuple(point)
        if len(point) != len(self.dims):
            raise ValueError(
                f"expected {len(self.dims)} coordinates, got {len(point)}"
            )
        index = 0
        for coord, dim in zip(reversed(point), reversed(self.dims)):
            if not 0 <= coord < dim:
                raise IndexError(f"point {point} is outside shape {self.dims}")
            index = index * dim + coord
        return index

    def delinearize(self, index: int) -> tuple[int, ...]:
        """Return the point stored at flat ``index``."""
        if not 0 <= index < self.size:
            raise IndexError(f"index {index} is outside shape {self.dims}")
        point = []
        for dim in self.dims:
            index, coord = divmod(index, dim)
            point.append(coord)
        return tuple(point)


class NdView(Generic[T]):
    """Index a flat sequence of values with N-dimensional integer coordinates."""

    def __init__(self, values: MutableSequence[T], shape: GridShape) -> None:
        self.values = values
        self.shape = shape

    def __getitem__(self, index: Sequence[int]) -> T:
        return self.values[self.shape.linearize(index)]

    def __setitem__(self, index: Sequence[int], value: T) -> None:
        self.values[self.shape.linearize(index)] = value