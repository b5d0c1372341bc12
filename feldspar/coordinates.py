"""Conversions between voxel, chunk and octree coordinates."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Sequence, Union

from feldspar.units import ChunkUnits, VoxelUnits

IVec3 = tuple[int, int, int]
Vec3 = tuple[float, float, float]
Log2 = Union[int, Sequence[int]]

# Ordered so that X increases first, then Y, then Z.
CUBE_CORNERS: tuple[IVec3, ...] = (
    (0, 0, 0),
    (1, 0, 0),
    (0, 1, 0),
    (1, 1, 0),
    (0, 0, 1),
    (1, 0, 1),
    (0, 1, 1),
    (1, 1, 1),
)


def _vec3(v) -> tuple:
    t = tuple(v)
    if len(t) != 3:
        raise ValueError(f"expected 3 components, got {len(t)}")
    return t


def _per_axis(n: Log2) -> IVec3:
    if isinstance(n, int):
        return (n, n, n)
    return _vec3(n)


def _add(a, b) -> tuple:
    return tuple(x + y for x, y in zip(a, b))


def _sub(a, b) -> tuple:
    return tuple(x - y for x, y in zip(a, b))


def _shl(a, n: Log2) -> IVec3:
    return tuple(x << k for x, k in zip(a, _per_axis(n)))


def _shr(a, n: Log2) -> IVec3:
    return tuple(x >> k for x, k in zip(a, _per_axis(n)))


def _chunk_shape(chunk_shape_log2: Log2) -> IVec3:
    return tuple(1 << k for k in _per_axis(chunk_shape_log2))


def _all_int(v) -> bool:
    return all(isinstance(c, int) and not isinstance(c, bool) for c in v)


@dataclass(frozen=True)
class Extent:
    """An axis-aligned box given by its minimum corner and its shape."""

    minimum: tuple
    shape: tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "minimum", _vec3(self.minimum))
        object.__setattr__(self, "shape", _vec3(self.shape))

    @property
    def is_integer(self) -> bool:
        return _all_int(self.minimum) and _all_int(self.shape)

    @classmethod
    def from_min_and_shape(cls, minimum, shape) -> "Extent":
        return cls(minimum, shape)

    @classmethod
    def from_min_and_max(cls, minimum, maximum) -> "Extent":
        """Build an extent from corners; integer maxima are inclusive."""
        minimum, maximum = _vec3(minimum), _vec3(maximum)
        shape = _sub(maximum, minimum)
        if _all_int(minimum) and _all_int(maximum):
            shape = tuple(s + 1 for s in shape)
        return cls(minimum, shape)

    def _least_upper_bound(self) -> tuple:
        return _add(self.minimum, self.shape)

    def max(self) -> tuple:
        """The maximum corner; inclusive for integer extents."""
        lub = self._least_upper_bound()
        if self.is_integer:
            return tuple(c - 1 for c in lub)
        return lub

    def _require_integer(self) -> None:
        if not self.is_integer:
            raise TypeError("operation requires an integer extent")

    def iter3(self) -> Iterator[IVec3]:
        """Yield every lattice point, X varying fastest."""
        self._require_integer()
        (x0, y0, z0), (x1, y1, z1) = self.minimum, self._least_upper_bound()
        for z in range(z0, z1):
            for y in range(y0, y1):
                for x in range(x0, x1):
                    yield (x, y, z)

    def shifted_left(self, levels: Log2) -> "Extent":
        """Multiply minimum and shape by ``2 ** levels``."""
        self._require_integer()
        return Extent(_shl(self.minimum, levels), _shl(self.shape, levels))

    def containing_integer_extent(self) -> "Extent":
        """The smallest integer extent that contains this one."""
        minimum = tuple(math.floor(c) for c in self.minimum)
        lub = tuple(math.ceil(c) for c in self._least_upper_bound())
        return Extent(minimum, _sub(lub, minimum))

    def __contains__(self, point) -> bool:
        point = _vec3(point)
        lub = self._least_upper_bound()
        return all(lo <= p < hi for p, lo, hi in zip(point, self.minimum, lub))


@dataclass(frozen=True)
class Sphere:
    center: Vec3
    radius: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", tuple(float(c) for c in _vec3(self.center)))

    def aabb(self) -> Extent:
        """The axis-aligned bounding box of the sphere."""
        r = self.radius
        return Extent.from_min_and_shape(
            tuple(c - r for c in self.center), (2.0 * r,) * 3
        )


def chunk_extent_from_min(
    minimum: VoxelUnits, chunk_shape_log2: Log2
) -> VoxelUnits:
    shape = _chunk_shape(chunk_shape_log2)
    return minimum.map(lambda m: Extent.from_min_and_shape(_vec3(m), shape))


def chunk_extent_at_level(
    level: int, coordinates: ChunkUnits, chunk_shape_log2: Log2
) -> VoxelUnits:
    """The voxel extent of the chunk at ``(level, coordinates)``."""
    minimum = _shl(_vec3(coordinates.value), level)
    shape = _shl(_chunk_shape(chunk_shape_log2), level)
    return VoxelUnits(Extent.from_min_and_shape(minimum, shape))


def chunk_min(coordinates: ChunkUnits, chunk_shape_log2: Log2) -> VoxelUnits:
    return VoxelUnits(_shl(_vec3(coordinates.value), chunk_shape_log2))


def chunk_extent(coordinates: ChunkUnits, chunk_shape_log2: Log2) -> VoxelUnits:
    return chunk_extent_from_min(chunk_min(coordinates, chunk_shape_log2), chunk_shape_log2)


def in_chunk_extent(extent: VoxelUnits, chunk_shape_log2: Log2) -> ChunkUnits:
    """The extent of chunk coordinates covering every chunk that ``extent`` touches."""
    e = extent.value
    return ChunkUnits(
        Extent.from_min_and_max(
            _shr(e.minimum, chunk_shape_log2), _shr(e.max(), chunk_shape_log2)
        )
    )


def in_chunk(point: VoxelUnits, chunk_shape_log2: Log2) -> ChunkUnits:
    """The coordinates of the chunk that contains ``point``."""
    return ChunkUnits(_shr(_vec3(point.value), chunk_shape_log2))


def ancestor_extent(levels_up: int, extent: Extent) -> Extent:
    return Extent.from_min_and_max(
        _shr(extent.minimum, levels_up), _shr(extent.max(), levels_up)
    )


def descendant_extent(levels_down: int, extent: Extent) -> Extent:
    return extent.shifted_left(levels_down)


def min_child_coords(parent_coords: IVec3) -> IVec3:
    return _shl(_vec3(parent_coords), 1)


def parent_coords(child_coords: IVec3) -> IVec3:
    return _shr(_vec3(child_coords), 1)


def min_sibling_coords(coords: IVec3) -> IVec3:
    return min_child_coords(parent_coords(coords))


def child_index(coords: IVec3) -> int:
    x, y, z = _sub(_vec3(coords), min_sibling_coords(coords))
    return x | (y << 1) | (z << 2)


def children(parent_coords: IVec3) -> Iterator[tuple[int, IVec3]]:
    """Yield ``(child_index, child_coords)`` for all eight children."""
    min_child = min_child_coords(parent_coords)
    for index, corner in enumerate(CUBE_CORNERS):
        yield index, _add(min_child, corner)


def chunk_bounding_sphere(
    level: int, coords: ChunkUnits, chunk_shape_log2: Log2
) -> VoxelUnits:
    """A sphere at LOD0 that bounds the chunk at ``(level, coords)``."""

    def bound(e: Extent) -> Sphere:
        lod0 = descendant_extent(level, e)
        center = tuple(float(c) for c in _add(lod0.minimum, _shr(lod0.shape, 1)))
        radius = float(max(lod0.shape) >> 1) * math.sqrt(3.0)
        return Sphere(center, radius)

    return chunk_extent_at_level(level, coords, chunk_shape_log2).map(bound)


def sphere_intersecting_ancestor_chunk_extent(
    lod0_sphere: VoxelUnits, level: int, chunk_shape_log2: Log2
) -> ChunkUnits:
    """The extent covering all chunks at ``level`` which intersect ``lod0_sphere``."""
    sphere_extent = in_chunk_extent(
        lod0_sphere.map(lambda s: s.aabb().containing_integer_extent()),
        chunk_shape_log2,
    )
    return sphere_extent.map(lambda e: ancestor_extent(level, e))