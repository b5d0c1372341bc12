"""Lookup tables that split a 2x2x2 neighborhood of nodes into child neighborhoods."""

from __future__ import annotations

from feldspar.coordinates import CUBE_CORNERS
from feldspar.ndview import GridShape

Table = tuple[tuple[int, ...], ...]

# For the neighborhood whose minimum is child ``i`` of the minimum parent, entry
# ``[i][j]`` is the child index (within its own parent) of neighbor ``j``.
NEIGHBORHOODS: Table = (
    (0b000, 0b001, 0b010, 0b011, 0b100, 0b101, 0b110, 0b111),
    (0b001, 0b000, 0b011, 0b010, 0b101, 0b100, 0b111, 0b110),
    (0b010, 0b011, 0b000, 0b001, 0b110, 0b111, 0b100, 0b101),
    (0b011, 0b010, 0b001, 0b000, 0b111, 0b110, 0b101, 0b100),
    (0b100, 0b101, 0b110, 0b111, 0b000, 0b001, 0b010, 0b011),
    (0b101, 0b100, 0b111, 0b110, 0b001, 0b000, 0b011, 0b010),
    (0b110, 0b111, 0b100, 0b101, 0b010, 0b011, 0b000, 0b001),
    (0b111, 0b110, 0b101, 0b100, 0b011, 0b010, 0b001, 0b000),
)

# Entry ``[i][j]`` is the index, within the parent neighborhood, of the parent
# that owns neighbor ``j`` of child neighborhood ``i``.
NEIGHBORHOODS_PARENTS: Table = (
    (0b000, 0b000, 0b000, 0b000, 0b000, 0b000, 0b000, 0b000),
    (0b000, 0b001, 0b000, 0b001, 0b000, 0b001, 0b000, 0b001),
    (0b000, 0b000, 0b010, 0b010, 0b000, 0b000, 0b010, 0b010),
    (0b000, 0b001, 0b010, 0b011, 0b000, 0b001, 0b010, 0b011),
    (0b000, 0b000, 0b000, 0b000, 0b100, 0b100, 0b100, 0b100),
    (0b000, 0b001, 0b000, 0b001, 0b100, 0b101, 0b100, 0b101),
    (0b000, 0b000, 0b010, 0b010, 0b100, 0b100, 0b110, 0b110),
    (0b000, 0b001, 0b010, 0b011, 0b100, 0b101, 0b110, 0b111),
)

_HALF_SHAPE = GridShape((2, 2, 2))
_FULL_SHAPE = GridShape((4, 4, 4))


def _scale(v, k: int) -> tuple[int, ...]:
    return tuple(c * k for c in v)


def _add(a, b) -> tuple[int, ...]:
    return tuple(x + y for x, y in zip(a, b))


def generate_neighborhoods() -> tuple[Table, Table]:
    """Compute ``(NEIGHBORHOODS, NEIGHBORHOODS_PARENTS)`` from first principles."""
    grid = [0] * _FULL_SHAPE.size
    for parent_corner in CUBE_CORNERS:
        minimum = _scale(parent_corner, 2)
        for child_corner in CUBE_CORNERS:
            pos = _add(minimum, child_corner)
            grid[_FULL_SHAPE.linearize(pos)] = _HALF_SHAPE.linearize(child_corner)

    neighborhoods = [[0] * 8 for _ in range(8)]
    parents = [[0] * 8 for _ in range(8)]
    for minimum in CUBE_CORNERS:
        i1 = _HALF_SHAPE.linearize(minimum)
        for offset in CUBE_CORNERS:
            i2 = _HALF_SHAPE.linearize(offset)
            pos = _add(minimum, offset)
            parent = tuple(c >> 1 for c in pos)
            neighborhoods[i1][i2] = grid[_FULL_SHAPE.linearize(pos)]
            parents[i1][i2] = _HALF_SHAPE.linearize(parent)

    return (
        tuple(tuple(row) for row in neighborhoods),
        tuple(tuple(row) for row in parents),
    )


def format_binary3(value: int) -> str:
    """Format a child index as a binary triplet such as ``0b101``."""
    return format(value, "#05b")