"""Halve the resolution of chunk data by reducing each 2x2x2 octant."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import MutableSequence, Optional, Sequence

from feldspar.coordinates import CUBE_CORNERS, Extent
from feldspar.ndview import GridShape
from feldspar.sdf import Sd8

LABEL_COUNT = 256
OCTANT_SIZE = 8

# Besides taking the mean over the octant volume, the signed distance is
# re-normalized by dividing by 2.
_RESCALE = 1.0 / (2.0 * 8.0)


def _f32(x: float) -> float:
    return struct.unpack("<f", struct.pack("<f", x))[0]


@dataclass(frozen=True)
class LabelCount:
    """How many times ``label`` occurred in an octant."""

    count: int
    label: int


class OctantModeCounter:
    """Counts labels in a population of at most eight and finds the mode.

    Adding a ninth distinct label raises ``OverflowError``.
    """

    def __init__(self) -> None:
        self.counts: list[Optional[LabelCount]] = [None] * OCTANT_SIZE
        self._label_to_slot: dict[int, int] = {}

    def add(self, label: int) -> None:
        """Count one occurrence of ``label``."""
        if isinstance(label, bool) or not isinstance(label, int):
            raise TypeError("labels are integers")
        if not 0 <= label < LABEL_COUNT:
            raise ValueError(f"label {label} is not an 8-bit value")
        slot = self._label_to_slot.get(label)
        if slot is None:
            slot = len(self._label_to_slot)
            if slot >= OCTANT_SIZE:
                raise OverflowError(
                    f"an octant counter holds at most {OCTANT_SIZE} distinct labels"
                )
            self._label_to_slot[label] = slot
            self.counts[slot] = LabelCount(count=0, label=label)
        current = self.counts[slot]
        self.counts[slot] = LabelCount(count=current.count + 1, label=label)

    def get_mode_and_reset(self) -> LabelCount:
        """Return the most frequent label, earliest on ties, and clear all counts."""
        old_counts = self.counts
        self.counts = [None] * OCTANT_SIZE
        self._label_to_slot.clear()
        best: Optional[LabelCount] = None
        for elem in old_counts:
            if elem is not None and (best is None or elem.count > best.count):
                best = elem
        if best is None:
            raise ValueError("no labels were counted")
        return best


class OctantKernel:
    """Downsamples chunks laid out in ``shape`` by reducing each octant."""

    def __init__(self, shape: GridShape) -> None:
        if len(shape.dims) != 3:
            raise ValueError("octant kernels work on 3-dimensional chunks")
        if any(d % 2 for d in shape.dims):
            raise ValueError("chunk dimensions must be even")
        self.shape = shape
        self._strides = tuple(shape.linearize(corner) for corner in CUBE_CORNERS)
        self._mode_counter = OctantModeCounter()

    def _octants(self):
        half = tuple(d >> 1 for d in self.shape.dims)
        for p in Extent.from_min_and_shape((0, 0, 0), half).iter3():
            dst_i = self.shape.linearize(p)
            yield dst_i, dst_i << 1

    def downsample_sdf(
        self, src: Sequence[Sd8], dst_offset: int, dst: MutableSequence[Sd8]
    ) -> None:
        """Write the mean of each octant of ``src``, rescaled by 1/2, into ``dst``."""
        for dst_i, src_i in self._octants():
            total = 0.0
            for stride in self._strides:
                total = _f32(total + _f32(float(src[src_i + stride])))
            dst[dst_offset + dst_i] = Sd8.from_float(_f32(total * _RESCALE))

    def downsample_labels(
        self, src: Sequence[int], dst_offset: int, dst: MutableSequence[int]
    ) -> None:
        """Write the mode of each octant of ``src`` into ``dst``."""
        for dst_i, src_i in self._octants():
            for stride in self._strides:
                self._mode_counter.add(src[src_i + stride])
            dst[dst_offset + dst_i] = self._mode_counter.get_mode_and_reset().label