import pytest

from feldspar.coordinates import CUBE_CORNERS, Extent
from feldspar.ndview import GridShape
from feldspar.sampling import LabelCount, OctantKernel, OctantModeCounter
from feldspar.sdf import Sd8


def test_single_label_is_mode():
    counter = OctantModeCounter()
    counter.add(1)
    assert counter.counts == [LabelCount(label=1, count=1)] + [None] * 7
    assert counter.get_mode_and_reset() == LabelCount(label=1, count=1)


def test_single_label_twice_is_mode_with_count_two():
    counter = OctantModeCounter()
    counter.add(1)
    counter.add(1)
    assert counter.counts == [LabelCount(label=1, count=2)] + [None] * 7
    assert counter.get_mode_and_reset() == LabelCount(label=1, count=2)


def test_two_labels_tie_for_mode():
    counter = OctantModeCounter()
    counter.add(1)
    counter.add(0)
    assert counter.counts == [
        LabelCount(label=1, count=1),
        LabelCount(label=0, count=1),
    ] + [None] * 6
    assert counter.get_mode_and_reset() == LabelCount(label=1, count=1)


def test_many_labels():
    counter = OctantModeCounter()
    for label in [1, 8, 2, 4, 4, 4, 3, 3, 3, 3]:
        counter.add(label)
    assert counter.counts == [
        LabelCount(label=1, count=1),
        LabelCount(label=8, count=1),
        LabelCount(label=2, count=1),
        LabelCount(label=4, count=3),
        LabelCount(label=3, count=4),
        None,
        None,
        None,
    ]
    assert counter.get_mode_and_reset() == LabelCount(label=3, count=4)


def test_reset_clears_counts_and_allows_reuse():
    counter = OctantModeCounter()
    for label in range(8):
        counter.add(label)
    counter.get_mode_and_reset()
    assert counter.counts == [None] * 8
    for label in range(10, 18):
        counter.add(label)
    assert counter.get_mode_and_reset() == LabelCount(label=10, count=1)


def test_ninth_distinct_label_overflows():
    counter = OctantModeCounter()
    for label in range(8):
        counter.add(label)
    with pytest.raises(OverflowError):
        counter.add(8)


def test_label_out_of_range():
    with pytest.raises(ValueError):
        OctantModeCounter().add(256)


def test_mode_of_nothing_raises():
    with pytest.raises(ValueError):
        OctantModeCounter().get_mode_and_reset()


SHAPE = GridShape((4, 4, 4))
HALF = Extent.from_min_and_shape((0, 0, 0), (2, 2, 2))


def _octant_label(p):
    return 10 + p[0] + 2 * p[1] + 4 * p[2]


def test_downsample_labels_takes_mode_of_each_octant():
    src = [0] * SHAPE.size
    for p in HALF.iter3():
        base = tuple(2 * c for c in p)
        for i, corner in enumerate(CUBE_CORNERS):
            point = tuple(b + c for b, c in zip(base, corner))
            # Seven of eight voxels carry the octant label, one is noise.
            src[SHAPE.linearize(point)] = 99 if i == 5 else _octant_label(p)
    dst = [0] * SHAPE.size
    OctantKernel(SHAPE).downsample_labels(src, 0, dst)
    for p in HALF.iter3():
        assert dst[SHAPE.linearize(p)] == _octant_label(p)


def test_downsample_labels_respects_offset():
    src = [7] * SHAPE.size
    dst = [0] * (SHAPE.size + 3)
    OctantKernel(SHAPE).downsample_labels(src, 3, dst)
    assert dst[:3] == [0, 0, 0]
    assert all(dst[3 + SHAPE.linearize(p)] == 7 for p in HALF.iter3())


def test_downsample_sdf_zero_stays_zero():
    src = [Sd8.ZERO] * SHAPE.size
    dst = [Sd8.MAX] * SHAPE.size
    OctantKernel(SHAPE).downsample_sdf(src, 0, dst)
    assert all(dst[SHAPE.linearize(p)] == Sd8.ZERO for p in HALF.iter3())


def test_downsample_sdf_takes_mean_and_halves():
    src = [Sd8.MAX] * SHAPE.size
    dst = [Sd8.ZERO] * SHAPE.size
    OctantKernel(SHAPE).downsample_sdf(src, 0, dst)
    expected = Sd8.from_float(0.5)
    assert all(dst[SHAPE.linearize(p)] == expected for p in HALF.iter3())


def test_downsample_sdf_opposite_signs_cancel():
    src = [Sd8.MAX, Sd8.MIN] * (SHAPE.size // 2)
    dst = [Sd8.MAX] * SHAPE.size
    OctantKernel(SHAPE).downsample_sdf(src, 0, dst)
    assert all(dst[SHAPE.linearize(p)] == Sd8.ZERO for p in HALF.iter3())


def test_kernel_rejects_odd_shape():
    with pytest.raises(ValueError):
        OctantKernel(GridShape((3, 4, 4)))