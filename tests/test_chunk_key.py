import pytest

from feldspar.coordinates import Extent
from feldspar.database.chunk_key import ChunkDbKey, Morton3

COORDS = [
    (0, 0, 0),
    (1, 1, 1),
    (-1, 5, -7),
    (2**31 - 1, -(2**31), 12345),
    (-300, 0, 300),
]


@pytest.mark.parametrize("coords", COORDS)
def test_morton_round_trip(coords):
    assert Morton3.from_coords(coords).to_coords() == coords


@pytest.mark.parametrize("coords", COORDS)
@pytest.mark.parametrize("level", [0, 1, 255])
def test_key_bytes_round_trip(level, coords):
    key = ChunkDbKey.from_coords(level, coords)
    data = key.to_bytes()
    assert len(data) == 13
    assert data[0] == level
    assert ChunkDbKey.from_bytes(data) == key
    assert key.coordinates() == coords


def test_byte_order_matches_key_order():
    keys = [ChunkDbKey.from_coords(level, c) for level in (2, 0, 1) for c in COORDS]
    assert sorted(keys, key=ChunkDbKey.to_bytes) == sorted(keys)


def test_level_orders_before_morton():
    assert ChunkDbKey.max_key(0) < ChunkDbKey.min_key(1)


def test_each_axis_is_monotonic():
    for axis in range(3):
        lo = [0, 0, 0]
        hi = [0, 0, 0]
        lo[axis] = -3
        hi[axis] = 4
        assert Morton3.from_coords(lo) < Morton3.from_coords(hi)


def test_min_and_max_keys_bound_all_keys():
    for c in COORDS:
        key = ChunkDbKey.from_coords(3, c)
        assert ChunkDbKey.min_key(3) <= key <= ChunkDbKey.max_key(3)


def test_extent_range_covers_extent():
    extent = Extent.from_min_and_shape((-2, 0, 1), (3, 2, 2))
    low, high = ChunkDbKey.extent_range(4, extent)
    assert low.coordinates() == (-2, 0, 1)
    assert high.coordinates() == extent.max()
    for p in extent.iter3():
        assert low <= ChunkDbKey.from_coords(4, p) <= high


def test_from_bytes_wrong_length():
    with pytest.raises(ValueError):
        ChunkDbKey.from_bytes(bytes(12))


def test_coordinate_out_of_range():
    with pytest.raises(ValueError):
        Morton3.from_coords((2**31, 0, 0))


def test_level_out_of_range():
    with pytest.raises(ValueError):
        ChunkDbKey.from_coords(256, (0, 0, 0))