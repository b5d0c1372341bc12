import pytest

from feldspar.database.change_encoder import Change, ChangeEncoder, EncodedChanges
from feldspar.database.chunk_key import ChunkDbKey

COMPRESSED = b"compressed chunk"


def test_deserialize_remove_bytes():
    assert Change.deserialize(Change.remove().serialize()) == Change.remove()


def test_deserialize_insert_bytes():
    original = Change.insert(COMPRESSED)
    assert Change.deserialize(original.serialize()) == original


def test_unwrap_insert():
    assert Change.insert(COMPRESSED).unwrap_insert() == COMPRESSED
    with pytest.raises(ValueError):
        Change.remove().unwrap_insert()


def test_map():
    assert Change.insert(b"ab").map(len) == Change.insert(2)
    assert Change.remove().map(len) == Change.remove()


def test_insert_data():
    assert Change.insert(COMPRESSED).insert_data == COMPRESSED
    assert Change.remove().insert_data is None


@pytest.mark.parametrize("data", [b"", b"\x07", b"\x01\x02"])
def test_deserialize_rejects_bad_input(data):
    with pytest.raises(ValueError):
        Change.deserialize(data)


def test_serialize_requires_bytes():
    with pytest.raises(TypeError):
        Change.insert(3).serialize()


def test_encoder_keeps_latest_change_per_key():
    key = ChunkDbKey.from_coords(1, (0, 0, 0))
    encoder = ChangeEncoder()
    encoder.add_compressed_change(key, Change.insert(COMPRESSED))
    encoder.add_compressed_change(key, Change.remove())
    encoded = encoder.encode()
    assert encoded.changes == [(key.to_bytes(), Change.remove().serialize())]


def test_encoder_sorts_by_key():
    keys = [
        ChunkDbKey.from_coords(2, (0, 0, 0)),
        ChunkDbKey.from_coords(1, (5, 5, 5)),
        ChunkDbKey.from_coords(1, (-4, 0, 0)),
    ]
    encoder = ChangeEncoder()
    for key in keys:
        encoder.add_compressed_change(key, Change.insert(COMPRESSED))
    encoded = encoder.encode()
    key_bytes = [k for k, _ in encoded.changes]
    assert key_bytes == [k.to_bytes() for k in sorted(keys)]
    assert all(Change.deserialize(v) == Change.insert(COMPRESSED) for _, v in encoded.changes)


def test_empty_encoder():
    assert ChangeEncoder().encode() == EncodedChanges()