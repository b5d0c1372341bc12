import pytest

from feldspar.database.change_encoder import Change, ChangeEncoder
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.map_db import MapDb
from feldspar.database.meta_tree import MapDbMetadata
from feldspar.database.storage import Store
from feldspar.database.version import AbortReason, TransactionAborted, Version

CHUNK = b"compressed default chunk"


def _changes(*pairs):
    encoder = ChangeEncoder()
    for key, change in pairs:
        encoder.add_compressed_change(key, change)
    return encoder.encode()


@pytest.fixture
def map_db():
    return MapDb.open(Store(), "mymap")


def test_write_and_read_changes_same_version(map_db):
    chunk_key = ChunkDbKey.from_coords(1, (0, 0, 0))
    map_db.write_working_version(_changes((chunk_key, Change.insert(CHUNK))))
    assert map_db.read_working_version(chunk_key) == Change.insert(CHUNK)


def test_commit_empty_working_version_does_nothing(map_db):
    expected = MapDbMetadata(
        grandparent_version=None, parent_version=None, working_version=Version(0)
    )
    assert map_db.cached_meta() == expected
    map_db.commit_working_version()
    assert map_db.cached_meta() == expected


def test_commit_multiple_versions_with_changes_and_branch(map_db):
    chunk_key1 = ChunkDbKey.from_coords(1, (0, 0, 0))
    map_db.write_working_version(_changes((chunk_key1, Change.insert(CHUNK))))
    v0 = map_db.cached_meta().working_version
    map_db.commit_working_version()

    # Undo the previous change.
    map_db.write_working_version(_changes((chunk_key1, Change.remove())))
    v1 = map_db.cached_meta().working_version
    map_db.commit_working_version()

    assert map_db.cached_meta() == MapDbMetadata(
        working_version=Version(2), parent_version=v1, grandparent_version=v0
    )

    # Removed in this version.
    assert map_db.read_working_version(chunk_key1) is None

    # But reverting to v0 brings it back.
    map_db.branch_from_version(v0)
    expected_insert = Change.insert(CHUNK)
    assert map_db.read_working_version(chunk_key1) == expected_insert

    # Commit changes to the branch.
    chunk_key2 = ChunkDbKey.from_coords(2, (0, 0, 0))
    map_db.write_working_version(_changes((chunk_key2, Change.insert(CHUNK))))
    v2 = map_db.cached_meta().working_version
    map_db.commit_working_version()

    # Branch from a sibling version.
    map_db.branch_from_version(v1)
    assert map_db.read_working_version(chunk_key1) is None
    assert map_db.read_working_version(chunk_key2) is None

    # And back.
    map_db.branch_from_version(v2)
    assert map_db.read_working_version(chunk_key1) == expected_insert
    assert map_db.read_working_version(chunk_key2) == expected_insert


def test_read_missing_key_is_none(map_db):
    assert map_db.read_working_version(ChunkDbKey.from_coords(3, (5, 6, 7))) is None


def test_branch_without_parent_does_nothing(map_db):
    before = map_db.cached_meta()
    map_db.branch_from_version(Version(5))
    assert map_db.cached_meta() == before


def test_branch_to_unknown_version_aborts_and_keeps_state(map_db):
    key = ChunkDbKey.from_coords(1, (0, 0, 0))
    map_db.write_working_version(_changes((key, Change.insert(CHUNK))))
    map_db.commit_working_version()
    before = map_db.cached_meta()

    with pytest.raises(TransactionAborted) as info:
        map_db.branch_from_version(Version(99))
    assert info.value.reason is AbortReason.NO_PATH_EXISTS_TO_ROOT
    assert map_db.cached_meta() == before
    assert map_db.read_working_version(key) == Change.insert(CHUNK)


def test_repeated_writes_keep_oldest_backup(map_db):
    key = ChunkDbKey.from_coords(1, (0, 0, 0))
    map_db.write_working_version(_changes((key, Change.insert(b"first"))))
    map_db.commit_working_version()
    v0 = map_db.cached_meta().parent_version

    map_db.write_working_version(_changes((key, Change.insert(b"second"))))
    map_db.write_working_version(_changes((key, Change.insert(b"third"))))
    map_db.commit_working_version()
    assert map_db.read_working_version(key) == Change.insert(b"third")

    map_db.branch_from_version(v0)
    assert map_db.read_working_version(key) == Change.insert(b"first")


def test_reopen_from_disk_keeps_state(tmp_path):
    path = tmp_path / "map.db"
    key = ChunkDbKey.from_coords(1, (1, 1, 1))

    with Store(path) as store:
        map_db = MapDb.open(store, "mymap")
        map_db.write_working_version(_changes((key, Change.insert(CHUNK))))
        meta = map_db.cached_meta()

    with Store(path) as store:
        reopened = MapDb.open(store, "mymap")
        assert reopened.cached_meta() == meta
        assert reopened.read_working_version(key) == Change.insert(CHUNK)
        reopened.commit_working_version()
        assert reopened.cached_meta().parent_version == meta.working_version
        assert reopened.cached_meta().working_version > meta.working_version