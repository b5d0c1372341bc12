"""Archived sets of changes, one per committed version."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from feldspar.database.change_encoder import Change, EncodedChanges
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.storage import Store, Tree, TransactionalTree
from feldspar.database.version import Version

_KEY_BYTES = 13
_LEN_BYTES = 4


@dataclass
class VersionChanges:
    """The full set of changes between a parent version and this version."""

    changes: dict[ChunkDbKey, Change] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.changes = dict(sorted(self.changes.items(), key=lambda kv: kv[0]))

    @classmethod
    def from_encoded(cls, changes: EncodedChanges) -> "VersionChanges":
        return cls(
            {
                ChunkDbKey.from_bytes(key): Change.deserialize(value)
                for key, value in changes.changes
            }
        )

    def serialize(self) -> bytes:
        parts = [len(self.changes).to_bytes(_LEN_BYTES, "big")]
        for key, change in sorted(self.changes.items(), key=lambda kv: kv[0]):
            body = change.serialize()
            parts.append(key.to_bytes())
            parts.append(len(body).to_bytes(_LEN_BYTES, "big"))
            parts.append(body)
        return b"".join(parts)

    @classmethod
    def deserialize(cls, data: bytes) -> "VersionChanges":
        data = bytes(data)
        if len(data) < _LEN_BYTES:
            raise ValueError("truncated version changes")
        count = int.from_bytes(data[:_LEN_BYTES], "big")
        pos = _LEN_BYTES
        changes: dict[ChunkDbKey, Change] = {}
        for _ in range(count):
            header_end = pos + _KEY_BYTES + _LEN_BYTES
            if header_end > len(data):
                raise ValueError("truncated version changes")
            key = ChunkDbKey.from_bytes(data[pos : pos + _KEY_BYTES])
            length = int.from_bytes(data[pos + _KEY_BYTES : header_end], "big")
            end = header_end + length
            if end > len(data):
                raise ValueError("truncated version changes")
            changes[key] = Change.deserialize(data[header_end:end])
            pos = end
        if pos != len(data):
            raise ValueError("trailing bytes after version changes")
        return cls(changes)


def open_version_change_tree(store: Store, map_name: str) -> Tree:
    return store.open_tree(f"{map_name}-version-changes")


def archive_version(
    txn: TransactionalTree, version: Version, changes: VersionChanges
) -> None:
    txn.insert(version.to_bytes(), changes.serialize())


def remove_archived_version(
    txn: TransactionalTree, version: Version
) -> Optional[VersionChanges]:
    data = txn.remove(version.to_bytes())
    return None if data is None else VersionChanges.deserialize(data)