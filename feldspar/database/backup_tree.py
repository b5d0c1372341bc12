"""The backup tree: values overwritten in the working version since its parent."""

from __future__ import annotations

from dataclasses import dataclass, field

from feldspar.database.change_encoder import Change, EncodedChanges
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.storage import Store, Tree, TransactionalTree
from feldspar.database.version_change_tree import VersionChanges


@dataclass
class BackupKeyCache:
    """The keys currently held in the backup tree.

    Equivalently, the keys changed from the parent version to the working one.
    """

    keys: set[ChunkDbKey] = field(default_factory=set)

    def sorted_keys(self) -> list[ChunkDbKey]:
        return sorted(self.keys)


def open_backup_tree(store: Store, map_name: str) -> tuple[Tree, BackupKeyCache]:
    tree = store.open_tree(f"{map_name}-backup")
    keys = {ChunkDbKey.from_bytes(key) for key, _ in tree.items()}
    return tree, BackupKeyCache(keys)


def write_changes_to_backup_tree(txn: TransactionalTree, changes: EncodedChanges) -> None:
    for key_bytes, change in changes.changes:
        txn.insert(key_bytes, change)


def commit_backup(txn: TransactionalTree, keys: BackupKeyCache) -> VersionChanges:
    """Remove every cached key from the backup tree and return the entries."""
    changes: dict[ChunkDbKey, Change] = {}
    for key in keys.sorted_keys():
        data = txn.remove(key.to_bytes())
        if data is None:
            raise KeyError(f"missing backup entry for {key!r}")
        changes[key] = Change.deserialize(data)
    return VersionChanges(changes)


def clear_backup(txn: TransactionalTree, keys: BackupKeyCache) -> None:
    for key in keys.sorted_keys():
        txn.remove(key.to_bytes())