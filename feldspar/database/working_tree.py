"""The working tree: chunk data of the working version."""

from __future__ import annotations

from feldspar.database.backup_tree import BackupKeyCache
from feldspar.database.change_encoder import Change, EncodedChanges
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.storage import Store, Tree, TransactionalTree


def open_working_tree(store: Store, map_name: str) -> Tree:
    return store.open_tree(f"{map_name}-working")


def write_changes_to_working_tree(
    txn: TransactionalTree,
    backup_key_cache: BackupKeyCache,
    changes: EncodedChanges,
) -> EncodedChanges:
    """Apply ``changes`` and return the changes that reverse them.

    Keys already in ``backup_key_cache`` are left out of the result, since only
    the oldest value of each key belongs in the backup.
    """
    remove_bytes = Change.remove().serialize()
    reverse_changes: list[tuple[bytes, bytes]] = []
    for key_bytes, change_bytes in changes.changes:
        key = ChunkDbKey.from_bytes(key_bytes)
        if Change.deserialize(change_bytes).is_insert:
            old_value = txn.insert(key_bytes, change_bytes)
        else:
            old_value = txn.remove(key_bytes)

        if key in backup_key_cache.keys:
            continue

        reverse_changes.append(
            (key_bytes, old_value if old_value is not None else remove_bytes)
        )
    return EncodedChanges(reverse_changes)