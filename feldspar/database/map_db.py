"""A versioned, persistent store of compressed chunks."""

from __future__ import annotations

import logging
from itertools import pairwise
from typing import Optional

from feldspar.database.backup_tree import (
    BackupKeyCache,
    clear_backup,
    commit_backup,
    open_backup_tree,
    write_changes_to_backup_tree,
)
from feldspar.database.change_encoder import Change, ChangeEncoder, EncodedChanges
from feldspar.database.chunk_key import ChunkDbKey
from feldspar.database.meta_tree import MapDbMetadata, open_meta_tree, write_meta
from feldspar.database.storage import Store
from feldspar.database.version import AbortReason, TransactionAborted, Version
from feldspar.database.version_change_tree import (
    VersionChanges,
    archive_version,
    open_version_change_tree,
    remove_archived_version,
)
from feldspar.database.version_graph_tree import (
    VersionNode,
    find_path_between_versions,
    link_version,
    open_version_graph_tree,
)
from feldspar.database.working_tree import (
    open_working_tree,
    write_changes_to_working_tree,
)

_log = logging.getLogger(__name__)


class MapDb:
    """Chunk storage with a working version and a tree of archived versions.

    New changes go to the working tree while the values they replace move to
    the backup tree. Committing archives the backup under the parent version
    and links the working version into the version graph. Any archived version
    can be reached again by replaying archived changes along the graph.
    """

    def __init__(
        self,
        store: Store,
        meta_tree,
        working_tree,
        backup_tree,
        version_change_tree,
        version_graph_tree,
        backup_key_cache: BackupKeyCache,
        cached_meta: MapDbMetadata,
    ) -> None:
        self._store = store
        self._meta_tree = meta_tree
        self._working_tree = working_tree
        self._backup_tree = backup_tree
        self._version_change_tree = version_change_tree
        self._version_graph_tree = version_graph_tree
        self._backup_key_cache = backup_key_cache
        self._cached_meta = cached_meta

    @classmethod
    def open(cls, store: Store, map_name: str) -> "MapDb":
        """Open the map; on first open a working version with no parent is created."""
        meta_tree, cached_meta = open_meta_tree(store, map_name)
        version_change_tree = open_version_change_tree(store, map_name)
        version_graph_tree = open_version_graph_tree(store, map_name)
        backup_tree, backup_key_cache = open_backup_tree(store, map_name)
        working_tree = open_working_tree(store, map_name)
        return cls(
            store,
            meta_tree,
            working_tree,
            backup_tree,
            version_change_tree,
            version_graph_tree,
            backup_key_cache,
            cached_meta,
        )

    def cached_meta(self) -> MapDbMetadata:
        return self._cached_meta

    def write_working_version(self, changes: EncodedChanges) -> None:
        """Write ``changes`` to the working version, backing up the old values."""
        _log.debug("Writing to %r", self._cached_meta.working_version)
        with self._store.transaction(self._working_tree, self._backup_tree) as (
            working_txn,
            backup_txn,
        ):
            reverse_changes = write_changes_to_working_tree(
                working_txn, self._backup_key_cache, changes
            )
            new_backup_keys = [
                ChunkDbKey.from_bytes(key) for key, _ in reverse_changes.changes
            ]
            write_changes_to_backup_tree(backup_txn, reverse_changes)
        self._backup_key_cache.keys.update(new_backup_keys)

    def read_working_version(self, key: ChunkDbKey) -> Optional[Change]:
        """Return the stored change for ``key`` in the working version, if any."""
        data = self._working_tree.get(key.to_bytes())
        return None if data is None else Change.deserialize(data)

    def commit_working_version(self) -> None:
        """Archive the working version and start a new, empty one.

        Does nothing if the working version has no changes.
        """
        if not self._backup_key_cache.keys:
            return

        meta = self._cached_meta
        _log.debug("Committing non-empty %r", meta.working_version)

        with self._store.transaction(
            self._backup_tree,
            self._version_graph_tree,
            self._version_change_tree,
            self._meta_tree,
        ) as (backup_txn, graph_txn, changes_txn, meta_txn):
            if meta.parent_version is not None:
                _log.debug("Archiving %r from backup", meta.parent_version)
                archive_version(
                    changes_txn,
                    meta.parent_version,
                    commit_backup(backup_txn, self._backup_key_cache),
                )
            else:
                clear_backup(backup_txn, self._backup_key_cache)
            link_version(
                graph_txn, meta.working_version, VersionNode(meta.parent_version)
            )
            new_meta = MapDbMetadata(
                grandparent_version=meta.parent_version,
                parent_version=meta.working_version,
                working_version=Version(graph_txn.generate_id()),
            )
            write_meta(meta_txn, new_meta)

        self._backup_key_cache.keys.clear()
        self._cached_meta = new_meta

    def branch_from_version(self, new_parent_version: Version) -> None:
        """Make ``new_parent_version`` the parent of a new, empty working version.

        The working version is committed first. If it then has no parent,
        nothing happens. Raises :class:`TransactionAborted` if no path leads to
        ``new_parent_version`` or archived changes are missing.
        """
        self.commit_working_version()

        old_parent_version = self._cached_meta.parent_version
        if old_parent_version is None:
            return

        with self._store.transaction(
            self._meta_tree,
            self._version_graph_tree,
            self._version_change_tree,
            self._working_tree,
        ) as (meta_txn, graph_txn, change_txn, working_txn):
            path = find_path_between_versions(
                graph_txn, old_parent_version, new_parent_version
            )
            empty_backup_keys = BackupKeyCache()
            _log.debug(
                "Migrating from parent %r to parent %r",
                old_parent_version,
                new_parent_version,
            )
            for prev_version, next_version in pairwise(path.path):
                changes = remove_archived_version(change_txn, next_version)
                if changes is None:
                    raise TransactionAborted(AbortReason.MISSING_VERSION_CHANGES)
                encoder = ChangeEncoder()
                for key, change in changes.changes.items():
                    encoder.add_compressed_change(key, change)
                reverse_changes = write_changes_to_working_tree(
                    working_txn, empty_backup_keys, encoder.encode()
                )
                _log.debug("Archiving %r from working tree", prev_version)
                archive_version(
                    change_txn, prev_version, VersionChanges.from_encoded(reverse_changes)
                )
            new_meta = MapDbMetadata(
                grandparent_version=path.end_parent,
                parent_version=new_parent_version,
                working_version=Version(graph_txn.generate_id()),
            )
            write_meta(meta_txn, new_meta)

        self._cached_meta = new_meta