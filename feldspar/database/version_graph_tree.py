"""The version graph: each committed version linked to its parent version."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from feldspar.database.storage import Store, Tree, TransactionalTree
from feldspar.database.version import AbortReason, TransactionAborted, Version

_VERSION_BYTES = 8
_NODE_BYTES = 1 + _VERSION_BYTES


@dataclass(frozen=True)
class VersionNode:
    """A node of the version graph."""

    parent_version: Optional[Version] = None
    """The version immediately before this one."""

    def serialize(self) -> bytes:
        if self.parent_version is None:
            return b"\x00" + bytes(_VERSION_BYTES)
        return b"\x01" + self.parent_version.to_bytes()

    @classmethod
    def deserialize(cls, data: bytes) -> "VersionNode":
        data = bytes(data)
        if len(data) != _NODE_BYTES:
            raise ValueError(f"a version node is {_NODE_BYTES} bytes, got {len(data)}")
        flag = data[0]
        if flag == 0:
            return cls(None)
        if flag == 1:
            return cls(Version.from_bytes(data[1:]))
        raise ValueError(f"invalid option flag {flag}")


@dataclass
class VersionPath:
    path: list[Version] = field(default_factory=list)
    """The path from the start version to the end version, inclusive."""
    end_parent: Optional[Version] = None
    """The parent of the last version in ``path``."""


class PathResult(Enum):
    FOUND_ROOT = "found_root"
    FOUND_END = "found_end"


def open_version_graph_tree(store: Store, map_name: str) -> Tree:
    return store.open_tree(f"{map_name}-version-graph")


def link_version(txn: TransactionalTree, version: Version, node: VersionNode) -> None:
    txn.insert(version.to_bytes(), node.serialize())


def find_path_between_versions(
    txn: TransactionalTree, start_version: Version, end_version: Version
) -> VersionPath:
    """Find the path from ``start_version`` to ``end_version`` through the graph.

    Raises :class:`TransactionAborted` if the versions share no root.
    """
    path_result, start_path = find_ancestor_path(txn, start_version, end_version)
    if path_result is PathResult.FOUND_END:
        return start_path

    # The end is not an ancestor, so find the nearest common ancestor.
    start_root = start_path.path[-1]
    _, end_path = find_ancestor_path(txn, end_version, start_root)
    end_root = end_path.path[-1]

    if start_root != end_root:
        raise TransactionAborted(AbortReason.NO_PATH_EXISTS)

    start_join = 0
    finish_join = 0
    for (i1, v1), (i2, v2) in zip(
        reversed(list(enumerate(start_path.path))),
        reversed(list(enumerate(end_path.path))),
    ):
        if v1 != v2:
            break
        start_join = i1
        finish_join = i2

    path = start_path.path[: start_join + 1]
    path.extend(reversed(end_path.path[:finish_join]))
    return VersionPath(path=path, end_parent=end_path.end_parent)


def find_ancestor_path(
    txn: TransactionalTree, start_version: Version, end_version: Version
) -> tuple[PathResult, VersionPath]:
    """Walk ancestors from ``start_version`` until ``end_version`` or the root.

    Raises :class:`TransactionAborted` if a version on the way is not linked.
    """
    path = [start_version]
    current = start_version
    while (node_bytes := txn.get(current.to_bytes())) is not None:
        node = VersionNode.deserialize(node_bytes)
        if current == end_version:
            return PathResult.FOUND_END, VersionPath(path, node.parent_version)
        if node.parent_version is None:
            return PathResult.FOUND_ROOT, VersionPath(path, None)
        path.append(node.parent_version)
        current = node.parent_version

    raise TransactionAborted(AbortReason.NO_PATH_EXISTS_TO_ROOT)