"""The metadata tree: which versions are working, parent and grandparent."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from feldspar.database.storage import Store, Tree, TransactionalTree
from feldspar.database.version import Version

META_KEY = b"META"
_VERSION_BYTES = 8
_OPTION_BYTES = 1 + _VERSION_BYTES
_META_BYTES = 2 * _OPTION_BYTES + _VERSION_BYTES


def _encode_option(version: Optional[Version]) -> bytes:
    if version is None:
        return b"\x00" + bytes(_VERSION_BYTES)
    return b"\x01" + version.to_bytes()


def _decode_option(data: bytes) -> Optional[Version]:
    flag = data[0]
    if flag == 0:
        return None
    if flag == 1:
        return Version.from_bytes(data[1:])
    raise ValueError(f"invalid option flag {flag}")


@dataclass(frozen=True)
class MapDbMetadata:
    grandparent_version: Optional[Version] = None
    parent_version: Optional[Version] = None
    working_version: Version = field(default_factory=Version)

    def serialize(self) -> bytes:
        return (
            _encode_option(self.grandparent_version)
            + _encode_option(self.parent_version)
            + self.working_version.to_bytes()
        )

    @classmethod
    def deserialize(cls, data: bytes) -> "MapDbMetadata":
        data = bytes(data)
        if len(data) != _META_BYTES:
            raise ValueError(f"metadata is {_META_BYTES} bytes, got {len(data)}")
        return cls(
            grandparent_version=_decode_option(data[:_OPTION_BYTES]),
            parent_version=_decode_option(data[_OPTION_BYTES : 2 * _OPTION_BYTES]),
            working_version=Version.from_bytes(data[2 * _OPTION_BYTES :]),
        )


def open_meta_tree(store: Store, map_name: str) -> tuple[Tree, MapDbMetadata]:
    """Open the metadata tree, writing initial metadata on first open."""
    tree = store.open_tree(f"{map_name}-meta")
    with store.transaction(tree) as txn:
        meta = read_meta(txn)
        if meta is None:
            meta = MapDbMetadata(working_version=Version(txn.generate_id()))
            write_meta(txn, meta)
    return tree, meta


def write_meta(txn: TransactionalTree, meta: MapDbMetadata) -> None:
    txn.insert(META_KEY, meta.serialize())


def read_meta(txn: TransactionalTree) -> Optional[MapDbMetadata]:
    data = txn.get(META_KEY)
    return None if data is None else MapDbMetadata.deserialize(data)