"""Changes to chunk data and their encoding into sorted key/value pairs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from feldspar.database.chunk_key import ChunkDbKey

T = TypeVar("T")
S = TypeVar("S")

_INSERT_TAG = 0
_REMOVE_TAG = 1


class ChangeKind(Enum):
    INSERT = "insert"
    REMOVE = "remove"


@dataclass(frozen=True)
class Change(Generic[T]):
    """Either an insertion of ``data`` or a removal."""

    kind: ChangeKind
    data: Optional[T] = None

    @classmethod
    def insert(cls, data: T) -> "Change[T]":
        return cls(ChangeKind.INSERT, data)

    @classmethod
    def remove(cls) -> "Change[Any]":
        return cls(ChangeKind.REMOVE)

    @property
    def is_insert(self) -> bool:
        return self.kind is ChangeKind.INSERT

    @property
    def insert_data(self) -> Optional[T]:
        """The inserted data, or ``None`` for a removal."""
        return self.data if self.is_insert else None

    def unwrap_insert(self) -> T:
        if not self.is_insert:
            raise ValueError("unwrapped a removal change")
        return self.data

    def map(self, f: Callable[[T], S]) -> "Change[S]":
        if self.is_insert:
            return Change.insert(f(self.data))
        return Change.remove()

    def serialize(self) -> bytes:
        """Encode as one tag byte, followed by the inserted bytes if any."""
        if not self.is_insert:
            return bytes([_REMOVE_TAG])
        if not isinstance(self.data, (bytes, bytearray, memoryview)):
            raise TypeError("only byte payloads can be serialized")
        return bytes([_INSERT_TAG]) + bytes(self.data)

    @classmethod
    def deserialize(cls, data: bytes) -> "Change[bytes]":
        data = bytes(data)
        if not data:
            raise ValueError("an encoded change is never empty")
        tag, payload = data[0], data[1:]
        if tag == _INSERT_TAG:
            return cls.insert(payload)
        if tag == _REMOVE_TAG:
            if payload:
                raise ValueError("an encoded removal carries no payload")
            return cls.remove()
        raise ValueError(f"unknown change tag {tag}")


@dataclass
class EncodedChanges:
    """Serialized changes to apply atomically, sorted by key.

    Each entry is ``(key bytes, serialized change)``.
    """

    changes: list[tuple[bytes, bytes]] = field(default_factory=list)


class ChangeEncoder:
    """Collects changes, keeping only the latest per key, and encodes them."""

    def __init__(self) -> None:
        self._added_changes: dict[ChunkDbKey, Change[bytes]] = {}

    def add_compressed_change(self, key: ChunkDbKey, change: Change[bytes]) -> None:
        self._added_changes[key] = change

    def encode(self) -> EncodedChanges:
        """Serialize the changes sorted by key (level, then Morton order)."""
        return EncodedChanges(
            [
                (key.to_bytes(), change.serialize())
                for key, change in sorted(self._added_changes.items(), key=lambda kv: kv[0])
            ]
        )