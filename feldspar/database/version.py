"""Map versions and the reasons a database transaction can abort."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

_VERSION_BYTES = 8
_U64_LIMIT = 1 << 64


@dataclass(frozen=True, order=True)
class Version:
    """A version number of the map."""

    number: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.number, bool) or not isinstance(self.number, int):
            raise TypeError("version numbers are integers")
        if not 0 <= self.number < _U64_LIMIT:
            raise ValueError(f"version number {self.number} does not fit in 64 bits")

    def to_bytes(self) -> bytes:
        """Big-endian key bytes, so byte order matches version order."""
        return self.number.to_bytes(_VERSION_BYTES, "big")

    @classmethod
    def from_bytes(cls, data: bytes) -> "Version":
        if len(data) != _VERSION_BYTES:
            raise ValueError(f"a version key is {_VERSION_BYTES} bytes, got {len(data)}")
        return cls(int.from_bytes(data, "big"))


class AbortReason(Enum):
    NO_PATH_EXISTS = "no_path_exists"
    """No path was found from one parent version to another."""
    NO_PATH_EXISTS_TO_ROOT = "no_path_exists_to_root"
    """No path was found from a version node to the root ancestor."""
    MISSING_VERSION_CHANGES = "missing_version_changes"
    """Referenced version changes do not exist in the change tree."""


class TransactionAborted(Exception):
    """A database transaction was aborted for ``reason``."""

    def __init__(self, reason: AbortReason) -> None:
        super().__init__(f"transaction aborted: {reason.value}")
        self.reason = reason