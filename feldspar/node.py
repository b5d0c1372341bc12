"""A single node of the chunk clipmap: a chunk slot plus atomic state bits."""

from __future__ import annotations

import threading
from enum import Enum, IntEnum
from typing import Any, Optional


class StateBit(IntEnum):
    """Bit positions in a node's state byte."""

    OCCUPIED = 0
    """There is chunk data in the slot."""
    COMPRESSED = 1
    """The node is compressed or in the process of being decompressed."""
    LOADING = 2
    """The node is currently loading."""
    LOAD_PENDING = 3
    """The node and its descendants are claimed by a pending load batch."""
    RENDER = 4
    """The node is currently being rendered."""

    @property
    def mask(self) -> int:
        return 1 << int(self)


class SlotState(Enum):
    EMPTY = "empty"
    COMPRESSED = "compressed"
    DECOMPRESSED = "decompressed"


class _Bitset8:
    """Eight flags packed in one byte."""

    __slots__ = ("bits",)

    def __init__(self, bits: int = 0) -> None:
        self.bits = bits & 0xFF

    def set_bit(self, i: int) -> None:
        self.bits |= 1 << i

    def clear_bit(self, i: int) -> None:
        self.bits &= ~(1 << i) & 0xFF

    def bit_is_set(self, i: int) -> bool:
        return bool(self.bits & (1 << i))

    def none(self) -> bool:
        return self.bits == 0

    def all(self) -> bool:
        return self.bits == 0xFF

    def __repr__(self) -> str:
        return f"Bitset8({self.bits:#010b})"


class NodeState:
    """Thread-safe state flags of a node, plus which children are loading."""

    def __init__(self) -> None:
        self._bits = 0
        self._lock = threading.Lock()
        self.descendant_is_loading = _Bitset8()

    @classmethod
    def new_zeroed(cls) -> "NodeState":
        return cls()

    @classmethod
    def new_loading(cls) -> "NodeState":
        state = cls()
        state.set_loading()
        return state

    @property
    def bits(self) -> int:
        with self._lock:
            return self._bits

    def _set_bit(self, bit: StateBit) -> None:
        with self._lock:
            self._bits |= bit.mask

    def _clear_bit(self, bit: StateBit) -> None:
        with self._lock:
            self._bits &= ~bit.mask

    def _bit_is_set(self, bit: StateBit) -> bool:
        with self._lock:
            return bool(self._bits & bit.mask)

    def _fetch_and_clear_bit(self, bit: StateBit) -> bool:
        with self._lock:
            was_set = bool(self._bits & bit.mask)
            self._bits &= ~bit.mask
            return was_set

    def slot_state(self) -> SlotState:
        bits = self.bits
        if not bits & StateBit.OCCUPIED.mask:
            return SlotState.EMPTY
        if bits & StateBit.COMPRESSED.mask:
            return SlotState.COMPRESSED
        return SlotState.DECOMPRESSED

    def is_loading(self) -> bool:
        return self._bit_is_set(StateBit.LOADING)

    def set_loading(self) -> None:
        self._set_bit(StateBit.LOADING)

    def clear_loading(self) -> None:
        self._clear_bit(StateBit.LOADING)

    def fetch_and_clear_loading(self) -> bool:
        return self._fetch_and_clear_bit(StateBit.LOADING)

    def set_load_pending(self) -> None:
        self._set_bit(StateBit.LOAD_PENDING)

    def clear_load_pending(self) -> None:
        self._clear_bit(StateBit.LOAD_PENDING)

    def has_load_pending(self) -> bool:
        return self._bit_is_set(StateBit.LOAD_PENDING)

    def fetch_and_clear_load_pending(self) -> bool:
        return self._fetch_and_clear_bit(StateBit.LOAD_PENDING)

    def set_rendering(self) -> None:
        self._set_bit(StateBit.RENDER)

    def clear_rendering(self) -> None:
        self._clear_bit(StateBit.RENDER)

    def fetch_and_clear_rendering(self) -> bool:
        return self._fetch_and_clear_bit(StateBit.RENDER)

    def is_rendering(self) -> bool:
        return self._bit_is_set(StateBit.RENDER)


class ChunkNode:
    """A slot holding a chunk that is empty, compressed or decompressed.

    Compressed chunks must provide ``decompress()``. Readers that find a
    compressed chunk decompress it in place; only one thread does the work.
    """

    def __init__(self, state: NodeState, chunk: Any = None) -> None:
        self.state = state
        self._chunk = chunk
        self._lock = threading.Lock()

    @classmethod
    def new_empty(cls, state: NodeState) -> "ChunkNode":
        state._clear_bit(StateBit.OCCUPIED)
        return cls(state)

    @classmethod
    def new_compressed(cls, chunk: Any, state: NodeState) -> "ChunkNode":
        state._set_bit(StateBit.OCCUPIED)
        state._set_bit(StateBit.COMPRESSED)
        return cls(state, chunk)

    @classmethod
    def new_decompressed(cls, chunk: Any, state: NodeState) -> "ChunkNode":
        state._set_bit(StateBit.OCCUPIED)
        state._clear_bit(StateBit.COMPRESSED)
        return cls(state, chunk)

    def get_decompressed(self) -> Optional[Any]:
        """Return the decompressed chunk, decompressing it in place if needed."""
        slot = self.state.slot_state()
        if slot is SlotState.EMPTY:
            return None
        if slot is SlotState.DECOMPRESSED:
            with self._lock:
                return self._chunk
        with self._lock:
            slot = self.state.slot_state()
            if slot is SlotState.COMPRESSED:
                self._chunk = self._chunk.decompress()
                self.state._clear_bit(StateBit.COMPRESSED)
                return self._chunk
            if slot is SlotState.DECOMPRESSED:
                return self._chunk
            return None

    def _replace_slot(self, new_chunk: Any) -> Optional[Any]:
        with self._lock:
            old = self._chunk if self.state.slot_state() is not SlotState.EMPTY else None
            self._chunk = new_chunk
            return old

    def put_compressed(self, compressed: Any) -> Optional[Any]:
        """Store a compressed chunk and return the previous value, if any."""
        old = self._replace_slot(compressed)
        self.state._set_bit(StateBit.OCCUPIED)
        self.state._set_bit(StateBit.COMPRESSED)
        return old

    def put_decompressed(self, decompressed: Any) -> Optional[Any]:
        """Store a decompressed chunk and return the previous value, if any."""
        old = self._replace_slot(decompressed)
        self.state._set_bit(StateBit.OCCUPIED)
        self.state._clear_bit(StateBit.COMPRESSED)
        return old

    def take_chunk(self) -> Optional[Any]:
        """Remove and return the stored chunk, leaving the slot empty."""
        old = self._replace_slot(None)
        self.state._clear_bit(StateBit.OCCUPIED)
        return old