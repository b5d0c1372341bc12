"""A small transactional key/value store made of named, ordered trees."""

from __future__ import annotations

import json
import os
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

Key = Union[bytes, bytearray, memoryview, str]


def _key(key: Key) -> bytes:
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytes, bytearray, memoryview)):
        return bytes(key)
    raise TypeError("keys are bytes or strings")


def _value(value) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError("values are bytes")


class Tree:
    """A named tree of byte keys to byte values, ordered by key."""

    def __init__(self, store: "Store", name: str) -> None:
        self.name = name
        self._store = store
        self._data: dict[bytes, bytes] = {}

    def get(self, key: Key) -> Optional[bytes]:
        """Return the committed value at ``key``, or ``None``."""
        with self._store._lock:
            return self._data.get(_key(key))

    def items(self) -> list[tuple[bytes, bytes]]:
        """All committed entries in key order."""
        with self._store._lock:
            return sorted(self._data.items())

    def __len__(self) -> int:
        with self._store._lock:
            return len(self._data)

    def __repr__(self) -> str:
        return f"Tree({self.name!r})"


class TransactionalTree:
    """A view of a tree inside a transaction; writes apply only on commit."""

    def __init__(self, tree: Tree) -> None:
        self._tree = tree
        self._pending: dict[bytes, Optional[bytes]] = {}

    def get(self, key: Key) -> Optional[bytes]:
        """Return the value at ``key`` including this transaction's writes."""
        k = _key(key)
        if k in self._pending:
            return self._pending[k]
        return self._tree._data.get(k)

    def insert(self, key: Key, value) -> Optional[bytes]:
        """Set ``key`` to ``value`` and return the previous value."""
        k = _key(key)
        old = self.get(k)
        self._pending[k] = _value(value)
        return old

    def remove(self, key: Key) -> Optional[bytes]:
        """Remove ``key`` and return the previous value."""
        k = _key(key)
        old = self.get(k)
        self._pending[k] = None
        return old

    def generate_id(self) -> int:
        """Return a new identifier, unique and increasing within the store."""
        return self._tree._store._generate_id()

    def _apply(self) -> None:
        data = self._tree._data
        for k, v in self._pending.items():
            if v is None:
                data.pop(k, None)
            else:
                data[k] = v
        self._pending.clear()


class Store:
    """A collection of trees, kept in memory and optionally saved to ``path``."""

    def __init__(self, path: Union[str, os.PathLike, None] = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.RLock()
        self._trees: dict[str, Tree] = {}
        self._next_id = 0
        self._closed = False
        if self._path is not None and self._path.exists():
            self._load()

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("the store is closed")

    def open_tree(self, name: str) -> Tree:
        """Return the tree called ``name``, creating it if needed."""
        with self._lock:
            self._check_open()
            tree = self._trees.get(name)
            if tree is None:
                tree = self._trees[name] = Tree(self, name)
            return tree

    @contextmanager
    def transaction(self, *args: Tree) -> Iterator:
        """Run a transaction over the given trees.

        Yields one :class:`TransactionalTree` for a single tree, otherwise a
        tuple in the order given. All writes apply together when the block
        ends; if it raises, none of them apply.
        """
        if not args:
            raise ValueError("a transaction needs at least one tree")
        if len({id(t) for t in args}) != len(args):
            raise ValueError("a tree may appear only once in a transaction")
        for tree in args:
            if not isinstance(tree, Tree) or tree._store is not self:
                raise ValueError("trees must belong to this store")
        with self._lock:
            self._check_open()
            txns = tuple(TransactionalTree(tree) for tree in args)
            yield txns[0] if len(txns) == 1 else txns
            for txn in txns:
                txn._apply()
            self._persist()

    def close(self) -> None:
        """Save the store, if it has a path, and refuse further use."""
        with self._lock:
            if self._closed:
                return
            self._persist()
            self._closed = True

    def __enter__(self) -> "Store":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _generate_id(self) -> int:
        with self._lock:
            new_id = self._next_id
            self._next_id += 1
            self._persist()
            return new_id

    def _persist(self) -> None:
        if self._path is None:
            return
        document = {
            "next_id": self._next_id,
            "trees": {
                name: [[k.hex(), v.hex()] for k, v in sorted(tree._data.items())]
                for name, tree in self._trees.items()
            },
        }
        tmp = self._path.with_name(self._path.name + ".tmp")
        tmp.write_text(json.dumps(document), encoding="utf-8")
        os.replace(tmp, self._path)

    def _load(self) -> None:
        document = json.loads(self._path.read_text(encoding="utf-8"))
        self._next_id = int(document["next_id"])
        for name, entries in document["trees"].items():
            tree = Tree(self, name)
            tree._data = {bytes.fromhex(k): bytes.fromhex(v) for k, v in entries}
            self._trees[name] = tree