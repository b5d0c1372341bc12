"""A small palette mapping 8-bit identifiers to values."""

from __future__ import annotations

from typing import Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")

PALETTE_CAPACITY = 256


class Palette8(Generic[T]):
    """A mapping from an 8-bit palette id to a value. Holds up to 256 values."""

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._types = list(values)
        if len(self._types) > PALETTE_CAPACITY:
            raise ValueError(f"a palette holds at most {PALETTE_CAPACITY} values")

    @staticmethod
    def _check_id(palette_id: int) -> int:
        if isinstance(palette_id, bool) or not isinstance(palette_id, int):
            raise TypeError("palette ids are integers")
        if not 0 <= palette_id < PALETTE_CAPACITY:
            raise IndexError(f"palette id {palette_id} is not an 8-bit value")
        return palette_id

    def __getitem__(self, palette_id: int) -> T:
        return self._types[self._check_id(palette_id)]

    def __setitem__(self, palette_id: int, value: T) -> None:
        self._types[self._check_id(palette_id)] = value

    def __len__(self) -> int:
        return len(self._types)

    def __iter__(self) -> Iterator[T]:
        return iter(self._types)

    def __repr__(self) -> str:
        return f"Palette8({self._types!r})"