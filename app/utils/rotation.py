# =============================================
# File: app/utils/rotation.py
# Purpose: Client-side style cycling over an already-ranked result
# =============================================
from __future__ import annotations

from typing import Generic, Iterator, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")


class PromptRotation(Generic[T]):
    """
    Modulo-indexed "show me another" cursor over a ranked list. Lives outside
    the engine and never changes the list it walks.
    """

    def __init__(self, items: Sequence[T], start: int = 0) -> None:
        self._items: Tuple[T, ...] = tuple(items)
        self._index = start % len(self._items) if self._items else 0

    def __len__(self) -> int:
        return len(self._items)

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> Optional[T]:
        return self._items[self._index] if self._items else None

    def advance(self) -> Optional[T]:
        """Move to the next item, wrapping after the last one."""
        if not self._items:
            return None
        self._index = (self._index + 1) % len(self._items)
        return self._items[self._index]

    def __iter__(self) -> Iterator[T]:
        """One full lap starting at the current position."""
        n = len(self._items)
        for i in range(n):
            yield self._items[(self._index + i) % n]
