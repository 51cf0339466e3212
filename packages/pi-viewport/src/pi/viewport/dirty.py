"""Pending re-render bookkeeping for the layout strategies."""

from __future__ import annotations


class DirtyTracker:
    """Record which items must be redrawn before the next read.

    Either a set of item indices (content, focus or highlight changed) or a
    ``full`` flag meaning every item and every position must be recomputed
    (width change, item list replaced, detected inconsistency).
    """

    def __init__(self) -> None:
        self.full = True
        self._indices: set[int] = set()

    def __bool__(self) -> bool:
        return self.full or bool(self._indices)

    def __contains__(self, index: int) -> bool:
        return self.full or index in self._indices

    def mark(self, index: int) -> None:
        if index >= 0 and not self.full:
            self._indices.add(index)

    def mark_all(self) -> None:
        self.full = True
        self._indices.clear()

    def discard(self, index: int) -> None:
        self._indices.discard(index)

    def take(self) -> list[int]:
        """Return the dirty indices in ascending order and forget them."""
        indices = sorted(self._indices)
        self._indices.clear()
        return indices

    def clear(self) -> None:
        self.full = False
        self._indices.clear()

    # Structural mutations shift the indices that follow the mutation point

    def on_insert(self, index: int) -> None:
        if self._indices:
            self._indices = {i + 1 if i >= index else i for i in self._indices}

    def on_delete(self, index: int) -> None:
        if self._indices:
            self._indices = {i - 1 if i > index else i for i in self._indices if i != index}
