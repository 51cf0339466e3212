"""Cumulative position index over variable-height items.

Entry ``i`` records where item ``i`` starts in content coordinates and how
tall it is.  Adjacent entries are separated by a uniform ``gap``::

    entries[i + 1].start_line == entries[i].start_line + entries[i].height + gap

so the total content height is ``sum(heights) + gap * (len - 1)``.
"""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass


@dataclass
class PositionEntry:
    start_line: int
    height: int
    # False while ``height`` is only an estimate (lazy strategy)
    measured: bool = True

    @property
    def end_line(self) -> int:
        return self.start_line + self.height


class PositionIndex:
    """Position table with incremental insert / delete / resize."""

    def __init__(self, gap: int = 0) -> None:
        self.gap = max(0, gap)
        self._entries: list[PositionEntry] = []
        self._total = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> PositionEntry:
        return self._entries[index]

    def __iter__(self):
        return iter(self._entries)

    @property
    def total_height(self) -> int:
        return self._total

    # ------------------------------------------------------------------
    # Bulk
    # ------------------------------------------------------------------

    def reset(self, heights: list[int], measured: bool = True) -> None:
        """Rebuild every entry from *heights*."""
        self._entries = []
        y = 0
        for i, h in enumerate(heights):
            if i > 0:
                y += self.gap
            h = max(0, h)
            self._entries.append(PositionEntry(y, h, measured))
            y += h
        self._total = y

    # ------------------------------------------------------------------
    # Incremental
    # ------------------------------------------------------------------

    def insert(self, index: int, height: int, measured: bool = True) -> tuple[int, int]:
        """Insert an entry at *index*, shifting the entries after it down.

        Returns ``(at, count)``: the content line at which ``count`` new lines
        (the item plus the gap separating it from its neighbour) appear.
        """
        index = max(0, min(index, len(self._entries)))
        height = max(0, height)
        n = len(self._entries)

        if n == 0:
            at, start, count = 0, 0, height
        elif index == n:
            at = self._total
            start = at + self.gap
            count = height + self.gap
        else:
            at = start = self._entries[index].start_line
            count = height + self.gap

        for entry in self._entries[index:]:
            entry.start_line += count
        self._entries.insert(index, PositionEntry(start, height, measured))
        self._total += count
        return at, count

    def delete(self, index: int) -> tuple[int, int]:
        """Remove entry *index*, shifting the entries after it up.

        Returns the ``[start, end)`` content-line range that disappeared (the
        item plus one adjoining gap).
        """
        n = len(self._entries)
        entry = self._entries.pop(index)
        if n == 1:
            start, end = 0, self._total
        elif index < n - 1:
            start, end = entry.start_line, entry.end_line + self.gap
        else:
            start, end = entry.start_line - self.gap, entry.end_line

        removed = end - start
        for later in self._entries[index:]:
            later.start_line -= removed
        self._total -= removed
        return start, end

    def set_height(self, index: int, height: int, measured: bool = True) -> int:
        """Change the height of entry *index*; returns the height delta."""
        entry = self._entries[index]
        height = max(0, height)
        delta = height - entry.height
        entry.height = height
        entry.measured = measured
        if delta:
            for later in self._entries[index + 1 :]:
                later.start_line += delta
            self._total += delta
        return delta

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_at(self, line: int, nearest: bool = False) -> tuple[int, int]:
        """Return ``(index, line_within_item)`` for content line *line*.

        Lines in a gap, or past either end, resolve to ``(-1, -1)`` unless
        *nearest* is set, in which case they snap to the closest line of the
        preceding (or first) item.
        """
        if not self._entries:
            return -1, -1
        if line < 0 or line >= self._total:
            if not nearest:
                return -1, -1
            line = max(0, min(line, self._total - 1))

        i = bisect_right(self._entries, line, key=lambda e: e.start_line) - 1
        if i < 0:
            return (0, 0) if nearest else (-1, -1)
        entry = self._entries[i]
        if line < entry.end_line:
            return i, line - entry.start_line
        if nearest:
            # Gap (or zero-height item): snap back to the last line with content
            while i > 0 and self._entries[i].height == 0:
                i -= 1
            entry = self._entries[i]
            return i, max(0, entry.height - 1)
        return -1, -1

    def visible_range(self, start: int, end: int) -> tuple[int, int]:
        """Return the first and last indices overlapping lines ``[start, end)``.

        Returns ``(-1, -1)`` when no item overlaps.
        """
        if not self._entries or end <= start:
            return -1, -1
        first = max(0, bisect_right(self._entries, start, key=lambda e: e.start_line) - 1)
        while first < len(self._entries) and self._entries[first].end_line <= start:
            first += 1
        if first >= len(self._entries) or self._entries[first].start_line >= end:
            return -1, -1
        last = bisect_right(self._entries, end - 1, key=lambda e: e.start_line) - 1
        return first, max(first, last)

    def is_consistent(self) -> bool:
        """Check the adjacency and total-height invariants."""
        y = 0
        for i, entry in enumerate(self._entries):
            if i > 0:
                y += self.gap
            if entry.start_line != y or entry.height < 0:
                return False
            y += entry.height
        return y == self._total
