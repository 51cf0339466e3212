"""Estimate-then-measure layout for very long item lists.

Every item starts at an estimated height.  Only items inside the viewport
plus an overscan margin are rendered, each into its own small surface, and
their real heights replace the estimates.  When a correction happens while
scrolled below the top, the offset moves by the amount the content above the
anchor item moved, so what is on screen stays put.  Rendered lines far from
the viewport are pruned after every frame.
"""

from __future__ import annotations

import logging
from bisect import bisect_left
from typing import TYPE_CHECKING

from pi.viewport.dirty import DirtyTracker
from pi.viewport.positions import PositionIndex
from pi.viewport.scroll import clamp_offset
from pi.viewport.surface import Surface

if TYPE_CHECKING:
    from pi.viewport.item import Item

logger = logging.getLogger(__name__)

# Measuring can move the visible range; stop re-measuring after this many passes
_MAX_SYNC_PASSES = 4


class LazyLayout:
    """Layout strategy that renders only the items near the viewport."""

    def __init__(self, gap: int = 0, overscan: int = 5, estimate: int = 10) -> None:
        self.positions = PositionIndex(gap)
        self.dirty = DirtyTracker()
        self.dirty.clear()
        self.overscan = overscan
        self.estimate = estimate
        self.width = 0
        self._cache: dict[int, list[str]] = {}

    @property
    def total_height(self) -> int:
        return self.positions.total_height

    @property
    def cached_indices(self) -> list[int]:
        return sorted(self._cache)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_width(self, width: int) -> None:
        width = max(0, width)
        if width == self.width:
            return
        self.width = width
        # Content reflows: every height goes back to being a guess
        self._cache.clear()
        self.positions.reset([self.estimate] * len(self.positions), measured=False)
        self.dirty.clear()

    def invalidate(self) -> None:
        self.dirty.mark_all()

    def mark_dirty(self, index: int) -> None:
        self.dirty.mark(index)

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    def reset(self, items: list[Item]) -> None:
        self._cache.clear()
        self.positions.reset([self.estimate] * len(items), measured=False)
        self.dirty.clear()

    def insert(self, items: list[Item], index: int, item: Item) -> tuple[int, int]:
        index = max(0, min(index, len(items)))
        items.insert(index, item)
        self._cache = {i + 1 if i >= index else i: lines for i, lines in self._cache.items()}
        self.dirty.on_insert(index)
        return self.positions.insert(index, self.estimate, measured=False)

    def delete(self, items: list[Item], index: int) -> tuple[int, int]:
        items.pop(index)
        self._cache = {i - 1 if i > index else i: lines for i, lines in self._cache.items() if i != index}
        self.dirty.on_delete(index)
        return self.positions.delete(index)

    def replace(self, items: list[Item], index: int, item: Item) -> None:
        items[index] = item
        self.dirty.mark(index)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def _apply_dirty(self) -> None:
        if self.dirty.full:
            self._cache.clear()
            for entry in self.positions:
                entry.measured = False
            self.dirty.clear()
            return
        for i in self.dirty.take():
            self._cache.pop(i, None)

    def _render(self, items: list[Item], index: int) -> int:
        """Render item *index* into the cache; returns the height delta."""
        item = items[index]
        height = max(0, item.height(self.width))
        surface = Surface(self.width, height)
        if height > 0:
            item.draw(surface.region(0, height))
        self._cache[index] = surface.lines
        return self.positions.set_height(index, height, measured=True)

    def _needs_render(self, index: int) -> bool:
        return index not in self._cache or not self.positions[index].measured

    def measure(self, items: list[Item], index: int) -> None:
        """Make sure item *index* has its real height."""
        self._apply_dirty()
        if 0 <= index < len(items) and self._needs_render(index):
            self._render(items, index)

    def measure_tail(self, items: list[Item], height: int) -> None:
        """Measure items from the end until *height* lines are covered."""
        self._apply_dirty()
        covered = 0
        for i in range(len(items) - 1, -1, -1):
            if self._needs_render(i):
                self._render(items, i)
            covered += self.positions[i].height + (self.positions.gap if i > 0 else 0)
            if covered >= height:
                break

    def sync(self, items: list[Item], offset: int, height: int) -> int:
        """Measure everything near the viewport and stabilize *offset*.

        Returns the corrected offset.
        """
        self._apply_dirty()
        if not items or height <= 0:
            self._cache.clear()
            return clamp_offset(offset, self.total_height, height)

        first = last = -1
        for _ in range(_MAX_SYNC_PASSES):
            offset = clamp_offset(offset, self.total_height, height)
            first, last = self.positions.visible_range(offset, offset + height)
            if first < 0:
                break

            anchor = self._anchor(offset) if offset > 0 else -1
            anchor_start = self.positions[anchor].start_line if anchor >= 0 else 0

            lo = max(0, first - self.overscan)
            hi = min(len(items) - 1, last + self.overscan)
            changed = False
            for i in range(lo, hi + 1):
                if self._needs_render(i) and self._render(items, i):
                    changed = True

            if anchor >= 0:
                shift = self.positions[anchor].start_line - anchor_start
                if shift:
                    logger.debug("Stabilized lazy viewport: anchor item %d moved %+d lines", anchor, shift)
                    offset += shift

            if not changed:
                break

        offset = clamp_offset(offset, self.total_height, height)
        first, last = self.positions.visible_range(offset, offset + height)
        self._prune(first, last)
        return offset

    def _anchor(self, offset: int) -> int:
        """Return the first item starting at or below *offset*."""
        index = bisect_left(self.positions, offset, key=lambda e: e.start_line)
        return index if index < len(self.positions) else -1

    def _prune(self, first: int, last: int) -> None:
        if first < 0:
            return
        keep_lo = first - 2 * self.overscan
        keep_hi = last + 2 * self.overscan
        stale = [i for i in self._cache if i < keep_lo or i > keep_hi]
        for i in stale:
            del self._cache[i]
        if stale:
            logger.debug("Pruned %d rendered items outside [%d, %d]", len(stale), keep_lo, keep_hi)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def item_lines(self, items: list[Item], index: int) -> list[str]:
        self.measure(items, index)
        return self._cache[index]

    def window(self, items: list[Item], offset: int, height: int) -> list[str]:
        blank = " " * self.width
        rows: list[str] = []
        y = offset
        total = self.total_height
        while len(rows) < height and y < total:
            index, within = self.positions.find_at(y)
            if index < 0:
                rows.append(blank)
                y += 1
                continue
            if self._needs_render(index):
                self._render(items, index)
                total = self.total_height
                continue
            lines = self._cache[index][within : within + height - len(rows)]
            if not lines:
                break
            rows.extend(lines)
            y += len(lines)
        rows.extend([blank] * (height - len(rows)))
        return rows
