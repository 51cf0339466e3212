"""Full-buffer layout: every item composited into one tall surface.

The surface is as tall as the whole content.  Items are drawn into it once;
a frame is a slice of the surface.  After that:

- a dirty item whose height did not change is redrawn in place,
- a dirty item whose height changed forces a full rebuild (every later
  position would move),
- inserts splice blank rows in and draw only the new item,
- deletes splice the item's rows (and one adjoining gap) out.

A rebuild is always correct, so any detected mismatch between the position
table and the surface falls back to one.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pi.viewport.dirty import DirtyTracker
from pi.viewport.positions import PositionEntry, PositionIndex
from pi.viewport.surface import Surface

if TYPE_CHECKING:
    from pi.viewport.item import Item

logger = logging.getLogger(__name__)


class BufferCompositor:
    """Layout strategy backed by a single composited :class:`Surface`."""

    def __init__(self, gap: int = 0) -> None:
        self.positions = PositionIndex(gap)
        self.dirty = DirtyTracker()
        self.surface = Surface(0)
        self.width = 0
        self.rebuild_count = 0

    @property
    def total_height(self) -> int:
        return self.positions.total_height

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def set_width(self, width: int) -> None:
        width = max(0, width)
        if width != self.width:
            self.width = width
            self.dirty.mark_all()

    def invalidate(self) -> None:
        self.dirty.mark_all()

    def mark_dirty(self, index: int) -> None:
        self.dirty.mark(index)

    # ------------------------------------------------------------------
    # Full and incremental composition
    # ------------------------------------------------------------------

    def rebuild(self, items: list[Item]) -> None:
        """Measure and draw every item into a freshly sized surface."""
        self.positions.reset([item.height(self.width) for item in items])
        self.surface = Surface(self.width, self.positions.total_height)
        for item, entry in zip(items, self.positions):
            self._draw(item, entry)
        self.dirty.clear()
        self.rebuild_count += 1
        logger.debug(
            "Rebuilt viewport buffer: %d items, %d lines, width %d",
            len(items),
            self.positions.total_height,
            self.width,
        )

    def patch(self, items: list[Item]) -> None:
        """Redraw dirty items in place, or rebuild if any height changed."""
        indices = [i for i in self.dirty.take() if i < len(items)]
        if not indices:
            return

        for i in indices:
            if items[i].height(self.width) != self.positions[i].height:
                logger.debug("Item %d changed height; rebuilding instead of patching", i)
                self.rebuild(items)
                return

        for i in indices:
            self._draw(items[i], self.positions[i])

    def flush(self, items: list[Item]) -> None:
        """Bring the surface up to date with *items*."""
        if self.dirty.full or self.surface.width != self.width:
            self.rebuild(items)
            return
        if len(self.positions) != len(items) or self.surface.height != self.positions.total_height:
            logger.warning(
                "Viewport buffer out of sync (%d entries for %d items, %d rows for %d lines); rebuilding",
                len(self.positions),
                len(items),
                self.surface.height,
                self.positions.total_height,
            )
            self.rebuild(items)
            return
        if self.dirty:
            self.patch(items)

    def _draw(self, item: Item, entry: PositionEntry) -> None:
        region = self.surface.region(entry.start_line, entry.height)
        region.clear()
        if entry.height > 0:
            item.draw(region)

    # ------------------------------------------------------------------
    # Structural mutations
    # ------------------------------------------------------------------

    def reset(self, items: list[Item]) -> None:
        self.dirty.mark_all()

    def insert(self, items: list[Item], index: int, item: Item) -> tuple[int, int]:
        """Insert *item* at *index*; returns ``(at, count)`` inserted lines."""
        self.flush(items)
        index = max(0, min(index, len(items)))
        items.insert(index, item)

        at, count = self.positions.insert(index, item.height(self.width))
        self.surface.insert_blank(at, count)
        self._draw(item, self.positions[index])
        self.dirty.on_insert(index)
        return at, count

    def delete(self, items: list[Item], index: int) -> tuple[int, int]:
        """Remove item *index*; returns the ``[start, end)`` lines removed."""
        self.flush(items)
        items.pop(index)
        self.dirty.on_delete(index)

        start, end = self.positions.delete(index)
        if start < 0 or end > self.surface.height:
            logger.warning(
                "Deleted range [%d, %d) exceeds buffer height %d; rebuilding",
                start,
                end,
                self.surface.height,
            )
            self.dirty.mark_all()
            return start, end

        self.surface.delete(start, end)
        if self.surface.height != self.positions.total_height:
            logger.warning("Viewport buffer height mismatch after delete; rebuilding")
            self.dirty.mark_all()
        return start, end

    def replace(self, items: list[Item], index: int, item: Item) -> None:
        items[index] = item
        self.dirty.mark(index)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def sync(self, items: list[Item], offset: int, height: int) -> int:
        self.flush(items)
        return offset

    def measure(self, items: list[Item], index: int) -> None:
        self.flush(items)

    def measure_tail(self, items: list[Item], height: int) -> None:
        self.flush(items)

    def window(self, items: list[Item], offset: int, height: int) -> list[str]:
        self.flush(items)
        return self.surface.window(offset, height)

    def item_lines(self, items: list[Item], index: int) -> list[str]:
        self.flush(items)
        entry = self.positions[index]
        return self.surface.lines[entry.start_line : entry.end_line]
