"""Line-based render surfaces and the rectangular regions items draw into.

A :class:`Surface` is a stack of terminal lines, each exactly ``width`` cells
wide.  The full-buffer strategy keeps one surface for the whole content; the
lazy strategy keeps one small surface per rendered item.  Items never touch a
surface directly: they receive a :class:`Region` and every write through it is
clipped to the region's rectangle.
"""

from __future__ import annotations

from dataclasses import dataclass

from pi.viewport.utils import SGR_RESET, fit_line, slice_by_column, visible_width


class Surface:
    """A fixed-width, growable stack of terminal lines."""

    def __init__(self, width: int, height: int = 0) -> None:
        self.width = max(0, width)
        self._blank = " " * self.width
        self.lines: list[str] = [self._blank] * max(0, height)

    @property
    def height(self) -> int:
        return len(self.lines)

    @property
    def blank_line(self) -> str:
        return self._blank

    def region(self, y: int, height: int, x: int = 0, width: int | None = None) -> Region:
        """Return a region of *height* rows starting at row *y*."""
        if width is None:
            width = self.width - x
        return Region(self, x=x, y=y, width=max(0, width), height=max(0, height))

    def line(self, y: int) -> str:
        if 0 <= y < len(self.lines):
            return self.lines[y]
        return self._blank

    def put(self, y: int, x: int, width: int, text: str) -> None:
        """Write *text* into row *y*, columns ``[x, x + width)``."""
        if not 0 <= y < len(self.lines) or width <= 0 or x >= self.width:
            return
        width = min(width, self.width - x)
        cell = fit_line(text, width)
        if x == 0 and width == self.width:
            self.lines[y] = cell
            return

        current = self.lines[y]
        before = slice_by_column(current, 0, x)
        after = slice_by_column(current, x + width, self.width - x - width)
        if "\x1b[" in before and not before.endswith(SGR_RESET):
            before += SGR_RESET
        line = before + cell + after
        # Wide characters cut at a boundary can leave the row short
        self.lines[y] = line + " " * max(0, self.width - visible_width(line))

    def insert_blank(self, at: int, count: int) -> None:
        """Insert *count* blank rows before row *at*."""
        if count <= 0:
            return
        at = max(0, min(at, len(self.lines)))
        self.lines[at:at] = [self._blank] * count

    def delete(self, start: int, end: int) -> None:
        """Remove rows ``[start, end)``."""
        del self.lines[max(0, start) : max(0, end)]

    def window(self, start: int, count: int) -> list[str]:
        """Return *count* rows starting at *start*, padded with blank rows."""
        if count <= 0:
            return []
        rows = self.lines[max(0, start) : max(0, start + count)]
        if len(rows) < count:
            rows = rows + [self._blank] * (count - len(rows))
        return rows


@dataclass
class Region:
    """A rectangle of a :class:`Surface` handed to an item's ``draw``.

    Row and column coordinates passed to the write methods are relative to
    the region.  Rows outside ``[0, height)`` are dropped and every line is
    cut (or padded) to the region width.
    """

    surface: Surface
    x: int
    y: int
    width: int
    height: int

    def set_line(self, row: int, text: str) -> None:
        if 0 <= row < self.height:
            self.surface.put(self.y + row, self.x, self.width, text)

    def write_lines(self, lines: list[str]) -> None:
        for row, text in enumerate(lines[: self.height]):
            self.set_line(row, text)

    def clear(self) -> None:
        for row in range(self.height):
            self.set_line(row, "")
