"""Mouse-driven text highlighting across items.

A gesture goes idle -> pressed -> dragging -> idle.  The press point and the
current drag point are kept in content coordinates (item index, line within
the item, column) and resolved into a direction-independent range which is
then handed out item by item: the first item from the start point to its end,
the last item from its top to the end point, everything in between in full.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Callable

from pi.viewport.item import END_OF_LINE, NO_HIGHLIGHT, Capability
from pi.viewport.utils import SGR_RESET, AnsiCodeTracker, iter_segments, slice_by_column, strip_ansi, visible_width

if TYPE_CHECKING:
    from pi.viewport.item import Item
    from pi.viewport.positions import PositionIndex

HighlightSpan = tuple[int, int, int, int]


def reverse_video(text: str) -> str:
    return f"\x1b[7m{text}{SGR_RESET}"


class MousePhase(Enum):
    IDLE = "idle"
    PRESSED = "pressed"
    DRAGGING = "dragging"


@dataclass(frozen=True, order=True)
class ContentPoint:
    """A cell in content coordinates.

    Ordering is document order: item, then line, then column.
    """

    item: int
    line: int
    col: int


@dataclass(frozen=True)
class HighlightRange:
    start: ContentPoint
    end: ContentPoint

    @classmethod
    def resolve(cls, down: ContentPoint, drag: ContentPoint) -> HighlightRange:
        """Order the press and drag points.

        Dragging to the press point itself counts as forward (an empty range).
        """
        if drag >= down:
            return cls(down, drag)
        return cls(drag, down)

    def span_for(self, index: int, height: int) -> HighlightSpan:
        """Return the item-relative span for item *index* of *height* lines."""
        start, end = self.start, self.end
        if index < start.item or index > end.item:
            return NO_HIGHLIGHT
        if start.item == end.item:
            return (start.line, start.col, end.line, end.col)
        if index == start.item:
            return (start.line, start.col, height - 1, END_OF_LINE)
        if index == end.item:
            return (0, 0, end.line, end.col)
        return (0, 0, height - 1, END_OF_LINE)


class HighlightController:
    """Track one press / drag / release gesture and the range it selects."""

    def __init__(self) -> None:
        self.phase = MousePhase.IDLE
        self.down: ContentPoint | None = None
        self.drag: ContentPoint | None = None
        self._dragged = False

    @property
    def active(self) -> bool:
        return self.phase is not MousePhase.IDLE

    @property
    def range(self) -> HighlightRange | None:
        """The resolved range, or ``None`` until the pointer has moved."""
        if self.down is None or self.drag is None or not self._dragged:
            return None
        return HighlightRange.resolve(self.down, self.drag)

    def press(self, point: ContentPoint) -> None:
        """Start a new gesture; any previous range is dropped."""
        self.phase = MousePhase.PRESSED
        self.down = self.drag = point
        self._dragged = False

    def drag_to(self, point: ContentPoint) -> bool:
        if self.phase is MousePhase.IDLE:
            return False
        self.phase = MousePhase.DRAGGING
        self.drag = point
        self._dragged = True
        return True

    def release(self, point: ContentPoint | None = None) -> bool:
        if self.phase is MousePhase.IDLE:
            return False
        if point is not None and point != self.drag:
            self.drag = point
            self._dragged = True
        self.phase = MousePhase.IDLE
        return True

    def clear(self) -> None:
        self.phase = MousePhase.IDLE
        self.down = self.drag = None
        self._dragged = False

    # ------------------------------------------------------------------
    # Distribution
    # ------------------------------------------------------------------

    def spans(self, caps: list[Capability], positions: PositionIndex) -> list[HighlightSpan]:
        """Return the span each item should show (``NO_HIGHLIGHT`` for most)."""
        rng = self.range
        if rng is None:
            return [NO_HIGHLIGHT] * len(caps)
        return [
            rng.span_for(i, positions[i].height) if cap & Capability.HIGHLIGHTABLE else NO_HIGHLIGHT
            for i, cap in enumerate(caps)
        ]

    def apply(
        self,
        items: list[Item],
        caps: list[Capability],
        positions: PositionIndex,
        mark_dirty: Callable[[int], None],
    ) -> bool:
        """Push the current range into every highlightable item.

        Items outside the range are explicitly cleared.  Only items whose
        highlight actually changed are touched and marked dirty.  Returns
        ``True`` if any item changed.
        """
        changed = False
        for i, span in enumerate(self.spans(caps, positions)):
            if not caps[i] & Capability.HIGHLIGHTABLE:
                continue
            item = items[i]
            if tuple(item.get_highlight()) != span:  # type: ignore[attr-defined]
                item.set_highlight(*span)  # type: ignore[attr-defined]
                mark_dirty(i)
                changed = True
        return changed


# ---------------------------------------------------------------------------
# Text extraction and painting
# ---------------------------------------------------------------------------


def extract_text(lines: list[str], span: HighlightSpan) -> list[str]:
    """Return the plain text of *span* within an item's rendered *lines*.

    Styling is removed and trailing blank cells are trimmed from every line.
    """
    start_line, start_col, end_line, end_col = span
    if start_line < 0:
        return []
    out: list[str] = []
    for y in range(start_line, min(end_line, len(lines) - 1) + 1):
        plain = strip_ansi(lines[y])
        col = start_col if y == start_line else 0
        stop = end_col if y == end_line else END_OF_LINE
        out.append(slice_by_column(plain, col, stop - col).rstrip(" "))
    return out


def apply_highlight(
    line: str,
    start_col: int,
    end_col: int,
    style: Callable[[str], str] = reverse_video,
) -> str:
    """Paint columns ``[start_col, end_col)`` of *line* with *style*.

    Painting stops at the last non-blank cell, so highlighted padding does
    not show as a solid bar.  Styling active after the painted cells is
    reopened.
    """
    end_col = min(end_col, visible_width(strip_ansi(line).rstrip(" ")))
    start_col = max(0, start_col)
    if end_col <= start_col:
        return line

    tracker = AnsiCodeTracker()
    before: list[str] = []
    middle: list[str] = []
    after: list[str] = []
    reopened = False
    col = 0
    for chunk, w, is_escape in iter_segments(line):
        if is_escape:
            tracker.process(chunk)
            if col < start_col:
                before.append(chunk)
            elif col >= end_col:
                after.append(chunk)
            continue
        if col < start_col:
            before.append(chunk)
        elif col < end_col:
            middle.append(chunk)
        else:
            if not reopened:
                after.append(tracker.get_active_codes())
                reopened = True
            after.append(chunk)
        col += w

    head = "".join(before)
    if "\x1b[" in head:
        head += SGR_RESET
    return head + style("".join(middle)) + "".join(after)
