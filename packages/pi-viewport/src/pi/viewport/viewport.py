"""Viewport - a scrollable, selectable window over a list of items.

The viewport owns the item list, the scroll offset and the selection and
highlight controllers; a layout strategy (full buffer or lazy) owns
positions and rendered output.  Every read goes through ``_sync`` so that
pending redraws are applied and the offset is clamped before anything looks
at positions.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pi.viewport.highlight import ContentPoint, HighlightController, extract_text
from pi.viewport.item import END_OF_LINE, NO_HIGHLIGHT, Capability, capabilities_of, item_id_of
from pi.viewport.layout import create_layout
from pi.viewport.mouse import MouseAction, MouseButton, iter_mouse_events
from pi.viewport.options import ViewportOptions
from pi.viewport.scroll import clamp_offset, fully_visible, overlaps, scroll_into_view
from pi.viewport.selection import SelectionController

if TYPE_CHECKING:
    from pi.viewport.item import Item
    from pi.viewport.surface import Region

logger = logging.getLogger(__name__)


class Viewport:
    """A virtual-scrolling list of variable-height items.

    Items are addressed by index or by their ``item_id``.  Mutations return
    ``True`` on success; bad indices and unknown ids are ignored.
    """

    def __init__(self, *items: Item, options: ViewportOptions | None = None) -> None:
        self.options = options or ViewportOptions()
        self._items: list[Item] = []
        self._caps: list[Capability] = []
        self._layout = create_layout(self.options)
        self._selection = SelectionController(self._items, self._caps, self._layout.mark_dirty)
        self._highlight = HighlightController()

        self.width = 0
        self.height = 0
        self._offset = 0
        # Top-left screen cell, used to translate raw mouse reports
        self.origin: tuple[int, int] = (0, 0)

        if items:
            self.set_items(list(items))

    # ------------------------------------------------------------------
    # Sizing
    # ------------------------------------------------------------------

    def set_size(self, width: int, height: int) -> None:
        self._layout.set_width(width)
        self.width = max(0, width)
        self.height = max(0, height)
        self._sync()

    def _sync(self) -> None:
        self._offset = self._layout.sync(self._items, self._offset, self.height)
        self._offset = clamp_offset(self._offset, self._layout.total_height, self.height)
        # Spans are sized from item heights; a reflow or a height change
        # since the last gesture leaves them stale
        if self._highlight.range is not None and self._highlight.apply(
            self._items, self._caps, self._layout.positions, self._layout.mark_dirty
        ):
            self._offset = self._layout.sync(self._items, self._offset, self.height)
            self._offset = clamp_offset(self._offset, self._layout.total_height, self.height)

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[Item]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def get_item(self, key: int | str) -> Item | None:
        index = self._resolve(key)
        return self._items[index] if index >= 0 else None

    def index_of(self, item_id: str) -> int:
        for i, item in enumerate(self._items):
            if item_id_of(item) == item_id:
                return i
        return -1

    def _resolve(self, key: int | str) -> int:
        if isinstance(key, str):
            return self.index_of(key)
        if 0 <= key < len(self._items):
            return key
        return -1

    def set_items(self, items: list[Item]) -> None:
        """Replace every item; selection is kept when still in range."""
        kept = {id(item) for item in items}
        for i, old in enumerate(self._items):
            if id(old) not in kept:
                self._selection.release(i)
        self._items[:] = items
        self._caps[:] = [capabilities_of(item) for item in items]
        self._highlight.clear()
        self._layout.reset(self._items)
        self._selection.on_reset()
        self._clear_item_highlights()

    def append_item(self, item: Item) -> bool:
        return self.insert_item(len(self._items), item)

    def prepend_item(self, item: Item) -> bool:
        return self.insert_item(0, item)

    def insert_item(self, index: int, item: Item) -> bool:
        """Insert *item* before *index* (``len(self)`` appends).

        When scrolled below the top and the new lines land above the
        viewport, the offset moves with them so the visible content stays.
        """
        if index < 0 or index > len(self._items):
            return False
        at, count = self._layout.insert(self._items, index, item)
        self._caps.insert(index, capabilities_of(item))
        self._selection.on_insert(index)
        self._shift_highlight(index, +1)
        if self._offset > 0 and at <= self._offset:
            self._offset += count
        return True

    def update_item(self, key: int | str, item: Item) -> bool:
        """Replace the item at *key* (index or id)."""
        index = self._resolve(key)
        if index < 0:
            return False
        self._selection.release(index)
        self._layout.replace(self._items, index, item)
        self._caps[index] = capabilities_of(item)
        self._selection.on_replace(index)
        if self._highlight.range is not None:
            self._apply_highlight()
        return True

    def delete_item(self, key: int | str) -> bool:
        """Remove the item at *key* (index or id)."""
        index = self._resolve(key)
        if index < 0:
            return False
        self._selection.release(index)
        start, end = self._layout.delete(self._items, index)
        self._caps.pop(index)
        self._selection.on_delete(index)
        self._shift_highlight(index, -1)
        if end <= self._offset:
            self._offset -= end - start
        return True

    def mark_dirty(self, key: int | str) -> None:
        """Schedule the item at *key* for re-render (its content changed)."""
        index = self._resolve(key)
        if index >= 0:
            self._layout.mark_dirty(index)

    def invalidate(self) -> None:
        """Drop every cached render and rebuild on the next read."""
        for item in self._items:
            invalidate = getattr(item, "invalidate", None)
            if callable(invalidate):
                invalidate()
        self._layout.invalidate()

    # ------------------------------------------------------------------
    # Selection & focus
    # ------------------------------------------------------------------

    @property
    def selected_index(self) -> int:
        return self._selection.selected

    def selected_item(self) -> Item | None:
        index = self._selection.selected
        return self._items[index] if 0 <= index < len(self._items) else None

    def set_selected(self, key: int | str) -> None:
        index = self._resolve(key)
        if index >= 0:
            self._selection.set_selected(index)

    def select_first(self) -> None:
        self._selection.set_selected(0)

    def select_last(self) -> None:
        self._selection.set_selected(len(self._items) - 1)

    def select_next(self, wrap: bool = False) -> None:
        self._selection.step(+1, wrap)

    def select_prev(self, wrap: bool = False) -> None:
        self._selection.step(-1, wrap)

    def select_next_wrap(self) -> None:
        self._selection.step(+1, wrap=True)

    def select_prev_wrap(self) -> None:
        self._selection.step(-1, wrap=True)

    def select_first_in_view(self) -> None:
        """Select the first item fully inside the viewport."""
        self._sync()
        positions = self._layout.positions
        for i, entry in enumerate(positions):
            if fully_visible(self._offset, self.height, entry.start_line, entry.height):
                self._selection.set_selected(i)
                return

    def select_last_in_view(self) -> None:
        """Select the last item fully inside the viewport."""
        self._sync()
        positions = self._layout.positions
        for i in range(len(positions) - 1, -1, -1):
            entry = positions[i]
            if fully_visible(self._offset, self.height, entry.start_line, entry.height):
                self._selection.set_selected(i)
                return

    def selected_item_in_view(self) -> bool:
        """Whether any line of the selected item is inside the viewport."""
        index = self._selection.selected
        if index < 0:
            return False
        self._sync()
        entry = self._layout.positions[index]
        return overlaps(self._offset, self.height, entry.start_line, entry.height)

    @property
    def focused(self) -> bool:
        return self._selection.focused

    def focus(self) -> None:
        self._selection.focus()

    def blur(self) -> None:
        self._selection.blur()

    # ------------------------------------------------------------------
    # Scrolling
    # ------------------------------------------------------------------

    @property
    def offset(self) -> int:
        self._sync()
        return self._offset

    @property
    def total_height(self) -> int:
        self._sync()
        return self._layout.total_height

    def at_top(self) -> bool:
        return self.offset <= 0

    def at_bottom(self) -> bool:
        return self.offset >= self._layout.total_height - self.height

    def scroll_by(self, delta: int) -> None:
        self._sync()
        self._offset = clamp_offset(self._offset + delta, self._layout.total_height, self.height)
        self._sync()

    def scroll_to_top(self) -> None:
        self._offset = 0
        self._sync()

    def scroll_to_bottom(self) -> None:
        self._layout.measure_tail(self._items, self.height)
        self._offset = max(0, self._layout.total_height - self.height)
        self._sync()
        self._offset = max(0, self._layout.total_height - self.height)

    def scroll_to_item(self, key: int | str) -> None:
        """Scroll the minimum distance that shows the whole item."""
        index = self._resolve(key)
        if index < 0:
            return
        self._layout.measure(self._items, index)
        self._sync()
        entry = self._layout.positions[index]
        self._offset = scroll_into_view(self._offset, self.height, entry.start_line, entry.height)
        self._sync()

    def scroll_to_selected(self) -> None:
        if self._selection.selected >= 0:
            self.scroll_to_item(self._selection.selected)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def lines(self) -> list[str]:
        """Return exactly ``height`` lines of the visible window."""
        if self.height <= 0:
            return []
        self._sync()
        return self._layout.window(self._items, self._offset, self.height)

    def view(self) -> str:
        """Return the visible window as one newline-joined string."""
        if not self._items or self.width <= 0 or self.height <= 0:
            return ""
        return "\n".join(self.lines())

    def render(self, width: int) -> list[str]:
        if width != self.width:
            self.set_size(width, self.height)
        return self.lines()

    def draw(self, region: Region) -> None:
        """Compose the visible window into *region* of a larger surface."""
        if region.width != self.width or region.height != self.height:
            self.set_size(region.width, region.height)
        region.write_lines(self.lines())

    # ------------------------------------------------------------------
    # Mouse
    # ------------------------------------------------------------------

    def handle_mouse_down(self, x: int, y: int, button: int = MouseButton.LEFT) -> bool:
        """Handle a press at viewport-relative cell ``(x, y)``.

        The item under the pointer is selected and, if clickable, receives
        the click in item-relative coordinates.  The left button also starts
        a new highlight gesture.
        """
        if not 0 <= y < self.height:
            return False
        self._sync()
        index, line = self._layout.positions.find_at(self._offset + y)
        if index < 0:
            return False

        if self._caps[index] & Capability.CLICKABLE:
            if self._items[index].handle_mouse_click(button, x, line):  # type: ignore[attr-defined]
                self._layout.mark_dirty(index)

        if button == MouseButton.LEFT:
            self._highlight.press(ContentPoint(index, line, max(0, x)))
            self._apply_highlight()
        self._selection.set_selected(index)
        return True

    def handle_mouse_drag(self, x: int, y: int) -> bool:
        if not self._highlight.active:
            return False
        point = self._drag_point(x, y)
        if point is None:
            return False
        self._highlight.drag_to(point)
        self._apply_highlight()
        return True

    def handle_mouse_up(self, x: int, y: int) -> bool:
        if not self._highlight.active:
            return False
        self._highlight.release(self._drag_point(x, y))
        self._apply_highlight()
        return True

    def _drag_point(self, x: int, y: int) -> ContentPoint | None:
        """Resolve a pointer position, clamped into the viewport."""
        self._sync()
        total = self._layout.total_height
        if total <= 0 or self.height <= 0:
            return None
        y = max(0, min(y, self.height - 1))
        content_y = min(self._offset + y, total - 1)
        positions = self._layout.positions
        index, line = positions.find_at(content_y)
        if index >= 0:
            return ContentPoint(index, line, max(0, x))
        # Over a gap: snap to the end of the item above
        index, line = positions.find_at(content_y, nearest=True)
        if index < 0:
            return None
        return ContentPoint(index, line, END_OF_LINE)

    def clear_highlight(self) -> None:
        self._highlight.clear()
        self._apply_highlight()

    def get_highlighted_text(self) -> str:
        """Return the highlighted text without styling, one line per row."""
        if self._highlight.range is None:
            return ""
        self._sync()
        spans = self._highlight.spans(self._caps, self._layout.positions)
        out: list[str] = []
        for i, span in enumerate(spans):
            if span == NO_HIGHLIGHT:
                continue
            out.extend(extract_text(self._layout.item_lines(self._items, i), span))
        return "\n".join(out)

    def _apply_highlight(self) -> None:
        rng = self._highlight.range
        if rng is not None:
            # Spans are sized from real heights
            for i in range(rng.start.item, min(rng.end.item, len(self._items) - 1) + 1):
                self._layout.measure(self._items, i)
            self._sync()
        self._highlight.apply(self._items, self._caps, self._layout.positions, self._layout.mark_dirty)

    def _clear_item_highlights(self) -> None:
        self._highlight.apply(self._items, self._caps, self._layout.positions, self._layout.mark_dirty)

    def _shift_highlight(self, index: int, direction: int) -> None:
        """Keep the gesture anchored to its items across an insert or delete."""
        down, drag = self._highlight.down, self._highlight.drag
        if down is None or drag is None:
            return
        if direction < 0 and index in (down.item, drag.item):
            self.clear_highlight()
            return

        def shifted(point: ContentPoint) -> ContentPoint:
            if point.item > index or (direction > 0 and point.item == index):
                return ContentPoint(point.item + direction, point.line, point.col)
            return point

        self._highlight.down, self._highlight.drag = shifted(down), shifted(drag)
        if self._highlight.range is not None:
            self._apply_highlight()

    # ------------------------------------------------------------------
    # Raw input
    # ------------------------------------------------------------------

    def handle_input(self, data: str) -> bool:
        """Dispatch SGR mouse reports found in *data*.

        Returns ``True`` if any report was consumed.
        """
        handled = False
        ox, oy = self.origin
        for event in iter_mouse_events(data):
            x, y = event.x - ox, event.y - oy
            inside = 0 <= x < self.width and 0 <= y < self.height
            if event.action is MouseAction.WHEEL:
                if inside:
                    lines = self.options.wheel_lines
                    self._wheel(-lines if event.button is MouseButton.WHEEL_UP else lines)
                    handled = True
            elif event.action is MouseAction.PRESS:
                if inside:
                    handled = self.handle_mouse_down(x, y, event.button) or handled
            elif event.action is MouseAction.DRAG:
                handled = self.handle_mouse_drag(x, y) or handled
            else:
                handled = self.handle_mouse_up(x, y) or handled
        return handled

    def _wheel(self, delta: int) -> None:
        self.scroll_by(delta)
        if self._selection.selected >= 0 and not self.selected_item_in_view():
            if delta < 0:
                self.select_prev()
            else:
                self.select_next()
            self.scroll_to_selected()
