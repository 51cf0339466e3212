"""Selection and focus propagation.

The selected index is ``-1`` or a valid item index.  While the list is
focused exactly the selected item is in the focused state (when it is
focusable); every focus change marks the touched items dirty because focus
is usually drawn (a border, a cursor, a different colour).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from pi.viewport.item import Capability

if TYPE_CHECKING:
    from pi.viewport.item import Item


class SelectionController:
    """Track the selected item and keep focus on it.

    ``items`` and ``caps`` are the viewport's own lists (shared, mutated in
    place by the viewport); ``mark_dirty`` schedules an item for re-render.
    """

    def __init__(
        self,
        items: list[Item],
        caps: list[Capability],
        mark_dirty: Callable[[int], None],
    ) -> None:
        self._items = items
        self._caps = caps
        self._mark_dirty = mark_dirty
        self.selected = -1
        self.focused = False

    def _focusable(self, index: int) -> bool:
        return bool(self._caps[index] & Capability.FOCUSABLE)

    def _focus_item(self, index: int) -> None:
        if 0 <= index < len(self._items) and self._focusable(index):
            self._items[index].focus()  # type: ignore[attr-defined]
            self._mark_dirty(index)

    def _blur_item(self, index: int) -> None:
        if 0 <= index < len(self._items) and self._focusable(index):
            self._items[index].blur()  # type: ignore[attr-defined]
            self._mark_dirty(index)

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def set_selected(self, index: int) -> bool:
        """Select *index*; out-of-range indices are ignored."""
        if index < 0 or index >= len(self._items) or index == self.selected:
            return False
        previous = self.selected
        self.selected = index
        if self.focused:
            self._blur_item(previous)
            self._focus_item(index)
        return True

    def step(self, direction: int, wrap: bool = False) -> bool:
        """Move the selection by one item in *direction* (``+1`` or ``-1``).

        While focused, items that cannot take focus are skipped.  Without
        *wrap* the selection stops at either end.
        """
        n = len(self._items)
        if n == 0:
            return False

        start = self.selected
        if start < 0 and direction < 0:
            start = n

        for i in range(1, n + 1):
            candidate = start + direction * i
            if wrap:
                candidate %= n
            elif not 0 <= candidate < n:
                return False
            if self.focused and not self._focusable(candidate):
                continue
            return self.set_selected(candidate)
        return False

    # ------------------------------------------------------------------
    # Focus
    # ------------------------------------------------------------------

    def focus(self) -> None:
        self.focused = True
        self._focus_item(self.selected)

    def blur(self) -> None:
        self.focused = False
        self._blur_item(self.selected)

    def enforce(self) -> None:
        """Make the selected item the only focused one (or none when blurred)."""
        target = self.selected if self.focused else -1
        for i, item in enumerate(self._items):
            if not self._focusable(i):
                continue
            is_focused = item.is_focused()  # type: ignore[attr-defined]
            if i == target and not is_focused:
                self._focus_item(i)
            elif i != target and is_focused:
                self._blur_item(i)

    # ------------------------------------------------------------------
    # Structural changes (called after the item lists were updated)
    # ------------------------------------------------------------------

    def release(self, index: int) -> None:
        """Blur item *index* before it is removed or replaced.

        The item is leaving the list, so nothing is marked dirty.
        """
        if 0 <= index < len(self._items) and self._focusable(index):
            item = self._items[index]
            if item.is_focused():  # type: ignore[attr-defined]
                item.blur()  # type: ignore[attr-defined]

    def on_reset(self) -> None:
        if self.selected >= len(self._items):
            self.selected = len(self._items) - 1
        self.enforce()

    def on_insert(self, index: int) -> None:
        if 0 <= index <= self.selected:
            self.selected += 1
        # A newly inserted item is never the selection, so it must not arrive focused
        if self._focusable(index) and self._items[index].is_focused():  # type: ignore[attr-defined]
            self._blur_item(index)

    def on_delete(self, index: int) -> None:
        if self.selected == index:
            if index > 0:
                self.selected = index - 1
            elif self._items:
                self.selected = 0
            else:
                self.selected = -1
            if self.focused:
                self._focus_item(self.selected)
        elif self.selected > index:
            self.selected -= 1

    def on_replace(self, index: int) -> None:
        if not self._focusable(index):
            return
        item = self._items[index]
        wanted = self.focused and index == self.selected
        if wanted != item.is_focused():  # type: ignore[attr-defined]
            if wanted:
                self._focus_item(index)
            else:
                self._blur_item(index)
