"""The item contract consumed by the viewport.

An item is any object with ``height(width)`` and ``draw(region)``.  Focus,
highlight and mouse-click support are optional capabilities; they are detected
once, when the item enters a viewport, and cached as a :class:`Capability`
flag set so the controllers never re-inspect item types on hot paths.
"""

from __future__ import annotations

import sys
from enum import IntFlag
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pi.viewport.surface import Region

__all__ = [
    "Item",
    "Focusable",
    "Highlightable",
    "MouseClickable",
    "Capability",
    "capabilities_of",
    "item_id_of",
    "NO_HIGHLIGHT",
    "END_OF_LINE",
]

# Highlight value meaning "nothing highlighted"
NO_HIGHLIGHT: tuple[int, int, int, int] = (-1, -1, -1, -1)

# End column meaning "through the end of the line"
END_OF_LINE = sys.maxsize


class Item(Protocol):
    """A renderable block of content."""

    def height(self, width: int) -> int:
        """Return the number of lines the item occupies at *width*.

        Must be stable for a given width until the item's content changes.
        """
        ...

    def draw(self, region: Region) -> None:
        """Draw the item into *region* (``region.height == height(width)``)."""
        ...


@runtime_checkable
class Focusable(Protocol):
    """An item with a focused / blurred visual state."""

    def focus(self) -> None: ...

    def blur(self) -> None: ...

    def is_focused(self) -> bool: ...


@runtime_checkable
class Highlightable(Protocol):
    """An item that can show (and report) a highlighted text range.

    Coordinates are item-relative: lines from the item's first line,
    columns in cells.  The end column is exclusive.
    """

    def set_highlight(self, start_line: int, start_col: int, end_line: int, end_col: int) -> None: ...

    def get_highlight(self) -> tuple[int, int, int, int]: ...


@runtime_checkable
class MouseClickable(Protocol):
    """An item that reacts to clicks (item-relative coordinates)."""

    def handle_mouse_click(self, button: int, x: int, y: int) -> bool: ...


class Capability(IntFlag):
    NONE = 0
    FOCUSABLE = 1 << 0
    HIGHLIGHTABLE = 1 << 1
    CLICKABLE = 1 << 2


def capabilities_of(item: object) -> Capability:
    """Probe *item* for the optional capability protocols."""
    caps = Capability.NONE
    if isinstance(item, Focusable):
        caps |= Capability.FOCUSABLE
    if isinstance(item, Highlightable):
        caps |= Capability.HIGHLIGHTABLE
    if isinstance(item, MouseClickable):
        caps |= Capability.CLICKABLE
    return caps


def item_id_of(item: object) -> str | None:
    """Return the caller-assigned ``item_id`` of *item*, if any."""
    value = getattr(item, "item_id", None)
    return value if isinstance(value, str) else None
