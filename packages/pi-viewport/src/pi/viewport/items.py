"""Stock viewport items."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol

from pi.viewport.highlight import apply_highlight, reverse_video
from pi.viewport.item import END_OF_LINE, NO_HIGHLIGHT
from pi.viewport.mouse import MouseButton
from pi.viewport.utils import apply_background_to_line, visible_width, wrap_text_with_ansi

if TYPE_CHECKING:
    from pi.viewport.surface import Region


class Component(Protocol):
    """Anything with a TUI-style ``render(width) -> lines``."""

    def render(self, width: int) -> list[str]: ...


# ---------------------------------------------------------------------------
# LinesItem
# ---------------------------------------------------------------------------


class LinesItem:
    """Base class for items that render to a list of lines.

    Subclasses implement :meth:`render_lines`.  Output is cached per width,
    per :meth:`state_key` and per highlight, and the highlight is painted on
    top of the rendered lines.
    """

    def __init__(
        self,
        item_id: str | None = None,
        highlight_style: Callable[[str], str] = reverse_video,
    ) -> None:
        self.item_id = item_id
        self._highlight_style = highlight_style
        self._highlight: tuple[int, int, int, int] = NO_HIGHLIGHT

        self._cached_key: tuple[Any, ...] | None = None
        self._cached_lines: list[str] | None = None

    def render_lines(self, width: int) -> list[str]:
        raise NotImplementedError

    def state_key(self) -> tuple[Any, ...]:
        """Extra state that changes the rendered output (focus, expansion)."""
        return ()

    def invalidate(self) -> None:
        self._cached_key = None
        self._cached_lines = None

    def lines(self, width: int) -> list[str]:
        key = (width, self.state_key(), self._highlight)
        if self._cached_lines is not None and self._cached_key == key:
            return self._cached_lines

        lines = list(self.render_lines(width))
        if self._highlight != NO_HIGHLIGHT:
            lines = self._paint_highlight(lines)

        self._cached_key = key
        self._cached_lines = lines
        return lines

    def _paint_highlight(self, lines: list[str]) -> list[str]:
        start_line, start_col, end_line, end_col = self._highlight
        for y in range(max(0, start_line), min(end_line, len(lines) - 1) + 1):
            col = start_col if y == start_line else 0
            stop = end_col if y == end_line else END_OF_LINE
            lines[y] = apply_highlight(lines[y], col, stop, self._highlight_style)
        return lines

    # Item protocol

    def height(self, width: int) -> int:
        return len(self.lines(width))

    def draw(self, region: Region) -> None:
        region.write_lines(self.lines(region.width))

    # Highlightable

    def set_highlight(self, start_line: int, start_col: int, end_line: int, end_col: int) -> None:
        self._highlight = (start_line, start_col, end_line, end_col)

    def get_highlight(self) -> tuple[int, int, int, int]:
        return self._highlight

    def has_highlight(self) -> bool:
        return self._highlight[0] >= 0


# ---------------------------------------------------------------------------
# TextItem
# ---------------------------------------------------------------------------


class TextItem(LinesItem):
    """Word-wrapped text, optionally restyled while focused.

    ``focus_style`` / ``blur_style`` are applied to every padded line; when
    they are omitted focus changes state but not output.
    """

    def __init__(
        self,
        text: str = "",
        padding_x: int = 0,
        item_id: str | None = None,
        focus_style: Callable[[str], str] | None = None,
        blur_style: Callable[[str], str] | None = None,
        highlight_style: Callable[[str], str] = reverse_video,
    ) -> None:
        super().__init__(item_id=item_id, highlight_style=highlight_style)
        self._text = text
        self._padding_x = padding_x
        self._focus_style = focus_style
        self._blur_style = blur_style
        self._focused = False

    @property
    def text(self) -> str:
        return self._text

    def set_text(self, text: str) -> None:
        self._text = text
        self.invalidate()

    def state_key(self) -> tuple[Any, ...]:
        return (self._text, self._focused)

    def render_lines(self, width: int) -> list[str]:
        return self._wrap(self._text, width)

    def _wrap(self, text: str, width: int) -> list[str]:
        content_width = max(1, width - self._padding_x * 2)
        wrapped = wrap_text_with_ansi(text.replace("\t", "   "), content_width)

        margin = " " * self._padding_x
        style = self._focus_style if self._focused else self._blur_style
        lines: list[str] = []
        for line in wrapped:
            padded = margin + line + margin
            if style is not None:
                lines.append(apply_background_to_line(padded, width, style))
            else:
                lines.append(padded + " " * max(0, width - visible_width(padded)))
        return lines

    # Focusable

    def focus(self) -> None:
        self._focused = True

    def blur(self) -> None:
        self._focused = False

    def is_focused(self) -> bool:
        return self._focused


# ---------------------------------------------------------------------------
# ToggleItem
# ---------------------------------------------------------------------------


class ToggleItem(TextItem):
    """A one-line title that expands to show a body when clicked."""

    def __init__(
        self,
        title: str,
        body: str = "",
        expanded: bool = False,
        item_id: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(text=title, item_id=item_id, **kwargs)
        self._body = body
        self.expanded = expanded

    def state_key(self) -> tuple[Any, ...]:
        return (*super().state_key(), self._body, self.expanded)

    def render_lines(self, width: int) -> list[str]:
        marker = "▾ " if self.expanded else "▸ "
        title = self._wrap(marker + self._text, width)[:1]
        if not self.expanded or not self._body:
            return title
        return title + self._wrap(self._body, width)

    def toggle(self) -> None:
        self.expanded = not self.expanded

    # MouseClickable

    def handle_mouse_click(self, button: int, x: int, y: int) -> bool:
        if button != MouseButton.LEFT or y != 0:
            return False
        self.toggle()
        return True


# ---------------------------------------------------------------------------
# SpacerItem
# ---------------------------------------------------------------------------


class SpacerItem:
    """Blank lines; never focusable or highlightable."""

    def __init__(self, lines: int = 1, item_id: str | None = None) -> None:
        self._lines = max(0, lines)
        self.item_id = item_id

    def height(self, width: int) -> int:
        return self._lines

    def draw(self, region: Region) -> None:
        region.clear()


# ---------------------------------------------------------------------------
# ComponentItem
# ---------------------------------------------------------------------------


class ComponentItem(LinesItem):
    """Adapt a ``render(width) -> list[str]`` component into an item."""

    def __init__(
        self,
        component: Component,
        item_id: str | None = None,
        highlight_style: Callable[[str], str] = reverse_video,
    ) -> None:
        super().__init__(item_id=item_id, highlight_style=highlight_style)
        self.component = component

    def render_lines(self, width: int) -> list[str]:
        return self.component.render(width)

    def invalidate(self) -> None:
        super().invalidate()
        invalidate = getattr(self.component, "invalidate", None)
        if callable(invalidate):
            invalidate()
