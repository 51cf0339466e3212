"""Terminal text utilities: ANSI handling, cell widths, wrapping and slicing.

Everything the viewport stores is a terminal line: a string that may carry
SGR / OSC / APC escape sequences.  These helpers measure and cut such lines by
*visible columns* so that items, regions and highlight ranges can all agree on
cell coordinates.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Callable

import grapheme
import wcwidth as _wcwidth

SGR_RESET = "\x1b[0m"

# ---------------------------------------------------------------------------
# Escape sequence patterns
# ---------------------------------------------------------------------------

# CSI (colour / erase / cursor), OSC (hyperlinks, titles), APC (markers)
_ESCAPE_RE = re.compile(
    r"\x1b\[[0-9;]*[mGKHJ]"
    r"|\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b_[^\x07\x1b]*(?:\x07|\x1b\\)"
)

# ---------------------------------------------------------------------------
# Width cache (capped at 512 entries)
# ---------------------------------------------------------------------------

_width_cache: dict[str, int] = {}
_WIDTH_CACHE_MAX = 512


def _cache_width(key: str, value: int) -> int:
    if len(_width_cache) >= _WIDTH_CACHE_MAX:
        _width_cache.clear()
    _width_cache[key] = value
    return value


# ---------------------------------------------------------------------------
# Cell widths
# ---------------------------------------------------------------------------


def _grapheme_width(g: str) -> int:
    """Return the number of terminal cells a single grapheme cluster occupies.

    Control characters and combining marks take no cells, emoji sequences
    (VS16, ZWJ, skin tones, flags) take two, everything else is delegated to
    ``wcwidth`` on the leading codepoint.
    """
    if not g:
        return 0

    first = g[0]
    cp = ord(first)
    if len(g) == 1:
        if cp < 0x20 or 0x7F <= cp <= 0x9F:
            return 0
        return max(_wcwidth.wcwidth(g), 0)

    for ch in g:
        c = ord(ch)
        if c in (0xFE0F, 0x200D) or 0x1F3FB <= c <= 0x1F3FF or 0x1F1E6 <= c <= 0x1F1FF:
            return 2

    if cp >= 0x1F000 or 0x2600 <= cp <= 0x27BF:
        return 2

    category = unicodedata.category(first)
    if category.startswith("M") or category == "Cf":
        return 0
    return max(_wcwidth.wcwidth(first), 0)


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from *text*."""
    return _ESCAPE_RE.sub("", text)


def visible_width(text: str) -> int:
    """Calculate the visible terminal width of *text*.

    Escape sequences are ignored, tabs count as three cells and pure
    printable-ASCII strings take a fast path.  Non-ASCII results are cached.
    """
    if not text:
        return 0

    stripped = strip_ansi(text).replace("\t", "   ")
    if not stripped:
        return 0

    if stripped.isascii() and stripped.isprintable():
        return len(stripped)

    cached = _width_cache.get(stripped)
    if cached is not None:
        return cached

    total = sum(_grapheme_width(g) for g in grapheme.graphemes(stripped))
    return _cache_width(stripped, total)


def iter_segments(text: str):
    """Yield ``(chunk, width, is_escape)`` for each escape sequence or grapheme."""
    pos = 0
    for m in _ESCAPE_RE.finditer(text):
        if m.start() > pos:
            for g in grapheme.graphemes(text[pos : m.start()]):
                yield (("   ", 3, False) if g == "\t" else (g, _grapheme_width(g), False))
        yield m.group(0), 0, True
        pos = m.end()
    if pos < len(text):
        for g in grapheme.graphemes(text[pos:]):
            yield (("   ", 3, False) if g == "\t" else (g, _grapheme_width(g), False))


# ---------------------------------------------------------------------------
# SGR state tracking
# ---------------------------------------------------------------------------

# SGR parameter -> (slot, code that turns it on); ``None`` code clears the slot.
_SGR_ATTRS: dict[int, tuple[str, str | None]] = {
    1: ("bold", "\x1b[1m"),
    2: ("dim", "\x1b[2m"),
    3: ("italic", "\x1b[3m"),
    4: ("underline", "\x1b[4m"),
    5: ("blink", "\x1b[5m"),
    7: ("inverse", "\x1b[7m"),
    8: ("hidden", "\x1b[8m"),
    9: ("strikethrough", "\x1b[9m"),
    23: ("italic", None),
    24: ("underline", None),
    25: ("blink", None),
    27: ("inverse", None),
    28: ("hidden", None),
    29: ("strikethrough", None),
    39: ("fg", None),
    49: ("bg", None),
}

_SLOT_ORDER = (
    "bold",
    "dim",
    "italic",
    "underline",
    "blink",
    "inverse",
    "hidden",
    "strikethrough",
    "fg",
    "bg",
)


class AnsiCodeTracker:
    """Track which SGR attributes are active so they can be re-opened.

    Used when wrapping styled text: every continuation line starts with the
    codes that were active where the previous line was cut, and every line
    that leaves styling open is closed with a reset.
    """

    def __init__(self) -> None:
        self._active: dict[str, str] = {}

    def process(self, code: str) -> None:
        """Update the tracked state from a sequence like ``\\x1b[1;31m``."""
        if not code.startswith("\x1b[") or not code.endswith("m"):
            return

        params = code[2:-1].split(";") if code[2:-1] else ["0"]
        i = 0
        while i < len(params):
            val = int(params[i]) if params[i] else 0
            if val == 0:
                self.clear()
            elif val == 22:
                self._active.pop("bold", None)
                self._active.pop("dim", None)
            elif val in _SGR_ATTRS:
                slot, on = _SGR_ATTRS[val]
                if on is None:
                    self._active.pop(slot, None)
                else:
                    self._active[slot] = on
            elif 30 <= val <= 37 or 90 <= val <= 97:
                self._active["fg"] = f"\x1b[{val}m"
            elif 40 <= val <= 47 or 100 <= val <= 107:
                self._active["bg"] = f"\x1b[{val}m"
            elif val in (38, 48) and i + 1 < len(params):
                slot = "fg" if val == 38 else "bg"
                mode = params[i + 1]
                if mode == "5" and i + 2 < len(params):
                    self._active[slot] = f"\x1b[{val};5;{params[i + 2]}m"
                    i += 2
                elif mode == "2" and i + 4 < len(params):
                    rgb = ";".join(params[i + 2 : i + 5])
                    self._active[slot] = f"\x1b[{val};2;{rgb}m"
                    i += 4
                else:
                    i += 1
            i += 1

    def clear(self) -> None:
        self._active.clear()

    def get_active_codes(self) -> str:
        return "".join(self._active[s] for s in _SLOT_ORDER if s in self._active)

    def get_line_end_reset(self) -> str:
        return SGR_RESET if self._active else ""


# ---------------------------------------------------------------------------
# wrap_text_with_ansi
# ---------------------------------------------------------------------------


def wrap_text_with_ansi(text: str, width: int) -> list[str]:
    """Word-wrap *text* to *width* columns, preserving ANSI escape codes.

    Embedded newlines start new physical lines.  Styling is carried across
    wrapped lines: each line is closed with a reset and the next one reopens
    whatever was active.  Words wider than *width* are hard-broken.
    """
    if width <= 0:
        return [text]

    tracker = AnsiCodeTracker()
    result: list[str] = []
    for physical in text.split("\n"):
        result.extend(_wrap_physical_line(physical, width, tracker))
    return result


def _wrap_physical_line(line: str, width: int, tracker: AnsiCodeTracker) -> list[str]:
    out: list[str] = []
    current: list[str] = [tracker.get_active_codes()]
    current_width = 0
    # Index into ``current`` just after the last space, and the width before it
    break_at = -1
    break_width = 0
    # Tracker state at the break point, to reopen styling on the next line
    break_codes = ""

    def flush(parts: list[str]) -> None:
        out.append("".join(parts) + tracker.get_line_end_reset())

    for chunk, w, is_escape in iter_segments(line):
        if is_escape:
            tracker.process(chunk)
            current.append(chunk)
            continue

        if current_width + w > width and current_width > 0:
            if chunk == " ":
                # Overflowing space becomes the break itself
                flush(current)
                current = [tracker.get_active_codes()]
                current_width = 0
                break_at = -1
                continue
            if break_at > 0:
                head, tail = current[:break_at], current[break_at:]
                out.append("".join(head).rstrip(" ") + (SGR_RESET if break_codes else ""))
                current = [break_codes, *tail]
                current_width -= break_width
            else:
                flush(current)
                current = [tracker.get_active_codes()]
                current_width = 0
            break_at = -1

        current.append(chunk)
        current_width += w
        if chunk == " ":
            break_at = len(current)
            break_width = current_width
            break_codes = tracker.get_active_codes()

    flush(current)
    return out


# ---------------------------------------------------------------------------
# Background / fitting
# ---------------------------------------------------------------------------


def apply_background_to_line(
    line: str,
    width: int,
    bg_fn: Callable[[str], str],
) -> str:
    """Pad *line* to *width* columns and pass it through *bg_fn*."""
    line_width = visible_width(line)
    if line_width >= width:
        return bg_fn(line)
    return bg_fn(line + " " * (width - line_width))


def _take_columns(text: str, max_cols: int) -> str:
    """Return the longest prefix of *text* fitting in *max_cols* cells.

    Escape sequences are kept; the cut happens on grapheme boundaries.
    """
    parts: list[str] = []
    cols = 0
    for chunk, w, is_escape in iter_segments(text):
        if is_escape:
            parts.append(chunk)
            continue
        if cols + w > max_cols:
            break
        parts.append(chunk)
        cols += w
    return "".join(parts)


def fit_line(text: str, width: int) -> str:
    """Cut or pad *text* so it occupies exactly *width* cells.

    A line that carries SGR styling is closed with a reset before the
    padding so styles never leak into neighbouring cells or lines.
    """
    if width <= 0:
        return ""
    if visible_width(text) > width:
        text = _take_columns(text, width)
    if "\x1b[" in text and not text.endswith(SGR_RESET):
        text += SGR_RESET
    return text + " " * (width - visible_width(text))


# ---------------------------------------------------------------------------
# slice_by_column
# ---------------------------------------------------------------------------


def slice_by_column(line: str, start_col: int, length: int) -> str:
    """Extract *length* visible columns of *line* starting at *start_col*.

    Escape sequences inside the slice are kept.  A wide character that
    straddles either boundary is included only if it starts inside the
    slice.
    """
    if length <= 0:
        return ""

    start_col = max(0, start_col)
    end_col = start_col + length
    parts: list[str] = []
    col = 0
    for chunk, w, is_escape in iter_segments(line):
        if col >= end_col:
            if is_escape:
                parts.append(chunk)
                continue
            break
        if is_escape:
            if col >= start_col:
                parts.append(chunk)
            continue
        if col >= start_col:
            parts.append(chunk)
        col += w
    return "".join(parts)
