"""Scroll offset arithmetic shared by both layout strategies."""

from __future__ import annotations


def max_offset(total_height: int, viewport_height: int) -> int:
    return max(0, total_height - viewport_height)


def clamp_offset(offset: int, total_height: int, viewport_height: int) -> int:
    """Clamp *offset* to ``[0, max(0, total_height - viewport_height)]``."""
    return max(0, min(offset, max_offset(total_height, viewport_height)))


def scroll_into_view(offset: int, viewport_height: int, start: int, height: int) -> int:
    """Return the offset that brings lines ``[start, start + height)`` into view.

    The offset is unchanged when the block is already fully visible.  A block
    above the viewport is aligned to the top edge, one below it to the bottom
    edge.
    """
    end = start + height
    if start >= offset and end <= offset + viewport_height:
        return offset
    if start < offset:
        return start
    if end > offset + viewport_height:
        return end - viewport_height
    return offset


def fully_visible(offset: int, viewport_height: int, start: int, height: int) -> bool:
    return start >= offset and start + height <= offset + viewport_height


def overlaps(offset: int, viewport_height: int, start: int, height: int) -> bool:
    return start < offset + viewport_height and start + height > offset
