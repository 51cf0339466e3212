"""The layout strategy contract and the factory that picks one."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from pi.viewport.compositor import BufferCompositor
from pi.viewport.lazy import LazyLayout

if TYPE_CHECKING:
    from pi.viewport.dirty import DirtyTracker
    from pi.viewport.item import Item
    from pi.viewport.options import ViewportOptions
    from pi.viewport.positions import PositionIndex


class LayoutStrategy(Protocol):
    """What the viewport needs from a layout backend.

    The viewport owns the item list; mutation methods receive it and apply
    the change themselves so positions, caches and dirty state move in step.
    ``sync`` must be called before reading ``positions`` for scrolling or
    hit-testing; it returns the (possibly stabilized) offset.
    """

    positions: PositionIndex
    dirty: DirtyTracker
    width: int

    @property
    def total_height(self) -> int: ...

    def set_width(self, width: int) -> None: ...

    def invalidate(self) -> None: ...

    def mark_dirty(self, index: int) -> None: ...

    def reset(self, items: list[Item]) -> None: ...

    def insert(self, items: list[Item], index: int, item: Item) -> tuple[int, int]: ...

    def delete(self, items: list[Item], index: int) -> tuple[int, int]: ...

    def replace(self, items: list[Item], index: int, item: Item) -> None: ...

    def sync(self, items: list[Item], offset: int, height: int) -> int: ...

    def measure(self, items: list[Item], index: int) -> None: ...

    def measure_tail(self, items: list[Item], height: int) -> None: ...

    def window(self, items: list[Item], offset: int, height: int) -> list[str]: ...

    def item_lines(self, items: list[Item], index: int) -> list[str]: ...


def create_layout(options: ViewportOptions) -> LayoutStrategy:
    if options.strategy == "lazy":
        return LazyLayout(gap=options.gap, overscan=options.overscan, estimate=options.estimate)
    return BufferCompositor(gap=options.gap)
