"""Tests for Viewport selection and focus propagation."""

from __future__ import annotations

import pytest

from pi.viewport import SpacerItem, TextItem, Viewport, ViewportOptions
from pi.viewport.surface import Region


class _CountingText(TextItem):
    """TextItem that counts draws so redraw scope can be checked."""

    def __init__(self, text: str) -> None:
        super().__init__(text, focus_style=lambda s: f"\x1b[7m{s}\x1b[0m")
        self.draws = 0

    def draw(self, region: Region) -> None:
        self.draws += 1
        super().draw(region)


def _make_viewport(*items, height: int = 10, strategy: str = "buffer") -> Viewport:
    if not items:
        items = tuple(TextItem(f"item {i}") for i in range(5))
    viewport = Viewport(*items, options=ViewportOptions(strategy=strategy))
    viewport.set_size(20, height)
    return viewport


def _focused(viewport: Viewport) -> list[int]:
    return [
        i
        for i, item in enumerate(viewport.items)
        if hasattr(item, "is_focused") and item.is_focused()
    ]


class TestSetSelected:
    def test_initially_nothing_selected(self) -> None:
        viewport = _make_viewport()
        assert viewport.selected_index == -1
        assert viewport.selected_item() is None

    def test_out_of_range_is_ignored(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(2)
        viewport.set_selected(99)
        viewport.set_selected(-3)
        assert viewport.selected_index == 2

    def test_select_first_and_last(self) -> None:
        viewport = _make_viewport()
        viewport.select_last()
        assert viewport.selected_index == 4
        viewport.select_first()
        assert viewport.selected_index == 0


@pytest.mark.parametrize("strategy", ["buffer", "lazy"])
class TestFocusPropagation:
    """Exactly the selected item is focused while the list is focused."""

    def test_focus_follows_selection(self, strategy: str) -> None:
        viewport = _make_viewport(strategy=strategy)
        viewport.set_selected(1)
        viewport.focus()
        assert _focused(viewport) == [1]

        viewport.set_selected(3)
        assert _focused(viewport) == [3]

        viewport.blur()
        assert _focused(viewport) == []
        assert not viewport.focused

    def test_selection_while_blurred_does_not_focus(self, strategy: str) -> None:
        viewport = _make_viewport(strategy=strategy)
        viewport.set_selected(1)
        viewport.set_selected(2)
        assert _focused(viewport) == []
        viewport.focus()
        assert _focused(viewport) == [2]

    def test_set_items_drops_stray_focus(self, strategy: str) -> None:
        stray = TextItem("stray")
        stray.focus()
        viewport = _make_viewport(TextItem("a"), stray, strategy=strategy)
        assert _focused(viewport) == []

    def test_focus_is_rendered(self, strategy: str) -> None:
        items = [_CountingText(f"item {i}") for i in range(4)]
        viewport = _make_viewport(*items, strategy=strategy)
        viewport.set_selected(0)
        viewport.focus()
        lines = viewport.lines()
        assert "\x1b[7m" in lines[0]
        assert "\x1b[7m" not in lines[1]

        viewport.set_selected(1)
        lines = viewport.lines()
        assert "\x1b[7m" not in lines[0]
        assert "\x1b[7m" in lines[1]


class TestFocusRedrawScope:
    def test_only_old_and_new_selection_redrawn(self) -> None:
        items = [_CountingText(f"item {i}") for i in range(4)]
        viewport = _make_viewport(*items)
        viewport.set_selected(0)
        viewport.focus()
        viewport.view()
        before = [item.draws for item in items]

        viewport.set_selected(2)
        viewport.view()
        after = [item.draws for item in items]
        assert [a - b for a, b in zip(after, before)] == [1, 0, 1, 0]


class TestNavigation:
    def test_next_and_prev(self) -> None:
        viewport = _make_viewport()
        viewport.select_next()
        assert viewport.selected_index == 0
        viewport.select_next()
        assert viewport.selected_index == 1
        viewport.select_prev()
        assert viewport.selected_index == 0

    def test_prev_without_selection_starts_from_end(self) -> None:
        viewport = _make_viewport()
        viewport.select_prev()
        assert viewport.selected_index == 4

    def test_stops_at_boundaries_without_wrap(self) -> None:
        viewport = _make_viewport()
        viewport.select_last()
        viewport.select_next()
        assert viewport.selected_index == 4
        viewport.select_first()
        viewport.select_prev()
        assert viewport.selected_index == 0

    def test_wraps(self) -> None:
        viewport = _make_viewport()
        viewport.select_last()
        viewport.select_next_wrap()
        assert viewport.selected_index == 0
        viewport.select_prev_wrap()
        assert viewport.selected_index == 4

    def test_skips_unfocusable_items_when_focused(self) -> None:
        viewport = _make_viewport(TextItem("a"), SpacerItem(1), TextItem("b"))
        viewport.set_selected(0)
        viewport.focus()
        viewport.select_next()
        assert viewport.selected_index == 2
        viewport.select_prev()
        assert viewport.selected_index == 0

    def test_unfocusable_items_selectable_when_blurred(self) -> None:
        viewport = _make_viewport(TextItem("a"), SpacerItem(1), TextItem("b"))
        viewport.set_selected(0)
        viewport.select_next()
        assert viewport.selected_index == 1

    def test_empty_list(self) -> None:
        viewport = _make_viewport(TextItem("a"))
        viewport.delete_item(0)
        viewport.select_next()
        viewport.select_prev_wrap()
        assert viewport.selected_index == -1


class TestSelectionAcrossMutations:
    def test_delete_selected_moves_to_previous_and_keeps_focus(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(2)
        viewport.focus()
        viewport.delete_item(2)
        assert viewport.selected_index == 1
        assert _focused(viewport) == [1]

    def test_delete_first_selected_moves_to_new_first(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(0)
        viewport.delete_item(0)
        assert viewport.selected_index == 0

    def test_delete_last_remaining(self) -> None:
        viewport = _make_viewport(TextItem("only"))
        viewport.set_selected(0)
        viewport.delete_item(0)
        assert viewport.selected_index == -1

    def test_delete_before_selection_shifts_it(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(3)
        viewport.delete_item(0)
        assert viewport.selected_index == 2

    def test_prepend_shifts_selection(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(1)
        viewport.prepend_item(TextItem("new"))
        assert viewport.selected_index == 2
        assert viewport.selected_item().text == "item 1"

    def test_replaced_selected_item_takes_focus(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(1)
        viewport.focus()
        viewport.update_item(1, TextItem("fresh"))
        assert _focused(viewport) == [1]

    def test_deleted_item_leaves_blurred(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(2)
        viewport.focus()
        outgoing = viewport.get_item(2)
        viewport.delete_item(2)
        assert not outgoing.is_focused()
        assert _focused(viewport) == [1]

    def test_replaced_item_leaves_blurred(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(1)
        viewport.focus()
        outgoing = viewport.get_item(1)
        viewport.update_item(1, TextItem("fresh"))
        assert not outgoing.is_focused()

    def test_replacing_with_same_item_keeps_focus(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(1)
        viewport.focus()
        viewport.update_item(1, viewport.get_item(1))
        assert _focused(viewport) == [1]

    def test_set_items_blurs_dropped_items(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(0)
        viewport.focus()
        outgoing = viewport.get_item(0)
        viewport.set_items([TextItem("x"), TextItem("y")])
        assert not outgoing.is_focused()
        assert _focused(viewport) == [0]

    def test_inserted_item_arrives_blurred(self) -> None:
        viewport = _make_viewport()
        viewport.set_selected(0)
        viewport.focus()
        incoming = TextItem("incoming")
        incoming.focus()
        viewport.append_item(incoming)
        assert _focused(viewport) == [0]


class TestSelectionInView:
    def test_first_and_last_fully_visible(self) -> None:
        items = [TextItem(f"item {i}") for i in range(10)]
        viewport = _make_viewport(*items, height=3)
        viewport.scroll_by(4)
        viewport.select_first_in_view()
        assert viewport.selected_index == 4
        viewport.select_last_in_view()
        assert viewport.selected_index == 6

    def test_partially_visible_items_are_skipped(self) -> None:
        items = [TextItem("a\nb"), TextItem("c"), TextItem("d\ne")]
        viewport = _make_viewport(*items, height=3)
        viewport.scroll_by(1)
        viewport.select_first_in_view()
        assert viewport.selected_index == 1
        viewport.select_last_in_view()
        assert viewport.selected_index == 1

    def test_selected_item_in_view_counts_overlap(self) -> None:
        items = [TextItem("a\nb"), TextItem("c"), TextItem("d\ne")]
        viewport = _make_viewport(*items, height=3)
        viewport.scroll_by(1)
        viewport.set_selected(0)
        assert viewport.selected_item_in_view()
        viewport.scroll_to_top()
        viewport.set_selected(2)
        assert not viewport.selected_item_in_view()
        viewport.scroll_by(10)
        assert viewport.selected_item_in_view()

    def test_nothing_selected_is_not_in_view(self) -> None:
        viewport = _make_viewport()
        assert not viewport.selected_item_in_view()
