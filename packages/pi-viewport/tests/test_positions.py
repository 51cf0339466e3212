"""Tests for the position index."""

from __future__ import annotations

from pi.viewport.positions import PositionIndex


def _make_index(*heights: int, gap: int = 0) -> PositionIndex:
    index = PositionIndex(gap)
    index.reset(list(heights))
    return index


def _starts(index: PositionIndex) -> list[int]:
    return [entry.start_line for entry in index]


class TestReset:
    def test_back_to_back(self) -> None:
        index = _make_index(2, 3, 1)
        assert _starts(index) == [0, 2, 5]
        assert index.total_height == 6
        assert index.is_consistent()

    def test_with_gap(self) -> None:
        index = _make_index(2, 3, 1, gap=1)
        assert _starts(index) == [0, 3, 7]
        assert index.total_height == 8

    def test_empty(self) -> None:
        index = _make_index()
        assert len(index) == 0
        assert index.total_height == 0


class TestInsert:
    """Incremental insertion shifts only later entries."""

    def test_into_empty(self) -> None:
        index = _make_index(gap=1)
        assert index.insert(0, 4) == (0, 4)
        assert index.total_height == 4

    def test_append_adds_gap_before_item(self) -> None:
        index = _make_index(2, gap=1)
        assert index.insert(2, 2) == (2, 3)
        assert _starts(index) == [0, 3]
        assert index.total_height == 5
        assert index.is_consistent()

    def test_prepend_shifts_everything(self) -> None:
        index = _make_index(2, 3, gap=1)
        assert index.insert(0, 4) == (0, 5)
        assert _starts(index) == [0, 5, 8]
        assert index.total_height == 11
        assert index.is_consistent()

    def test_middle(self) -> None:
        index = _make_index(1, 1)
        index.insert(1, 3)
        assert _starts(index) == [0, 1, 4]
        assert index.is_consistent()

    def test_unmeasured_flag(self) -> None:
        index = _make_index()
        index.insert(0, 10, measured=False)
        assert not index[0].measured


class TestDelete:
    def test_middle_removes_following_gap(self) -> None:
        index = _make_index(2, 3, 1, gap=1)
        assert index.delete(1) == (3, 7)
        assert _starts(index) == [0, 3]
        assert index.total_height == 4
        assert index.is_consistent()

    def test_last_removes_preceding_gap(self) -> None:
        index = _make_index(2, 3, 1, gap=1)
        assert index.delete(2) == (6, 8)
        assert index.total_height == 6
        assert index.is_consistent()

    def test_only_entry(self) -> None:
        index = _make_index(3, gap=2)
        assert index.delete(0) == (0, 3)
        assert index.total_height == 0


class TestSetHeight:
    def test_shifts_later_entries(self) -> None:
        index = _make_index(2, 3)
        assert index.set_height(0, 5) == 3
        assert _starts(index) == [0, 5]
        assert index.total_height == 8
        assert index.is_consistent()

    def test_unchanged_height_returns_zero(self) -> None:
        index = _make_index(2, 3)
        assert index.set_height(1, 3) == 0


class TestFindAt:
    """Map a content line to (item, line within item)."""

    def test_lines_inside_items(self) -> None:
        index = _make_index(2, 3, gap=1)
        assert index.find_at(0) == (0, 0)
        assert index.find_at(1) == (0, 1)
        assert index.find_at(3) == (1, 0)
        assert index.find_at(5) == (1, 2)

    def test_gap_and_out_of_range(self) -> None:
        index = _make_index(2, 3, gap=1)
        assert index.find_at(2) == (-1, -1)
        assert index.find_at(6) == (-1, -1)
        assert index.find_at(-1) == (-1, -1)

    def test_nearest_snaps_back(self) -> None:
        index = _make_index(2, 3, gap=1)
        assert index.find_at(2, nearest=True) == (0, 1)
        assert index.find_at(99, nearest=True) == (1, 2)

    def test_empty(self) -> None:
        assert _make_index().find_at(0) == (-1, -1)


class TestVisibleRange:
    def test_ranges(self) -> None:
        index = _make_index(2, 3, 1)
        assert index.visible_range(0, 2) == (0, 0)
        assert index.visible_range(1, 3) == (0, 1)
        assert index.visible_range(2, 5) == (1, 1)
        assert index.visible_range(0, 100) == (0, 2)

    def test_empty_window(self) -> None:
        assert _make_index(2).visible_range(1, 1) == (-1, -1)


class TestConsistency:
    def test_detects_corruption(self) -> None:
        index = _make_index(2, 3)
        index[1].start_line += 1
        assert not index.is_consistent()
