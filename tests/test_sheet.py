"""Tests for print sheet arrangement."""

from __future__ import annotations

import pytest
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm

from spellcards.sheet import SheetGrid, paginate


class TestSheetGrid:
    """Grid fitting and slot positions."""

    def test_poker_cards_on_a4(self) -> None:
        grid = SheetGrid.fit(A4, 63 * mm, 88 * mm)

        assert (grid.columns, grid.rows) == (3, 3)
        assert grid.per_page == 9
        assert grid.h_indent == pytest.approx((A4[0] - 3 * 63 * mm) / 2)

    def test_slots_fill_rows_from_the_top(self) -> None:
        grid = SheetGrid.fit(A4, 63 * mm, 88 * mm)

        x0, y0 = grid.slot(0)
        x1, y1 = grid.slot(1)
        x3, y3 = grid.slot(3)

        assert y0 == y1
        assert x1 == pytest.approx(x0 + grid.card_width)
        assert x3 == x0
        assert y3 == pytest.approx(y0 - grid.card_height)
        assert y0 + grid.card_height <= A4[1]

    def test_mirrored_slot_flips_column(self) -> None:
        grid = SheetGrid.fit(A4, 63 * mm, 88 * mm)

        assert grid.slot(0, mirror=True) == grid.slot(2)
        assert grid.slot(4, mirror=True) == grid.slot(4)

    def test_slot_index_wraps_per_page(self) -> None:
        grid = SheetGrid.fit(A4, 63 * mm, 88 * mm)

        assert grid.slot(9) == grid.slot(0)

    def test_card_larger_than_page(self) -> None:
        with pytest.raises(ValueError):
            SheetGrid.fit(A4, 300 * mm, 88 * mm)


class TestPaginate:
    """Chunking cards into pages."""

    def test_chunks_keep_order(self) -> None:
        assert paginate(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]

    def test_empty(self) -> None:
        assert paginate([], 9) == []

    def test_invalid_page_size(self) -> None:
        with pytest.raises(ValueError):
            paginate([1], 0)
