"""Print sheet arrangement: a grid of equally sized cards per page."""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Sequence, Tuple, TypeVar

from .constants import PAGE_TOP_INDENT

T = TypeVar("T")


@dataclass(frozen=True)
class SheetGrid:
    page_width: float
    page_height: float
    card_width: float
    card_height: float
    columns: int
    rows: int
    h_indent: float
    v_indent: float

    @classmethod
    def fit(cls, page_size: Tuple[float, float], card_width: float, card_height: float) -> "SheetGrid":
        """Largest grid of cards that fits the page, centred horizontally.

        Raises ValueError when not even one card fits.
        """
        page_width, page_height = page_size
        columns = int(page_width // card_width)
        rows = int(page_height // card_height)
        if columns < 1 or rows < 1:
            raise ValueError(
                f"Card size {card_width:.1f}x{card_height:.1f}pt does not fit on a "
                f"{page_width:.1f}x{page_height:.1f}pt page"
            )
        h_indent = (page_width - card_width * columns) / 2
        # keep the usual top margin when there is room for it
        free_height = page_height - card_height * rows
        v_indent = min(PAGE_TOP_INDENT, free_height / 2)
        return cls(page_width, page_height, card_width, card_height, columns, rows, h_indent, v_indent)

    @property
    def per_page(self) -> int:
        return self.columns * self.rows

    def slot(self, position_index: int, mirror: bool = False) -> Tuple[float, float]:
        """Lower-left corner of the card at ``position_index`` on its page.

        ``mirror`` flips the column so a duplex backside lines up with its front.
        """
        position_index %= self.per_page
        column_index = position_index % self.columns
        if mirror:
            column_index = (self.columns - 1) - column_index
        row_index = position_index // self.columns
        x = self.h_indent + column_index * self.card_width
        y = self.page_height - self.v_indent - (row_index + 1) * self.card_height
        return x, y


def paginate(items: Sequence[T], per_page: int) -> List[List[T]]:
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    return [list(items[i:i + per_page]) for i in range(0, len(items), per_page)]
