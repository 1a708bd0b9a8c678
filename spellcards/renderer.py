"""Card renderer: draws a computed layout onto a ReportLab canvas.

Each card is captured as a PDF form XObject so the sheet arrangement can
stamp it anywhere on a page afterwards.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from reportlab.pdfgen.canvas import Canvas

from .draw import draw_image_in_rect
from .layout import LayoutResult, Region


@dataclass(frozen=True)
class RenderedCard:
    """Handle to a card drawn as a named form on the document's canvas."""

    form_name: str
    width: float
    height: float
    spell_name: str
    overflow: bool = False


class CardRenderer(Protocol):
    def render(self, layout: LayoutResult) -> RenderedCard:
        ...


def draw_layout(c: Canvas, layout: LayoutResult, border: bool = True) -> None:
    """Draw all text runs of a layout with the card's lower-left corner at (0, 0)."""
    c.setStrokeColorRGB(0, 0, 0)
    c.setFillColorRGB(0, 0, 0)
    if border:
        c.setLineWidth(0.75)
        c.rect(0, 0, layout.width, layout.height)

    for block in layout.blocks:
        for run in block.runs:
            c.setFont(run.font_name, run.font_size)
            c.drawString(run.x, run.baseline, run.text)

    # Thin rule between header and the rest of the card
    header = layout.block(Region.HEADER)
    meta = layout.block(Region.META)
    body = layout.block(Region.BODY)
    if header.runs and (meta.runs or body.runs):
        next_top = meta.box.top if meta.runs else body.box.top
        rule_y = (header.box.y + next_top) / 2.0
        c.setLineWidth(0.5)
        c.line(header.box.x, rule_y, header.box.right, rule_y)


class CanvasCardRenderer:
    """Renders layouts into reusable forms on one canvas."""

    def __init__(self, c: Canvas, border: bool = True, prefix: str = "spellcard"):
        self.canvas = c
        self.border = border
        self.prefix = prefix
        self._count = 0

    def render(self, layout: LayoutResult) -> RenderedCard:
        name = f"{self.prefix}{self._count}"
        self._count += 1
        c = self.canvas
        c.beginForm(name, lowerx=0, lowery=0, upperx=layout.width, uppery=layout.height)
        draw_layout(c, layout, border=self.border)
        c.endForm()
        return RenderedCard(name, layout.width, layout.height, layout.spell_name, layout.overflow)


def place_card(c: Canvas, card: RenderedCard, x: float, y: float, background: Optional[object] = None) -> None:
    """Stamp a rendered card with its lower-left corner at (x, y), over an optional background image."""
    c.saveState()
    c.translate(x, y)
    if background is not None:
        draw_image_in_rect(c, background, 0, 0, card.width, card.height)
    c.doForm(card.form_name)
    c.restoreState()
