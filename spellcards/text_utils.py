"""Text measurement and wrapping relying on ReportLab font metrics."""
from typing import List, Optional, Sequence, Tuple

from reportlab.pdfbase import pdfmetrics


class TextDoesNotFit(ValueError):
    """A single character is wider than the space available for it."""

    def __init__(self, char: str, max_width: float):
        super().__init__(f"character {char!r} does not fit in {max_width:.2f}pt")
        self.char = char
        self.max_width = max_width


def text_width(text: str, font_name: str, font_size: float) -> float:
    return pdfmetrics.stringWidth(text, font_name, font_size)


def line_metrics(font_name: str, font_size: float, line_spacing: float) -> Tuple[float, float]:
    """Return (line_height, baseline_offset) for one line of text.

    The baseline offset is measured down from the top of the line so that the
    glyphs (ascender to descender) sit vertically centred in the line.
    """
    ascent, descent = pdfmetrics.getAscentDescent(font_name, font_size)
    glyph_height = ascent - descent
    line_height = max(font_size * line_spacing, glyph_height)
    return line_height, (line_height - glyph_height) / 2.0 + ascent


def wrap_words(
    words: Sequence[str],
    font_name: str,
    font_size: float,
    max_width: float,
    first_width: Optional[float] = None,
) -> List[str]:
    """Wrap words into lines that do not exceed max_width.

    ``first_width`` narrows the first line (room for a lead-in label). When the
    first word does not fit beside the lead-in, the first line is left empty.
    A word wider than a whole line is split at character boundaries.
    Raises TextDoesNotFit when a single character is wider than a line.
    """
    lines: List[str] = []
    current = ""

    def width_of(s):
        return text_width(s, font_name, font_size)

    def limit():
        return first_width if first_width is not None and not lines else max_width

    for w in words:
        candidate = f"{current} {w}" if current else w
        if width_of(candidate) <= limit():
            current = candidate
            continue
        if current:
            lines.append(current)
            current = ""
            if width_of(w) <= limit():
                current = w
                continue
        elif not lines and first_width is not None:
            lines.append("")
            if width_of(w) <= limit():
                current = w
                continue
        # The word alone is wider than a full line, split it by characters
        segment = ""
        for ch in w:
            if width_of(segment + ch) <= limit():
                segment += ch
                continue
            if not segment or width_of(ch) > limit():
                raise TextDoesNotFit(ch, limit())
            lines.append(segment)
            segment = ch
        current = segment
    if current:
        lines.append(current)
    return lines
