"""Layout engine: places a spell's text blocks inside a fixed card geometry.

``layout(spell, geometry)`` is a pure function. It partitions the spell into
three regions (header, meta, body), wraps each to the card width and stacks
them top-down in ReportLab coordinates (origin at the card's lower-left
corner). Header and meta are never truncated; the body takes the remaining
height and is shrunk, then truncated at a whole word, when it does not fit.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from .constants import PARAGRAPH_GAP_RATIO, TRUNCATION_MARKER
from .errors import GeometryTooSmall
from .geometry import CardGeometry, FontRole, OverflowPolicy
from .spell import SpellRecord
from .text_utils import TextDoesNotFit, line_metrics, text_width, wrap_words

logger = logging.getLogger(__name__)

# Slack for float comparisons of stacked heights
EPSILON = 1e-6


class Region(str, Enum):
    HEADER = "header"
    META = "meta"
    BODY = "body"


REGION_ORDER: Tuple[Region, ...] = (Region.HEADER, Region.META, Region.BODY)


def inner_rect(x: float, y: float, width: float, height: float, margin: float) -> Tuple[float, float, float, float]:
    """Return the inner content rectangle applying a margin on all sides.

    Args:
        x, y: Lower-left origin of the outer rectangle (ReportLab coordinates)
        width, height: Dimensions of the outer rectangle
        margin: Space kept free on each side
    Returns:
        (inner_x, inner_y, inner_width, inner_height)
    """
    return (x + margin, y + margin, width - 2 * margin, height - 2 * margin)


@dataclass(frozen=True)
class Box:
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def top(self) -> float:
        return self.y + self.height

    def contains(self, other: "Box", tolerance: float = EPSILON) -> bool:
        return (
            other.x >= self.x - tolerance
            and other.y >= self.y - tolerance
            and other.right <= self.right + tolerance
            and other.top <= self.top + tolerance
        )


@dataclass(frozen=True)
class TextRun:
    """A piece of text drawn with one font at one baseline position."""

    text: str
    x: float
    baseline: float
    font_name: str
    font_size: float


@dataclass(frozen=True)
class LayoutBlock:
    region: Region
    role: FontRole
    box: Box
    runs: Tuple[TextRun, ...]
    text: str
    font_size: float
    overflow: bool = False


@dataclass(frozen=True)
class LayoutResult:
    spell_name: str
    width: float
    height: float
    blocks: Tuple[LayoutBlock, ...]

    @property
    def bounds(self) -> Box:
        return Box(0.0, 0.0, self.width, self.height)

    @property
    def overflow(self) -> bool:
        return any(b.overflow for b in self.blocks)

    def block(self, region: Region) -> LayoutBlock:
        for b in self.blocks:
            if b.region is region:
                return b
        raise KeyError(region)

    def to_dict(self) -> dict:
        """JSON-ready representation, stable across runs for fixture diffing."""
        return {
            "spell": self.spell_name,
            "width": self.width,
            "height": self.height,
            "blocks": [
                {
                    "region": b.region.value,
                    "role": b.role.value,
                    "box": [b.box.x, b.box.y, b.box.width, b.box.height],
                    "font_size": b.font_size,
                    "overflow": b.overflow,
                    "text": b.text,
                    "runs": [[r.text, r.x, r.baseline, r.font_name, r.font_size] for r in b.runs],
                }
                for b in self.blocks
            ],
        }


# A line to be stacked: pieces are (text, x offset from the region's left edge, font, size)
@dataclass(frozen=True)
class _Line:
    pieces: Tuple[Tuple[str, float, str, float], ...]
    height: float
    baseline_offset: float
    gap_before: float = 0.0


def _make_line(pieces, line_spacing: float, gap_before: float = 0.0) -> _Line:
    metrics = [line_metrics(font, size, line_spacing) for _, _, font, size in pieces]
    height = max(m[0] for m in metrics)
    baseline_offset = max(m[1] for m in metrics)
    return _Line(tuple(pieces), height, baseline_offset, gap_before)


def _stack_height(lines: Sequence[_Line]) -> float:
    return sum(line.gap_before + line.height for line in lines)


def _place(lines: Sequence[_Line], left: float, top: float) -> Tuple[Tuple[TextRun, ...], float]:
    runs: List[TextRun] = []
    cursor = top
    for line in lines:
        cursor -= line.gap_before
        baseline = cursor - line.baseline_offset
        for text, x_offset, font, size in line.pieces:
            if text:
                runs.append(TextRun(text, left + x_offset, baseline, font, size))
        cursor -= line.height
    return tuple(runs), top - cursor


def _step_sizes(size: float, floor: float, step: float) -> List[float]:
    """Font sizes from ``size`` down to ``floor`` in discrete steps."""
    if size <= floor:
        return [size]
    sizes = []
    k = 0
    while True:
        candidate = round(size - k * step, 4)
        if candidate <= floor:
            sizes.append(floor)
            return sizes
        sizes.append(candidate)
        k += 1


def _label_value_lines(
    label: str,
    value: str,
    label_font: str,
    value_font: str,
    size: float,
    width: float,
    line_spacing: float,
) -> List[_Line]:
    """Bold label followed by its value; continuation lines use the full width."""
    label_w = text_width(label, label_font, size)
    if label_w > width:
        raise TextDoesNotFit(label[0], width)
    indent = label_w + text_width(" ", value_font, size)
    value_lines = wrap_words(value.split(), value_font, size, width, first_width=width - indent)
    lines = []
    for i, text in enumerate(value_lines):
        if i == 0:
            pieces = [(label, 0.0, label_font, size), (text, indent, value_font, size)]
        else:
            pieces = [(text, 0.0, value_font, size)]
        lines.append(_make_line(pieces, line_spacing))
    if not lines:
        lines.append(_make_line([(label, 0.0, label_font, size)], line_spacing))
    return lines


def _header_lines(spell: SpellRecord, geometry: CardGeometry, sizes: Dict[FontRole, float], width: float) -> List[_Line]:
    spacing = geometry.line_spacing
    title_font = geometry.title_font.name
    title_size = sizes[FontRole.TITLE]
    level = spell.level_label
    level_w = text_width(level, title_font, title_size)
    column_gap = 2 * text_width(" ", title_font, title_size)
    name_words = spell.name.split()

    lines: List[_Line] = []
    name_width = width - level_w - column_gap
    longest_word = max((text_width(w, title_font, title_size) for w in name_words), default=0.0)

    if name_width > 0 and longest_word <= name_width:
        for i, text in enumerate(wrap_words(name_words, title_font, title_size, name_width)):
            pieces = [(text, 0.0, title_font, title_size)]
            if i == 0:
                pieces.append((level, width - level_w, title_font, title_size))
            lines.append(_make_line(pieces, spacing))
    else:
        # A name word does not fit beside the level label, give the label its own right-aligned line
        for text in wrap_words(name_words, title_font, title_size, width):
            lines.append(_make_line([(text, 0.0, title_font, title_size)], spacing))
        for text in wrap_words(level.split(), title_font, title_size, width):
            x = width - text_width(text, title_font, title_size)
            lines.append(_make_line([(text, x, title_font, title_size)], spacing))

    trait_font = geometry.traits_font.name
    trait_size = sizes[FontRole.TRAITS]
    for text in wrap_words(spell.trait_line.split(), trait_font, trait_size, width):
        lines.append(_make_line([(text, 0.0, trait_font, trait_size)], spacing))

    if spell.traditions:
        value = ", ".join(t.value for t in spell.traditions)
        lines.extend(
            _label_value_lines(
                "Traditions",
                value,
                geometry.label_font.name,
                geometry.body_font.name,
                sizes[FontRole.LABEL],
                width,
                spacing,
            )
        )
    return lines


def _header_text(spell: SpellRecord) -> str:
    parts = [spell.name, spell.level_label, spell.trait_line]
    if spell.traditions:
        parts.append("Traditions " + ", ".join(t.value for t in spell.traditions))
    return "\n".join(p for p in parts if p)


def _meta_lines(spell: SpellRecord, geometry: CardGeometry, sizes: Dict[FontRole, float], width: float) -> List[_Line]:
    lines: List[_Line] = []
    for label, value in spell.meta_entries():
        lines.extend(
            _label_value_lines(
                label,
                value,
                geometry.label_font.name,
                geometry.body_font.name,
                sizes[FontRole.LABEL],
                width,
                geometry.line_spacing,
            )
        )
    return lines


Paragraphs = List[Tuple[Optional[str], List[str]]]

_WORD = re.compile(r"\S+")


def _body_lines(paragraphs: Paragraphs, geometry: CardGeometry, size: float, width: float) -> List[_Line]:
    body_font = geometry.body_font.name
    lead_font = geometry.label_font.name
    spacing = geometry.line_spacing
    lines: List[_Line] = []
    for p_index, (lead_in, words) in enumerate(paragraphs):
        gap = size * PARAGRAPH_GAP_RATIO if p_index else 0.0
        indent = 0.0
        first_width = None
        if lead_in:
            lead_w = text_width(lead_in, lead_font, size)
            if lead_w > width:
                raise TextDoesNotFit(lead_in[0], width)
            indent = lead_w + text_width(" ", body_font, size)
            first_width = width - indent
        wrapped = wrap_words(words, body_font, size, width, first_width=first_width)
        for i, text in enumerate(wrapped):
            if i == 0 and lead_in:
                pieces = [(lead_in, 0.0, lead_font, size), (text, indent, body_font, size)]
            else:
                pieces = [(text, 0.0, body_font, size)]
            lines.append(_make_line(pieces, spacing, gap if i == 0 else 0.0))
    return lines


def _body_source(spell: SpellRecord) -> Tuple[str, Paragraphs, List[int]]:
    """The body's source text, its paragraphs as words, and each word's end offset in the source.

    The source is the description followed by the heightened entries, so any
    prefix of it that stops inside the description is a prefix of the
    description itself, whitespace included.
    """
    parts = [spell.description] if spell.description.strip() else []
    parts.extend(f"{entry.lead_in} {entry.text}" for entry in spell.heightened)
    source = "\n\n".join(parts)

    paragraphs: Paragraphs = []
    word_ends: List[int] = []
    pos = 0
    for lead_in, text in spell.body_paragraphs():
        if lead_in:
            pos = source.index(lead_in, pos) + len(lead_in)
        start = source.index(text, pos)
        words = []
        for match in _WORD.finditer(text):
            words.append(match.group())
            word_ends.append(start + match.end())
        paragraphs.append((lead_in, words))
        pos = start + len(text)
    return source, paragraphs, word_ends


def _source_prefix(source: str, word_ends: Sequence[int], count: int) -> str:
    return source[: word_ends[count - 1]] if count else ""


def _take_words(paragraphs: Paragraphs, count: int) -> Paragraphs:
    """The first ``count`` words; a lead-in is kept only with at least one of its words."""
    taken: Paragraphs = []
    remaining = count
    for lead_in, words in paragraphs:
        if remaining <= 0:
            break
        chunk = list(words[:remaining])
        taken.append((lead_in, chunk))
        remaining -= len(chunk)
    return taken


def _with_marker(paragraphs: Paragraphs) -> Paragraphs:
    if not paragraphs:
        return [(None, [TRUNCATION_MARKER])]
    marked = list(paragraphs)
    lead_in, words = marked[-1]
    marked[-1] = (lead_in, list(words) + [TRUNCATION_MARKER])
    return marked


def truncate_to_fit(
    paragraphs: Paragraphs,
    geometry: CardGeometry,
    size: float,
    width: float,
    available: float,
) -> Tuple[Paragraphs, List[_Line]]:
    """Longest whole-word prefix that fits together with the truncation marker.

    Wrapped height grows monotonically with the number of words, so the
    prefix length is found by bisection. Returns the kept paragraphs (without
    the marker) and the lines to draw (with the marker).
    """

    def attempt(count):
        kept = _take_words(paragraphs, count)
        try:
            lines = _body_lines(_with_marker(kept), geometry, size, width)
        except TextDoesNotFit:
            return kept, None
        if _stack_height(lines) <= available + EPSILON:
            return kept, lines
        return kept, None

    best_kept, best_lines = attempt(0)
    if best_lines is None:
        return best_kept, []
    lo, hi = 1, sum(len(words) for _, words in paragraphs) - 1
    while lo <= hi:
        mid = (lo + hi) // 2
        kept, lines = attempt(mid)
        if lines is None:
            hi = mid - 1
        else:
            best_kept, best_lines = kept, lines
            lo = mid + 1
    return best_kept, best_lines


def _fixed_region_sizes(geometry: CardGeometry, step_index: int) -> Tuple[Dict[FontRole, float], bool]:
    sizes = {}
    at_floor = True
    for role in (FontRole.TITLE, FontRole.TRAITS, FontRole.LABEL):
        spec = geometry.font_for(role)
        floor = min(spec.size, geometry.min_body_font_size)
        size = max(floor, round(spec.size - step_index * geometry.font_step, 4))
        sizes[role] = size
        at_floor = at_floor and size == floor
    return sizes, at_floor


def _fit_fixed_regions(spell: SpellRecord, geometry: CardGeometry, width: float, height: float):
    """Header and meta lines at their requested sizes, stepped down only when they alone do not fit."""
    step_index = 0
    while True:
        sizes, at_floor = _fixed_region_sizes(geometry, step_index)
        reason = None
        try:
            header = _header_lines(spell, geometry, sizes, width)
            meta = _meta_lines(spell, geometry, sizes, width)
        except TextDoesNotFit as exc:
            reason = f"{exc} at the minimum font size"
        else:
            needed = _stack_height(header)
            if meta:
                needed += geometry.region_gap + _stack_height(meta)
            if needed <= height + EPSILON:
                if step_index:
                    logger.debug("Header of '%s' shrunk by %d step(s) to fit", spell.name, step_index)
                return header, meta, sizes
            reason = f"header and meta need {needed:.2f}pt of {height:.2f}pt at the minimum font size"
        if at_floor:
            raise GeometryTooSmall(spell.name, reason)
        step_index += 1


def layout(spell: SpellRecord, geometry: CardGeometry) -> LayoutResult:
    """Compute the positioned text blocks of one spell card."""
    inner_x, inner_y, inner_w, inner_h = inner_rect(0.0, 0.0, geometry.width, geometry.height, geometry.margin)
    if inner_w <= 0 or inner_h <= 0:
        raise GeometryTooSmall(spell.name, "margins leave no room for content")

    source, paragraphs, word_ends = _body_source(spell)
    header_lines, meta_lines, sizes = _fit_fixed_regions(spell, geometry, inner_w, inner_h)

    top = inner_y + inner_h
    header_runs, header_h = _place(header_lines, inner_x, top)
    header = LayoutBlock(
        Region.HEADER,
        FontRole.TITLE,
        Box(inner_x, top - header_h, inner_w, header_h),
        header_runs,
        _header_text(spell),
        sizes[FontRole.TITLE],
    )
    cursor = top - header_h

    if meta_lines:
        cursor -= geometry.region_gap
    meta_runs, meta_h = _place(meta_lines, inner_x, cursor)
    meta = LayoutBlock(
        Region.META,
        FontRole.LABEL,
        Box(inner_x, cursor - meta_h, inner_w, meta_h),
        meta_runs,
        "\n".join(f"{label} {value}" for label, value in spell.meta_entries()),
        sizes[FontRole.LABEL],
    )
    cursor -= meta_h

    if word_ends:
        # keep the body box inside the margin when header and meta fill the card
        cursor = max(inner_y, cursor - geometry.region_gap)
    available = max(0.0, cursor - inner_y)
    body = _layout_body(spell, paragraphs, source, word_ends, geometry, inner_x, cursor, inner_w, available)

    return LayoutResult(spell.name, geometry.width, geometry.height, (header, meta, body))


def _layout_body(
    spell: SpellRecord,
    paragraphs: Paragraphs,
    source: str,
    word_ends: Sequence[int],
    geometry: CardGeometry,
    left: float,
    top: float,
    width: float,
    available: float,
) -> LayoutBlock:
    box = Box(left, top - available, width, available)
    base = geometry.body_font.size
    total = len(word_ends)
    if not total:
        return LayoutBlock(Region.BODY, FontRole.BODY, box, (), "", base)

    if geometry.overflow_policy is OverflowPolicy.SHRINK_THEN_TRUNCATE:
        sizes = _step_sizes(base, geometry.min_body_font_size, geometry.font_step)
    else:
        sizes = [base]

    for size in sizes:
        try:
            lines = _body_lines(paragraphs, geometry, size, width)
        except TextDoesNotFit:
            continue
        if _stack_height(lines) <= available + EPSILON:
            runs, _ = _place(lines, left, top)
            return LayoutBlock(Region.BODY, FontRole.BODY, box, runs, _source_prefix(source, word_ends, total), size)

    size = sizes[-1]
    kept, lines = truncate_to_fit(paragraphs, geometry, size, width, available)
    if not lines:
        logger.debug("No room for the body of '%s', leaving it empty", spell.name)
        return LayoutBlock(Region.BODY, FontRole.BODY, box, (), "", size, overflow=True)
    shown = sum(len(words) for _, words in kept)
    logger.debug("Body of '%s' truncated to %d of %d words at %.1fpt", spell.name, shown, total, size)
    runs, _ = _place(lines, left, top)
    return LayoutBlock(Region.BODY, FontRole.BODY, box, runs, _source_prefix(source, word_ends, shown), size, overflow=True)
