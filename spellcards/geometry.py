"""Card geometry: physical size, margins and typography for one run."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from reportlab.lib.units import mm

from . import fonts
from .constants import (
    BODY_FONT_SIZE,
    CARD_HEIGHT_MM,
    CARD_MARGIN_MM,
    CARD_WIDTH_MM,
    FONT_STEP,
    LABEL_FONT_SIZE,
    LINE_SPACING,
    MIN_BODY_FONT_SIZE,
    REGION_GAP,
    TITLE_FONT_SIZE,
    TRAITS_FONT_SIZE,
)


class FontRole(str, Enum):
    TITLE = "title"
    TRAITS = "traits"
    LABEL = "label"
    BODY = "body"


class OverflowPolicy(str, Enum):
    """What the layout engine does when the body does not fit."""

    SHRINK_THEN_TRUNCATE = "shrink"
    TRUNCATE = "truncate"


@dataclass(frozen=True)
class FontSpec:
    name: str
    size: float


@dataclass(frozen=True)
class CardGeometry:
    """Card dimensions and typography in points (ReportLab units).

    One geometry is shared read-only by every layout of a batch.
    """

    width: float
    height: float
    margin: float = CARD_MARGIN_MM * mm
    title_font: FontSpec = field(default_factory=lambda: FontSpec("Helvetica-Bold", TITLE_FONT_SIZE))
    traits_font: FontSpec = field(default_factory=lambda: FontSpec("Helvetica-Bold", TRAITS_FONT_SIZE))
    label_font: FontSpec = field(default_factory=lambda: FontSpec("Helvetica-Bold", LABEL_FONT_SIZE))
    body_font: FontSpec = field(default_factory=lambda: FontSpec("Helvetica", BODY_FONT_SIZE))
    line_spacing: float = LINE_SPACING
    region_gap: float = REGION_GAP
    min_body_font_size: float = MIN_BODY_FONT_SIZE
    font_step: float = FONT_STEP
    overflow_policy: OverflowPolicy = OverflowPolicy.SHRINK_THEN_TRUNCATE

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Card width and height must be positive, got {self.width}x{self.height}")
        if self.margin < 0:
            raise ValueError(f"Card margin must not be negative, got {self.margin}")
        if self.region_gap < 0:
            raise ValueError(f"Region gap must not be negative, got {self.region_gap}")
        for role in FontRole:
            spec = self.font_for(role)
            if spec.size <= 0:
                raise ValueError(f"Font size for {role.value} must be positive, got {spec.size}")
        if self.min_body_font_size <= 0:
            raise ValueError("Minimum body font size must be positive")
        if self.font_step <= 0:
            raise ValueError("Font step must be positive")
        if self.line_spacing < 1.0:
            raise ValueError("Line spacing must be at least 1.0")
        object.__setattr__(self, "overflow_policy", OverflowPolicy(self.overflow_policy))

    @property
    def inner_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def inner_height(self) -> float:
        return self.height - 2 * self.margin

    def font_for(self, role: FontRole) -> FontSpec:
        return {
            FontRole.TITLE: self.title_font,
            FontRole.TRAITS: self.traits_font,
            FontRole.LABEL: self.label_font,
            FontRole.BODY: self.body_font,
        }[role]

    @classmethod
    def from_options(
        cls,
        card_width_mm: float = CARD_WIDTH_MM,
        card_height_mm: float = CARD_HEIGHT_MM,
        margin_mm: float = CARD_MARGIN_MM,
        min_body_font_size: Optional[float] = None,
        overflow_policy: str = OverflowPolicy.SHRINK_THEN_TRUNCATE.value,
        body_font_size: float = BODY_FONT_SIZE,
    ) -> "CardGeometry":
        """Build a geometry from CLI style options using the registered font family.

        Call ``fonts.setup_unicode_fonts()`` first to pick up TrueType fonts.
        """
        return cls(
            width=card_width_mm * mm,
            height=card_height_mm * mm,
            margin=margin_mm * mm,
            title_font=FontSpec(fonts.FONT_BOLD_NAME, TITLE_FONT_SIZE),
            traits_font=FontSpec(fonts.FONT_BOLD_NAME, TRAITS_FONT_SIZE),
            label_font=FontSpec(fonts.FONT_BOLD_NAME, LABEL_FONT_SIZE),
            body_font=FontSpec(fonts.FONT_REGULAR_NAME, body_font_size),
            min_body_font_size=MIN_BODY_FONT_SIZE if min_body_font_size is None else min_body_font_size,
            overflow_policy=OverflowPolicy(overflow_policy),
        )
