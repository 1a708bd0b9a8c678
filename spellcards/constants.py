"""Shared layout and typography constants for spell card rendering."""

# Default card size (standard poker card) in millimetres
CARD_WIDTH_MM: float = 63.0
CARD_HEIGHT_MM: float = 88.0
CARD_MARGIN_MM: float = 3.5

# Default font sizes in points per text role
TITLE_FONT_SIZE: float = 11.0
TRAITS_FONT_SIZE: float = 6.5
LABEL_FONT_SIZE: float = 7.0
BODY_FONT_SIZE: float = 7.5

# Body text shrinks in steps of FONT_STEP down to MIN_BODY_FONT_SIZE before truncation
MIN_BODY_FONT_SIZE: float = 5.0
FONT_STEP: float = 0.5

# Line height as a multiple of the font size
LINE_SPACING: float = 1.2
# Vertical gap between header, meta and body regions (points)
REGION_GAP: float = 4.0
# Extra space between body paragraphs relative to the body font size
PARAGRAPH_GAP_RATIO: float = 0.4

# Appended to a truncated body so the cut is visible on the card
TRUNCATION_MARKER: str = "..."

# Page margin above the card grid (points, ~0.8cm)
PAGE_TOP_INDENT: float = 22.68
