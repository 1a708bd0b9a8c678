"""QR code generation and placement for card backsides.

The backside of a spell card carries a QR code linking to the spell's online
rules text, so the full description is one scan away when the front had to
be truncated.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, Optional, Tuple

import qrcode
import requests
from qrcode.image.styledpil import StyledPilImage
from reportlab.pdfgen.canvas import Canvas

from . import fonts
from .draw import draw_image_in_rect
from .layout import inner_rect
from .text_utils import text_width

logger = logging.getLogger(__name__)

ICON_TIMEOUT = 15

# Remote icons are downloaded once per process
_icon_image_cache: Dict[str, bytes] = {}


def _icon_source(icon_path: str):
    if not icon_path.startswith("http"):
        return icon_path
    if icon_path not in _icon_image_cache:
        logger.debug("Downloading QR icon %s", icon_path)
        response = requests.get(icon_path, timeout=ICON_TIMEOUT)
        response.raise_for_status()
        _icon_image_cache[icon_path] = response.content
    return BytesIO(_icon_image_cache[icon_path])


def generate_qr_image(url: str, icon_path: Optional[str] = None, qr_padding_px: Optional[int] = None):
    """Generate a QR code for a URL as a PIL image. Optional center icon.

    qr_padding_px controls the quiet zone thickness in pixels (approx), converted to modules.
    """
    box_size = 10  # pixels per module
    if qr_padding_px is None:
        border_modules = 4  # default quiet zone (modules)
    else:
        border_modules = max(0, int(round(qr_padding_px / box_size)))

    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_Q,
        box_size=box_size,
        border=border_modules,
    )
    qr.add_data(url)
    qr.make(fit=True)
    if not icon_path:
        img = qr.make_image(fill_color="black", back_color="white")
    else:
        img = qr.make_image(image_factory=StyledPilImage, embeded_image_path=_icon_source(icon_path))
    return img.get_image()


def add_qr_code_within_rect(
    c: Canvas,
    url: str,
    position: Tuple[float, float],
    box_width: float,
    box_height: float,
    margin: float,
    icon_path: Optional[str] = None,
    qr_padding_px: Optional[int] = None,
    caption: Optional[str] = None,
) -> None:
    """Draw a QR code centered within the inner rect of a card, with an optional caption above it."""
    x, y = position
    inner_x, inner_y, inner_w, inner_h = inner_rect(x, y, box_width, box_height, margin)

    if caption:
        font_name = fonts.FONT_BOLD_NAME
        size = min(11.0, inner_h * 0.08)
        width = text_width(caption, font_name, size)
        if width > inner_w:
            size *= inner_w / width
            width = inner_w
        c.setFont(font_name, size)
        c.setFillColorRGB(0, 0, 0)
        c.drawString(inner_x + (inner_w - width) / 2, inner_y + inner_h - size, caption)
        inner_h -= size * 1.5

    qr_size = min(inner_w, inner_h)
    if qr_size <= 0:
        logger.warning("No room for a QR code on the backside of %s", caption or url)
        return
    qr_x = inner_x + (inner_w - qr_size) / 2
    qr_y = inner_y + (inner_h - qr_size) / 2
    draw_image_in_rect(c, generate_qr_image(url, icon_path, qr_padding_px), qr_x, qr_y, qr_size, qr_size)
