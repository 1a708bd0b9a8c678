import logging
import os

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import registerFontFamily
from reportlab.pdfbase.ttfonts import TTFError, TTFont

# Font names used by the card geometry. setup_unicode_fonts() points them at a
# Unicode TrueType family when one is installed, otherwise the built-in
# Helvetica family stays in place.
FONT_REGULAR_NAME = "Helvetica"
FONT_BOLD_NAME = "Helvetica-Bold"

logger = logging.getLogger(__name__)


def _register_ttf_family(family_name, regular_path, bold_path=None):
    """Register TTF fonts with ReportLab. Returns (regular_name, bold_name)."""
    regular_name = family_name
    bold_name = f"{family_name}-Bold" if bold_path else family_name
    pdfmetrics.registerFont(TTFont(regular_name, regular_path))
    if bold_path:
        pdfmetrics.registerFont(TTFont(bold_name, bold_path))
        registerFontFamily(family_name, normal=regular_name, bold=bold_name)
    return regular_name, bold_name


def font_search_dirs():
    dirs = [os.path.join(os.environ.get("WINDIR", r"C:\\Windows"), "Fonts")]
    dirs += [
        "/usr/share/fonts/truetype/dejavu",
        "/usr/share/fonts/TTF",
        "/usr/share/fonts/truetype/noto",
        "/Library/Fonts",
    ]
    # fonts dropped next to the spell list
    dirs.append(os.path.abspath("."))
    return dirs


def setup_unicode_fonts():
    """Best-effort registration of a Unicode font family so rules text with
    typographic characters (dashes, quotes, action glyph substitutes) renders.

    Returns the family name in use.
    """
    global FONT_REGULAR_NAME, FONT_BOLD_NAME
    font_dirs = font_search_dirs()
    candidates = [
        ("Arial", ["arial.ttf", "ARIAL.TTF"], ["arialbd.ttf", "ARIALBD.TTF"]),
        ("Calibri", ["calibri.ttf", "CALIBRI.TTF"], ["calibrib.ttf", "CALIBRIB.TTF"]),
        ("Verdana", ["verdana.ttf", "VERDANA.TTF"], ["verdanab.ttf", "VERDANAB.TTF"]),
        ("DejaVuSans", ["DejaVuSans.ttf"], ["DejaVuSans-Bold.ttf"]),
        ("NotoSans", ["NotoSans-Regular.ttf"], ["NotoSans-Bold.ttf"]),
    ]

    def find_file(possible_names):
        for d in font_dirs:
            for name in possible_names:
                p = os.path.join(d, name)
                if os.path.isfile(p):
                    return p
        return None

    for family, reg_list, bold_list in candidates:
        reg_path = find_file(reg_list)
        if not reg_path:
            continue
        bold_path = find_file(bold_list)
        try:
            regular_name, bold_name = _register_ttf_family(family, reg_path, bold_path)
        except (TTFError, OSError) as exc:
            logger.debug("Could not register font family %s from %s: %s", family, reg_path, exc)
            continue
        FONT_REGULAR_NAME, FONT_BOLD_NAME = regular_name, bold_name
        logger.debug("Using TrueType font family %s", family)
        return family
    logger.debug("No TrueType font family found, using Helvetica")
    return "Helvetica"
