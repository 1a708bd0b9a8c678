"""PDF generation orchestrator for spell cards."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from . import fonts
from .batch import BatchResult, ErrorPolicy, layout_batch, render_batch
from .constants import CARD_HEIGHT_MM, CARD_MARGIN_MM, CARD_WIDTH_MM
from .csv_utils import read_spell_table, table_to_mappings
from .draw import load_image
from .geometry import CardGeometry, OverflowPolicy
from .precheck import remove_duplicates
from .qr_utils import add_qr_code_within_rect
from .renderer import CanvasCardRenderer, place_card
from .sheet import SheetGrid, paginate


def write_layout_dump(result: BatchResult, path: str) -> None:
    """Write every computed layout as JSON, for diffing card sets between runs."""
    payload = [o.layout.to_dict() for o in result.outcomes if o.layout is not None]
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)


def main(
    input_path: str,
    output_pdf_path: Optional[str] = None,
    card_width_mm: float = CARD_WIDTH_MM,
    card_height_mm: float = CARD_HEIGHT_MM,
    margin_mm: float = CARD_MARGIN_MM,
    min_body_font_size: Optional[float] = None,
    overflow_policy: str = OverflowPolicy.SHRINK_THEN_TRUNCATE.value,
    on_error: str = ErrorPolicy.SKIP.value,
    workers: Optional[int] = None,
    card_bg_path: Optional[str] = None,
    qr_backside: bool = False,
    icon_path: Optional[str] = None,
    qr_padding_px: Optional[int] = None,
    mirror_backside: bool = True,
    dump_layouts_path: Optional[str] = None,
    use_system_fonts: bool = True,
) -> BatchResult:
    logger = logging.getLogger(__name__)

    # Register Unicode TrueType fonts before any text is measured
    if use_system_fonts:
        fonts.setup_unicode_fonts()
    geometry = CardGeometry.from_options(
        card_width_mm=card_width_mm,
        card_height_mm=card_height_mm,
        margin_mm=margin_mm,
        min_body_font_size=min_body_font_size,
        overflow_policy=overflow_policy,
    )

    data = read_spell_table(input_path, logger=logger)
    data, removed_count, _ = remove_duplicates(data, logger=logger)
    if removed_count:
        logger.info("Removed %d duplicate spell(s) during pre-check. Remaining: %d", removed_count, len(data))
    entries = list(table_to_mappings(data))

    result = layout_batch(entries, geometry, on_error=on_error, max_workers=workers, logger=logger)

    # If output path not provided, create a default path under repo-root/output using the input file name
    if not output_pdf_path:
        repo_root = Path(__file__).resolve().parents[1]
        output_dir = repo_root / "output"
        output_dir.mkdir(parents=True, exist_ok=True)
        output_pdf_path = output_dir / f"{Path(input_path).stem}.pdf"

    grid = SheetGrid.fit(A4, geometry.width, geometry.height)
    card_bg = load_image(card_bg_path) if card_bg_path else None

    c = canvas.Canvas(str(output_pdf_path), pagesize=A4)
    renderer = CanvasCardRenderer(c)
    cards = render_batch(result, renderer)

    # Backsides need the source URL of each rendered card, in the same order
    urls = [entries[o.index].get("source_url") for o in result.outcomes if o.layout is not None]
    backside = qr_backside and any(urls)
    if qr_backside and not backside:
        logger.info("Note: no spell has a source URL, skipping QR backsides.")

    pages = paginate(list(zip(cards, urls)), grid.per_page)
    for page in pages:
        # FRONT SIDE (spell text)
        for position_index, (card, _) in enumerate(page):
            x, y = grid.slot(position_index)
            place_card(c, card, x, y, background=card_bg)
        c.showPage()

        if not backside:
            continue
        # BACK SIDE (QR link to the full rules text)
        for position_index, (card, url) in enumerate(page):
            if not url:
                logger.debug("No source URL for %s, leaving its backside empty", card.spell_name)
                continue
            x, y = grid.slot(position_index, mirror=mirror_backside)
            add_qr_code_within_rect(
                c,
                str(url),
                (x, y),
                grid.card_width,
                grid.card_height,
                geometry.margin,
                icon_path,
                qr_padding_px=qr_padding_px,
                caption=card.spell_name,
            )
        c.showPage()

    c.save()

    if dump_layouts_path:
        write_layout_dump(result, dump_layouts_path)
        logger.info("Wrote %d layout(s) to %s", len(result.layouts), dump_layouts_path)

    total_pages = len(pages) * (2 if backside else 1)
    logger.info(
        "🎉 PDF generation complete!\n\n"
        "📥 Input: %s\n"
        "📤 Output: %s\n"
        "🧾 Cards: %d\n"
        "✂️ Truncated: %d\n"
        "⚠️ Failed: %d\n"
        "📦 Cards/page: %d\n"
        "📄 Pages (total): %d",
        input_path,
        output_pdf_path,
        len(cards),
        len(result.overflowed),
        len(result.failures),
        grid.per_page,
        total_pages,
    )
    return result
