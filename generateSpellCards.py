import argparse
import os
import sys
import logging


# Ensure the spellcards package is importable when running as a script
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))
from spellcards.constants import CARD_HEIGHT_MM, CARD_MARGIN_MM, CARD_WIDTH_MM
from spellcards.errors import BatchAborted
from spellcards.generator import main


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Generate printable Pathfinder 2e spell cards")
    parser.add_argument("input_file", help="Path to the spell list (CSV, or JSON list of objects)")
    parser.add_argument("output_pdf", nargs="?", default=None, help="Path to the output PDF file (default: output/<input name>.pdf)")
    parser.add_argument("--card-width-mm", type=float, default=CARD_WIDTH_MM, help="Card width in millimetres (default: %(default)s, poker size)")
    parser.add_argument("--card-height-mm", type=float, default=CARD_HEIGHT_MM, help="Card height in millimetres (default: %(default)s, poker size)")
    parser.add_argument("--margin-mm", type=float, default=CARD_MARGIN_MM, help="Inner margin of each card in millimetres (default: %(default)s)")
    parser.add_argument("--min-body-font-size", type=float, default=None, help="Smallest font size (pt) the description may shrink to before it is truncated")
    parser.add_argument("--overflow", choices=["shrink", "truncate"], default="shrink", help="Shrink the description font before truncating (shrink) or truncate at the normal size (truncate)")
    parser.add_argument("--on-error", choices=["skip", "abort"], default="skip", help="Skip spells that cannot be laid out, or stop at the first one")
    parser.add_argument("--workers", type=int, default=None, help="Lay out cards on this many threads")
    parser.add_argument("--card-bg", help="Path to a background image drawn behind every card", required=False)
    parser.add_argument("--qr-backside", action="store_true", help="Add backside pages with a QR code linking to each spell's source URL")
    parser.add_argument("--icon", help="path to icon to embedd to QR Code, should not exeed 300x300px and using transparent background", required=False)
    parser.add_argument("--qr-padding-px", type=int, default=None, help="QR code white border thickness in pixels (quiet zone). Note: the QR standard recommends ~4 modules (~40px with default settings).")
    parser.add_argument("--no-mirror-backside", action="store_true", help="Disable mirroring on the backside (QR side)")
    parser.add_argument("--dump-layouts", help="Write the computed card layouts as JSON to this path", required=False)
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug messages")
    return parser


if __name__ == "__main__":
    args = build_parser().parse_args()

    # configure basic logging to console so users are kept up-to-date
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(message)s")
    try:
        main(
            args.input_file,
            args.output_pdf,
            card_width_mm=args.card_width_mm,
            card_height_mm=args.card_height_mm,
            margin_mm=args.margin_mm,
            min_body_font_size=args.min_body_font_size,
            overflow_policy=args.overflow,
            on_error=args.on_error,
            workers=args.workers,
            card_bg_path=args.card_bg,
            qr_backside=args.qr_backside,
            icon_path=args.icon,
            qr_padding_px=args.qr_padding_px,
            mirror_backside=not args.no_mirror_backside,
            dump_layouts_path=args.dump_layouts,
        )
    except BatchAborted as exc:
        logging.getLogger(__name__).error("%s", exc)
        sys.exit(1)
