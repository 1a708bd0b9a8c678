"""Drawing helpers for placing images on the ReportLab canvas."""
from PIL import Image
from reportlab.lib.utils import ImageReader


def load_image(path):
    """Open an image file for repeated drawing (backgrounds, icons)."""
    img = Image.open(path)
    img.load()
    return img


def draw_image_in_rect(c, pil_img, x, y, width, height):
    """Draw a PIL image scaled to exactly fit the given rectangle (x, y, width, height).
    Coordinates are ReportLab points; the image is stretched to the card's aspect ratio.
    """
    img_reader = ImageReader(pil_img)
    c.drawImage(img_reader, x, y, width=width, height=height, mask="auto")
