"""
Pillow-based document rendering shared by the QR label, invoice and export PDFs.
Pages are drawn as A4 images at 100 DPI and saved with Pillow's PDF writer.
"""
import io
import logging
from typing import List, Optional

import barcode
import qrcode
from barcode.writer import ImageWriter
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

# A4 at 100 DPI
PAGE_WIDTH = 827
PAGE_HEIGHT = 1169
MARGIN = 60

BRAND_ORANGE = (255, 140, 0)
TEXT_DARK = (17, 24, 39)
TEXT_MUTED = (107, 114, 128)
RULE_GREY = (209, 213, 219)

_FONT_CANDIDATES = {
    'bold': ['/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 'arialbd.ttf'],
    'regular': ['/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 'arial.ttf'],
}


def load_font(size: int, bold: bool = False):
    """Try DejaVu or Arial, fallback to Pillow's default font."""
    for path in _FONT_CANDIDATES['bold' if bold else 'regular']:
        try:
            return ImageFont.truetype(path, size)
        except (OSError, IOError):
            continue
    try:
        return ImageFont.load_default(size=size)
    except TypeError:
        return ImageFont.load_default()


def new_page():
    page = Image.new('RGB', (PAGE_WIDTH, PAGE_HEIGHT), color='white')
    return page, ImageDraw.Draw(page)


def text_width(draw, text, font):
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[2] - bbox[0]


def draw_centered(draw, y, text, font, fill=TEXT_DARK):
    x = (PAGE_WIDTH - text_width(draw, text, font)) // 2
    draw.text((x, y), text, fill=fill, font=font)


def truncate(text, limit):
    text = '' if text is None else str(text)
    return text if len(text) <= limit else text[:limit - 3] + '...'


def make_qr_image(data: str, box_size: int = 8, border: int = 2):
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(data)
    qr.make(fit=True)
    return qr.make_image(fill_color='black', back_color='white').convert('RGB')


def make_barcode_image(value: str) -> Optional[Image.Image]:
    """Code128 barcode as a PIL image, or None when the value can't be encoded."""
    try:
        code128 = barcode.get_barcode_class('code128')
        instance = code128(value, writer=ImageWriter())
        return instance.render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 15.0,
            'quiet_zone': 2.0,
            'background': 'white',
            'foreground': 'black',
        })
    except Exception as e:
        logger.warning(f"Could not render barcode for {value!r}: {str(e)}")
        return None


def paste_fitted(page, image, x, y, max_width, max_height):
    """Paste ``image`` scaled down to fit the box, keeping its aspect ratio."""
    width, height = image.size
    scale = min(max_width / width, max_height / height, 1.0)
    if scale < 1.0:
        image = image.resize((max(1, int(width * scale)), max(1, int(height * scale))), Image.LANCZOS)
    page.paste(image, (x, y))
    return image.size


def draw_table(draw, x, y, columns, rows, widths, font, header_font, row_height=28):
    """Draw a simple ruled table and return the y coordinate below it."""
    total_width = sum(widths)
    draw.rectangle([x, y, x + total_width, y + row_height], fill=(243, 244, 246))
    cx = x
    for title, width in zip(columns, widths):
        draw.text((cx + 6, y + 6), title, fill=TEXT_DARK, font=header_font)
        cx += width
    y += row_height
    for row in rows:
        cx = x
        for value, width in zip(row, widths):
            limit = max(4, width // 8)
            draw.text((cx + 6, y + 6), truncate(value, limit), fill=TEXT_DARK, font=font)
            cx += width
        y += row_height
        draw.line([x, y, x + total_width, y], fill=RULE_GREY, width=1)
    return y


def pages_to_pdf(pages: List[Image.Image]) -> bytes:
    buffer = io.BytesIO()
    first, rest = pages[0], pages[1:]
    first.save(buffer, format='PDF', resolution=100.0, save_all=True, append_images=rest)
    return buffer.getvalue()
