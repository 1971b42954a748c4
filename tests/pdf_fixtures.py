import shutil
from io import BytesIO

import pytest
from PIL import Image

PAGE_COLORS = [
    (220, 30, 30),
    (30, 180, 30),
    (30, 30, 220),
    (230, 200, 20),
    (200, 30, 200),
    (20, 200, 200),
]

requires_poppler = pytest.mark.skipif(
    shutil.which("pdftoppm") is None, reason="Poppler is not installed"
)


def page_color(page_number):
    return PAGE_COLORS[(page_number - 1) % len(PAGE_COLORS)]


def build_pdf(page_count, base_width=100, height=200):
    """Build a PDF whose pages differ in width and fill color.

    Page n (1-based) is (base_width + 10 * n) points wide and filled with
    page_color(n).
    """
    pages = [
        Image.new("RGB", (base_width + 10 * n, height), page_color(n))
        for n in range(1, page_count + 1)
    ]
    buffer = BytesIO()
    pages[0].save(buffer, format="PDF", save_all=True, append_images=pages[1:], resolution=72.0)
    return buffer.getvalue()


def fake_convert(data, dpi=None, first_page=None, last_page=None, size=None, poppler_path=None, **kwargs):
    """Stand-in for pdf2image.convert_from_bytes painting the page color."""
    return [Image.new("RGB", size, page_color(first_page))]
