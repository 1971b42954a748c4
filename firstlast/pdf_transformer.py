import logging
import shutil
from dataclasses import dataclass, field
from io import BytesIO
from typing import List, Optional

from pdf2image import convert_from_bytes
from PIL import Image
from PyPDF2 import PageObject, PdfReader, PdfWriter
from PyPDF2.generic import DecodedStreamObject, DictionaryObject, NameObject, NumberObject

from firstlast.models import EncodedPage, PageRaster, Viewport

POINTS_PER_INCH = 72.0
POPPLER_BINARIES = ("pdftoppm", "pdfinfo")
JPEG_MAGIC = b"\xff\xd8"
IMAGE_NAME = "Im0"


@dataclass
class DependencyStatus:
    ok: bool
    missing: List[str] = field(default_factory=list)

    def describe(self) -> str:
        if self.ok:
            return "all dependencies available"
        return "missing: " + ", ".join(self.missing)


class PDFTransformer:
    """Wraps the PDF reader, the rasterizer and the PDF writer.

    Every method here is synchronous and deals with one concern; sequencing
    and error classification live in the pipeline.
    """

    def __init__(self, poppler_path: Optional[str] = None):
        """
        :param poppler_path: Directory holding the Poppler binaries, if they are not on PATH
        """
        self.poppler_path = poppler_path

    def check_dependencies(self) -> DependencyStatus:
        """Check that Poppler and the Pillow JPEG writer are usable."""
        missing = []
        for binary in POPPLER_BINARIES:
            if shutil.which(binary, path=self.poppler_path) is None:
                missing.append(binary)
        Image.init()
        if "JPEG" not in Image.SAVE:
            missing.append("Pillow JPEG writer")
        return DependencyStatus(ok=not missing, missing=missing)

    def open_document(self, data: bytes) -> PdfReader:
        return PdfReader(BytesIO(data))

    def count_pages(self, reader: PdfReader) -> int:
        return len(reader.pages)

    def page_viewport(self, reader: PdfReader, page_number: int, scale: float) -> Viewport:
        """
        Get the scaled geometry of a page.

        :param reader: Parsed source document
        :param page_number: 1-based page number
        :param scale: Linear factor applied to both dimensions
        :return: Viewport in pixels at the given scale
        """
        page = reader.pages[page_number - 1]
        # Poppler renders the crop box
        box = page.cropbox
        width, height = float(box.width), float(box.height)
        if (page.rotation or 0) % 180 == 90:
            width, height = height, width
        return Viewport(width=width * scale, height=height * scale, scale=scale)

    def render_page(self, data: bytes, page_number: int, viewport: Viewport) -> PageRaster:
        """Rasterize one page at exactly the viewport size."""
        images = convert_from_bytes(
            data,
            dpi=POINTS_PER_INCH * viewport.scale,
            first_page=page_number,
            last_page=page_number,
            size=viewport.pixel_size,
            poppler_path=self.poppler_path,
        )
        if not images:
            raise ValueError(f"No image rendered for page {page_number}")
        image = images[0]
        logging.debug(f"Rendered page {page_number} at {image.width}x{image.height}")
        return PageRaster(image=image, page_number=page_number, scale=viewport.scale)

    def encode_page(self, raster: PageRaster, quality: float) -> EncodedPage:
        """
        Encode a raster as JPEG.

        :param raster: Rendered page
        :param quality: Lossy quality in (0, 1]
        :return: Encoded page
        """
        buffer = BytesIO()
        image = raster.image.convert("RGB")
        image.save(buffer, format="JPEG", quality=jpeg_quality(quality), optimize=True)
        return EncodedPage(
            data=buffer.getvalue(),
            width=image.width,
            height=image.height,
            page_number=raster.page_number,
        )

    def compose(self, pages: List[EncodedPage], divisor: float) -> bytes:
        """
        Build a new PDF with one full-page image per encoded page.

        The JPEG bytes are embedded as they are, with a DCTDecode filter.

        :param pages: Encoded pages, in output order
        :param divisor: Pixels per output point
        :return: Serialized PDF
        """
        writer = PdfWriter()
        for page in pages:
            if not page.data.startswith(JPEG_MAGIC):
                raise ValueError(f"Page {page.page_number} is not JPEG encoded")
            width = page.width / divisor
            height = page.height / divisor

            image = DecodedStreamObject()
            image.set_data(page.data)
            image.update({
                NameObject("/Type"): NameObject("/XObject"),
                NameObject("/Subtype"): NameObject("/Image"),
                NameObject("/Width"): NumberObject(page.width),
                NameObject("/Height"): NumberObject(page.height),
                NameObject("/ColorSpace"): NameObject("/DeviceRGB"),
                NameObject("/BitsPerComponent"): NumberObject(8),
                NameObject("/Filter"): NameObject("/DCTDecode"),
            })

            content = DecodedStreamObject()
            content.set_data(f"q {width:.4f} 0 0 {height:.4f} 0 0 cm /{IMAGE_NAME} Do Q".encode())

            pdf_page = PageObject.create_blank_page(width=width, height=height)
            pdf_page[NameObject("/Resources")] = DictionaryObject({
                NameObject("/XObject"): DictionaryObject({
                    NameObject(f"/{IMAGE_NAME}"): writer._add_object(image),
                }),
            })
            pdf_page[NameObject("/Contents")] = writer._add_object(content)
            writer.add_page(pdf_page)

        output = BytesIO()
        writer.write(output)
        return output.getvalue()


def jpeg_quality(quality: float) -> int:
    """Map a (0, 1] quality to Pillow's 1-95 JPEG scale."""
    return max(1, min(95, round(quality * 100)))
