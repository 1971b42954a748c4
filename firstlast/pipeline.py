import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from PyPDF2 import PdfReader

from firstlast.config import ExtractionSettings
from firstlast.errors import CompositionFailure, DependencyError, MalformedDocument, RenderFailure
from firstlast.models import EncodedPage, InputDocument, OutputDocument, output_name
from firstlast.pdf_transformer import PDFTransformer


@dataclass
class PipelineState:
    input: InputDocument
    scale: float
    jpeg_quality: float
    reader: Optional[PdfReader] = None
    page_count: int = 0
    encoded_pages: List[EncodedPage] = field(default_factory=list)
    output: Optional[OutputDocument] = None


class PageExtractionPipeline:
    """Turns one PDF into a two-page PDF made of its first and last page."""

    def __init__(self, settings: Optional[ExtractionSettings] = None, transformer: Optional[PDFTransformer] = None):
        self.settings = settings or ExtractionSettings()
        self.transformer = transformer or PDFTransformer(poppler_path=self.settings.poppler_path)
        self._initialized = False

    def initialize(self) -> None:
        """Check external dependencies once, before the first extraction."""
        if self._initialized:
            return
        status = self.transformer.check_dependencies()
        if not status.ok:
            raise DependencyError(f"Cannot extract pages, {status.describe()}")
        logging.debug(f"Pipeline dependencies ready: {status.describe()}")
        self._initialized = True

    async def extract(self, document: InputDocument, scale: float = None, jpeg_quality: float = None) -> OutputDocument:
        """Process one document through parse, render and compose."""
        self.initialize()
        if scale is None:
            scale = self.settings.render_scale
        if jpeg_quality is None:
            jpeg_quality = self.settings.jpeg_quality
        if scale <= 0:
            raise ValueError(f"Render scale must be greater than 0, got {scale}")
        if not 0 < jpeg_quality <= 1:
            raise ValueError(f"JPEG quality must be in (0, 1], got {jpeg_quality}")
        state = PipelineState(input=document, scale=scale, jpeg_quality=jpeg_quality)
        self._parse(state)
        if state.page_count < 2:
            logging.info(f"{document.name} has {state.page_count} page(s), returning it unchanged")
            return OutputDocument(
                data=document.data,
                name=output_name(document.name),
                page_count=state.page_count,
                passthrough=True,
            )

        for page_number in (1, state.page_count):
            await self._render(state, page_number)
        self._compose(state)
        return state.output

    def _parse(self, state: PipelineState) -> None:
        try:
            state.reader = self.transformer.open_document(state.input.data)
            state.page_count = self.transformer.count_pages(state.reader)
        except Exception as e:
            raise MalformedDocument(f"Invalid PDF file: {e}") from e
        logging.debug(f"{state.input.name}: {state.page_count} pages")

    async def _render(self, state: PipelineState, page_number: int) -> None:
        try:
            viewport = self.transformer.page_viewport(state.reader, page_number, state.scale)
            raster = await asyncio.to_thread(
                self.transformer.render_page, state.input.data, page_number, viewport
            )
            try:
                state.encoded_pages.append(self.transformer.encode_page(raster, state.jpeg_quality))
            finally:
                raster.image.close()
        except Exception as e:
            raise RenderFailure(f"Failed to render page {page_number}: {e}") from e

    def _compose(self, state: PipelineState) -> None:
        try:
            data = self.transformer.compose(
                state.encoded_pages,
                divisor=self.settings.display_divisor or state.scale,
            )
        except Exception as e:
            raise CompositionFailure(f"Failed to assemble output document: {e}") from e
        state.output = OutputDocument(
            data=data,
            name=output_name(state.input.name),
            page_count=len(state.encoded_pages),
        )
        logging.debug(f"{state.input.name}: composed {len(data)} bytes")
