from unittest.mock import patch

import pytest

from firstlast.pdf_transformer import DependencyStatus, PDFTransformer

from pdf_fixtures import build_pdf, fake_convert


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def fake_renderer():
    """Replace Poppler with a renderer that paints each page in its color.

    Yields the list of rendered page numbers, in call order.
    """
    rendered = []

    def record(data, **kwargs):
        rendered.append(kwargs["first_page"])
        return fake_convert(data, **kwargs)

    with patch("firstlast.pdf_transformer.convert_from_bytes", side_effect=record), \
            patch.object(PDFTransformer, "check_dependencies", return_value=DependencyStatus(ok=True)):
        yield rendered
