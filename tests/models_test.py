import pytest
from PIL import Image

from firstlast.models import (
    CandidateFile,
    InputDocument,
    OutputDocument,
    PageRaster,
    ProcessingResult,
    SessionState,
    Viewport,
    output_name,
)


@pytest.mark.parametrize("name, expected", [
    ("a.pdf", "a_first_last_pages.pdf"),
    ("Report.PDF", "Report_first_last_pages.pdf"),
    ("my.pdf.backup.pdf", "my.pdf.backup_first_last_pages.pdf"),
    ("scan", "scan_first_last_pages.pdf"),
])
def test_output_name(name, expected):
    assert output_name(name) == expected


def test_candidate_from_path(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.4")

    candidate = CandidateFile.from_path(path)

    assert candidate.name == "doc.pdf"
    assert candidate.size == 8
    assert candidate.content_type == "application/pdf"
    assert candidate.read_bytes() == b"%PDF-1.4"


def test_candidate_without_content():
    with pytest.raises(ValueError):
        CandidateFile(name="x.pdf", size=0).read_bytes()


def test_input_document_size_defaults_to_length():
    document = InputDocument(data=b"12345", name="x.pdf")
    assert document.size == 5
    with pytest.raises(AttributeError):
        document.name = "y.pdf"


def test_input_document_from_candidate(tmp_path):
    path = tmp_path / "doc.pdf"
    path.write_bytes(b"%PDF-1.7 data")
    document = InputDocument.from_candidate(CandidateFile.from_path(path))
    assert document.data == b"%PDF-1.7 data"
    assert document.name == "doc.pdf"
    assert document.size == 13


def test_viewport_pixel_size():
    assert Viewport(width=918.0, height=1188.0, scale=1.5).pixel_size == (918, 1188)
    assert Viewport(width=0.2, height=10.6, scale=0.1).pixel_size == (1, 11)


def test_page_raster_dimensions():
    raster = PageRaster(image=Image.new("RGB", (30, 40)), page_number=1, scale=1.5)
    assert (raster.width, raster.height) == (30, 40)


def test_processing_result_ok():
    document = InputDocument(data=b"x", name="x.pdf")
    output = OutputDocument(data=b"y", name="x_first_last_pages.pdf", page_count=1, passthrough=True)
    assert ProcessingResult(input=document, output=output).ok
    assert not ProcessingResult(input=document, error=ValueError("bad")).ok
    assert output.size == 1


def test_session_state_reset():
    state = SessionState(selected_files=[CandidateFile(name="a.pdf", size=1)], is_processing=True)
    state.results.append(ProcessingResult(input=InputDocument(data=b"", name="a.pdf")))
    state.reset()
    assert state.selected_files == []
    assert state.results == []
    assert not state.is_processing
