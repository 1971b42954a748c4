import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from PIL import Image

from firstlast.config import OUTPUT_SUFFIX


def output_name(name: str) -> str:
    """Derive the output file name, e.g. 'Report.PDF' -> 'Report_first_last_pages.pdf'."""
    stem = name[:-4] if name.lower().endswith(".pdf") else name
    return f"{stem}{OUTPUT_SUFFIX}"


@dataclass
class CandidateFile:
    """A file picked by the user, not yet validated."""
    name: str
    size: int
    content_type: str = ""
    path: Optional[Path] = None

    @classmethod
    def from_path(cls, path) -> 'CandidateFile':
        path = Path(path)
        content_type = mimetypes.guess_type(str(path))[0] or ""
        return cls(name=path.name, size=path.stat().st_size, content_type=content_type, path=path)

    def read_bytes(self) -> bytes:
        if self.path is None:
            raise ValueError(f"No content available for {self.name}")
        return self.path.read_bytes()


@dataclass(frozen=True)
class InputDocument:
    data: bytes
    name: str
    size: int = None

    def __post_init__(self):
        if self.size is None:
            object.__setattr__(self, "size", len(self.data))

    @classmethod
    def from_candidate(cls, candidate: CandidateFile) -> 'InputDocument':
        data = candidate.read_bytes()
        return cls(data=data, name=candidate.name, size=len(data))


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float
    scale: float

    @property
    def pixel_size(self):
        return (max(1, round(self.width)), max(1, round(self.height)))


@dataclass
class PageRaster:
    """Bitmap of one rendered page."""
    image: Image.Image
    page_number: int
    scale: float

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height


@dataclass(frozen=True)
class EncodedPage:
    data: bytes
    width: int
    height: int
    page_number: int


@dataclass(frozen=True)
class OutputDocument:
    data: bytes
    name: str
    page_count: int
    passthrough: bool = False

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ProcessingResult:
    input: InputDocument
    output: Optional[OutputDocument] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.output is not None and self.error is None


@dataclass
class SessionState:
    """Selection and results of one processing session."""
    selected_files: List[CandidateFile] = field(default_factory=list)
    results: List[ProcessingResult] = field(default_factory=list)
    last_error: Optional[Exception] = None
    is_processing: bool = False

    def clear_selection(self):
        self.selected_files = []

    def reset(self):
        self.selected_files = []
        self.results = []
        self.last_error = None
        self.is_processing = False
