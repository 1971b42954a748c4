import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from firstlast.config import PDF_MIME_TYPE, ExtractionSettings
from firstlast.errors import ProcessingError, ValidationError
from firstlast.file_operator import FileOperator
from firstlast.models import CandidateFile, InputDocument, ProcessingResult, SessionState
from firstlast.pipeline import PageExtractionPipeline

ProgressCallback = Callable[[float, str], None]


def format_file_size(size_bytes: int) -> str:
    """Format file size in a human-readable format."""
    if size_bytes == 0:
        return "0 Bytes"
    size = float(size_bytes)
    for unit in ["Bytes", "KB", "MB", "GB"]:
        if size < 1024 or unit == "GB":
            break
        size /= 1024
    value = f"{size:.2f}".rstrip("0").rstrip(".")
    return f"{value} {unit}"


class ProcessingSession:
    """Owns the file selection and the results of one user session.

    Files are processed one at a time. The first failure stops the batch;
    results of the files finished before it stay in ``results``.
    """

    def __init__(self, settings: Optional[ExtractionSettings] = None, pipeline: Optional[PageExtractionPipeline] = None):
        self.settings = settings or ExtractionSettings()
        self.pipeline = pipeline or PageExtractionPipeline(self.settings)
        self.state = SessionState()

    @property
    def selected_files(self) -> List[CandidateFile]:
        return self.state.selected_files

    @property
    def results(self) -> List[ProcessingResult]:
        return self.state.results

    @property
    def successful_results(self) -> List[ProcessingResult]:
        return [result for result in self.state.results if result.ok]

    @property
    def last_error(self) -> Optional[Exception]:
        return self.state.last_error

    def validate(self, candidate: CandidateFile) -> None:
        """Raise ValidationError if the file may not enter the pipeline."""
        if candidate.content_type != PDF_MIME_TYPE and not candidate.name.lower().endswith(".pdf"):
            raise ValidationError("Please select only PDF files.", filename=candidate.name)
        if candidate.size > self.settings.max_file_size:
            limit = format_file_size(self.settings.max_file_size)
            raise ValidationError(f"File {candidate.name} exceeds {limit} limit.", filename=candidate.name)

    def select_files(self, candidates: Iterable[CandidateFile]) -> List[ValidationError]:
        """
        Replace the selection with the valid candidates.

        The previous selection is kept when no candidate is valid.
        Returns the validation errors of the rejected candidates.
        """
        valid_files = []
        rejected = []
        for candidate in candidates:
            try:
                self.validate(candidate)
            except ValidationError as e:
                logging.warning(f"Rejected {candidate.name}: {e}")
                rejected.append(e)
            else:
                valid_files.append(candidate)

        if valid_files:
            self.state.selected_files = valid_files
        return rejected

    def clear_selection(self) -> None:
        self.state.clear_selection()

    def reset(self) -> None:
        """Return to the initial, empty state."""
        self.state.reset()

    async def process(self, on_progress: Optional[ProgressCallback] = None) -> List[ProcessingResult]:
        """Run the pipeline over the selection, stopping at the first failure."""
        if self.state.is_processing:
            raise RuntimeError("Processing is already in progress")
        files = list(self.state.selected_files)
        if not files:
            raise ValidationError("Please select files to process first.")

        self.state.is_processing = True
        self.state.results = []
        self.state.last_error = None
        try:
            for i, candidate in enumerate(files):
                progress = (i + 1) / len(files) * 100
                logging.debug(f"{round(progress)}% - Processing {candidate.name}...")
                if on_progress:
                    on_progress(progress, candidate.name)
                await self._process_one(candidate)
        finally:
            self.state.is_processing = False
        return self.state.results

    async def _process_one(self, candidate: CandidateFile) -> None:
        document = None
        try:
            document = InputDocument.from_candidate(candidate)
            output = await self.pipeline.extract(document)
        except Exception as e:
            error = ProcessingError(candidate.name, e)
            logging.error(f"[Processor] {error}")
            if document is None:
                document = InputDocument(data=b"", name=candidate.name, size=candidate.size)
            self.state.results.append(ProcessingResult(input=document, error=error))
            self.state.last_error = error
            raise error from e
        self.state.results.append(ProcessingResult(input=document, output=output))

    def save_results(self, output_dir: Path) -> List[Path]:
        """Write every successful output into output_dir."""
        file_operator = FileOperator(output_dir)
        return [file_operator.write_output(result.output) for result in self.successful_results]
