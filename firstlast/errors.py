class FirstLastError(Exception):
    """Base class for errors raised by firstlast."""


class ValidationError(FirstLastError):
    """A selected file was rejected before reaching the pipeline."""

    def __init__(self, message: str, filename: str = None):
        super().__init__(message)
        self.filename = filename


class MalformedDocument(FirstLastError):
    """The input bytes could not be parsed as a PDF."""


class RenderFailure(FirstLastError):
    """A page could not be rasterized or encoded."""


class CompositionFailure(FirstLastError):
    """The output document could not be assembled or serialized."""


class DependencyError(FirstLastError):
    """A required external tool or codec is unavailable."""


class ProcessingError(FirstLastError):
    """A pipeline failure tagged with the name of the offending file."""

    def __init__(self, filename: str, error: Exception):
        super().__init__(f"Error processing {filename}: {error}")
        self.filename = filename
        self.error = error
