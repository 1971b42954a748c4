import logging
from pathlib import Path

from firstlast.models import OutputDocument


class FileOperator:
    """Writes finished documents into the output directory"""
    def __init__(self, output_base_path: Path):
        self.output_base_path = Path(output_base_path)

    def ensure_unique_path(self, base_path: Path) -> Path:
        """
        Ensure a unique path by appending a version number if needed.
        Returns the unique path.
        """
        if not base_path.exists():
            return base_path

        directory = base_path.parent
        stem = base_path.stem
        suffix = base_path.suffix
        counter = 1

        while True:
            new_path = directory / f"{stem}_{counter}{suffix}"
            if not new_path.exists():
                return new_path
            counter += 1

    def write_output(self, document: OutputDocument) -> Path:
        """
        Write a document under the output base path without overwriting.
        Returns the written file path.
        """
        destination = self.output_base_path / document.name
        if not destination.resolve().is_relative_to(self.output_base_path.resolve()):
            raise ValueError(
                f"Destination file {destination} is not under the output base path {self.output_base_path}"
            )
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination = self.ensure_unique_path(destination)
        destination.write_bytes(document.data)
        logging.info(f"Saved {destination} ({len(document.data)} bytes)")
        return destination
