import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError as SettingsError

from firstlast.config import get_config_file, load_settings
from firstlast.errors import DependencyError, ProcessingError
from firstlast.models import CandidateFile
from firstlast.processor import ProcessingSession, format_file_size


def build_parser():
    parser = argparse.ArgumentParser(
        description="Create a two-page PDF from the first and last page of each input PDF."
    )
    parser.add_argument("files", nargs="+", help="PDF files to process")
    parser.add_argument(
        "-o", "--output-dir", default=".",
        help="Folder where the new PDFs are written (defaults to the current folder)",
    )
    parser.add_argument("--scale", type=float, dest="render_scale", help="Render scale (default 1.5)")
    parser.add_argument("--quality", type=float, dest="jpeg_quality", help="JPEG quality between 0 and 1 (default 0.8)")
    parser.add_argument(
        "--divisor", type=float, dest="display_divisor",
        help="Pixels per output point (defaults to the render scale)",
    )
    parser.add_argument("--max-size", type=int, dest="max_file_size", help="Largest accepted file in bytes (default 20MB)")
    parser.add_argument(
        "--poppler-path",
        help=f"Folder with the Poppler binaries (optional, can also be set via config file {get_config_file()})",
    )
    return parser


def print_selection(session: ProcessingSession):
    print("\nSelected files:")
    for candidate in session.selected_files:
        print(f"- {candidate.name} ({format_file_size(candidate.size)})")


def print_results(session: ProcessingSession, saved_paths):
    print("\nResults:")
    for result, path in zip(session.successful_results, saved_paths):
        print(f"- {path.name}")
        print(f"    Size: {format_file_size(result.output.size)}")
        print(f"    Original: {format_file_size(result.input.size)} ({result.input.name})")


def progress(percent: float, filename: str):
    print(f"{round(percent)}% - Processing {filename}...")


def run(args) -> int:
    try:
        settings = load_settings(
            render_scale=args.render_scale,
            jpeg_quality=args.jpeg_quality,
            display_divisor=args.display_divisor,
            max_file_size=args.max_file_size,
            poppler_path=args.poppler_path,
        )
    except SettingsError as e:
        print(f"Invalid settings: {e}", file=sys.stderr)
        return 2

    session = ProcessingSession(settings)
    candidates = []
    for name in args.files:
        path = Path(name)
        if not path.is_file():
            print(f"File not found: {name}", file=sys.stderr)
            continue
        candidates.append(CandidateFile.from_path(path))

    for error in session.select_files(candidates):
        print(error, file=sys.stderr)
    if not session.selected_files:
        print("Please select files to process first.", file=sys.stderr)
        return 2
    print_selection(session)

    try:
        session.pipeline.initialize()
    except DependencyError as e:
        print(e, file=sys.stderr)
        return 2

    exit_code = 0
    try:
        asyncio.run(session.process(on_progress=progress))
    except ProcessingError as e:
        print(e, file=sys.stderr)
        exit_code = 1

    try:
        saved_paths = session.save_results(Path(args.output_dir))
    except (OSError, ValueError) as e:
        print(f"Cannot write results: {e}", file=sys.stderr)
        return 1
    if saved_paths:
        print_results(session, saved_paths)
    return exit_code


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.debug(f"Arguments: {args}")
    sys.exit(run(args))


if __name__ == "__main__":
    main()
