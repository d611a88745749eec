from __future__ import annotations

"""Command-line entry point: capture one document to PDF."""

import argparse
from pathlib import Path
from typing import Sequence

from . import config
from .config_validation import validate_runtime_config
from .error_codes import CaptureError
from .orchestrator import IDENTIFIER_MODES, capture
from .strategies import normalize_strategy
from .utils import setup_job_logger


def _build_parser() -> argparse.ArgumentParser:
    """Return an argument parser for the capture CLI."""

    parser = argparse.ArgumentParser(
        description="Capture a viewer document (document or embed URL) into a PDF.",
    )
    parser.add_argument("url", help="Document or embed URL.")
    parser.add_argument(
        "--strategy",
        "-s",
        default=config.DEFAULT_STRATEGY,
        help="vector (print each page, default) or raster (screenshot each page).",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=Path,
        default=config.OUTPUT_DIR,
        help="Directory for the final PDF and the temporary page files.",
    )
    parser.add_argument(
        "--name-by",
        choices=IDENTIFIER_MODES,
        default=config.DEFAULT_IDENTIFIER_MODE,
        help="Name the output after the document title or its numeric id.",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Only print the final path.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the capture CLI."""

    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        strategy = normalize_strategy(args.strategy)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        validate_runtime_config("cli")
    except ValueError as exc:
        parser.error(str(exc))

    setup_job_logger()

    def _print_progress(message: str) -> None:
        if not args.quiet:
            print(message, flush=True)

    try:
        path = capture(
            args.url,
            strategy,
            output_dir=args.output_dir,
            identifier_mode=args.name_by,
            on_progress=_print_progress,
        )
    except CaptureError as exc:
        print(f"Capture failed ({exc.error_code}): {exc}")
        return 1

    print(path)
    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
