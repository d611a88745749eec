"""PDF assembly: build a PDF from page images, or merge single-page PDFs.

Neither function touches the browser, so both are safe to call from tests and
from offline tooling.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Sequence, Union

import img2pdf
from PIL import Image
from pypdf import PdfReader, PdfWriter

from .error_codes import ErrorCode
from .logging_utils import _capture_event

# img2pdf warns on every alpha-channel image; we flatten those ourselves.
logging.getLogger("img2pdf").setLevel(logging.ERROR)

# At 72 dpi one image pixel maps to one PDF point, so page size == pixel size.
_PIXEL_EXACT_LAYOUT = img2pdf.get_fixed_dpi_layout_fun((72, 72))


@dataclass(frozen=True)
class PageImage:
    """One rasterised page and its true pixel dimensions."""

    path: Path
    width: int
    height: int

    @classmethod
    def from_file(cls, path: Path | str) -> "PageImage":
        """Read the real pixel size of the image at *path*."""

        with Image.open(path) as img:
            width, height = img.size
        return cls(Path(path), int(width), int(height))


@dataclass
class MergeResult:
    path: Path
    pages: int
    skipped: List[Path]


def _image_source(image: PageImage) -> Union[str, bytes]:
    with Image.open(image.path) as img:
        has_alpha = img.mode in {"RGBA", "LA", "PA"} or (
            img.mode == "P" and "transparency" in img.info
        )
        if not has_alpha:
            return str(image.path)
        buffer = io.BytesIO()
        img.convert("RGB").save(buffer, format="PNG")
        return buffer.getvalue()


def _write_empty(output: Path) -> None:
    with output.open("wb") as handle:
        PdfWriter().write(handle)
    _capture_event(
        "error", phase="assemble", error_code=ErrorCode.NO_PAGES, output=str(output)
    )


def generate(images: Sequence[PageImage], output_path: Path | str) -> Path:
    """Write one PDF page per image, in order, each sized to its image.

    An empty list still writes a document, with no pages.
    """

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    if not images:
        _write_empty(output)
        return output

    sources = [_image_source(image) for image in images]
    output.write_bytes(img2pdf.convert(*sources, layout_fun=_PIXEL_EXACT_LAYOUT))

    _capture_event("assemble", phase="generate", pages=len(images), output=str(output))
    return output


def merge(paths: Sequence[Path | str], output_path: Path | str) -> MergeResult:
    """Concatenate the pages of *paths*, in order, into *output_path*.

    A missing or unreadable input is logged and skipped; the merge carries on
    with whatever loads. When nothing loads the output has no pages.
    """

    writer = PdfWriter()
    skipped: List[Path] = []
    pages = 0

    for raw_path in paths:
        path = Path(raw_path)
        before = len(writer.pages)
        try:
            reader = PdfReader(path)
            # add_page copies the page's objects, so corrupt bodies fail here.
            for page in reader.pages:
                writer.add_page(page)
        except Exception as exc:  # noqa: BLE001
            while len(writer.pages) > before:
                del writer.pages[-1]
            skipped.append(path)
            _capture_event(
                "error",
                phase="merge",
                error_code=ErrorCode.MERGE_SKIPPED,
                path=str(path),
                error=f"{type(exc).__name__}: {exc}",
            )
            continue
        pages = len(writer.pages)

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    if pages == 0:
        _write_empty(output)
        return MergeResult(output, 0, skipped)

    with output.open("wb") as handle:
        writer.write(handle)

    _capture_event(
        "assemble", phase="merge", pages=pages, skipped=len(skipped), output=str(output)
    )
    return MergeResult(output, pages, skipped)


__all__ = ["PageImage", "MergeResult", "generate", "merge"]
