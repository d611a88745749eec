"""Per-page capture strategies.

A strategy knows how to turn one page unit into an artifact and how to
assemble the artifacts into the final PDF. Scrolling, progress, failure
isolation and cleanup belong to the orchestrator.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Sequence

from . import config, pdf_tools
from .pdf_tools import PageImage
from .viewer import PageUnit

VECTOR = "vector"
RASTER = "raster"

_VECTOR_ALIASES = {"vector", "default", "pdf", "print"}
_RASTER_ALIASES = {"raster", "image", "img", "screenshot"}


class CaptureStrategy:
    name: str = ""
    device_scale_factor: float = 1.0

    def prepare(self, viewer: Any) -> None:
        raise NotImplementedError

    def capture_page(self, viewer: Any, unit: PageUnit, temp_dir: Path) -> Any:
        raise NotImplementedError

    def assemble(self, artifacts: Sequence[Any], output_path: Path) -> Path:
        raise NotImplementedError


class VectorStrategy(CaptureStrategy):
    """Print each page on its own through the browser's PDF renderer."""

    name = VECTOR

    def prepare(self, viewer: Any) -> None:
        viewer.prepare_for_print()

    def capture_page(self, viewer: Any, unit: PageUnit, temp_dir: Path) -> Path:
        path = temp_dir / f"{unit.index:03d}.pdf"
        viewer.print_unit(unit, path)
        return path

    def assemble(self, artifacts: Sequence[Path], output_path: Path) -> Path:
        return pdf_tools.merge(artifacts, output_path).path


class RasterStrategy(CaptureStrategy):
    """Screenshot each page and lay the images out one per PDF page."""

    name = RASTER

    def __init__(
        self,
        *,
        target_width: int | None = None,
        default_height: int | None = None,
        device_scale_factor: float | None = None,
    ) -> None:
        self.target_width = target_width or config.RASTER_TARGET_WIDTH
        self.default_height = default_height or config.RASTER_DEFAULT_HEIGHT
        self.device_scale_factor = device_scale_factor or config.RASTER_DEVICE_SCALE_FACTOR

    def prepare(self, viewer: Any) -> None:
        viewer.prepare_for_screenshot()

    def capture_page(self, viewer: Any, unit: PageUnit, temp_dir: Path) -> PageImage:
        path = temp_dir / f"{unit.index + 1:04d}.png"
        viewer.screenshot_unit(
            unit,
            path,
            target_width=self.target_width,
            default_height=self.default_height,
        )
        # The file on disk, not the DOM style, decides the page size.
        return PageImage.from_file(path)

    def assemble(self, artifacts: Sequence[PageImage], output_path: Path) -> Path:
        return pdf_tools.generate(artifacts, output_path)


def normalize_strategy(value: str | None) -> str:
    """Return ``"vector"`` or ``"raster"`` for ``value`` and its aliases."""

    raw = (value or config.DEFAULT_STRATEGY).strip().lower()
    if raw in _VECTOR_ALIASES:
        return VECTOR
    if raw in _RASTER_ALIASES:
        return RASTER
    raise ValueError(f"Unknown capture strategy: {value!r}")


def get_strategy(value: str | CaptureStrategy | None) -> CaptureStrategy:
    if isinstance(value, CaptureStrategy):
        return value
    if normalize_strategy(value) == RASTER:
        return RasterStrategy()
    return VectorStrategy()


__all__ = [
    "CaptureStrategy",
    "VectorStrategy",
    "RasterStrategy",
    "VECTOR",
    "RASTER",
    "normalize_strategy",
    "get_strategy",
]
