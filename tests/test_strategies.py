from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image
from pypdf import PdfReader, PdfWriter

from docsnap.capture import strategies
from docsnap.capture.strategies import RasterStrategy, VectorStrategy
from docsnap.capture.viewer import PageUnit


class RecordingViewer:
    def __init__(self, image_size: tuple[int, int] = (640, 900)) -> None:
        self.image_size = image_size
        self.calls: list[tuple] = []

    def prepare_for_print(self) -> None:
        self.calls.append(("prepare_for_print",))

    def prepare_for_screenshot(self) -> None:
        self.calls.append(("prepare_for_screenshot",))

    def print_unit(self, unit: PageUnit, path: Path) -> tuple[int, int]:
        self.calls.append(("print_unit", unit.index, path.name))
        writer = PdfWriter()
        writer.add_blank_page(width=100, height=200)
        with path.open("wb") as handle:
            writer.write(handle)
        return (100, 200)

    def screenshot_unit(self, unit: PageUnit, path: Path, *, target_width: int, default_height: int):  # noqa: ANN201
        self.calls.append(("screenshot_unit", unit.index, path.name, target_width, default_height))
        Image.new("RGB", self.image_size, "white").save(path)
        return (target_width, default_height)


@pytest.mark.parametrize(
    "value, expected",
    [
        (None, "vector"),
        ("", "vector"),
        ("vector", "vector"),
        ("PRINT", "vector"),
        (" pdf ", "vector"),
        ("raster", "raster"),
        ("Image", "raster"),
        ("screenshot", "raster"),
    ],
)
def test_normalize_strategy_aliases(value, expected) -> None:  # noqa: ANN001
    assert strategies.normalize_strategy(value) == expected


def test_normalize_strategy_rejects_unknown() -> None:
    with pytest.raises(ValueError, match="Unknown capture strategy"):
        strategies.normalize_strategy("ocr")


def test_get_strategy_returns_instances() -> None:
    assert isinstance(strategies.get_strategy("raster"), RasterStrategy)
    assert isinstance(strategies.get_strategy(None), VectorStrategy)
    custom = RasterStrategy(target_width=800)
    assert strategies.get_strategy(custom) is custom


def test_vector_strategy_names_pages_by_index(tmp_path: Path) -> None:
    viewer = RecordingViewer()
    strategy = VectorStrategy()

    strategy.prepare(viewer)
    paths = [strategy.capture_page(viewer, PageUnit(i, f"outer_page_{i + 1}"), tmp_path) for i in range(3)]
    output = strategy.assemble(paths, tmp_path / "out.pdf")

    assert [p.name for p in paths] == ["000.pdf", "001.pdf", "002.pdf"]
    assert viewer.calls[0] == ("prepare_for_print",)
    assert len(PdfReader(str(output)).pages) == 3


def test_raster_strategy_reports_true_image_size(tmp_path: Path) -> None:
    viewer = RecordingViewer(image_size=(520, 700))
    strategy = RasterStrategy(target_width=1000, default_height=1400, device_scale_factor=2)

    strategy.prepare(viewer)
    image = strategy.capture_page(viewer, PageUnit(0, "outer_page_1"), tmp_path)

    assert image.path.name == "0001.png"
    assert (image.width, image.height) == (520, 700)
    assert viewer.calls[-1] == ("screenshot_unit", 0, "0001.png", 1000, 1400)
    assert strategy.device_scale_factor == 2


def test_raster_strategy_defaults_follow_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(strategies.config, "RASTER_TARGET_WIDTH", 900)
    monkeypatch.setattr(strategies.config, "RASTER_DEFAULT_HEIGHT", 1200)
    monkeypatch.setattr(strategies.config, "RASTER_DEVICE_SCALE_FACTOR", 3)

    strategy = RasterStrategy()

    assert (strategy.target_width, strategy.default_height, strategy.device_scale_factor) == (900, 1200, 3)
