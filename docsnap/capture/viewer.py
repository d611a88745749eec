# docsnap/capture/viewer.py
"""Capabilities the capture pipeline needs from one open viewer page.

``ViewerPage`` is the only place that knows about the viewer's DOM. The
orchestrator and the strategies talk to it in terms of page units, scroll
metrics and "print this unit in isolation", so tests can substitute a fake
with the same methods.
"""
from __future__ import annotations

import math
import re
import urllib.parse
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .selectors_viewer import VIEWER_SELECTORS, ViewerSelectors

_STYLE_WIDTH = re.compile(r"(?<![-\w])width\s*:\s*([\d.]+)px", re.IGNORECASE)
_STYLE_HEIGHT = re.compile(r"(?<![-\w])height\s*:\s*([\d.]+)px", re.IGNORECASE)


@dataclass(frozen=True)
class PageUnit:
    """One rendered page, in DOM order."""

    index: int
    element_id: str
    style: str = ""

    @property
    def selector(self) -> str:
        return f"[id='{self.element_id}']"


@dataclass(frozen=True)
class ScrollMetrics:
    scroll_top: float
    client_height: float
    scroll_height: float

    @property
    def at_end(self) -> bool:
        return self.scroll_top + self.client_height >= self.scroll_height

    @property
    def fraction(self) -> float:
        if self.scroll_height <= 0:
            return 1.0
        return min(1.0, (self.scroll_top + self.client_height) / self.scroll_height)


def parse_style_size(style: str | None) -> Optional[Tuple[int, int]]:
    """Return the ``(width, height)`` px pair from an inline style, if both exist."""

    if not style:
        return None
    width = _STYLE_WIDTH.search(style)
    height = _STYLE_HEIGHT.search(style)
    if not width or not height:
        return None
    w, h = int(float(width.group(1))), int(float(height.group(1)))
    if w <= 0 or h <= 0:
        return None
    return w, h


def print_size(size: Tuple[int, int]) -> Tuple[int, int]:
    """Round the height up to an even number; odd heights spill a blank page."""

    width, height = size
    if height % 2:
        height += 1
    return width, height


def raster_viewport(style: str | None, target_width: int, default_height: int) -> Tuple[int, int]:
    """Viewport keeping the unit's aspect ratio at ``target_width``."""

    size = parse_style_size(style)
    if size is None:
        return target_width, default_height
    width, height = size
    return target_width, math.ceil(target_width * height / width)


def title_from_href(href: str | None) -> str:
    """Last path segment of ``href``, URL-decoded."""

    if not href:
        return ""
    path = urllib.parse.urlparse(href.strip()).path
    return urllib.parse.unquote(path.rstrip("/").split("/")[-1]).strip()


_PREPARE_PRINT_JS = """
([containerSelector, unitSelector, bareUnitSelector]) => {
    const units = Array.from(document.querySelectorAll(unitSelector));
    units.forEach((el) => { el.style.margin = '0'; });
    const container = document.querySelector(containerSelector);
    if (container) {
        document.body.innerHTML = container.innerHTML;
    }
    document.querySelectorAll(bareUnitSelector).forEach((el) => {
        el.style.display = 'none';
    });
}
"""

_PREPARE_SCREENSHOT_JS = """
([scrollerSelector, toolbarSelector]) => {
    const scroller = document.querySelector(scrollerSelector);
    if (scroller) {
        scroller.style.bottom = '0px';
        scroller.style.marginTop = '0px';
    }
    const toolbar = document.querySelector(toolbarSelector);
    if (toolbar) {
        toolbar.style.display = 'none';
    }
}
"""

_SET_DISPLAY_JS = """
([id, display]) => {
    const el = document.getElementById(id);
    if (el) { el.style.display = display; }
}
"""

_SCROLL_METRICS_JS = "el => ({top: el.scrollTop, client: el.clientHeight, height: el.scrollHeight})"


class ViewerPage:
    """A navigated viewer page plus the browser context that owns it."""

    def __init__(
        self,
        page: Any,
        context: Any = None,
        *,
        url: str = "",
        selectors: ViewerSelectors = VIEWER_SELECTORS,
    ) -> None:
        self._page = page
        self._context = context
        self.url = url
        self.selectors = selectors

    def document_title(self) -> str:
        link = self._page.query_selector(self.selectors.title_link)
        if link is None:
            return ""
        return title_from_href(link.get_attribute("href"))

    def remove_overlays(self) -> int:
        removed = 0
        for selector in self.selectors.overlays:
            for element in self._page.query_selector_all(selector):
                element.evaluate("node => node.remove()")
                removed += 1
        return removed

    def focus_scroller(self) -> None:
        self._page.click(self.selectors.scroller)

    def page_down(self) -> None:
        self._page.keyboard.press("PageDown")

    def scroll_metrics(self) -> ScrollMetrics:
        raw = self._page.eval_on_selector(self.selectors.scroller, _SCROLL_METRICS_JS)
        return ScrollMetrics(
            scroll_top=float(raw["top"]),
            client_height=float(raw["client"]),
            scroll_height=float(raw["height"]),
        )

    def page_units(self) -> List[PageUnit]:
        units: List[PageUnit] = []
        for index, handle in enumerate(self._page.query_selector_all(self.selectors.page_unit)):
            element_id = handle.get_attribute("id") or f"outer_page_{index + 1}"
            units.append(PageUnit(index, element_id, handle.get_attribute("style") or ""))
        return units

    def prepare_for_print(self) -> None:
        """Strip the chrome around the pages and hide every page."""

        self._page.evaluate(
            _PREPARE_PRINT_JS,
            [
                self.selectors.page_container,
                self.selectors.page_unit,
                self.selectors.bare_page_unit,
            ],
        )

    def print_unit(self, unit: PageUnit, path: Path) -> Tuple[int, int]:
        """Print ``unit`` alone to a one-page PDF at ``path``; returns its px size."""

        self._page.evaluate(_SET_DISPLAY_JS, [unit.element_id, "block"])
        try:
            element = self._page.query_selector(unit.selector)
            style = element.get_attribute("style") if element is not None else unit.style
            size = parse_style_size(style)
            if size is None and element is not None:
                box = element.bounding_box()
                if box:
                    size = (math.ceil(box["width"]), math.ceil(box["height"]))
            if size is None:
                raise ValueError(f"Cannot determine size of {unit.element_id}")
            width, height = print_size(size)
            path.parent.mkdir(parents=True, exist_ok=True)
            self._page.pdf(
                path=str(path),
                width=f"{width}px",
                height=f"{height}px",
                print_background=True,
            )
            return width, height
        finally:
            self._page.evaluate(_SET_DISPLAY_JS, [unit.element_id, "none"])

    def prepare_for_screenshot(self) -> None:
        """Pin the scroller to the viewport and hide the toolbar drop-down."""

        self._page.evaluate(
            _PREPARE_SCREENSHOT_JS, [self.selectors.scroller, self.selectors.toolbar]
        )

    def screenshot_unit(
        self, unit: PageUnit, path: Path, *, target_width: int, default_height: int
    ) -> Tuple[int, int]:
        """Screenshot ``unit`` to ``path``; returns the viewport used."""

        self._page.evaluate("id => document.getElementById(id)?.scrollIntoView()", unit.element_id)
        width, height = raster_viewport(unit.style, target_width, default_height)
        self._page.set_viewport_size({"width": width, "height": height})
        element = self._page.query_selector(unit.selector)
        if element is None:
            raise ValueError(f"Page {unit.element_id} is no longer in the DOM")
        path.parent.mkdir(parents=True, exist_ok=True)
        element.screenshot(path=str(path))
        return width, height

    def close(self) -> None:
        if self._context is not None:
            self._context.close()
        else:
            self._page.close()


__all__ = [
    "PageUnit",
    "ScrollMetrics",
    "ViewerPage",
    "parse_style_size",
    "print_size",
    "raster_viewport",
    "title_from_href",
]
