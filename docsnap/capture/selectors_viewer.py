from __future__ import annotations

"""Selectors for the embedded document viewer."""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class ViewerSelectors:
    """DOM hooks of the embed viewer.

    Every rendered page is an ``outer_page_<n>`` div inside the page
    container; the scroller is the element whose ``scrollTop`` advances while
    pages lazy-load. The title is only exposed as the last path segment of
    the mobile overlay link.
    """

    scroller: str = "div.document_scroller"
    page_container: str = "div.outer_page_container"
    page_unit: str = "div.outer_page_container div[id^='outer_page_']"
    # Same pages once the container has been unwrapped into <body>.
    bare_page_unit: str = "div[id^='outer_page_']"
    title_link: str = "div.mobile_overlay a"
    toolbar: str = "div.toolbar_drop"
    overlays: Tuple[str, ...] = (
        "div.customOptInDialog",
        "div[aria-label='Cookie Consent Banner']",
    )


VIEWER_SELECTORS = ViewerSelectors()

__all__ = ["ViewerSelectors", "VIEWER_SELECTORS"]
