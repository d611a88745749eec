# docsnap/capture/browser_session.py
"""Owned Playwright browser handle.

A ``BrowserSession`` launches Chromium lazily on the first ``acquire`` and
keeps it until ``release``. Every ``acquire`` opens its own browser context,
so two jobs never share cookies, viewport or device scale factor. Sync
Playwright objects are bound to the thread that created them; use one
session per thread.
"""
from __future__ import annotations

import time
from typing import Any, Callable, Optional, Tuple

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from . import config
from .error_codes import NavigationFailure
from .logging_utils import _capture_event
from .viewer import ViewerPage

Launcher = Callable[[bool], Tuple[Any, Any]]


def _launch_chromium(headless: bool) -> Tuple[Any, Any]:
    """Start Playwright and launch Chromium; returns ``(playwright, browser)``."""

    pw = sync_playwright().start()
    try:
        browser = pw.chromium.launch(
            headless=headless,
            args=["--no-sandbox", "--disable-dev-shm-usage"],
        )
    except Exception:
        pw.stop()
        raise
    return pw, browser


class BrowserSession:
    def __init__(
        self,
        *,
        headless: Optional[bool] = None,
        launcher: Optional[Launcher] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._headless = config.HEADLESS if headless is None else headless
        self._launcher = launcher or _launch_chromium
        self._sleep = sleep
        self._playwright: Any = None
        self._browser: Any = None

    @property
    def is_open(self) -> bool:
        return self._browser is not None

    def _ensure_browser(self) -> Any:
        if self._browser is None:
            self._playwright, self._browser = self._launcher(self._headless)
            _capture_event("browser", phase="launch", headless=self._headless)
        return self._browser

    def acquire(self, url: str, *, device_scale_factor: float = 1.0) -> ViewerPage:
        """Open a fresh page navigated to ``url`` with its first render settled.

        Raises ``NavigationFailure`` when the page cannot be loaded.
        """

        browser = self._ensure_browser()
        context = browser.new_context(
            user_agent=config.USER_AGENT,
            locale="en-US",
            device_scale_factor=device_scale_factor,
        )
        try:
            page = context.new_page()
            page.set_default_navigation_timeout(config.NAV_TIMEOUT_SECONDS * 1000)
            response = page.goto(url, wait_until="load")
            if response is not None and not response.ok:
                raise NavigationFailure(url, f"HTTP {response.status}")
        except PlaywrightError as exc:
            context.close()
            _capture_event("error", phase="navigate", url=url, error=str(exc))
            raise NavigationFailure(url, str(exc)) from exc
        except NavigationFailure as exc:
            context.close()
            _capture_event("error", phase="navigate", url=url, error=str(exc))
            raise

        self._sleep(config.INITIAL_RENDER_SECONDS)
        _capture_event("browser", phase="navigate", url=url, status="ok")
        return ViewerPage(page, context, url=url)

    def release(self) -> None:
        """Close the browser and stop Playwright. Safe to call repeatedly."""

        browser, pw = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        try:
            if browser is not None:
                browser.close()
        except Exception as exc:  # noqa: BLE001
            _capture_event("error", phase="browser_close", error=str(exc))
        finally:
            if pw is not None:
                pw.stop()
        if browser is not None:
            _capture_event("browser", phase="release")

    def __enter__(self) -> "BrowserSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:  # noqa: ANN001
        self.release()


__all__ = ["BrowserSession", "Launcher"]
