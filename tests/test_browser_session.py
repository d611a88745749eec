from __future__ import annotations

import pytest
from playwright.sync_api import Error as PlaywrightError

from docsnap.capture import browser_session, config
from docsnap.capture.browser_session import BrowserSession
from docsnap.capture.error_codes import ErrorCode, NavigationFailure
from docsnap.capture.viewer import ViewerPage


class FakeResponse:
    def __init__(self, status: int) -> None:
        self.status = status
        self.ok = status < 400


class FakePage:
    def __init__(self, *, status: int = 200, goto_error: Exception | None = None) -> None:
        self.status = status
        self.goto_error = goto_error
        self.visited: list[tuple[str, str]] = []
        self.nav_timeout: float | None = None

    def set_default_navigation_timeout(self, timeout: float) -> None:
        self.nav_timeout = timeout

    def goto(self, url: str, wait_until: str = "load") -> FakeResponse:
        self.visited.append((url, wait_until))
        if self.goto_error is not None:
            raise self.goto_error
        return FakeResponse(self.status)


class FakeContext:
    def __init__(self, page: FakePage, options: dict) -> None:
        self.page = page
        self.options = options
        self.closed = False

    def new_page(self) -> FakePage:
        return self.page

    def close(self) -> None:
        self.closed = True


class FakeBrowser:
    def __init__(self, page_factory) -> None:  # noqa: ANN001
        self.page_factory = page_factory
        self.contexts: list[FakeContext] = []
        self.closed = False

    def new_context(self, **options: object) -> FakeContext:
        context = FakeContext(self.page_factory(), options)
        self.contexts.append(context)
        return context

    def close(self) -> None:
        self.closed = True


class FakePlaywright:
    def __init__(self) -> None:
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class Launcher:
    def __init__(self, page_factory=FakePage) -> None:  # noqa: ANN001
        self.calls: list[bool] = []
        self.playwright = FakePlaywright()
        self.browser = FakeBrowser(page_factory)

    def __call__(self, headless: bool):  # noqa: ANN204
        self.calls.append(headless)
        return self.playwright, self.browser


@pytest.fixture(autouse=True)
def _quiet_events(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(browser_session, "_capture_event", lambda *args, **kwargs: None)


def test_acquire_launches_lazily_once_and_opens_fresh_contexts() -> None:
    launcher = Launcher()
    sleeps: list[float] = []
    session = BrowserSession(headless=True, launcher=launcher, sleep=sleeps.append)

    assert session.is_open is False
    first = session.acquire("https://example.org/embeds/1/content")
    second = session.acquire("https://example.org/embeds/2/content", device_scale_factor=2)

    assert isinstance(first, ViewerPage)
    assert first.url == "https://example.org/embeds/1/content"
    assert launcher.calls == [True]
    assert len(launcher.browser.contexts) == 2
    assert launcher.browser.contexts[1].options["device_scale_factor"] == 2
    assert launcher.browser.contexts[0].page.nav_timeout == config.NAV_TIMEOUT_SECONDS * 1000
    assert sleeps == [config.INITIAL_RENDER_SECONDS] * 2
    assert second is not first


def test_navigation_error_raises_navigation_failure_and_closes_context() -> None:
    launcher = Launcher(lambda: FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED")))
    session = BrowserSession(launcher=launcher, sleep=lambda _s: None)

    with pytest.raises(NavigationFailure) as excinfo:
        session.acquire("https://example.org/embeds/1/content")

    assert excinfo.value.error_code == ErrorCode.NAVIGATION_FAILURE
    assert "ERR_NAME_NOT_RESOLVED" in str(excinfo.value)
    assert launcher.browser.contexts[0].closed is True


def test_http_error_status_is_a_navigation_failure() -> None:
    launcher = Launcher(lambda: FakePage(status=404))
    session = BrowserSession(launcher=launcher, sleep=lambda _s: None)

    with pytest.raises(NavigationFailure) as excinfo:
        session.acquire("https://example.org/embeds/1/content")

    assert "HTTP 404" in str(excinfo.value)
    assert launcher.browser.contexts[0].closed is True


def test_release_is_safe_without_launch_and_idempotent() -> None:
    launcher = Launcher()
    session = BrowserSession(launcher=launcher, sleep=lambda _s: None)

    session.release()
    assert launcher.calls == []

    session.acquire("https://example.org/embeds/1/content")
    session.release()
    session.release()

    assert launcher.browser.closed is True
    assert launcher.playwright.stopped is True
    assert session.is_open is False


def test_context_manager_releases() -> None:
    launcher = Launcher()

    with BrowserSession(launcher=launcher, sleep=lambda _s: None) as session:
        session.acquire("https://example.org/embeds/1/content")

    assert launcher.browser.closed is True


def test_viewer_close_closes_its_context() -> None:
    launcher = Launcher()
    session = BrowserSession(launcher=launcher, sleep=lambda _s: None)

    session.acquire("https://example.org/embeds/1/content").close()

    assert launcher.browser.contexts[0].closed is True
