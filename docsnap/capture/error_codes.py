from __future__ import annotations

"""Error code taxonomy and exceptions for capture jobs.

Codes appear in structured log lines and in the ``error`` events streamed by
the HTTP surface. Only ``CaptureError`` and its subclasses reach callers;
per-page and cleanup failures are logged with their code and swallowed.
"""


class ErrorCode:
    UNSUPPORTED_SOURCE = "unsupported_source"
    NAVIGATION_FAILURE = "navigation_failure"
    PAGE_CAPTURE_FAILED = "page_capture_failed"
    MERGE_SKIPPED = "merge_skipped"
    CLEANUP_FAILED = "cleanup_failed"
    NO_PAGES = "no_pages"
    INTERNAL = "internal_error"


class CaptureError(Exception):
    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code


class UnsupportedSource(CaptureError):
    """The input URL matches neither the document nor the embed shape."""

    def __init__(self, url: str) -> None:
        super().__init__(ErrorCode.UNSUPPORTED_SOURCE, f"Unsupported URL: {url}")
        self.url = url


class NavigationFailure(CaptureError):
    """The browser could not load or settle the viewer page."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(ErrorCode.NAVIGATION_FAILURE, f"Failed to load {url}: {reason}")
        self.url = url


__all__ = ["ErrorCode", "CaptureError", "UnsupportedSource", "NavigationFailure"]
