# docsnap/capture/orchestrator.py
"""Top-level capture job: URL in, one merged PDF out."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, List, Optional

from playwright.sync_api import Error as PlaywrightError

from . import config
from .browser_session import BrowserSession
from .convergence import converge
from .error_codes import ErrorCode, NavigationFailure
from .fs_scope import job_scope
from .logging_utils import _capture_event
from .sources import resolve_source_url
from .strategies import CaptureStrategy, get_strategy
from .utils import log_line, safe_identifier

ProgressFn = Callable[[str], Any]

IDENTIFIER_MODES = ("title", "id")


def _progress_reporter(on_progress: Optional[ProgressFn]) -> Callable[[str], None]:
    def report(message: str) -> None:
        log_line(f"[CAPTURE] {message}")
        if on_progress is None:
            return
        try:
            on_progress(message)
        except Exception as exc:  # noqa: BLE001
            _capture_event("error", phase="progress_callback", error=str(exc))

    return report


def derive_identifier(title: str, source_id: str, identifier_mode: str) -> str:
    """File stem for the output: the sanitised title, or the source id.

    Falls back to the id when the title sanitises to nothing.
    """

    if config.is_title_mode(identifier_mode):
        identifier = safe_identifier(title)
        if identifier:
            return identifier
    return safe_identifier(source_id) or source_id


def capture_pages(
    viewer: Any,
    strategy: CaptureStrategy,
    temp_dir: Path,
    report: Callable[[str], None],
) -> List[Any]:
    """Capture every page unit in DOM order; failed pages are logged and skipped."""

    units = viewer.page_units()
    total = len(units)
    _capture_event("capture", phase="units", strategy=strategy.name, total=total)
    strategy.prepare(viewer)

    artifacts: List[Any] = []
    for position, unit in enumerate(units, start=1):
        report(f"Capturing page {position}/{total}")
        try:
            artifacts.append(strategy.capture_page(viewer, unit, temp_dir))
        except Exception as exc:  # noqa: BLE001
            _capture_event(
                "error",
                phase="capture_page",
                error_code=ErrorCode.PAGE_CAPTURE_FAILED,
                page=position,
                element_id=unit.element_id,
                error=f"{type(exc).__name__}: {exc}",
            )

    _capture_event(
        "capture",
        phase="units_done",
        strategy=strategy.name,
        total=total,
        captured=len(artifacts),
        failed=total - len(artifacts),
    )
    return artifacts


def capture(
    url: str,
    strategy: str | CaptureStrategy | None = None,
    *,
    output_dir: Path | str | None = None,
    identifier_mode: str | None = None,
    on_progress: Optional[ProgressFn] = None,
    session: Optional[BrowserSession] = None,
) -> Path:
    """Capture the document at ``url`` into ``{output_dir}/{identifier}.pdf``.

    Raises ``UnsupportedSource`` before touching the browser when ``url`` is
    not a document or embed URL, and ``NavigationFailure`` when the viewer
    cannot be loaded or never settles. Individual page failures only shorten
    the output; when every page fails the PDF has no pages.

    A session passed in by the caller is left open; otherwise one is created
    for this call and released before returning.
    """

    source = resolve_source_url(url)
    mode = (identifier_mode or config.DEFAULT_IDENTIFIER_MODE).strip().lower()
    if mode not in IDENTIFIER_MODES:
        raise ValueError(f"identifier_mode must be one of {IDENTIFIER_MODES}, got {identifier_mode!r}")

    chosen = get_strategy(strategy)
    out_dir = Path(output_dir if output_dir is not None else config.OUTPUT_DIR)
    report = _progress_reporter(on_progress)

    _capture_event(
        "job",
        phase="start",
        url=source.embed_url,
        source_id=source.source_id,
        strategy=chosen.name,
        identifier_mode=mode,
    )
    report(f"Mode: {chosen.name.upper()}")

    owned_session = session is None
    active_session = session if session is not None else BrowserSession()
    try:
        report("Connecting...")
        viewer = active_session.acquire(
            source.embed_url, device_scale_factor=chosen.device_scale_factor
        )
        try:
            try:
                identifier = derive_identifier(viewer.document_title(), source.source_id, mode)
                viewer.remove_overlays()

                viewer.focus_scroller()
                converge(viewer, on_progress=lambda pct: report(f"Loading content: {pct}%"))
            except PlaywrightError as exc:
                _capture_event("error", phase="settle", url=source.embed_url, error=str(exc))
                raise NavigationFailure(source.embed_url, str(exc)) from exc
            report("All content loaded. Preparing capture...")

            final_path = out_dir / f"{identifier}.pdf"
            with job_scope(out_dir / identifier) as temp_dir:
                artifacts = capture_pages(viewer, chosen, temp_dir, report)
                report("Merging...")
                chosen.assemble(artifacts, final_path)
                report("Cleaning up...")
        finally:
            viewer.close()
    finally:
        if owned_session:
            active_session.release()

    final_path = final_path.resolve()
    _capture_event("job", phase="done", output=str(final_path), identifier=identifier)
    return final_path


__all__ = ["capture", "capture_pages", "derive_identifier", "IDENTIFIER_MODES"]
