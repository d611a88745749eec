"""Scroll the viewer until every lazily-rendered page has loaded."""
from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

from . import config
from .logging_utils import _capture_event


@dataclass
class ConvergenceResult:
    converged: bool
    steps: int
    percent: int


def converge(
    viewer: Any,
    *,
    step_delay: Optional[float] = None,
    max_steps: Optional[int] = None,
    max_seconds: Optional[float] = None,
    on_progress: Optional[Callable[[int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> ConvergenceResult:
    """Page down through the scroller until ``scrollTop + clientHeight >= scrollHeight``.

    Progress is reported as an integer percentage that never decreases, even
    when ``scrollHeight`` grows as new pages render. ``max_steps`` and
    ``max_seconds`` bound the loop (``0`` disables a bound); hitting either
    stops scrolling and the capture proceeds with whatever has loaded.
    """

    step_delay = config.SCROLL_STEP_DELAY_SECONDS if step_delay is None else step_delay
    max_steps = config.SCROLL_MAX_STEPS if max_steps is None else max_steps
    max_seconds = config.SCROLL_MAX_SECONDS if max_seconds is None else max_seconds

    def report(value: int) -> None:
        if on_progress is not None:
            on_progress(value)

    metrics = viewer.scroll_metrics()
    percent = 100 if metrics.at_end else min(99, int(round(metrics.fraction * 100)))
    report(percent)
    if metrics.at_end:
        return ConvergenceResult(True, 0, 100)

    started = clock()
    steps = 0
    while True:
        if max_steps and steps >= max_steps:
            reason = "max_steps"
            break
        if max_seconds and clock() - started >= max_seconds:
            reason = "max_seconds"
            break

        viewer.page_down()
        sleep(step_delay)
        metrics = viewer.scroll_metrics()
        steps += 1

        if metrics.at_end:
            report(100)
            _capture_event("converge", phase="scroll", status="done", steps=steps)
            return ConvergenceResult(True, steps, 100)

        # Never report 100 before the end is actually reached.
        percent = max(percent, min(99, int(round(metrics.fraction * 100))))
        report(percent)

    _capture_event(
        "converge",
        phase="scroll",
        status="convergence_bound_hit",
        reason=reason,
        steps=steps,
        percent=percent,
        scroll_top=metrics.scroll_top,
        scroll_height=metrics.scroll_height,
    )
    return ConvergenceResult(False, steps, percent)


__all__ = ["ConvergenceResult", "converge"]
