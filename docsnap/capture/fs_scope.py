"""Create and erase the per-job scratch directory."""
from __future__ import annotations

import shutil
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .error_codes import ErrorCode
from .logging_utils import _capture_event


def create(path: Path | str) -> Path:
    """Create *path* and any missing parents. Existing directories are fine."""

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target


def remove(path: Path | str) -> None:
    """Delete *path* recursively. A missing path is not an error."""

    target = Path(path)
    if target.is_dir() and not target.is_symlink():
        shutil.rmtree(target)
    else:
        target.unlink(missing_ok=True)


@contextmanager
def job_scope(path: Path | str) -> Iterator[Path]:
    """Yield a fresh scratch directory and remove it on every exit path.

    Removal errors are logged as ``cleanup_failed`` and never raised, so they
    cannot mask the job's own outcome.
    """

    scope = create(path)
    try:
        yield scope
    finally:
        try:
            remove(scope)
        except OSError as exc:
            _capture_event(
                "error",
                phase="cleanup",
                error_code=ErrorCode.CLEANUP_FAILED,
                path=str(scope),
                error=str(exc),
            )


__all__ = ["create", "remove", "job_scope"]
