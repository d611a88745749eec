from __future__ import annotations

from pathlib import Path

import pytest

from docsnap.capture import fs_scope
from docsnap.capture.error_codes import ErrorCode


def test_create_is_idempotent(tmp_path: Path) -> None:
    target = tmp_path / "a" / "b" / "c"

    fs_scope.create(target)
    fs_scope.create(target)

    assert target.is_dir()


def test_remove_missing_path_is_a_no_op(tmp_path: Path) -> None:
    fs_scope.remove(tmp_path / "never-created")
    fs_scope.remove(tmp_path / "never-created")


def test_remove_deletes_tree(tmp_path: Path) -> None:
    target = fs_scope.create(tmp_path / "job")
    (target / "nested").mkdir()
    (target / "nested" / "000.pdf").write_bytes(b"%PDF-1.4")

    fs_scope.remove(target)

    assert not target.exists()


def test_job_scope_removes_directory_after_exception(tmp_path: Path) -> None:
    target = tmp_path / "job"

    with pytest.raises(RuntimeError):
        with fs_scope.job_scope(target) as scope:
            (scope / "0001.png").write_bytes(b"png")
            raise RuntimeError("capture blew up")

    assert not target.exists()


def test_job_scope_logs_cleanup_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    events: list[dict] = []
    monkeypatch.setattr(fs_scope, "_capture_event", lambda *args, **kwargs: events.append(kwargs))

    def _fail(_path: Path) -> None:
        raise PermissionError("read-only")

    monkeypatch.setattr(fs_scope, "remove", _fail)

    with fs_scope.job_scope(tmp_path / "job") as scope:
        assert scope.is_dir()

    assert events[-1]["error_code"] == ErrorCode.CLEANUP_FAILED
    assert events[-1]["phase"] == "cleanup"
