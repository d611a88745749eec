from __future__ import annotations

from pathlib import Path
import pytest

from docsnap.capture import config
from docsnap.capture import healthcheck
from tests.test_api import _configure_temp_paths, _reload_main_module


def test_run_health_checks_happy_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "MIN_FREE_MB", 0)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is True
    assert result.checks["config"]["ok"] is True
    assert result.checks["filesystem"]["ok"] is True
    assert result.checks["filesystem"]["output_dir"] == str(tmp_path / "data" / "output")


def test_run_health_checks_handles_invalid_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "NAV_TIMEOUT_SECONDS", 0)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is False
    assert result.checks["config"]["ok"] is False
    assert "NAV_TIMEOUT_SECONDS" in result.checks["config"]["error"]


def test_run_health_checks_reports_low_disk(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "MIN_FREE_MB", 0)
    monkeypatch.setattr(healthcheck, "disk_has_room", lambda _mb, _path: False)

    result = healthcheck.run_health_checks(entrypoint="cli")

    assert result.ok is False
    assert result.checks["filesystem"]["ok"] is False


def test_health_api_reports_status(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _configure_temp_paths(tmp_path, monkeypatch)
    monkeypatch.setattr(config, "MIN_FREE_MB", 0)

    main = _reload_main_module()
    client = main.app.test_client()

    resp = client.get("/api/health")
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["ok"] is True
    assert "filesystem" in payload["checks"]

    monkeypatch.setattr(config, "NAV_TIMEOUT_SECONDS", 0)

    resp_unhealthy = client.get("/api/health")
    assert resp_unhealthy.status_code == 503
    data_unhealthy = resp_unhealthy.get_json()
    assert data_unhealthy["ok"] is False
    assert data_unhealthy["checks"]["config"]["ok"] is False
