from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

from . import config
from .config_validation import validate_runtime_config
from .logging_utils import _capture_event
from .utils import disk_has_room, ensure_dirs, log_line


@dataclass
class HealthResult:
    ok: bool
    checks: dict[str, dict[str, Any]]


def run_health_checks(entrypoint: str = "cli") -> HealthResult:
    checks: dict[str, dict[str, Any]] = {}

    try:
        validate_runtime_config(entrypoint or "cli")
        checks["config"] = {"ok": True}
    except ValueError as exc:
        checks["config"] = {"ok": False, "error": str(exc)}

    try:
        ensure_dirs()
        writable = os.access(config.OUTPUT_DIR, os.W_OK)
        has_room = disk_has_room(config.MIN_FREE_MB, config.OUTPUT_DIR)
        checks["filesystem"] = {
            "ok": writable and has_room,
            "output_dir": str(config.OUTPUT_DIR),
            "writable": writable,
            "min_free_mb": config.MIN_FREE_MB,
        }
    except OSError as exc:
        checks["filesystem"] = {"ok": False, "output_dir": str(config.OUTPUT_DIR), "error": str(exc)}

    overall_ok = all(check.get("ok", False) for check in checks.values())

    _capture_event(
        "state" if overall_ok else "error",
        phase="health",
        context="healthcheck",
        ok=overall_ok,
        checks=checks,
    )

    return HealthResult(ok=overall_ok, checks=checks)


if __name__ == "__main__":  # pragma: no cover
    result = run_health_checks(entrypoint="cli")
    for name, info in result.checks.items():
        status = "OK" if info.get("ok") else "FAIL"
        log_line(f"[HEALTH] {name}: {status} {info}")
    raise SystemExit(0 if result.ok else 1)
