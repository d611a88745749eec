from __future__ import annotations

from typing import Literal

from . import config
from .logging_utils import _capture_event
from .utils import log_line

Entrypoint = Literal["api", "cli", "tests"]


def _raise_config_error(message: str, *, entrypoint: Entrypoint, error: str) -> None:
    _capture_event(
        "error",
        phase="config",
        context="runtime_validation",
        error=error,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {message} (entrypoint={entrypoint})")
    raise ValueError(message)


def _clamp(field: str, value: float, adjusted: float, *, entrypoint: Entrypoint) -> None:
    _capture_event(
        "state",
        phase="config",
        context="runtime_validation",
        kind="config_adjustment",
        field=field,
        value=value,
        adjusted=adjusted,
        entrypoint=entrypoint,
    )
    log_line(f"[CONFIG] {field}={value} is invalid; clamping to {adjusted}.")
    setattr(config, field, adjusted)


def validate_runtime_config(entrypoint: Entrypoint) -> None:
    """Validate capture configuration for the given entrypoint.

    Raises ``ValueError`` when a blocking misconfiguration is detected.
    Non-fatal problems (negative delays or bounds) are clamped and logged.
    """

    if config.NAV_TIMEOUT_SECONDS <= 0:
        _raise_config_error(
            "NAV_TIMEOUT_SECONDS must be greater than zero.",
            entrypoint=entrypoint,
            error="invalid_timeout",
        )

    if config.RASTER_TARGET_WIDTH <= 0 or config.RASTER_DEFAULT_HEIGHT <= 0:
        _raise_config_error(
            "RASTER_TARGET_WIDTH and RASTER_DEFAULT_HEIGHT must be positive.",
            entrypoint=entrypoint,
            error="invalid_raster_viewport",
        )

    if config.RASTER_DEVICE_SCALE_FACTOR <= 0:
        _raise_config_error(
            "RASTER_DEVICE_SCALE_FACTOR must be positive.",
            entrypoint=entrypoint,
            error="invalid_device_scale_factor",
        )

    if config.MIN_FREE_MB < 0:
        _raise_config_error(
            "MIN_FREE_MB must be non-negative.",
            entrypoint=entrypoint,
            error="min_free_mb_invalid",
        )

    if config.SCROLL_STEP_DELAY_SECONDS < 0:
        _clamp("SCROLL_STEP_DELAY_SECONDS", config.SCROLL_STEP_DELAY_SECONDS, 0.0, entrypoint=entrypoint)

    if config.INITIAL_RENDER_SECONDS < 0:
        _clamp("INITIAL_RENDER_SECONDS", config.INITIAL_RENDER_SECONDS, 0.0, entrypoint=entrypoint)

    # 0 means "unbounded" for both convergence bounds.
    if config.SCROLL_MAX_STEPS < 0:
        _clamp("SCROLL_MAX_STEPS", config.SCROLL_MAX_STEPS, 0, entrypoint=entrypoint)

    if config.SCROLL_MAX_SECONDS < 0:
        _clamp("SCROLL_MAX_SECONDS", config.SCROLL_MAX_SECONDS, 0.0, entrypoint=entrypoint)


__all__ = ["validate_runtime_config", "Entrypoint"]
