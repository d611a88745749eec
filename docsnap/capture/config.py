"""Configuration constants for the document capture pipeline."""
from __future__ import annotations

import os
from pathlib import Path

DATA_DIR: Path = Path(os.getenv("DOCSNAP_DATA_DIR", "data"))
OUTPUT_DIR: Path = Path(os.getenv("DOCSNAP_OUTPUT_DIR", str(DATA_DIR / "output")))
LOG_DIR: Path = DATA_DIR / "logs"
LOG_FILE: Path = LOG_DIR / "latest.log"

HEADLESS: bool = os.getenv("DOCSNAP_HEADLESS", "1").strip().lower() not in {"0", "false"}

USER_AGENT: str = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/142.0.0.0 Safari/537.36"
)

MIN_FREE_MB: int = int(os.getenv("MIN_FREE_MB", "200"))


def _parse_timeout_seconds(env_var: str, default: int, *, minimum: int = 1) -> int:
    """Parse a timeout value in seconds from the environment with bounds."""

    try:
        value = int(os.getenv(env_var, str(default)))
    except ValueError:
        return default
    return max(minimum, value)


# Navigation timeout for page.goto calls.
NAV_TIMEOUT_SECONDS: int = _parse_timeout_seconds("DOCSNAP_NAV_TIMEOUT_SECONDS", 60)

# Settle time after navigation before the viewer DOM is queried.
INITIAL_RENDER_SECONDS: float = float(os.getenv("DOCSNAP_INITIAL_RENDER_SECONDS", "1.0"))

# Scroll convergence: per-step render wait and the two bounds. A bound of 0
# disables it, which restores the unbounded "scroll until done" behaviour.
SCROLL_STEP_DELAY_SECONDS: float = float(os.getenv("DOCSNAP_SCROLL_STEP_DELAY_SECONDS", "0.1"))
SCROLL_MAX_STEPS: int = int(os.getenv("DOCSNAP_SCROLL_MAX_STEPS", "5000"))
SCROLL_MAX_SECONDS: float = float(os.getenv("DOCSNAP_SCROLL_MAX_SECONDS", "900"))

# Raster capture viewport. Height is derived from each page's aspect ratio and
# falls back to the A4-ish default when the page carries no inline size.
RASTER_TARGET_WIDTH: int = int(os.getenv("DOCSNAP_RASTER_TARGET_WIDTH", "1191"))
RASTER_DEFAULT_HEIGHT: int = int(os.getenv("DOCSNAP_RASTER_DEFAULT_HEIGHT", "1684"))
RASTER_DEVICE_SCALE_FACTOR: float = float(os.getenv("DOCSNAP_RASTER_DEVICE_SCALE_FACTOR", "2"))

DEFAULT_STRATEGY: str = os.getenv("DOCSNAP_DEFAULT_STRATEGY", "vector").strip().lower() or "vector"
DEFAULT_IDENTIFIER_MODE: str = (
    os.getenv("DOCSNAP_IDENTIFIER_MODE", "title").strip().lower() or "title"
)


def is_title_mode(mode: str) -> bool:
    """Return ``True`` when ``mode`` names output files after the document title."""

    return str(mode).strip().lower() == "title"

