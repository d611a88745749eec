from __future__ import annotations

import logging
import re
import shutil
import sys
from datetime import datetime
from pathlib import Path

from . import config

LOGGER = logging.getLogger("docsnap")
_LOGGER_INITIALISED = False

# Most filesystems cap a single name at 255 bytes.
MAX_FILENAME_BYTES = 255


def _configure_logger(log_path: Path) -> None:
    """Configure the shared application logger to write to ``log_path``."""

    global _LOGGER_INITIALISED

    log_path.parent.mkdir(parents=True, exist_ok=True)

    for handler in list(LOGGER.handlers):
        LOGGER.removeHandler(handler)
        try:
            handler.close()
        except Exception:  # noqa: BLE001
            continue

    formatter = logging.Formatter(
        fmt="[%(asctime)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(formatter)

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)

    LOGGER.setLevel(logging.INFO)
    LOGGER.addHandler(stream_handler)
    LOGGER.addHandler(file_handler)
    LOGGER.propagate = False

    _LOGGER_INITIALISED = True


def _ensure_logger() -> None:
    """Initialise the logger lazily using the default log file."""

    if _LOGGER_INITIALISED:
        return

    _configure_logger(config.LOG_FILE)


def setup_job_logger() -> Path:
    """Rotate to a fresh timestamped log file for a capture job."""

    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    log_path = config.LOG_DIR / f"capture_{timestamp}.log"
    _configure_logger(log_path)
    LOGGER.info("Logging to %s", log_path)
    return log_path


def ensure_dirs() -> None:
    """Ensure that the application's expected directory structure exists."""

    config.DATA_DIR.mkdir(parents=True, exist_ok=True)
    config.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    config.LOG_DIR.mkdir(parents=True, exist_ok=True)


def log_line(message: str) -> None:
    """Write a timestamped log line to stdout and the active log file."""

    _ensure_logger()
    LOGGER.info(message)


def sanitize_filename_component(component: str | None) -> str:
    """Sanitise a filename component by removing unsafe characters."""

    if not component:
        return ""

    cleaned = "".join(ch if ord(ch) >= 32 else " " for ch in component)
    cleaned = re.sub(r"[\\/:*?\"<>|]+", " ", cleaned)
    cleaned = re.sub(r"\s+", " ", cleaned)
    cleaned = cleaned.strip(" .")

    if cleaned.upper() in {"CON", "PRN", "AUX", "NUL"} or re.fullmatch(
        r"(?i)(COM|LPT)[1-9]", cleaned
    ):
        return ""

    return cleaned


def truncate_to_max_bytes(value: str, max_bytes: int) -> str:
    """Truncate *value* so its UTF-8 byte length does not exceed *max_bytes*."""

    encoded = value.encode("utf-8")
    if len(encoded) <= max_bytes:
        return value

    encoded = encoded[:max_bytes]
    while encoded and (encoded[-1] & 0b11000000) == 0b10000000:
        encoded = encoded[:-1]

    return encoded.decode("utf-8", "ignore")


def safe_identifier(value: str | None) -> str:
    """Return *value* as a filesystem-safe file stem, or ``""`` if nothing survives.

    Leaves room for the ``.pdf`` suffix within ``MAX_FILENAME_BYTES``.
    """

    cleaned = sanitize_filename_component(value)
    return truncate_to_max_bytes(cleaned, MAX_FILENAME_BYTES - len(".pdf")).strip(" .")


def disk_has_room(min_free_mb: int, path: Path) -> bool:
    """Return ``True`` when the filesystem holding *path* has *min_free_mb* free."""

    probe = Path(path)
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    try:
        usage = shutil.disk_usage(probe)
    except OSError:
        return False
    return usage.free >= max(0, min_free_mb) * 1024 * 1024
