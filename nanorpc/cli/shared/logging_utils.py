"""Loguru helpers for consistent logging in CLI commands."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}


def configure_console_logging(level: str = "INFO") -> None:
    """Replace loguru's default stderr sink with one at ``level``."""
    stderr_id = _SINK_IDS.pop("stderr", None)
    if stderr_id is None:
        logger.remove()
    else:
        logger.remove(stderr_id)
    _SINK_IDS["stderr"] = logger.add(sys.stderr, level=level.upper())


def ensure_rotating_log_file(path: str | Path, level: str = "INFO") -> Path:
    """Ensure a rotating log sink writing to ``path``."""
    log_path = Path(path).expanduser()
    key = str(log_path)
    if key in _SINK_IDS:
        return log_path
    log_path.parent.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level.upper(),
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[key] = sink_id
    return log_path
