"""Logging setup shared by the command line jobs."""
from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path

DEFAULT_LOG_DIR = "storage/logs"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def job_log_file(job_name: str, *, now: datetime | None = None) -> Path | None:
    """Return the log file for ``job_name`` under ``KDPN_LOG_DIR``.

    Setting ``KDPN_LOG_DIR`` to an empty string disables file logging.
    """

    log_dir = os.getenv("KDPN_LOG_DIR", DEFAULT_LOG_DIR)
    if not log_dir.strip():
        return None
    timestamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return Path(log_dir) / f"{job_name}_{timestamp}.log"


def configure_logging(job_name: str, *, level: str | None = None, now: datetime | None = None) -> Path | None:
    """Route root logging to stderr and the job's log file.

    ``level`` falls back to ``LOG_LEVEL`` and then ``INFO``. Returns the log
    file in use, or ``None`` when file logging is disabled.
    """

    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    desired_level = logging.getLevelName(level_name)
    if not isinstance(desired_level, int):
        desired_level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    log_file = job_log_file(job_name, now=now)
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=desired_level, format=LOG_FORMAT, handlers=handlers, force=True)
    return log_file


__all__ = ["DEFAULT_LOG_DIR", "configure_logging", "job_log_file"]
