"""Logging configuration for the site."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable


DEFAULT_LOG_FILENAME = "folio.log"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

ANSI_RESET = "\x1b[0m"
LEVEL_COLORS = {
    logging.DEBUG: "\x1b[36m",
    logging.INFO: "\x1b[32m",
    logging.WARNING: "\x1b[33m",
    logging.ERROR: "\x1b[31m",
    logging.CRITICAL: "\x1b[35m",
}

# Dependency loggers that are only interesting when debugging.
CHATTY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "aiosqlite")
UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def _expired_logs(log_file: Path, retention_days: int) -> Iterable[Path]:
    """Yield rotated siblings of ``log_file`` older than the retention window."""
    cutoff = datetime.now(timezone.utc) - timedelta(days=retention_days)
    for path in log_file.parent.glob(f"{log_file.name}.*"):
        try:
            modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
        except OSError:
            continue
        if modified < cutoff:
            yield path


def purge_rotated_logs(log_file: Path, retention_days: int) -> int:
    """Delete rotated log files past their retention window.

    Args:
        log_file: The active log file; rotated copies share its name as prefix.
        retention_days: Days to keep rotated files. Zero disables purging.

    Returns:
        How many files were deleted.
    """
    if retention_days <= 0:
        return 0

    removed = 0
    for path in list(_expired_logs(log_file, retention_days)):
        try:
            path.unlink()
        except OSError:
            continue
        removed += 1
    return removed


class RetentionFileHandler(RotatingFileHandler):
    """Size-rotating file handler that also prunes old rotations hourly."""

    def __init__(
        self,
        filename: Path,
        max_bytes: int,
        retention_days: int,
        prune_every_seconds: int = 3600,
    ) -> None:
        super().__init__(
            filename,
            maxBytes=max_bytes,
            backupCount=1000,
            encoding="utf-8",
        )
        self._retention_days = retention_days
        self._prune_every = prune_every_seconds
        self._last_prune = 0.0

    def emit(self, record: logging.LogRecord) -> None:
        now = time.time()
        if self._retention_days > 0 and now - self._last_prune >= self._prune_every:
            self._last_prune = now
            purge_rotated_logs(Path(self.baseFilename), self._retention_days)
        super().emit(record)


class LevelColorFormatter(logging.Formatter):
    """Formatter that wraps the level name in an ANSI colour."""

    def __init__(self, fmt: str, use_color: bool = True) -> None:
        super().__init__(fmt)
        self._use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        color = LEVEL_COLORS.get(record.levelno) if self._use_color else None
        if color is None:
            return super().format(record)

        plain = record.levelname
        record.levelname = f"{color}{plain}{ANSI_RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = plain


def _stream_handler(level: int) -> logging.StreamHandler:
    handler = logging.StreamHandler()
    is_tty = getattr(handler.stream, "isatty", lambda: False)()
    handler.setFormatter(LevelColorFormatter(LOG_FORMAT, use_color=is_tty))
    handler.setLevel(level)
    return handler


def configure_logging(
    log_dir: Path,
    log_max_bytes: int,
    log_retention_days: int,
    debug: bool,
    uvicorn_log_level: str = "info",
) -> Path:
    """Send site logs to a rotating file and to stderr.

    Args:
        log_dir: Directory to store log files.
        log_max_bytes: Maximum size of a log file before rotation.
        log_retention_days: Days to keep rotated log files.
        debug: Whether to enable debug-level logging.
        uvicorn_log_level: Log level for uvicorn loggers (default: info).

    Returns:
        The path to the active log file.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / DEFAULT_LOG_FILENAME
    level = logging.DEBUG if debug else logging.INFO

    file_handler = RetentionFileHandler(
        filename=log_file,
        max_bytes=log_max_bytes,
        retention_days=log_retention_days,
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(file_handler)
    root.addHandler(_stream_handler(level))

    chatty_level = logging.INFO if debug else logging.WARNING
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(chatty_level)

    uvicorn_level = getattr(logging, uvicorn_log_level.upper(), logging.INFO)
    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(uvicorn_level)

    removed = purge_rotated_logs(log_file, log_retention_days)
    if removed:
        logging.getLogger(__name__).info(
            "Purged %s old log files from %s", removed, log_dir
        )

    return log_file
