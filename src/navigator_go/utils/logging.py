"""Logging setup for navigator-go.

The host editor owns the process, so configuration is opt-in: library code
only ever calls :func:`get_logger`, while the CLI (or an embedding host) calls
:func:`setup_logging` once to attach a rotating log file.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import TextIO

__all__ = ["setup_logging", "get_logger", "get_log_path", "level_for", "reset_logging"]

LOG_FILENAME = "navigator-go.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DEFAULT_LOG_DIR = Path.home() / ".navigator-go" / "logs"
_QUIET_LOGGERS: tuple[str, ...] = ("asyncio",)
_LOG_PATH: Path | None = None


def level_for(debug: bool) -> int:
    """Map the ``debug_logging`` flag onto a logging level."""

    return logging.DEBUG if debug else logging.INFO


def setup_logging(
    level: int = logging.INFO,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    stream: TextIO | None = None,
    max_bytes: int = 512_000,
    backup_count: int = 2,
    force: bool = False,
) -> Path:
    """Attach a rotating file handler (and optionally a console handler) to the root logger.

    Repeated calls are no-ops returning the existing log path unless ``force``
    is set, in which case handlers are rebuilt with the new level.
    """

    global _LOG_PATH
    if _LOG_PATH is not None and not force:
        return _LOG_PATH

    directory = _resolve_log_dir(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / LOG_FILENAME

    handlers = _build_handlers(
        log_path,
        level,
        console_stream=(stream or sys.stderr) if console else None,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    logging.basicConfig(level=level, handlers=handlers, force=True)
    logging.captureWarnings(True)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    _LOG_PATH = log_path
    logging.getLogger(__name__).debug("Logging to %s (level=%s)", log_path, logging.getLevelName(level))
    return log_path


def get_logger(name: str) -> logging.Logger:
    """Return a module-specific logger."""

    return logging.getLogger(name)


def get_log_path() -> Path | None:
    """Return the active log file, or ``None`` before :func:`setup_logging` ran."""

    return _LOG_PATH


def reset_logging() -> None:
    """Detach handlers installed by :func:`setup_logging` (used by tests)."""

    global _LOG_PATH
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    _LOG_PATH = None


def _build_handlers(
    log_path: Path,
    level: int,
    *,
    console_stream: TextIO | None,
    max_bytes: int,
    backup_count: int,
) -> list[logging.Handler]:
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    file_handler = logging.handlers.RotatingFileHandler(
        log_path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handlers: list[logging.Handler] = [file_handler]
    if console_stream is not None:
        handlers.append(logging.StreamHandler(console_stream))
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def _resolve_log_dir(log_dir: Path | str | None) -> Path:
    override = os.environ.get("NAVIGATOR_GO_LOG_DIR")
    return Path(log_dir or override or _DEFAULT_LOG_DIR).expanduser()
