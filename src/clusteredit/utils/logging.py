"""Log file and console handlers for the cluster editor.

The log file always records the editor's own ``clusteredit.*`` loggers at
DEBUG so a failed submission can be diagnosed after the dialog is gone; the
console follows the level chosen on the command line. Request lines from the
HTTP stack are only kept when debugging.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

__all__ = ["setup_logging", "LOG_FILE_NAME"]

LOG_FILE_NAME = "clusteredit.log"
_LOG_DIR_ENV = "CLUSTEREDIT_LOG_DIR"
_PACKAGE_LOGGER = "clusteredit"
_HTTP_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")
_LOOP_LOGGERS: tuple[str, ...] = ("asyncio", "qasync")
_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_active_path: Path | None = None


def setup_logging(
    debug: bool = False,
    *,
    log_dir: Path | str | None = None,
    console: bool = True,
    max_bytes: int = 1_000_000,
    backup_count: int = 3,
    force: bool = False,
) -> Path:
    """Install the editor's handlers on the root logger and return the log file path.

    A second call is ignored unless ``force`` is set, so the launcher can
    raise the level once the settings file has been read.
    """

    global _active_path
    if _active_path is not None and not force:
        return _active_path

    directory = Path(log_dir or os.environ.get(_LOG_DIR_ENV) or Path.home() / ".clusteredit" / "logs").expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / LOG_FILE_NAME
    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
    console_level = logging.DEBUG if debug else logging.INFO

    file_handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [file_handler]

    if console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(console_level)
        console_handler.setFormatter(formatter)
        handlers.append(console_handler)

    # root stays at INFO; only the editor's own loggers go to DEBUG in the file
    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)
    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG)
    for name in _HTTP_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if debug else logging.WARNING)
    for name in _LOOP_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _active_path = path
    return path
