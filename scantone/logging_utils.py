from __future__ import annotations

import logging
import os
import traceback
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

_LOGGER = logging.getLogger("scantone.logging")
LOG_DIR_ENV = "SCANTONE_LOG_DIR"
DEBUG_ENV = "SCANTONE_DEBUG"
LOG_FILE = "scantone.log"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# tag on handlers installed here so a reconfigure only replaces our own
_OWNED = "_scantone_owned"


def get_log_dir() -> Path:
    configured = os.environ.get(LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "scantone" / "logs"


def get_log_path(log_dir: Path | None = None) -> Path:
    return (log_dir or get_log_dir()) / LOG_FILE


def _owned_handlers(logger: logging.Logger) -> list[logging.Handler]:
    return [handler for handler in logger.handlers if getattr(handler, _OWNED, False)]


def configure_logging(
    *,
    level: int | None = None,
    log_dir: Path | None = None,
    console: bool = True,
    force: bool = False,
) -> Path | None:
    """Route ``scantone.*`` records to a rich console and a log file.

    The console level defaults to INFO, or DEBUG when ``SCANTONE_DEBUG`` is
    set; the file always receives DEBUG. Returns the log file path, or None
    when the file could not be opened. Importing the package installs
    nothing; applications call this once.
    """

    logger = logging.getLogger("scantone")
    existing = _owned_handlers(logger)
    if existing and not force:
        files = [h for h in existing if isinstance(h, logging.FileHandler)]
        return Path(files[0].baseFilename) if files else None
    for handler in existing:
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)
    if console:
        if level is None:
            level = logging.DEBUG if os.environ.get(DEBUG_ENV) else logging.INFO
        console_handler = RichHandler(
            console=Console(stderr=True),
            level=level,
            show_path=False,
            rich_tracebacks=True,
        )
        setattr(console_handler, _OWNED, True)
        logger.addHandler(console_handler)

    path = get_log_path(log_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
    except OSError as exc:
        _LOGGER.warning("Failed to configure file logging at %s: %s", path, exc, exc_info=True)
        return None
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATE_FORMAT))
    setattr(file_handler, _OWNED, True)
    logger.addHandler(file_handler)
    return path


def log_exception(
    context: str, exc: BaseException, *, log_dir: Path | None = None
) -> Path | None:
    """Append ``exc`` and its traceback to the log file; never raises."""

    path = get_log_path(log_dir)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{datetime.now().isoformat()}] {context} failed: ")
            handle.write(f"{type(exc).__name__}: {exc}\n")
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=handle)
            handle.write("\n")
    except OSError as log_exc:
        _LOGGER.warning("Failed to write log file: %s", log_exc, exc_info=True)
        return None
    return path
