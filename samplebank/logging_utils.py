from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

_LOGGER = logging.getLogger("samplebank.logging")
_PACKAGE_LOGGER = "samplebank"
_LOG_DIR_ENV = "SAMPLEBANK_LOG_DIR"
_DEBUG_ENV = "SAMPLEBANK_DEBUG"
_LOG_FILE = "samplebank.log"
_CONSOLE_FORMAT = "%(level_prefix)s %(message)s"
_FILE_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
_FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_LEVEL_PREFIXES = {
    logging.DEBUG: "🐛",
    logging.INFO: "🎹",
    logging.WARNING: "⚠️",
    logging.ERROR: "❌",
    logging.CRITICAL: "💥",
}
_configured_path: Path | None = None
_configured = False


def debug_enabled() -> bool:
    return bool(os.environ.get(_DEBUG_ENV))


def get_log_dir() -> Path:
    configured = os.environ.get(_LOG_DIR_ENV)
    if configured:
        return Path(configured).expanduser()
    return Path.home() / ".cache" / "samplebank" / "logs"


def get_log_path() -> Path:
    return get_log_dir() / _LOG_FILE


class _ConsoleFormatter(logging.Formatter):
    """One line per record.

    Tracebacks go to the log file only; the CLI error panel prints them on the
    console under SAMPLEBANK_DEBUG.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.exc_info or record.exc_text:
            record = logging.makeLogRecord(record.__dict__)
            record.exc_info = None
            record.exc_text = None
        record.level_prefix = _LEVEL_PREFIXES.get(record.levelno, "")
        return super().format(record)


def _console_handler(debug: bool) -> logging.Handler:
    # Per-command and per-sample records are DEBUG: a full build emits tens of
    # thousands of them, so the console only shows them when debugging.
    handler = logging.StreamHandler(stream=sys.__stderr__)
    handler.setLevel(logging.DEBUG if debug else logging.INFO)
    handler.setFormatter(_ConsoleFormatter(_CONSOLE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATE_FORMAT))
    return handler


def configure_logging(*, force: bool = False) -> Path | None:
    """Attach the console and file handlers to the ``samplebank`` logger.

    Idempotent unless ``force`` is set. Returns the log file path, or None
    when the file could not be opened (console logging still works).
    """
    global _configured, _configured_path
    if _configured and not force:
        return _configured_path

    logger = logging.getLogger(_PACKAGE_LOGGER)
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.addHandler(_console_handler(debug_enabled()))
    _configured_path = None
    path = get_log_path()
    try:
        logger.addHandler(_file_handler(path))
        _configured_path = path
    except OSError as exc:
        _LOGGER.warning("File logging disabled (%s): %s", path, exc)

    # Allow test harness handlers (caplog) to capture records.
    logger.propagate = True
    _configured = True
    return _configured_path
