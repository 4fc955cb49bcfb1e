"""Logging for scrape runs.

Two sinks hang off the ``heatshop`` logger: a console stream for whoever is
watching the run, and ``logs/heatshop_<YYYYMMDD>.jsonl`` where every record,
including structured scrape events, is kept as one JSON object per line.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

__all__ = [
    "LOG_DIR",
    "JSONLineFormatter",
    "DailyJSONLHandler",
    "setup_logging",
    "get_logger",
    "log_scrape_event",
]

LOG_DIR = Path.cwd() / "logs"
ROOT_LOGGER = "heatshop"

CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}
_RESET = "\033[0m"


class _LevelColorFormatter(logging.Formatter):
    """Colours the level name when the console is a terminal."""

    def __init__(self, use_color: bool):
        super().__init__(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno) if self.use_color else None
        if not color:
            return line
        tag = f"[{record.levelname}]"
        return line.replace(tag, f"[{color}{record.levelname}{_RESET}]", 1)


class JSONLineFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    Records logged through ``log_scrape_event`` carry ``event_type`` and
    ``event_data``; the data keys are merged into the top level.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        event_type = getattr(record, "event_type", None)
        if event_type:
            entry["event_type"] = event_type
            entry.update(getattr(record, "event_data", {}))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class DailyJSONLHandler(logging.Handler):
    """Appends formatted records to ``<prefix>_<YYYYMMDD>.jsonl`` in ``log_dir``."""

    def __init__(self, log_dir: Path, prefix: str = ROOT_LOGGER):
        super().__init__(level=logging.DEBUG)
        log_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir = log_dir
        self.prefix = prefix
        self.setFormatter(JSONLineFormatter())

    @property
    def path(self) -> Path:
        return self.log_dir / f"{self.prefix}_{datetime.now():%Y%m%d}.jsonl"

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = self.format(record)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Configure the ``heatshop`` logger; safe to call more than once.

    The console shows ``level`` and above. The JSONL file, when enabled,
    always receives DEBUG and above.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(min(level, logging.DEBUG) if log_to_file else level)

    if log_to_console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(level)
        console.setFormatter(_LevelColorFormatter(use_color=sys.stdout.isatty()))
        logger.addHandler(console)

    if log_to_file:
        logger.addHandler(DailyJSONLHandler(log_dir or LOG_DIR))

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """``heatshop`` itself, or the ``heatshop.<name>`` child logger."""
    if name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_scrape_event(
    event_type: str,
    data: Dict[str, Any],
    level: int = logging.INFO,
    logger_name: str = ROOT_LOGGER,
) -> None:
    """Log a structured event such as ``category_start`` or ``request_failed``.

    A ``message`` key in ``data`` becomes the log message (the event type is
    used otherwise); the remaining keys are stored with the record.
    """
    logger = get_logger(logger_name)
    if not logger.isEnabledFor(level):
        return

    fields = dict(data)
    message = fields.pop("message", event_type)
    logger.log(level, message, extra={"event_type": event_type, "event_data": fields})
