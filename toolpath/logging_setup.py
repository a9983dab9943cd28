"""
App-layer JSONL logging bootstrap.
Installs a single canonical JSONL sink early in CLI startup.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

LOG_PATH_ENV = "TOOLPATH_LOG_PATH"
LOG_LEVEL_ENV = "TOOLPATH_LOG_LEVEL"
DEFAULT_PATH = "./toolpath.log.jsonl"

# Attributes every LogRecord carries; anything else came in through ``extra=``
_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def default_log_path() -> Path:
    """Log file used when none is given: $TOOLPATH_LOG_PATH or ./toolpath.log.jsonl."""
    return Path(os.environ.get(LOG_PATH_ENV) or DEFAULT_PATH)


class JsonlHandler(logging.Handler):
    """Append one JSON object per record."""

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        payload = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                payload.setdefault(key, value)
        return payload

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False, default=str)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | None = None, level: str | None = None) -> Path:
    """Attach the JSONL sink to the root logger, replacing any earlier one.

    Returns:
        The log file path in use.
    """
    log_path = Path(path) if path else default_log_path()
    level = (level or os.environ.get(LOG_LEVEL_ENV) or "INFO").upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
    handler = JsonlHandler(log_path)
    root.addHandler(handler)
    return handler.path
