"""
Log Handlers
============

- CategoryFileHandler: {LOG_DIR}/{category}/{category}_YYYY-MM-DD.log, new file at midnight
- CategoryRouter: sends each record to the file of its category (by logger name)
- Error mirror: every ERROR/CRITICAL also lands in error/
"""

import logging
from datetime import datetime, timedelta
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Dict

from src.core.logging.formatters import FileFormatter, JsonFormatter


CATEGORIES = ["app", "provider", "store", "error"]

PROVIDER_KEYWORDS = ["provider", "newsapi", "guardian", "nyt", "httpx"]
STORE_KEYWORDS = ["store", "database", "repository", "sqlalchemy"]


def detect_category(logger_name: str) -> str:
    """Category of a logger, derived from its name"""
    name_lower = logger_name.lower()
    if any(kw in name_lower for kw in PROVIDER_KEYWORDS):
        return "provider"
    if any(kw in name_lower for kw in STORE_KEYWORDS):
        return "store"
    return "app"


def _dated_path(log_dir: Path, category: str, day: datetime) -> Path:
    return log_dir / category / f"{category}_{day.strftime('%Y-%m-%d')}.log"


def cleanup_old_logs(log_dir: Path, retention_days: int) -> int:
    """Delete category files older than retention_days; returns how many"""
    cutoff = datetime.now() - timedelta(days=retention_days)
    deleted = 0

    for category in CATEGORIES:
        for log_file in (log_dir / category).glob(f"{category}_*.log"):
            try:
                day = datetime.strptime(log_file.stem.rsplit("_", 1)[-1], "%Y-%m-%d")
            except ValueError:
                continue
            if day < cutoff:
                log_file.unlink(missing_ok=True)
                deleted += 1

    return deleted


class CategoryFileHandler(TimedRotatingFileHandler):
    """One dated file per day instead of the stdlib's .1/.2 suffixes"""

    def __init__(self, log_dir: Path, category: str, retention_days: int, use_json: bool = False):
        self.log_dir = log_dir
        self.category = category
        self.retention_days = retention_days

        path = _dated_path(log_dir, category, datetime.now())
        path.parent.mkdir(parents=True, exist_ok=True)
        super().__init__(filename=str(path), when="midnight", encoding="utf-8", delay=True)
        self.setFormatter(JsonFormatter() if use_json else FileFormatter())

    def doRollover(self):
        if self.stream:
            self.stream.close()
            self.stream = None

        self.baseFilename = str(_dated_path(self.log_dir, self.category, datetime.now()))
        self.rolloverAt = self.computeRollover(int(datetime.now().timestamp()))
        cleanup_old_logs(self.log_dir, self.retention_days)


class CategoryRouter(logging.Handler):
    """
    Root-level handler so that plain logging.getLogger(...) loggers are
    routed too; category handlers are opened on first use.
    """

    def __init__(self, log_dir: Path, retention_days: int, use_json: bool = False):
        super().__init__(logging.DEBUG)
        self.log_dir = log_dir
        self.retention_days = retention_days
        self.use_json = use_json
        self._handlers: Dict[str, CategoryFileHandler] = {}

    def _handler_for(self, category: str) -> CategoryFileHandler:
        if category not in self._handlers:
            self._handlers[category] = CategoryFileHandler(
                self.log_dir, category, self.retention_days, self.use_json
            )
        return self._handlers[category]

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._handler_for(detect_category(record.name)).emit(record)
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        for handler in self._handlers.values():
            handler.close()
        self._handlers.clear()
        super().close()


def create_error_handler(log_dir: Path, retention_days: int, use_json: bool = False) -> CategoryFileHandler:
    handler = CategoryFileHandler(log_dir, "error", retention_days, use_json)
    handler.setLevel(logging.ERROR)
    return handler
