"""
Logging Configuration
====================

Driven by Settings (src.utils.config), so .env and environment apply:
LOG_LEVEL, LOG_FORMAT ("text" | "json"), LOG_DIR, LOG_RETENTION_DAYS,
LOG_CONSOLE, LOG_FILE_ENABLED. ENV_STATE=production forces JSON.
"""

import sys
import logging
from pathlib import Path
from typing import Dict, Optional

from src.core.logging.formatters import DevFormatter, JsonFormatter
from src.core.logging.handlers import CategoryRouter, cleanup_old_logs, create_error_handler
from src.utils.config import settings


_configured_loggers: Dict[str, logging.Logger] = {}
_logging_initialized = False

NOISY_LOGGERS = ["httpx", "httpcore", "asyncio", "sqlalchemy.engine", "apscheduler"]


def setup_logging(
    level: Optional[str] = None,
    use_json: Optional[bool] = None,
    console: Optional[bool] = None,
) -> None:
    """
    Attach console and category file handlers to the root logger once.

    Args:
        level: Override LOG_LEVEL
        use_json: Override LOG_FORMAT
        console: Override LOG_CONSOLE
    """
    global _logging_initialized

    if _logging_initialized:
        return

    level_name = (level or settings.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    if use_json is None:
        use_json = settings.LOG_FORMAT.lower() == "json" or settings.ENV_STATE.lower() == "production"
    if console is None:
        console = settings.LOG_CONSOLE

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # handlers filter

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(JsonFormatter() if use_json else DevFormatter(use_colors=sys.stdout.isatty()))
        root_logger.addHandler(console_handler)

    if settings.LOG_FILE_ENABLED:
        log_dir = Path(settings.LOG_DIR)
        root_logger.addHandler(CategoryRouter(log_dir, settings.LOG_RETENTION_DAYS, use_json))
        root_logger.addHandler(create_error_handler(log_dir, settings.LOG_RETENTION_DAYS, use_json))
        cleanup_old_logs(log_dir, settings.LOG_RETENTION_DAYS)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    _logging_initialized = True

    root_logger.info(
        f"Logging initialized: level={level_name}, format={'json' if use_json else 'text'}, "
        f"files={'on' if settings.LOG_FILE_ENABLED else 'off'}"
    )


def get_logger(
    name: Optional[str] = None,
    category: Optional[str] = None,
) -> logging.Logger:
    """
    Get a logger, initializing logging on first use.

    Args:
        name: Logger name, usually __name__ (defaults to "app")
        category: Force a category by prefixing the name (routing is name based)

    Examples:
        get_logger("src.article_aggregator.providers.nyt_provider")  → logs/provider/
        get_logger("refresh", category="store")  → logs/store/
        get_logger()  → logs/app/
    """
    if not _logging_initialized:
        setup_logging()

    name = name or "app"
    if category and category not in name.lower():
        name = f"{category}.{name}"

    if name not in _configured_loggers:
        _configured_loggers[name] = logging.getLogger(name)
    return _configured_loggers[name]


def shutdown_logging() -> None:
    """Flush and close all handlers."""
    global _logging_initialized

    logging.shutdown()
    _configured_loggers.clear()
    _logging_initialized = False
