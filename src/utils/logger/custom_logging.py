"""
Custom Logging - Bridge to the category logging system
======================================================

Usage:
    from src.utils.logger.custom_logging import LoggerMixin

    class ArticleStore(LoggerMixin):
        def upsert(self, article):
            self.logger.info("Upserting %s", article.url)

Loggers are routed by name: provider classes land in logs/provider/,
database classes in logs/store/, everything else in logs/app/.
"""

import logging
from typing import Optional

from src.core.logging import get_logger as _get_category_logger
from src.core.logging.handlers import detect_category


class LogHandler(object):
    """Hands out loggers wired to the category logging system."""

    def get_logger(self, logger_name: str, category: Optional[str] = None) -> logging.Logger:
        """
        Args:
            logger_name: Name of the logger (usually __name__)
            category: Force a specific category (app, provider, store)
        """
        if category is None and detect_category(logger_name) != "app":
            category = detect_category(logger_name)
        return _get_category_logger(logger_name, category=category)


class LoggerMixin:
    """
    Mixin class that provides a logger attribute named module.Class.

    Example:
        class FetchNewsJob(LoggerMixin):
            def __init__(self):
                super().__init__()
                self.logger.info("Job created")
    """

    def __init__(self) -> None:
        logger_name = f"{self.__class__.__module__}.{self.__class__.__name__}"
        self.logger = LogHandler().get_logger(logger_name)


def get_logger(name: str, category: Optional[str] = None) -> logging.Logger:
    """Quick function to get a configured logger."""
    return LogHandler().get_logger(name, category)
