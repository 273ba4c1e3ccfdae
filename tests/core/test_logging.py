"""
Tests for the category logging system.
"""

import json
import logging
from datetime import datetime, timedelta

import pytest

from src.core.logging import OperationContext, get_operation_id
from src.core.logging.formatters import FileFormatter, JsonFormatter
from src.core.logging.handlers import cleanup_old_logs, detect_category


def make_record(name="src.article_aggregator.services.aggregator_service", msg="Store miss"):
    return logging.LogRecord(name, logging.INFO, __file__, 1, msg, None, None)


class TestDetectCategory:

    @pytest.mark.parametrize("name,expected", [
        ("GuardianProvider", "provider"),
        ("src.article_aggregator.providers.nyt_provider", "provider"),
        ("httpx", "provider"),
        ("src.database.repository.article_repository.ArticleStore", "store"),
        ("sqlalchemy.engine.Engine", "store"),
        ("NewsAggregatorService", "app"),
        ("src.jobs.fetch_news_job", "app"),
    ])
    def test_routing(self, name, expected):
        assert detect_category(name) == expected


class TestOperationContext:

    def test_sync_sets_and_clears(self):
        assert get_operation_id() is None
        with OperationContext(prefix="fetch") as ctx:
            assert get_operation_id() == ctx.operation_id
            assert ctx.operation_id.startswith("fetch-")
        assert get_operation_id() is None

    @pytest.mark.asyncio
    async def test_async_explicit_id(self):
        async with OperationContext(operation_id="search-abc"):
            assert get_operation_id() == "search-abc"
        assert get_operation_id() is None

    def test_formatters_include_operation_id(self):
        with OperationContext(operation_id="search-1234"):
            text = FileFormatter().format(make_record())
            payload = json.loads(JsonFormatter().format(make_record()))

        assert "[search-1234] Store miss" in text
        assert payload["operation_id"] == "search-1234"
        assert payload["message"] == "Store miss"


def test_cleanup_old_logs(tmp_path):
    old_day = (datetime.now() - timedelta(days=30)).strftime("%Y-%m-%d")
    new_day = datetime.now().strftime("%Y-%m-%d")
    (tmp_path / "app").mkdir()
    old_file = tmp_path / "app" / f"app_{old_day}.log"
    new_file = tmp_path / "app" / f"app_{new_day}.log"
    old_file.write_text("old")
    new_file.write_text("new")

    assert cleanup_old_logs(tmp_path, retention_days=15) == 1
    assert not old_file.exists()
    assert new_file.exists()
