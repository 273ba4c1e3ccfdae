"""
Shared fixtures: in-memory article store, article factory, scripted providers.
"""

import os
import sys
import asyncio
from datetime import datetime
from typing import List, Optional

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Set env before importing any src module
_test_envs = {
    "DATABASE_URL": "sqlite://",
    "LOG_FILE_ENABLED": "false",
    "LOG_CONSOLE": "false",
    "NEWS_API_KEY": "",
    "GUARDIAN_API_KEY": "",
    "NYT_API_KEY": "",
}
for k, v in _test_envs.items():
    os.environ[k] = v

from src.article_aggregator.exceptions import ProviderError, ProviderUnavailableError
from src.article_aggregator.providers.base_provider import BaseNewsProvider
from src.article_aggregator.schemas.article import ArticleSource, CanonicalArticle
from src.article_aggregator.schemas.filter import ArticleFilter
from src.database.base_connection import SQLAlchemyConnection
from src.database.repository.article_repository import ArticleStore


class ScriptedProvider(BaseNewsProvider):
    """
    Provider whose items are already canonical articles.

    Counts calls so tests can assert that every provider was attempted.
    """

    def __init__(
        self,
        source: ArticleSource,
        latest: Optional[List[CanonicalArticle]] = None,
        results: Optional[List[CanonicalArticle]] = None,
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ):
        super().__init__(api_key="test", base_url="http://provider.test")
        self._source = source
        self.latest = latest or []
        self.results = results or []
        self.error = error
        self.delay = delay
        self.fetch_calls = 0
        self.search_calls = 0
        self.last_filter: Optional[ArticleFilter] = None

    @property
    def source(self) -> ArticleSource:
        return self._source

    async def _respond(self, items):
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return list(items)

    async def fetch_latest(self):
        self.fetch_calls += 1
        return await self._respond(self.latest)

    async def search_by_filter(self, article_filter):
        self.search_calls += 1
        self.last_filter = article_filter
        return await self._respond(self.results)

    def normalize(self, item):
        return item


@pytest.fixture
def make_article():
    """Factory for canonical articles"""
    counter = {"n": 0}

    def _make(
        url: Optional[str] = None,
        title: str = "Election night live",
        source: ArticleSource = ArticleSource.NEWS_API,
        published_at: datetime = datetime(2024, 3, 1, 10, 0, 0),
        **overrides,
    ) -> CanonicalArticle:
        counter["n"] += 1
        return CanonicalArticle(
            url=url or f"https://news.example.com/{counter['n']}",
            title=title,
            source=source,
            published_at=published_at,
            **overrides,
        )

    return _make


@pytest.fixture
def provider_factory():
    """Factory for ScriptedProvider"""
    return ScriptedProvider


@pytest.fixture
def provider_error():
    """Build the error a failing provider raises"""
    def _make(source: ArticleSource, message: str = "HTTP 503 from search") -> ProviderError:
        return ProviderUnavailableError(source, message)

    return _make


@pytest.fixture
def db():
    connection = SQLAlchemyConnection(database_url="sqlite://")
    connection.create_tables()
    yield connection
    connection.dispose()


@pytest.fixture
def store(db):
    return ArticleStore(db)
