# src/article_aggregator/providers/guardian_provider.py
"""
The Guardian Provider (keyword search)

Endpoint: /search on the Content API, for both refresh and search.
"""

import time
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

from src.article_aggregator.exceptions import (
    ProviderMalformedResponseError,
    ProviderUnavailableError,
)
from src.article_aggregator.providers.base_provider import BaseNewsProvider
from src.article_aggregator.schemas.article import ArticleSource
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.provider_news import GuardianContentItem
from src.utils.config import settings


SHOW_FIELDS = "headline,trailText,byline,shortUrl,thumbnail"
SHOW_TAGS = "contributor,keyword"


def section_slug(category: str) -> str:
    """Guardian section ids are lowercase and hyphenated ("US news" -> "us-news")"""
    return "-".join(category.lower().split())


class GuardianProvider(BaseNewsProvider):
    """Guardian Open Platform adapter"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            api_key=api_key if api_key is not None else settings.GUARDIAN_API_KEY,
            base_url=base_url or settings.GUARDIAN_API_URL,
            timeout=timeout or settings.PROVIDER_TIMEOUT_SECONDS,
            client=client,
        )

    @property
    def source(self) -> ArticleSource:
        return ArticleSource.GUARDIAN

    def _results(self, payload: Any) -> Any:
        """Unwrap {"response": {"status": "ok", "results": [...]}}"""
        data = self._expect_dict(payload, "Guardian response")
        response = data.get("response")
        if not isinstance(response, dict):
            raise ProviderMalformedResponseError(self.source, "Missing 'response' object")
        if response.get("status") != "ok":
            raise ProviderUnavailableError(
                self.source, f"status={response.get('status')}: {response.get('message', 'unknown error')}"
            )
        return response.get("results")

    async def _search(self, params: Dict[str, Any], operation: str) -> List[GuardianContentItem]:
        params = {
            **params,
            "show-fields": SHOW_FIELDS,
            "show-tags": SHOW_TAGS,
            "order-by": "newest",
        }
        self._log_fetch_start(operation, params)
        start_time = time.time()

        payload = await self._get_json("search", {**params, "api-key": self.api_key})
        items = self._parse_items(self._results(payload), GuardianContentItem)

        self._log_fetch_complete(operation, len(items), start_time)
        return items

    async def fetch_latest(self) -> List[GuardianContentItem]:
        today = date.today()
        params = {
            "from-date": (today - timedelta(days=settings.GUARDIAN_LATEST_LOOKBACK_DAYS)).isoformat(),
            "to-date": today.isoformat(),
            "page-size": settings.HEADLINE_PAGE_SIZE,
        }
        return await self._search(params, "latest")

    async def search_by_filter(self, article_filter: ArticleFilter) -> List[GuardianContentItem]:
        today = date.today()
        from_date = article_filter.from_date or today - timedelta(days=settings.GUARDIAN_SEARCH_LOOKBACK_DAYS)
        to_date = article_filter.to_date or today

        params = {
            "q": article_filter.search or article_filter.category,
            "section": section_slug(article_filter.category) if article_filter.category else None,
            "from-date": from_date.isoformat(),
            "to-date": to_date.isoformat(),
            "page-size": settings.SEARCH_PAGE_SIZE,
        }
        return await self._search(params, "search")
