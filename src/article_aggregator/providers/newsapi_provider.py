# src/article_aggregator/providers/newsapi_provider.py
"""
News API Provider (headline feed)

Endpoints:
- /v2/top-headlines  (refresh; no date-range support)
- /v2/everything     (search; honors from/to)
"""

import time
from typing import Any, Dict, List, Optional

import httpx

from src.article_aggregator.exceptions import ProviderUnavailableError
from src.article_aggregator.providers.base_provider import BaseNewsProvider
from src.article_aggregator.schemas.article import ArticleSource
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.provider_news import NewsApiArticle
from src.utils.config import settings


class NewsApiProvider(BaseNewsProvider):
    """NewsAPI.org adapter"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        country: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            api_key=api_key if api_key is not None else settings.NEWS_API_KEY,
            base_url=base_url or settings.NEWS_API_URL,
            timeout=timeout or settings.PROVIDER_TIMEOUT_SECONDS,
            client=client,
        )
        self.country = country or settings.NEWS_API_COUNTRY

    @property
    def source(self) -> ArticleSource:
        return ArticleSource.NEWS_API

    def _articles(self, payload: Any) -> Any:
        """
        Unwrap {"status": "ok", "articles": [...]}.
        Errors come back as {"status": "error", "code": ..., "message": ...}.
        """
        data = self._expect_dict(payload, "News API response")
        if data.get("status") == "error":
            raise ProviderUnavailableError(
                self.source, f"{data.get('code', 'error')}: {data.get('message', 'unknown error')}"
            )
        return data.get("articles")

    async def _request(self, endpoint: str, params: Dict[str, Any], context: Dict[str, Any]) -> List[NewsApiArticle]:
        self._log_fetch_start(endpoint, params)
        start_time = time.time()

        payload = await self._get_json(endpoint, params, headers={"X-Api-Key": self.api_key})
        items = self._parse_items(self._articles(payload), NewsApiArticle, context)

        self._log_fetch_complete(endpoint, len(items), start_time)
        return items

    async def fetch_latest(self) -> List[NewsApiArticle]:
        params = {
            "country": self.country,
            "pageSize": settings.HEADLINE_PAGE_SIZE,
            "page": 1,
        }
        return await self._request(
            "top-headlines", params, {"requested_category": None, "query": None}
        )

    async def search_by_filter(self, article_filter: ArticleFilter) -> List[NewsApiArticle]:
        """Full-text search; category is recorded on the results, not sent"""
        params = {
            "q": article_filter.search,
            "from": article_filter.from_date.isoformat() if article_filter.from_date else None,
            "to": article_filter.to_date.isoformat() if article_filter.to_date else None,
            "sortBy": "publishedAt",
            "pageSize": settings.SEARCH_PAGE_SIZE,
            "page": 1,
        }
        context = {
            "requested_category": article_filter.category,
            "query": article_filter.search,
        }
        return await self._request("everything", params, context)
