# src/article_aggregator/providers/nyt_provider.py
"""
New York Times Provider (date-ranged query)

Endpoints:
- /mostpopular/v2/viewed/{period}.json  (refresh)
- /search/v2/articlesearch.json         (search; begin_date/end_date as YYYYMMDD)
"""

import time
from typing import Any, List, Optional

import httpx

from src.article_aggregator.exceptions import (
    ProviderMalformedResponseError,
    ProviderUnavailableError,
)
from src.article_aggregator.providers.base_provider import BaseNewsProvider
from src.article_aggregator.schemas.article import ArticleSource
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.provider_news import (
    NytArticle,
    NytPopularArticle,
    NytSearchDoc,
)
from src.utils.config import settings


class NytProvider(BaseNewsProvider):
    """NYT developer API adapter"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        period_days: Optional[int] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(
            api_key=api_key if api_key is not None else settings.NYT_API_KEY,
            base_url=base_url or settings.NYT_API_URL,
            timeout=timeout or settings.PROVIDER_TIMEOUT_SECONDS,
            client=client,
        )
        self.period_days = period_days or settings.NYT_POPULAR_PERIOD_DAYS

    @property
    def source(self) -> ArticleSource:
        return ArticleSource.NYT

    def _check_status(self, payload: Any) -> dict:
        data = self._expect_dict(payload, "NYT response")
        # Gateway errors look like {"fault": {"faultstring": ...}}
        if "fault" in data:
            fault = data["fault"] if isinstance(data["fault"], dict) else {}
            raise ProviderUnavailableError(self.source, fault.get("faultstring", "API fault"))
        if data.get("status") not in (None, "OK"):
            raise ProviderUnavailableError(self.source, f"status={data.get('status')}")
        return data

    async def fetch_latest(self) -> List[NytArticle]:
        endpoint = f"mostpopular/v2/viewed/{self.period_days}.json"
        self._log_fetch_start("most viewed", {"period": self.period_days})
        start_time = time.time()

        payload = await self._get_json(endpoint, {"api-key": self.api_key})
        data = self._check_status(payload)
        items = self._parse_items(data.get("results"), NytPopularArticle)

        self._log_fetch_complete("most viewed", len(items), start_time)
        return items

    async def search_by_filter(self, article_filter: ArticleFilter) -> List[NytArticle]:
        params = {
            "q": article_filter.search,
            "page": 0,
            "sort": "newest",
            "begin_date": article_filter.from_date.strftime("%Y%m%d") if article_filter.from_date else None,
            "end_date": article_filter.to_date.strftime("%Y%m%d") if article_filter.to_date else None,
            "fq": f'section_name:("{article_filter.category}")' if article_filter.category else None,
        }
        self._log_fetch_start("article search", params)
        start_time = time.time()

        payload = await self._get_json("search/v2/articlesearch.json", {**params, "api-key": self.api_key})
        data = self._check_status(payload)
        response = data.get("response")
        if not isinstance(response, dict):
            raise ProviderMalformedResponseError(self.source, "Missing 'response' object")
        items = self._parse_items(response.get("docs"), NytSearchDoc)

        self._log_fetch_complete("article search", len(items), start_time)
        return items
