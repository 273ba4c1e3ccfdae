# src/article_aggregator/providers/base_provider.py
"""
Provider Adapter base

Every provider exposes the same capability:
- fetch_latest(): latest headlines for the scheduled refresh
- search_by_filter(filter): provider-side search for the live fallback
- normalize(item): provider-native item -> CanonicalArticle

Adapters raise only ProviderError subclasses and never write to the store.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Type

import httpx
from pydantic import ValidationError

from src.article_aggregator.exceptions import (
    ProviderMalformedResponseError,
    ProviderUnavailableError,
)
from src.article_aggregator.schemas.article import ArticleSource, CanonicalArticle
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.provider_news import ProviderItem
from src.article_aggregator.services.normalizer import normalize


class BaseNewsProvider(ABC):
    """
    Abstract base class for news providers.

    Subclasses implement the two fetch paths; HTTP client handling, error
    translation and per-item validation live here.
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Args:
            api_key: Provider credential; calls fail while it is empty
            base_url: API root without trailing slash
            timeout: Request timeout in seconds
            client: Shared client (tests inject one with a mock transport)
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.api_key = api_key or ""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    @property
    @abstractmethod
    def source(self) -> ArticleSource:
        """Return the provider identifier"""
        pass

    @abstractmethod
    async def fetch_latest(self) -> List[ProviderItem]:
        """Fetch the provider's latest headlines"""
        pass

    @abstractmethod
    async def search_by_filter(self, article_filter: ArticleFilter) -> List[ProviderItem]:
        """
        Search the provider using whichever filter fields its API supports.

        Args:
            article_filter: Validated inbound filter

        Returns:
            Provider-native items
        """
        pass

    def normalize(self, item: ProviderItem) -> CanonicalArticle:
        return normalize(self.source, item)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client"""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    async def close(self):
        """Close HTTP client if this provider created it"""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def _get_json(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET base_url/path and decode JSON.

        Raises:
            ProviderUnavailableError: missing key, transport error, non-2xx
            ProviderMalformedResponseError: body is not JSON
        """
        if not self.api_key:
            raise ProviderUnavailableError(self.source, "API key is not configured")

        url = f"{self.base_url}/{path.lstrip('/')}"
        # Drop unset params so providers do not see empty filters
        clean_params = {k: v for k, v in (params or {}).items() if v is not None and v != ""}

        try:
            client = await self._get_client()
            response = await client.get(url, params=clean_params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ProviderUnavailableError(
                self.source, f"HTTP {e.response.status_code} from {path}"
            ) from e
        except httpx.RequestError as e:
            raise ProviderUnavailableError(
                self.source, f"Request error on {path}: {type(e).__name__}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise ProviderMalformedResponseError(self.source, f"Non-JSON body from {path}") from e

    # ------------------------------------------------------------------
    # Payload helpers
    # ------------------------------------------------------------------

    def _expect_dict(self, payload: Any, what: str) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            raise ProviderMalformedResponseError(
                self.source, f"Expected an object for {what}, got {type(payload).__name__}"
            )
        return payload

    def _parse_items(
        self,
        raw_items: Any,
        model: Type[ProviderItem],
        context: Optional[Dict[str, Any]] = None,
    ) -> List[ProviderItem]:
        """
        Validate raw items one by one; a bad item is skipped, a non-list
        payload fails the whole call.
        """
        if raw_items is None:
            return []
        if not isinstance(raw_items, list):
            raise ProviderMalformedResponseError(
                self.source, f"Expected a list of articles, got {type(raw_items).__name__}"
            )

        items: List[ProviderItem] = []
        for raw in raw_items:
            if not isinstance(raw, dict):
                self.logger.warning(f"[{self.source.value}] Skipping non-object item")
                continue
            try:
                items.append(model.model_validate({**raw, **(context or {})}))
            except ValidationError as e:
                self.logger.warning(
                    f"[{self.source.value}] Skipping item {raw.get('url') or raw.get('webUrl') or raw.get('web_url')}: "
                    f"{e.error_count()} validation error(s)"
                )
        return items

    # ------------------------------------------------------------------
    # Logging
    # ------------------------------------------------------------------

    def _log_fetch_start(self, operation: str, params: Optional[Dict[str, Any]] = None):
        shown = {k: v for k, v in (params or {}).items() if "key" not in k.lower()}
        self.logger.info(f"[{self.source.value}] {operation} {shown}")

    def _log_fetch_complete(self, operation: str, count: int, start_time: float):
        elapsed_ms = int((time.time() - start_time) * 1000)
        self.logger.info(f"[{self.source.value}] {operation}: {count} articles in {elapsed_ms}ms")
