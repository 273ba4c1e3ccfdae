# src/article_aggregator/services/aggregator_service.py
"""
News Aggregator Service
Orchestrates the provider adapters, the normalizer and the article store

fetch_all():  every provider.fetch_latest ─┐
                                            ├→ normalize → upsert       (AND: all must succeed)
search():     store page ── empty? ─→ every provider.search_by_filter ─┐
                                            ├→ normalize → merge → upsert → sort → author filter → paginate
                                                                        (OR: failures contribute nothing)
"""

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from src.core.logging import OperationContext
from src.article_aggregator.exceptions import ProviderError, ProviderUnavailableError
from src.article_aggregator.providers.base_provider import BaseNewsProvider
from src.article_aggregator.providers.guardian_provider import GuardianProvider
from src.article_aggregator.providers.newsapi_provider import NewsApiProvider
from src.article_aggregator.providers.nyt_provider import NytProvider
from src.article_aggregator.schemas.article import SOURCE_ORDER, CanonicalArticle
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.page import Page
from src.article_aggregator.schemas.provider_news import ProviderItem
from src.article_aggregator.schemas.result import ProviderResult, all_succeeded, any_succeeded
from src.article_aggregator.services.paginator import paginate
from src.utils.config import settings

if TYPE_CHECKING:
    from src.database.repository.article_repository import ArticleStore

ProviderCall = Callable[[BaseNewsProvider], Awaitable[List[ProviderItem]]]


def build_default_providers() -> List[BaseNewsProvider]:
    """One adapter per provider, configured from settings"""
    return [NewsApiProvider(), GuardianProvider(), NytProvider()]


def merge_results(results: Sequence[ProviderResult]) -> List[CanonicalArticle]:
    """
    Concatenate successful results in the given order; a url seen again is
    dropped so the first provider in the order keeps it.
    """
    seen = set()
    merged: List[CanonicalArticle] = []
    for result in results:
        if not result.ok:
            continue
        for article in result.articles:
            if article.url in seen:
                continue
            seen.add(article.url)
            merged.append(article)
    return merged


def sort_by_recency(articles: Sequence[CanonicalArticle]) -> List[CanonicalArticle]:
    """Newest first; equal timestamps keep their merge order (sorted is stable)"""
    return sorted(articles, key=lambda article: article.published_at, reverse=True)


def filter_by_author(articles: Sequence[CanonicalArticle], author: str) -> List[CanonicalArticle]:
    """Case-insensitive author substring match"""
    needle = author.lower()
    return [article for article in articles if needle in (article.author or "").lower()]


class NewsAggregatorService:
    """
    Main service for news aggregation.

    The service depends only on the BaseNewsProvider capability; providers
    are always consulted in the fixed order News API, The Guardian, NYT.
    """

    def __init__(
        self,
        providers: Optional[Sequence[BaseNewsProvider]] = None,
        store: Optional["ArticleStore"] = None,
        deadline_seconds: Optional[float] = None,
    ):
        """
        Args:
            providers: Adapters to use (defaults to all three from settings)
            store: Article store (defaults to the configured database)
            deadline_seconds: Bound on one fan-out; a provider exceeding it fails alone
        """
        self.logger = logging.getLogger(self.__class__.__name__)

        providers = list(providers) if providers is not None else build_default_providers()
        self.providers: List[BaseNewsProvider] = sorted(
            providers, key=lambda provider: SOURCE_ORDER.index(provider.source)
        )
        if store is None:
            from src.database.repository.article_repository import ArticleStore

            store = ArticleStore()
        self.store = store
        self.deadline_seconds = deadline_seconds or settings.FANOUT_DEADLINE_SECONDS

        self.logger.info(
            f"[Aggregator] Providers: {[provider.source.value for provider in self.providers]}"
        )

    # ========================================
    # FAN-OUT / JOIN
    # ========================================

    def _normalize_items(self, provider: BaseNewsProvider, items: List[ProviderItem]) -> List[CanonicalArticle]:
        articles = []
        for item in items:
            try:
                articles.append(provider.normalize(item))
            except ValidationError as e:
                self.logger.warning(
                    f"[Aggregator] {provider.source.value}: dropped item during normalization: {e}"
                )
        return articles

    async def _call_provider(
        self,
        provider: BaseNewsProvider,
        call: ProviderCall,
        operation: str,
    ) -> ProviderResult:
        """Run one adapter call and turn its outcome into a ProviderResult"""
        start_time = time.time()
        try:
            items = await asyncio.wait_for(call(provider), timeout=self.deadline_seconds)
        except asyncio.TimeoutError:
            error = ProviderUnavailableError(
                provider.source, f"{operation} exceeded the {self.deadline_seconds}s deadline"
            )
        except ProviderError as e:
            error = e
        else:
            return ProviderResult(
                source=provider.source,
                articles=self._normalize_items(provider, items),
                elapsed_ms=int((time.time() - start_time) * 1000),
            )

        elapsed_ms = int((time.time() - start_time) * 1000)
        self.logger.error(f"[Aggregator] {operation} failed after {elapsed_ms}ms: {error}")
        return ProviderResult(source=provider.source, error=error, elapsed_ms=elapsed_ms)

    async def _fan_out(
        self,
        providers: Sequence[BaseNewsProvider],
        call: ProviderCall,
        operation: str,
    ) -> List[ProviderResult]:
        """
        Call every provider concurrently and join all outcomes.

        Results come back in the order of providers, never completion order.
        """
        outcomes = await asyncio.gather(
            *(self._call_provider(provider, call, operation) for provider in providers),
            return_exceptions=True,
        )

        results: List[ProviderResult] = []
        for provider, outcome in zip(providers, outcomes):
            if isinstance(outcome, ProviderResult):
                results.append(outcome)
                continue
            # Anything that escaped the adapter still only fails that adapter
            self.logger.error(
                f"[Aggregator] {operation} crashed for {provider.source.value}",
                exc_info=outcome,
            )
            results.append(
                ProviderResult(
                    source=provider.source,
                    error=ProviderUnavailableError(
                        provider.source, f"Unexpected {type(outcome).__name__}: {outcome}"
                    ),
                )
            )
        return results

    # ========================================
    # FULL REFRESH
    # ========================================

    async def fetch_all(self) -> bool:
        """
        Refresh the store from every provider's latest headlines.

        Every provider is attempted; the refresh succeeds only if all of them
        did. Store failures are fatal and propagate.

        Returns:
            True when every provider succeeded
        """
        async with OperationContext(prefix="fetch"):
            total_start = time.time()
            results = await self._fan_out(
                self.providers, lambda provider: provider.fetch_latest(), "fetch_latest"
            )

            stored = 0
            for result in results:
                if result.ok and result.articles:
                    stored += self.store.upsert_many(merge_results([result]))

            success = all_succeeded(results)
            failed = [result.source.value for result in results if not result.ok]
            elapsed_ms = int((time.time() - total_start) * 1000)

            if success:
                self.logger.info(f"[Aggregator] Refresh complete: {stored} articles stored in {elapsed_ms}ms")
            else:
                self.logger.error(
                    f"[Aggregator] Refresh incomplete: failed={failed}, {stored} articles stored in {elapsed_ms}ms"
                )
            return success

    # ========================================
    # SEARCH
    # ========================================

    def _select_providers(self, article_filter: ArticleFilter) -> List[BaseNewsProvider]:
        if article_filter.source is None:
            return list(self.providers)
        return [provider for provider in self.providers if provider.source == article_filter.source]

    async def live_search(self, article_filter: ArticleFilter) -> List[CanonicalArticle]:
        """
        Query providers directly, store what they return, and give back the
        merged results newest first (author post-filter applied).
        """
        providers = self._select_providers(article_filter)
        results = await self._fan_out(
            providers, lambda provider: provider.search_by_filter(article_filter), "search_by_filter"
        )

        if results and not any_succeeded(results):
            self.logger.warning("[Aggregator] Every provider failed; live search returns nothing")

        merged = merge_results(results)
        if merged:
            self.store.upsert_many(merged)

        ordered = sort_by_recency(merged)
        if article_filter.author:
            ordered = filter_by_author(ordered, article_filter.author)

        counts: Dict[str, Union[int, str]] = {
            result.source.value: (len(result.articles) if result.ok else "failed") for result in results
        }
        self.logger.info(f"[Aggregator] Live search merged {len(merged)} -> {len(ordered)} articles {counts}")
        return ordered

    async def search(self, article_filter: Union[ArticleFilter, Mapping]) -> Page:
        """
        Answer a filtered query from the store, falling back to a live
        provider search when the store has no match.

        Args:
            article_filter: ArticleFilter or raw parameters (validated first)

        Returns:
            Page of canonical articles

        Raises:
            InvalidFilterError: before any provider or store call
            StoreUnavailableError: the store could not be read or written
        """
        if not isinstance(article_filter, ArticleFilter):
            article_filter = ArticleFilter.from_params(article_filter)

        async with OperationContext(prefix="search"):
            page = self.store.page(article_filter, article_filter.page, article_filter.per_page)
            if page.total > 0:
                self.logger.info(f"[Aggregator] Store hit: {page.total} articles")
                return page

            self.logger.info("[Aggregator] Store miss, falling back to live search")
            articles = await self.live_search(article_filter)
            return paginate(articles, article_filter.page, article_filter.per_page)

    async def close(self):
        """Cleanup resources"""
        for provider in self.providers:
            await provider.close()
