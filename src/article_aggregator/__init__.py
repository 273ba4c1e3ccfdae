"""
Store ──(empty?)──┐
News API ─────────┤
The Guardian ─────┼→ Normalize → Merge → Upsert → Sort → Author filter → Paginate
New York Times ───┘
"""
from src.article_aggregator.exceptions import (
    NewsAggregatorError,
    ProviderError,
    ProviderUnavailableError,
    ProviderMalformedResponseError,
    StoreUnavailableError,
    InvalidFilterError,
)
from src.article_aggregator.schemas.article import ArticleSource, CanonicalArticle
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.page import Page

from src.article_aggregator.services.aggregator_service import NewsAggregatorService
from src.article_aggregator.services.paginator import paginate
from src.article_aggregator.services.normalizer import parse_published_at

from src.article_aggregator.providers.newsapi_provider import NewsApiProvider
from src.article_aggregator.providers.guardian_provider import GuardianProvider
from src.article_aggregator.providers.nyt_provider import NytProvider

__version__ = "1.0.0"
__all__ = [
    # Errors
    "NewsAggregatorError",
    "ProviderError",
    "ProviderUnavailableError",
    "ProviderMalformedResponseError",
    "StoreUnavailableError",
    "InvalidFilterError",
    # Schemas
    "ArticleSource",
    "CanonicalArticle",
    "ArticleFilter",
    "Page",
    # Services
    "NewsAggregatorService",
    "paginate",
    "parse_published_at",
    # Providers
    "NewsApiProvider",
    "GuardianProvider",
    "NytProvider",
]
