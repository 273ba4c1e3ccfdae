# src/article_aggregator/services/normalizer.py
"""
Normalizer
Maps provider-native items into CanonicalArticle

One pure function per provider, shared by the refresh and search paths,
plus the single date parser every provider goes through.
"""

import re
from datetime import date, datetime, time, timezone
from typing import Any, Callable, Dict, List, Optional

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

from src.article_aggregator.schemas.article import (
    DEFAULT_AUTHOR,
    DEFAULT_CATEGORY,
    ArticleSource,
    CanonicalArticle,
)
from src.article_aggregator.schemas.provider_news import (
    GuardianContentItem,
    NewsApiArticle,
    NytArticle,
    NytPopularArticle,
    NytSearchDoc,
)

NO_DESCRIPTION = "No description available"
NO_TITLE = "No Title"
GUARDIAN_DEFAULT_TAG = "News"

# Digit strings at least this long are epoch timestamps, not YYYYMMDD
_EPOCH_MIN_DIGITS = 9
# Anything above this is milliseconds (year ~5138 in seconds)
_EPOCH_MS_THRESHOLD = 1e11


def _to_canonical(value: datetime) -> datetime:
    """Naive UTC, whole seconds"""
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.replace(microsecond=0)


def _from_epoch(value: float) -> Optional[datetime]:
    if abs(value) > _EPOCH_MS_THRESHOLD:
        value = value / 1000.0
    try:
        return _to_canonical(datetime.fromtimestamp(value, tz=timezone.utc))
    except (OverflowError, OSError, ValueError):
        return None


def parse_published_at(value: Any, now: Optional[datetime] = None) -> datetime:
    """
    Parse any provider date representation into the canonical timestamp.

    Accepts datetime/date objects, ISO-8601, free text ("March 1, 2024"),
    compact YYYYMMDD and epoch seconds or milliseconds. Missing or
    unparseable input resolves to now.

    Args:
        value: Raw date value from the provider
        now: Override for the fallback instant

    Returns:
        Naive UTC datetime truncated to seconds
    """
    fallback = _to_canonical(now or datetime.now(timezone.utc))

    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, datetime):
        return _to_canonical(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        return _from_epoch(value) or fallback

    text = str(value).strip()
    if not text:
        return fallback

    if text.isdigit():
        if len(text) >= _EPOCH_MIN_DIGITS:
            return _from_epoch(int(text)) or fallback
        try:
            return datetime.strptime(text, "%Y%m%d")
        except ValueError:
            return fallback

    try:
        # Missing parts default to January 1st of the fallback year, not today
        return _to_canonical(date_parser.parse(text, default=datetime(fallback.year, 1, 1)))
    except (ValueError, OverflowError):
        return fallback


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = re.sub(r"\s+", " ", value).strip()
    return value or None


def _strip_html(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    return _clean(BeautifulSoup(value, "html.parser").get_text(" ", strip=True))


def _flatten_tags(values: List[Optional[str]]) -> List[str]:
    return [tag for tag in (_clean(v) for v in values) if tag]


# ============================================================================
# PER-PROVIDER NORMALIZERS
# ============================================================================

def normalize_newsapi(item: NewsApiArticle, now: Optional[datetime] = None) -> CanonicalArticle:
    """News API carries no section; category comes from the request"""
    return CanonicalArticle(
        url=item.url,
        title=item.title,
        author=_clean(item.author) or DEFAULT_AUTHOR,
        description=_clean(item.description),
        source=ArticleSource.NEWS_API,
        category=_clean(item.requested_category) or DEFAULT_CATEGORY,
        tags=_flatten_tags([item.query]),
        published_at=parse_published_at(item.published_at, now=now),
    )


def normalize_guardian(item: GuardianContentItem, now: Optional[datetime] = None) -> CanonicalArticle:
    fields = item.fields
    contributors = [t.web_title for t in item.tags if t.type == "contributor"]
    keywords = [t.web_title for t in item.tags if t.type == "keyword"]

    author = _clean(fields.byline) if fields else None
    if not author:
        author = ", ".join(_flatten_tags(contributors)) or DEFAULT_AUTHOR

    description = _strip_html(fields.trail_text) if fields else None

    return CanonicalArticle(
        url=item.url,
        title=item.title,
        author=author,
        description=description or NO_DESCRIPTION,
        source=ArticleSource.GUARDIAN,
        category=_clean(item.section_name) or DEFAULT_CATEGORY,
        tags=[_clean(item.pillar_name) or GUARDIAN_DEFAULT_TAG] + _flatten_tags(keywords),
        published_at=parse_published_at(item.web_publication_date, now=now),
    )


def normalize_nyt(item: NytArticle, now: Optional[datetime] = None) -> CanonicalArticle:
    """Most-viewed items and article-search documents share one mapping"""
    if isinstance(item, NytPopularArticle):
        title = item.title
        author = item.byline
        description = item.abstract
        category = item.section
        tags = item.des_facet
        published = item.published_date
    else:
        title = item.headline.main if item.headline else None
        author = item.byline.original if item.byline else None
        description = item.snippet or item.abstract
        category = item.section_name
        tags = [keyword.value for keyword in item.keywords]
        published = item.pub_date

    return CanonicalArticle(
        url=item.url,
        title=_clean(title) or NO_TITLE,
        author=_clean(author) or DEFAULT_AUTHOR,
        description=_clean(description) or NO_DESCRIPTION,
        source=ArticleSource.NYT,
        category=_clean(category) or DEFAULT_CATEGORY,
        tags=_flatten_tags(tags),
        published_at=parse_published_at(published, now=now),
    )


NORMALIZERS: Dict[ArticleSource, Callable[..., CanonicalArticle]] = {
    ArticleSource.NEWS_API: normalize_newsapi,
    ArticleSource.GUARDIAN: normalize_guardian,
    ArticleSource.NYT: normalize_nyt,
}


def normalize(source: ArticleSource, item: Any, now: Optional[datetime] = None) -> CanonicalArticle:
    """Dispatch to the normalizer owned by source"""
    return NORMALIZERS[source](item, now=now)
