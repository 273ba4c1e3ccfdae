# src/article_aggregator/schemas/result.py
"""
Per-adapter call outcome

Each fan-out collects one ProviderResult per adapter; the AND (refresh) and
OR (search) rules are reductions over that list.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from src.article_aggregator.exceptions import ProviderError
from src.article_aggregator.schemas.article import ArticleSource, CanonicalArticle


@dataclass
class ProviderResult:
    source: ArticleSource
    articles: List[CanonicalArticle] = field(default_factory=list)
    error: Optional[ProviderError] = None
    elapsed_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None


def all_succeeded(results: Sequence[ProviderResult]) -> bool:
    """Refresh rule: complete only when every source is current"""
    return all(result.ok for result in results)


def any_succeeded(results: Sequence[ProviderResult]) -> bool:
    """Search rule: usable when at least one source answered (even with zero rows)"""
    return any(result.ok for result in results)
