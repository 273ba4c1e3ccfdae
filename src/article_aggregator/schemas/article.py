# src/article_aggregator/schemas/article.py
"""
Canonical Article Schema
Normalized format that all providers convert to
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_serializer

# Serialized form of published_at
CANONICAL_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_AUTHOR = "Unknown"
DEFAULT_CATEGORY = "General"


class ArticleSource(str, Enum):
    """News data providers, valued by the names surfaced to callers"""
    NEWS_API = "News API"
    GUARDIAN = "The Guardian"
    NYT = "New York Times API"


# Fixed merge order, also the tie-break order for equal published_at
SOURCE_ORDER: List[ArticleSource] = [
    ArticleSource.NEWS_API,
    ArticleSource.GUARDIAN,
    ArticleSource.NYT,
]


class CanonicalArticle(BaseModel):
    """
    Canonical article record.

    url is the identity: every write is an upsert keyed on it.
    source is set by the adapter path that produced the record and is never
    reassigned afterwards.
    """
    url: str = Field(..., min_length=1, description="Original article URL, primary key")
    title: str = Field(..., description="Headline")
    author: str = Field(default=DEFAULT_AUTHOR, description="Byline")
    description: Optional[str] = Field(None, description="Summary/snippet")
    source: ArticleSource = Field(..., description="Provider that produced this record")
    category: str = Field(default=DEFAULT_CATEGORY, description="Section or category")
    tags: List[str] = Field(default_factory=list, description="Ordered tags, may repeat")
    published_at: datetime = Field(..., description="Naive UTC, whole seconds")

    @field_serializer("published_at")
    def serialize_published_at(self, value: datetime) -> str:
        return value.strftime(CANONICAL_DATETIME_FORMAT)

    @field_serializer("source")
    def serialize_source(self, value: ArticleSource) -> str:
        return value.value
