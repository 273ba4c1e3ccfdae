# src/article_aggregator/schemas/provider_news.py
"""
Provider Response Models

- News API: /v2/top-headlines, /v2/everything
- The Guardian: /search
- New York Times: /mostpopular/v2/viewed/{period}.json, /search/v2/articlesearch.json

Item models keep the provider's own field names (via aliases) and carry the
request context the normalizer needs (requested category, query).
Dates stay raw; the normalizer owns date parsing.
"""

from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProviderItem(BaseModel):
    """Base for provider-native items"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("url", "title", mode="before", check_fields=False)
    @classmethod
    def require_text(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("must be a non-empty string")
        return str(v).strip()


# ============================================================================
# NEWS API
# ============================================================================

class NewsApiSourceRef(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None


class NewsApiArticle(ProviderItem):
    """
    Article from News API

    Example:
    {
        "source": {"id": "cnn", "name": "CNN"},
        "author": "Jane Doe",
        "title": "Election results ...",
        "description": "...",
        "url": "https://...",
        "urlToImage": "https://...",
        "publishedAt": "2024-03-01T10:00:00Z",
        "content": "..."
    }
    """
    source: Optional[NewsApiSourceRef] = None
    author: Optional[str] = None
    title: str
    description: Optional[str] = None
    url: str
    url_to_image: Optional[str] = Field(None, alias="urlToImage")
    published_at: Optional[str] = Field(None, alias="publishedAt")
    content: Optional[str] = None

    # Request context
    requested_category: Optional[str] = None
    query: Optional[str] = None

    @field_validator("url")
    @classmethod
    def reject_removed(cls, v: str) -> str:
        # News API replaces withdrawn articles with this placeholder
        if v.rstrip("/") == "https://removed.com":
            raise ValueError("article was removed by the provider")
        return v


# ============================================================================
# THE GUARDIAN
# ============================================================================

class GuardianFields(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    headline: Optional[str] = None
    byline: Optional[str] = None
    trail_text: Optional[str] = Field(None, alias="trailText")
    short_url: Optional[str] = Field(None, alias="shortUrl")
    thumbnail: Optional[str] = None


class GuardianTag(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    type: Optional[str] = None
    web_title: Optional[str] = Field(None, alias="webTitle")


class GuardianContentItem(ProviderItem):
    """
    Content item from The Guardian /search

    Example:
    {
        "id": "us-news/2024/mar/01/...",
        "sectionName": "US news",
        "webPublicationDate": "2024-03-01T10:00:00Z",
        "webTitle": "...",
        "webUrl": "https://www.theguardian.com/...",
        "fields": {"byline": "Jane Doe", "trailText": "..."},
        "tags": [{"type": "contributor", "webTitle": "Jane Doe"}, {"type": "keyword", "webTitle": "Elections"}],
        "pillarName": "News"
    }
    """
    id: Optional[str] = None
    title: str = Field(..., alias="webTitle")
    url: str = Field(..., alias="webUrl")
    section_id: Optional[str] = Field(None, alias="sectionId")
    section_name: Optional[str] = Field(None, alias="sectionName")
    web_publication_date: Optional[str] = Field(None, alias="webPublicationDate")
    pillar_name: Optional[str] = Field(None, alias="pillarName")
    fields: Optional[GuardianFields] = None
    tags: List[GuardianTag] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def tags_list(cls, v):
        return v or []


# ============================================================================
# NEW YORK TIMES
# ============================================================================

class NytPopularArticle(ProviderItem):
    """
    Most-viewed article from /mostpopular/v2/viewed/{period}.json

    des_facet is "" instead of [] when the article has no descriptors.
    """
    url: str
    title: str
    byline: Optional[str] = None
    abstract: Optional[str] = None
    section: Optional[str] = None
    published_date: Optional[str] = None
    des_facet: List[str] = Field(default_factory=list)

    @field_validator("des_facet", mode="before")
    @classmethod
    def facet_list(cls, v):
        if not v:
            return []
        if isinstance(v, str):
            return [v]
        return v


class NytHeadline(BaseModel):
    model_config = ConfigDict(extra="ignore")

    main: Optional[str] = None


class NytByline(BaseModel):
    model_config = ConfigDict(extra="ignore")

    original: Optional[str] = None


class NytKeyword(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None
    value: Optional[str] = None
    rank: Optional[int] = None


class NytSearchDoc(ProviderItem):
    """Document from /search/v2/articlesearch.json (response.docs[])"""
    url: str = Field(..., alias="web_url")
    headline: Optional[NytHeadline] = None
    byline: Optional[NytByline] = None
    snippet: Optional[str] = None
    abstract: Optional[str] = None
    section_name: Optional[str] = None
    pub_date: Optional[Any] = None
    keywords: List[NytKeyword] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def keywords_list(cls, v):
        return v or []


NytArticle = Union[NytPopularArticle, NytSearchDoc]
