# src/article_aggregator/schemas/filter.py
"""
Inbound search filter

Example:
{
    "search": "election",
    "category": "Politics",
    "source": "The Guardian",
    "tags": "politics,us news",
    "author": "jane",
    "from": "2024-03-01",
    "to": "2024-03-31",
    "page": 1,
    "per_page": 10
}
"""

from datetime import date, datetime
from typing import Any, List, Mapping, Optional

from dateutil import parser as date_parser
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from src.article_aggregator.exceptions import InvalidFilterError
from src.article_aggregator.schemas.article import ArticleSource
from src.utils.config import settings

# Largest row offset a database can bind (signed 64-bit)
MAX_OFFSET = 2**63 - 1


class ArticleFilter(BaseModel):
    """
    Filter shared by the store query and the live provider search.

    All fields are optional except search. Blank strings count as absent.
    """
    model_config = ConfigDict(populate_by_name=True)

    search: str = Field(..., description="Free text, matched against titles")
    category: Optional[str] = Field(None, description="Exact category/section")
    source: Optional[ArticleSource] = Field(None, description="Restrict to one provider")
    tags: List[str] = Field(default_factory=list, description="Match ANY of these tags")
    author: Optional[str] = Field(None, description="Case-insensitive author substring")
    from_date: Optional[date] = Field(None, alias="from")
    to_date: Optional[date] = Field(None, alias="to")
    page: int = Field(default=1, description="1-based page number")
    per_page: int = Field(default_factory=lambda: settings.DEFAULT_PER_PAGE)

    @field_validator("search", mode="before")
    @classmethod
    def require_search(cls, v):
        if v is None or not str(v).strip():
            raise ValueError("search is required")
        return str(v).strip()

    @field_validator("category", "author", "source", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        """Accept a list or a comma-separated string"""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(tag).strip() for tag in v if str(tag).strip()]

    @field_validator("from_date", "to_date", mode="before")
    @classmethod
    def parse_date(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, date):
            return v
        try:
            return date_parser.parse(str(v)).date()
        except (ValueError, OverflowError) as e:
            raise ValueError(f"invalid date: {v!r}") from e

    @field_validator("page", mode="before")
    @classmethod
    def clamp_page(cls, v):
        if v is None or v == "":
            return 1
        page = int(v)
        return page if page >= 1 else 1

    @field_validator("per_page", mode="before")
    @classmethod
    def check_per_page(cls, v):
        if v is None or v == "":
            return settings.DEFAULT_PER_PAGE
        per_page = int(v)
        if per_page < 1 or per_page > settings.MAX_PER_PAGE:
            raise ValueError(f"per_page must be between 1 and {settings.MAX_PER_PAGE}")
        return per_page

    @model_validator(mode="after")
    def check_page_offset(self):
        if (self.page - 1) * self.per_page > MAX_OFFSET:
            raise ValueError(f"page is too large for per_page={self.per_page}")
        return self

    @model_validator(mode="after")
    def check_date_range(self):
        if self.from_date and self.to_date and self.from_date > self.to_date:
            raise ValueError("from must not be after to")
        return self

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "ArticleFilter":
        """Validate raw request parameters, raising InvalidFilterError"""
        try:
            return cls.model_validate(dict(params))
        except ValidationError as e:
            errors = [
                {
                    "field": ".".join(str(part) for part in err["loc"]) or "filter",
                    "message": err["msg"],
                }
                for err in e.errors()
            ]
            raise InvalidFilterError("Validation failed.", errors=errors) from e

    @property
    def from_datetime(self) -> Optional[datetime]:
        """Start of the from day"""
        if self.from_date is None:
            return None
        return datetime.combine(self.from_date, datetime.min.time())

    @property
    def to_datetime(self) -> Optional[datetime]:
        """End of the to day"""
        if self.to_date is None:
            return None
        return datetime.combine(self.to_date, datetime.max.time()).replace(microsecond=0)
