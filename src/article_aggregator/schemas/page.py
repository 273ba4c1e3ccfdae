# src/article_aggregator/schemas/page.py
"""
Page of canonical articles

The store path and the in-memory path both build this through
services.paginator.build_page, so callers cannot tell them apart.
"""

import math
from typing import List

from pydantic import BaseModel, Field, computed_field

from src.article_aggregator.schemas.article import CanonicalArticle


class Page(BaseModel):
    items: List[CanonicalArticle] = Field(default_factory=list)
    total: int = Field(..., ge=0, description="Matches across all pages")
    page: int = Field(..., ge=1, description="1-based page number")
    per_page: int = Field(..., ge=1)

    @computed_field
    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @computed_field
    @property
    def from_item(self) -> int:
        """1-based index of the first item, 0 when the page is empty"""
        if not self.items:
            return 0
        return (self.page - 1) * self.per_page + 1

    @computed_field
    @property
    def to_item(self) -> int:
        if not self.items:
            return 0
        return self.from_item + len(self.items) - 1
