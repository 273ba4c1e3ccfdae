# src/article_aggregator/services/paginator.py
"""
Result Paginator

build_page() is the single constructor for Page, used by the store's native
LIMIT/OFFSET query and by paginate() over an in-memory merged sequence.
"""

from typing import Sequence

from src.article_aggregator.schemas.article import CanonicalArticle
from src.article_aggregator.schemas.page import Page


def normalize_page_number(page: int) -> int:
    """Page numbers below 1 are treated as 1"""
    return page if page and page >= 1 else 1


def page_offset(page: int, per_page: int) -> int:
    if per_page < 1:
        raise ValueError(f"per_page must be >= 1, got {per_page}")
    return (normalize_page_number(page) - 1) * per_page


def build_page(
    items: Sequence[CanonicalArticle],
    total: int,
    page: int,
    per_page: int,
) -> Page:
    return Page(
        items=list(items),
        total=total,
        page=normalize_page_number(page),
        per_page=per_page,
    )


def paginate(
    articles: Sequence[CanonicalArticle],
    page: int,
    per_page: int,
) -> Page:
    """
    Slice one page out of an ordered sequence.

    Pages past the end are empty but still report the full total.
    """
    offset = page_offset(page, per_page)
    return build_page(
        items=articles[offset:offset + per_page],
        total=len(articles),
        page=page,
        per_page=per_page,
    )
