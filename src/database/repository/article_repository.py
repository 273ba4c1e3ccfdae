"""
Article Store - URL-keyed upsert store with filtered query, count and page
"""

from contextlib import contextmanager
from typing import Iterable, List, Optional

from sqlalchemy import case, delete, func, insert, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.article_aggregator.exceptions import StoreUnavailableError
from src.article_aggregator.schemas.article import SOURCE_ORDER, ArticleSource, CanonicalArticle
from src.article_aggregator.schemas.filter import ArticleFilter
from src.article_aggregator.schemas.page import Page
from src.article_aggregator.services.paginator import build_page, page_offset
from src.database.base_connection import SQLAlchemyConnection
from src.database.models.article import ArticleRecord, ArticleTagRecord, utcnow
from src.utils.logger.custom_logging import LoggerMixin


# Columns replaced on every upsert (everything except the key and created_at)
MUTABLE_COLUMNS = ["title", "author", "description", "source", "category", "published_at", "updated_at"]

# Equal timestamps follow the provider merge order, same as the live path
SOURCE_RANK = case(
    {source.value: rank for rank, source in enumerate(SOURCE_ORDER)},
    value=ArticleRecord.source,
    else_=len(SOURCE_ORDER),
)

_NATIVE_UPSERT = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _like_pattern(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _tag_candidates(tags: Iterable[str]) -> List[str]:
    """A requested tag matches as given or in Title Case"""
    candidates: List[str] = []
    for tag in tags:
        for variant in (tag, tag.title()):
            if variant not in candidates:
                candidates.append(variant)
    return candidates


def filter_conditions(article_filter: ArticleFilter) -> list:
    """
    Conjunctive conditions of a filter; tags form one OR group inside the AND.
    """
    conditions = [ArticleRecord.title.ilike(_like_pattern(article_filter.search), escape="\\")]

    if article_filter.author:
        conditions.append(ArticleRecord.author.ilike(_like_pattern(article_filter.author), escape="\\"))
    if article_filter.category:
        conditions.append(ArticleRecord.category == article_filter.category)
    if article_filter.source:
        conditions.append(ArticleRecord.source == article_filter.source.value)
    if article_filter.tags:
        conditions.append(
            ArticleRecord.tags.any(ArticleTagRecord.tag.in_(_tag_candidates(article_filter.tags)))
        )
    if article_filter.from_datetime:
        conditions.append(ArticleRecord.published_at >= article_filter.from_datetime)
    if article_filter.to_datetime:
        conditions.append(ArticleRecord.published_at <= article_filter.to_datetime)

    return conditions


def to_canonical(record: ArticleRecord) -> CanonicalArticle:
    return CanonicalArticle(
        url=record.url,
        title=record.title,
        author=record.author,
        description=record.description,
        source=ArticleSource(record.source),
        category=record.category,
        tags=[tag.tag for tag in record.tags],
        published_at=record.published_at,
    )


class ArticleStore(LoggerMixin):
    """
    Repository for canonical articles

    Features:
    - Upsert keyed solely on url (ON CONFLICT DO UPDATE where supported)
    - Full replace of tags on every write
    - Filtered query/count/page, newest first
    """

    def __init__(self, db: Optional[SQLAlchemyConnection] = None):
        super().__init__()
        if db is None:
            from src.database import get_article_db

            db = get_article_db()
        self.db = db

    @contextmanager
    def _scope(self, operation: str):
        """Session scope that converts database failures into StoreUnavailableError"""
        try:
            with self.db.session_scope() as session:
                yield session
        except SQLAlchemyError as e:
            self.logger.error(f"Article store {operation} failed: {e}", exc_info=True)
            raise StoreUnavailableError(f"Article store {operation} failed: {e}") from e

    # ========================================================================
    # WRITES
    # ========================================================================

    def _upsert_row(self, session: Session, article: CanonicalArticle) -> None:
        now = utcnow()
        values = {
            "url": article.url,
            "title": article.title,
            "author": article.author,
            "description": article.description,
            "source": article.source.value,
            "category": article.category,
            "published_at": article.published_at,
            "created_at": now,
            "updated_at": now,
        }

        native_insert = _NATIVE_UPSERT.get(session.get_bind().dialect.name)
        if native_insert is not None:
            stmt = native_insert(ArticleRecord).values(values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["url"],
                set_={column: stmt.excluded[column] for column in MUTABLE_COLUMNS},
            )
            session.execute(stmt)
        else:
            existing = session.get(ArticleRecord, article.url)
            if existing is None:
                session.add(ArticleRecord(**values))
            else:
                for column in MUTABLE_COLUMNS:
                    setattr(existing, column, values[column])
            session.flush()

        session.execute(delete(ArticleTagRecord).where(ArticleTagRecord.article_url == article.url))
        if article.tags:
            session.execute(
                insert(ArticleTagRecord),
                [
                    {"article_url": article.url, "position": position, "tag": tag}
                    for position, tag in enumerate(article.tags)
                ],
            )

    def upsert(self, article: CanonicalArticle) -> None:
        """Insert or fully replace the record stored under article.url"""
        with self._scope("upsert") as session:
            self._upsert_row(session, article)

    def upsert_many(self, articles: Iterable[CanonicalArticle]) -> int:
        """Upsert a batch in one transaction; returns the number written"""
        count = 0
        with self._scope("upsert") as session:
            for article in articles:
                self._upsert_row(session, article)
                count += 1
        self.logger.info(f"Upserted {count} articles")
        return count

    # ========================================================================
    # READS
    # ========================================================================

    def get(self, url: str) -> Optional[CanonicalArticle]:
        with self._scope("get") as session:
            record = session.get(ArticleRecord, url)
            return to_canonical(record) if record else None

    def count(self, article_filter: ArticleFilter) -> int:
        stmt = select(func.count()).select_from(ArticleRecord).where(*filter_conditions(article_filter))
        with self._scope("count") as session:
            return session.execute(stmt).scalar() or 0

    def _ordered_select(self, article_filter: ArticleFilter):
        return (
            select(ArticleRecord)
            .where(*filter_conditions(article_filter))
            .order_by(ArticleRecord.published_at.desc(), SOURCE_RANK, ArticleRecord.url)
        )

    def query(self, article_filter: ArticleFilter) -> List[CanonicalArticle]:
        """All matches, newest first"""
        with self._scope("query") as session:
            records = session.execute(self._ordered_select(article_filter)).scalars().all()
            return [to_canonical(record) for record in records]

    def page(self, article_filter: ArticleFilter, page: int, per_page: int) -> Page:
        """One page of matches, newest first"""
        offset = page_offset(page, per_page)
        stmt = self._ordered_select(article_filter).offset(offset).limit(per_page)
        with self._scope("page") as session:
            total = session.execute(
                select(func.count()).select_from(ArticleRecord).where(*filter_conditions(article_filter))
            ).scalar() or 0
            records = session.execute(stmt).scalars().all()
            items = [to_canonical(record) for record in records]

        return build_page(items=items, total=total, page=page, per_page=per_page)
