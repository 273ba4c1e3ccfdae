"""
SQLAlchemy models for the article store

Tables:
1. articles - one row per canonical article, keyed by url
2. article_tags - ordered tags of an article (queried for the tag OR-group)
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from src.database.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class ArticleRecord(Base):
    __tablename__ = "articles"

    url = Column(String(2048), primary_key=True, comment="Canonical identity, upsert key")
    title = Column(String(1024), nullable=False)
    author = Column(String(512), nullable=False, default="Unknown")
    description = Column(Text, nullable=True)
    source = Column(String(64), nullable=False, index=True, comment="Provider display name")
    category = Column(String(255), nullable=False, index=True, default="General")
    published_at = Column(DateTime, nullable=False, index=True, comment="Naive UTC")

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    tags = relationship(
        "ArticleTagRecord",
        order_by="ArticleTagRecord.position",
        cascade="all, delete-orphan",
        lazy="selectin",
        back_populates="article",
    )


class ArticleTagRecord(Base):
    __tablename__ = "article_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    article_url = Column(
        String(2048),
        ForeignKey("articles.url", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, comment="Order within the article's tag list")
    tag = Column(String(255), nullable=False, index=True)

    article = relationship("ArticleRecord", back_populates="tags")
