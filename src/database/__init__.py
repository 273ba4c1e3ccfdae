from typing import Optional

from .base_connection import SQLAlchemyConnection

# Global instance (lazy initialized)
_article_db: Optional[SQLAlchemyConnection] = None


def get_article_db() -> SQLAlchemyConnection:
    """Get the article store connection (lazy singleton), creating tables on first use"""
    global _article_db
    if _article_db is None:
        _article_db = SQLAlchemyConnection()
        _article_db.create_tables()
    return _article_db


__all__ = [
    'SQLAlchemyConnection',
    'get_article_db',
]
