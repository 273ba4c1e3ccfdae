from src.database.models.base import Base
from src.database.models.article import ArticleRecord, ArticleTagRecord

__all__ = ["Base", "ArticleRecord", "ArticleTagRecord"]
