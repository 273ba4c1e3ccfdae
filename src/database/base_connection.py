from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Generator, Any, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from src.utils.logger.custom_logging import LoggerMixin


class DatabaseConnectionBase(LoggerMixin, ABC):
    """Base class for all database connections"""

    def __init__(self):
        super().__init__()

    @abstractmethod
    def get_session(self) -> Any:
        """Get database session"""
        pass

    @contextmanager
    @abstractmethod
    def session_scope(self) -> Generator[Any, None, None]:
        """Session context manager"""
        pass


class SQLAlchemyConnection(DatabaseConnectionBase):
    """
    SQLAlchemy connection for the article store.

    Works with any SQLAlchemy URL; PostgreSQL and SQLite get native
    ON CONFLICT upserts in the repository.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        super().__init__()
        from src.utils.config import settings

        self.database_url = database_url or settings.DATABASE_URL
        self.echo = settings.SQLALCHEMY_ECHO if echo is None else echo
        self._engine: Optional[Engine] = None
        self._SessionLocal = None

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def engine(self) -> Engine:
        """Lazy initialization of SQLAlchemy engine"""
        if self._engine is None:
            if self.is_sqlite:
                kwargs = {"connect_args": {"check_same_thread": False}}
                # In-memory databases live as long as their single connection
                if self.database_url in ("sqlite://", "sqlite:///:memory:"):
                    kwargs["poolclass"] = StaticPool
            else:
                kwargs = {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}

            self._engine = create_engine(self.database_url, echo=self.echo, **kwargs)
            self.logger.info(f"Engine created for {self._engine.url.render_as_string(hide_password=True)}")
        return self._engine

    @property
    def SessionLocal(self):
        """Lazy initialization of session factory"""
        if self._SessionLocal is None:
            self._SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        return self._SessionLocal

    def get_session(self) -> Session:
        return self.SessionLocal()

    def create_tables(self) -> None:
        """Create missing tables"""
        from src.database.models import Base

        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None
            self._SessionLocal = None

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Session context manager for SQLAlchemy"""
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            self.logger.error(f"Session database error: {str(e)}")
            raise
        finally:
            session.close()
