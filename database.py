"""
Database layer for the LinkMe backend.

Owns the SQLAlchemy engine and session factory used by the conversation
store, saved learning paths, progress and chat history.
"""

from contextlib import contextmanager
from typing import Generator
from sqlalchemy import create_engine, text, Engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool
from config import get_settings
import logging

logger = logging.getLogger(__name__)

# psycopg 3 is the installed driver; a bare postgresql:// URL would pick psycopg2.
PSYCOPG_SCHEME = "postgresql+psycopg"
APPLICATION_NAME = "linkme-backend"


def normalize_database_url(url: str) -> str:
    """
    Point PostgreSQL URLs at the psycopg 3 dialect.

    Args:
        url: URL as configured, e.g. postgresql://user:pw@host/db

    Returns:
        str: The same URL with a postgresql+psycopg scheme. URLs that already
        name a driver, or are not PostgreSQL, are returned unchanged.
    """
    for scheme in ("postgresql://", "postgres://"):
        if url.startswith(scheme):
            return f"{PSYCOPG_SCHEME}://{url[len(scheme):]}"
    return url


class DatabaseManager:
    """
    Engine and session lifecycle for the application database.

    The engine is created lazily on first use so that importing the app
    (and the test suite) never opens a connection.
    """

    def __init__(self):
        self.settings = get_settings()
        self._engine: Engine | None = None
        self._session_factory: sessionmaker | None = None

    @property
    def engine(self) -> Engine:
        """
        Engine bound to DATABASE_URL, created on first access.

        Returns:
            Engine: Pooled SQLAlchemy engine
        """
        if self._engine is None:
            self._engine = self._create_engine()
        return self._engine

    @property
    def session_factory(self) -> sessionmaker:
        if self._session_factory is None:
            self._session_factory = sessionmaker(
                bind=self.engine,
                autocommit=False,
                autoflush=False
            )
        return self._session_factory

    def _create_engine(self) -> Engine:
        url = normalize_database_url(str(self.settings.database_url))
        logger.info(f"Creating database engine for: {self._mask_password(url)}")

        engine = create_engine(
            url,
            poolclass=QueuePool,
            pool_size=self.settings.db_pool_size,
            max_overflow=self.settings.db_max_overflow,
            pool_timeout=self.settings.db_pool_timeout,
            pool_pre_ping=True,
            echo=self.settings.log_level == "DEBUG",
            connect_args={"application_name": APPLICATION_NAME},
        )

        logger.info("Database engine created successfully")
        return engine

    def create_tables(self) -> None:
        """Create the conversation, learning path, progress and chat history tables if missing."""
        from shared.models.entities import Base

        Base.metadata.create_all(self.engine)
        logger.info(f"Ensured tables: {', '.join(sorted(Base.metadata.tables))}")

    def get_session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """
        Commit on success, roll back and re-raise on failure.

        Used for work outside a request, such as purging expired
        conversations at startup.

        Yields:
            Session: A session that is closed on exit
        """
        session = self.get_session()
        try:
            yield session
            session.commit()
        except Exception as e:
            session.rollback()
            logger.error(f"Database transaction failed: {e}")
            raise
        finally:
            session.close()

    def health_check(self) -> bool:
        """
        Run SELECT 1 against the database.

        Returns:
            bool: True when the query succeeds
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Database health check passed")
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    def close(self):
        if self._engine:
            self._engine.dispose()
            logger.info("Database engine closed")

    @staticmethod
    def _mask_password(url: str) -> str:
        """
        Hide the password of a database URL before it is logged.

        Args:
            url: Database URL, with or without credentials

        Returns:
            str: URL whose password is replaced by ****
        """
        if "@" not in url:
            return url
        credentials, _, location = url.rpartition("@")
        scheme, sep, user_pass = credentials.partition("://")
        if not sep or ":" not in user_pass:
            return url
        user = user_pass.split(":", 1)[0]
        return f"{scheme}://{user}:****@{location}"


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """
    Process-wide DatabaseManager.

    Returns:
        DatabaseManager: The shared manager, created on first call
    """
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency yielding one session per request.

    Repositories commit their own writes; the session is always closed.

    Yields:
        Session: Database session
    """
    session = get_db_manager().get_session()
    try:
        yield session
    finally:
        session.close()


def reset_db_manager():
    """Dispose of the shared manager so the next call rebuilds it from settings."""
    global _db_manager
    if _db_manager:
        _db_manager.close()
    _db_manager = None
