"""
Database connection settings for the hostel allocation service.
Provides SQLAlchemy engine/session management behind an explicit
Database object that is handed to collaborators.
"""

import logging
import time
from contextlib import contextmanager
from typing import Any, Dict, Generator, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session, sessionmaker

from hostel_allocation.config.settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

SLOW_QUERY_SECONDS = 0.5


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log query execution time - start timer"""
    conn.info.setdefault('query_start_time', []).append(time.time())


def _after_cursor_execute(conn, cursor, statement, parameters, context, executemany):
    """Log query execution time - stop timer and log if slow query"""
    total_time = time.time() - conn.info['query_start_time'].pop()

    if total_time > SLOW_QUERY_SECONDS:
        logger.warning(
            f"Slow query detected ({total_time:.4f}s): "
            f"{statement[:100]}... with params {parameters}"
        )


def build_engine(config: Settings) -> Engine:
    """Create an engine for the configured URL with dialect-appropriate options."""
    url = config.get_database_url()
    kwargs: Dict[str, Any] = {
        "echo": config.DB_ECHO,
        "pool_pre_ping": True,
    }
    connect_args = dict(config.DB_CONNECT_ARGS)

    if config.is_sqlite():
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
    else:
        kwargs.update(
            pool_size=config.DB_POOL_SIZE,
            max_overflow=config.DB_POOL_OVERFLOW,
            pool_recycle=3600,
        )

    engine = create_engine(url, connect_args=connect_args, **kwargs)

    if config.is_sqlite():
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    event.listen(engine, "before_cursor_execute", _before_cursor_execute)
    event.listen(engine, "after_cursor_execute", _after_cursor_execute)
    return engine


class Database:
    """Engine plus session factory, passed explicitly to whoever needs storage."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=engine,
        )

    def session(self) -> Session:
        return self.session_factory()

    @contextmanager
    def session_scope(self) -> Generator[Session, None, None]:
        """Context manager for database sessions"""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception as e:
            logger.error(f"Database context error: {str(e)}")
            session.rollback()
            raise
        finally:
            session.close()

    def create_all(self) -> None:
        # Import models so they are registered on the metadata
        from hostel_allocation.models import Base

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        from hostel_allocation.models import Base

        Base.metadata.drop_all(bind=self.engine)
        logger.warning("All database tables dropped")

    def check_connection(self) -> Dict[str, Any]:
        """Check database connection health"""
        start_time = time.time()
        session = self.session_factory()
        error_message: Optional[str] = None

        try:
            session.execute(text("SELECT 1"))
            is_connected = True
        except DBAPIError as e:
            is_connected = False
            error_message = str(e)
        finally:
            session.close()

        return {
            "is_connected": is_connected,
            "response_time_ms": (time.time() - start_time) * 1000,
            "error": error_message,
        }

    def dispose(self) -> None:
        self.engine.dispose()


def create_database(config: Optional[Settings] = None) -> Database:
    return Database(build_engine(config or default_settings))
