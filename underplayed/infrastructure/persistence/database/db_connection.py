"""SQLAlchemy database configuration and connection management.

This module is responsible for:
- Engine creation and SQLite connection tuning
- Session factory creation
- Transaction-scoped sessions
- Schema creation
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from underplayed.config import get_logger
from underplayed.infrastructure.persistence.database.db_models import (
    UnderplayedDBBase,
)

# Create module logger
logger = get_logger(__name__)


def create_db_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async SQLAlchemy engine, tuned for SQLite when applicable."""
    parsed = make_url(url)
    is_sqlite = parsed.get_backend_name() == "sqlite"

    connect_args = {}
    if is_sqlite:
        connect_args = {"check_same_thread": False, "timeout": 30.0}

        # Make sure the parent directory of a file database exists
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_async_engine(
        url,
        connect_args=connect_args,
        # Validate connections before using them
        pool_pre_ping=True,
        echo=echo,
    )

    if is_sqlite:

        @event.listens_for(engine.sync_engine, "connect")  # type: ignore
        def _set_sqlite_pragma(dbapi_connection, _):  # type: ignore # pragma: no cover
            """Set SQLite PRAGMAs on connection creation."""
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA busy_timeout = 30000")  # 30 second timeout
            cursor.execute("PRAGMA journal_mode = WAL")  # Write-ahead logging
            cursor.execute("PRAGMA synchronous = NORMAL")  # Balanced safety/performance
            cursor.close()

    logger.info(f"Created database engine for {parsed.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory for the given engine.

    Args:
        engine: Engine the sessions bind to

    Returns:
        Async session factory for creating properly configured sessions
    """
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,  # Don't expire objects after commit
        autoflush=True,
    )


@asynccontextmanager
async def session_scope(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession]:
    """Yield a session that commits on success and rolls back on error.

    Yields:
        AsyncSession: Managed database session
    """
    session = session_factory()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Create any missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(UnderplayedDBBase.metadata.create_all)
    logger.debug("Database schema ready")


__all__ = [
    "create_db_engine",
    "create_session_factory",
    "init_db",
    "session_scope",
]
