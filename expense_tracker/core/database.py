# expense_tracker/core/database.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from .config import settings
import logging
from typing import AsyncGenerator

logger = logging.getLogger(__name__)

# Base class for all models
Base = declarative_base()


def _enable_sqlite_pragmas(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


def enable_sqlite_foreign_keys(async_engine: AsyncEngine) -> None:
    """SQLite ignores REFERENCES clauses unless the pragma is set per connection."""
    event.listen(async_engine.sync_engine, "connect", _enable_sqlite_pragmas)


def build_engine(database_url: str) -> AsyncEngine:
    engine_kwargs = {
        "echo": False,
        "future": True,
    }
    if database_url.startswith("sqlite"):
        async_engine = create_async_engine(database_url, **engine_kwargs)
        enable_sqlite_foreign_keys(async_engine)
        logger.info("🔧 Configured engine for SQLite (foreign keys enforced)")
        return async_engine

    # Keep the pool small; every request holds exactly one connection
    engine_kwargs.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,   # Seconds to wait for a free connection
        pool_pre_ping=True,                      # Check connection before using
        pool_recycle=settings.DB_POOL_RECYCLE,
    )
    return create_async_engine(database_url, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL)

# AsyncSession factory using async_sessionmaker
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
    class_=AsyncSession,
)

# Dependency to get DB session with proper exception handling
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    session = AsyncSessionLocal()
    try:
        yield session
    except Exception as e:
        logger.error(f"Database session error: {str(e)}")
        await session.rollback()
        raise
    finally:
        # Always close the session so the connection goes back to the pool
        await session.close()
        logger.debug("Database session closed")
