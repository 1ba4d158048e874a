"""Database session management."""

from collections.abc import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from questlog.config import get_settings

settings = get_settings()


def enable_sqlite_foreign_keys(engine: AsyncEngine | Engine) -> None:
    """Turn on FK enforcement for every new SQLite connection."""
    sync_engine = engine.sync_engine if isinstance(engine, AsyncEngine) else engine

    @event.listens_for(sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def _engine_kwargs() -> dict:
    kwargs: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if not settings.database_is_sqlite:
        kwargs.update(pool_size=5, max_overflow=10)
    return kwargs


# Create async engine
engine = create_async_engine(settings.database_url, **_engine_kwargs())
if settings.database_is_sqlite:
    enable_sqlite_foreign_keys(engine)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
