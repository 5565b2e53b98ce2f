from typing import Any, AsyncGenerator, Dict

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from youthsync.config import settings

# Seconds a SQLite writer waits on a locked database before failing.
SQLITE_BUSY_TIMEOUT = 15


def build_engine(url: str = settings.DATABASE_URL, **kwargs: Any) -> AsyncEngine:
    """
    Create the async engine for `url`.

    In-memory SQLite gets a single shared connection so every session sees the
    same database; file SQLite gets a longer busy timeout for concurrent upserts.
    """
    options: Dict[str, Any] = {
        "echo": settings.DEBUG,  # log generated SQL when debugging
        "pool_pre_ping": True,  # Handles lost connections gracefully
    }
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        else:
            options["connect_args"] = {"timeout": SQLITE_BUSY_TIMEOUT}
    options.update(kwargs)
    return create_async_engine(url, **options)


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False is CRITICAL for async usage.
    return async_sessionmaker(
        bind=bind, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )


engine = build_engine()
AsyncSessionLocal = build_session_factory(engine)


# Dependency Injection for FastAPI
# This yields a session for each request and closes it automatically after.
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
