"""Database session management."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.core.config import settings


class Base(DeclarativeBase):
    """Declarative base for documents, rules, clauses and summaries."""
    pass


def _to_async_url(url: str) -> str:
    """Rewrite a plain postgres/sqlite URL to its async driver."""
    if url.startswith("postgresql://"):
        return "postgresql+asyncpg://" + url[len("postgresql://"):]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://"):]
    return url


async_engine = create_async_engine(_to_async_url(settings.DATABASE_URL), pool_pre_ping=True)
# Summaries and clauses are returned after commit, so keep attributes loaded
AsyncSessionLocal = async_sessionmaker(async_engine, expire_on_commit=False)


async def get_db() -> AsyncSession:
    """Request-scoped session; routes commit explicitly."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create any missing tables (no migrations)."""
    from app.db import models  # noqa: F401

    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Release pooled connections on shutdown."""
    await async_engine.dispose()
