"""
Async SQLAlchemy engine and session factory for the durable backend.

The URL comes from ``settings.database_url``; use ``aiosqlite`` for a local
file or ``asyncpg`` for PostgreSQL.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models."""


def build_engine(database_url: str) -> AsyncEngine:
    options = {"echo": False}
    if not database_url.startswith("sqlite"):
        options.update(pool_size=20, max_overflow=10)
    return create_async_engine(database_url, **options)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )
