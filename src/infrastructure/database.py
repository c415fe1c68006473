"""
Async SQLAlchemy engine, session factory and declarative base.

The store is PostgreSQL with PostGIS, reached through ``asyncpg``.  Pool
sizing and SQL echo come from ``Settings`` so deployments can tune them
without code changes.
"""

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# Entities returned after commit must stay readable outside the session.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class of the users, riders, trips, ratings and promotions tables."""
