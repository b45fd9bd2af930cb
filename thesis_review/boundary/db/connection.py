"""
Database connection management.

Dependencies: sqlalchemy, thesis_review.configs
System role: Primary record store connection lifecycle
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    async_sessionmaker,
    create_async_engine,
)

from thesis_review.configs import get_settings


def get_async_engine() -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect stale
    connections early.

    Returns:
        AsyncEngine: Configured async engine
    """
    db_config = get_settings().database

    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory.

    Args:
        engine: Engine to bind; a new pooled engine is created if omitted

    Returns:
        async_sessionmaker: Factory with explicit transaction control
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
