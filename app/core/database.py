"""
Database configuration and session management
Uses SQLAlchemy with async support
"""

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from typing import AsyncGenerator
import logging

from .config import settings

logger = logging.getLogger(__name__)

def _enable_sqlite_transactions(engine: AsyncEngine) -> None:
    """
    Take over transaction control from the sqlite driver.

    The driver normally defers BEGIN until the first write, which lets two
    connections both read and then race to upgrade their locks. Emitting
    BEGIN IMMEDIATE ourselves makes every transaction take the write lock up
    front, so concurrent writers wait on the busy timeout instead of failing.
    It also makes SAVEPOINT behave.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

def build_engine(url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine with dialect-specific parameters"""
    if url.startswith("sqlite"):
        # SQLite doesn't support connection pooling parameters
        engine = create_async_engine(
            url,
            echo=echo,
            poolclass=NullPool,
            connect_args={"timeout": settings.SQLITE_BUSY_TIMEOUT},
        )
        _enable_sqlite_transactions(engine)
        return engine

    # PostgreSQL and other databases support pooling
    return create_async_engine(
        url,
        echo=echo,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
        pool_timeout=settings.DATABASE_POOL_TIMEOUT,
        pool_pre_ping=True,  # Verify connections before use
        isolation_level="READ COMMITTED",
    )

def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

engine = build_engine(settings.database_url_async, echo=settings.DATABASE_ECHO)

AsyncSessionLocal = build_session_factory(engine)

# Database dependency
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Create and yield database session
    Ensures proper cleanup after use
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

async def init_db(bind: AsyncEngine = engine) -> None:
    """Initialize database tables"""
    from app.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created successfully")

async def close_db(bind: AsyncEngine = engine) -> None:
    """Close database connections"""
    await bind.dispose()
    logger.info("Database connections closed")
