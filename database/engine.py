import logging
from typing import AsyncGenerator

from sqlalchemy import BigInteger, Integer, event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from core.config import settings

logger = logging.getLogger(__name__)

# SQLite only autoincrements INTEGER PRIMARY KEY columns
IdType = BigInteger().with_variant(Integer, "sqlite")


# Base class for declarative models
class Base(DeclarativeBase):
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def configure_engine(engine: AsyncEngine) -> AsyncEngine:
    """Attach per-dialect connection hooks (foreign keys on SQLite)."""
    if engine.dialect.name == "sqlite":
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    """
    Create an async engine for ``database_url``.

    Pool sizing only applies to server databases; SQLite uses its own pool.
    """
    if not database_url.startswith("sqlite"):
        kwargs.setdefault("pool_size", settings.database_pool_size)
        kwargs.setdefault("max_overflow", settings.database_max_overflow)
        kwargs.setdefault("pool_pre_ping", True)
    return configure_engine(create_async_engine(database_url, echo=False, **kwargs))


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


db_engine = build_engine(settings.database_url)

# Create async session maker to be used by the request dependency
AsyncSessionLocal = build_session_factory(db_engine)


# Dependency to get DB session
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session


# Function to initialize the database (create tables)
async def init_db(engine: AsyncEngine = db_engine):
    # Import models so every table is registered on the metadata
    import database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def ping_db(session: AsyncSession) -> bool:
    """Round-trip a trivial query; used by the readiness probe."""
    await session.execute(text("SELECT 1"))
    return True


# Function to close database connections
async def close_db():
    """Close database engine and connections."""
    await db_engine.dispose()
