import os
import logging
from typing import Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from database.models import Base

logger = logging.getLogger(__name__)

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite+aiosqlite:///./talentscout.db")

engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker] = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine_for(url: str, echo: bool = False) -> AsyncEngine:
    """Build an async engine; in-memory SQLite shares one connection across sessions."""
    kwargs = {"echo": echo}
    if url.startswith("sqlite") and ":memory:" in url:
        kwargs.update(poolclass=StaticPool, connect_args={"check_same_thread": False})
    new_engine = create_async_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
    return new_engine


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


def configure(url: Optional[str] = None, echo: bool = False) -> async_sessionmaker:
    """(Re)bind the module-level engine and session factory."""
    global engine, SessionLocal
    engine = create_engine_for(url or DATABASE_URL, echo=echo)
    SessionLocal = make_session_factory(engine)
    return SessionLocal


def get_session_factory() -> async_sessionmaker:
    if SessionLocal is None:
        configure()
    return SessionLocal


async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    """Create all tables that don't exist yet."""
    target = bind or engine
    if target is None:
        get_session_factory()
        target = engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema initialized")


async def dispose() -> None:
    if engine is not None:
        await engine.dispose()

