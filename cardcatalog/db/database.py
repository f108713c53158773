"""
Database engine and session management.

Provides async SQLAlchemy engine, session factory and the process-wide
snapshot store for FastAPI.
"""

from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cardcatalog.config import settings
from cardcatalog.db.snapshot_store import SnapshotStore
from cardcatalog.models.db import Base

# Create async engine
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

snapshot_store = SnapshotStore(async_session_factory)


def get_snapshot_store() -> SnapshotStore:
    """
    Dependency that provides the process-wide snapshot store.

    Usage in FastAPI:
        @app.get("/cards")
        async def get_cards(store: SnapshotStore = Depends(get_snapshot_store)):
            ...
    """
    return snapshot_store


def _ensure_sqlite_directory(database_url: str) -> None:
    """SQLite creates the file but not its parent directory."""
    url = make_url(database_url)
    if not url.drivername.startswith("sqlite") or not url.database:
        return
    if url.database == ":memory:":
        return
    Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_db() -> None:
    """
    Initialize database tables.

    Creates all tables defined in the ORM models.
    Should be called once at application startup.
    """
    _ensure_sqlite_directory(settings.database_url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
