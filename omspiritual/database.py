"""
OM Spiritual Backend - Storage Context
=======================================

What:  Async SQLAlchemy engine + session factory wrapped in a `Database`
       object, the declarative Base, and the per-request session dependency.
How:   `create_app()` builds one `Database` and stores it on `app.state.db`.
       `init_schema()` creates tables and seeds the chant catalog, and is safe
       to run on every boot. Handlers receive sessions through
       `get_db_session`, which commits on success and rolls back on error.
Who:   main.py (construction, lifespan), route handlers (sessions),
       tests (temporary SQLite file), Alembic (Base.metadata).

Connection pooling:
    PostgreSQL (asyncpg): pool_size / max_overflow / pre_ping from settings,
    recycled hourly.
    SQLite (aiosqlite):  SQLAlchemy's default pool for the dialect; pool
    sizing arguments are not passed.
"""

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import func, select
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from omspiritual.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Base class for all ORM models; its metadata drives create_all and Alembic."""
    pass


# Rows inserted into an empty chants table on first boot.
SEED_CHANTS = [
    {
        "title": "Morning OM",
        "description": "Start your day with universal vibration.",
        "frequency": "432Hz",
        "audio_url": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3",
        "category": "Morning",
        "is_premium": False,
    },
    {
        "title": "Deep Sleep Delta",
        "description": "Enter deep restorative sleep.",
        "frequency": "3.5Hz",
        "audio_url": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-2.mp3",
        "category": "Sleep",
        "is_premium": False,
    },
    {
        "title": "Anxiety Release",
        "description": "Calm your nervous system.",
        "frequency": "528Hz",
        "audio_url": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-3.mp3",
        "category": "Calm",
        "is_premium": True,
    },
    {
        "title": "Third Eye Opening",
        "description": "Enhance intuition and clarity.",
        "frequency": "852Hz",
        "audio_url": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-4.mp3",
        "category": "Spiritual",
        "is_premium": True,
    },
]


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine, passing pool sizing only to server databases."""
    url = make_url(database_url)
    kwargs = {"echo": settings.log_level == "DEBUG"}
    if url.get_backend_name() != "sqlite":
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(database_url, **kwargs)


class Database:
    """
    Explicitly constructed storage context.

    One instance per application. Holds the engine and the session factory;
    nothing else in the process keeps a database handle.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.url = database_url or settings.database_url
        self.engine = build_engine(self.url)
        # expire_on_commit=False: ORM objects stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def init_schema(self) -> None:
        """
        Create missing tables, then seed the chant catalog if it is empty.

        Idempotent: a second call creates nothing and inserts nothing.
        """
        # Registers every model with Base.metadata
        import omspiritual.models  # noqa: F401
        from omspiritual.models.chant import Chant

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        async with self.session_factory() as session:
            count = (await session.execute(select(func.count(Chant.id)))).scalar() or 0
            if count == 0:
                session.add_all([Chant(**row) for row in SEED_CHANTS])
                await session.commit()
                logger.info("Seeded chant catalog with %d chants", len(SEED_CHANTS))
            else:
                logger.debug("Chant catalog already has %d rows; seed skipped", count)

    async def ping(self) -> bool:
        """Run SELECT 1; used by the health check."""
        async with self.engine.connect() as conn:
            await conn.execute(select(1))
        return True

    async def dispose(self) -> None:
        """Close every pooled connection (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency providing one session per request.

    Commits when the handler returns normally, rolls back on any exception
    and re-raises so the global handlers can build the response.

    Example:
        @router.get("/chants")
        async def list_chants(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.db
    async with database.session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
