"""Engine, sessions and schema management on SQLAlchemy 2.0 async.

``DatabaseManager`` owns one ``AsyncEngine`` per process. The engine is built
on first use and disposed on shutdown; request handlers get their session
through the ``get_db_session`` dependency.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncGenerator

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from secretsanta.core.config import Settings, get_settings
from secretsanta.core.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    """Declarative base of every SecretSanta table."""


def apply_sqlite_pragmas(engine: AsyncEngine, settings: Settings) -> None:
    """Apply the configured SQLite pragmas on every new connection.

    Args:
        engine: Async engine bound to a SQLite database.
        settings: Settings holding the pragma values.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _set_pragmas(dbapi_connection: Any, connection_record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute(
            f"PRAGMA foreign_keys = {'ON' if settings.db_sqlite_foreign_keys else 'OFF'}"
        )
        cursor.execute(f"PRAGMA journal_mode = {settings.db_sqlite_journal_mode}")
        cursor.execute(f"PRAGMA busy_timeout = {int(settings.db_sqlite_busy_timeout)}")
        cursor.close()


def sqlite_file_path(database_url: str) -> Path | None:
    """Return the file behind a SQLite URL, or None for in-memory databases."""
    path = database_url.split(":///", 1)[-1]
    if not path or path == ":memory:":
        return None
    return Path(path)


class DatabaseManager:
    """Lazily built engine and session factory for one database."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    def _engine_options(self) -> dict[str, Any]:
        options: dict[str, Any] = {"echo": self.settings.db_echo}
        if self.settings.is_sqlite:
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(
                pool_size=self.settings.db_pool_size,
                max_overflow=self.settings.db_max_overflow,
                pool_timeout=self.settings.db_pool_timeout,
                pool_recycle=self.settings.db_pool_recycle,
                pool_pre_ping=True,
            )
        return options

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            engine = create_async_engine(self.settings.database_url, **self._engine_options())
            if self.settings.is_sqlite:
                apply_sqlite_pragmas(engine, self.settings)
            self._engine = engine
            logger.info(
                "Database engine created",
                database_url=engine.url.render_as_string(hide_password=True),
                sqlite=self.settings.is_sqlite,
            )
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        # Objects stay readable after commit; the service builds its return
        # values from them once the transaction is done.
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                bind=self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create any missing tables. Migrations are preferred outside development."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables created")

    async def drop_tables(self) -> None:
        """Drop every table. Destroys all data."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        logger.warning("Database tables dropped")

    async def disconnect(self) -> None:
        """Dispose the engine; the next access builds a fresh one."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database engine disposed")

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session, rolling back whatever is pending if the block fails.

        Example:
            async with db.session() as session:
                groups = await GroupService(session).list_open_groups()
        """
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def check_connection(self) -> bool:
        """Run ``SELECT 1`` and report whether the database answered."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database connection check failed", error=str(e))
            return False
        return True


_db_manager: DatabaseManager | None = None


def get_db_manager() -> DatabaseManager:
    """Get the process-wide database manager."""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with get_db_manager().session() as session:
        yield session


async def init_database(create_tables: bool | None = None) -> None:
    """Prepare the database at startup.

    Makes sure the SQLite directory exists, checks connectivity and creates
    the tables when asked to.

    Args:
        create_tables: Force table creation on or off; defaults to
            creating them only in development.

    Raises:
        RuntimeError: If the database cannot be reached.
    """
    # Registers every table on Base.metadata
    from secretsanta.infrastructure.persistence import models  # noqa: F401

    settings = get_settings()
    db = get_db_manager()

    if settings.is_sqlite:
        db_file = sqlite_file_path(settings.database_url)
        if db_file is not None:
            db_file.parent.mkdir(parents=True, exist_ok=True)

    if not await db.check_connection():
        raise RuntimeError("Failed to connect to database")

    if create_tables is None:
        create_tables = settings.is_development
    if create_tables:
        await db.create_tables()
    else:
        logger.info("Skipping table creation, run migrations", environment=settings.environment)


async def close_database() -> None:
    """Dispose the process-wide engine at shutdown."""
    await get_db_manager().disconnect()
