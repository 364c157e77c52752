import asyncio
import logging
import os

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

import models  # noqa: F401  registers the journal_entry table on SQLModel.metadata
from errors import UninitializedStoreError

logger = logging.getLogger(__name__)

# Get database URL from environment, default to a local SQLite file
db_path = os.getenv("JOURNAL_DB_PATH", "./journal.db")

if os.getenv("DATABASE_URL"):
    DATABASE_URL = os.getenv("DATABASE_URL")
else:
    DATABASE_URL = f"sqlite+aiosqlite:///{db_path}"


def async_database_url(url: str) -> str:
    """The engine is async, so a plain sqlite:// URL needs the aiosqlite driver."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


DATABASE_URL = async_database_url(DATABASE_URL)

# Log database driver for observability
db_driver = DATABASE_URL.split(":", 1)[0] if ":" in DATABASE_URL else "unknown"
logger.info(f"DB_URL_DRIVER={db_driver}")


class JournalStore:
    """Shared handle on the journal database.

    The engine and schema are created lazily by the first ensure_ready() call.
    Until that completes, engine and session() raise UninitializedStoreError.
    """

    def __init__(self, database_url: str | None = None, echo: bool = False):
        self.database_url = async_database_url(database_url or DATABASE_URL)
        self.echo = echo
        self._engine: AsyncEngine | None = None
        self._lock = asyncio.Lock()

    @property
    def is_ready(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise UninitializedStoreError("Journal store accessed before ensure_ready()")
        return self._engine

    async def ensure_ready(self) -> None:
        """Open the database and create tables if they don't exist.

        Safe to call any number of times, including concurrently: only the
        first caller initializes, the rest wait for it. Existing data is
        never dropped.
        """
        if self._engine is not None:
            return

        async with self._lock:
            if self._engine is not None:
                return

            # Connections are opened per session so the handle isn't bound to one event loop
            engine = create_async_engine(self.database_url, echo=self.echo, poolclass=NullPool)
            try:
                async with engine.begin() as conn:
                    await conn.run_sync(SQLModel.metadata.create_all)
            except Exception as e:
                await engine.dispose()
                logger.error(f"Failed to initialize journal store: {str(e)}")
                raise

            self._engine = engine
            logger.info("Journal store initialized")

    def session(self) -> AsyncSession:
        """Open a new session on the initialized engine."""
        return AsyncSession(self.engine, expire_on_commit=False)

    async def dispose(self) -> None:
        """Close the engine; a later ensure_ready() initializes again."""
        async with self._lock:
            if self._engine is None:
                return
            await self._engine.dispose()
            self._engine = None
            logger.info("Journal store closed")


store = JournalStore()
