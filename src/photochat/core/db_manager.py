from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator
import logging

from photochat.config import Config
from .database import Base


def _configure_sqlite(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA case_sensitive_like=ON")
    cursor.close()


class BaseDatabaseManager:
    def __init__(self, config: Config, logger: logging.Logger | None = None):
        self.config = config
        self.engine: AsyncEngine | None = None
        self.session_factory: async_sessionmaker[AsyncSession] | None = None
        self._logger = logger or logging.getLogger(__name__)

    async def initialize(self):
        raise NotImplementedError()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Unit of work: commits when the block exits cleanly, rolls back on any exception.
        """
        if not self.engine:
            await self.initialize()

        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_tables(self):
        if not self.engine:
            await self.initialize()

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        if not self.engine:
            await self.initialize()

        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self):
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class DatabaseManager(BaseDatabaseManager):
    def get_url(self) -> str:
        db = self.config.db
        if db.is_postgres:
            return f"postgresql+asyncpg://{db.user}:{db.password}@{db.host}:{db.port}/{db.name}"
        return f"sqlite+aiosqlite:///{db.path}"

    async def initialize(self):
        db = self.config.db
        url = self.get_url()

        if db.is_postgres:
            self.engine = create_async_engine(
                url=url,
                pool_size=30,
                max_overflow=20,
                pool_pre_ping=True,
                pool_timeout=60,
                echo=db.echo,
            )
        else:
            if db.path == ":memory:":
                # one shared connection, otherwise every checkout sees a fresh empty database
                self.engine = create_async_engine(
                    url=url,
                    connect_args={"check_same_thread": False},
                    poolclass=StaticPool,
                    echo=db.echo,
                )
            else:
                Path(db.path).parent.mkdir(parents=True, exist_ok=True)
                self.engine = create_async_engine(url=url, echo=db.echo)

            event.listen(self.engine.sync_engine, "connect", _configure_sqlite)

        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        self._logger.info("Database engine initialized (%s)", "postgresql" if db.is_postgres else "sqlite")
