from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine

from models.db.base import Base


class Database:
    """
    Owns one async engine; sessions are acquired per unit of work.
    """

    def __init__(self, url: str, **engine_kwargs) -> None:
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)

    @asynccontextmanager
    async def read(self) -> AsyncIterator[AsyncSession]:
        """
        Get a database session for reading.
        """
        async with AsyncSession(
            self.engine,
            expire_on_commit=False,
            close_resets_only=False,
        ) as session:
            yield session

    @asynccontextmanager
    async def write(self) -> AsyncIterator[AsyncSession]:
        """
        Get a database session for writing, automatically committing on exit.
        """
        async with AsyncSession(
            self.engine,
            expire_on_commit=False,
            close_resets_only=False,
        ) as session:
            yield session
            await session.commit()

    async def create_all(self) -> None:
        # import for side effects: registers the tables on Base.metadata
        import models.db.pothole  # noqa: F401
        import models.db.user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
