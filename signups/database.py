"""Async engine and per-request sessions."""
from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Request
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from .logging_config import logger
from .models.tables import Base


class Database:
    def __init__(self, url: str, pool_size: int = 10) -> None:
        options: dict[str, object] = {"echo": False, "pool_pre_ping": True}
        if not make_url(url).drivername.startswith("sqlite"):
            options["pool_size"] = pool_size
        self.engine: AsyncEngine = create_async_engine(url, **options)
        self.sessions = async_sessionmaker(self.engine, expire_on_commit=False, class_=AsyncSession)

    async def connect(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("db.connected", backend=self.engine.dialect.name)

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("db.disconnected")


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    database: Database = request.app.state.db
    async with database.sessions() as session:
        try:
            yield session
        finally:
            await session.close()
