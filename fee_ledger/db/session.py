from typing import Any, AsyncGenerator, Dict, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Database:
    """Owns the async engine and session factory for one process.

    Created at startup (see ``fee_ledger.main``) and disposed at shutdown.
    Nothing in the service layer reaches for a global engine; sessions are
    handed to services by the request layer.
    """

    def __init__(
        self,
        url: str,
        *,
        echo: bool = False,
        pool_recycle: Optional[int] = 300,
        engine: Optional[AsyncEngine] = None,
        **engine_kwargs: Any,
    ) -> None:
        self.url = url
        if engine is None:
            kwargs: Dict[str, Any] = dict(engine_kwargs)
            # pool_pre_ping: check connection is alive before use.
            # pool_recycle: discard connections after this many seconds.
            kwargs.setdefault("pool_pre_ping", True)
            if pool_recycle is not None:
                kwargs.setdefault("pool_recycle", pool_recycle)
            engine = create_async_engine(url, echo=echo, future=True, **kwargs)
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def session(self) -> AsyncSession:
        return self.sessionmaker()

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
