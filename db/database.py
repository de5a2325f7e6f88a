from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Database:
    """Owns the async engine and session factory for one deployment."""

    def __init__(self, database_url: str, **engine_kwargs):
        self.engine = create_async_engine(database_url, future=True, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            self.engine, expire_on_commit=False, class_=AsyncSession
        )

    async def create_tables(self) -> None:
        # Import models so metadata is populated before table creation.
        from models import url  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()
