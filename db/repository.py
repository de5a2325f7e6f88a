import abc

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from db.exceptions import RecordNotFoundError, StorageError, UniqueConstraintError
from models.mapping import UrlMapping
from models.url import URL


class UrlRepository(abc.ABC):
    """Persistence collaborator used by the URL service.

    Implementations must enforce short code uniqueness on insert and must
    increment click counts atomically in the store.
    """

    @abc.abstractmethod
    async def find_by_code(self, short_code: str) -> UrlMapping | None:
        ...

    @abc.abstractmethod
    async def find_by_id(self, url_id: str) -> UrlMapping | None:
        ...

    @abc.abstractmethod
    async def insert(self, mapping: UrlMapping) -> None:
        """Persist a new mapping. Raises UniqueConstraintError on a duplicate."""

    @abc.abstractmethod
    async def increment_click_count(self, url_id: str) -> None:
        """Add one to the click count. Raises RecordNotFoundError if the row is gone."""

    @abc.abstractmethod
    async def list_all(self) -> list[UrlMapping]:
        """All mappings, newest first."""

    @abc.abstractmethod
    async def delete_by_id(self, url_id: str) -> None:
        """Remove a mapping. Raises RecordNotFoundError if it does not exist."""


class SqlAlchemyUrlRepository(UrlRepository):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def find_by_code(self, short_code: str) -> UrlMapping | None:
        return await self._find_one(URL.short_code == short_code)

    async def find_by_id(self, url_id: str) -> UrlMapping | None:
        return await self._find_one(URL.id == url_id)

    async def insert(self, mapping: UrlMapping) -> None:
        async with self._session_factory() as session:
            session.add(URL.from_mapping(mapping))
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise UniqueConstraintError(str(exc.orig)) from exc
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StorageError(str(exc)) from exc

    async def increment_click_count(self, url_id: str) -> None:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    update(URL)
                    .where(URL.id == url_id)
                    .values(click_count=URL.click_count + 1)
                    .execution_options(synchronize_session=False)
                )
                updated = result.rowcount
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StorageError(str(exc)) from exc
        if updated == 0:
            raise RecordNotFoundError(url_id)

    async def list_all(self) -> list[UrlMapping]:
        async with self._session_factory() as session:
            try:
                result = await session.execute(select(URL).order_by(URL.created_at.desc()))
            except SQLAlchemyError as exc:
                raise StorageError(str(exc)) from exc
            return [row.to_mapping() for row in result.scalars().all()]

    async def delete_by_id(self, url_id: str) -> None:
        async with self._session_factory() as session:
            try:
                result = await session.execute(
                    delete(URL)
                    .where(URL.id == url_id)
                    .execution_options(synchronize_session=False)
                )
                updated = result.rowcount
                await session.commit()
            except SQLAlchemyError as exc:
                await session.rollback()
                raise StorageError(str(exc)) from exc
        if updated == 0:
            raise RecordNotFoundError(url_id)

    async def _find_one(self, criterion) -> UrlMapping | None:
        async with self._session_factory() as session:
            try:
                result = await session.execute(select(URL).where(criterion))
            except SQLAlchemyError as exc:
                raise StorageError(str(exc)) from exc
            url_entry = result.scalar_one_or_none()
            return url_entry.to_mapping() if url_entry else None
