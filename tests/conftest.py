"""
Pytest configuration and shared fixtures for the URL shortener tests.
"""

import asyncio
import itertools

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from db.database import Database
from db.exceptions import RecordNotFoundError, StorageError, UniqueConstraintError
from db.repository import SqlAlchemyUrlRepository, UrlRepository
from models.mapping import UrlMapping
from services.cache import UrlCache
from services.url_service import UrlService

BASE_URL = "http://sho.rt"


class FakeUrlRepository(UrlRepository):
    """In-memory repository with a lock-protected atomic increment."""

    def __init__(self):
        self.rows: dict[str, UrlMapping] = {}
        self.inserts = 0
        self.increments = 0
        self.insert_conflicts = 0
        self.fail_increment = False
        self.fail_storage = False
        self._lock = asyncio.Lock()
        self._sequence = itertools.count()
        self._order: dict[str, int] = {}

    async def find_by_code(self, short_code):
        self._check()
        return next((row for row in self.rows.values() if row.short_code == short_code), None)

    async def find_by_id(self, url_id):
        self._check()
        return self.rows.get(url_id)

    async def insert(self, mapping):
        self._check()
        if self.insert_conflicts > 0:
            self.insert_conflicts -= 1
            raise UniqueConstraintError("UNIQUE constraint failed: urls.short_code")
        if any(row.short_code == mapping.short_code for row in self.rows.values()):
            raise UniqueConstraintError("UNIQUE constraint failed: urls.short_code")
        self.rows[mapping.id] = mapping
        self._order[mapping.id] = next(self._sequence)
        self.inserts += 1

    async def increment_click_count(self, url_id):
        if self.fail_increment:
            raise StorageError("increment failed")
        async with self._lock:
            row = self.rows.get(url_id)
            if row is None:
                raise RecordNotFoundError(url_id)
            # Yield inside the critical section so unlocked code would lose updates.
            await asyncio.sleep(0)
            self.rows[url_id] = UrlMapping(
                id=row.id,
                original_url=row.original_url,
                short_code=row.short_code,
                click_count=row.click_count + 1,
                created_at=row.created_at,
            )
            self.increments += 1

    async def list_all(self):
        self._check()
        return sorted(
            self.rows.values(),
            key=lambda row: (row.created_at, self._order[row.id]),
            reverse=True,
        )

    async def delete_by_id(self, url_id):
        self._check()
        if url_id not in self.rows:
            raise RecordNotFoundError(url_id)
        del self.rows[url_id]

    def _check(self):
        if self.fail_storage:
            raise StorageError("database unavailable")


class FakeRedis:
    """Just enough of redis.asyncio.Redis for UrlCache."""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.expiries: dict[str, int] = {}
        self.fail = False
        self.closed = False

    async def get(self, key):
        self._check()
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self._check()
        self.data[key] = value.encode("utf-8") if isinstance(value, str) else value
        if ex is not None:
            self.expiries[key] = ex

    async def delete(self, key):
        self._check()
        return 1 if self.data.pop(key, None) is not None else 0

    async def aclose(self):
        self.closed = True

    def _check(self):
        if self.fail:
            raise RedisConnectionError("redis is down")


@pytest.fixture
def fake_repository() -> FakeUrlRepository:
    return FakeUrlRepository()


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def url_service(fake_repository) -> UrlService:
    return UrlService(fake_repository, base_url=BASE_URL)


@pytest.fixture
def cached_url_service(fake_repository, fake_redis) -> UrlService:
    return UrlService(fake_repository, base_url=BASE_URL, cache=UrlCache(fake_redis))


@pytest.fixture
async def database(tmp_path):
    database = Database(f"sqlite+aiosqlite:///{tmp_path / 'shortener.db'}")
    await database.create_tables()
    yield database
    await database.dispose()


@pytest.fixture
def sql_repository(database) -> SqlAlchemyUrlRepository:
    return SqlAlchemyUrlRepository(database.session_factory)
