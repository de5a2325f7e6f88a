import dataclasses
import logging
import uuid
from datetime import datetime, timezone

from db.exceptions import RecordNotFoundError, StorageError, UniqueConstraintError
from db.repository import UrlRepository
from models.mapping import UrlMapping
from services.cache import UrlCache
from services.code_generator import DEFAULT_MAX_ATTEMPTS, generate_unique_code
from services.exceptions import (
    GenerationExhaustedError,
    MalformedCodeError,
    ShortCodeNotFoundError,
    StorageFailureError,
    UrlNotFoundError,
)
from services.validators import is_valid_short_code, normalize_url, validate_url

logger = logging.getLogger(__name__)


class UrlService:
    """Shorten, resolve, list and delete operations over a UrlRepository."""

    def __init__(
        self,
        repository: UrlRepository,
        base_url: str,
        cache: UrlCache | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.repository = repository
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.max_attempts = max_attempts

    async def shorten(self, raw_url: str) -> UrlMapping:
        original_url = normalize_url(raw_url)
        validate_url(original_url)

        # Codes that pass the existence check can still lose the insert race
        # to a concurrent request; the unique constraint decides.
        for _ in range(self.max_attempts):
            short_code = await generate_unique_code(self._code_exists, self.max_attempts)
            mapping = UrlMapping(
                id=uuid.uuid4().hex,
                original_url=original_url,
                short_code=short_code,
                click_count=0,
                created_at=datetime.now(timezone.utc),
            )
            try:
                await self.repository.insert(mapping)
            except UniqueConstraintError:
                logger.warning("Short code %s taken at insert time, retrying", short_code)
                continue
            except StorageError as exc:
                raise StorageFailureError("Failed to store shortened URL") from exc
            logger.info("Created short code %s -> %s", short_code, original_url)
            return self._with_short_url(mapping)

        logger.error("Gave up inserting a short code after %d conflicts", self.max_attempts)
        raise GenerationExhaustedError(
            f"Failed to store a unique short code after {self.max_attempts} attempts"
        )

    async def resolve_and_count(self, short_code: str) -> str:
        """Return the original URL for ``short_code`` and count the visit.

        A failed increment does not fail the redirect.
        """
        if not is_valid_short_code(short_code):
            raise MalformedCodeError(short_code)

        url_id, original_url = await self._lookup(short_code)

        try:
            await self.repository.increment_click_count(url_id)
        except RecordNotFoundError:
            # Deleted after lookup, or a stale cache entry.
            if self.cache:
                await self.cache.delete(short_code)
            raise ShortCodeNotFoundError(short_code)
        except StorageError:
            logger.exception("Failed to increment click count for %s", short_code)
        return original_url

    async def list_all(self) -> list[UrlMapping]:
        try:
            mappings = await self.repository.list_all()
        except StorageError as exc:
            raise StorageFailureError("Failed to fetch URLs") from exc
        return [self._with_short_url(mapping) for mapping in mappings]

    async def delete_by_id(self, url_id: str) -> None:
        try:
            mapping = await self.repository.find_by_id(url_id)
            if mapping is None:
                raise UrlNotFoundError(url_id)
            await self.repository.delete_by_id(url_id)
        except RecordNotFoundError as exc:
            raise UrlNotFoundError(url_id) from exc
        except StorageError as exc:
            raise StorageFailureError("Failed to delete URL") from exc

        if self.cache:
            await self.cache.delete(mapping.short_code)
        logger.info("Deleted short code %s (%s)", mapping.short_code, url_id)

    def short_url(self, short_code: str) -> str:
        return f"{self.base_url}/{short_code}"

    async def _lookup(self, short_code: str) -> tuple[str, str]:
        if self.cache:
            cached = await self.cache.get(short_code)
            if cached:
                return cached["id"], cached["original_url"]

        try:
            mapping = await self.repository.find_by_code(short_code)
        except StorageError as exc:
            raise StorageFailureError("Failed to look up short code") from exc
        if mapping is None:
            raise ShortCodeNotFoundError(short_code)

        if self.cache:
            await self.cache.set(mapping)
        return mapping.id, mapping.original_url

    async def _code_exists(self, short_code: str) -> bool:
        try:
            return await self.repository.find_by_code(short_code) is not None
        except StorageError as exc:
            raise StorageFailureError("Failed to check short code availability") from exc

    def _with_short_url(self, mapping: UrlMapping) -> UrlMapping:
        return dataclasses.replace(mapping, short_url=self.short_url(mapping.short_code))
