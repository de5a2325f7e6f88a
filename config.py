import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite+aiosqlite:///./shortener.db"
    base_url: str = "http://localhost:8000"
    redis_url: str | None = None
    redis_key_prefix: str = "short:"
    redis_cache_ttl_seconds: int = 3600
    code_max_attempts: int = 10
    log_level: str = "INFO"


def get_settings() -> Settings:
    return Settings(
        database_url=os.getenv("DATABASE_URL", Settings.database_url),
        base_url=os.getenv("BASE_URL", Settings.base_url).rstrip("/"),
        redis_url=os.getenv("REDIS_URL") or None,
        redis_key_prefix=os.getenv("REDIS_KEY_PREFIX", Settings.redis_key_prefix),
        redis_cache_ttl_seconds=int(os.getenv("REDIS_CACHE_TTL_SECONDS", "3600")),
        code_max_attempts=int(os.getenv("CODE_MAX_ATTEMPTS", "10")),
        log_level=os.getenv("LOG_LEVEL", Settings.log_level).upper(),
    )
