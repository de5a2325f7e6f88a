import importlib
import logging
import pathlib
import pkgutil
from contextlib import asynccontextmanager

from fastapi import APIRouter, FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from redis.asyncio import from_url as redis_from_url

from config import Settings, get_settings
from db.database import Database
from db.repository import SqlAlchemyUrlRepository
from services.cache import UrlCache
from services.exceptions import (
    GenerationExhaustedError,
    InvalidUrlError,
    ShortCodeNotFoundError,
    StorageFailureError,
    UrlNotFoundError,
)
from services.url_service import UrlService

logger = logging.getLogger("shortener")


def _include_all_routers(app: FastAPI) -> None:
    import routes

    package_path = pathlib.Path(routes.__file__).parent
    for mod in pkgutil.iter_modules([str(package_path)]):
        module = importlib.import_module(f"routes.{mod.name}")
        # The catch-all redirect route has to come after the API routes.
        routers = [getattr(module, name) for name in dir(module)]
        routers = [attr for attr in routers if isinstance(attr, APIRouter)]
        for router in sorted(routers, key=lambda r: r.prefix == ""):
            app.include_router(router)


def create_app(settings: Settings | None = None, redis=None) -> FastAPI:
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(settings.database_url)
        await database.create_tables()

        cache = None
        redis_client = redis
        if redis_client is None and settings.redis_url:
            redis_client = redis_from_url(settings.redis_url)
        if redis_client is not None:
            cache = UrlCache(
                redis_client,
                key_prefix=settings.redis_key_prefix,
                ttl_seconds=settings.redis_cache_ttl_seconds,
            )

        app.state.url_service = UrlService(
            SqlAlchemyUrlRepository(database.session_factory),
            base_url=settings.base_url,
            cache=cache,
            max_attempts=settings.code_max_attempts,
        )
        logger.info("URL shortener started (cache %s)", "enabled" if cache else "disabled")
        try:
            yield
        finally:
            if cache is not None and redis is None:
                await cache.close()
            await database.dispose()

    app = FastAPI(title="URL Shortening Service", lifespan=lifespan)

    # Registered before the routers so /health is not taken for a short code.
    @app.get("/health", include_in_schema=False)
    async def health():
        return {"status": "ok"}

    _include_all_routers(app)

    # Exception handlers mapping domain errors to HTTP responses
    @app.exception_handler(InvalidUrlError)
    async def invalid_url_handler(_, exc: InvalidUrlError):
        return JSONResponse(status_code=400, content={"detail": exc.reason})

    @app.exception_handler(RequestValidationError)
    async def bad_request_handler(_, __):
        return JSONResponse(status_code=400, content={"detail": "URL is required and must be a string"})

    @app.exception_handler(ShortCodeNotFoundError)
    async def not_found_handler(_, __):
        return JSONResponse(status_code=404, content={"detail": "Short URL not found"})

    @app.exception_handler(UrlNotFoundError)
    async def url_not_found_handler(_, __):
        return JSONResponse(status_code=404, content={"detail": "URL not found"})

    @app.exception_handler(GenerationExhaustedError)
    async def exhausted_handler(_, __):
        logger.error("Short code generation exhausted")
        return JSONResponse(
            status_code=500,
            content={"detail": "Failed to create shortened URL. Please try again."},
        )

    @app.exception_handler(StorageFailureError)
    async def storage_failure_handler(_, exc: StorageFailureError):
        logger.error("Storage failure: %s", exc, exc_info=exc.__cause__)
        return JSONResponse(status_code=500, content={"detail": "Internal storage error. Please try again."})

    return app


app = create_app()
