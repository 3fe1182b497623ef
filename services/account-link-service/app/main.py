"""FastAPI application wiring for the account link service."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from psycopg_pool import ConnectionPool

from .api.routes import router as v1_router
from .cache.memory_cache import InMemoryLocalAccountCache
from .cache.redis_cache import RedisLocalAccountCache
from .config import Settings, get_settings
from .domain.domicile import get_account_defaults
from .domain.service import LocalAccountProvider
from .repository import LocalAccountCache, LocalAccountRepository
from .steward import AccountStewardClient

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _build_entity_cache(settings: Settings) -> LocalAccountCache | None:
    """Instantiate the configured entity cache backend, preferring Redis when available."""
    if settings.entity_cache_backend == "none":
        logger.info("local account cache disabled")
        return None
    if settings.entity_cache_backend == "redis" and settings.redis_url:
        try:
            import redis

            client = redis.from_url(settings.redis_url)
            # ensure connectivity early to fail fast and fall back
            client.ping()
            logger.info("local account cache configured for redis backend at %s", settings.redis_url)
            return RedisLocalAccountCache(client, ttl_seconds=settings.entity_cache_ttl_seconds)
        except Exception as exc:  # pragma: no cover - depends on redis availability
            logger.warning("redis account cache unavailable, falling back to in-memory: %s", exc)

    logger.info("local account cache using in-memory backend")
    return InMemoryLocalAccountCache(ttl_seconds=settings.entity_cache_ttl_seconds)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialise shared resources (Postgres pool, steward client, provider) for the app lifecycle."""
    defaults = get_account_defaults()
    pool = ConnectionPool(settings.database_url, open=False)
    pool.open()
    repository = LocalAccountRepository(pool, _build_entity_cache(settings))
    if settings.auto_migrate:
        repository.ensure_schema()
    steward = AccountStewardClient.from_settings(settings)
    app.state.pool = pool
    app.state.account_provider = LocalAccountProvider(repository, steward, defaults)
    try:
        yield
    finally:
        steward.close()
        pool.close()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

# CORS for local frontend dev
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    max_age=600,
)


@app.get("/healthz", tags=["health"])
def healthz() -> dict[str, str]:
    """Return a minimal readiness indicator used by orchestration systems."""
    return {"status": "ok"}


@app.get("/metrics")
def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app.include_router(v1_router)
