"""Altar pricing API: FastAPI entry point.

Registers middleware, exception handlers, routers, and lifecycle hooks.
Infrastructure (engine, session factory, cache, breaker) is built in the
lifespan and kept on app.state; nothing is created at import time.
"""

import os
from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.middleware import RequestContextMiddleware, get_request_id
from core.cache import Cache, CacheAside, InMemoryCache, RedisCache, TtlClass
from core.database import close_db, create_engine, create_session_factory, init_db
from core.errors import InfrastructureError
from core.logging_config import setup_logging
from core.observability.otel_setup import setup_otel
from core.resilience import CircuitBreaker
from patterns.domain_config import AltarPricingConfig, CacheConfig
from verticals.altars.cache_keys import AltarCacheKeys
from verticals.altars.config import load_config
from verticals.altars.errors import QuoteError
from verticals.altars.router import router as altars_router

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:3001"
).split(",")
VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Infrastructure wiring
# ---------------------------------------------------------------------------

def build_cache(config: CacheConfig) -> Cache:
    """Redis when enabled, otherwise a process-local store."""
    if not config.enabled:
        logger.info("cache_backend", backend="memory")
        return InMemoryCache()
    logger.info("cache_backend", backend="redis")
    return RedisCache.from_url(config.redis_url, timeout_seconds=config.timeout_seconds)


def build_cache_aside(cache: Cache, config: CacheConfig) -> CacheAside:
    breaker = CircuitBreaker(
        name="cache",
        failure_threshold=config.breaker_failure_threshold,
        recovery_timeout=config.breaker_recovery_seconds,
    )
    return CacheAside(
        cache,
        ttl_seconds={TtlClass.LONG: config.ttl_long, TtlClass.MEDIUM: config.ttl_medium},
        breaker=breaker,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup/shutdown hooks."""
    config: AltarPricingConfig = app.state.config
    setup_logging(config.logging.level, json_output=config.logging.json_output)
    setup_otel(service_name="altar-pricing")

    engine = create_engine(config.database)
    if engine.dialect.name == "sqlite":
        await init_db(engine)

    cache = build_cache(config.cache)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.cache = cache
    app.state.cache_aside = build_cache_aside(cache, config.cache)
    app.state.cache_keys = AltarCacheKeys(prefix=config.cache.key_prefix)

    logger.info("api_started", version=VERSION)
    try:
        yield
    finally:
        try:
            await cache.close()
        finally:
            await close_db(engine)
            logger.info("api_stopped")


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

async def quote_error_handler(request: Request, exc: QuoteError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {**exc.to_dict(), "request_id": get_request_id()}},
    )


async def infrastructure_error_handler(request: Request, exc: InfrastructureError) -> JSONResponse:
    logger.error("request_failed", code=exc.code, operation=exc.operation, error=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {**exc.to_dict(), "request_id": get_request_id()}},
    )


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

def create_app(config: Optional[AltarPricingConfig] = None) -> FastAPI:
    app = FastAPI(
        title="Altar Pricing",
        description="Price-rule resolution, discount tiers and cached quotes for configurable altars",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.config = config or load_config()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(QuoteError, quote_error_handler)
    app.add_exception_handler(InfrastructureError, infrastructure_error_handler)

    app.include_router(altars_router, prefix="/api/altars", tags=["Altars"])

    @app.get("/health")
    async def health(request: Request):
        cache: Optional[Cache] = getattr(request.app.state, "cache", None)
        cache_up = await cache.ping() if cache is not None else False
        return {
            "status": "healthy",
            "version": VERSION,
            "cache": "up" if cache_up else "down",
        }

    return app


app = create_app()
