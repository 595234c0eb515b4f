from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from server.api.deps import get_services, get_settings
from server.api.logging_config import configure_logging
from server.api.middleware import (
    build_exception_handler,
    build_invalid_input_handler,
    build_request_id_middleware,
    build_upstream_error_handler,
)
from server.api.routers.bundle import router as bundle_router
from server.api.routers.health import router as health_router
from server.api.routers.providers import router as providers_router
from server.api.routers.search import router as search_router
from server.api.routers.status import router as status_router
from streamscout.errors import InvalidInputError, UpstreamError

_settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Arranca/para el sweeper de la caché con el ciclo de vida del servidor."""
    logger = configure_logging(_settings)
    cache = get_services().cache
    cache.start_sweeper(_settings.cache_sweep_interval_seconds)
    logger.info(
        "cache_sweeper_started",
        extra={"interval_s": _settings.cache_sweep_interval_seconds},
    )
    try:
        yield
    finally:
        cache.stop_sweeper()


def create_app() -> FastAPI:
    app = FastAPI(title="streamscout API", version="1.0.0", lifespan=lifespan)

    app.add_middleware(GZipMiddleware, minimum_size=max(0, _settings.gzip_min_size))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_settings.cors_allow_origins(),
        allow_credentials=_settings.cors_allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.middleware("http")(build_request_id_middleware(_settings))
    app.add_exception_handler(UpstreamError, build_upstream_error_handler(_settings))
    app.add_exception_handler(InvalidInputError, build_invalid_input_handler())
    app.add_exception_handler(Exception, build_exception_handler(_settings))

    app.include_router(health_router)
    app.include_router(search_router)
    app.include_router(providers_router)
    app.include_router(bundle_router)
    app.include_router(status_router)

    return app


app = create_app()
