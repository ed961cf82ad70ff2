"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root: the HTTP client, the
    cache and the aggregation engine are built here, once, and handed to
    routers through ``app.state``.

Tags:
    addressiq, api, app-factory, composition-root, FastAPI

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from addressiq import __version__
from addressiq.api.deps import get_settings
from addressiq.api.middleware.errors import (
    addressiq_error_handler,
    unhandled_exception_handler,
    validation_error_handler,
)
from addressiq.api.middleware.request_id import RequestIDMiddleware
from addressiq.api.middleware.timing import TimingMiddleware
from addressiq.api.routers import admin, meta, properties, search
from addressiq.core.cache import build_result_cache
from addressiq.core.errors import AddressIQError
from addressiq.core.logging import configure_logging, get_logger
from addressiq.core.settings import Settings
from addressiq.engine import Aggregator
from addressiq.transport.client import HttpClient

log = get_logger("addressiq.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: build shared collaborators, close them on shutdown."""
    settings: Settings = app.state.settings
    injected: HttpClient | None = app.state.http
    http = injected or HttpClient(timeout=settings.http_timeout_seconds)
    cache = build_result_cache(settings)

    app.state.http = http
    app.state.cache = cache
    app.state.aggregator = Aggregator(http, settings, cache=cache)
    log.info(
        "addressiq_api_starting",
        version=app.version,
        cache=cache.backend.name if cache else "disabled",
        address_service=bool(settings.bag_api_url),
    )

    try:
        yield
    finally:
        if injected is None:
            await http.aclose()
        app.state.http = injected
        log.info("addressiq_api_shutting_down")


def create_app(
    *,
    settings: Settings | None = None,
    http: HttpClient | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Args:
        settings: Override settings (tests). When ``None`` the cached
            singleton from :func:`get_settings` is used.
        http: Pre-built HTTP helper (tests inject one over a mock
            transport). When ``None`` the lifespan creates and owns one.
    """
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.log_json)

    app = FastAPI(
        title="AddressIQ API",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.http = http
    app.state.cache = None

    # Override DI so endpoints use the provided settings
    app.dependency_overrides[get_settings] = lambda: settings

    # ── Middleware (outermost → innermost) ────────────────────────────
    app.add_middleware(TimingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=bool(settings.frontend_origin),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(AddressIQError, addressiq_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    app.include_router(meta.router, tags=["meta"])
    app.include_router(properties.router, tags=["property"])
    app.include_router(search.router, tags=["search"])
    app.include_router(admin.router, tags=["admin"])

    return app
