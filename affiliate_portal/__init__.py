# -*- coding: utf-8 -*-
# affiliate_portal/__init__.py
# FastAPI application factory of the affiliate portal.
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core import boot_core
from .core.config_core import get_settings
from .core.database_core import db_ping, dispose_engine
from .core.errors_core import setup_exception_handlers
from .core.logging_core import CorrelationIdMiddleware, get_logger
from .routes import list_registered_routes, register

logger = get_logger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    boot_core()
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    """FastAPI app with CORS, request correlation, error handlers and every router."""

    settings = get_settings()
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.APP_VERSION,
        docs_url=settings.DOCS_URL,
        openapi_url=settings.OPENAPI_URL,
        lifespan=_lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["ETag", "X-Request-ID"],
    )
    app.add_middleware(CorrelationIdMiddleware)
    setup_exception_handlers(app)
    register(app, prefix=settings.API_PREFIX)

    @app.get("/health", tags=["health"])
    async def health() -> Dict[str, Any]:
        """Liveness plus a SELECT 1 against the database."""

        db_ok = await db_ping()
        return {
            "status": "ok" if db_ok else "degraded",
            "version": settings.APP_VERSION,
            "db": db_ok,
            "routes": list_registered_routes(),
        }

    logger.info("FastAPI app initialised", extra={"env": settings.env_normalized})
    return app


__all__ = ["create_app"]
