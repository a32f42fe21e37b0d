# -*- coding: utf-8 -*-
# affiliate_portal/routes/__init__.py
# =============================================================================
# Single mount point of the HTTP routes:
#   • api_router: every routes module's `router` included, in order;
#   • register(app, prefix): mounts api_router on the FastAPI app;
#   • list_registered_routes(): which modules got attached, for /health.
#
# Wiring only: no SQL and no service calls here. A routes module that fails
# to import fails the start-up.
# =============================================================================

from __future__ import annotations

from importlib import import_module
from typing import List, Tuple

from fastapi import APIRouter, FastAPI

from affiliate_portal.core.logging_core import get_logger

logger = get_logger(__name__)

ROUTERS_EXPECTED: Tuple[str, ...] = (
    "brands_routes",
    "links_routes",
    "tracking_routes",
    "payouts_routes",
)

api_router = APIRouter()

_ATTACHED: List[str] = []


def _include(module_basename: str) -> None:
    module = import_module(f"{__name__}.{module_basename}")
    router = getattr(module, "router", None)
    if not isinstance(router, APIRouter):
        raise RuntimeError(f"{module.__name__} does not export an APIRouter named 'router'")
    api_router.include_router(router)
    _ATTACHED.append(module_basename)
    logger.debug("Router attached: %s", module_basename)


for _name in ROUTERS_EXPECTED:
    _include(_name)


def register(app: FastAPI, prefix: str = "") -> None:
    """Mounts every route under `prefix` (for example "/api")."""
    app.include_router(api_router, prefix=prefix)
    logger.info("Routes registered", extra={"prefix": prefix or "/", "modules": list(_ATTACHED)})


def list_registered_routes() -> List[str]:
    return list(_ATTACHED)


__all__ = ["api_router", "register", "list_registered_routes", "ROUTERS_EXPECTED"]
