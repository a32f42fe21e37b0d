# -*- coding: utf-8 -*-
# affiliate_portal/core/__init__.py
# =============================================================================
# Purpose:
#   Entry point of the portal core: settings, logging, start-up diagnostics
#   and re-exports of the pure helpers (utils_core, codes_core).
#
# Invariants:
#   • config_core.get_settings() is the only source of tunables.
#   • Nothing here touches the database or the request path.
#
# Safeguards:
#   • boot_core() never raises; it returns a diagnostic dict for the logs.
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List

from . import codes_core, utils_core
from .config_core import get_settings
from .logging_core import get_logger

CORE_VERSION = "1.0.0"

logger = get_logger(__name__)


def core_health() -> Dict[str, Any]:
    """
    Quick sanity checks over the settings.

    Returns {"ok": bool, "errors": [...], "snapshot": {...}} with no secrets.
    """
    settings = get_settings()
    errors: List[str] = []

    if not settings.DATABASE_URL and settings.env_normalized != "test":
        errors.append("DATABASE_URL must be set.")
    if not settings.CLICK_ID_PARAM:
        errors.append("CLICK_ID_PARAM must not be empty.")
    if settings.CLICK_ID_PARAM in settings.SUB_ID_PARAMS:
        errors.append("CLICK_ID_PARAM must not also be a sub-id parameter.")
    if settings.SUB_ID_MAX_LENGTH <= 0 or settings.USER_AGENT_MAX_LENGTH <= 0:
        errors.append("Tracking length limits must be positive.")

    return {"ok": not errors, "errors": errors, "snapshot": settings.debug_dump()}


def boot_core() -> Dict[str, Any]:
    """Logs the start-up summary and returns it."""
    settings = get_settings()
    logger.info(
        "Core boot: version=%s env=%s",
        CORE_VERSION,
        settings.env_normalized,
    )
    health = core_health()
    if not health["ok"]:
        logger.warning("Core health warnings: %s", health["errors"])
    return {
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "core_version": CORE_VERSION,
        "health": health,
    }


__all__ = [
    "CORE_VERSION",
    "get_settings",
    "logger",
    "boot_core",
    "core_health",
    "codes_core",
    "utils_core",
]
