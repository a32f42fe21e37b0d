# -*- coding: utf-8 -*-
# affiliate_portal/deps.py
# =============================================================================
# Shared FastAPI dependencies: DB session, clock, keyset pagination, request
# metadata of tracked clicks, ETag.
#
# Infrastructure only; no business rules here.
# =============================================================================
from __future__ import annotations

import base64
import binascii
import hashlib
import json
from typing import Any, Dict, Optional

from fastapi import Query, Request

from affiliate_portal.core.config_core import get_settings
from affiliate_portal.core.database_core import get_db
from affiliate_portal.core.errors_core import ValidationError
from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.core.utils_core import Clock, SystemClock

logger = get_logger(__name__)
settings = get_settings()

_system_clock = SystemClock()


def get_clock() -> Clock:
    """Clock of the request; tests override it with a FrozenClock."""
    return _system_clock


# -----------------------------------------------------------------------------
# Keyset pagination
# -----------------------------------------------------------------------------
def encode_cursor(row_id: int) -> str:
    """Opaque cursor: urlsafe b64 of 'id:<row_id>'."""
    return base64.urlsafe_b64encode(f"id:{int(row_id)}".encode("ascii")).decode("ascii")


def decode_cursor(cursor: str) -> int:
    """Inverse of encode_cursor; ValidationError on a malformed cursor."""
    try:
        raw = base64.urlsafe_b64decode(cursor.encode("ascii")).decode("ascii")
        prefix, _, value = raw.partition(":")
        if prefix != "id":
            raise ValueError(raw)
        return int(value)
    except (ValueError, binascii.Error, UnicodeError):
        raise ValidationError("Malformed cursor.", field="cursor") from None


async def pagination_params(
    cursor: Optional[str] = Query(None, description="Keyset cursor from the previous page"),
    limit: int = Query(50, ge=1, le=500, description="Page size (1..500)"),
) -> Dict[str, Any]:
    """{"cursor": str|None, "limit": int, "before_id": int|None}"""
    before_id = decode_cursor(cursor) if cursor else None
    return {"cursor": cursor, "limit": limit, "before_id": before_id}


# -----------------------------------------------------------------------------
# Click metadata
# -----------------------------------------------------------------------------
def client_ip(request: Request) -> Optional[str]:
    """First X-Forwarded-For hop, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    return request.client.host if request.client else None


def sub_ids_from(request: Request) -> Dict[str, str]:
    """Values of the configured SUB_ID_PARAMS present in the query string."""
    params = request.query_params
    return {name: params[name] for name in settings.SUB_ID_PARAMS if params.get(name)}


# -----------------------------------------------------------------------------
# ETag
# -----------------------------------------------------------------------------
def make_etag(payload: Any) -> str:
    """Deterministic ETag of a JSON-able payload."""
    raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


__all__ = [
    "get_db",
    "get_clock",
    "encode_cursor",
    "decode_cursor",
    "pagination_params",
    "client_ip",
    "sub_ids_from",
    "make_etag",
]
