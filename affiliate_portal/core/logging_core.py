# -*- coding: utf-8 -*-
# affiliate_portal/core/logging_core.py
# =============================================================================
# Purpose:
#   Central logging setup of the portal backend:
#   • formats and handlers;
#   • correlation context (request_id, brand_id);
#   • secret redaction;
#   • small helpers for the rest of the package.
#
# Invariants:
#   • One log style across the application:
#       - prod (or LOG_JSON=true): JSON lines for aggregators,
#       - dev/local/test: human-readable lines.
#   • Every record carries env, svc, rid, bid.
#
# Safeguards:
#   • RedactingFilter masks configured secret values in messages and args.
#   • Correlation lives in contextvars, so concurrent requests never mix.
#
# Out of scope:
#   • No network or blocking work inside formatters and filters.
#   • Never log credential hashes or payment details.
# =============================================================================

from __future__ import annotations

import contextvars
import logging
import sys
import uuid
from typing import Any, Awaitable, Callable, Dict, Mapping, MutableMapping, Optional, Tuple

from pythonjsonlogger.json import JsonFormatter

from affiliate_portal.core.config_core import get_settings

ASGIApp = Callable[
    [Mapping[str, Any], Callable[..., Awaitable[Any]], Callable[..., Awaitable[Any]]],
    Awaitable[Any],
]


# -----------------------------------------------------------------------------
# Correlation context (contextvars), safe for async code
# -----------------------------------------------------------------------------
_rid_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "rid",
    default=None,
)  # request_id
_bid_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "bid",
    default=None,
)  # brand_id (as text, so logs stay untyped)


def set_request_context(
    *,
    request_id: Optional[str] = None,
    brand_id: Optional[int | str] = None,
) -> None:
    """
    Binds correlation fields to the current task.

    The middleware sets request_id; services add brand_id once the tenant
    of the operation is known.
    """
    if request_id is not None:
        _rid_var.set(str(request_id))
    if brand_id is not None:
        _bid_var.set(str(brand_id))


def clear_request_context() -> None:
    """Resets correlation fields; called in finally blocks."""
    _rid_var.set(None)
    _bid_var.set(None)


# -----------------------------------------------------------------------------
# Filters
# -----------------------------------------------------------------------------
class ContextFilter(logging.Filter):
    """
    Injects structured fields into every record.

    Fields:
      • env: normalized environment;
      • svc: service name (PROJECT_NAME);
      • rid: request id;
      • bid: brand id, when known.
    """

    def __init__(self, env: str, service: str) -> None:
        super().__init__()
        self._env = env
        self._svc = service

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "env"):
            record.env = self._env
        if not hasattr(record, "svc"):
            record.svc = self._svc
        if not hasattr(record, "rid"):
            record.rid = _rid_var.get() or "-"
        if not hasattr(record, "bid"):
            record.bid = _bid_var.get() or "-"
        return True


class RedactingFilter(logging.Filter):
    """
    Replaces configured secret values with a mask in message and args.

    Matches on the actual secret values taken from settings, not on key names.
    """

    MASK = "****"
    SECRET_KEYS: Tuple[str, ...] = (
        "APP_SECRET",
        "DATABASE_URL",
    )

    def __init__(self, settings_obj: object) -> None:
        super().__init__()
        self._secrets: list[str] = []
        for key in self.SECRET_KEYS:
            val = getattr(settings_obj, key, None)
            if val and isinstance(val, str):
                self._secrets.append(val)

    def _redact_text(self, text: str) -> str:
        if not text:
            return text
        redacted = text
        for secret in self._secrets:
            if secret in redacted:
                redacted = redacted.replace(secret, self.MASK)
        return redacted

    def filter(self, record: logging.LogRecord) -> bool:
        if not self._secrets:
            return True
        if isinstance(record.msg, str):
            record.msg = self._redact_text(record.msg)
        if isinstance(record.args, tuple):
            record.args = tuple(
                self._redact_text(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )
        return True


# -----------------------------------------------------------------------------
# Formatters
# -----------------------------------------------------------------------------
class DevFormatter(logging.Formatter):
    """
    Readable format for local/dev/test.

    2026-10-17 12:00:00 | INFO     | Affiliate Portal | affiliate_portal.x | rid=... bid=... | msg
    """

    def __init__(self) -> None:
        super().__init__(
            fmt=(
                "%(asctime)s | %(levelname)-8s | %(svc)s | %(name)s | "
                "rid=%(rid)s bid=%(bid)s | %(message)s"
            ),
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def _make_json_formatter() -> logging.Formatter:
    """
    JSON formatter for prod.

        {"time": "...", "level": "INFO", "service": "...", "logger": "...",
         "env": "prod", "rid": "...", "bid": "...", "msg": "...", <extra>...}
    """
    return JsonFormatter(
        "%(asctime)s %(levelname)s %(svc)s %(name)s %(env)s %(rid)s %(bid)s %(message)s",
        rename_fields={
            "asctime": "time",
            "levelname": "level",
            "svc": "service",
            "name": "logger",
            "message": "msg",
        },
    )


# -----------------------------------------------------------------------------
# Setup
# -----------------------------------------------------------------------------
def setup_logging() -> None:
    """
    Configures logging end to end:

      • root logger, level and format;
      • stdout handler with context and redaction filters;
      • uvicorn/fastapi loggers routed to root;
      • SQLAlchemy engine logger in DEBUG.
    """
    settings = get_settings()
    env = settings.env_normalized
    debug = bool(settings.DEBUG)
    service = settings.PROJECT_NAME

    root = logging.getLogger()
    root.handlers.clear()
    level = logging.DEBUG if debug else logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)

    ctx_filter = ContextFilter(env=env, service=service)
    redact_filter = RedactingFilter(settings_obj=settings)

    console_handler = logging.StreamHandler(sys.stdout)
    if env == "prod" or settings.LOG_JSON:
        formatter = _make_json_formatter()
    else:
        formatter = DevFormatter()
    console_handler.setFormatter(formatter)
    console_handler.addFilter(ctx_filter)
    console_handler.addFilter(redact_filter)
    root.addHandler(console_handler)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access", "fastapi"):
        logger = logging.getLogger(name)
        logger.handlers.clear()
        logger.setLevel(level)
        logger.propagate = True

    if debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.getLogger(__name__).info(
        "Logging initialized",
        extra={"details": {"env": env, "debug": debug, "level": logging.getLevelName(level)}},
    )


def get_logger(name: Optional[str] = None, **extra: Any) -> logging.Logger:
    """
    Returns a logger, wrapped in a LoggerAdapter when extra fields are given.

        log = get_logger(__name__, component="tracking")
    """
    base = logging.getLogger(name)
    if not extra:
        return base
    return logging.LoggerAdapter(base, extra)  # type: ignore[return-value]


# -----------------------------------------------------------------------------
# ASGI middleware for request correlation
# -----------------------------------------------------------------------------
class CorrelationIdMiddleware:
    """
    Copies X-Request-ID into contextvars (minting a uuid4 hex when absent)
    and echoes it on the response.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(
        self,
        scope: Mapping[str, Any],
        receive: Callable[..., Awaitable[Any]],
        send: Callable[..., Awaitable[Any]],
    ) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        raw_headers: MutableMapping[bytes, bytes] = dict(scope.get("headers") or [])
        headers: Dict[str, str] = {
            key.decode("latin-1").lower(): value.decode("latin-1")
            for key, value in raw_headers.items()
        }
        rid = headers.get("x-request-id") or uuid.uuid4().hex
        set_request_context(request_id=rid)

        async def send_wrapper(message: Mapping[str, Any]) -> None:
            if message.get("type") == "http.response.start":
                headers_list: list[Tuple[bytes, bytes]] = list(message.get("headers") or [])
                headers_list.append((b"x-request-id", rid.encode("latin-1")))
                new_message: Dict[str, Any] = dict(message)
                new_message["headers"] = headers_list
                await send(new_message)
                return
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            clear_request_context()


setup_logging()

__all__ = [
    "setup_logging",
    "get_logger",
    "set_request_context",
    "clear_request_context",
    "CorrelationIdMiddleware",
]
