# -*- coding: utf-8 -*-
# affiliate_portal/core/errors_core.py
# =============================================================================
# Purpose:
#   • One error layer for the portal backend.
#   • Stable machine codes for the frontend and for logs.
#   • Uniform JSON error bodies for FastAPI.
#
# Invariants:
#   • Services raise only the domain errors defined here. The pure attribution
#     model returns them inside an Outcome instead of raising.
#   • Clients never see technical details (stack traces, DSNs, SQL).
#   • Every known error has a stable `code` and a default HTTP status.
#
# Safeguards:
#   • Unknown exceptions are logged in full and answered with a bare
#     "internal_error".
#   • IntegrityError from the database maps to "conflict" (the unique
#     constraints backstop the service-level checks).
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
from typing import Any, Dict, Optional, Tuple, cast

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from affiliate_portal.core.logging_core import get_logger

logger = get_logger(__name__)


# -----------------------------------------------------------------------------
# Base domain error
# -----------------------------------------------------------------------------
@dataclass(eq=False)
class AFPError(Exception):
    """
    Base domain error.

    Fields:
      • code: stable snake_case machine code.
      • message: short client-safe message.
      • http_status: default HTTP status.
      • details: client-safe extra data.
      • field: form field the error belongs to, when there is one.
    """

    code: str
    message: str
    http_status: int = status.HTTP_400_BAD_REQUEST
    details: Dict[str, Any] = dc_field(default_factory=dict)
    field: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the client."""
        payload: Dict[str, Any] = {
            "error": self.code,
            "message": self.message,
        }
        if self.field:
            payload["field"] = self.field
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


# -----------------------------------------------------------------------------
# Common domain errors
# -----------------------------------------------------------------------------
class NotFoundError(AFPError):
    """Resource not found (brand, link, click, payout...)."""

    def __init__(
        self,
        message: str = "Resource not found.",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            code="not_found",
            message=message,
            http_status=status.HTTP_404_NOT_FOUND,
            details=details or {},
        )


class ValidationError(AFPError):
    """Input that breaks a structural rule (tenant mismatch, kind mismatch...)."""

    def __init__(
        self,
        message: str = "Invalid data.",
        *,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            code="validation_error",
            message=message,
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details or {},
            field=field,
        )


class ConflictError(AFPError):
    """A unique value (email, domain, code) is already taken."""

    def __init__(
        self,
        message: str = "Resource already exists.",
        *,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            code="conflict",
            message=message,
            http_status=status.HTTP_409_CONFLICT,
            details=details or {},
            field=field,
        )


class DuplicateConversionError(AFPError):
    """The click already converted; a click converts at most once."""

    def __init__(
        self,
        click_id: Optional[int],
        *,
        conversion_id: Optional[int] = None,
    ) -> None:
        details: Dict[str, Any] = {"click_id": click_id}
        if conversion_id is not None:
            details["conversion_id"] = conversion_id
        super().__init__(
            code="duplicate_conversion",
            message="This click already has a conversion.",
            http_status=status.HTTP_409_CONFLICT,
            details=details,
            field="click_id",
        )


class InvalidTransitionError(AFPError):
    """The payout state machine does not allow this move."""

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(
            code="invalid_transition",
            message=f"Payout cannot move from '{current}' to '{requested}'.",
            http_status=status.HTTP_409_CONFLICT,
            details={"current": current, "requested": requested},
            field="status",
        )


class MissingRequiredFieldError(AFPError):
    """A transition needs a value that was not supplied."""

    def __init__(self, field_name: str, *, message: Optional[str] = None) -> None:
        super().__init__(
            code="missing_required_field",
            message=message or f"'{field_name}' is required.",
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            field=field_name,
        )


class TransitionConflictError(AFPError):
    """Another writer moved the payout first (compare-and-swap lost)."""

    def __init__(self, payout_id: int, expected: str) -> None:
        super().__init__(
            code="transition_conflict",
            message="Payout status changed concurrently; reload and retry.",
            http_status=status.HTTP_409_CONFLICT,
            details={"payout_id": payout_id, "expected": expected},
        )


class PersistenceError(AFPError):
    """Storage failure that is not a uniqueness conflict."""

    def __init__(
        self,
        message: str = "Storage is temporarily unavailable.",
        *,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            code="persistence_error",
            message=message,
            http_status=status.HTTP_503_SERVICE_UNAVAILABLE,
            details=details or {},
        )


# -----------------------------------------------------------------------------
# Code generation errors (raised, never returned)
# -----------------------------------------------------------------------------
class CodeGenerationError(AFPError):
    """Base of the public-code generator failures."""


class InvalidIdentityError(CodeGenerationError):
    def __init__(self, identity: Any) -> None:
        super().__init__(
            code="invalid_identity",
            message="Invalid ID provided - must be a positive integer.",
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"identity": repr(identity)},
            field="id",
        )


class InvalidTimestampError(CodeGenerationError):
    def __init__(self, value: Any) -> None:
        super().__init__(
            code="invalid_timestamp",
            message="Invalid created_at provided - must be a datetime.",
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details={"type": type(value).__name__},
            field="created_at",
        )


class GenerationFailedError(CodeGenerationError):
    def __init__(self, reason: str) -> None:
        super().__init__(
            code="generation_failed",
            message=f"Failed to generate code: {reason}",
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


# -----------------------------------------------------------------------------
# Exception → (status_code, payload)
# -----------------------------------------------------------------------------
def normalize_exception(
    exc: BaseException,
) -> Tuple[int, Dict[str, Any]]:
    """
    Maps any exception to a canonical HTTP answer.

    Rules:
      • AFPError         → own http_status + to_payload().
      • IntegrityError   → 409 "conflict".
      • SQLAlchemyError  → 503 "persistence_error".
      • HTTPException    → status_code + {"error": "http_error", ...}.
      • anything else    → 500 "internal_error", no details.
    """
    if isinstance(exc, AFPError):
        return exc.http_status, exc.to_payload()

    if isinstance(exc, IntegrityError):
        logger.warning("IntegrityError mapped to conflict: %s", type(exc.orig).__name__)
        err: AFPError = ConflictError("A unique value is already taken.")
        return err.http_status, err.to_payload()

    if isinstance(exc, SQLAlchemyError):
        logger.error("Storage error", extra={"exc_type": type(exc).__name__})
        err = PersistenceError()
        return err.http_status, err.to_payload()

    if isinstance(exc, HTTPException):
        details: Dict[str, Any] = {}
        if isinstance(exc.detail, str):
            msg = exc.detail
        elif isinstance(exc.detail, dict):
            details = cast(Dict[str, Any], exc.detail)
            msg = details.get("message") or details.get("detail") or "HTTP error."
        else:
            msg = "HTTP error."
        payload: Dict[str, Any] = {"error": "http_error", "message": msg}
        if details:
            payload["details"] = details
        return exc.status_code, payload

    logger.exception("Unhandled exception", exc_info=exc, extra={"error_type": type(exc).__name__})
    return (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        {"error": "internal_error", "message": "Internal server error."},
    )


# -----------------------------------------------------------------------------
# FastAPI handlers
# -----------------------------------------------------------------------------
async def afp_error_handler(request: Request, exc: AFPError) -> JSONResponse:
    status_code, payload = normalize_exception(exc)
    logger.warning(
        "AFPError handled",
        extra={"path": request.url.path, "error": exc.code, "status": status_code},
    )
    return JSONResponse(status_code=status_code, content=payload)


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    status_code, payload = normalize_exception(exc)
    logger.warning(
        "Storage error handled",
        extra={"path": request.url.path, "status": status_code},
    )
    return JSONResponse(status_code=status_code, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code, payload = normalize_exception(exc)
    logger.error(
        "Unhandled exception handled by generic handler",
        extra={"path": request.url.path, "status": status_code, "exc_type": type(exc).__name__},
    )
    return JSONResponse(status_code=status_code, content=payload)


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Registers every handler; call once after creating the app:
        app = FastAPI(...)
        setup_exception_handlers(app)
    """
    app.add_exception_handler(AFPError, afp_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)

    logger.info("Exception handlers registered for AFPError/SQLAlchemyError/Exception")


__all__ = [
    "AFPError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "DuplicateConversionError",
    "InvalidTransitionError",
    "MissingRequiredFieldError",
    "TransitionConflictError",
    "PersistenceError",
    "CodeGenerationError",
    "InvalidIdentityError",
    "InvalidTimestampError",
    "GenerationFailedError",
    "normalize_exception",
    "setup_exception_handlers",
]
