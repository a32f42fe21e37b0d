# -*- coding: utf-8 -*-
# affiliate_portal/schemas/common_schemas.py
# =============================================================================
# Shared pydantic pieces of the API contract:
#   • MoneyOut: Decimal rendered as a string with 2 places ("12.50");
#   • IPText: INET values (ipaddress objects on PostgreSQL) as text;
#   • ErrorResponse: the errors_core payload, for OpenAPI;
#   • CursorPage[T]: keyset page container.
# No business rules here.
# =============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer

from affiliate_portal.core.utils_core import format_money

T = TypeVar("T")

MoneyOut = Annotated[Decimal, PlainSerializer(format_money, return_type=str, when_used="always")]
IPText = Annotated[Optional[str], BeforeValidator(lambda value: None if value is None else str(value))]


class ORMModel(BaseModel):
    """Output models read straight from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Stable snake_case error code")
    message: str = Field(..., description="Human-readable message")
    field: Optional[str] = Field(None, description="Form field the error belongs to")
    details: Optional[Dict[str, Any]] = None


class CursorPage(BaseModel, Generic[T]):
    items: List[T]
    next_cursor: Optional[str] = Field(None, description="Cursor of the next page, or None at the end")
    server_time: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


ERROR_RESPONSES: Dict[int | str, Dict[str, Any]] = {
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
}

__all__ = ["MoneyOut", "IPText", "ORMModel", "ErrorResponse", "CursorPage", "ERROR_RESPONSES"]
