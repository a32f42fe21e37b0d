# -*- coding: utf-8 -*-
# affiliate_portal/models/mixins.py
# =============================================================================
# Column sets shared by the portal tables.
#   • CodedMixin: surrogate id plus the public base62 code (globally unique
#     per table, immutable once assigned).
#   • TimestampMixin: created_at / updated_at, timezone-aware.
# Services set both timestamps from the injected clock; the server defaults
# only cover rows written outside the services (manual SQL, fixtures).
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import INET, JSONB
from sqlalchemy.orm import Mapped, mapped_column

# JSONB on PostgreSQL, plain JSON elsewhere (sqlite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")
# INET on PostgreSQL; text wide enough for IPv6 elsewhere.
IPAddressType = String(45).with_variant(INET(), "postgresql")

CODE_LENGTH = 64


class TimestampMixin:
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


class CodedMixin(TimestampMixin):
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String(CODE_LENGTH), nullable=False, unique=True)

    def _label(self, **extra: Any) -> str:
        parts = " ".join(f"{key}={value}" for key, value in extra.items())
        return f"<{type(self).__name__} id={self.id} code={self.code} {parts}>".replace(" >", ">")


__all__ = ["JSONType", "IPAddressType", "CODE_LENGTH", "TimestampMixin", "CodedMixin"]
