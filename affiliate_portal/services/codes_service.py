# -*- coding: utf-8 -*-
# affiliate_portal/services/codes_service.py
# =============================================================================
# Purpose:
#   Gives freshly inserted rows their public code.
#
# Flow (per coded row):
#   1) the service inserts the row with a throw-away placeholder code and
#      flushes to learn its id;
#   2) assign_code() walks CodeGenerator.candidate(id, created_at, attempt)
#      for attempt = 0..CODE_MAX_ATTEMPTS-1 and keeps the first candidate no
#      row of the same table carries;
#   3) no free candidate → GenerationFailedError.
#
# Invariants:
#   • Attempt 0 is the plain code; resalting only happens on a clash.
#   • The UNIQUE(code) column settles races between concurrent writers
#     (IntegrityError surfaces as a 409 conflict).
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.codes_core import CodeGenerator, default_generator
from affiliate_portal.core.config_core import get_settings
from affiliate_portal.core.errors_core import GenerationFailedError
from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.crud.codes_crud import code_taken
from affiliate_portal.models.mixins import CodedMixin

logger = get_logger(__name__)
settings = get_settings()

PLACEHOLDER_PREFIX = "tmp-"


def placeholder_code() -> str:
    """Unique stand-in used between INSERT and assign_code()."""
    return f"{PLACEHOLDER_PREFIX}{uuid4().hex}"


async def assign_code(
    db: AsyncSession,
    row: CodedMixin,
    created_at: datetime,
    *,
    codes: Optional[CodeGenerator] = None,
    max_attempts: Optional[int] = None,
) -> str:
    """Sets row.code to the first free candidate and flushes."""
    generator = codes or default_generator()
    attempts = max_attempts or settings.CODE_MAX_ATTEMPTS
    model = type(row)

    for attempt in range(attempts):
        candidate = generator.candidate(row.id, created_at, attempt)
        if await code_taken(db, model, candidate):
            logger.warning(
                "Code clash, resalting",
                extra={"table": model.__tablename__, "row_id": row.id, "attempt": attempt},
            )
            continue
        row.code = candidate
        await db.flush()
        return candidate

    logger.error(
        "No free code after %s attempts",
        attempts,
        extra={"table": model.__tablename__, "row_id": row.id},
    )
    raise GenerationFailedError(f"no free code for {model.__tablename__} id={row.id} after {attempts} attempts")


__all__ = ["placeholder_code", "assign_code", "PLACEHOLDER_PREFIX"]
