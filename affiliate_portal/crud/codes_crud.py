# -*- coding: utf-8 -*-
# affiliate_portal/crud/codes_crud.py
# =============================================================================
# Lookups over the public `code` column shared by every coded table.
# =============================================================================

from __future__ import annotations

from typing import Optional, Type, TypeVar

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models.mixins import CodedMixin

M = TypeVar("M", bound=CodedMixin)


async def code_taken(session: AsyncSession, model: Type[CodedMixin], code: str) -> bool:
    """True when some row of `model` already carries `code`."""
    stmt = select(exists().where(model.code == code))
    return bool(await session.scalar(stmt))


async def get_by_code(session: AsyncSession, model: Type[M], code: str) -> Optional[M]:
    return await session.scalar(select(model).where(model.code == code))


__all__ = ["code_taken", "get_by_code"]
