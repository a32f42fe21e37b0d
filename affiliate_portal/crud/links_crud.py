# -*- coding: utf-8 -*-
# affiliate_portal/crud/links_crud.py
# =============================================================================
# Storage access for tracking links.
# =============================================================================
from __future__ import annotations

from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models import Link


class LinksCRUD:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, link_id: int) -> Link | None:
        return await self.session.get(Link, int(link_id))

    async def get_by_code(self, code: str) -> Link | None:
        return await self.session.scalar(select(Link).where(Link.code == code))

    async def add(self, **values: Any) -> Link:
        link = Link(**values)
        self.session.add(link)
        await self.session.flush()
        return link

    async def list_by_brand_cursor(
        self,
        brand_id: int,
        *,
        limit: int,
        before_id: int | None = None,
    ) -> list[Link]:
        """Keyset page of a brand's links, newest first (id DESC)."""
        stmt: Select[tuple[Link]] = (
            select(Link)
            .where(Link.brand_id == int(brand_id))
            .order_by(Link.id.desc())
            .limit(limit)
        )
        if before_id is not None:
            stmt = stmt.where(Link.id < int(before_id))
        return list(await self.session.scalars(stmt))


__all__ = ["LinksCRUD"]
