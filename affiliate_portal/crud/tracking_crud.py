# -*- coding: utf-8 -*-
# affiliate_portal/crud/tracking_crud.py
# =============================================================================
# Storage access for clicks and conversions.
#
# Invariants:
#   • Clicks are append-only.
#   • conversions.click_id is UNIQUE; add_conversion() lets IntegrityError
#     through so the service can report the duplicate.
#   • Lists are keyset pages (id DESC), never OFFSET.
# =============================================================================
from __future__ import annotations

from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models import Click, Conversion


class TrackingCRUD:
    def __init__(self, session: AsyncSession):
        self.session = session

    # ----------------------------------------------------------------- clicks
    async def get_click(self, click_id: int) -> Click | None:
        return await self.session.get(Click, int(click_id))

    async def add_click(self, **values: Any) -> Click:
        click = Click(**values)
        self.session.add(click)
        await self.session.flush()
        return click

    async def list_clicks_cursor(
        self,
        link_id: int,
        *,
        limit: int,
        before_id: int | None = None,
    ) -> list[Click]:
        stmt: Select[tuple[Click]] = (
            select(Click)
            .where(Click.link_id == int(link_id))
            .order_by(Click.id.desc())
            .limit(limit)
        )
        if before_id is not None:
            stmt = stmt.where(Click.id < int(before_id))
        return list(await self.session.scalars(stmt))

    # ------------------------------------------------------------ conversions
    async def get_conversion_by_click(self, click_id: int) -> Conversion | None:
        return await self.session.scalar(select(Conversion).where(Conversion.click_id == int(click_id)))

    async def add_conversion(self, **values: Any) -> Conversion:
        conversion = Conversion(**values)
        self.session.add(conversion)
        await self.session.flush()
        return conversion

    async def list_conversions_cursor(
        self,
        brand_id: int,
        *,
        limit: int,
        before_id: int | None = None,
    ) -> list[Conversion]:
        stmt: Select[tuple[Conversion]] = (
            select(Conversion)
            .where(Conversion.brand_id == int(brand_id))
            .order_by(Conversion.id.desc())
            .limit(limit)
        )
        if before_id is not None:
            stmt = stmt.where(Conversion.id < int(before_id))
        return list(await self.session.scalars(stmt))


__all__ = ["TrackingCRUD"]
