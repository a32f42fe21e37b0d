# -*- coding: utf-8 -*-
# affiliate_portal/routes/links_routes.py
# Tracking links: creation under a brand, lookup by public code, keyset list.
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.utils_core import Clock
from affiliate_portal.deps import encode_cursor, get_clock, get_db, pagination_params
from affiliate_portal.schemas.common_schemas import ERROR_RESPONSES, CursorPage
from affiliate_portal.schemas.tracking_schemas import LinkIn, LinkOut
from affiliate_portal.services import links_service

router = APIRouter(tags=["links"], responses=ERROR_RESPONSES)


@router.post(
    "/brands/{brand_id}/links",
    response_model=LinkOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a tracking link",
)
async def post_link(
    brand_id: int,
    body: LinkIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> LinkOut:
    link = await links_service.create_link(
        db,
        brand_id=brand_id,
        kind=body.kind,
        affiliate_id=body.affiliate_id,
        referrer_id=body.referrer_id,
        campaign_id=body.campaign_id,
        clock=clock,
    )
    await db.commit()
    return LinkOut.model_validate(link)


@router.get("/links/{code}", response_model=LinkOut, summary="Link by public code")
async def get_link(code: str, db: AsyncSession = Depends(get_db)) -> LinkOut:
    return LinkOut.model_validate(await links_service.get_link_by_code(db, code))


@router.get("/brands/{brand_id}/links", response_model=CursorPage[LinkOut], summary="Links of a brand, newest first")
async def get_brand_links(
    brand_id: int,
    page: Dict[str, Any] = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[LinkOut]:
    limit = page["limit"]
    rows = await links_service.list_links(db, brand_id=brand_id, limit=limit + 1, before_id=page["before_id"])
    items = rows[:limit]
    next_cursor = encode_cursor(items[-1].id) if len(rows) > limit and items else None
    return CursorPage[LinkOut](items=[LinkOut.model_validate(row) for row in items], next_cursor=next_cursor)


__all__ = ["router"]
