# -*- coding: utf-8 -*-
# affiliate_portal/routes/tracking_routes.py
# =============================================================================
# Public click redirect and conversion intake.
#
#   GET  /r/{code}: records the click, 302 to the landing page with the
#     click id appended (CLICK_ID_PARAM).
#   POST /conversions: converts a click once; a second attempt is 409.
#
# The redirect is never cached: every visit is a click.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.utils_core import Clock
from affiliate_portal.deps import client_ip, encode_cursor, get_clock, get_db, pagination_params, sub_ids_from
from affiliate_portal.schemas.common_schemas import ERROR_RESPONSES, CursorPage
from affiliate_portal.schemas.tracking_schemas import ClickOut, ConversionIn, ConversionOut
from affiliate_portal.services import tracking_service

router = APIRouter(tags=["tracking"], responses=ERROR_RESPONSES)


@router.get(
    "/r/{code}",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    summary="Follow a tracking link",
)
async def follow_link(
    code: str,
    request: Request,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> RedirectResponse:
    tracked = await tracking_service.track_click(
        db,
        code=code,
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        sub_ids=sub_ids_from(request),
        clock=clock,
    )
    await db.commit()
    return RedirectResponse(
        tracked.destination,
        status_code=status.HTTP_302_FOUND,
        headers={"Cache-Control": "no-store"},
    )


@router.get("/links/{link_id}/clicks", response_model=CursorPage[ClickOut], summary="Clicks of a link, newest first")
async def get_link_clicks(
    link_id: int,
    page: Dict[str, Any] = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[ClickOut]:
    limit = page["limit"]
    rows = await tracking_service.list_clicks(db, link_id=link_id, limit=limit + 1, before_id=page["before_id"])
    items = rows[:limit]
    next_cursor = encode_cursor(items[-1].id) if len(rows) > limit and items else None
    return CursorPage[ClickOut](items=[ClickOut.model_validate(row) for row in items], next_cursor=next_cursor)


@router.post(
    "/conversions",
    response_model=ConversionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a conversion of a click",
)
async def post_conversion(
    body: ConversionIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ConversionOut:
    conversion = await tracking_service.record_conversion(
        db,
        click_id=body.click_id,
        brand_id=body.brand_id,
        sale_amount=body.sale_amount,
        commission_amount=body.commission_amount,
        commission_rate_code=body.commission_rate_code,
        metadata=body.metadata,
        clock=clock,
    )
    await db.commit()
    return ConversionOut.model_validate(conversion)


@router.get(
    "/brands/{brand_id}/conversions",
    response_model=CursorPage[ConversionOut],
    summary="Conversions of a brand, newest first",
)
async def get_brand_conversions(
    brand_id: int,
    page: Dict[str, Any] = Depends(pagination_params),
    db: AsyncSession = Depends(get_db),
) -> CursorPage[ConversionOut]:
    limit = page["limit"]
    rows = await tracking_service.list_conversions(
        db, brand_id=brand_id, limit=limit + 1, before_id=page["before_id"]
    )
    items = rows[:limit]
    next_cursor = encode_cursor(items[-1].id) if len(rows) > limit and items else None
    return CursorPage[ConversionOut](
        items=[ConversionOut.model_validate(row) for row in items], next_cursor=next_cursor
    )


__all__ = ["router"]
