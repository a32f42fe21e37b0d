# -*- coding: utf-8 -*-
# affiliate_portal/routes/payouts_routes.py
# =============================================================================
# Payouts of a brand: creation, status transitions, keyset listing.
#
#   POST /brands/{id}/payouts: new payout in 'pending'.
#   POST /payouts/{id}/transition: pending → processing → paid | declined,
#     pending → declined. A concurrent transition that won first answers 409.
#   GET  /brands/{id}/payouts: ?status=&cursor=&limit=, ETag/If-None-Match.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.core.utils_core import Clock
from affiliate_portal.deps import encode_cursor, get_clock, get_db, make_etag, pagination_params
from affiliate_portal.schemas.common_schemas import ERROR_RESPONSES
from affiliate_portal.schemas.payout_schemas import PayoutIn, PayoutOut, PayoutPageOut, PayoutTransitionIn
from affiliate_portal.services import payouts_service

logger = get_logger(__name__)

router = APIRouter(tags=["payouts"], responses=ERROR_RESPONSES)


@router.post(
    "/brands/{brand_id}/payouts",
    response_model=PayoutOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a payout to an affiliate",
)
async def post_payout(
    brand_id: int,
    body: PayoutIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PayoutOut:
    payout = await payouts_service.create_payout(
        db,
        brand_id=brand_id,
        affiliate_id=body.affiliate_id,
        amount=body.amount,
        notes=body.notes,
        clock=clock,
    )
    await db.commit()
    return PayoutOut.model_validate(payout)


@router.post("/payouts/{payout_id}/transition", response_model=PayoutOut, summary="Move a payout to another status")
async def post_payout_transition(
    payout_id: int,
    body: PayoutTransitionIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> PayoutOut:
    """
    'paid' needs transaction_id, 'declined' needs decline_reason.

    Errors: 404 unknown payout, 409 invalid_transition / transition_conflict,
    422 missing_required_field / validation_error.
    """
    payout = await payouts_service.transition_payout(
        db,
        payout_id=payout_id,
        next_status=body.status,
        context=body.model_dump(exclude={"status"}, exclude_none=True),
        clock=clock,
    )
    await db.commit()
    return PayoutOut.model_validate(payout)


@router.get("/brands/{brand_id}/payouts", response_model=PayoutPageOut, summary="Payouts of a brand, newest first")
async def get_brand_payouts(
    brand_id: int,
    response: Response,
    status_filter: Optional[str] = Query(None, alias="status", description="pending|processing|paid|declined"),
    affiliate_id: Optional[int] = Query(None, ge=1),
    page: Dict[str, Any] = Depends(pagination_params),
    if_none_match: Optional[str] = Header(None, alias="If-None-Match"),
    db: AsyncSession = Depends(get_db),
) -> Any:
    result = await payouts_service.list_payouts(
        db,
        brand_id=brand_id,
        status=status_filter,
        affiliate_id=affiliate_id,
        limit=page["limit"],
        before_id=page["before_id"],
    )
    items = [PayoutOut.model_validate(row) for row in result.items]
    next_cursor = encode_cursor(result.next_before_id) if result.next_before_id is not None else None

    etag = make_etag(
        {"items": [item.model_dump(mode="json") for item in items], "next_cursor": next_cursor}
    )
    if if_none_match and if_none_match.strip('"') == etag:
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers={"ETag": f'"{etag}"'})
    response.headers["ETag"] = f'"{etag}"'
    return PayoutPageOut(items=items, next_cursor=next_cursor)


__all__ = ["router"]
