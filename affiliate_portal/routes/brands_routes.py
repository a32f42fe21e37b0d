# -*- coding: utf-8 -*-
# affiliate_portal/routes/brands_routes.py
# =============================================================================
# Brand onboarding: brands, their affiliates and referrers, campaigns with
# commission rates and creatives.
#
# Routes commit after the service call; services only flush. Domain errors
# (AFPError) travel to errors_core handlers untouched.
# =============================================================================

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.errors_core import NotFoundError
from affiliate_portal.core.logging_core import get_logger
from affiliate_portal.core.utils_core import Clock
from affiliate_portal.crud.brands_crud import BrandsCRUD
from affiliate_portal.deps import get_clock, get_db
from affiliate_portal.schemas.brand_schemas import (
    AffiliateIn,
    AffiliateOut,
    BrandIn,
    BrandOut,
    CampaignIn,
    CampaignOut,
    CommissionRateIn,
    CommissionRateOut,
    CreativeIn,
    CreativeOut,
    ReferrerActivationIn,
    ReferrerIn,
    ReferrerOut,
)
from affiliate_portal.schemas.common_schemas import ERROR_RESPONSES
from affiliate_portal.services import registration_service

logger = get_logger(__name__)

router = APIRouter(tags=["brands"], responses=ERROR_RESPONSES)


@router.post("/brands", response_model=BrandOut, status_code=status.HTTP_201_CREATED, summary="Register a brand")
async def post_brand(
    body: BrandIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> BrandOut:
    brand = await registration_service.register_brand(
        db,
        name=body.name,
        email=body.email,
        password=body.password,
        website=body.website,
        tracking_domain=body.tracking_domain,
        settings=body.settings,
        timezone=body.timezone,
        clock=clock,
    )
    await db.commit()
    return BrandOut.model_validate(brand)


@router.get("/brands/{brand_id}", response_model=BrandOut, summary="Brand by id")
async def get_brand(brand_id: int, db: AsyncSession = Depends(get_db)) -> BrandOut:
    brand = await BrandsCRUD(db).get_brand(brand_id)
    if brand is None:
        raise NotFoundError("Brand not found.", details={"brand_id": brand_id})
    return BrandOut.model_validate(brand)


@router.post(
    "/brands/{brand_id}/affiliates",
    response_model=AffiliateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register an affiliate of the brand",
)
async def post_affiliate(
    brand_id: int,
    body: AffiliateIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> AffiliateOut:
    affiliate = await registration_service.register_affiliate(
        db,
        brand_id=brand_id,
        name=body.name,
        email=body.email,
        password=body.password,
        payment_details=body.payment_details,
        clock=clock,
    )
    await db.commit()
    return AffiliateOut.model_validate(affiliate)


@router.post(
    "/brands/{brand_id}/referrers",
    response_model=ReferrerOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a referrer of the brand",
)
async def post_referrer(
    brand_id: int,
    body: ReferrerIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReferrerOut:
    referrer = await registration_service.register_referrer(
        db,
        brand_id=brand_id,
        name=body.name,
        external_id=body.external_id,
        email=body.email,
        password=body.password,
        is_active=body.is_active,
        clock=clock,
    )
    await db.commit()
    return ReferrerOut.model_validate(referrer)


@router.post("/referrers/{referrer_id}/activation", response_model=ReferrerOut, summary="Enable or disable a referrer")
async def post_referrer_activation(
    referrer_id: int,
    body: ReferrerActivationIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ReferrerOut:
    referrer = await registration_service.set_referrer_active(
        db, referrer_id=referrer_id, active=body.active, clock=clock
    )
    await db.commit()
    return ReferrerOut.model_validate(referrer)


@router.post(
    "/brands/{brand_id}/campaigns",
    response_model=CampaignOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a campaign",
)
async def post_campaign(
    brand_id: int,
    body: CampaignIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CampaignOut:
    campaign = await registration_service.create_campaign(
        db,
        brand_id=brand_id,
        title=body.title,
        description=body.description,
        settings=body.settings,
        is_active=body.is_active,
        clock=clock,
    )
    await db.commit()
    return CampaignOut.model_validate(campaign)


@router.post(
    "/campaigns/{campaign_id}/commission-rates",
    response_model=CommissionRateOut,
    status_code=status.HTTP_201_CREATED,
    summary="Add a commission rate to a campaign",
)
async def post_commission_rate(
    campaign_id: int,
    body: CommissionRateIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CommissionRateOut:
    rate = await registration_service.add_commission_rate(
        db, campaign_id=campaign_id, title=body.title, kind=body.kind, value=body.value, clock=clock
    )
    await db.commit()
    return CommissionRateOut.model_validate(rate)


@router.post(
    "/campaigns/{campaign_id}/creatives",
    response_model=CreativeOut,
    status_code=status.HTTP_201_CREATED,
    summary="Attach a creative to a campaign",
)
async def post_creative(
    campaign_id: int,
    body: CreativeIn,
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> CreativeOut:
    creative = await registration_service.add_creative(
        db,
        campaign_id=campaign_id,
        name=body.name,
        kind=body.kind,
        path=body.path,
        is_active=body.is_active,
        clock=clock,
    )
    await db.commit()
    return CreativeOut.model_validate(creative)


__all__ = ["router"]
