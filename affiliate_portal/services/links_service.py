# -*- coding: utf-8 -*-
# affiliate_portal/services/links_service.py
# =============================================================================
# Purpose:
#   Persists tracking links validated by AttributionLinkModel.
#
# Flow:
#   1) load brand and the referenced affiliate / referrer / campaign;
#   2) AttributionLinkModel.check_link(): tenant and kind rules;
#   3) INSERT with a placeholder code, flush for the id;
#   4) AttributionLinkModel.create_link() mints the code from (id, created_at);
#      codes_service.assign_code() keeps it or resalts on a clash.
#
# Errors:
#   • NotFoundError for unknown ids, ValidationError from the model.
# =============================================================================

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.codes_core import default_generator
from affiliate_portal.core.errors_core import NotFoundError
from affiliate_portal.core.logging_core import get_logger, set_request_context
from affiliate_portal.core.utils_core import Clock, SystemClock
from affiliate_portal.crud.brands_crud import BrandsCRUD
from affiliate_portal.crud.campaigns_crud import CampaignsCRUD
from affiliate_portal.crud.links_crud import LinksCRUD
from affiliate_portal.models import Link
from affiliate_portal.services.attribution_model import AttributionLinkModel, LinkKind
from affiliate_portal.services.codes_service import assign_code, placeholder_code

logger = get_logger(__name__)


async def _load(getter: Any, entity_id: Optional[int], label: str) -> Any:
    if entity_id is None:
        return None
    entity = await getter(entity_id)
    if entity is None:
        raise NotFoundError(f"{label.capitalize()} not found.", details={f"{label}_id": entity_id})
    return entity


async def create_link(
    db: AsyncSession,
    *,
    brand_id: int,
    kind: str,
    affiliate_id: Optional[int] = None,
    referrer_id: Optional[int] = None,
    campaign_id: Optional[int] = None,
    clock: Optional[Clock] = None,
) -> Link:
    clock = clock or SystemClock()
    model = AttributionLinkModel(clock=clock, codes=default_generator())
    brands = BrandsCRUD(db)

    brand = await _load(brands.get_brand, brand_id, "brand")
    affiliate = await _load(brands.get_affiliate, affiliate_id, "affiliate")
    referrer = await _load(brands.get_referrer, referrer_id, "referrer")
    campaign = await _load(CampaignsCRUD(db).get_campaign, campaign_id, "campaign")
    set_request_context(brand_id=brand.id)

    error = model.check_link(brand, kind, affiliate, referrer, campaign)
    if error is not None:
        raise error

    now = clock.now()
    link = await LinksCRUD(db).add(
        code=placeholder_code(),
        brand_id=brand.id,
        kind=LinkKind(kind).value,
        affiliate_id=affiliate_id,
        referrer_id=referrer_id,
        campaign_id=campaign_id,
        created_at=now,
        updated_at=now,
    )
    record = model.create_link(
        brand, kind, affiliate, referrer, campaign, identity=link.id, created_at=now
    ).unwrap()
    await assign_code(db, link, now, codes=model.codes)
    if link.code != record.code:
        logger.info("Link code resalted", extra={"first_candidate": record.code, "link_code": link.code})

    logger.info(
        "Link created",
        extra={"link_code": link.code, "kind": link.kind, "campaign_id": campaign_id},
    )
    return link


async def get_link_by_code(db: AsyncSession, code: str) -> Link:
    link = await LinksCRUD(db).get_by_code(code)
    if link is None:
        raise NotFoundError("Link not found.", details={"code": code})
    return link


async def list_links(
    db: AsyncSession,
    *,
    brand_id: int,
    limit: int = 50,
    before_id: Optional[int] = None,
) -> list[Link]:
    return await LinksCRUD(db).list_by_brand_cursor(brand_id, limit=limit, before_id=before_id)


__all__ = ["create_link", "get_link_by_code", "list_links"]
