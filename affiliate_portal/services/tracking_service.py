# -*- coding: utf-8 -*-
# affiliate_portal/services/tracking_service.py
# =============================================================================
# Purpose:
#   • Click tracking behind the public redirect: resolve the link code,
#     record the click, compute where the visitor goes next.
#   • Conversion recording: match an external sale/signup back to a click,
#     compute the commission from the campaign's rate.
#
# Invariants:
#   • A click converts at most once: pre-check through the model, backstop
#     through UNIQUE(conversions.click_id).
#   • An explicit commission_amount wins; otherwise the campaign rate applies;
#     no campaign and no amount means 0.00.
#   • The destination always carries CLICK_ID_PARAM=<click id>.
#
# Safeguards:
#   • Unparseable IPs are stored as NULL; user agents and sub-ids are cut to
#     the configured lengths.
# =============================================================================

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.config_core import get_settings
from affiliate_portal.core.errors_core import DuplicateConversionError, NotFoundError, ValidationError
from affiliate_portal.core.logging_core import get_logger, set_request_context
from affiliate_portal.core.utils_core import Clock, SystemClock, truncate
from affiliate_portal.crud.brands_crud import BrandsCRUD
from affiliate_portal.crud.campaigns_crud import CampaignsCRUD
from affiliate_portal.crud.links_crud import LinksCRUD
from affiliate_portal.crud.tracking_crud import TrackingCRUD
from affiliate_portal.models import Brand, Campaign, Click, Conversion, Link
from affiliate_portal.services.attribution_model import AttributionLinkModel
from affiliate_portal.services.commission_rules import compute_commission, select_rate
from affiliate_portal.services.links_service import get_link_by_code

logger = get_logger(__name__)
settings = get_settings()


@dataclass
class TrackedClick:
    click: Click
    link: Link
    destination: str


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def clean_ip(raw: Optional[str]) -> Optional[str]:
    """Canonical text form of an IPv4/IPv6 address, or None."""
    if not raw:
        return None
    try:
        return str(ipaddress.ip_address(raw.strip()))
    except ValueError:
        return None


def clean_sub_ids(raw: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Drops empty values and cuts the rest to SUB_ID_MAX_LENGTH."""
    out: Dict[str, str] = {}
    for key, value in (raw or {}).items():
        if value is None or str(value) == "":
            continue
        out[str(key)] = truncate(str(value), settings.SUB_ID_MAX_LENGTH)  # type: ignore[assignment]
    return out


def with_query_param(url: str, name: str, value: Any) -> str:
    """Appends (or replaces) one query parameter, keeping the others in order."""
    parts = urlsplit(url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != name]
    query.append((name, str(value)))
    return urlunsplit((parts.scheme, parts.netloc, parts.path or "/", urlencode(query), parts.fragment))


def landing_url(brand: Optional[Brand], campaign: Optional[Campaign]) -> str:
    """campaign.settings.landing_url → brand.website → DEFAULT_LANDING_URL."""
    if campaign is not None:
        url = (campaign.settings or {}).get("landing_url")
        if url:
            return str(url)
    if brand is not None and brand.website:
        return brand.website
    return settings.DEFAULT_LANDING_URL


# -----------------------------------------------------------------------------
# Clicks
# -----------------------------------------------------------------------------
async def track_click(
    db: AsyncSession,
    *,
    code: str,
    ip: Optional[str],
    user_agent: Optional[str],
    sub_ids: Optional[Mapping[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> TrackedClick:
    """Records one visit through link `code` and returns where to send it."""
    model = AttributionLinkModel(clock=clock or SystemClock())
    link = await get_link_by_code(db, code)
    set_request_context(brand_id=link.brand_id)

    record = model.record_click(
        link,
        clean_ip(ip),
        truncate(user_agent, settings.USER_AGENT_MAX_LENGTH),
        clean_sub_ids(sub_ids),
    ).unwrap()
    click = await TrackingCRUD(db).add_click(
        link_id=record.link_id,
        ip_address=record.ip_address,
        user_agent=record.user_agent,
        sub_ids=record.sub_ids,
        created_at=record.created_at,
        updated_at=record.created_at,
    )

    brand = await BrandsCRUD(db).get_brand(link.brand_id)
    campaign = await CampaignsCRUD(db).get_campaign(link.campaign_id) if link.campaign_id else None
    destination = with_query_param(landing_url(brand, campaign), settings.CLICK_ID_PARAM, click.id)

    logger.info("Click recorded", extra={"link_code": link.code, "click_id": click.id})
    return TrackedClick(click=click, link=link, destination=destination)


async def list_clicks(
    db: AsyncSession,
    *,
    link_id: int,
    limit: int = 50,
    before_id: Optional[int] = None,
) -> list[Click]:
    return await TrackingCRUD(db).list_clicks_cursor(link_id, limit=limit, before_id=before_id)


# -----------------------------------------------------------------------------
# Conversions
# -----------------------------------------------------------------------------
async def record_conversion(
    db: AsyncSession,
    *,
    click_id: int,
    brand_id: int,
    sale_amount: Any = None,
    commission_amount: Any = None,
    commission_rate_code: Optional[str] = None,
    metadata: Optional[Mapping[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> Conversion:
    """
    Converts click `click_id` under brand `brand_id`.

    Raises NotFoundError, ValidationError or DuplicateConversionError.
    """
    model = AttributionLinkModel(clock=clock or SystemClock())
    tracking = TrackingCRUD(db)

    click = await tracking.get_click(click_id)
    if click is None:
        raise NotFoundError("Click not found.", details={"click_id": click_id})
    brand = await BrandsCRUD(db).get_brand(brand_id)
    if brand is None:
        raise NotFoundError("Brand not found.", details={"brand_id": brand_id})
    set_request_context(brand_id=brand.id)
    link = await LinksCRUD(db).get(click.link_id)
    existing = await tracking.get_conversion_by_click(click.id)

    record = model.record_conversion(
        click,
        brand,
        existing=existing,
        link=link,
        sale_amount=sale_amount,
        commission_amount=commission_amount,
        metadata=metadata,
    ).unwrap()

    commission = record.commission_amount
    if commission_amount is None:
        if link is not None and link.campaign_id is not None:
            rates = await CampaignsCRUD(db).list_rates(link.campaign_id)
            rate = select_rate(rates, commission_rate_code)
            if rate is None and commission_rate_code is not None:
                raise NotFoundError(
                    "Commission rate not found for this campaign.",
                    details={"commission_rate_code": commission_rate_code},
                )
            if rate is not None:
                commission = compute_commission(rate, record.sale_amount)
        elif commission_rate_code is not None:
            raise ValidationError(
                "The click's link has no campaign to take a rate from.",
                field="commission_rate_code",
            )

    try:
        conversion = await tracking.add_conversion(
            click_id=record.click_id,
            brand_id=record.brand_id,
            sale_amount=record.sale_amount,
            commission_amount=commission,
            status=record.status,
            meta=record.metadata,
            created_at=record.created_at,
            updated_at=record.created_at,
        )
    except IntegrityError:
        await db.rollback()
        logger.warning("Concurrent conversion on the same click", extra={"click_id": click_id})
        raise DuplicateConversionError(click_id) from None

    logger.info(
        "Conversion recorded",
        extra={"conversion_id": conversion.id, "click_id": click.id, "commission": str(commission)},
    )
    return conversion


async def list_conversions(
    db: AsyncSession,
    *,
    brand_id: int,
    limit: int = 50,
    before_id: Optional[int] = None,
) -> list[Conversion]:
    return await TrackingCRUD(db).list_conversions_cursor(brand_id, limit=limit, before_id=before_id)


__all__ = [
    "TrackedClick",
    "clean_ip",
    "clean_sub_ids",
    "with_query_param",
    "landing_url",
    "track_click",
    "list_clicks",
    "record_conversion",
    "list_conversions",
]
