# -*- coding: utf-8 -*-
# affiliate_portal/services/registration_service.py
# =============================================================================
# Purpose:
#   Creation of the administrative entities of the attribution graph:
#   brands, affiliates, referrers, campaigns, commission rates, creatives.
#   Every created row receives its public code (codes_service.assign_code).
#
# Invariants:
#   • brands.email and brands.tracking_domain are unique across the portal;
#     affiliate and referrer emails are unique within their brand.
#   • Passwords are stored as hashes only.
#   • Commission rates: kind fixed|percent, value >= 0, percent <= 100.
#
# Transactions:
#   • Functions flush and never commit; the caller owns the transaction.
#
# Errors:
#   • NotFoundError: unknown parent (brand, campaign).
#   • ConflictError: taken email / tracking domain.
#   • ValidationError: malformed input.
# =============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.core.errors_core import ConflictError, NotFoundError, ValidationError
from affiliate_portal.core.logging_core import get_logger, set_request_context
from affiliate_portal.core.security_core import MIN_PASSWORD_LENGTH, hash_password, normalize_email
from affiliate_portal.core.utils_core import MONEY_MAX, Clock, SystemClock, blank, quantize_money
from affiliate_portal.crud.brands_crud import BrandsCRUD
from affiliate_portal.crud.campaigns_crud import CampaignsCRUD
from affiliate_portal.models import Affiliate, Brand, Campaign, CommissionRate, Creative, Referrer
from affiliate_portal.services.attribution_model import CommissionRateKind
from affiliate_portal.services.codes_service import assign_code, placeholder_code

logger = get_logger(__name__)

_HUNDRED = Decimal(100)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _required_text(value: Optional[str], field_name: str) -> str:
    if blank(value):
        raise ValidationError(f"'{field_name}' is required.", field=field_name)
    return value.strip()  # type: ignore[union-attr]


def _password_hash(password: Optional[str], *, required: bool = True) -> Optional[str]:
    if password is None and not required:
        return None
    if password is None or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            field="password",
        )
    return hash_password(password)


async def _brand_or_404(crud: BrandsCRUD, brand_id: int) -> Brand:
    brand = await crud.get_brand(brand_id)
    if brand is None:
        raise NotFoundError("Brand not found.", details={"brand_id": brand_id})
    return brand


async def _campaign_or_404(crud: CampaignsCRUD, campaign_id: int) -> Campaign:
    campaign = await crud.get_campaign(campaign_id)
    if campaign is None:
        raise NotFoundError("Campaign not found.", details={"campaign_id": campaign_id})
    return campaign


# -----------------------------------------------------------------------------
# Brands, affiliates, referrers
# -----------------------------------------------------------------------------
async def register_brand(
    db: AsyncSession,
    *,
    name: str,
    email: str,
    password: str,
    website: Optional[str] = None,
    tracking_domain: Optional[str] = None,
    settings: Optional[Dict[str, Any]] = None,
    timezone: str = "UTC",
    clock: Optional[Clock] = None,
) -> Brand:
    clock = clock or SystemClock()
    crud = BrandsCRUD(db)

    name = _required_text(name, "name")
    email_norm = normalize_email(email)
    if email_norm is None:
        raise ValidationError("'email' is required.", field="email")
    domain = None if blank(tracking_domain) else tracking_domain.strip().lower()  # type: ignore[union-attr]
    password_hash = _password_hash(password)

    if await crud.brand_email_taken(email_norm):
        raise ConflictError("Email is already registered.", field="email")
    if domain and await crud.tracking_domain_taken(domain):
        raise ConflictError("Tracking domain is already in use.", field="tracking_domain")

    now = clock.now()
    brand = await crud.add_brand(
        code=placeholder_code(),
        name=name,
        email=email_norm,
        password_hash=password_hash,
        website=website,
        tracking_domain=domain,
        settings=dict(settings or {}),
        timezone=timezone or "UTC",
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, brand, now)
    set_request_context(brand_id=brand.id)
    logger.info("Brand registered", extra={"brand_code": brand.code})
    return brand


async def register_affiliate(
    db: AsyncSession,
    *,
    brand_id: int,
    name: str,
    email: str,
    password: str,
    payment_details: Optional[Dict[str, Any]] = None,
    clock: Optional[Clock] = None,
) -> Affiliate:
    clock = clock or SystemClock()
    crud = BrandsCRUD(db)
    brand = await _brand_or_404(crud, brand_id)

    name = _required_text(name, "name")
    email_norm = normalize_email(email)
    if email_norm is None:
        raise ValidationError("'email' is required.", field="email")
    password_hash = _password_hash(password)
    if await crud.affiliate_email_taken(brand.id, email_norm):
        raise ConflictError("Email is already registered for this brand.", field="email")

    now = clock.now()
    affiliate = await crud.add_affiliate(
        code=placeholder_code(),
        brand_id=brand.id,
        name=name,
        email=email_norm,
        password_hash=password_hash,
        payment_details=payment_details,
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, affiliate, now)
    logger.info("Affiliate registered", extra={"brand_id": brand.id, "affiliate_code": affiliate.code})
    return affiliate


async def register_referrer(
    db: AsyncSession,
    *,
    brand_id: int,
    name: str,
    external_id: str,
    email: Optional[str] = None,
    password: Optional[str] = None,
    is_active: bool = True,
    clock: Optional[Clock] = None,
) -> Referrer:
    """Referrers may sign up without credentials; external_id is mandatory."""
    clock = clock or SystemClock()
    crud = BrandsCRUD(db)
    brand = await _brand_or_404(crud, brand_id)

    name = _required_text(name, "name")
    external_id = _required_text(external_id, "external_id")
    email_norm = normalize_email(email)
    password_hash = _password_hash(password, required=False)
    if email_norm and await crud.referrer_email_taken(brand.id, email_norm):
        raise ConflictError("Email is already registered for this brand.", field="email")

    now = clock.now()
    referrer = await crud.add_referrer(
        code=placeholder_code(),
        brand_id=brand.id,
        name=name,
        email=email_norm,
        password_hash=password_hash,
        external_id=external_id,
        is_active=bool(is_active),
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, referrer, now)
    return referrer


async def set_referrer_active(
    db: AsyncSession,
    *,
    referrer_id: int,
    active: bool,
    clock: Optional[Clock] = None,
) -> Referrer:
    clock = clock or SystemClock()
    crud = BrandsCRUD(db)
    referrer = await crud.get_referrer(referrer_id)
    if referrer is None:
        raise NotFoundError("Referrer not found.", details={"referrer_id": referrer_id})
    return await crud.set_referrer_active(referrer, active, at=clock.now())


# -----------------------------------------------------------------------------
# Campaigns, commission rates, creatives
# -----------------------------------------------------------------------------
async def create_campaign(
    db: AsyncSession,
    *,
    brand_id: int,
    title: str,
    description: Optional[str] = None,
    settings: Optional[Dict[str, Any]] = None,
    is_active: bool = True,
    clock: Optional[Clock] = None,
) -> Campaign:
    clock = clock or SystemClock()
    brand = await _brand_or_404(BrandsCRUD(db), brand_id)
    title = _required_text(title, "title")

    now = clock.now()
    campaign = await CampaignsCRUD(db).add_campaign(
        code=placeholder_code(),
        brand_id=brand.id,
        title=title,
        description=description,
        settings=dict(settings or {}),
        is_active=bool(is_active),
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, campaign, now)
    logger.info("Campaign created", extra={"brand_id": brand.id, "campaign_code": campaign.code})
    return campaign


async def add_commission_rate(
    db: AsyncSession,
    *,
    campaign_id: int,
    title: str,
    kind: str,
    value: Any,
    clock: Optional[Clock] = None,
) -> CommissionRate:
    clock = clock or SystemClock()
    crud = CampaignsCRUD(db)
    campaign = await _campaign_or_404(crud, campaign_id)
    title = _required_text(title, "title")

    try:
        rate_kind = CommissionRateKind(kind)
    except ValueError:
        raise ValidationError("Rate kind must be 'fixed' or 'percent'.", field="kind") from None
    try:
        amount = quantize_money(value)
    except ValueError:
        raise ValidationError("'value' must be a number.", field="value") from None
    if amount < 0:
        raise ValidationError("'value' must not be negative.", field="value")
    if amount > MONEY_MAX:
        raise ValidationError(f"'value' must not exceed {MONEY_MAX}.", field="value")
    if rate_kind is CommissionRateKind.PERCENT and amount > _HUNDRED:
        raise ValidationError("A percentage cannot exceed 100.", field="value")

    now = clock.now()
    rate = await crud.add_rate(
        code=placeholder_code(),
        campaign_id=campaign.id,
        title=title,
        kind=rate_kind.value,
        value=amount,
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, rate, now)
    return rate


async def add_creative(
    db: AsyncSession,
    *,
    campaign_id: int,
    name: str,
    kind: str,
    path: str,
    is_active: bool = True,
    clock: Optional[Clock] = None,
) -> Creative:
    clock = clock or SystemClock()
    crud = CampaignsCRUD(db)
    campaign = await _campaign_or_404(crud, campaign_id)

    now = clock.now()
    creative = await crud.add_creative(
        code=placeholder_code(),
        campaign_id=campaign.id,
        name=_required_text(name, "name"),
        kind=_required_text(kind, "kind"),
        path=_required_text(path, "path"),
        is_active=bool(is_active),
        created_at=now,
        updated_at=now,
    )
    await assign_code(db, creative, now)
    return creative


__all__ = [
    "register_brand",
    "register_affiliate",
    "register_referrer",
    "set_referrer_active",
    "create_campaign",
    "add_commission_rate",
    "add_creative",
]
