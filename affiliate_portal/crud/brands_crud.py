# -*- coding: utf-8 -*-
# affiliate_portal/crud/brands_crud.py
# =============================================================================
# Storage access for brands and the parties they own (affiliates, referrers).
# No rules here: uniqueness pre-checks and codes are the services' job.
# =============================================================================
from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models import Affiliate, Brand, Referrer


class BrandsCRUD:
    """CRUD wrapper for brands, affiliates and referrers."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # ----------------------------------------------------------------- brands
    async def get_brand(self, brand_id: int) -> Brand | None:
        return await self.session.get(Brand, int(brand_id))

    async def brand_email_taken(self, email: str) -> bool:
        stmt = select(func.count()).select_from(Brand).where(func.lower(Brand.email) == email.lower())
        return bool(await self.session.scalar(stmt))

    async def tracking_domain_taken(self, domain: str) -> bool:
        stmt = select(func.count()).select_from(Brand).where(func.lower(Brand.tracking_domain) == domain.lower())
        return bool(await self.session.scalar(stmt))

    async def add_brand(self, **values: Any) -> Brand:
        brand = Brand(**values)
        self.session.add(brand)
        await self.session.flush()
        return brand

    # ------------------------------------------------------------- affiliates
    async def get_affiliate(self, affiliate_id: int) -> Affiliate | None:
        return await self.session.get(Affiliate, int(affiliate_id))

    async def affiliate_email_taken(self, brand_id: int, email: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(Affiliate)
            .where(Affiliate.brand_id == int(brand_id), func.lower(Affiliate.email) == email.lower())
        )
        return bool(await self.session.scalar(stmt))

    async def add_affiliate(self, **values: Any) -> Affiliate:
        affiliate = Affiliate(**values)
        self.session.add(affiliate)
        await self.session.flush()
        return affiliate

    # -------------------------------------------------------------- referrers
    async def get_referrer(self, referrer_id: int) -> Referrer | None:
        return await self.session.get(Referrer, int(referrer_id))

    async def referrer_email_taken(self, brand_id: int, email: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(Referrer)
            .where(Referrer.brand_id == int(brand_id), func.lower(Referrer.email) == email.lower())
        )
        return bool(await self.session.scalar(stmt))

    async def get_referrer_by_external_id(self, brand_id: int, external_id: str) -> Referrer | None:
        stmt: Select[tuple[Referrer]] = select(Referrer).where(
            Referrer.brand_id == int(brand_id),
            Referrer.external_id == external_id,
        )
        return await self.session.scalar(stmt)

    async def add_referrer(self, **values: Any) -> Referrer:
        referrer = Referrer(**values)
        self.session.add(referrer)
        await self.session.flush()
        return referrer

    async def set_referrer_active(self, referrer: Referrer, active: bool, *, at: Any) -> Referrer:
        referrer.is_active = bool(active)
        referrer.updated_at = at
        await self.session.flush()
        return referrer

    # ---------------------------------------------------------------- summary
    async def counts(self, brand_id: int) -> Dict[str, int]:
        """Affiliates and referrers per brand (dashboard header)."""
        out: Dict[str, int] = {}
        for key, model in (("affiliates", Affiliate), ("referrers", Referrer)):
            stmt = select(func.count()).select_from(model).where(model.brand_id == int(brand_id))
            out[key] = int(await self.session.scalar(stmt) or 0)
        return out


__all__ = ["BrandsCRUD"]
