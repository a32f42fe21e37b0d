# -*- coding: utf-8 -*-
# affiliate_portal/crud/campaigns_crud.py
# =============================================================================
# Storage access for campaigns, their commission rates and creatives.
# =============================================================================
from __future__ import annotations

from typing import Any

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models import Campaign, CommissionRate, Creative


class CampaignsCRUD:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_campaign(self, campaign_id: int) -> Campaign | None:
        return await self.session.get(Campaign, int(campaign_id))

    async def add_campaign(self, **values: Any) -> Campaign:
        campaign = Campaign(**values)
        self.session.add(campaign)
        await self.session.flush()
        return campaign

    async def list_rates(self, campaign_id: int) -> list[CommissionRate]:
        """Rates of a campaign, oldest first."""
        stmt: Select[tuple[CommissionRate]] = (
            select(CommissionRate)
            .where(CommissionRate.campaign_id == int(campaign_id))
            .order_by(CommissionRate.id.asc())
        )
        return list(await self.session.scalars(stmt))

    async def add_rate(self, **values: Any) -> CommissionRate:
        rate = CommissionRate(**values)
        self.session.add(rate)
        await self.session.flush()
        return rate

    async def list_creatives(self, campaign_id: int, *, only_active: bool = True) -> list[Creative]:
        stmt: Select[tuple[Creative]] = (
            select(Creative)
            .where(Creative.campaign_id == int(campaign_id))
            .order_by(Creative.id.asc())
        )
        if only_active:
            stmt = stmt.where(Creative.is_active.is_(True))
        return list(await self.session.scalars(stmt))

    async def add_creative(self, **values: Any) -> Creative:
        creative = Creative(**values)
        self.session.add(creative)
        await self.session.flush()
        return creative


__all__ = ["CampaignsCRUD"]
