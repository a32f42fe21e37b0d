# -*- coding: utf-8 -*-
# affiliate_portal/crud/payouts_crud.py
# =============================================================================
# Storage access for payouts.
#
# Invariants:
#   • Status changes go through compare_and_set_status(): one UPDATE guarded
#     by the expected current status. Of two concurrent writers exactly one
#     sees rowcount == 1.
#   • Lists are keyset pages (id DESC).
# =============================================================================
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from affiliate_portal.models import Payout


class PayoutsCRUD:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, payout_id: int) -> Payout | None:
        return await self.session.get(Payout, int(payout_id))

    async def add(self, **values: Any) -> Payout:
        payout = Payout(**values)
        self.session.add(payout)
        await self.session.flush()
        return payout

    async def compare_and_set_status(
        self,
        payout_id: int,
        *,
        expected: str,
        status: str,
        updated_at: datetime,
        transaction_id: Optional[str] = None,
        decline_reason: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> bool:
        """
        UPDATE payouts SET status = :status, ...
         WHERE id = :id AND status = :expected

        Returns True when this call won the row.
        """
        values: dict[str, Any] = {"status": status, "updated_at": updated_at}
        if transaction_id is not None:
            values["transaction_id"] = transaction_id
        if decline_reason is not None:
            values["decline_reason"] = decline_reason
        if notes is not None:
            values["notes"] = notes

        stmt = (
            update(Payout)
            .where(Payout.id == int(payout_id), Payout.status == expected)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount == 1

    async def list_by_brand_cursor(
        self,
        brand_id: int,
        *,
        limit: int,
        before_id: int | None = None,
        status: str | None = None,
        affiliate_id: int | None = None,
    ) -> list[Payout]:
        stmt: Select[tuple[Payout]] = (
            select(Payout)
            .where(Payout.brand_id == int(brand_id))
            .order_by(Payout.id.desc())
            .limit(limit)
        )
        if status is not None:
            stmt = stmt.where(Payout.status == status)
        if affiliate_id is not None:
            stmt = stmt.where(Payout.affiliate_id == int(affiliate_id))
        if before_id is not None:
            stmt = stmt.where(Payout.id < int(before_id))
        return list(await self.session.scalars(stmt))


__all__ = ["PayoutsCRUD"]
