# -*- coding: utf-8 -*-
# affiliate_portal/models/payout_models.py
# =============================================================================
# Payout: money owed to an affiliate of a brand.
#
# Status graph (enforced by the attribution model, persisted through a
# compare-and-swap UPDATE keyed on the expected status):
#     pending → processing → paid
#        └──────────┴──────→ declined
#
# Invariants:
#   • amount > 0.
#   • paid rows carry transaction_id; declined rows carry decline_reason.
# =============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database_core import Base
from ..core.utils_core import MONEY_DECIMALS, MONEY_PRECISION
from .mixins import CodedMixin


class Payout(CodedMixin, Base):
    __tablename__ = "payouts"
    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        CheckConstraint(
            "status IN ('pending', 'processing', 'paid', 'declined')",
            name="status_allowed",
        ),
        CheckConstraint("status <> 'paid' OR transaction_id IS NOT NULL", name="paid_has_transaction"),
        CheckConstraint("status <> 'declined' OR decline_reason IS NOT NULL", name="declined_has_reason"),
    )

    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    affiliate_id: Mapped[int] = mapped_column(Integer, ForeignKey("affiliates.id"), nullable=False, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_DECIMALS), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    transaction_id: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    decline_reason: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return self._label(status=self.status, amount=self.amount)


Index("ix_payouts_brand_status_id", Payout.brand_id, Payout.status, Payout.id)


__all__ = ["Payout"]
