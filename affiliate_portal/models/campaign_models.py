# -*- coding: utf-8 -*-
# affiliate_portal/models/campaign_models.py
# =============================================================================
# Campaigns of a brand and what hangs off them:
#   • Campaign: promotion of a brand; settings.landing_url is the
#     redirect destination of its links.
#   • CommissionRate: fixed amount or percentage paid per conversion.
#   • Creative: banner/text asset offered to affiliates.
# =============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    true,
)
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database_core import Base
from ..core.utils_core import MONEY_DECIMALS, MONEY_PRECISION
from .mixins import CodedMixin, JSONType


class Campaign(CodedMixin, Base):
    __tablename__ = "campaigns"
    __table_args__ = (UniqueConstraint("brand_id", "code", name="uq_campaigns_brand_code"),)

    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())
    settings: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    def __repr__(self) -> str:
        return self._label(brand_id=self.brand_id, active=self.is_active)


class CommissionRate(CodedMixin, Base):
    """kind: 'fixed' (value is money) or 'percent' (value is a percentage of the sale)."""

    __tablename__ = "commission_rates"
    __table_args__ = (
        CheckConstraint("kind IN ('fixed', 'percent')", name="kind_allowed"),
        CheckConstraint("value >= 0", name="value_non_negative"),
    )

    campaign_id: Mapped[int] = mapped_column(Integer, ForeignKey("campaigns.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    value: Mapped[Decimal] = mapped_column(Numeric(MONEY_PRECISION, MONEY_DECIMALS), nullable=False)

    def __repr__(self) -> str:
        return self._label(kind=self.kind, value=self.value)


class Creative(CodedMixin, Base):
    __tablename__ = "creatives"

    campaign_id: Mapped[int] = mapped_column(Integer, ForeignKey("campaigns.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    path: Mapped[str] = mapped_column(String(500), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())


__all__ = ["Campaign", "CommissionRate", "Creative"]
