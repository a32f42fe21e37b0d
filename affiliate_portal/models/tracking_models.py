# -*- coding: utf-8 -*-
# affiliate_portal/models/tracking_models.py
# =============================================================================
# The attribution chain: Link → Click → Conversion.
#
# Invariants:
#   • links.code is the public tracking token (globally unique).
#   • An affiliate link carries affiliate_id and no referrer_id; a referral
#     link the opposite (CHECK ck_links_party_matches_kind).
#   • conversions.click_id is UNIQUE: a click converts at most once. The
#     constraint settles concurrent conversion attempts on the same click.
#   • conversions.brand_id repeats the link's brand for per-brand reporting.
#
# Indexes:
#   • (link_id, id) and (brand_id, id) for keyset pages in id order.
# =============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database_core import Base
from ..core.utils_core import MONEY_DECIMALS, MONEY_PRECISION
from .mixins import CodedMixin, IPAddressType, JSONType, TimestampMixin


class Link(CodedMixin, Base):
    __tablename__ = "links"
    __table_args__ = (
        CheckConstraint("kind IN ('affiliate', 'referral')", name="kind_allowed"),
        CheckConstraint(
            "(kind = 'affiliate' AND affiliate_id IS NOT NULL AND referrer_id IS NULL)"
            " OR (kind = 'referral' AND referrer_id IS NOT NULL AND affiliate_id IS NULL)",
            name="party_matches_kind",
        ),
    )

    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    affiliate_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("affiliates.id"), nullable=True, index=True)
    referrer_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("referrers.id"), nullable=True, index=True)
    campaign_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("campaigns.id"), nullable=True, index=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False)

    def __repr__(self) -> str:
        return self._label(kind=self.kind, brand_id=self.brand_id)


class Click(TimestampMixin, Base):
    """One tracked visit. sub_ids holds the partner's own labels (sub1..subN)."""

    __tablename__ = "clicks"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    link_id: Mapped[int] = mapped_column(Integer, ForeignKey("links.id"), nullable=False, index=True)
    ip_address: Mapped[Optional[str]] = mapped_column(IPAddressType, nullable=True)
    user_agent: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sub_ids: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Click id={self.id} link_id={self.link_id}>"


class Conversion(TimestampMixin, Base):
    """`meta` is stored in the `metadata` column (the attribute name is reserved by SQLAlchemy)."""

    __tablename__ = "conversions"
    __table_args__ = (
        CheckConstraint("commission_amount >= 0", name="commission_non_negative"),
        CheckConstraint("sale_amount IS NULL OR sale_amount >= 0", name="sale_non_negative"),
        CheckConstraint("status IN ('pending', 'approved', 'rejected')", name="status_allowed"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    click_id: Mapped[int] = mapped_column(Integer, ForeignKey("clicks.id"), nullable=False, unique=True)
    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    sale_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(MONEY_PRECISION, MONEY_DECIMALS), nullable=True)
    commission_amount: Mapped[Decimal] = mapped_column(
        Numeric(MONEY_PRECISION, MONEY_DECIMALS),
        nullable=False,
        default=Decimal("0.00"),
        server_default="0.00",
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="pending", server_default="pending")
    meta: Mapped[Dict[str, Any]] = mapped_column("metadata", JSONType, nullable=False, default=dict)

    def __repr__(self) -> str:
        return f"<Conversion id={self.id} click_id={self.click_id} status={self.status}>"


Index("ix_clicks_link_id_id", Click.link_id, Click.id)
Index("ix_conversions_brand_id_id", Conversion.brand_id, Conversion.id)


__all__ = ["Link", "Click", "Conversion"]
