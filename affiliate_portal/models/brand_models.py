# -*- coding: utf-8 -*-
# affiliate_portal/models/brand_models.py
# =============================================================================
# Tenants and the parties they work with:
#   • Brand: the tenant; owns affiliates, referrers, campaigns, links.
#   • Affiliate: paid partner of one brand.
#   • Referrer: customer-side referrer of one brand, keyed by the brand's
#     own external id.
#
# Invariants:
#   • brands.email and brands.tracking_domain are globally unique.
#   • affiliates.email and referrers.email are unique per brand only.
#   • Referrers are never deleted; is_active is their lifecycle.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database_core import Base
from .mixins import CodedMixin, JSONType


class Brand(CodedMixin, Base):
    """
    A tenant of the portal.

    settings is free-form brand configuration; website is the fallback
    landing page of tracked clicks.
    """

    __tablename__ = "brands"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    tracking_domain: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    settings: Mapped[Dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="UTC")

    def __repr__(self) -> str:
        return self._label(email=self.email)


class Affiliate(CodedMixin, Base):
    __tablename__ = "affiliates"
    __table_args__ = (UniqueConstraint("brand_id", "email", name="uq_affiliates_brand_email"),)

    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    payment_details: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSONType, nullable=True)

    def __repr__(self) -> str:
        return self._label(brand_id=self.brand_id)


class Referrer(CodedMixin, Base):
    """email and password_hash are optional; external_id is the brand's own key."""

    __tablename__ = "referrers"
    __table_args__ = (UniqueConstraint("brand_id", "email", name="uq_referrers_brand_email"),)

    brand_id: Mapped[int] = mapped_column(Integer, ForeignKey("brands.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default=true())

    def __repr__(self) -> str:
        return self._label(brand_id=self.brand_id, active=self.is_active)


__all__ = ["Brand", "Affiliate", "Referrer"]
