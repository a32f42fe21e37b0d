# -*- coding: utf-8 -*-
# affiliate_portal/schemas/tracking_schemas.py
# Request/response models of links, clicks and conversions.
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import AliasChoices, BaseModel, Field

from .common_schemas import IPText, MoneyOut, ORMModel


class LinkIn(BaseModel):
    kind: Literal["affiliate", "referral"]
    affiliate_id: Optional[int] = None
    referrer_id: Optional[int] = None
    campaign_id: Optional[int] = None


class LinkOut(ORMModel):
    id: int
    code: str
    brand_id: int
    kind: str
    affiliate_id: Optional[int] = None
    referrer_id: Optional[int] = None
    campaign_id: Optional[int] = None
    created_at: datetime


class ClickOut(ORMModel):
    id: int
    link_id: int
    ip_address: IPText = None
    user_agent: Optional[str] = None
    sub_ids: Dict[str, Any]
    created_at: datetime


class ConversionIn(BaseModel):
    click_id: int = Field(..., ge=1)
    brand_id: int = Field(..., ge=1)
    sale_amount: Optional[Decimal] = None
    commission_amount: Optional[Decimal] = Field(None, description="Overrides the campaign rate")
    commission_rate_code: Optional[str] = Field(None, description="Rate of the campaign to apply")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class ConversionOut(ORMModel):
    id: int
    click_id: int
    brand_id: int
    sale_amount: Optional[MoneyOut] = None
    commission_amount: MoneyOut
    status: str
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias=AliasChoices("meta", "metadata"))
    created_at: datetime


__all__ = ["LinkIn", "LinkOut", "ClickOut", "ConversionIn", "ConversionOut"]
