# -*- coding: utf-8 -*-
# affiliate_portal/schemas/brand_schemas.py
# Request/response models of brands, affiliates, referrers, campaigns,
# commission rates and creatives. Password hashes never leave the API.
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Literal, Optional

from pydantic import BaseModel, Field

from .common_schemas import MoneyOut, ORMModel


# ---------------------------------------------------------------- brands
class BrandIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)
    website: Optional[str] = Field(None, max_length=255)
    tracking_domain: Optional[str] = Field(None, max_length=255)
    settings: Dict[str, Any] = Field(default_factory=dict)
    timezone: str = Field("UTC", max_length=64)


class BrandOut(ORMModel):
    id: int
    code: str
    name: str
    email: str
    website: Optional[str] = None
    tracking_domain: Optional[str] = None
    settings: Dict[str, Any]
    timezone: str
    created_at: datetime


# ------------------------------------------------------------ affiliates
class AffiliateIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    password: str = Field(..., min_length=1, max_length=255)
    payment_details: Optional[Dict[str, Any]] = None


class AffiliateOut(ORMModel):
    id: int
    code: str
    brand_id: int
    name: str
    email: str
    created_at: datetime


# ------------------------------------------------------------- referrers
class ReferrerIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    external_id: str = Field(..., min_length=1, max_length=255)
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=255)
    is_active: bool = True


class ReferrerActivationIn(BaseModel):
    active: bool


class ReferrerOut(ORMModel):
    id: int
    code: str
    brand_id: int
    name: str
    email: Optional[str] = None
    external_id: str
    is_active: bool
    created_at: datetime


# ------------------------------------------------------------- campaigns
class CampaignIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    settings: Dict[str, Any] = Field(default_factory=dict, description="landing_url sets the redirect target")
    is_active: bool = True


class CampaignOut(ORMModel):
    id: int
    code: str
    brand_id: int
    title: str
    description: Optional[str] = None
    is_active: bool
    settings: Dict[str, Any]
    created_at: datetime


class CommissionRateIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    kind: Literal["fixed", "percent"]
    value: Decimal


class CommissionRateOut(ORMModel):
    id: int
    code: str
    campaign_id: int
    title: str
    kind: str
    value: MoneyOut


class CreativeIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    kind: str = Field(..., min_length=1, max_length=32)
    path: str = Field(..., min_length=1, max_length=500)
    is_active: bool = True


class CreativeOut(ORMModel):
    id: int
    code: str
    campaign_id: int
    name: str
    kind: str
    path: str
    is_active: bool


__all__ = [
    "BrandIn",
    "BrandOut",
    "AffiliateIn",
    "AffiliateOut",
    "ReferrerIn",
    "ReferrerActivationIn",
    "ReferrerOut",
    "CampaignIn",
    "CampaignOut",
    "CommissionRateIn",
    "CommissionRateOut",
    "CreativeIn",
    "CreativeOut",
]
