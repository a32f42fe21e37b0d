# -*- coding: utf-8 -*-
# affiliate_portal/schemas/payout_schemas.py
# Request/response models of payouts.
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from .common_schemas import CursorPage, MoneyOut, ORMModel


class PayoutIn(BaseModel):
    affiliate_id: int = Field(..., ge=1)
    amount: Decimal
    notes: Optional[str] = None


class PayoutTransitionIn(BaseModel):
    """transaction_id is required for 'paid', decline_reason for 'declined'."""

    status: str
    transaction_id: Optional[str] = Field(None, max_length=500)
    decline_reason: Optional[str] = Field(None, max_length=500)
    notes: Optional[str] = None


class PayoutOut(ORMModel):
    id: int
    code: str
    brand_id: int
    affiliate_id: int
    amount: MoneyOut
    status: str
    notes: Optional[str] = None
    transaction_id: Optional[str] = None
    decline_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime


PayoutPageOut = CursorPage[PayoutOut]

__all__ = ["PayoutIn", "PayoutTransitionIn", "PayoutOut", "PayoutPageOut"]
