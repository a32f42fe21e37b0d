# -*- coding: utf-8 -*-
# affiliate_portal/models/__init__.py
# =============================================================================
# Entry point of the model layer:
#   • imports every model module so Base.metadata knows all tables
#     (Alembic and the test fixtures rely on it);
#   • MODEL_REGISTRY maps table names to classes;
#   • models_health() reports missing tables.
#
# Models describe structure only; rules live in services/.
# =============================================================================

from __future__ import annotations

from typing import Any, Dict, List, Type

from ..core.database_core import Base
from .brand_models import Affiliate, Brand, Referrer
from .campaign_models import Campaign, CommissionRate, Creative
from .payout_models import Payout
from .tracking_models import Click, Conversion, Link

MODEL_REGISTRY: Dict[str, Type[Base]] = {
    model.__tablename__: model
    for model in (
        Brand,
        Affiliate,
        Referrer,
        Campaign,
        CommissionRate,
        Creative,
        Link,
        Click,
        Conversion,
        Payout,
    )
}

REQUIRED_TABLES: List[str] = [
    "brands",
    "affiliates",
    "referrers",
    "campaigns",
    "commission_rates",
    "links",
    "clicks",
    "conversions",
    "payouts",
]


def models_health() -> Dict[str, Any]:
    """{"ok": bool, "missing": [...], "tables": [...]} against Base.metadata."""
    tables = sorted(Base.metadata.tables)
    missing = [name for name in REQUIRED_TABLES if name not in Base.metadata.tables]
    return {"ok": not missing, "missing": missing, "tables": tables}


__all__ = [
    "Base",
    "MODEL_REGISTRY",
    "models_health",
    "Brand",
    "Affiliate",
    "Referrer",
    "Campaign",
    "CommissionRate",
    "Creative",
    "Link",
    "Click",
    "Conversion",
    "Payout",
]
