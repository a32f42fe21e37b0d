# -*- coding: utf-8 -*-
# affiliate_portal/crud/__init__.py
# Storage access layer: one CRUD class per aggregate over an AsyncSession.
from __future__ import annotations

from .brands_crud import BrandsCRUD
from .campaigns_crud import CampaignsCRUD
from .codes_crud import code_taken, get_by_code
from .links_crud import LinksCRUD
from .payouts_crud import PayoutsCRUD
from .tracking_crud import TrackingCRUD

__all__ = [
    "BrandsCRUD",
    "CampaignsCRUD",
    "LinksCRUD",
    "TrackingCRUD",
    "PayoutsCRUD",
    "code_taken",
    "get_by_code",
]
