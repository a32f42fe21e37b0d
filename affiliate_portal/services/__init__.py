# -*- coding: utf-8 -*-
# affiliate_portal/services/__init__.py
# =============================================================================
# Service layer of the portal.
#   • attribution_model: pure rules of the attribution graph (no I/O).
#   • commission_rules: pure commission maths.
#   • *_service: async operations over an AsyncSession; they flush
#     and leave the commit to the caller.
# =============================================================================

from __future__ import annotations

from .attribution_model import AttributionLinkModel, Outcome  # noqa: F401
from .commission_rules import compute_commission, select_rate  # noqa: F401
from .links_service import create_link, get_link_by_code  # noqa: F401
from .payouts_service import create_payout, list_payouts, transition_payout  # noqa: F401
from .registration_service import (  # noqa: F401
    add_commission_rate,
    add_creative,
    create_campaign,
    register_affiliate,
    register_brand,
    register_referrer,
)
from .tracking_service import record_conversion, track_click  # noqa: F401

__all__ = [
    "AttributionLinkModel",
    "Outcome",
    "compute_commission",
    "select_rate",
    "create_link",
    "get_link_by_code",
    "create_payout",
    "transition_payout",
    "list_payouts",
    "register_brand",
    "register_affiliate",
    "register_referrer",
    "create_campaign",
    "add_commission_rate",
    "add_creative",
    "track_click",
    "record_conversion",
]
