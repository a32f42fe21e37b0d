# -*- coding: utf-8 -*-
# affiliate_portal/schemas/__init__.py
# Pydantic models of the HTTP contract.
from __future__ import annotations

from .brand_schemas import *  # noqa: F401,F403
from .common_schemas import *  # noqa: F401,F403
from .payout_schemas import *  # noqa: F401,F403
from .tracking_schemas import *  # noqa: F401,F403
