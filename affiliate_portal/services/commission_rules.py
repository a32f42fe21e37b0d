# -*- coding: utf-8 -*-
# affiliate_portal/services/commission_rules.py
# =============================================================================
# Commission owed per conversion under a campaign rate.
#   • fixed: the rate value, whatever the sale.
#   • percent: sale_amount * value / 100; no sale amount means nothing owed.
# Results are money (2 places, HALF_UP). Pure functions.
# =============================================================================

from __future__ import annotations

from decimal import Decimal
from typing import Any, Iterable, Optional

from affiliate_portal.core.errors_core import ValidationError
from affiliate_portal.core.utils_core import ZERO_MONEY, decimal_from, quantize_money
from affiliate_portal.services.attribution_model import CommissionRateKind

_HUNDRED = Decimal(100)


def compute_commission(rate: Any, sale_amount: Any = None) -> Decimal:
    """
    compute_commission(rate(kind="percent", value=10), "250.00") -> Decimal("25.00")

    Raises ValidationError for an unknown rate kind or a non-numeric amount.
    """
    try:
        kind = CommissionRateKind(getattr(rate.kind, "value", rate.kind))
    except ValueError:
        raise ValidationError("Unknown commission rate kind.", field="kind") from None

    try:
        value = decimal_from(rate.value)
    except ValueError:
        raise ValidationError("Commission rate value must be a number.", field="value") from None

    if kind is CommissionRateKind.FIXED:
        return quantize_money(value)

    if sale_amount is None:
        return ZERO_MONEY
    try:
        sale = decimal_from(sale_amount)
    except ValueError:
        raise ValidationError("'sale_amount' must be a number.", field="sale_amount") from None
    return quantize_money(sale * value / _HUNDRED)


def select_rate(rates: Iterable[Any], code: Optional[str] = None) -> Optional[Any]:
    """
    Rate that applies to a conversion.

    With `code`, the rate carrying that code (or None). Without it, the
    campaign's oldest rate (lowest id).
    """
    candidates = list(rates)
    if code is not None:
        return next((rate for rate in candidates if rate.code == code), None)
    if not candidates:
        return None
    return min(candidates, key=lambda rate: rate.id)


__all__ = ["compute_commission", "select_rate"]
