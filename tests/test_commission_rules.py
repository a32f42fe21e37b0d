# -*- coding: utf-8 -*-
from decimal import Decimal
from types import SimpleNamespace

import pytest

from affiliate_portal.core.errors_core import ValidationError
from affiliate_portal.services.commission_rules import compute_commission, select_rate


def _rate(kind, value, *, id=1, code="r1"):
    return SimpleNamespace(id=id, code=code, kind=kind, value=Decimal(value))


def test_fixed_rate_ignores_sale():
    assert compute_commission(_rate("fixed", "7.5"), "1000") == Decimal("7.50")
    assert compute_commission(_rate("fixed", "7.5")) == Decimal("7.50")


def test_percent_rate_of_sale():
    assert compute_commission(_rate("percent", "10"), "250.00") == Decimal("25.00")
    assert compute_commission(_rate("percent", "12.5"), "19.99") == Decimal("2.50")


def test_percent_rate_without_sale_is_zero():
    assert compute_commission(_rate("percent", "10")) == Decimal("0.00")


def test_unknown_kind():
    with pytest.raises(ValidationError):
        compute_commission(_rate("tiered", "1"), "10")


def test_bad_sale_amount():
    with pytest.raises(ValidationError) as info:
        compute_commission(_rate("percent", "10"), "lots")
    assert info.value.field == "sale_amount"


def test_select_rate_by_code_or_oldest():
    newer = _rate("fixed", "1", id=5, code="vip")
    older = _rate("percent", "5", id=2, code="base")
    assert select_rate([newer, older]) is older
    assert select_rate([newer, older], "vip") is newer
    assert select_rate([newer, older], "missing") is None
    assert select_rate([]) is None
