# -*- coding: utf-8 -*-
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from affiliate_portal.core.utils_core import (
    Clock,
    FrozenClock,
    SystemClock,
    blank,
    decimal_from,
    ensure_utc,
    epoch_millis,
    format_money,
    quantize_money,
    truncate,
)


def test_decimal_from_float_goes_through_str():
    assert decimal_from(0.1) == Decimal("0.1")


@pytest.mark.parametrize("value", [True, "abc", "NaN", "Infinity", None])
def test_decimal_from_rejects_garbage(value):
    with pytest.raises(ValueError):
        decimal_from(value)


def test_quantize_money_rounds_half_up():
    assert quantize_money("2.345") == Decimal("2.35")
    assert quantize_money("2.344") == Decimal("2.34")
    assert quantize_money(5) == Decimal("5.00")


def test_quantize_money_rejects_amounts_beyond_precision():
    with pytest.raises(ValueError):
        quantize_money(Decimal("1e30"))
    with pytest.raises(ValueError):
        quantize_money("1e40")


def test_format_money_keeps_trailing_zeros():
    assert format_money("12.5") == "12.50"
    assert format_money(Decimal("0")) == "0.00"


def test_ensure_utc_converts_offsets():
    plus_two = timezone(timedelta(hours=2))
    dt = datetime(2026, 1, 1, 14, 0, tzinfo=plus_two)
    assert ensure_utc(dt) == datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert ensure_utc(datetime(2026, 1, 1)).tzinfo is timezone.utc


def test_epoch_millis():
    assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000
    assert epoch_millis(datetime(1970, 1, 1, 0, 0, 0, 1500, tzinfo=timezone.utc)) == 1


def test_frozen_clock_moves_only_when_told():
    t0 = datetime(2026, 1, 1, tzinfo=timezone.utc)
    clock = FrozenClock(t0)
    assert clock.now() == t0
    assert clock.advance(seconds=5) == t0 + timedelta(seconds=5)
    clock.set(t0)
    assert clock.now() == t0


def test_clocks_satisfy_protocol():
    assert isinstance(SystemClock(), Clock)
    assert isinstance(FrozenClock(), Clock)
    assert SystemClock().now().tzinfo is not None


def test_truncate_and_blank():
    assert truncate(None, 5) is None
    assert truncate("abcdef", 3) == "abc"
    assert truncate("ab", 3) == "ab"
    assert blank("  ") and blank(None) and not blank("x")
