# -*- coding: utf-8 -*-
# affiliate_portal/core/utils_core.py
# =============================================================================
# Purpose:
#   • Core-level helpers with no FastAPI/SQLAlchemy dependency.
#   • Decimal money (2 places, HALF_UP).
#   • Time: the injectable Clock, UTC normalization, epoch milliseconds.
#   • Small string helpers.
#
# Invariants:
#   • Money is quantized to MONEY_DECIMALS places with ROUND_HALF_UP and fits
#     Numeric(MONEY_PRECISION, MONEY_DECIMALS); MONEY_MAX is the largest amount.
#   • Every datetime leaving this module is timezone-aware UTC.
#   • All functions are pure apart from SystemClock.now().
# =============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Protocol, Union, runtime_checkable

NumberLike = Union[str, int, float, Decimal]

MONEY_DECIMALS = 2
MONEY_PRECISION = 10
MONEY_MAX = Decimal("99999999.99")
ZERO_MONEY = Decimal("0.00")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


# -----------------------------------------------------------------------------
# Decimal helpers
# -----------------------------------------------------------------------------
def decimal_from(value: NumberLike) -> Decimal:
    """
    Converts to Decimal.

    float goes through str() to avoid binary artefacts. Raises ValueError on
    garbage, NaN and infinities.
    """
    if isinstance(value, bool):
        raise ValueError("bool is not a number")
    try:
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, float):
            d = Decimal(str(value))
        else:
            d = Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"not a number: {value!r}") from exc
    if not d.is_finite():
        raise ValueError(f"not a finite number: {value!r}")
    return d


def quantize_money(value: NumberLike, decimals: int = MONEY_DECIMALS) -> Decimal:
    """
    Money with `decimals` places, ROUND_HALF_UP.

    Raises ValueError when the amount has too many digits to quantize.
    """
    q = Decimal(1).scaleb(-decimals)
    try:
        return decimal_from(value).quantize(q, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"amount out of range: {value!r}") from exc


def format_money(value: NumberLike, decimals: int = MONEY_DECIMALS) -> str:
    """'12.5' -> '12.50'. Trailing zeros are kept."""
    return f"{quantize_money(value, decimals):.{decimals}f}"


# -----------------------------------------------------------------------------
# Time
# -----------------------------------------------------------------------------
def ensure_utc(dt: datetime) -> datetime:
    """Naive datetimes are read as UTC; aware ones are converted to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def epoch_millis(dt: datetime) -> int:
    """Whole milliseconds since 1970-01-01T00:00:00Z (floor for pre-epoch)."""
    delta = ensure_utc(dt) - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


@runtime_checkable
class Clock(Protocol):
    """Source of the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return utcnow()


class FrozenClock:
    """
    Clock that only moves when told to.

        clock = FrozenClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        clock.advance(seconds=5)
    """

    def __init__(self, instant: Optional[datetime] = None) -> None:
        self._instant = ensure_utc(instant) if instant is not None else utcnow()

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = ensure_utc(instant)

    def advance(self, **delta: float) -> datetime:
        self._instant = self._instant + timedelta(**delta)
        return self._instant


# -----------------------------------------------------------------------------
# Strings
# -----------------------------------------------------------------------------
def truncate(text: Optional[str], limit: int) -> Optional[str]:
    """Cuts `text` to `limit` characters; None stays None."""
    if text is None:
        return None
    if limit <= 0:
        return ""
    return text if len(text) <= limit else text[:limit]


def blank(value: Optional[str]) -> bool:
    """True for None, '' and whitespace-only strings."""
    return value is None or not str(value).strip()


__all__ = [
    "NumberLike",
    "MONEY_DECIMALS",
    "MONEY_PRECISION",
    "MONEY_MAX",
    "ZERO_MONEY",
    "decimal_from",
    "quantize_money",
    "format_money",
    "ensure_utc",
    "epoch_millis",
    "utcnow",
    "Clock",
    "SystemClock",
    "FrozenClock",
    "truncate",
    "blank",
]
