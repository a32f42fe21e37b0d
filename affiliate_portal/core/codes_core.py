# -*- coding: utf-8 -*-
# affiliate_portal/core/codes_core.py
# =============================================================================
# Purpose:
#   • Public short codes for brands, affiliates, referrers, campaigns,
#     commission rates, creatives, links and payouts.
#   • code = base62(|created_at_ms + id|), URL-safe, deterministic.
#
# Invariants:
#   • Same (id, created_at) → same code.
#   • Output is non-empty and drawn from BASE62_ALPHABET only.
#   • The sum alone can collide; callers resalt through candidate() and rely
#     on the unique `code` column (see services/codes_service.py).
#
# Errors (raised):
#   • InvalidIdentityError: id is not a positive integer.
#   • InvalidTimestampError: created_at is missing or not a datetime.
#   • GenerationFailedError: anything else going wrong while encoding.
# =============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from affiliate_portal.core.errors_core import (
    GenerationFailedError,
    InvalidIdentityError,
    InvalidTimestampError,
)
from affiliate_portal.core.utils_core import epoch_millis

BASE62_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
_BASE = len(BASE62_ALPHABET)

DEFAULT_RESALT_PRIME = 2**61 - 1


def encode_base62(number: int) -> str:
    """Base62 of a non-negative integer; 0 encodes to '0'."""
    if number < 0:
        raise ValueError("base62 encodes non-negative integers only")
    if number == 0:
        return BASE62_ALPHABET[0]
    digits = []
    while number:
        number, rem = divmod(number, _BASE)
        digits.append(BASE62_ALPHABET[rem])
    return "".join(reversed(digits))


def decode_base62(code: str) -> int:
    """Inverse of encode_base62. ValueError on foreign characters."""
    if not code:
        raise ValueError("empty code")
    number = 0
    for char in code:
        index = BASE62_ALPHABET.find(char)
        if index < 0:
            raise ValueError(f"not a base62 character: {char!r}")
        number = number * _BASE + index
    return number


def _check_identity(identity: Any) -> int:
    if isinstance(identity, bool) or not isinstance(identity, int) or identity <= 0:
        raise InvalidIdentityError(identity)
    return identity


def _check_timestamp(created_at: Any) -> datetime:
    if not isinstance(created_at, datetime):
        raise InvalidTimestampError(created_at)
    return created_at


class CodeGenerator:
    """
    Mints candidate codes.

    `resalt_prime` spreads retry candidates far apart; attempt 0 is the plain
    code.
    """

    def __init__(self, resalt_prime: int = DEFAULT_RESALT_PRIME) -> None:
        if resalt_prime <= 1:
            raise ValueError("resalt_prime must be greater than 1")
        self.resalt_prime = resalt_prime

    def generate(self, identity: int, created_at: datetime) -> str:
        return self.candidate(identity, created_at, 0)

    def candidate(self, identity: int, created_at: datetime, attempt: int = 0) -> str:
        identity = _check_identity(identity)
        created_at = _check_timestamp(created_at)
        if isinstance(attempt, bool) or not isinstance(attempt, int) or attempt < 0:
            raise GenerationFailedError(f"bad attempt number {attempt!r}")
        try:
            combined = abs(epoch_millis(created_at) + identity)
            return encode_base62(combined + attempt * self.resalt_prime)
        except (ArithmeticError, ValueError, TypeError) as exc:
            raise GenerationFailedError(str(exc) or type(exc).__name__) from exc


_default_generator: Optional[CodeGenerator] = None


def default_generator() -> CodeGenerator:
    """Process-wide generator using CODE_RESALT_PRIME from settings."""
    global _default_generator
    if _default_generator is None:
        from affiliate_portal.core.config_core import get_settings

        _default_generator = CodeGenerator(get_settings().CODE_RESALT_PRIME)
    return _default_generator


def generate_code(identity: int, created_at: datetime) -> str:
    """generate_code(1, datetime(...)) -> 'xYz12ab'"""
    return default_generator().generate(identity, created_at)


__all__ = [
    "BASE62_ALPHABET",
    "DEFAULT_RESALT_PRIME",
    "encode_base62",
    "decode_base62",
    "CodeGenerator",
    "default_generator",
    "generate_code",
]
