# -*- coding: utf-8 -*-
# affiliate_portal/core/security_core.py
# =============================================================================
# Purpose:
#   Credential hashing for registered brands, affiliates and referrers.
#
# Invariants:
#   • Only hashes are stored (password_hash columns); plain passwords never
#     reach the ORM or the logs.
#   • Emails are compared case-insensitively and stored trimmed/lower-cased.
#
# Out of scope:
#   • Sessions, tokens and login flows.
# =============================================================================

from __future__ import annotations

from typing import Optional

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

MIN_PASSWORD_LENGTH = 8


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def normalize_email(email: Optional[str]) -> Optional[str]:
    """' Ana@Example.COM ' -> 'ana@example.com'; empty becomes None."""
    if email is None:
        return None
    value = email.strip().lower()
    return value or None


__all__ = ["hash_password", "verify_password", "normalize_email", "MIN_PASSWORD_LENGTH"]
