# -*- coding: utf-8 -*-
import re
from datetime import datetime, timedelta, timezone

import pytest

from affiliate_portal.core.codes_core import (
    BASE62_ALPHABET,
    CodeGenerator,
    decode_base62,
    encode_base62,
    generate_code,
)
from affiliate_portal.core.errors_core import (
    GenerationFailedError,
    InvalidIdentityError,
    InvalidTimestampError,
)
from affiliate_portal.core.utils_core import epoch_millis

T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
BASE62 = re.compile(r"^[0-9A-Za-z]+$")


def test_alphabet_is_digits_lower_upper():
    assert BASE62_ALPHABET == "0123456789abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert len(set(BASE62_ALPHABET)) == 62


@pytest.mark.parametrize(
    "number, expected",
    [(0, "0"), (9, "9"), (10, "a"), (35, "z"), (36, "A"), (61, "Z"), (62, "10"), (3843, "ZZ")],
)
def test_encode_base62_known_values(number, expected):
    assert encode_base62(number) == expected
    assert decode_base62(expected) == number


def test_encode_base62_rejects_negative():
    with pytest.raises(ValueError):
        encode_base62(-1)


def test_decode_base62_rejects_foreign_characters():
    with pytest.raises(ValueError):
        decode_base62("ab-c")
    with pytest.raises(ValueError):
        decode_base62("")


def test_generate_is_deterministic():
    gen = CodeGenerator()
    assert gen.generate(42, T0) == gen.generate(42, T0)
    assert generate_code(42, T0) == gen.generate(42, T0)


def test_generate_encodes_millis_plus_id():
    code = CodeGenerator().generate(7, T0)
    assert decode_base62(code) == epoch_millis(T0) + 7


@pytest.mark.parametrize("identity", [1, 2, 1000, 987_654_321])
def test_generate_stays_in_alphabet(identity):
    code = CodeGenerator().generate(identity, T0)
    assert BASE62.match(code)


def test_present_day_codes_are_short():
    assert len(CodeGenerator().generate(1, T0)) <= 8


def test_naive_timestamp_is_read_as_utc():
    naive = T0.replace(tzinfo=None)
    assert CodeGenerator().generate(3, naive) == CodeGenerator().generate(3, T0)


def test_pre_epoch_timestamp_uses_absolute_value():
    early = datetime(1969, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
    code = CodeGenerator().generate(5, early)
    assert decode_base62(code) == abs(-1000 + 5)


def test_same_sum_collides_on_first_candidate():
    gen = CodeGenerator()
    later = T0 + timedelta(milliseconds=1)
    assert gen.generate(2, T0) == gen.generate(1, later)


def test_resalted_candidates_differ():
    gen = CodeGenerator(resalt_prime=1_000_003)
    first = gen.candidate(9, T0, 0)
    second = gen.candidate(9, T0, 1)
    assert first != second
    assert decode_base62(second) - decode_base62(first) == 1_000_003


@pytest.mark.parametrize("identity", [0, -5, True, 1.5, "12", None])
def test_invalid_identity(identity):
    with pytest.raises(InvalidIdentityError) as info:
        CodeGenerator().generate(identity, T0)
    assert info.value.code == "invalid_identity"


@pytest.mark.parametrize("created_at", [None, "2026-03-01", 1_700_000_000])
def test_invalid_timestamp(created_at):
    with pytest.raises(InvalidTimestampError) as info:
        CodeGenerator().generate(1, created_at)
    assert info.value.code == "invalid_timestamp"


def test_bad_attempt_number_fails_generation():
    with pytest.raises(GenerationFailedError):
        CodeGenerator().candidate(1, T0, -1)


def test_resalt_prime_must_exceed_one():
    with pytest.raises(ValueError):
        CodeGenerator(resalt_prime=1)
