# -*- coding: utf-8 -*-
import pytest

from affiliate_portal.core.codes_core import CodeGenerator
from affiliate_portal.core.errors_core import GenerationFailedError
from affiliate_portal.services.codes_service import PLACEHOLDER_PREFIX, assign_code, placeholder_code

from .conftest import T0
from .factories import make_brand


def test_placeholder_codes_are_unique():
    first, second = placeholder_code(), placeholder_code()
    assert first.startswith(PLACEHOLDER_PREFIX)
    assert first != second


async def test_no_free_candidate_fails(db, clock):
    clock.advance(milliseconds=1)
    first = await make_brand(db, clock, email="a@acme.test")
    clock.set(T0)
    second = await make_brand(db, clock, email="b@acme.test")
    # attempt 0 of id 2 at T0 is the code of id 1 at T0 + 1ms
    assert first.code == CodeGenerator().candidate(2, T0, 0)

    with pytest.raises(GenerationFailedError):
        await assign_code(db, second, T0, max_attempts=1)
