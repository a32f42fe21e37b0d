# -*- coding: utf-8 -*-
from decimal import Decimal

import pytest
from sqlalchemy import update

from affiliate_portal.core.codes_core import CodeGenerator
from affiliate_portal.core.errors_core import (
    InvalidTransitionError,
    MissingRequiredFieldError,
    NotFoundError,
    TransitionConflictError,
    ValidationError,
)
from affiliate_portal.models import Payout
from affiliate_portal.services import payouts_service

from .conftest import T0
from .factories import make_affiliate, make_brand, make_payout


async def _brand_and_affiliate(db, clock):
    brand = await make_brand(db, clock)
    affiliate = await make_affiliate(db, clock, brand)
    return brand, affiliate


async def test_create_payout(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payout = await make_payout(db, clock, brand, affiliate, amount="75.5")
    assert payout.status == "pending"
    assert payout.amount == Decimal("75.50")
    assert payout.code == CodeGenerator().generate(payout.id, T0)


@pytest.mark.parametrize("amount", ["0", "-3", "abc", "100000000", "1e40"])
async def test_payout_amount_must_be_positive(db, clock, amount):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    with pytest.raises(ValidationError) as info:
        await make_payout(db, clock, brand, affiliate, amount=amount)
    assert info.value.field == "amount"


async def test_payout_to_affiliate_of_other_brand(db, clock):
    brand, _ = await _brand_and_affiliate(db, clock)
    other = await make_brand(db, clock, email="other@acme.test")
    stranger = await make_affiliate(db, clock, other)
    with pytest.raises(ValidationError) as info:
        await make_payout(db, clock, brand, stranger)
    assert info.value.field == "affiliate_id"


async def test_full_happy_path(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payout = await make_payout(db, clock, brand, affiliate)

    payout = await payouts_service.transition_payout(db, payout_id=payout.id, next_status="processing", clock=clock)
    assert payout.status == "processing"

    payout = await payouts_service.transition_payout(
        db,
        payout_id=payout.id,
        next_status="paid",
        context={"transaction_id": "tx_123", "notes": "wired"},
        clock=clock,
    )
    assert payout.status == "paid"
    assert payout.transaction_id == "tx_123"
    assert payout.notes == "wired"


async def test_paid_is_terminal(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payout = await make_payout(db, clock, brand, affiliate)
    await payouts_service.transition_payout(db, payout_id=payout.id, next_status="processing", clock=clock)
    await payouts_service.transition_payout(
        db, payout_id=payout.id, next_status="paid", context={"transactionId": "tx_1"}, clock=clock
    )
    with pytest.raises(InvalidTransitionError):
        await payouts_service.transition_payout(db, payout_id=payout.id, next_status="pending", clock=clock)


async def test_decline_needs_reason(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payout = await make_payout(db, clock, brand, affiliate)
    with pytest.raises(MissingRequiredFieldError):
        await payouts_service.transition_payout(
            db, payout_id=payout.id, next_status="declined", context={"decline_reason": ""}, clock=clock
        )
    refreshed = await payouts_service.transition_payout(
        db, payout_id=payout.id, next_status="declined", context={"decline_reason": "KYC failed"}, clock=clock
    )
    assert refreshed.decline_reason == "KYC failed"


async def test_unknown_payout(db, clock):
    with pytest.raises(NotFoundError):
        await payouts_service.transition_payout(db, payout_id=404, next_status="processing", clock=clock)


async def test_lost_race_is_a_conflict(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payout = await make_payout(db, clock, brand, affiliate)

    # another writer moves the row behind this session's back
    await db.execute(
        update(Payout)
        .where(Payout.id == payout.id)
        .values(status="declined", decline_reason="duplicate request")
        .execution_options(synchronize_session=False)
    )
    assert payout.status == "pending"

    with pytest.raises(TransitionConflictError) as info:
        await payouts_service.transition_payout(db, payout_id=payout.id, next_status="processing", clock=clock)
    assert info.value.details == {"payout_id": payout.id, "expected": "pending"}


async def test_list_payouts_pages_and_filters(db, clock):
    brand, affiliate = await _brand_and_affiliate(db, clock)
    payouts = [await make_payout(db, clock, brand, affiliate) for _ in range(3)]
    await payouts_service.transition_payout(db, payout_id=payouts[0].id, next_status="processing", clock=clock)

    first = await payouts_service.list_payouts(db, brand_id=brand.id, limit=2)
    assert [p.id for p in first.items] == [payouts[2].id, payouts[1].id]
    assert first.next_before_id == payouts[1].id

    second = await payouts_service.list_payouts(db, brand_id=brand.id, limit=2, before_id=first.next_before_id)
    assert [p.id for p in second.items] == [payouts[0].id]
    assert second.next_before_id is None

    processing = await payouts_service.list_payouts(db, brand_id=brand.id, status="processing")
    assert [p.id for p in processing.items] == [payouts[0].id]


async def test_list_payouts_unknown_status(db, clock):
    with pytest.raises(ValidationError):
        await payouts_service.list_payouts(db, brand_id=1, status="lost")
