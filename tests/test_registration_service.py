# -*- coding: utf-8 -*-
from datetime import timedelta
from decimal import Decimal

import pytest

from affiliate_portal.core.codes_core import CodeGenerator
from affiliate_portal.core.errors_core import ConflictError, NotFoundError, ValidationError
from affiliate_portal.core.security_core import verify_password
from affiliate_portal.services import registration_service
from affiliate_portal.services.codes_service import PLACEHOLDER_PREFIX

from .conftest import T0
from .factories import make_affiliate, make_brand, make_campaign, make_referrer


async def test_register_brand_mints_code_and_hashes_password(db, clock):
    brand = await make_brand(db, clock, email="  Owner@Acme.TEST ", tracking_domain=" Go.Acme.Test ")
    assert brand.id is not None
    assert brand.code == CodeGenerator().generate(brand.id, T0)
    assert not brand.code.startswith(PLACEHOLDER_PREFIX)
    assert brand.email == "owner@acme.test"
    assert brand.tracking_domain == "go.acme.test"
    assert brand.password_hash != "correct-horse"
    assert verify_password("correct-horse", brand.password_hash)
    assert brand.created_at == T0


async def test_duplicate_brand_email_conflicts(db, clock):
    await make_brand(db, clock)
    with pytest.raises(ConflictError) as info:
        await make_brand(db, clock, email="OWNER@acme.test")
    assert info.value.field == "email"


async def test_duplicate_tracking_domain_conflicts(db, clock):
    await make_brand(db, clock, tracking_domain="go.acme.test")
    with pytest.raises(ConflictError) as info:
        await make_brand(db, clock, email="other@acme.test", tracking_domain="GO.acme.test")
    assert info.value.field == "tracking_domain"


async def test_short_password_is_rejected(db, clock):
    with pytest.raises(ValidationError) as info:
        await make_brand(db, clock, password="short")
    assert info.value.field == "password"


async def test_code_clash_is_resalted(db, clock):
    clock.advance(milliseconds=1)
    first = await make_brand(db, clock, email="a@acme.test")
    clock.set(T0)
    second = await make_brand(db, clock, email="b@acme.test")
    # (T0 + 1ms) + id 1 == T0 + id 2
    assert first.id == 1 and second.id == 2
    assert second.code != first.code
    assert second.code == CodeGenerator().candidate(2, T0, 1)


async def test_affiliate_email_is_unique_per_brand(db, clock):
    brand = await make_brand(db, clock)
    other = await make_brand(db, clock, email="other@acme.test")
    await make_affiliate(db, clock, brand)
    await make_affiliate(db, clock, other)
    with pytest.raises(ConflictError):
        await make_affiliate(db, clock, brand)


async def test_affiliate_of_unknown_brand(db, clock):
    with pytest.raises(NotFoundError):
        await registration_service.register_affiliate(
            db, brand_id=404, name="X", email="x@x.test", password="long-enough", clock=clock
        )


async def test_referrer_without_credentials(db, clock):
    brand = await make_brand(db, clock)
    referrer = await make_referrer(db, clock, brand)
    assert referrer.email is None
    assert referrer.password_hash is None
    assert referrer.is_active is True


async def test_referrer_needs_external_id(db, clock):
    brand = await make_brand(db, clock)
    with pytest.raises(ValidationError) as info:
        await registration_service.register_referrer(
            db, brand_id=brand.id, name="R", external_id="  ", clock=clock
        )
    assert info.value.field == "external_id"


async def test_referrer_activation(db, clock):
    brand = await make_brand(db, clock)
    referrer = await make_referrer(db, clock, brand)
    clock.advance(hours=1)
    updated = await registration_service.set_referrer_active(db, referrer_id=referrer.id, active=False, clock=clock)
    assert updated.is_active is False
    assert updated.updated_at == T0 + timedelta(hours=1)


async def test_campaign_and_rates(db, clock):
    brand = await make_brand(db, clock)
    campaign = await make_campaign(db, clock, brand, settings={"landing_url": "https://acme.test/spring"})
    assert campaign.brand_id == brand.id
    rate = await registration_service.add_commission_rate(
        db, campaign_id=campaign.id, title="Base", kind="percent", value="12.5", clock=clock
    )
    assert rate.value == Decimal("12.50")
    assert rate.kind == "percent"


@pytest.mark.parametrize(
    "kind, value",
    [("percent", "101"), ("fixed", "-1"), ("tiered", "5"), ("fixed", "x"), ("fixed", "100000000"), ("fixed", "1e40")],
)
async def test_bad_commission_rates(db, clock, kind, value):
    brand = await make_brand(db, clock)
    campaign = await make_campaign(db, clock, brand)
    with pytest.raises(ValidationError):
        await registration_service.add_commission_rate(
            db, campaign_id=campaign.id, title="Bad", kind=kind, value=value, clock=clock
        )


async def test_creative_of_unknown_campaign(db, clock):
    with pytest.raises(NotFoundError):
        await registration_service.add_creative(
            db, campaign_id=404, name="Banner", kind="image", path="/b.png", clock=clock
        )


async def test_creative(db, clock):
    brand = await make_brand(db, clock)
    campaign = await make_campaign(db, clock, brand)
    creative = await registration_service.add_creative(
        db, campaign_id=campaign.id, name="Banner", kind="image", path="/banners/728x90.png", clock=clock
    )
    assert creative.campaign_id == campaign.id
    assert creative.code
