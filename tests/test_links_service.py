# -*- coding: utf-8 -*-
import pytest

from affiliate_portal.core.codes_core import CodeGenerator
from affiliate_portal.core.errors_core import NotFoundError, ValidationError
from affiliate_portal.services import links_service

from .conftest import T0
from .factories import make_affiliate, make_affiliate_link, make_brand, make_campaign, make_referrer


async def test_affiliate_link(db, clock):
    brand = await make_brand(db, clock)
    affiliate = await make_affiliate(db, clock, brand)
    campaign = await make_campaign(db, clock, brand)

    link = await make_affiliate_link(db, clock, brand, affiliate, campaign)
    assert link.kind == "affiliate"
    assert link.affiliate_id == affiliate.id
    assert link.campaign_id == campaign.id
    assert link.code == CodeGenerator().generate(link.id, T0)

    found = await links_service.get_link_by_code(db, link.code)
    assert found.id == link.id


async def test_referral_link(db, clock):
    brand = await make_brand(db, clock)
    referrer = await make_referrer(db, clock, brand)
    link = await links_service.create_link(
        db, brand_id=brand.id, kind="referral", referrer_id=referrer.id, clock=clock
    )
    assert link.kind == "referral"
    assert link.affiliate_id is None


async def test_affiliate_of_other_brand(db, clock):
    brand_a = await make_brand(db, clock, email="a@acme.test")
    brand_b = await make_brand(db, clock, email="b@acme.test")
    affiliate_of_b = await make_affiliate(db, clock, brand_b)
    with pytest.raises(ValidationError) as info:
        await make_affiliate_link(db, clock, brand_a, affiliate_of_b)
    assert info.value.field == "affiliate_id"


async def test_kind_must_match_party(db, clock):
    brand = await make_brand(db, clock)
    referrer = await make_referrer(db, clock, brand)
    with pytest.raises(ValidationError):
        await links_service.create_link(
            db, brand_id=brand.id, kind="affiliate", referrer_id=referrer.id, clock=clock
        )


async def test_inactive_referrer(db, clock):
    brand = await make_brand(db, clock)
    referrer = await make_referrer(db, clock, brand, is_active=False)
    with pytest.raises(ValidationError) as info:
        await links_service.create_link(
            db, brand_id=brand.id, kind="referral", referrer_id=referrer.id, clock=clock
        )
    assert info.value.field == "referrer_id"


@pytest.mark.parametrize("missing", ["brand_id", "affiliate_id", "campaign_id"])
async def test_unknown_references(db, clock, missing):
    brand = await make_brand(db, clock)
    affiliate = await make_affiliate(db, clock, brand)
    values = {"brand_id": brand.id, "affiliate_id": affiliate.id, "campaign_id": None}
    values[missing] = 404
    with pytest.raises(NotFoundError) as info:
        await links_service.create_link(db, kind="affiliate", clock=clock, **values)
    assert info.value.details == {missing: 404}


async def test_unknown_code(db):
    with pytest.raises(NotFoundError):
        await links_service.get_link_by_code(db, "nope")


async def test_list_links_newest_first(db, clock):
    brand = await make_brand(db, clock)
    affiliate = await make_affiliate(db, clock, brand)
    links = [await make_affiliate_link(db, clock, brand, affiliate) for _ in range(3)]
    listed = await links_service.list_links(db, brand_id=brand.id, limit=2)
    assert [link.id for link in listed] == [links[2].id, links[1].id]
    rest = await links_service.list_links(db, brand_id=brand.id, limit=2, before_id=links[1].id)
    assert [link.id for link in rest] == [links[0].id]
