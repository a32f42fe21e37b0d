# -*- coding: utf-8 -*-
"""Builders over the service layer; they flush and never commit."""

from __future__ import annotations

from decimal import Decimal

from affiliate_portal.services import links_service, payouts_service, registration_service


async def make_brand(db, clock, *, email="owner@acme.test", **overrides):
    values = dict(
        name="Acme",
        email=email,
        password="correct-horse",
        website="https://acme.test/shop",
        clock=clock,
    )
    values.update(overrides)
    return await registration_service.register_brand(db, **values)


async def make_affiliate(db, clock, brand, *, email="aff@partner.test"):
    return await registration_service.register_affiliate(
        db, brand_id=brand.id, name="Partner", email=email, password="partner-pass", clock=clock
    )


async def make_referrer(db, clock, brand, *, external_id="cust-1", is_active=True):
    return await registration_service.register_referrer(
        db, brand_id=brand.id, name="Happy Customer", external_id=external_id, is_active=is_active, clock=clock
    )


async def make_campaign(db, clock, brand, **overrides):
    values = dict(brand_id=brand.id, title="Spring sale", clock=clock)
    values.update(overrides)
    return await registration_service.create_campaign(db, **values)


async def make_affiliate_link(db, clock, brand, affiliate, campaign=None):
    return await links_service.create_link(
        db,
        brand_id=brand.id,
        kind="affiliate",
        affiliate_id=affiliate.id,
        campaign_id=campaign.id if campaign is not None else None,
        clock=clock,
    )


async def make_payout(db, clock, brand, affiliate, amount=Decimal("50.00")):
    return await payouts_service.create_payout(
        db, brand_id=brand.id, affiliate_id=affiliate.id, amount=amount, clock=clock
    )
