# -*- coding: utf-8 -*-
"""HTTP surface over an in-memory database."""

import pytest

from affiliate_portal.core.errors_core import ValidationError
from affiliate_portal.deps import decode_cursor, encode_cursor


async def _post(client, url, payload, expected=201):
    response = await client.post(url, json=payload)
    assert response.status_code == expected, response.text
    return response.json()


async def _brand(client, email="owner@acme.test"):
    return await _post(
        client,
        "/brands",
        {"name": "Acme", "email": email, "password": "correct-horse", "website": "https://acme.test/shop"},
    )


async def _affiliate(client, brand_id, email="aff@partner.test"):
    return await _post(
        client,
        f"/brands/{brand_id}/affiliates",
        {"name": "Partner", "email": email, "password": "partner-pass"},
    )


async def _link(client, brand_id, affiliate_id, campaign_id=None):
    return await _post(
        client,
        f"/brands/{brand_id}/links",
        {"kind": "affiliate", "affiliate_id": affiliate_id, "campaign_id": campaign_id},
    )


def test_cursor_roundtrip_and_garbage():
    assert decode_cursor(encode_cursor(41)) == 41
    with pytest.raises(ValidationError):
        decode_cursor("!!!")


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] in {"ok", "degraded"}
    assert "payouts_routes" in body["routes"]


async def test_request_id_is_echoed(client):
    response = await client.get("/brands/999", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"


async def test_brand_registration(client):
    brand = await _brand(client)
    assert brand["code"]
    assert "password" not in brand and "password_hash" not in brand

    fetched = await client.get(f"/brands/{brand['id']}")
    assert fetched.json()["code"] == brand["code"]

    again = await client.post(
        "/brands", json={"name": "Acme 2", "email": "OWNER@acme.test", "password": "correct-horse"}
    )
    assert again.status_code == 409
    assert again.json() == {"error": "conflict", "message": "Email is already registered.", "field": "email"}


async def test_unknown_brand_is_404(client):
    response = await client.get("/brands/999")
    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


async def test_cross_tenant_link_is_rejected(client):
    brand_a = await _brand(client, "a@acme.test")
    brand_b = await _brand(client, "b@acme.test")
    affiliate_of_b = await _affiliate(client, brand_b["id"])

    response = await client.post(
        f"/brands/{brand_a['id']}/links", json={"kind": "affiliate", "affiliate_id": affiliate_of_b["id"]}
    )
    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "validation_error"
    assert body["field"] == "affiliate_id"


async def test_click_conversion_flow(client):
    brand = await _brand(client)
    affiliate = await _affiliate(client, brand["id"])
    campaign = await _post(client, f"/brands/{brand['id']}/campaigns", {"title": "Spring"})
    rate = await _post(
        client,
        f"/campaigns/{campaign['id']}/commission-rates",
        {"title": "Base", "kind": "percent", "value": "10"},
    )
    assert rate["value"] == "10.00"
    link = await _link(client, brand["id"], affiliate["id"], campaign["id"])

    looked_up = await client.get(f"/links/{link['code']}")
    assert looked_up.json()["id"] == link["id"]

    redirect = await client.get(
        f"/r/{link['code']}?sub1=newsletter&other=ignored",
        headers={"X-Forwarded-For": "203.0.113.9, 10.0.0.1", "User-Agent": "UA/1.0"},
    )
    assert redirect.status_code == 302
    assert redirect.headers["cache-control"] == "no-store"
    location = redirect.headers["location"]
    assert location.startswith("https://acme.test/shop?afp_click=")
    click_id = int(location.rsplit("=", 1)[1])

    clicks = (await client.get(f"/links/{link['id']}/clicks")).json()
    assert clicks["items"][0]["id"] == click_id
    assert clicks["items"][0]["ip_address"] == "203.0.113.9"
    assert clicks["items"][0]["user_agent"] == "UA/1.0"
    assert clicks["items"][0]["sub_ids"] == {"sub1": "newsletter"}

    conversion = await _post(
        client,
        "/conversions",
        {"click_id": click_id, "brand_id": brand["id"], "sale_amount": "200", "metadata": {"order": "A-1"}},
    )
    assert conversion["status"] == "pending"
    assert conversion["sale_amount"] == "200.00"
    assert conversion["commission_amount"] == "20.00"
    assert conversion["metadata"] == {"order": "A-1"}

    duplicate = await client.post("/conversions", json={"click_id": click_id, "brand_id": brand["id"]})
    assert duplicate.status_code == 409
    assert duplicate.json()["error"] == "duplicate_conversion"

    listed = (await client.get(f"/brands/{brand['id']}/conversions")).json()
    assert [item["id"] for item in listed["items"]] == [conversion["id"]]
    assert listed["next_cursor"] is None


async def test_unknown_link_redirect_is_404(client):
    response = await client.get("/r/doesnotexist")
    assert response.status_code == 404


async def test_payout_workflow(client):
    brand = await _brand(client)
    affiliate = await _affiliate(client, brand["id"])
    payout = await _post(client, f"/brands/{brand['id']}/payouts", {"affiliate_id": affiliate["id"], "amount": "125.5"})
    assert payout["status"] == "pending"
    assert payout["amount"] == "125.50"

    url = f"/payouts/{payout['id']}/transition"
    moved = await client.post(url, json={"status": "processing"})
    assert moved.status_code == 200
    assert moved.json()["status"] == "processing"

    missing = await client.post(url, json={"status": "paid"})
    assert missing.status_code == 422
    assert missing.json()["error"] == "missing_required_field"
    assert missing.json()["field"] == "transaction_id"

    paid = await client.post(url, json={"status": "paid", "transaction_id": "tx_123"})
    assert paid.status_code == 200
    assert paid.json()["status"] == "paid"
    assert paid.json()["transaction_id"] == "tx_123"

    back = await client.post(url, json={"status": "pending"})
    assert back.status_code == 409
    assert back.json()["error"] == "invalid_transition"


async def test_oversized_payout_amount_is_422(client):
    brand = await _brand(client)
    affiliate = await _affiliate(client, brand["id"])
    response = await client.post(
        f"/brands/{brand['id']}/payouts", json={"affiliate_id": affiliate["id"], "amount": "1e40"}
    )
    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"
    assert response.json()["field"] == "amount"


async def test_payout_listing_with_cursor_and_etag(client):
    brand = await _brand(client)
    affiliate = await _affiliate(client, brand["id"])
    ids = []
    for amount in ("10", "20", "30"):
        created = await _post(client, f"/brands/{brand['id']}/payouts", {"affiliate_id": affiliate["id"], "amount": amount})
        ids.append(created["id"])

    url = f"/brands/{brand['id']}/payouts"
    first = await client.get(url, params={"limit": 2})
    assert first.status_code == 200
    page = first.json()
    assert [item["id"] for item in page["items"]] == [ids[2], ids[1]]
    assert page["next_cursor"]

    second = (await client.get(url, params={"limit": 2, "cursor": page["next_cursor"]})).json()
    assert [item["id"] for item in second["items"]] == [ids[0]]
    assert second["next_cursor"] is None

    etag = first.headers["etag"]
    cached = await client.get(url, params={"limit": 2}, headers={"If-None-Match": etag})
    assert cached.status_code == 304

    filtered = (await client.get(url, params={"status": "paid"})).json()
    assert filtered["items"] == []

    bad_status = await client.get(url, params={"status": "lost"})
    assert bad_status.status_code == 422

    bad_cursor = await client.get(url, params={"cursor": "garbage"})
    assert bad_cursor.status_code == 422
    assert bad_cursor.json()["field"] == "cursor"
