import httpx
import pytest
from httpx import AsyncClient

from foodbank.core.config import Settings
from foodbank.main import app
from foodbank.services.location import Geocoder

pytestmark = pytest.mark.anyio

async def _auth_headers(ac: AsyncClient, email: str):
    r = await ac.post("/api/auth/login", json={"email": email, "password": "pass"})
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['access_token']}"}

async def _create(ac: AsyncClient, headers, **body):
    body.setdefault("title", "Bread")
    return await ac.post("/api/donations", headers=headers, json=body)

async def test_health(test_client: AsyncClient):
    r = await test_client.get("/health")
    assert r.json() == {"ok": True}

async def test_register_login_me(test_client: AsyncClient):
    r = await test_client.post("/api/auth/register", json={
        "name": "Carol", "email": "carol@rec", "password": "pw", "role": "recipient"
    })
    assert r.status_code == 200, r.text
    tok = r.json()["access_token"]
    me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {tok}"})
    assert me.json()["email"] == "carol@rec"

    dup = await test_client.post("/api/auth/register", json={
        "name": "Carol", "email": "carol@rec", "password": "pw"
    })
    assert dup.status_code == 400

    bad = await test_client.post("/api/auth/login", json={"email": "carol@rec", "password": "nope"})
    assert bad.status_code == 403

async def test_form_token_login(test_client: AsyncClient):
    r = await test_client.post("/api/auth/token", data={"username": "bob@rec", "password": "pass"})
    assert r.status_code == 200, r.text
    tok = r.json()["access_token"]
    me = await test_client.get("/api/auth/me", headers={"Authorization": f"Bearer {tok}"})
    assert me.json()["role"] == "recipient"

    bad = await test_client.post("/api/auth/token", data={"username": "bob@rec", "password": "nope"})
    assert bad.status_code == 403

async def test_invalid_token(test_client: AsyncClient):
    r = await test_client.get("/api/auth/me", headers={"Authorization": "Bearer junk"})
    assert r.status_code == 401

async def test_create_search_claim_flow(test_client: AsyncClient):
    alice = await _auth_headers(test_client, "alice@donor")
    bob = await _auth_headers(test_client, "bob@rec")

    r = await _create(test_client, alice, lat="-1.286389", lon="36.817223", quantity=4,
                      expires_in_minutes=240)
    assert r.status_code == 201, r.text
    d = r.json()
    assert (d["id"], d["donor_name"], d["quantity"], d["claimed"]) == (1, "Alice Donor", 4, False)
    assert d["expires_at"] is not None

    r = await test_client.get("/api/donations/nearby", params={
        "lat": "-1.286389", "lon": "36.817223", "radius_km": "1"
    })
    res = r.json()
    assert [x["id"] for x in res] == [1]
    assert res[0]["distance_km_display"] == 0.0

    r = await test_client.post("/api/donations/1/claim", headers=alice)
    assert r.status_code == 403

    r = await test_client.post("/api/donations/1/claim", headers=bob)
    assert r.status_code == 200, r.text
    assert r.json()["claimed_by_name"] == "Bob Recipient"

    r = await test_client.post("/api/donations/1/claim", headers=bob)
    assert r.status_code == 409
    assert r.json()["error"] == "AlreadyClaimedError"

    r = await test_client.post("/api/donations/2/claim", headers=bob)
    assert r.status_code == 404

    r = await test_client.get("/api/donations/nearby", params={"lat": "-1.286389", "lon": "36.817223"})
    assert r.json() == []

async def test_create_needs_login_and_valid_input(test_client: AsyncClient):
    r = await _create(test_client, {}, lat=0, lon=0)
    assert r.status_code == 403

    alice = await _auth_headers(test_client, "alice@donor")
    r = await _create(test_client, alice, lat="", lon=0)
    assert r.status_code == 400
    r = await _create(test_client, alice, title="", lat=0, lon=0)
    assert r.status_code == 400
    r = await _create(test_client, alice, lat=0, lon=0, expires_in_minutes=1e13)
    assert r.status_code == 400

    r = await test_client.get("/api/donations")
    assert r.json() == []

async def test_browse_without_origin(test_client: AsyncClient):
    alice = await _auth_headers(test_client, "alice@donor")
    await _create(test_client, alice, title="a", lat=10, lon=10)
    await _create(test_client, alice, title="b", lat=-40, lon=100)
    r = await test_client.get("/api/donations/nearby", params={"lat": "", "lon": ""})
    res = r.json()
    assert [x["title"] for x in res] == ["b", "a"]
    assert res[0]["distance_km"] is None

async def test_export_import_clear(test_client: AsyncClient):
    alice = await _auth_headers(test_client, "alice@donor")
    await _create(test_client, alice, title="a", lat=1, lon=1)
    await _create(test_client, alice, title="b", lat=2, lon=2)
    snap = (await test_client.get("/api/donations/export")).json()
    assert [d["title"] for d in snap["donations"]] == ["b", "a"]

    r = await test_client.delete("/api/donations")
    assert r.json() == {"ok": True}
    assert (await test_client.get("/api/donations")).json() == []

    r = await test_client.post("/api/donations/import", json={"donations": [{"title": "x"}]})
    assert r.status_code == 400
    assert (await test_client.get("/api/donations")).json() == []

    r = await test_client.post("/api/donations/import", json=snap)
    assert r.json() == {"ok": True, "imported": 2}
    assert (await test_client.get("/api/donations/export")).json() == snap

    r = await test_client.get("/api/donations/2")
    assert r.json()["title"] == "b"
    assert (await test_client.get("/api/donations/7")).status_code == 404

async def test_location_and_address_search(test_client: AsyncClient):
    def handler(request: httpx.Request):
        if request.url.params["q"] == "nowhere":
            return httpx.Response(200, json=[])
        return httpx.Response(200, json=[{"lat": "0", "lon": "0"}])

    app.state.geocoder = Geocoder(Settings(), client=httpx.Client(transport=httpx.MockTransport(handler)))

    r = await test_client.get("/api/location", params={"address": "Equator"})
    assert r.json() == {"lat": 0.0, "lon": 0.0}
    r = await test_client.get("/api/location", params={"address": "nowhere"})
    assert r.status_code == 502

    alice = await _auth_headers(test_client, "alice@donor")
    r = await _create(test_client, alice, address="Equator")
    assert r.status_code == 201, r.text
    assert (r.json()["lat"], r.json()["lon"]) == (0.0, 0.0)

    r = await test_client.get("/api/donations/nearby", params={"address": "Equator", "radius_km": 1})
    assert [x["id"] for x in r.json()] == [1]
