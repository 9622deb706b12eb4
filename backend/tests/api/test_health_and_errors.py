"""Integration Tests: health, root, unmatched routes, catch-all and request logging.

Invariants:
    - /health is 200 even when the store is down (liveness only)
    - Unmatched path or method → 404 naming method and original URL
    - Unhandled exceptions → generic 500 without internal details
    - Every request is logged before dispatch
"""

import logging
from datetime import datetime

from kv_api.config import Settings, get_settings
from kv_api.core.service_info import ENDPOINTS


async def test_health_returns_ok(client):
    res = await client.get("/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "OK"
    assert body["service"] == "KV API"
    assert body["version"] == "1.0.0"
    assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None


async def test_health_ignores_store_outage(client, fake_redis):
    fake_redis.down = True
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "OK"
    assert fake_redis.calls == []


async def test_health_reports_configured_identity(app, client):
    app.dependency_overrides[get_settings] = lambda: Settings(
        service_name="orders-cache", service_version="2.3.4",
    )
    body = (await client.get("/health")).json()
    assert body["service"] == "orders-cache"
    assert body["version"] == "2.3.4"


async def test_root_lists_endpoints(client):
    res = await client.get("/")
    assert res.status_code == 200
    body = res.json()
    assert body["endpoints"] == ENDPOINTS
    assert "message" in body and "documentation" in body


async def test_unknown_route_returns_404_with_method_and_path(client):
    res = await client.patch("/unknown")
    assert res.status_code == 404
    assert res.json() == {
        "error": "Endpoint not found",
        "message": "Route PATCH /unknown does not exist",
    }


async def test_wrong_method_on_known_path_returns_404(client):
    """PUT /set matches a path but no method: reported as a missing route."""
    res = await client.put("/set", json={"key": "k", "value": "v"})
    assert res.status_code == 404
    assert res.json()["message"] == "Route PUT /set does not exist"


async def test_unknown_route_message_keeps_query_string(client):
    res = await client.get("/nope?x=1")
    assert res.json()["message"] == "Route GET /nope?x=1 does not exist"


async def test_unknown_route_message_keeps_percent_encoding(client):
    res = await client.get("/nope%2Fx")
    assert res.status_code == 404
    assert res.json()["message"] == "Route GET /nope%2Fx does not exist"


async def test_trailing_slash_redirects_to_canonical_route(client):
    res = await client.get("/health/")
    assert res.status_code == 307
    assert res.headers["location"] == "http://test/health"


async def test_unhandled_exception_returns_generic_500(app, client):
    @app.get("/boom")
    async def boom():
        raise RuntimeError("secret internal detail")

    res = await client.get("/boom")
    assert res.status_code == 500
    assert res.json() == {
        "error": "Internal server error",
        "message": "Something went wrong on our side. Please try again later.",
    }
    assert "secret" not in res.text


async def test_every_request_is_logged(client, caplog):
    caplog.set_level(logging.INFO, logger="kv_api.api.request_logging")
    await client.get("/get/missing")
    await client.post("/set", json={})

    seen = [
        (r.method, r.path) for r in caplog.records
        if r.name == "kv_api.api.request_logging"
    ]
    assert seen == [("GET", "/get/missing"), ("POST", "/set")]
