"""Service Info: payloads for the health and root endpoints.

Invariants:
    - Timestamps are ISO-8601 in UTC
    - Health payload never reflects store connectivity (liveness only)
"""

from datetime import datetime, timezone

ENDPOINTS = {
    "set": "POST /set - Set key-value pair in Redis",
    "get": "GET /get/:key - Get value by key from Redis",
    "health": "GET /health - Service health check",
}

WELCOME_MESSAGE = "Hello from the KV API with Redis!"
DOCUMENTATION_HINT = "See README.md for usage examples"


def utc_now_iso(now: datetime | None = None) -> str:
    return (now or datetime.now(timezone.utc)).isoformat()


def build_health_payload(
    service: str, version: str, now: datetime | None = None,
) -> dict:
    return {
        "status": "OK",
        "timestamp": utc_now_iso(now),
        "service": service,
        "version": version,
    }


def build_root_payload(now: datetime | None = None) -> dict:
    return {
        "message": WELCOME_MESSAGE,
        "timestamp": utc_now_iso(now),
        "endpoints": dict(ENDPOINTS),
        "documentation": DOCUMENTATION_HINT,
    }
