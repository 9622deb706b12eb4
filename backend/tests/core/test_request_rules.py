"""Tests for SET validation, error envelopes and service payloads: pure, no IO."""

from datetime import datetime, timezone

import pytest

from kv_api.core.errors import (
    INTERNAL_ERROR_RESPONSE,
    SET_BODY_REQUIRED,
    ErrorCategory,
    KeyNotFoundError,
    RouteNotFoundError,
    StoreOperationError,
    StoreUnavailableError,
    ValidationError,
)
from kv_api.core.service_info import build_health_payload, build_root_payload
from kv_api.core.validation import is_provided, require_key_and_value


@pytest.mark.parametrize("value", [None, "", 0, 0.0, False, [], {}])
def test_falsy_values_count_as_missing(value):
    assert not is_provided(value)


@pytest.mark.parametrize("value", ["0", "false", " ", 1, -1, True, ["x"]])
def test_truthy_values_count_as_provided(value):
    assert is_provided(value)


def test_require_key_and_value_passes_through():
    assert require_key_and_value("k", "v") == ("k", "v")


def test_require_key_and_value_rejects_falsy_value():
    with pytest.raises(ValidationError) as exc:
        require_key_and_value("k", 0)
    assert exc.value.http_status == 400
    assert exc.value.to_response() == {"error": SET_BODY_REQUIRED}


def test_key_not_found_envelope():
    err = KeyNotFoundError("missing")
    assert err.http_status == 404
    assert err.to_response() == {"error": 'Key "missing" not found.'}


def test_route_not_found_envelope():
    err = RouteNotFoundError("PATCH", "/unknown")
    assert err.http_status == 404
    assert err.to_response() == {
        "error": "Endpoint not found",
        "message": "Route PATCH /unknown does not exist",
    }


@pytest.mark.parametrize("operation, summary", [
    ("set", "Failed to set key in Redis"),
    ("get", "Failed to get key from Redis"),
])
def test_store_error_envelopes(operation, summary):
    err = StoreOperationError(operation, "boom")
    assert err.http_status == 500
    assert err.category is ErrorCategory.STORE
    assert err.to_response() == {"error": summary, "details": "boom"}


def test_store_unavailable_is_a_store_operation_error():
    err = StoreUnavailableError("get", "Connection refused")
    assert isinstance(err, StoreOperationError)
    assert err.code == "STORE_UNAVAILABLE"
    assert err.to_response()["details"] == "Connection refused"


def test_internal_error_body_has_no_details():
    assert set(INTERNAL_ERROR_RESPONSE) == {"error", "message"}


def test_health_payload_uses_given_clock():
    now = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert build_health_payload("svc", "9.9.9", now) == {
        "status": "OK",
        "timestamp": "2026-01-02T03:04:05+00:00",
        "service": "svc",
        "version": "9.9.9",
    }


def test_root_payload_lists_routes():
    payload = build_root_payload()
    assert set(payload["endpoints"]) == {"set", "get", "health"}
    assert payload["endpoints"]["set"].startswith("POST /set")
