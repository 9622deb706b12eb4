"""Key-Value Routes: SET and GET over the shared Redis connection.

Invariants:
    - POST /set rejects missing or falsy key/value with 400 before touching Redis
    - POST /set overwrites unconditionally (no versioning, no TTL)
    - GET /get/{key} returns 404 when the key is absent; the key may contain "/"
      (sent raw or as %2F)
    - Store failures become 500 {error, details} via StoreOperationError;
      nothing is retried at the request level

Design Decisions:
    - Errors raised as KVApiError subclasses and shaped by the global handler
      (ADR: one place decides status codes and bodies)
"""

import logging

from fastapi import APIRouter, Depends

from kv_api.core.errors import KeyNotFoundError, StoreOperationError
from kv_api.core.validation import require_key_and_value
from kv_api.infrastructure.redis_connection import (
    RedisConnectionManager, get_connection_manager,
)
from kv_api.schemas.kv import (
    ErrorResponse, GetResponse, SetRequest, SetResponse, StoreErrorResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["kv"])


@router.post(
    "/set",
    response_model=SetResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": StoreErrorResponse}},
)
async def set_key(
    body: SetRequest,
    store: RedisConnectionManager = Depends(get_connection_manager),
):
    """Store a key-value pair."""
    key, value = require_key_and_value(body.key, body.value)
    try:
        await store.set_value(key, value)
    except StoreOperationError as e:
        logger.error(
            f"Redis set error: {e.details}",
            extra={"key": str(key), "error_code": e.code},
        )
        raise
    logger.info(f'Key "{key}" set', extra={"key": str(key)})
    return SetResponse(status=f'Key "{key}" set successfully!')


@router.get(
    "/get/{key:path}",
    response_model=GetResponse,
    responses={404: {"model": ErrorResponse}, 500: {"model": StoreErrorResponse}},
)
async def get_key(
    key: str,
    store: RedisConnectionManager = Depends(get_connection_manager),
):
    """Retrieve the value stored under a key."""
    try:
        value = await store.get_value(key)
    except StoreOperationError as e:
        logger.error(
            f"Redis get error: {e.details}",
            extra={"key": key, "error_code": e.code},
        )
        raise
    if value is None:
        raise KeyNotFoundError(key)
    logger.info(f'Key "{key}" retrieved', extra={"key": key})
    return GetResponse(key=key, value=value)
