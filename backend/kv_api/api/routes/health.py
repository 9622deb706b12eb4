"""Health & Info: liveness probe and root service description.

Invariants:
    - GET /health always returns 200 while the process is up
    - GET /health does NOT check Redis: it reports OK even when the store is down
    - GET / is static apart from its timestamp

Design Decisions:
    - Liveness only, no readiness probe: store outages surface per request as 500s
      (open question: add a Redis-aware readiness check if orchestration needs one)
"""

from fastapi import APIRouter, Depends

from kv_api.config import Settings, get_settings
from kv_api.core.service_info import build_health_payload, build_root_payload
from kv_api.schemas.kv import HealthResponse, RootResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic liveness probe."""
    return build_health_payload(settings.service_name, settings.service_version)


@router.get("/", response_model=RootResponse)
async def root():
    """API information and available endpoints."""
    return build_root_payload()
