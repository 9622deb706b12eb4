"""KV API: FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map KVApiError → flat JSON bodies; unmatched routes → 404
    - Exactly one RedisConnectionManager per app, stored on app.state
    - Startup initiates the Redis connection but never waits for it (fail-open)

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - create_app(connection_manager=...) factory: tests inject a manager around a
      fake client; production builds one from settings
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from kv_api.api.error_handlers import register_error_handlers
from kv_api.api.request_logging import register_request_logging
from kv_api.api.routes import health, kv_store
from kv_api.config import get_settings
from kv_api.infrastructure.observability import setup_logging
from kv_api.infrastructure.redis_connection import RedisConnectionManager

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    manager: RedisConnectionManager = app.state.connection_manager
    manager.initiate()
    _log_banner(settings.port)
    yield
    logger.info("KV API shutting down")
    await manager.close()


def _log_banner(port: int) -> None:
    base = f"http://localhost:{port}"
    logger.info(f"API server is running on port {port}")
    logger.info(f"Main endpoint: curl {base}")
    logger.info(f"Health check: curl {base}/health")
    logger.info(
        "Set example: curl -X POST -H \"Content-Type: application/json\" "
        f"-d '{{\"key\":\"test\",\"value\":\"hello\"}}' {base}/set",
    )
    logger.info(f"Get example: curl {base}/get/test")


def create_app(
    connection_manager: RedisConnectionManager | None = None,
) -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="KV API",
        version=settings.service_version,
        lifespan=lifespan,
    )
    app.state.connection_manager = (
        connection_manager or RedisConnectionManager.from_settings(settings)
    )

    register_request_logging(app)

    # Routes: explicit registration
    app.include_router(health.router)
    app.include_router(kv_store.router)

    register_error_handlers(app)
    return app


app = create_app()


def serve() -> None:
    """Run the API with uvicorn on HOST:PORT."""
    settings = get_settings()
    uvicorn.run(
        "kv_api.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
