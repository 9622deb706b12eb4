"""Request Logging: one log line per incoming request, written before dispatch."""

import logging

from fastapi import FastAPI, Request

from kv_api.core.service_info import utc_now_iso

logger = logging.getLogger(__name__)


def register_request_logging(app: FastAPI) -> None:
    """Log method, path and arrival time for every request."""

    @app.middleware("http")
    async def log_request(request: Request, call_next):
        method, path = request.method, request.url.path
        logger.info(
            f"{utc_now_iso()} - {method} {path}",
            extra={"method": method, "path": path},
        )
        return await call_next(request)
