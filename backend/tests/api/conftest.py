"""API test fixtures: FastAPI app wired to an in-memory fake Redis.

Invariants:
    - Every test gets a fresh FakeRedis and a fresh app from create_app()
    - The connection manager is injected, so no test patches module globals
    - App exceptions are turned into responses, not re-raised into the test

Design Decisions:
    - Lifespan is not run by ASGITransport: the manager stays DISCONNECTED and
      requests go straight to the fake client (same as a request arriving
      before the first connection completes)
"""

import pytest
from httpx import ASGITransport, AsyncClient

from kv_api.infrastructure.redis_connection import RedisConnectionManager
from kv_api.main import create_app

from tests.fake_redis import FakeRedis


async def _no_sleep(seconds):
    return None


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def manager(fake_redis):
    return RedisConnectionManager(fake_redis, sleep=_no_sleep)


@pytest.fixture
def app(manager):
    return create_app(connection_manager=manager)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as c:
        yield c
