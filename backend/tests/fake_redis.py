"""Fake Redis Client: in-memory stand-in for redis.asyncio.Redis in tests.

Invariants:
    - Implements only what RedisConnectionManager calls: ping, set, get, aclose
    - Raises real redis-py exception types so error mapping is exercised
    - set() encodes like redis-py: str/int/float/bytes accepted, anything else → DataError;
      str must be UTF-8 encodable (UnicodeEncodeError otherwise)
    - get() decodes like decode_responses=True: stored bytes that are not UTF-8
      raise UnicodeDecodeError

Design Decisions:
    - Flat class, no inheritance: simple, explicit, easy to debug
    - `down` toggles every command into ConnectionError; `ping_failures` fails
      only the next N pings (reconnect-cycle tests)
"""

import asyncio

from redis.exceptions import ConnectionError as RedisConnectionError, DataError

REFUSED = "Error 111 connecting to redis:6379. Connection refused."


class FakeRedis:
    """Dict-backed async client with switchable outages."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.calls = []
        self.down = False
        self.ping_failures = 0
        self.ping_gate: asyncio.Event | None = None
        self.command_error: Exception | None = None
        self.closed = False

    async def ping(self):
        self.calls.append(("ping",))
        if self.ping_gate is not None:
            await self.ping_gate.wait()
        if self.ping_failures > 0:
            self.ping_failures -= 1
            raise RedisConnectionError(REFUSED)
        if self.down:
            raise RedisConnectionError(REFUSED)
        return True

    async def set(self, key, value):
        self.calls.append(("set", key, value))
        self._check()
        self.data[self._encode(key)] = self._encode(value)
        return True

    async def get(self, key):
        self.calls.append(("get", key))
        self._check()
        value = self.data.get(self._encode(key))
        if isinstance(value, bytes):
            return value.decode()
        return value

    async def aclose(self):
        self.closed = True

    def commands(self, name):
        return [c for c in self.calls if c[0] == name]

    def _check(self):
        if self.command_error is not None:
            raise self.command_error
        if self.down:
            raise RedisConnectionError(REFUSED)

    @staticmethod
    def _encode(value):
        if isinstance(value, bool) or not isinstance(
            value, (str, bytes, int, float),
        ):
            raise DataError(
                f"Invalid input of type: '{type(value).__name__}'. "
                "Convert to a bytes, string, int or float first.",
            )
        if isinstance(value, str):
            value.encode()
        if isinstance(value, bytes):
            return value
        return str(value)
