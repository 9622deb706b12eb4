"""Redis Connection Manager: single shared client with a background reconnect supervisor.

Invariants:
    - One RedisConnectionManager (one redis.asyncio.Redis client) per application
    - initiate() never blocks and never raises connection errors: failures surface
      as ERROR events and the supervisor keeps retrying
    - Reconnect delay = min(retries * step_ms, max_ms); retries resets on READY
    - CLOSED is terminal: supervisor stopped, client closed, operations fail fast
    - All redis-py exceptions, including text encode/decode failures, mapped to
      StoreOperationError / StoreUnavailableError

Design Decisions:
    - Supervisor as an asyncio.Task probing with PING: redis-py connects lazily,
      so liveness is observed explicitly instead of through socket callbacks
    - Client built with a zero-retry policy: request-level failures go straight
      back to the caller, the supervisor is the only thing that retries
    - Listeners are plain callables (event, data): logging is the only consumer,
      routes never read connection state
    - Injected via app.state, not a module singleton (ADR: testable without patching)
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from contextlib import suppress
from typing import Any

from fastapi import Request
from redis.asyncio import Redis
from redis.asyncio.retry import Retry
from redis.backoff import NoBackoff
from redis.exceptions import (
    ConnectionError as RedisConnectionError,
    RedisError,
    TimeoutError as RedisTimeoutError,
)

from kv_api.config import Settings
from kv_api.core.connection_state import (
    DEFAULT_BACKOFF_MAX_MS,
    DEFAULT_BACKOFF_STEP_MS,
    STATE_EVENTS,
    ConnectionEvent,
    ConnectionState,
    is_terminal,
    next_state,
    reconnect_delay_ms,
)
from kv_api.core.errors import StoreOperationError, StoreUnavailableError

logger = logging.getLogger(__name__)

Listener = Callable[[ConnectionEvent, dict[str, Any]], None]
Sleeper = Callable[[float], Awaitable[None]]

_CONNECTION_ERRORS = (RedisConnectionError, RedisTimeoutError, OSError)

CLIENT_CLOSED = "The client is closed"


def build_redis_client(host: str, port: int, db: int = 0) -> Redis:
    """Create the process-wide Redis client. Connects lazily on first command."""
    return Redis(
        host=host,
        port=port,
        db=db,
        decode_responses=True,
        retry=Retry(NoBackoff(), 0),
    )


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def log_connection_event(event: ConnectionEvent, data: dict[str, Any]) -> None:
    """Default listener: one log line per lifecycle event."""
    extra = {"event": event.value, **{
        k: data[k] for k in ("state", "attempt", "delay_ms") if k in data
    }}
    if event is ConnectionEvent.CONNECTING:
        logger.info("Connecting to Redis...", extra=extra)
    elif event is ConnectionEvent.READY:
        logger.info("Connected to Redis successfully", extra=extra)
    elif event is ConnectionEvent.RECONNECTING:
        logger.info(
            f"Reconnecting to Redis (attempt {data.get('attempt')}, "
            f"delay {data.get('delay_ms')}ms)",
            extra=extra,
        )
    elif event is ConnectionEvent.ERROR:
        if data.get("state") == ConnectionState.CONNECTING.value:
            logger.error(
                f"Failed to connect to Redis: {data.get('error')}", extra=extra,
            )
        else:
            logger.warning(
                f"Redis client error: {data.get('error')}", extra=extra,
            )
    elif event is ConnectionEvent.CLOSED:
        logger.info("Redis connection closed", extra=extra)


class RedisConnectionManager:
    """Owns the Redis client, its lifecycle state and the reconnect supervisor."""

    def __init__(
        self,
        client: Redis,
        *,
        backoff_step_ms: int = DEFAULT_BACKOFF_STEP_MS,
        backoff_max_ms: int = DEFAULT_BACKOFF_MAX_MS,
        health_check_interval: float = 5.0,
        sleep: Sleeper = asyncio.sleep,
    ):
        self.client = client
        self.backoff_step_ms = backoff_step_ms
        self.backoff_max_ms = backoff_max_ms
        self.health_check_interval = health_check_interval
        self.state = ConnectionState.DISCONNECTED
        self.retries = 0
        self._sleep = sleep
        self._listeners: list[Listener] = [log_connection_event]
        self._task: asyncio.Task | None = None
        self._wake = asyncio.Event()

    @classmethod
    def from_settings(cls, settings: Settings) -> "RedisConnectionManager":
        return cls(
            build_redis_client(
                settings.redis_host, settings.redis_port, settings.redis_db,
            ),
            backoff_step_ms=settings.redis_backoff_step_ms,
            backoff_max_ms=settings.redis_backoff_max_ms,
            health_check_interval=settings.redis_health_check_interval,
        )

    # ─── Listeners ──────────────────────────────────────────────

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: ConnectionEvent, **data: Any) -> None:
        for listener in list(self._listeners):
            try:
                listener(event, data)
            except Exception:
                logger.exception(
                    "Connection listener failed", extra={"event": event.value},
                )

    def _transition(self, target: ConnectionState, **data: Any) -> None:
        self.state = next_state(self.state, target)
        self._emit(STATE_EVENTS[target], state=target.value, **data)

    # ─── Lifecycle ──────────────────────────────────────────────

    @property
    def supervisor(self) -> asyncio.Task | None:
        return self._task

    def initiate(self) -> asyncio.Task | None:
        """Start connecting in the background and return immediately.

        Must be called from a running event loop. A second call while the
        supervisor is alive returns the existing task. After close() this is
        a no-op.
        """
        if is_terminal(self.state):
            logger.warning("initiate() called on a closed Redis connection")
            return None
        if self._task is not None and not self._task.done():
            return self._task
        self._task = asyncio.get_running_loop().create_task(
            self._supervise(), name="redis-connection-supervisor",
        )
        self._task.add_done_callback(self._drain_supervisor_result)
        return self._task

    async def close(self) -> None:
        """Terminal shutdown: stop retrying, close the client, emit CLOSED."""
        if is_terminal(self.state):
            return
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        self._transition(ConnectionState.CLOSED)
        try:
            await self.client.aclose()
        except (RedisError, OSError) as e:
            logger.warning(f"Error while closing Redis client: {_describe(e)}")

    def notify_connection_lost(self) -> None:
        """Ask the supervisor to probe now instead of at the next interval."""
        if self.state is ConnectionState.READY:
            self._wake.set()

    async def _supervise(self) -> None:
        if self.state is ConnectionState.DISCONNECTED:
            self._transition(ConnectionState.CONNECTING)
        while not is_terminal(self.state):
            try:
                await self.client.ping()
            except (RedisError, OSError) as e:
                self._emit(
                    ConnectionEvent.ERROR,
                    state=self.state.value, error=_describe(e),
                )
                await self._wait_before_retry()
                continue
            if self.state is not ConnectionState.READY:
                self.retries = 0
                self._transition(ConnectionState.READY)
            await self._wait_for_next_probe()

    async def _wait_before_retry(self) -> None:
        delay_ms = reconnect_delay_ms(
            self.retries, self.backoff_step_ms, self.backoff_max_ms,
        )
        self.retries += 1
        self._transition(
            ConnectionState.RECONNECTING,
            attempt=self.retries, delay_ms=delay_ms,
        )
        await self._sleep(delay_ms / 1000)

    async def _wait_for_next_probe(self) -> None:
        with suppress(asyncio.TimeoutError):
            await asyncio.wait_for(
                self._wake.wait(), timeout=self.health_check_interval,
            )
        self._wake.clear()

    def _drain_supervisor_result(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Redis connection supervisor stopped: {_describe(exc)}",
                exc_info=exc,
            )

    # ─── Store operations ───────────────────────────────────────

    async def set_value(self, key: Any, value: Any) -> None:
        """Write key -> value, overwriting any previous value."""
        await self._execute("set", self.client.set, key, value)

    async def get_value(self, key: str) -> str | None:
        """Read a key. Returns None when the key is absent."""
        return await self._execute("get", self.client.get, key)

    async def _execute(self, operation: str, command, *args):
        if is_terminal(self.state):
            raise StoreUnavailableError(operation, CLIENT_CLOSED)
        try:
            return await command(*args)
        except _CONNECTION_ERRORS as e:
            self.notify_connection_lost()
            raise StoreUnavailableError(operation, _describe(e))
        except (RedisError, UnicodeError) as e:
            raise StoreOperationError(operation, _describe(e))


def get_connection_manager(request: Request) -> RedisConnectionManager:
    """FastAPI dependency: the manager created by create_app()."""
    return request.app.state.connection_manager
