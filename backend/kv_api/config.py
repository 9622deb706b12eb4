"""Application Configuration: environment-driven settings via pydantic-settings.

Invariants:
    - get_settings() is cached (lru_cache): single instance per process
    - PORT selects the listening port; the Redis target is a fixed host/port pair

Design Decisions:
    - pydantic-settings over raw os.environ: validation, type coercion, .env file support (ADR: developer UX)
    - Defaults work out-of-the-box with docker-compose (Redis reachable as service "redis")
"""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000

    # Redis
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_db: int = 0
    redis_backoff_step_ms: int = 100
    redis_backoff_max_ms: int = 3000
    redis_health_check_interval: float = 5.0

    # Service identity (reported by /health)
    service_name: str = "KV API"
    service_version: str = "1.0.0"

    # Observability
    log_level: str = "INFO"
    log_format: str = "json"

    @field_validator("redis_backoff_step_ms", "redis_backoff_max_ms")
    @classmethod
    def non_negative_delay(cls, v: int) -> int:
        if v < 0:
            raise ValueError("backoff delays must be >= 0")
        return v

    @field_validator("redis_health_check_interval")
    @classmethod
    def positive_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("health check interval must be > 0")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()
