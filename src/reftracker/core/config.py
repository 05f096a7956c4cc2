"""Configuration for reference trackers with pydantic-based settings."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TRACKER_NAME = "reftracker"


class TrackerConfig(BaseModel):
    """Configuration for the calling layer around the tracker engine.

    Attributes:
        default_tracker_name: Tracker object used when a caller names none
        max_attempts: Attempts per operation when retrying lost races
            (used by callers such as the CLI, never by the engine itself)
        storage: Object store configuration
    """

    default_tracker_name: str = Field(
        default=DEFAULT_TRACKER_NAME,
        description="Tracker object used when a caller names none",
    )
    max_attempts: int = Field(
        default=5, gt=0, description="Attempts per operation on lost races"
    )
    storage: Optional[StorageBackendConfig] = Field(
        default=None, description="Object store configuration"
    )

    @field_validator("default_tracker_name")
    @classmethod
    def validate_tracker_name(cls, v: str) -> str:
        """Reject empty tracker names."""
        if not v.strip():
            raise ValueError("default_tracker_name must not be empty")
        return v

    @model_validator(mode="after")
    def fill_storage(self) -> "TrackerConfig":
        """Default to the in-memory store."""
        if self.storage is None:
            self.storage = StorageBackendConfig()
        return self


class RedisConfig(BaseSettings):
    """Configuration for Redis connectivity."""

    model_config = SettingsConfigDict(
        env_prefix="REDIS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    url: Optional[str] = Field(default=None, description="Redis connection URL")
    host: Optional[str] = Field(default=None, description="Redis server host")
    port: int = Field(default=6379, description="Redis server port")
    db: int = Field(default=0, ge=0, description="Redis database number")
    password: Optional[str] = Field(default=None, description="Redis password")

    def is_configured(self) -> bool:
        """Check if Redis is configured."""
        return self.url is not None or self.host is not None

    def is_url_based(self) -> bool:
        """Check if Redis is configured using URL."""
        return self.url is not None


class StorageBackendConfig(BaseModel):
    """Configuration for object store selection and settings.

    Attributes:
        backend_type: Type of object store ('memory' or 'redis')
        redis: Redis connection configuration (required if backend_type='redis')
        prefix: Key prefix for everything the store writes
    """

    backend_type: Literal["memory", "redis"] = Field(
        default="memory", description="Object store type: 'memory' or 'redis'"
    )
    redis: Optional[RedisConfig] = Field(
        default=None,
        description="Redis configuration (required if backend_type='redis')",
    )
    prefix: str = Field(
        default="reftracker:", description="Key prefix for the object store"
    )

    @model_validator(mode="after")
    def validate_redis_required(self) -> "StorageBackendConfig":
        """Ensure Redis config is provided when backend_type is redis."""
        if self.backend_type == "redis" and self.redis is None:
            # Auto-create from environment
            self.redis = RedisConfig()
            if not self.redis.is_configured():
                raise ValueError(
                    "Redis configuration required when backend_type='redis'. "
                    "Set REDIS_URL or REDIS_HOST environment variable."
                )
        return self


def get_redis_config() -> Optional[RedisConfig]:
    """Get Redis configuration from environment variables, or None if not configured."""
    config = RedisConfig()
    if not config.is_configured():
        return None
    return config
