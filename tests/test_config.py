"""Tests for tracker configuration."""

import pytest
from pydantic import ValidationError

from reftracker.core.config import (
    RedisConfig,
    StorageBackendConfig,
    TrackerConfig,
    get_redis_config,
)


class TestTrackerConfig:
    """Test cases for TrackerConfig."""

    def test_default_config(self) -> None:
        """Test default configuration values."""
        config = TrackerConfig()
        assert config.default_tracker_name == "reftracker"
        assert config.max_attempts == 5
        assert config.storage is not None
        assert config.storage.backend_type == "memory"
        assert config.storage.prefix == "reftracker:"

    def test_custom_config(self) -> None:
        config = TrackerConfig(
            default_tracker_name="snapshots",
            max_attempts=1,
            storage=StorageBackendConfig(prefix="csi:"),
        )
        assert config.default_tracker_name == "snapshots"
        assert config.max_attempts == 1
        assert config.storage.prefix == "csi:"

    def test_parameter_validations(self) -> None:
        with pytest.raises(ValidationError):
            TrackerConfig(max_attempts=0)
        with pytest.raises(ValidationError):
            TrackerConfig(default_tracker_name="  ")
        with pytest.raises(ValidationError):
            StorageBackendConfig(backend_type="etcd")


class TestRedisConfig:
    """Test cases for Redis settings."""

    def test_unconfigured(self) -> None:
        assert get_redis_config() is None
        with pytest.raises(ValidationError, match="REDIS_URL or REDIS_HOST"):
            StorageBackendConfig(backend_type="redis")

    def test_from_environment(self, monkeypatch) -> None:
        monkeypatch.setenv("REDIS_URL", "redis://cache:6380/2")
        config = get_redis_config()
        assert config is not None
        assert config.is_url_based()

        storage = StorageBackendConfig(backend_type="redis")
        assert storage.redis is not None
        assert storage.redis.url == "redis://cache:6380/2"

    def test_from_env_file(self, tmp_path) -> None:
        (tmp_path / ".env").write_text("REDIS_HOST=redis.local\nREDIS_PORT=6390\n")
        config = RedisConfig()
        assert config.is_configured()
        assert not config.is_url_based()
        assert config.host == "redis.local"
        assert config.port == 6390

    def test_explicit_values(self) -> None:
        config = RedisConfig(host="localhost", db=3)
        assert config.is_configured()
        assert config.db == 3
        with pytest.raises(ValidationError):
            RedisConfig(db=-1)
