"""Core components for idempotent reference tracking."""

from reftracker.core.config import RedisConfig, StorageBackendConfig, TrackerConfig
from reftracker.core.errors import (
    AlreadyExists,
    Conflict,
    DecodeError,
    EmptyKeyBatch,
    TrackerError,
    UnsupportedVersion,
)
from reftracker.core.models import TrackerState
from reftracker.core.tracker import ReferenceTracker, add, inspect, remove

__all__ = [
    "ReferenceTracker",
    "add",
    "remove",
    "inspect",
    "TrackerConfig",
    "RedisConfig",
    "StorageBackendConfig",
    "TrackerState",
    "TrackerError",
    "AlreadyExists",
    "Conflict",
    "DecodeError",
    "EmptyKeyBatch",
    "UnsupportedVersion",
]
