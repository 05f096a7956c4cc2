"""Idempotent reference tracking on top of an object store."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from reftracker.core.codec import SCHEMA_VERSION_ATTR, decode_schema_version
from reftracker.core.config import TrackerConfig
from reftracker.core.errors import DecodeError, EmptyKeyBatch
from reftracker.core.models import TrackerState
from reftracker.core.schema import current_schema, get_schema, read_schema_version
from reftracker.core.storage.base import ObjectStore

logger = logging.getLogger(__name__)


def _validate_keys(keys: Sequence[str]) -> list[str]:
    if isinstance(keys, (str, bytes)):
        raise TypeError("keys must be a sequence of strings, not a single string")
    batch = list(keys)
    if not batch:
        raise EmptyKeyBatch()
    for key in batch:
        if not isinstance(key, str):
            raise TypeError(f"keys must be strings, got {type(key).__name__}")
    return batch


def add(store: ObjectStore, name: str, keys: Sequence[str]) -> bool:
    """Add reference keys to a tracker, creating it if needed.

    Keys already tracked are skipped, so repeating a call has no effect.
    Lost races are reported, never retried here.

    Args:
        store: Object store holding the tracker
        name: Tracker object name
        keys: Non-empty batch of reference keys

    Returns:
        True if this call created the tracker.

    Raises:
        EmptyKeyBatch: If keys is empty
        AlreadyExists: If another caller created the tracker concurrently
        Conflict: If the tracker changed between read and write
        UnsupportedVersion: If the tracker uses an unknown schema
    """
    batch = _validate_keys(keys)
    logger.debug("Adding %d keys to %s", len(batch), name)

    version = read_schema_version(store, name)
    if version is None:
        current_schema().create(store, name, batch)
        return True

    get_schema(version).add(store, name, batch)
    return False


def remove(store: ObjectStore, name: str, keys: Sequence[str]) -> bool:
    """Remove reference keys from a tracker.

    Keys not tracked are skipped. When the last key goes, the tracker object
    is deleted. A tracker that does not exist counts as already deleted.

    Args:
        store: Object store holding the tracker
        name: Tracker object name
        keys: Non-empty batch of reference keys

    Returns:
        True if the tracker no longer exists after this call.

    Raises:
        EmptyKeyBatch: If keys is empty
        Conflict: If the tracker changed between read and write
        UnsupportedVersion: If the tracker uses an unknown schema
    """
    batch = _validate_keys(keys)
    logger.debug("Removing %d keys from %s", len(batch), name)

    version = read_schema_version(store, name)
    if version is None:
        logger.debug("Tracker %s is already gone", name)
        return True

    return get_schema(version).remove(store, name, batch)


def inspect(store: ObjectStore, name: str) -> TrackerState | None:
    """Decode a consistent snapshot of a tracker, or None if it does not exist."""
    obj = store.describe(name)
    if obj is None:
        return None

    raw_version = obj.attrs.get(SCHEMA_VERSION_ATTR)
    if raw_version is None:
        raise DecodeError(f"tracker {name!r} has no schema version attribute")
    handler = get_schema(decode_schema_version(raw_version))

    return TrackerState(
        name=name,
        schema_version=handler.version,
        refcount=handler.decode(obj.payload),
        keys=list(obj.keys),
        store_version=obj.version,
    )


class ReferenceTracker:
    """Tracker operations bound to one object store and a default name.

    Example:
        # Default in-memory store
        tracker = ReferenceTracker()
        tracker.add(["node-1", "node-2"], name="snapshot-42")
        tracker.remove(["node-1"], name="snapshot-42")

        # Redis store configured from REDIS_URL / REDIS_HOST
        from reftracker.core.config import StorageBackendConfig, TrackerConfig

        config = TrackerConfig(storage=StorageBackendConfig(backend_type="redis"))
        with ReferenceTracker(config=config) as tracker:
            created = tracker.add(["node-1"])

    Conflicts are raised to the caller. Wrap calls in
    ``reftracker.retry.call_with_retries`` to retry them.
    """

    def __init__(
        self,
        config: TrackerConfig | None = None,
        store: ObjectStore | None = None,
        namespace: str | None = None,
    ) -> None:
        self.config = config or TrackerConfig()

        if store is not None:
            self._store = store
        else:
            from reftracker.core.storage.config import create_object_store

            # config.storage is guaranteed to exist due to TrackerConfig validation
            assert self.config.storage is not None
            self._store = create_object_store(self.config.storage, namespace=namespace)

    @property
    def store(self) -> ObjectStore:
        return self._store

    def _resolve(self, name: str | None) -> str:
        return name or self.config.default_tracker_name

    def add(self, keys: Sequence[str], name: str | None = None) -> bool:
        """Add keys to the named (or default) tracker. True if it was created."""
        return add(self._store, self._resolve(name), keys)

    def remove(self, keys: Sequence[str], name: str | None = None) -> bool:
        """Remove keys from the named (or default) tracker. True if it is gone."""
        return remove(self._store, self._resolve(name), keys)

    def inspect(self, name: str | None = None) -> TrackerState | None:
        return inspect(self._store, self._resolve(name))

    def close(self) -> None:
        """Clean up resources."""
        self._store.close()

    def __enter__(self) -> "ReferenceTracker":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
        return None
