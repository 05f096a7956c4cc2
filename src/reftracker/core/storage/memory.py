"""In-memory object store implementation.

Simplified implementation for development and testing.
"""

import itertools
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from reftracker.core.errors import (
    AlreadyExists,
    AttributeNotFound,
    Conflict,
    ObjectNotFound,
)
from reftracker.core.models import ReadResult, StoredObject
from reftracker.core.storage.base import ObjectStore


@dataclass
class _Object:
    version: int
    payload: bytes
    attrs: dict[str, bytes] = field(default_factory=dict)
    keys: dict[str, bytes] = field(default_factory=dict)


class MemoryObjectStore(ObjectStore):
    """In-memory object store using Python dicts.

    Thread-safe, so several trackers in one process can race against it.
    For sharing trackers between processes or nodes, use RedisObjectStore.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._objects: dict[str, _Object] = {}
        self._clock = itertools.count(1)

    def create_if_absent(
        self,
        name: str,
        attrs: dict[str, bytes],
        payload: bytes,
        keys: Sequence[str],
    ) -> int:
        with self._lock:
            if name in self._objects:
                raise AlreadyExists(name)
            version = next(self._clock)
            self._objects[name] = _Object(
                version=version,
                payload=bytes(payload),
                attrs=dict(attrs),
                keys={key: b"" for key in keys},
            )
            return version

    def read(self, name: str, keys: Sequence[str]) -> ReadResult:
        with self._lock:
            obj = self._objects.get(name)
            if obj is None:
                raise ObjectNotFound(name)
            return ReadResult(
                payload=obj.payload,
                version=obj.version,
                present_keys=[key for key in keys if key in obj.keys],
            )

    def write(
        self,
        name: str,
        expected_version: int,
        payload: bytes | None = None,
        insert_keys: Sequence[str] = (),
        remove_keys: Sequence[str] = (),
        delete: bool = False,
    ) -> int | None:
        with self._lock:
            obj = self._objects.get(name)
            if obj is None:
                raise Conflict(name, expected_version)
            if obj.version != expected_version:
                raise Conflict(name, expected_version, obj.version)

            if delete:
                del self._objects[name]
                return None

            if payload is not None:
                obj.payload = bytes(payload)
            for key in insert_keys:
                obj.keys[key] = b""
            for key in remove_keys:
                obj.keys.pop(key, None)
            obj.version = next(self._clock)
            return obj.version

    def get_attribute(self, name: str, attr: str) -> bytes:
        with self._lock:
            obj = self._objects.get(name)
            if obj is None:
                raise ObjectNotFound(name)
            if attr not in obj.attrs:
                raise AttributeNotFound(name, attr)
            return obj.attrs[attr]

    def describe(self, name: str) -> StoredObject | None:
        with self._lock:
            obj = self._objects.get(name)
            if obj is None:
                return None
            return StoredObject(
                name=name,
                version=obj.version,
                payload=obj.payload,
                attrs=dict(obj.attrs),
                keys=sorted(obj.keys),
            )

    def exists(self, name: str) -> bool:
        with self._lock:
            return name in self._objects

    def size(self) -> int:
        with self._lock:
            return len(self._objects)

    def close(self) -> None:
        pass
