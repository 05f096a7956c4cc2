"""Tests for object store backends."""

import pytest

from reftracker.core import tracker
from reftracker.core.config import RedisConfig, StorageBackendConfig
from reftracker.core.errors import (
    AlreadyExists,
    AttributeNotFound,
    Conflict,
    ObjectNotFound,
)
from reftracker.core.storage import MemoryObjectStore, ObjectStore, RedisObjectStore
from reftracker.core.storage.config import create_object_store

ATTRS = {"kind": b"\x00\x00\x00\x01"}


class TestObjectStore:
    """Contract tests run against every backend."""

    def test_create_and_read(self, store: ObjectStore) -> None:
        """A created object is readable with batched key lookup."""
        version = store.create_if_absent("obj", ATTRS, b"payload", ["a", "b"])

        result = store.read("obj", ["b", "c", "a"])
        assert result.payload == b"payload"
        assert result.version == version
        assert sorted(result.present_keys) == ["a", "b"]

    def test_create_is_exclusive(self, store: ObjectStore) -> None:
        store.create_if_absent("obj", ATTRS, b"one", ["a"])
        with pytest.raises(AlreadyExists):
            store.create_if_absent("obj", ATTRS, b"two", ["b"])

        assert store.read("obj", ["a", "b"]).present_keys == ["a"]

    def test_missing_object(self, store: ObjectStore) -> None:
        with pytest.raises(ObjectNotFound):
            store.read("missing", ["a"])
        with pytest.raises(ObjectNotFound):
            store.get_attribute("missing", "kind")
        assert store.describe("missing") is None

    def test_attributes(self, store: ObjectStore) -> None:
        store.create_if_absent("obj", ATTRS, b"", ["a"])
        assert store.get_attribute("obj", "kind") == b"\x00\x00\x00\x01"
        with pytest.raises(AttributeNotFound):
            store.get_attribute("obj", "other")

    def test_write_bumps_version(self, store: ObjectStore) -> None:
        """Writes apply payload and key changes together and raise the version."""
        v1 = store.create_if_absent("obj", ATTRS, b"old", ["a", "b"])
        v2 = store.write("obj", v1, payload=b"new", insert_keys=["c"], remove_keys=["a"])

        assert v2 is not None and v2 > v1
        snapshot = store.describe("obj")
        assert snapshot is not None
        assert snapshot.version == v2
        assert snapshot.payload == b"new"
        assert snapshot.keys == ["b", "c"]
        assert snapshot.attrs == ATTRS

    def test_write_with_stale_version(self, store: ObjectStore) -> None:
        """A write against an outdated version changes nothing."""
        v1 = store.create_if_absent("obj", ATTRS, b"old", ["a"])
        store.write("obj", v1, insert_keys=["b"])

        with pytest.raises(Conflict) as exc_info:
            store.write("obj", v1, payload=b"stale", insert_keys=["c"])

        assert exc_info.value.expected_version == v1
        snapshot = store.describe("obj")
        assert snapshot is not None
        assert snapshot.payload == b"old"
        assert snapshot.keys == ["a", "b"]

    def test_write_to_missing_object(self, store: ObjectStore) -> None:
        with pytest.raises(Conflict):
            store.write("missing", 1, payload=b"x")

    def test_delete(self, store: ObjectStore) -> None:
        """Deleting drops payload, attributes and keys."""
        v1 = store.create_if_absent("obj", ATTRS, b"data", ["a"])
        assert store.write("obj", v1, delete=True) is None

        assert store.describe("obj") is None
        with pytest.raises(ObjectNotFound):
            store.get_attribute("obj", "kind")

    def test_recreated_object_never_reuses_versions(self, store: ObjectStore) -> None:
        """A writer holding a version from before deletion cannot clobber a new object."""
        v1 = store.create_if_absent("obj", ATTRS, b"first", ["a"])
        store.write("obj", v1, delete=True)
        v2 = store.create_if_absent("obj", ATTRS, b"second", ["b"])

        assert v2 != v1
        with pytest.raises(Conflict):
            store.write("obj", v1, delete=True)
        assert store.read("obj", ["b"]).payload == b"second"

    def test_recreate_does_not_resurrect_keys(self, store: ObjectStore) -> None:
        v1 = store.create_if_absent("obj", ATTRS, b"", ["old"])
        store.write("obj", v1, delete=True)
        store.create_if_absent("obj", ATTRS, b"", ["new"])

        snapshot = store.describe("obj")
        assert snapshot is not None
        assert snapshot.keys == ["new"]


class TestMemoryObjectStore:
    """Test cases specific to MemoryObjectStore."""

    def test_exists_and_size(self) -> None:
        store = MemoryObjectStore()
        assert not store.exists("obj")
        store.create_if_absent("obj", {}, b"", ["a"])
        assert store.exists("obj")
        assert store.size() == 1

    def test_snapshots_are_copies(self) -> None:
        store = MemoryObjectStore()
        store.create_if_absent("obj", {"kind": b"1"}, b"", ["a"])

        snapshot = store.describe("obj")
        assert snapshot is not None
        snapshot.attrs["kind"] = b"2"
        snapshot.keys.append("b")

        assert store.get_attribute("obj", "kind") == b"1"
        assert store.read("obj", ["b"]).present_keys == []


class TestCreateObjectStore:
    """Test cases for the object store factory."""

    def test_memory_backend(self) -> None:
        store = create_object_store(StorageBackendConfig())
        assert isinstance(store, MemoryObjectStore)

    def test_redis_backend_with_namespace(self) -> None:
        """Redis clients connect lazily, so no server is needed here."""
        config = StorageBackendConfig(
            backend_type="redis",
            redis=RedisConfig(url="redis://localhost:6379/0"),
            prefix="rt:",
        )
        store = create_object_store(config, namespace="csi")
        assert isinstance(store, RedisObjectStore)
        assert store._object_key("snap") == "rt:csi:obj:snap"

    def test_redis_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("REDIS_HOST", "redis.internal")
        store = RedisObjectStore.from_env(prefix="x:")
        assert store._host == "redis.internal"
        assert store._keys_key("snap") == "x:default:keys:snap"

    def test_redis_from_env_unconfigured(self) -> None:
        with pytest.raises(ValueError, match="Redis not configured"):
            RedisObjectStore.from_env()


class TestRedisKeyLayout:
    """Pools and tracker names never share Redis keys."""

    @pytest.fixture
    def client(self):
        fakeredis = pytest.importorskip("fakeredis")
        return fakeredis.FakeRedis()

    def test_colon_in_name_stays_apart_from_pool(self, client) -> None:
        """Pool ``obj`` with tracker ``a`` is not the default tracker ``obj:a``."""
        pooled = RedisObjectStore(client=client, prefix="rt:", namespace="obj")
        default = RedisObjectStore(client=client, prefix="rt:")

        tracker.add(pooled, "a", ["pool-holder"])

        assert tracker.inspect(default, "obj:a") is None
        assert tracker.add(default, "obj:a", ["other"]) is True
        assert tracker.inspect(pooled, "a").keys == ["pool-holder"]
        assert tracker.inspect(default, "obj:a").keys == ["other"]

    def test_tracker_named_clock(self, client) -> None:
        """A tracker called ``clock`` coexists with another pool's version clock."""
        pooled = RedisObjectStore(client=client, prefix="rt:", namespace="obj")
        default = RedisObjectStore(client=client, prefix="rt:")

        tracker.add(default, "clock", ["a"])
        tracker.add(pooled, "x", ["b"])
        tracker.add(pooled, "x", ["c"])

        assert tracker.inspect(default, "clock").keys == ["a"]
        assert tracker.inspect(pooled, "x").refcount == 2

    def test_segments_are_escaped(self) -> None:
        store = RedisObjectStore(prefix="rt:", namespace="a:b")
        assert store._object_key("x:y") == "rt:a%3Ab:obj:x%3Ay"
        assert store._keys_key("50%") == "rt:a%3Ab:keys:50%25"
        assert store._clock_key() == "rt:a%3Ab:clock"
