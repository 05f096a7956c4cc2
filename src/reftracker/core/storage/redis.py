"""Redis object store implementation.

Hash-based storage with WATCH/MULTI/EXEC transactions for production use.
"""

from collections.abc import Sequence
from urllib.parse import quote

import redis
from redis.exceptions import WatchError

from reftracker.core.config import RedisConfig, get_redis_config
from reftracker.core.errors import (
    AlreadyExists,
    AttributeNotFound,
    Conflict,
    ObjectNotFound,
)
from reftracker.core.models import ReadResult, StoredObject
from reftracker.core.storage.base import ObjectStore

_VERSION = b"version"
_PAYLOAD = b"payload"
_ATTR_PREFIX = b"attr:"
DEFAULT_NAMESPACE = "default"


class RedisObjectStore(ObjectStore):
    """Redis object store.

    Uses Redis data structures:
    - Hash: object version, payload and attributes (key: {prefix}{ns}:obj:{name})
    - Hash: tracked keys mapped to empty values (key: {prefix}{ns}:keys:{name})
    - String: version clock shared by the namespace (key: {prefix}{ns}:clock)

    The namespace and tracker name are percent-encoded, so neither can
    contain a colon and every key has a fixed number of segments after the
    prefix. The clock key has one segment fewer than any object key.

    Writers WATCH the object hash, so any concurrent change to it aborts the
    transaction. Every write bumps the version field in that hash.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 6379,
        db: int = 0,
        password: str | None = None,
        url: str | None = None,
        prefix: str = "reftracker:",
        namespace: str | None = None,
        client: redis.Redis | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._db = db
        self._password = password
        self._url = url
        self._prefix = prefix
        self._namespace = quote(namespace or DEFAULT_NAMESPACE, safe="")
        self._client = client

    @classmethod
    def from_env(
        cls,
        config: RedisConfig | None = None,
        prefix: str = "reftracker:",
        namespace: str | None = None,
    ) -> "RedisObjectStore":
        """Create store from environment configuration."""
        if config is None:
            config = get_redis_config()
        if config is None:
            raise ValueError(
                "Redis not configured. Set REDIS_URL or REDIS_HOST environment variable."
            )
        if config.is_url_based():
            return cls(url=config.url, prefix=prefix, namespace=namespace)
        return cls(
            host=config.host or "localhost",
            port=config.port,
            db=config.db,
            password=config.password,
            prefix=prefix,
            namespace=namespace,
        )

    def _get_client(self) -> redis.Redis:
        if self._client is None:
            if self._url:
                self._client = redis.from_url(self._url)
            else:
                self._client = redis.Redis(
                    host=self._host,
                    port=self._port,
                    db=self._db,
                    password=self._password,
                )
        return self._client

    def _object_key(self, name: str) -> str:
        return f"{self._prefix}{self._namespace}:obj:{quote(name, safe='')}"

    def _keys_key(self, name: str) -> str:
        return f"{self._prefix}{self._namespace}:keys:{quote(name, safe='')}"

    def _clock_key(self) -> str:
        return f"{self._prefix}{self._namespace}:clock"

    @staticmethod
    def _attr_field(attr: str) -> bytes:
        return _ATTR_PREFIX + attr.encode()

    def create_if_absent(
        self,
        name: str,
        attrs: dict[str, bytes],
        payload: bytes,
        keys: Sequence[str],
    ) -> int:
        obj_key = self._object_key(name)
        keys_key = self._keys_key(name)
        with self._get_client().pipeline() as pipe:
            try:
                pipe.watch(obj_key)
                if pipe.exists(obj_key):
                    raise AlreadyExists(name)
                version = int(pipe.incr(self._clock_key()))

                mapping: dict[bytes, bytes | int] = {
                    _VERSION: version,
                    _PAYLOAD: payload,
                }
                for attr, value in attrs.items():
                    mapping[self._attr_field(attr)] = value

                pipe.multi()
                pipe.hset(obj_key, mapping=mapping)
                # Leftovers of an object deleted mid-write must not leak in.
                pipe.delete(keys_key)
                if keys:
                    pipe.hset(keys_key, mapping={key: b"" for key in keys})
                pipe.execute()
            except WatchError as exc:
                raise AlreadyExists(name) from exc
        return version

    def read(self, name: str, keys: Sequence[str]) -> ReadResult:
        keys = list(keys)
        with self._get_client().pipeline(transaction=True) as pipe:
            pipe.hmget(self._object_key(name), [_VERSION, _PAYLOAD])
            if keys:
                pipe.hmget(self._keys_key(name), keys)
            results = pipe.execute()

        version, payload = results[0]
        if version is None:
            raise ObjectNotFound(name)
        values = results[1] if keys else []
        return ReadResult(
            payload=payload or b"",
            version=int(version),
            present_keys=[key for key, value in zip(keys, values) if value is not None],
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
        obj_key = self._object_key(name)
        keys_key = self._keys_key(name)
        with self._get_client().pipeline() as pipe:
            try:
                pipe.watch(obj_key)
                current = pipe.hget(obj_key, _VERSION)
                if current is None:
                    raise Conflict(name, expected_version)
                if int(current) != expected_version:
                    raise Conflict(name, expected_version, int(current))

                if delete:
                    pipe.multi()
                    pipe.delete(obj_key, keys_key)
                    pipe.execute()
                    return None

                version = int(pipe.incr(self._clock_key()))
                pipe.multi()
                if payload is not None:
                    pipe.hset(obj_key, _PAYLOAD, payload)
                if insert_keys:
                    pipe.hset(keys_key, mapping={key: b"" for key in insert_keys})
                if remove_keys:
                    pipe.hdel(keys_key, *remove_keys)
                pipe.hset(obj_key, _VERSION, version)
                pipe.execute()
            except WatchError as exc:
                raise Conflict(name, expected_version) from exc
        return version

    def get_attribute(self, name: str, attr: str) -> bytes:
        obj_key = self._object_key(name)
        with self._get_client().pipeline(transaction=True) as pipe:
            pipe.exists(obj_key)
            pipe.hget(obj_key, self._attr_field(attr))
            exists, value = pipe.execute()
        if not exists:
            raise ObjectNotFound(name)
        if value is None:
            raise AttributeNotFound(name, attr)
        return value

    def describe(self, name: str) -> StoredObject | None:
        with self._get_client().pipeline(transaction=True) as pipe:
            pipe.hgetall(self._object_key(name))
            pipe.hkeys(self._keys_key(name))
            fields, keys = pipe.execute()

        if _VERSION not in fields:
            return None
        attrs = {
            field[len(_ATTR_PREFIX):].decode(): value
            for field, value in fields.items()
            if field.startswith(_ATTR_PREFIX)
        }
        return StoredObject(
            name=name,
            version=int(fields[_VERSION]),
            payload=fields.get(_PAYLOAD, b""),
            attrs=attrs,
            keys=sorted(key.decode() for key in keys),
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None
