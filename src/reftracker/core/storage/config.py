"""Factory function for creating object stores from config."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reftracker.core.config import StorageBackendConfig
    from reftracker.core.storage.base import ObjectStore


def create_object_store(
    config: "StorageBackendConfig", namespace: str | None = None
) -> "ObjectStore":
    """Create object store instance from config.

    Args:
        config: Storage backend configuration
        namespace: Optional pool name, keeping trackers of different pools
            apart in one Redis database

    Returns:
        Object store instance (MemoryObjectStore or RedisObjectStore)

    Raises:
        ValueError: If redis backend is selected but redis config is missing
    """
    if config.backend_type == "redis":
        from reftracker.core.storage.redis import RedisObjectStore

        redis_config = config.redis
        if redis_config is None:
            raise ValueError("Redis config required for redis backend")

        if redis_config.is_url_based():
            return RedisObjectStore(
                url=redis_config.url, prefix=config.prefix, namespace=namespace
            )
        return RedisObjectStore(
            host=redis_config.host or "localhost",
            port=redis_config.port,
            db=redis_config.db,
            password=redis_config.password,
            prefix=config.prefix,
            namespace=namespace,
        )

    from reftracker.core.storage.memory import MemoryObjectStore

    return MemoryObjectStore()
