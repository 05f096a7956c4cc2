"""Object stores backing tracker objects.

- ObjectStore: Abstract transactional object store interface
- MemoryObjectStore: In-memory store for development/testing
- RedisObjectStore: Redis-based store for production
"""

from reftracker.core.storage.base import ObjectStore
from reftracker.core.storage.memory import MemoryObjectStore
from reftracker.core.storage.redis import RedisObjectStore

__all__ = [
    "ObjectStore",
    "MemoryObjectStore",
    "RedisObjectStore",
]
