"""Shared test fixtures."""

import uuid
from pathlib import Path

import pytest

import sys

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from reftracker.core.storage import MemoryObjectStore, RedisObjectStore  # noqa: E402


def create_redis_store() -> RedisObjectStore:
    """Create a Redis store on fakeredis under a prefix of its own."""
    fakeredis = pytest.importorskip("fakeredis")
    prefix = f"test_{uuid.uuid4().hex[:8]}:"
    return RedisObjectStore(client=fakeredis.FakeRedis(), prefix=prefix)


@pytest.fixture(params=["memory", "redis"])
def store(request):
    """Every object store backend, isolated per test."""
    if request.param == "memory":
        backend = MemoryObjectStore()
    else:
        backend = create_redis_store()
    yield backend
    backend.close()


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch, tmp_path):
    """Keep Redis settings from the environment or a .env file out of tests."""
    for var in ("REDIS_URL", "REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    yield
