from quoteflow.core.cache import cache_aside, invalidate
from quoteflow.core.kv_store import InMemoryKeyValueStore


class BrokenStore:
    def get(self, key):
        raise ConnectionError("redis down")

    def set(self, key, value, ttl_seconds=None):
        raise ConnectionError("redis down")

    def delete(self, key):
        raise ConnectionError("redis down")


def test_cache_aside_loads_once_until_invalidated():
    store = InMemoryKeyValueStore()
    calls = []

    def loader():
        calls.append(1)
        return {"total": len(calls)}

    assert cache_aside(store, "k", loader, 60) == {"total": 1}
    assert cache_aside(store, "k", loader, 60) == {"total": 1}

    invalidate(store, "k")
    assert cache_aside(store, "k", loader, 60) == {"total": 2}


def test_store_failures_fall_back_to_loader():
    assert cache_aside(BrokenStore(), "k", lambda: {"ok": True}, 60) == {"ok": True}
    invalidate(BrokenStore(), "k")
