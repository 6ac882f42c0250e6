from __future__ import annotations

import json
import logging
from typing import Callable, TypeVar

from quoteflow.core.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheKeys:
    DASHBOARD_STATS = "cache:dashboard:stats"


def cache_aside(
    store: KeyValueStore,
    key: str,
    loader: Callable[[], T],
    ttl_seconds: int,
) -> T:
    """
    Read-through helper: return the cached JSON value for key, else call
    loader(), store its JSON form with ttl_seconds and return it.
    Store failures degrade to calling the loader.
    """
    try:
        raw = store.get(key)
    except Exception as exc:
        logger.warning("[cache] get failed key=%s: %s", key, exc)
        raw = None

    if raw is not None:
        logger.debug("[cache] hit key=%s", key)
        return json.loads(raw)

    value = loader()
    try:
        store.set(key, json.dumps(value), ttl_seconds)
    except Exception as exc:
        logger.warning("[cache] set failed key=%s: %s", key, exc)
    return value


def invalidate(store: KeyValueStore, *keys: str) -> None:
    for key in keys:
        try:
            store.delete(key)
        except Exception as exc:
            logger.warning("[cache] delete failed key=%s: %s", key, exc)
