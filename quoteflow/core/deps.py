# quoteflow/core/deps.py
from __future__ import annotations

import datetime as dt
import logging
import threading
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from quoteflow.core.config import Settings, get_settings
from quoteflow.core.kv_store import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from quoteflow.db.session import SessionLocal
from quoteflow.services.lifecycle_coordinator import LifecycleCoordinator
from quoteflow.services.messaging_provider import TwilioWhatsAppProvider
from quoteflow.services.notification_dispatcher import NotificationDispatcher
from quoteflow.services.notification_gate import NotificationGate
from quoteflow.services.object_store import S3ObjectStore
from quoteflow.services.records_service import RecordsService
from quoteflow.services.sequence_service import SequenceService, SqlSequenceSource

logger = logging.getLogger(__name__)

_build_lock = threading.Lock()


@dataclass
class ServiceContainer:
    kv_store: KeyValueStore
    gate: NotificationGate
    coordinator: LifecycleCoordinator
    records: RecordsService


def build_kv_store(settings: Settings) -> KeyValueStore:
    if settings.redis_url:
        return RedisKeyValueStore.from_url(settings.redis_url)
    logger.warning("REDIS_URL not set: using in-process lock/session store (single worker only)")
    return InMemoryKeyValueStore()


def build_container(settings: Settings, session_factory: sessionmaker = SessionLocal) -> ServiceContainer:
    store = build_kv_store(settings)
    gate = NotificationGate(
        store,
        debounce_seconds=settings.notification_debounce_seconds,
        session_window=dt.timedelta(hours=settings.notification_session_window_hours),
    )
    dispatcher = NotificationDispatcher.from_settings(
        settings,
        provider=TwilioWhatsAppProvider.from_settings(settings),
        gate=gate,
    )
    coordinator = LifecycleCoordinator(
        session_factory=session_factory,
        sequences=SequenceService(SqlSequenceSource(session_factory)),
        dispatcher=dispatcher,
        object_store=S3ObjectStore.from_settings(settings),
        cache_store=store,
        frontend_url=settings.frontend_url,
        transaction_retries=settings.transaction_retries,
    )
    records = RecordsService(cache_store=store, stats_ttl_seconds=settings.stats_cache_ttl_seconds)
    return ServiceContainer(kv_store=store, gate=gate, coordinator=coordinator, records=records)


def get_container(request: Request) -> ServiceContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        with _build_lock:
            container = getattr(request.app.state, "container", None)
            if container is None:
                container = build_container(get_settings())
                request.app.state.container = container
    return container


def get_coordinator(container: ServiceContainer = Depends(get_container)) -> LifecycleCoordinator:
    return container.coordinator


def get_records(container: ServiceContainer = Depends(get_container)) -> RecordsService:
    return container.records


def get_notification_gate(container: ServiceContainer = Depends(get_container)) -> NotificationGate:
    return container.gate
