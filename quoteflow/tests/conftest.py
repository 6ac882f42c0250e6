import os

# settings are read at import time (db/session builds the engine)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import datetime as dt

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# FORCE model registration
import quoteflow.models  # noqa

from quoteflow.core.kv_store import InMemoryKeyValueStore
from quoteflow.db.base import Base
from quoteflow.models.enums import UserRole
from quoteflow.policies.rbac import Principal
from quoteflow.schemas.quotations import QuotationCreateRequest
from quoteflow.services.lifecycle_coordinator import LifecycleCoordinator
from quoteflow.services.notification_dispatcher import NotificationDispatcher, TemplateRegistry
from quoteflow.services.notification_gate import NotificationGate
from quoteflow.services.records_service import RecordsService
from quoteflow.services.sequence_service import SequenceService
from quoteflow.tests.fakes import (
    FakeMessagingProvider,
    FakeObjectStore,
    TEMPLATES,
    InMemorySequenceSource,
    quotation_payload,
)


@pytest.fixture(scope="function")
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def provider():
    return FakeMessagingProvider()


@pytest.fixture
def object_store():
    return FakeObjectStore()


@pytest.fixture
def gate(kv_store):
    return NotificationGate(kv_store, debounce_seconds=20, session_window=dt.timedelta(hours=24))


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def dispatcher(provider, gate, sleeps):
    return NotificationDispatcher(
        provider=provider,
        gate=gate,
        templates=TemplateRegistry(templates=TEMPLATES),
        retries=3,
        backoff_base_seconds=1.0,
        max_backoff_seconds=10.0,
        sleep=sleeps.append,
    )


@pytest.fixture
def sequences():
    return SequenceService(InMemorySequenceSource())


@pytest.fixture
def coordinator(session_factory, sequences, dispatcher, object_store, kv_store):
    return LifecycleCoordinator(
        session_factory=session_factory,
        sequences=sequences,
        dispatcher=dispatcher,
        object_store=object_store,
        cache_store=kv_store,
        frontend_url="https://quoteflow.test",
        transaction_retries=3,
    )


@pytest.fixture
def records(kv_store):
    return RecordsService(cache_store=kv_store, stats_ttl_seconds=300)


@pytest.fixture
def admin():
    return Principal(user_id="admin-1", role=UserRole.ADMIN, display_name="Admin")


@pytest.fixture
def staff():
    return Principal(user_id="staff-1", role=UserRole.STAFF, display_name="Staff")


@pytest.fixture
def make_quotation(coordinator, admin):
    def _make(**overrides):
        return coordinator.create_quotation(QuotationCreateRequest(**quotation_payload(**overrides)), admin).record

    return _make
