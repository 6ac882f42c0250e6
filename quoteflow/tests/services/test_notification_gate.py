import datetime as dt

from quoteflow.core.kv_store import InMemoryKeyValueStore
from quoteflow.services.notification_gate import NotificationGate

NOW = dt.datetime(2024, 3, 1, 12, 0, tzinfo=dt.timezone.utc)


class FakeClock:
    def __init__(self):
        self.t = 1000.0

    def __call__(self):
        return self.t


def make_gate():
    clock = FakeClock()
    return NotificationGate(InMemoryKeyValueStore(clock=clock), debounce_seconds=20), clock


def test_second_acquire_within_window_is_refused():
    gate, _ = make_gate()
    assert gate.acquire("+919876543210", "quotation_updated") is True
    assert gate.acquire("+919876543210", "quotation_updated") is False


def test_lock_is_per_action_and_recipient():
    gate, _ = make_gate()
    assert gate.acquire("+919876543210", "quotation_updated")
    assert gate.acquire("+919876543210", "payment_received")
    assert gate.acquire("+918888888888", "quotation_updated")


def test_lock_expires_after_debounce_window():
    gate, clock = make_gate()
    gate.acquire("+919876543210", "quotation_updated")
    clock.t += 20
    assert gate.acquire("+919876543210", "quotation_updated") is True


def test_release_frees_the_lock():
    gate, _ = make_gate()
    gate.acquire("+919876543210", "quotation_updated")
    gate.release("+919876543210", "quotation_updated")
    assert gate.acquire("+919876543210", "quotation_updated") is True


def test_session_window():
    gate, _ = make_gate()
    assert gate.in_session("+919876543210", NOW) is False

    gate.record_interaction("+919876543210", NOW - dt.timedelta(hours=23))
    assert gate.in_session("+919876543210", NOW) is True

    gate.record_interaction("+919876543210", NOW - dt.timedelta(hours=25))
    assert gate.in_session("+919876543210", NOW) is False
    assert gate.last_interaction("+919876543210") == NOW - dt.timedelta(hours=25)


def test_session_key_expires_with_the_window():
    clock = FakeClock()
    store = InMemoryKeyValueStore(clock=clock)
    gate = NotificationGate(store, session_window=dt.timedelta(hours=24))

    gate.record_interaction("+919876543210", NOW)
    clock.t += 24 * 3600 - 1
    assert store.get("session:+919876543210") == NOW.isoformat()

    clock.t += 1
    assert store.get("session:+919876543210") is None
    assert gate.last_interaction("+919876543210") is None
