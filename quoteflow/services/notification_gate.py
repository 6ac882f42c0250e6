# quoteflow/services/notification_gate.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional

from quoteflow.core.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL = "whatsapp"


def lock_key(recipient: str, channel: str, action: str) -> str:
    return f"notification:{recipient}:{channel}:{action}"


def session_key(recipient: str) -> str:
    return f"session:{recipient}"


class NotificationGate:
    """
    Debounce locks and the messaging session window, both kept in the injected store.

    - one (recipient, channel, action) notification per debounce window
    - recipient is "in session" when the last interaction is younger than session_window
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        debounce_seconds: int = 20,
        session_window: dt.timedelta = dt.timedelta(hours=24),
    ):
        self._store = store
        self.debounce_seconds = debounce_seconds
        self.session_window = session_window

    def acquire(self, recipient: str, action: str, channel: str = DEFAULT_CHANNEL) -> bool:
        """
        Atomic check-and-set. False means another send for the same key is inside its window.
        """
        acquired = self._store.check_and_set_if_absent(
            lock_key(recipient, channel, action), "locked", self.debounce_seconds
        )
        if not acquired:
            logger.info("[notify] debounced recipient=%s action=%s", recipient, action)
        return acquired

    def release(self, recipient: str, action: str, channel: str = DEFAULT_CHANNEL) -> None:
        self._store.delete(lock_key(recipient, channel, action))

    def last_interaction(self, recipient: str) -> Optional[dt.datetime]:
        raw = self._store.get(session_key(recipient))
        if not raw:
            return None
        try:
            return dt.datetime.fromisoformat(raw)
        except ValueError:
            logger.warning("[notify] unreadable session timestamp recipient=%s value=%r", recipient, raw)
            return None

    def in_session(self, recipient: str, now: Optional[dt.datetime] = None) -> bool:
        last = self.last_interaction(recipient)
        if last is None:
            return False
        now = now or dt.datetime.now(dt.timezone.utc)
        return now - last < self.session_window

    def record_interaction(self, recipient: str, now: Optional[dt.datetime] = None) -> None:
        now = now or dt.datetime.now(dt.timezone.utc)
        ttl = max(1, int(self.session_window.total_seconds()))
        self._store.set(session_key(recipient), now.isoformat(), ttl)
