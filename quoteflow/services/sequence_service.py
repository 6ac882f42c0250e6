# quoteflow/services/sequence_service.py
from __future__ import annotations

import logging
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from quoteflow.core.errors import ConcurrencyConflictError
from quoteflow.models.counter import Counter
from quoteflow.models.enums import CounterName

logger = logging.getLogger(__name__)

PREFIXES = {
    CounterName.QUOTATION: "QT",
    CounterName.PROJECT: "PRJ",
    CounterName.INVOICE: "INV",
}


def format_identifier(prefix: str, value: int) -> str:
    # QT00001, PRJ00042 ... (wider once the counter passes 99999)
    return f"{prefix}{value:05d}"


class SequenceSource(Protocol):
    def next_value(self, counter_name: str) -> int: ...


class SqlSequenceSource:
    """
    Counter rows in the `counters` table, incremented in their own short transaction.
    Values consumed by an aborted business transaction are not reused (gaps are fine).
    """

    def __init__(self, session_factory: sessionmaker, attempts: int = 3):
        self._session_factory = session_factory
        self._attempts = attempts

    def next_value(self, counter_name: str) -> int:
        for attempt in range(self._attempts):
            try:
                with self._session_factory.begin() as db:
                    row = db.execute(
                        select(Counter).where(Counter.name == counter_name).with_for_update()
                    ).scalar_one_or_none()
                    if row is None:
                        row = Counter(name=counter_name, value=0)
                        db.add(row)
                    row.value = row.value + 1
                    value = row.value
                return value
            except IntegrityError:
                # two first-time callers raced on the insert
                logger.info("[sequence] counter insert race name=%s attempt=%s", counter_name, attempt + 1)
        raise ConcurrencyConflictError(f"Could not allocate next value for {counter_name}")


class SequenceService:
    def __init__(self, source: SequenceSource):
        self._source = source

    def _next(self, counter: CounterName) -> str:
        return format_identifier(PREFIXES[counter], self._source.next_value(counter.value))

    def next_quotation_number(self) -> str:
        return self._next(CounterName.QUOTATION)

    def next_project_id(self) -> str:
        return self._next(CounterName.PROJECT)

    def next_invoice_id(self) -> str:
        return self._next(CounterName.INVOICE)
