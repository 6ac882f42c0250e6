"""In-memory stand-ins for the external collaborators (messaging, object store, counters)."""
from __future__ import annotations

import threading
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Set

from quoteflow.core.errors import DeleteError, UploadError
from quoteflow.models.enums import NotificationAction
from quoteflow.services.messaging_provider import ProviderError
from quoteflow.services.object_store import StoredObject

TEMPLATES = {a.value: f"HX_{a.value}" for a in NotificationAction}


class InMemorySequenceSource:
    def __init__(self):
        self._values: Dict[str, int] = defaultdict(int)
        self._lock = threading.Lock()

    def next_value(self, counter_name: str) -> int:
        with self._lock:
            self._values[counter_name] += 1
            return self._values[counter_name]


@dataclass
class SentMessage:
    kind: str
    recipient: str
    body: Optional[str] = None
    template_id: Optional[str] = None
    variables: Mapping[str, str] = field(default_factory=dict)


class FakeMessagingProvider:
    def __init__(self):
        self.sent: List[SentMessage] = []
        self.attempts = 0
        self._failures: List[ProviderError] = []

    def fail_next(self, *errors: ProviderError) -> None:
        self._failures.extend(errors)

    def fail_always(self, error: ProviderError, times: int = 100) -> None:
        self._failures.extend([error] * times)

    def _attempt(self) -> None:
        self.attempts += 1
        if self._failures:
            raise self._failures.pop(0)

    def send_freeform(self, recipient: str, body: str) -> str:
        self._attempt()
        self.sent.append(SentMessage(kind="freeform", recipient=recipient, body=body))
        return f"SM{len(self.sent):04d}"

    def send_template(self, recipient: str, template_id: str, variables: Mapping[str, str]) -> str:
        self._attempt()
        self.sent.append(
            SentMessage(kind="template", recipient=recipient, template_id=template_id, variables=dict(variables))
        )
        return f"SM{len(self.sent):04d}"

    def actions(self, templates: Mapping[str, str]) -> List[str]:
        """Template ids sent, mapped back to their action names."""
        by_id = {v: k for k, v in templates.items()}
        return [by_id.get(m.template_id, "freeform") for m in self.sent]


class FakeObjectStore:
    def __init__(self):
        self.objects: Dict[str, bytes] = {}
        self.deleted: List[str] = []
        self.delete_attempts: List[str] = []
        self.fail_uploads = False
        self.fail_deletes: Set[str] = set()
        self._n = 0

    def upload(self, data: bytes, *, folder: str, filename: str, content_type: str) -> StoredObject:
        if self.fail_uploads:
            raise UploadError("Failed to upload image: store unavailable")
        self._n += 1
        key = f"{folder}/img{self._n:03d}"
        self.objects[key] = data
        return StoredObject(url=f"https://cdn.test/{key}", id=key)

    def delete(self, object_id: str) -> None:
        self.delete_attempts.append(object_id)
        if object_id in self.fail_deletes:
            raise DeleteError(f"Failed to delete image {object_id}")
        self.deleted.append(object_id)
        self.objects.pop(object_id, None)


def quotation_payload(**overrides):
    data = {
        "client_name": "Ravi Kumar",
        "client_address": "12 MG Road, Pune 411001",
        "client_number": "9876543210",
        "date": "2024-03-01",
        "items": [
            {"description": "Wall paint", "area": "120", "rate": "25", "total": "3000"},
            {"description": "Ceiling polish", "rate": "2000", "total": "2000"},
        ],
        "subtotal": "5000",
        "discount": "0",
        "grand_total": "5000",
        "terms": ["50% advance"],
    }
    data.update(overrides)
    return data
