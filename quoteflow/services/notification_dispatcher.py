# quoteflow/services/notification_dispatcher.py
"""
Client notifications (WhatsApp).

send() flow:
    normalize recipient -> compose (free-form inside the session window, else template)
    -> debounce lock -> bounded retries with exponential backoff
    -> success: record interaction / failure: release lock + raise
"""
from __future__ import annotations

import datetime as dt
import logging
import re
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, Mapping, Optional, Tuple

import phonenumbers

from quoteflow.core.config import Settings
from quoteflow.core.errors import (
    InvalidRecipientError,
    NoTemplateConfiguredError,
    NotificationDeliveryError,
)
from quoteflow.models.enums import NotificationAction
from quoteflow.services.messaging_provider import MessagingProvider, ProviderError
from quoteflow.services.notification_gate import NotificationGate

logger = logging.getLogger(__name__)

# positional template variables each action's approved template expects
REQUIRED_VARIABLES: Dict[str, Tuple[str, ...]] = {
    NotificationAction.QUOTATION_CREATED.value: ("1", "2", "3", "4"),  # name, number, grand total, url
    NotificationAction.QUOTATION_UPDATED.value: ("1", "2", "3", "4"),  # name, number, grand total, url
    NotificationAction.QUOTATION_ACCEPTED.value: ("1", "2", "3"),  # name, number, url
    NotificationAction.QUOTATION_REJECTED.value: ("1", "2", "3"),
    NotificationAction.PROJECT_UPDATED.value: ("1", "2", "3", "4"),  # name, project id, amount due, url
    NotificationAction.PAYMENT_RECEIVED.value: ("1", "2", "3", "4", "5"),  # name, amount, number, due, invoice url
}


def normalize_recipient(raw: str, default_region: str = "IN") -> str:
    """
    Strip everything but digits and '+', parse with default_region, return E.164.
    """
    cleaned = re.sub(r"[^+\d]", "", raw or "")
    try:
        parsed = phonenumbers.parse(cleaned, default_region)
    except phonenumbers.NumberParseException as exc:
        raise InvalidRecipientError(f"Invalid phone number: {cleaned}") from exc
    if not phonenumbers.is_valid_number(parsed):
        raise InvalidRecipientError(f"Invalid phone number: {cleaned}")
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


@dataclass(frozen=True)
class TemplateRegistry:
    # action -> provider template id
    templates: Mapping[str, str] = field(default_factory=dict)
    required: Mapping[str, Tuple[str, ...]] = field(default_factory=lambda: REQUIRED_VARIABLES)

    def resolve(self, action: str, variables: Optional[Mapping[str, str]]) -> str:
        template_id = self.templates.get(action)
        if not template_id:
            raise NoTemplateConfiguredError(f"No template configured for action '{action}'")
        missing = [k for k in self.required.get(action, ()) if not (variables or {}).get(k)]
        if missing:
            raise NoTemplateConfiguredError(
                f"Template for '{action}' is missing variables: {', '.join(missing)}"
            )
        return template_id


@dataclass(frozen=True)
class OutboundMessage:
    recipient: str
    action: str
    body: Optional[str] = None
    template_id: Optional[str] = None
    variables: Mapping[str, str] = field(default_factory=dict)

    @property
    def is_template(self) -> bool:
        return self.template_id is not None


class NotificationDispatcher:
    def __init__(
        self,
        *,
        provider: MessagingProvider,
        gate: NotificationGate,
        templates: TemplateRegistry,
        default_region: str = "IN",
        retries: int = 3,
        backoff_base_seconds: float = 1.0,
        max_backoff_seconds: float = 10.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.timezone.utc),
    ):
        self._provider = provider
        self._gate = gate
        self._templates = templates
        self._default_region = default_region
        self._retries = max(1, retries)
        self._backoff_base = backoff_base_seconds
        self._max_backoff = max_backoff_seconds
        self._sleep = sleep
        self._clock = clock

    @classmethod
    def from_settings(
        cls, settings: Settings, *, provider: MessagingProvider, gate: NotificationGate
    ) -> "NotificationDispatcher":
        return cls(
            provider=provider,
            gate=gate,
            templates=TemplateRegistry(templates=dict(settings.notification_templates)),
            default_region=settings.default_phone_region,
            retries=settings.notification_retries,
            backoff_base_seconds=settings.notification_backoff_base_seconds,
            max_backoff_seconds=settings.notification_max_backoff_seconds,
        )

    @property
    def gate(self) -> NotificationGate:
        return self._gate

    def compose(
        self,
        recipient: str,
        action: str,
        body: str,
        template_vars: Optional[Mapping[str, str]] = None,
    ) -> OutboundMessage:
        if self._gate.in_session(recipient, self._clock()):
            return OutboundMessage(recipient=recipient, action=action, body=body)
        template_id = self._templates.resolve(action, template_vars)
        return OutboundMessage(
            recipient=recipient,
            action=action,
            template_id=template_id,
            variables=dict(template_vars or {}),
        )

    def send(
        self,
        recipient: str,
        action: str,
        body: str,
        template_vars: Optional[Mapping[str, str]] = None,
    ) -> bool:
        """
        Returns True when delivered, False when debounced.
        Raises InvalidRecipientError / NoTemplateConfiguredError before any lock is taken,
        NotificationDeliveryError once all attempts failed.
        """
        to = normalize_recipient(recipient, self._default_region)
        message = self.compose(to, action, body, template_vars)

        if not self._gate.acquire(to, action):
            return False

        backoff_budget = self._max_backoff
        last_error: Optional[ProviderError] = None
        for attempt in range(self._retries):
            try:
                self._deliver(message)
            except ProviderError as exc:
                last_error = exc
                logger.warning(
                    "[notify] attempt %s/%s failed recipient=%s action=%s: %s",
                    attempt + 1, self._retries, to, action, exc,
                )
                if not exc.transient or attempt == self._retries - 1:
                    break
                delay = min(self._backoff_base * (2 ** attempt), backoff_budget)
                if delay <= 0:
                    break
                backoff_budget -= delay
                self._sleep(delay)
                continue

            self._gate.record_interaction(to, self._clock())
            logger.info("[notify] sent recipient=%s action=%s template=%s", to, action, message.is_template)
            return True

        self._gate.release(to, action)
        raise NotificationDeliveryError(f"Failed to send WhatsApp notification: {last_error}")

    def _deliver(self, message: OutboundMessage) -> str:
        if message.is_template:
            return self._provider.send_template(message.recipient, message.template_id, message.variables)
        return self._provider.send_freeform(message.recipient, message.body or "")
