# quoteflow/services/messaging_provider.py
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

import httpx

from quoteflow.core.config import Settings

logger = logging.getLogger(__name__)


class ProviderError(RuntimeError):
    """
    Raised by a messaging provider. transient=True means the same request may succeed later.
    """

    def __init__(self, message: str, *, transient: bool = True, status_code: Optional[int] = None):
        super().__init__(message)
        self.transient = transient
        self.status_code = status_code


class MessagingProvider(Protocol):
    def send_freeform(self, recipient: str, body: str) -> str: ...

    def send_template(self, recipient: str, template_id: str, variables: Mapping[str, str]) -> str: ...


class TwilioWhatsAppProvider:
    """
    WhatsApp over the Twilio Messages REST resource.
    recipient is E.164; returns the provider message sid.
    """

    def __init__(
        self,
        *,
        account_sid: str,
        auth_token: str,
        sender: str,
        api_base: str = "https://api.twilio.com/2010-04-01",
        timeout_seconds: float = 10.0,
        client: Optional[httpx.Client] = None,
    ):
        self._account_sid = account_sid
        self._sender = sender
        self._url = f"{api_base.rstrip('/')}/Accounts/{account_sid}/Messages.json"
        self._client = client or httpx.Client(
            auth=(account_sid, auth_token),
            timeout=timeout_seconds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "TwilioWhatsAppProvider":
        return cls(
            account_sid=settings.twilio_account_sid,
            auth_token=settings.twilio_auth_token,
            sender=settings.twilio_whatsapp_from,
            api_base=settings.twilio_api_base,
            timeout_seconds=settings.notification_timeout_seconds,
        )

    def close(self) -> None:
        self._client.close()

    def send_freeform(self, recipient: str, body: str) -> str:
        return self._post({"Body": body}, recipient)

    def send_template(self, recipient: str, template_id: str, variables: Mapping[str, str]) -> str:
        return self._post(
            {
                "ContentSid": template_id,
                "ContentVariables": json.dumps(dict(variables)),
            },
            recipient,
        )

    def _post(self, fields: Dict[str, Any], recipient: str) -> str:
        data = {
            "From": f"whatsapp:{self._sender}",
            "To": f"whatsapp:{recipient}",
            **fields,
        }
        try:
            resp = self._client.post(self._url, data=data)
        except httpx.TimeoutException as exc:
            raise ProviderError(f"Twilio request timed out: {exc}", transient=True) from exc
        except httpx.TransportError as exc:
            raise ProviderError(f"Twilio transport error: {exc}", transient=True) from exc

        if resp.status_code >= 400:
            try:
                message = resp.json().get("message") or resp.text
            except ValueError:
                message = resp.text
            transient = resp.status_code == 429 or resp.status_code >= 500
            raise ProviderError(
                f"Twilio responded {resp.status_code}: {message}",
                transient=transient,
                status_code=resp.status_code,
            )

        sid = resp.json().get("sid", "")
        logger.info("[messaging] sent sid=%s to=%s", sid, recipient)
        return sid
