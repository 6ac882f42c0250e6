# quoteflow/api/v1/webhooks.py
from __future__ import annotations

import hmac
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Query

from quoteflow.core.config import Settings, get_settings
from quoteflow.core.deps import get_notification_gate
from quoteflow.services.notification_dispatcher import normalize_recipient
from quoteflow.services.notification_gate import NotificationGate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks")


@router.post("/messaging/inbound")
def messaging_inbound(
    from_: str = Form(..., alias="From"),
    body: Optional[str] = Form(default=None, alias="Body"),
    token: Optional[str] = Query(default=None),
    gate: NotificationGate = Depends(get_notification_gate),
    settings: Settings = Depends(get_settings),
):
    """
    Client replied on WhatsApp: opens (or extends) the free-form session window.
    """
    expected = settings.messaging_webhook_token
    if expected and not (token and hmac.compare_digest(token, expected)):
        raise HTTPException(status_code=401, detail="Unauthorized")

    sender = normalize_recipient(from_.removeprefix("whatsapp:"), settings.default_phone_region)
    gate.record_interaction(sender)
    logger.info("[webhook] inbound message from=%s chars=%s", sender, len(body or ""))
    return {"status": "recorded", "from": sender}
