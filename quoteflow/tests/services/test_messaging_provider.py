import json
from urllib.parse import parse_qs

import httpx
import pytest

from quoteflow.services.messaging_provider import ProviderError, TwilioWhatsAppProvider


def make_provider(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return TwilioWhatsAppProvider(
        account_sid="AC123",
        auth_token="secret",
        sender="+14155238886",
        api_base="https://twilio.test/2010-04-01",
        client=client,
    )


def test_template_message_form_fields():
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM1"})

    sid = make_provider(handler).send_template("+919876543210", "HX_created", {"1": "Ravi"})

    assert sid == "SM1"
    assert seen["url"] == "https://twilio.test/2010-04-01/Accounts/AC123/Messages.json"
    assert seen["form"]["From"] == ["whatsapp:+14155238886"]
    assert seen["form"]["To"] == ["whatsapp:+919876543210"]
    assert seen["form"]["ContentSid"] == ["HX_created"]
    assert json.loads(seen["form"]["ContentVariables"][0]) == {"1": "Ravi"}


def test_freeform_message_body():
    seen = {}

    def handler(request):
        seen["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM2"})

    make_provider(handler).send_freeform("+919876543210", "Payment received")
    assert seen["form"]["Body"] == ["Payment received"]


@pytest.mark.parametrize(
    "status, transient",
    [(429, True), (503, True), (400, False), (401, False)],
)
def test_error_statuses_classify_transience(status, transient):
    provider = make_provider(lambda request: httpx.Response(status, json={"message": "nope"}))

    with pytest.raises(ProviderError) as exc:
        provider.send_freeform("+919876543210", "hi")
    assert exc.value.transient is transient
    assert exc.value.status_code == status


def test_transport_error_is_transient():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ProviderError) as exc:
        make_provider(handler).send_freeform("+919876543210", "hi")
    assert exc.value.transient is True
