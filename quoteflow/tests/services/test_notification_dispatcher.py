import datetime as dt

import pytest

from quoteflow.core.errors import (
    InvalidRecipientError,
    NoTemplateConfiguredError,
    NotificationDeliveryError,
)
from quoteflow.services.messaging_provider import ProviderError
from quoteflow.services.notification_dispatcher import (
    NotificationDispatcher,
    TemplateRegistry,
    normalize_recipient,
)
from quoteflow.tests.fakes import TEMPLATES

TO = "+919876543210"
VARS = {"1": "Ravi Kumar", "2": "QT00001", "3": "5000.00", "4": "https://quoteflow.test/quotations/QT00001"}


def test_normalize_recipient_variants():
    assert normalize_recipient("98765 43210") == TO
    assert normalize_recipient("+91-98765-43210") == TO
    assert normalize_recipient("(415) 555-2671", "US") == "+14155552671"


def test_normalize_recipient_rejects_garbage():
    with pytest.raises(InvalidRecipientError):
        normalize_recipient("12345")
    with pytest.raises(InvalidRecipientError):
        normalize_recipient("")


def test_outside_session_sends_template_and_opens_session(dispatcher, provider, gate):
    assert dispatcher.send("9876543210", "quotation_created", "hello", VARS) is True

    msg = provider.sent[0]
    assert msg.kind == "template"
    assert msg.recipient == TO
    assert msg.template_id == TEMPLATES["quotation_created"]
    assert msg.variables == VARS
    assert gate.in_session(TO, dt.datetime.now(dt.timezone.utc))


def test_inside_session_sends_freeform(dispatcher, provider, gate):
    gate.record_interaction(TO, dt.datetime.now(dt.timezone.utc))

    assert dispatcher.send(TO, "quotation_updated", "Your quotation changed") is True
    assert provider.sent[0].kind == "freeform"
    assert provider.sent[0].body == "Your quotation changed"


def test_same_action_inside_debounce_window_is_skipped(dispatcher, provider):
    assert dispatcher.send(TO, "quotation_updated", "first", VARS) is True
    assert dispatcher.send(TO, "quotation_updated", "second", VARS) is False
    assert len(provider.sent) == 1


def test_missing_template_fails_before_lock(provider, gate, sleeps):
    d = NotificationDispatcher(provider=provider, gate=gate, templates=TemplateRegistry(templates={}), sleep=sleeps.append)

    with pytest.raises(NoTemplateConfiguredError):
        d.send(TO, "quotation_created", "hello", VARS)
    assert provider.attempts == 0
    assert gate.acquire(TO, "quotation_created") is True


def test_missing_template_variable_is_rejected(dispatcher, provider):
    with pytest.raises(NoTemplateConfiguredError):
        dispatcher.send(TO, "quotation_created", "hello", {"1": "Ravi Kumar"})
    assert provider.attempts == 0


def test_transient_failures_are_retried_with_backoff(dispatcher, provider, sleeps):
    provider.fail_next(ProviderError("503"), ProviderError("timeout"))

    assert dispatcher.send(TO, "quotation_created", "hello", VARS) is True
    assert provider.attempts == 3
    assert sleeps == [1.0, 2.0]
    assert len(provider.sent) == 1


def test_exhausted_retries_release_lock_and_raise(dispatcher, provider, gate, sleeps):
    provider.fail_always(ProviderError("service unavailable"))

    with pytest.raises(NotificationDeliveryError) as exc:
        dispatcher.send(TO, "quotation_created", "hello", VARS)

    assert "service unavailable" in exc.value.message
    assert provider.attempts == 3
    assert sleeps == [1.0, 2.0]
    assert gate.acquire(TO, "quotation_created") is True
    assert gate.in_session(TO, dt.datetime.now(dt.timezone.utc)) is False


def test_permanent_failure_is_not_retried(dispatcher, provider, sleeps):
    provider.fail_next(ProviderError("invalid template", transient=False, status_code=400))

    with pytest.raises(NotificationDeliveryError):
        dispatcher.send(TO, "quotation_created", "hello", VARS)
    assert provider.attempts == 1
    assert sleeps == []


def test_total_backoff_is_capped(provider, gate, sleeps):
    d = NotificationDispatcher(
        provider=provider,
        gate=gate,
        templates=TemplateRegistry(templates=TEMPLATES),
        retries=4,
        backoff_base_seconds=1.0,
        max_backoff_seconds=1.5,
        sleep=sleeps.append,
    )
    provider.fail_always(ProviderError("503"))

    with pytest.raises(NotificationDeliveryError):
        d.send(TO, "quotation_created", "hello", VARS)
    assert sleeps == [1.0, 0.5]
    assert provider.attempts == 3
