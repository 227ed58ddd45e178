import pytest
from unittest.mock import patch

from config import Settings
from dispatch.errors import ConfigurationError
from dispatch.notification_engine import NotificationEngine, build_engine
from models.channel import ChannelKind
from senders.mock_senders import MockSender
from senders.resend_sender import ResendEmailSender
from senders.twilio_sender import TwilioSender
from stores.memory_store import InMemoryRecipientStore

TWILIO_SETTINGS = {
    "twilio_account_sid": "AC123",
    "twilio_auth_token": "token",
    "twilio_phone_number": "+15550009999",
}


def test_build_engine_routes_configured_channels():
    settings = Settings(resend_api_key="re_test", max_attempts=5, send_timeout_seconds=12, **TWILIO_SETTINGS)

    engine = build_engine(InMemoryRecipientStore(), settings)

    assert isinstance(engine.sender.senders[ChannelKind.EMAIL], ResendEmailSender)
    twilio = engine.sender.senders[ChannelKind.SMS]
    assert isinstance(twilio, TwilioSender)
    assert twilio.timeout == 12
    assert engine.sender.senders[ChannelKind.WHATSAPP] is twilio
    assert engine.retry_selector.max_attempts == 5
    assert engine.subscriptions.confirmation_sender is engine.sender


def test_build_engine_without_phone_credentials_is_email_only():
    engine = build_engine(InMemoryRecipientStore(), Settings(smtp_host="smtp.example.com"))

    assert set(engine.sender.senders) == {ChannelKind.EMAIL}


def test_build_engine_reads_environment(monkeypatch):
    monkeypatch.setenv("RESEND_API_KEY", "re_env")
    monkeypatch.setenv("NOTIFY_SEND_CONFIRMATION", "false")
    for name in ("TWILIO_ACCOUNT_SID", "SMTP_HOST"):
        monkeypatch.delenv(name, raising=False)

    engine = build_engine(InMemoryRecipientStore())

    assert engine.sender.senders[ChannelKind.EMAIL].api_key == "re_env"
    assert engine.subscriptions.confirmation_sender is None


def test_build_engine_without_any_provider_fails():
    with pytest.raises(ConfigurationError, match="No channel senders"):
        build_engine(InMemoryRecipientStore(), Settings())


@pytest.mark.asyncio
@patch("dispatch.batch_dispatcher.asyncio.sleep")
async def test_engine_dispatch_uses_channel_pacing(mock_sleep, recipient_factory):
    store = InMemoryRecipientStore(recipient_factory(3, ChannelKind.SMS))
    sender = MockSender({"latency_seconds": 0, "fail_identities": {"+15550000002": "rate limited"}})
    engine = NotificationEngine(Settings(batch_size=2, phone_delay_ms=1500, max_attempts=2), store, sender=sender)

    report = await engine.dispatch(pacing=ChannelKind.SMS)
    retry = await engine.retry_failed()
    stats = await engine.stats()

    assert report.batches == 2
    mock_sleep.assert_awaited_once_with(1.5)
    assert retry.retried == 1
    # Two failed attempts reach the configured ceiling
    assert stats["failed"] == 1
