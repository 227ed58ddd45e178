import pytest
from datetime import datetime, timedelta, timezone

from models.channel import ChannelKind
from models.recipient import Recipient
from senders.mock_senders import MockSender
from stores.memory_store import InMemoryRecipientStore

BASE_TIME = datetime(2025, 1, 1, tzinfo=timezone.utc)

def make_recipients(count, channel_kind=None, start=BASE_TIME):
    """Recipients subscribed one minute apart, oldest first."""
    recipients = []
    for i in range(count):
        if channel_kind in (ChannelKind.SMS, ChannelKind.WHATSAPP):
            identity = f"+1555000{i:04d}"
        else:
            identity = f"user{i:02d}@example.com"
        recipients.append(Recipient(
            identity=identity,
            channel_kind=channel_kind,
            subscribed_at=start + timedelta(minutes=i),
        ))
    return recipients

@pytest.fixture
def recipients():
    return make_recipients(5)

@pytest.fixture
def store(recipients):
    return InMemoryRecipientStore(recipients)

@pytest.fixture
def mock_sender():
    return MockSender({"latency_seconds": 0})

@pytest.fixture
def recipient_factory():
    return make_recipients
