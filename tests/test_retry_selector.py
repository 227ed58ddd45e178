import pytest
from unittest.mock import AsyncMock, patch

from dispatch.batch_dispatcher import BatchDispatcher
from dispatch.errors import ConfigurationError
from dispatch.retry_selector import RetrySelector
from models.channel import ChannelKind
from senders.channel_router import ChannelRouter
from senders.mock_senders import MockSender
from stores.memory_store import InMemoryRecipientStore


def with_attempts(recipient, attempts, notified=False):
    return recipient.model_copy(update={"attempts": attempts, "notified": notified, "last_error": "rate limited"})


@pytest.fixture
def retry_store(recipient_factory):
    fresh, once, twice, exhausted, done = recipient_factory(5)
    return InMemoryRecipientStore([
        fresh,
        with_attempts(once, 1),
        with_attempts(twice, 2),
        with_attempts(exhausted, 3),
        with_attempts(done, 1, notified=True),
    ])


@pytest.mark.asyncio
async def test_retry_selects_only_retryable(retry_store, recipient_factory, mock_sender):
    fresh, once, twice, exhausted, done = recipient_factory(5)
    selector = RetrySelector(BatchDispatcher(retry_store, mock_sender))

    result = await selector.retry_failed(max_attempts=3)

    assert result.nothing_to_retry is False
    assert result.retried == 2
    assert {c[0] for c in mock_sender.calls} == {once.identity, twice.identity}
    assert set(result.report.sent) == {once.identity, twice.identity}
    assert result.report.batches == 1
    assert (await retry_store.get(once.identity)).notified is True


@pytest.mark.asyncio
async def test_recipient_at_ceiling_is_excluded(retry_store, recipient_factory):
    exhausted = recipient_factory(5)[3]

    candidates = await retry_store.list_retryable(3)
    failed = await retry_store.list_failed(3)

    assert exhausted.identity not in {r.identity for r in candidates}
    assert [r.identity for r in failed] == [exhausted.identity]


@pytest.mark.asyncio
async def test_nothing_to_retry_is_distinct_from_empty_dispatch(recipient_factory, mock_sender):
    store = InMemoryRecipientStore(recipient_factory(3))
    dispatcher = BatchDispatcher(store, mock_sender)

    result = await RetrySelector(dispatcher).retry_failed(max_attempts=3)

    assert result.nothing_to_retry is True
    assert result.report is None
    assert result.message == "No failed notifications to retry"
    assert mock_sender.calls == []


@pytest.mark.asyncio
async def test_failed_retry_increments_attempts(retry_store, recipient_factory):
    once = recipient_factory(5)[1]
    sender = MockSender({"latency_seconds": 0, "fail_identities": {once.identity: "still rate limited"}})

    result = await RetrySelector(BatchDispatcher(retry_store, sender)).retry_failed(max_attempts=3)

    assert result.report.failed_count == 1
    stored = await retry_store.get(once.identity)
    assert stored.attempts == 2
    assert stored.last_error == "still rate limited"


@pytest.mark.asyncio
@patch("dispatch.batch_dispatcher.asyncio.sleep", new_callable=AsyncMock)
async def test_retry_runs_without_inter_batch_delay(sleep, retry_store, mock_sender):
    await RetrySelector(BatchDispatcher(retry_store, mock_sender)).retry_failed(max_attempts=3)

    sleep.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("max_attempts", [0, -1, 2.5, True])
async def test_max_attempts_must_be_positive_integer(retry_store, mock_sender, max_attempts):
    selector = RetrySelector(BatchDispatcher(retry_store, mock_sender))
    with pytest.raises(ValueError):
        await selector.retry_failed(max_attempts=max_attempts)


@pytest.mark.asyncio
async def test_retry_with_unrouted_channel_leaves_attempts_alone(recipient_factory):
    phone = with_attempts(recipient_factory(1, ChannelKind.SMS)[0], 1)
    store = InMemoryRecipientStore([phone])
    email_sender = MockSender({"latency_seconds": 0})
    selector = RetrySelector(BatchDispatcher(store, ChannelRouter({ChannelKind.EMAIL: email_sender})))

    with pytest.raises(ConfigurationError, match="sms"):
        await selector.retry_failed()

    assert email_sender.calls == []
    assert (await store.get(phone.identity)).attempts == 1


@pytest.mark.asyncio
async def test_configured_ceiling_is_the_default(retry_store, recipient_factory, mock_sender):
    once = recipient_factory(5)[1]
    selector = RetrySelector(BatchDispatcher(retry_store, mock_sender), max_attempts=2)

    result = await selector.retry_failed()

    assert result.retried == 1
    assert [c[0] for c in mock_sender.calls] == [once.identity]
