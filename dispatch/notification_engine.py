import logging
from typing import Optional

from config import Settings
from dispatch.batch_dispatcher import BatchDispatcher
from dispatch.retry_selector import RetrySelector
from dispatch.sender_builder import SenderBuilder
from models.channel import ChannelKind
from models.dispatch_report import DispatchReport, RetryReport
from senders.base_sender import BaseSender
from stores.base_store import RecipientStore
from subscription_service import SubscriptionService

logger = logging.getLogger("launch_notifier")


class NotificationEngine:
    """
    Wires a recipient store to the channel senders described by Settings.

    Pass `sender` to bypass provider configuration (e.g. a MockSender for local runs).
    """

    def __init__(self, settings: Settings, store: RecipientStore, sender: Optional[BaseSender] = None):
        self.settings = settings
        self.store = store
        self.sender = sender or SenderBuilder.build_router(settings.engine_configs())
        self.dispatcher = BatchDispatcher(store, self.sender)
        self.retry_selector = RetrySelector(
            self.dispatcher,
            max_attempts=settings.max_attempts,
            send_timeout_seconds=settings.send_timeout_seconds,
        )
        self.subscriptions = SubscriptionService(
            store,
            confirmation_sender=self.sender if settings.send_confirmation else None,
        )

    async def dispatch(
        self,
        message: Optional[str] = None,
        pacing: ChannelKind = ChannelKind.EMAIL,
        dry_run: bool = False,
    ) -> DispatchReport:
        """`pacing` picks which channel's inter-batch delay the run observes."""
        options = self.settings.dispatch_options(pacing, dry_run=dry_run)
        return await self.dispatcher.dispatch(message, options)

    async def retry_failed(self, message: Optional[str] = None) -> RetryReport:
        return await self.retry_selector.retry_failed(message=message)

    async def stats(self):
        return await self.subscriptions.stats(self.settings.max_attempts)


def build_engine(store: RecipientStore, settings: Optional[Settings] = None) -> NotificationEngine:
    settings = settings or Settings.from_env()
    engine = NotificationEngine(settings, store)
    logger.info(f"Notification engine ready for channels: {sorted(k.value for k in engine.sender.senders)}")
    return engine
