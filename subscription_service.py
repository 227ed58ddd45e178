import logging
from collections import Counter
from typing import Any, Dict, Optional

from dispatch.errors import DuplicateRecipientError, RecipientNotFoundError
from dispatch.retry_selector import DEFAULT_MAX_ATTEMPTS
from models.channel import ChannelKind
from models.recipient import Recipient, SubscriptionSource
from senders.base_sender import BaseSender
from stores.base_store import RecipientStore

logger = logging.getLogger("launch_notifier")


class SubscriptionService:
    def __init__(self, store: RecipientStore, confirmation_sender: Optional[BaseSender] = None):
        self.store = store
        self.confirmation_sender = confirmation_sender

    async def subscribe(
        self,
        identity: str,
        channel_kind: Optional[ChannelKind] = None,
        source: SubscriptionSource = SubscriptionSource.WEBSITE,
    ) -> Recipient:
        """
        Registers a new recipient. An identity that is already stored is a
        duplicate whatever its delivery state; the existing record is left as is.
        Raises ValueError (pydantic ValidationError) for malformed identities.
        """
        recipient = Recipient(identity=identity, channel_kind=channel_kind, source=source)

        if await self.store.get(recipient.identity) is not None:
            logger.info(f"Rejected duplicate subscription for {recipient.identity}")
            raise DuplicateRecipientError(recipient.identity)

        created = await self.store.add(recipient)
        logger.info(f"Subscribed {created.identity} ({created.effective_channel.value})")

        if self.confirmation_sender is not None:
            await self._send_confirmation(created)
        return created

    async def _send_confirmation(self, recipient: Recipient) -> None:
        # A failed confirmation never undoes the subscription
        try:
            result = await self.confirmation_sender.send_confirmation(recipient.identity, recipient.effective_channel)
        except Exception as e:
            logger.error(f"Confirmation failed for {recipient.identity}: {e}")
            return

        if result.success:
            logger.info(f"Launch subscription confirmation sent to {recipient.identity}")
        else:
            logger.warning(f"Confirmation failed for {recipient.identity}: {result.error}")

    async def unsubscribe(self, identity: str) -> None:
        identity = identity.strip()
        if "@" in identity:
            identity = identity.lower()
        removed = await self.store.remove(identity)
        if not removed:
            raise RecipientNotFoundError(identity)
        logger.info(f"Unsubscribed {identity}")

    async def stats(self, max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> Dict[str, Any]:
        recipients = await self.store.list_all()
        by_channel = Counter(r.effective_channel.value for r in recipients)
        notified = sum(1 for r in recipients if r.notified)
        return {
            "total": len(recipients),
            "notified": notified,
            "pending": len(recipients) - notified,
            "failed": sum(1 for r in recipients if r.is_exhausted(max_attempts)),
            "by_channel": {kind.value: by_channel.get(kind.value, 0) for kind in ChannelKind},
        }

    async def list_subscribers(self, page: int = 1, limit: int = 50, notified: Optional[bool] = None) -> Dict[str, Any]:
        """Newest subscriptions first, optionally filtered by notified state."""
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        recipients = await self.store.list_all()
        if notified is not None:
            recipients = [r for r in recipients if r.notified == notified]
        recipients.sort(key=lambda r: r.subscribed_at, reverse=True)

        total = len(recipients)
        start = (page - 1) * limit
        return {
            "subscribers": recipients[start:start + limit],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "pages": -(-total // limit),
            },
        }
