import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from dispatch.errors import StoreWriteError
from models.recipient import Recipient
from stores.base_store import RecipientStore
from utils.time_utils import utcnow

logger = logging.getLogger("launch_notifier")


class DeliveryTracker:
    """
    Records send outcomes on recipients.

    Writes for one identity are serialized with a per-identity lock; writes for
    different identities proceed independently. Any store error surfaces as
    StoreWriteError so callers can report it apart from provider failures.
    """

    def __init__(self, store: RecipientStore):
        self.store = store
        self._locks: Dict[str, asyncio.Lock] = {}
        self._lock_users: Dict[str, int] = {}

    @asynccontextmanager
    async def _identity_lock(self, identity: str) -> AsyncIterator[None]:
        # Locks live only while some writer holds or awaits them
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._lock_users[identity] = self._lock_users.get(identity, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[identity] -= 1
            if not self._lock_users[identity]:
                del self._lock_users[identity]
                del self._locks[identity]

    async def mark_notified(self, recipient: Recipient) -> Optional[Recipient]:
        """
        Returns the updated recipient, or None if it was already notified
        (in which case notified_at is left untouched).
        """
        async with self._identity_lock(recipient.identity):
            try:
                updated = await self.store.mark_notified(recipient.identity, utcnow())
            except StoreWriteError:
                raise
            except Exception as e:
                raise StoreWriteError(recipient.identity, str(e)) from e

        if updated is None:
            logger.debug(f"{recipient.identity} was already notified; leaving notified_at unchanged")
        return updated

    async def record_failed_attempt(self, recipient: Recipient, error: str) -> Recipient:
        async with self._identity_lock(recipient.identity):
            try:
                return await self.store.record_failure(recipient.identity, error, utcnow())
            except StoreWriteError:
                raise
            except Exception as e:
                raise StoreWriteError(recipient.identity, str(e)) from e
