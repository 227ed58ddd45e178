import asyncio
import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from dispatch.errors import DuplicateRecipientError, StoreWriteError
from models.recipient import Recipient
from stores.base_store import RecipientStore

logger = logging.getLogger("launch_notifier")


class InMemoryRecipientStore(RecipientStore):
    """Process-local store. Records are copied in and out so callers never alias stored state."""

    def __init__(self, recipients: Iterable[Recipient] = ()):
        self._records: Dict[str, Recipient] = {}
        self._lock = asyncio.Lock()
        for recipient in recipients:
            if recipient.identity in self._records:
                raise DuplicateRecipientError(recipient.identity)
            self._records[recipient.identity] = recipient.model_copy()

    async def get(self, identity: str) -> Optional[Recipient]:
        record = self._records.get(identity)
        return record.model_copy() if record else None

    async def add(self, recipient: Recipient) -> Recipient:
        async with self._lock:
            if recipient.identity in self._records:
                raise DuplicateRecipientError(recipient.identity)
            self._records[recipient.identity] = recipient.model_copy()
        return recipient.model_copy()

    async def remove(self, identity: str) -> bool:
        async with self._lock:
            return self._records.pop(identity, None) is not None

    async def persist(self, recipient: Recipient) -> Recipient:
        async with self._lock:
            self._records[recipient.identity] = recipient.model_copy()
        return recipient.model_copy()

    async def list_all(self) -> List[Recipient]:
        return [r.model_copy() for r in self._records.values()]

    async def list_pending(self) -> List[Recipient]:
        # sorted() is stable, so equal timestamps keep insertion order
        pending = [r for r in self._records.values() if r.is_pending]
        return [r.model_copy() for r in sorted(pending, key=lambda r: r.subscribed_at)]

    async def mark_notified(self, identity: str, at: datetime) -> Optional[Recipient]:
        async with self._lock:
            record = self._records.get(identity)
            if record is None:
                raise StoreWriteError(identity, "recipient no longer exists")
            if record.notified:
                return None
            updated = record.model_copy(update={
                "notified": True,
                "notified_at": at,
                "last_attempt_at": at,
                "last_error": None,
            })
            self._records[identity] = updated
            return updated.model_copy()

    async def record_failure(self, identity: str, error: str, at: datetime) -> Recipient:
        async with self._lock:
            record = self._records.get(identity)
            if record is None:
                raise StoreWriteError(identity, "recipient no longer exists")
            if record.notified:
                logger.warning(f"Ignoring failure for {identity}: already notified")
                return record.model_copy()
            updated = record.model_copy(update={
                "attempts": record.attempts + 1,
                "last_attempt_at": at,
                "last_error": error,
            })
            self._records[identity] = updated
            return updated.model_copy()
