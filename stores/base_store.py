from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from models.recipient import Recipient


class RecipientStore(ABC):
    """
    Persistence contract for broadcast recipients.

    Delivery outcomes are written through `mark_notified` and `record_failure`,
    which a backing store must apply as single conditional updates
    (e.g. `update_one({"identity": ..., "notified": False}, {"$set": ...})`)
    rather than read-modify-write, so concurrent dispatch and retry runs
    cannot lose an increment.
    """

    @abstractmethod
    async def get(self, identity: str) -> Optional[Recipient]:
        pass

    @abstractmethod
    async def add(self, recipient: Recipient) -> Recipient:
        """Inserts a new recipient. Raises DuplicateRecipientError if the identity exists."""

    @abstractmethod
    async def remove(self, identity: str) -> bool:
        pass

    @abstractmethod
    async def persist(self, recipient: Recipient) -> Recipient:
        """Writes the full record. Raises StoreWriteError on failure."""

    @abstractmethod
    async def list_all(self) -> List[Recipient]:
        pass

    @abstractmethod
    async def list_pending(self) -> List[Recipient]:
        """Unnotified recipients, oldest subscription first."""

    @abstractmethod
    async def mark_notified(self, identity: str, at: datetime) -> Optional[Recipient]:
        """
        Flips a pending recipient to notified and clears its last error.
        Returns None when the recipient was already notified.
        """

    @abstractmethod
    async def record_failure(self, identity: str, error: str, at: datetime) -> Recipient:
        """Atomically increments attempts and stamps the error on a pending recipient."""

    async def list_retryable(self, max_attempts: int) -> List[Recipient]:
        pending = await self.list_pending()
        return [r for r in pending if r.is_retryable(max_attempts)]

    async def list_failed(self, max_attempts: int) -> List[Recipient]:
        """Recipients that exhausted automatic retries and need manual follow-up."""
        pending = await self.list_pending()
        return [r for r in pending if r.is_exhausted(max_attempts)]
