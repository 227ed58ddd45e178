from abc import ABC, abstractmethod
from typing import Iterable, Optional

from dispatch.messages import CONFIRMATION_MESSAGE
from models.channel import ChannelKind, SendResult

class BaseSender(ABC):
    @abstractmethod
    async def send(self,
             identity: str,
             channel_kind: Optional[ChannelKind],
             message: str) -> SendResult:
        """
        Delivers `message` to one recipient. Provider rejections come back as
        SendResult(success=False); transport errors may also be raised.
        """

    async def send_confirmation(self, identity: str, channel_kind: Optional[ChannelKind]) -> SendResult:
        """Tells a new subscriber they are on the launch list."""
        return await self.send(identity, channel_kind, CONFIRMATION_MESSAGE)

    def ensure_configured(self, channel_kinds: Optional[Iterable[ChannelKind]] = None) -> None:
        """
        Raises ConfigurationError when credentials are missing. When
        `channel_kinds` is given, every one of those channels must be deliverable.
        """
