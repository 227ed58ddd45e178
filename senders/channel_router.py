import logging
from typing import Dict, Iterable, Optional, Set, Tuple

from senders.base_sender import BaseSender
from dispatch.errors import ConfigurationError
from models.channel import ChannelKind, SendResult

logger = logging.getLogger("launch_notifier")

class ChannelRouter(BaseSender):
    """Routes each send to the sender registered for the recipient's channel."""

    def __init__(self, senders: Dict[ChannelKind, BaseSender]):
        self.senders = dict(senders)

    def ensure_configured(self, channel_kinds: Optional[Iterable[ChannelKind]] = None) -> None:
        # A sender shared by several channels is only checked once
        grouped: Dict[int, Tuple[BaseSender, Optional[Set[ChannelKind]]]] = {}
        if channel_kinds is None:
            for sender in self.senders.values():
                grouped.setdefault(id(sender), (sender, None))
        else:
            kinds = set(channel_kinds)
            missing = sorted(k.value for k in kinds if k not in self.senders)
            if missing:
                raise ConfigurationError(f"No sender configured for channel(s): {missing}")
            for kind in kinds:
                sender = self.senders[kind]
                grouped.setdefault(id(sender), (sender, set()))[1].add(kind)

        for sender, kinds in grouped.values():
            sender.ensure_configured(kinds)

    def _route(self, identity: str, channel_kind: Optional[ChannelKind]) -> Tuple[ChannelKind, Optional[BaseSender]]:
        kind = channel_kind or ChannelKind.EMAIL
        sender = self.senders.get(kind)
        if sender is None:
            logger.error(f"No sender registered for channel '{kind.value}' ({identity})")
        return kind, sender

    async def send(self, identity, channel_kind, message) -> SendResult:
        kind, sender = self._route(identity, channel_kind)
        if sender is None:
            return SendResult.failed(f"No sender configured for channel '{kind.value}'")
        return await sender.send(identity, kind, message)

    async def send_confirmation(self, identity, channel_kind) -> SendResult:
        kind, sender = self._route(identity, channel_kind)
        if sender is None:
            return SendResult.failed(f"No sender configured for channel '{kind.value}'")
        return await sender.send_confirmation(identity, kind)
