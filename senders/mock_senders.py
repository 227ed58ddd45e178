from .base_sender import BaseSender
from models.channel import ChannelKind, SendResult
from typing import Dict, Any, List, Optional, Tuple
from uuid import uuid4
import asyncio
import logging

logger = logging.getLogger("launch_notifier")

class MockSender(BaseSender):
    """
    Logs instead of delivering. Useful for local runs and tests.

    config keys:
      latency_seconds  – simulated network latency per send (default 0.1)
      fail_identities  – {identity: error} map of scripted provider rejections
    """

    def __init__(self, config: Dict[str, Any] = None, provider_name: str = "Mock"):
        config = config or {}
        self.provider_name = provider_name
        self.latency_seconds = config.get("latency_seconds", 0.1)
        self.fail_identities: Dict[str, str] = dict(config.get("fail_identities", {}))
        self.calls: List[Tuple[str, Optional[ChannelKind], str]] = []

    async def send(self, identity, channel_kind, message) -> SendResult:
        self.calls.append((identity, channel_kind, message))
        kind = channel_kind.value if channel_kind else ChannelKind.EMAIL.value
        logger.info(f"[{self.provider_name}] Sending {kind} to {identity}")
        # Simulate network latency
        if self.latency_seconds:
            await asyncio.sleep(self.latency_seconds)

        error = self.fail_identities.get(identity)
        if error:
            return SendResult.failed(error)
        return SendResult.ok(f"mock-{uuid4().hex[:12]}")
