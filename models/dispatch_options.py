from pydantic import BaseModel, Field
from typing import Dict

from models.channel import ChannelKind

DEFAULT_BATCH_SIZE = 10

# Phone providers tolerate a shorter pause than the transactional email API
DEFAULT_DELAY_MS: Dict[ChannelKind, int] = {
    ChannelKind.EMAIL: 2000,
    ChannelKind.SMS: 1000,
    ChannelKind.WHATSAPP: 1000,
}

class DispatchOptions(BaseModel):
    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)
    delay_between_batches_ms: int = Field(default=1000, ge=0)
    dry_run: bool = False
    send_timeout_seconds: float = Field(default=30.0, gt=0)

    @classmethod
    def for_channel(cls, channel_kind: ChannelKind, **overrides) -> "DispatchOptions":
        values = {"delay_between_batches_ms": DEFAULT_DELAY_MS[channel_kind]}
        values.update(overrides)
        return cls(**values)

    @property
    def delay_seconds(self) -> float:
        return self.delay_between_batches_ms / 1000
