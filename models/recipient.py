import re
from pydantic import BaseModel, Field, model_validator
from typing import Optional
from enum import Enum
from datetime import datetime

from models.channel import ChannelKind
from utils.time_utils import utcnow

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+[1-9]\d{6,14}$")

class SubscriptionSource(str, Enum):
    WEBSITE = "website"
    API = "api"
    MANUAL = "manual"

class Recipient(BaseModel):
    identity: str
    channel_kind: Optional[ChannelKind] = None
    notified: bool = False
    notified_at: Optional[datetime] = None
    attempts: int = Field(default=0, ge=0)
    last_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    subscribed_at: datetime = Field(default_factory=utcnow)
    source: SubscriptionSource = SubscriptionSource.WEBSITE

    @model_validator(mode="after")
    def normalise_identity(self):
        identity = self.identity.strip()
        if self.effective_channel == ChannelKind.EMAIL:
            identity = identity.lower()
            if not EMAIL_PATTERN.match(identity):
                raise ValueError(f"{identity} is not a valid email address")
        elif not PHONE_PATTERN.match(identity):
            raise ValueError(f"{identity} is not a valid phone number")
        self.identity = identity
        return self

    @property
    def effective_channel(self) -> ChannelKind:
        """Email-only lists leave channel_kind unset."""
        return self.channel_kind or ChannelKind.EMAIL

    @property
    def is_pending(self) -> bool:
        return not self.notified

    def is_retryable(self, max_attempts: int) -> bool:
        return not self.notified and 0 < self.attempts < max_attempts

    def is_exhausted(self, max_attempts: int) -> bool:
        return not self.notified and self.attempts >= max_attempts
