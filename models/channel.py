from pydantic import BaseModel
from typing import Optional
from enum import Enum

class ChannelKind(str, Enum):
    EMAIL = "email"
    SMS = "sms"
    WHATSAPP = "whatsapp"

class ProviderType(str, Enum):
    MOCK = "mock"
    RESEND = "resend"
    SMTP = "smtp"
    TWILIO = "twilio"

# Channels each provider can deliver on
PROVIDER_CHANNELS = {
    ProviderType.MOCK: {ChannelKind.EMAIL, ChannelKind.SMS, ChannelKind.WHATSAPP},
    ProviderType.RESEND: {ChannelKind.EMAIL},
    ProviderType.SMTP: {ChannelKind.EMAIL},
    ProviderType.TWILIO: {ChannelKind.SMS, ChannelKind.WHATSAPP},
}

class SendResult(BaseModel):
    success: bool
    provider_message_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, provider_message_id: Optional[str] = None) -> "SendResult":
        return cls(success=True, provider_message_id=provider_message_id)

    @classmethod
    def failed(cls, error: str) -> "SendResult":
        return cls(success=False, error=error)
