import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from senders.base_sender import BaseSender
from dispatch.errors import ConfigurationError
from models.channel import ChannelKind, SendResult

logger = logging.getLogger("launch_notifier")

WHATSAPP_PREFIX = "whatsapp:"

def _whatsapp_address(number: str) -> str:
    return number if number.startswith(WHATSAPP_PREFIX) else f"{WHATSAPP_PREFIX}{number}"

class TwilioSender(BaseSender):
    """
    SMS and WhatsApp messages through the Twilio REST API.

    The HTTP client carries its own timeout: a send abandoned by the dispatcher
    keeps running in its worker thread until the request returns, and a message
    Twilio accepts in that window is delivered even though it was recorded as
    failed.
    """

    def __init__(self, credentials: Dict[str, Any]):
        self.account_sid = credentials.get("account_sid")
        self.auth_token = credentials.get("auth_token")
        self.from_number = credentials.get("from_number")
        whatsapp = credentials.get("whatsapp_number") or self.from_number
        self.whatsapp_number = _whatsapp_address(whatsapp) if whatsapp else None
        self.timeout = credentials.get("timeout_seconds", 30)
        self._client: Optional[Client] = None

    def ensure_configured(self, channel_kinds: Optional[Iterable[ChannelKind]] = None) -> None:
        if not self.account_sid or not self.auth_token:
            raise ConfigurationError(
                "Twilio credentials not configured. Set TWILIO_ACCOUNT_SID and TWILIO_AUTH_TOKEN."
            )
        if channel_kinds is None:
            if not self.from_number and not self.whatsapp_number:
                raise ConfigurationError("TWILIO_PHONE_NUMBER not configured")
            return
        for kind in channel_kinds:
            self._sender_address(kind)

    def _sender_address(self, channel_kind: Optional[ChannelKind]) -> str:
        if channel_kind == ChannelKind.EMAIL:
            raise ConfigurationError("Twilio cannot deliver email")
        if channel_kind == ChannelKind.WHATSAPP:
            if not self.whatsapp_number:
                raise ConfigurationError("TWILIO_WHATSAPP_NUMBER not configured")
            return self.whatsapp_number
        if not self.from_number:
            raise ConfigurationError("TWILIO_PHONE_NUMBER not configured")
        return self.from_number

    @property
    def client(self) -> Client:
        if self._client is None:
            self.ensure_configured()
            self._client = Client(
                self.account_sid, self.auth_token,
                http_client=TwilioHttpClient(timeout=self.timeout),
            )
        return self._client

    async def send(self, identity, channel_kind, message) -> SendResult:
        if channel_kind == ChannelKind.EMAIL:
            return SendResult.failed("Twilio cannot deliver email")
        return await asyncio.to_thread(self._send_sync, identity, channel_kind, message)

    def _send_sync(self, to: str, channel_kind: Optional[ChannelKind], message: str) -> SendResult:
        kind = channel_kind.value if channel_kind else ChannelKind.SMS.value
        sender = self._sender_address(channel_kind)
        recipient = _whatsapp_address(to) if channel_kind == ChannelKind.WHATSAPP else to

        try:
            result = self.client.messages.create(body=message, from_=sender, to=recipient)
        except TwilioRestException as e:
            logger.error(f"Twilio {kind} failed to {to}: {e.msg}")
            return SendResult.failed(e.msg or str(e))

        logger.info(f"Twilio {kind} sent to {to}: {result.sid}")
        return SendResult.ok(result.sid)
