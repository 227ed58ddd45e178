import asyncio
import logging
from typing import Any, Dict, Iterable, Optional

import requests

from senders.base_sender import BaseSender
from dispatch.errors import ConfigurationError
from dispatch.messages import EmailContent, build_confirmation_content, build_email_content, PRODUCT_NAME, PRODUCT_URL
from dispatch.template_renderer import TemplateRenderer
from models.channel import ChannelKind, SendResult

logger = logging.getLogger("launch_notifier")

class ResendEmailSender(BaseSender):
    """Transactional email through the Resend HTTP API."""

    url = "https://api.resend.com/emails"

    def __init__(self, credentials: Dict[str, Any]):
        self.api_key = credentials.get("api_key")
        self.from_email = credentials.get("from_email", "onboarding@resend.dev")
        self.from_name = credentials.get("from_name")
        self.product_name = credentials.get("product_name", PRODUCT_NAME)
        self.product_url = credentials.get("product_url", PRODUCT_URL)
        self.timeout = credentials.get("timeout_seconds", 30)
        self.session = requests.Session()
        self.renderer = TemplateRenderer()

    def ensure_configured(self, channel_kinds: Optional[Iterable[ChannelKind]] = None) -> None:
        if not self.api_key:
            raise ConfigurationError("Resend requires 'api_key'. Set RESEND_API_KEY.")

    async def send(self, identity, channel_kind, message) -> SendResult:
        content = build_email_content(
            self.renderer, message, identity,
            product_name=self.product_name, product_url=self.product_url,
        )
        return await asyncio.to_thread(self._send_sync, identity, content)

    async def send_confirmation(self, identity, channel_kind) -> SendResult:
        content = build_confirmation_content(
            self.renderer, identity,
            product_name=self.product_name, product_url=self.product_url,
        )
        return await asyncio.to_thread(self._send_sync, identity, content)

    def _send_sync(self, to_email: str, content: EmailContent) -> SendResult:
        from_field = f"{self.from_name} <{self.from_email}>" if self.from_name else self.from_email
        payload = {
            "from": from_field,
            "to": [to_email],
            "subject": content.subject,
            "html": content.html_body,
            "text": content.text_body,
        }
        auth_headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

        try:
            response = self.session.post(self.url, json=payload, headers=auth_headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Resend request failed for {to_email}: {e}")
            return SendResult.failed(str(e))

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.ok:
            logger.info(f"Resend email sent to {to_email}: {data.get('id')}")
            return SendResult.ok(data.get("id"))

        error = data.get("message") or f"HTTP {response.status_code}"
        logger.error(f"Resend error for {to_email}: {response.status_code} - {error}")
        return SendResult.failed(error)
