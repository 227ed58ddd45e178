import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from typing import Dict, Any, Iterable, Optional
import logging
import asyncio
from .base_sender import BaseSender
from dispatch.errors import ConfigurationError
from dispatch.messages import EmailContent, build_confirmation_content, build_email_content, PRODUCT_NAME, PRODUCT_URL
from dispatch.template_renderer import TemplateRenderer
from models.channel import ChannelKind, SendResult

logger = logging.getLogger("launch_notifier")

class SMTPSender(BaseSender):
    def __init__(self, config: Dict[str, Any]):
        self.host = config.get("host")
        self.port = int(config.get("port") or 587)
        self.username = config.get("username")
        self.password = config.get("password")
        self.use_tls = config.get("use_tls", True)
        self.from_email = config.get("from_email")
        self.from_name = config.get("from_name")
        self.product_name = config.get("product_name", PRODUCT_NAME)
        self.product_url = config.get("product_url", PRODUCT_URL)
        self.timeout = config.get("timeout_seconds", 30)
        self.renderer = TemplateRenderer()

    def ensure_configured(self, channel_kinds: Optional[Iterable[ChannelKind]] = None) -> None:
        missing = [name for name in ("host", "from_email") if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"SMTP sender requires: {missing}")

    async def send(self, identity, channel_kind, message) -> SendResult:
        content = build_email_content(
            self.renderer, message, identity,
            product_name=self.product_name, product_url=self.product_url,
        )
        # Wrap synchronous SMTP in a thread to keep the event loop responsive
        return await asyncio.to_thread(self._send_sync, identity, content)

    async def send_confirmation(self, identity, channel_kind) -> SendResult:
        content = build_confirmation_content(
            self.renderer, identity,
            product_name=self.product_name, product_url=self.product_url,
        )
        return await asyncio.to_thread(self._send_sync, identity, content)

    def _send_sync(self, to_email: str, content: EmailContent) -> SendResult:
        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = content.subject

            # A trailing space in an address can cause Gmail to silently drop the message
            clean_from_email = self.from_email.strip()
            clean_to_email = to_email.strip()

            if self.from_name:
                msg["From"] = f"{self.from_name.strip()} <{clean_from_email}>"
            else:
                msg["From"] = clean_from_email
            msg["To"] = clean_to_email
            message_id = make_msgid()
            msg["Message-ID"] = message_id

            msg.attach(MIMEText(content.text_body, "plain"))
            msg.attach(MIMEText(content.html_body, "html"))

            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                if self.use_tls:
                    server.starttls()
                if self.username and self.password:
                    server.login(self.username, self.password)
                server.sendmail(clean_from_email, [clean_to_email], msg.as_string())

            return SendResult.ok(message_id)
        except Exception as e:
            logger.error(f"SMTP send failed to {to_email}: {e}")
            return SendResult.failed(str(e))
