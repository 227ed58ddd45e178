import logging
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from models.channel import ChannelKind, ProviderType
from models.dispatch_options import DEFAULT_BATCH_SIZE, DEFAULT_DELAY_MS, DispatchOptions

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """Configure logging to file and console."""
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    log_file = log_file or os.getenv("LOG_FILE")
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
    return logging.getLogger("launch_notifier")


class Settings(BaseModel):
    resend_api_key: Optional[str] = None
    email_from_address: str = "onboarding@resend.dev"
    email_from_name: str = "BannerMind"

    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None

    twilio_account_sid: Optional[str] = None
    twilio_auth_token: Optional[str] = None
    twilio_phone_number: Optional[str] = None
    twilio_whatsapp_number: Optional[str] = None

    batch_size: int = DEFAULT_BATCH_SIZE
    email_delay_ms: int = DEFAULT_DELAY_MS[ChannelKind.EMAIL]
    phone_delay_ms: int = DEFAULT_DELAY_MS[ChannelKind.SMS]
    max_attempts: int = 3
    send_timeout_seconds: float = 30.0
    send_confirmation: bool = True

    @classmethod
    def from_env(cls) -> "Settings":
        env = {
            "resend_api_key": os.getenv("RESEND_API_KEY"),
            "email_from_address": os.getenv("EMAIL_FROM_ADDRESS"),
            "email_from_name": os.getenv("EMAIL_FROM_NAME"),
            "smtp_host": os.getenv("SMTP_HOST"),
            "smtp_port": os.getenv("SMTP_PORT"),
            "smtp_username": os.getenv("SMTP_USERNAME"),
            "smtp_password": os.getenv("SMTP_PASSWORD"),
            "twilio_account_sid": os.getenv("TWILIO_ACCOUNT_SID"),
            "twilio_auth_token": os.getenv("TWILIO_AUTH_TOKEN"),
            "twilio_phone_number": os.getenv("TWILIO_PHONE_NUMBER"),
            "twilio_whatsapp_number": os.getenv("TWILIO_WHATSAPP_NUMBER"),
            "batch_size": os.getenv("NOTIFY_BATCH_SIZE"),
            "email_delay_ms": os.getenv("NOTIFY_EMAIL_DELAY_MS"),
            "phone_delay_ms": os.getenv("NOTIFY_PHONE_DELAY_MS"),
            "max_attempts": os.getenv("NOTIFY_MAX_ATTEMPTS"),
            "send_timeout_seconds": os.getenv("NOTIFY_SEND_TIMEOUT"),
            "send_confirmation": os.getenv("NOTIFY_SEND_CONFIRMATION"),
        }
        # Unset variables fall back to the field defaults
        return cls(**{k: v for k, v in env.items() if v not in (None, "")})

    def email_engine_config(self) -> Dict[str, Any]:
        """Resend when an API key is set, otherwise SMTP."""
        if self.resend_api_key:
            return {
                "provider": ProviderType.RESEND,
                "api_key": self.resend_api_key,
                "from_email": self.email_from_address,
                "from_name": self.email_from_name,
                "timeout_seconds": self.send_timeout_seconds,
            }
        return {
            "provider": ProviderType.SMTP,
            "host": self.smtp_host,
            "port": self.smtp_port,
            "username": self.smtp_username,
            "password": self.smtp_password,
            "from_email": self.email_from_address,
            "from_name": self.email_from_name,
            "timeout_seconds": self.send_timeout_seconds,
        }

    def engine_configs(self) -> List[Dict[str, Any]]:
        """Provider configs for every channel family with credentials set."""
        configs = []
        if self.resend_api_key or self.smtp_host:
            configs.append(self.email_engine_config())
        if self.twilio_account_sid:
            configs.append(self.phone_engine_config())
        return configs

    def phone_engine_config(self) -> Dict[str, Any]:
        return {
            "provider": ProviderType.TWILIO,
            "account_sid": self.twilio_account_sid,
            "auth_token": self.twilio_auth_token,
            "from_number": self.twilio_phone_number,
            "whatsapp_number": self.twilio_whatsapp_number,
            "timeout_seconds": self.send_timeout_seconds,
        }

    def dispatch_options(self, channel_kind: ChannelKind, dry_run: bool = False) -> DispatchOptions:
        delay = self.email_delay_ms if channel_kind == ChannelKind.EMAIL else self.phone_delay_ms
        return DispatchOptions(
            batch_size=self.batch_size,
            delay_between_batches_ms=delay,
            dry_run=dry_run,
            send_timeout_seconds=self.send_timeout_seconds,
        )
