from typing import Dict, Any, Iterable
from dispatch.errors import ConfigurationError
from models.channel import ChannelKind, ProviderType, PROVIDER_CHANNELS
from senders.base_sender import BaseSender
from senders.channel_router import ChannelRouter
from senders.mock_senders import MockSender
from senders.resend_sender import ResendEmailSender
from senders.smtp_sender import SMTPSender
from senders.twilio_sender import TwilioSender


class SenderBuilder:

    @staticmethod
    def validate_config(config: Dict[str, Any]):
        """Validates provider configuration. Raises ConfigurationError if invalid."""
        provider = config.get("provider")
        if not provider:
            raise ConfigurationError("Missing 'provider' in configuration.")

        if provider == ProviderType.RESEND:
            if not config.get("api_key"):
                raise ConfigurationError("Resend requires 'api_key'")
        elif provider == ProviderType.SMTP:
            missing = [f for f in ["host", "from_email"] if not config.get(f)]
            if missing:
                raise ConfigurationError(f"SMTP requires: {missing}")
        elif provider == ProviderType.TWILIO:
            missing = [f for f in ["account_sid", "auth_token"] if not config.get(f)]
            if missing:
                raise ConfigurationError(f"Twilio requires: {missing}")
            if not config.get("from_number") and not config.get("whatsapp_number"):
                raise ConfigurationError("Twilio requires 'from_number' or 'whatsapp_number'")

    @staticmethod
    def _normalise_provider(config: Dict[str, Any]) -> Dict[str, Any]:
        config = dict(config)
        provider = config.get("provider")
        if isinstance(provider, str) and not isinstance(provider, ProviderType):
            try:
                config["provider"] = ProviderType(provider.lower())
            except ValueError:
                raise ConfigurationError(f"Unsupported provider: {provider}")
        return config

    @staticmethod
    def build(provider_config: Dict[str, Any]) -> BaseSender:
        config = SenderBuilder._normalise_provider(provider_config)
        SenderBuilder.validate_config(config)

        provider = config["provider"]
        if provider == ProviderType.RESEND:
            return ResendEmailSender(config)
        elif provider == ProviderType.SMTP:
            return SMTPSender(config)
        elif provider == ProviderType.TWILIO:
            return TwilioSender(config)
        return MockSender(config)

    @staticmethod
    def build_router(provider_configs: Iterable[Dict[str, Any]]) -> ChannelRouter:
        """
        Builds one sender per provider config and registers it for every
        channel that provider supports. A later config wins a contested channel
        only if the config lists that channel under 'channels'.
        """
        senders: Dict[ChannelKind, BaseSender] = {}
        for raw in provider_configs:
            config = SenderBuilder._normalise_provider(raw)
            sender = SenderBuilder.build(config)
            supported = PROVIDER_CHANNELS[config["provider"]]
            requested = config.get("channels")
            if requested:
                channels = {ChannelKind(c) for c in requested}
                unsupported = channels - supported
                if unsupported:
                    names = sorted(c.value for c in unsupported)
                    raise ConfigurationError(f"{config['provider'].value} cannot deliver on {names}")
                for channel in channels:
                    senders[channel] = sender
            else:
                for channel in supported:
                    senders.setdefault(channel, sender)

        if not senders:
            raise ConfigurationError("No channel senders configured.")
        return ChannelRouter(senders)
