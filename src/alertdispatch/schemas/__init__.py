from __future__ import annotations

from alertdispatch.schemas.alert import Alert, AlertSeverity, AlertStatus
from alertdispatch.schemas.channel import (
    AlertChannelConfig,
    DiscordChannelConfig,
    EmailChannelConfig,
    SlackChannelConfig,
    WebhookChannelConfig,
)

__all__ = [
    "Alert",
    "AlertSeverity",
    "AlertStatus",
    "AlertChannelConfig",
    "EmailChannelConfig",
    "SlackChannelConfig",
    "WebhookChannelConfig",
    "DiscordChannelConfig",
]
