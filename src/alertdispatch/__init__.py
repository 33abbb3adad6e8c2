"""Deliver alerts to email, Slack, Discord and generic webhooks."""

from __future__ import annotations

from alertdispatch.alerting import (
    AlertChannel,
    DiscordChannel,
    EmailChannel,
    SlackChannel,
    WebhookChannel,
    build_channels,
    create_channel,
    deliver,
)
from alertdispatch.schemas.alert import Alert, AlertSeverity, AlertStatus

__version__ = "1.0.0"

__all__ = [
    "Alert",
    "AlertSeverity",
    "AlertStatus",
    "AlertChannel",
    "EmailChannel",
    "SlackChannel",
    "WebhookChannel",
    "DiscordChannel",
    "create_channel",
    "build_channels",
    "deliver",
]
