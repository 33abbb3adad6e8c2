from __future__ import annotations

from alertdispatch.alerting.base import AlertChannel, HTTPAlertChannel
from alertdispatch.alerting.discord import DiscordChannel
from alertdispatch.alerting.dispatcher import DeliveryResult, deliver
from alertdispatch.alerting.email import EmailChannel
from alertdispatch.alerting.factory import (
    CHANNEL_TYPES,
    build_channels,
    create_channel,
    register_channel_type,
)
from alertdispatch.alerting.slack import SlackChannel
from alertdispatch.alerting.webhook import WebhookChannel

__all__ = [
    "AlertChannel",
    "HTTPAlertChannel",
    "EmailChannel",
    "SlackChannel",
    "WebhookChannel",
    "DiscordChannel",
    "CHANNEL_TYPES",
    "create_channel",
    "build_channels",
    "register_channel_type",
    "DeliveryResult",
    "deliver",
]
