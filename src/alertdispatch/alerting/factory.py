"""Build channels from configuration keyed by their ``type`` discriminator."""

from __future__ import annotations

from typing import Any, Iterable, Mapping

import structlog
from pydantic import ValidationError

from alertdispatch.alerting.base import AlertChannel
from alertdispatch.alerting.discord import DiscordChannel
from alertdispatch.alerting.email import EmailChannel
from alertdispatch.alerting.slack import SlackChannel
from alertdispatch.alerting.webhook import WebhookChannel
from alertdispatch.schemas.channel import AlertChannelConfig
from alertdispatch.utils.exceptions import ChannelConfigurationError

logger = structlog.get_logger(__name__)

ChannelEntry = AlertChannelConfig | Mapping[str, Any]

CHANNEL_TYPES: dict[str, type[AlertChannel]] = {
    cls.channel_type: cls
    for cls in (EmailChannel, SlackChannel, WebhookChannel, DiscordChannel)
}


def register_channel_type(channel_cls: type[AlertChannel]) -> type[AlertChannel]:
    """Make a channel class available to the factory. Usable as a decorator."""
    CHANNEL_TYPES[channel_cls.channel_type] = channel_cls
    return channel_cls


def _as_config(entry: ChannelEntry) -> AlertChannelConfig:
    if isinstance(entry, AlertChannelConfig):
        return entry
    try:
        return AlertChannelConfig.model_validate(entry)
    except ValidationError as exc:
        channel = str(entry.get("type") or "unknown")
        raise ChannelConfigurationError(channel, str(exc)) from exc


def create_channel(entry: ChannelEntry) -> AlertChannel:
    """
    Create one channel.

    ``entry`` has the shape of ``AlertChannel.config()``, so a snapshot can
    be fed straight back in.

    Raises:
        ChannelConfigurationError: unknown type or invalid settings
    """
    config = _as_config(entry)
    channel_cls = CHANNEL_TYPES.get(config.type)
    if channel_cls is None:
        raise ChannelConfigurationError(
            config.type,
            f"unknown channel type, expected one of {sorted(CHANNEL_TYPES)}",
        )

    channel = channel_cls(
        config.settings,
        name=config.name or None,
        timeout=config.timeout_seconds,
    )
    logger.debug("channel_created", channel=channel.name, channel_type=channel.type)
    return channel


def build_channels(entries: Iterable[ChannelEntry]) -> list[AlertChannel]:
    """Create every enabled channel; names must be unique."""
    channels: list[AlertChannel] = []
    seen: set[str] = set()

    for entry in entries:
        config = _as_config(entry)
        if not config.enabled:
            logger.info("channel_disabled", channel=config.name or config.type)
            continue

        channel = create_channel(config)
        if channel.name in seen:
            raise ChannelConfigurationError(
                channel.type, f"duplicate channel name {channel.name!r}"
            )
        seen.add(channel.name)
        channels.append(channel)

    logger.info("channels_built", channel_count=len(channels))
    return channels
