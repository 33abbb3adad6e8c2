"""Discord webhook alert channel."""

from __future__ import annotations

from typing import Any

from alertdispatch.alerting.base import HTTPAlertChannel
from alertdispatch.schemas.alert import Alert, AlertSeverity, format_measure
from alertdispatch.schemas.channel import DiscordChannelConfig

# Embed colours keyed by severity.
_DISCORD_COLORS: dict[AlertSeverity, int] = {
    AlertSeverity.CRITICAL: 0xFF0000,  # red
    AlertSeverity.FATAL: 0xFF0000,  # red
    AlertSeverity.WARNING: 0xFFA500,  # orange
    AlertSeverity.INFO: 0x00FF00,  # green
}
_DEFAULT_COLOR = 0x808080  # grey


class DiscordChannel(HTTPAlertChannel):
    """Deliver alerts to a Discord webhook, as an embed or as plain text."""

    channel_type = "discord"
    config_class = DiscordChannelConfig
    # Discord answers 204 unless ?wait=true is on the URL.
    success_statuses = frozenset({200, 204})

    _config: DiscordChannelConfig

    def _get_severity_color(self, severity: AlertSeverity) -> int:
        return _DISCORD_COLORS.get(severity, _DEFAULT_COLOR)

    def _build_embed(self, alert: Alert) -> dict[str, Any]:
        fields = [
            {"name": "Status", "value": alert.status.label, "inline": True},
            {"name": "Component", "value": alert.component, "inline": True},
        ]
        value = format_measure(alert.value)
        if value is not None:
            fields.append({"name": "Value", "value": value, "inline": True})

        return {
            "title": alert.title,
            "description": alert.description,
            "color": self._get_severity_color(alert.severity),
            "timestamp": alert.rfc3339_timestamp,
            "fields": fields,
        }

    def _build_content(self, alert: Alert) -> str:
        return (
            f"**{alert.title}**\n"
            f"{alert.description}\n"
            f"Status: {alert.status.label}\n"
            f"Time: {alert.rfc3339_timestamp}"
        )

    def format_message(self, alert: Alert) -> dict[str, Any]:
        message: dict[str, Any] = {"username": self._config.username}
        if self._config.avatar_url:
            message["avatar_url"] = self._config.avatar_url

        if self._config.embeds:
            message["embeds"] = [self._build_embed(alert)]
        else:
            message["content"] = self._build_content(alert)
        return message

    async def send(self, alert: Alert) -> bool:
        body = self._encode_json(self.format_message(alert), alert)
        await self._request(
            alert,
            self._config.webhook_url,
            body,
            headers={"Content-Type": "application/json"},
        )
        return True
