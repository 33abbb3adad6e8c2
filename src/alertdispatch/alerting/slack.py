from __future__ import annotations

from typing import Any

from alertdispatch.alerting.base import HTTPAlertChannel
from alertdispatch.schemas.alert import Alert, AlertSeverity, format_measure
from alertdispatch.schemas.channel import SlackChannelConfig


class SlackChannel(HTTPAlertChannel):
    """Send alerts via Slack incoming webhook."""

    channel_type = "slack"
    config_class = SlackChannelConfig

    _config: SlackChannelConfig

    def _get_severity_color(self, severity: AlertSeverity) -> str:
        """Get attachment color for severity level."""
        if severity in (AlertSeverity.CRITICAL, AlertSeverity.FATAL):
            return "danger"
        if severity == AlertSeverity.WARNING:
            return "warning"
        if severity == AlertSeverity.INFO:
            return "good"
        return "#808080"

    def format_message(self, alert: Alert) -> dict[str, Any]:
        """Build the webhook JSON document for ``alert``."""
        message: dict[str, Any] = {
            "username": self._config.username,
            "channel": self._config.channel,
        }
        if self._config.icon_emoji:
            message["icon_emoji"] = self._config.icon_emoji
        if self._config.icon_url:
            message["icon_url"] = self._config.icon_url

        fields = [
            {"title": "Status", "value": alert.status.label, "short": True},
            {"title": "Component", "value": alert.component, "short": True},
        ]
        value = format_measure(alert.value)
        if value is not None:
            fields.append({"title": "Value", "value": value, "short": True})
        threshold = format_measure(alert.threshold)
        if threshold is not None:
            fields.append({"title": "Threshold", "value": threshold, "short": True})

        attachment: dict[str, Any] = {
            "color": self._get_severity_color(alert.severity),
            "title": alert.title,
            "text": alert.description,
            "timestamp": alert.unix_timestamp,
            "footer": self._config.footer,
            "footer_icon": self._config.footer_icon,
            "fields": fields,
        }

        message["attachments"] = [attachment]
        return message

    async def send(self, alert: Alert) -> bool:
        """
        Send alert to Slack.

        Only HTTP 200 counts as delivered; Slack answers errors with
        4xx and a short plain-text reason.
        """
        body = self._encode_json(self.format_message(alert), alert)
        await self._request(
            alert,
            self._config.webhook_url,
            body,
            headers={"Content-Type": "application/json"},
        )
        return True
