from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any
from urllib.parse import urlencode

import httpx

from alertdispatch.alerting.base import HTTPAlertChannel
from alertdispatch.config import get_settings
from alertdispatch.schemas.alert import Alert
from alertdispatch.schemas.channel import WebhookChannelConfig

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _media_type(content_type: str) -> str:
    return content_type.split(";", 1)[0].strip().lower()


def is_json_content_type(content_type: str) -> bool:
    media_type = _media_type(content_type)
    return media_type == "application/json" or media_type.endswith("+json")


def sign_body(secret: str, body: bytes) -> str:
    """``sha256=`` + hex HMAC-SHA256 of ``body`` keyed with ``secret``."""
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return f"sha256={digest}"


class WebhookChannel(HTTPAlertChannel):
    """Send alerts via a generic HTTP webhook."""

    channel_type = "webhook"
    config_class = WebhookChannelConfig
    success_statuses = frozenset(range(200, 300))

    _config: WebhookChannelConfig

    def format_payload(self, alert: Alert) -> dict[str, Any]:
        """Fixed projection of the alert sent to every webhook."""
        return {
            "id": alert.id,
            "name": alert.name,
            "description": alert.description,
            "severity": alert.severity.value,
            "status": alert.status.value,
            "source": alert.source,
            "component": alert.component,
            "labels": dict(alert.labels),
            "annotations": dict(alert.annotations),
            "value": alert.value,
            "threshold": alert.threshold,
            "timestamp": alert.unix_timestamp,
            "count": alert.count,
        }

    def encode_body(self, payload: dict[str, Any], alert: Alert) -> bytes:
        """
        Encode ``payload`` for the configured content type.

        JSON types get JSON and form-urlencoded gets a form with the
        mappings JSON-encoded. Any other type gets one ``key=value`` line
        per field, which receivers should treat as informational only.
        """
        content_type = self._config.content_type
        if is_json_content_type(content_type):
            return self._encode_json(payload, alert)

        flat = {
            key: json.dumps(value, sort_keys=True) if isinstance(value, dict) else value
            for key, value in payload.items()
        }
        if _media_type(content_type) == FORM_CONTENT_TYPE:
            return urlencode(flat).encode("utf-8")
        return "\n".join(f"{key}={value}" for key, value in flat.items()).encode("utf-8")

    def build_headers(self, body: bytes) -> httpx.Headers:
        """Custom headers replace built-in ones regardless of case."""
        headers = httpx.Headers(
            {
                "Content-Type": self._config.content_type,
                "User-Agent": get_settings().alert_user_agent,
            }
        )
        for name, value in self._config.headers.items():
            headers[name] = value

        if self._config.signing_enabled:
            secret = self._config.secret.get_secret_value()
            headers[self._config.sign_header] = sign_body(secret, body)
        return headers

    async def send(self, alert: Alert) -> bool:
        """
        Send alert to webhook.

        Any 2xx answer counts as delivered.
        """
        body = self.encode_body(self.format_payload(alert), alert)
        await self._request(
            alert,
            self._config.url,
            body,
            headers=self.build_headers(body),
            method=self._config.method,
        )
        return True
