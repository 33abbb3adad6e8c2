from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Mapping

import httpx
import structlog
from pydantic import ValidationError

from alertdispatch.config import get_settings
from alertdispatch.schemas.alert import Alert, build_test_alert
from alertdispatch.schemas.channel import AlertChannelConfig, ChannelSettings
from alertdispatch.utils.exceptions import (
    ChannelConfigurationError,
    PayloadSerializationError,
    ProtocolError,
    TransportError,
)

logger = structlog.get_logger(__name__)


class AlertChannel(ABC):
    """Abstract base class for alert delivery channels.

    A channel is built once from validated settings and keeps nothing
    else between calls, so one instance can serve concurrent senders.
    """

    channel_type: ClassVar[str]
    config_class: ClassVar[type[ChannelSettings]]

    def __init__(
        self,
        config: ChannelSettings | dict[str, Any],
        name: str | None = None,
        timeout: float | None = None,
    ):
        self._config = self._coerce_config(config)
        self._name = name or self.channel_type
        if timeout is None:
            timeout = get_settings().alert_http_timeout_seconds
        if timeout <= 0:
            raise ChannelConfigurationError(self.channel_type, "timeout must be positive")
        self._timeout = float(timeout)

    @classmethod
    def _coerce_config(cls, config: ChannelSettings | dict[str, Any]) -> ChannelSettings:
        if isinstance(config, cls.config_class):
            return config
        if isinstance(config, ChannelSettings):
            raise ChannelConfigurationError(
                cls.channel_type,
                f"expected {cls.config_class.__name__}, got {type(config).__name__}",
            )
        try:
            return cls.config_class.model_validate(config)
        except ValidationError as exc:
            raise ChannelConfigurationError(cls.channel_type, str(exc)) from exc

    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> str:
        return self.channel_type

    @property
    def timeout(self) -> float:
        return self._timeout

    def config(self) -> AlertChannelConfig:
        """Snapshot of this channel's settings, without secrets."""
        return AlertChannelConfig(
            name=self.name,
            type=self.type,
            enabled=True,
            timeout_seconds=self.timeout,
            settings=self._config.public_settings(),
        )

    @abstractmethod
    async def send(self, alert: Alert) -> bool:
        """
        Send alert through this channel.

        Args:
            alert: Alert data to send

        Returns:
            True once the transport has accepted the alert

        Raises:
            AlertDeliveryError: on any serialization, transport or
                protocol failure
        """
        pass

    async def test(self) -> bool:
        """Send a synthetic info alert to check the channel end to end."""
        logger.info("channel_test_started", channel=self.name, channel_type=self.type)
        return await self.send(build_test_alert())

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class HTTPAlertChannel(AlertChannel):
    """Shared plumbing for channels that POST a JSON document."""

    # Status codes treated as delivered.
    success_statuses: ClassVar[frozenset[int]] = frozenset({200})

    def _encode_json(self, payload: Any, alert: Alert) -> bytes:
        try:
            return json.dumps(payload, ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise PayloadSerializationError(
                channel=self.type, reason=str(exc), alert_id=alert.id
            ) from exc

    def _is_success(self, status_code: int) -> bool:
        return status_code in self.success_statuses

    async def _request(
        self,
        alert: Alert,
        url: str,
        body: bytes,
        headers: Mapping[str, str],
        method: str = "POST",
    ) -> httpx.Response:
        """Issue one request and map failures onto the delivery taxonomy."""
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method,
                    url,
                    content=body,
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            logger.error(
                f"{self.type}_alert_failed",
                channel=self.name,
                alert_id=alert.id,
                error=str(exc) or type(exc).__name__,
            )
            raise TransportError(
                channel=self.type,
                reason=str(exc) or type(exc).__name__,
                alert_id=alert.id,
            ) from exc

        if not self._is_success(response.status_code):
            logger.error(
                f"{self.type}_alert_rejected",
                channel=self.name,
                alert_id=alert.id,
                status_code=response.status_code,
            )
            raise ProtocolError(
                channel=self.type,
                status_code=response.status_code,
                alert_id=alert.id,
                body=response.text[:200],
            )

        logger.info(
            f"{self.type}_alert_sent",
            channel=self.name,
            alert_id=alert.id,
            severity=alert.severity.value,
            status_code=response.status_code,
        )
        return response
