from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Sequence

import structlog

from alertdispatch.alerting.base import AlertChannel
from alertdispatch.schemas.alert import Alert
from alertdispatch.utils.exceptions import AlertDeliveryError, TransportError

logger = structlog.get_logger(__name__)


@dataclass
class DeliveryResult:
    """Outcome of one alert on one channel."""

    channel: str
    channel_type: str
    error: AlertDeliveryError | None = None

    @property
    def delivered(self) -> bool:
        return self.error is None


async def _deliver_one(
    channel: AlertChannel, alert: Alert, timeout: float | None
) -> DeliveryResult:
    try:
        if timeout is None:
            await channel.send(alert)
        else:
            await asyncio.wait_for(channel.send(alert), timeout=timeout)
    except asyncio.TimeoutError:
        error = TransportError(
            channel=channel.type,
            reason=f"deadline of {timeout}s exceeded",
            alert_id=alert.id,
        )
        return DeliveryResult(channel.name, channel.type, error)
    except AlertDeliveryError as exc:
        return DeliveryResult(channel.name, channel.type, exc)
    return DeliveryResult(channel.name, channel.type)


async def deliver(
    alert: Alert,
    channels: Sequence[AlertChannel],
    timeout: float | None = None,
) -> list[DeliveryResult]:
    """
    Send ``alert`` through every channel concurrently.

    Each channel is tried exactly once. Delivery failures are reported in
    the results rather than raised; anything else propagates.

    Args:
        alert: Alert to deliver
        channels: Channels to deliver through
        timeout: Optional per-channel deadline in seconds

    Returns:
        One result per channel, in the order given
    """
    results = list(
        await asyncio.gather(*(_deliver_one(ch, alert, timeout) for ch in channels))
    )

    failed = [r.channel for r in results if not r.delivered]
    if failed:
        event = (
            "alert_delivery_partial"
            if len(failed) < len(results)
            else "alert_delivery_all_channels_failed"
        )
        logger.warning(
            event,
            alert_id=alert.id,
            failed_channels=failed,
            channel_count=len(results),
        )
    else:
        logger.info("alert_delivered", alert_id=alert.id, channel_count=len(results))
    return results
