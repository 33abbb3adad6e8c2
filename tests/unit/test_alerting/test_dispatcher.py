"""Unit tests for fan-out delivery."""
from __future__ import annotations

import asyncio

import pytest

from alertdispatch.alerting.base import AlertChannel
from alertdispatch.alerting.dispatcher import deliver
from alertdispatch.schemas.alert import Alert
from alertdispatch.schemas.channel import SlackChannelConfig
from alertdispatch.utils.exceptions import ProtocolError, TransportError

SLACK = {"webhook_url": "https://hooks.slack.com/x"}


class StubChannel(AlertChannel):
    """Channel whose outcome is fixed at construction."""

    channel_type = "stub"
    config_class = SlackChannelConfig

    def __init__(self, name: str, error: Exception | None = None, delay: float = 0.0):
        super().__init__(SLACK, name=name)
        self.error = error
        self.delay = delay
        self.sent: list[Alert] = []

    async def send(self, alert: Alert) -> bool:
        if self.delay:
            await asyncio.sleep(self.delay)
        self.sent.append(alert)
        if self.error is not None:
            raise self.error
        return True


@pytest.mark.unit
async def test_deliver_all_succeed(make_alert) -> None:
    channels = [StubChannel("a"), StubChannel("b")]
    results = await deliver(make_alert(), channels)

    assert [r.channel for r in results] == ["a", "b"]
    assert all(r.delivered for r in results)
    assert all(len(c.sent) == 1 for c in channels)


@pytest.mark.unit
async def test_deliver_reports_failures_without_retry(make_alert) -> None:
    failing = StubChannel("bad", ProtocolError(channel="stub", status_code=500))
    ok = StubChannel("good")
    results = await deliver(make_alert(), [failing, ok])

    assert results[0].delivered is False
    assert isinstance(results[0].error, ProtocolError)
    assert results[1].delivered is True
    assert len(failing.sent) == 1


@pytest.mark.unit
async def test_deliver_runs_channels_concurrently(make_alert) -> None:
    channels = [StubChannel(str(i), delay=0.2) for i in range(5)]
    loop = asyncio.get_running_loop()
    started = loop.time()
    await deliver(make_alert(), channels)
    assert loop.time() - started < 0.6


@pytest.mark.unit
async def test_deliver_deadline(make_alert) -> None:
    slow = StubChannel("slow", delay=5)
    results = await deliver(make_alert(), [slow, StubChannel("fast")], timeout=0.05)

    assert isinstance(results[0].error, TransportError)
    assert "deadline" in str(results[0].error)
    assert results[1].delivered is True


@pytest.mark.unit
async def test_deliver_propagates_unexpected_errors(make_alert) -> None:
    with pytest.raises(RuntimeError):
        await deliver(make_alert(), [StubChannel("boom", RuntimeError("bug"))])


@pytest.mark.unit
async def test_deliver_no_channels(make_alert) -> None:
    assert await deliver(make_alert(), []) == []
