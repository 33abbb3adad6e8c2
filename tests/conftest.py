"""
Pytest configuration and shared fixtures.

No network is touched: httpx.AsyncClient and smtplib are patched per test.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from alertdispatch.config import get_settings
from alertdispatch.schemas.alert import Alert, AlertSeverity, AlertStatus

FIXED_TS = datetime(2026, 1, 1, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _fresh_settings() -> Iterator[None]:
    """Settings are cached; make env changes visible per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_alert():
    """Factory for alerts with sensible defaults."""
    def _make(**overrides) -> Alert:
        data = {
            "id": "alert-1",
            "name": "High CPU",
            "description": "CPU above threshold",
            "severity": AlertSeverity.WARNING,
            "status": AlertStatus.ACTIVE,
            "source": "node-exporter",
            "component": "api",
            "timestamp": FIXED_TS,
        }
        data.update(overrides)
        return Alert(**data)
    return _make


# ── Mock HTTP client fixture ──────────────────────────────────────────────────
@pytest.fixture
def mock_http() -> Iterator[MagicMock]:
    """
    Patch httpx.AsyncClient.

    Yields the class mock; ``mock_http.client.request`` is the AsyncMock
    every send goes through. It answers 200 unless a test changes it.
    """
    with patch("httpx.AsyncClient") as mock_cls:
        mock_client = AsyncMock()
        mock_client.request = AsyncMock(return_value=httpx.Response(200))
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=False)
        mock_cls.return_value = mock_client
        mock_cls.client = mock_client
        mock_cls.respond = lambda status_code, text="": _respond(mock_client, status_code, text)
        mock_cls.sent = lambda: _sent_request(mock_client)
        yield mock_cls


def _respond(client: AsyncMock, status_code: int, text: str) -> None:
    client.request.return_value = httpx.Response(status_code, text=text)


def _sent_request(client: AsyncMock) -> tuple[str, str, bytes, dict[str, str]]:
    """(method, url, body, headers) of the single request sent."""
    client.request.assert_awaited_once()
    call = client.request.call_args
    method, url = call.args
    return method, url, call.kwargs["content"], call.kwargs["headers"]
