"""Unit tests for logging setup and the exception taxonomy."""
from __future__ import annotations

import logging

import pytest
import structlog

from alertdispatch.utils.exceptions import (
    AlertDeliveryError,
    AlertDispatchException,
    ChannelConfigurationError,
    PayloadSerializationError,
    ProtocolError,
    TransportError,
)
from alertdispatch.utils.logging import get_logger, setup_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.unit
def test_setup_logging_installs_single_handler(restore_logging) -> None:
    setup_logging(level="debug", fmt="console")
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.unit
def test_setup_logging_unknown_level_falls_back_to_info(restore_logging) -> None:
    setup_logging(level="chatty", fmt="json")
    assert logging.getLogger().level == logging.INFO


@pytest.mark.unit
def test_get_logger_emits_json(restore_logging, capsys) -> None:
    setup_logging(level="INFO", fmt="json")
    get_logger("alertdispatch.test").info("channel_ready", channel="slack")
    err = capsys.readouterr().err
    assert '"event": "channel_ready"' in err
    assert '"channel": "slack"' in err


@pytest.mark.unit
def test_delivery_error_message() -> None:
    exc = TransportError(channel="webhook", reason="timed out", alert_id="a-1")
    assert str(exc) == "Failed to deliver alert a-1 via webhook: timed out"
    assert isinstance(exc, AlertDeliveryError)
    assert isinstance(exc, AlertDispatchException)


@pytest.mark.unit
def test_delivery_error_without_alert_id() -> None:
    assert "<unset>" in str(PayloadSerializationError(channel="slack", reason="bad"))


@pytest.mark.unit
def test_protocol_error_carries_status() -> None:
    exc = ProtocolError(channel="discord", status_code=429, alert_id="a-2", body="slow down")
    assert exc.status_code == 429
    assert exc.reason == "remote returned status 429: slow down"
    assert "discord" in str(exc)


@pytest.mark.unit
def test_configuration_error_message() -> None:
    exc = ChannelConfigurationError("email", "missing smtp_host")
    assert str(exc) == "Invalid configuration for email channel: missing smtp_host"
    assert not isinstance(exc, AlertDeliveryError)
