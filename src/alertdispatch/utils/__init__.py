from __future__ import annotations

from alertdispatch.utils.exceptions import (
    AlertDeliveryError,
    AlertDispatchException,
    ChannelConfigurationError,
    PayloadSerializationError,
    ProtocolError,
    TransportError,
)
from alertdispatch.utils.logging import get_logger, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "AlertDispatchException",
    "ChannelConfigurationError",
    "AlertDeliveryError",
    "PayloadSerializationError",
    "TransportError",
    "ProtocolError",
]
