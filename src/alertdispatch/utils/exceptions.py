from __future__ import annotations


class AlertDispatchException(Exception):
    """Base exception for the alert dispatch package."""

    pass


class ChannelConfigurationError(AlertDispatchException):
    """Raised when a channel is built from missing or invalid settings."""

    def __init__(self, channel: str, reason: str):
        self.channel = channel
        self.reason = reason
        super().__init__(f"Invalid configuration for {channel} channel: {reason}")


class AlertDeliveryError(AlertDispatchException):
    """Raised when alert delivery fails."""

    def __init__(self, channel: str, reason: str, alert_id: str = ""):
        self.alert_id = alert_id
        self.channel = channel
        self.reason = reason
        super().__init__(
            f"Failed to deliver alert {alert_id or '<unset>'} via {channel}: {reason}"
        )


class PayloadSerializationError(AlertDeliveryError):
    """Raised when an alert payload cannot be encoded for the wire."""

    pass


class TransportError(AlertDeliveryError):
    """Raised on connection, DNS, TLS, timeout or SMTP failures."""

    pass


class ProtocolError(AlertDeliveryError):
    """Raised when the remote service answers with a non-success status."""

    def __init__(
        self, channel: str, status_code: int, alert_id: str = "", body: str = ""
    ):
        self.status_code = status_code
        self.body = body
        reason = f"remote returned status {status_code}"
        if body:
            reason = f"{reason}: {body}"
        super().__init__(channel=channel, reason=reason, alert_id=alert_id)
